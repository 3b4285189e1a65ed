"""Reusable annotated parameter types for MCP tool signatures.

FastMCP turns these into the JSON Schema of each tool's input.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

Email = Annotated[
    str | None,
    Field(description="Registered email address for the AQS API. Optional if AQS_EMAIL env var is set."),
]
ApiKey = Annotated[
    str | None,
    Field(description="AQS API key. Optional if AQS_API_KEY env var is set."),
]

Param = Annotated[
    str,
    Field(
        description=(
            "5-digit AQS parameter code. Common codes: 44201 (Ozone), 88101 (PM2.5 Local Conditions), "
            "81102 (PM10), 42401 (SO2), 42101 (CO), 42602 (NO2). Up to 5 comma-separated codes allowed."
        )
    ),
]
BeginDate = Annotated[
    str,
    Field(description="Begin date in YYYYMMDD format (e.g., 20230101). Must be in the same calendar year as edate."),
]
EndDate = Annotated[
    str,
    Field(description="End date in YYYYMMDD format (e.g., 20230131). Must be in the same calendar year as bdate."),
]

State = Annotated[str, Field(description='2-digit FIPS state code (e.g., "06" for California, "36" for New York).')]
County = Annotated[str, Field(description='3-digit FIPS county code (e.g., "037" for Los Angeles County).')]
Site = Annotated[str, Field(description="4-digit AQS site number within the county.")]

MinLat = Annotated[str, Field(description='Minimum latitude of the bounding box in decimal degrees (e.g., "33.0").')]
MaxLat = Annotated[str, Field(description='Maximum latitude of the bounding box in decimal degrees (e.g., "34.5").')]
MinLon = Annotated[
    str,
    Field(description='Minimum longitude in decimal degrees; negative for the western hemisphere (e.g., "-118.5").'),
]
MaxLon = Annotated[
    str,
    Field(description='Maximum longitude in decimal degrees; negative for the western hemisphere (e.g., "-117.0").'),
]

Cbsa = Annotated[
    str,
    Field(description='5-digit Core Based Statistical Area code (e.g., "31080" for Los Angeles-Long Beach-Anaheim).'),
]
ParameterClass = Annotated[
    str,
    Field(
        description=(
            'Parameter class name (e.g., "CRITERIA", "AIR TOXICS", "METEOROLOGICAL"). '
            "Use aqs_list_parameter_classes to get available classes."
        )
    ),
]
SignupEmail = Annotated[str, Field(description="Email address where the API key will be sent.")]
