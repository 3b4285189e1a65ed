from __future__ import annotations

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from aqsmcp.validation import validate_date_format, validate_date_range


class AQSHeader(BaseModel):
    """
    EPA AQS response header.
    The status field is the authoritative success signal.
    """

    model_config = ConfigDict(extra="allow")

    status: str | None = Field(None, description="Request status, e.g. 'Success' or 'Failed'.")
    request_time: str | None = Field(None, description="Server-reported request time.")
    url: str | None = Field(None, description="Echoed request URL.")
    rows: int | None = Field(None, description="Number of rows returned, when reported.")


class AQSResponse(BaseModel):
    """Header + Data envelope returned by every AQS endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    header: list[AQSHeader] = Field(default_factory=list, alias="Header")
    # Rows are usually objects, but signup replies with plain strings
    data: list[Any] = Field(default_factory=list, alias="Data")

    @property
    def first_header(self) -> AQSHeader | None:
        return self.header[0] if self.header else None

    def to_wire(self) -> dict[str, Any]:
        """Dump using the upstream key names; Data rows pass through untouched."""
        return {
            "Header": [h.model_dump(exclude_unset=True) for h in self.header],
            "Data": self.data,
        }


class DateRangeQuery(BaseModel):
    """Pollutant parameter and a same-year date range."""

    param: str = Field(..., description="AQS parameter code(s), up to 5 comma-separated.")
    bdate: str = Field(..., description="Begin date (YYYYMMDD).")
    edate: str = Field(..., description="End date (YYYYMMDD), same calendar year as bdate.")

    @classmethod
    def checked(cls, param: str, bdate: str, edate: str) -> DateRangeQuery:
        validate_date_format(bdate, "bdate")
        validate_date_format(edate, "edate")
        validate_date_range(bdate, edate)
        return cls(param=param, bdate=bdate, edate=edate)

    def to_params(self) -> dict[str, str]:
        return {"param": self.param, "bdate": self.bdate, "edate": self.edate}


class _Scope(BaseModel):
    suffix: ClassVar[str]

    def to_params(self) -> dict[str, str]:
        return self.model_dump(exclude={"kind"})


class SiteScope(_Scope):
    kind: Literal["site"] = "site"
    state: str
    county: str
    site: str

    suffix: ClassVar[str] = "bySite"


class CountyScope(_Scope):
    kind: Literal["county"] = "county"
    state: str
    county: str

    suffix: ClassVar[str] = "byCounty"


class StateScope(_Scope):
    kind: Literal["state"] = "state"
    state: str

    suffix: ClassVar[str] = "byState"


class BoxScope(_Scope):
    kind: Literal["box"] = "box"
    minlat: str
    maxlat: str
    minlon: str
    maxlon: str

    suffix: ClassVar[str] = "byBox"


class CbsaScope(_Scope):
    kind: Literal["cbsa"] = "cbsa"
    cbsa: str

    suffix: ClassVar[str] = "byCBSA"


LocationScope = Annotated[
    SiteScope | CountyScope | StateScope | BoxScope | CbsaScope,
    Field(discriminator="kind"),
]


class MonitorSummary(BaseModel):
    """Subset of monitor fields surfaced by the monitor tools."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    state_code: str | None = None
    county_code: str | None = None
    site_number: str | None = None
    parameter_code: str | None = None
    parameter_name: str | None = None
    poc: int | None = None
    latitude: float | None = None
    longitude: float | None = None
    first_year_of_data: str | None = None
    last_sample_date: str | None = None
    local_site_name: str | None = None
    city_name: str | None = None
    cbsa_name: str | None = None
    measurement_scale: str | None = None
    monitoring_objective: str | None = None
    networks: str | None = None
