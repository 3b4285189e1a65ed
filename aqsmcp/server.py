"""MCP Server for the EPA Air Quality System (AQS) Data API"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Awaitable, Callable

os.environ.setdefault("FASTMCP_LOG_ENABLED", "false")

# Logging goes to stderr; stdout belongs to the MCP stdio transport.

from dotenv import load_dotenv
from fastmcp import FastMCP

from aqsmcp.client import AQSClient
from aqsmcp.credentials import Credentials, resolve_credentials
from aqsmcp.errors import AQSError, ErrorKind, describe_error
from aqsmcp.formatting import format_availability, format_reference, format_signup, render_data
from aqsmcp.middleware import LoggingMiddleware, configure_logging
from aqsmcp.models import (
    AQSResponse,
    BoxScope,
    CbsaScope,
    CountyScope,
    DateRangeQuery,
    LocationScope,
    SiteScope,
    StateScope,
)
from aqsmcp.schemas import (
    ApiKey,
    BeginDate,
    Cbsa,
    County,
    Email,
    EndDate,
    MaxLat,
    MaxLon,
    MinLat,
    MinLon,
    Param,
    ParameterClass,
    SignupEmail,
    Site,
    State,
)
from aqsmcp.services import AccountService, DataFamily, DataService, ReferenceService

# Configure logging based on settings
configure_logging()
logger = logging.getLogger(__name__)

# One client per process: its throttle marker is the process-wide rate limit
client = AQSClient()

mcp = FastMCP("aqs-mcp")
mcp.add_middleware(LoggingMiddleware())

# Initialize Services
account_service = AccountService(client)
reference_service = ReferenceService(client)
monitor_service = DataService(client, DataFamily.MONITORS)
sample_data_service = DataService(client, DataFamily.SAMPLE_DATA)
daily_service = DataService(client, DataFamily.DAILY)
quarterly_service = DataService(client, DataFamily.QUARTERLY)
annual_service = DataService(client, DataFamily.ANNUAL)


async def _reference(
    fetch: Callable[[Credentials], Awaitable[AQSResponse]],
    email: str | None,
    key: str | None,
) -> str:
    try:
        credentials = resolve_credentials(email, key)
        response = await fetch(credentials)
    except AQSError as e:
        logger.warning(f"Reference lookup failed: {e}")
        return describe_error(e)
    return format_reference(response)


async def _query(
    service: DataService,
    scope: LocationScope,
    param: str,
    bdate: str,
    edate: str,
    email: str | None,
    key: str | None,
) -> str:
    endpoint = service.endpoint_for(scope)
    try:
        credentials = resolve_credentials(email, key)
        query = DateRangeQuery.checked(param, bdate, edate)
        response = await service.query(credentials, query, scope)
    except AQSError as e:
        logger.warning(f"{endpoint} failed: {e}")
        return describe_error(e)
    return render_data(service.family, response, endpoint)


# --- Account ---------------------------------------------------------------


@mcp.tool()
async def aqs_signup(email: SignupEmail) -> str:
    """
    Register for an EPA Air Quality System (AQS) API key.

    Provide your email address and an API key will be sent to you.
    This key is required for all other AQS API operations.
    """
    if not email:
        return "Error: Email address is required for API key registration."
    if "@" not in email or "." not in email:
        return "Error: Please provide a valid email address."

    try:
        response = await account_service.signup(email)
    except AQSError as e:
        logger.error(f"Signup failed: {e}")
        return f"Error during signup: {e.message}"
    return format_signup(response, email)


@mcp.tool()
async def aqs_is_available(email: Email = None, key: ApiKey = None) -> str:
    """
    Check if the EPA Air Quality System (AQS) API is operational.

    Health check verifying the API is responding. Credentials fall back to
    AQS_EMAIL / AQS_API_KEY.
    """
    try:
        credentials = resolve_credentials(email, key)
        response = await account_service.is_available(credentials)
    except AQSError as e:
        if e.kind == ErrorKind.MISSING_CREDENTIAL:
            return (
                f"Credentials required: {e.message}\n\n"
                "Provide email and key parameters, or set AQS_EMAIL and AQS_API_KEY environment variables."
            )
        logger.error(f"Availability check failed: {e}")
        return f"EPA AQS API Status: UNAVAILABLE or ERROR\n\nError: {e.message}"
    return format_availability(response)


# --- Reference lists -------------------------------------------------------


@mcp.tool()
async def aqs_list_states(email: Email = None, key: ApiKey = None) -> str:
    """
    Get a list of all US states with their 2-digit FIPS codes.

    Use this to look up state codes for other AQS API queries.
    Example: California = "06", Texas = "48", New York = "36".
    """
    return await _reference(reference_service.states, email, key)


@mcp.tool()
async def aqs_list_counties(state: State, email: Email = None, key: ApiKey = None) -> str:
    """
    Get a list of counties within a state with their 3-digit FIPS codes.

    Example: Los Angeles County, CA = "037", Harris County, TX = "201".
    """
    return await _reference(lambda c: reference_service.counties(c, state), email, key)


@mcp.tool()
async def aqs_list_sites(state: State, county: County, email: Email = None, key: ApiKey = None) -> str:
    """
    Get a list of air quality monitoring sites within a county with their 4-digit site codes.

    Requires both state and county codes.
    """
    return await _reference(lambda c: reference_service.sites(c, state, county), email, key)


@mcp.tool()
async def aqs_list_cbsas(email: Email = None, key: ApiKey = None) -> str:
    """
    Get a list of Core Based Statistical Areas (CBSAs) with their codes.

    CBSAs are metropolitan and micropolitan statistical areas defined by the US Census.
    Example: Los Angeles-Long Beach-Anaheim = "31080", New York-Newark-Jersey City = "35620".
    """
    return await _reference(reference_service.cbsas, email, key)


@mcp.tool()
async def aqs_list_parameter_classes(email: Email = None, key: ApiKey = None) -> str:
    """
    Get a list of parameter classification groups.

    Common classes: CRITERIA (criteria pollutants like ozone, PM2.5),
    AIR TOXICS (hazardous air pollutants), METEOROLOGICAL (weather data).
    Use the class name with aqs_list_parameters.
    """
    return await _reference(reference_service.parameter_classes, email, key)


@mcp.tool()
async def aqs_list_parameters(pc: ParameterClass, email: Email = None, key: ApiKey = None) -> str:
    """
    Get the parameters (pollutants/measurements) within a parameter class.

    Common codes: 44201 (Ozone), 88101 (PM2.5 Local), 81102 (PM10),
    42401 (SO2), 42101 (CO), 42602 (NO2).
    """
    return await _reference(lambda c: reference_service.parameters(c, pc), email, key)


# --- Monitors --------------------------------------------------------------


@mcp.tool()
async def aqs_monitors_by_site(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    site: Site,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get air quality monitors at a specific monitoring site.

    Returns location, operational dates and measurement parameters for each monitor.
    """
    scope = SiteScope(state=state, county=county, site=site)
    return await _query(monitor_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_monitors_by_county(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get all air quality monitors in a county."""
    scope = CountyScope(state=state, county=county)
    return await _query(monitor_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_monitors_by_state(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get all air quality monitors in a state."""
    scope = StateScope(state=state)
    return await _query(monitor_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_monitors_by_box(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    minlat: MinLat,
    maxlat: MaxLat,
    minlon: MinLon,
    maxlon: MaxLon,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get all air quality monitors within a latitude/longitude bounding box.

    Useful for regions spanning several states or counties.
    Los Angeles area: minlat=33.5, maxlat=34.5, minlon=-118.8, maxlon=-117.5
    """
    scope = BoxScope(minlat=minlat, maxlat=maxlat, minlon=minlon, maxlon=maxlon)
    return await _query(monitor_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_monitors_by_cbsa(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    cbsa: Cbsa,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get all air quality monitors in a Core Based Statistical Area (CBSA).

    Examples: 31080 Los Angeles, 35620 New York, 16980 Chicago, 19100 Dallas-Fort Worth,
    26420 Houston, 38060 Phoenix.
    """
    scope = CbsaScope(cbsa=cbsa)
    return await _query(monitor_service, scope, param, bdate, edate, email, key)


# --- Sample data -----------------------------------------------------------


@mcp.tool()
async def aqs_sample_data_by_site(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    site: Site,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get raw sample data for a specific monitoring site.

    WARNING: Sample data can be very large. Strongly recommend limiting date ranges
    to one week or one month. Returns individual measurements with time, value,
    units and quality flags.
    """
    scope = SiteScope(state=state, county=county, site=site)
    return await _query(sample_data_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_sample_data_by_county(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get raw sample data for all monitoring sites in a county. Keep date ranges short."""
    scope = CountyScope(state=state, county=county)
    return await _query(sample_data_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_sample_data_by_state(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get raw sample data for all monitoring sites in a state.

    State-wide sample queries are the largest in the API; use a short date range.
    """
    scope = StateScope(state=state)
    return await _query(sample_data_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_sample_data_by_box(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    minlat: MinLat,
    maxlat: MaxLat,
    minlon: MinLon,
    maxlon: MaxLon,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get raw sample data for all monitoring sites within a latitude/longitude bounding box."""
    scope = BoxScope(minlat=minlat, maxlat=maxlat, minlon=minlon, maxlon=maxlon)
    return await _query(sample_data_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_sample_data_by_cbsa(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    cbsa: Cbsa,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get raw sample data for all monitoring sites within a CBSA (metropolitan area)."""
    scope = CbsaScope(cbsa=cbsa)
    return await _query(sample_data_service, scope, param, bdate, edate, email, key)


# --- Daily summaries -------------------------------------------------------


@mcp.tool()
async def aqs_daily_summary_by_site(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    site: Site,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get daily summary air quality data for a specific monitoring site.

    Daily summaries include arithmetic mean, maximum values, observation counts,
    and AQI values for each day.
    """
    scope = SiteScope(state=state, county=county, site=site)
    return await _query(daily_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_daily_summary_by_county(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get daily summary air quality data for all monitoring sites in a county."""
    scope = CountyScope(state=state, county=county)
    return await _query(daily_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_daily_summary_by_state(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get daily summary air quality data for all monitoring sites in a state.

    Note: This can return large amounts of data.
    """
    scope = StateScope(state=state)
    return await _query(daily_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_daily_summary_by_box(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    minlat: MinLat,
    maxlat: MaxLat,
    minlon: MinLon,
    maxlon: MaxLon,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get daily summary air quality data for all monitoring sites within a bounding box."""
    scope = BoxScope(minlat=minlat, maxlat=maxlat, minlon=minlon, maxlon=maxlon)
    return await _query(daily_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_daily_summary_by_cbsa(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    cbsa: Cbsa,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get daily summary air quality data for all monitoring sites in a CBSA."""
    scope = CbsaScope(cbsa=cbsa)
    return await _query(daily_service, scope, param, bdate, edate, email, key)


# --- Quarterly summaries ---------------------------------------------------


@mcp.tool()
async def aqs_quarterly_summary_by_site(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    site: Site,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Retrieve quarterly summary data for a specific air quality monitoring site.

    Quarterly summaries aggregate measurements by calendar quarter, providing
    observation counts, arithmetic means, and maximum values. Useful for
    seasonal patterns at individual locations.
    """
    scope = SiteScope(state=state, county=county, site=site)
    return await _query(quarterly_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_quarterly_summary_by_county(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Retrieve quarterly summary data for all monitoring sites in a county."""
    scope = CountyScope(state=state, county=county)
    return await _query(quarterly_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_quarterly_summary_by_state(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Retrieve quarterly summary data for all monitoring sites in a state."""
    scope = StateScope(state=state)
    return await _query(quarterly_service, scope, param, bdate, edate, email, key)


# --- Annual summaries ------------------------------------------------------


@mcp.tool()
async def aqs_annual_summary_by_site(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    site: Site,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get annual summary data for a specific monitoring site.

    Annual summaries include arithmetic mean, standard deviation, maximum values,
    percentiles (10th through 99th), observation counts, data completeness, and
    exceedance counts for primary and secondary NAAQS standards.
    """
    scope = SiteScope(state=state, county=county, site=site)
    return await _query(annual_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_annual_summary_by_county(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    county: County,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get annual summary data for all monitoring sites in a county."""
    scope = CountyScope(state=state, county=county)
    return await _query(annual_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_annual_summary_by_state(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    state: State,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get annual summary data for all monitoring sites in a state."""
    scope = StateScope(state=state)
    return await _query(annual_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_annual_summary_by_box(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    minlat: MinLat,
    maxlat: MaxLat,
    minlon: MinLon,
    maxlon: MaxLon,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """Get annual summary data for all monitoring sites within a latitude/longitude bounding box."""
    scope = BoxScope(minlat=minlat, maxlat=maxlat, minlon=minlon, maxlon=maxlon)
    return await _query(annual_service, scope, param, bdate, edate, email, key)


@mcp.tool()
async def aqs_annual_summary_by_cbsa(
    param: Param,
    bdate: BeginDate,
    edate: EndDate,
    cbsa: Cbsa,
    email: Email = None,
    key: ApiKey = None,
) -> str:
    """
    Get annual summary data for all monitoring sites within a Core Based Statistical Area.

    CBSAs represent metropolitan and micropolitan statistical areas.
    """
    scope = CbsaScope(cbsa=cbsa)
    return await _query(annual_service, scope, param, bdate, edate, email, key)


def main():
    """Run the MCP server"""
    load_dotenv()

    if not (os.getenv("AQS_EMAIL") and os.getenv("AQS_API_KEY")):
        logger.warning("AQS_EMAIL / AQS_API_KEY are not configured. Tools will require email and key arguments.")

    # Check for transport configuration
    transport = os.getenv("MCP_TRANSPORT", "stdio").lower()

    try:
        if transport in ("http", "streamable-http", "sse"):
            host = os.getenv("MCP_HOST", "0.0.0.0")
            default_port = os.getenv("PORT", "8000")
            port = int(os.getenv("MCP_PORT", default_port))
            path = os.getenv("MCP_PATH", "/mcp")

            logger.info(f"Starting aqs-mcp with Streamable HTTP on {host}:{port}{path}")
            mcp.run(transport="http", host=host, port=port, path=path)
        else:
            logger.info("Starting aqs-mcp in stdio mode")
            mcp.run(transport="stdio")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
