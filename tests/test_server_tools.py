import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastmcp import Client

from aqsmcp import server
from aqsmcp.errors import AQSTransportError
from aqsmcp.server import (
    aqs_annual_summary_by_state,
    aqs_daily_summary_by_cbsa,
    aqs_daily_summary_by_county,
    aqs_is_available,
    aqs_list_parameters,
    aqs_list_states,
    aqs_monitors_by_box,
    aqs_quarterly_summary_by_site,
    aqs_sample_data_by_site,
    aqs_signup,
    client,
    mcp,
)
from aqsmcp.throttle import RequestThrottle

EXPECTED_TOOLS = {
    "aqs_signup",
    "aqs_is_available",
    "aqs_list_states",
    "aqs_list_counties",
    "aqs_list_sites",
    "aqs_list_cbsas",
    "aqs_list_parameter_classes",
    "aqs_list_parameters",
    *(
        f"aqs_{family}_by_{scope}"
        for family in ("monitors", "sample_data", "daily_summary", "annual_summary")
        for scope in ("site", "county", "state", "box", "cbsa")
    ),
    "aqs_quarterly_summary_by_site",
    "aqs_quarterly_summary_by_county",
    "aqs_quarterly_summary_by_state",
}


def make_response(data=None, status="Success", **header):
    response = MagicMock()
    response.status_code = 200
    response.reason_phrase = "OK"
    response.is_success = True
    response.json.return_value = {"Header": [{"status": status, **header}], "Data": data or []}
    return response


@pytest.fixture
def mock_get():
    """Stub the HTTP layer and drop the inter-request wait."""
    get = AsyncMock(return_value=make_response())
    with (
        patch.object(client, "client", MagicMock(get=get)),
        patch.object(client, "throttle", RequestThrottle(interval=0)),
    ):
        yield get


def sent_params(mock_get):
    return mock_get.call_args.kwargs["params"]


def sent_url(mock_get):
    return mock_get.call_args.args[0]


@pytest.mark.asyncio
async def test_list_states_uses_env_credentials(aqs_env, mock_get):
    states = [{"code": "06", "value_represented": "California"}]
    mock_get.return_value = make_response(states)

    result = await aqs_list_states.fn()

    assert json.loads(result) == states
    assert sent_url(mock_get) == "https://aqs.epa.gov/data/api/list/states"
    assert sent_params(mock_get) == {"email": "env@example.com", "key": "envkey"}


@pytest.mark.asyncio
async def test_list_parameters_sends_class(aqs_env, mock_get):
    await aqs_list_parameters.fn(pc="CRITERIA")

    assert sent_url(mock_get).endswith("/list/parametersByClass")
    assert sent_params(mock_get)["pc"] == "CRITERIA"


@pytest.mark.asyncio
async def test_missing_credentials_make_no_request(no_aqs_env, mock_get):
    result = await aqs_list_states.fn()

    assert result.startswith("Error: Email is required.")
    assert "AQS_EMAIL and AQS_API_KEY" in result
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_daily_summary_by_county(aqs_env, mock_get):
    rows = [{"date_local": "2024-01-02", "arithmetic_mean": 8.5}]
    mock_get.return_value = make_response(rows)

    result = json.loads(await aqs_daily_summary_by_county.fn("88101", "20240101", "20240131", "06", "037"))

    assert result == {"endpoint": "dailyData/byCounty", "rowCount": 1, "data": rows}
    assert sent_params(mock_get) == {
        "email": "env@example.com",
        "key": "envkey",
        "param": "88101",
        "bdate": "20240101",
        "edate": "20240131",
        "state": "06",
        "county": "037",
    }


@pytest.mark.asyncio
async def test_cross_year_range_makes_no_request(aqs_env, mock_get):
    result = await aqs_daily_summary_by_cbsa.fn("44201", "20231231", "20240101", "31080")

    assert result.startswith("Error: Begin date (20231231) and end date (20240101) must be in the same calendar year.")
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_bad_date_format_makes_no_request(aqs_env, mock_get):
    result = await aqs_sample_data_by_site.fn("44201", "2024-01-01", "20240107", "06", "037", "1103")

    assert result.startswith("Error: bdate must be in YYYYMMDD format. Got: 2024-01-01")
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_explicit_credentials_override_env(aqs_env, mock_get):
    await aqs_annual_summary_by_state.fn("44201", "20230101", "20231231", "06", email="me@example.com", key="mine")

    params = sent_params(mock_get)
    assert params["email"] == "me@example.com"
    assert params["key"] == "mine"
    assert sent_url(mock_get).endswith("/annualData/byState")


@pytest.mark.asyncio
async def test_monitors_by_box(aqs_env, mock_get):
    mock_get.return_value = make_response([{"local_site_name": "Site A", "poc": 1, "extra": "x"}])

    result = json.loads(await aqs_monitors_by_box.fn("44201", "20240101", "20240630", "33.5", "34.5", "-118.8", "-117.5"))

    assert result["endpoint"] == "monitors/byBox"
    assert result["monitors"] == [{"local_site_name": "Site A", "poc": 1}]
    assert sent_params(mock_get)["minlon"] == "-118.8"


@pytest.mark.asyncio
async def test_quarterly_returns_envelope(aqs_env, mock_get):
    mock_get.return_value = make_response([{"quarter": "3"}], rows=1)

    result = json.loads(await aqs_quarterly_summary_by_site.fn("44201", "20230101", "20231231", "06", "037", "1103"))

    assert result["Data"] == [{"quarter": "3"}]
    assert sent_url(mock_get).endswith("/quarterlyData/bySite")


@pytest.mark.asyncio
async def test_upstream_failure_becomes_error_text(aqs_env, mock_get):
    mock_get.return_value = make_response(status="Failed", error=["Invalid key"])

    result = await aqs_daily_summary_by_county.fn("88101", "20240101", "20240131", "06", "037")

    assert result.startswith("Error: AQS API request failed: AQS API Error:")
    assert "Invalid key" in result


@pytest.mark.asyncio
async def test_same_query_twice_hits_network_twice(aqs_env, mock_get):
    await aqs_list_states.fn()
    await aqs_list_states.fn()

    assert mock_get.call_count == 2


@pytest.mark.asyncio
async def test_signup_validates_email(mock_get):
    assert await aqs_signup.fn("") == "Error: Email address is required for API key registration."
    assert await aqs_signup.fn("not-an-email") == "Error: Please provide a valid email address."
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_signup_success(no_aqs_env, mock_get):
    result = await aqs_signup.fn("new@example.com")

    assert result.startswith("API key registration successful!")
    assert sent_url(mock_get).endswith("/signup")
    assert sent_params(mock_get) == {"email": "new@example.com"}


@pytest.mark.asyncio
async def test_signup_transport_error(mock_get):
    with patch.object(server.account_service, "signup", new_callable=AsyncMock) as mock_signup:
        mock_signup.side_effect = AQSTransportError.from_status(500, "Internal Server Error")
        result = await aqs_signup.fn("new@example.com")

    assert result == "Error during signup: AQS API request failed: HTTP 500: Internal Server Error"


@pytest.mark.asyncio
async def test_is_available(aqs_env, mock_get):
    mock_get.return_value = make_response(request_time="2024-01-15 10:00:00")

    result = await aqs_is_available.fn()

    assert result.startswith("EPA AQS API Status: AVAILABLE")
    assert sent_url(mock_get).endswith("/metaData/isAvailable")


@pytest.mark.asyncio
async def test_is_available_without_credentials(no_aqs_env, mock_get):
    result = await aqs_is_available.fn()

    assert result.startswith("Credentials required: Email is required.")
    mock_get.assert_not_called()


@pytest.mark.asyncio
async def test_is_available_upstream_error(aqs_env, mock_get):
    mock_get.return_value = make_response(status="Failed")

    result = await aqs_is_available.fn()

    assert result.startswith("EPA AQS API Status: UNAVAILABLE or ERROR\n\nError: ")


@pytest.mark.asyncio
async def test_tool_catalog():
    async with Client(mcp) as c:
        tools = await c.list_tools()

    names = {tool.name for tool in tools}
    assert names == EXPECTED_TOOLS
    assert len(tools) == 31

    daily = next(tool for tool in tools if tool.name == "aqs_daily_summary_by_county")
    assert set(daily.inputSchema["required"]) == {"param", "bdate", "edate", "state", "county"}
    assert "email" in daily.inputSchema["properties"]


@pytest.mark.asyncio
async def test_unknown_tool_is_error():
    async with Client(mcp) as c:
        result = await c.call_tool_mcp("aqs_does_not_exist", {})

    assert result.isError
    assert "aqs_does_not_exist" in result.content[0].text


@pytest.mark.asyncio
async def test_call_through_protocol(aqs_env, mock_get):
    mock_get.return_value = make_response([{"code": "06"}])

    async with Client(mcp) as c:
        result = await c.call_tool_mcp("aqs_list_states", {})

    assert not result.isError
    assert json.loads(result.content[0].text) == [{"code": "06"}]


@pytest.mark.asyncio
async def test_signup_with_string_confirmation(no_aqs_env, mock_get):
    mock_get.return_value = make_response(["You should receive a registration confirmation email."])

    result = await aqs_signup.fn("new@example.com")

    assert result.startswith("API key registration successful!")


@pytest.mark.asyncio
async def test_monitor_errors_are_plain_text(aqs_env, mock_get):
    mock_get.return_value = make_response(status="Failed", error=["Invalid parameter"])

    result = await aqs_monitors_by_box.fn("44201", "20240101", "20240630", "33.5", "34.5", "-118.8", "-117.5")

    assert result.startswith("Error: AQS API request failed: AQS API Error:")
    assert "Invalid parameter" in result
