import logging
from enum import StrEnum

from aqsmcp.client import AQSClient
from aqsmcp.credentials import Credentials
from aqsmcp.models import AQSResponse, DateRangeQuery, LocationScope

logger = logging.getLogger(__name__)


class DataFamily(StrEnum):
    MONITORS = "monitors"
    SAMPLE_DATA = "sampleData"
    DAILY = "dailyData"
    QUARTERLY = "quarterlyData"
    ANNUAL = "annualData"


class AccountService:
    SIGNUP_ENDPOINT = "signup"
    AVAILABILITY_ENDPOINT = "metaData/isAvailable"

    def __init__(self, client: AQSClient):
        self.client = client

    async def signup(self, email: str) -> AQSResponse:
        """Request an API key; AQS mails it to the given address."""
        return await self.client.request(self.SIGNUP_ENDPOINT, {"email": email})

    async def is_available(self, credentials: Credentials) -> AQSResponse:
        return await self.client.request(self.AVAILABILITY_ENDPOINT, credentials.as_params())


class ReferenceService:
    """Lookup lists: FIPS codes, sites, CBSAs and parameter codes."""

    def __init__(self, client: AQSClient):
        self.client = client

    async def _list(self, name: str, credentials: Credentials, **filters: str) -> AQSResponse:
        return await self.client.request(f"list/{name}", {**credentials.as_params(), **filters})

    async def states(self, credentials: Credentials) -> AQSResponse:
        return await self._list("states", credentials)

    async def counties(self, credentials: Credentials, state: str) -> AQSResponse:
        return await self._list("countiesByState", credentials, state=state)

    async def sites(self, credentials: Credentials, state: str, county: str) -> AQSResponse:
        return await self._list("sitesByCounty", credentials, state=state, county=county)

    async def cbsas(self, credentials: Credentials) -> AQSResponse:
        return await self._list("cbsas", credentials)

    async def parameter_classes(self, credentials: Credentials) -> AQSResponse:
        return await self._list("classes", credentials)

    async def parameters(self, credentials: Credentials, parameter_class: str) -> AQSResponse:
        return await self._list("parametersByClass", credentials, pc=parameter_class)


class DataService:
    """
    Date-ranged queries for one data family (monitors, sample data, summaries).

    The endpoint is '{family}/{scope suffix}', e.g. 'dailyData/byCBSA'. Query
    parameters are the credentials, the date-range query and the scope fields,
    in that order.
    """

    def __init__(self, client: AQSClient, family: DataFamily):
        self.client = client
        self.family = family

    def endpoint_for(self, scope: LocationScope) -> str:
        return f"{self.family}/{scope.suffix}"

    async def query(self, credentials: Credentials, query: DateRangeQuery, scope: LocationScope) -> AQSResponse:
        endpoint = self.endpoint_for(scope)
        params = {**credentials.as_params(), **query.to_params(), **scope.to_params()}
        logger.debug(f"{self.family} query via {endpoint} for {query.bdate}-{query.edate}")
        return await self.client.request(endpoint, params)
