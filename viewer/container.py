"""Dependency container - owns the API client and services of one session."""

from datetime import timedelta

from settings import API_BASE_URL, API_TIMEOUT, API_TOKEN, MAX_CONCURRENT
from telemetry_client import InsightClient
from viewer.services import InsightService


class Container:
    """Holds the long-lived instances for one application session.

    Construct it once and pass it (or its services) to consumers:

        async with Container() as container:
            groups = container.insights.insight_groups(app_id)
    """

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        stale_after: timedelta | None = None,
        api: InsightClient | None = None,
    ):
        self.api = api or InsightClient(
            max_concurrent=MAX_CONCURRENT,
            base_url=base_url or API_BASE_URL,
            token=token or API_TOKEN,
            timeout=API_TIMEOUT,
        )
        self.insights = InsightService(api=self.api, stale_after=stale_after)

    async def __aenter__(self):
        await self.api.__aenter__()
        return self

    async def __aexit__(self, *exc):
        await self.api.__aexit__(*exc)
