"""Shared fixtures for insight service tests."""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from telemetry_client import TransferError, TransferErrorKind
from telemetry_client.insights import (
    InsightCalculationResult,
    InsightDefinitionRequestBody,
    InsightGroup,
)
from viewer.services import InsightService


def make_group(order: float | None = None, title: str = "Group", insights: list | None = None) -> InsightGroup:
    return InsightGroup(id=uuid4(), title=title, order=order, insights=insights or [])


class FakeInsightClient:
    """Stands in for InsightClient; records calls and fails on request."""

    def __init__(self):
        self.groups: dict[UUID, list[InsightGroup]] = {}
        self.failing: set[str] = set()
        self.calls: list[tuple[str, UUID]] = []
        self.errors: list[TransferError] = []
        # Raised by GET instead of a TransferError, when set
        self.crash: Exception | None = None
        # Cleared to hold GET requests in flight
        self.release = asyncio.Event()
        self.release.set()

    def fetch_count(self, app_id: UUID) -> int:
        return sum(1 for name, app in self.calls if name == "insight_groups" and app == app_id)

    def handle_error(self, error: TransferError) -> None:
        self.errors.append(error)

    def _record(self, name: str, app_id: UUID) -> None:
        self.calls.append((name, app_id))
        self._maybe_fail(name)

    def _maybe_fail(self, name: str) -> None:
        if name in self.failing:
            raise TransferError(TransferErrorKind.SERVER_ERROR, f"{name} failed", status_code=500)

    async def insight_groups(self, app_id: UUID) -> list[InsightGroup]:
        # The server answers with the state at the time the request arrived
        self.calls.append(("insight_groups", app_id))
        snapshot = list(self.groups.get(app_id, []))
        await self.release.wait()
        if self.crash is not None:
            raise self.crash
        self._maybe_fail("insight_groups")
        return snapshot

    async def create_insight_group(self, app_id: UUID, title: str) -> InsightGroup:
        self._record("create_insight_group", app_id)
        group = make_group(title=title)
        self.groups.setdefault(app_id, []).append(group)
        return group

    async def update_insight_group(self, app_id: UUID, group: InsightGroup) -> InsightGroup:
        self._record("update_insight_group", app_id)
        self.groups[app_id] = [group if g.id == group.id else g for g in self.groups.get(app_id, [])]
        return group

    async def delete_insight_group(self, app_id: UUID, group_id: UUID) -> InsightGroup:
        self._record("delete_insight_group", app_id)
        remaining = [g for g in self.groups.get(app_id, []) if g.id != group_id]
        deleted = next(g for g in self.groups.get(app_id, []) if g.id == group_id)
        self.groups[app_id] = remaining
        return deleted

    async def create_insight(
        self, app_id: UUID, group_id: UUID, body: InsightDefinitionRequestBody
    ) -> InsightCalculationResult:
        self._record("create_insight", app_id)
        return InsightCalculationResult(id=uuid4(), title=body.title)

    async def update_insight(
        self, app_id: UUID, group_id: UUID, insight_id: UUID, body: InsightDefinitionRequestBody
    ) -> InsightCalculationResult:
        self._record("update_insight", app_id)
        return InsightCalculationResult(id=insight_id, title=body.title)

    async def delete_insight(self, app_id: UUID, group_id: UUID, insight_id: UUID) -> str:
        self._record("delete_insight", app_id)
        return "Deleted"


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 5, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def api() -> FakeInsightClient:
    return FakeInsightClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def service(api, clock) -> InsightService:
    return InsightService(api=api, stale_after=timedelta(minutes=5), clock=clock)


@pytest.fixture
def app_id() -> UUID:
    return uuid4()
