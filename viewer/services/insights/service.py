"""Insight service - cached, de-duplicated access to an app's insight groups."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar
from uuid import UUID

from loguru import logger

from settings import INSIGHTS_STALE_AFTER
from telemetry_client import Result, TransferError
from telemetry_client.insights import (
    Insight,
    InsightCalculationResult,
    InsightClient,
    InsightDefinitionRequestBody,
    InsightGroup,
)
from viewer.models import CacheEntry
from viewer.services.insights.events import ChangeHandler, ChangeNotifier, ChangeTopic

T = TypeVar("T")
Callback = Callable[[Result[Any]], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InsightService:
    """Stale-while-revalidate cache of insight groups, keyed by app id.

    All state belongs to the running event loop. Reads are synchronous and
    never wait for the network: a miss or a stale entry schedules a fetch
    and observers are told when it lands. At most one fetch per app is
    outstanding at a time.
    """

    def __init__(
        self,
        api: InsightClient,
        stale_after: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._api = api
        self._stale_after = stale_after if stale_after is not None else INSIGHTS_STALE_AFTER
        self._clock = clock
        self._entries: dict[UUID, CacheEntry] = {}
        self._in_flight: dict[UUID, asyncio.Task] = {}
        self._selected_group_id: UUID | None = None
        self._focused_app_id: UUID | None = None
        self._notifier = ChangeNotifier()
        logger.debug("InsightService initialized (stale_after={})", self._stale_after)

    # ========== Observable state ==========

    @property
    def insight_groups_by_app_id(self) -> dict[UUID, list[InsightGroup]]:
        return {app_id: entry.groups for app_id, entry in self._entries.items()}

    @property
    def loading_app_ids(self) -> frozenset[UUID]:
        return frozenset(self._in_flight)

    @property
    def selected_group_id(self) -> UUID | None:
        return self._selected_group_id

    @selected_group_id.setter
    def selected_group_id(self, group_id: UUID | None) -> None:
        """Focus a group; ids missing from the focused app's groups fall back to the first one."""
        entry = self._entries.get(self._focused_app_id)
        if group_id is not None and entry is not None and all(g.id != group_id for g in entry.groups):
            logger.debug("Group {} not in app {}, selecting first group", group_id, self._focused_app_id)
            group_id = entry.groups[0].id if entry.groups else None
        self._set_selection(group_id)

    def subscribe(self, handler: ChangeHandler, topic: ChangeTopic | None = None) -> str:
        return self._notifier.subscribe(handler, topic)

    def unsubscribe(self, token: str) -> None:
        self._notifier.unsubscribe(token)

    def is_loading(self, app_id: UUID) -> bool:
        return app_id in self._in_flight

    def loaded_at(self, app_id: UUID) -> datetime | None:
        entry = self._entries.get(app_id)
        return entry.loaded_at if entry else None

    # ========== Reads ==========

    def insight_groups(self, app_id: UUID) -> list[InsightGroup] | None:
        """Cached groups for an app, loading them if missing or outdated.

        Returns None while nothing is cached. A stale entry is returned as is
        and refreshed in the background.
        """
        self._focused_app_id = app_id
        entry = self._entries.get(app_id)

        if entry is None:
            logger.debug("Insight groups not cached for app {}, asking server", app_id)
            self._schedule_fetch(app_id)
        elif entry.is_stale(self._clock(), self._stale_after):
            logger.debug("Insight groups too old for app {}, asking server", app_id)
            self._schedule_fetch(app_id)

        groups = entry.groups if entry else None
        self._reconcile_selection(groups)
        return groups

    def insight_group(self, group_id: UUID, app_id: UUID) -> InsightGroup | None:
        groups = self.insight_groups(app_id)
        if groups is None:
            return None

        for group in groups:
            if group.id == group_id:
                return group

        # Group list is out of date, e.g. the group was created elsewhere
        logger.debug("Insight group {} not cached for app {}, asking server", group_id, app_id)
        self._schedule_fetch(app_id)
        return None

    def insight(self, insight_id: UUID, group_id: UUID, app_id: UUID) -> Insight | None:
        group = self.insight_group(group_id, app_id)
        if group is None:
            return None
        return next((i for i in group.insights if i.id == insight_id), None)

    # ========== Fetching ==========

    async def fetch_insight_groups(
        self,
        app_id: UUID,
        on_complete: Callback | None = None,
    ) -> Result[list[InsightGroup]]:
        """Load all groups of an app, joining a fetch that is already running."""
        task = self._schedule_fetch(app_id)
        result = await asyncio.shield(task)
        if on_complete:
            on_complete(result)
        return result

    def _schedule_fetch(self, app_id: UUID) -> asyncio.Task:
        # No await between the lookup and the insert
        task = self._in_flight.get(app_id)
        if task is not None:
            return task

        task = asyncio.get_running_loop().create_task(self._load(app_id))
        task.add_done_callback(self._log_crashed_fetch)
        self._in_flight[app_id] = task
        self._notifier.publish(ChangeTopic.LOADING, app_id)
        return task

    @staticmethod
    def _log_crashed_fetch(task: asyncio.Task) -> None:
        # Background fetches may have no awaiting caller
        if task.cancelled() or task.exception() is None:
            return
        logger.opt(exception=task.exception()).error("Insight group fetch crashed")

    async def _load(self, app_id: UUID) -> Result[list[InsightGroup]]:
        try:
            try:
                groups = await self._api.insight_groups(app_id)
            except TransferError as e:
                self._api.handle_error(e)
                logger.warning("Keeping cached insight groups for app {} after failed load", app_id)
                return Result.failure(e)

            ordered = sorted(groups, key=lambda g: g.sort_key)
            self._entries[app_id] = CacheEntry(groups=ordered, loaded_at=self._clock())
            logger.info("Loaded {} insight groups for app {}", len(ordered), app_id)
            self._notifier.publish(ChangeTopic.INSIGHT_GROUPS, app_id)
            if app_id == self._focused_app_id:
                self._reconcile_selection(ordered)
            return Result.success(ordered)
        finally:
            self._in_flight.pop(app_id, None)
            self._notifier.publish(ChangeTopic.LOADING, app_id)

    def _invalidate(self, app_id: UUID) -> None:
        """Drop an app's entry so the next fetch cannot be skipped as fresh."""
        if self._entries.pop(app_id, None) is not None:
            logger.debug("Invalidated insight groups for app {}", app_id)
            self._notifier.publish(ChangeTopic.INSIGHT_GROUPS, app_id)

    # ========== Selection ==========

    def _reconcile_selection(self, groups: list[InsightGroup] | None) -> None:
        if groups is None:
            return
        if any(g.id == self._selected_group_id for g in groups):
            return
        self._set_selection(groups[0].id if groups else None)

    def _set_selection(self, group_id: UUID | None) -> None:
        if group_id == self._selected_group_id:
            return
        self._selected_group_id = group_id
        self._notifier.publish(ChangeTopic.SELECTION, self._focused_app_id)

    # ========== Writes ==========

    async def _write(
        self,
        app_id: UUID,
        request: Awaitable[T],
        on_complete: Callback | None,
        invalidate: bool = False,
    ) -> Result[T]:
        """Run a mutation, then reload the app's groups whatever the outcome."""
        try:
            result = Result.success(await request)
        except TransferError as e:
            self._api.handle_error(e)
            result = Result.failure(e)

        # A fetch already running was sent before the write finished
        pending = self._in_flight.get(app_id)
        if pending is not None:
            await asyncio.gather(asyncio.shield(pending), return_exceptions=True)

        if invalidate:
            self._invalidate(app_id)
        await self.fetch_insight_groups(app_id)

        if on_complete:
            on_complete(result)
        return result

    async def create_insight_group(
        self,
        title: str,
        app_id: UUID,
        on_complete: Callback | None = None,
    ) -> Result[InsightGroup]:
        return await self._write(app_id, self._api.create_insight_group(app_id, title), on_complete)

    async def update_insight_group(
        self,
        group: InsightGroup,
        app_id: UUID,
        on_complete: Callback | None = None,
    ) -> Result[InsightGroup]:
        return await self._write(
            app_id,
            self._api.update_insight_group(app_id, group),
            on_complete,
            invalidate=True,
        )

    async def delete_insight_group(
        self,
        group_id: UUID,
        app_id: UUID,
        on_complete: Callback | None = None,
    ) -> Result[InsightGroup]:
        return await self._write(app_id, self._api.delete_insight_group(app_id, group_id), on_complete)

    async def create_insight(
        self,
        body: InsightDefinitionRequestBody,
        group_id: UUID,
        app_id: UUID,
        on_complete: Callback | None = None,
    ) -> Result[InsightCalculationResult]:
        return await self._write(app_id, self._api.create_insight(app_id, group_id, body), on_complete)

    async def update_insight(
        self,
        insight_id: UUID,
        group_id: UUID,
        app_id: UUID,
        body: InsightDefinitionRequestBody,
        on_complete: Callback | None = None,
    ) -> Result[InsightCalculationResult]:
        return await self._write(
            app_id,
            self._api.update_insight(app_id, group_id, insight_id, body),
            on_complete,
            invalidate=True,
        )

    async def delete_insight(
        self,
        insight_id: UUID,
        group_id: UUID,
        app_id: UUID,
        on_complete: Callback | None = None,
    ) -> Result[str]:
        return await self._write(app_id, self._api.delete_insight(app_id, group_id, insight_id), on_complete)
