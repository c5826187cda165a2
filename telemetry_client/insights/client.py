"""Insight API client - insight groups and insights of an app."""

from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from telemetry_client.base import BaseClient, url_for_path
from telemetry_client.errors import TransferError, TransferErrorKind
from telemetry_client.insights.schemas import (
    InsightCalculationResult,
    InsightDefinitionRequestBody,
    InsightGroup,
    to_body,
)

_GROUPS = TypeAdapter(list[InsightGroup])
_GROUP = TypeAdapter(InsightGroup)
_RESULT = TypeAdapter(InsightCalculationResult)


def _decode(adapter: TypeAdapter, data):
    try:
        return adapter.validate_python(data)
    except ValidationError as e:
        raise TransferError(TransferErrorKind.DECODE_FAILED, str(e)) from e


class InsightClient(BaseClient):
    """Client for insight group and insight endpoints."""

    async def insight_groups(self, app_id: UUID) -> list[InsightGroup]:
        """GET apps/{app}/insightgroups - all groups of an app."""
        data = await self._get(url_for_path("apps", app_id, "insightgroups"))
        return _decode(_GROUPS, data)

    async def create_insight_group(self, app_id: UUID, title: str) -> InsightGroup:
        """POST apps/{app}/insightgroups - new empty group."""
        data = await self._post(url_for_path("apps", app_id, "insightgroups"), {"title": title})
        return _decode(_GROUP, data)

    async def update_insight_group(self, app_id: UUID, group: InsightGroup) -> InsightGroup:
        """PATCH apps/{app}/insightgroups/{group} - rename or reorder a group."""
        data = await self._patch(url_for_path("apps", app_id, "insightgroups", group.id), to_body(group))
        return _decode(_GROUP, data)

    async def delete_insight_group(self, app_id: UUID, group_id: UUID) -> InsightGroup:
        """DELETE apps/{app}/insightgroups/{group}."""
        data = await self._delete(url_for_path("apps", app_id, "insightgroups", group_id))
        return _decode(_GROUP, data)

    async def create_insight(
        self,
        app_id: UUID,
        group_id: UUID,
        body: InsightDefinitionRequestBody,
    ) -> InsightCalculationResult:
        """POST apps/{app}/insightgroups/{group}/insights."""
        data = await self._post(url_for_path("apps", app_id, "insightgroups", group_id, "insights"), to_body(body))
        return _decode(_RESULT, data)

    async def update_insight(
        self,
        app_id: UUID,
        group_id: UUID,
        insight_id: UUID,
        body: InsightDefinitionRequestBody,
    ) -> InsightCalculationResult:
        """PATCH apps/{app}/insightgroups/{group}/insights/{insight}."""
        path = url_for_path("apps", app_id, "insightgroups", group_id, "insights", insight_id)
        data = await self._patch(path, to_body(body))
        return _decode(_RESULT, data)

    async def delete_insight(self, app_id: UUID, group_id: UUID, insight_id: UUID) -> str:
        """DELETE apps/{app}/insightgroups/{group}/insights/{insight} - plain text reply."""
        path = url_for_path("apps", app_id, "insightgroups", group_id, "insights", insight_id)
        return await self._delete(path, text=True)
