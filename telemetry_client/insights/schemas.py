"""Insight API schemas - insight groups, insights, calculation results."""

from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field


class InsightDisplayMode(StrEnum):
    """How an insight is rendered."""

    NUMBER = "number"
    LINE_CHART = "lineChart"
    BAR_CHART = "barChart"
    PIE_CHART = "pieChart"
    RAW = "raw"


class InsightGroupByInterval(StrEnum):
    """Time bucket for breakdowns over time."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class InsightDefinition(BaseModel):
    """Fields shared by stored insights, request bodies and results."""

    order: float | None = None
    title: str
    subtitle: str | None = None
    signal_type: str | None = Field(alias="signalType", default=None)
    unique_user: bool = Field(alias="uniqueUser", default=False)
    filters: dict[str, str] = {}
    rolling_window_size: float = Field(alias="rollingWindowSize", default=-2592000)
    breakdown_key: str | None = Field(alias="breakdownKey", default=None)
    group_by: InsightGroupByInterval | None = Field(alias="groupBy", default=None)
    display_mode: InsightDisplayMode = Field(alias="displayMode", default=InsightDisplayMode.LINE_CHART)
    is_expanded: bool = Field(alias="isExpanded", default=False)

    class Config:
        populate_by_name = True


class Insight(InsightDefinition):
    """A single analytics query definition, owned by one insight group."""

    id: UUID
    group: dict[str, UUID] = {}

    @property
    def group_id(self) -> UUID | None:
        return self.group.get("id")


class InsightGroup(BaseModel):
    """Named, ordered collection of insights belonging to one app."""

    id: UUID
    title: str
    order: float | None = None
    insights: list[Insight] = []

    class Config:
        populate_by_name = True

    @property
    def sort_key(self) -> float:
        """Ordering key, missing order counts as 0."""
        return self.order or 0


class InsightDefinitionRequestBody(InsightDefinition):
    """Body for creating or updating an insight."""

    id: UUID | None = None
    group_id: UUID = Field(alias="groupID")


class InsightData(BaseModel):
    """One data point of a calculated insight."""

    x_axis_value: str = Field(alias="xAxisValue")
    y_axis_value: str | None = Field(alias="yAxisValue", default=None)

    class Config:
        populate_by_name = True


class InsightCalculationResult(InsightDefinition):
    """Insight definition together with freshly calculated data."""

    id: UUID
    data: list[InsightData] = []
    calculated_at: datetime | None = Field(alias="calculatedAt", default=None)
    calculation_duration: float | None = Field(alias="calculationDuration", default=None)


def to_body(model: BaseModel) -> dict:
    """Serialize a schema for a request body (camelCase, no nulls)."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
