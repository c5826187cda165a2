"""Insight API client - insight groups, insights."""

from telemetry_client.insights.client import InsightClient
from telemetry_client.insights.schemas import (
    Insight,
    InsightCalculationResult,
    InsightData,
    InsightDefinitionRequestBody,
    InsightDisplayMode,
    InsightGroup,
    InsightGroupByInterval,
)

__all__ = [
    "InsightClient",
    "Insight",
    "InsightGroup",
    "InsightDefinitionRequestBody",
    "InsightCalculationResult",
    "InsightData",
    "InsightDisplayMode",
    "InsightGroupByInterval",
]
