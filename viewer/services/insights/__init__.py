"""Insight services - cache, fetch coordination, change notifications."""

from viewer.services.insights.events import ChangeEvent, ChangeNotifier, ChangeTopic
from viewer.services.insights.service import InsightService

__all__ = [
    "InsightService",
    "ChangeNotifier",
    "ChangeEvent",
    "ChangeTopic",
]
