"""Services package - service class exports."""

from viewer.services.insights import InsightService

__all__ = [
    "InsightService",
]
