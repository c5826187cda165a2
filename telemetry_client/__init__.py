"""Telemetry API client package."""

from telemetry_client.base import BaseClient, url_for_path
from telemetry_client.errors import TransferError, TransferErrorKind
from telemetry_client.insights import InsightClient
from telemetry_client.result import Result

__all__ = [
    # Base
    "BaseClient",
    "url_for_path",
    # Errors
    "TransferError",
    "TransferErrorKind",
    "Result",
    # Clients
    "InsightClient",
]
