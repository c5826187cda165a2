"""Transfer errors raised by the API clients."""

from enum import StrEnum

import httpx


class TransferErrorKind(StrEnum):
    """Where a request went wrong."""

    TRANSFER_FAILED = "transfer_failed"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    DECODE_FAILED = "decode_failed"


class TransferError(Exception):
    """A request could not be completed or its payload could not be decoded."""

    def __init__(self, kind: TransferErrorKind, message: str, status_code: int | None = None):
        self.kind = kind
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.kind} ({self.status_code}): {self.message}"
        return f"{self.kind}: {self.message}"

    @classmethod
    def from_exception(cls, exc: Exception) -> "TransferError":
        """Normalise an httpx or decoding exception."""
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            kind = TransferErrorKind.SERVER_ERROR if status >= 500 else TransferErrorKind.CLIENT_ERROR
            return cls(kind, exc.response.text or exc.response.reason_phrase, status_code=status)
        if isinstance(exc, httpx.HTTPError):
            return cls(TransferErrorKind.TRANSFER_FAILED, str(exc) or exc.__class__.__name__)
        return cls(TransferErrorKind.DECODE_FAILED, str(exc))
