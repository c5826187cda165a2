"""Outcome of a gateway call, handed to completion callbacks."""

from dataclasses import dataclass
from typing import Generic, TypeVar

from telemetry_client.errors import TransferError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a decoded value or the error that replaced it."""

    value: T | None = None
    error: TransferError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: TransferError) -> "Result[T]":
        return cls(error=error)
