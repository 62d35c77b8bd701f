"""Typed outcomes returned across step boundaries instead of raising."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from booking_core.domain.errors import DomainError

T = TypeVar("T")


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class Outcome(Generic[T]):
    status: OutcomeStatus
    value: T | None = None
    error: DomainError | None = None
    message: str | None = None
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == OutcomeStatus.FAILURE

    @property
    def is_cancelled(self) -> bool:
        return self.status == OutcomeStatus.CANCELLED

    @classmethod
    def success(cls, value: T, from_cache: bool = False) -> "Outcome[T]":
        return cls(status=OutcomeStatus.SUCCESS, value=value, from_cache=from_cache)

    @classmethod
    def failure(cls, error: DomainError, message: str) -> "Outcome[T]":
        return cls(status=OutcomeStatus.FAILURE, error=error, message=message)

    @classmethod
    def cancelled(cls) -> "Outcome[T]":
        return cls(status=OutcomeStatus.CANCELLED)
