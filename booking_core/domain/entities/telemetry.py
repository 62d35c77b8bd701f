"""Telemetry records: error log entries and funnel events."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ErrorContext:
    component: str | None = None
    step: str | None = None
    action: str | None = None
    user_id: str | None = None
    hotel_id: str | None = None
    booking_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ErrorRecord:
    error: BaseException
    component: str | None
    step: str | None
    action: str | None
    severity: Severity
    metadata: dict[str, Any]
    timestamp: datetime


@dataclass(frozen=True)
class ErrorStats:
    total: int
    by_component: dict[str, int]
    by_severity: dict[str, int]
    by_step: dict[str, int]


@dataclass(frozen=True)
class FunnelEvent:
    event: str
    data: dict[str, Any]
    timestamp: datetime
