"""
Application layer.

Use cases, ports and the cross-cutting helpers they share.

Structure:
- use_cases/: Resolver, pricing, payment coordinator, submission and the flow state machine
- interfaces/: Ports (contracts for adapters)
- schemas.py: Pydantic schema for guest-info validation
"""

from booking_core.application.cancellation import CancellationToken, OperationCancelled
from booking_core.application.rate_limiter import (
    RateLimiter,
    RateLimitResult,
    enforce_rate_limit,
)
from booking_core.application.results import Outcome, OutcomeStatus
from booking_core.application.schemas import GuestInfoInput
from booking_core.application.telemetry import ErrorTelemetry, FunnelAnalytics
from booking_core.application.validation import GuestInfoValidation, InputValidator

__all__ = [
    "CancellationToken",
    "OperationCancelled",
    "RateLimiter",
    "RateLimitResult",
    "enforce_rate_limit",
    "Outcome",
    "OutcomeStatus",
    "GuestInfoInput",
    "ErrorTelemetry",
    "FunnelAnalytics",
    "GuestInfoValidation",
    "InputValidator",
]
