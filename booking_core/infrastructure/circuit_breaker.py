"""
Circuit Breaker configuration for external provider calls.

One breaker per provider class (availability, pricing, booking, payment)
so a failing provider fails fast without taking the others down.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, limited requests allowed

Configuration:
- fail_max: Number of consecutive failures before opening circuit
- reset_timeout: Seconds to wait before attempting recovery (HALF_OPEN)
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, TypeVar

from pybreaker import STATE_OPEN, CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)

T = TypeVar("T")

FAIL_MAX = 5
RESET_TIMEOUT_SECONDS = 60


def log_circuit_state_change(breaker_name: str, old_state: str, new_state: str) -> None:
    logger.warning(
        "Circuit breaker state changed",
        extra={
            "breaker_name": breaker_name,
            "old_state": old_state,
            "new_state": new_state,
        },
    )


class BreakerStateListener(CircuitBreakerListener):
    """Logs circuit breaker state changes."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        log_circuit_state_change(
            self.name,
            getattr(old_state, "name", str(old_state)),
            getattr(new_state, "name", str(new_state)),
        )


def _build_breaker(name: str) -> CircuitBreaker:
    return CircuitBreaker(
        fail_max=FAIL_MAX,
        reset_timeout=RESET_TIMEOUT_SECONDS,
        name=f"{name}_circuit_breaker",
        listeners=[BreakerStateListener(name)],
    )


availability_breaker = _build_breaker("availability")
pricing_breaker = _build_breaker("pricing")
booking_breaker = _build_breaker("booking")
payment_breaker = _build_breaker("payment")

ALL_BREAKERS = (availability_breaker, pricing_breaker, booking_breaker, payment_breaker)


def _passthrough(value: Any) -> Any:
    return value


def _reraise(exc: Exception) -> None:
    raise exc


def _admit(breaker: CircuitBreaker) -> None:
    """
    Lets a call through an OPEN breaker only once its reset timeout has passed.

    The breaker is then moved to HALF_OPEN, so the awaited call itself is the
    trial that closes or reopens it.

    Raises:
        CircuitBreakerError: The reset timeout has not elapsed yet.
    """
    if breaker.current_state != STATE_OPEN:
        return

    opened_at = breaker._state_storage.opened_at
    if opened_at is not None:
        now = datetime.now(timezone.utc)
        if opened_at.tzinfo is None:
            now = now.replace(tzinfo=None)
        if now < opened_at + timedelta(seconds=breaker.reset_timeout):
            raise CircuitBreakerError("Timeout not elapsed yet, circuit breaker still open")
    breaker.half_open()


async def call_with_breaker(
    breaker: CircuitBreaker,
    func: Callable[..., Awaitable[T]],
    *args: Any,
    **kwargs: Any,
) -> T:
    """
    Await `func` under `breaker`.

    pybreaker only tracks synchronous callables, so the outcome of the
    awaited call is replayed through `breaker.call` for bookkeeping. While
    HALF_OPEN that replay is the single trial: a failure reopens the circuit.

    Raises:
        CircuitBreakerError: The circuit is open, or this failure opened it.
    """
    _admit(breaker)

    try:
        result = await func(*args, **kwargs)
    except Exception as exc:
        breaker.call(_reraise, exc)
        raise
    return breaker.call(_passthrough, result)


def reset_all_breakers() -> None:
    for breaker in ALL_BREAKERS:
        breaker.close()


__all__ = [
    "availability_breaker",
    "pricing_breaker",
    "booking_breaker",
    "payment_breaker",
    "call_with_breaker",
    "reset_all_breakers",
    "CircuitBreakerError",
]
