"""In-memory error telemetry and funnel analytics sinks."""

import logging
from collections import Counter
from typing import Any

from booking_core.application.interfaces.clock import Clock, SystemClock
from booking_core.domain.entities.telemetry import (
    ErrorContext,
    ErrorRecord,
    ErrorStats,
    FunnelEvent,
    Severity,
)

logger = logging.getLogger(__name__)
telemetry_logger = logging.getLogger("booking_core.telemetry")

SEVERITY_LOG_LEVELS = {
    Severity.LOW: logging.INFO,
    Severity.MEDIUM: logging.WARNING,
    Severity.HIGH: logging.ERROR,
    Severity.CRITICAL: logging.CRITICAL,
}

# Funnel events
BOOKING_STARTED = "Booking Started"
DATES_SELECTED = "Dates Selected"
ROOM_SELECTED = "Room Selected"
GUEST_INFO_COMPLETED = "Guest Info Completed"
PAYMENT_SUBMITTED = "Payment Submitted"
BOOKING_COMPLETED = "Booking Completed"
BOOKING_ERROR = "Booking Error"
BOOKING_ABANDONED = "Booking Abandoned"


class ErrorTelemetry:
    """
    Append-only error sink with severity taxonomy and aggregate stats.

    Each stored record is mirrored to the `booking_core.telemetry` logger.
    While disabled every write is dropped.
    """

    def __init__(self, clock: Clock | None = None, enabled: bool = True):
        self._clock = clock or SystemClock()
        self._enabled = enabled
        self._records: list[ErrorRecord] = []

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def log_error(
        self,
        error: BaseException,
        context: ErrorContext | None = None,
        severity: Severity = Severity.MEDIUM,
    ) -> ErrorRecord | None:
        if not self._enabled:
            return None

        context = context or ErrorContext()
        severity = Severity(severity)
        metadata = dict(context.metadata)
        for key in ("user_id", "hotel_id", "booking_id"):
            value = getattr(context, key)
            if value is not None:
                metadata.setdefault(key, value)

        record = ErrorRecord(
            error=error,
            component=context.component,
            step=context.step,
            action=context.action,
            severity=severity,
            metadata=metadata,
            timestamp=self._clock.now(),
        )
        self._records.append(record)

        telemetry_logger.log(
            SEVERITY_LOG_LEVELS[severity],
            "%s: %s",
            type(error).__name__,
            error,
            extra={
                "component": record.component,
                "step": record.step,
                "action": record.action,
                "severity": severity.value,
                "metadata": metadata,
            },
        )
        return record

    def capture_exception(
        self, error: BaseException, context: ErrorContext | None = None
    ) -> ErrorRecord | None:
        return self.log_error(error, context, Severity.MEDIUM)

    def capture_message(
        self,
        message: str,
        context: ErrorContext | None = None,
        severity: Severity = Severity.LOW,
    ) -> ErrorRecord | None:
        return self.log_error(Exception(message), context, severity)

    def log_booking_error(
        self,
        error: BaseException,
        step: str,
        component: str,
        metadata: dict[str, Any] | None = None,
    ) -> ErrorRecord | None:
        context = ErrorContext(
            component=component, step=step, action="booking", metadata=metadata or {}
        )
        return self.log_error(error, context, Severity.HIGH)

    def log_payment_error(
        self,
        error: BaseException,
        payment_intent_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ErrorRecord | None:
        context = ErrorContext(
            component="PaymentService",
            step="payment",
            action="process_payment",
            metadata={"payment_intent_id": payment_intent_id, **(metadata or {})},
        )
        return self.log_error(error, context, Severity.CRITICAL)

    def log_api_error(
        self,
        error: BaseException,
        endpoint: str,
        method: str,
        metadata: dict[str, Any] | None = None,
    ) -> ErrorRecord | None:
        context = ErrorContext(
            component="APIService", action=f"{method} {endpoint}", metadata=metadata or {}
        )
        return self.log_error(error, context, Severity.HIGH)

    def get_errors(self) -> list[ErrorRecord]:
        return list(self._records)

    def clear_errors(self) -> None:
        self._records.clear()

    def get_stats(self) -> ErrorStats:
        by_component = Counter(r.component for r in self._records if r.component)
        by_severity = Counter(r.severity.value for r in self._records)
        by_step = Counter(r.step for r in self._records if r.step)
        return ErrorStats(
            total=len(self._records),
            by_component=dict(by_component),
            by_severity=dict(by_severity),
            by_step=dict(by_step),
        )


class FunnelAnalytics:
    """In-memory funnel and performance event log."""

    def __init__(self, clock: Clock | None = None, enabled: bool = True):
        self._clock = clock or SystemClock()
        self._enabled = enabled
        self._events: list[FunnelEvent] = []

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def track(self, event: str, data: dict[str, Any] | None = None) -> None:
        if not self._enabled:
            return
        self._events.append(FunnelEvent(event=event, data=dict(data or {}), timestamp=self._clock.now()))
        logger.debug("Analytics event %s", event, extra={"event": event, "data": data})

    def track_performance(self, metric: str, data: dict[str, Any]) -> None:
        self.track(f"Performance: {metric}", data)

    def track_api_response_time(self, endpoint: str, duration: float) -> None:
        self.track_performance("API Response Time", {"endpoint": endpoint, "duration": duration})

    def track_cache_hit_rate(self, operation: str, hit_rate: float) -> None:
        self.track_performance("Cache Hit Rate", {"operation": operation, "cacheHitRate": hit_rate})

    def track_booking_completion_time(self, duration: float) -> None:
        self.track_performance("Booking Completion Time", {"bookingCompletionTime": duration})

    def track_payment_success(self, success: bool) -> None:
        self.track_performance("Payment Success", {"success": success})

    def get_events(self, event: str | None = None) -> list[FunnelEvent]:
        if event is None:
            return list(self._events)
        return [e for e in self._events if e.event == event]

    def clear_events(self) -> None:
        self._events.clear()
