import asyncio
import logging

from booking_core.application.interfaces.booking_endpoint import BookingEndpoint
from booking_core.application.interfaces.cache import CachePort
from booking_core.application.interfaces.clock import Clock, SystemClock
from booking_core.application.rate_limiter import RateLimiter, enforce_rate_limit
from booking_core.application.results import Outcome
from booking_core.application.sanitization import sanitize_guest_info
from booking_core.application.schemas import FIELD_LABELS
from booking_core.application.telemetry import ErrorTelemetry, FunnelAnalytics
from booking_core.application.validation import InputValidator
from booking_core.domain.constants import ERROR_MESSAGES, GUEST_USER_KEY
from booking_core.domain.entities.booking import BookingConfirmation, BookingRequest
from booking_core.domain.errors import (
    BookingSubmissionError,
    DomainError,
    ProviderTimeoutError,
    RateLimitExceededError,
    ValidationError,
)

SubmissionOutcome = Outcome[BookingConfirmation]

DEFAULT_TIMEOUT_SECONDS = 5.0

REQUIRED_GUEST_FIELDS = ("first_name", "last_name", "email", "phone")


def booking_cache_key(booking_id: str) -> str:
    return f"booking:{booking_id}"


def payment_booking_cache_key(payment_confirmation_id: str) -> str:
    return f"booking-by-payment:{payment_confirmation_id}"


def require_sanitized_fields(guest_info: dict) -> None:
    """
    Raises:
        ValidationError: A required field came out of sanitizing empty.
    """
    for name in REQUIRED_GUEST_FIELDS:
        if not guest_info.get(name):
            raise ValidationError(field=name, message=f"{FIELD_LABELS[name]} is required")


class BookingSubmitter:
    """
    Sends the final booking request once per confirmed payment.

    A successful confirmation is remembered by payment confirmation id for as
    long as booking details are cached, so resubmitting the same payment
    returns the stored booking instead of creating a second one.
    """

    def __init__(
        self,
        endpoint: BookingEndpoint,
        validator: InputValidator,
        detail_cache: CachePort[BookingConfirmation],
        telemetry: ErrorTelemetry | None = None,
        rate_limiter: RateLimiter | None = None,
        clock: Clock | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        detail_cache_ttl_seconds: float | None = None,
        analytics: FunnelAnalytics | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._validator = validator
        self._detail_cache = detail_cache
        self._telemetry = telemetry
        self._rate_limiter = rate_limiter
        self._clock = clock or SystemClock()
        self._timeout_seconds = timeout_seconds
        self._detail_cache_ttl_seconds = detail_cache_ttl_seconds
        self._analytics = analytics
        self._logger = logging.getLogger(__name__)

    async def submit(self, request: BookingRequest) -> SubmissionOutcome:
        existing = self._detail_cache.get(payment_booking_cache_key(request.payment_confirmation_id))
        if existing is not None:
            self._logger.info(
                "Booking already created for payment",
                extra={
                    "payment_confirmation_id": request.payment_confirmation_id,
                    "booking_id": existing.booking_id,
                },
            )
            return Outcome.success(existing)

        try:
            guest = self._validator.require_valid_guest_info(request.guest_info)
            guest_info = sanitize_guest_info(guest.model_dump())
            require_sanitized_fields(guest_info)
            if self._rate_limiter is not None:
                enforce_rate_limit(self._rate_limiter, request.user_id or GUEST_USER_KEY)
            result = await self._create_booking(request, guest_info)
        except ValidationError as exc:
            self._logger.warning(
                "Booking request rejected",
                extra={
                    "payment_confirmation_id": request.payment_confirmation_id,
                    "field": exc.field,
                },
            )
            return Outcome.failure(exc, ERROR_MESSAGES["VALIDATION_ERROR"])
        except RateLimitExceededError as exc:
            return Outcome.failure(exc, exc.message)
        except DomainError as exc:
            self._logger.error(
                "Booking submission failed",
                extra={
                    "hotel_id": request.hotel_id,
                    "payment_confirmation_id": request.payment_confirmation_id,
                    "error_code": exc.code,
                },
            )
            if self._telemetry is not None:
                self._telemetry.log_booking_error(
                    exc,
                    step="processing",
                    component="BookingSubmitter",
                    metadata={
                        "hotel_id": request.hotel_id,
                        "room_id": request.room_id,
                        "payment_confirmation_id": request.payment_confirmation_id,
                    },
                )
            return Outcome.failure(exc, ERROR_MESSAGES["BOOKING_FAILED"])

        confirmation = BookingConfirmation(
            booking_id=result.booking_id,
            request=BookingRequest(
                hotel_id=request.hotel_id,
                room_id=request.room_id,
                check_in=request.check_in,
                check_out=request.check_out,
                guest_info=guest_info,
                payment_confirmation_id=request.payment_confirmation_id,
                user_id=request.user_id,
                special_requests=guest_info.get("special_requests") or None,
            ),
            status=result.status,
            reference_number=result.reference_number,
            created_at=self._clock.now(),
            payload=result.payload or {},
        )
        self._detail_cache.set(
            payment_booking_cache_key(request.payment_confirmation_id),
            confirmation,
            self._detail_cache_ttl_seconds,
        )
        self._detail_cache.set(
            booking_cache_key(confirmation.booking_id),
            confirmation,
            self._detail_cache_ttl_seconds,
        )
        self._logger.info(
            "Booking created",
            extra={
                "booking_id": confirmation.booking_id,
                "hotel_id": request.hotel_id,
                "payment_confirmation_id": request.payment_confirmation_id,
            },
        )
        return Outcome.success(confirmation)

    async def _create_booking(self, request: BookingRequest, guest_info: dict):
        started = self._clock.timestamp()
        try:
            return await asyncio.wait_for(
                self._endpoint.create_booking(
                    hotel_id=request.hotel_id,
                    room_id=request.room_id,
                    check_in_date=request.check_in.isoformat(),
                    check_out_date=request.check_out.isoformat(),
                    guest_info=guest_info,
                    payment_confirmation_id=request.payment_confirmation_id,
                    user_id=request.user_id,
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError("booking", self._timeout_seconds) from exc
        except DomainError:
            raise
        except Exception as exc:
            raise BookingSubmissionError(str(exc) or type(exc).__name__) from exc
        finally:
            if self._analytics is not None:
                self._analytics.track_api_response_time(
                    "booking", self._clock.timestamp() - started
                )

    def get_cached_booking(self, booking_id: str) -> BookingConfirmation | None:
        """Booking details for up to an hour after creation."""
        return self._detail_cache.get(booking_cache_key(booking_id))
