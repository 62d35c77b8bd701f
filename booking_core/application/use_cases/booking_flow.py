"""
Booking flow state machine.

dates -> rooms -> guest-info -> payment -> processing, ending in
`completed` or `abandoned`. The flow is the only writer of its BookingDraft.
"""

import functools
import logging
from dataclasses import dataclass, field
from datetime import date

from booking_core.application.interfaces.clock import Clock
from booking_core.application.rate_limiter import RateLimiter
from booking_core.application.results import Outcome
from booking_core.application.telemetry import (
    BOOKING_ABANDONED,
    BOOKING_COMPLETED,
    BOOKING_ERROR,
    BOOKING_STARTED,
    DATES_SELECTED,
    GUEST_INFO_COMPLETED,
    PAYMENT_SUBMITTED,
    ROOM_SELECTED,
    ErrorTelemetry,
    FunnelAnalytics,
)
from booking_core.application.use_cases.availability_resolver import (
    AvailabilityOutcome,
    AvailabilityResolver,
)
from booking_core.application.use_cases.booking_submission import (
    BookingSubmitter,
    SubmissionOutcome,
)
from booking_core.application.use_cases.payment_coordinator import (
    PaymentConfirmationOutcome,
    PaymentCoordinator,
    PaymentIntentOutcome,
)
from booking_core.application.use_cases.pricing_service import PricingOutcome, PricingService
from booking_core.application.validation import InputValidator
from booking_core.domain.constants import (
    ERROR_MESSAGES,
    GUEST_USER_KEY,
    OUTCOME_ABANDONED,
    OUTCOME_COMPLETED,
)
from booking_core.domain.entities.booking import BookingConfirmation, BookingRequest
from booking_core.domain.entities.booking_draft import BookingDraft, BookingStep
from booking_core.domain.entities.payment import PaymentState
from booking_core.domain.entities.telemetry import ErrorContext
from booking_core.domain.errors import (
    BookingInProgressError,
    CancellationNotAllowedError,
    DomainError,
    InvalidDateRangeError,
    InvalidStepTransitionError,
    NoActiveBookingError,
    RoomNotAvailableError,
    ValidationError,
)
from booking_core.domain.value_objects.stay_dates import dates_are_ordered

logger = logging.getLogger(__name__)


@dataclass
class BookingContext:
    """Collaborators of one booking flow."""

    resolver: AvailabilityResolver
    pricing: PricingService
    payments: PaymentCoordinator
    submitter: BookingSubmitter
    validator: InputValidator
    telemetry: ErrorTelemetry
    analytics: FunnelAnalytics
    clock: Clock
    rate_limiters: dict[str, RateLimiter] = field(default_factory=dict)


def flow_boundary(method):
    """
    Outermost error boundary for async flow operations.

    Domain errors propagate to the caller; anything else is reported as an
    unknown error and returned as a failure outcome.
    """

    @functools.wraps(method)
    async def wrapper(self: "BookingFlow", *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except DomainError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error in booking flow", extra={"action": method.__name__})
            self.context.telemetry.capture_exception(
                exc,
                ErrorContext(
                    component="BookingFlow",
                    step=self.step.value if self.step else None,
                    action=method.__name__,
                    metadata={"kind": "unknown_error"},
                ),
            )
            self.error = ERROR_MESSAGES["UNKNOWN_ERROR"]
            self.error_code = "UNKNOWN_ERROR"
            return Outcome.failure(DomainError(str(exc), "UNKNOWN_ERROR"), self.error)

    return wrapper


class BookingFlow:
    def __init__(self, context: BookingContext) -> None:
        self.context = context
        self.draft: BookingDraft | None = None
        self.outcome: str | None = None
        self.confirmation: BookingConfirmation | None = None
        self.errors: dict[str, str] = {}
        self.error: str | None = None
        self.error_code: str | None = None
        self._started_at: float | None = None

    # === Read-only views ===

    @property
    def step(self) -> BookingStep | None:
        return self.draft.step if self.draft else None

    @property
    def is_loading(self) -> bool:
        return self.context.resolver.is_loading

    @property
    def payment_state(self) -> PaymentState:
        return self.context.payments.state

    @property
    def client_secret(self) -> str | None:
        """Secret the payment UI needs to collect card details."""
        handle = self.context.payments.handle
        return handle.client_secret if handle and self.step == BookingStep.PAYMENT else None

    @property
    def _user_key(self) -> str:
        return (self.draft.user_id if self.draft else None) or GUEST_USER_KEY

    def _require_draft(self, operation: str) -> BookingDraft:
        if self.draft is None:
            raise NoActiveBookingError(operation)
        return self.draft

    def _require_step(self, operation: str, *steps: BookingStep) -> BookingDraft:
        draft = self._require_draft(operation)
        if draft.step not in steps:
            raise InvalidStepTransitionError(draft.step.value, operation)
        return draft

    def _clear_errors(self) -> None:
        self.errors = {}
        self.error = None
        self.error_code = None

    def _set_error(self, outcome: Outcome, component: str) -> None:
        self.error = outcome.message
        self.error_code = outcome.error.code if outcome.error else None
        self.context.analytics.track(
            BOOKING_ERROR,
            {
                "step": self.step.value if self.step else None,
                "errorType": self.error_code,
                "errorMessage": self.error,
                "component": component,
            },
        )

    # === Lifecycle ===

    def start(self, hotel_id: str | int, user_id: str | None = None) -> BookingDraft:
        """
        Opens a new draft, replacing any previous one.

        Raises:
            BookingInProgressError: The current booking is being processed.
        """
        if self.draft is not None and (
            self.draft.step == BookingStep.PROCESSING
            or self.context.payments.state == PaymentState.SUCCEEDED
        ):
            raise BookingInProgressError(self.draft.hotel_id)

        self.context.resolver.clear()
        self.context.payments.reset()
        self.draft = BookingDraft(
            hotel_id=str(hotel_id), user_id=user_id, created_at=self.context.clock.now()
        )
        self.outcome = None
        self.confirmation = None
        self._clear_errors()
        self._started_at = self.context.clock.timestamp()
        self.context.analytics.track(BOOKING_STARTED, {"hotelId": self.draft.hotel_id})
        logger.info("Booking started", extra={"hotel_id": self.draft.hotel_id, "user_id": user_id})
        return self.draft

    def cancel(self) -> None:
        """
        Abandons the booking.

        Raises:
            CancellationNotAllowedError: Payment has been sent for confirmation.
        """
        draft = self._require_draft("cancel booking")
        payment_state = self.context.payments.state
        if draft.step == BookingStep.PROCESSING or payment_state in (
            PaymentState.CONFIRMING,
            PaymentState.SUCCEEDED,
        ):
            raise CancellationNotAllowedError(draft.step.value)

        self.context.resolver.clear()
        self.context.payments.abandon_intent()
        self.context.payments.reset()
        self.context.analytics.track(
            BOOKING_ABANDONED, {"hotelId": draft.hotel_id, "step": draft.step.value}
        )
        logger.info("Booking abandoned", extra={"hotel_id": draft.hotel_id, "step": draft.step.value})
        self.draft = None
        self.outcome = OUTCOME_ABANDONED
        self._clear_errors()

    def dispose(self) -> None:
        self.context.resolver.dispose()

    # === Navigation ===

    def can_proceed_to_next_step(self) -> bool:
        draft = self.draft
        if draft is None:
            return False
        if draft.step == BookingStep.DATES:
            return dates_are_ordered(draft.check_in_date, draft.check_out_date)
        if draft.step == BookingStep.ROOMS:
            return draft.selected_room is not None
        if draft.step == BookingStep.GUEST_INFO:
            return (
                draft.guest_info_present
                and self.context.validator.validate_guest_info(draft.guest_info).valid
            )
        # payment and processing advance internally
        return False

    @flow_boundary
    async def next_step(self) -> bool:
        """Moves forward when the current step is complete; False when it stays."""
        draft = self._require_draft("go to the next step")

        if draft.step in (BookingStep.PAYMENT, BookingStep.PROCESSING):
            raise InvalidStepTransitionError(
                draft.step.value, "go to the next step", "advances automatically"
            )

        if draft.step == BookingStep.GUEST_INFO:
            outcome = await self.submit_guest_info()
            return outcome.ok

        if not self.can_proceed_to_next_step():
            return False

        if draft.step == BookingStep.DATES:
            if not draft.has_current_availability:
                outcome = await self._resolve_availability(draft)
                if not outcome.ok or self.draft is not draft:
                    return False
            if not draft.has_current_availability or not draft.availability.rooms:
                self.error = ERROR_MESSAGES["HOTEL_UNAVAILABLE"]
                self.error_code = "HOTEL_UNAVAILABLE"
                return False
            self._move(draft, BookingStep.ROOMS)
            return True

        # rooms
        if not draft.has_current_pricing:
            outcome = await self._quote(draft)
            if not outcome.ok or not draft.has_current_pricing:
                return False
        self._move(draft, BookingStep.GUEST_INFO)
        return True

    def go_back(self) -> BookingStep:
        """
        Moves one step back, keeping collected data and clearing errors.

        Leaving payment abandons the live payment intent.
        """
        draft = self._require_draft("go back")
        previous = draft.step.previous()
        if previous is None or draft.step == BookingStep.PROCESSING:
            raise InvalidStepTransitionError(draft.step.value, "go back")
        if draft.step == BookingStep.PAYMENT:
            if self.context.payments.state in (PaymentState.CONFIRMING, PaymentState.SUCCEEDED):
                raise InvalidStepTransitionError(
                    draft.step.value, "go back", "payment already confirmed"
                )
            self.context.payments.abandon_intent()

        self._move(draft, previous)
        self._clear_errors()
        return previous

    def _move(self, draft: BookingDraft, step: BookingStep) -> None:
        logger.info(
            "Booking step changed",
            extra={"hotel_id": draft.hotel_id, "from_step": draft.step.value, "to_step": step.value},
        )
        draft.move_to(step)

    # === Dates ===

    @flow_boundary
    async def set_dates(
        self, check_in: date | str | None, check_out: date | str | None
    ) -> AvailabilityOutcome:
        draft = self._require_step("set dates", BookingStep.DATES)
        if isinstance(check_in, str):
            check_in = date.fromisoformat(check_in)
        if isinstance(check_out, str):
            check_out = date.fromisoformat(check_out)

        self.errors.pop("dates", None)
        self.error = None
        self.error_code = None

        if not dates_are_ordered(check_in, check_out):
            draft.clear_dates()
            self.context.resolver.clear()
            error = InvalidDateRangeError("Check-out date must be after check-in date")
            self.errors["dates"] = error.message
            return Outcome.failure(error, error.message)

        changed = draft.set_dates(check_in, check_out)
        if not changed and draft.has_current_availability:
            return Outcome.success(draft.availability, from_cache=True)

        if changed:
            self.context.analytics.track(
                DATES_SELECTED,
                {
                    "checkIn": check_in.isoformat(),
                    "checkOut": check_out.isoformat(),
                    "nights": (check_out - check_in).days,
                },
            )
        return await self._resolve_availability(draft)

    async def _resolve_availability(self, draft: BookingDraft) -> AvailabilityOutcome:
        query = draft.availability_query
        outcome = await self.context.resolver.check_availability(query, self._user_key)
        if self.draft is not draft or outcome.is_cancelled:
            return outcome
        if outcome.ok:
            draft.set_availability(outcome.value)
            if not outcome.value.available or not outcome.value.rooms:
                self.error = ERROR_MESSAGES["HOTEL_UNAVAILABLE"]
                self.error_code = "HOTEL_UNAVAILABLE"
        else:
            self._set_error(outcome, "AvailabilityResolver")
        return outcome

    # === Rooms ===

    @flow_boundary
    async def select_room(self, room_id: str) -> PricingOutcome:
        draft = self._require_step("select a room", BookingStep.ROOMS)
        try:
            room = draft.select_room(room_id)
        except RoomNotAvailableError as exc:
            self.error = exc.message
            self.error_code = exc.code
            return Outcome.failure(exc, exc.message)

        self.error = None
        self.error_code = None
        self.context.analytics.track(
            ROOM_SELECTED, {"roomId": room.id, "price": str(room.base_price)}
        )
        if draft.has_current_pricing:
            return Outcome.success(draft.pricing, from_cache=True)
        return await self._quote(draft)

    async def _quote(self, draft: BookingDraft) -> PricingOutcome:
        room = draft.selected_room
        outcome = await self.context.pricing.get_quote(
            draft.hotel_id, room.id, draft.check_in_date, draft.check_out_date
        )
        if self.draft is not draft:
            return outcome
        if outcome.ok:
            draft.set_pricing(outcome.value)
        else:
            self._set_error(outcome, "PricingService")
        return outcome

    # === Guest info ===

    def update_guest_info(self, **fields) -> None:
        draft = self._require_step("update guest info", BookingStep.GUEST_INFO)
        draft.update_guest_info(**fields)
        for name in fields:
            self.errors.pop(name, None)

    def validate_field(self, field_name: str, value=None) -> str | None:
        """Advisory on-blur check; never gates progression."""
        draft = self._require_draft("validate a field")
        if value is None:
            value = draft.guest_info.get(field_name)
        message = self.context.validator.validate_field(field_name, value, draft.guest_info)
        if message:
            self.errors[field_name] = message
        else:
            self.errors.pop(field_name, None)
        return message

    @flow_boundary
    async def submit_guest_info(self) -> PaymentIntentOutcome:
        """
        Authoritative validation, then payment intent creation.

        Intent failure keeps the flow at guest-info; calling this again retries.
        """
        draft = self._require_step("submit guest info", BookingStep.GUEST_INFO)
        validation = self.context.validator.validate_guest_info(draft.guest_info)
        if not validation.valid:
            self.errors = dict(validation.errors)
            field_name, message = next(iter(validation.errors.items()))
            return Outcome.failure(
                ValidationError(field_name, message), ERROR_MESSAGES["VALIDATION_ERROR"]
            )

        self._clear_errors()
        if not draft.has_current_pricing:
            pricing = await self._quote(draft)
            if not pricing.ok:
                return Outcome.failure(pricing.error, pricing.message)
            if not draft.has_current_pricing:
                return Outcome.cancelled()

        self.context.analytics.track(
            GUEST_INFO_COMPLETED, {"hasAccount": draft.user_id is not None}
        )
        guest = validation.data
        outcome = await self.context.payments.create_intent(
            draft.pricing,
            metadata={
                "hotelId": draft.hotel_id,
                "userId": draft.user_id,
                "guestName": f"{guest.first_name} {guest.last_name}",
                "checkInDate": draft.check_in_date.isoformat(),
                "checkOutDate": draft.check_out_date.isoformat(),
                "roomType": draft.selected_room.name,
            },
        )
        if self.draft is not draft:
            return outcome
        if outcome.ok:
            self._move(draft, BookingStep.PAYMENT)
        else:
            self._set_error(outcome, "PaymentCoordinator")
        return outcome

    # === Payment and submission ===

    @flow_boundary
    async def confirm_payment(
        self, payment_method_token: str | None = None
    ) -> PaymentConfirmationOutcome | SubmissionOutcome:
        """
        Confirms the payment, then submits the booking exactly once.

        Returns the payment outcome on a payment failure, otherwise the
        submission outcome.
        """
        draft = self._require_step("confirm payment", BookingStep.PAYMENT)
        payments = self.context.payments
        if payments.state == PaymentState.SUCCEEDED:
            return await self.retry_submission()

        self._clear_errors()
        self.context.analytics.track(PAYMENT_SUBMITTED, {"paymentMethod": "card"})
        outcome = await payments.confirm(draft.pricing, payment_method_token)
        self.context.analytics.track_payment_success(outcome.ok)
        if not outcome.ok:
            self._set_error(outcome, "PaymentCoordinator")
            return outcome

        self._move(draft, BookingStep.PROCESSING)
        return await self._submit(draft, outcome.value)

    @flow_boundary
    async def retry_payment(self) -> PaymentIntentOutcome:
        """Fresh payment intent after a failed confirmation."""
        draft = self._require_step("retry payment", BookingStep.PAYMENT)
        payments = self.context.payments
        if payments.state in (PaymentState.CONFIRMING, PaymentState.SUCCEEDED):
            raise InvalidStepTransitionError(draft.step.value, "retry payment", "payment confirmed")

        payments.abandon_intent()
        self._clear_errors()
        guest_name = " ".join(
            str(draft.guest_info.get(name) or "") for name in ("first_name", "last_name")
        ).strip()
        outcome = await payments.create_intent(
            draft.pricing,
            metadata={
                "hotelId": draft.hotel_id,
                "userId": draft.user_id,
                "guestName": guest_name,
                "checkInDate": draft.check_in_date.isoformat(),
                "checkOutDate": draft.check_out_date.isoformat(),
                "roomType": draft.selected_room.name,
            },
        )
        if not outcome.ok and self.draft is draft:
            self._set_error(outcome, "PaymentCoordinator")
        return outcome

    @flow_boundary
    async def retry_submission(self) -> SubmissionOutcome:
        """Resubmits with the already confirmed payment."""
        draft = self._require_step("retry booking submission", BookingStep.PAYMENT)
        payments = self.context.payments
        if payments.state != PaymentState.SUCCEEDED or not payments.confirmation_id:
            raise InvalidStepTransitionError(
                draft.step.value, "retry booking submission", "payment not confirmed"
            )
        self._clear_errors()
        self._move(draft, BookingStep.PROCESSING)
        return await self._submit(draft, payments.confirmation_id)

    async def _submit(self, draft: BookingDraft, confirmation_id: str) -> SubmissionOutcome:
        request = BookingRequest(
            hotel_id=draft.hotel_id,
            room_id=draft.selected_room.id,
            check_in=draft.check_in_date,
            check_out=draft.check_out_date,
            guest_info=dict(draft.guest_info),
            payment_confirmation_id=confirmation_id,
            user_id=draft.user_id,
            special_requests=draft.guest_info.get("special_requests"),
        )
        try:
            outcome = await self.context.submitter.submit(request)
        except BaseException:
            # Never leave the draft stuck in processing.
            self._move(draft, BookingStep.PAYMENT)
            raise
        if not outcome.ok:
            self._move(draft, BookingStep.PAYMENT)
            self._set_error(outcome, "BookingSubmitter")
            return outcome

        confirmation = outcome.value
        self.confirmation = confirmation
        self.outcome = OUTCOME_COMPLETED
        self.context.analytics.track(
            BOOKING_COMPLETED,
            {
                "bookingId": confirmation.booking_id,
                "totalPrice": str(draft.pricing.total.amount),
                "currency": draft.pricing.currency,
            },
        )
        if self._started_at is not None:
            self.context.analytics.track_booking_completion_time(
                self.context.clock.timestamp() - self._started_at
            )
        logger.info(
            "Booking completed",
            extra={"hotel_id": draft.hotel_id, "booking_id": confirmation.booking_id},
        )
        self.context.resolver.invalidate_hotel(draft.hotel_id)
        self.context.pricing.invalidate_hotel(draft.hotel_id)
        self.context.resolver.clear()
        self.context.payments.reset()
        self.draft = None
        return outcome
