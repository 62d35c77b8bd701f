"""BookingDraft entity - the single in-progress booking transaction."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any

from booking_core.domain.entities.availability import (
    AvailabilityQuery,
    AvailabilityResult,
    RoomOption,
)
from booking_core.domain.entities.pricing import PricingQuote
from booking_core.domain.errors import InvalidDateRangeError, RoomNotAvailableError
from booking_core.domain.value_objects.stay_dates import StayDates, dates_are_ordered


class BookingStep(str, Enum):
    """Flow steps, in fixed order."""

    DATES = "dates"
    ROOMS = "rooms"
    GUEST_INFO = "guest-info"
    PAYMENT = "payment"
    PROCESSING = "processing"

    @property
    def index(self) -> int:
        return STEP_ORDER.index(self)

    def next(self) -> "BookingStep | None":
        position = self.index + 1
        return STEP_ORDER[position] if position < len(STEP_ORDER) else None

    def previous(self) -> "BookingStep | None":
        return STEP_ORDER[self.index - 1] if self.index > 0 else None


STEP_ORDER = (
    BookingStep.DATES,
    BookingStep.ROOMS,
    BookingStep.GUEST_INFO,
    BookingStep.PAYMENT,
    BookingStep.PROCESSING,
)

REQUIRED_GUEST_FIELDS = ("first_name", "last_name", "email", "phone", "country")


@dataclass
class BookingDraft:
    """
    Mutable in-progress booking.

    Mutated only through the flow state machine; every setter keeps the
    derived data (room, quote) consistent with the data it depends on.
    """

    hotel_id: str
    user_id: str | None = None
    step: BookingStep = BookingStep.DATES
    created_at: datetime | None = None

    check_in_date: date | None = None
    check_out_date: date | None = None
    selected_room: RoomOption | None = None
    guest_info: dict[str, Any] = field(default_factory=dict)

    availability: AvailabilityResult | None = None
    pricing: PricingQuote | None = None

    def __post_init__(self) -> None:
        self.hotel_id = str(self.hotel_id)

    # === Derived properties ===

    @property
    def dates_complete(self) -> bool:
        return dates_are_ordered(self.check_in_date, self.check_out_date)

    @property
    def stay(self) -> StayDates | None:
        if self.dates_complete:
            return StayDates(check_in=self.check_in_date, check_out=self.check_out_date)
        return None

    @property
    def availability_query(self) -> AvailabilityQuery | None:
        if not self.dates_complete:
            return None
        return AvailabilityQuery(
            hotel_id=self.hotel_id,
            check_in=self.check_in_date,
            check_out=self.check_out_date,
        )

    @property
    def has_current_availability(self) -> bool:
        query = self.availability_query
        return (
            query is not None
            and self.availability is not None
            and self.availability.matches(query)
        )

    @property
    def has_current_pricing(self) -> bool:
        return self.pricing is not None and self.pricing.applies_to(
            self.selected_room.id if self.selected_room else None,
            self.check_in_date,
            self.check_out_date,
        )

    @property
    def guest_info_present(self) -> bool:
        return all(str(self.guest_info.get(name) or "").strip() for name in REQUIRED_GUEST_FIELDS)

    # === Mutations ===

    def clear_dates(self) -> None:
        """Forgets the dates and everything derived from them."""
        self.check_in_date = None
        self.check_out_date = None
        self.selected_room = None
        self.pricing = None
        self.availability = None

    def set_dates(self, check_in: date, check_out: date) -> bool:
        """
        Set the stay dates.

        Returns True when the dates changed. Changing dates drops the room
        selection, the quote and any availability for the old dates.
        """
        if not dates_are_ordered(check_in, check_out):
            raise InvalidDateRangeError(
                f"check_out must be after check_in: {check_in} >= {check_out}"
            )
        if (check_in, check_out) == (self.check_in_date, self.check_out_date):
            return False
        self.check_in_date = check_in
        self.check_out_date = check_out
        self.selected_room = None
        self.pricing = None
        if self.availability is not None and not self.has_current_availability:
            self.availability = None
        return True

    def set_availability(self, result: AvailabilityResult) -> bool:
        """Apply a resolver result; ignored unless it matches the current dates."""
        query = self.availability_query
        if query is None or not result.matches(query):
            return False
        self.availability = result
        return True

    def select_room(self, room_id: str) -> RoomOption:
        if not self.has_current_availability:
            raise RoomNotAvailableError(room_id)
        room = self.availability.find_room(room_id)
        if room is None:
            raise RoomNotAvailableError(room_id)
        if self.selected_room is None or self.selected_room.id != room.id:
            self.pricing = None
        self.selected_room = room
        return room

    def set_pricing(self, quote: PricingQuote) -> bool:
        """Apply a quote; stale quotes for another room or dates are dropped."""
        if self.selected_room is None:
            return False
        if not quote.applies_to(self.selected_room.id, self.check_in_date, self.check_out_date):
            return False
        self.pricing = quote
        return True

    def update_guest_info(self, **fields: Any) -> None:
        self.guest_info = {**self.guest_info, **fields}

    def move_to(self, step: BookingStep) -> None:
        self.step = step
