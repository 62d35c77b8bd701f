from datetime import date
from decimal import Decimal

import pytest

from booking_core.domain.entities.availability import AvailabilityQuery, AvailabilityResult
from booking_core.domain.entities.booking_draft import BookingDraft, BookingStep
from booking_core.domain.errors import (
    InvalidDateRangeError,
    InvalidMoneyError,
    RoomNotAvailableError,
)
from booking_core.domain.value_objects.money import Money
from booking_core.domain.value_objects.stay_dates import StayDates, dates_are_ordered
from booking_core.infrastructure.in_memory import DEFAULT_ROOMS
from tests.factories import make_quote

JUNE_1 = date(2024, 6, 1)
JUNE_4 = date(2024, 6, 4)


class TestDatesAreOrdered:
    def test_checkout_after_checkin(self):
        assert dates_are_ordered(JUNE_1, JUNE_4)

    def test_same_day_is_not_a_stay(self):
        assert not dates_are_ordered(JUNE_1, JUNE_1)

    def test_reversed(self):
        assert not dates_are_ordered(JUNE_4, JUNE_1)

    @pytest.mark.parametrize("check_in,check_out", [(None, JUNE_4), (JUNE_1, None), (None, None)])
    def test_missing_date(self, check_in, check_out):
        assert not dates_are_ordered(check_in, check_out)


class TestStayDates:
    def test_nights(self):
        assert StayDates(JUNE_1, JUNE_4).nights == 3

    def test_rejects_equal_dates(self):
        with pytest.raises(InvalidDateRangeError):
            StayDates(JUNE_1, JUNE_1)

    def test_shifted_keeps_length(self):
        shifted = StayDates(JUNE_1, JUNE_4).shifted(7)
        assert shifted.check_in == date(2024, 6, 8)
        assert shifted.nights == 3

    def test_parse_iso_strings(self):
        assert StayDates.parse("2024-06-01", "2024-06-04") == StayDates(JUNE_1, JUNE_4)


class TestMoney:
    def test_minor_units(self):
        assert Money(Decimal("450.00"), "usd").to_minor_units() == 45000
        assert Money(Decimal("0.005"), "USD").to_minor_units() == 1

    def test_currency_is_upper_cased(self):
        assert Money(Decimal("1"), "usd").currency_code == "USD"

    def test_negative_rejected(self):
        with pytest.raises(InvalidMoneyError):
            Money(Decimal("-1"), "USD")

    def test_add_different_currencies(self):
        with pytest.raises(InvalidMoneyError):
            Money(Decimal("1"), "USD") + Money(Decimal("1"), "EUR")

    def test_from_minor_units(self):
        assert Money.from_minor_units(45000, "USD").amount == Decimal("450")


class TestAvailabilityQuery:
    def test_cache_key_is_exact_triple(self):
        query = AvailabilityQuery(hotel_id=42, check_in=JUNE_1, check_out=JUNE_4)
        assert query.cache_key == "availability:42:2024-06-01:2024-06-04"

    def test_result_matches_only_its_query(self):
        query = AvailabilityQuery("42", JUNE_1, JUNE_4)
        result = AvailabilityResult(query=query, available=True, rooms=DEFAULT_ROOMS)
        assert result.matches(AvailabilityQuery("42", JUNE_1, JUNE_4))
        assert not result.matches(query.shifted(1))
        assert not result.matches(AvailabilityQuery("43", JUNE_1, JUNE_4))


class TestBookingDraft:
    def _draft_with_availability(self) -> BookingDraft:
        draft = BookingDraft(hotel_id="42")
        draft.set_dates(JUNE_1, JUNE_4)
        draft.set_availability(
            AvailabilityResult(query=draft.availability_query, available=True, rooms=DEFAULT_ROOMS)
        )
        return draft

    def test_starts_at_dates(self):
        assert BookingDraft(hotel_id=42).step == BookingStep.DATES

    def test_changing_dates_drops_room_and_quote(self):
        draft = self._draft_with_availability()
        draft.select_room("deluxe-1")
        draft.set_pricing(make_quote())

        assert draft.set_dates(JUNE_1, date(2024, 6, 5))
        assert draft.selected_room is None
        assert draft.pricing is None
        assert draft.availability is None

    def test_same_dates_are_not_a_change(self):
        draft = self._draft_with_availability()
        assert not draft.set_dates(JUNE_1, JUNE_4)
        assert draft.has_current_availability

    def test_stale_availability_is_ignored(self):
        draft = self._draft_with_availability()
        stale = AvailabilityResult(
            query=AvailabilityQuery("42", date(2024, 7, 1), date(2024, 7, 2)), available=True
        )
        assert not draft.set_availability(stale)

    def test_select_unknown_room(self):
        draft = self._draft_with_availability()
        with pytest.raises(RoomNotAvailableError):
            draft.select_room("penthouse")

    def test_select_room_without_availability(self):
        draft = BookingDraft(hotel_id="42")
        with pytest.raises(RoomNotAvailableError):
            draft.select_room("deluxe-1")

    def test_quote_for_other_room_is_dropped(self):
        draft = self._draft_with_availability()
        draft.select_room("standard-1")
        assert not draft.set_pricing(make_quote(room_id="deluxe-1"))
        assert draft.pricing is None

    def test_clear_dates(self):
        draft = self._draft_with_availability()
        draft.select_room("deluxe-1")
        draft.clear_dates()
        assert draft.check_in_date is None
        assert draft.selected_room is None
        assert not draft.has_current_availability

    def test_step_order(self):
        assert BookingStep.DATES.next() == BookingStep.ROOMS
        assert BookingStep.PAYMENT.previous() == BookingStep.GUEST_INFO
        assert BookingStep.DATES.previous() is None
        assert BookingStep.PROCESSING.next() is None
