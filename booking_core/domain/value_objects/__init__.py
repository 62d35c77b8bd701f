"""Domain value objects."""

from booking_core.domain.value_objects.money import Money
from booking_core.domain.value_objects.stay_dates import StayDates, dates_are_ordered

__all__ = [
    "Money",
    "StayDates",
    "dates_are_ordered",
]
