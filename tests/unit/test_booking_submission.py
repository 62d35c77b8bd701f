import asyncio
from datetime import date

import pytest

from booking_core.application.interfaces.booking_endpoint import BookingEndpoint
from booking_core.application.rate_limiter import RateLimiter
from booking_core.application.schemas import GuestInfoInput
from booking_core.application.use_cases.booking_submission import BookingSubmitter
from booking_core.application.validation import InputValidator
from booking_core.domain.constants import ERROR_MESSAGES
from booking_core.domain.entities.booking import BookingRequest
from booking_core.infrastructure.cache.memory_cache import InMemoryCache
from tests.factories import VALID_GUEST


def make_request(**overrides) -> BookingRequest:
    fields = {
        "hotel_id": "42",
        "room_id": "deluxe-1",
        "check_in": date(2024, 6, 1),
        "check_out": date(2024, 6, 4),
        "guest_info": dict(VALID_GUEST),
        "payment_confirmation_id": "pi_123",
    }
    fields.update(overrides)
    return BookingRequest(**fields)


class SlowEndpoint(BookingEndpoint):
    async def create_booking(self, **kwargs):
        await asyncio.Event().wait()


@pytest.fixture
def make_submitter(make_cache, telemetry, clock):
    def _make(endpoint, **kwargs) -> BookingSubmitter:
        return BookingSubmitter(
            endpoint=endpoint,
            validator=InputValidator(),
            detail_cache=make_cache("booking_detail", ttl=3600),
            telemetry=telemetry,
            clock=clock,
            **kwargs,
        )

    return _make


async def test_creates_booking(make_submitter, booking_endpoint, clock):
    submitter = make_submitter(booking_endpoint)

    outcome = await submitter.submit(make_request(user_id="user-1"))

    confirmation = outcome.value
    assert outcome.ok
    assert confirmation.booking_id in booking_endpoint.bookings
    assert confirmation.request.payment_confirmation_id == "pi_123"
    assert confirmation.created_at == clock.now()
    stored = booking_endpoint.bookings[confirmation.booking_id]
    assert stored["user_id"] == "user-1"
    assert stored["check_in_date"] == "2024-06-01"


async def test_same_payment_submits_once(make_submitter, booking_endpoint):
    submitter = make_submitter(booking_endpoint)

    first = await submitter.submit(make_request())
    second = await submitter.submit(make_request())

    assert booking_endpoint.calls == 1
    assert second.value.booking_id == first.value.booking_id


async def test_guest_info_is_sanitized(make_submitter, booking_endpoint):
    submitter = make_submitter(booking_endpoint)
    guest = {**VALID_GUEST, "first_name": "ana", "email": "ANA.LEE@EXAMPLE.COM"}

    outcome = await submitter.submit(make_request(guest_info=guest))

    sent = booking_endpoint.bookings[outcome.value.booking_id]["guest_info"]
    assert sent["first_name"] == "Ana"
    assert sent["email"] == "ana.lee@example.com"


async def test_invalid_guest_info_not_sent(make_submitter, booking_endpoint):
    submitter = make_submitter(booking_endpoint)

    outcome = await submitter.submit(make_request(guest_info={**VALID_GUEST, "phone": "12"}))

    assert outcome.is_failure
    assert outcome.message == ERROR_MESSAGES["VALIDATION_ERROR"]
    assert booking_endpoint.calls == 0


async def test_timeout(make_submitter, telemetry):
    submitter = make_submitter(SlowEndpoint(), timeout_seconds=0.01)

    outcome = await submitter.submit(make_request())

    assert outcome.error.code == "PROVIDER_TIMEOUT"
    assert outcome.message == ERROR_MESSAGES["BOOKING_FAILED"]
    assert telemetry.get_errors()[0].step == "processing"


async def test_failed_submission_can_be_retried(make_submitter, booking_endpoint, monkeypatch):
    submitter = make_submitter(booking_endpoint)
    original = booking_endpoint.create_booking
    attempts = []

    async def flaky(**kwargs):
        attempts.append(kwargs["payment_confirmation_id"])
        if len(attempts) == 1:
            raise ConnectionError("reset by peer")
        return await original(**kwargs)

    monkeypatch.setattr(booking_endpoint, "create_booking", flaky)

    first = await submitter.submit(make_request())
    second = await submitter.submit(make_request())

    assert first.error.code == "BOOKING_SUBMISSION_ERROR"
    assert second.ok
    assert attempts == ["pi_123", "pi_123"]


async def test_rate_limited(make_submitter, booking_endpoint, clock):
    limiter = RateLimiter(max_requests=1, window_seconds=600, identifier="booking_creation", clock=clock)
    submitter = make_submitter(booking_endpoint, rate_limiter=limiter)

    await submitter.submit(make_request(payment_confirmation_id="pi_1"))
    outcome = await submitter.submit(make_request(payment_confirmation_id="pi_2"))

    assert outcome.error.code == "RATE_LIMIT_EXCEEDED"
    assert booking_endpoint.calls == 1


async def test_booking_details_cached_for_an_hour(make_submitter, booking_endpoint, clock):
    submitter = make_submitter(booking_endpoint)
    booking_id = (await submitter.submit(make_request())).value.booking_id

    assert submitter.get_cached_booking(booking_id).booking_id == booking_id
    clock.advance(hours=1)
    assert submitter.get_cached_booking(booking_id) is None


class AcceptingValidator(InputValidator):
    """Skips schema checks so only the post-sanitizing check stands."""

    def require_valid_guest_info(self, guest_info):
        return GuestInfoInput.model_construct(**guest_info)


async def test_fields_blanked_by_sanitizing_are_rejected(make_cache, booking_endpoint, telemetry):
    submitter = BookingSubmitter(
        endpoint=booking_endpoint,
        validator=AcceptingValidator(),
        detail_cache=make_cache("booking_detail", ttl=3600),
        telemetry=telemetry,
    )

    outcome = await submitter.submit(
        make_request(guest_info={**VALID_GUEST, "email": "o'neil@example.com"})
    )

    assert outcome.is_failure
    assert outcome.message == ERROR_MESSAGES["VALIDATION_ERROR"]
    assert outcome.error.field == "email"
    assert booking_endpoint.calls == 0


async def test_unsendable_email_rejected_by_validation(make_submitter, booking_endpoint):
    submitter = make_submitter(booking_endpoint)

    outcome = await submitter.submit(
        make_request(guest_info={**VALID_GUEST, "email": "o'neil@example.com"})
    )

    assert outcome.error.code == "VALIDATION_ERROR"
    assert booking_endpoint.calls == 0


async def test_tracks_endpoint_response_time(make_submitter, booking_endpoint, analytics):
    submitter = make_submitter(booking_endpoint, analytics=analytics)

    await submitter.submit(make_request())

    [timing] = analytics.get_events("Performance: API Response Time")
    assert timing.data["endpoint"] == "booking"


async def test_detail_cache_stays_bounded(booking_endpoint, clock):
    submitter = BookingSubmitter(
        endpoint=booking_endpoint,
        validator=InputValidator(),
        detail_cache=InMemoryCache(name="booking_detail", clock=clock, max_size=2),
        clock=clock,
    )

    first = await submitter.submit(make_request(payment_confirmation_id="pi_1"))
    again = await submitter.submit(make_request(payment_confirmation_id="pi_1"))
    await submitter.submit(make_request(payment_confirmation_id="pi_2"))

    assert again.value.booking_id == first.value.booking_id
    assert booking_endpoint.calls == 2
    assert submitter.get_cached_booking(first.value.booking_id) is None
