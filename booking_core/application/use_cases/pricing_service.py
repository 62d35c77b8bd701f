import asyncio
import logging
from datetime import date

from booking_core.application.interfaces.cache import CachePort
from booking_core.application.interfaces.clock import Clock, SystemClock
from booking_core.application.interfaces.pricing_provider import PricingProvider
from booking_core.application.results import Outcome
from booking_core.application.telemetry import ErrorTelemetry, FunnelAnalytics
from booking_core.domain.constants import ERROR_MESSAGES
from booking_core.domain.entities.pricing import PriceLine, PricingQuote
from booking_core.domain.errors import DomainError, PricingError, ProviderTimeoutError
from booking_core.domain.value_objects.money import Money

PricingOutcome = Outcome[PricingQuote]

DEFAULT_TIMEOUT_SECONDS = 2.0


def pricing_cache_prefix(hotel_id: str) -> str:
    return f"pricing:{hotel_id}:"


def pricing_cache_key(hotel_id: str, room_id: str, check_in: date, check_out: date) -> str:
    return f"{pricing_cache_prefix(hotel_id)}{room_id}:{check_in.isoformat()}:{check_out.isoformat()}"


class PricingService:
    """Quotes a committed room and date range, cached per exact key."""

    def __init__(
        self,
        provider: PricingProvider,
        cache: CachePort[PricingQuote],
        telemetry: ErrorTelemetry | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        cache_ttl_seconds: float | None = None,
        analytics: FunnelAnalytics | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._provider = provider
        self._cache = cache
        self._telemetry = telemetry
        self._timeout_seconds = timeout_seconds
        self._cache_ttl_seconds = cache_ttl_seconds
        self._analytics = analytics
        self._clock = clock or SystemClock()
        self._logger = logging.getLogger(__name__)

    async def get_quote(
        self, hotel_id: str, room_id: str, check_in: date, check_out: date
    ) -> PricingOutcome:
        key = pricing_cache_key(hotel_id, room_id, check_in, check_out)
        cached = self._cache.get(key)
        if self._analytics is not None:
            self._analytics.track_cache_hit_rate("pricing", self._cache.stats()["hit_rate_percent"])
        if cached is not None:
            return Outcome.success(cached, from_cache=True)

        try:
            quote = await self._fetch(hotel_id, room_id, check_in, check_out)
        except DomainError as exc:
            self._logger.warning(
                "Pricing failed",
                extra={"hotel_id": hotel_id, "room_id": room_id, "error_code": exc.code},
            )
            if self._telemetry is not None:
                self._telemetry.log_booking_error(
                    exc,
                    step="rooms",
                    component="PricingService",
                    metadata={"hotel_id": hotel_id, "room_id": room_id},
                )
            return Outcome.failure(exc, ERROR_MESSAGES["PRICING_FAILED"])

        self._cache.set(key, quote, self._cache_ttl_seconds)
        return Outcome.success(quote)

    async def _fetch(
        self, hotel_id: str, room_id: str, check_in: date, check_out: date
    ) -> PricingQuote:
        started = self._clock.timestamp()
        try:
            response = await asyncio.wait_for(
                self._provider.get_pricing(
                    hotel_id=hotel_id,
                    room_id=room_id,
                    check_in_date=check_in.isoformat(),
                    check_out_date=check_out.isoformat(),
                ),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise ProviderTimeoutError("pricing", self._timeout_seconds) from exc
        except DomainError:
            raise
        except Exception as exc:
            raise PricingError(str(exc) or type(exc).__name__) from exc
        finally:
            if self._analytics is not None:
                self._analytics.track_api_response_time(
                    "pricing", self._clock.timestamp() - started
                )

        currency = response.currency
        subtotal = Money(response.subtotal, currency)
        taxes = Money(response.taxes, currency)
        fees = Money(response.fees, currency)
        total = Money(response.total, currency)
        breakdown = [PriceLine("Subtotal", subtotal), PriceLine("Taxes", taxes)]
        if not fees.is_zero():
            breakdown.append(PriceLine("Fees", fees))

        return PricingQuote(
            hotel_id=hotel_id,
            room_id=room_id,
            check_in=check_in,
            check_out=check_out,
            subtotal=subtotal,
            taxes=taxes,
            total=total,
            fees=fees if not fees.is_zero() else None,
            breakdown=tuple(breakdown),
        )

    def invalidate_hotel(self, hotel_id: str) -> int:
        """Drops every cached quote for `hotel_id`."""
        removed = self._cache.invalidate_prefix(pricing_cache_prefix(hotel_id))
        self._logger.info(
            "Pricing cache invalidated",
            extra={"hotel_id": hotel_id, "entries_removed": removed},
        )
        return removed
