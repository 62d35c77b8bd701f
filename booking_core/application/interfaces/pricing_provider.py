from dataclasses import dataclass
from decimal import Decimal


@dataclass
class PricingResponse:
    subtotal: Decimal
    taxes: Decimal
    total: Decimal
    currency: str
    fees: Decimal = Decimal("0")


class PricingProvider:
    async def get_pricing(
        self,
        hotel_id: str,
        room_id: str,
        check_in_date: str,
        check_out_date: str,
    ) -> PricingResponse:
        raise NotImplementedError
