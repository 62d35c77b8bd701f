"""Infrastructure services."""

from booking_core.infrastructure.services.transport_security import (
    StaticTransportSecurity,
    UrlTransportSecurity,
)

__all__ = [
    "StaticTransportSecurity",
    "UrlTransportSecurity",
]
