import json
import logging
from typing import Any

import httpx
from pybreaker import CircuitBreaker, CircuitBreakerError

from booking_core.application.telemetry import ErrorTelemetry
from booking_core.domain.errors import DomainError, ProviderError, ProviderTimeoutError
from booking_core.infrastructure.circuit_breaker import call_with_breaker

logger = logging.getLogger(__name__)


def _report(
    telemetry: ErrorTelemetry | None, error: DomainError, method: str, url: str, provider: str
) -> DomainError:
    if telemetry is not None:
        telemetry.log_api_error(
            error,
            endpoint=url,
            method=method,
            metadata={"provider": provider, "error_code": error.code},
        )
    return error


async def request_json(
    breaker: CircuitBreaker,
    provider: str,
    method: str,
    url: str,
    timeout_seconds: float,
    telemetry: ErrorTelemetry | None = None,
    **kwargs: Any,
) -> Any:
    """
    Sends one JSON request under `breaker` and returns the decoded body.

    Non-2xx responses count as breaker failures. Every failure is written to
    `telemetry` as an API error before it is raised.

    Raises:
        ProviderTimeoutError: The request exceeded `timeout_seconds`.
        ProviderError: Circuit open, transport failure, non-2xx or invalid JSON.
    """

    async def _make_request() -> httpx.Response:
        async with httpx.AsyncClient(timeout=timeout_seconds) as client:
            response = await client.request(method, url, **kwargs)
            response.raise_for_status()
            return response

    try:
        response = await call_with_breaker(breaker, _make_request)
    except CircuitBreakerError as exc:
        logger.error(
            "Circuit breaker is open - service unavailable",
            extra={"provider": provider, "circuit_state": str(exc)},
        )
        raise _report(
            telemetry,
            ProviderError(
                provider,
                f"{provider} service temporarily unavailable (circuit breaker open)",
                code="CIRCUIT_OPEN",
            ),
            method,
            url,
            provider,
        ) from exc
    except httpx.TimeoutException as exc:
        logger.warning("Provider request timeout", extra={"provider": provider, "url": url})
        raise _report(
            telemetry, ProviderTimeoutError(provider, timeout_seconds), method, url, provider
        ) from exc
    except httpx.HTTPStatusError as exc:
        logger.error(
            "Provider returned an error status",
            extra={"provider": provider, "url": url, "http_status": exc.response.status_code},
        )
        raise _report(
            telemetry,
            ProviderError(
                provider,
                f"{provider} returned HTTP {exc.response.status_code}",
                code="NON_2XX",
            ),
            method,
            url,
            provider,
        ) from exc
    except httpx.HTTPError as exc:
        logger.error("Provider HTTP error", exc_info=exc, extra={"provider": provider, "url": url})
        raise _report(
            telemetry,
            ProviderError(provider, str(exc) or type(exc).__name__, code="HTTP_ERROR"),
            method,
            url,
            provider,
        ) from exc

    try:
        return response.json()
    except json.JSONDecodeError as exc:
        raise _report(
            telemetry,
            ProviderError(provider, f"{provider} returned invalid JSON", code="INVALID_RESPONSE"),
            method,
            url,
            provider,
        ) from exc
