from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Cache TTLs
    availability_cache_ttl_seconds: float = 5 * 60
    pricing_cache_ttl_seconds: float = 5 * 60
    booking_detail_cache_ttl_seconds: float = 60 * 60
    cache_max_entries: int = 500

    # Availability debounce and speculative prefetch
    availability_debounce_ms: int = 500
    prefetch_offsets_days: tuple[int, ...] = (1, 7)

    # Provider timeouts
    availability_timeout_seconds: float = 3.0
    pricing_timeout_seconds: float = 2.0
    booking_submission_timeout_seconds: float = 5.0

    # Rate limits (requests per window)
    availability_rate_limit: int = 20
    availability_rate_window_seconds: float = 60
    booking_creation_rate_limit: int = 5
    booking_creation_rate_window_seconds: float = 10 * 60
    booking_modification_rate_limit: int = 3
    booking_modification_rate_window_seconds: float = 60 * 60
    booking_cancellation_rate_limit: int = 3
    booking_cancellation_rate_window_seconds: float = 60 * 60

    # Providers
    use_in_memory: bool = True
    api_base_url: str = "https://localhost/api"
    stripe_api_key: str | None = Field(default=None, alias="STRIPE_SECRET_KEY")

    # Payment security
    require_secure_transport: bool = True
    allow_insecure_localhost: bool = False
    three_d_secure_threshold_minor_units: int = 50000

    # Telemetry
    telemetry_enabled: bool = True
    analytics_enabled: bool = True

    @property
    def availability_debounce_seconds(self) -> float:
        return self.availability_debounce_ms / 1000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
