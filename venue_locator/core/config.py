"""Application configuration."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "Venue Locator"
    version: str = "0.1.0"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Geocoding Settings
    GEOCODING_PROVIDERS: list[str] = Field(
        default=["google", "arcgis", "nominatim"],
        description="Reverse geocoding providers in priority order",
    )
    GEOCODING_TIMEOUT: float = Field(
        default=10.0, gt=0
    )  # Per-provider timeout in seconds
    GOOGLE_MAPS_API_KEY: str | None = None
    ARCGIS_RATE_LIMIT: float = Field(default=0.5, ge=0)
    NOMINATIM_USER_AGENT: str = "venue-locator"
    NOMINATIM_RATE_LIMIT: float = Field(default=1.1, ge=0)  # 1 req/s policy
    GEOCODING_LANGUAGE: str = "en"

    # Acquisition Settings
    ACQUISITION_MAX_ATTEMPTS: int = Field(default=3, ge=1)
    ACQUISITION_ACCURACY_THRESHOLD_M: float = Field(default=1000.0, gt=0)
    ACQUISITION_TIMEOUT_MS: int = Field(default=20000, gt=0)
    ACQUISITION_BACKOFF_SECONDS: float = Field(default=1.0, ge=0, le=2)
    ACQUISITION_MAX_CACHE_AGE_MS: int = Field(default=0, ge=0)

    # Distance filtering
    DEFAULT_DISTANCE_RANGE: str = "1-10"

    # Last-resort location used when detection fails and the user gives no input.
    # Leave unset to surface the failure instead.
    FALLBACK_LATITUDE: float | None = Field(default=None, ge=-90, le=90)
    FALLBACK_LONGITUDE: float | None = Field(default=None, ge=-180, le=180)
    FALLBACK_CITY: str | None = None
    FALLBACK_STATE: str | None = None
    FALLBACK_COUNTRY: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def validate_fallback_location(self) -> "Settings":
        """Fallback coordinates must be given as a pair."""
        if (self.FALLBACK_LATITUDE is None) != (self.FALLBACK_LONGITUDE is None):
            raise ValueError(
                "FALLBACK_LATITUDE and FALLBACK_LONGITUDE must be set together"
            )
        return self

    @model_validator(mode="after")
    def normalize_providers(self) -> "Settings":
        """Lower-case provider names and drop duplicates, keeping priority order."""
        seen: list[str] = []
        for name in self.GEOCODING_PROVIDERS:
            key = name.strip().lower()
            if key and key not in seen:
                seen.append(key)
        self.GEOCODING_PROVIDERS = seen
        return self

    @property
    def has_fallback_location(self) -> bool:
        """Whether a last-resort location is configured."""
        return self.FALLBACK_LATITUDE is not None


# Create settings instance
settings = Settings()
