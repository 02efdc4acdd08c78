"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Nominatim usage policy allows at most one request per second.
MIN_GEOCODER_DELAY_SECONDS = 1.1


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Route Service API"
    api_prefix: str = "/api"
    geocoder_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of the Nominatim-compatible geocoding service.",
    )
    geocoder_user_agent: str = Field(
        default="FieldServiceManagement/1.0",
        description="User-Agent sent with every geocoding request, as required by the service policy.",
    )
    geocoder_country: str = Field(default="Brasil", description="Country literal appended to address queries.")
    geocoder_region: str = Field(
        default="Santa Catarina",
        description="State/region literal used by the coarsest fallback query.",
    )
    geocoder_delay_seconds: float = Field(default=1.5, ge=MIN_GEOCODER_DELAY_SECONDS)
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)
    kmeans_max_iterations: int = Field(default=50, ge=1)
    two_opt_max_passes: int = Field(default=100, ge=1)
    default_random_seed: Optional[int] = Field(
        default=None,
        description="Seed for clustering when a request does not provide one. None uses fresh entropy.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("geocoder_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


settings = Settings()
