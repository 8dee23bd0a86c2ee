"""
Shared configuration management for the satellite catalog gateway.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError


DEFAULT_SPACETRACK_BASE_URL = "https://www.space-track.org"
DEFAULT_PERTURBATION_MAX_AGE_SECONDS = 4 * 60 * 60
DEFAULT_SEARCH_RESULT_LIMIT = 20
DEFAULT_SEARCH_MIN_QUERY_LENGTH = 4
DEFAULT_CATALOG_REFRESH_INTERVAL_SECONDS = 24 * 60 * 60


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SATCAT_",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Space-Track
    spacetrack_base_url: str = DEFAULT_SPACETRACK_BASE_URL
    spacetrack_user: str = Field(
        default="",
        validation_alias=AliasChoices("SPACETRACK_USER", "SATCAT_SPACETRACK_USER", "spacetrack_user"),
    )
    spacetrack_pass: str = Field(
        default="",
        repr=False,
        validation_alias=AliasChoices("SPACETRACK_PASS", "SATCAT_SPACETRACK_PASS", "spacetrack_pass"),
    )
    spacetrack_timeout_seconds: float = 30.0

    # Perturbation cache
    perturbation_max_age_seconds: float = Field(default=DEFAULT_PERTURBATION_MAX_AGE_SECONDS, gt=0)

    # Satellite catalog
    search_result_limit: int = Field(default=DEFAULT_SEARCH_RESULT_LIMIT, gt=0)
    search_min_query_length: int = Field(default=DEFAULT_SEARCH_MIN_QUERY_LENGTH, ge=0)
    catalog_refresh_interval_seconds: float = Field(default=DEFAULT_CATALOG_REFRESH_INTERVAL_SECONDS, gt=0)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int = 3000
    host: str = "0.0.0.0"


@dataclass(frozen=True)
class SpaceTrackCredentials:
    """Account identity and secret used for the Space-Track login handshake."""

    identity: str
    password: str

    def __repr__(self) -> str:
        return f"SpaceTrackCredentials(identity={self.identity!r}, password='***')"

    @classmethod
    def from_config(cls, config: BaseConfig) -> "SpaceTrackCredentials":
        """Build credentials from configuration, failing fast when unset."""
        missing = [
            name
            for name, value in (("SPACETRACK_USER", config.spacetrack_user), ("SPACETRACK_PASS", config.spacetrack_pass))
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "Space-Track credentials are not configured",
                details={"missing": missing},
            )
        return cls(identity=config.spacetrack_user, password=config.spacetrack_pass)


def get_config(service_name: str, port: Optional[int] = None, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    if port is not None:
        overrides["port"] = port
    return ServiceConfig(service_name=service_name, **overrides)
