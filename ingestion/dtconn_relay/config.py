"""
Configuration management for the relay service.

All configuration is loaded from environment variables once at startup.
The destination table and the signing secret have no defaults: a missing
value is fatal.
"""

from functools import lru_cache

from pydantic import Field, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .errors import ConfigurationError

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service settings
    service_name: str = Field(default="dtconn-relay", description="Service name for logging")
    log_level: str = Field(default="INFO", description="Logging level")
    host: str = Field(default="0.0.0.0", description="Interface to listen on")
    port: int = Field(default=8080, description="Port to listen on")

    # Warehouse call
    insert_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for a single BigQuery insert call"
    )

    # BigQuery destination
    project_id: str = Field(description="GCP project holding the destination dataset")
    dataset: str = Field(description="BigQuery dataset id")
    table: str = Field(description="BigQuery table id")

    # Signature validation
    signature: SecretStr = Field(
        description="Shared secret used to verify the x-dt-signature token (HS256)"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False
        frozen = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def table_ref(self) -> str:
        """Fully qualified table id (e.g., my-project.monitoring.events)."""
        return f"{self.project_id}.{self.dataset}.{self.table}"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Raises:
        ConfigurationError: If a required setting is missing or malformed
    """
    try:
        return Settings()
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]).upper() for err in e.errors()
        )
        raise ConfigurationError(f"Invalid or missing configuration: {fields}") from e
