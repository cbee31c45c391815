"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from webcam_fetch.fetch.config import FetchConfig
from webcam_fetch.fetch.constants import (
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class WebcamSettings(BaseSettings):
    """Centralized environment configuration.

    Every value can be provided as ``WEBCAM_<NAME>`` in the environment
    or in a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="WEBCAM_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: str | None = None
    shrink: str = "0"
    target: Path | None = None
    max_age: int = Field(default=0, ge=0)
    archive_dir: Path | None = None
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_response_size_bytes: int = DEFAULT_MAX_RESPONSE_SIZE_BYTES

    def fetch_config(self) -> FetchConfig:
        """Build the transport configuration from these settings."""
        return FetchConfig(
            user_agent=self.user_agent,
            timeout_seconds=self.timeout_seconds,
            max_response_size_bytes=self.max_response_size_bytes,
        )


def get_settings() -> WebcamSettings:
    """Get a settings instance."""
    return WebcamSettings()
