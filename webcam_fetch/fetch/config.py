"""Configuration models for the HTTP fetch layer."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from webcam_fetch.fetch.constants import (
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class FetchConfig(BaseModel):
    """Configuration for the HTTP fetch layer.

    Transport policy for all requests against the webcam: user agent,
    timeout and the maximum accepted payload size.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_agent: Annotated[str, Field(min_length=1, max_length=500)] = (
        DEFAULT_USER_AGENT
    )
    timeout_seconds: Annotated[float, Field(ge=1.0, le=300.0)] = (
        DEFAULT_TIMEOUT_SECONDS
    )
    max_response_size_bytes: Annotated[int, Field(ge=1024, le=100 * 1024 * 1024)] = (
        DEFAULT_MAX_RESPONSE_SIZE_BYTES
    )

    def request_headers(self) -> dict[str, str]:
        """Build the headers sent with every request.

        Returns:
            Headers dictionary.
        """
        return {
            "User-Agent": self.user_agent,
            "Accept": "image/jpeg, */*",
        }
