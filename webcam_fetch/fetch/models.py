"""Data models for the HTTP fetch layer."""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from webcam_fetch.fetch.constants import HTTP_STATUS_OK_MAX, HTTP_STATUS_OK_MIN


class FetchErrorClass(str, Enum):
    """Classification of fetch errors for metrics.

    - NETWORK_TIMEOUT: Request timed out
    - CONNECTION_ERROR: Could not establish connection
    - RESPONSE_SIZE_EXCEEDED: Response exceeded max size limit
    - HTTP_STATUS: Server answered with a non-2xx status
    - UNKNOWN: Unclassified transport error
    """

    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    RESPONSE_SIZE_EXCEEDED = "RESPONSE_SIZE_EXCEEDED"
    HTTP_STATUS = "HTTP_STATUS"
    UNKNOWN = "UNKNOWN"


class FetchResult(BaseModel):
    """Outcome of one HEAD or GET request against the webcam.

    Header names are stored lower-cased, as httpx delivers them; use
    ``header()`` for lookups. HEAD results never carry a body.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: Literal["HEAD", "GET"]
    status_code: Annotated[int, Field(ge=100, le=599)]
    final_url: Annotated[str, Field(min_length=1, description="URL after redirects")]
    headers: dict[str, str] = Field(default_factory=dict)
    body_bytes: bytes = b""

    @property
    def is_success(self) -> bool:
        return HTTP_STATUS_OK_MIN <= self.status_code < HTTP_STATUS_OK_MAX

    @property
    def body_size(self) -> int:
        return len(self.body_bytes)

    def header(self, name: str) -> str | None:
        """Look up a response header case-insensitively.

        Args:
            name: Header name, e.g. ``Last-Modified``.

        Returns:
            Header value, or None if the remote did not send it.
        """
        return self.headers.get(name.lower())
