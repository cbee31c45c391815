"""Webcam URL parsing."""

from pathlib import PurePosixPath
from typing import Annotated
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from webcam_fetch.errors import InvalidUrlError
from webcam_fetch.fetch.constants import DEFAULT_HTTP_PORT, SUPPORTED_SCHEMES
from webcam_fetch.fetch.redact import redact_url_credentials


class WebcamUrl(BaseModel):
    """Parsed location of a remote webcam image."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    scheme: str = "http"
    host: Annotated[str, Field(min_length=1)]
    port: Annotated[int, Field(ge=1, le=65535)] = DEFAULT_HTTP_PORT
    path: str = "/"
    query: str = ""

    @classmethod
    def parse(cls, url: str) -> "WebcamUrl":
        """Parse a URL string.

        Args:
            url: Absolute http URL of the image.

        Returns:
            Parsed URL.

        Raises:
            InvalidUrlError: If the URL has no host or an unsupported scheme.
        """
        parsed = urlparse(url.strip())
        display = redact_url_credentials(url)
        scheme = parsed.scheme.lower()
        if scheme not in SUPPORTED_SCHEMES:
            msg = f"Unsupported URL scheme '{parsed.scheme}' in {display!r}"
            raise InvalidUrlError(msg)
        if not parsed.hostname:
            msg = f"URL {display!r} has no host"
            raise InvalidUrlError(msg)
        try:
            port = parsed.port or DEFAULT_HTTP_PORT
        except ValueError as e:
            msg = f"URL {display!r} has an invalid port"
            raise InvalidUrlError(msg) from e

        return cls(
            scheme=scheme,
            host=parsed.hostname,
            port=port,
            path=parsed.path or "/",
            query=parsed.query,
        )

    @property
    def file_name(self) -> str:
        """Base name of the URL path, used as the default local file name."""
        return PurePosixPath(self.path).name

    def __str__(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        netloc = host if self.port == DEFAULT_HTTP_PORT else f"{host}:{self.port}"
        query = f"?{self.query}" if self.query else ""
        return f"{self.scheme}://{netloc}{self.path}{query}"
