"""HTTP client for the remote webcam image."""

import time
from typing import Literal

import httpx
import structlog

from webcam_fetch.errors import ResponseSizeExceededError
from webcam_fetch.fetch.config import FetchConfig
from webcam_fetch.fetch.constants import DEFAULT_CHUNK_SIZE
from webcam_fetch.fetch.metrics import FetchMetrics
from webcam_fetch.fetch.models import FetchErrorClass, FetchResult
from webcam_fetch.fetch.url import WebcamUrl
from webcam_fetch.observability.logging import get_null_logger


class HttpClient:
    """Blocking HTTP client bound to one webcam URL.

    Every request opens its own connection, which is released before the
    method returns, whether the request succeeded or not. Transport errors
    are recorded and re-raised unchanged as ``httpx.TransportError``.
    """

    def __init__(
        self,
        url: WebcamUrl,
        config: FetchConfig | None = None,
        log: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            url: Remote image location.
            config: Transport configuration, defaults to ``FetchConfig()``.
            log: Bound logger, defaults to a no-op logger.
        """
        self._url = url
        self._config = config or FetchConfig()
        self._metrics = FetchMetrics.get_instance()
        self._log = (log or get_null_logger()).bind(
            component="http_client",
            url=str(url),
        )

    @property
    def url(self) -> WebcamUrl:
        """Get the remote URL."""
        return self._url

    def head(self) -> FetchResult:
        """Issue a header-only request.

        Returns:
            Result with status and headers, without body.

        Raises:
            httpx.TransportError: If the request could not be completed.
        """
        return self._request("HEAD")

    def get(self) -> FetchResult:
        """Download the remote payload.

        Returns:
            Result with status, headers and the complete body.

        Raises:
            httpx.TransportError: If the request could not be completed.
            ResponseSizeExceededError: If the body exceeds the size limit.
        """
        return self._request("GET")

    def _request(self, method: Literal["HEAD", "GET"]) -> FetchResult:
        start_time_ns = time.perf_counter_ns()
        url = str(self._url)

        try:
            with (
                httpx.Client(
                    timeout=self._config.timeout_seconds,
                    follow_redirects=True,
                    headers=self._config.request_headers(),
                ) as client,
                client.stream(method, url) as response,
            ):
                body = b"" if method == "HEAD" else self._drain(response)
                result = FetchResult(
                    method=method,
                    status_code=response.status_code,
                    final_url=str(response.url),
                    headers=dict(response.headers),
                    body_bytes=body,
                )
        except httpx.TransportError as e:
            error_class = self._classify_transport_error(e)
            self._metrics.record_failure(error_class)
            self._log.warning(
                "request_failed",
                method=method,
                error_class=error_class.value,
                error=str(e),
            )
            raise
        except ResponseSizeExceededError as e:
            self._metrics.record_failure(FetchErrorClass.RESPONSE_SIZE_EXCEEDED)
            self._log.warning("request_failed", method=method, error=str(e))
            raise
        finally:
            duration_ms = (time.perf_counter_ns() - start_time_ns) / 1_000_000
            self._metrics.record_duration(duration_ms)

        self._metrics.record_response(result)

        self._log.debug(
            "request_complete",
            method=method,
            status_code=result.status_code,
            bytes=result.body_size,
            duration_ms=round(duration_ms, 2),
        )
        return result

    def _drain(self, response: httpx.Response) -> bytes:
        """Buffer the streamed body, refusing payloads above the size limit.

        An announced ``Content-Length`` above the limit is refused before
        anything is read.

        Raises:
            ResponseSizeExceededError: If the size limit is exceeded.
        """
        limit = self._config.max_response_size_bytes
        announced = response.headers.get("content-length", "")
        if announced.isdigit() and int(announced) > limit:
            msg = f"Remote announced {announced} bytes, the limit is {limit} bytes"
            raise ResponseSizeExceededError(msg)

        chunks: list[bytes] = []
        received = 0
        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            received += len(chunk)
            if received > limit:
                msg = f"Remote sent more than {limit} bytes"
                raise ResponseSizeExceededError(msg)
            chunks.append(chunk)
        return b"".join(chunks)

    @staticmethod
    def _classify_transport_error(error: httpx.TransportError) -> FetchErrorClass:
        if isinstance(error, httpx.TimeoutException):
            return FetchErrorClass.NETWORK_TIMEOUT
        if isinstance(error, httpx.ConnectError):
            return FetchErrorClass.CONNECTION_ERROR
        return FetchErrorClass.UNKNOWN
