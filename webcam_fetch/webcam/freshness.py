"""Freshness evaluation for the cached webcam image."""

import time
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from pathlib import Path

import httpx
import structlog

from webcam_fetch.errors import CheckRemoteError
from webcam_fetch.fetch.client import HttpClient
from webcam_fetch.fetch.constants import HTTP_STATUS_OK
from webcam_fetch.observability.logging import get_null_logger
from webcam_fetch.webcam.constants import COMPONENT_FRESHNESS
from webcam_fetch.webcam.models import FreshnessResult


def parse_http_date(value: str, header: str) -> datetime:
    """Parse an HTTP date header value.

    Args:
        value: Header value, e.g. ``Mon, 01 Jan 2024 00:00:00 GMT``.
        header: Header name, used in the error message.

    Returns:
        Timezone-aware datetime (naive values are taken as UTC).

    Raises:
        CheckRemoteError: If the value is not a valid HTTP date.
    """
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError) as e:
        msg = f"Remote sent an invalid {header} header: {value!r}"
        raise CheckRemoteError(msg) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class FreshnessEvaluator:
    """Decides whether the local copy has to be fetched again.

    With ``max_age > 0`` only the local clock is consulted. With
    ``max_age == 0`` the remote headers decide: a ``Last-Modified`` newer
    than the local file, or else an ``Expires`` date in the past, makes the
    local copy stale.
    """

    def __init__(
        self,
        path: Path,
        max_age: int,
        client: HttpClient,
        log: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the evaluator.

        Args:
            path: Local target file.
            max_age: Seconds a local copy stays fresh, 0 for header checks.
            client: HTTP client for header checks.
            log: Bound logger, defaults to a no-op logger.
        """
        self._path = path
        self._max_age = max_age
        self._client = client
        self._log = (log or get_null_logger()).bind(
            component=COMPONENT_FRESHNESS, path=str(path)
        )

    def evaluate(self) -> FreshnessResult:
        """Run the freshness check.

        Returns:
            The decision, with the remote date if headers were consulted.

        Raises:
            CheckRemoteError: If the header check fails.
        """
        if not self._path.exists():
            result = FreshnessResult(is_new=True, reason="local_missing")
        elif self._max_age > 0:
            result = self._evaluate_local_age()
        else:
            result = self._evaluate_remote_headers()

        self._log.info(
            "freshness_checked",
            is_new=result.is_new,
            reason=result.reason,
            remote_date=result.remote_date.isoformat() if result.remote_date else None,
        )
        return result

    def _local_mtime(self) -> float:
        return self._path.stat().st_mtime

    def _evaluate_local_age(self) -> FreshnessResult:
        expires = self._local_mtime() + self._max_age
        if expires < time.time():
            return FreshnessResult(is_new=True, reason="local_expired")
        return FreshnessResult(is_new=False, reason="local_fresh")

    def _evaluate_remote_headers(self) -> FreshnessResult:
        local_mtime = self._local_mtime()

        try:
            response = self._client.head()
        except httpx.TransportError as e:
            msg = f"Could not read the headers of remote url {self._client.url}: {e}"
            raise CheckRemoteError(msg) from e

        if response.status_code != HTTP_STATUS_OK:
            msg = (
                f"Server returned invalid response {response.status_code} "
                f"for {self._client.url}"
            )
            raise CheckRemoteError(msg, status_code=response.status_code)

        last_modified = response.header("Last-Modified")
        if last_modified:
            remote_date = parse_http_date(last_modified, "Last-Modified")
            return FreshnessResult(
                is_new=local_mtime < remote_date.timestamp(),
                reason="last_modified",
                remote_date=remote_date,
            )

        expires = response.header("Expires")
        if expires:
            # An unparseable Expires (e.g. "0") means already expired.
            try:
                remote_date = parse_http_date(expires, "Expires")
            except CheckRemoteError:
                return FreshnessResult(is_new=True, reason="expires_invalid")
            return FreshnessResult(
                is_new=remote_date.timestamp() <= time.time(),
                reason="expires",
                remote_date=remote_date,
            )

        return FreshnessResult(is_new=False, reason="no_cache_headers")
