"""Webcam image mirror: freshness check, fetch, resize and delivery."""

from datetime import datetime
from pathlib import Path

import structlog

from webcam_fetch.errors import InvalidUrlError
from webcam_fetch.fetch.client import HttpClient
from webcam_fetch.fetch.config import FetchConfig
from webcam_fetch.fetch.url import WebcamUrl
from webcam_fetch.observability.logging import get_null_logger
from webcam_fetch.webcam import delivery
from webcam_fetch.webcam.constants import COMPONENT_WEBCAM
from webcam_fetch.webcam.delivery import ResponseWriter
from webcam_fetch.webcam.freshness import FreshnessEvaluator
from webcam_fetch.webcam.models import (
    ImageDelivery,
    ShrinkPolicy,
    ShrinkValue,
    parse_shrink_policy,
)
from webcam_fetch.webcam.pipeline import FetchPipeline
from webcam_fetch.webcam.resize import ResizeTransform
from webcam_fetch.webcam.state_machine import WebcamState, WebcamStateMachine
from webcam_fetch.webcam.storage import Archiver, AtomicWriter


class WebcamFetch:
    """Mirrors a single remote webcam image into a local file.

    Typical use from a scheduled job::

        webcam = WebcamFetch("http://example.com/cam/live.jpg", 50, max_age=300)
        if webcam.check_is_new():
            webcam.retrieve()
        webcam.shrink()

    A fresh instance always fetches on the first ``retrieve`` call. Resizing
    is only allowed once a retrieval has completed. Instances are not meant
    to be shared between threads, and two instances must not use the same
    local file at the same time.
    """

    def __init__(  # noqa: PLR0913
        self,
        url: str | WebcamUrl,
        shrink_to: ShrinkValue = 0,
        image_file_name: str | Path | None = None,
        max_age: int = 0,
        archive_path: str | Path | None = None,
        *,
        config: FetchConfig | None = None,
        client: HttpClient | None = None,
        logger: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        """Create a new webcam mirror.

        Args:
            url: Remote image URL, as string or parsed ``WebcamUrl``.
            shrink_to: Percentage (1..99), ``{"w": ..., "h": ...}`` mapping,
                ``"WxH"`` string, or 0/None to keep the original size.
            image_file_name: Local file; defaults to the URL's file name.
            max_age: Seconds the local file stays fresh; 0 checks the
                remote headers instead.
            archive_path: Existing directory receiving the previous copy on
                every fetch; None disables archiving.
            config: Transport configuration.
            client: HTTP client, mainly for tests; built from ``config``
                when omitted.
            logger: Structured logger; events are discarded when omitted.

        Raises:
            InvalidUrlError: If the URL is unusable or no local file name
                can be derived from it.
            InvalidShrinkError: If ``shrink_to`` has an unsupported shape.
            ValueError: If ``max_age`` is negative.
        """
        self._url = url if isinstance(url, WebcamUrl) else WebcamUrl.parse(url)

        if image_file_name is None:
            if not self._url.file_name:
                msg = f"Cannot derive a local file name from {self._url}"
                raise InvalidUrlError(msg)
            image_file_name = self._url.file_name
        self._path = Path(image_file_name)

        if max_age < 0:
            msg = f"max_age must not be negative, got {max_age}"
            raise ValueError(msg)
        self._max_age = max_age

        self._archive_path = Path(archive_path) if archive_path is not None else None
        self._policy = parse_shrink_policy(shrink_to)
        self._remote_expired_date: datetime | None = None

        log = logger or get_null_logger()
        self._log = log.bind(component=COMPONENT_WEBCAM, path=str(self._path))

        self._client = client or HttpClient(self._url, config=config, log=log)
        self._state = WebcamStateMachine(
            shrink_pending=not self._path.exists(), log=log
        )
        self._evaluator = FreshnessEvaluator(
            self._path, self._max_age, self._client, log=log
        )
        archiver = (
            Archiver(self._archive_path, log=log)
            if self._archive_path is not None
            else None
        )
        self._pipeline = FetchPipeline(
            self._path,
            self._client,
            archiver=archiver,
            writer=AtomicWriter(log),
            log=log,
        )
        self._resize = ResizeTransform(self._path, self._policy, log=log)

    @property
    def url(self) -> WebcamUrl:
        """Get the remote URL."""
        return self._url

    @property
    def image_path(self) -> Path:
        """Get the local file path."""
        return self._path

    @property
    def max_age(self) -> int:
        """Get the local max age in seconds."""
        return self._max_age

    @property
    def archive_path(self) -> Path | None:
        """Get the archive directory, if any."""
        return self._archive_path

    @property
    def shrink_policy(self) -> ShrinkPolicy:
        """Get the shrink policy."""
        return self._policy

    @property
    def state(self) -> WebcamState:
        """Get the current lifecycle state."""
        return self._state.state

    @property
    def need_to_fetch(self) -> bool:
        """Whether the next ``retrieve`` call will download."""
        return self._state.need_to_fetch

    @property
    def need_to_shrink(self) -> bool:
        """Whether a resize is pending."""
        return self._state.need_to_shrink

    @property
    def remote_expired_date(self) -> datetime | None:
        """Last Last-Modified/Expires date seen by a header check."""
        return self._remote_expired_date

    def check_is_new(self) -> bool:
        """Check whether the remote image has to be fetched.

        Returns:
            True if the local copy is missing or stale.

        Raises:
            CheckRemoteError: If the remote headers cannot be obtained or
                the remote answers with a status other than 200.
        """
        result = self._evaluator.evaluate()
        if result.remote_date is not None:
            self._remote_expired_date = result.remote_date

        if result.is_new:
            self._state.mark_stale()
        else:
            self._state.mark_fresh()
        return result.is_new

    def retrieve(self) -> Path | None:
        """Fetch the remote image into the local file, if a fetch is pending.

        Returns:
            Path of the archived previous copy, or None.

        Raises:
            httpx.TransportError: On network failure.
            ResponseSizeExceededError: If the payload is too large.
            InvalidFileDataError: If the payload is not a JPEG.
            WriteLocalFileError: If archiving or writing fails.
        """
        if not self._state.need_to_fetch:
            self._log.debug("retrieve_skipped", state=self._state.state.name)
            return None

        archived = self._pipeline.run()
        self._state.mark_fetched()
        return archived

    def shrink(self) -> None:
        """Resize the local image according to the shrink policy.

        No-op when no resize is pending or no shrink policy is configured.

        Raises:
            FetchRequiredError: If a retrieval is pending.
            InvalidShrinkError: If the shrink policy is out of range.
            LocalFileNotFoundError: If the local file does not exist.
            InvalidFileDataError: If the image is undecodable or its
                dimensions are out of bounds.
            WriteLocalFileError: If the resized image cannot be written.
        """
        if not self._state.need_to_shrink:
            return
        if self._policy.is_noop:
            self._state.mark_shrunk()
            return

        self._state.require_fetched()
        self._resize.apply()
        self._state.mark_shrunk()

    def refresh(self) -> Path | None:
        """Run a full cycle: freshness check, retrieval and resize.

        Returns:
            Path of the archived previous copy, or None.
        """
        archived = self.retrieve() if self.check_is_new() else None
        self.shrink()
        return archived

    def build_delivery(self) -> ImageDelivery:
        """Read the local image together with its response headers.

        Raises:
            LocalFileNotFoundError: If the local file does not exist.
            ReadLocalFileError: If the file is empty or unreadable.
        """
        return delivery.build_delivery(self._path)

    def send_to_client(self, writer: ResponseWriter | None = None) -> ImageDelivery:
        """Send the local image to an HTTP client.

        Args:
            writer: Client connection, e.g. a ``BaseHTTPRequestHandler``.

        Returns:
            What was sent.

        Raises:
            CannotSendError: If there is no client connection.
            LocalFileNotFoundError: If the local file does not exist.
            ReadLocalFileError: If the file is empty or unreadable.
        """
        return delivery.send_to_client(self._path, writer, log=self._log)

    def remove_local_file(self) -> bool:
        """Remove the local file if it exists; never raises.

        Returns:
            True if a file was removed.
        """
        return delivery.remove_local_file(self._path, log=self._log)
