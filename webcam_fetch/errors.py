"""Domain-specific error types for webcam fetching."""

from pathlib import Path


class WebcamFetchError(Exception):
    """Base class for all webcam fetch failures."""


class InvalidUrlError(WebcamFetchError, ValueError):
    """The remote URL cannot be used as a webcam source."""


class InvalidShrinkError(WebcamFetchError, ValueError):
    """Shrink parameters are out of range."""


class CheckRemoteError(WebcamFetchError):
    """Remote metadata could not be obtained during a freshness check.

    Attributes:
        status_code: HTTP status code of the response, 0 if none was received.
    """

    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidFileDataError(WebcamFetchError):
    """Payload or local image data is not a usable JPEG."""


class ResponseSizeExceededError(WebcamFetchError):
    """Raised when response size exceeds the configured limit."""


class WriteLocalFileError(WebcamFetchError, OSError):
    """Writing, archiving or encoding the local file failed.

    Attributes:
        path: File the write was aimed at.
        expected: Number of bytes that should have been written, if known.
        actual: Number of bytes actually written, if known.
    """

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        expected: int | None = None,
        actual: int | None = None,
    ) -> None:
        super().__init__(message)
        self.path = path
        self.expected = expected
        self.actual = actual


class ReadLocalFileError(WebcamFetchError, OSError):
    """The local file exists but could not be read."""


class LocalFileNotFoundError(WebcamFetchError, FileNotFoundError):
    """The local file required by an operation does not exist."""


class FetchRequiredError(WebcamFetchError):
    """An operation needs a completed retrieval first."""


class CannotSendError(WebcamFetchError):
    """There is no client connection to send the image to."""
