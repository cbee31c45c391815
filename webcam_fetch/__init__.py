"""Fetch, cache, resize and serve a single remote webcam JPEG."""

from webcam_fetch.errors import (
    CannotSendError,
    CheckRemoteError,
    FetchRequiredError,
    InvalidFileDataError,
    InvalidShrinkError,
    InvalidUrlError,
    LocalFileNotFoundError,
    ReadLocalFileError,
    ResponseSizeExceededError,
    WebcamFetchError,
    WriteLocalFileError,
)
from webcam_fetch.fetch import FetchConfig, WebcamUrl
from webcam_fetch.webcam import WebcamFetch, WebcamState


__version__ = "1.0.0"

__all__ = [
    "CannotSendError",
    "CheckRemoteError",
    "FetchConfig",
    "FetchRequiredError",
    "InvalidFileDataError",
    "InvalidShrinkError",
    "InvalidUrlError",
    "LocalFileNotFoundError",
    "ReadLocalFileError",
    "ResponseSizeExceededError",
    "WebcamFetch",
    "WebcamFetchError",
    "WebcamState",
    "WebcamUrl",
    "WriteLocalFileError",
    "__version__",
]
