"""HTTP fetch layer for the remote webcam image.

This module provides the transport collaborator of the webcam pipeline:
- HEAD requests for freshness checks
- Streaming GET requests bounded by a maximum response size
- URL parsing with a default local file name
- Metrics collection for observability
"""

from webcam_fetch.fetch.client import HttpClient
from webcam_fetch.fetch.config import FetchConfig
from webcam_fetch.fetch.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    HTTP_STATUS_OK,
)
from webcam_fetch.fetch.metrics import FetchMetrics
from webcam_fetch.fetch.models import FetchErrorClass, FetchResult
from webcam_fetch.fetch.redact import redact_url_credentials
from webcam_fetch.fetch.url import WebcamUrl


__all__ = [
    # Client
    "HttpClient",
    # Config
    "FetchConfig",
    # Models
    "FetchResult",
    "FetchErrorClass",
    "WebcamUrl",
    # Constants
    "HTTP_STATUS_OK",
    "DEFAULT_MAX_RESPONSE_SIZE_BYTES",
    "DEFAULT_CHUNK_SIZE",
    # Metrics
    "FetchMetrics",
    # Redaction
    "redact_url_credentials",
]
