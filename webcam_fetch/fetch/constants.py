"""HTTP constants for the fetch layer.

Centralizes all HTTP-related constants to avoid duplication across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_OK = 200
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 300

# Response Size Limits
DEFAULT_MAX_RESPONSE_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB

# Chunk size for streaming reads
DEFAULT_CHUNK_SIZE = 8192

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "webcam-fetch/1.0"

SUPPORTED_SCHEMES = frozenset({"http"})
DEFAULT_HTTP_PORT = 80
