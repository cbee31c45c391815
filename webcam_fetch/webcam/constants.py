"""Constants for the webcam pipeline."""

# JPEG start-of-image marker every retrieved payload must begin with
JPEG_SOI_MARKER = b"\xff\xd8\xff"

# Dimension bounds for source images and resize targets
MIN_DIMENSION = 1
MAX_WIDTH = 6000
MAX_HEIGHT = 5000

# Percentage shrink bounds (exclusive)
MIN_PERCENT_EXCLUSIVE = 0
MAX_PERCENT_EXCLUSIVE = 100

JPEG_QUALITY = 75

# Delivery
CONTENT_TYPE_JPEG = "image/jpeg"
CACHE_CONTROL_PUBLIC = "public"

# Archive naming: <stem>-<YYYYMMDDHHMMSS><suffix>
ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

TEMP_SUFFIX = ".tmp"

# Component names for logging
COMPONENT_WEBCAM = "webcam"
COMPONENT_FRESHNESS = "freshness"
COMPONENT_PIPELINE = "fetch_pipeline"
COMPONENT_RESIZE = "resize"
COMPONENT_DELIVERY = "delivery"
COMPONENT_STORAGE = "storage"
COMPONENT_CLI = "cli"
