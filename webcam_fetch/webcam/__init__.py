"""Webcam image mirror.

Composes the freshness evaluator, fetch pipeline, resize transform and
delivery into the ``WebcamFetch`` facade.
"""

from webcam_fetch.webcam.delivery import (
    ResponseWriter,
    build_delivery,
    compute_etag,
    remove_local_file,
    send_to_client,
)
from webcam_fetch.webcam.freshness import FreshnessEvaluator
from webcam_fetch.webcam.models import (
    DimensionShrink,
    FreshnessResult,
    ImageDelivery,
    NoShrink,
    PercentageShrink,
    ShrinkPolicy,
    parse_shrink_policy,
)
from webcam_fetch.webcam.pipeline import FetchPipeline, is_jpeg
from webcam_fetch.webcam.resize import ResizeTransform
from webcam_fetch.webcam.state_machine import (
    WebcamState,
    WebcamStateError,
    WebcamStateMachine,
)
from webcam_fetch.webcam.storage import Archiver, AtomicWriter, archive_name
from webcam_fetch.webcam.webcam import WebcamFetch


__all__ = [
    # Facade
    "WebcamFetch",
    # Components
    "FreshnessEvaluator",
    "FetchPipeline",
    "ResizeTransform",
    "Archiver",
    "AtomicWriter",
    # State
    "WebcamState",
    "WebcamStateError",
    "WebcamStateMachine",
    # Models
    "DimensionShrink",
    "FreshnessResult",
    "ImageDelivery",
    "NoShrink",
    "PercentageShrink",
    "ShrinkPolicy",
    "parse_shrink_policy",
    # Delivery
    "ResponseWriter",
    "build_delivery",
    "compute_etag",
    "remove_local_file",
    "send_to_client",
    # Helpers
    "archive_name",
    "is_jpeg",
]
