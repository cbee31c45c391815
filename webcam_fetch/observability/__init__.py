"""Observability module for logging."""

from webcam_fetch.observability.logging import (
    bind_run_context,
    clear_run_context,
    configure_logging,
    get_logger,
    get_null_logger,
)


__all__ = [
    "bind_run_context",
    "clear_run_context",
    "configure_logging",
    "get_logger",
    "get_null_logger",
]
