"""structlog setup for the CLI, and the silent default used by the library."""

import logging
import sys
from typing import Any, TextIO

import structlog


SHARED_PROCESSORS: tuple[structlog.types.Processor, ...] = (
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
)


def _renderer(json_format: bool) -> structlog.types.Processor:
    if json_format:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=False)


def configure_logging(
    level: int = logging.INFO,
    output: TextIO = sys.stderr,
    json_format: bool = True,
) -> None:
    """Send structlog events to ``output``.

    Only the CLI calls this. Library code logs through whatever logger it
    was given and stays silent otherwise. Loggers are not cached, so
    reconfiguring also affects module-level loggers created earlier.

    Args:
        level: Minimum level to emit (default: INFO).
        output: Stream receiving one rendered line per event.
        json_format: Render JSON lines instead of the console format.
    """
    structlog.configure(
        processors=[*SHARED_PROCESSORS, _renderer(json_format)],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=output, level=level)
    # httpx reports every request at INFO; our client logs its own events
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


def get_logger(component: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a logger, optionally bound to a component name.

    Args:
        component: Value for the ``component`` key of every event.

    Returns:
        Bound logger.
    """
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger()
    if component is not None:
        return logger.bind(component=component)
    return logger


def _drop_event(
    _logger: Any, _method_name: str, _event_dict: structlog.typing.EventDict
) -> structlog.typing.EventDict:
    raise structlog.DropEvent


def get_null_logger() -> structlog.typing.FilteringBoundLogger:
    """Get a logger that discards every event.

    Used wherever no logger was supplied by the caller.
    """
    logger: structlog.typing.FilteringBoundLogger = structlog.wrap_logger(
        structlog.ReturnLogger(), processors=[_drop_event]
    )
    return logger


def bind_run_context(run_id: str, **context: str) -> None:
    """Attach a run id, plus any extra keys, to every following event.

    Args:
        run_id: Unique id of this invocation.
        **context: Additional string values, e.g. ``command="fetch"``.
    """
    structlog.contextvars.bind_contextvars(run_id=run_id, **context)


def clear_run_context() -> None:
    """Forget everything bound by ``bind_run_context``."""
    structlog.contextvars.clear_contextvars()
