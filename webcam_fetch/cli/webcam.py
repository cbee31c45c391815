"""CLI commands for the webcam mirror."""

import logging
import sys
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import click
import httpx
import structlog

from webcam_fetch import __version__
from webcam_fetch.errors import WebcamFetchError
from webcam_fetch.fetch.metrics import FetchMetrics
from webcam_fetch.observability.logging import (
    bind_run_context,
    configure_logging,
    get_logger,
)
from webcam_fetch.settings import get_settings
from webcam_fetch.webcam.constants import COMPONENT_CLI
from webcam_fetch.webcam.webcam import WebcamFetch


F = TypeVar("F", bound=Callable[..., Any])

# Errors a fetch cycle may end with; reported without a traceback
CYCLE_ERRORS = (WebcamFetchError, httpx.TransportError)

HTTP_STATUS_BAD_GATEWAY = 502


@dataclass
class WebcamOptions:
    """Options shared by all webcam commands."""

    url: str | None
    shrink: str | None
    target: Path | None
    max_age: int | None
    archive_dir: Path | None
    json_logs: bool
    verbose: bool


def webcam_options(func: F) -> F:
    """Attach the options shared by all webcam commands."""
    options = [
        click.option(
            "--url",
            type=str,
            default=None,
            help="Remote image URL (default: $WEBCAM_URL).",
        ),
        click.option(
            "--shrink",
            type=str,
            default=None,
            help="Percentage (e.g. 80) or WIDTHxHEIGHT (e.g. 200x150); 0 keeps the size.",
        ),
        click.option(
            "--target",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="Local file (default: file name of the URL).",
        ),
        click.option(
            "--max-age",
            type=click.IntRange(min=0),
            default=None,
            help="Seconds the local file stays fresh; 0 checks remote headers.",
        ),
        click.option(
            "--archive-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Directory receiving the previous image on every fetch.",
        ),
        click.option(
            "--json-logs/--no-json-logs",
            default=True,
            help="Use JSON format for logs (default: true).",
        ),
        click.option(
            "--verbose",
            "-v",
            is_flag=True,
            help="Enable verbose logging.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _setup_logging(
    options: WebcamOptions, command: str
) -> structlog.typing.FilteringBoundLogger:
    """Set up logging and return a bound logger.

    Args:
        options: Command options.
        command: Name of the running command.

    Returns:
        Bound logger with run context.
    """
    log_level = logging.DEBUG if options.verbose else logging.INFO
    configure_logging(level=log_level, output=sys.stderr, json_format=options.json_logs)
    bind_run_context(str(uuid.uuid4()), command=command)
    return get_logger(COMPONENT_CLI)


def _log_metrics(log: structlog.typing.FilteringBoundLogger) -> None:
    log.info("fetch_metrics", **FetchMetrics.get_instance().snapshot())


def _build_webcam(
    options: WebcamOptions, log: structlog.typing.FilteringBoundLogger
) -> WebcamFetch:
    """Create the webcam mirror from options, falling back to settings.

    Raises:
        click.UsageError: If no URL is configured or a value is invalid.
    """
    settings = get_settings()
    url = options.url or settings.url
    if not url:
        msg = "No webcam URL given; use --url or set WEBCAM_URL."
        raise click.UsageError(msg)

    try:
        return WebcamFetch(
            url,
            shrink_to=options.shrink if options.shrink is not None else settings.shrink,
            image_file_name=options.target or settings.target,
            max_age=options.max_age if options.max_age is not None else settings.max_age,
            archive_path=options.archive_dir or settings.archive_dir,
            config=settings.fetch_config(),
            logger=log,
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e


def _fail(log: structlog.typing.FilteringBoundLogger, error: Exception) -> NoReturn:
    log.error("command_failed", error=str(error), error_type=type(error).__name__)
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Mirror a remote webcam JPEG into a local file."""


@cli.command()
@webcam_options
def fetch(**kwargs: Any) -> None:
    """Check freshness, retrieve the image if needed and resize it."""
    options = WebcamOptions(**kwargs)
    log = _setup_logging(options, "fetch")
    webcam = _build_webcam(options, log)

    try:
        is_new = webcam.check_is_new()
        archived = webcam.retrieve() if is_new else None
        webcam.shrink()
    except CYCLE_ERRORS as e:
        _fail(log, e)
    finally:
        _log_metrics(log)

    if is_new:
        click.echo(f"Fetched {webcam.url} -> {webcam.image_path}")
    else:
        click.echo(f"Local file {webcam.image_path} is fresh")
    if archived is not None:
        click.echo(f"Archived previous image to {archived}")


@cli.command()
@webcam_options
def check(**kwargs: Any) -> None:
    """Report whether the remote image has to be fetched."""
    options = WebcamOptions(**kwargs)
    log = _setup_logging(options, "check")
    webcam = _build_webcam(options, log)

    try:
        is_new = webcam.check_is_new()
    except CYCLE_ERRORS as e:
        _fail(log, e)
    finally:
        _log_metrics(log)

    click.echo("new" if is_new else "fresh")
    if webcam.remote_expired_date is not None:
        click.echo(f"Remote date: {webcam.remote_expired_date.isoformat()}")


@cli.command()
@webcam_options
def clean(**kwargs: Any) -> None:
    """Remove the local image file."""
    options = WebcamOptions(**kwargs)
    log = _setup_logging(options, "clean")
    webcam = _build_webcam(options, log)

    if webcam.remove_local_file():
        click.echo(f"Removed {webcam.image_path}")
    else:
        click.echo(f"Nothing to remove at {webcam.image_path}")


def make_handler(
    webcam: WebcamFetch, log: structlog.typing.FilteringBoundLogger
) -> type[BaseHTTPRequestHandler]:
    """Build a request handler serving the webcam image.

    Every GET runs a full refresh cycle before sending the local copy.

    Args:
        webcam: Webcam mirror to serve.
        log: Bound logger.

    Returns:
        Handler class for ``HTTPServer``.
    """

    class WebcamRequestHandler(BaseHTTPRequestHandler):
        """Serves the mirrored image on every path."""

        def log_message(self, format: str, *args: object) -> None:  # noqa: A002
            """Route access logs through structlog."""
            log.debug("http_access", client=self.address_string(), message=format % args)

        def do_GET(self) -> None:  # noqa: N802
            """Refresh the local copy and send it."""
            try:
                webcam.refresh()
                webcam.send_to_client(self)
            except CYCLE_ERRORS as e:
                log.error(
                    "serve_failed", error=str(e), error_type=type(e).__name__
                )
                self.send_error(HTTP_STATUS_BAD_GATEWAY, "Webcam image unavailable")

    return WebcamRequestHandler


@cli.command()
@webcam_options
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address.")
@click.option("--port", default=8080, show_default=True, type=int, help="Bind port.")
def serve(host: str, port: int, **kwargs: Any) -> None:
    """Serve the mirrored image over HTTP, refreshing it on every request."""
    options = WebcamOptions(**kwargs)
    log = _setup_logging(options, "serve")
    webcam = _build_webcam(options, log)

    server = HTTPServer((host, port), make_handler(webcam, log))
    log.info("serve_started", host=host, port=server.server_address[1])
    click.echo(f"Serving {webcam.image_path} on http://{host}:{server.server_address[1]}/")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        log.info("serve_stopped")
    finally:
        server.server_close()


if __name__ == "__main__":
    cli()
