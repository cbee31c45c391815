"""Command line interface."""

from webcam_fetch.cli.webcam import cli


__all__ = ["cli"]
