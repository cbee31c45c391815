"""Application settings loading."""

from .app import WebcamSettings, get_settings


__all__ = ["WebcamSettings", "get_settings"]
