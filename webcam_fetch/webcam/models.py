"""Data models for the webcam pipeline."""

from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from webcam_fetch.errors import InvalidShrinkError
from webcam_fetch.webcam.constants import (
    MAX_HEIGHT,
    MAX_PERCENT_EXCLUSIVE,
    MAX_WIDTH,
    MIN_DIMENSION,
    MIN_PERCENT_EXCLUSIVE,
)


class NoShrink(BaseModel):
    """Keep the image at its original size."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["none"] = "none"

    @property
    def is_noop(self) -> bool:
        return True

    def validate_bounds(self) -> None:
        """Nothing to validate."""

    def target_size(self, width: int, height: int) -> tuple[int, int]:
        return width, height


class PercentageShrink(BaseModel):
    """Scale both axes by the same percentage."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["percentage"] = "percentage"
    percent: int

    @property
    def is_noop(self) -> bool:
        return False

    def validate_bounds(self) -> None:
        """Check that the percentage lies strictly between 0 and 100.

        Raises:
            InvalidShrinkError: If the percentage is out of range.
        """
        if not MIN_PERCENT_EXCLUSIVE < self.percent < MAX_PERCENT_EXCLUSIVE:
            msg = (
                f"Invalid shrink size {self.percent} "
                f"({MIN_PERCENT_EXCLUSIVE} < expected < {MAX_PERCENT_EXCLUSIVE})"
            )
            raise InvalidShrinkError(msg)

    def target_size(self, width: int, height: int) -> tuple[int, int]:
        """Scale dimensions, truncating towards zero."""
        return width * self.percent // 100, height * self.percent // 100


class DimensionShrink(BaseModel):
    """Resize to a fixed width and height."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["dimensions"] = "dimensions"
    width: int
    height: int

    @property
    def is_noop(self) -> bool:
        return False

    def validate_bounds(self) -> None:
        """Check width and height against the supported bounds.

        Raises:
            InvalidShrinkError: If width or height is out of range.
        """
        if not MIN_DIMENSION <= self.width <= MAX_WIDTH:
            msg = (
                f"The width value for shrinking is invalid: {self.width} "
                f"(expected {MIN_DIMENSION}..{MAX_WIDTH})"
            )
            raise InvalidShrinkError(msg)
        if not MIN_DIMENSION <= self.height <= MAX_HEIGHT:
            msg = (
                f"The height value for shrinking is invalid: {self.height} "
                f"(expected {MIN_DIMENSION}..{MAX_HEIGHT})"
            )
            raise InvalidShrinkError(msg)

    def target_size(self, width: int, height: int) -> tuple[int, int]:
        return self.width, self.height


ShrinkPolicy = NoShrink | PercentageShrink | DimensionShrink

ShrinkValue = ShrinkPolicy | int | str | Mapping[str, int | str] | None


def _to_int(value: object, name: str) -> int:
    if isinstance(value, bool):
        msg = f"Shrink {name} must be an integer, got {value!r}"
        raise InvalidShrinkError(msg)
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        msg = f"Shrink {name} must be an integer, got {value!r}"
        raise InvalidShrinkError(msg) from e


def _from_mapping(value: Mapping[str, int | str]) -> DimensionShrink:
    width = value.get("w", value.get("width", 0))
    height = value.get("h", value.get("height", 0))
    return DimensionShrink(
        width=_to_int(width, "width"),
        height=_to_int(height, "height"),
    )


def _from_string(value: str) -> ShrinkPolicy:
    text = value.strip().lower()
    if not text:
        return NoShrink()
    if "x" in text:
        width, _, height = text.partition("x")
        return DimensionShrink(
            width=_to_int(width.strip(), "width"),
            height=_to_int(height.strip(), "height"),
        )
    percent = _to_int(text, "percentage")
    return NoShrink() if percent == 0 else PercentageShrink(percent=percent)


def parse_shrink_policy(value: ShrinkValue) -> ShrinkPolicy:
    """Decide the shape of a shrink policy.

    Accepts ``None`` or ``0`` (no resize), an integer percentage, a mapping
    with ``w``/``h`` (or ``width``/``height``) keys, or a string such as
    ``"80"`` or ``"200x150"``. Only the shape is checked here; ranges are
    checked by ``validate_bounds`` when the resize runs.

    Args:
        value: Raw shrink configuration.

    Returns:
        The matching policy variant.

    Raises:
        InvalidShrinkError: If the value has an unsupported shape.
    """
    if isinstance(value, NoShrink | PercentageShrink | DimensionShrink):
        return value
    if value is None:
        return NoShrink()
    if isinstance(value, bool):
        msg = f"Unsupported shrink value {value!r}"
        raise InvalidShrinkError(msg)
    if isinstance(value, int):
        return NoShrink() if value == 0 else PercentageShrink(percent=value)
    if isinstance(value, str):
        return _from_string(value)
    if isinstance(value, Mapping):
        return _from_mapping(value)
    msg = f"Unsupported shrink value {value!r}"
    raise InvalidShrinkError(msg)


class FreshnessResult(BaseModel):
    """Outcome of a freshness check."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    is_new: bool
    reason: str = Field(description="Why a fetch is or is not required")
    remote_date: datetime | None = Field(
        default=None, description="Last-Modified or Expires date used, if any"
    )


class ImageDelivery(BaseModel):
    """Cached image bytes plus the response headers to send with them."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    headers: dict[str, str]
    body: bytes

    @property
    def content_length(self) -> int:
        return len(self.body)
