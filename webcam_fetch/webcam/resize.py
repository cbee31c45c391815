"""Resize transform for the cached webcam image."""

from pathlib import Path

import structlog
from PIL import Image, UnidentifiedImageError

from webcam_fetch.errors import (
    InvalidFileDataError,
    LocalFileNotFoundError,
    WriteLocalFileError,
)
from webcam_fetch.observability.logging import get_null_logger
from webcam_fetch.webcam.constants import (
    COMPONENT_RESIZE,
    JPEG_QUALITY,
    MAX_HEIGHT,
    MAX_WIDTH,
    MIN_DIMENSION,
)
from webcam_fetch.webcam.models import ShrinkPolicy
from webcam_fetch.webcam.storage import commit, discard, temp_path_for


def dimensions_in_bounds(width: int, height: int) -> bool:
    """Check dimensions against the supported image bounds."""
    return MIN_DIMENSION <= width <= MAX_WIDTH and MIN_DIMENSION <= height <= MAX_HEIGHT


class ResizeTransform:
    """Replaces the local JPEG with a resized copy.

    Source dimensions are read from the JPEG header and checked before any
    pixel data is decoded.
    """

    def __init__(
        self,
        path: Path,
        policy: ShrinkPolicy,
        log: structlog.typing.FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the transform.

        Args:
            path: Local JPEG file, resized in place.
            policy: Shrink policy to apply.
            log: Bound logger, defaults to a no-op logger.
        """
        self._path = path
        self._policy = policy
        self._log = (log or get_null_logger()).bind(
            component=COMPONENT_RESIZE, path=str(path), policy=policy.kind
        )

    @property
    def policy(self) -> ShrinkPolicy:
        """Get the shrink policy."""
        return self._policy

    def apply(self) -> tuple[int, int]:
        """Resize the local file according to the policy.

        Returns:
            The new (width, height).

        Raises:
            InvalidShrinkError: If the policy is out of range.
            LocalFileNotFoundError: If the local file does not exist.
            InvalidFileDataError: If the image cannot be decoded or its
                source or target dimensions are out of bounds.
            WriteLocalFileError: If encoding or writing fails.
        """
        self._policy.validate_bounds()

        if not self._path.exists():
            msg = f"Shrinking failed, the local file {self._path} does not exist!"
            raise LocalFileNotFoundError(msg)

        try:
            with Image.open(self._path, formats=["JPEG"]) as source:
                width, height = source.size
                if not dimensions_in_bounds(width, height):
                    msg = f"The local file has invalid dimensions (w = {width}, h = {height})"
                    raise InvalidFileDataError(msg)

                new_width, new_height = self._policy.target_size(width, height)
                if not dimensions_in_bounds(new_width, new_height):
                    msg = (
                        "The resized image would have invalid dimensions "
                        f"(w = {new_width}, h = {new_height})"
                    )
                    raise InvalidFileDataError(msg)

                resized = source.resize(
                    (new_width, new_height), Image.Resampling.NEAREST
                )
        except UnidentifiedImageError as e:
            msg = f"Could not read the dimensions of the local file {self._path}!"
            raise InvalidFileDataError(msg) from e
        except (OSError, Image.DecompressionBombError) as e:
            msg = f"Could not read the image data out of {self._path}: {e}"
            raise InvalidFileDataError(msg) from e

        try:
            self._encode(resized)
        finally:
            resized.close()

        self._log.info(
            "image_resized",
            from_width=width,
            from_height=height,
            to_width=new_width,
            to_height=new_height,
        )
        return new_width, new_height

    def _encode(self, image: Image.Image) -> None:
        temp_path = temp_path_for(self._path)
        try:
            image.save(temp_path, format="JPEG", quality=JPEG_QUALITY)
        except (OSError, ValueError) as e:
            discard(temp_path)
            msg = f"Could not write the shrunk data into {self._path}: {e}"
            raise WriteLocalFileError(msg, path=self._path) from e
        commit(temp_path, self._path)
