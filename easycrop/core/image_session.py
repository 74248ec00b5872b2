"""
Image session for EasyCrop.

Keeps the canonical unscaled raster of the image being cropped together
with the scaled copy shown on the canvas. Rotate and flip always work on
the unscaled raster and rescale afterwards, so repeated transforms never
accumulate resampling loss.
"""

from pathlib import Path
from typing import Optional, Union

from PySide6.QtGui import QImageReader

from easycrop.core.errors import ImageLoadError, NoRasterError
from easycrop.core.raster_buffer import RasterBuffer, mirror, rotate90, scale_to_fit
from easycrop.services.logging_service import get_logger


class ImageSession:
    """Holds the unscaled and scaled rasters for one crop session."""

    def __init__(self) -> None:
        self._logger = get_logger(__name__)
        self._unscaled: Optional[RasterBuffer] = None
        self._scaled: Optional[RasterBuffer] = None

    @property
    def unscaled(self) -> Optional[RasterBuffer]:
        return self._unscaled

    @property
    def scaled(self) -> Optional[RasterBuffer]:
        return self._scaled

    @property
    def has_image(self) -> bool:
        return self._unscaled is not None

    def load(self, path: Union[str, Path]) -> RasterBuffer:
        """
        Read an image file, applying its EXIF orientation.

        Raises:
            ImageLoadError: If the file cannot be decoded.
        """
        reader = QImageReader(str(path))
        reader.setAutoTransform(True)
        image = reader.read()
        if image.isNull():
            raise ImageLoadError(f"Could not load image {path}: {reader.errorString()}")

        self.set_source(RasterBuffer(image))
        self._logger.info(f"Loaded {path} ({image.width()}x{image.height()})")
        return self._unscaled

    def set_source(self, buffer: RasterBuffer) -> None:
        """Use `buffer` as the unscaled source; the scaled copy is dropped."""
        self._unscaled = buffer
        self._scaled = None

    def rescale(self, canvas_width: int, canvas_height: int) -> RasterBuffer:
        """Fit the unscaled raster to the canvas and keep the result."""
        if self._unscaled is None:
            raise NoRasterError("No image loaded")

        self._scaled = scale_to_fit(self._unscaled, canvas_width, canvas_height)
        self._logger.debug(
            f"Scaled {self._unscaled.width}x{self._unscaled.height} -> "
            f"{self._scaled.width}x{self._scaled.height}"
        )
        return self._scaled

    def rotate(self, canvas_width: int, canvas_height: int) -> RasterBuffer:
        """Rotate the source 90 degrees clockwise and rescale it."""
        if self._unscaled is None:
            raise NoRasterError("No image loaded")

        self._unscaled = rotate90(self._unscaled)
        self._logger.info("Rotated image 90 degrees clockwise")
        return self.rescale(canvas_width, canvas_height)

    def flip(self, canvas_width: int, canvas_height: int) -> RasterBuffer:
        """Mirror the source (axis chosen by orientation) and rescale it."""
        if self._unscaled is None:
            raise NoRasterError("No image loaded")

        axis = "vertical" if self._unscaled.is_portrait else "horizontal"
        self._unscaled = mirror(self._unscaled)
        self._logger.info(f"Mirrored image about the {axis} axis")
        return self.rescale(canvas_width, canvas_height)

    def clear(self) -> None:
        self._unscaled = None
        self._scaled = None
