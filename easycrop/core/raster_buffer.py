"""
Raster buffer and geometric transform helpers for EasyCrop.

A RasterBuffer is an immutable wrapper around a QImage. Every transform
(scale, rotate, mirror, crop) returns a new buffer; the caller decides
whether to keep the old one. ImageSession keeps the unscaled source and the
scaled display copy side by side.
"""

import math

from PySide6.QtCore import QRect, QSize, Qt
from PySide6.QtGui import QImage, QTransform

from easycrop.core.errors import OutOfBoundsError


class RasterBuffer:
    """
    A width x height pixel grid plus its format tag.

    QImage is implicitly shared, so holding one is cheap; any write made
    through the `image` accessor detaches and never reaches this buffer.
    """

    def __init__(self, image: QImage) -> None:
        if image.isNull():
            raise ValueError("Cannot create a RasterBuffer from a null image")
        self._image = QImage(image)

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        image_format: QImage.Format = QImage.Format.Format_ARGB32,
        fill: int = 0xFF000000,
    ) -> "RasterBuffer":
        """Create a buffer filled with a single ARGB value."""
        image = QImage(width, height, image_format)
        image.fill(fill)
        return cls(image)

    @property
    def image(self) -> QImage:
        return QImage(self._image)

    @property
    def width(self) -> int:
        return self._image.width()

    @property
    def height(self) -> int:
        return self._image.height()

    @property
    def size(self) -> QSize:
        return self._image.size()

    @property
    def format(self) -> QImage.Format:
        return self._image.format()

    @property
    def is_portrait(self) -> bool:
        return self.height > self.width

    def rect(self) -> QRect:
        return self._image.rect()

    def pixel(self, x: int, y: int) -> int:
        """Return the ARGB value at (x, y)."""
        return self._image.pixel(x, y)

    def crop(self, rect: QRect) -> "RasterBuffer":
        """
        Copy out the part of the buffer covered by `rect`.

        Raises:
            OutOfBoundsError: If `rect` does not overlap the buffer.
        """
        clipped = rect.intersected(self.rect())
        if clipped.isEmpty():
            raise OutOfBoundsError(
                f"Region {rect} does not intersect raster {self.width}x{self.height}"
            )
        return RasterBuffer(self._image.copy(clipped))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterBuffer):
            return NotImplemented
        return self._image == other._image

    def __repr__(self) -> str:
        return f"RasterBuffer({self.width}x{self.height}, {self.format.name})"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def scale_to_fit(buffer: RasterBuffer, max_width: int, max_height: int) -> RasterBuffer:
    """
    Uniformly scale `buffer` so it fits inside max_width x max_height.

    The factor is min(max_width / width, max_height / height); the result
    dimensions are rounded half-up, so the aspect ratio is kept to within
    one pixel. Small images are scaled up to touch the bounds.
    """
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Invalid bounds {max_width}x{max_height}")

    ratio = min(max_width / buffer.width, max_height / buffer.height)
    scaled_width = min(max_width, max(1, _round_half_up(buffer.width * ratio)))
    scaled_height = min(max_height, max(1, _round_half_up(buffer.height * ratio)))

    if (scaled_width, scaled_height) == (buffer.width, buffer.height):
        return RasterBuffer(buffer.image)

    scaled = buffer.image.scaled(
        scaled_width,
        scaled_height,
        Qt.AspectRatioMode.IgnoreAspectRatio,
        Qt.TransformationMode.SmoothTransformation,
    )
    return RasterBuffer(scaled)


def rotate90(buffer: RasterBuffer) -> RasterBuffer:
    """Rotate 90 degrees clockwise; width and height swap."""
    return RasterBuffer(buffer.image.transformed(QTransform().rotate(90)))


def mirror(buffer: RasterBuffer) -> RasterBuffer:
    """
    Mirror the buffer along an axis chosen by its orientation.

    Portrait buffers (height > width) are mirrored about the vertical axis
    (left and right swap); landscape and square buffers about the horizontal
    axis (top and bottom swap).
    """
    if buffer.is_portrait:
        transform = QTransform().scale(-1, 1)
    else:
        transform = QTransform().scale(1, -1)
    return RasterBuffer(buffer.image.transformed(transform))
