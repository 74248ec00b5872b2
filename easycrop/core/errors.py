"""Error types raised by the crop engine and image session."""

from enum import Enum, auto


class CropError(Exception):
    """Base class for recoverable crop failures."""


class EmptyRegionError(CropError):
    """Extraction attempted with no committed crop region."""


class OutOfBoundsError(CropError):
    """The crop region does not intersect the current raster."""


class NoRasterError(CropError):
    """No raster is loaded, so there is nothing to crop."""


class ImageLoadError(Exception):
    """The source image could not be read."""


class CommitOutcome(Enum):
    """Result of finishing an interaction on a region builder."""
    COMMITTED = auto()
    # Shape too small; the builder has been reset
    DEGENERATE = auto()
    # The interaction started outside the raster
    IGNORED = auto()
