"""Core types and exceptions for palettegen."""
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

import numpy as np

# Type aliases
SampleArray = np.ndarray


@dataclass(frozen=True)
class ColorSample:
    """Normalized RGB color with channels in [0.0, 1.0]."""
    red: float
    green: float
    blue: float

    def __iter__(self) -> Iterator[float]:
        yield self.red
        yield self.green
        yield self.blue

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.red, self.green, self.blue)

    @classmethod
    def from_array(cls, values) -> "ColorSample":
        """Build a sample from any 3-element sequence or array row."""
        r, g, b = (float(v) for v in values[:3])
        return cls(r, g, b)


BLACK = ColorSample(0.0, 0.0, 0.0)
WHITE = ColorSample(1.0, 1.0, 1.0)


@dataclass
class PixelBuffer:
    """Raw RGBA bytes, 4 per pixel, row-major from the top row down."""
    data: bytes
    width: int
    height: int


@dataclass
class PaletteConfig:
    """Configuration for palette extraction."""

    # Clustering
    n_colors: int = 5
    max_iterations: int = 10
    seed: Optional[int] = None

    # Assignment step
    chunk_size: int = 65536
    n_jobs: int = 1

    def __post_init__(self):
        if self.n_colors < 1:
            raise InvalidArgument(f"n_colors must be >= 1, got {self.n_colors}")
        if self.max_iterations < 0:
            raise InvalidArgument(
                f"max_iterations must be >= 0, got {self.max_iterations}"
            )
        if self.chunk_size < 1:
            raise InvalidArgument(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.n_jobs < 1:
            raise InvalidArgument(f"n_jobs must be >= 1, got {self.n_jobs}")


class PaletteError(Exception):
    """Base exception for palette errors."""
    pass


class DecodeError(PaletteError):
    """Exception raised when an image cannot be rasterized."""
    pass


class InvalidArgument(PaletteError, ValueError):
    """Exception raised when clustering is called outside its contract."""
    pass


class ClusteringCancelled(PaletteError):
    """Exception raised when a running clustering is asked to stop."""
    pass
