"""palettegen: color palettes from images by k-means clustering.

Samples an image into normalized RGB pixels, clusters them into a small
set of representative colors, and formats the result for display.
"""

from palettegen.kmeans import KMeansResult, cluster, kmeans
from palettegen.palette import (
    PaletteEntry,
    PaletteState,
    contrast_color,
    luminance,
    make_entry,
    random_palette,
    to_hex,
)
from palettegen.pipeline import PaletteExtractor, extract_palette
from palettegen.sampler import sample, sample_buffer
from palettegen.types import (
    BLACK,
    WHITE,
    ClusteringCancelled,
    ColorSample,
    DecodeError,
    InvalidArgument,
    PaletteConfig,
    PaletteError,
    PixelBuffer,
)

__version__ = "0.1.0"
__all__ = [
    "BLACK",
    "WHITE",
    "ClusteringCancelled",
    "ColorSample",
    "DecodeError",
    "InvalidArgument",
    "KMeansResult",
    "PaletteConfig",
    "PaletteEntry",
    "PaletteError",
    "PaletteExtractor",
    "PaletteState",
    "PixelBuffer",
    "cluster",
    "contrast_color",
    "extract_palette",
    "kmeans",
    "luminance",
    "make_entry",
    "random_palette",
    "sample",
    "sample_buffer",
    "to_hex",
]
