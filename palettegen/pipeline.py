"""Palette extraction pipeline: sample an image, then cluster its pixels."""
import logging
from typing import Callable, List, Optional

from palettegen.kmeans import KMeansResult, kmeans
from palettegen.sampler import ImageSource, sample
from palettegen.types import ColorSample, PaletteConfig

logger = logging.getLogger(__name__)


class PaletteExtractor:
    """Extracts a palette of representative colors from an image."""

    def __init__(self, config: Optional[PaletteConfig] = None):
        """Initialize extractor with configuration.

        Args:
            config: Extraction configuration. Uses defaults if None.
        """
        self.config = config or PaletteConfig()
        self.last_result: Optional[KMeansResult] = None

    def extract(
        self,
        image: ImageSource,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[ColorSample]:
        """Extract config.n_colors colors from an image.

        Args:
            image: Any resource accepted by sampler.sample
            should_stop: Optional cancellation check, polled per iteration

        Returns:
            Palette colors in centroid order

        Raises:
            FileNotFoundError: If a path does not exist
            DecodeError: If the image cannot be rasterized
            ClusteringCancelled: If should_stop returned True
        """
        samples = sample(image)
        logger.info(f"Sampled {len(samples)} pixels")

        result = kmeans(
            samples,
            self.config.n_colors,
            self.config.max_iterations,
            seed=self.config.seed,
            chunk_size=self.config.chunk_size,
            n_jobs=self.config.n_jobs,
            should_stop=should_stop,
        )
        self.last_result = result
        return result.colors()


def extract_palette(
    image: ImageSource, config: Optional[PaletteConfig] = None
) -> List[ColorSample]:
    """Extract a palette from an image.

    Convenience function for one-off extraction.

    Example:
        >>> colors = extract_palette("photo.jpg")
        >>> colors = extract_palette("photo.jpg", PaletteConfig(n_colors=8, seed=1))
    """
    return PaletteExtractor(config).extract(image)
