"""Pytest configuration and fixtures."""

import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def four_color_image():
    """20x20 RGB image split into red, green, blue and yellow quadrants."""
    pixels = np.zeros((20, 20, 3), dtype=np.uint8)
    pixels[:10, :10] = [255, 0, 0]
    pixels[:10, 10:] = [0, 255, 0]
    pixels[10:, :10] = [0, 0, 255]
    pixels[10:, 10:] = [255, 255, 0]
    return Image.fromarray(pixels, "RGB")


@pytest.fixture
def two_cluster_samples():
    """Samples packed tightly around two colors."""
    rng = np.random.default_rng(0)
    dark = np.clip(0.1 + rng.normal(0, 0.01, (50, 3)), 0.0, 1.0)
    light = np.clip(0.9 + rng.normal(0, 0.01, (50, 3)), 0.0, 1.0)
    return np.vstack([dark, light])


@pytest.fixture
def image_file(tmp_path, four_color_image):
    """The four color image saved as PNG."""
    path = tmp_path / "quadrants.png"
    four_color_image.save(path)
    return path
