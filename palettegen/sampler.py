"""Pixel sampling: rasterize an image into normalized RGB samples."""
import io
import logging
from pathlib import Path
from typing import List, Union

import numpy as np
from PIL import Image
from PIL import ImageOps

from palettegen.types import ColorSample, DecodeError, PixelBuffer, SampleArray

logger = logging.getLogger(__name__)

ImageSource = Union[Image.Image, str, Path, bytes, PixelBuffer, np.ndarray]

BYTES_PER_PIXEL = 4


def sample_buffer(data: bytes, width: int, height: int) -> SampleArray:
    """
    Convert a raw RGBA byte buffer into normalized samples.

    The buffer holds 4 bytes per pixel (R, G, B, A), row-major from the
    top row. Each byte is divided by 255.0; alpha is read and dropped.

    Args:
        data: Raw premultiplied RGBA bytes
        width: Image width in pixels
        height: Image height in pixels

    Returns:
        Float array (width * height, 3) in row-major pixel order

    Raises:
        DecodeError: If the size is not positive or the buffer length
            does not match width * height * 4
    """
    if width <= 0 or height <= 0:
        raise DecodeError(f"Image has no pixels: {width}x{height}")

    expected = width * height * BYTES_PER_PIXEL
    if len(data) != expected:
        raise DecodeError(
            f"Pixel buffer holds {len(data)} bytes, expected {expected} "
            f"for {width}x{height} RGBA"
        )

    rgba = np.frombuffer(data, dtype=np.uint8).reshape(-1, BYTES_PER_PIXEL)
    normalized = rgba.astype(np.float64) / 255.0

    # Alpha is not part of a sample
    return np.ascontiguousarray(normalized[:, :3])


def rasterize(image: Image.Image) -> PixelBuffer:
    """
    Draw a Pillow image into a premultiplied RGBA buffer.

    Raises:
        DecodeError: If the image is empty or cannot be converted
    """
    width, height = image.size
    if width <= 0 or height <= 0:
        raise DecodeError(f"Image has no pixels: {width}x{height}")

    try:
        image = ImageOps.exif_transpose(image)
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        premultiplied = image.convert("RGBa")
        data = premultiplied.tobytes()
    except (OSError, ValueError) as e:
        raise DecodeError(f"Failed to rasterize {image.mode} image: {e}") from e

    width, height = premultiplied.size
    return PixelBuffer(data=data, width=width, height=height)


def _open(source: Union[str, Path, bytes]) -> Image.Image:
    """Open and fully decode an encoded image file or byte string."""
    if isinstance(source, bytes):
        handle = io.BytesIO(source)
        name = "<bytes>"
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Image file not found: {path}")
        if not path.is_file():
            raise DecodeError(f"Path is not a file: {path}")
        handle = path
        name = str(path)

    try:
        img = Image.open(handle)
        img.load()
        return img
    except Image.DecompressionBombError as e:
        raise DecodeError(f"Image {name} is too large to decode: {e}") from e
    except (OSError, ValueError) as e:
        raise DecodeError(f"Failed to load image {name}: {e}") from e


def _array_to_buffer(array: np.ndarray) -> PixelBuffer:
    """Wrap an (H, W, 4) or (H, W, 3) uint8 array as a pixel buffer."""
    if array.dtype != np.uint8:
        raise DecodeError(f"Expected uint8 pixel array, got {array.dtype}")
    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise DecodeError(f"Expected (H, W, 3|4) array, got shape {array.shape}")

    height, width = array.shape[:2]
    if array.shape[2] == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        array = np.concatenate([array, alpha], axis=2)

    return PixelBuffer(
        data=np.ascontiguousarray(array).tobytes(), width=width, height=height
    )


def sample(image: ImageSource) -> SampleArray:
    """
    Rasterize an image resource and return one sample per pixel.

    Accepts a Pillow image, a file path, encoded image bytes, a raw
    PixelBuffer, or a uint8 array of shape (H, W, 4). Pillow images and
    encoded files are drawn into premultiplied RGBA first; buffers and
    arrays are taken as already rasterized.

    Args:
        image: The image resource

    Returns:
        Float array (W * H, 3) of R, G, B in [0, 1], row-major

    Raises:
        FileNotFoundError: If a path does not exist
        DecodeError: If the resource cannot be rasterized
    """
    if isinstance(image, PixelBuffer):
        buffer = image
    elif isinstance(image, np.ndarray):
        buffer = _array_to_buffer(image)
    elif isinstance(image, Image.Image):
        buffer = rasterize(image)
    elif isinstance(image, (str, Path, bytes)):
        with _open(image) as img:
            buffer = rasterize(img)
    else:
        raise DecodeError(f"Unsupported image resource: {type(image).__name__}")

    logger.debug(f"Sampling {buffer.width}x{buffer.height} image")
    return sample_buffer(buffer.data, buffer.width, buffer.height)


def to_samples(array: SampleArray) -> List[ColorSample]:
    """Convert an (N, 3) sample array into ColorSample values."""
    return [ColorSample.from_array(row) for row in np.asarray(array)]
