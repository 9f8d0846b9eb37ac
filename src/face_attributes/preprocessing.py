"""
Image decoding and normalization shared by all three classifiers.

Every model consumes the same tensor: the largest centered square of the
photo, resized to 96x96, with 8-bit RGB values scaled to [0, 1] and laid out
as [1, height, width, channel]. The layout must match the one the models were
exported with; a transposed tensor still runs but silently degrades accuracy.
"""

import io
import logging
import os
from typing import BinaryIO, Union

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from .config import IMAGE_SIZE, RESAMPLE_FILTERS
from .errors import DecodeError

logger = logging.getLogger(__name__)

ImageSource = Union[str, os.PathLike, bytes, BinaryIO, Image.Image, np.ndarray]

_RESAMPLE = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


def get_resample_filter(name: str) -> Image.Resampling:
    """Map a filter name from the config to a PIL resampling filter."""
    if name not in _RESAMPLE:
        raise ValueError(f"Invalid resample filter: {name}. Available: {RESAMPLE_FILTERS}")
    return _RESAMPLE[name]


def _open(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, np.ndarray):
        return Image.fromarray(source)
    if isinstance(source, (bytes, bytearray)):
        return Image.open(io.BytesIO(source))
    if isinstance(source, (str, os.PathLike)) or hasattr(source, "read"):
        return Image.open(source)
    raise TypeError(f"Unsupported image source type: {type(source).__name__}")


def load_image(source: ImageSource) -> Image.Image:
    """
    Decode an image source into a fully loaded PIL image.

    Args:
        source: Image path, raw bytes, binary file object, PIL Image or
            uint8 numpy array (HxW, HxWx3 or HxWx4)

    Returns:
        Decoded image with its EXIF orientation applied

    Raises:
        DecodeError: If the source cannot be turned into pixel data
    """
    try:
        image = _open(source)
        # PIL decodes lazily; force it so corrupt data fails here
        image.load()
        image = ImageOps.exif_transpose(image)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
        TypeError,
    ) as e:
        raise DecodeError(f"Cannot decode image: {e}") from e

    width, height = image.size
    if width == 0 or height == 0:
        raise DecodeError(f"Image has no pixels ({width}x{height})")

    logger.debug("Decoded %dx%d image (mode %s)", width, height, image.mode)
    return image


# Single channel modes holding more than 8 bits; PIL's own convert clips them at 255
_WIDE_MODES = {"I;16", "I;16L", "I;16B", "I;16N", "I", "F"}


def _to_8bit(image: Image.Image) -> Image.Image:
    """Scale a 16-bit range single channel image down to 8-bit grayscale."""
    values = np.clip(np.asarray(image, dtype=np.float64), 0, 65535).astype(np.uint16)
    return Image.fromarray((values >> 8).astype(np.uint8))


def center_crop_box(width: int, height: int) -> tuple[int, int, int, int]:
    """
    Get the largest centered square inside a width x height image.

    Offsets use floor division, so an odd margin leaves the extra pixel on
    the right/bottom.

    Returns:
        (left, top, right, bottom) box for Image.crop
    """
    size = min(width, height)
    x_offset = (width - size) // 2
    y_offset = (height - size) // 2
    return x_offset, y_offset, x_offset + size, y_offset + size


def normalize(
    image: Image.Image, image_size: int = IMAGE_SIZE, resample: str = "bilinear"
) -> np.ndarray:
    """
    Convert a decoded image into the normalized model input tensor.

    Args:
        image: Decoded PIL image of any size, aspect ratio and mode
        image_size: Side of the square model input
        resample: Filter used to scale the center crop

    Returns:
        float32 array of shape (1, image_size, image_size, 3) with values in
        [0, 1], indexed [0][y][x][channel] with channels in RGB order
    """
    if image.mode in _WIDE_MODES:
        image = _to_8bit(image)
    if image.mode != "RGBA":
        image = image.convert("RGBA")

    square = image.crop(center_crop_box(*image.size))
    if square.size != (image_size, image_size):
        square = square.resize((image_size, image_size), get_resample_filter(resample))

    # asarray yields rows first, matching [y][x]; alpha is dropped
    pixels = np.asarray(square, dtype=np.uint8)[:, :, :3]
    tensor = pixels.astype(np.float32) / np.float32(255.0)

    return tensor[np.newaxis, ...]


def preprocess(
    source: ImageSource, image_size: int = IMAGE_SIZE, resample: str = "bilinear"
) -> np.ndarray:
    """Decode an image source and normalize it in one step."""
    return normalize(load_image(source), image_size=image_size, resample=resample)
