"""Image loading and resampling for hosts (Pillow-backed)."""

import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def load_image(path: Union[str, Path]) -> np.ndarray:
    """Decode an image file into an HxWx3 uint8 RGB array.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be decoded as an image
    """
    image_path = Path(path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")

    try:
        with Image.open(image_path) as img:
            pixels = np.asarray(img.convert("RGB"), dtype=np.uint8)
    except OSError as e:
        raise ValueError(f"Cannot decode image {image_path}: {e}") from e

    logger.info(f"Loaded image {image_path} ({pixels.shape[1]}x{pixels.shape[0]})")
    return pixels


def resize_pixels(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
    """Resample an RGB array to exactly width x height (aspect not preserved)."""
    if pixels.shape[1] == width and pixels.shape[0] == height:
        return pixels
    image = Image.fromarray(np.asarray(pixels, dtype=np.uint8))
    resized = image.resize((int(width), int(height)), Image.Resampling.BILINEAR)
    return np.asarray(resized, dtype=np.uint8)
