"""Image analysis: brightness/edge maps and palette clustering."""

from .image_analyzer import ImageAnalyzer, angular_distance
from .color_clusters import (
    Palette,
    generate_palette,
    kmeans,
    nearest_color_index,
    palette_from_rgb,
    quantize,
    sample_pixels,
)

__all__ = [
    "ImageAnalyzer",
    "angular_distance",
    "Palette",
    "generate_palette",
    "kmeans",
    "nearest_color_index",
    "palette_from_rgb",
    "quantize",
    "sample_pixels",
]
