"""
Color Clustering

Lloyd's k-means over randomly sampled pixel colors, producing the fixed
palette cable colors are quantized to. The iteration count is a fixed
budget with no convergence test, and a cluster left empty after an
assignment pass keeps its previous centroid.
"""

import logging
import random
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..model import Color
from .image_analyzer import ImageAnalyzer

logger = logging.getLogger(__name__)

Palette = Tuple[Color, ...]


def sample_pixels(analyzer: ImageAnalyzer, count: int, rng: random.Random) -> np.ndarray:
    """Draw ``count`` uniformly random pixel colors as an (N, 3) float array."""
    if not analyzer.loaded or count <= 0:
        return np.zeros((0, 3), dtype=np.float64)

    samples = np.empty((count, 3), dtype=np.float64)
    for i in range(count):
        x = rng.randrange(analyzer.width)
        y = rng.randrange(analyzer.height)
        samples[i] = analyzer.color_at(x, y)
    return samples


def kmeans(samples: np.ndarray, k: int, iterations: int,
           rng: random.Random) -> np.ndarray:
    """Run k-means and return a (k, 3) array of centroids.

    Centroids start at randomly chosen samples (repeats allowed). Ties in
    the assignment step go to the lowest centroid index.
    """
    samples = np.asarray(samples, dtype=np.float64)
    if k <= 0:
        return np.zeros((0, 3), dtype=np.float64)
    if len(samples) == 0:
        return np.zeros((k, 3), dtype=np.float64)

    centroids = np.array(
        [samples[rng.randrange(len(samples))] for _ in range(k)],
        dtype=np.float64,
    )

    for _ in range(iterations):
        diff = samples[:, np.newaxis, :] - centroids[np.newaxis, :, :]
        distances = np.einsum("ijk,ijk->ij", diff, diff)
        labels = np.argmin(distances, axis=1)

        for j in range(k):
            members = samples[labels == j]
            if len(members) > 0:
                centroids[j] = members.mean(axis=0)

    return centroids


def generate_palette(analyzer: ImageAnalyzer, k: int, rng: random.Random,
                     sample_count: int = 2000, iterations: int = 5,
                     alpha: int = 140) -> Palette:
    """Cluster sampled image colors into a palette of exactly ``k`` colors.

    Returns an empty palette when no image is loaded.
    """
    if not analyzer.loaded:
        logger.warning("Cannot generate palette - no image loaded")
        return ()

    logger.info("Generating color clusters...")
    samples = sample_pixels(analyzer, sample_count, rng)
    centroids = kmeans(samples, k, iterations, rng)
    palette = tuple(Color(float(r), float(g), float(b), alpha) for r, g, b in centroids)
    logger.info(f"Generated {len(palette)} color clusters")
    return palette


def nearest_color_index(palette: Sequence[Color], color: Color) -> Optional[int]:
    """Index of the palette entry closest to ``color`` (first wins on ties)."""
    best_index = None
    best_distance = float("inf")
    for i, candidate in enumerate(palette):
        d = candidate.distance(color)
        if d < best_distance:
            best_distance = d
            best_index = i
    return best_index


def quantize(palette: Sequence[Color], color: Color) -> Color:
    """Snap a color to its nearest palette entry.

    With an empty palette the color itself is returned unchanged.
    """
    index = nearest_color_index(palette, color)
    if index is None:
        return color
    return palette[index]


def palette_from_rgb(colors: List[Tuple[int, int, int]], alpha: int) -> Palette:
    """Build a fixed palette from configured RGB triples."""
    return tuple(Color(r, g, b, alpha) for r, g, b in colors)
