"""
Image Analysis

Derives a brightness map and a binary edge map from a source raster and
answers the per-pixel questions the placement and planning stages ask:
color, brightness, edge membership, local contrast and edge direction.

Every accessor returns a neutral value (0 or black) while no image is
loaded, so callers never need to guard against the loading state.
"""

import logging
import math
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Pixels at or above this value in the edge map count as edges
EDGE_ON = 200

CONTRAST_RADIUS = 5
CONTRAST_STRIDE = 2
DIRECTION_RADIUS = 2


def angular_distance(a: float, b: float) -> float:
    """Signed smallest difference b - a, wrapped to (-pi, pi]."""
    diff = (b - a) % (2 * math.pi)
    if diff > math.pi:
        diff -= 2 * math.pi
    return diff


def _as_rgb(image: np.ndarray) -> np.ndarray:
    """Normalize an HxW, HxWx3 or HxWx4 buffer to an HxWx3 uint8 array."""
    pixels = np.asarray(image)
    if pixels.ndim == 2:
        pixels = np.stack([pixels] * 3, axis=-1)
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise ValueError(f"Expected an RGB(A) pixel buffer, got shape {pixels.shape}")
    if pixels.shape[0] == 0 or pixels.shape[1] == 0:
        raise ValueError("Pixel buffer is empty")
    return np.clip(pixels[:, :, :3], 0, 255).astype(np.uint8)


class ImageAnalyzer:
    """Brightness/edge analysis over an RGB pixel buffer.

    Coordinates are (x, y) with x along the width; the buffer itself is
    indexed [row, column] = [y, x].
    """

    def __init__(self, edge_threshold: float = 70.0, image: Optional[np.ndarray] = None):
        self.edge_threshold = edge_threshold
        self.image: Optional[np.ndarray] = None
        self.brightness_map: Optional[np.ndarray] = None
        self.edge_map: Optional[np.ndarray] = None
        if image is not None:
            self.set_image(image)

    @property
    def loaded(self) -> bool:
        return self.image is not None

    @property
    def analyzed(self) -> bool:
        return self.edge_map is not None and self.brightness_map is not None

    @property
    def width(self) -> int:
        return 0 if self.image is None else self.image.shape[1]

    @property
    def height(self) -> int:
        return 0 if self.image is None else self.image.shape[0]

    def set_image(self, image: np.ndarray):
        """Replace the source image. Previous maps are discarded."""
        self.image = _as_rgb(image)
        self.brightness_map = None
        self.edge_map = None
        logger.debug(f"Source image set ({self.width}x{self.height})")

    def analyze(self):
        """Build the brightness map and the edge map."""
        if not self.loaded:
            logger.warning("Cannot analyze - no image loaded")
            return

        logger.info("Analyzing image...")
        self.brightness_map = self.compute_brightness_map()
        self.edge_map = self.compute_edge_map()
        edge_pixels = int(np.count_nonzero(self.edge_map))
        logger.info(f"Image analysis complete ({edge_pixels} edge pixels)")

    def compute_brightness_map(self) -> np.ndarray:
        """Mean of R, G, B per pixel as a float array."""
        return self.image.astype(np.float64).mean(axis=2)

    def compute_edge_map(self) -> np.ndarray:
        """Binary edge map (255 edge, 0 otherwise) from an 8-neighbor gradient.

        Horizontal gradient is the west column minus the east column of the
        3x3 neighborhood, vertical is the north row minus the south row.
        Border pixels are never edges.
        """
        b = self.brightness_map
        if b is None:
            b = self.compute_brightness_map()

        edges = np.zeros(b.shape, dtype=np.uint8)
        if b.shape[0] < 3 or b.shape[1] < 3:
            return edges

        nw, n, ne = b[:-2, :-2], b[:-2, 1:-1], b[:-2, 2:]
        w, e = b[1:-1, :-2], b[1:-1, 2:]
        sw, s, se = b[2:, :-2], b[2:, 1:-1], b[2:, 2:]

        horizontal = (nw + w + sw) - (ne + e + se)
        vertical = (nw + n + ne) - (sw + s + se)
        magnitude = np.sqrt(horizontal * horizontal + vertical * vertical)

        edges[1:-1, 1:-1] = np.where(magnitude > self.edge_threshold, 255, 0)
        return edges

    def _clamp(self, x: float, y: float) -> Tuple[int, int]:
        cx = min(max(int(x), 0), self.width - 1)
        cy = min(max(int(y), 0), self.height - 1)
        return cx, cy

    def color_at(self, x: float, y: float) -> Tuple[int, int, int]:
        if not self.loaded:
            return (0, 0, 0)
        cx, cy = self._clamp(x, y)
        r, g, b = self.image[cy, cx]
        return (int(r), int(g), int(b))

    def brightness_at(self, x: float, y: float) -> float:
        if self.brightness_map is None:
            return 0.0
        cx, cy = self._clamp(x, y)
        return float(self.brightness_map[cy, cx])

    def edge_value(self, x: float, y: float) -> int:
        if self.edge_map is None:
            return 0
        cx, cy = self._clamp(x, y)
        return int(self.edge_map[cy, cx])

    def is_edge(self, x: float, y: float) -> bool:
        return self.edge_value(x, y) > EDGE_ON

    def local_contrast(self, x: float, y: float) -> float:
        """Normalized brightness standard deviation (0-1) around a point."""
        if self.brightness_map is None:
            return 0.0

        offsets = np.arange(-CONTRAST_RADIUS, CONTRAST_RADIUS + 1, CONTRAST_STRIDE)
        xs = np.clip(int(x) + offsets, 0, self.width - 1)
        ys = np.clip(int(y) + offsets, 0, self.height - 1)
        samples = self.brightness_map[np.ix_(ys, xs)]
        return float(samples.std()) / 255.0

    def edge_direction(self, x: float, y: float) -> float:
        """Edge tangent angle (radians) from edge pixels within radius 2.

        Sums the offsets of edge-flagged neighbors and rotates the result by
        90 degrees. Returns 0 when the summed vector is zero.
        """
        if self.edge_map is None:
            return 0.0

        sum_x = 0
        sum_y = 0
        for dx in range(-DIRECTION_RADIUS, DIRECTION_RADIUS + 1):
            for dy in range(-DIRECTION_RADIUS, DIRECTION_RADIUS + 1):
                if dx == 0 and dy == 0:
                    continue
                if self.is_edge(int(x) + dx, int(y) + dy):
                    sum_x += dx
                    sum_y += dy

        if sum_x == 0 and sum_y == 0:
            return 0.0
        return math.atan2(sum_y, sum_x) + math.pi / 2
