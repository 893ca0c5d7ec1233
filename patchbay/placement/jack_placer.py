"""
Image-Driven Jack Placement

Places anchor jacks on a shuffled grid over the image. Each grid candidate
is accepted by an independent random trial whose probability rises on
edges, in high-contrast neighborhoods and in very dark or very bright
regions. A supplemental pass then drops one jack into every empty
40x40 cell (up to a cap) so flat regions still get some coverage.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..analysis.image_analyzer import ImageAnalyzer
from ..model import Jack

logger = logging.getLogger(__name__)


@dataclass
class PlacementWeights:
    """Terms of the placement probability."""
    base: float = 0.1
    edge_bonus: float = 0.6
    contrast_weight: float = 0.3
    extreme_brightness_bonus: float = 0.2
    dark_threshold: float = 50.0
    bright_threshold: float = 200.0
    jitter: float = 2.0  # px, applied in both axes

    # Supplemental pass
    cell_size: int = 40
    cell_margin: float = 5.0
    max_supplemental: int = 100
    supplemental_fraction: float = 0.2  # of max_jacks


def grid_spacing(width: int, height: int) -> int:
    """Candidate grid spacing: max(10, min(width, height) / 40), floored."""
    return int(math.floor(max(10, min(width, height) / 40)))


class JackPlacer:
    """Place jacks over an analyzed image.

    ``jack_density`` is accepted for configuration compatibility but is
    not part of the placement probability.
    """

    def __init__(
        self,
        analyzer: ImageAnalyzer,
        max_jacks: int = 1000,
        jack_density: float = 0.7,
        rng: Optional[random.Random] = None,
        weights: Optional[PlacementWeights] = None,
    ):
        self.analyzer = analyzer
        self.max_jacks = max_jacks
        self.jack_density = jack_density
        self.rng = rng or random.Random()
        self.weights = weights or PlacementWeights()

    def candidate_positions(self) -> List[Tuple[int, int]]:
        """Grid positions, excluding the zero row/column."""
        width, height = self.analyzer.width, self.analyzer.height
        spacing = grid_spacing(width, height)
        return [
            (x, y)
            for x in range(spacing, width, spacing)
            for y in range(spacing, height, spacing)
        ]

    def placement_probability(self, x: float, y: float) -> float:
        w = self.weights
        probability = w.base

        if self.analyzer.is_edge(x, y):
            probability += w.edge_bonus

        probability += self.analyzer.local_contrast(x, y) * w.contrast_weight

        brightness = self.analyzer.brightness_at(x, y)
        if brightness < w.dark_threshold or brightness > w.bright_threshold:
            probability += w.extreme_brightness_bonus

        return probability

    def place(self) -> List[Jack]:
        """Run grid placement followed by the supplemental pass."""
        if not self.analyzer.analyzed:
            logger.warning("Cannot place jacks - image not analyzed")
            return []

        positions = self.candidate_positions()
        self.rng.shuffle(positions)

        jacks: List[Jack] = []
        jitter = self.weights.jitter
        for x, y in positions:
            if len(jacks) >= self.max_jacks:
                break
            if self.rng.random() < self.placement_probability(x, y):
                jacks.append(Jack(
                    id=len(jacks),
                    x=x + self.rng.uniform(-jitter, jitter),
                    y=y + self.rng.uniform(-jitter, jitter),
                ))

        placed = len(jacks)
        self.add_supplemental(jacks)
        logger.info(
            f"Placed {placed} jacks from {len(positions)} candidates "
            f"(+{len(jacks) - placed} supplemental)"
        )
        return jacks

    def add_supplemental(self, jacks: List[Jack]) -> int:
        """Add one jack to each empty cell, in row-major cell order.

        Returns the number of jacks added.
        """
        w = self.weights
        width, height = self.analyzer.width, self.analyzer.height
        cell = w.cell_size
        rows = int(math.ceil(height / cell))
        cols = int(math.ceil(width / cell))
        counts = [0] * (rows * cols)

        for jack in jacks:
            col = int(math.floor(jack.x / cell))
            row = int(math.floor(jack.y / cell))
            if 0 <= col < cols and 0 <= row < rows:
                counts[row * cols + col] += 1

        limit = min(w.max_supplemental, self.max_jacks * w.supplemental_fraction)
        added = 0
        for index, count in enumerate(counts):
            if added >= limit:
                break
            if count >= 1:
                continue
            row, col = divmod(index, cols)
            x = col * cell + self.rng.uniform(w.cell_margin, cell - w.cell_margin)
            y = row * cell + self.rng.uniform(w.cell_margin, cell - w.cell_margin)
            if 0 <= x < width and 0 <= y < height:
                jacks.append(Jack(id=len(jacks), x=x, y=y))
                added += 1

        return added
