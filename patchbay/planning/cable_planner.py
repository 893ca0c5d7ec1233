"""
Cable Planning

Greedy randomized search for straight cables that reproduce the source
image. Each attempt picks a random start jack with spare capacity, filters
the other under-capacity jacks by the length window and by an
order-independent attempted-pair set, scores up to ``candidate_cap`` of the
survivors by sampling the image along the line, and keeps the best one
when its score is positive.

Scoring combines three terms:
1. Color consistency - low variance between consecutive samples (0-10)
2. Brightness - mean brightness close to mid-gray (0-5)
3. Edge following - share of samples on edges, with a bonus when the local
   edge runs parallel to the line (scaled by edge_preference * 15)

The planned cables are sorted by descending importance, which is the order
they are revealed in.
"""

import logging
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from ..analysis.color_clusters import quantize
from ..analysis.image_analyzer import ImageAnalyzer, angular_distance
from ..config import ReconstructionConfig
from ..model import Color, Jack, PlannedCable

logger = logging.getLogger(__name__)

# Edge direction within this angle of the line earns the parallel bonus
PARALLEL_TOLERANCE = math.pi / 4
PARALLEL_BONUS = 0.5
EDGE_SCORE_SCALE = 15.0

MAX_COLOR_SCORE = 10.0
COLOR_VARIANCE_CEILING = 100.0
MAX_BRIGHTNESS_SCORE = 5.0
MID_BRIGHTNESS = 128.0


def _map_range(value: float, in_lo: float, in_hi: float,
               out_lo: float, out_hi: float) -> float:
    return out_lo + (value - in_lo) * (out_hi - out_lo) / (in_hi - in_lo)


def pair_key(a: int, b: int) -> Tuple[int, int]:
    """Order-independent key for a jack pair."""
    return (a, b) if a <= b else (b, a)


@dataclass
class PlanResult:
    """Outcome of one planning run."""
    cables: List[PlannedCable] = field(default_factory=list)
    attempts: int = 0
    exhausted_jacks: bool = False  # Stopped early: fewer than 2 jacks with capacity

    @property
    def planned(self) -> int:
        return len(self.cables)


class CablePlanner:
    """Plan image-mode cables over a jack set."""

    def __init__(
        self,
        analyzer: ImageAnalyzer,
        palette: Sequence[Color],
        config: Optional[ReconstructionConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.analyzer = analyzer
        self.palette = tuple(palette)
        self.config = config or ReconstructionConfig()
        self.rng = rng or random.Random()

    def sample_points(self, start: Jack, end: Jack, samples: int) -> List[Tuple[int, int]]:
        """``samples + 1`` equally spaced pixel positions from start to end.

        Positions are floored and clamped to the image bounds. A non-positive
        sample count yields the start position alone.
        """
        width, height = self.analyzer.width, self.analyzer.height
        if samples <= 0:
            x = min(max(int(math.floor(start.x)), 0), width - 1)
            y = min(max(int(math.floor(start.y)), 0), height - 1)
            return [(x, y)]
        points = []
        for i in range(samples + 1):
            t = i / samples
            x = int(math.floor(start.x + (end.x - start.x) * t))
            y = int(math.floor(start.y + (end.y - start.y) * t))
            x = min(max(x, 0), width - 1)
            y = min(max(y, 0), height - 1)
            points.append((x, y))
        return points

    def evaluate_connection_quality(self, start: Jack, end: Jack) -> float:
        """Score the straight path between two jacks. Higher is better."""
        samples = self.config.color_samples
        if not self.analyzer.loaded or samples <= 0:
            return 0.0

        analyzer = self.analyzer
        line_angle = math.atan2(end.y - start.y, end.x - start.x)

        color_variance = 0.0
        edge_following = 0.0
        total_brightness = 0.0
        previous = None
        points = self.sample_points(start, end, samples)

        for i, (x, y) in enumerate(points):
            r, g, b = analyzer.color_at(x, y)
            total_brightness += (r + g + b) / 3

            if analyzer.is_edge(x, y):
                edge_following += 1
                # Endpoints sit on jacks, only interior samples can follow an edge
                if 0 < i < samples:
                    edge_angle = analyzer.edge_direction(x, y)
                    if abs(angular_distance(line_angle, edge_angle)) < PARALLEL_TOLERANCE:
                        edge_following += PARALLEL_BONUS

            if previous is not None:
                pr, pg, pb = previous
                color_variance += math.sqrt((r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2)
            previous = (r, g, b)

        avg_variance = color_variance / samples
        avg_brightness = total_brightness / len(points)

        color_score = _map_range(avg_variance, 0, COLOR_VARIANCE_CEILING, MAX_COLOR_SCORE, 0)
        color_score = min(max(color_score, 0.0), MAX_COLOR_SCORE)
        brightness_score = _map_range(
            abs(avg_brightness - MID_BRIGHTNESS), 0, MID_BRIGHTNESS, MAX_BRIGHTNESS_SCORE, 0
        )
        edge_score = (edge_following / samples) * self.config.edge_preference * EDGE_SCORE_SCALE

        return color_score + brightness_score + edge_score

    def create_cable(self, start: Jack, end: Jack) -> PlannedCable:
        """Build the cable record: quantized average color and importance."""
        samples = self.config.cable_color_samples
        points = self.sample_points(start, end, samples)

        colors = [self.analyzer.color_at(x, y) for x, y in points]
        count = len(colors)
        average = Color(
            sum(c[0] for c in colors) / count,
            sum(c[1] for c in colors) / count,
            sum(c[2] for c in colors) / count,
            self.config.alpha,
        )

        if samples <= 0:
            # No path to sample: start pixel color, unranked
            color = average
            importance = 0.0
        else:
            color = quantize(self.palette, average)
            edge_hits = sum(1 for x, y in points if self.analyzer.is_edge(x, y))
            length = start.distance_to(end)
            importance = (
                (length / self.config.max_cable_length) * 5 +
                (edge_hits / samples) * 10
            )

        return PlannedCable(
            start=start.id,
            end=end.id,
            color=color,
            start_point=(start.x, start.y),
            end_point=(end.x, end.y),
            importance=importance,
        )

    def _candidates(self, start: Jack, available: List[Jack],
                    attempted: Set[Tuple[int, int]]) -> List[Jack]:
        """Length-valid, not-yet-attempted targets for ``start``.

        Every pair examined here is recorded as attempted, whether or not it
        passes the length window.
        """
        cfg = self.config
        targets = []
        for jack in available:
            if jack.id == start.id:
                continue
            key = pair_key(start.id, jack.id)
            if key in attempted:
                continue
            attempted.add(key)

            distance = start.distance_to(jack)
            if cfg.min_cable_length <= distance <= cfg.max_cable_length:
                targets.append(jack)
        return targets

    def plan(self, jacks: List[Jack]) -> PlanResult:
        """Plan cables, mutating the jacks' connection counters.

        Never raises for an underconstrained search; a run that exhausts its
        attempts below the target simply yields fewer cables.
        """
        result = PlanResult()
        if not self.analyzer.loaded:
            logger.warning("Cannot plan cables - no image loaded")
            return result

        cfg = self.config
        attempted: Set[Tuple[int, int]] = set()
        logger.info("Planning cables...")

        while result.planned < cfg.cable_count and result.attempts < cfg.max_attempts:
            result.attempts += 1

            available = [j for j in jacks if j.has_capacity(cfg.max_connections_per_jack)]
            if len(available) < 2:
                result.exhausted_jacks = True
                break

            start = available[self.rng.randrange(len(available))]
            targets = self._candidates(start, available, attempted)
            if not targets:
                continue

            best_target = None
            best_score = -1.0
            for target in targets[:cfg.candidate_cap]:
                score = self.evaluate_connection_quality(start, target)
                if score > best_score:
                    best_score = score
                    best_target = target

            if best_target is None or best_score <= 0:
                continue

            result.cables.append(self.create_cable(start, best_target))
            start.connections += 1
            best_target.connections += 1

        # Stable sort keeps planning order among equal importance
        result.cables.sort(key=lambda c: c.importance, reverse=True)

        logger.info(f"Planned {result.planned} cables after {result.attempts} attempts")
        return result
