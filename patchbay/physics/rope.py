"""
Verlet Rope Physics

Each synth cable is a chain of mass points pinned at both ends to its
jacks. A tick has two phases:

1. Integration - every free point keeps its implicit velocity
   (current - previous) scaled by ``dampening`` and falls by ``gravity``.
2. Relaxation - ``ceil(tension)`` passes over adjacent point pairs pull
   each pair a quarter of the way toward a per-segment rest distance.
   Rest distances vary with the segment index, which gives the slack an
   uneven, hand-patched look.

Gravity and tension are not constants: ``oscillate`` maps two slow sine
waves of elapsed time into the configured ranges, so every cable breathes
together without per-cable state.
"""

import logging
import math
import random
from typing import Iterable, List, Optional, Tuple

from ..config import SynthConfig
from ..model import Color, Jack, MassPoint, RopeCable

logger = logging.getLogger(__name__)

BASE_SEGMENT_LENGTH = 25.0
SLACK_FACTOR = 1.3
SLACK_VARIATION = 0.1
SLACK_FREQUENCY = 0.5
RELAX_FACTOR = 0.25
MIN_SEPARATION = 1e-9

# Initial droop geometry
DROOP_DIVISOR = 2.5
EXTRA_SEGMENT_LENGTH = 200.0
JITTER_X = (-20.0, 20.0)
JITTER_Y = (-10.0, 30.0)  # biased downward

# Oscillator angular speeds (radians per millisecond) and phases
GRAVITY_SPEED = 0.0005
TENSION_SPEED = 0.0003
TENSION_PHASE = 1.0


def rest_distance(segment_index: int) -> float:
    """Target length of the segment between points i and i + 1."""
    excess = SLACK_FACTOR + math.sin(segment_index * SLACK_FREQUENCY) * SLACK_VARIATION
    return BASE_SEGMENT_LENGTH * excess


def relaxation_iterations(tension: float) -> int:
    """Number of relaxation passes for a (possibly fractional) tension."""
    return max(0, int(math.ceil(tension)))


def _map_sine(value: float, low: float, high: float) -> float:
    return low + (value + 1.0) * (high - low) / 2.0


def oscillate(elapsed_ms: float,
              gravity_range: Tuple[float, float],
              tension_range: Tuple[float, float]) -> Tuple[float, float]:
    """Gravity and tension for a point in time, each within its range."""
    gravity = _map_sine(math.sin(elapsed_ms * GRAVITY_SPEED), *gravity_range)
    tension = _map_sine(math.sin(elapsed_ms * TENSION_SPEED + TENSION_PHASE), *tension_range)
    return gravity, tension


def segment_count(start: Jack, end: Jack, base_segments: int) -> int:
    """Longer cables get one extra segment per 200 px of span."""
    span = start.distance_to(end)
    return base_segments + int(math.floor(span / EXTRA_SEGMENT_LENGTH))


def create_rope_points(start: Jack, end: Jack, base_segments: int,
                       rng: Optional[random.Random] = None) -> List[MassPoint]:
    """Initial point chain hanging in a sine-shaped droop between two jacks.

    Endpoints are fixed at the jacks. Interior points start at rest
    (previous position equals current).
    """
    rng = rng or random.Random()
    span = start.distance_to(end)
    count = segment_count(start, end, base_segments)
    droop_height = span / DROOP_DIVISOR

    points = [MassPoint.at_rest(start.x, start.y, fixed=True)]
    for i in range(1, count):
        t = i / count
        x = start.x + (end.x - start.x) * t
        y = start.y + (end.y - start.y) * t + math.sin(t * math.pi) * droop_height

        if 1 < i < count - 1:
            x += rng.uniform(*JITTER_X)
            y += rng.uniform(*JITTER_Y)

        points.append(MassPoint.at_rest(x, y))
    points.append(MassPoint.at_rest(end.x, end.y, fixed=True))
    return points


class RopePhysics:
    """Verlet integration with iterative distance-constraint relaxation."""

    def __init__(self, config: Optional[SynthConfig] = None):
        self.config = config or SynthConfig()

    def integrate(self, points: List[MassPoint], gravity: float, dampening: float):
        for p in points:
            if p.fixed:
                continue
            vx = (p.x - p.prev_x) * dampening
            vy = (p.y - p.prev_y) * dampening
            p.prev_x = p.x
            p.prev_y = p.y
            p.x += vx
            p.y += vy + gravity

    def relax(self, points: List[MassPoint], iterations: int):
        """Pull adjacent points toward their rest distance.

        Pairs closer than MIN_SEPARATION are skipped so coincident points
        never produce a division by zero.
        """
        for _ in range(iterations):
            for i in range(len(points) - 1):
                p1 = points[i]
                p2 = points[i + 1]

                dx = p2.x - p1.x
                dy = p2.y - p1.y
                current = math.sqrt(dx * dx + dy * dy)
                if current < MIN_SEPARATION:
                    continue

                difference = (rest_distance(i) - current) / current
                offset_x = dx * RELAX_FACTOR * difference
                offset_y = dy * RELAX_FACTOR * difference

                if not p1.fixed:
                    p1.x -= offset_x
                    p1.y -= offset_y
                if not p2.fixed:
                    p2.x += offset_x
                    p2.y += offset_y

    def step(self, cable: RopeCable, gravity: float, tension: float):
        """Advance one cable by one tick."""
        self.integrate(cable.points, gravity, self.config.dampening)
        self.relax(cable.points, relaxation_iterations(tension))

    def step_all(self, cables: Iterable[RopeCable], gravity: float, tension: float) -> int:
        stepped = 0
        for cable in cables:
            self.step(cable, gravity, tension)
            stepped += 1
        return stepped

    def create_cable(self, start: Jack, end: Jack, color: Color,
                     rng: Optional[random.Random] = None) -> RopeCable:
        """A new connecting cable with its droop geometry."""
        return RopeCable(
            start=start.id,
            end=end.id,
            color=color,
            points=create_rope_points(start, end, self.config.cable_segments, rng),
        )
