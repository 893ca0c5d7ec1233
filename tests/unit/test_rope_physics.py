"""
Tests for Verlet rope physics.

Tests cover:
- Rest distances and tension-to-iteration mapping
- Gravity/tension oscillation ranges
- Initial droop geometry
- Integration with dampening
- Distance-constraint relaxation
"""

import math
import random

import pytest

from patchbay.config import SynthConfig
from patchbay.model import CableState, Color, Jack, MassPoint
from patchbay.physics.rope import (
    RopePhysics,
    create_rope_points,
    oscillate,
    relaxation_iterations,
    rest_distance,
    segment_count,
)


@pytest.fixture
def physics() -> RopePhysics:
    return RopePhysics(SynthConfig())


class TestConstants:
    """Tests for rest distances and iteration counts."""

    def test_rest_distance_first_segment(self):
        assert rest_distance(0) == pytest.approx(32.5)

    def test_rest_distance_varies_with_index(self):
        assert rest_distance(3) == pytest.approx(25.0 * (1.3 + math.sin(1.5) * 0.1))

    def test_fractional_tension_rounds_up(self):
        assert relaxation_iterations(2.3) == 3
        assert relaxation_iterations(5.0) == 5

    def test_non_positive_tension(self):
        assert relaxation_iterations(0.0) == 0
        assert relaxation_iterations(-2.0) == 0

    def test_segment_count_grows_with_span(self):
        """Test one extra segment per 200px of span."""
        start, end = Jack(0, 0, 0), Jack(1, 450, 0)
        assert segment_count(start, end, 12) == 14


class TestOscillation:
    """Tests for time-varying gravity and tension."""

    def test_start_of_time(self):
        gravity, tension = oscillate(0.0, (0.05, 0.25), (2.0, 6.0))

        assert gravity == pytest.approx(0.15)
        assert tension == pytest.approx(2.0 + (math.sin(1.0) + 1) * 2.0)

    def test_always_within_ranges(self):
        for t in range(0, 60000, 137):
            gravity, tension = oscillate(float(t), (0.05, 0.25), (2.0, 6.0))
            assert 0.05 - 1e-12 <= gravity <= 0.25 + 1e-12
            assert 2.0 - 1e-12 <= tension <= 6.0 + 1e-12


class TestRopeCreation:
    """Tests for initial droop geometry."""

    def test_endpoints_fixed_at_jacks(self, rng):
        start, end = Jack(0, 100, 100), Jack(1, 400, 120)
        points = create_rope_points(start, end, 12, rng)

        assert len(points) == 14  # 12 + floor(300/200) segments, +1 points
        assert points[0].fixed and points[-1].fixed
        assert (points[0].x, points[0].y) == (100, 100)
        assert (points[-1].x, points[-1].y) == (400, 120)
        assert not any(p.fixed for p in points[1:-1])

    def test_points_start_at_rest(self, rng):
        points = create_rope_points(Jack(0, 0, 0), Jack(1, 300, 0), 12, rng)
        for p in points:
            assert (p.prev_x, p.prev_y) == (p.x, p.y)

    def test_droops_below_line(self, rng):
        """Test that the middle of a horizontal rope hangs below its jacks."""
        points = create_rope_points(Jack(0, 0, 100), Jack(1, 400, 100), 12, rng)
        middle = points[len(points) // 2]
        # Droop at mid-span is 400 / 2.5 = 160, jitter is at most 10 upward
        assert middle.y > 100 + 150

    def test_unjittered_neighbors_of_endpoints(self):
        """Test that the points next to each endpoint follow the pure droop curve."""
        start, end = Jack(0, 0, 0), Jack(1, 100, 0)
        points = create_rope_points(start, end, 10, random.Random(0))
        count = len(points) - 1
        t = 1 / count

        assert points[1].x == pytest.approx(100 * t)
        assert points[1].y == pytest.approx(math.sin(t * math.pi) * 100 / 2.5)
        assert points[count - 1].x == pytest.approx(100 * (count - 1) / count)

    def test_create_cable_state(self, physics, rng):
        cable = physics.create_cable(Jack(3, 0, 0), Jack(7, 200, 0), Color(1, 2, 3), rng)

        assert cable.state is CableState.CONNECTING
        assert cable.progress == 0.0
        assert (cable.start, cable.end) == (3, 7)


class TestIntegration:
    """Tests for the Verlet step."""

    def test_zero_dampening_discards_velocity(self, physics):
        """Test that dampening 0 leaves only gravity acting."""
        point = MassPoint(x=10.0, y=10.0, prev_x=5.0, prev_y=2.0)
        physics.integrate([point], gravity=0.2, dampening=0.0)

        assert point.x == pytest.approx(10.0)
        assert point.y == pytest.approx(10.2)
        assert (point.prev_x, point.prev_y) == (10.0, 10.0)

    def test_full_dampening_keeps_velocity(self, physics):
        point = MassPoint(x=10.0, y=10.0, prev_x=8.0, prev_y=9.0)
        physics.integrate([point], gravity=0.0, dampening=1.0)

        assert point.x == pytest.approx(12.0)
        assert point.y == pytest.approx(11.0)

    def test_fixed_points_do_not_move(self, physics):
        point = MassPoint(x=1.0, y=1.0, prev_x=0.0, prev_y=0.0, fixed=True)
        physics.integrate([point], gravity=5.0, dampening=1.0)
        assert (point.x, point.y) == (1.0, 1.0)


class TestRelaxation:
    """Tests for distance-constraint relaxation."""

    def test_pulls_toward_rest_distance(self, physics):
        """Test one pass moves each end by a quarter of the error."""
        a = MassPoint.at_rest(0.0, 0.0)
        b = MassPoint.at_rest(100.0, 0.0)
        physics.relax([a, b], 1)

        assert b.x - a.x == pytest.approx(100.0 - 2 * 0.25 * (100.0 - 32.5))

    def test_converges_with_iterations(self, physics):
        a = MassPoint.at_rest(0.0, 0.0, fixed=True)
        b = MassPoint.at_rest(100.0, 0.0)
        physics.relax([a, b], 60)

        assert b.x == pytest.approx(32.5, abs=1e-3)
        assert a.x == 0.0

    def test_coincident_points_skipped(self, physics):
        a = MassPoint.at_rest(5.0, 5.0)
        b = MassPoint.at_rest(5.0, 5.0)
        physics.relax([a, b], 3)

        assert (a.x, a.y, b.x, b.y) == (5.0, 5.0, 5.0, 5.0)

    def test_zero_iterations_no_change(self, physics):
        a = MassPoint.at_rest(0.0, 0.0)
        b = MassPoint.at_rest(100.0, 0.0)
        physics.relax([a, b], 0)
        assert b.x == 100.0


class TestStep:
    """Tests for whole-cable steps."""

    def test_endpoints_stay_fixed(self, physics, rng):
        cable = physics.create_cable(Jack(0, 50, 50), Jack(1, 350, 80), Color(0, 0, 0), rng)
        for _ in range(200):
            physics.step(cable, gravity=0.2, tension=4.0)

        assert cable.vertices()[0] == (50, 50)
        assert cable.vertices()[-1] == (350, 80)

    def test_stays_finite(self, physics, rng):
        cable = physics.create_cable(Jack(0, 0, 0), Jack(1, 380, 0), Color(0, 0, 0), rng)
        for _ in range(500):
            physics.step(cable, gravity=0.25, tension=6.0)

        for x, y in cable.vertices():
            assert math.isfinite(x) and math.isfinite(y)

    def test_step_all_counts(self, physics, rng):
        cables = [
            physics.create_cable(Jack(0, 0, 0), Jack(1, 100, 0), Color(0, 0, 0), rng)
            for _ in range(3)
        ]
        assert physics.step_all(cables, 0.1, 2.0) == 3
