"""Rope physics and the connect/disconnect lifecycle for synth mode."""

from .rope import (
    RopePhysics,
    create_rope_points,
    oscillate,
    relaxation_iterations,
    rest_distance,
    segment_count,
)
from .lifecycle import ConnectionLifecycleManager, LifecycleEvents, SynthState

__all__ = [
    "RopePhysics",
    "create_rope_points",
    "oscillate",
    "relaxation_iterations",
    "rest_distance",
    "segment_count",
    "ConnectionLifecycleManager",
    "LifecycleEvents",
    "SynthState",
]
