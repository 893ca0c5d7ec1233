"""
Connection Lifecycle

Drives the autonomous patching behavior of synth mode. On every
``connection_interval`` the manager either plugs a new cable between two
free jacks or starts unplugging a random steady one. Plugging and
unplugging are animated: the cable's progress climbs from 0 to 1 at
``delta / connection_duration`` per tick before the transition completes.

State transitions:
    connecting --(progress reaches 1)--> steady
    steady --(timer picks it)--> disconnecting
    disconnecting --(progress reaches 1)--> removed (jacks released)

Jacks are occupied from the moment a connection starts until its removal
completes.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..analysis.color_clusters import palette_from_rgb
from ..config import SynthConfig
from ..model import CableState, Color, Jack, RopeCable
from .rope import RopePhysics

logger = logging.getLogger(__name__)


@dataclass
class SynthState:
    """All mutable synth-mode state, owned by one visualizer.

    ``cables`` holds steady and disconnecting cables (both are simulated
    and both occupy their jacks); ``connecting`` holds cables still being
    revealed.
    """
    width: float
    height: float
    jacks: List[Jack] = field(default_factory=list)
    cables: List[RopeCable] = field(default_factory=list)
    connecting: List[RopeCable] = field(default_factory=list)
    elapsed_ms: float = 0.0
    last_connection_ms: float = 0.0
    gravity: float = 0.0
    tension: float = 0.0
    rng: random.Random = field(default_factory=random.Random)

    def jack(self, jack_id: int) -> Optional[Jack]:
        for jack in self.jacks:
            if jack.id == jack_id:
                return jack
        return None

    @property
    def disconnecting(self) -> List[RopeCable]:
        return [c for c in self.cables if c.state is CableState.DISCONNECTING]

    @property
    def steady(self) -> List[RopeCable]:
        return [c for c in self.cables if c.state is CableState.STEADY]


@dataclass
class LifecycleEvents:
    """What changed during one lifecycle update."""
    started: List[RopeCable] = field(default_factory=list)
    connected: List[RopeCable] = field(default_factory=list)
    unplugging: List[RopeCable] = field(default_factory=list)
    removed: List[RopeCable] = field(default_factory=list)


class ConnectionLifecycleManager:
    """Timer-driven connect/disconnect state machine over a SynthState."""

    def __init__(self, config: Optional[SynthConfig] = None,
                 physics: Optional[RopePhysics] = None,
                 palette: Optional[Sequence[Color]] = None):
        self.config = config or SynthConfig()
        self.physics = physics or RopePhysics(self.config)
        self.palette = tuple(palette) if palette else palette_from_rgb(
            self.config.cable_colors, self.config.cable_alpha
        )

    def _advance(self, cable: RopeCable, delta_ms: float) -> bool:
        """Advance animation progress, clamped at 1. Returns True when complete."""
        step = max(0.0, delta_ms) / self.config.connection_duration
        cable.progress = min(1.0, cable.progress + step)
        return cable.progress >= 1.0

    def update(self, state: SynthState, delta_ms: float) -> LifecycleEvents:
        """Advance timers and animations by one tick."""
        events = LifecycleEvents()
        state.elapsed_ms += delta_ms

        self.advance_animations(state, delta_ms, events)

        if state.elapsed_ms - state.last_connection_ms > self.config.connection_interval:
            state.last_connection_ms = state.elapsed_ms
            self.decide(state, events)

        return events

    def advance_animations(self, state: SynthState, delta_ms: float,
                           events: Optional[LifecycleEvents] = None):
        events = events if events is not None else LifecycleEvents()

        still_connecting = []
        for cable in state.connecting:
            if self._advance(cable, delta_ms):
                cable.state = CableState.STEADY
                state.cables.append(cable)
                events.connected.append(cable)
            else:
                still_connecting.append(cable)
        state.connecting = still_connecting

        remaining = []
        for cable in state.cables:
            if cable.state is CableState.DISCONNECTING and self._advance(cable, delta_ms):
                self.release(state, cable)
                events.removed.append(cable)
            else:
                remaining.append(cable)
        state.cables = remaining

    def decide(self, state: SynthState, events: LifecycleEvents):
        """Randomly connect or disconnect, falling back to connecting."""
        cfg = self.config
        if state.rng.random() < cfg.connect_probability and len(state.steady) < cfg.cable_count:
            cable = self.start_connection(state)
            if cable is not None:
                events.started.append(cable)
            return

        candidates = state.steady
        if candidates:
            cable = state.rng.choice(candidates)
            self.begin_disconnect(cable)
            events.unplugging.append(cable)
        else:
            cable = self.start_connection(state)
            if cable is not None:
                events.started.append(cable)

    def pick_pair(self, state: SynthState):
        """Choose two free jacks closer than half the canvas width, or None."""
        free = [jack for jack in state.jacks if not jack.connected]
        if len(free) < 2:
            return None

        start_index = state.rng.randrange(len(free))
        start = free[start_index]
        max_distance = state.width / 2
        targets = [
            jack for i, jack in enumerate(free)
            if i != start_index and start.distance_to(jack) < max_distance
        ]
        if not targets:
            return None
        return start, state.rng.choice(targets)

    def start_connection(self, state: SynthState) -> Optional[RopeCable]:
        """Begin a connecting cable. Silently returns None if no pair qualifies."""
        pair = self.pick_pair(state)
        if pair is None:
            logger.debug("No free jack pair within reach, skipping connection")
            return None

        start, end = pair
        cable = self.physics.create_cable(start, end, state.rng.choice(self.palette), state.rng)
        start.connect()
        end.connect()
        state.connecting.append(cable)
        logger.debug(f"Connecting jack {start.id} -> {end.id}")
        return cable

    def begin_disconnect(self, cable: RopeCable):
        cable.state = CableState.DISCONNECTING
        cable.progress = 0.0
        logger.debug(f"Disconnecting jack {cable.start} -> {cable.end}")

    def release(self, state: SynthState, cable: RopeCable):
        """Mark a cable removed and free both of its jacks."""
        cable.state = CableState.REMOVED
        for jack_id in (cable.start, cable.end):
            jack = state.jack(jack_id)
            if jack is not None:
                jack.disconnect()
