"""
Synth Visualizer

Autonomous patchbay animation: a fixed jack layout, drooping rope cables
simulated with Verlet physics and a timer that keeps plugging and
unplugging them. Gravity and tension drift slowly over time so the ropes
never settle completely.
"""

import logging
import random
from typing import Optional

from .config import SynthConfig
from .model import CableState
from .physics.lifecycle import ConnectionLifecycleManager, LifecycleEvents, SynthState
from .physics.rope import RopePhysics, oscillate
from .placement.synth_layout import synth_jack_layout
from .render.commands import Frame, synth_frame

logger = logging.getLogger(__name__)

__all__ = ["SynthVisualizer", "SynthState"]


class SynthVisualizer:
    """Owns synth-mode state and advances it once per tick."""

    def __init__(self, config: Optional[SynthConfig] = None,
                 width: float = 800, height: float = 600,
                 seed: Optional[int] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or SynthConfig()
        self.config.validate()
        self.rng = rng or random.Random(seed)
        self.physics = RopePhysics(self.config)
        self.manager = ConnectionLifecycleManager(self.config, self.physics)
        self.state = SynthState(width=width, height=height, rng=self.rng)
        self.reset()

    def reset(self):
        """Rebuild the jack layout and plug the initial steady cables."""
        state = SynthState(
            width=self.state.width,
            height=self.state.height,
            jacks=synth_jack_layout(self.state.width, self.state.height),
            gravity=self.config.gravity,
            tension=self.config.tension,
            rng=self.rng,
        )
        self.state = state

        for _ in range(self.config.initial_cables):
            pair = self.manager.pick_pair(state)
            if pair is None:
                break
            start, end = pair
            cable = self.physics.create_cable(
                start, end, self.rng.choice(self.manager.palette), self.rng
            )
            cable.state = CableState.STEADY
            cable.progress = 1.0
            start.connect()
            end.connect()
            state.cables.append(cable)

        logger.info(
            f"Synth layout with {len(state.jacks)} jacks and {len(state.cables)} initial cables"
        )

    def update(self, delta_ms: float) -> LifecycleEvents:
        """Advance lifecycle timers, the oscillators and the rope physics."""
        state = self.state
        events = self.manager.update(state, delta_ms)

        state.gravity, state.tension = oscillate(
            state.elapsed_ms,
            self.config.auto_gravity_range,
            self.config.auto_tension_range,
        )
        self.physics.step_all(state.cables, state.gravity, state.tension)
        return events

    def render(self) -> Frame:
        state = self.state
        return synth_frame(
            state.width, state.height, self.config,
            state.jacks, state.cables, state.connecting,
        )

    def resize(self, width: float, height: float):
        """Lay the jacks out for a new canvas. All cables are dropped."""
        self.state.width = width
        self.state.height = height
        self.reset()
