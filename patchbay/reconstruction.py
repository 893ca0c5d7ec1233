"""
Image Reconstruction

Ties the image-mode pipeline together:

    ImageAnalyzer -> palette -> JackPlacer -> CablePlanner -> RevealQueue -> Frame

The host loads the image (a one-shot event), calls ``initialize`` with the
canvas size, then calls ``update`` and ``render`` once per tick. Until an
image has been loaded the system stays in the "loading" state and renders
only a loading message.
"""

import logging
import random
from typing import Callable, List, Optional

import numpy as np

from .analysis.color_clusters import Palette, generate_palette
from .analysis.image_analyzer import ImageAnalyzer
from .config import ReconstructionConfig
from .model import Jack
from .placement.jack_placer import JackPlacer
from .planning.cable_planner import CablePlanner, PlanResult
from .planning.reveal import RevealQueue
from .render.commands import Frame, loading_frame, reconstruction_frame

logger = logging.getLogger(__name__)

Resizer = Callable[[np.ndarray, int, int], np.ndarray]

STATUS_LOADING = "loading"
STATUS_READY = "ready"


class ReconstructionSystem:
    """Owns all image-mode state and rebuilds it on reset."""

    def __init__(
        self,
        config: Optional[ReconstructionConfig] = None,
        seed: Optional[int] = None,
        rng: Optional[random.Random] = None,
        resizer: Optional[Resizer] = None,
    ):
        """
        Args:
            config: Options (defaults when omitted)
            seed: Seed for a private random source, ignored if rng is given
            rng: Shared random source for placement, palette and planning
            resizer: Host callback resampling the source pixels to the canvas
        """
        self.config = config or ReconstructionConfig()
        self.config.validate()
        self.rng = rng or random.Random(seed)
        self.resizer = resizer

        self.analyzer = ImageAnalyzer(self.config.edge_threshold)
        self.source: Optional[np.ndarray] = None  # Decoded pixels, the input to every resize
        self.palette: Palette = ()
        self.jacks: List[Jack] = []
        self.queue = RevealQueue()
        self.last_plan: Optional[PlanResult] = None

        self.canvas_width = 0
        self.canvas_height = 0
        self.initialized = False

    @property
    def status(self) -> str:
        return STATUS_READY if self.initialized else STATUS_LOADING

    @property
    def cables(self):
        """Visible cables in reveal order."""
        return self.queue.visible

    @property
    def pending(self):
        return self.queue.pending

    def load_image(self, pixels: np.ndarray):
        """Hand the decoded source image to the core."""
        self.analyzer.set_image(pixels)
        self.source = self.analyzer.image
        self.initialized = False

    def initialize(self, canvas_width: int, canvas_height: int) -> bool:
        """Fit the image to the canvas, analyze it and plan the first run.

        Returns False (and stays in the loading state) if no image is loaded.
        """
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height

        if not self.analyzer.loaded:
            logger.error("Cannot initialize - image not loaded")
            self.initialized = False
            return False

        self._fit_image()
        self._analyze()
        self.reset()
        self.initialized = True
        return True

    def _fit_image(self):
        """Resample the decoded source pixels to the canvas size."""
        pixels = self.source
        height, width = pixels.shape[:2]
        if self.resizer is not None and (width, height) != (self.canvas_width, self.canvas_height):
            pixels = self.resizer(pixels, self.canvas_width, self.canvas_height)
        self.analyzer.set_image(pixels)

    def _analyze(self):
        cfg = self.config
        self.analyzer.edge_threshold = cfg.edge_threshold
        self.analyzer.analyze()
        self.palette = generate_palette(
            self.analyzer,
            cfg.color_palette,
            self.rng,
            sample_count=cfg.palette_sample_count,
            iterations=cfg.kmeans_iterations,
            alpha=cfg.alpha,
        )

    def reset(self):
        """Discard jacks and cables and plan a fresh run."""
        if not self.analyzer.loaded:
            return

        logger.info("Resetting simulation...")
        self.queue.clear()

        placer = JackPlacer(
            self.analyzer,
            max_jacks=self.config.max_jacks,
            jack_density=self.config.jack_density,
            rng=self.rng,
        )
        self.jacks = placer.place()

        planner = CablePlanner(self.analyzer, self.palette, self.config, self.rng)
        self.last_plan = planner.plan(self.jacks)
        self.queue = RevealQueue(self.last_plan.cables)

        if not self.config.progressive_rendering:
            self.queue.reveal_all()

        logger.info(
            f"Created {len(self.jacks)} jacks and planned {self.last_plan.planned} cables"
        )

    def update(self) -> int:
        """Reveal the next batch of cables. Returns how many became visible."""
        if not self.initialized or self.queue.done:
            return 0
        if self.config.progressive_rendering:
            return len(self.queue.reveal(self.config.cables_per_frame))
        return len(self.queue.reveal_all())

    def progress(self) -> float:
        return self.queue.progress()

    def render(self) -> Frame:
        if not self.initialized:
            return loading_frame(self.canvas_width, self.canvas_height)
        return reconstruction_frame(
            self.analyzer.width,
            self.analyzer.height,
            self.config,
            self.queue.visible,
            self.jacks,
            self.queue.progress(),
            len(self.queue.pending),
        )

    def resize(self, canvas_width: int, canvas_height: int) -> bool:
        """Refit the image to a new canvas and rebuild everything."""
        if not self.analyzer.loaded:
            self.canvas_width = canvas_width
            self.canvas_height = canvas_height
            return False
        return self.initialize(canvas_width, canvas_height)

    def handle_command(self, name: str) -> bool:
        """Apply a host control command. Returns False for unknown commands.

        Commands: reset, show_jacks, show_original_image, progressive_rendering,
        increase_cables, decrease_cables.
        """
        cfg = self.config
        if name == "reset":
            self.reset()
        elif name == "show_jacks":
            cfg.toggle("show_jacks")
        elif name == "show_original_image":
            cfg.toggle("show_original_image")
        elif name == "progressive_rendering":
            cfg.toggle("progressive_rendering")
            if not cfg.progressive_rendering:
                self.queue.reveal_all()
        elif name == "increase_cables":
            cfg.cable_count += cfg.cable_count_step
            self.reset()
        elif name == "decrease_cables":
            cfg.cable_count = max(cfg.min_cable_count, cfg.cable_count - cfg.cable_count_step)
            self.reset()
        else:
            logger.debug(f"Ignoring unknown command '{name}'")
            return False
        return True
