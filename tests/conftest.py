"""
Shared test fixtures for Patchbay tests.

Provides synthetic images, seeded random sources and small configurations
so planning and simulation tests stay fast and deterministic.
"""

import random

import numpy as np
import pytest

from patchbay.analysis.image_analyzer import ImageAnalyzer
from patchbay.config import ReconstructionConfig, SynthConfig
from patchbay.model import Jack


DARK = 20
BRIGHT = 230


@pytest.fixture
def flat_image() -> np.ndarray:
    """A 100x100 uniform mid-gray image (no edges, no contrast)."""
    return np.full((100, 100, 3), 128, dtype=np.uint8)


@pytest.fixture
def split_image() -> np.ndarray:
    """A 100x100 image, dark left half and bright right half.

    The vertical boundary between columns 49 and 50 is the only edge.
    """
    pixels = np.full((100, 100, 3), DARK, dtype=np.uint8)
    pixels[:, 50:] = BRIGHT
    return pixels


@pytest.fixture
def flat_analyzer(flat_image) -> ImageAnalyzer:
    analyzer = ImageAnalyzer(image=flat_image)
    analyzer.analyze()
    return analyzer


@pytest.fixture
def split_analyzer(split_image) -> ImageAnalyzer:
    analyzer = ImageAnalyzer(image=split_image)
    analyzer.analyze()
    return analyzer


@pytest.fixture
def rng() -> random.Random:
    """A seeded random source."""
    return random.Random(42)


@pytest.fixture
def small_reconstruction_config() -> ReconstructionConfig:
    """Reconstruction options scaled down for small test images."""
    return ReconstructionConfig(
        cable_count=40,
        cables_per_frame=5,
        max_jacks=200,
        max_attempts=400,
        color_palette=4,
        palette_sample_count=200,
        kmeans_iterations=3,
    )


@pytest.fixture
def synth_config() -> SynthConfig:
    return SynthConfig()


@pytest.fixture
def make_jacks():
    """Factory for jacks with sequential ids at the given (x, y) positions."""
    def _make(*positions):
        return [Jack(id=i, x=float(x), y=float(y)) for i, (x, y) in enumerate(positions)]
    return _make
