"""
Patchbay - Generative Cable Artwork

Draws colored cables between jack points: either a self-patching synth
animation driven by rope physics, or a reconstruction of a source image
from thousands of straight cables planned along its colors and edges.
"""

__version__ = "0.1.0"

from .config import ReconstructionConfig, SynthConfig, get_preset, list_presets
from .model import CableState, Color, Jack, PlannedCable, RopeCable
from .reconstruction import ReconstructionSystem
from .synth import SynthVisualizer

__all__ = [
    "CableState",
    "Color",
    "Jack",
    "PlannedCable",
    "ReconstructionConfig",
    "ReconstructionSystem",
    "RopeCable",
    "SynthConfig",
    "SynthVisualizer",
    "get_preset",
    "list_presets",
]
