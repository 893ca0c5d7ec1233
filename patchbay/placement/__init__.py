"""Jack placement: image-driven placement and the fixed synth layout."""

from .jack_placer import JackPlacer, PlacementWeights, grid_spacing
from .synth_layout import synth_jack_layout

__all__ = [
    "JackPlacer",
    "PlacementWeights",
    "grid_spacing",
    "synth_jack_layout",
]
