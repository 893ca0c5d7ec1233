"""
Configuration

Plain named options for both modes plus named presets loaded from
presets.yaml. Users may also supply their own YAML file of overrides.
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import yaml

logger = logging.getLogger(__name__)

PRESETS_PATH = Path(__file__).parent / "presets.yaml"

MODES = ("reconstruction", "synth")

RGB = Tuple[int, int, int]


class _Settings:
    """Shared mutation helpers for the config dataclasses."""

    def update_setting(self, key: str, value: Any) -> bool:
        """Set an existing option. Returns False for unknown keys."""
        if key not in _field_names(self):
            return False
        setattr(self, key, value)
        return True

    def toggle(self, key: str) -> bool:
        """Flip a boolean option. Returns False if key is not a boolean option."""
        if key not in _field_names(self):
            return False
        current = getattr(self, key)
        if not isinstance(current, bool):
            return False
        setattr(self, key, not current)
        return True


@dataclass
class ReconstructionConfig(_Settings):
    """Options for image reconstruction mode."""
    # Visualization
    cable_count: int = 3000  # Target number of cables
    cables_per_frame: int = 3  # Revealed per tick when progressive
    cable_thickness: float = 2.0
    jack_radius: float = 2.0
    show_jacks: bool = False
    background_color: RGB = (20, 20, 30)
    alpha: int = 140  # Cable transparency

    # Image analysis
    edge_threshold: float = 70.0
    jack_density: float = 0.7  # Reserved, not applied by placement
    max_jacks: int = 1000
    image_influence: float = 0.9  # Reserved, not applied by scoring
    color_samples: int = 17  # Samples along a candidate path
    min_cable_length: float = 30.0
    max_cable_length: float = 300.0
    edge_preference: float = 1.8
    color_palette: int = 17  # k for k-means

    # Planning limits
    max_connections_per_jack: int = 5
    max_attempts: int = 7000
    candidate_cap: int = 10  # Candidates scored per attempt
    cable_color_samples: int = 8  # Samples used to color a chosen cable
    palette_sample_count: int = 2000
    kmeans_iterations: int = 5

    # Display toggles
    progressive_rendering: bool = True
    show_original_image: bool = False
    original_image_alpha: int = 40

    # Cable count adjustment commands
    cable_count_step: int = 100
    min_cable_count: int = 50

    def validate(self):
        """Raise ValueError for values the planner cannot work with."""
        _require_positive(self, "cable_count", "cables_per_frame", "max_jacks",
                          "color_samples", "color_palette", "max_connections_per_jack",
                          "max_attempts", "candidate_cap", "cable_color_samples",
                          "palette_sample_count", "max_cable_length")
        if self.kmeans_iterations < 0:
            raise ValueError("kmeans_iterations must be >= 0")
        if self.min_cable_length < 0:
            raise ValueError("min_cable_length must be >= 0")
        if self.min_cable_length > self.max_cable_length:
            raise ValueError(
                f"min_cable_length ({self.min_cable_length}) exceeds "
                f"max_cable_length ({self.max_cable_length})"
            )


@dataclass
class SynthConfig(_Settings):
    """Options for the autonomous synthesizer patchbay mode."""
    cable_count: int = 12  # Target number of steady cables
    initial_cables: int = 3  # Steady cables created on reset

    # Physics
    gravity: float = 0.01  # Overwritten every tick by the oscillator
    tension: float = 5.0  # Relaxation iterations, also oscillated
    cable_segments: int = 12
    dampening: float = 0.98  # 0-1, lower is bouncier

    # Visuals
    cable_thickness: float = 4.0
    jack_radius: float = 15.0
    connector_radius: float = 12.0
    background_color: RGB = (20, 20, 30)
    jack_color: RGB = (215, 206, 197)
    connected_jack_color: RGB = (150, 210, 150)
    cable_alpha: int = 220
    cable_colors: Tuple[RGB, ...] = (
        (35, 139, 47),    # Green
        (255, 102, 0),    # Orange
        (226, 190, 82),   # Yellow
        (79, 121, 120),   # Blue
    )

    # Animation (milliseconds)
    connection_interval: float = 1500.0
    connection_duration: float = 1000.0
    connect_probability: float = 0.6

    # Oscillation ranges for organic movement
    auto_gravity_range: Tuple[float, float] = (0.05, 0.25)
    auto_tension_range: Tuple[float, float] = (2.0, 6.0)

    def validate(self):
        """Raise ValueError for values the simulation cannot work with."""
        _require_positive(self, "cable_segments", "connection_interval",
                          "connection_duration")
        if self.cable_count < 0 or self.initial_cables < 0:
            raise ValueError("cable counts must be >= 0")
        if not 0.0 <= self.connect_probability <= 1.0:
            raise ValueError("connect_probability must be within [0, 1]")
        if not self.cable_colors:
            raise ValueError("cable_colors must not be empty")
        for name in ("auto_gravity_range", "auto_tension_range"):
            low, high = getattr(self, name)
            if low > high:
                raise ValueError(f"{name} is empty: ({low}, {high})")


ConfigType = Union[ReconstructionConfig, SynthConfig]

_CONFIG_CLASSES = {
    "reconstruction": ReconstructionConfig,
    "synth": SynthConfig,
}


def _field_names(config) -> List[str]:
    return [f.name for f in fields(config)]


def _require_positive(config, *names: str):
    for name in names:
        if getattr(config, name) <= 0:
            raise ValueError(f"{name} must be positive, got {getattr(config, name)!r}")


def _coerce(config_cls, overrides: Dict[str, Any], source: str) -> Dict[str, Any]:
    """Check override keys and turn YAML lists back into tuples."""
    known = {f.name: f for f in fields(config_cls)}
    unknown = sorted(set(overrides) - set(known))
    if unknown:
        raise ValueError(f"Unknown {config_cls.__name__} options in {source}: {unknown}")

    coerced = {}
    for key, value in overrides.items():
        if isinstance(value, list):
            value = tuple(tuple(v) if isinstance(v, list) else v for v in value)
        coerced[key] = value
    return coerced


def _check_mode(mode: str):
    if mode not in MODES:
        raise ValueError(f"Unknown mode '{mode}'. Available: {', '.join(MODES)}")


def _load_presets(path: Path = PRESETS_PATH) -> Dict[str, Dict[str, Dict[str, Any]]]:
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    missing = [m for m in MODES if m not in data]
    if missing:
        raise ValueError(f"Preset file {path} missing required sections: {missing}")
    return data


def list_presets(mode: str) -> List[str]:
    """List preset names available for a mode."""
    _check_mode(mode)
    return sorted(_load_presets()[mode].keys())


def get_preset(mode: str, name: str = "default") -> ConfigType:
    """
    Build a config from a named preset.

    Args:
        mode: "reconstruction" or "synth"
        name: Preset identifier from presets.yaml

    Raises:
        ValueError: If the mode or preset name is unknown
    """
    _check_mode(mode)
    presets = _load_presets()[mode]
    if name not in presets:
        available = ", ".join(sorted(presets.keys()))
        raise ValueError(f"Unknown {mode} preset '{name}'. Available: {available}")

    config_cls = _CONFIG_CLASSES[mode]
    overrides = _coerce(config_cls, presets[name] or {}, f"preset '{name}'")
    config = config_cls(**overrides)
    config.validate()
    logger.debug(f"Loaded {mode} preset '{name}'")
    return config


def load_config_file(path: Union[str, Path], mode: str,
                     base: Optional[ConfigType] = None) -> ConfigType:
    """
    Apply a user YAML file of option overrides.

    The file is a flat mapping of option names to values. Overrides are
    applied on top of ``base`` (or the mode's defaults).

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is a symlink, not a mapping, or has unknown keys
    """
    _check_mode(mode)
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.is_symlink():
        raise ValueError(f"Config file cannot be a symlink: {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")

    config_cls = _CONFIG_CLASSES[mode]
    overrides = _coerce(config_cls, data, str(config_path))
    config = replace(base, **overrides) if base is not None else config_cls(**overrides)
    config.validate()
    logger.info(f"Loaded {len(overrides)} option(s) from {config_path}")
    return config
