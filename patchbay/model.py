"""
Core Data Records

Plain records shared by the planning, physics and rendering stages. Jacks
are the fixed anchor points, cables connect two jacks. Image mode produces
immutable straight ``PlannedCable`` records; synth mode produces
``RopeCable`` records whose mass points are advanced by the physics step.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple
import math


@dataclass(frozen=True)
class Color:
    """RGB color with a fixed alpha (0-255 channels, floats allowed)."""
    r: float
    g: float
    b: float
    a: int = 255

    @property
    def rgb(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_hex(self) -> str:
        """Hex string without alpha (e.g. "#ff6600")."""
        r, g, b = (max(0, min(255, int(round(c)))) for c in self.rgb)
        return f"#{r:02x}{g:02x}{b:02x}"

    @property
    def opacity(self) -> float:
        return max(0.0, min(1.0, self.a / 255.0))

    def with_alpha(self, alpha: int) -> "Color":
        return Color(self.r, self.g, self.b, alpha)

    def distance(self, other: "Color") -> float:
        """Euclidean distance in RGB space (alpha ignored)."""
        return math.sqrt(
            (self.r - other.r) ** 2 +
            (self.g - other.g) ** 2 +
            (self.b - other.b) ** 2
        )


@dataclass
class Jack:
    """A fixed anchor point for cable endpoints.

    ``connections`` counts planned cables in image mode, ``connected`` is
    the occupancy flag used in synth mode.
    """
    id: int
    x: float
    y: float
    fixed: bool = True
    connections: int = 0
    connected: bool = False

    def has_capacity(self, max_connections: int) -> bool:
        return self.connections < max_connections

    def connect(self):
        self.connected = True

    def disconnect(self):
        self.connected = False

    def distance_to(self, other: "Jack") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)


@dataclass
class MassPoint:
    """A Verlet mass point. Velocity is implicit in (x - prev_x, y - prev_y)."""
    x: float
    y: float
    prev_x: float
    prev_y: float
    fixed: bool = False

    @classmethod
    def at_rest(cls, x: float, y: float, fixed: bool = False) -> "MassPoint":
        return cls(x=x, y=y, prev_x=x, prev_y=y, fixed=fixed)


@dataclass(frozen=True)
class PlannedCable:
    """A straight image-mode cable. Immutable once planned."""
    start: int  # jack id
    end: int
    color: Color
    start_point: Tuple[float, float]
    end_point: Tuple[float, float]
    importance: float

    @property
    def pair_key(self) -> Tuple[int, int]:
        return (min(self.start, self.end), max(self.start, self.end))


class CableState(Enum):
    """Lifecycle states of a synth-mode cable."""
    CONNECTING = "connecting"
    STEADY = "steady"
    DISCONNECTING = "disconnecting"
    REMOVED = "removed"


@dataclass
class RopeCable:
    """A drooping physics cable between two jacks.

    ``progress`` is the reveal (connecting) or removal (disconnecting)
    completion in [0, 1]; it is meaningless in the steady state.
    """
    start: int
    end: int
    color: Color
    points: List[MassPoint] = field(default_factory=list)
    state: CableState = CableState.CONNECTING
    progress: float = 0.0

    def vertices(self) -> List[Tuple[float, float]]:
        return [(p.x, p.y) for p in self.points]
