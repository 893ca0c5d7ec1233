"""
Draw Commands

Rendering is a pure function from simulation state to a ``Frame``: an
ordered list of draw records the host paints back to front. Nothing in
here touches a canvas, so frames can be inspected in tests or serialized
(see svg.py).
"""

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from ..config import ReconstructionConfig, SynthConfig
from ..model import CableState, Color, Jack, PlannedCable, RopeCable

Point = Tuple[float, float]

TEXT_COLOR = Color(255, 255, 255, 255)
OUTLINE_COLOR = Color(30, 30, 30, 255)
JACK_BACKING_COLOR = Color(40, 40, 40, 255)
CONNECTOR_BODY_COLOR = Color(215, 206, 197, 255)
CONNECTOR_HOLE_COLOR = Color(20, 20, 20, 255)
IMAGE_JACK_COLOR = Color(255, 255, 255, 30)

# Connectors of animating cables appear/disappear near the ends of the animation
CONNECTOR_SHOW_AFTER = 0.1
CONNECTOR_HIDE_AFTER = 0.9


@dataclass(frozen=True)
class Polyline:
    points: Tuple[Point, ...]
    color: Color
    width: float


@dataclass(frozen=True)
class Circle:
    x: float
    y: float
    radius: float
    fill: Optional[Color] = None
    stroke: Optional[Color] = None
    stroke_width: float = 0.0


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    size: float
    color: Color = TEXT_COLOR
    anchor: str = "start"  # "start" (top-left) or "middle" (centered)


@dataclass(frozen=True)
class Backdrop:
    """Paint the source image at the given alpha."""
    alpha: int


DrawCommand = Union[Polyline, Circle, Text, Backdrop]


@dataclass
class Frame:
    """Everything the host needs to paint one tick."""
    width: float
    height: float
    background: Color
    commands: List[DrawCommand] = field(default_factory=list)
    progress: Optional[float] = None  # Image mode completion percentage
    status: str = "ready"

    def of_type(self, kind) -> List[DrawCommand]:
        return [c for c in self.commands if isinstance(c, kind)]


def _lerp(a: Point, b: Point, t: float) -> Point:
    return (a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t)


def _split(count: int, progress: float) -> Tuple[int, float]:
    """Integer index and fractional remainder of progress along count points."""
    position = max(0.0, min(1.0, progress)) * (count - 1)
    index = int(math.floor(position))
    return index, position - index


def reveal_prefix(vertices: Sequence[Point], progress: float) -> List[Point]:
    """Vertices from the start up to the fractional index ``progress * (n-1)``.

    The last vertex is interpolated between the two straddling points.
    Returns an empty list when nothing is visible yet.
    """
    n = len(vertices)
    if n < 2 or progress <= 0:
        return []

    index, fraction = _split(n, progress)
    shown = list(vertices[:index + 1])
    if index < n - 1 and fraction > 0:
        shown.append(_lerp(vertices[index], vertices[index + 1], fraction))
    return shown if len(shown) >= 2 else []


def reveal_suffix(vertices: Sequence[Point], progress: float) -> List[Point]:
    """Vertices from the fractional index ``progress * (n-1)`` to the end.

    The first vertex is interpolated between the two straddling points.
    Returns an empty list once the whole cable is gone.
    """
    n = len(vertices)
    if n < 2 or progress >= 1:
        return []
    if progress <= 0:
        return list(vertices)

    index, fraction = _split(n, progress)
    if index >= n - 1:
        return []
    shown = [_lerp(vertices[index], vertices[index + 1], fraction)]
    shown.extend(vertices[index + 1:])
    return shown


def _rgb(rgb: Sequence[int], alpha: int = 255) -> Color:
    return Color(rgb[0], rgb[1], rgb[2], alpha)


# =============================================================================
# Image reconstruction mode
# =============================================================================

def loading_frame(width: float, height: float, message: str = "Loading image...") -> Frame:
    """Placeholder frame shown until the image has been analyzed."""
    return Frame(
        width=width,
        height=height,
        background=Color(0, 0, 0, 255),
        commands=[Text(width / 2, height / 2, message, 20, anchor="middle")],
        status="loading",
    )


def reconstruction_frame(
    width: float,
    height: float,
    config: ReconstructionConfig,
    cables: Iterable[PlannedCable],
    jacks: Iterable[Jack],
    progress: float,
    pending: int,
) -> Frame:
    """Visible straight cables, optional jacks and backdrop, progress text."""
    commands: List[DrawCommand] = []

    if config.show_original_image:
        commands.append(Backdrop(config.original_image_alpha))

    for cable in cables:
        commands.append(Polyline(
            points=(cable.start_point, cable.end_point),
            color=cable.color,
            width=config.cable_thickness,
        ))

    if config.show_jacks:
        for jack in jacks:
            commands.append(Circle(jack.x, jack.y, config.jack_radius, fill=IMAGE_JACK_COLOR))

    if pending > 0:
        commands.append(Text(10, 10, f"Progress: {int(math.floor(progress))}%", 14))

    return Frame(
        width=width,
        height=height,
        background=_rgb(config.background_color),
        commands=commands,
        progress=progress,
    )


# =============================================================================
# Synth mode
# =============================================================================

def connector_commands(point: Point, cable_color: Color, connector_radius: float) -> List[Circle]:
    """Plug body, socket hole and a faint tint of the cable color."""
    x, y = point
    return [
        Circle(x, y, connector_radius / 2, fill=CONNECTOR_BODY_COLOR,
               stroke=OUTLINE_COLOR, stroke_width=1),
        Circle(x, y, connector_radius * 0.25, fill=CONNECTOR_HOLE_COLOR),
        Circle(x, y, connector_radius * 0.15, fill=cable_color.with_alpha(100)),
    ]


def jack_commands(jack: Jack, config: SynthConfig) -> List[Circle]:
    fill = config.connected_jack_color if jack.connected else config.jack_color
    return [
        Circle(jack.x, jack.y, config.jack_radius * 0.75, fill=JACK_BACKING_COLOR),
        Circle(jack.x, jack.y, config.jack_radius / 2, fill=_rgb(fill),
               stroke=OUTLINE_COLOR, stroke_width=1),
    ]


def rope_vertices(cable: RopeCable) -> List[Point]:
    """Visible part of a rope cable for its lifecycle state."""
    vertices = cable.vertices()
    if cable.state is CableState.CONNECTING:
        return reveal_prefix(vertices, cable.progress)
    if cable.state is CableState.DISCONNECTING:
        return reveal_suffix(vertices, cable.progress)
    if cable.state is CableState.REMOVED:
        return []
    return vertices


def synth_frame(
    width: float,
    height: float,
    config: SynthConfig,
    jacks: Sequence[Jack],
    cables: Sequence[RopeCable],
    connecting: Sequence[RopeCable],
) -> Frame:
    """Cables behind jacks, connectors on top."""
    commands: List[DrawCommand] = []

    for cable in list(cables) + list(connecting):
        vertices = rope_vertices(cable)
        if vertices:
            commands.append(Polyline(tuple(vertices), cable.color, config.cable_thickness))

    for jack in jacks:
        commands.extend(jack_commands(jack, config))

    for cable in cables:
        first, last = cable.vertices()[0], cable.vertices()[-1]
        if cable.state is CableState.STEADY:
            commands.extend(connector_commands(first, cable.color, config.connector_radius))
            commands.extend(connector_commands(last, cable.color, config.connector_radius))
        elif cable.state is CableState.DISCONNECTING and cable.progress < CONNECTOR_HIDE_AFTER:
            commands.extend(connector_commands(last, cable.color, config.connector_radius))

    for cable in connecting:
        if cable.progress > CONNECTOR_SHOW_AFTER:
            commands.extend(connector_commands(
                cable.vertices()[0], cable.color, config.connector_radius
            ))

    return Frame(
        width=width,
        height=height,
        background=_rgb(config.background_color),
        commands=commands,
    )
