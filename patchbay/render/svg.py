"""SVG export of rendered frames.

Serializes ``Frame`` draw lists to standalone SVG documents so headless
runs (the CLI, tests) can inspect or publish the artwork.
"""

import base64
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional
from xml.sax.saxutils import escape

import numpy as np
from PIL import Image

from ..model import Color
from .commands import Backdrop, Circle, Frame, Polyline, Text

logger = logging.getLogger(__name__)


def encode_png(pixels: np.ndarray) -> bytes:
    """PNG-encode an RGB pixel buffer for embedding as a backdrop."""
    buffer = io.BytesIO()
    Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(buffer, format="PNG")
    return buffer.getvalue()


def _paint(color: Optional[Color], attribute: str) -> str:
    if color is None:
        return f'{attribute}="none"'
    text = f'{attribute}="{color.to_hex()}"'
    if color.a < 255:
        text += f' {attribute}-opacity="{color.opacity:.3f}"'
    return text


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def frame_to_svg(frame: Frame, backdrop_png: Optional[bytes] = None) -> str:
    """Render a single frame as SVG.

    Args:
        frame: Frame to render
        backdrop_png: PNG bytes painted for ``Backdrop`` commands; without
            it backdrops are skipped

    Returns:
        SVG string
    """
    width, height = _num(frame.width), _num(frame.height)
    svg_parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
    ]

    # Background
    svg_parts.append(f'<rect width="100%" height="100%" {_paint(frame.background, "fill")}/>')

    for command in frame.commands:
        if isinstance(command, Polyline):
            points = " ".join(f"{_num(x)},{_num(y)}" for x, y in command.points)
            svg_parts.append(
                f'<polyline points="{points}" fill="none" '
                f'{_paint(command.color, "stroke")} stroke-width="{_num(command.width)}" '
                f'stroke-linecap="round" stroke-linejoin="round" class="cable"/>'
            )
        elif isinstance(command, Circle):
            stroke = ""
            if command.stroke is not None and command.stroke_width > 0:
                stroke = (f' {_paint(command.stroke, "stroke")} '
                          f'stroke-width="{_num(command.stroke_width)}"')
            svg_parts.append(
                f'<circle cx="{_num(command.x)}" cy="{_num(command.y)}" '
                f'r="{_num(command.radius)}" {_paint(command.fill, "fill")}{stroke}/>'
            )
        elif isinstance(command, Text):
            baseline = "middle" if command.anchor == "middle" else "hanging"
            svg_parts.append(
                f'<text x="{_num(command.x)}" y="{_num(command.y)}" '
                f'font-family="sans-serif" font-size="{_num(command.size)}" '
                f'{_paint(command.color, "fill")} text-anchor="{command.anchor}" '
                f'dominant-baseline="{baseline}">{escape(command.text)}</text>'
            )
        elif isinstance(command, Backdrop):
            if backdrop_png is None:
                continue
            encoded = base64.b64encode(backdrop_png).decode("ascii")
            svg_parts.append(
                f'<image x="0" y="0" width="{width}" height="{height}" '
                f'opacity="{command.alpha / 255:.3f}" '
                f'href="data:image/png;base64,{encoded}"/>'
            )

    svg_parts.append("</svg>")
    return "\n".join(svg_parts)


def write_svg(frame: Frame, path, backdrop_png: Optional[bytes] = None) -> Path:
    """Write one frame to ``path``, creating parent directories."""
    output = Path(path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(frame_to_svg(frame, backdrop_png), encoding="utf-8")
    logger.debug(f"Wrote {output}")
    return output


def export_frames(frames: Iterable[Frame], output_dir, prefix: str = "frame",
                  backdrop_png: Optional[bytes] = None) -> List[Path]:
    """Write numbered SVG files (``frame_0000.svg`` ...) into ``output_dir``."""
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    written = []
    for index, frame in enumerate(frames):
        written.append(write_svg(frame, output_path / f"{prefix}_{index:04d}.svg", backdrop_png))

    logger.info(f"Exported {len(written)} frames to {output_path}")
    return written
