"""Headless rendering: draw-command frames and SVG export."""

from .commands import (
    Backdrop,
    Circle,
    DrawCommand,
    Frame,
    Polyline,
    Text,
    loading_frame,
    reconstruction_frame,
    reveal_prefix,
    reveal_suffix,
    rope_vertices,
    synth_frame,
)
from .svg import encode_png, export_frames, frame_to_svg, write_svg

__all__ = [
    "Backdrop",
    "Circle",
    "DrawCommand",
    "Frame",
    "Polyline",
    "Text",
    "loading_frame",
    "reconstruction_frame",
    "reveal_prefix",
    "reveal_suffix",
    "rope_vertices",
    "synth_frame",
    "encode_png",
    "export_frames",
    "frame_to_svg",
    "write_svg",
]
