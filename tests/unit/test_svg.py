"""
Tests for SVG export of frames.
"""

import numpy as np

from patchbay.model import Color
from patchbay.render.commands import Backdrop, Circle, Frame, Polyline, Text
from patchbay.render.svg import encode_png, export_frames, frame_to_svg, write_svg


def sample_frame() -> Frame:
    return Frame(
        width=120,
        height=80,
        background=Color(20, 20, 30),
        commands=[
            Polyline(((0.0, 0.0), (10.5, 20.25)), Color(255, 102, 0, 220), 4.0),
            Circle(5, 6, 7.5, fill=Color(1, 2, 3), stroke=Color(30, 30, 30), stroke_width=1),
            Text(10, 10, "Progress: 5% <&>", 14),
        ],
    )


class TestFrameToSvg:
    """Tests for SVG serialization."""

    def test_document_structure(self):
        svg = frame_to_svg(sample_frame())

        assert svg.startswith("<svg")
        assert svg.endswith("</svg>")
        assert 'viewBox="0 0 120 80"' in svg
        assert 'fill="#14141e"' in svg

    def test_polyline(self):
        svg = frame_to_svg(sample_frame())

        assert 'points="0,0 10.5,20.25"' in svg
        assert 'stroke="#ff6600"' in svg
        assert 'stroke-opacity="0.863"' in svg
        assert 'stroke-width="4"' in svg

    def test_circle_with_outline(self):
        svg = frame_to_svg(sample_frame())
        assert '<circle cx="5" cy="6" r="7.5" fill="#010203" stroke="#1e1e1e" stroke-width="1"/>' in svg

    def test_text_escaped(self):
        svg = frame_to_svg(sample_frame())
        assert "Progress: 5% &lt;&amp;&gt;" in svg

    def test_backdrop_skipped_without_image(self):
        frame = Frame(10, 10, Color(0, 0, 0), [Backdrop(40)])
        assert "<image" not in frame_to_svg(frame)

    def test_backdrop_embeds_png(self):
        png = encode_png(np.zeros((4, 4, 3), dtype=np.uint8))
        frame = Frame(10, 10, Color(0, 0, 0), [Backdrop(51)])
        svg = frame_to_svg(frame, backdrop_png=png)

        assert 'href="data:image/png;base64,' in svg
        assert 'opacity="0.200"' in svg


class TestFiles:
    """Tests for writing SVG files."""

    def test_encode_png_signature(self):
        png = encode_png(np.full((3, 5, 3), 200, dtype=np.uint8))
        assert png.startswith(b"\x89PNG")

    def test_write_svg_creates_parents(self, tmp_path):
        path = write_svg(sample_frame(), tmp_path / "nested" / "out.svg")

        assert path.exists()
        assert "<polyline" in path.read_text(encoding="utf-8")

    def test_export_numbered_frames(self, tmp_path):
        written = export_frames([sample_frame()] * 3, tmp_path / "frames")

        assert [p.name for p in written] == ["frame_0000.svg", "frame_0001.svg", "frame_0002.svg"]
        assert all(p.exists() for p in written)
