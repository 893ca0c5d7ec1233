"""Fixed patchbay jack layout for synth mode."""

from typing import List

from ..model import Jack

EDGE_INSET = 80.0
ROW_JACKS = 8
COLUMN_JACKS = 3


def _spread(length: float, count: int) -> List[float]:
    """Evenly spaced interior positions along a span."""
    return [(length / (count + 1)) * (i + 1) for i in range(count)]


def synth_jack_layout(width: float, height: float) -> List[Jack]:
    """Top, bottom and middle rows of 8 jacks plus left/right columns of 3.

    Ids are assigned sequentially in that order.
    """
    positions = []
    row_xs = _spread(width, ROW_JACKS)
    for row_y in (EDGE_INSET, height - EDGE_INSET, height / 2):
        positions.extend((x, row_y) for x in row_xs)

    column_ys = _spread(height, COLUMN_JACKS)
    for column_x in (EDGE_INSET, width - EDGE_INSET):
        positions.extend((column_x, y) for y in column_ys)

    return [Jack(id=i, x=x, y=y) for i, (x, y) in enumerate(positions)]
