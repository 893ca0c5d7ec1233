"""Progressive reveal of planned cables."""

import logging
from typing import List, Optional

from ..model import PlannedCable

logger = logging.getLogger(__name__)


class RevealQueue:
    """Pending cables drained into the visible set at a bounded rate.

    The pending order is the planner's importance order, so the most
    salient cables become visible first.
    """

    def __init__(self, pending: Optional[List[PlannedCable]] = None):
        self.pending: List[PlannedCable] = list(pending or [])
        self.visible: List[PlannedCable] = []
        self.revealed_count = 0

    def __len__(self) -> int:
        return len(self.pending)

    @property
    def done(self) -> bool:
        return not self.pending

    def reveal(self, count: int) -> List[PlannedCable]:
        """Move up to ``count`` cables from the front of the queue."""
        batch = self.pending[:max(0, count)]
        del self.pending[:len(batch)]
        self.visible.extend(batch)
        self.revealed_count += len(batch)
        return batch

    def reveal_all(self) -> List[PlannedCable]:
        batch = self.reveal(len(self.pending))
        if batch:
            logger.debug(f"Revealed {len(batch)} pending cables at once")
        return batch

    def progress(self) -> float:
        """Completion percentage (0-100). An empty run counts as complete."""
        total = self.revealed_count + len(self.pending)
        if total == 0:
            return 100.0
        return self.revealed_count / total * 100.0

    def clear(self):
        self.pending = []
        self.visible = []
        self.revealed_count = 0
