"""Cable planning and progressive reveal for image mode."""

from .cable_planner import CablePlanner, PlanResult, pair_key
from .reveal import RevealQueue

__all__ = [
    "CablePlanner",
    "PlanResult",
    "RevealQueue",
    "pair_key",
]
