# src/ase/ledger/levels.py
from __future__ import annotations

from typing import Tuple

# Highest threshold first; first match wins.
CONTRIBUTION_LEVELS: Tuple[Tuple[int, str], ...] = (
    (10_000, "Elder/Ancestral Wisdom Keeper"),
    (5_000, "Community Healer"),
    (1_000, "Ritual Facilitator"),
    (100, "Circle Holder"),
)

DEFAULT_LEVEL: str = "Community Member"


def contribution_level(points: int) -> str:
    """Map contribution points to the community tier label."""
    p = int(points or 0)
    for threshold, label in CONTRIBUTION_LEVELS:
        if p >= threshold:
            return label
    return DEFAULT_LEVEL


__all__ = ["CONTRIBUTION_LEVELS", "DEFAULT_LEVEL", "contribution_level"]
