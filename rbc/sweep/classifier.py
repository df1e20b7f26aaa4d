"""Build phase classification for cancellation decisions."""

from __future__ import annotations

from enum import StrEnum


class PhaseClass(StrEnum):
    """Whether a build still needs cancelling."""

    ACTIVE = "active"
    TERMINAL = "terminal"


TERMINAL_PHASES: frozenset[str] = frozenset({"complete", "failed", "cancelled"})


def classify_phase(phase: str) -> PhaseClass:
    """Classify a phase; anything not known to be terminal counts as active."""
    if phase.lower() in TERMINAL_PHASES:
        return PhaseClass.TERMINAL
    return PhaseClass.ACTIVE
