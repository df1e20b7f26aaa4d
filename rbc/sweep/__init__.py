"""Build cancellation sweep module."""

from .classifier import TERMINAL_PHASES, PhaseClass, classify_phase
from .service import (
    BuildSweeper,
    SweepOutcome,
    SweepState,
    SweepTransport,
    TransportFactory,
    UpstreamResult,
    trust_policy_for,
)

__all__ = [
    "TERMINAL_PHASES",
    "BuildSweeper",
    "PhaseClass",
    "SweepOutcome",
    "SweepState",
    "SweepTransport",
    "TransportFactory",
    "UpstreamResult",
    "classify_phase",
    "trust_policy_for",
]
