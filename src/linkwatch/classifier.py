from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Sequence

from . import config
from .ping import ProbeOutcome
from .stats import AvailabilityLedger, Period


class Signal(enum.Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class Transition:
    """An edge applied to the ledger; ``closed`` is the period it ended."""

    signal: Signal
    closed: Period


def classify(
    batch: Sequence[ProbeOutcome], threshold: Optional[int] = None
) -> Signal:
    """Reduce a probe round to one signal.

    By default the link is only down when every target dropped; one
    answering target keeps it up. ``threshold`` switches to "down once at
    least that many targets dropped".
    """
    dropped = sum(1 for outcome in batch if outcome.dropped)
    needed = len(batch) if threshold is None else threshold
    return Signal.DOWN if dropped >= needed else Signal.UP


def apply_batch(
    ledger: AvailabilityLedger, batch: Sequence[ProbeOutcome]
) -> Optional[Transition]:
    """Classify ``batch`` and transition the ledger on an edge only."""
    signal = classify(batch, config.DOWN_DROP_THRESHOLD)
    if signal is Signal.DOWN and ledger.is_up():
        return Transition(signal, ledger.mark_down())
    if signal is Signal.UP and ledger.is_down():
        return Transition(signal, ledger.mark_up())
    return None
