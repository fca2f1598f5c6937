from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

Clock = Callable[[], float]


def format_duration(seconds: float) -> str:
    """Render a duration as HH:MM:SS (hours are not wrapped at 24)."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02}:{mins:02}:{secs:02}"


@dataclass
class Period:
    """A span during which the link stayed in one state.

    ``start`` and the duration use a monotonic clock; ``started_at`` is
    the wall-clock stamp for display. While open, ``elapsed()`` grows with the
    clock. ``finalize()`` freezes it and must be called once per period;
    the ledger is the only caller.
    """

    start: float
    started_at: float = 0.0
    closed_len: Optional[float] = None
    clock: Clock = field(default=time.monotonic, repr=False, compare=False)

    @classmethod
    def new(
        cls, clock: Clock = time.monotonic, wall_clock: Clock = time.time
    ) -> "Period":
        return cls(clock(), wall_clock(), clock=clock)

    @property
    def is_open(self) -> bool:
        return self.closed_len is None

    def finalize(self) -> None:
        self.closed_len = self.clock() - self.start

    def elapsed(self) -> float:
        if self.closed_len is not None:
            return self.closed_len
        return self.clock() - self.start

    def ended_at(self) -> float:
        return self.started_at + self.elapsed()


class AvailabilityLedger:
    """Uptime/downtime bookkeeping for a single link.

    Each history keeps its open period as the trailing entry, so the
    current period and the historical ones share one code path for
    totals and maxima. The ledger starts up.
    """

    def __init__(self, clock: Clock = time.monotonic, wall_clock: Clock = time.time):
        self._clock = clock
        self._wall_clock = wall_clock
        self.process_start = clock()
        self.started_at = wall_clock()
        self.up_history: List[Period] = [Period.new(clock, wall_clock)]
        self.down_history: List[Period] = []
        self._up = True

    @property
    def current_up(self) -> Optional[Period]:
        return self.up_history[-1] if self._up else None

    @property
    def current_down(self) -> Optional[Period]:
        return None if self._up else self.down_history[-1]

    def is_up(self) -> bool:
        return self._up

    def is_down(self) -> bool:
        return not self._up

    # Transitions. Callers must only invoke these on a real edge.

    def mark_down(self) -> Period:
        closed = self.up_history[-1]
        closed.finalize()
        self.down_history.append(Period.new(self._clock, self._wall_clock))
        self._up = False
        return closed

    def mark_up(self) -> Period:
        closed = self.down_history[-1]
        closed.finalize()
        self.up_history.append(Period.new(self._clock, self._wall_clock))
        self._up = True
        return closed

    # Derived statistics

    def current_up_elapsed(self) -> float:
        period = self.current_up
        return period.elapsed() if period is not None else 0.0

    def current_down_elapsed(self) -> float:
        period = self.current_down
        return period.elapsed() if period is not None else 0.0

    def current_elapsed(self) -> float:
        return self.current_up_elapsed() if self._up else self.current_down_elapsed()

    def total_up(self) -> float:
        return sum(p.elapsed() for p in self.up_history)

    def total_down(self) -> float:
        return sum(p.elapsed() for p in self.down_history)

    def longest_up(self) -> float:
        return max((p.elapsed() for p in self.up_history), default=0.0)

    def longest_down(self) -> float:
        return max((p.elapsed() for p in self.down_history), default=0.0)

    def outage_count(self) -> int:
        return len(self.down_history)

    def uptime_percentage(self) -> float:
        """Fraction of the process lifetime spent up, in [0, 1]."""
        running = self._clock() - self.process_start
        if running <= 0:
            return 0.0
        return min(1.0, max(0.0, self.total_up() / running))

    def downtime_percentage(self) -> float:
        running = self._clock() - self.process_start
        if running <= 0:
            return 0.0
        return min(1.0, max(0.0, self.total_down() / running))
