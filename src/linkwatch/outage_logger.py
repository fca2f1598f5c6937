from __future__ import annotations

import logging
from typing import Optional, Sequence

from . import config
from .classifier import Signal, Transition
from .ping import ProbeOutcome
from .stats import AvailabilityLedger, Period, format_duration

logger = logging.getLogger(__name__)


def _previous_longest(history: Sequence[Period], closed: Period) -> float:
    return max((p.elapsed() for p in history if p is not closed), default=0.0)


class OutageLogger:
    """Turns probe batches and ledger transitions into log lines."""

    def __init__(self, log: logging.Logger = logger):
        self.log = log

    def log_batch(self, batch: Sequence[ProbeOutcome], ledger: AvailabilityLedger):
        for outcome in batch:
            if outcome.dropped:
                # an outage would repeat this every round
                if ledger.is_up():
                    self.log.debug("No response from %s", outcome.hostname)
                continue
            self.log.debug(
                "Response from host %s: latency %s ms",
                outcome.hostname,
                outcome.latency,
            )
            if outcome.latency > config.HIGH_LATENCY_MS:
                self.log.warning(
                    "High latency from host %s: %s ms",
                    outcome.hostname,
                    outcome.latency,
                )

    def log_transition(
        self, transition: Optional[Transition], ledger: AvailabilityLedger
    ):
        if transition is None:
            return
        duration = transition.closed.elapsed()
        if transition.signal is Signal.DOWN:
            self.log.error("All pings failed: Internet is down.")
            if duration > _previous_longest(ledger.up_history, transition.closed):
                self.log.info("New longest uptime: %s", format_duration(duration))
        else:
            self.log.info("Internet was down for %s", format_duration(duration))
            if duration > _previous_longest(ledger.down_history, transition.closed):
                self.log.info("New longest outage: %s", format_duration(duration))

    def finalize(self, ledger: AvailabilityLedger):
        if ledger.is_down():
            self.log.warning(
                "Stopped while down for %s",
                format_duration(ledger.current_down_elapsed()),
            )
