from __future__ import annotations

import enum
from datetime import datetime

from rich import box
from rich.table import Table

from . import config
from .ping import ProbeOutcome
from .stats import AvailabilityLedger, format_duration


class Tone(enum.IntEnum):
    """Semantic colours shared by the dashboard and the summary table."""

    NORMAL = 0
    GOOD = 1
    WARNING = 2
    BAD = 3


RICH_STYLES = {
    Tone.NORMAL: "",
    Tone.GOOD: "green",
    Tone.WARNING: "yellow",
    Tone.BAD: "bold red",
}


def latency_tone(outcome: ProbeOutcome) -> Tone:
    if outcome.dropped:
        return Tone.BAD
    if outcome.latency < config.LATENCY_GOOD_MS:
        return Tone.GOOD
    if outcome.latency <= config.HIGH_LATENCY_MS:
        return Tone.WARNING
    return Tone.BAD


def latency_text(outcome: ProbeOutcome) -> str:
    return "timeout" if outcome.dropped else f"{outcome.latency:.1f} ms"


def state_text(ledger: AvailabilityLedger) -> tuple[str, Tone]:
    return ("UP", Tone.GOOD) if ledger.is_up() else ("DOWN", Tone.BAD)


def format_timestamp(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime(config.HISTORY_TIME_FORMAT)


def build_summary_table(ledger: AvailabilityLedger) -> Table:
    table = Table(
        title="Link Summary",
        box=box.MINIMAL_DOUBLE_HEAD,
        caption_style="bold",
    )
    table.add_column("", style="bold")
    table.add_column("Up")
    table.add_column("Down")

    state, tone = state_text(ledger)
    table.add_row(
        "Current",
        format_duration(ledger.current_up_elapsed()),
        format_duration(ledger.current_down_elapsed()),
    )
    table.add_row(
        "Longest",
        format_duration(ledger.longest_up()),
        format_duration(ledger.longest_down()),
    )
    table.add_row(
        "Total",
        format_duration(ledger.total_up()),
        format_duration(ledger.total_down()),
    )
    table.add_row(
        "Share",
        f"{ledger.uptime_percentage() * 100:.2f}%",
        f"{ledger.downtime_percentage() * 100:.2f}%",
    )
    table.caption = (
        f"State: [{RICH_STYLES[tone]}]{state}[/] | "
        f"Outages: {ledger.outage_count()} | "
        f"Since: {format_timestamp(ledger.started_at)}"
    )
    return table
