from __future__ import annotations

import asyncio
import contextlib
import curses
import time
from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from . import config
from .classifier import apply_batch
from .pipeline import Batch, PollingTask
from .ping import ProbeOutcome
from .stats import AvailabilityLedger, format_duration
from .ui import Tone, format_timestamp, latency_text, latency_tone, state_text

Line = Tuple[str, Tone, bool]  # text, colour, bold

SCROLL_KEYS = {
    curses.KEY_UP: -1,
    ord("k"): -1,
    curses.KEY_DOWN: 1,
    ord("j"): 1,
}
PAGE_KEYS = {curses.KEY_PPAGE: -1, curses.KEY_NPAGE: 1}

CURSES_COLORS = {
    Tone.GOOD: curses.COLOR_GREEN,
    Tone.WARNING: curses.COLOR_YELLOW,
    Tone.BAD: curses.COLOR_RED,
}


def clamp_selection(index: int, count: int) -> int:
    return max(0, min(index, count))


def status_lines(
    ledger: AvailabilityLedger,
    batch: Optional[Sequence[ProbeOutcome]],
    last_update: Optional[float],
) -> List[Line]:
    state, tone = state_text(ledger)
    lines: List[Line] = [
        (
            f"Link Monitor | {', '.join(config.TARGETS)} | q=quit j/k=scroll",
            Tone.NORMAL,
            True,
        ),
        (f"State: {state} for {format_duration(ledger.current_elapsed())}", tone, True),
        (
            f"Longest up: {format_duration(ledger.longest_up())}   "
            f"Longest down: {format_duration(ledger.longest_down())}",
            Tone.NORMAL,
            False,
        ),
        (
            f"Total up: {format_duration(ledger.total_up())}   "
            f"Total down: {format_duration(ledger.total_down())}",
            Tone.NORMAL,
            False,
        ),
        (
            f"Uptime: {ledger.uptime_percentage() * 100:.2f}%   "
            f"Outages: {ledger.outage_count()}",
            Tone.NORMAL,
            False,
        ),
        ("", Tone.NORMAL, False),
    ]
    if batch is None:
        lines.append(("Waiting for first probe round...", Tone.WARNING, False))
        return lines
    for outcome in batch:
        lines.append(
            (
                f"{outcome.hostname:<20} {latency_text(outcome):>10}",
                latency_tone(outcome),
                False,
            )
        )
    if last_update is not None:
        stamp = datetime.fromtimestamp(last_update).strftime("%H:%M:%S")
        lines.append((f"Last update: {stamp}", Tone.NORMAL, False))
    return lines


def history_lines(ledger: AvailabilityLedger) -> List[Line]:
    """Downtime periods, newest first, closed by an end marker.

    The marker sits at index ``len(down_history)`` so every valid
    selection maps onto a row.
    """
    lines: List[Line] = []
    count = len(ledger.down_history)
    for number, period in zip(range(count, 0, -1), reversed(ledger.down_history)):
        end = "ongoing" if period.is_open else format_timestamp(period.ended_at())
        lines.append(
            (
                f"{number:>4}  {format_timestamp(period.started_at)}  "
                f"{end:<19}  {format_duration(period.elapsed())}",
                Tone.BAD if period.is_open else Tone.NORMAL,
                period.is_open,
            )
        )
    marker = "(end of history)" if count else "No outages recorded"
    lines.append((marker, Tone.NORMAL, False))
    return lines


class HistoryView:
    """Selection into the downtime history, clamped to [0, len]."""

    def __init__(self, bell: Callable[[], None]):
        self.selection = 0
        self._bell = bell

    def scroll(self, delta: int, count: int) -> bool:
        target = clamp_selection(self.selection + delta, count)
        if target == self.selection:
            self._bell()
            return False
        self.selection = target
        return True

    def jump(self, index: int, count: int) -> bool:
        return self.scroll(index - self.selection, count)

    def reclamp(self, count: int):
        self.selection = clamp_selection(self.selection, count)

    def window(self, rows: int) -> int:
        """First visible index keeping the selection on screen."""
        return max(0, self.selection - rows + 1)


def _put(win, y: int, x: int, text: str, attr: int = 0):
    # The bottom-right cell cannot be written without a curses error,
    # so every line stops one column short.
    height, width = win.getmaxyx()
    if y < 0 or y >= height or x >= width - 1:
        return
    win.addnstr(y, x, text, width - x - 1, attr)


class Dashboard:
    def __init__(
        self,
        stdscr,
        ledger: AvailabilityLedger,
        pipeline: PollingTask,
    ):
        self.stdscr = stdscr
        self.ledger = ledger
        self.pipeline = pipeline
        self.history = HistoryView(curses.beep)
        self.last_batch: Optional[Batch] = None
        self.last_update: Optional[float] = None
        self.history_win = None
        self._colors = False
        self._setup()

    def _setup(self):
        # invisible cursor is cosmetic; some terminals refuse it
        with contextlib.suppress(curses.error):
            curses.curs_set(0)
        self.stdscr.nodelay(True)
        self.stdscr.keypad(True)
        if curses.has_colors():
            curses.start_color()
            curses.use_default_colors()
            for tone, color in CURSES_COLORS.items():
                curses.init_pair(int(tone), color, -1)
            self._colors = True
        self._make_windows()

    def _make_windows(self):
        height, width = self.stdscr.getmaxyx()
        top = max(0, min(config.STATUS_HEIGHT, height - 1))
        self.history_win = curses.newwin(max(1, height - top), max(1, width), top, 0)

    def _attr(self, tone: Tone, bold: bool = False) -> int:
        attr = curses.A_BOLD if bold else curses.A_NORMAL
        if self._colors and tone is not Tone.NORMAL:
            attr |= curses.color_pair(int(tone))
        elif tone is Tone.BAD:
            attr |= curses.A_BOLD
        return attr

    def resize(self):
        curses.update_lines_cols()
        self.stdscr.clear()
        self._make_windows()
        self.history.reclamp(len(self.ledger.down_history))

    def consume(self):
        batch = self.pipeline.poll()
        if batch is None:
            return
        self.last_batch = batch
        self.last_update = time.time()
        apply_batch(self.ledger, batch)

    def handle_key(self, key: int) -> bool:
        """Apply one key press; False means quit."""
        count = len(self.ledger.down_history)
        if key in config.QUIT_KEYS:
            return False
        if key == curses.KEY_RESIZE:
            self.resize()
        elif key in SCROLL_KEYS:
            self.history.scroll(SCROLL_KEYS[key], count)
        elif key in PAGE_KEYS:
            rows = max(1, self.history_win.getmaxyx()[0] - 1)
            self.history.scroll(PAGE_KEYS[key] * rows, count)
        elif key == curses.KEY_HOME:
            self.history.jump(0, count)
        elif key == curses.KEY_END:
            self.history.jump(count, count)
        return True

    def draw(self):
        self.stdscr.erase()
        for y, (text, tone, bold) in enumerate(
            status_lines(self.ledger, self.last_batch, self.last_update)
        ):
            _put(self.stdscr, y, 0, text, self._attr(tone, bold))
        self.stdscr.noutrefresh()

        win = self.history_win
        win.erase()
        rows = win.getmaxyx()[0] - 1
        _put(win, 0, 0, "Outages (newest first)", curses.A_BOLD | curses.A_UNDERLINE)
        lines = history_lines(self.ledger)
        first = self.history.window(rows)
        for y, index in enumerate(range(first, min(len(lines), first + rows)), start=1):
            text, tone, bold = lines[index]
            attr = self._attr(tone, bold)
            if index == self.history.selection:
                attr |= curses.A_REVERSE
            _put(win, y, 0, text, attr)
        win.noutrefresh()
        curses.doupdate()

    async def run(self):
        task = self.pipeline.start()
        try:
            while True:
                if task.done() and not task.cancelled() and task.exception() is not None:
                    raise task.exception()
                self.consume()
                key = self.stdscr.getch()
                if key != -1 and not self.handle_key(key):
                    break
                self.draw()
                await asyncio.sleep(config.UI_REFRESH_INTERVAL)
        finally:
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
