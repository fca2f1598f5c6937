from __future__ import annotations

import asyncio
import curses
import logging
import signal
import sys

from rich.console import Console

from . import log
from .classifier import apply_batch
from .dashboard import Dashboard
from .outage_logger import OutageLogger
from .pipeline import PollingTask
from .stats import AvailabilityLedger
from .ui import build_summary_table

console = Console()
logger = logging.getLogger(__name__)


async def headless_loop(
    ledger: AvailabilityLedger,
    pipeline: PollingTask,
    outage_logger: OutageLogger,
):
    """Probe, classify and log in one sequential loop."""
    async for batch in pipeline.batches():
        outage_logger.log_batch(batch, ledger)
        outage_logger.log_transition(apply_batch(ledger, batch), ledger)


async def main_headless_async(ledger: AvailabilityLedger):
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _signal_handler():
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:  # Windows
            signal.signal(sig, lambda s, f: _signal_handler())

    logger.info("Running.")
    task = asyncio.create_task(headless_loop(ledger, PollingTask(), OutageLogger()))
    waiter = asyncio.create_task(stop_event.wait())
    await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)

    for t in (task, waiter):
        t.cancel()
    await asyncio.gather(task, waiter, return_exceptions=True)
    if not task.cancelled() and task.exception() is not None:
        raise task.exception()


def main_headless():
    log.configure_logging(console=console)
    ledger = AvailabilityLedger()
    try:
        asyncio.run(main_headless_async(ledger))
    except KeyboardInterrupt:
        pass
    OutageLogger().finalize(ledger)
    console.print(build_summary_table(ledger))


def _run_dashboard(stdscr, ledger: AvailabilityLedger):
    asyncio.run(Dashboard(stdscr, ledger, PollingTask()).run())


def main():
    log.silence()
    ledger = AvailabilityLedger()
    try:
        curses.wrapper(_run_dashboard, ledger)
    except KeyboardInterrupt:
        pass
    except curses.error as exc:
        console.print(f"[bold red]Terminal failure:[/] {exc}")
        sys.exit(1)
    console.print(build_summary_table(ledger))


if __name__ == "__main__":  # pragma: no cover
    main()
