from __future__ import annotations

import asyncio
import logging
import time
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Sequence

from . import config
from .ping import ProbeError, ProbeOutcome, probe_round

logger = logging.getLogger(__name__)

Batch = List[ProbeOutcome]
Probe = Callable[[Sequence[str], float], Awaitable[Batch]]


class PollingTask:
    """Runs one probe round per tick and hands the batches on.

    ``batches()`` iterates inline (headless variant); ``start()`` runs the
    same loop as a background task feeding ``queue`` (interactive
    variant). The queue is unbounded and this task is its only producer.
    """

    def __init__(
        self,
        hosts: Sequence[str] = tuple(config.TARGETS),
        timeout: float = config.PROBE_TIMEOUT_SECONDS,
        interval: float = config.POLL_INTERVAL_SECONDS,
        probe: Probe = probe_round,
        queue: Optional["asyncio.Queue[Batch]"] = None,
    ):
        self.hosts = list(hosts)
        self.timeout = timeout
        self.interval = interval
        self._probe = probe
        self.queue: "asyncio.Queue[Batch]" = queue if queue is not None else asyncio.Queue()
        self._task: Optional[asyncio.Task] = None

    async def tick(self) -> Optional[Batch]:
        """One round; None when the round could not be run."""
        try:
            return await self._probe(self.hosts, self.timeout)
        except ProbeError as exc:
            logger.debug("Probe round skipped: %s", exc)
            return None

    async def batches(self) -> AsyncIterator[Batch]:
        while True:
            start = time.monotonic()
            batch = await self.tick()
            if batch is not None:
                yield batch
                # time spent by the consumer counts towards the tick
            await asyncio.sleep(max(0.0, self.interval - (time.monotonic() - start)))

    async def run(self) -> None:
        async for batch in self.batches():
            self.queue.put_nowait(batch)

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self.run())
        return self._task

    def poll(self) -> Optional[Batch]:
        """Non-blocking receive of at most one pending batch."""
        try:
            return self.queue.get_nowait()
        except asyncio.QueueEmpty:
            return None
