from __future__ import annotations

import asyncio
import contextlib
import ipaddress
import math
import re
import shutil
from typing import Sequence

PING_RTT_RE = re.compile(r"time[=<]([0-9]*\.?[0-9]+) ?ms")
HOSTNAME_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


class ProbeError(Exception):
    """A probe round could not be started."""


class ProbeConfigError(ProbeError):
    """Invalid target or timeout; raised before any host is probed."""


class ProbeOutcome:
    __slots__ = ("hostname", "dropped", "latency")

    def __init__(self, hostname: str, dropped: bool, latency: float = 0.0):
        self.hostname = hostname
        self.dropped = dropped
        self.latency = latency

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProbeOutcome):
            return NotImplemented
        return (self.hostname, self.dropped, self.latency) == (
            other.hostname,
            other.dropped,
            other.latency,
        )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"ProbeOutcome(hostname={self.hostname!r}, dropped={self.dropped}, latency={self.latency})"


def is_valid_target(host: str) -> bool:
    """Accept IPv4/IPv6 literals and syntactically valid DNS names."""
    if not host:
        return False
    with contextlib.suppress(ValueError):
        ipaddress.ip_address(host)
        return True
    name = host[:-1] if host.endswith(".") else host
    if len(name) > 253:
        return False
    labels = name.split(".")
    # all-numeric dotted names are malformed IPs, not hostnames
    if all(label.isdigit() for label in labels):
        return False
    return all(HOSTNAME_LABEL_RE.match(label) for label in labels)


def validate(hosts: Sequence[str], timeout: float) -> None:
    if not hosts:
        raise ProbeConfigError("no targets configured")
    for host in hosts:
        if not is_valid_target(host):
            raise ProbeConfigError(f"invalid target {host!r}")
    if not isinstance(timeout, (int, float)) or not math.isfinite(timeout) or timeout <= 0:
        raise ProbeConfigError(f"invalid timeout {timeout!r}")


async def ping_host(host: str, timeout: float) -> ProbeOutcome:
    """Ping a host once using the system 'ping' command (Linux-focused).

    Uses: ping -n -c 1 -w {timeout} host
    Timeouts and non-zero exits come back as dropped outcomes. Raises
    ProbeError only when the command cannot be spawned at all.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            "ping",
            "-n",
            "-c",
            "1",
            "-w",
            str(max(1, math.ceil(timeout))),
            host,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as exc:
        raise ProbeError(f"cannot run ping: {exc}") from exc

    try:
        out_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout + 0.5)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        return ProbeOutcome(host, True)

    if proc.returncode != 0:
        return ProbeOutcome(host, True)
    match = PING_RTT_RE.search(out_bytes[0].decode(errors="replace"))
    return ProbeOutcome(host, False, float(match.group(1)) if match else 0.0)


async def probe_round(hosts: Sequence[str], timeout: float) -> list[ProbeOutcome]:
    """Probe every host concurrently; one outcome per host, in target order.

    Either the whole batch is returned or ProbeError is raised.
    """
    validate(hosts, timeout)
    if shutil.which("ping") is None:
        raise ProbeError("system 'ping' command not found")
    results = await asyncio.gather(
        *(ping_host(h, timeout) for h in hosts), return_exceptions=True
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)
