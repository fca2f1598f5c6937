import asyncio

import pytest

from linkwatch import ping
from linkwatch.ping import ProbeConfigError, ProbeError, ProbeOutcome

REPLY = (
    b"PING 8.8.8.8 (8.8.8.8) 56(84) bytes of data.\n"
    b"64 bytes from 8.8.8.8: icmp_seq=1 ttl=117 time=14.2 ms\n"
)
LOSS = b"1 packets transmitted, 0 received, 100% packet loss, time 0ms\n"


class FakeProc:
    def __init__(self, returncode, stdout=b"", hang=False):
        self.returncode = returncode
        self.stdout = stdout
        self.hang = hang
        self.killed = False
        self.waited = False
        self.communicated = False

    async def communicate(self):
        if self.hang:
            await asyncio.sleep(10)
        await asyncio.sleep(0.01)
        self.communicated = True
        return self.stdout, None

    def kill(self):
        self.killed = True

    async def wait(self):
        self.waited = True
        return -9


def install(monkeypatch, procs):
    calls = []

    async def fake_exec(*args, **kwargs):
        calls.append(args)
        return procs[args[-1]]

    monkeypatch.setattr(ping.asyncio, "create_subprocess_exec", fake_exec)
    monkeypatch.setattr(ping.shutil, "which", lambda name: "/bin/ping")
    return calls


@pytest.mark.parametrize(
    "host", ["8.8.8.8", "208.67.222.222", "2001:4860:4860::8888", "dns.google", "example.com."]
)
def test_valid_targets(host):
    assert ping.is_valid_target(host)


@pytest.mark.parametrize("host", ["", "8.8.8", "bad host", "-x.com", "a..b", "x" * 64 + ".com"])
def test_invalid_targets(host):
    assert not ping.is_valid_target(host)


def test_validate_rejects_bad_config():
    with pytest.raises(ProbeConfigError):
        ping.validate([], 2.0)
    with pytest.raises(ProbeConfigError):
        ping.validate(["8.8.8.8", "not a host"], 2.0)
    with pytest.raises(ProbeConfigError):
        ping.validate(["8.8.8.8"], 0)
    with pytest.raises(ProbeConfigError):
        ping.validate(["8.8.8.8"], float("inf"))


def test_ping_host_parses_latency(monkeypatch):
    calls = install(monkeypatch, {"8.8.8.8": FakeProc(0, REPLY)})
    outcome = asyncio.run(ping.ping_host("8.8.8.8", 2.0))
    assert outcome == ProbeOutcome("8.8.8.8", False, 14.2)
    assert calls[0] == ("ping", "-n", "-c", "1", "-w", "2", "8.8.8.8")


def test_ping_host_failure_is_dropped(monkeypatch):
    install(monkeypatch, {"8.8.8.8": FakeProc(1, LOSS)})
    outcome = asyncio.run(ping.ping_host("8.8.8.8", 2.0))
    assert outcome.dropped


def test_ping_host_timeout_kills_process(monkeypatch):
    proc = FakeProc(None, hang=True)
    install(monkeypatch, {"8.8.8.8": proc})
    outcome = asyncio.run(ping.ping_host("8.8.8.8", 0.1))
    assert outcome.dropped
    assert proc.killed
    assert proc.waited


def test_ping_host_spawn_failure_raises(monkeypatch):
    async def broken(*args, **kwargs):
        raise FileNotFoundError("ping")

    monkeypatch.setattr(ping.asyncio, "create_subprocess_exec", broken)
    with pytest.raises(ProbeError):
        asyncio.run(ping.ping_host("8.8.8.8", 1.0))


def test_probe_round_keeps_target_order(monkeypatch):
    install(
        monkeypatch,
        {
            "8.8.8.8": FakeProc(0, REPLY),
            "4.2.2.2": FakeProc(1, LOSS),
            "208.67.222.222": FakeProc(0, REPLY.replace(b"14.2", b"150.5")),
        },
    )
    batch = asyncio.run(ping.probe_round(["8.8.8.8", "4.2.2.2", "208.67.222.222"], 2.0))
    assert [o.hostname for o in batch] == ["8.8.8.8", "4.2.2.2", "208.67.222.222"]
    assert [o.dropped for o in batch] == [False, True, False]
    assert batch[2].latency == 150.5


def test_probe_round_without_ping_binary(monkeypatch):
    monkeypatch.setattr(ping.shutil, "which", lambda name: None)
    with pytest.raises(ProbeError):
        asyncio.run(ping.probe_round(["8.8.8.8"], 2.0))


def test_probe_round_rejects_invalid_target_before_probing(monkeypatch):
    calls = install(monkeypatch, {})
    with pytest.raises(ProbeConfigError):
        asyncio.run(ping.probe_round(["8.8.8.8", "bad host"], 2.0))
    assert calls == []


def test_probe_round_spawn_failure_waits_for_other_hosts(monkeypatch):
    procs = {"8.8.8.8": FakeProc(0, REPLY), "208.67.222.222": FakeProc(1, LOSS)}

    async def fake_exec(*args, **kwargs):
        if args[-1] == "4.2.2.2":
            raise PermissionError("ping")
        return procs[args[-1]]

    monkeypatch.setattr(ping.asyncio, "create_subprocess_exec", fake_exec)
    monkeypatch.setattr(ping.shutil, "which", lambda name: "/bin/ping")
    with pytest.raises(ProbeError):
        asyncio.run(ping.probe_round(["8.8.8.8", "4.2.2.2", "208.67.222.222"], 2.0))
    assert all(proc.communicated for proc in procs.values())
