"""Shared test fixtures for proctop."""

from pathlib import Path

import pytest

from proctop.collector import Collectors, SnapshotCollector
from proctop.config import Config, UIConfig
from proctop.models import MemorySample, NetworkCounterSample, NetworkSnapshot, ProcessSnapshot

PROC_STAT = """\
cpu  100 0 50 800 0 0 0 0 0 0
cpu0 60 0 20 420 0 0 0 0 0 0
cpu1 40 0 30 380 0 0 0 0 0 0
intr 12345 0 0
ctxt 67890
btime 1700000000
"""

MEMINFO = """\
MemTotal:       16000000 kB
MemFree:         2000000 kB
MemAvailable:    8000000 kB
Buffers:          100000 kB
Cached:          4000000 kB
SwapCached:        10000 kB
SwapTotal:       4000000 kB
SwapFree:        3000000 kB
"""

NET_DEV = """\
Inter-|   Receive                                                |  Transmit
 face |bytes    packets errs drop fifo frame compressed multicast|bytes    packets errs drop fifo colls carrier compressed
    lo: 9000000     900    0    0    0     0          0         0  9000000     900    0    0    0     0       0          0
  eth0: 5000000    4000    1    2    0     0          0         0  1000000    3000    3    4    0     0       0          0
 wlan0:  100000     100    0    0    0     0          0         0    50000      80    0    0    0     0       0          0
"""


def stat_line(
    tid: int,
    comm: str = "worker",
    state: str = "S",
    ppid: int = 1,
    utime: int = 0,
    stime: int = 0,
    nice: int = 0,
    threads: int = 1,
) -> str:
    """Build a /proc/[pid]/task/[tid]/stat line with the given fields."""
    before_utime = " ".join(["0"] * 9)  # pgrp .. cmajflt
    return (
        f"{tid} ({comm}) {state} {ppid} {before_utime} {utime} {stime} 0 0 20 {nice} "
        f"{threads} 0 12345 4096000 250 18446744073709551615\n"
    )


def write_thread(
    root: Path,
    pid: int,
    tid: int,
    name: str = "worker",
    utime: int = 0,
    stime: int = 0,
    nice: int = 0,
    threads: int = 1,
    ppid: int = 1,
    state: str = "S",
    rss_kb: int = 1024,
    swap_kb: int = 0,
    cmdline: bytes = b"/usr/bin/worker\0--flag\0",
) -> Path:
    """Create the status, stat and cmdline files of one thread under a fake proc root."""
    task = root / str(pid) / "task" / str(tid)
    task.mkdir(parents=True, exist_ok=True)
    (task / "status").write_text(
        f"Name:\t{name}\nUmask:\t0022\nState:\t{state} (sleeping)\n"
        f"Tgid:\t{pid}\nPid:\t{tid}\nVmRSS:\t{rss_kb} kB\nVmSwap:\t{swap_kb} kB\n"
    )
    (task / "stat").write_text(
        stat_line(tid, name, state, ppid, utime, stime, nice, threads)
    )
    (task / "cmdline").write_bytes(cmdline)
    return task


@pytest.fixture
def proc_root(tmp_path: Path) -> Path:
    """Create an empty fake proc root with the system-wide counter files."""
    root = tmp_path / "proc"
    root.mkdir()
    (root / "stat").write_text(PROC_STAT)
    (root / "meminfo").write_text(MEMINFO)
    (root / "net").mkdir()
    (root / "net" / "dev").write_text(NET_DEV)
    (root / "self").mkdir()  # Non-numeric entries are ignored
    return root


class Clock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def test_config() -> Config:
    """Config with key throttling disabled so pilot key presses all arrive."""
    return Config(ui=UIConfig(key_throttle=0.0, history_length=10))


def make_collectors(**samples) -> Collectors:
    """Build collectors with stub sampling functions and long intervals."""

    defaults = {
        "cpu": (),
        "memory": MemorySample(),
        "disk": (),
        "network": NetworkSnapshot(sample=NetworkCounterSample(interface="eth0")),
        "processes": ProcessSnapshot(),
    }

    def stub(name: str):
        value = samples.get(name, defaults[name])
        return lambda: value

    return Collectors(
        cpu=SnapshotCollector("cpu", stub("cpu"), 60.0),
        memory=SnapshotCollector("memory", stub("memory"), 60.0),
        disk=SnapshotCollector("disk", stub("disk"), 60.0),
        network=SnapshotCollector("network", stub("network"), 60.0),
        processes=SnapshotCollector("processes", stub("processes"), 60.0),
    )
