"""Sampling functions for the CPU, memory, disk and network collectors.

Each sampler is a callable returning one snapshot per call, or raising
CollectError when its kernel source cannot be read. Samplers that derive
rates own their delta engine; they are only ever called from their
collector's thread.
"""

import time
from collections.abc import Callable
from pathlib import Path

import psutil

from proctop.collector import CollectError
from proctop.deltas import CpuDeltaEngine, NetworkDeltaEngine
from proctop.models import (
    CpuSnapshot,
    DiskSnapshot,
    DiskUsageSample,
    MemorySample,
    NetworkCounterSample,
    NetworkSnapshot,
)
from proctop.parsers import parse_meminfo, parse_net_dev, parse_proc_stat

LOOPBACK = "lo"


def read_text(path: Path) -> str:
    """Read a whole pseudo-file, turning I/O failures into CollectError."""
    try:
        return path.read_text()
    except OSError as e:
        raise CollectError(f"cannot read {path}: {e}") from e


class CpuSampler:
    """Utilization of the aggregate cpu and every core from /proc/stat."""

    def __init__(
        self,
        proc_root: str | Path = "/proc",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._path = Path(proc_root) / "stat"
        self._clock = clock
        self._engine = CpuDeltaEngine()

    def __call__(self) -> CpuSnapshot:
        samples = parse_proc_stat(read_text(self._path))
        now = self._clock()
        utilizations = []
        for sample in samples:
            utilization = self._engine.observe(sample.name, sample, now)
            if utilization is not None:
                utilizations.append(utilization)
        return tuple(utilizations)


class MemorySampler:
    """Memory and swap counters from /proc/meminfo."""

    def __init__(self, proc_root: str | Path = "/proc") -> None:
        self._path = Path(proc_root) / "meminfo"

    def __call__(self) -> MemorySample:
        return parse_meminfo(read_text(self._path))


def is_device_backed(device: str) -> bool:
    return device.startswith("/dev/")


class DiskSampler:
    """Usage of every device-backed mount, in 1K blocks."""

    def __call__(self) -> DiskSnapshot:
        try:
            partitions = psutil.disk_partitions(all=False)
        except OSError as e:
            raise CollectError(f"cannot list mounts: {e}") from e

        disks = []
        for partition in partitions:
            if not is_device_backed(partition.device):
                continue
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError:
                # Unmounted mid-scan or not readable by this user
                continue
            disks.append(
                DiskUsageSample(
                    filesystem=partition.device.removeprefix("/dev"),
                    total=usage.total // 1024,
                    used=usage.used // 1024,
                    available=usage.free // 1024,
                    used_percentage=f"{usage.percent:.0f}%",
                    mountpoint=partition.mountpoint,
                )
            )
        return tuple(disks)


def select_busiest_interface(
    samples: list[NetworkCounterSample],
) -> NetworkCounterSample | None:
    """Pick the non-loopback interface that has received the most bytes."""
    busiest = None
    for sample in samples:
        if sample.interface == LOOPBACK:
            continue
        if busiest is None or sample.rx_bytes > busiest.rx_bytes:
            busiest = sample
    return busiest


class NetworkSampler:
    """
    Throughput of the busiest interface from /proc/net/dev.

    The monitored interface is re-selected every cycle, so it may change
    when another interface overtakes it in received bytes. A newly selected
    interface reports no rate until it has been seen twice.
    """

    def __init__(
        self,
        proc_root: str | Path = "/proc",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._path = Path(proc_root) / "net" / "dev"
        self._clock = clock
        self._engine = NetworkDeltaEngine()

    def __call__(self) -> NetworkSnapshot:
        interfaces = parse_net_dev(read_text(self._path))
        now = self._clock()
        busiest = select_busiest_interface(interfaces)
        if busiest is None:
            raise CollectError("no network interface besides loopback")
        rate = self._engine.observe(busiest.interface, busiest, now)
        return NetworkSnapshot(sample=busiest, rate=rate)
