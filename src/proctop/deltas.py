"""Delta engines turning monotonically increasing counters into rates.

Each engine keeps the previous (sample, timestamp) pair per identity. The
first observation of an identity only stores the sample; every later one
derives a metric from exactly two samples of that same identity.
Degenerate deltas (zero or negative elapsed time or ticks) yield 0.0.
"""

import math
import os
from collections.abc import Iterable
from typing import Generic, TypeVar

from proctop.models import (
    CpuCounterSample,
    CpuUtilization,
    NetworkCounterSample,
    NetworkRate,
)

K = TypeVar("K")
S = TypeVar("S")
M = TypeVar("M")

DEFAULT_CLOCK_TICKS = 100


def clock_ticks_per_second() -> int:
    """Return USER_HZ as configured by the OS."""
    try:
        ticks = os.sysconf("SC_CLK_TCK")
    except (ValueError, OSError):
        return DEFAULT_CLOCK_TICKS
    return ticks if ticks > 0 else DEFAULT_CLOCK_TICKS


def _finite(value: float) -> float:
    return value if math.isfinite(value) else 0.0


class DeltaEngine(Generic[K, S, M]):
    """Base engine storing one previous sample per identity."""

    def __init__(self) -> None:
        self._previous: dict[K, tuple[S, float]] = {}

    def __len__(self) -> int:
        return len(self._previous)

    def __contains__(self, identity: object) -> bool:
        return identity in self._previous

    def observe(self, identity: K, sample: S, now: float) -> M | None:
        """
        Record a sample and derive a metric against the previous one.

        Args:
            identity: Which counter source the sample belongs to.
            sample: The current raw sample.
            now: Monotonic timestamp of the sample, in seconds.

        Returns:
            The derived metric, or None on the first observation.
        """
        previous = self._previous.get(identity)
        self._previous[identity] = (sample, now)
        if previous is None:
            return None
        previous_sample, previous_now = previous
        return self.derive(identity, previous_sample, sample, now - previous_now)

    def derive(self, identity: K, previous: S, current: S, elapsed: float) -> M:
        raise NotImplementedError

    def retain(self, identities: Iterable[K]) -> int:
        """Forget every identity not in ``identities``. Returns how many were dropped."""
        keep = set(identities)
        stale = [identity for identity in self._previous if identity not in keep]
        for identity in stale:
            del self._previous[identity]
        return len(stale)


def cpu_utilization(previous: CpuCounterSample, current: CpuCounterSample) -> float:
    """Busy percentage between two samples of the same cpu, clamped to [0, 100]."""
    total_delta = current.total - previous.total
    if total_delta <= 0:
        return 0.0
    idle_delta = current.idle - previous.idle
    percent = _finite(100.0 * (1.0 - idle_delta / total_delta))
    return min(max(percent, 0.0), 100.0)


class CpuDeltaEngine(DeltaEngine[str, CpuCounterSample, CpuUtilization]):
    """Per-cpu utilization, keyed by cpu name."""

    def derive(
        self,
        identity: str,
        previous: CpuCounterSample,
        current: CpuCounterSample,
        elapsed: float,
    ) -> CpuUtilization:
        return CpuUtilization(name=identity, percent=cpu_utilization(previous, current))


def byte_rate(previous: int, current: int, elapsed: float) -> float:
    """Bytes per second between two counter readings."""
    delta = current - previous
    if elapsed <= 0 or delta <= 0:
        return 0.0
    return _finite(delta / elapsed)


class NetworkDeltaEngine(DeltaEngine[str, NetworkCounterSample, NetworkRate]):
    """Per-interface throughput using the measured elapsed time."""

    def derive(
        self,
        identity: str,
        previous: NetworkCounterSample,
        current: NetworkCounterSample,
        elapsed: float,
    ) -> NetworkRate:
        return NetworkRate(
            interface=identity,
            rx_bytes_per_sec=byte_rate(previous.rx_bytes, current.rx_bytes, elapsed),
            tx_bytes_per_sec=byte_rate(previous.tx_bytes, current.tx_bytes, elapsed),
        )


class ThreadCpuEngine(DeltaEngine[int, int, float]):
    """
    Per-thread CPU share, keyed by tid.

    Elapsed time is measured since that tid was last observed, not the
    collection interval. A tid whose tick counter went backwards (the id was
    reused by a new thread) reports 0.0.
    """

    def __init__(self, hz: int | None = None) -> None:
        super().__init__()
        self._hz = hz if hz and hz > 0 else clock_ticks_per_second()

    @property
    def hz(self) -> int:
        return self._hz

    def derive(self, identity: int, previous: int, current: int, elapsed: float) -> float:
        ticks = current - previous
        if elapsed <= 0 or ticks <= 0:
            return 0.0
        return _finite(100.0 * (ticks / self._hz) / elapsed)
