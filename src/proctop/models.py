"""Data models for proctop."""

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class CpuCounterSample:
    """One cpu row of /proc/stat, in clock ticks."""

    name: str  # 'cpu' for the aggregate, 'cpuN' for a core
    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0

    @property
    def total(self) -> int:
        """Sum of all seven tick counters."""
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
        )


@dataclass(slots=True, frozen=True)
class CpuUtilization:
    """Utilization of one cpu between two consecutive samples."""

    name: str
    percent: float


@dataclass(slots=True, frozen=True)
class MemorySample:
    """Memory and swap counters from /proc/meminfo, in kB. Zero means unknown."""

    mem_total: int = 0
    mem_free: int = 0
    mem_available: int = 0
    swap_total: int = 0
    swap_free: int = 0
    swap_cached: int = 0

    @property
    def mem_used(self) -> int:
        if self.mem_available == 0:
            # MemAvailable is missing on old kernels
            return max(self.mem_total - self.mem_free, 0)
        return max(self.mem_total - self.mem_available, 0)

    @property
    def mem_percent(self) -> float:
        if self.mem_total <= 0:
            return 0.0
        return 100.0 * self.mem_used / self.mem_total

    @property
    def swap_used(self) -> int:
        return max(self.swap_total - self.swap_free, 0)

    @property
    def swap_percent(self) -> float:
        if self.swap_total <= 0:
            return 0.0
        return 100.0 * self.swap_used / self.swap_total


@dataclass(slots=True, frozen=True)
class NetworkCounterSample:
    """Cumulative counters of one interface from /proc/net/dev."""

    interface: str
    rx_bytes: int = 0
    rx_packets: int = 0
    rx_errs: int = 0
    rx_drop: int = 0
    tx_bytes: int = 0
    tx_packets: int = 0
    tx_errs: int = 0
    tx_drop: int = 0


@dataclass(slots=True, frozen=True)
class NetworkRate:
    """Throughput of one interface between two consecutive samples."""

    interface: str
    rx_bytes_per_sec: float
    tx_bytes_per_sec: float


@dataclass(slots=True, frozen=True)
class NetworkSnapshot:
    """Latest counters of the monitored interface plus its rate, if known."""

    sample: NetworkCounterSample
    rate: NetworkRate | None = None


@dataclass(slots=True, frozen=True)
class DiskUsageSample:
    """Usage of one device-backed mount, in 1K blocks."""

    filesystem: str
    total: int
    used: int
    available: int
    used_percentage: str  # e.g. '42%'
    mountpoint: str


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable snapshot of a single thread."""

    pid: int  # thread group id
    tid: int
    parent_pid: int = 0
    name: str = ""
    umask: str = ""
    state: str = ""  # 'R', 'S', 'Z', 'D', etc.
    nice: int = 0
    thread_count: int = 0
    resident_memory_kb: int = 0
    swapped_memory_kb: int = 0
    command: str = ""
    user: str = ""
    cpu_ticks: int = 0  # utime + stime
    cpu_percent: float = 0.0
    cpu_sampled: bool = True  # False on a thread's first cycle, before any delta exists


@dataclass(slots=True, frozen=True)
class ProcessSnapshot:
    """All threads seen in one enumeration cycle, in enumeration order."""

    records: tuple[ProcessRecord, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


CpuSnapshot = tuple[CpuUtilization, ...]
DiskSnapshot = tuple[DiskUsageSample, ...]
