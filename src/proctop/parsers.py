"""Parsers for Linux /proc records.

Every parser takes the raw text of exactly one kernel record and returns a
typed sample. Malformed or missing numeric fields default to zero and
missing text fields to an empty string; a parser never raises on bad
input, so a single garbled line cannot abort a collection cycle.

Field layouts follow proc(5).
"""

from dataclasses import dataclass

from proctop.models import CpuCounterSample, MemorySample, NetworkCounterSample

CPU_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq")

MEMINFO_KEYS = {
    "MemTotal": "mem_total",
    "MemFree": "mem_free",
    "MemAvailable": "mem_available",
    "SwapTotal": "swap_total",
    "SwapFree": "swap_free",
    "SwapCached": "swap_cached",
}

# Token positions after the ') ' that closes the command name in
# /proc/[pid]/task/[tid]/stat.
STAT_STATE = 0
STAT_PPID = 1
STAT_UTIME = 11
STAT_STIME = 12
STAT_NICE = 16
STAT_NUM_THREADS = 17


def parse_int(value: str | None) -> int:
    """Parse a signed integer, returning 0 for anything unparsable."""
    if value is None:
        return 0
    try:
        return int(value.strip())
    except ValueError:
        return 0


def _token(tokens: list[str], index: int) -> str | None:
    return tokens[index] if index < len(tokens) else None


def is_cpu_line(line: str) -> bool:
    """Check whether a /proc/stat line carries cpu tick counters."""
    return line.startswith("cpu")


def parse_cpu_line(line: str) -> CpuCounterSample:
    """Parse one 'cpu' / 'cpuN' line of /proc/stat.

    The first token is the cpu name, the next seven are user, nice, system,
    idle, iowait, irq and softirq, in that order. Trailing fields (steal,
    guest, ...) are ignored.
    """
    tokens = line.split()
    name = tokens[0] if tokens else ""
    values = {field: parse_int(_token(tokens, i + 1)) for i, field in enumerate(CPU_FIELDS)}
    return CpuCounterSample(name=name, **values)


def parse_proc_stat(text: str) -> list[CpuCounterSample]:
    """Parse every cpu line of /proc/stat, aggregate first."""
    return [parse_cpu_line(line) for line in text.splitlines() if is_cpu_line(line)]


def parse_meminfo(text: str) -> MemorySample:
    """Parse /proc/meminfo into a MemorySample (values in kB)."""
    values: dict[str, int] = {}
    for line in text.splitlines():
        key, sep, rest = line.partition(":")
        if not sep or key not in MEMINFO_KEYS:
            continue
        parts = rest.split()
        values[MEMINFO_KEYS[key]] = parse_int(parts[0] if parts else None)
    return MemorySample(**values)


def parse_net_dev_line(line: str) -> NetworkCounterSample | None:
    """Parse one interface line of /proc/net/dev.

    Returns None for the two header lines, which carry no interface name
    before a colon.
    """
    name, sep, rest = line.partition(":")
    if not sep or "|" in name:
        return None
    tokens = rest.split()
    return NetworkCounterSample(
        interface=name.strip(),
        rx_bytes=parse_int(_token(tokens, 0)),
        rx_packets=parse_int(_token(tokens, 1)),
        rx_errs=parse_int(_token(tokens, 2)),
        rx_drop=parse_int(_token(tokens, 3)),
        tx_bytes=parse_int(_token(tokens, 8)),
        tx_packets=parse_int(_token(tokens, 9)),
        tx_errs=parse_int(_token(tokens, 10)),
        tx_drop=parse_int(_token(tokens, 11)),
    )


def parse_net_dev(text: str) -> list[NetworkCounterSample]:
    """Parse every interface of /proc/net/dev."""
    samples = []
    for line in text.splitlines():
        sample = parse_net_dev_line(line)
        if sample is not None:
            samples.append(sample)
    return samples


@dataclass(slots=True, frozen=True)
class TaskStat:
    """Fields used from /proc/[pid]/task/[tid]/stat."""

    state: str = ""
    parent_pid: int = 0
    nice: int = 0
    thread_count: int = 0
    utime: int = 0
    stime: int = 0

    @property
    def cpu_ticks(self) -> int:
        return self.utime + self.stime


def parse_task_stat(text: str) -> TaskStat:
    """Parse a task stat line.

    The command name between the parentheses may itself contain spaces and
    parentheses, so the line is split on the last ') ' before the
    positional fields are read.
    """
    _, sep, rest = text.rpartition(") ")
    if not sep:
        return TaskStat()
    tokens = rest.split()
    return TaskStat(
        state=_token(tokens, STAT_STATE) or "",
        parent_pid=parse_int(_token(tokens, STAT_PPID)),
        nice=parse_int(_token(tokens, STAT_NICE)),
        thread_count=parse_int(_token(tokens, STAT_NUM_THREADS)),
        utime=parse_int(_token(tokens, STAT_UTIME)),
        stime=parse_int(_token(tokens, STAT_STIME)),
    )


@dataclass(slots=True, frozen=True)
class TaskStatus:
    """Fields used from /proc/[pid]/task/[tid]/status."""

    name: str = ""
    umask: str = ""
    resident_memory_kb: int = 0
    swapped_memory_kb: int = 0


def parse_task_status(text: str) -> TaskStatus:
    """Parse a task status file. Kernel threads carry no Vm* lines."""
    name = umask = ""
    resident = swapped = 0
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if not sep:
            continue
        value = value.strip()
        if key == "Name":
            name = value
        elif key == "Umask":
            umask = value
        elif key == "VmRSS":
            resident = parse_int(value.split()[0] if value else None)
        elif key == "VmSwap":
            swapped = parse_int(value.split()[0] if value else None)
    return TaskStatus(
        name=name,
        umask=umask,
        resident_memory_kb=resident,
        swapped_memory_kb=swapped,
    )


def parse_cmdline(raw: bytes) -> str:
    """Turn the first line of a NUL-separated cmdline file into display text.

    Only the first line is kept. The NUL argument separators are replaced
    with spaces so the arguments read as one command line, and undecodable
    bytes become U+FFFD. Kernel threads have an empty cmdline and yield "".
    """
    first_line = raw.split(b"\n", 1)[0]
    return first_line.replace(b"\0", b" ").decode("utf-8", errors="replace").strip()
