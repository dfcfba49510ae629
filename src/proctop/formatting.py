"""Formatting helpers for the dashboard widgets."""

UNITS = ["B", "KiB", "MiB", "GiB", "TiB", "PiB"]


def to_humanreadable(size: int | float) -> str:
    """Format a byte count, e.g. 999 -> '999 B', 1500 -> '1.5 KiB'."""
    if size < 1000:
        return f"{int(size)} B"
    count = 0
    value = float(size)
    while value > 1000 and count < len(UNITS) - 1:
        value /= 1024
        count += 1
    return f"{value:.1f} {UNITS[count]}"


def format_kb(kilobytes: int) -> str:
    """Format a kB count as reported by /proc."""
    return to_humanreadable(kilobytes * 1024)


def format_rate(bytes_per_sec: float) -> str:
    return f"{to_humanreadable(bytes_per_sec)}/s"


def gauge(percent: float, width: int = 20, color: str = "green") -> str:
    """Render a percentage as a Rich markup bar of fixed width."""
    filled = int(percent * width / 100)
    filled = min(max(filled, 0), width)
    return f"[{color}]{'█' * filled}[/{color}][dim]{'░' * (width - filled)}[/dim]"


def sparkline(values: list[float], width: int, maximum: float | None = None) -> str:
    """Render the last ``width`` values as block characters."""
    blocks = " ▁▂▃▄▅▆▇█"
    tail = values[-width:]
    if not tail:
        return ""
    top = maximum if maximum is not None else max(tail)
    if top <= 0:
        return blocks[0] * len(tail)
    last = len(blocks) - 1
    return "".join(blocks[min(max(int(v / top * last), 0), last)] for v in tail)
