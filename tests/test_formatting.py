"""Tests for formatting helpers."""

from proctop.formatting import format_kb, format_rate, gauge, sparkline, to_humanreadable


def test_to_humanreadable_bytes():
    """Test values below 1000 stay in bytes."""
    assert to_humanreadable(0) == "0 B"
    assert to_humanreadable(999) == "999 B"


def test_to_humanreadable_kibibytes():
    """Test values above 1000 are divided by 1024."""
    assert to_humanreadable(1500) == "1.5 KiB"


def test_to_humanreadable_larger_units():
    """Test the unit keeps growing with the value."""
    assert to_humanreadable(5 * 1024**2) == "5.0 MiB"
    assert to_humanreadable(3 * 1024**3) == "3.0 GiB"


def test_format_kb():
    """Test kB counters are scaled to bytes first."""
    assert format_kb(2048) == "2.0 MiB"


def test_format_rate():
    """Test rates carry a per-second suffix."""
    assert format_rate(1500.0) == "1.5 KiB/s"


def test_gauge_width_is_fixed():
    """Test gauges always draw the requested number of cells."""
    for percent in (-10.0, 0.0, 40.0, 100.0, 250.0):
        bar = gauge(percent, width=10)
        assert bar.count("█") + bar.count("░") == 10


def test_sparkline():
    """Test sparklines cover the last values scaled to the maximum."""
    assert sparkline([], 5) == ""
    assert sparkline([0.0, 100.0], 5, maximum=100.0) == " █"
    assert len(sparkline([1.0] * 50, 20)) == 20
    assert sparkline([0.0, 0.0], 5) == "  "
