"""Tests for proctop data models."""

import pytest

from proctop.models import (
    CpuCounterSample,
    MemorySample,
    ProcessRecord,
    ProcessSnapshot,
)


def test_process_record_creation():
    """Test ProcessRecord dataclass creation."""
    record = ProcessRecord(
        pid=100,
        tid=101,
        parent_pid=1,
        name="worker",
        umask="0022",
        state="R",
        nice=0,
        thread_count=4,
        resident_memory_kb=1024,
        swapped_memory_kb=0,
        command="/usr/bin/worker",
        user="testuser",
        cpu_ticks=500,
        cpu_percent=12.5,
    )

    assert record.pid == 100
    assert record.tid == 101
    assert record.name == "worker"
    assert record.cpu_ticks == 500
    assert record.cpu_percent == 12.5


def test_process_record_is_frozen():
    """Test that ProcessRecord is immutable (frozen)."""
    record = ProcessRecord(pid=1, tid=1)

    with pytest.raises(AttributeError):
        record.pid = 999  # type: ignore[misc]


def test_process_record_uses_slots():
    """Test that ProcessRecord uses __slots__ for memory efficiency."""
    record = ProcessRecord(pid=1, tid=1)

    # Slots-based dataclasses don't have __dict__
    assert not hasattr(record, "__dict__")


def test_cpu_counter_total():
    """Test total sums all seven counters."""
    sample = CpuCounterSample("cpu", 1, 2, 3, 4, 5, 6, 7)
    assert sample.total == 28


def test_memory_sample_zero_guard():
    """Test unknown totals never divide by zero."""
    sample = MemorySample()
    assert sample.mem_percent == 0.0
    assert sample.swap_percent == 0.0
    assert sample.mem_used == 0


def test_memory_used_without_mem_available():
    """Test a missing MemAvailable falls back to total minus free."""
    sample = MemorySample(mem_total=1000, mem_free=900, mem_available=0)
    assert sample.mem_used == 100
    assert sample.mem_percent == 10.0


def test_memory_used_prefers_mem_available():
    """Test MemAvailable wins over MemFree when the kernel reports it."""
    sample = MemorySample(mem_total=1000, mem_free=100, mem_available=600)
    assert sample.mem_used == 400


def test_process_snapshot_iterates_records():
    """Test ProcessSnapshot behaves as an ordered collection."""
    records = (ProcessRecord(pid=1, tid=1), ProcessRecord(pid=1, tid=2))
    snapshot = ProcessSnapshot(records=records)
    assert len(snapshot) == 2
    assert [r.tid for r in snapshot] == [1, 2]
