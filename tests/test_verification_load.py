"""Verification Test: Load Test - many threads in one walk.

A fake proc tree with thousands of threads must be enumerated and
sorted quickly enough to keep the dashboard responsive.
"""

import time

import pytest
from conftest import write_thread

from proctop.deltas import ThreadCpuEngine
from proctop.process_tree import ProcessTreeEnumerator
from proctop.table import Column, ProcessTable


@pytest.fixture
def busy_proc_root(proc_root):
    """A proc root with 500 processes of 4 threads each."""
    for pid in range(1000, 1500):
        for offset in range(4):
            tid = pid if offset == 0 else 10000 + pid * 4 + offset
            write_thread(proc_root, pid, tid, utime=tid % 97, threads=4)
    return proc_root


class TestLoadTest:
    """Load test verification suite tests."""

    def test_enumerate_many_threads(self, busy_proc_root, clock):
        """Test every thread is reported and a cycle stays fast."""
        enumerator = ProcessTreeEnumerator(
            busy_proc_root, engine=ThreadCpuEngine(hz=100), clock=clock, user_lookup=str
        )
        enumerator.collect()
        clock.advance(1.0)

        start = time.perf_counter()
        snapshot = enumerator.collect()
        elapsed = time.perf_counter() - start

        assert len(snapshot) == 2000
        assert elapsed < 5.0, f"Walk took {elapsed:.2f}s"

    def test_table_with_many_rows(self, busy_proc_root, clock):
        """Test sorting and filtering a large snapshot."""
        enumerator = ProcessTreeEnumerator(
            busy_proc_root, engine=ThreadCpuEngine(hz=100), clock=clock, user_lookup=str
        )
        table = ProcessTable(kill=lambda tid: None, renice=lambda tid, value: None)
        table.update(enumerator.collect())

        start = time.perf_counter()
        table.focused_column = Column.PID
        table.handle_key("s")
        rows = table.rows()
        elapsed = time.perf_counter() - start

        assert len(rows) == 2000
        assert rows[0].pid == 1499
        assert elapsed < 1.0
