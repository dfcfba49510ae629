"""Verification Test: Memory Leak Check.

Per-thread CPU history must not grow with thread churn, and a running
collector must keep its resident memory roughly flat.
"""

import gc
import os
import time

import psutil
import pytest
from conftest import write_thread

from proctop.collector import SnapshotCollector
from proctop.deltas import ThreadCpuEngine
from proctop.process_tree import ProcessTreeEnumerator


def get_current_memory_mb() -> float:
    """Get current process memory usage in MB."""
    return psutil.Process().memory_info().rss / (1024 * 1024)


class TestMemoryLeakCheck:
    """Memory leak verification suite tests."""

    def test_history_bounded_under_tid_churn(self, proc_root, clock):
        """Test the delta history only holds threads from the latest cycle."""
        enumerator = ProcessTreeEnumerator(
            proc_root, engine=ThreadCpuEngine(hz=100), clock=clock, user_lookup=str
        )
        previous = []
        for cycle in range(20):
            for task_dir in previous:
                for path in task_dir.iterdir():
                    path.unlink()
                task_dir.rmdir()
            base = 1000 + cycle * 10
            previous = [write_thread(proc_root, 100, tid) for tid in range(base, base + 10)]
            # The leader thread stays for the whole run
            write_thread(proc_root, 100, 100)

            enumerator.collect()
            clock.advance(1.0)

            assert len(enumerator.engine) == 11

    @pytest.mark.skipif(not os.path.isdir("/proc/self/task"), reason="requires Linux procfs")
    def test_collector_memory_stability_short(self):
        """
        Test the process collector doesn't leak memory over a short run.

        Runs for a few seconds and allows a generous delta to absorb
        allocator noise.
        """
        gc.collect()
        collector = SnapshotCollector("processes", ProcessTreeEnumerator(), 0.1)

        collector.start()
        try:
            time.sleep(1.0)
            collector.mailbox.take()
            gc.collect()
            baseline = get_current_memory_mb()

            deadline = time.monotonic() + 3.0
            while time.monotonic() < deadline:
                collector.mailbox.take()
                time.sleep(0.1)

            gc.collect()
            delta = get_current_memory_mb() - baseline
        finally:
            collector.stop()

        assert collector.failures == 0
        assert delta < 10.0, f"Memory grew by {delta:.2f}MB"
