"""Enumeration of every thread under /proc."""

import os
import pwd
import time
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from proctop.collector import CollectError
from proctop.deltas import ThreadCpuEngine
from proctop.logging import get_logger
from proctop.models import ProcessRecord, ProcessSnapshot
from proctop.parsers import parse_cmdline, parse_task_stat, parse_task_status

log = get_logger(__name__)


def lookup_user(uid: int) -> str:
    """Resolve a uid through the user database, falling back to the number."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return str(uid)


class ProcessTreeEnumerator:
    """
    Builds one ProcessRecord per thread of every process.

    The walk races against threads exiting: a thread whose files vanish or
    cannot be read is skipped without failing the cycle. Only failing to
    list the process root aborts the cycle with CollectError.

    Per-thread CPU history lives in the enumerator's ThreadCpuEngine and is
    pruned to the tids seen in the latest cycle.
    """

    def __init__(
        self,
        proc_root: str | Path = "/proc",
        engine: ThreadCpuEngine | None = None,
        clock: Callable[[], float] = time.monotonic,
        user_lookup: Callable[[int], str] = lookup_user,
    ) -> None:
        self._root = Path(proc_root)
        self._engine = engine if engine is not None else ThreadCpuEngine()
        self._clock = clock
        self._user_lookup = user_lookup
        self._user_cache: dict[int, str] = {}

    @property
    def engine(self) -> ThreadCpuEngine:
        return self._engine

    def __call__(self) -> ProcessSnapshot:
        return self.collect()

    def collect(self) -> ProcessSnapshot:
        """Enumerate every (pid, tid) and compute per-thread CPU share."""
        try:
            entries = os.listdir(self._root)
        except OSError as e:
            raise CollectError(f"cannot list {self._root}: {e}") from e

        records: list[ProcessRecord] = []
        for entry in entries:
            if not entry.isdigit():
                continue
            pid = int(entry)
            task_dir = self._root / entry / "task"
            try:
                tids = os.listdir(task_dir)
            except OSError:
                continue  # Process exited
            for tid_entry in tids:
                if not tid_entry.isdigit():
                    continue
                record = self._read_thread(pid, int(tid_entry), task_dir / tid_entry)
                if record is not None:
                    records.append(record)

        now = self._clock()
        with_cpu = tuple(self._with_cpu(record, now) for record in records)
        dropped = self._engine.retain(record.tid for record in with_cpu)
        if dropped:
            log.debug("thread_history_pruned", dropped=dropped, tracked=len(self._engine))
        return ProcessSnapshot(records=with_cpu)

    def _with_cpu(self, record: ProcessRecord, now: float) -> ProcessRecord:
        percent = self._engine.observe(record.tid, record.cpu_ticks, now)
        if percent is None:
            return replace(record, cpu_percent=0.0, cpu_sampled=False)
        return replace(record, cpu_percent=percent, cpu_sampled=True)

    def _read_thread(self, pid: int, tid: int, path: Path) -> ProcessRecord | None:
        try:
            status = parse_task_status((path / "status").read_text(errors="replace"))
            command = parse_cmdline((path / "cmdline").read_bytes())
            uid = path.stat().st_uid
            stat = parse_task_stat((path / "stat").read_text(errors="replace"))
        except OSError as e:
            log.debug("thread_skipped", pid=pid, tid=tid, error=str(e))
            return None

        return ProcessRecord(
            pid=pid,
            tid=tid,
            parent_pid=stat.parent_pid,
            name=status.name,
            umask=status.umask,
            state=stat.state,
            nice=stat.nice,
            thread_count=stat.thread_count,
            resident_memory_kb=status.resident_memory_kb,
            swapped_memory_kb=status.swapped_memory_kb,
            command=command,
            user=self._user_name(uid),
            cpu_ticks=stat.cpu_ticks,
        )

    def _user_name(self, uid: int) -> str:
        name = self._user_cache.get(uid)
        if name is None:
            name = self._user_lookup(uid)
            self._user_cache[uid] = name
        return name
