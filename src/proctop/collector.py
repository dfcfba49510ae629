"""Periodic collectors publishing snapshots into single-slot mailboxes."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from proctop.config import MIN_INTERVAL, Config
from proctop.logging import get_logger
from proctop.mailbox import Mailbox

T = TypeVar("T")

log = get_logger(__name__)


class CollectError(Exception):
    """A collection cycle could not produce a snapshot."""


class SnapshotCollector(Generic[T]):
    """
    Collector that repeatedly samples one subsystem.

    Runs in a separate daemon thread. Every cycle calls the sampling
    function and publishes the result into the mailbox, replacing any value
    the consumer has not taken yet. A failed cycle leaves the mailbox
    untouched; the consumer keeps showing its previous snapshot.

    The sampling function and any history it keeps are touched only by the
    collector thread.
    """

    def __init__(
        self,
        name: str,
        sample: Callable[[], T],
        interval: float,
        mailbox: Mailbox[T] | None = None,
    ) -> None:
        """
        Initialize the SnapshotCollector.

        Args:
            name: Subsystem name, used for the thread name and log events.
            sample: Returns one snapshot or raises CollectError.
            interval: How often to sample (in seconds).
            mailbox: Where snapshots are published. Created if omitted.
        """
        self._name = name
        self._sample = sample
        self._interval = max(MIN_INTERVAL, interval)
        self._mailbox: Mailbox[T] = mailbox if mailbox is not None else Mailbox()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._cycles = 0
        self._failures = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def mailbox(self) -> Mailbox[T]:
        return self._mailbox

    @property
    def interval(self) -> float:
        """Get the current sampling interval."""
        return self._interval

    @interval.setter
    def interval(self, value: float) -> None:
        """Set the sampling interval."""
        self._interval = max(MIN_INTERVAL, value)

    @property
    def failures(self) -> int:
        """Number of cycles that did not publish."""
        return self._failures

    @property
    def is_running(self) -> bool:
        """Check if the collector thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the collector thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name=f"collector-{self._name}",
        )
        self._thread.start()
        log.info("collector_started", collector=self._name, interval=self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the collector thread.

        Args:
            timeout: How long to wait for the thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
            log.info("collector_stopped", collector=self._name, cycles=self._cycles)

    def collect_once(self) -> bool:
        """Run a single cycle. Returns True if a snapshot was published."""
        self._cycles += 1
        try:
            snapshot = self._sample()
        except CollectError as e:
            self._failures += 1
            log.debug("collect_failed", collector=self._name, error=str(e))
            return False
        except Exception:
            self._failures += 1
            log.exception("collect_crashed", collector=self._name)
            return False

        self._mailbox.publish(snapshot)
        return True

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            self.collect_once()
            # Wait for the interval or until stop is requested
            self._stop_event.wait(timeout=self._interval)


@dataclass
class Collectors:
    """The five subsystem collectors of the dashboard."""

    cpu: SnapshotCollector[Any]
    memory: SnapshotCollector[Any]
    disk: SnapshotCollector[Any]
    network: SnapshotCollector[Any]
    processes: SnapshotCollector[Any]

    def __iter__(self):
        return iter((self.cpu, self.memory, self.disk, self.network, self.processes))

    def start(self) -> None:
        for collector in self:
            collector.start()

    def stop(self, timeout: float | None = 1.0) -> None:
        for collector in self:
            collector.stop(timeout=timeout)


def build_collectors(config: Config) -> Collectors:
    """Create one collector per subsystem, not yet started."""
    from proctop.process_tree import ProcessTreeEnumerator
    from proctop.samplers import CpuSampler, DiskSampler, MemorySampler, NetworkSampler

    intervals = config.intervals
    root = config.proc_root
    return Collectors(
        cpu=SnapshotCollector("cpu", CpuSampler(root), intervals.cpu),
        memory=SnapshotCollector("memory", MemorySampler(root), intervals.memory),
        disk=SnapshotCollector("disk", DiskSampler(), intervals.disk),
        network=SnapshotCollector("network", NetworkSampler(root), intervals.network),
        processes=SnapshotCollector(
            "processes", ProcessTreeEnumerator(root), intervals.processes
        ),
    )
