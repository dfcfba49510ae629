"""Control actions against live processes.

Both actions are fire-and-forget: failures such as missing privileges are
logged and swallowed. The next enumeration cycle shows whether the action
took effect.
"""

import psutil

from proctop.logging import get_logger

log = get_logger(__name__)

NICE_MIN = -20
NICE_MAX = 19


def kill_thread(tid: int) -> None:
    """Send SIGKILL, which terminates the thread's whole process."""
    log.info("kill_requested", tid=tid)
    try:
        psutil.Process(tid).kill()
    except (psutil.Error, OSError) as e:
        log.warning("kill_failed", tid=tid, error=str(e))


def renice_thread(tid: int, value: int) -> None:
    """Set the niceness of a thread. Values outside [-20, 19] are ignored."""
    if not NICE_MIN <= value <= NICE_MAX:
        log.debug("renice_out_of_range", tid=tid, value=value)
        return
    log.info("renice_requested", tid=tid, value=value)
    try:
        psutil.Process(tid).nice(value)
    except (psutil.Error, OSError) as e:
        log.warning("renice_failed", tid=tid, value=value, error=str(e))
