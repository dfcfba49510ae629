"""Process table controller: sorting, filtering, selection and commands.

The controller is independent of the terminal toolkit. It consumes
ProcessSnapshots, keys in the names produced by ``proctop.input`` and
calls the kill/renice actions it was given.

Sorting uses Python's stable sort with no secondary key: rows with equal
keys keep enumeration order, which may differ from one snapshot to the
next, so their relative order is unspecified.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from proctop.actions import NICE_MAX, NICE_MIN, kill_thread, renice_thread
from proctop.input import BACKSPACE, ENTER, ESCAPE
from proctop.models import ProcessRecord, ProcessSnapshot

NICENESS_INPUT_LIMIT = 3  # Enough for '-20'


class Column(Enum):
    """Process table columns, in display order."""

    TID = ("TID", "tid", True)
    PPID = ("PPID", "parent_pid", True)
    PID = ("PID", "pid", True)
    USER = ("USER", "user", False)
    UMASK = ("UMASK", "umask", False)
    THREADS = ("THR", "thread_count", True)
    NAME = ("NAME", "name", False)
    STATE = ("S", "state", False)
    NICE = ("NI", "nice", True)
    CPU = ("CPU%", "cpu_percent", True)
    RES = ("RES", "resident_memory_kb", True)
    SWAP = ("SWAP", "swapped_memory_kb", True)
    COMMAND = ("CMD", "command", False)

    def __init__(self, label: str, attr: str, numeric: bool) -> None:
        self.label = label
        self.attr = attr
        self.numeric = numeric

    def value_of(self, record: ProcessRecord):
        return getattr(record, self.attr)


COLUMNS = list(Column)


class TableMode(Enum):
    """Input states of the process table."""

    BROWSING = "browsing"
    POPUP_NICENESS = "niceness"
    POPUP_FILTER = "filter"


@dataclass(slots=True, frozen=True)
class ActiveFilter:
    """
    Display-time predicate on one column.

    Numeric columns match on integer equality (CPU% compares its integer
    part); string columns match on substring containment.
    """

    column: Column
    value: int | str

    @classmethod
    def parse(cls, column: Column, text: str) -> "ActiveFilter":
        """Build a filter from popup input; unparsable numbers become 0."""
        if column.numeric:
            try:
                return cls(column, int(text.strip()))
            except ValueError:
                return cls(column, 0)
        return cls(column, text)

    def matches(self, record: ProcessRecord) -> bool:
        field = self.column.value_of(record)
        if self.column.numeric:
            return int(field) == self.value
        return str(self.value) in field


def parse_niceness(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


class ProcessTable:
    """
    State machine behind the process widget.

    Browsing keys: up/down move the selection, left/right move the focused
    column, 's' sorts by the focused column (toggling direction when it is
    already the sort column), 'f' opens the filter popup for the focused
    column, 'r' removes the filter, 'n' opens the niceness popup and 'k'
    kills the selected thread.

    Popup keys: printable characters append to the input buffer, backspace
    deletes, escape or 'c' cancels, enter submits.
    """

    def __init__(
        self,
        kill: Callable[[int], None] = kill_thread,
        renice: Callable[[int, int], None] = renice_thread,
    ) -> None:
        self._kill = kill
        self._renice = renice
        self._snapshot = ProcessSnapshot()
        self._sorted: list[ProcessRecord] = []
        self._rows: list[ProcessRecord] = []
        self.revision = 0  # Bumped whenever the displayed rows are recomputed
        self.mode = TableMode.BROWSING
        self.selected = 0
        self.focused_column = Column.CPU
        self.sort_column = Column.CPU
        self.sort_descending = True
        self.filter: ActiveFilter | None = None
        self.input_buffer = ""
        self.filter_target = Column.CPU

    @property
    def snapshot(self) -> ProcessSnapshot:
        return self._snapshot

    @property
    def popup_open(self) -> bool:
        return self.mode is not TableMode.BROWSING

    def rows(self) -> list[ProcessRecord]:
        """Sorted records passing the active filter, as displayed."""
        return self._rows

    def excluded(self) -> list[ProcessRecord]:
        """Sorted records hidden by the active filter."""
        if self.filter is None:
            return []
        return [record for record in self._sorted if not self.filter.matches(record)]

    def selected_record(self) -> ProcessRecord | None:
        if not self._rows:
            return None
        return self._rows[self.selected]

    def update(self, snapshot: ProcessSnapshot) -> None:
        """Replace the displayed snapshot with a new one."""
        self._snapshot = snapshot
        self._resort()

    def _resort(self) -> None:
        column = self.sort_column
        self._sorted = sorted(
            self._snapshot.records,
            key=column.value_of,
            reverse=self.sort_descending,
        )
        self._refilter()

    def _refilter(self) -> None:
        if self.filter is None:
            self._rows = self._sorted
        else:
            self._rows = [record for record in self._sorted if self.filter.matches(record)]
        self.revision += 1
        self._clamp_selection()

    def _clamp_selection(self) -> None:
        if not self._rows:
            self.selected = 0
        else:
            self.selected = min(max(self.selected, 0), len(self._rows) - 1)

    def set_filter(self, active: ActiveFilter | None) -> None:
        self.filter = active
        self._refilter()

    def sort_by(self, column: Column) -> None:
        if column is self.sort_column:
            self.sort_descending = not self.sort_descending
        self.sort_column = column
        self._resort()

    def handle_key(self, key: str) -> bool:
        """Apply one key. Returns True if the key was consumed."""
        if self.mode is TableMode.BROWSING:
            return self._handle_browsing(key)
        return self._handle_popup(key)

    def _handle_browsing(self, key: str) -> bool:
        if key == "down":
            if self.selected < len(self._rows) - 1:
                self.selected += 1
        elif key == "up":
            if self.selected > 0:
                self.selected -= 1
        elif key == "right":
            index = COLUMNS.index(self.focused_column)
            self.focused_column = COLUMNS[min(index + 1, len(COLUMNS) - 1)]
        elif key == "left":
            index = COLUMNS.index(self.focused_column)
            self.focused_column = COLUMNS[max(index - 1, 0)]
        elif key == "s":
            self.sort_by(self.focused_column)
        elif key == "f":
            self.input_buffer = ""
            self.filter_target = self.focused_column
            self.mode = TableMode.POPUP_FILTER
        elif key == "r":
            self.set_filter(None)
        elif key == "n":
            self.input_buffer = ""
            self.mode = TableMode.POPUP_NICENESS
        elif key == "k":
            record = self.selected_record()
            if record is not None:
                self._kill(record.tid)
        else:
            return False
        return True

    def _handle_popup(self, key: str) -> bool:
        if key == BACKSPACE:
            self.input_buffer = self.input_buffer[:-1]
        elif key == ESCAPE or key == "c":
            self._close_popup()
        elif key == ENTER or key == "\n":
            self._submit()
        elif len(key) == 1:
            full = len(self.input_buffer) >= NICENESS_INPUT_LIMIT
            if self.mode is TableMode.POPUP_NICENESS and full:
                return True
            self.input_buffer += key
        else:
            return False
        return True

    def _submit(self) -> None:
        if self.mode is TableMode.POPUP_NICENESS:
            value = parse_niceness(self.input_buffer)
            record = self.selected_record()
            if record is not None and NICE_MIN <= value <= NICE_MAX:
                self._renice(record.tid, value)
        elif self.mode is TableMode.POPUP_FILTER:
            self.set_filter(ActiveFilter.parse(self.filter_target, self.input_buffer))
        self._close_popup()

    def _close_popup(self) -> None:
        self.input_buffer = ""
        self.mode = TableMode.BROWSING
