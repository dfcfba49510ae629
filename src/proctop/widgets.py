"""Dashboard widgets, one per collector.

Every panel follows the same contract: ``poll()`` takes the latest snapshot
from its mailbox without blocking (keeping the previous one on a miss),
``refresh_display()`` redraws from the current state and ``handle_input()``
consumes keys while the panel has focus.
"""

from collections import deque
from typing import Any, Protocol

from rich.markup import escape
from rich.text import Text
from textual import events
from textual.app import ComposeResult
from textual.widget import Widget
from textual.widgets import DataTable, Static

from proctop.formatting import format_kb, format_rate, gauge, sparkline, to_humanreadable
from proctop.input import normalize_key
from proctop.mailbox import Mailbox
from proctop.models import (
    CpuSnapshot,
    DiskSnapshot,
    MemorySample,
    NetworkSnapshot,
    ProcessRecord,
    ProcessSnapshot,
)
from proctop.table import COLUMNS, Column, ProcessTable, TableMode

SPARK_WIDTH = 40


class DashboardPanel(Protocol):
    """Capability shared by every widget of the dashboard."""

    def poll(self) -> bool: ...

    def refresh_display(self) -> None: ...

    def handle_input(self, key: str) -> bool: ...


class KeyRouting:
    """Mixin routing focused key events through the app-wide throttle."""

    def handle_input(self, key: str) -> bool:
        return False

    def on_key(self, event: events.Key) -> None:
        throttle = getattr(self.app, "key_throttle", None)  # type: ignore[attr-defined]
        if throttle is not None and not throttle.allow():
            event.stop()
            event.prevent_default()
            return
        if self.handle_input(normalize_key(event.key, event.character)):
            event.stop()
            event.prevent_default()
            self.refresh_display()  # type: ignore[attr-defined]


class Panel(KeyRouting, Static, can_focus=True):
    """Text panel fed from a mailbox."""

    DEFAULT_CSS = """
    Panel {
        height: 1fr;
        padding: 0 1;
        border: round $primary-darken-2;
    }
    Panel:focus {
        border: heavy $accent;
    }
    """

    PANEL_TITLE = ""

    def __init__(self, mailbox: Mailbox[Any], *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._mailbox = mailbox
        self.border_title = self.PANEL_TITLE

    def on_mount(self) -> None:
        self.refresh_display()

    def poll(self) -> bool:
        """Take the latest snapshot if one is waiting."""
        snapshot = self._mailbox.take()
        if snapshot is None:
            return False
        self.apply_snapshot(snapshot)
        self.refresh_display()
        return True

    def apply_snapshot(self, snapshot: Any) -> None:
        raise NotImplementedError

    def refresh_display(self) -> None:
        self.update(self.render_text())

    def render_text(self) -> str:
        raise NotImplementedError


class CpuPanel(Panel):
    """Aggregate and per-core utilization with a rolling history."""

    PANEL_TITLE = "CPU"

    def __init__(
        self,
        mailbox: Mailbox[CpuSnapshot],
        history_length: int = 300,
        show_all_cores: bool = True,
        *args,
        **kwargs,
    ) -> None:
        super().__init__(mailbox, *args, **kwargs)
        self._history_length = history_length
        self.show_all_cores = show_all_cores
        self._history: dict[str, deque[float]] = {}

    def history(self, name: str) -> list[float]:
        return list(self._history.get(name, ()))

    def apply_snapshot(self, snapshot: CpuSnapshot) -> None:
        for utilization in snapshot:
            values = self._history.get(utilization.name)
            if values is None:
                values = self._history[utilization.name] = deque(maxlen=self._history_length)
            values.append(utilization.percent)

    def handle_input(self, key: str) -> bool:
        if key == " ":
            self.show_all_cores = not self.show_all_cores
            return True
        return False

    def _line(self, name: str) -> str:
        values = self.history(name)
        current = values[-1] if values else 0.0
        spark = sparkline(values, SPARK_WIDTH, maximum=100.0)
        return f"{name:<6} \\[{gauge(current)}] {current:5.1f}% [green]{spark}[/green]"

    def render_text(self) -> str:
        if "cpu" not in self._history:
            return "Loading CPU info..."
        lines = [self._line("cpu")]
        if self.show_all_cores:
            cores = sorted(
                (name for name in self._history if name != "cpu"),
                key=lambda name: int(name[3:]) if name[3:].isdigit() else 0,
            )
            lines.extend(self._line(name) for name in cores)
        return "\n".join(lines)


class MemoryPanel(Panel):
    """RAM and swap gauges."""

    PANEL_TITLE = "Memory"

    def __init__(self, mailbox: Mailbox[MemorySample], *args, **kwargs) -> None:
        super().__init__(mailbox, *args, **kwargs)
        self.sample: MemorySample | None = None

    def apply_snapshot(self, snapshot: MemorySample) -> None:
        self.sample = snapshot

    def render_text(self) -> str:
        sample = self.sample
        if sample is None or sample.mem_total == 0:
            return "Loading memory info..."
        return (
            f"Mem \\[{gauge(sample.mem_percent, color='cyan')}] "
            f"{format_kb(sample.mem_used)}/{format_kb(sample.mem_total)}\n"
            f"Swp \\[{gauge(sample.swap_percent, color='yellow')}] "
            f"{format_kb(sample.swap_used)}/{format_kb(sample.swap_total)}\n"
            f"Free {format_kb(sample.mem_free)}  "
            f"Available {format_kb(sample.mem_available)}  "
            f"Swap cached {format_kb(sample.swap_cached)}"
        )


class DiskPanel(Panel):
    """Usage of every device-backed mount."""

    PANEL_TITLE = "Disks"

    def __init__(self, mailbox: Mailbox[DiskSnapshot], *args, **kwargs) -> None:
        super().__init__(mailbox, *args, **kwargs)
        self.disks: DiskSnapshot = ()

    def apply_snapshot(self, snapshot: DiskSnapshot) -> None:
        self.disks = snapshot

    def render_text(self) -> str:
        if not self.disks:
            return "Loading disk info..."
        lines = [f"{'Device':<14}{'Size':>10}{'Used':>10}{'Avail':>10}{'Use%':>6}  Mount"]
        for disk in self.disks:
            lines.append(
                f"{escape(disk.filesystem):<14}"
                f"{format_kb(disk.total):>10}"
                f"{format_kb(disk.used):>10}"
                f"{format_kb(disk.available):>10}"
                f"{disk.used_percentage:>6}  {escape(disk.mountpoint)}"
            )
        return "\n".join(lines)


class NetworkPanel(Panel):
    """Throughput of the busiest interface."""

    PANEL_TITLE = "Network"

    def __init__(
        self,
        mailbox: Mailbox[NetworkSnapshot],
        history_length: int = 300,
        *args,
        **kwargs,
    ) -> None:
        super().__init__(mailbox, *args, **kwargs)
        self.snapshot: NetworkSnapshot | None = None
        self.rx_history: deque[float] = deque(maxlen=history_length)
        self.tx_history: deque[float] = deque(maxlen=history_length)

    def apply_snapshot(self, snapshot: NetworkSnapshot) -> None:
        self.snapshot = snapshot
        if snapshot.rate is not None:
            self.rx_history.append(snapshot.rate.rx_bytes_per_sec)
            self.tx_history.append(snapshot.rate.tx_bytes_per_sec)

    def render_text(self) -> str:
        if self.snapshot is None:
            return "Loading network info..."
        sample = self.snapshot.sample
        rate = self.snapshot.rate
        rx_rate = format_rate(rate.rx_bytes_per_sec) if rate else "-"
        tx_rate = format_rate(rate.tx_bytes_per_sec) if rate else "-"
        return (
            f"Interface {escape(sample.interface)}\n"
            f"RX {rx_rate:>14}  total {to_humanreadable(sample.rx_bytes):>10}  "
            f"errs {sample.rx_errs} drop {sample.rx_drop}\n"
            f"   [green]{sparkline(list(self.rx_history), SPARK_WIDTH)}[/green]\n"
            f"TX {tx_rate:>14}  total {to_humanreadable(sample.tx_bytes):>10}  "
            f"errs {sample.tx_errs} drop {sample.tx_drop}\n"
            f"   [magenta]{sparkline(list(self.tx_history), SPARK_WIDTH)}[/magenta]"
        )


class ProcessGrid(DataTable, can_focus=False):
    """Data table that leaves keyboard focus to its panel."""


def format_cell(column: Column, record: ProcessRecord) -> Text:
    """Render one cell as plain text; process names and cmdlines are never markup."""
    if column is Column.CPU:
        if not record.cpu_sampled:
            return Text("-", justify="right")
        return Text(f"{record.cpu_percent:6.2f}%")
    if column is Column.RES:
        return Text(format_kb(record.resident_memory_kb))
    if column is Column.SWAP:
        return Text(format_kb(record.swapped_memory_kb))
    return Text(str(column.value_of(record)))


class ProcessPanel(KeyRouting, Widget, can_focus=True):
    """Thread table driven by a ProcessTable controller.

    The grid's cell cursor marks the selected row and the focused column.
    Rows are only rebuilt when the controller's displayed rows change;
    moving the selection or the focused column just moves the cursor.
    """

    DEFAULT_CSS = """
    ProcessPanel {
        height: 2fr;
        border: round $primary-darken-2;
    }
    ProcessPanel:focus {
        border: heavy $accent;
    }
    ProcessPanel #popup {
        display: none;
        dock: bottom;
        height: 8;
        border: round $warning;
        background: $surface;
        color: $warning;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        mailbox: Mailbox[ProcessSnapshot],
        table: ProcessTable | None = None,
        *args,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._mailbox = mailbox
        self.table = table if table is not None else ProcessTable()
        self.border_title = "Processes"
        self._shown_sort: tuple[Column, bool] | None = None
        self._shown_revision: int | None = None

    def compose(self) -> ComposeResult:
        """Compose the thread table and its input popup."""
        yield ProcessGrid(id="process-table", cursor_type="cell", zebra_stripes=True)
        yield Static(id="popup")

    def on_mount(self) -> None:
        self.refresh_display()

    def poll(self) -> bool:
        snapshot = self._mailbox.take()
        if snapshot is None:
            return False
        self.table.update(snapshot)
        self.refresh_display()
        return True

    def handle_input(self, key: str) -> bool:
        return self.table.handle_key(key)

    def refresh_display(self) -> None:
        """Sync the grid with the controller state."""
        grid = self.query_one("#process-table", ProcessGrid)
        table = self.table

        sort = (table.sort_column, table.sort_descending)
        if sort != self._shown_sort:
            grid.clear(columns=True)
            for column in COLUMNS:
                grid.add_column(self._header(column), key=column.name)
            self._shown_sort = sort
            self._shown_revision = None

        if table.revision != self._shown_revision:
            grid.clear()
            for record in table.rows():
                grid.add_row(
                    *(format_cell(column, record) for column in COLUMNS),
                    key=str(record.tid),
                )
            self._shown_revision = table.revision

        if table.rows():
            grid.move_cursor(
                row=table.selected,
                column=COLUMNS.index(table.focused_column),
            )

        self.border_subtitle = self._subtitle()
        popup = self.query_one("#popup", Static)
        popup.display = table.popup_open
        if table.popup_open:
            popup.update(Text(self._popup_text()))

    def _header(self, column: Column) -> Text:
        label = column.label
        if column is self.table.sort_column:
            label += "▼" if self.table.sort_descending else "▲"
            return Text(label, style="bold")
        return Text(label)

    def _subtitle(self) -> str:
        shown = len(self.table.rows())
        total = len(self.table.snapshot)
        noun = "thread" if total == 1 else "threads"
        active = self.table.filter
        if active is None:
            return f"{total} {noun}"
        return f"{shown}/{total} {noun}, {active.column.label} ~ {escape(str(active.value))}"

    def _popup_text(self) -> str:
        if self.table.mode is TableMode.POPUP_NICENESS:
            title = "Niceness (-20..19)"
        else:
            title = f"Filter {self.table.filter_target.label}"
        return f"{title}\n\n{self.table.input_buffer}_\n\n(C)ancel\nPress Enter to apply"
