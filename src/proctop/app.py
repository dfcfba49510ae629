"""proctop - Main Textual application."""

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer

from proctop.collector import Collectors, build_collectors
from proctop.config import Config
from proctop.input import KeyThrottle
from proctop.logging import get_logger
from proctop.widgets import (
    CpuPanel,
    DashboardPanel,
    DiskPanel,
    MemoryPanel,
    NetworkPanel,
    ProcessPanel,
)

log = get_logger(__name__)


class ProctopApp(App):
    """Main proctop application."""

    TITLE = "proctop"
    SUB_TITLE = "Terminal System Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #top-row, #middle-row {
        height: 1fr;
    }

    #cpu-panel {
        width: 2fr;
    }

    #memory-column {
        width: 1fr;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("tab", "focus_next", "Next widget"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        config: Config | None = None,
        collectors: Collectors | None = None,
    ) -> None:
        """Initialize the ProctopApp."""
        super().__init__()
        self._config = config or Config()
        self._collectors = collectors or build_collectors(self._config)
        self.key_throttle = KeyThrottle(self._config.ui.key_throttle)

    @property
    def collectors(self) -> Collectors:
        return self._collectors

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        ui = self._config.ui
        collectors = self._collectors
        with Horizontal(id="top-row"):
            yield CpuPanel(
                collectors.cpu.mailbox,
                history_length=ui.history_length,
                show_all_cores=ui.show_all_cores,
                id="cpu-panel",
            )
            with Vertical(id="memory-column"):
                yield MemoryPanel(collectors.memory.mailbox, id="memory-panel")
                yield NetworkPanel(
                    collectors.network.mailbox,
                    history_length=ui.history_length,
                    id="network-panel",
                )
        with Horizontal(id="middle-row"):
            yield DiskPanel(collectors.disk.mailbox, id="disk-panel")
        yield ProcessPanel(collectors.processes.mailbox, id="process-panel")
        yield Footer()

    def panels(self) -> list[DashboardPanel]:
        """Every panel, in the order they are refreshed."""
        return [
            self.query_one(CpuPanel),
            self.query_one(MemoryPanel),
            self.query_one(DiskPanel),
            self.query_one(NetworkPanel),
            self.query_one(ProcessPanel),
        ]

    def on_mount(self) -> None:
        """Start the collectors when the app is mounted."""
        self._collectors.start()
        self.query_one(ProcessPanel).focus()
        self.set_interval(self._config.intervals.frame, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain every mailbox without blocking and refresh the panels that changed."""
        for panel in self.panels():
            try:
                panel.poll()
            except Exception:
                # A bad snapshot must not take the dashboard down
                log.exception("panel_update_failed", panel=type(panel).__name__)

    async def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._collectors.stop(timeout=0.5)
        self.exit()
