"""Configuration system for proctop."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path

import tomlkit

MIN_INTERVAL = 0.05  # Seconds; floor for every polling interval


def _xdg_dir(env_var: str, fallback: str) -> Path:
    value = os.environ.get(env_var)
    return Path(value) if value else Path.home() / fallback


@dataclass
class IntervalsConfig:
    """Polling intervals in seconds, one per collector plus the UI frame."""

    cpu: float = 0.5
    memory: float = 0.1
    disk: float = 0.1
    network: float = 0.1
    processes: float = 2.5  # Enumerating every thread is the most expensive
    frame: float = 0.1

    def __post_init__(self) -> None:
        for f in fields(self):
            setattr(self, f.name, max(MIN_INTERVAL, float(getattr(self, f.name))))


@dataclass
class UIConfig:
    """Dashboard behaviour."""

    key_throttle: float = 0.15  # At most one key event per window
    history_length: int = 300  # Points kept per chart line
    show_all_cores: bool = True


@dataclass
class LoggingConfig:
    """Log file configuration."""

    level: str = "info"
    log_file: str = ""  # Empty means the default state directory
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 3

    @property
    def log_path(self) -> Path:
        if self.log_file:
            return Path(self.log_file).expanduser()
        return _xdg_dir("XDG_STATE_HOME", ".local/state") / "proctop" / "proctop.log"


def _dataclass_to_table(obj: object) -> tomlkit.items.Table:
    """Convert a dataclass instance to a tomlkit Table."""
    table = tomlkit.table()
    for f in fields(obj):  # type: ignore[arg-type]
        table.add(f.name, getattr(obj, f.name))
    return table


def _load_section(cls: type, data: object) -> object:
    """Build a section dataclass from TOML data, ignoring unknown keys."""
    if not isinstance(data, Mapping):
        return cls()
    known = {f.name for f in fields(cls)}
    values = {key: _unwrap(value) for key, value in data.items() if key in known}
    return cls(**values)


def _unwrap(value: object) -> object:
    return value.unwrap() if hasattr(value, "unwrap") else value


@dataclass
class Config:
    """Main configuration container."""

    proc_root: str = "/proc"
    intervals: IntervalsConfig = field(default_factory=IntervalsConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def default_path() -> Path:
        return _xdg_dir("XDG_CONFIG_HOME", ".config") / "proctop" / "config.toml"

    def save(self, path: Path | None = None) -> None:
        """Save config to a TOML file."""
        path = path or self.default_path()
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        doc.add("proc_root", self.proc_root)
        doc.add(tomlkit.nl())
        for f in fields(self):
            value = getattr(self, f.name)
            if is_dataclass(value):
                doc.add(f.name, _dataclass_to_table(value))
                doc.add(tomlkit.nl())

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load config from a TOML file, returning defaults for missing values."""
        path = path or cls.default_path()
        if not path.exists():
            return cls()

        try:
            with open(path) as f:
                data = tomlkit.load(f)
        except tomlkit.exceptions.TOMLKitError as e:
            raise ValueError(f"Failed to parse config file {path}: {e}") from e

        return cls(
            proc_root=str(data.get("proc_root", "/proc")),
            intervals=_load_section(IntervalsConfig, data.get("intervals")),
            ui=_load_section(UIConfig, data.get("ui")),
            logging=_load_section(LoggingConfig, data.get("logging")),
        )
