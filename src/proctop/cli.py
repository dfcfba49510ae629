"""Command line entry point for proctop."""

from pathlib import Path

import click

from proctop.config import Config
from proctop.logging import configure, get_logger


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to a TOML config file.",
)
@click.option("--proc-root", default=None, help="Root of the proc filesystem.")
@click.option("--debug", is_flag=True, help="Write debug events to the log file.")
@click.option("--write-config", is_flag=True, help="Write the effective config and exit.")
@click.version_option(package_name="proctop")
def main(config_path: Path | None, proc_root: str | None, debug: bool, write_config: bool) -> None:
    """Interactive terminal dashboard for CPU, memory, disks, network and threads."""
    try:
        config = Config.load(config_path)
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    if proc_root:
        config.proc_root = proc_root

    if write_config:
        path = config_path or Config.default_path()
        config.save(path)
        click.echo(f"Config written to {path}")
        return

    configure(config, debug=debug)
    get_logger(__name__).info("proctop_starting", proc_root=config.proc_root)

    from proctop.app import ProctopApp

    ProctopApp(config).run()


if __name__ == "__main__":
    main()
