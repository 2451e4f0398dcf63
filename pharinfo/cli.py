from __future__ import annotations

import logging
from importlib import metadata
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.logging import RichHandler
from yaml import YAMLError

from pharinfo.archive import ArchiveOpenError, open_archive
from pharinfo.config import AppConfig, ListMode, config_to_snapshot, load_config
from pharinfo.reporters.console import LinePrinter, make_console
from pharinfo.reporters.summary import render_short_summary, render_version
from pharinfo.reporters.tree import render_content

app = typer.Typer(add_completion=False)

logger = logging.getLogger("pharinfo")


def version_callback(value: bool):
    if value:
        try:
            v = metadata.version("pharinfo")
        except metadata.PackageNotFoundError:
            v = "0.1.0-dev"
        typer.echo(f"pharinfo version: {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
):
    """
    Report on the contents of a PHAR-style archive bundle.
    """
    pass


def setup_logging(level: str) -> None:
    handler = RichHandler(console=make_console(stderr=True), show_path=False)
    logging.basicConfig(level=level.upper(), format="%(message)s", handlers=[handler], force=True)


def _load_config_or_fail(config: Optional[str]) -> AppConfig:
    try:
        return load_config(config)
    except (OSError, YAMLError, ValidationError) as e:
        raise typer.BadParameter(f"Invalid config {config}: {e}")


@app.command()
def info(
    archive: str = typer.Argument(..., help="Archive (ZIP) or archive snapshot (JSON/YAML) to report on."),
    config: str = typer.Option(None, "--config", help="Path to YAML config."),
    list_files: bool = typer.Option(False, "--list", "-l", help="List the archive files."),
    mode: Optional[ListMode] = typer.Option(None, "--mode", help="File listing mode."),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", help="Maximum directory depth to list, -1 for no limit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
):
    cfg = _load_config_or_fail(config)
    if list_files:
        cfg.list_files = True
    if mode is not None:
        cfg.mode = mode
    if depth is not None:
        if depth < -1:
            raise typer.BadParameter("Depth must be -1 or a positive integer.")
        cfg.max_depth = None if depth == -1 else depth

    setup_logging("DEBUG" if verbose else cfg.log_level)
    logger.debug("Config: %s", config_to_snapshot(cfg))

    path = Path(archive).expanduser().resolve()
    if not path.exists():
        raise typer.BadParameter(f"Path does not exist: {path}")

    try:
        archive_info = open_archive(path, cfg)
    except ArchiveOpenError as e:
        typer.secho(f"Error reading {path.name}: {e.message}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)

    printer = LinePrinter(make_console())
    separator = printer.line if cfg.separator else None

    render_version(archive_info, printer)
    printer.line()
    render_short_summary(archive_info, printer, separator, requirements_path=cfg.requirements_path)

    if cfg.list_files:
        printer.line()
        render_content(printer, archive_info, cfg.max_depth, cfg.mode is ListMode.INDENT)


if __name__ == "__main__":
    app()
