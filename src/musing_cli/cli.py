"""Command line entry point.

Commands:
    monitor   Live dashboard (full screen, refreshes every 3 seconds).
    status    One-shot health report, printed and exited.

Exit codes:
    0   Normal exit.
    1   Startup failure (no terminal, Docker not running, bad config).
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console

from . import __version__
from .config import ProjectConfig, discover_config
from .dashboard import run_monitor
from .engine import ensure_running
from .errors import MusingError, StartupError
from .health import format_latency
from .processes import find_listener
from .registry import Category, registry_from_config
from .render import render_sections
from .snapshot import HealthSnapshot, build_snapshot

LOG_DIR = Path.home() / ".config" / "musing"
LOG_PATH = LOG_DIR / "musing.log"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

logger = logging.getLogger(__name__)


def _setup_logging(level: str, path: Path | None = None) -> None:
    """Log to a file only; the dashboard owns the terminal."""
    path = path or LOG_PATH
    handlers: list[logging.Handler] = []
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path))
    except OSError:
        handlers.append(logging.NullHandler())
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def _has_terminal() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def _load(ctx: click.Context) -> ProjectConfig:
    try:
        return discover_config(ctx.obj["config_path"])
    except MusingError as exc:
        raise click.ClickException(str(exc)) from exc


def _snapshot_as_dicts(snapshot: HealthSnapshot) -> list[dict]:
    return [
        {
            "name": r.target.name,
            "port": r.target.port,
            "category": r.target.category.value,
            "status": r.status,
            "latency": format_latency(r.latency_ms) if r.reachable else None,
        }
        for r in snapshot
    ]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="musing")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    metavar="PATH",
    help="Path to a .musing.yaml file. Defaults to the project named in ~/.musingrc.",
)
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    metavar="LEVEL",
    help=f"Log level for {LOG_PATH}.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str) -> None:
    """Development tooling for the musing stack."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    _setup_logging(log_level)


@cli.command()
@click.pass_context
def monitor(ctx: click.Context) -> None:
    """Live monitoring dashboard for the development stack."""
    config = _load(ctx)
    try:
        if not _has_terminal():
            raise StartupError("monitor needs an interactive terminal")
        ensure_running()
    except StartupError as exc:
        logger.error("monitor not started: %s", exc)
        raise click.ClickException(str(exc)) from exc
    run_monitor(registry_from_config(config))


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Print machine-readable JSON instead of sections.")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Check every service once and print the result."""
    config = _load(ctx)
    snapshot = build_snapshot(registry_from_config(config))

    if as_json:
        click.echo(json.dumps(_snapshot_as_dicts(snapshot), indent=2))
        return

    console = Console()
    console.print(render_sections(snapshot), end="")
    for r in snapshot:
        if r.target.category is Category.TUNNEL and r.reachable:
            owner = find_listener(r.target.port)
            if owner is not None:
                console.print(f"[dim]  tunnel on :{r.target.port} held by {owner.name} (pid {owner.pid})[/dim]")
    console.print(f"[dim]Checked at {snapshot.started_at:%H:%M:%S}. Use 'musing monitor' for live updates.[/dim]")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
