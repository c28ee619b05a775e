"""CLI entrypoint — cstatus render, cstatus widgets, cstatus configure, cstatus install."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from cstatus.config import load_config, save_config_value
from cstatus.status import StatusInputError, build_context, parse_status_input
from cstatus.widgets import WIDGETS, build_statusline

SETTINGS_PATH = Path("~/.claude/settings.json")
STATUSLINE_COMMAND = "cstatus render"


def _split_widgets(value: str) -> list[str]:
    return [name.strip() for name in value.split(",") if name.strip()]


@click.group()
@click.option("--verbose", is_flag=True, help="Log diagnostics to stderr.")
def cli(verbose: bool):
    """cstatus — powerline statusline for Claude Code."""
    # Logs always go to stderr; stdout is the statusline itself
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
    )


@cli.command()
@click.option("--widgets", default=None, help="Comma-separated widget order, e.g. project,git,context.")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: ~/.config/cstatus/config.yaml).",
)
def render(widgets: str | None, config_path: Path | None):
    """Read the session JSON from stdin and print the statusline."""
    config = load_config(config_path)
    raw = sys.stdin.read()

    try:
        status = parse_status_input(raw)
    except StatusInputError as exc:
        click.echo(f"Error creating status context: {exc}", err=True)
        raise SystemExit(1)

    widget_names = _split_widgets(widgets) if widgets else config.widgets
    context = build_context(status, config)
    click.echo(build_statusline(context, widget_names), nl=False)


@cli.command(name="widgets")
def list_widgets():
    """List the available widgets."""
    for name in WIDGETS:
        click.echo(name)


@cli.command()
@click.option("--widgets", default=None, help="Comma-separated widget order to save.")
@click.option("--context-window", default=None, type=int, help="Context window size in tokens.")
def configure(widgets: str | None, context_window: int | None):
    """Save statusline settings to the config file."""
    if widgets is None and context_window is None:
        click.echo("Nothing to configure. Pass --widgets or --context-window.")
        return

    if widgets is not None:
        names = _split_widgets(widgets)
        unknown = [name for name in names if name not in WIDGETS]
        if unknown:
            click.echo(f"Unknown widgets: {', '.join(unknown)}", err=True)
            raise SystemExit(1)
        save_config_value("widgets", names)
        click.echo(f"Widgets set to: {', '.join(names)}")

    if context_window is not None:
        if context_window <= 0:
            click.echo("Context window must be positive.", err=True)
            raise SystemExit(1)
        save_config_value("context_window", context_window)
        click.echo(f"Context window set to {context_window} tokens.")


@cli.command()
@click.option(
    "--settings",
    "settings_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Claude Code settings file (default: ~/.claude/settings.json).",
)
def install(settings_path: Path | None):
    """Point Claude Code's statusLine setting at cstatus."""
    settings_path = (settings_path or SETTINGS_PATH).expanduser()

    settings: dict = {}
    if settings_path.is_file():
        try:
            loaded = json.loads(settings_path.read_text() or "{}")
        except json.JSONDecodeError as exc:
            click.echo(f"Refusing to overwrite invalid JSON in {settings_path}: {exc}", err=True)
            raise SystemExit(1)
        if not isinstance(loaded, dict):
            click.echo(f"Refusing to overwrite {settings_path}: not a JSON object", err=True)
            raise SystemExit(1)
        settings = loaded

    settings["statusLine"] = {"type": "command", "command": STATUSLINE_COMMAND}
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(json.dumps(settings, indent=2) + "\n")

    click.echo(f"Installed statusline in {settings_path}")
