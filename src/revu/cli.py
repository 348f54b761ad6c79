"""CLI entrypoint for revu."""

from __future__ import annotations

import json
from pathlib import Path

import click
from pydantic import ValidationError

from revu.app import RevuApp
from revu.config.store import SettingsStore
from revu.diff.folding import default_fold_state, unfold_all
from revu.diff.side_by_side import build_side_by_side_rows
from revu.diff.unified import build_unified_rows
from revu.paths import settings_path
from revu.sources.bundle import ReviewDocument, load_review
from revu.sources.patch import PatchParseError
from revu.ui.diff import rows_as_plain_text
from revu.version import __version__


def _load(path: str) -> ReviewDocument:
    file_path = Path(path).expanduser().resolve()
    if not file_path.exists():
        raise click.ClickException(f"File not found: {file_path}")
    try:
        return load_review(file_path)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"Invalid JSON in {file_path}: {exc}")
    except ValidationError as exc:
        raise click.ClickException(f"Invalid review bundle {file_path}:\n{exc}")
    except PatchParseError as exc:
        raise click.ClickException(f"Invalid patch {file_path}: {exc}")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
def main() -> None:
    """revu: review pull-request diffs in the terminal."""


@main.command()
@click.argument("path")
@click.option("--split", "layout", flag_value="split", help="Force the side-by-side layout")
@click.option("--unified", "layout", flag_value="unified", help="Force the unified layout")
@click.option("--blame/--no-blame", "show_blame", default=None, help="Show the blame gutter")
@click.option("--log-level", default=None, help="Runtime log level (off, error, warning, info, debug)")
def view(path: str, layout: str | None, show_blame: bool | None, log_level: str | None) -> None:
    """Open a patch file or JSON review bundle."""
    document = _load(path)
    app = RevuApp(
        document=document,
        layout=layout,  # type: ignore[arg-type]
        show_blame=show_blame,
        log_level=log_level,
    )
    app.run()


@main.command()
@click.argument("path")
@click.option(
    "--layout",
    type=click.Choice(["unified", "split"]),
    default="unified",
    show_default=True,
)
@click.option("--expand", is_flag=True, help="Show every line, ignoring folds")
@click.option("--width", type=int, default=120, show_default=True)
def rows(path: str, layout: str, expand: bool, width: int) -> None:
    """Print the display rows of a diff without starting the UI."""
    document = _load(path)
    policy = SettingsStore().load().diff.fold_policy()
    fold_state = default_fold_state(document.hunks, policy)
    if expand:
        fold_state = unfold_all(fold_state)
    builder = build_side_by_side_rows if layout == "split" else build_unified_rows
    built = builder(document.hunks, document.threads, fold_state, policy=policy)
    for line in rows_as_plain_text(built, width=width):
        click.echo(line)


@main.command("settings-path")
def settings_path_command() -> None:
    """Print settings file path."""
    click.echo(str(settings_path()))


@main.command("settings")
def settings_command() -> None:
    """List every setting as dotted key and value."""
    for key, value in SettingsStore().load().setting_items():
        click.echo(f"{key} = {value}")


@main.command("set")
@click.argument("key")
@click.argument("value")
def set_command(key: str, value: str) -> None:
    """Change one setting, e.g. `revu set diff.mode split`."""
    try:
        SettingsStore().update(key, value)
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0]))
    except ValidationError as exc:
        raise click.ClickException(f"Invalid value for {key}:\n{exc}")
    click.echo(f"{key} = {value}")


@main.command()
def about() -> None:
    """Show version and project summary."""
    payload = {
        "name": "revu",
        "version": __version__,
        "description": "Terminal code-review client with a virtualized diff engine",
    }
    click.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
