"""
cli.py - Typer-based CLI for aurup.

Finds pending repo, AUR and devel upgrades and asks which ones to skip.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from types import SimpleNamespace
from typing import Annotated, Any, ParamSpec, TypeVar, cast

import typer

from commands import cmd_check, cmd_diff
from config import ConfigError, load_config
from printer import Printer

# ═══════════════════════════════════════════════════════════════════════════════
# Application State
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class AppState:
    """Global application state, initialized in the main callback."""

    printer: Printer | None = None
    verbose: bool = False
    config_path: Path | None = None


state = AppState()

# ═══════════════════════════════════════════════════════════════════════════════
# Typer App
# ═══════════════════════════════════════════════════════════════════════════════

app = typer.Typer(
    name="aurup",
    help="Review pending repo, AUR and devel upgrades",
    add_completion=False,
    rich_markup_mode=None,
    no_args_is_help=True,
)

P = ParamSpec("P")
R = TypeVar("R")


def _typed_command(*args: Any, **kwargs: Any) -> Callable[[Callable[P, R]], Callable[P, R]]:
    return cast(Callable[[Callable[P, R]], Callable[P, R]], app.command(*args, **kwargs))


def _typed_callback(*args: Any, **kwargs: Any) -> Callable[[Callable[P, R]], Callable[P, R]]:
    return cast(Callable[[Callable[P, R]], Callable[P, R]], app.callback(*args, **kwargs))


# ═══════════════════════════════════════════════════════════════════════════════
# Type Aliases for Common Options
# ═══════════════════════════════════════════════════════════════════════════════

OptPlain = Annotated[bool, typer.Option("--plain", help="Plain text output")]
OptVerbose = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging")]
OptConfig = Annotated[Path | None, typer.Option("--config", help="Config file (JSON)")]

OptMode = Annotated[str | None, typer.Option("--mode", help="Sources to check: any, repo or aur")]
OptDevel = Annotated[bool | None, typer.Option("--devel/--no-devel", help="Check VCS packages for new commits")]
OptCombined = Annotated[bool | None, typer.Option("--combined/--no-combined", help="Include repo upgrades")]
OptMenu = Annotated[bool | None, typer.Option("--menu/--no-menu", help="Ask which upgrades to exclude")]
OptSysupgrade = Annotated[int, typer.Option("--sysupgrade", "-u", count=True, help="Pass twice to allow downgrades")]
OptJson = Annotated[bool, typer.Option("--json", help="JSON output")]


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _init_state(plain: bool | None = None, verbose: bool | None = None, config_path: Path | None = None) -> None:
    """Initialize global state (called at start of each command)."""
    use_plain = plain if plain is not None else (state.printer.use_plain if state.printer else False)
    if state.printer is None or state.printer.use_plain != use_plain:
        state.printer = Printer(use_plain=use_plain)
    if verbose is not None:
        state.verbose = verbose
    if config_path is not None:
        state.config_path = config_path


def _require_printer() -> Printer:
    if state.printer is None:
        raise typer.Exit(1)
    return state.printer


# ═══════════════════════════════════════════════════════════════════════════════
# Main Callback (global options only)
# ═══════════════════════════════════════════════════════════════════════════════


@_typed_callback()
def main(
    plain: OptPlain = False,
    verbose: OptVerbose = False,
    config: OptConfig = None,
) -> None:
    """
    Review pending upgrades before a system upgrade.

    Examples:
        aurup check                 # Repo + AUR upgrades, then the menu
        aurup check --devel         # Also probe -git packages
        aurup check --no-menu --json
        aurup diff 1.2.3-1 1.2.4-1
    """
    _init_state(plain=plain if plain else None, verbose=verbose, config_path=config)
    setup_logging(state.verbose)


# ═══════════════════════════════════════════════════════════════════════════════
# Subcommands
# ═══════════════════════════════════════════════════════════════════════════════


@_typed_command("check")
def check_cmd(
    mode: OptMode = None,
    devel: OptDevel = None,
    combined: OptCombined = None,
    menu: OptMenu = None,
    sysupgrade: OptSysupgrade = 0,
    json_output: OptJson = False,
    plain: OptPlain = False,
) -> None:
    """Find pending upgrades and choose which to skip."""
    _init_state(plain=plain if plain else None)
    printer = _require_printer()

    try:
        config = load_config(
            state.config_path,
            mode=mode,
            devel=devel,
            combined_upgrade=combined,
            upgrade_menu=menu,
            sysupgrade=sysupgrade or None,
        )
    except ConfigError as e:
        printer.error(str(e))
        raise typer.Exit(1) from None

    args = SimpleNamespace(json=json_output)
    raise typer.Exit(cmd_check(args, printer, config))


@_typed_command("diff")
def diff_cmd(
    old: Annotated[str, typer.Argument(help="Installed version")],
    new: Annotated[str, typer.Argument(help="Candidate version")],
) -> None:
    """Show where two versions diverge."""
    _init_state()
    printer = _require_printer()
    raise typer.Exit(cmd_diff(SimpleNamespace(old=old, new=new), printer))


def run_cli() -> None:
    app()


if __name__ == "__main__":
    run_cli()
