"""
commands.py - CLI command implementations for aurup.

Each function handles one subcommand and returns an exit code.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from backends import AurRpcResolver, DevelStateProbe, PacmanDatabase
from config import ConfigError, UpgradeConfig
from shared import UpgradeCheckError
from sources import AurResolver, DevelProbe, PackageDatabase
from upgrade import Upgrades, get_upgrades, version_diff

if TYPE_CHECKING:
    from printer import Printer
    from upgrade.aggregate import LineSource

logger = logging.getLogger(__name__)


def build_backends(config: UpgradeConfig) -> tuple[PacmanDatabase, AurRpcResolver, DevelStateProbe]:
    """Wire the pacman/AUR/git collaborators for a real system."""
    db = PacmanDatabase()
    resolver = AurRpcResolver(db, list(config.ignore), config.aur_url)
    probe = DevelStateProbe(config.devel_file)
    return db, resolver, probe


def _print_summary(printer: Printer, upgrades: Upgrades) -> None:
    sections = [
        ("Repo", upgrades.repo_keep),
        ("Aur", upgrades.aur_keep),
        ("Skipping", upgrades.repo_skip + upgrades.aur_skip),
    ]
    for title, names in sections:
        if names:
            printer.line(
                f"[bold]{title} ({len(names)})[/bold] {printer.escape('  '.join(names))}"
            )


def cmd_check(
    args: Any,
    printer: Printer,
    config: UpgradeConfig,
    db: PackageDatabase | None = None,
    resolver: AurResolver | None = None,
    probe: DevelProbe | None = None,
    line_source: LineSource | None = None,
) -> int:
    """Check for upgrades, let the user exclude some, and report the result."""
    if db is None or resolver is None or probe is None:
        default_db, default_resolver, default_probe = build_backends(config)
        db = db or default_db
        resolver = resolver or default_resolver
        probe = probe or default_probe

    # Keep stdout clean for the JSON document
    menu_printer = printer.to_stderr() if args.json else printer
    try:
        upgrades = asyncio.run(
            get_upgrades(
                config, db, resolver, probe, menu_printer, line_source,
                announce=not args.json,
            )
        )
    except (UpgradeCheckError, ConfigError) as e:
        printer.error(str(e))
        return 1
    except EOFError:
        printer.error("no input; aborting upgrade check")
        return 1
    except KeyboardInterrupt:
        printer.error("interrupted")
        return 130

    logger.debug("Upgrade check finished: %s", upgrades.to_dict())

    if args.json:
        print(json.dumps(upgrades.to_dict(), indent=2))
        return 0

    if upgrades.is_empty():
        printer.info(" there is nothing to do")
        return 0

    _print_summary(printer, upgrades)
    return 0


def cmd_diff(args: Any, printer: Printer) -> int:
    """Print two versions with their divergent suffixes highlighted."""
    old, new = version_diff(
        args.old,
        args.new,
        paint_old=lambda s: printer.markup("old_version", s),
        paint_new=lambda s: printer.markup("new_version", s),
        plain=printer.escape,
    )
    printer.line(f"{old} -> {new}")
    return 0
