"""
aggregate.py - Collect, number and partition pending upgrades.

Flow of one check:
1. Fetch AUR and devel candidates concurrently (both must succeed)
2. Warn about AUR upgrades the resolver ignored
3. Stage repo upgrades, drop AUR entries that devel also tracks
4. Number everything (see numbering.py)
5. Without a menu keep everything; otherwise render, read the exclusion
   command and split each source into keep/skip
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from sources import (
    AUR,
    DEVEL,
    AurResolver,
    AurUpdates,
    DevelProbe,
    PackageDatabase,
    UpgradeRecord,
    aur_records,
    devel_records,
    ignored_updates,
    repo_records,
)

from .menu import render_menu
from .number_menu import SelectionError, SelectionSpec, parse_selection
from .numbering import AggregatedUpgrades, menu_number, number_records

if TYPE_CHECKING:
    from config import UpgradeConfig
    from printer import Printer

logger = logging.getLogger(__name__)

EXCLUDE_PROMPT = "Packages to exclude (eg: 1 2 3, 1-3):"

LineSource = Callable[[str], str]

# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class Upgrades:
    """Final partition handed to the install step.

    Devel packages are built like AUR packages, so they land in aur_*.
    """
    repo_keep: list[str] = field(default_factory=list)
    repo_skip: list[str] = field(default_factory=list)
    aur_keep: list[str] = field(default_factory=list)
    aur_skip: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.repo_keep or self.repo_skip or self.aur_keep or self.aur_skip)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "repo_keep": list(self.repo_keep),
            "repo_skip": list(self.repo_skip),
            "aur_keep": list(self.aur_keep),
            "aur_skip": list(self.aur_skip),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Fetching
# ═══════════════════════════════════════════════════════════════════════════════


async def _aur_upgrades(
    config: UpgradeConfig,
    resolver: AurResolver,
    printer: Printer,
    announce: bool,
) -> AurUpdates:
    if not config.check_aur:
        return AurUpdates()
    if announce:
        printer.action("Looking for AUR upgrades")
    return await resolver.aur_updates()


async def _devel_upgrades(
    config: UpgradeConfig,
    probe: DevelProbe,
    printer: Printer,
    announce: bool,
) -> list[str]:
    if not config.check_devel:
        return []
    if announce:
        printer.action("Looking for devel upgrades")
    return await probe.possible_devel_updates()


async def fetch_aur_and_devel(
    config: UpgradeConfig,
    resolver: AurResolver,
    probe: DevelProbe,
    printer: Printer,
    announce: bool = True,
) -> tuple[AurUpdates, list[str]]:
    """Run the AUR and devel fetches concurrently.

    If either fails, the other is cancelled and the first error propagates.
    """
    tasks: list[asyncio.Task[Any]] = [
        asyncio.ensure_future(_aur_upgrades(config, resolver, printer, announce)),
        asyncio.ensure_future(_devel_upgrades(config, probe, printer, announce)),
    ]
    try:
        aur, devel = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        raise
    return aur, devel


def filter_devel_updates(names: list[str], db: PackageDatabase) -> list[str]:
    """Keep devel candidates that are installed, sorted and deduplicated."""
    installed = []
    for name in sorted(set(names)):
        if db.local_version(name) is None:
            logger.debug("Dropping devel candidate '%s': not installed", name)
            continue
        installed.append(name)
    return installed


def stage_repo_upgrades(config: UpgradeConfig, db: PackageDatabase) -> list[UpgradeRecord]:
    if not config.check_repo:
        return []
    candidates = db.stage_sysupgrade(config.enable_downgrade)
    return repo_records(candidates, db.sync_db_names())


async def aggregate(
    config: UpgradeConfig,
    db: PackageDatabase,
    resolver: AurResolver,
    probe: DevelProbe,
    printer: Printer,
    announce: bool = True,
) -> AggregatedUpgrades:
    """Fetch all sources and return the numbered, de-duplicated lists."""
    aur_result, devel_names = await fetch_aur_and_devel(
        config, resolver, probe, printer, announce
    )

    for pkg in ignored_updates(aur_result):
        printer.warn(
            f"{pkg.name}: ignoring package upgrade ({pkg.local_version} => {pkg.remote_version})"
        )

    devel = devel_records(filter_devel_updates(devel_names, db))
    repo = stage_repo_upgrades(config, db)

    # A VCS package follows its commits, not the AUR version
    tracked = {r.name for r in devel}
    aur = [r for r in aur_records(aur_result) if r.name not in tracked]

    logger.debug(
        "Aggregated %d repo, %d aur, %d devel upgrades", len(repo), len(aur), len(devel)
    )
    return number_records(repo, aur, devel)


# ═══════════════════════════════════════════════════════════════════════════════
# Partitioning
# ═══════════════════════════════════════════════════════════════════════════════


def keep_all(aggregated: AggregatedUpgrades) -> Upgrades:
    """Partition used when the menu is disabled: nothing is skipped."""
    return Upgrades(
        repo_keep=[r.name for r in aggregated.repo],
        aur_keep=[r.name for r in aggregated.aur] + [r.name for r in aggregated.devel],
    )


def partition_upgrades(
    aggregated: AggregatedUpgrades,
    spec: SelectionSpec,
    raw: str,
) -> Upgrades:
    """Split every source into keep/skip using the exclusion command."""
    if not raw.strip() or spec.is_empty():
        return keep_all(aggregated)

    counts = aggregated.counts
    upgrades = Upgrades()

    def split(records: list[UpgradeRecord], keep: list[str], skip: list[str]) -> None:
        for i, record in enumerate(records):
            n = menu_number(*counts, record.source, i)
            if spec.contains(n, record.group):
                skip.append(record.name)
            else:
                keep.append(record.name)

    split(aggregated.repo, upgrades.repo_keep, upgrades.repo_skip)
    split(aggregated.aur, upgrades.aur_keep, upgrades.aur_skip)
    split(aggregated.devel, upgrades.aur_keep, upgrades.aur_skip)
    return upgrades


def read_selection(
    aggregated: AggregatedUpgrades,
    printer: Printer,
    line_source: LineSource,
) -> tuple[str, SelectionSpec]:
    """Prompt until the exclusion command parses.

    Errors from the line source (EOFError included) propagate.
    """
    labels = aggregated.group_labels() | {AUR, DEVEL}
    while True:
        raw = line_source(EXCLUDE_PROMPT).strip()
        try:
            return raw, parse_selection(raw, labels)
        except SelectionError as e:
            printer.error(str(e))


async def get_upgrades(
    config: UpgradeConfig,
    db: PackageDatabase,
    resolver: AurResolver,
    probe: DevelProbe,
    printer: Printer,
    line_source: LineSource | None = None,
    announce: bool = True,
) -> Upgrades:
    """Run a full upgrade check and return what to upgrade and what to skip.

    Args:
        config: Effective configuration
        db: Local and sync package databases
        resolver: AUR update resolver
        probe: Devel (VCS) update probe
        printer: Output surface
        line_source: Reads one line after a prompt (defaults to printer.prompt)
        announce: Print the `:: Looking for ...` line before each fetch

    Returns:
        Upgrades; empty when there is nothing to do
    """
    aggregated = await aggregate(config, db, resolver, probe, printer, announce)

    if aggregated.is_empty():
        return Upgrades()

    if not config.upgrade_menu:
        return keep_all(aggregated)

    render_menu(aggregated, db.local_version, printer)
    raw, spec = read_selection(aggregated, printer, line_source or printer.prompt)
    return partition_upgrades(aggregated, spec, raw)
