"""
sources.py - Upgrade sources for aurup

Normalizes the three upgrade sources into UpgradeRecord:
- repo (staged sync packages from the configured databases)
- aur (the resolver's AUR updates; ignored entries stay out)
- devel (VCS-tracked packages reported by the devel probe)

Also declares the collaborator interfaces the aggregator talks to.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

# ═══════════════════════════════════════════════════════════════════════════════
# Types
# ═══════════════════════════════════════════════════════════════════════════════

REPO = "repo"
AUR = "aur"
DEVEL = "devel"

# Devel packages are rebuilt from the newest commit, not a known version
LATEST_COMMIT = "latest-commit"


@dataclass(frozen=True)
class UpgradeRecord:
    """One pending upgrade, normalized across sources."""
    name: str
    source: str                      # "repo" | "aur" | "devel"
    group: str                       # db name for repo, else "aur" / "devel"
    new_version: str
    old_version: str | None = None   # None until looked up in the local db
    display_rank: int = 0            # Menu index, 0 until numbered

    @property
    def label(self) -> str:
        return f"{self.group}/{self.name}"


@dataclass(frozen=True)
class RepoCandidate:
    """A sync package staged by a system upgrade."""
    name: str
    db: str
    version: str


@dataclass(frozen=True)
class AurUpdate:
    """An installed AUR package with a newer version in the AUR."""
    name: str
    local_version: str
    remote_version: str


@dataclass
class AurUpdates:
    """Resolver result: upgradable packages and the ones policy ignores."""
    updates: list[AurUpdate] = field(default_factory=list)
    ignored: list[AurUpdate] = field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# Collaborators
# ═══════════════════════════════════════════════════════════════════════════════


class PackageDatabase(Protocol):
    """Read-only view of the system package databases."""

    def sync_db_names(self) -> list[str]:
        """Configured sync databases, in priority order."""
        ...

    def stage_sysupgrade(self, enable_downgrade: bool) -> list[RepoCandidate]:
        """Stage a system upgrade and return the candidate packages."""
        ...

    def local_version(self, name: str) -> str | None:
        """Installed version of a package, or None if not installed."""
        ...


class AurResolver(Protocol):
    async def aur_updates(self) -> AurUpdates: ...


class DevelProbe(Protocol):
    async def possible_devel_updates(self) -> list[str]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Adapters
# ═══════════════════════════════════════════════════════════════════════════════


def repo_records(
    candidates: Iterable[RepoCandidate],
    db_order: list[str],
) -> list[UpgradeRecord]:
    """Build repo records ordered by database priority, then package name.

    Databases missing from db_order sort after every configured one.
    """
    priority = {db: i for i, db in enumerate(db_order)}

    def sort_key(c: RepoCandidate) -> tuple[int, str]:
        return (priority.get(c.db, len(priority)), c.name)

    return [
        UpgradeRecord(name=c.name, source=REPO, group=c.db, new_version=c.version)
        for c in sorted(candidates, key=sort_key)
    ]


def aur_records(result: AurUpdates) -> list[UpgradeRecord]:
    """Build AUR records from the resolver's updates (never its ignored list)."""
    return [
        UpgradeRecord(
            name=u.name,
            source=AUR,
            group=AUR,
            new_version=u.remote_version,
            old_version=u.local_version,
        )
        for u in result.updates
    ]


def ignored_updates(result: AurUpdates) -> list[AurUpdate]:
    return list(result.ignored)


def devel_records(names: Iterable[str]) -> list[UpgradeRecord]:
    """Build devel records, deduplicated and sorted by name."""
    return [
        UpgradeRecord(name=name, source=DEVEL, group=DEVEL, new_version=LATEST_COMMIT)
        for name in sorted(set(names))
    ]
