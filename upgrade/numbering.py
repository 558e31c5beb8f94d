"""
numbering.py - The shared menu numbering.

Rendering and partitioning both number through menu_number() so the index
printed next to a package is always the index the exclusion command hits.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace

from sources import AUR, DEVEL, REPO, UpgradeRecord


@dataclass(frozen=True)
class AggregatedUpgrades:
    """Numbered upgrade lists, one per source."""
    repo: list[UpgradeRecord] = field(default_factory=list)
    aur: list[UpgradeRecord] = field(default_factory=list)
    devel: list[UpgradeRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.repo) + len(self.aur) + len(self.devel)

    @property
    def counts(self) -> tuple[int, int, int]:
        """(devel, aur, repo) sizes, the argument order of menu_number."""
        return len(self.devel), len(self.aur), len(self.repo)

    def is_empty(self) -> bool:
        return self.total == 0

    def records(self) -> Iterator[UpgradeRecord]:
        """All records in menu print order: repo, aur, devel."""
        yield from self.repo
        yield from self.aur
        yield from self.devel

    def group_labels(self) -> set[str]:
        return {r.group for r in self.records()}

    def numbered(self) -> Iterator[tuple[int, UpgradeRecord]]:
        """(index, record) pairs in print order, index N first."""
        for records in (self.repo, self.aur, self.devel):
            for position, record in enumerate(records):
                yield menu_number(*self.counts, record.source, position), record


def menu_number(
    devel_count: int,
    aur_count: int,
    repo_count: int,
    source: str,
    position: int,
) -> int:
    """Menu index of the record at `position` within its source list.

    Blocks are numbered devel, then aur, then repo. Inside a block the
    first record gets the highest index, so printing the lists top to bottom
    counts down to 1.
    """
    if source == DEVEL:
        offset, size = 0, devel_count
    elif source == AUR:
        offset, size = devel_count, aur_count
    elif source == REPO:
        offset, size = devel_count + aur_count, repo_count
    else:
        raise ValueError(f"unknown upgrade source: {source}")

    if not 0 <= position < size:
        raise IndexError(f"position {position} outside {source} block of {size}")
    return offset + size - position


def number_records(
    repo: list[UpgradeRecord],
    aur: list[UpgradeRecord],
    devel: list[UpgradeRecord],
) -> AggregatedUpgrades:
    """Assign display ranks to every record."""
    counts = (len(devel), len(aur), len(repo))

    def numbered(records: list[UpgradeRecord]) -> list[UpgradeRecord]:
        return [
            replace(r, display_rank=menu_number(*counts, r.source, i))
            for i, r in enumerate(records)
        ]

    return AggregatedUpgrades(repo=numbered(repo), aur=numbered(aur), devel=numbered(devel))
