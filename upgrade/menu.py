"""
menu.py - Render the numbered upgrade menu.

Each row reads `INDEX GROUP/NAME OLD -> NEW`:

    3 core/linux        6.9.1.arch1-1 -> 6.9.2.arch1-1
    2 aur/yay           12.3.1-1      -> 12.3.5-1
    1 devel/neovim-git  0.10.0.r12-1  -> latest-commit

Rows print from index N down to 1; the numbers come from numbering.py.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING

from printer import display_width
from shared import UpgradeCheckError
from sources import DEVEL, UpgradeRecord

from .version_diff import version_diff

if TYPE_CHECKING:
    from printer import Printer

    from .numbering import AggregatedUpgrades

# (style, text) -> rendered text
Paint = Callable[[str, str], str]
LocalVersion = Callable[[str], str | None]


def no_paint(style: str, text: str) -> str:
    return text


def no_escape(text: str) -> str:
    return text


@dataclass(frozen=True)
class MenuRow:
    index: int
    record: UpgradeRecord
    old_version: str


@dataclass(frozen=True)
class MenuLayout:
    """Column widths shared by every row of one menu."""
    total: int
    index_width: int
    label_width: int
    old_width: int

    @classmethod
    def compute(cls, rows: list[MenuRow]) -> MenuLayout:
        total = len(rows)
        return cls(
            total=total,
            index_width=len(str(total)),
            label_width=max((_label_width(r.record) for r in rows), default=0),
            old_width=max((display_width(r.old_version) for r in rows), default=0),
        )


def _label_width(record: UpgradeRecord) -> int:
    return display_width(record.group) + 1 + display_width(record.name)


def old_version_of(record: UpgradeRecord, local_version: LocalVersion) -> str:
    """Installed version for a row.

    Raises:
        UpgradeCheckError: if a package slated for upgrade is not installed
    """
    if record.old_version is not None:
        return record.old_version
    version = local_version(record.name)
    if version is None:
        raise UpgradeCheckError(
            f"{record.label} is listed for upgrade but missing from the local database"
        )
    return version


def menu_rows(aggregated: AggregatedUpgrades, local_version: LocalVersion) -> list[MenuRow]:
    """Rows in print order (index N first), with old versions resolved."""
    return [
        MenuRow(index=n, record=record, old_version=old_version_of(record, local_version))
        for n, record in aggregated.numbered()
    ]


def format_upgrade_line(
    row: MenuRow,
    layout: MenuLayout,
    paint: Paint = no_paint,
    escape: Callable[[str], str] = no_escape,
) -> str:
    """Format one menu row.

    With the defaults the result is plain text; pass Printer.markup and
    Printer.escape to get Rich markup.
    """
    record = row.record
    index = f"{row.index:>{layout.index_width}}"
    label_pad = " " * (layout.label_width - _label_width(record) + 1)
    old_pad = " " * (layout.old_width - display_width(row.old_version))

    if record.source == DEVEL:
        # Nothing to compare against a commit that is not known yet
        old = paint("old_version", row.old_version)
        new = paint("new_version", record.new_version)
    else:
        old, new = version_diff(
            row.old_version,
            record.new_version,
            paint_old=partial(paint, "old_version"),
            paint_new=partial(paint, "new_version"),
            plain=escape,
        )

    label = f"{paint('repo', record.group)}/{paint('bold', record.name)}"
    return f"{paint('number_menu', index)} {label}{label_pad} {old}{old_pad} -> {new}"


def render_menu(
    aggregated: AggregatedUpgrades,
    local_version: LocalVersion,
    printer: Printer,
) -> list[MenuRow]:
    """Print the menu and return the rows that were shown."""
    rows = menu_rows(aggregated, local_version)
    layout = MenuLayout.compute(rows)
    for row in rows:
        printer.line(format_upgrade_line(row, layout, printer.markup, printer.escape))
    return rows
