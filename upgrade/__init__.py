"""
upgrade - Pending upgrade aggregation and the exclusion menu.

- aggregate: fetch AUR/devel concurrently, merge with repo, partition
- numbering: the one numbering rule shared by rendering and partitioning
- menu: the numbered, diff-highlighted upgrade table
- number_menu: the exclusion command grammar
- version_diff: boundary-aware version highlighting
"""

from .aggregate import (
    EXCLUDE_PROMPT,
    Upgrades,
    aggregate,
    fetch_aur_and_devel,
    filter_devel_updates,
    get_upgrades,
    keep_all,
    partition_upgrades,
    read_selection,
)
from .menu import MenuLayout, MenuRow, format_upgrade_line, menu_rows, render_menu
from .number_menu import Index, Label, Range, SelectionError, SelectionSpec, parse_selection
from .numbering import AggregatedUpgrades, menu_number, number_records
from .version_diff import shared_prefix_len, version_diff

__all__ = [
    "EXCLUDE_PROMPT",
    "AggregatedUpgrades",
    "Index",
    "Label",
    "MenuLayout",
    "MenuRow",
    "Range",
    "SelectionError",
    "SelectionSpec",
    "Upgrades",
    "aggregate",
    "fetch_aur_and_devel",
    "filter_devel_updates",
    "format_upgrade_line",
    "get_upgrades",
    "keep_all",
    "menu_number",
    "menu_rows",
    "number_records",
    "parse_selection",
    "partition_upgrades",
    "read_selection",
    "render_menu",
    "shared_prefix_len",
    "version_diff",
]
