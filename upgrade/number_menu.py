"""
number_menu.py - Parse the exclusion command typed at the upgrade menu.

Tokens are separated by whitespace and/or commas:

    3        one menu index
    2-5      an inclusive index range (5-2 means the same)
    extra    every entry of a group: a repo name, "aur" or "devel"
"""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass

_SEPARATORS = re.compile(r"[\s,]+")
_INDEX = re.compile(r"\d+")
_RANGE = re.compile(r"(\d+)-(\d+)")


class SelectionError(ValueError):
    """A token of the exclusion command could not be understood."""

    def __init__(self, token: str, reason: str):
        super().__init__(f"invalid selection '{token}': {reason}")
        self.token = token
        self.reason = reason


@dataclass(frozen=True)
class Index:
    value: int

    def covers(self, n: int) -> bool:
        return n == self.value


@dataclass(frozen=True)
class Range:
    lo: int
    hi: int

    def covers(self, n: int) -> bool:
        return self.lo <= n <= self.hi


@dataclass(frozen=True)
class Label:
    text: str


Token = Index | Range | Label


@dataclass(frozen=True)
class SelectionSpec:
    """Parsed exclusion command, queried per menu entry."""
    tokens: tuple[Token, ...] = ()

    def contains(self, index: int, label: str) -> bool:
        """True if the entry is selected by index, range or group label."""
        for token in self.tokens:
            if isinstance(token, Label):
                if token.text == label:
                    return True
            elif token.covers(index):
                return True
        return False

    def is_empty(self) -> bool:
        return not self.tokens


def _parse_token(token: str, labels: Collection[str] | None) -> Token:
    if _INDEX.fullmatch(token):
        return Index(int(token))

    match = _RANGE.fullmatch(token)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        return Range(min(start, end), max(start, end))

    # Labels need at least one letter; "3-", "-2" or "1-2-3" are broken numbers
    if not any(c.isalpha() for c in token):
        raise SelectionError(token, "expected a number, a range like 1-3, or a group name")

    if labels is not None and token not in labels:
        known = ", ".join(sorted(labels))
        raise SelectionError(token, f"unknown group (expected one of: {known})")

    return Label(token)


def parse_selection(raw: str, labels: Collection[str] | None = None) -> SelectionSpec:
    """Parse an exclusion command.

    Args:
        raw: Text typed by the user
        labels: Group labels that may be named; None accepts any label

    Returns:
        SelectionSpec (empty for blank input)

    Raises:
        SelectionError: naming the first token that cannot be parsed
    """
    words = [w for w in _SEPARATORS.split(raw.strip()) if w]
    return SelectionSpec(tuple(_parse_token(w, labels) for w in words))
