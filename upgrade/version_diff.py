"""
version_diff.py - Highlight where two version strings diverge.

The split point only ever falls right after a separator (".", "-", ":", "+",
...) so a numeric or alphabetic run is highlighted as a whole:

    1.2.3  -> 1.2.[3]
    1.2.4  -> 1.2.[4]
"""

from __future__ import annotations

from collections.abc import Callable

Paint = Callable[[str], str]


def _unchanged(text: str) -> str:
    return text


def shared_prefix_len(old: str, new: str) -> int:
    """Length of the common prefix that ends on a separator boundary.

    Identical strings share everything.
    """
    if old == new:
        return len(old)

    split = 0
    for i, (old_c, new_c) in enumerate(zip(old, new)):
        if old_c != new_c:
            break
        if not old_c.isalnum():
            split = i + 1
    return split


def _paint_suffix(text: str, shared: int, paint: Paint, plain: Paint) -> str:
    head, tail = text[:shared], text[shared:]
    return plain(head) + (paint(tail) if tail else "")


def version_diff(
    old: str,
    new: str,
    paint_old: Paint = _unchanged,
    paint_new: Paint = _unchanged,
    plain: Paint = _unchanged,
) -> tuple[str, str]:
    """Return (old, new) with their divergent suffixes painted.

    Args:
        old: Installed version
        new: Candidate version
        paint_old: Applied to the old suffix
        paint_new: Applied to the new suffix
        plain: Applied to the shared prefix (e.g. markup escaping)

    Returns:
        Tuple of (rendered_old, rendered_new)
    """
    shared = shared_prefix_len(old, new)
    return (
        _paint_suffix(old, shared, paint_old, plain),
        _paint_suffix(new, shared, paint_new, plain),
    )
