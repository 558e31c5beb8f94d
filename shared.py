"""
shared.py - Common helpers for aurup

Single home for:
- Subprocess wrappers used by the pacman/git backends
- The typed tenacity retry decorator
- The fatal error type raised when the upgrade check cannot continue
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any, ParamSpec, TypeVar, cast

from tenacity import retry

P = ParamSpec("P")
R = TypeVar("R")


class UpgradeCheckError(RuntimeError):
    """The upgrade check hit a state it cannot recover from."""


# ═══════════════════════════════════════════════════════════════════════════════
# Retry
# ═══════════════════════════════════════════════════════════════════════════════


def typed_retry(*args: Any, **kwargs: Any) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Typed wrapper to avoid untyped decorator issues with tenacity retry."""
    return cast(Callable[[Callable[P, R]], Callable[P, R]], retry(*args, **kwargs))


# ═══════════════════════════════════════════════════════════════════════════════
# Subprocess Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def run_command(
    cmd: list[str],
    cwd: Path | None = None,
    timeout: int = 30,
) -> tuple[bool, str]:
    """Run a command and return (success, stdout).

    Args:
        cmd: Command and arguments as list
        cwd: Working directory (optional)
        timeout: Timeout in seconds (default 30)

    Returns:
        Tuple of (success: bool, output: str)
        On timeout or a missing executable, returns (False, error_message)
    """
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        return False, f"Timeout after {timeout}s"
    except OSError as e:
        return False, str(e)

    if result.returncode != 0:
        return False, (result.stderr or result.stdout).strip()
    return True, result.stdout.rstrip()


def run_lines(cmd: list[str], timeout: int = 30) -> list[str]:
    """Run a command and return its non-empty stdout lines.

    Raises:
        UpgradeCheckError: if the command fails.
    """
    success, output = run_command(cmd, timeout=timeout)
    if not success:
        raise UpgradeCheckError(f"{' '.join(cmd)} failed: {output}")
    return [line for line in output.splitlines() if line.strip()]


def parse_name_version_lines(lines: list[str]) -> dict[str, str]:
    """Parse `name version` lines (pacman -Q style) into a mapping."""
    packages: dict[str, str] = {}
    for line in lines:
        parts = line.split()
        if len(parts) >= 2:
            packages[parts[0]] = parts[1]
    return packages
