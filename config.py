"""
Configuration for aurup.

Settings are layered, later layers winning:
1. Dataclass defaults
2. JSON config file ($AURUP_CONFIG or ~/.config/aurup/config.json)
3. Environment variables (AURUP_MODE, AURUP_DEVEL, AURUP_NO_MENU)
4. Explicit overrides from the CLI
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

MODES = ("any", "repo", "aur")


class ConfigError(ValueError):
    """Invalid configuration value or unreadable config file."""


def _default_devel_file() -> Path:
    return Path.home() / ".cache" / "aurup" / "devel.json"


@dataclass(frozen=True)
class UpgradeConfig:
    """Settings that shape one upgrade check."""
    mode: str = "any"                  # "any" | "repo" | "aur"
    devel: bool = False                # Probe VCS packages for new commits
    combined_upgrade: bool = True      # Include repo upgrades in the menu
    upgrade_menu: bool = True          # Show the menu and ask what to exclude
    sysupgrade: int = 1                # Times -u was given; 2+ allows downgrades
    ignore: tuple[str, ...] = ()       # AUR packages never upgraded (globs allowed)
    devel_file: Path = field(default_factory=_default_devel_file)
    aur_url: str = "https://aur.archlinux.org"

    @property
    def check_aur(self) -> bool:
        return self.mode != "repo"

    @property
    def check_devel(self) -> bool:
        return self.devel and self.mode != "repo"

    @property
    def check_repo(self) -> bool:
        return self.combined_upgrade and self.mode != "aur"

    @property
    def enable_downgrade(self) -> bool:
        return self.sysupgrade > 1


def default_config_path() -> Path:
    env_path = os.environ.get("AURUP_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "aurup" / "config.json"


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ConfigError(f"{name} must be a boolean, got '{value}'")


def _coerce(key: str, value: Any) -> Any:
    if key == "devel_file":
        return Path(str(value)).expanduser()
    if key == "ignore":
        if isinstance(value, str):
            return tuple(value.split())
        return tuple(str(v) for v in value)
    if key == "sysupgrade":
        return int(value)
    return value


def _read_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"could not read {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a JSON object")
    return data


def _read_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    if "AURUP_MODE" in os.environ:
        values["mode"] = os.environ["AURUP_MODE"]
    if "AURUP_DEVEL" in os.environ:
        values["devel"] = _parse_bool("AURUP_DEVEL", os.environ["AURUP_DEVEL"])
    if "AURUP_NO_MENU" in os.environ:
        values["upgrade_menu"] = not _parse_bool("AURUP_NO_MENU", os.environ["AURUP_NO_MENU"])
    return values


def load_config(path: Path | None = None, **overrides: Any) -> UpgradeConfig:
    """Build the effective configuration.

    Args:
        path: Config file (defaults to default_config_path())
        **overrides: CLI values; None means "not given"

    Raises:
        ConfigError: on unknown keys, an unreadable file, or an invalid mode
    """
    known = {f.name for f in fields(UpgradeConfig)}
    values: dict[str, Any] = {}

    file_values = _read_file(path or default_config_path())
    unknown = sorted(set(file_values) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

    values.update(file_values)
    values.update(_read_env())
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = replace(UpgradeConfig(), **{k: _coerce(k, v) for k, v in values.items()})
    except (TypeError, ValueError) as e:
        raise ConfigError(str(e)) from e

    if config.mode not in MODES:
        raise ConfigError(f"mode must be one of {', '.join(MODES)}, got '{config.mode}'")
    return config
