"""
backends.py - System collaborators for aurup

Concrete implementations of the interfaces in sources.py:
- PacmanDatabase: pacman / pacman-conf for local and sync package data
- AurRpcResolver: AUR RPC v5 info lookups compared with pyalpm.vercmp
- DevelStateProbe: devel.json commit pins checked with git ls-remote
"""

from __future__ import annotations

import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Any

from pyalpm import vercmp
from tenacity import retry_if_exception_type, stop_after_attempt, wait_exponential

from shared import (
    UpgradeCheckError,
    parse_name_version_lines,
    run_command,
    run_lines,
    typed_retry,
)
from sources import AurUpdate, AurUpdates, RepoCandidate

logger = logging.getLogger(__name__)

# Keeps RPC request URLs well under server limits
AUR_INFO_CHUNK = 150

# ═══════════════════════════════════════════════════════════════════════════════
# pacman
# ═══════════════════════════════════════════════════════════════════════════════


class PacmanDatabase:
    """Package data read through the pacman command line tools."""

    def __init__(self) -> None:
        self._local: dict[str, str] | None = None

    def sync_db_names(self) -> list[str]:
        return run_lines(["pacman-conf", "--repo-list"])

    def ignored_packages(self) -> list[str]:
        """IgnorePkg entries from pacman.conf."""
        success, output = run_command(["pacman-conf", "IgnorePkg"])
        if not success:
            logger.debug("pacman-conf IgnorePkg failed: %s", output)
            return []
        return [name for line in output.splitlines() for name in line.split()]

    def stage_sysupgrade(self, enable_downgrade: bool) -> list[RepoCandidate]:
        cmd = ["pacman", "-S", "--sysupgrade", "--print", "--print-format", "%r %n %v"]
        if enable_downgrade:
            cmd.insert(2, "--sysupgrade")

        candidates = []
        for line in run_lines(cmd, timeout=120):
            parts = line.split()
            if len(parts) != 3 or line.startswith((" ", ":")):
                continue
            db, name, version = parts
            candidates.append(RepoCandidate(name=name, db=db, version=version))
        return candidates

    def local_packages(self) -> dict[str, str]:
        if self._local is None:
            self._local = parse_name_version_lines(run_lines(["pacman", "-Q"]))
        return self._local

    def local_version(self, name: str) -> str | None:
        return self.local_packages().get(name)

    def foreign_packages(self) -> dict[str, str]:
        """Installed packages that no sync database provides."""
        success, output = run_command(["pacman", "-Qm"])
        # pacman -Qm exits 1 when there are no foreign packages
        if not success and output:
            raise UpgradeCheckError(f"pacman -Qm failed: {output}")
        return parse_name_version_lines(output.splitlines() if success else [])


# ═══════════════════════════════════════════════════════════════════════════════
# AUR
# ═══════════════════════════════════════════════════════════════════════════════


@typed_retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception_type((urllib.error.URLError, TimeoutError)),
    reraise=True,
)
def _fetch_info_chunk(aur_url: str, names: list[str]) -> list[dict[str, Any]]:
    query = urllib.parse.urlencode([("arg[]", n) for n in names])
    url = f"{aur_url.rstrip('/')}/rpc/v5/info?{query}"
    req = urllib.request.Request(url, headers={"Accept": "application/json"})
    with urllib.request.urlopen(req, timeout=20) as response:
        data = json.loads(response.read().decode())

    if data.get("type") == "error":
        raise UpgradeCheckError(f"AUR RPC error: {data.get('error')}")
    return list(data.get("results", []))


def fetch_aur_versions(aur_url: str, names: list[str]) -> dict[str, str]:
    """Map AUR package name -> current AUR version for the given names.

    Names that are not in the AUR are simply missing from the result.
    """
    versions: dict[str, str] = {}
    for start in range(0, len(names), AUR_INFO_CHUNK):
        chunk = names[start:start + AUR_INFO_CHUNK]
        try:
            results = _fetch_info_chunk(aur_url, chunk)
        except (urllib.error.URLError, TimeoutError, json.JSONDecodeError) as e:
            raise UpgradeCheckError(f"failed to query the AUR: {e}") from e
        for pkg in results:
            versions[pkg["Name"]] = pkg["Version"]
    return versions


def is_ignored(name: str, patterns: list[str]) -> bool:
    return any(fnmatchcase(name, p) for p in patterns)


class AurRpcResolver:
    """Finds AUR updates for installed foreign packages."""

    def __init__(self, db: PacmanDatabase, ignore: list[str], aur_url: str):
        self.db = db
        self.ignore = list(ignore)
        self.aur_url = aur_url

    async def aur_updates(self) -> AurUpdates:
        return await asyncio.to_thread(self.resolve)

    def resolve(self) -> AurUpdates:
        foreign = self.db.foreign_packages()
        if not foreign:
            return AurUpdates()

        remote = fetch_aur_versions(self.aur_url, sorted(foreign))
        ignore = self.ignore + self.db.ignored_packages()
        result = AurUpdates()

        for name in sorted(foreign):
            remote_version = remote.get(name)
            if remote_version is None:
                logger.debug("'%s' is not in the AUR", name)
                continue
            if vercmp(foreign[name], remote_version) >= 0:
                continue

            update = AurUpdate(name=name, local_version=foreign[name], remote_version=remote_version)
            if is_ignored(name, ignore):
                result.ignored.append(update)
            else:
                result.updates.append(update)
        return result


# ═══════════════════════════════════════════════════════════════════════════════
# Devel
# ═══════════════════════════════════════════════════════════════════════════════


def load_devel_state(path: Path) -> dict[str, list[dict[str, Any]]]:
    """Read devel.json: {"pkg": [{"url": ..., "branch": ..., "commit": ...}]}.

    A missing file means nothing is tracked.
    """
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        raise UpgradeCheckError(f"could not read devel state {path}: {e}") from e
    if not isinstance(data, dict):
        raise UpgradeCheckError(f"devel state {path} must be a JSON object")
    for name, sources in data.items():
        if not isinstance(sources, list) or not all(
            isinstance(s, dict) and isinstance(s.get("url"), str) for s in sources
        ):
            raise UpgradeCheckError(
                f"devel state {path}: '{name}' must list sources with a \"url\""
            )
    return {name: list(sources) for name, sources in data.items()}


def remote_head(url: str, branch: str | None) -> str | None:
    """Commit at the tip of a remote branch (HEAD when branch is None)."""
    success, output = run_command(["git", "ls-remote", url, branch or "HEAD"], timeout=30)
    if not success or not output:
        logger.warning("git ls-remote %s failed: %s", url, output or "no output")
        return None
    return output.split()[0]


class DevelStateProbe:
    """Reports devel packages whose upstream moved past the pinned commit."""

    def __init__(self, state_file: Path):
        self.state_file = state_file

    async def possible_devel_updates(self) -> list[str]:
        state = load_devel_state(self.state_file)
        checks = [
            (name, source)
            for name, sources in state.items()
            for source in sources
        ]
        moved = await asyncio.gather(
            *(asyncio.to_thread(self._has_new_commit, source) for _, source in checks)
        )
        return sorted({name for (name, _), changed in zip(checks, moved) if changed})

    @staticmethod
    def _has_new_commit(source: dict[str, Any]) -> bool:
        head = remote_head(source["url"], source.get("branch"))
        if head is None:
            return False
        pinned = str(source.get("commit", ""))
        return not (pinned and head.startswith(pinned))
