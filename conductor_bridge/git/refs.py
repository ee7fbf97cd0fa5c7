"""Remote reference resolution and commit lookups."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import List, Optional

from ..config import DEFAULT_REF
from ..logging import get_logger
from .runner import CommandRunner

# Only plain release tags count as stable; v1.2.0-beta and friends do not.
STABLE_TAG_PATTERN = re.compile(r"refs/tags/(v\d+\.\d+\.\d+)$")

SHORT_SHA_LENGTH = 7

_logger = get_logger("git.refs")


def stable_tags(listing: str) -> List[str]:
    """Extract stable tag names from ``git ls-remote --tags`` output, keeping order."""
    tags: List[str] = []
    for line in listing.splitlines():
        match = STABLE_TAG_PATTERN.search(line.strip())
        if match:
            tags.append(match.group(1))
    return tags


def get_latest_stable_tag(repo_url: str, runner: CommandRunner | None = None) -> Optional[str]:
    """Return the newest stable tag on the remote, or ``None``.

    Ordering comes from git's ``v:refname`` sort; the list is not re-sorted.
    """
    runner = runner or CommandRunner()
    try:
        listing = runner.capture(
            ["git", "ls-remote", "--tags", "--sort=v:refname", repo_url]
        )
    except (subprocess.CalledProcessError, OSError) as exc:
        _logger.debug("Listing tags for %s failed: %s", repo_url, exc)
        return None
    tags = stable_tags(listing)
    return tags[-1] if tags else None


def get_desired_ref(
    repo_url: str,
    override: Optional[str] = None,
    runner: CommandRunner | None = None,
) -> str:
    """Explicit override, then newest stable tag, then ``main``."""
    if override:
        return override
    latest = get_latest_stable_tag(repo_url, runner)
    if latest:
        return latest
    return DEFAULT_REF


def get_head_sha(
    repo_path: Path, runner: CommandRunner | None = None, *, short: bool = False
) -> str:
    """Return the HEAD commit of ``repo_path``; git failures propagate."""
    runner = runner or CommandRunner()
    sha = runner.capture(["git", "rev-parse", "HEAD"], cwd=repo_path).strip()
    return sha[:SHORT_SHA_LENGTH] if short else sha


def get_submodule_sha(repo_path: Path, runner: CommandRunner | None = None) -> str:
    """Like :func:`get_head_sha` but falls back to ``main`` when git fails."""
    try:
        return get_head_sha(repo_path, runner)
    except (subprocess.CalledProcessError, OSError):
        _logger.warning("Could not read HEAD of %s; recording %s", repo_path, DEFAULT_REF)
        return DEFAULT_REF


__all__ = [
    "STABLE_TAG_PATTERN",
    "get_desired_ref",
    "get_head_sha",
    "get_latest_stable_tag",
    "get_submodule_sha",
    "stable_tags",
]
