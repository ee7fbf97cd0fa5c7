"""Check the README compatibility matrix against the vendored Conductor commit."""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import ManifestError, find_manifest, read_package_version
from ..git.refs import SHORT_SHA_LENGTH, get_head_sha
from ..git.runner import CommandRunner
from ..logging import get_logger

_logger = get_logger("verify.compat")


@dataclass
class CompatConfig:
    readme_path: Path
    manifest_path: Path
    conductor_path: Path

    @classmethod
    def from_root(cls, root: Path | str) -> "CompatConfig":
        root = Path(root)
        return cls(
            readme_path=root / "README.md",
            manifest_path=find_manifest(root),
            conductor_path=root / "vendor" / "conductor",
        )


@dataclass
class CompatReport:
    success: bool
    version: Optional[str] = None
    current_sha: Optional[str] = None
    documented_sha: Optional[str] = None
    error: Optional[str] = None


def extract_documented_sha(readme: str, version: str) -> Optional[str]:
    """Return the short SHA linked from the ``| **v<version>** | [sha](...)`` row."""
    pattern = re.compile(
        rf"\|\s+\*\*v{re.escape(version)}\*\*\s+\|\s+\[([a-f0-9]+)\]",
        re.IGNORECASE,
    )
    match = pattern.search(readme)
    if match is None:
        return None
    return match.group(1)[:SHORT_SHA_LENGTH]


def verify_compat(config: CompatConfig, runner: CommandRunner | None = None) -> CompatReport:
    try:
        version = read_package_version(config.manifest_path)
    except ManifestError as exc:
        return CompatReport(success=False, error=str(exc))

    try:
        current_sha = get_head_sha(config.conductor_path, runner, short=True)
    except (subprocess.CalledProcessError, OSError):
        return CompatReport(
            success=False,
            version=version,
            error="Could not determine Conductor submodule SHA.",
        )

    try:
        readme = config.readme_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        readme = ""
    documented_sha = extract_documented_sha(readme, version)
    if documented_sha is None:
        return CompatReport(
            success=False,
            version=version,
            current_sha=current_sha,
            error=(
                f"Bridge version v{version} not found in README's Compatibility Matrix. "
                f"Please add a line for v{version}."
            ),
        )

    if documented_sha.lower() != current_sha.lower():
        return CompatReport(
            success=False,
            version=version,
            current_sha=current_sha,
            documented_sha=documented_sha,
            error=(
                f"Compatibility Matrix mismatch for v{version}: documented Conductor SHA "
                f"{documented_sha}, actual {current_sha}"
            ),
        )

    _logger.info("v%s is documented with Conductor SHA %s", version, current_sha)
    return CompatReport(
        success=True,
        version=version,
        current_sha=current_sha,
        documented_sha=documented_sha,
    )


__all__ = ["CompatConfig", "CompatReport", "extract_documented_sha", "verify_compat"]
