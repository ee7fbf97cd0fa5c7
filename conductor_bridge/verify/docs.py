"""Check that README and generated templates reference the package version."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config import ManifestError, find_manifest, read_package_version
from ..logging import get_logger
from .base import VerificationResult

_TITLE_PATTERN = re.compile(r"^# OpenCode Conductor Bridge \(v([\d.]+)\)", re.MULTILINE)
_BRIDGE_REF_PATTERN = re.compile(r'BRIDGE_REF[=:]"?v([\d.]+)"?')
_CHECKOUT_PATTERN = re.compile(r"git checkout v([\d.]+)")
_MATRIX_PATTERN = re.compile(r"\| \*\*v([\d.]+)\*\* \|")
_STABLE_TAG_PATTERN = re.compile(r"latest stable tag \(e\.g\., `v([\d.]+)`\)")
_TEMPLATE_VERSION_PATTERN = re.compile(r"\*\*Bridge Version:\*\* ([\d.]+)")

_logger = get_logger("verify.docs")


@dataclass
class DocsConfig:
    root: Path
    manifest_path: Path
    readme_path: Path
    templates_dir: Path

    @classmethod
    def from_root(cls, root: Path | str) -> "DocsConfig":
        root = Path(root)
        return cls(
            root=root,
            manifest_path=find_manifest(root),
            readme_path=root / "README.md",
            templates_dir=root / "templates" / "opencode" / "command",
        )


@dataclass
class DocsReport:
    """Both check results; ``error`` is set instead when no version could be read."""

    success: bool
    version: Optional[str] = None
    readme_result: Optional[VerificationResult] = None
    templates_result: Optional[VerificationResult] = None
    error: Optional[str] = None


def verify_readme(readme: str, version: str) -> VerificationResult:
    """Compare every versioned example in the README text against ``version``."""
    errors: List[str] = []

    title = _TITLE_PATTERN.search(readme)
    if title is None:
        errors.append("README title missing version")
    elif title.group(1) != version:
        errors.append(f"README title has v{title.group(1)}, expected v{version}")

    for match in _BRIDGE_REF_PATTERN.finditer(readme):
        if match.group(1) != version:
            errors.append(f"BRIDGE_REF example has v{match.group(1)}, expected v{version}")

    checkout = _CHECKOUT_PATTERN.search(readme)
    if checkout is not None and checkout.group(1) != version:
        errors.append(f"git checkout example has v{checkout.group(1)}, expected v{version}")

    matrix = _MATRIX_PATTERN.search(readme)
    if matrix is None:
        errors.append("Compatibility matrix missing current version (bold)")
    elif matrix.group(1) != version:
        errors.append(
            f"Compatibility matrix shows v{matrix.group(1)} as current, expected v{version}"
        )

    stable = _STABLE_TAG_PATTERN.search(readme)
    if stable is not None and stable.group(1) != version:
        errors.append(f'"latest stable tag" example has v{stable.group(1)}, expected v{version}')

    return VerificationResult.from_errors(errors)


def verify_templates(templates_dir: Path, version: str) -> VerificationResult:
    """Flag generated commands whose embedded bridge version differs.

    Files without a version marker are not errors.
    """
    if not templates_dir.is_dir():
        return VerificationResult.from_errors(["templates directory not found"])

    errors: List[str] = []
    for path in sorted(templates_dir.glob("*.md")):
        match = _TEMPLATE_VERSION_PATTERN.search(path.read_text(encoding="utf-8"))
        if match is not None and match.group(1) != version:
            errors.append(f"{path.name} has Bridge Version {match.group(1)}, expected {version}")
    return VerificationResult.from_errors(errors)


def verify_docs(config: DocsConfig) -> DocsReport:
    """Run both checks against the manifest version."""
    try:
        version = read_package_version(config.manifest_path)
    except ManifestError as exc:
        _logger.error("%s", exc)
        return DocsReport(success=False, error=str(exc))
    _logger.info("Package version: %s", version)

    try:
        readme = config.readme_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        readme_result = VerificationResult.from_errors([f"README not found at {config.readme_path}"])
    except UnicodeDecodeError:
        readme_result = VerificationResult.from_errors([f"README is not valid UTF-8: {config.readme_path}"])
    else:
        readme_result = verify_readme(readme, version)
    templates_result = verify_templates(config.templates_dir, version)

    for label, result in (("README", readme_result), ("Template", templates_result)):
        if not result.valid:
            _logger.error("%s version drift detected:", label)
            for error in result.errors:
                _logger.error("  - %s", error)

    return DocsReport(
        success=readme_result.valid and templates_result.valid,
        version=version,
        readme_result=readme_result,
        templates_result=templates_result,
    )


__all__ = [
    "DocsConfig",
    "DocsReport",
    "verify_docs",
    "verify_readme",
    "verify_templates",
]
