"""Install generated commands into a consumer project's .opencode directory."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .logging import get_logger
from .models import BRIDGE_ROOT_PLACEHOLDER, CONDUCTOR_ROOT_PLACEHOLDER

_logger = get_logger("linker")


def command_dir(project: Path) -> Path:
    return Path(project) / ".opencode" / "command"


def legacy_command_dir(project: Path) -> Path:
    """Older bridge releases installed into the misnamed ``commands`` directory."""
    return Path(project) / ".opencode" / "commands"


@dataclass
class LinkConfig:
    """Paths used when linking a bridge checkout into a project."""

    bridge_root: Path
    vendor_conductor: Path
    commands_dir: Path
    target_project: Path

    @classmethod
    def from_paths(cls, bridge_root: Path | str, target_project: Path | str) -> "LinkConfig":
        bridge_root = Path(bridge_root)
        return cls(
            bridge_root=bridge_root,
            vendor_conductor=bridge_root / "vendor" / "conductor",
            commands_dir=bridge_root / "templates" / "opencode" / "command",
            target_project=Path(target_project),
        )


@dataclass(frozen=True)
class LegacyMigration:
    moved: bool
    warning: bool


@dataclass
class LinkResult:
    """Outcome of :func:`link_project`."""

    target_dir: Path
    files_installed: List[str] = field(default_factory=list)
    legacy_dir_moved: bool = False
    legacy_dir_warning: bool = False


def handle_legacy_directory(legacy_dir: Path, target_dir: Path) -> LegacyMigration:
    """Rename the legacy directory when safe, otherwise leave both and warn."""
    if not legacy_dir.exists():
        return LegacyMigration(moved=False, warning=False)
    if not target_dir.exists():
        _logger.info("Moving legacy directory %s to %s", legacy_dir, target_dir)
        legacy_dir.rename(target_dir)
        return LegacyMigration(moved=True, warning=False)
    _logger.warning(
        "Found legacy directory %s next to %s; remove it to avoid duplicates: rm -rf %s",
        legacy_dir,
        target_dir,
        legacy_dir,
    )
    return LegacyMigration(moved=False, warning=True)


def process_template_content(content: str, vendor_conductor: Path | str, bridge_root: Path | str) -> str:
    """Substitute both root placeholders with absolute paths."""
    content = content.replace(CONDUCTOR_ROOT_PLACEHOLDER, str(vendor_conductor))
    return content.replace(BRIDGE_ROOT_PLACEHOLDER, str(bridge_root))


def link_project(config: LinkConfig) -> LinkResult:
    """Copy every generated command into the project, resolving placeholders."""
    target_dir = command_dir(config.target_project)
    migration = handle_legacy_directory(legacy_command_dir(config.target_project), target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    result = LinkResult(
        target_dir=target_dir,
        legacy_dir_moved=migration.moved,
        legacy_dir_warning=migration.warning,
    )
    sources = sorted(
        path for path in config.commands_dir.iterdir() if path.is_file() and path.suffix == ".md"
    )
    for source in sources:
        content = process_template_content(
            source.read_text(encoding="utf-8"),
            config.vendor_conductor,
            config.bridge_root,
        )
        (target_dir / source.name).write_text(content, encoding="utf-8")
        result.files_installed.append(source.name)
        _logger.info("Installed %s to %s", source.name, target_dir)
    return result


__all__ = [
    "LegacyMigration",
    "LinkConfig",
    "LinkResult",
    "command_dir",
    "handle_legacy_directory",
    "legacy_command_dir",
    "link_project",
    "process_template_content",
]
