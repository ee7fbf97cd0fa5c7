"""Remove bridge-installed commands from a consumer project."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .linker import command_dir, legacy_command_dir
from .logging import get_logger
from .models import COMMAND_PREFIX

_logger = get_logger("uninstaller")


@dataclass
class RemovalResult:
    directory_exists: bool
    files_removed: List[str] = field(default_factory=list)


@dataclass
class UninstallResult:
    """Files removed per directory, plus whether Conductor state was left behind."""

    target_dir: Path
    legacy_dir: Path
    state_dir: Path
    target_files_removed: List[str] = field(default_factory=list)
    legacy_files_removed: List[str] = field(default_factory=list)
    state_dir_exists: bool = False


def remove_conductor_files(directory: Path) -> RemovalResult:
    """Delete ``conductor.*`` files in ``directory``; everything else stays."""
    directory = Path(directory)
    if not directory.is_dir():
        return RemovalResult(directory_exists=False)

    result = RemovalResult(directory_exists=True)
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.name.startswith(COMMAND_PREFIX):
            path.unlink()
            result.files_removed.append(path.name)
            _logger.info("Removed %s from %s", path.name, directory)
    if not result.files_removed:
        _logger.info("No conductor bridge commands found in %s", directory)
    return result


def uninstall(target_project: Path | str) -> UninstallResult:
    project = Path(target_project)
    result = UninstallResult(
        target_dir=command_dir(project),
        legacy_dir=legacy_command_dir(project),
        state_dir=project / "conductor",
    )
    result.target_files_removed = remove_conductor_files(result.target_dir).files_removed
    result.legacy_files_removed = remove_conductor_files(result.legacy_dir).files_removed

    # Conductor's own tracks and plans live here; never delete them.
    result.state_dir_exists = result.state_dir.is_dir()
    if result.state_dir_exists:
        _logger.info(
            "The conductor state directory at %s still exists. "
            "If you want to remove it, run: rm -rf %s",
            result.state_dir,
            result.state_dir,
        )
    return result


__all__ = ["RemovalResult", "UninstallResult", "remove_conductor_files", "uninstall"]
