"""End-to-end install: fetch the bridge, generate commands, link the project."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .config import DEFAULT_REPO_URL, ConfigError, default_install_dir, resolve_ref_override
from .generator import DefinitionError, SyncConfig, SyncResult, sync_commands
from .git.refs import get_desired_ref
from .git.runner import CommandRunner
from .git.sync import RepositorySynchronizer
from .linker import LinkConfig, LinkResult, link_project
from .logging import get_logger
from .models import Step, StepError


@dataclass
class InstallOptions:
    """Inputs for :func:`install`.

    ``bridge_ref`` defaults to ``BRIDGE_REF``; when set, tag resolution is skipped.
    """

    repo_url: str = DEFAULT_REPO_URL
    install_dir: Path = field(default_factory=default_install_dir)
    target_project: Path = field(default_factory=Path.cwd)
    bridge_ref: Optional[str] = field(default_factory=lambda: resolve_ref_override(None))
    install_dependencies: bool = True


@dataclass
class InstallResult:
    success: bool
    install_dir: Path
    target_project: Path
    ref: Optional[str] = None
    failed_step: Optional[Step] = None
    error: Optional[str] = None
    sync: Optional[SyncResult] = None
    link: Optional[LinkResult] = None


class Installer:
    """Runs the install sequence; the first failing step ends the run."""

    def __init__(
        self,
        runner: CommandRunner | None = None,
        synchronizer: RepositorySynchronizer | None = None,
    ) -> None:
        self.runner = runner or CommandRunner()
        self.synchronizer = synchronizer or RepositorySynchronizer(self.runner)
        self.logger = get_logger("installer")

    def install(self, options: InstallOptions) -> InstallResult:
        install_dir = Path(options.install_dir).expanduser()
        target_project = Path(options.target_project).expanduser()
        result = InstallResult(success=False, install_dir=install_dir, target_project=target_project)

        try:
            self._check_preconditions(install_dir)
            result.ref = get_desired_ref(options.repo_url, options.bridge_ref, self.runner)
            self.synchronizer.synchronize(options.repo_url, install_dir, result.ref)
            if options.install_dependencies:
                self._install_dependencies(install_dir)
            result.sync = self._generate(install_dir)
            result.link = self._link(install_dir, target_project)
        except StepError as exc:
            result.failed_step = exc.step
            result.error = str(exc)
            self.logger.error("Install failed during %s: %s", exc.step.value, exc)
            return result

        result.success = True
        self.logger.info("Ready! The /conductor.* commands are now available in %s", target_project)
        return result

    def _check_preconditions(self, install_dir: Path) -> None:
        if not self.runner.git_available():
            raise StepError(Step.PRECONDITION, "git not found")
        install_dir.parent.mkdir(parents=True, exist_ok=True)

    def _install_dependencies(self, install_dir: Path) -> None:
        self.logger.info("Installing bridge dependencies...")
        args = [sys.executable, "-m", "pip", "install", "--quiet", str(install_dir)]
        if not self.runner.run(args, cwd=install_dir):
            raise StepError(Step.DEPENDENCY_INSTALL, "Failed to install bridge dependencies")

    def _generate(self, install_dir: Path) -> SyncResult:
        self.logger.info("Syncing Conductor commands...")
        try:
            return sync_commands(SyncConfig.from_root(install_dir), self.runner)
        except (ConfigError, DefinitionError, OSError) as exc:
            raise StepError(Step.GENERATION, str(exc)) from exc

    def _link(self, install_dir: Path, target_project: Path) -> LinkResult:
        self.logger.info("Linking to project: %s", target_project)
        try:
            return link_project(LinkConfig.from_paths(install_dir, target_project))
        except (OSError, UnicodeDecodeError) as exc:
            raise StepError(Step.LINKING, str(exc)) from exc


def install(options: InstallOptions, runner: CommandRunner | None = None) -> InstallResult:
    return Installer(runner).install(options)


__all__ = ["InstallOptions", "InstallResult", "Installer", "install"]
