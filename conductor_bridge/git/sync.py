"""Clone or reset a bridge checkout to a resolved reference."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence, Tuple

from ..logging import get_logger
from ..models import Step, StepError
from .runner import CommandRunner

# Reset targets tried after checkout, in order. Branches track their remote
# counterpart; tags and raw commits only resolve as themselves.
ResetStrategy = Callable[[str], str]

RESET_STRATEGIES: Tuple[ResetStrategy, ...] = (
    lambda ref: f"origin/{ref}",
    lambda ref: ref,
)


class RepositorySynchronizer:
    """Brings a local working copy to a given ref.

    Every failing step raises :class:`StepError` tagged with the step; steps
    already applied are not rolled back.
    """

    def __init__(
        self,
        runner: CommandRunner | None = None,
        reset_strategies: Sequence[ResetStrategy] = RESET_STRATEGIES,
    ) -> None:
        self.runner = runner or CommandRunner()
        self.reset_strategies = tuple(reset_strategies)
        self.logger = get_logger("git.sync")

    def synchronize(self, repo_url: str, workdir: Path, ref: str) -> None:
        workdir = Path(workdir)
        if not workdir.exists():
            self.logger.info("Cloning bridge into %s", workdir)
            self._step(Step.CLONE, ["git", "clone", "--recursive", repo_url, str(workdir)])
        else:
            self.logger.info("Updating existing checkout at %s", workdir)
            self._reset_existing(workdir, ref)

        self.logger.info("Synchronizing with ref: %s", ref)
        self._step(Step.CHECKOUT, ["git", "checkout", ref], cwd=workdir)
        self._reset_to_ref(workdir, ref)
        self._step(Step.CLEAN, ["git", "clean", "-fd"], cwd=workdir)
        self._step(
            Step.SUBMODULE_UPDATE,
            ["git", "submodule", "update", "--init", "--recursive"],
            cwd=workdir,
        )

    def _reset_existing(self, workdir: Path, ref: str) -> None:
        # Leftover am/merge state may or may not exist.
        self.runner.run_silent(["git", "am", "--abort"], cwd=workdir)
        self.runner.run_silent(["git", "merge", "--abort"], cwd=workdir)

        self._step(Step.RESET, ["git", "reset", "--hard", "HEAD"], cwd=workdir)
        self._step(Step.CLEAN, ["git", "clean", "-fd"], cwd=workdir)
        self._step(
            Step.FETCH,
            ["git", "fetch", "--tags", "--force", "origin", ref],
            cwd=workdir,
        )
        self._step(Step.RESET, ["git", "reset", "--hard", "FETCH_HEAD"], cwd=workdir)
        self._step(Step.CLEAN, ["git", "clean", "-fd"], cwd=workdir)

    def _reset_to_ref(self, workdir: Path, ref: str) -> None:
        attempted = []
        for strategy in self.reset_strategies:
            target = strategy(ref)
            attempted.append(target)
            if self.runner.run_silent(["git", "reset", "--hard", target], cwd=workdir):
                self.logger.debug("Reset %s to %s", workdir, target)
                return
        raise StepError(
            Step.RESET,
            f"Could not reset to {ref} (tried {', '.join(attempted)})",
            command=f"git reset --hard {attempted[-1]}" if attempted else None,
        )

    def _step(self, step: Step, args: Sequence[str], cwd: Path | None = None) -> None:
        if not self.runner.run(args, cwd=cwd):
            command = " ".join(args)
            raise StepError(step, f"Failed to execute: {command}", command=command)


__all__ = ["RESET_STRATEGIES", "RepositorySynchronizer"]
