"""Subprocess execution for git and installer commands."""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Sequence

from ..logging import get_logger

Executor = Callable[..., str]


class CommandRunner:
    """Runs external commands and reports success as a boolean.

    The executor follows the ``(args, *, cwd, capture_output)`` signature and
    raises ``subprocess.CalledProcessError`` or ``OSError`` on failure; tests
    swap in a recording fake.
    """

    def __init__(self, executor: Executor | None = None) -> None:
        self._executor = executor or self._default_executor
        self.logger = get_logger("git.runner")

    def run(self, args: Sequence[str], cwd: Path | str | None = None) -> bool:
        """Run ``args`` with output connected to the terminal."""
        command = _format(args)
        self.logger.debug("$ %s", command)
        try:
            self._executor(list(args), cwd=_as_path(cwd), capture_output=False)
        except (subprocess.CalledProcessError, OSError):
            self.logger.error("Failed to execute: %s", command)
            return False
        return True

    def run_silent(self, args: Sequence[str], cwd: Path | str | None = None) -> bool:
        """Run ``args`` with output captured and discarded."""
        try:
            self._executor(list(args), cwd=_as_path(cwd), capture_output=True)
        except (subprocess.CalledProcessError, OSError):
            return False
        return True

    def capture(self, args: Sequence[str], cwd: Path | str | None = None) -> str:
        """Return stdout of ``args``; failures propagate to the caller."""
        self.logger.debug("$ %s", _format(args))
        return self._executor(list(args), cwd=_as_path(cwd), capture_output=True)

    def git_available(self) -> bool:
        return self.run_silent(["git", "--version"])

    @staticmethod
    def _default_executor(
        args: Iterable[str],
        *,
        cwd: Path | None = None,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd) if cwd is not None else None,
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def _as_path(cwd: Path | str | None) -> Path | None:
    return Path(cwd) if cwd is not None else None


def _format(args: Sequence[str]) -> str:
    return shlex.join(list(args))


__all__ = ["CommandRunner", "Executor"]
