"""Tests for the repository synchronizer."""

from __future__ import annotations

from pathlib import Path

import pytest

from conductor_bridge.git.sync import RepositorySynchronizer
from conductor_bridge.models import Step, StepError
from tests._fixtures.fake_git import FakeExecutor

URL = "https://example.com/bridge.git"


def test_clones_when_workdir_missing(tmp_path: Path) -> None:
    workdir = tmp_path / "bridge"
    executor = FakeExecutor()

    RepositorySynchronizer(executor.runner()).synchronize(URL, workdir, "v1.0.0")

    assert executor.commands == [
        f"git clone --recursive {URL} {workdir}",
        "git checkout v1.0.0",
        "git reset --hard origin/v1.0.0",
        "git clean -fd",
        "git submodule update --init --recursive",
    ]
    assert executor.calls[0][1] is None
    assert all(cwd == workdir for _, cwd, _ in executor.calls[1:])


def test_resets_existing_checkout(tmp_path: Path) -> None:
    executor = FakeExecutor()

    RepositorySynchronizer(executor.runner()).synchronize(URL, tmp_path, "main")

    assert executor.commands == [
        "git am --abort",
        "git merge --abort",
        "git reset --hard HEAD",
        "git clean -fd",
        "git fetch --tags --force origin main",
        "git reset --hard FETCH_HEAD",
        "git clean -fd",
        "git checkout main",
        "git reset --hard origin/main",
        "git clean -fd",
        "git submodule update --init --recursive",
    ]


def test_ignores_abort_failures(tmp_path: Path) -> None:
    executor = FakeExecutor(failures=["git am --abort", "git merge --abort"])

    RepositorySynchronizer(executor.runner()).synchronize(URL, tmp_path, "main")

    assert executor.commands[-1] == "git submodule update --init --recursive"


def test_tag_ref_falls_back_to_direct_reset(tmp_path: Path) -> None:
    executor = FakeExecutor(failures=["git reset --hard origin/v1.2.0"])

    RepositorySynchronizer(executor.runner()).synchronize(URL, tmp_path, "v1.2.0")

    assert "git reset --hard origin/v1.2.0" in executor.commands
    assert "git reset --hard v1.2.0" in executor.commands
    assert executor.commands[-1] == "git submodule update --init --recursive"


def test_unresolvable_ref_is_a_reset_error(tmp_path: Path) -> None:
    executor = FakeExecutor(failures=["git reset --hard origin/ghost", "git reset --hard ghost"])

    with pytest.raises(StepError) as excinfo:
        RepositorySynchronizer(executor.runner()).synchronize(URL, tmp_path, "ghost")

    assert excinfo.value.step is Step.RESET
    assert "git submodule update --init --recursive" not in executor.commands


@pytest.mark.parametrize(
    ("failure", "step"),
    [
        ("git fetch", Step.FETCH),
        ("git reset --hard HEAD", Step.RESET),
        ("git clean", Step.CLEAN),
        ("git checkout", Step.CHECKOUT),
        ("git submodule", Step.SUBMODULE_UPDATE),
    ],
)
def test_step_failures_are_tagged(tmp_path: Path, failure: str, step: Step) -> None:
    executor = FakeExecutor(failures=[failure])

    with pytest.raises(StepError) as excinfo:
        RepositorySynchronizer(executor.runner()).synchronize(URL, tmp_path, "main")

    assert excinfo.value.step is step
    assert excinfo.value.command is not None
    assert executor.commands[-1].startswith(failure)


def test_clone_failure_stops_run(tmp_path: Path) -> None:
    executor = FakeExecutor(failures=["git clone"])

    with pytest.raises(StepError) as excinfo:
        RepositorySynchronizer(executor.runner()).synchronize(URL, tmp_path / "missing", "main")

    assert excinfo.value.step is Step.CLONE
    assert len(executor.calls) == 1
