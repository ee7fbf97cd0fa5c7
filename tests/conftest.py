from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest

from tests._fixtures.bridge_builder import BridgeBuilder


@pytest.fixture
def bridge_builder(tmp_path: Path) -> BridgeBuilder:
    """Provide a bridge checkout rooted at the pytest tmp_path."""
    return BridgeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_bridge_logger() -> Iterator[None]:
    # CLI runs detach the package logger from root, which hides records from caplog.
    yield
    logger = logging.getLogger("conductor_bridge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
