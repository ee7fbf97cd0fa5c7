"""Core data models shared across conductor-bridge components."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# Reserved prefix carried by every file the bridge installs.
COMMAND_PREFIX = "conductor."

CONDUCTOR_ROOT_PLACEHOLDER = "{{CONDUCTOR_ROOT}}"
BRIDGE_ROOT_PLACEHOLDER = "{{BRIDGE_ROOT}}"

# Where Gemini CLI installs the Conductor extension; prompts reference it directly.
GEMINI_EXTENSION_PATH = "~/.gemini/extensions/conductor"


class Step(str, Enum):
    """Named stages of an install run, used to tag failures."""

    PRECONDITION = "precondition"
    CLONE = "clone"
    FETCH = "fetch"
    RESET = "reset"
    CHECKOUT = "checkout"
    CLEAN = "clean"
    SUBMODULE_UPDATE = "submodule-update"
    DEPENDENCY_INSTALL = "dependency-install"
    GENERATION = "generation"
    LINKING = "linking"


class StepError(RuntimeError):
    """Raised when an orchestration step fails and the run must stop."""

    def __init__(self, step: Step, message: str, command: Optional[str] = None) -> None:
        super().__init__(message)
        self.step = step
        self.command = command


@dataclass(frozen=True)
class CommandDefinition:
    """A Conductor command definition read from a TOML file."""

    name: str
    source_file: str
    description: str
    prompt: str


__all__ = [
    "BRIDGE_ROOT_PLACEHOLDER",
    "COMMAND_PREFIX",
    "CONDUCTOR_ROOT_PLACEHOLDER",
    "CommandDefinition",
    "GEMINI_EXTENSION_PATH",
    "Step",
    "StepError",
]
