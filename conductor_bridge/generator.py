"""Generate OpenCode command markdown from vendored Conductor definitions."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

from jinja2 import Environment, FileSystemLoader

from .config import find_manifest, read_package_version
from .git.refs import SHORT_SHA_LENGTH, get_submodule_sha
from .git.runner import CommandRunner
from .logging import get_logger
from .models import (
    COMMAND_PREFIX,
    CONDUCTOR_ROOT_PLACEHOLDER,
    GEMINI_EXTENSION_PATH,
    CommandDefinition,
)

CONDUCTOR_REPO_URL = "https://github.com/gemini-cli-extensions/conductor"
DEFINITION_SUFFIX = ".toml"
STYLEGUIDE_SUFFIX = ".md"
STYLEGUIDE_FILENAME = f"{COMMAND_PREFIX}styleguide.md"
STYLEGUIDE_DESCRIPTION = "Access language-specific code styleguides bridged from Conductor"

_TEMPLATES_DIR = Path(__file__).with_name("templates")

_logger = get_logger("generator")


class DefinitionError(RuntimeError):
    """Raised when a command definition cannot be parsed."""


@dataclass
class SyncConfig:
    """Source and output locations for a generation run."""

    conductor_source: Path
    commands_source: Path
    templates_source: Path
    output_dir: Path
    manifest_path: Path

    @classmethod
    def from_root(cls, root: Path | str) -> "SyncConfig":
        root = Path(root)
        conductor = root / "vendor" / "conductor"
        return cls(
            conductor_source=conductor,
            commands_source=conductor / "commands" / "conductor",
            templates_source=conductor / "templates" / "code_styleguides",
            output_dir=root / "templates" / "opencode" / "command",
            manifest_path=find_manifest(root),
        )


@dataclass
class SyncResult:
    """Files written by :func:`sync_commands`."""

    output_dir: Path
    commands_generated: List[str] = field(default_factory=list)
    styleguide_generated: bool = False


def yaml_escape(text: str) -> str:
    """Escape a value for a double-quoted YAML scalar on a single line.

    Backslashes go first so the escapes added for quotes are not doubled.
    """
    escaped = text.replace("\\", "\\\\")
    escaped = escaped.replace('"', '\\"')
    return escaped.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


def replace_extension_path(prompt: str) -> str:
    """Point Gemini extension paths at the bridge's vendored Conductor copy."""
    return prompt.replace(GEMINI_EXTENSION_PATH, CONDUCTOR_ROOT_PLACEHOLDER)


def load_definition(path: Path) -> CommandDefinition:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise DefinitionError(f"{path.name} is not valid UTF-8: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise DefinitionError(f"Failed to parse {path.name}: {exc}") from exc
    return CommandDefinition(
        name=path.stem,
        source_file=path.name,
        description=_as_text(data.get("description")),
        prompt=_as_text(data.get("prompt")),
    )


def generate_command_markdown(
    name: str,
    description: str,
    prompt: str,
    version: str,
    sha: str,
    source_file: str,
) -> str:
    """Render one bridged command document."""
    template = _environment().get_template("command.md.j2")
    return template.render(
        name=name,
        description=yaml_escape(description),
        prompt=replace_extension_path(prompt),
        version=version,
        sha=sha,
        short_sha=sha[:SHORT_SHA_LENGTH],
        source_file=source_file,
        source_url=f"{CONDUCTOR_REPO_URL}/blob/{sha}/commands/conductor/{source_file}",
    )


def generate_styleguide_markdown(languages: Sequence[str], version: str, sha: str) -> str:
    """Render the single aggregate document listing available styleguides."""
    template = _environment().get_template("styleguide.md.j2")
    return template.render(
        description=yaml_escape(STYLEGUIDE_DESCRIPTION),
        languages=list(languages),
        version=version,
        sha=sha,
        short_sha=sha[:SHORT_SHA_LENGTH],
        placeholder=CONDUCTOR_ROOT_PLACEHOLDER,
        source_url=f"{CONDUCTOR_REPO_URL}/tree/{sha}/templates/code_styleguides",
    )


def sync_commands(config: SyncConfig, runner: CommandRunner | None = None) -> SyncResult:
    """Regenerate every command document and the styleguide aggregate."""
    version = read_package_version(config.manifest_path)
    if not config.commands_source.is_dir():
        raise DefinitionError(f"Commands directory not found: {config.commands_source}")
    sha = get_submodule_sha(config.conductor_source, runner)
    _logger.debug("Bridge version %s, Conductor commit %s", version, sha)

    config.output_dir.mkdir(parents=True, exist_ok=True)
    result = SyncResult(output_dir=config.output_dir)

    for path in _list_files(config.commands_source, DEFINITION_SUFFIX):
        definition = load_definition(path)
        content = generate_command_markdown(
            definition.name,
            definition.description,
            definition.prompt,
            version,
            sha,
            definition.source_file,
        )
        filename = f"{COMMAND_PREFIX}{definition.name}.md"
        out_path = config.output_dir / filename
        out_path.write_text(content, encoding="utf-8")
        result.commands_generated.append(filename)
        _logger.info("Generated %s", out_path)

    if config.templates_source.is_dir():
        languages = [path.stem for path in _list_files(config.templates_source, STYLEGUIDE_SUFFIX)]
        out_path = config.output_dir / STYLEGUIDE_FILENAME
        out_path.write_text(generate_styleguide_markdown(languages, version, sha), encoding="utf-8")
        result.styleguide_generated = True
        _logger.info("Generated %s (%d styleguides)", out_path, len(languages))
    else:
        _logger.debug("No styleguides at %s; skipping aggregate", config.templates_source)

    return result


def _list_files(directory: Path, suffix: str) -> List[Path]:
    if not directory.is_dir():
        return []
    return sorted(
        path for path in directory.iterdir() if path.is_file() and path.name.endswith(suffix)
    )


def _as_text(value: object) -> str:
    return value if isinstance(value, str) else ""


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


__all__ = [
    "DefinitionError",
    "SyncConfig",
    "SyncResult",
    "generate_command_markdown",
    "generate_styleguide_markdown",
    "load_definition",
    "replace_extension_path",
    "sync_commands",
    "yaml_escape",
]
