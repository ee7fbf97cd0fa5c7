"""Tests for command and styleguide generation."""

from __future__ import annotations

from pathlib import Path

import pytest

from conductor_bridge.config import ManifestError
from conductor_bridge.generator import (
    DefinitionError,
    SyncConfig,
    generate_command_markdown,
    generate_styleguide_markdown,
    load_definition,
    sync_commands,
    yaml_escape,
)
from tests._fixtures.bridge_builder import BridgeBuilder
from tests._fixtures.fake_git import FakeExecutor


def _runner(sha: str = "abc123def456") -> FakeExecutor:
    return FakeExecutor(outputs={"git rev-parse HEAD": f"{sha}\n"})


def test_sync_config_paths_from_root(tmp_path: Path) -> None:
    config = SyncConfig.from_root(tmp_path)

    conductor = tmp_path / "vendor" / "conductor"
    assert config.conductor_source == conductor
    assert config.commands_source == conductor / "commands" / "conductor"
    assert config.templates_source == conductor / "templates" / "code_styleguides"
    assert config.output_dir == tmp_path / "templates" / "opencode" / "command"
    assert config.manifest_path == tmp_path / "pyproject.toml"


def test_sync_config_accepts_package_json(tmp_path: Path) -> None:
    (tmp_path / "package.json").write_text('{"version": "1.0.0"}', encoding="utf-8")

    assert SyncConfig.from_root(tmp_path).manifest_path == tmp_path / "package.json"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("path\\to\\file", "path\\\\to\\\\file"),
        ('say "hello"', 'say \\"hello\\"'),
        ("line1\nline2\r\nline3", "line1 line2 line3"),
        ('path\\file\n"test"', 'path\\\\file \\"test\\"'),
        ('\\"', '\\\\\\"'),
        ("", ""),
    ],
)
def test_yaml_escape(raw: str, expected: str) -> None:
    escaped = yaml_escape(raw)

    assert escaped == expected
    assert "\n" not in escaped


def test_command_markdown_structure() -> None:
    md = generate_command_markdown(
        "setup",
        "Setup the project",
        "Run setup instructions",
        "1.0.0",
        "abc123def456",
        "setup.toml",
    )

    assert md.startswith('---\ndescription: "Setup the project"\n---\n')
    assert "# Conductor Bridge: setup" in md
    assert "**Bridge Version:** 1.0.0" in md
    assert "**Conductor Source:** [setup.toml](" in md
    assert "/blob/abc123def456/commands/conductor/setup.toml" in md
    assert "`abc123d`" in md
    assert "Run setup instructions" in md
    assert "origin_file: setup.toml" in md
    assert "origin_sha: abc123def456" in md
    assert md.endswith("-->\n")


def test_command_markdown_rewrites_extension_path() -> None:
    prompt = "Read ~/.gemini/extensions/conductor/x and ~/.gemini/extensions/conductor/y"
    md = generate_command_markdown("test", "desc", prompt, "1.0.0", "sha", "test.toml")

    assert "{{CONDUCTOR_ROOT}}/x and {{CONDUCTOR_ROOT}}/y" in md
    assert "~/.gemini/extensions/conductor" not in md


def test_command_markdown_escapes_description() -> None:
    md = generate_command_markdown("test", 'Say "hello"\nworld', "prompt", "1.0.0", "sha", "test.toml")

    assert 'description: "Say \\"hello\\" world"' in md


def test_styleguide_markdown_lists_languages() -> None:
    md = generate_styleguide_markdown(["javascript", "python", "typescript"], "1.0.0", "abc123")

    assert 'description: "Access language-specific code styleguides bridged from Conductor"' in md
    assert "# Conductor Styleguide" in md
    assert "### Available Styleguides" in md
    assert "- javascript\n- python\n- typescript\n" in md
    assert "**Bridge Version:** 1.0.0" in md
    assert "{{CONDUCTOR_ROOT}}/templates/code_styleguides/<language>.md" in md
    assert "available_languages: javascript, python, typescript" in md


def test_styleguide_markdown_handles_empty_list() -> None:
    md = generate_styleguide_markdown([], "1.0.0", "sha")

    assert "### Available Styleguides" in md
    assert "available_languages: \n" in md


def test_load_definition_defaults_missing_fields(tmp_path: Path) -> None:
    path = tmp_path / "status.toml"
    path.write_text('description = "Show status"\n', encoding="utf-8")

    definition = load_definition(path)

    assert definition.name == "status"
    assert definition.source_file == "status.toml"
    assert definition.description == "Show status"
    assert definition.prompt == ""


def test_load_definition_rejects_malformed_toml(tmp_path: Path) -> None:
    path = tmp_path / "broken.toml"
    path.write_text('description = "unterminated\n', encoding="utf-8")

    with pytest.raises(DefinitionError):
        load_definition(path)


def test_load_definition_rejects_invalid_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bad.toml"
    path.write_bytes(b'description = "\xff\xfe"\n')

    with pytest.raises(DefinitionError, match="bad.toml is not valid UTF-8"):
        load_definition(path)


def test_sync_generates_commands_and_styleguide(bridge_builder: BridgeBuilder) -> None:
    bridge_builder.manifest("1.2.3")
    bridge_builder.command("setup", "Setup", "Read ~/.gemini/extensions/conductor/x")
    bridge_builder.command("implement", "Implement", "Do the work")
    bridge_builder.write({"vendor/conductor/commands/conductor/README.md": "not a command"})
    bridge_builder.styleguides(["typescript.md", "javascript.md", "README.txt"])
    executor = _runner()

    result = sync_commands(SyncConfig.from_root(bridge_builder.path()), executor.runner())

    assert result.commands_generated == ["conductor.implement.md", "conductor.setup.md"]
    assert result.styleguide_generated is True
    setup = (bridge_builder.output_dir / "conductor.setup.md").read_text(encoding="utf-8")
    assert "{{CONDUCTOR_ROOT}}/x" in setup
    assert "~/.gemini/extensions/conductor" not in setup
    assert "**Bridge Version:** 1.2.3" in setup
    assert "origin_sha: abc123def456" in setup
    styleguide = (bridge_builder.output_dir / "conductor.styleguide.md").read_text(encoding="utf-8")
    assert "- javascript\n- typescript\n" in styleguide
    assert "- README" not in styleguide
    assert executor.calls[0][1] == bridge_builder.conductor


def test_sync_overwrites_previous_output(bridge_builder: BridgeBuilder) -> None:
    bridge_builder.manifest()
    bridge_builder.command("setup", "Setup", "new prompt")
    bridge_builder.output_dir.mkdir(parents=True)
    (bridge_builder.output_dir / "conductor.setup.md").write_text("stale", encoding="utf-8")

    sync_commands(SyncConfig.from_root(bridge_builder.path()), _runner().runner())

    content = (bridge_builder.output_dir / "conductor.setup.md").read_text(encoding="utf-8")
    assert "stale" not in content
    assert "new prompt" in content


def test_sync_skips_styleguide_without_directory(bridge_builder: BridgeBuilder) -> None:
    bridge_builder.manifest()
    bridge_builder.command("setup", "Setup", "prompt")

    result = sync_commands(SyncConfig.from_root(bridge_builder.path()), _runner().runner())

    assert result.styleguide_generated is False
    assert not (bridge_builder.output_dir / "conductor.styleguide.md").exists()


def test_sync_records_main_when_sha_unavailable(bridge_builder: BridgeBuilder) -> None:
    bridge_builder.manifest()
    bridge_builder.command("setup", "Setup", "prompt")
    executor = FakeExecutor(failures=["git rev-parse"])

    sync_commands(SyncConfig.from_root(bridge_builder.path()), executor.runner())

    content = (bridge_builder.output_dir / "conductor.setup.md").read_text(encoding="utf-8")
    assert "origin_sha: main" in content


def test_sync_requires_manifest_version(bridge_builder: BridgeBuilder) -> None:
    bridge_builder.manifest(version=None)
    bridge_builder.command("setup", "Setup", "prompt")

    with pytest.raises(ManifestError, match='missing "version" field'):
        sync_commands(SyncConfig.from_root(bridge_builder.path()), _runner().runner())

    assert not bridge_builder.output_dir.exists()


def test_sync_requires_commands_directory(bridge_builder: BridgeBuilder) -> None:
    bridge_builder.manifest()

    with pytest.raises(DefinitionError):
        sync_commands(SyncConfig.from_root(bridge_builder.path()), _runner().runner())
