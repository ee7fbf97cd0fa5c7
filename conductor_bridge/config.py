"""Configuration loading for conductor-bridge (.conductor-bridge.yml)."""

from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

CONFIG_FILENAME = ".conductor-bridge.yml"

DEFAULT_REPO_URL = "https://github.com/bardusco/opencode-conductor-bridge.git"
DEFAULT_REF = "main"
REF_ENV_VAR = "BRIDGE_REF"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


class ManifestError(ConfigError):
    """Raised when the bridge manifest is missing, malformed, or has no version."""


def default_install_dir() -> Path:
    return Path.home() / ".opencode" / "conductor-bridge"


@dataclass
class BridgeSettings:
    """Settings under the ``bridge`` key of .conductor-bridge.yml."""

    repo_url: str = DEFAULT_REPO_URL
    install_dir: Path = field(default_factory=default_install_dir)
    ref: Optional[str] = None
    install_dependencies: bool = True


@dataclass
class BridgeConfig:
    """Represents the high-level settings defined in .conductor-bridge.yml."""

    root: Path
    bridge: BridgeSettings = field(default_factory=BridgeSettings)


def load_config(config_path: Path) -> BridgeConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return BridgeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    bridge_data = _as_dict(data.get("bridge"))
    settings = BridgeSettings()
    if bridge_data:
        settings.repo_url = _as_str(bridge_data.get("repo_url")) or DEFAULT_REPO_URL
        install_dir = _as_str(bridge_data.get("install_dir"))
        if install_dir:
            settings.install_dir = Path(install_dir).expanduser()
        settings.ref = _as_str(bridge_data.get("ref")) or None
        install_deps = _as_bool(bridge_data.get("install_dependencies"))
        if install_deps is not None:
            settings.install_dependencies = install_deps

    return BridgeConfig(root=root, bridge=settings)


def resolve_ref_override(
    cli_ref: Optional[str],
    config: BridgeConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> Optional[str]:
    """Pick the explicit ref: CLI flag, then ``BRIDGE_REF``, then config."""
    if cli_ref:
        return cli_ref
    env = os.environ if environ is None else environ
    env_ref = env.get(REF_ENV_VAR)
    if env_ref:
        return env_ref
    if config is not None and config.bridge.ref:
        return config.bridge.ref
    return None


def find_manifest(root: Path) -> Path:
    """Return the version manifest for a bridge checkout.

    ``pyproject.toml`` wins; ``package.json`` is accepted for bridges that
    still ship the Node manifest.
    """
    pyproject = root / "pyproject.toml"
    if pyproject.exists():
        return pyproject
    package_json = root / "package.json"
    if package_json.exists():
        return package_json
    return pyproject


def read_package_version(manifest_path: Path) -> str:
    """Return the ``version`` field of the manifest or raise ``ManifestError``."""
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(f"Cannot read {manifest_path}: {exc}") from exc

    if manifest_path.suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ManifestError(f"Failed to parse {manifest_path.name}: {exc}") from exc
        version = data.get("version") if isinstance(data, dict) else None
    else:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ManifestError(f"Failed to parse {manifest_path.name}: {exc}") from exc
        version = _as_dict(data.get("project")).get("version")

    if not isinstance(version, str) or not version.strip():
        raise ManifestError(f'{manifest_path.name} missing "version" field')
    return version.strip()


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path.name} is not valid UTF-8: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None
