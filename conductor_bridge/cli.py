"""CLI entrypoints for conductor-bridge commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config, resolve_ref_override
from .generator import DefinitionError, SyncConfig, sync_commands
from .installer import InstallOptions, install
from .linker import LinkConfig, link_project
from .logging import configure_logging
from .uninstaller import uninstall
from .verify import CompatConfig, DocsConfig, verify_compat, verify_docs


def _add_logging_options(parser: argparse.ArgumentParser, *, top_level: bool = False) -> None:
    # Subcommands repeat the flags but must not reset values given before the subcommand.
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False if top_level else argparse.SUPPRESS,
        help="Log git commands and other DEBUG detail.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None if top_level else argparse.SUPPRESS,
        help="Also write log records to this file.",
    )


def _add_project_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the target project (defaults to current directory).",
    )


def _add_root_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--root",
        default=".",
        help="Path to the bridge checkout (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conductor-bridge",
        description="Bridge Gemini Conductor commands into OpenCode projects.",
    )
    _add_logging_options(parser, top_level=True)
    subparsers = parser.add_subparsers(dest="command", required=True)

    install_parser = subparsers.add_parser(
        "install",
        help="Fetch the bridge, generate commands, and link them into a project.",
    )
    _add_logging_options(install_parser)
    _add_project_argument(install_parser)
    install_parser.add_argument(
        "--ref",
        default=None,
        help="Branch, tag, or commit to install (overrides BRIDGE_REF).",
    )
    install_parser.add_argument(
        "--install-dir",
        default=None,
        help="Where the bridge checkout lives (defaults to ~/.opencode/conductor-bridge).",
    )
    install_parser.add_argument(
        "--repo-url",
        default=None,
        help="Bridge repository to clone.",
    )
    install_parser.add_argument(
        "--skip-deps",
        action="store_true",
        help="Do not install the bridge's Python dependencies.",
    )

    sync_parser = subparsers.add_parser(
        "sync",
        help="Regenerate command templates from the vendored Conductor checkout.",
    )
    _add_logging_options(sync_parser)
    _add_root_option(sync_parser)

    link_parser = subparsers.add_parser(
        "link",
        help="Copy generated commands into a project's .opencode/command directory.",
    )
    _add_logging_options(link_parser)
    _add_project_argument(link_parser)
    link_parser.add_argument(
        "--bridge-root",
        default=".",
        help="Path to the bridge checkout (defaults to current directory).",
    )

    uninstall_parser = subparsers.add_parser(
        "uninstall",
        help="Remove bridge commands from a project.",
    )
    _add_logging_options(uninstall_parser)
    _add_project_argument(uninstall_parser)

    docs_parser = subparsers.add_parser(
        "verify-docs",
        help="Check README and templates against the package version.",
    )
    _add_logging_options(docs_parser)
    _add_root_option(docs_parser)

    compat_parser = subparsers.add_parser(
        "verify-compat",
        help="Check the README compatibility matrix against the vendored Conductor SHA.",
    )
    _add_logging_options(compat_parser)
    _add_root_option(compat_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for conductor-bridge commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    if args.command == "install":
        _run_install(parser, args)
    elif args.command == "sync":
        root = _resolve(args.root)
        try:
            result = sync_commands(SyncConfig.from_root(root))
        except (ConfigError, DefinitionError) as exc:
            parser.exit(1, f"conductor-bridge sync failed: {exc}\n")
        print(f"Generated {len(result.commands_generated)} commands in {_relativize(result.output_dir)}")
    elif args.command == "link":
        try:
            result = link_project(LinkConfig.from_paths(_resolve(args.bridge_root), _resolve(args.path)))
        except (OSError, UnicodeDecodeError) as exc:
            parser.exit(1, f"conductor-bridge link failed: {exc}\n")
        print(f"Installed {len(result.files_installed)} commands to {_relativize(result.target_dir)}")
    elif args.command == "uninstall":
        result = uninstall(_resolve(args.path))
        removed = len(result.target_files_removed) + len(result.legacy_files_removed)
        print(f"Uninstall complete ({removed} files removed)")
    elif args.command == "verify-docs":
        report = verify_docs(DocsConfig.from_root(_resolve(args.root)))
        if report.error:
            parser.exit(1, f"{report.error}\n")
        if not report.success:
            parser.exit(1, "Documentation drift detected. Run `conductor-bridge sync` and update the README.\n")
        print(f"All documentation matches v{report.version}")
    elif args.command == "verify-compat":
        report = verify_compat(CompatConfig.from_root(_resolve(args.root)))
        if not report.success:
            parser.exit(1, f"{report.error}\n")
        print(f"v{report.version} is correctly documented with Conductor SHA {report.current_sha}")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_install(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    target = _resolve(args.path)
    try:
        config = load_config(target)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    options = InstallOptions(
        repo_url=args.repo_url or config.bridge.repo_url,
        install_dir=Path(args.install_dir).expanduser().resolve()
        if args.install_dir
        else config.bridge.install_dir,
        target_project=target,
        bridge_ref=resolve_ref_override(args.ref, config),
        install_dependencies=config.bridge.install_dependencies and not args.skip_deps,
    )
    result = install(options)
    if not result.success:
        step = result.failed_step.value if result.failed_step else "unknown"
        parser.exit(
            1,
            f"conductor-bridge install failed ({step}): {result.error}\n"
            "Run with --verbose for more details.\n",
        )
    print(f"Installed bridge {result.ref} into {_relativize(target)}")


def _resolve(path: str) -> Path:
    return Path(path).expanduser().resolve()


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
