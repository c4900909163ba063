"""CLI entry point for the developer environment setup.

Subcommands:

- ``devsetup setup``: fetch assets and install packages.
- ``devsetup status``: show what a previous setup recorded.
- ``devsetup reset``: remove markers and fetched assets.
"""

from __future__ import annotations

import argparse
import logging
import shlex
from pathlib import Path
from typing import Callable, Optional, Sequence

from devsetup.bootstrap import SetupConfig, SetupError, run_setup
from devsetup.modules import GithubRequestError
from devsetup.resources import InvalidResourceDirError, clean_path_text
from devsetup.state import SetupState
from utils.cli import (
    add_log_file_argument,
    add_verbose_argument,
    ask_yes_no,
    configure_cli_logger,
)

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for ``devsetup``."""

    parser = argparse.ArgumentParser(
        prog="devsetup",
        description="Prepare a local environment for developing analysis modules.",
    )
    parser.add_argument(
        "--tools-dir",
        type=Path,
        default=None,
        help="Directory holding setup markers and assets "
        "(default: $DEVSETUP_HOME or ~/.analysis-devtools).",
    )
    add_verbose_argument(parser)
    add_log_file_argument(parser)

    sub = parser.add_subparsers(dest="cmd", required=True)

    p_setup = sub.add_parser("setup", help="Fetch resources and install packages")
    p_setup.add_argument(
        "--desktop",
        default=None,
        help="Path to a local jasp-desktop clone (downloaded when omitted).",
    )
    p_setup.add_argument(
        "--required-files",
        default=None,
        help="Path to a local jasp-required-files clone (Windows and macOS).",
    )
    p_setup.add_argument(
        "--no-modules",
        action="store_true",
        help="Do not install the analysis modules from GitHub.",
    )
    p_setup.add_argument("--branch", default="stable", help="Desktop branch to fetch.")
    p_setup.add_argument("--quiet", action="store_true", help="Less installer output.")
    p_setup.add_argument(
        "--force",
        action="store_true",
        help="Reinstall packages that are already installed.",
    )
    p_setup.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Redo a completed setup without asking.",
    )

    sub.add_parser("status", help="Show the state of a previous setup")
    sub.add_parser("reset", help="Remove files from a previous setup")
    return parser


def equivalent_command(config: SetupConfig) -> str:
    """Return the ``devsetup setup`` call reproducing ``config``."""

    parts = ["devsetup", "setup"]
    if config.desktop_dir is not None:
        parts += ["--desktop", str(config.desktop_dir)]
    if config.required_files_dir is not None:
        parts += ["--required-files", str(config.required_files_dir)]
    if not config.install_modules:
        parts.append("--no-modules")
    if config.branch != "stable":
        parts += ["--branch", config.branch]
    return " ".join(shlex.quote(part) for part in parts)


def config_from_args(args: argparse.Namespace) -> SetupConfig:
    """Build a :class:`SetupConfig` from parsed ``setup`` arguments."""

    return SetupConfig(
        desktop_dir=clean_path_text(args.desktop) if args.desktop else None,
        required_files_dir=(
            clean_path_text(args.required_files) if args.required_files else None
        ),
        install_modules=not args.no_modules,
        quiet=args.quiet,
        force=args.force,
        branch=args.branch,
    )


def cmd_setup(
    args: argparse.Namespace,
    state: SetupState,
    *,
    confirm: Callable[[str], Optional[bool]] = ask_yes_no,
) -> int:
    """Run the ``setup`` subcommand and return the exit status."""

    if state.is_complete() and not args.yes:
        answer = confirm(
            "You have previously completed the setup procedure, are you sure "
            "you want to do it again?"
        )
        if not answer:
            print("Setup aborted.")
            return 1
        state.teardown()

    config = config_from_args(args)
    try:
        run_setup(state, config)
    except (InvalidResourceDirError, SetupError, GithubRequestError) as err:
        LOGGER.error("%s", err)
        return 1

    print(
        "In the future you can repeat this setup with:\n"
        f"  {equivalent_command(config)}"
    )
    return 0


def cmd_status(state: SetupState) -> int:
    """Print what the setup state records."""

    print(f"Tools directory: {state.tools_dir}")
    print(f"Setup complete: {'yes' if state.is_complete() else 'no'}")
    location = state.required_files_location
    print(f"Required files library: {location if location else '-'}")
    print(f"HTML files: {state.html_dir if state.html_dir.is_dir() else '-'}")
    print(f"Datasets: {state.datasets_dir if state.datasets_dir.is_dir() else '-'}")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI dispatcher."""

    args = build_parser().parse_args(argv)
    configure_cli_logger("devsetup", verbose=args.verbose, log_file=args.log_file)
    state = SetupState(args.tools_dir)

    if args.cmd == "setup":
        return cmd_setup(args, state)
    if args.cmd == "status":
        return cmd_status(state)
    state.teardown()
    print("Removed files from previous setup.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
