"""Run the full developer environment setup.

The steps are sequential:

1. Validate the optional local checkouts.
2. Record (or forget) the bundled required-files library.
3. Fetch HTML files and datasets from the desktop repository and install
   its results package.
4. Install the base packages and, optionally, every analysis module.
5. Mark the setup as complete.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from devsetup.fetch import (
    Downloader,
    download_archive,
    fetch_desktop_dependencies,
    results_package_dir,
)
from devsetup.modules import (
    BASE_PACKAGES,
    DEFAULT_ORG,
    CommandRunner,
    ModuleInstallReport,
    install_github_packages,
    install_modules,
    install_package,
)
from devsetup.resources import (
    InvalidResourceDirError,
    find_required_pkgs,
    get_os_name,
    is_desktop_dir,
    is_required_files_dir,
    validate_resource_dir,
)
from devsetup.state import SetupState

LOGGER = logging.getLogger(__name__)


class SetupError(RuntimeError):
    """Raised when the setup cannot be completed."""


@dataclass(frozen=True)
class SetupConfig:
    """Options controlling a setup run."""

    desktop_dir: Optional[Path] = None
    required_files_dir: Optional[Path] = None
    install_modules: bool = True
    quiet: bool = False
    force: bool = False
    branch: str = "stable"
    org: str = DEFAULT_ORG
    work_dir: Optional[Path] = None


def record_required_files(
    state: SetupState, required_files_dir: Optional[Path], os_name: Optional[str] = None
) -> Optional[Path]:
    """Store the bundled library of ``required_files_dir`` in ``state``.

    Passing ``None`` clears a previously stored location.

    Raises
    ------
    InvalidResourceDirError
        If the checkout holds no bundled package library.
    """

    if required_files_dir is None:
        state.clear_required_files_location()
        return None
    library = find_required_pkgs(required_files_dir, os_name)
    if library is None:
        raise InvalidResourceDirError(
            f"Could not locate the R packages within {required_files_dir}"
        )
    state.set_required_files_location(library)
    return library


def run_setup(
    state: SetupState,
    config: SetupConfig,
    *,
    downloader: Downloader = download_archive,
    runner: CommandRunner = subprocess.run,
) -> Optional[ModuleInstallReport]:
    """Run every setup step for ``config`` and mark ``state`` complete.

    Returns
    -------
    Optional[ModuleInstallReport]
        Report of the module installation, or ``None`` when modules were not
        requested.

    Raises
    ------
    SetupError
        If the desktop dependencies could not be fetched or a base package
        failed to install.
    InvalidResourceDirError
        If a provided checkout path is invalid.
    """

    os_name = get_os_name()
    desktop_dir = validate_resource_dir(config.desktop_dir, is_desktop_dir, "jasp-desktop")
    required_dir = validate_resource_dir(
        config.required_files_dir,
        lambda path: is_required_files_dir(path, os_name),
        "jasp-required-files",
    )

    state.init()
    print("Fetching resources...")
    record_required_files(state, required_dir, os_name)

    checkout = fetch_desktop_dependencies(
        state,
        desktop_dir,
        branch=config.branch,
        work_dir=config.work_dir,
        quiet=config.quiet,
        downloader=downloader,
    )
    if checkout is None:
        raise SetupError(
            "Setup could not be completed: the jasp-desktop repository could not "
            "be fetched, so the required dependencies are not installed. If this "
            "persists, clone jasp-stats/jasp-desktop manually and pass its path "
            "with --desktop."
        )

    if not install_package(
        str(results_package_dir(checkout)),
        quiet=config.quiet,
        force=config.force,
        runner=runner,
    ):
        raise SetupError("Could not install jaspResults from the desktop checkout.")

    base = install_github_packages(
        BASE_PACKAGES,
        org=config.org,
        quiet=config.quiet,
        force=config.force,
        runner=runner,
    )
    if not base.ok:
        raise SetupError(f"Could not install base packages: {', '.join(base.failed)}")

    report = None
    if config.install_modules:
        report = install_modules(
            config.org, quiet=config.quiet, force=config.force, runner=runner
        )

    state.mark_complete()
    print("Setup complete")
    return report


__all__ = ["SetupConfig", "SetupError", "record_required_files", "run_setup"]
