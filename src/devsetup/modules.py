"""Discover and install the analysis packages hosted on GitHub.

Analysis modules live as separate repositories in one GitHub organisation. A
repository counts as a module when its file tree contains the package marker
files. Installation shells out to :data:`INSTALLER_COMMAND` with a
``git+https`` requirement so that dependencies between modules are resolved by
the installer. That command is a placeholder: it runs ``pip``, which cannot
build R packages, and is replaced by passing ``installer`` to
:func:`install_package`.
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from dataclasses import dataclass, field
from importlib import metadata
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlencode

import requests
from tqdm import tqdm

from devsetup.fetch import REQUEST_TIMEOUT
from utils.cli import Spinner

LOGGER = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
DEFAULT_ORG = "jasp-stats"
TOKEN_ENV_VAR = "GITHUB_PAT"
MODULE_MARKERS = ("NAMESPACE", "DESCRIPTION", "R", "inst/Description.qml")
BASE_PACKAGES = ("jaspBase", "jaspGraphs")
# Placeholder installer. The packages are R packages; pip stands in for R's
# installer (remotes::install_github) until an R toolchain is wired up.
INSTALLER_COMMAND = (sys.executable, "-m", "pip", "install")

JsonFetcher = Callable[[str, Optional[str]], object]
CommandRunner = Callable[..., subprocess.CompletedProcess]


class GithubRequestError(RuntimeError):
    """Raised when the GitHub API cannot be reached or returns bad data."""


@dataclass
class ModuleInstallReport:
    """Names of the packages that did or did not install."""

    succeeded: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def get_github_token() -> Optional[str]:
    """Return the personal access token from ``GITHUB_PAT`` when set."""

    token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    return token or None


def github_get(url: str, token: Optional[str] = None) -> object:
    """Return the decoded JSON body of a GitHub API ``GET`` request.

    Raises
    ------
    GithubRequestError
        If the request fails or the body is not valid JSON.
    """

    headers = {"Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    try:
        response = requests.get(url, headers=headers, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as err:
        raise GithubRequestError(f"GET {url} failed: {err}") from err
    try:
        return response.json()
    except ValueError as err:
        raise GithubRequestError(f"GET {url} returned invalid JSON: {err}") from err


def list_org_repositories(
    org: str = DEFAULT_ORG,
    *,
    token: Optional[str] = None,
    fetch_json: JsonFetcher = github_get,
    per_page: int = 100,
) -> List[Dict[str, object]]:
    """Return every repository record of ``org``, following pagination."""

    repos: List[Dict[str, object]] = []
    page = 1
    while True:
        query = urlencode({"per_page": per_page, "page": page})
        batch = fetch_json(f"{GITHUB_API}/orgs/{org}/repos?{query}", token)
        if not isinstance(batch, list) or not batch:
            break
        repos.extend(item for item in batch if isinstance(item, dict))
        if len(batch) < per_page:
            break
        page += 1
    return repos


def is_analysis_module(
    org: str,
    repo: str,
    *,
    branch: str = "master",
    token: Optional[str] = None,
    fetch_json: JsonFetcher = github_get,
) -> bool:
    """Return whether ``org/repo`` contains all module marker files."""

    url = f"{GITHUB_API}/repos/{org}/{repo}/git/trees/{branch}?recursive=1"
    try:
        tree = fetch_json(url, token)
    except GithubRequestError as err:
        LOGGER.warning("Could not inspect %s/%s: %s", org, repo, err)
        return False
    if not isinstance(tree, dict) or not isinstance(tree.get("tree"), list):
        return False
    paths = {entry.get("path") for entry in tree["tree"] if isinstance(entry, dict)}
    return all(marker in paths for marker in MODULE_MARKERS)


def is_installed(name: str) -> bool:
    """Return whether a distribution called ``name`` is installed."""

    try:
        metadata.distribution(name)
    except metadata.PackageNotFoundError:
        return False
    return True


def github_requirement(org: str, repo: str, token: Optional[str] = None) -> str:
    """Return a pip requirement installing ``org/repo`` from GitHub."""

    auth = f"{token}@" if token else ""
    return f"{repo} @ git+https://{auth}github.com/{org}/{repo}"


def install_package(
    requirement: str,
    *,
    quiet: bool = False,
    force: bool = False,
    runner: CommandRunner = subprocess.run,
    installer: Sequence[str] = INSTALLER_COMMAND,
) -> bool:
    """Install ``requirement`` and return whether it succeeded.

    Parameters
    ----------
    requirement:
        A local package directory or a ``name @ git+https://...`` requirement.
    quiet, force:
        Passed to the installer as ``--quiet`` and ``--force-reinstall``.
    runner:
        Callable with the signature of :func:`subprocess.run`.
    installer:
        Command prefix that installs one requirement. The default is
        :data:`INSTALLER_COMMAND`, a stand-in for the R package installer.
    """

    command = list(installer)
    if quiet:
        command.append("--quiet")
    if force:
        command.append("--force-reinstall")
    command.append(requirement)

    LOGGER.info("Installing %s", requirement.split(" @ ", 1)[0])
    completed = runner(command, check=False)
    if completed.returncode != 0:
        LOGGER.error(
            "Installing %s failed with exit status %s",
            requirement.split(" @ ", 1)[0],
            completed.returncode,
        )
        return False
    return True


def install_github_packages(
    names: Iterable[str],
    *,
    org: str = DEFAULT_ORG,
    quiet: bool = False,
    force: bool = False,
    token: Optional[str] = None,
    runner: CommandRunner = subprocess.run,
) -> ModuleInstallReport:
    """Install the named ``org`` repositories, skipping installed ones."""

    report = ModuleInstallReport()
    pending = [name for name in names if force or not is_installed(name)]
    for name in tqdm(pending, desc="Installing", unit="pkg", disable=quiet):
        requirement = github_requirement(org, name, token)
        if install_package(requirement, quiet=quiet, force=force, runner=runner):
            report.succeeded.append(name)
        else:
            report.failed.append(name)
    return report


def discover_modules(
    org: str = DEFAULT_ORG,
    *,
    token: Optional[str] = None,
    fetch_json: JsonFetcher = github_get,
    exclude: Sequence[str] = BASE_PACKAGES,
) -> List[str]:
    """Return the names of the analysis module repositories in ``org``."""

    with Spinner(f"Listing repositories of {org}", logger=LOGGER) as spinner:
        repos = list_org_repositories(org, token=token, fetch_json=fetch_json)
        names = []
        for index, repo in enumerate(repos, start=1):
            name = repo.get("name")
            if not isinstance(name, str) or name in exclude:
                continue
            spinner.update(f"Inspecting {org}/{name} ({index}/{len(repos)})")
            if is_analysis_module(org, name, token=token, fetch_json=fetch_json):
                names.append(name)
        spinner.update(f"Found {len(names)} modules in {org}")
    return sorted(names)


def install_modules(
    org: str = DEFAULT_ORG,
    *,
    quiet: bool = False,
    force: bool = False,
    token: Optional[str] = None,
    fetch_json: JsonFetcher = github_get,
    runner: CommandRunner = subprocess.run,
) -> ModuleInstallReport:
    """Install every analysis module of ``org`` that is not installed yet."""

    token = token or get_github_token()
    names = discover_modules(org, token=token, fetch_json=fetch_json)
    report = install_github_packages(
        names, org=org, quiet=quiet, force=force, token=token, runner=runner
    )
    if report.succeeded:
        print(f"Successful installs: {', '.join(report.succeeded)}")
    if report.failed:
        print(f"The following packages could not be installed: {', '.join(report.failed)}")
    return report


__all__ = [
    "BASE_PACKAGES",
    "DEFAULT_ORG",
    "GithubRequestError",
    "INSTALLER_COMMAND",
    "ModuleInstallReport",
    "discover_modules",
    "get_github_token",
    "github_get",
    "github_requirement",
    "install_github_packages",
    "install_modules",
    "install_package",
    "is_analysis_module",
    "is_installed",
    "list_org_repositories",
]
