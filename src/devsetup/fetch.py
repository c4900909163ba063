"""Download the desktop repository and copy its HTML and dataset assets.

The setup needs three things from the desktop repository: the HTML files used
to render results, the example datasets, and the results package bundled in
``JASP-R-Interface``. When no local checkout is supplied the repository
archive for a branch is downloaded and extracted into a work directory.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, List, Optional

import requests
from tqdm import tqdm

from devsetup.resources import is_desktop_dir
from devsetup.state import SetupState

LOGGER = logging.getLogger(__name__)

DESKTOP_ARCHIVE_URL = "https://github.com/jasp-stats/jasp-desktop/archive/{branch}.zip"
CHUNK_SIZE = 1 << 16
# Seconds to wait for a connection or for the next chunk of a response.
REQUEST_TIMEOUT = 30

Downloader = Callable[[str, Path, bool], bool]


def download_archive(url: str, dest: Path, quiet: bool = False) -> bool:
    """Stream ``url`` to ``dest`` and return whether the download succeeded.

    Parameters
    ----------
    url:
        HTTP(S) address of the archive.
    dest:
        Destination file path. Parent directories are created.
    quiet:
        Suppress the progress bar.

    Returns
    -------
    bool
        ``True`` on success. Network and file errors are logged and reported
        as ``False`` so callers can fall back or abort with their own message.
    """

    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        with requests.get(url, stream=True, timeout=REQUEST_TIMEOUT) as response:
            response.raise_for_status()
            length = response.headers.get("Content-Length")
            total = int(length) if length and length.isdigit() else None
            with dest.open("wb") as handle, tqdm(
                total=total,
                unit="B",
                unit_scale=True,
                desc=dest.name,
                disable=quiet,
            ) as progress:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    handle.write(chunk)
                    progress.update(len(chunk))
    except (requests.RequestException, OSError) as err:
        LOGGER.error("Failed to download %s: %s", url, err)
        dest.unlink(missing_ok=True)
        return False
    return True


def extract_archive(zip_path: Path, dest_dir: Path) -> List[Path]:
    """Extract ``zip_path`` into ``dest_dir`` and delete the archive.

    Returns the top-level entries that were created.
    """

    dest_dir.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(zip_path) as archive:
        top_level = sorted({name.split("/", 1)[0] for name in archive.namelist()})
        archive.extractall(dest_dir)
    zip_path.unlink(missing_ok=True)
    return [dest_dir / name for name in top_level if name]


def download_desktop_checkout(
    work_dir: Path,
    *,
    branch: str = "stable",
    quiet: bool = False,
    downloader: Downloader = download_archive,
    url_template: str = DESKTOP_ARCHIVE_URL,
) -> Optional[Path]:
    """Return an extracted desktop checkout under ``work_dir``.

    An existing ``jasp-desktop-<branch>`` directory is reused.
    """

    checkout = work_dir / f"jasp-desktop-{branch}"
    if checkout.is_dir():
        LOGGER.info("Reusing downloaded desktop checkout at %s", checkout)
        return checkout

    zip_path = work_dir / "jasp-desktop.zip"
    url = url_template.format(branch=branch)
    LOGGER.info("Downloading %s", url)
    if not downloader(url, zip_path, quiet):
        return None
    if zip_path.exists():
        extract_archive(zip_path, work_dir)
    return checkout


def copy_html(state: SetupState, desktop_dir: Path) -> Path:
    """Copy ``JASP-Desktop/html`` into the state's HTML directory."""

    source = desktop_dir / "JASP-Desktop" / "html"
    if not source.is_dir():
        raise FileNotFoundError(
            f"Could not move html files from jasp-desktop, is the path correct? {desktop_dir}"
        )
    state.html_root.mkdir(parents=True, exist_ok=True)
    shutil.copytree(source, state.html_dir, dirs_exist_ok=True)
    LOGGER.info("Moved html files to %s", state.html_dir)
    return state.html_dir


def copy_datasets(state: SetupState, desktop_dir: Path) -> List[Path]:
    """Copy every CSV under ``Resources/Data Sets`` into one flat directory."""

    source = desktop_dir / "Resources" / "Data Sets"
    if not source.is_dir():
        raise FileNotFoundError(
            f"Could not move datasets from jasp-desktop, is the path correct? {desktop_dir}"
        )
    state.datasets_dir.mkdir(parents=True, exist_ok=True)
    copied: List[Path] = []
    for csv_path in sorted(source.rglob("*.csv")):
        target = state.datasets_dir / csv_path.name
        shutil.copy2(csv_path, target)
        copied.append(target)
    if copied:
        LOGGER.info("Moved %d datasets to %s", len(copied), state.datasets_dir)
    return copied


def results_package_dir(desktop_dir: Path) -> Path:
    """Return the results package bundled inside a desktop checkout."""

    package_dir = desktop_dir / "JASP-R-Interface" / "jaspResults"
    if not package_dir.is_dir():
        raise FileNotFoundError(f"Could not locate jaspResults inside {desktop_dir}")
    return package_dir


def fetch_desktop_dependencies(
    state: SetupState,
    desktop_dir: Optional[Path] = None,
    *,
    branch: str = "stable",
    work_dir: Optional[Path] = None,
    quiet: bool = False,
    downloader: Downloader = download_archive,
) -> Optional[Path]:
    """Make the HTML files and datasets of the desktop repository available.

    Parameters
    ----------
    state:
        Setup state receiving the copied assets.
    desktop_dir:
        Local desktop checkout. When missing or invalid the archive for
        ``branch`` is downloaded into ``work_dir``.
    branch:
        Branch of the desktop repository to download.
    work_dir:
        Directory for downloads; defaults to the system temp directory.
    quiet:
        Suppress download progress output.
    downloader:
        Callable used to fetch the archive.

    Returns
    -------
    Optional[Path]
        The desktop checkout that was used, or ``None`` when no valid checkout
        could be obtained.
    """

    if desktop_dir is None or not is_desktop_dir(desktop_dir):
        base = work_dir if work_dir is not None else Path(tempfile.gettempdir())
        desktop_dir = download_desktop_checkout(
            base, branch=branch, quiet=quiet, downloader=downloader
        )
        if desktop_dir is None:
            return None

    if not is_desktop_dir(desktop_dir):
        LOGGER.error("%s is not a jasp-desktop checkout", desktop_dir)
        return None

    copy_html(state, desktop_dir)
    copy_datasets(state, desktop_dir)
    return desktop_dir


__all__ = [
    "DESKTOP_ARCHIVE_URL",
    "REQUEST_TIMEOUT",
    "copy_datasets",
    "copy_html",
    "download_archive",
    "download_desktop_checkout",
    "extract_archive",
    "fetch_desktop_dependencies",
    "results_package_dir",
]
