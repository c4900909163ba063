"""Validation of local checkouts used by the setup procedure.

Two kinds of local directories can be handed to the setup:

- a clone of the desktop repository, recognised by its top-level
  ``JASP-*`` component directories;
- a clone of the required-files repository holding the R library bundled
  with the application on Windows and macOS.
"""

from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Callable, Optional

LOGGER = logging.getLogger(__name__)

DESKTOP_COMPONENTS = ("JASP-Common", "JASP-Desktop", "JASP-Engine", "JASP-R-Interface")
MARKER_PACKAGE = "Rcpp"


class InvalidResourceDirError(ValueError):
    """Raised when a provided checkout path does not hold the expected files."""


def get_os_name() -> str:
    """Return ``"windows"``, ``"osx"`` or ``"linux"`` for the running system."""

    system = platform.system().lower()
    if system.startswith("win"):
        return "windows"
    if system == "darwin":
        return "osx"
    return "linux"


def is_desktop_dir(path: Path) -> bool:
    """Return whether ``path`` looks like a desktop repository checkout."""

    path = Path(path)
    if not path.is_dir():
        return False
    return all((path / name).is_dir() for name in DESKTOP_COMPONENTS)


def is_required_files_dir(path: Path, os_name: Optional[str] = None) -> bool:
    """Return whether ``path`` looks like a required-files checkout.

    Raises
    ------
    InvalidResourceDirError
        On Linux, where the required files are not used.
    """

    os_name = os_name or get_os_name()
    path = Path(path)
    if os_name == "windows":
        return (path / "R" / "library").is_dir()
    if os_name == "osx":
        return (path / "Frameworks" / "R.framework").is_dir()
    raise InvalidResourceDirError("jasp-required-files are not used on Linux")


def has_bundled_package(library: Path, package: str = MARKER_PACKAGE) -> bool:
    """Return whether ``library`` exists and contains ``package``."""

    return library.is_dir() and (library / package).exists()


def _version_key(name: str) -> float:
    try:
        return float(name)
    except ValueError:
        return float("-inf")


def find_required_pkgs(path: Path, os_name: Optional[str] = None) -> Optional[Path]:
    """Return the bundled package library inside a required-files checkout.

    On macOS the newest R version under ``Frameworks/R.framework/Versions`` is
    used. ``None`` is returned when no library with the marker package exists.
    """

    os_name = os_name or get_os_name()
    path = Path(path)
    if not is_required_files_dir(path, os_name):
        return None

    if os_name == "windows":
        library = path / "R" / "library"
    else:
        versions_root = path / "Frameworks" / "R.framework" / "Versions"
        if not versions_root.is_dir():
            return None
        versions = [entry.name for entry in versions_root.iterdir() if entry.is_dir()]
        if not versions:
            return None
        newest = max(versions, key=_version_key)
        library = versions_root / newest / "Resources" / "library"

    if has_bundled_package(library):
        return library
    return None


def clean_path_text(text: str) -> Path:
    """Strip quotes pasted around a path and return it resolved."""

    return Path(text.replace('"', "").replace("'", "").strip()).expanduser().resolve()


def validate_resource_dir(
    path: Optional[Path | str],
    validator: Callable[[Path], bool],
    title: str,
) -> Optional[Path]:
    """Return a cleaned ``path`` after checking it with ``validator``.

    ``None`` passes through unchanged so callers can treat the resource as
    optional.

    Raises
    ------
    InvalidResourceDirError
        If ``validator`` rejects the path.
    """

    if path is None:
        return None
    resolved = clean_path_text(str(path))
    if not validator(resolved):
        raise InvalidResourceDirError(
            f"Invalid path provided for {title}; could not find the correct "
            f"resources within: {resolved}"
        )
    LOGGER.debug("Validated %s at %s", title, resolved)
    return resolved


__all__ = [
    "DESKTOP_COMPONENTS",
    "InvalidResourceDirError",
    "clean_path_text",
    "find_required_pkgs",
    "get_os_name",
    "has_bundled_package",
    "is_desktop_dir",
    "is_required_files_dir",
    "validate_resource_dir",
]
