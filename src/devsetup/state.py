"""Explicit state for the developer environment setup.

:class:`SetupState` owns a tools directory and answers questions such as
"has setup completed?" or "where are the bundled required files?". Callers
create one, call :meth:`SetupState.init`, query or update it while running
the setup, and call :meth:`SetupState.teardown` to forget a previous setup.
The state is persisted as small marker files inside the tools directory so a
later process can query it again.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger(__name__)

HOME_ENV_VAR = "DEVSETUP_HOME"
DEFAULT_HOME = Path("~/.analysis-devtools")

SETUP_COMPLETE_FILE = "setup_complete.txt"
REQUIRED_FILES_LOCATION_FILE = "jasp-required-files_location.txt"
HTML_DIRNAME = "html"
DATASETS_DIRNAME = "jaspData"


def get_default_tools_dir() -> Path:
    """Return the tools directory from ``DEVSETUP_HOME`` or the default."""

    configured = os.environ.get(HOME_ENV_VAR)
    root = Path(configured) if configured else DEFAULT_HOME
    return root.expanduser().resolve()


class SetupState:
    """Setup markers and fetched assets living under one tools directory."""

    def __init__(self, tools_dir: Optional[Path] = None) -> None:
        self.tools_dir = (
            Path(tools_dir).expanduser().resolve()
            if tools_dir is not None
            else get_default_tools_dir()
        )

    def __repr__(self) -> str:
        return f"SetupState({str(self.tools_dir)!r})"

    @property
    def complete_marker(self) -> Path:
        return self.tools_dir / SETUP_COMPLETE_FILE

    @property
    def required_files_marker(self) -> Path:
        return self.tools_dir / REQUIRED_FILES_LOCATION_FILE

    @property
    def html_root(self) -> Path:
        """Directory receiving the copied HTML tree."""

        return self.tools_dir / HTML_DIRNAME

    @property
    def html_dir(self) -> Path:
        """Location of the HTML assets once they are fetched."""

        return self.html_root / "jasp-html"

    @property
    def datasets_dir(self) -> Path:
        return self.tools_dir / DATASETS_DIRNAME

    def init(self) -> "SetupState":
        """Create the tools directory if needed and return ``self``."""

        self.tools_dir.mkdir(parents=True, exist_ok=True)
        return self

    def is_complete(self) -> bool:
        return self.complete_marker.exists()

    def mark_complete(self) -> None:
        """Record that the setup procedure finished."""

        self.init()
        self.complete_marker.write_text("", encoding="utf-8")
        LOGGER.info("Setup complete; marker written to %s", self.complete_marker)

    @property
    def required_files_location(self) -> Optional[Path]:
        """Return the stored bundled-library path, or ``None`` when unset."""

        if not self.required_files_marker.exists():
            return None
        text = self.required_files_marker.read_text(encoding="utf-8").strip()
        return Path(text) if text else None

    def set_required_files_location(self, library_path: Path) -> None:
        """Persist ``library_path`` as the bundled package library."""

        self.init()
        self.required_files_marker.write_text(
            str(library_path) + "\n", encoding="utf-8"
        )
        LOGGER.info("Created %s", self.required_files_marker)

    def clear_required_files_location(self) -> None:
        self.required_files_marker.unlink(missing_ok=True)

    def teardown(self) -> None:
        """Remove every marker and fetched asset from a previous setup."""

        self.complete_marker.unlink(missing_ok=True)
        self.clear_required_files_location()
        shutil.rmtree(self.html_dir, ignore_errors=True)
        shutil.rmtree(self.datasets_dir, ignore_errors=True)
        LOGGER.info("Removed files from previous setup in %s", self.tools_dir)


__all__ = [
    "DEFAULT_HOME",
    "HOME_ENV_VAR",
    "SetupState",
    "get_default_tools_dir",
]
