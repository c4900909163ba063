"""
Shared fixtures for the setup tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from devsetup.resources import DESKTOP_COMPONENTS


def _make_desktop_checkout(root: Path) -> Path:
    """Create a minimal desktop checkout under ``root`` and return it."""

    for name in DESKTOP_COMPONENTS:
        (root / name).mkdir(parents=True)
    html = root / "JASP-Desktop" / "html"
    (html / "js").mkdir(parents=True)
    (html / "index.html").write_text("<html></html>", encoding="utf-8")
    (html / "js" / "main.js").write_text("// js", encoding="utf-8")
    datasets = root / "Resources" / "Data Sets"
    (datasets / "Frequencies").mkdir(parents=True)
    (datasets / "debug.csv").write_text("a,b\n1,2\n", encoding="utf-8")
    (datasets / "Frequencies" / "test.csv").write_text("x\n1\n", encoding="utf-8")
    (datasets / "README.txt").write_text("not a dataset", encoding="utf-8")
    (root / "JASP-R-Interface" / "jaspResults").mkdir()
    return root


@pytest.fixture
def make_desktop_checkout() -> Callable[[Path], Path]:
    """Return a factory building desktop checkouts for tests."""

    return _make_desktop_checkout
