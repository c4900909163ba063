"""
Tests for the setup state, resource validation and asset fetching.
"""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest
import requests

from devsetup import fetch
from devsetup.fetch import (
    download_archive,
    extract_archive,
    fetch_desktop_dependencies,
    results_package_dir,
)
from devsetup.resources import (
    InvalidResourceDirError,
    find_required_pkgs,
    is_desktop_dir,
    is_required_files_dir,
    validate_resource_dir,
)
from devsetup.state import SetupState, get_default_tools_dir


class FakeResponse:
    """Stand-in for a streamed ``requests`` response."""

    def __init__(self, payload: bytes = b"", status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code
        self.headers = {"Content-Length": str(len(payload))}

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.payload), chunk_size):
            yield self.payload[start : start + chunk_size]


def fake_get(response: FakeResponse, calls: list):
    """Return a ``requests.get`` replacement that records its arguments."""

    def get(url, **kwargs):
        calls.append((url, kwargs))
        return response

    return get


def test_state_lifecycle(tmp_path: Path) -> None:
    """init, mark_complete, location round trip and teardown."""

    state = SetupState(tmp_path / "tools").init()
    assert state.tools_dir.is_dir()
    assert not state.is_complete()
    assert state.required_files_location is None

    state.mark_complete()
    state.set_required_files_location(tmp_path / "lib")
    state.datasets_dir.mkdir()
    state.html_dir.mkdir(parents=True)

    assert state.is_complete()
    assert state.required_files_location == tmp_path / "lib"

    state.teardown()

    assert not state.is_complete()
    assert state.required_files_location is None
    assert not state.datasets_dir.exists()
    assert not state.html_dir.exists()


def test_default_tools_dir_honours_environment(tmp_path: Path, monkeypatch) -> None:
    """DEVSETUP_HOME should override the default tools directory."""

    monkeypatch.setenv("DEVSETUP_HOME", str(tmp_path / "custom"))

    assert get_default_tools_dir() == (tmp_path / "custom").resolve()
    assert SetupState().tools_dir == (tmp_path / "custom").resolve()


def test_is_desktop_dir_requires_all_components(
    tmp_path: Path, make_desktop_checkout
) -> None:
    """A checkout missing one component directory is rejected."""

    checkout = make_desktop_checkout(tmp_path / "desktop")
    assert is_desktop_dir(checkout)

    (checkout / "JASP-Engine").rmdir()
    assert not is_desktop_dir(checkout)
    assert not is_desktop_dir(tmp_path / "missing")


def test_required_files_dir_depends_on_os(tmp_path: Path) -> None:
    """Windows and macOS use different layouts; Linux has none."""

    (tmp_path / "R" / "library").mkdir(parents=True)

    assert is_required_files_dir(tmp_path, "windows")
    assert not is_required_files_dir(tmp_path, "osx")
    with pytest.raises(InvalidResourceDirError):
        is_required_files_dir(tmp_path, "linux")


def test_find_required_pkgs_picks_newest_osx_version(tmp_path: Path) -> None:
    """The newest R version holding the marker package is returned."""

    versions = tmp_path / "Frameworks" / "R.framework" / "Versions"
    for version in ("3.6", "4.0"):
        (versions / version / "Resources" / "library" / "Rcpp").mkdir(parents=True)
    (versions / "Current").mkdir()

    library = find_required_pkgs(tmp_path, "osx")

    assert library == versions / "4.0" / "Resources" / "library"


def test_find_required_pkgs_without_marker_package(tmp_path: Path) -> None:
    """A library without the marker package is not accepted."""

    (tmp_path / "R" / "library" / "stats").mkdir(parents=True)

    assert find_required_pkgs(tmp_path, "windows") is None

    (tmp_path / "R" / "library" / "Rcpp").mkdir()
    assert find_required_pkgs(tmp_path, "windows") == tmp_path / "R" / "library"


def test_validate_resource_dir_strips_quotes(
    tmp_path: Path, make_desktop_checkout
) -> None:
    """Quoted paths pasted from a terminal are cleaned before validation."""

    checkout = make_desktop_checkout(tmp_path / "desktop")

    resolved = validate_resource_dir(f'"{checkout}"', is_desktop_dir, "jasp-desktop")

    assert resolved == checkout.resolve()
    assert validate_resource_dir(None, is_desktop_dir, "jasp-desktop") is None
    with pytest.raises(InvalidResourceDirError, match="jasp-desktop"):
        validate_resource_dir(tmp_path, is_desktop_dir, "jasp-desktop")


def test_download_archive_streams_with_timeout(tmp_path: Path, monkeypatch) -> None:
    """The body is written chunk by chunk and the request carries a timeout."""

    calls: list = []
    payload = b"x" * (fetch.CHUNK_SIZE + 10)
    monkeypatch.setattr(fetch.requests, "get", fake_get(FakeResponse(payload), calls))
    dest = tmp_path / "out" / "archive.zip"

    assert download_archive("https://example.org/a.zip", dest, quiet=True)

    assert dest.read_bytes() == payload
    assert calls == [
        (
            "https://example.org/a.zip",
            {"stream": True, "timeout": fetch.REQUEST_TIMEOUT},
        )
    ]


def test_download_archive_reports_http_error(tmp_path: Path, monkeypatch) -> None:
    """An error status is reported as False without leaving a file behind."""

    response = FakeResponse(b"not found", status_code=404)
    monkeypatch.setattr(fetch.requests, "get", fake_get(response, []))
    dest = tmp_path / "out" / "archive.zip"

    assert not download_archive("https://example.org/a.zip", dest, quiet=True)
    assert not dest.exists()


def test_download_archive_reports_timeout(tmp_path: Path, monkeypatch) -> None:
    """A request that times out is reported as False."""

    def timing_out(url, **kwargs):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr(fetch.requests, "get", timing_out)
    dest = tmp_path / "archive.zip"

    assert not download_archive("https://example.org/a.zip", dest, quiet=True)
    assert not dest.exists()


def test_extract_archive_returns_top_level_entries(tmp_path: Path) -> None:
    """Extraction removes the zip and lists what it created."""

    zip_path = tmp_path / "a.zip"
    with zipfile.ZipFile(zip_path, "w") as archive:
        archive.writestr("pkg-master/DESCRIPTION", "Package: pkg")

    created = extract_archive(zip_path, tmp_path / "out")

    assert created == [tmp_path / "out" / "pkg-master"]
    assert (tmp_path / "out" / "pkg-master" / "DESCRIPTION").exists()
    assert not zip_path.exists()


def test_fetch_from_local_checkout_copies_assets(
    tmp_path: Path, make_desktop_checkout
) -> None:
    """HTML is copied as a tree and datasets are flattened."""

    checkout = make_desktop_checkout(tmp_path / "desktop")
    state = SetupState(tmp_path / "tools").init()

    used = fetch_desktop_dependencies(state, checkout)

    assert used == checkout
    assert (state.html_dir / "index.html").exists()
    assert (state.html_dir / "js" / "main.js").exists()
    assert sorted(p.name for p in state.datasets_dir.iterdir()) == [
        "debug.csv",
        "test.csv",
    ]
    assert results_package_dir(checkout).name == "jaspResults"


def test_fetch_downloads_archive_when_no_checkout(
    tmp_path: Path, monkeypatch, make_desktop_checkout
) -> None:
    """Without a local checkout the branch archive is downloaded and used."""

    source = make_desktop_checkout(tmp_path / "src" / "jasp-desktop-stable")
    zip_path = tmp_path / "desktop.zip"
    with zipfile.ZipFile(zip_path, "w") as archive:
        for path in source.rglob("*"):
            archive.write(path, path.relative_to(source.parent).as_posix())

    requested = []
    response = FakeResponse(zip_path.read_bytes())
    monkeypatch.setattr(fetch.requests, "get", fake_get(response, requested))

    state = SetupState(tmp_path / "tools").init()
    work_dir = tmp_path / "work"

    used = fetch_desktop_dependencies(state, None, work_dir=work_dir, quiet=True)

    assert used == work_dir / "jasp-desktop-stable"
    assert [url for url, _ in requested] == [
        "https://github.com/jasp-stats/jasp-desktop/archive/stable.zip"
    ]
    assert (state.datasets_dir / "debug.csv").exists()


def test_fetch_returns_none_when_download_fails(tmp_path: Path) -> None:
    """A failed download leaves nothing to copy."""

    state = SetupState(tmp_path / "tools").init()

    used = fetch_desktop_dependencies(
        state,
        None,
        work_dir=tmp_path / "work",
        downloader=lambda url, dest, quiet: False,
    )

    assert used is None
    assert not state.datasets_dir.exists()
