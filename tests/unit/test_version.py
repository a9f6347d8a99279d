"""Unit coverage for the project version helper."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

import pytest

from ngtax.backend.version import (
    PYPROJECT_PATH,
    get_project_version,
    read_pyproject_version,
)


@pytest.fixture(autouse=True)
def _clear_version_cache():
    get_project_version.cache_clear()
    yield
    get_project_version.cache_clear()


def test_get_project_version_prefers_installed_metadata(monkeypatch) -> None:
    monkeypatch.setattr(metadata, "version", lambda package: "9.9.9")

    assert get_project_version() == "9.9.9"


def test_get_project_version_falls_back_to_pyproject(monkeypatch) -> None:
    def raise_package_not_found(_: str) -> str:
        raise metadata.PackageNotFoundError

    monkeypatch.setattr(metadata, "version", raise_package_not_found)

    assert get_project_version() == read_pyproject_version(PYPROJECT_PATH)


def test_read_pyproject_version_only_reads_project_table(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(
        '[tool.other]\nversion = "0.0.1"\n\n[project]\nname = "demo"\n'
        'version = "1.2.3"  # released\n',
        encoding="utf-8",
    )

    assert read_pyproject_version(pyproject) == "1.2.3"


def test_read_pyproject_version_requires_a_version(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "demo"\n', encoding="utf-8")

    with pytest.raises(RuntimeError):
        read_pyproject_version(pyproject)

    with pytest.raises(RuntimeError):
        read_pyproject_version(tmp_path / "missing.toml")
