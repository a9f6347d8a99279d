"""Expose the ngtax project version for health and metadata endpoints."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

DISTRIBUTION_NAME: Final = "ngtax"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed distribution version, else the one in ``pyproject.toml``."""

    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return read_pyproject_version(PYPROJECT_PATH)


def read_pyproject_version(path: Path) -> str:
    """Return ``version`` from the ``[project]`` table of ``path``.

    Source checkouts run without package metadata, so the project file is the
    fallback source of truth.
    """

    if not path.exists():
        raise RuntimeError(f"Unable to locate project metadata at {path}")

    in_project_table = False
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if line.startswith("["):
            in_project_table = line == "[project]"
            continue
        if not in_project_table:
            continue
        key, separator, value = line.partition("=")
        if separator and key.strip() == "version":
            version = value.strip().strip("\"'")
            if version:
                return version
            break

    raise RuntimeError(f"No [project] version declared in {path.name}")


__all__ = ["get_project_version", "read_pyproject_version"]
