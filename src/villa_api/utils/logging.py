"""
Project metadata for log records: the service name and version.

The installed distribution wins. In a source checkout (tests, `uvicorn --reload`)
the nearest pyproject.toml above this package is read instead, once per process.
"""
import tomllib
from functools import lru_cache
from importlib import metadata as importlib_metadata
from pathlib import Path
from typing import Any

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    """The first pyproject.toml in `start` or one of its `max_up - 1` parents."""
    for directory in [start, *start.parents][:max_up]:
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


@lru_cache(maxsize=8)
def _pyproject_data(start: Path, max_up: int) -> dict:
    pyproject = find_pyproject(start, max_up)
    if pyproject is None:
        return {}
    try:
        with pyproject.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def get_pyproject_value(key: str, start: str | Path | None = None, max_up: int = 5, default: Any = None) -> Any:
    """
    Look up a dotted key such as "project.version"; `default` when the file or key is missing.
    """
    start_path = Path(start).resolve() if start is not None else _PACKAGE_DIR
    node: Any = _pyproject_data(start_path, max_up)
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def get_project_name(start: str | Path | None = None, default: str | None = None) -> str | None:
    return get_pyproject_value("project.name", start=start, default=default)


def get_project_version(start: str | Path | None = None, default: str = "unknown") -> str:
    name = get_project_name(start=start)
    if name:
        try:
            return importlib_metadata.version(name)
        except importlib_metadata.PackageNotFoundError:
            pass
    return get_pyproject_value("project.version", start=start, default=default)


__all__ = [
    "find_pyproject",
    "get_pyproject_value",
    "get_project_name",
    "get_project_version",
]
