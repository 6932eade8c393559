"""
Project metadata lookups used by the log formatters (service name, version).

Values come from the installed distribution when available, else from the
nearest pyproject.toml above this package.
"""
from pathlib import Path
from importlib import metadata as importlib_metadata
from typing import Any
import sys

if sys.version_info >= (3, 11):
    import tomllib as _toml_loader
else:
    import tomli as _toml_loader

DEFAULT_PROJECT_NAME = "escolas-api"


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    p = start
    for _ in range(max_up):
        candidate = p / "pyproject.toml"
        if candidate.exists():
            return candidate
        if p.parent == p:
            break
        p = p.parent
    return None


def load_pyproject_data(pyproject_path: Path) -> dict:
    # tomllib/tomli want a binary file object
    with pyproject_path.open("rb") as f:
        return _toml_loader.load(f)


def get_pyproject_value(
    key: str,
    start: str | Path | None = None,
    max_up: int = 5,
    default: Any = None,
) -> Any:
    """
    Return the value for the dot-separated `key` (e.g. "project.version") from
    the nearest pyproject.toml, or `default` when the file or key is missing or
    the file can't be parsed.
    """
    start_path = Path(start).resolve() if start is not None else Path(__file__).resolve().parent

    pyproject = find_pyproject(start=start_path, max_up=max_up)
    if not pyproject or not key:
        return default

    try:
        data = load_pyproject_data(pyproject)
    except (OSError, _toml_loader.TOMLDecodeError):
        return default

    cur = data
    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def get_project_name(start: Path | str | None = None, default: str = DEFAULT_PROJECT_NAME) -> str:
    return get_pyproject_value("project.name", start=start, default=default)


def get_project_version(start: Path | str | None = None, default: str = "unknown") -> str:
    """
    Installed distribution version first (containers, wheels), then
    project.version from pyproject.toml, then `default`.
    """
    try:
        return importlib_metadata.version(get_project_name(start=start))
    except importlib_metadata.PackageNotFoundError:
        pass

    val = get_pyproject_value("project.version", start=start, default=None)
    return val if val is not None else default
