"""Deterministic string stabilization helpers for RecordKit."""

from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path
import posixpath
import re
import tomllib

PACKAGE_MANIFEST_NAMES = ("pyproject.toml", "setup.cfg", "setup.py")

TYPE_TAG_WILDCARD = "**"

_MIN_PATH_SEPARATORS = 3
_MAX_PATH_LENGTH = 4096

_LINE_SUFFIX_RE = re.compile(r":\d+(?:\$[0-9a-fA-F]+)?$")

_log = logging.getLogger(__name__)


def stabilize_path(value: str) -> str:
    """Rewrite an absolute path under a package root relative to that root.

    Strings that do not look like absolute paths, or that live outside any
    recognizable package, are returned unchanged.
    """
    if not _looks_like_absolute_path(value):
        return value

    if value.endswith("/"):
        suffix = "/"
        base = value[:-1]
    elif not Path(value).is_dir():
        suffix = "/" + posixpath.basename(value)
        base = posixpath.dirname(value)
    else:
        suffix = ""
        base = value

    while base and base != "/":
        label = package_root_label(base)
        if label is not None:
            return f"[{label}]{suffix}"
        suffix = "/" + posixpath.basename(base) + suffix
        base = posixpath.dirname(base)

    return value


def stabilize_type_tag(tag: str) -> str:
    """Replace a trailing line number and unique suffix with a wildcard."""
    return _LINE_SUFFIX_RE.sub(f":{TYPE_TAG_WILDCARD}", tag)


@lru_cache(maxsize=1024)
def package_root_label(directory: str) -> str | None:
    """Return the package label if `directory` holds a package manifest."""
    root = Path(directory)
    for manifest_name in PACKAGE_MANIFEST_NAMES:
        manifest = root / manifest_name
        if not manifest.is_file():
            continue
        if manifest_name == "pyproject.toml":
            name = _read_pyproject_name(manifest)
            if name:
                return name
        return root.name
    return None


def clear_package_root_cache() -> None:
    """Forget manifest lookups, so new or removed package manifests are seen."""
    package_root_label.cache_clear()


def find_package_root(directory: str | Path) -> Path | None:
    """Walk parent directories until one holds a package manifest."""
    candidate = Path(directory).resolve()
    for current in (candidate, *candidate.parents):
        if package_root_label(str(current)) is not None:
            return current
    return None


def _looks_like_absolute_path(value: str) -> bool:
    if not value.startswith("/") or len(value) > _MAX_PATH_LENGTH:
        return False
    if "\n" in value or "\x00" in value:
        return False
    return value.count("/") >= _MIN_PATH_SEPARATORS


def _read_pyproject_name(manifest: Path) -> str | None:
    try:
        data = tomllib.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as error:
        _log.debug("unable to read package name from %s: %s", manifest, error)
        return None

    project_name = data.get("project", {}).get("name")
    if isinstance(project_name, str) and project_name.strip():
        return project_name.strip()

    poetry_name = data.get("tool", {}).get("poetry", {}).get("name")
    if isinstance(poetry_name, str) and poetry_name.strip():
        return poetry_name.strip()

    return None
