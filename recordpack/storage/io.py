"""Recording file read/write utilities for `.yml` recordings."""

from __future__ import annotations

import logging
from pathlib import Path
import re
from typing import Any, Callable, Protocol

import yaml

from recordpack.core.models import VALUES_KEY, Recording
from recordpack.core.types import Tree
from recordpack.storage.exceptions import (
    RecordingFormatError,
    RecordingHeaderMismatchError,
    RecordingNotFoundError,
)
from recordpack.storage.serialization import dump_yaml, load_yaml

RECORDING_SUFFIX = ".yml"

_UNSAFE_NAME_CHARS_RE = re.compile(r"[^\w\-]")
_STORED_NAME_RE = re.compile(r"^[\w\-.]+$")

HeaderBuilder = Callable[[], dict[str, Any]]

_log = logging.getLogger(__name__)


class AssertionValueStore(Protocol):
    """Persists the recorded values of each test call."""

    def save(self, name: str, values: list[Tree]) -> None:
        ...

    def load(self, name: str) -> list[Tree]:
        ...

    def stored_names(self) -> list[str]:
        ...


class YamlAssertionValueStore:
    """Stores assertion values in one YAML file per test name."""

    def __init__(self, base_path: str | Path, build_header: HeaderBuilder) -> None:
        self._base_path = Path(base_path)
        self._build_header = build_header

    @property
    def base_path(self) -> Path:
        return self._base_path

    def file_for(self, name: str) -> Path:
        return self._base_path / f"{sanitize_recording_name(name)}{RECORDING_SUFFIX}"

    def save(self, name: str, values: list[Tree]) -> None:
        """Write the values; an empty list removes any stale recording."""
        target = self.file_for(name)
        if not values:
            if target.exists():
                _log.debug("removing recording without values: %s", target)
                target.unlink()
            return

        payload = dict(self._build_header())
        payload[VALUES_KEY] = list(values)
        write_yaml_document(payload, target)

    def load(self, name: str) -> list[Tree]:
        target = self.file_for(name)
        payload = read_yaml_document(target)

        stored_header = {key: value for key, value in payload.items() if key != VALUES_KEY}
        actual_header = self._build_header()
        if stored_header != actual_header:
            raise RecordingHeaderMismatchError(
                f"Recording header mismatch in {target}: "
                f"stored {stored_header!r}, expected {actual_header!r}"
            )

        values = payload.get(VALUES_KEY)
        if not isinstance(values, list):
            raise RecordingFormatError(f"Recording has no 'values' list: {target}")
        if not values:
            raise RecordingFormatError(
                f"The list of recorded values is empty, the file should not exist: {target}"
            )
        return values

    def stored_names(self) -> list[str]:
        if not self._base_path.is_dir():
            return []
        names = []
        for candidate in sorted(self._base_path.glob(f"*{RECORDING_SUFFIX}")):
            name = candidate.name[: -len(RECORDING_SUFFIX)]
            if not _STORED_NAME_RE.match(name):
                # Belongs to something else.
                continue
            names.append(name)
        return names


def sanitize_recording_name(name: str) -> str:
    return _UNSAFE_NAME_CHARS_RE.sub(".", name)


def write_yaml_document(payload: dict[str, Any], path: str | Path) -> str:
    """Dump a document, verify it loads back unchanged, and write it."""
    try:
        text = dump_yaml(payload)
    except yaml.YAMLError as error:
        raise RecordingFormatError(f"Recording data cannot be written as YAML: {path} ({error})") from error
    if load_yaml(text) != payload:
        raise RecordingFormatError(f"Recording data does not survive a YAML round trip: {path}")

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    _log.debug("wrote recording %s", target)
    return text


def read_yaml_document(path: str | Path) -> dict[str, Any]:
    target = Path(path)
    try:
        raw_text = target.read_text(encoding="utf-8")
    except FileNotFoundError as error:
        raise RecordingNotFoundError(f"Recording file not found: {target}") from error
    except UnicodeDecodeError as error:
        raise RecordingFormatError(f"Recording is not valid UTF-8 text: {target}") from error

    try:
        payload = load_yaml(raw_text)
    except yaml.YAMLError as error:
        raise RecordingFormatError(f"Recording is not valid YAML: {target} ({error})") from error

    if not isinstance(payload, dict):
        raise RecordingFormatError(f"Recording root must be a mapping: {target}")
    return payload


def write_recording(recording: Recording, path: str | Path) -> str:
    return write_yaml_document(recording.to_dict(), path)


def read_recording(path: str | Path) -> Recording:
    payload = read_yaml_document(path)
    if "test" not in payload:
        raise RecordingFormatError(f"Recording has no 'test' entry: {path}")
    return Recording.from_dict(payload)
