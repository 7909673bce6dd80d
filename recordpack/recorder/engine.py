"""Assertion recorders for recording and replay mode."""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from recordpack.core.types import Tree
from recordpack.diff.engine import Differ
from recordpack.diff.formatting import render_mismatch
from recordpack.recorder.exceptions import (
    PrematureEndError,
    RecordedValueMismatchError,
    UnexpectedAssertionError,
)
from recordpack.recorder.mode import is_recording
from recordpack.storage.io import AssertionValueStore
from recordpack.storage.serialization import dump_yaml

SaveCallback = Callable[[list[Tree]], None]
LoadCallback = Callable[[], list[Tree]]

_log = logging.getLogger(__name__)


class AssertionRecorder(Protocol):
    """Checks a stream of values against a recording, or records them."""

    def assert_value(self, actual: Tree) -> None:
        ...

    def assert_end(self) -> None:
        ...


class RecordingModeRecorder:
    """Collects asserted values and saves them when the stream ends."""

    def __init__(self, save: SaveCallback) -> None:
        self._save = save
        self._values: list[Tree] = []

    @property
    def values(self) -> list[Tree]:
        return list(self._values)

    def assert_value(self, actual: Tree) -> None:
        self._values.append(actual)

    def assert_end(self) -> None:
        self._save(list(self._values))


class ReplayModeRecorder:
    """Compares asserted values, in order, with previously recorded ones."""

    def __init__(self, load: LoadCallback, differ: Differ | None = None) -> None:
        self._load = load
        self._differ = differ or Differ()
        self._expected: list[Tree] | None = None
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    def assert_value(self, actual: Tree) -> None:
        expected_values = self._expected_values()
        if self._index >= len(expected_values):
            raise UnexpectedAssertionError(
                f"Unexpected assertion #{self._index}: only {len(expected_values)} values were recorded."
            )

        expected = expected_values[self._index]
        position = self._index
        self._index += 1

        # Compare the rendered documents, so that key order and scalar types count.
        if dump_yaml(expected) == dump_yaml(actual):
            return
        diff = self._differ.compare(expected, actual)
        raise RecordedValueMismatchError(
            render_mismatch(
                expected,
                actual,
                diff,
                title=f"Value #{position} differs from the recorded value.",
            )
        )

    def assert_end(self) -> None:
        recorded_count = len(self._expected) if self._expected is not None else 0
        if self._index != recorded_count:
            raise PrematureEndError(
                f"Premature end: {self._index} of {recorded_count} recorded values were asserted."
            )

    def _expected_values(self) -> list[Tree]:
        if self._expected is None:
            self._expected = list(self._load())
        return self._expected


def create_recorder(
    name: str,
    store: AssertionValueStore,
    *,
    recording: bool | None = None,
    differ: Differ | None = None,
) -> RecordingModeRecorder | ReplayModeRecorder:
    """Create the recorder for one test call, bound to a store entry."""
    if recording is None:
        recording = is_recording()
    _log.debug("creating %s recorder for %s", "recording" if recording else "replay", name)
    if recording:
        return RecordingModeRecorder(lambda values: store.save(name, values))
    return ReplayModeRecorder(lambda: store.load(name), differ=differ)
