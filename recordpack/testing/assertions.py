"""Export-then-record assertion helpers used by the pytest fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

from recordpack.core.types import Tree, TreeKey
from recordpack.export.exporter import DEFAULT_DEPTH, Exporter
from recordpack.recorder.engine import AssertionRecorder
from recordpack.testing.files import assert_file_as_recorded


class RecordedAssertions:
    """Exports values and feeds them to a recorder, one assertion at a time."""

    def __init__(
        self,
        recorder: AssertionRecorder,
        exporter: Exporter | None = None,
        *,
        depth: int = DEFAULT_DEPTH,
        recording: bool = False,
    ) -> None:
        self._recorder = recorder
        self._exporter = exporter or Exporter()
        self._depth = depth
        self._recording = recording

    @property
    def recorder(self) -> AssertionRecorder:
        return self._recorder

    @property
    def exporter(self) -> Exporter:
        return self._exporter

    @property
    def recording(self) -> bool:
        return self._recording

    def export(self, value: Any, depth: int | None = None) -> Tree:
        return self._exporter.export(value, depth=self._depth if depth is None else depth)

    def assert_as_recorded(self, value: Any, key: TreeKey | None = None, *, depth: int | None = None) -> None:
        actual = self.export(value, depth)
        if key is not None:
            actual = {key: actual}
        self._recorder.assert_value(actual)

    def assert_objects_as_recorded(
        self,
        values: Iterable[Any],
        key: TreeKey | None = None,
        *,
        depth: int | None = None,
    ) -> None:
        """Record several values as one list; each item gets the full depth."""
        list_depth = self._depth + 1 if depth is None else depth
        self.assert_as_recorded(list(values), key, depth=list_depth)

    def assert_file_as_recorded(self, path: str | Path, content: str | None) -> None:
        assert_file_as_recorded(path, content, recording=self._recording)

    def finish(self) -> None:
        self._recorder.assert_end()
