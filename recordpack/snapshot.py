"""Snapshot helpers for before/after comparisons of exported state."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol, runtime_checkable

from recordpack.core.types import Tree
from recordpack.diff.engine import Differ
from recordpack.diff.models import DiffTree
from recordpack.export.exporter import DEFAULT_DEPTH, Exporter


class SnapshotConfigError(ValueError):
    """Raised when snapshot input does not match the configured snapshotters."""


@runtime_checkable
class Snapshotter(Protocol):
    def take_snapshot(self) -> Tree:
        ...


@runtime_checkable
class DiffingSnapshotter(Snapshotter, Protocol):
    """A snapshotter that knows how to compare its own snapshots."""

    def compare(self, before: Tree, after: Tree) -> Any:
        ...


class ExportingSnapshotter:
    """Exports the current value returned by `source`."""

    def __init__(
        self,
        source: Callable[[], Any],
        exporter: Exporter | None = None,
        depth: int = DEFAULT_DEPTH,
    ) -> None:
        self._source = source
        self._exporter = exporter or Exporter()
        self._depth = depth

    def take_snapshot(self) -> Tree:
        return self._exporter.export(self._source(), depth=self._depth)


class DiffingMultiSnapshotter:
    """Combines named snapshotters and diffs their snapshots per name.

    Snapshotters that implement `compare` diff their own snapshots; all others
    use the fallback differ.
    """

    def __init__(self, snapshotters: Mapping[str, Snapshotter], differ: Differ | None = None) -> None:
        self._snapshotters = dict(snapshotters)
        self._differ = differ or Differ()

    def take_snapshot(self) -> dict[str, Tree]:
        return {name: snapshotter.take_snapshot() for name, snapshotter in self._snapshotters.items()}

    def compare(self, before: Mapping[str, Tree], after: Mapping[str, Tree]) -> dict[str, DiffTree | Any]:
        diffs: dict[str, DiffTree | Any] = {}
        for name, snapshotter in self._snapshotters.items():
            if name not in before or name not in after:
                raise SnapshotConfigError(f"Snapshot is missing the entry {name!r}")
            if isinstance(snapshotter, DiffingSnapshotter):
                diffs[name] = snapshotter.compare(before[name], after[name])
            else:
                diffs[name] = self._differ.compare(before[name], after[name])
        return diffs
