"""Stable public API surface for RecordKit.

This module is the supported import path for library users.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from recordpack.core import Exportable, Recording, TaggedValue, Tree, type_tag
from recordpack.diff import (
    AssertionResult,
    Differ,
    DiffTree,
    WhollyDifferent,
    assert_trees,
    compare,
    render_diff,
    render_diff_summary,
)
from recordpack.export import DEFAULT_DEPTH, ExportConfigError, ExportScope, Exporter, export
from recordpack.recorder import (
    UPDATE_ENV_VAR,
    PrematureEndError,
    RecordedValueMismatchError,
    UnexpectedAssertionError,
    create_recorder,
    is_recording,
)
from recordpack.snapshot import DiffingMultiSnapshotter, ExportingSnapshotter
from recordpack.storage import YamlAssertionValueStore, read_recording, write_recording
from recordpack.testing import RecordedAssertions, assert_file_as_recorded

__version__ = "0.1.0"


def assert_values(
    expected: Any,
    actual: Any,
    *,
    exporter: Exporter | None = None,
    differ: Differ | None = None,
    depth: int = DEFAULT_DEPTH,
) -> AssertionResult:
    """Export two live values and compare the exported trees.

    Args:
        expected: Value whose export is treated as the baseline.
        actual: Value to compare against the baseline.
        exporter: Exporter configuration; a default exporter when omitted.
        differ: Differ configuration; a default differ when omitted.
        depth: Export depth applied to both values.

    Returns:
        Assertion result with the structural diff.
    """
    active_exporter = exporter or Exporter()
    return assert_trees(
        active_exporter.export(expected, depth=depth),
        active_exporter.export(actual, depth=depth),
        differ=differ,
    )


def diff_recordings(
    before: str | Path,
    after: str | Path,
    *,
    differ: Differ | None = None,
) -> AssertionResult:
    """Compare the recorded values of two recording files."""
    return assert_trees(
        read_recording(before).values,
        read_recording(after).values,
        differ=differ,
    )


__all__ = [
    "__version__",
    "Tree",
    "TaggedValue",
    "Exportable",
    "type_tag",
    "Exporter",
    "ExportScope",
    "ExportConfigError",
    "export",
    "Differ",
    "DiffTree",
    "WhollyDifferent",
    "compare",
    "AssertionResult",
    "assert_trees",
    "assert_values",
    "diff_recordings",
    "render_diff",
    "render_diff_summary",
    "Recording",
    "read_recording",
    "write_recording",
    "YamlAssertionValueStore",
    "UPDATE_ENV_VAR",
    "is_recording",
    "create_recorder",
    "UnexpectedAssertionError",
    "RecordedValueMismatchError",
    "PrematureEndError",
    "ExportingSnapshotter",
    "DiffingMultiSnapshotter",
    "RecordedAssertions",
    "assert_file_as_recorded",
]
