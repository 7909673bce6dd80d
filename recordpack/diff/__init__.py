"""Structural diff subsystem for RecordKit."""

from recordpack.diff.assertion import AssertionResult, assert_trees
from recordpack.diff.engine import Differ, compare
from recordpack.diff.formatting import NO_DIFFERENCES, render_diff, render_diff_summary, render_mismatch
from recordpack.diff.models import (
    EQUAL,
    Add,
    DiffEntry,
    DiffTree,
    Equal,
    MapDiff,
    Nested,
    ObjectDiff,
    Remove,
    Replace,
    SequenceDiff,
    WhollyDifferent,
    count_entries,
)

__all__ = [
    "EQUAL",
    "Equal",
    "WhollyDifferent",
    "Add",
    "Remove",
    "Replace",
    "Nested",
    "SequenceDiff",
    "MapDiff",
    "ObjectDiff",
    "DiffEntry",
    "DiffTree",
    "count_entries",
    "Differ",
    "compare",
    "AssertionResult",
    "assert_trees",
    "NO_DIFFERENCES",
    "render_diff",
    "render_diff_summary",
    "render_mismatch",
]
