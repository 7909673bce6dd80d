"""Assertion helpers comparing recorded trees against fresh exports."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from recordpack.core.types import Tree
from recordpack.diff.engine import Differ
from recordpack.diff.models import DiffTree, Equal, count_entries


@dataclass(slots=True)
class AssertionResult:
    """Outcome of an expected vs actual tree comparison."""

    expected: Tree
    actual: Tree
    diff: DiffTree

    @property
    def passed(self) -> bool:
        return isinstance(self.diff, Equal)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "pass" if self.passed else "fail",
            "exit_code": self.exit_code,
            "summary": count_entries(self.diff),
            "diff": self.diff.to_data(),
        }


def assert_trees(
    expected: Tree,
    actual: Tree,
    *,
    differ: Differ | None = None,
) -> AssertionResult:
    """Compare an expected tree with an actual tree and return the outcome."""
    active_differ = differ or Differ()
    return AssertionResult(
        expected=expected,
        actual=actual,
        diff=active_differ.compare(expected, actual),
    )
