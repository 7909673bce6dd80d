"""Data models for structural diffs of exported trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Union

from recordpack.core.types import CLASS_KEY, TaggedValue, Tree, TreeKey

DiffTag = Literal["add", "rm", "replace", "diff"]

BEFORE_KEY = "-"
AFTER_KEY = "+"


@dataclass(frozen=True, slots=True)
class Equal:
    """No difference."""

    def __bool__(self) -> bool:
        return False

    def to_data(self) -> dict[str, Any]:
        return {}


EQUAL = Equal()


@dataclass(frozen=True, slots=True)
class WhollyDifferent:
    """No productive nested diff exists; both sides are shown in full."""

    before: Tree
    after: Tree

    def to_data(self) -> dict[str, Any]:
        return {BEFORE_KEY: self.before, AFTER_KEY: self.after}


@dataclass(frozen=True, slots=True)
class Add:
    value: Tree

    def to_data(self) -> TaggedValue:
        return TaggedValue("add", self.value)


@dataclass(frozen=True, slots=True)
class Remove:
    value: Tree

    def to_data(self) -> TaggedValue:
        return TaggedValue("rm", self.value)


@dataclass(frozen=True, slots=True)
class Replace:
    """A keyed value whose old and new versions have nothing in common."""

    value: Tree

    def to_data(self) -> TaggedValue:
        return TaggedValue("replace", self.value)


@dataclass(frozen=True, slots=True)
class SequenceDiff:
    """Aligned diff of two ordered sequences."""

    entries: tuple["DiffEntry", ...]

    def __len__(self) -> int:
        return len(self.entries)

    def to_data(self) -> list[Any]:
        return [entry.to_data() for entry in self.entries]


@dataclass(frozen=True, slots=True)
class MapDiff:
    """Per-key diff of two keyed maps; equal keys are omitted."""

    entries: dict[TreeKey, "DiffEntry"]

    def __len__(self) -> int:
        return len(self.entries)

    def to_data(self) -> dict[TreeKey, Any]:
        return {key: entry.to_data() for key, entry in self.entries.items()}


@dataclass(frozen=True, slots=True)
class ObjectDiff:
    """Per-field diff of two object exports with the same type tag."""

    class_name: str
    entries: dict[str, "DiffEntry"]
    identity: dict[str, Tree] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def to_data(self) -> dict[str, Any]:
        payload: dict[str, Any] = {CLASS_KEY: self.class_name}
        payload.update(self.identity)
        payload.update((key, entry.to_data()) for key, entry in self.entries.items())
        return payload


NestedDiff = Union[SequenceDiff, MapDiff, ObjectDiff]


@dataclass(frozen=True, slots=True)
class Nested:
    """An entry whose old and new versions differ in part."""

    diff: NestedDiff

    def to_data(self) -> TaggedValue:
        return TaggedValue("diff", self.diff.to_data())


DiffEntry = Union[Add, Remove, Replace, Nested]
DiffTree = Union[Equal, WhollyDifferent, SequenceDiff, MapDiff, ObjectDiff]

_ENTRY_TAGS: dict[type, DiffTag] = {Add: "add", Remove: "rm", Replace: "replace", Nested: "diff"}


def count_entries(diff: DiffTree) -> dict[str, int]:
    """Count top-level entries by kind."""
    counts = {"add": 0, "rm": 0, "replace": 0, "diff": 0}
    if isinstance(diff, SequenceDiff):
        entries: list[DiffEntry] = list(diff.entries)
    elif isinstance(diff, (MapDiff, ObjectDiff)):
        entries = list(diff.entries.values())
    else:
        return counts
    for entry in entries:
        counts[_ENTRY_TAGS[type(entry)]] += 1
    return counts
