"""Structural diff engine for exported trees.

Sequences are aligned with a bounded-lookahead greedy search: at each
mismatch at most three continuations are tried (drop the old item, take the
new item, or diff the pair in place) and the one producing the fewest entries
wins. Results that carry no more signal than a full replacement collapse into
`WhollyDifferent`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable

from recordpack.core.types import CLASS_KEY, Tree, TreeKey, is_object_export
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
)

_MISSING = object()

ItemComparison = Callable[[TreeKey, Tree, Tree], DiffTree]


@dataclass(frozen=True, slots=True)
class Differ:
    """Immutable diff engine configuration.

    `non_sequence_fields` holds `(class_name, field_key)` pairs whose lists
    are compared by index instead of being aligned. `identifying_fields`
    holds pairs whose mismatch makes two objects wholly different.
    """

    non_sequence_fields: frozenset[tuple[str, str]] = frozenset()
    identifying_fields: tuple[tuple[str, str], ...] = ()

    def with_non_sequence_field(self, class_name: str, field_key: str) -> "Differ":
        return replace(
            self,
            non_sequence_fields=self.non_sequence_fields | {(class_name, field_key)},
        )

    def with_identifying_field(self, class_name: str, field_key: str) -> "Differ":
        pair = (class_name, field_key)
        if pair in self.identifying_fields:
            return self
        return replace(self, identifying_fields=(*self.identifying_fields, pair))

    def compare(self, before: Tree, after: Tree) -> DiffTree:
        """Compare two exported trees."""
        return self._compare_values(before, after)

    def identifying_fields_for(self, class_name: str) -> tuple[str, ...]:
        return tuple(key for name, key in self.identifying_fields if name == class_name)

    def _compare_values(self, before: Tree, after: Tree, could_be_sequence: bool = True) -> DiffTree:
        if _identical(before, after):
            return EQUAL

        if isinstance(before, list) and isinstance(after, list):
            if could_be_sequence:
                return self._compare_sequences(before, after)
            return self._compare_keyed(
                dict(enumerate(before)),
                dict(enumerate(after)),
                before_value=before,
                after_value=after,
            )

        if isinstance(before, dict) and isinstance(after, dict):
            before_is_object = is_object_export(before)
            after_is_object = is_object_export(after)
            if before_is_object and after_is_object:
                if before[CLASS_KEY] != after[CLASS_KEY]:
                    return WhollyDifferent(before, after)
                return self._compare_objects(before, after, before[CLASS_KEY])
            if before_is_object or after_is_object:
                return WhollyDifferent(before, after)
            return self._compare_keyed(before, after)

        return WhollyDifferent(before, after)

    def _compare_sequences(self, before: list[Tree], after: list[Tree]) -> DiffTree:
        entries = _SequenceAlignment(self, before, after).entries()
        if not entries:
            return EQUAL
        if len(entries) == len(before) + len(after):
            # Nothing matched or partially matched.
            return WhollyDifferent(before, after)
        return SequenceDiff(entries)

    def _compare_keyed(
        self,
        before: dict[TreeKey, Tree],
        after: dict[TreeKey, Tree],
        *,
        compare_item: ItemComparison | None = None,
        before_value: Tree = _MISSING,
        after_value: Tree = _MISSING,
    ) -> DiffTree:
        before_value = before if before_value is _MISSING else before_value
        after_value = after if after_value is _MISSING else after_value

        before_keys = sorted(before, key=_key_order)
        after_keys = sorted(after, key=_key_order)
        shared_keys = [key for key in before_keys if key in after]
        if not shared_keys:
            return WhollyDifferent(before_value, after_value)

        entries: dict[TreeKey, DiffEntry] = {}
        for key in before_keys:
            if key not in after:
                entries[key] = Remove(before[key])

        similar = False
        for key in shared_keys:
            if compare_item is None:
                item_diff = self._compare_values(before[key], after[key])
            else:
                item_diff = compare_item(key, before[key], after[key])
            if isinstance(item_diff, Equal):
                similar = True
            elif isinstance(item_diff, WhollyDifferent):
                entries[key] = Replace(after[key])
            else:
                entries[key] = Nested(item_diff)
                similar = True

        if not similar:
            return WhollyDifferent(before_value, after_value)

        for key in after_keys:
            if key not in before:
                entries[key] = Add(after[key])

        if not entries:
            return EQUAL
        return MapDiff(entries)

    def _compare_objects(
        self,
        before: dict[str, Tree],
        after: dict[str, Tree],
        class_name: str,
    ) -> DiffTree:
        before_fields = {key: value for key, value in before.items() if key != CLASS_KEY}
        after_fields = {key: value for key, value in after.items() if key != CLASS_KEY}

        identity: dict[str, Tree] = {}
        for key in self.identifying_fields_for(class_name):
            before_item = before_fields.get(key, _MISSING)
            after_item = after_fields.get(key, _MISSING)
            if not _identical(before_item, after_item):
                return WhollyDifferent(before, after)
            if before_item is not _MISSING:
                identity[key] = before_item

        def compare_field(key: TreeKey, before_item: Tree, after_item: Tree) -> DiffTree:
            could_be_sequence = (class_name, key) not in self.non_sequence_fields
            return self._compare_values(before_item, after_item, could_be_sequence)

        result = self._compare_keyed(before_fields, after_fields, compare_item=compare_field)
        if isinstance(result, WhollyDifferent):
            return WhollyDifferent(before, after)
        if isinstance(result, MapDiff):
            return ObjectDiff(class_name=class_name, entries=dict(result.entries), identity=identity)
        return result


class _SequenceAlignment:
    """Memoized cursor search over two sequences of one comparison."""

    def __init__(self, differ: Differ, before: list[Tree], after: list[Tree]) -> None:
        self._differ = differ
        self._before = before
        self._after = after
        self._aligned: dict[tuple[int, int], tuple[DiffEntry, ...]] = {}
        self._pairs: dict[tuple[int, int], DiffTree] = {}

    def entries(self) -> tuple[DiffEntry, ...]:
        return self._align(0, 0)

    def _compare_pair(self, i: int, j: int) -> DiffTree:
        cached = self._pairs.get((i, j))
        if cached is None:
            cached = self._differ._compare_values(self._before[i], self._after[j])
            self._pairs[(i, j)] = cached
        return cached

    def _align(self, i: int, j: int) -> tuple[DiffEntry, ...]:
        start = (i, j)
        cached = self._aligned.get(start)
        if cached is not None:
            return cached

        before, after = self._before, self._after
        entries: list[DiffEntry] = []
        while True:
            if i >= len(before):
                entries.extend(Add(item) for item in after[j:])
                break
            if j >= len(after):
                entries.extend(Remove(item) for item in before[i:])
                break

            item_diff = self._compare_pair(i, j)
            if isinstance(item_diff, Equal):
                i += 1
                j += 1
                continue

            diff_minus = self._align(i + 1, j)
            diff_plus = self._align(i, j + 1)
            if not isinstance(item_diff, WhollyDifferent):
                diff_eq = self._align(i + 1, j + 1)
                if len(diff_eq) < len(diff_minus) and len(diff_eq) < len(diff_plus):
                    entries.append(Nested(item_diff))
                    entries.extend(diff_eq)
                    break

            if len(diff_minus) <= len(diff_plus):
                entries.append(Remove(before[i]))
                entries.extend(diff_minus)
            else:
                entries.append(Add(after[j]))
                entries.extend(diff_plus)
            break

        result = tuple(entries)
        self._aligned[start] = result
        return result


_DEFAULT_DIFFER = Differ()


def compare(before: Tree, after: Tree) -> DiffTree:
    """Compare two exported trees with the default differ configuration."""
    return _DEFAULT_DIFFER.compare(before, after)


def _identical(before: Any, after: Any) -> bool:
    if type(before) is not type(after):
        return False
    if isinstance(before, dict):
        return before.keys() == after.keys() and all(
            _identical(before[key], after[key]) for key in before
        )
    if isinstance(before, list):
        return len(before) == len(after) and all(
            _identical(left, right) for left, right in zip(before, after)
        )
    return before == after


def _key_order(key: TreeKey) -> tuple[int, Any]:
    if isinstance(key, int) and not isinstance(key, bool):
        return (0, key)
    return (1, str(key))
