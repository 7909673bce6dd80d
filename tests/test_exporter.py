from __future__ import annotations

from dataclasses import dataclass, field
import enum
import io
from pathlib import PurePosixPath
import threading
from typing import Callable

from recordpack.core import NOT_INITIALIZED, OPAQUE, TRUNCATED_MAP, TRUNCATED_SEQUENCE, type_tag
from recordpack.core.types import Tree
from recordpack.diff import EQUAL, compare
from recordpack.export import Exporter, export

RefCheck = Callable[[Tree], list[str]]


class Point:
    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


class Node:
    def __init__(self, name: str) -> None:
        self.name = name
        self.next: Node | None = None


class Lazy:
    __slots__ = ("ready", "value")

    def __init__(self) -> None:
        self.ready = True


class Color(enum.Enum):
    RED = 1
    GREEN = 2


@dataclass
class Item:
    name: str
    tags: list[str] = field(default_factory=list)


class Money:
    def __init__(self, amount: int, currency: str) -> None:
        self.amount = amount
        self.currency = currency

    def export_type_tag(self) -> str:
        return "money"

    def export_fields(self) -> list[tuple[str, object]]:
        return [("amount", self.amount), ("currency", self.currency)]

    def export_queries(self) -> list[tuple[str, object]]:
        return []


def test_scalars_pass_through_unchanged() -> None:
    assert export(None) is None
    assert export(True) is True
    assert export(42) == 42
    assert export(1.5) == 1.5
    assert export("plain text") == "plain text"
    assert export(b"raw") == b"raw"


def test_empty_containers_survive_zero_depth() -> None:
    assert export([[], {}], depth=1) == [[], {}]
    assert export([], depth=0) == []
    assert export({}, depth=0) == {}


def test_depth_truncates_nested_sequences_and_maps() -> None:
    assert export([[[1]]], depth=1) == [TRUNCATED_SEQUENCE]
    assert export([[[1]]], depth=2) == [[TRUNCATED_SEQUENCE]]
    assert export({"outer": {"inner": 1}}, depth=1) == {"outer": TRUNCATED_MAP}


def test_entity_exports_class_tag_and_fields() -> None:
    exported = export(Point(1, 2))

    assert exported == {"class": type_tag(Point), "$x": 1, "$y": 2}
    assert list(exported) == ["class", "$x", "$y"]


def test_entity_at_zero_depth_exports_only_class() -> None:
    assert export([Point(1, 2)], depth=1) == [{"class": type_tag(Point)}]


def test_self_reference_exports_one_expansion_and_a_ref(assert_refs_resolve: RefCheck) -> None:
    node = Node("a")
    node.next = node

    exported = export(node, depth=3)

    assert assert_refs_resolve(exported) == [""]
    assert exported == {"class": type_tag(Node), "$name": "a", "$next": {"_ref": ""}}


def test_longer_cycle_terminates(assert_refs_resolve: RefCheck) -> None:
    first = Node("first")
    second = Node("second")
    first.next = second
    second.next = first

    exported = export([first], depth=5)

    assert assert_refs_resolve(exported) == ["[0]"]
    assert exported == [
        {
            "class": type_tag(Node),
            "$name": "first",
            "$next": {
                "class": type_tag(Node),
                "$name": "second",
                "$next": {"_ref": "[0]"},
            },
        }
    ]


def test_shared_instance_is_expanded_once_with_ref_elsewhere(assert_refs_resolve: RefCheck) -> None:
    shared = Point(1, 2)

    exported = export([shared, {"again": shared}], depth=3)

    assert assert_refs_resolve(exported) == ["[0]"]
    assert exported == [
        {"class": type_tag(Point), "$x": 1, "$y": 2},
        {"again": {"_ref": "[0]"}},
    ]


def test_shared_instance_is_expanded_at_greatest_remaining_depth(assert_refs_resolve: RefCheck) -> None:
    shared = Point(1, 2)

    exported = export([[shared], shared], depth=3)

    assert assert_refs_resolve(exported) == ["[1]"]
    assert exported == [
        [{"_ref": "[1]"}],
        {"class": type_tag(Point), "$x": 1, "$y": 2},
    ]


def test_deeper_occurrence_found_later_wins(assert_refs_resolve: RefCheck) -> None:
    inner = Point(1, 2)
    holder = Node("holder")
    holder.next = inner

    exported = export([[[inner]], holder], depth=4)

    assert assert_refs_resolve(exported) == ["[1]->next"]
    assert exported == [
        [[{"_ref": "[1]->next"}]],
        {
            "class": type_tag(Node),
            "$name": "holder",
            "$next": {"class": type_tag(Point), "$x": 1, "$y": 2},
        },
    ]


def test_equal_depth_occurrences_prefer_first_discovered(assert_refs_resolve: RefCheck) -> None:
    shared = Point(3, 4)

    exported = export({"left": shared, "right": shared}, depth=2)

    assert assert_refs_resolve(exported) == ["[left]"]
    assert exported == {
        "left": {"class": type_tag(Point), "$x": 3, "$y": 4},
        "right": {"_ref": "[left]"},
    }


def test_field_paths_are_used_in_refs(assert_refs_resolve: RefCheck) -> None:
    holder = Node("holder")
    holder.next = Node("inner")

    exported = export([holder, holder.next], depth=1)

    assert exported == [
        {"class": type_tag(Node)},
        {"class": type_tag(Node)},
    ]

    exported = export([holder, [[holder.next]]], depth=3)

    assert exported == [
        {
            "class": type_tag(Node),
            "$name": "holder",
            "$next": {"class": type_tag(Node), "$name": "inner", "$next": None},
        },
        [[{"_ref": "[0]->next"}]],
    ]
    assert assert_refs_resolve(exported) == ["[0]->next"]


def test_opaque_handles_export_as_resource() -> None:
    assert export(io.StringIO("data")) == OPAQUE
    assert export([threading.Lock()]) == [OPAQUE]


def test_unset_slot_exports_not_initialized_marker() -> None:
    exported = export(Lazy())

    assert exported == {"class": type_tag(Lazy), "$ready": True, "$value": NOT_INITIALIZED}


def test_dataclass_enum_and_exportable_entities() -> None:
    assert export(Item("a", ["x", "y"])) == {
        "class": type_tag(Item),
        "$name": "a",
        "$tags": ["x", "y"],
    }
    assert export(Color.GREEN) == {"class": type_tag(Color), "$name": "GREEN", "$value": 2}
    assert export(Money(5, "EUR")) == {"class": "money", "$amount": 5, "$currency": "EUR"}


def test_sets_tuples_paths_and_types_are_normalized() -> None:
    assert export({3, 1, 2}) == [1, 2, 3]
    assert export((1, "a")) == [1, "a"]
    assert export(PurePosixPath("relative/file.txt")) == "relative/file.txt"
    assert export(Point) == type_tag(Point)


def test_mapping_keys_are_normalized() -> None:
    assert export({1: "a", ("t",): "b"}) == {1: "a", "('t',)": "b"}


def test_export_is_deterministic_across_exporters() -> None:
    shared = Point(1, 2)
    node = Node("loop")
    node.next = node
    value = {"points": [shared, shared], "node": node, "items": [Item("z", ["b", "a"])]}

    assert Exporter().export(value, depth=4) == Exporter().export(value, depth=4)


def test_exported_value_compares_equal_to_itself() -> None:
    value = {"points": [Point(1, 2), Point(3, 4)], "color": Color.RED, "nested": [[1, 2], {"k": "v"}]}

    assert compare(export(value, depth=3), export(value, depth=3)) is EQUAL
