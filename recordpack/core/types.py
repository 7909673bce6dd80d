"""Type definitions and reserved tokens for exported trees."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Union

TreeKey = Union[str, int]
Tree = Any

CLASS_KEY = "class"
REF_KEY = "_ref"
FIELD_PREFIX = "$"
QUERY_SUFFIX = "()"

TRUNCATED_SEQUENCE = "[...]"
TRUNCATED_MAP = "{...}"
OPAQUE = "resource"
NOT_INITIALIZED = "(not initialized)"

PATH_ELEMENT = "[{key}]"
PATH_FIELD = "->{name}"
PATH_QUERY = "->{name}()"

# Dotted names, optionally with a source location as written by `type_tag`.
TYPE_TAG_RE = re.compile(r"^[A-Za-z_]\w*(?:\.(?:[A-Za-z_]\w*|<locals>))*(?:@.+)?$")


@dataclass(frozen=True, slots=True)
class TaggedValue:
    """A tagged value, stored as a custom YAML tag such as `!add`."""

    tag: str
    value: Any


def make_ref(path: str) -> dict[str, str]:
    return {REF_KEY: path}


def is_ref(tree: Tree) -> bool:
    return isinstance(tree, dict) and len(tree) == 1 and isinstance(tree.get(REF_KEY), str)


def is_object_export(tree: Tree) -> bool:
    """Check for a map whose first key is the class entry holding a type tag."""
    if not isinstance(tree, dict) or not tree:
        return False
    first_key = next(iter(tree))
    if first_key != CLASS_KEY:
        return False
    tag = tree[CLASS_KEY]
    return isinstance(tag, str) and TYPE_TAG_RE.match(tag) is not None
