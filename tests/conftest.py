import re
from typing import Any, Callable

import pytest

from recordpack.core import REF_KEY, Tree, is_object_export, is_ref

pytest_plugins = ["pytester"]

_PATH_STEP_RE = re.compile(r"\[(?P<key>[^\]]*)\]|->(?P<name>\w+)(?P<call>\(\))?")


def _follow_path(tree: Tree, path: str) -> Tree:
    node = tree
    position = 0
    while position < len(path):
        step = _PATH_STEP_RE.match(path, position)
        assert step is not None, f"malformed path {path!r} at {position}"
        position = step.end()

        name = step.group("name")
        if name is not None:
            child_key: Any = f"{name}()" if step.group("call") else f"${name}"
        elif isinstance(node, list):
            child_key = int(step.group("key"))
        elif step.group("key") in node:
            child_key = step.group("key")
        else:
            child_key = int(step.group("key"))

        if isinstance(node, list):
            assert 0 <= child_key < len(node), f"{path!r} leaves the exported tree"
        else:
            assert isinstance(node, dict) and child_key in node, f"{path!r} leaves the exported tree"
        node = node[child_key]
    return node


def _collect_refs(node: Tree, found: list[str]) -> None:
    if is_ref(node):
        found.append(node[REF_KEY])
    elif isinstance(node, dict):
        for item in node.values():
            _collect_refs(item, found)
    elif isinstance(node, list):
        for item in node:
            _collect_refs(item, found)


def check_refs_resolve(tree: Tree) -> list[str]:
    """Assert that every back-reference names an expanded object in `tree`."""
    refs: list[str] = []
    _collect_refs(tree, refs)
    for path in refs:
        target = _follow_path(tree, path)
        assert is_object_export(target), f"{path!r} points at {target!r}, not an object"
    return refs


@pytest.fixture
def assert_refs_resolve() -> Callable[[Tree], list[str]]:
    return check_refs_resolve
