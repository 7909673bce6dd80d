"""Text rendering for structural diffs."""

from __future__ import annotations

from recordpack.core.types import Tree
from recordpack.diff.models import DiffTree, Equal, WhollyDifferent, count_entries
from recordpack.storage.serialization import dump_yaml

NO_DIFFERENCES = "no differences"


def render_diff(diff: DiffTree) -> str:
    if isinstance(diff, Equal):
        return NO_DIFFERENCES
    return dump_yaml(diff.to_data()).rstrip("\n")


def render_diff_summary(diff: DiffTree) -> str:
    if isinstance(diff, Equal):
        return NO_DIFFERENCES
    if isinstance(diff, WhollyDifferent):
        return "wholly different"
    counts = count_entries(diff)
    return (
        f"added={counts['add']} removed={counts['rm']} "
        f"replaced={counts['replace']} nested={counts['diff']}"
    )


def render_mismatch(expected: Tree, actual: Tree, diff: DiffTree, *, title: str = "") -> str:
    """Render a failure message showing both values and their diff."""
    lines: list[str] = []
    if title:
        lines.append(title)
    lines.append("expected:")
    lines.append(_indent(_dump(expected)))
    lines.append("actual:")
    lines.append(_indent(_dump(actual)))
    lines.append(f"diff ({render_diff_summary(diff)}):")
    lines.append(_indent(render_diff(diff)))
    return "\n".join(lines)


def _dump(value: Tree) -> str:
    text = dump_yaml(value)
    # Scalar documents end with an explicit marker.
    return text.removesuffix("...\n")


def _indent(text: str) -> str:
    return "\n".join(f"  {line}" for line in text.rstrip("\n").splitlines())
