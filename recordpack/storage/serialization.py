"""PyYAML dumper and loader settings for recording files."""

from __future__ import annotations

from typing import Any

import yaml

from recordpack.core.types import TaggedValue

_STR_TAG = "tag:yaml.org,2002:str"
_QUOTED_STYLES = frozenset({"'", '"', "|", ">"})


class RecordingDumper(yaml.SafeDumper):
    """Safe dumper with literal blocks, custom tags, and no anchors."""

    def ignore_aliases(self, data: Any) -> bool:
        return True

    def choose_scalar_style(self) -> str:
        # Explicitly tagged scalars would otherwise always be quoted.
        event = self.event
        if event.tag and event.tag.startswith("!") and not event.style:
            if self.analysis is None:
                self.analysis = self.analyze_scalar(event.value)
            analysis = self.analysis
            allow_plain = analysis.allow_flow_plain if self.flow_level else analysis.allow_block_plain
            if allow_plain and not (self.simple_key_context and (analysis.empty or analysis.multiline)):
                return ""
        return super().choose_scalar_style()


class RecordingLoader(yaml.SafeLoader):
    """Safe loader that turns custom `!tag` nodes into `TaggedValue`."""


def _represent_str(dumper: RecordingDumper, data: str) -> yaml.Node:
    if "\n" in data:
        return dumper.represent_scalar(_STR_TAG, data, style="|")
    return dumper.represent_scalar(_STR_TAG, data)


def _represent_tagged(dumper: RecordingDumper, data: TaggedValue) -> yaml.Node:
    tag = f"!{data.tag}"
    value = data.value
    if isinstance(value, dict):
        return dumper.represent_mapping(tag, value)
    if isinstance(value, (list, tuple)):
        return dumper.represent_sequence(tag, value)

    node = dumper.represent_data(value)
    if isinstance(value, str) and node.style is None:
        # A custom tag disables implicit typing, so keep strings quoted.
        if dumper.resolve(yaml.ScalarNode, value, (True, False)) != _STR_TAG:
            node.style = "'"
    node.tag = tag
    return node


def _construct_tagged(loader: RecordingLoader, tag_suffix: str, node: yaml.Node) -> TaggedValue:
    if isinstance(node, yaml.ScalarNode):
        if node.style in _QUOTED_STYLES:
            value: Any = loader.construct_scalar(node)
        else:
            resolved = loader.resolve(yaml.ScalarNode, node.value, (True, False))
            value = loader.construct_object(
                yaml.ScalarNode(resolved, node.value, node.start_mark, node.end_mark, node.style)
            )
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)
    return TaggedValue(tag_suffix, value)


RecordingDumper.add_representer(str, _represent_str)
RecordingDumper.add_representer(TaggedValue, _represent_tagged)
RecordingLoader.add_multi_constructor("!", _construct_tagged)


def dump_yaml(data: Any) -> str:
    """Serialize recording data to block-style YAML, keeping key order."""
    return yaml.dump(
        data,
        Dumper=RecordingDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        indent=2,
    )


def load_yaml(text: str) -> Any:
    return yaml.load(text, Loader=RecordingLoader)
