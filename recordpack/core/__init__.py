"""Core models and deterministic primitives for RecordKit."""

from recordpack.core.canonical import (
    clear_package_root_cache,
    find_package_root,
    package_root_label,
    stabilize_path,
    stabilize_type_tag,
)
from recordpack.core.capabilities import (
    EntityDescription,
    Exportable,
    describe_entity,
    entity_type_tag,
    is_opaque,
    type_tag,
)
from recordpack.core.models import Recording
from recordpack.core.types import (
    CLASS_KEY,
    NOT_INITIALIZED,
    OPAQUE,
    REF_KEY,
    TRUNCATED_MAP,
    TRUNCATED_SEQUENCE,
    TYPE_TAG_RE,
    TaggedValue,
    Tree,
    TreeKey,
    is_object_export,
    is_ref,
    make_ref,
)

__all__ = [
    "CLASS_KEY",
    "REF_KEY",
    "TRUNCATED_SEQUENCE",
    "TRUNCATED_MAP",
    "OPAQUE",
    "NOT_INITIALIZED",
    "Tree",
    "TreeKey",
    "TaggedValue",
    "make_ref",
    "is_ref",
    "is_object_export",
    "TYPE_TAG_RE",
    "Exportable",
    "EntityDescription",
    "describe_entity",
    "entity_type_tag",
    "is_opaque",
    "type_tag",
    "clear_package_root_cache",
    "find_package_root",
    "package_root_label",
    "stabilize_path",
    "stabilize_type_tag",
    "Recording",
]
