"""Capability model: what an opaque entity looks like to the exporter.

An entity is anything that is not a scalar, a container, or a runtime handle.
It is described by a stable type tag, named fields, and named zero-argument
query methods. Types can describe themselves by implementing `Exportable`;
other objects are described by introspection.
"""

from __future__ import annotations

from dataclasses import dataclass, fields as dataclass_fields, is_dataclass
import enum
import inspect
import io
import logging
import re
import socket
import threading
import types
from typing import Any, Callable, Iterable, Protocol, runtime_checkable

from recordpack.core.canonical import TYPE_TAG_WILDCARD, stabilize_path, stabilize_type_tag
from recordpack.core.types import NOT_INITIALIZED

QUERY_NAME_RE = re.compile(r"^(get|is|has)(_[A-Za-z0-9]|[A-Z])")

_VOID_RETURN_ANNOTATIONS = frozenset({"None", "NoReturn", "Never", "typing.NoReturn", "typing.Never"})

_OPAQUE_TYPES: tuple[type, ...] = (
    io.IOBase,
    socket.socket,
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
    types.FrameType,
    types.TracebackType,
    types.ModuleType,
    type(threading.Lock()),
    type(threading.RLock()),
)

_log = logging.getLogger(__name__)


@runtime_checkable
class Exportable(Protocol):
    """Explicit export capabilities implemented by a type."""

    def export_type_tag(self) -> str:
        ...

    def export_fields(self) -> Iterable[tuple[str, Any]]:
        ...

    def export_queries(self) -> Iterable[tuple[str, Callable[[], Any]]]:
        ...


@dataclass(frozen=True, slots=True)
class EntityDescription:
    """Type tag, readable fields and zero-argument queries of one entity."""

    type_tag: str
    fields: tuple[tuple[str, Any], ...]
    queries: tuple[tuple[str, Callable[[], Any]], ...]

    def field_map(self) -> dict[str, Any]:
        return dict(self.fields)


def describe_entity(value: Any, *, public_only: bool = False) -> EntityDescription:
    """Describe an entity through `Exportable`, or by introspection."""
    if isinstance(value, Exportable):
        described_fields = tuple(
            (name, field_value)
            for name, field_value in value.export_fields()
            if not (public_only and name.startswith("_"))
        )
        return EntityDescription(
            type_tag=entity_type_tag(value),
            fields=described_fields,
            queries=tuple(value.export_queries()),
        )

    return EntityDescription(
        type_tag=type_tag(type(value)),
        fields=tuple(_introspect_fields(value, public_only=public_only)),
        queries=tuple(_introspect_queries(value)),
    )


def entity_type_tag(value: Any) -> str:
    if isinstance(value, Exportable):
        return stabilize_type_tag(value.export_type_tag())
    return type_tag(type(value))


def type_tag(cls: type) -> str:
    """Stable type name for a class.

    Classes defined inside a function body are tagged with their source file
    instead of a line number, so recordings survive edits around them.
    """
    qualname = getattr(cls, "__qualname__", cls.__name__)
    if "<locals>" not in qualname:
        return stabilize_type_tag(f"{cls.__module__}.{qualname}")

    try:
        source_file = inspect.getsourcefile(cls)
    except TypeError:
        source_file = None
    if source_file is None:
        return stabilize_type_tag(f"{cls.__module__}.{qualname}")
    return f"{qualname}@{stabilize_path(source_file)}:{TYPE_TAG_WILDCARD}"


def is_opaque(value: Any) -> bool:
    """Check for runtime handles that have no representable shape."""
    return isinstance(value, _OPAQUE_TYPES)


def read_field(value: Any, name: str) -> Any:
    """Read a field, substituting a marker when it cannot be read."""
    try:
        return getattr(value, name)
    except AttributeError:
        return NOT_INITIALIZED
    except Exception as error:
        _log.debug(
            "field %s of %s is unreadable: %s",
            name,
            type(value).__qualname__,
            error,
        )
        return NOT_INITIALIZED


def _introspect_fields(value: Any, *, public_only: bool) -> Iterable[tuple[str, Any]]:
    if isinstance(value, enum.Enum):
        yield "name", value.name
        yield "value", value.value
        return

    for name in _field_names(value):
        if public_only and name.startswith("_"):
            continue
        yield name, read_field(value, name)


def _field_names(value: Any) -> list[str]:
    names: dict[str, None] = {}

    if is_dataclass(value) and not isinstance(value, type):
        for field in dataclass_fields(value):
            names[field.name] = None

    for klass in reversed(type(value).__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            names[_unmangle(klass, slot)] = None

    instance_dict = getattr(value, "__dict__", None)
    if isinstance(instance_dict, dict):
        for name in instance_dict:
            names[name] = None

    return list(names)


def _unmangle(klass: type, slot: str) -> str:
    if slot.startswith("__") and not slot.endswith("__"):
        return f"_{klass.__name__.lstrip('_')}{slot}"
    return slot


def _introspect_queries(value: Any) -> Iterable[tuple[str, Callable[[], Any]]]:
    cls = type(value)
    for name in sorted(dir(cls)):
        if not QUERY_NAME_RE.match(name):
            continue
        raw = inspect.getattr_static(cls, name, None)
        if not inspect.isfunction(raw):
            continue
        if not _is_query_function(raw):
            continue
        yield name, getattr(value, name)


def _is_query_function(function: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return False

    parameters = list(signature.parameters.values())[1:]
    for parameter in parameters:
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if parameter.default is inspect.Parameter.empty:
            return False

    annotation = signature.return_annotation
    if annotation is inspect.Signature.empty:
        return True
    if annotation is None or annotation is type(None):
        return False
    if isinstance(annotation, str):
        return annotation.strip() not in _VOID_RETURN_ANNOTATIONS
    return getattr(annotation, "_name", None) not in ("NoReturn", "Never")
