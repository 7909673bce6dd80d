"""Structural value exporter producing depth-bounded, cycle-free trees."""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
import heapq
import logging
from pathlib import PurePath
from types import MappingProxyType
from typing import Any, Callable, Iterator

from recordpack.core.canonical import clear_package_root_cache, stabilize_path
from recordpack.core.capabilities import describe_entity, entity_type_tag, is_opaque, type_tag
from recordpack.core.types import (
    CLASS_KEY,
    FIELD_PREFIX,
    OPAQUE,
    PATH_ELEMENT,
    PATH_FIELD,
    PATH_QUERY,
    QUERY_SUFFIX,
    TRUNCATED_MAP,
    TRUNCATED_SEQUENCE,
    Tree,
    TreeKey,
    make_ref,
)
from recordpack.export.defaults import strictly_equal, synthesize_default_object
from recordpack.export.exceptions import ExportConfigError

DEFAULT_DEPTH = 2

DedicatedExportCallback = Callable[[Any, int, "TreeKey | None", "ExportScope"], Tree]
DefaultObjectFactory = Callable[["TreeKey | None"], Any]

_log = logging.getLogger(__name__)


def _empty_mapping() -> Mapping[Any, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class DedicatedExporter:
    """Export override for one class or stable type tag."""

    target: type | str
    callback: DedicatedExportCallback

    def specificity(self, value: Any, tag: str) -> int | None:
        """Rank a match: lower is more specific, `None` means no match."""
        if isinstance(self.target, str):
            return 0 if self.target == tag else None
        if not isinstance(value, self.target):
            return None
        mro = type(value).__mro__
        if self.target in mro:
            return 1 + mro.index(self.target)
        return 1 + len(mro)


@dataclass(frozen=True, slots=True)
class Exporter:
    """Immutable exporter configuration.

    Every `with_*` method returns a new exporter. `export()` runs on a fresh
    `ExportScope`, so one configured exporter can be shared freely.
    """

    dedicated_exporters: tuple[DedicatedExporter, ...] = ()
    default_objects: Mapping[type, Any] = field(default_factory=_empty_mapping, hash=False)
    default_object_factories: Mapping[type, DefaultObjectFactory] = field(
        default_factory=_empty_mapping,
        hash=False,
    )
    stable_paths: bool = True

    def with_dedicated_exporter(
        self,
        target: type | str,
        callback: DedicatedExportCallback,
    ) -> "Exporter":
        """Register an export override.

        The callback receives `(value, depth, key, scope)` and returns the
        exported tree, or `None` to fall back to the next candidate.
        """
        return replace(
            self,
            dedicated_exporters=(*self.dedicated_exporters, DedicatedExporter(target, callback)),
        )

    def with_object_getters(
        self,
        target: type | str,
        keys_to_unset: tuple[str, ...] | list[str] = (),
    ) -> "Exporter":
        """Export instances of `target` with their query method results."""
        unset = tuple(keys_to_unset)

        def export_with_getters(
            value: Any,
            depth: int,
            key: TreeKey | None,
            scope: ExportScope,
        ) -> Tree:
            return scope.export_entity(value, depth, key, getters=True, exclude=unset)

        return self.with_dedicated_exporter(target, export_with_getters)

    def with_default_object(self, reference: Any, cls: type | None = None) -> "Exporter":
        target = cls if cls is not None else type(reference)
        if not isinstance(reference, target):
            raise ExportConfigError(
                f"Default object for {target.__qualname__} has type {type(reference).__qualname__}"
            )
        return replace(
            self,
            default_objects=MappingProxyType({**self.default_objects, target: reference}),
        )

    def with_default_object_factory(self, cls: type, factory: DefaultObjectFactory) -> "Exporter":
        if not callable(factory):
            raise ExportConfigError(f"Default object factory for {cls.__qualname__} is not callable")
        return replace(
            self,
            default_object_factories=MappingProxyType({**self.default_object_factories, cls: factory}),
        )

    def with_synthesized_default_object(self, cls: type) -> "Exporter":
        """Register a reference instance built from placeholder arguments."""
        return self.with_default_object(synthesize_default_object(cls), cls)

    def with_stable_paths(self, enabled: bool = True) -> "Exporter":
        return replace(self, stable_paths=enabled)

    def export(self, value: Any, depth: int = DEFAULT_DEPTH) -> Tree:
        """Export a value as a finite, acyclic tree."""
        return ExportScope(self).run(value, depth)

    def dedicated_exporters_for(self, value: Any) -> list[DedicatedExporter]:
        """Matching overrides, most specific and most recent first."""
        if not self.dedicated_exporters:
            return []
        tag = entity_type_tag(value)
        ranked: list[tuple[int, int, DedicatedExporter]] = []
        for index, dedicated in enumerate(self.dedicated_exporters):
            rank = dedicated.specificity(value, tag)
            if rank is not None:
                ranked.append((rank, -index, dedicated))
        ranked.sort(key=lambda item: (item[0], item[1]))
        return [dedicated for _, _, dedicated in ranked]

    def default_object_for(self, cls: type, key: TreeKey | None) -> Any | None:
        factory = self.default_object_factories.get(cls)
        if factory is not None:
            reference = factory(key)
            if not isinstance(reference, cls):
                raise ExportConfigError(
                    f"Default object factory for {cls.__qualname__} "
                    f"returned {type(reference).__qualname__}"
                )
            return reference
        return self.default_objects.get(cls)


@dataclass(slots=True)
class _Occurrence:
    """Placeholder for one place where an entity was reached."""

    identity: int
    depth: int
    key: TreeKey | None
    path: str
    order: int
    expansion: Tree = None
    discarded: bool = False


class ExportScope:
    """Scratch state of a single export call.

    Entities are registered by reference identity and expanded once, at the
    occurrence with the greatest remaining depth (first discovered on ties).
    Pending occurrences are expanded in that same order, so an expansion can
    only discover occurrences with less depth than itself. Every other
    occurrence becomes a back-reference to the expanded path.
    """

    def __init__(self, exporter: Exporter) -> None:
        self._exporter = exporter
        self._arena: list[Any] = []
        self._identities: dict[int, int] = {}
        self._queue: list[tuple[int, int, _Occurrence]] = []
        self._registered: list[_Occurrence] = []
        self._discovered = 0
        self._path = ""

    @property
    def exporter(self) -> Exporter:
        return self._exporter

    @property
    def path(self) -> str:
        return self._path

    def run(self, value: Any, depth: int) -> Tree:
        # Package manifests may appear or vanish between export calls.
        clear_package_root_cache()
        root = self.export_value(value, depth)

        canonical: dict[int, _Occurrence] = {}
        while self._queue:
            _, _, occurrence = heapq.heappop(self._queue)
            if occurrence.discarded or occurrence.identity in canonical:
                continue
            with self._at(occurrence.path):
                occurrence.expansion = self._export_object(
                    self._arena[occurrence.identity],
                    occurrence.depth,
                    occurrence.key,
                )
            canonical[occurrence.identity] = occurrence

        _log.debug(
            "exported %d entities from %d occurrences",
            len(canonical),
            self._discovered,
        )
        return self._resolve(root, canonical)

    def export_value(
        self,
        value: Any,
        depth: int,
        key: TreeKey | None = None,
        *,
        segment: str = "",
    ) -> Tree:
        """Export any value with `depth` levels remaining.

        Dedicated exporters pass the `segment` that leads from the object
        being exported to `value`, such as `"->content"` for a field or
        `"[0]"` for an element, so that back-references name the right node.
        """
        if not segment:
            return self._export_here(value, depth, key)
        with self._descend(segment):
            return self._export_here(value, depth, key)

    def _export_here(self, value: Any, depth: int, key: TreeKey | None) -> Tree:
        if value is None or type(value) in (bool, int, float, bytes):
            return value
        if type(value) is str:
            return self._export_string(value)
        if isinstance(value, str):
            return self._export_string(str.__str__(value))
        if isinstance(value, (int, float, bytes)) and not isinstance(value, bool):
            return _plain_scalar(value)
        if isinstance(value, PurePath):
            return self._export_string(value.as_posix())
        if isinstance(value, type):
            return type_tag(value)
        if isinstance(value, Mapping):
            return self._export_mapping(value, depth)
        if isinstance(value, (list, tuple)):
            return self._export_sequence(value, depth)
        if isinstance(value, (set, frozenset)):
            return self._export_sequence(_ordered_members(value), depth)
        if is_opaque(value):
            return OPAQUE
        return self._register(value, depth, key)

    def export_entity(
        self,
        value: Any,
        depth: int,
        key: TreeKey | None = None,
        *,
        getters: bool = False,
        exclude: tuple[str, ...] | frozenset[str] = (),
    ) -> dict[str, Tree]:
        """Default object export: class tag, fields, and optionally queries.

        Export keys listed in `exclude` (`"$name"`, `"get_name()"`) are
        skipped before anything below them is exported.
        """
        description = describe_entity(value, public_only=getters)
        export: dict[str, Tree] = {CLASS_KEY: description.type_tag}
        if depth <= 0:
            return export

        reference = self._exporter.default_object_for(type(value), key)
        reference_description = (
            describe_entity(reference, public_only=getters) if reference is not None else None
        )

        reference_fields = (
            reference_description.field_map() if reference_description is not None else {}
        )
        for name, field_value in description.fields:
            if FIELD_PREFIX + name in exclude:
                continue
            if name in reference_fields and strictly_equal(field_value, reference_fields[name]):
                continue
            with self._descend(PATH_FIELD.format(name=name)):
                export[FIELD_PREFIX + name] = self.export_value(field_value, depth - 1)

        if not getters:
            return export

        reference_queries = (
            dict(reference_description.queries) if reference_description is not None else {}
        )
        for name, query in sorted(description.queries, key=lambda item: item[0]):
            if name + QUERY_SUFFIX in exclude:
                continue
            query_value = _call_query(query)
            if name in reference_queries and strictly_equal(
                query_value,
                _call_query(reference_queries[name]),
            ):
                continue
            with self._descend(PATH_QUERY.format(name=name)):
                export[name + QUERY_SUFFIX] = self.export_value(query_value, depth - 1)

        return export

    def _export_string(self, value: str) -> str:
        if self._exporter.stable_paths:
            return stabilize_path(value)
        return value

    def _export_mapping(self, value: Mapping[Any, Any], depth: int) -> Tree:
        if not value:
            return {}
        if depth <= 0:
            return TRUNCATED_MAP
        result: dict[TreeKey, Tree] = {}
        for raw_key, item in value.items():
            key = _export_key(raw_key)
            with self._descend(PATH_ELEMENT.format(key=key)):
                result[key] = self.export_value(item, depth - 1, key)
        return result

    def _export_sequence(self, value: list[Any] | tuple[Any, ...], depth: int) -> Tree:
        if not value:
            return []
        if depth <= 0:
            return TRUNCATED_SEQUENCE
        result: list[Tree] = []
        for index, item in enumerate(value):
            with self._descend(PATH_ELEMENT.format(key=index)):
                result.append(self.export_value(item, depth - 1, index))
        return result

    def _register(self, value: Any, depth: int, key: TreeKey | None) -> _Occurrence:
        identity = self._identities.get(id(value))
        if identity is None:
            identity = len(self._arena)
            # The arena keeps objects alive, so ids cannot be reused mid-call.
            self._arena.append(value)
            self._identities[id(value)] = identity

        occurrence = _Occurrence(
            identity=identity,
            depth=depth,
            key=key,
            path=self._path,
            order=self._discovered,
        )
        self._discovered += 1
        self._registered.append(occurrence)
        heapq.heappush(self._queue, (-depth, occurrence.order, occurrence))
        return occurrence

    def _export_object(self, value: Any, depth: int, key: TreeKey | None) -> Tree:
        for dedicated in self._exporter.dedicated_exporters_for(value):
            mark = len(self._registered)
            export = dedicated.callback(value, depth, key, self)
            if export is not None:
                return export
            # The deferred attempt's output is dropped, and so is what it reached.
            for occurrence in self._registered[mark:]:
                occurrence.discarded = True
            del self._registered[mark:]
        return self.export_entity(value, depth, key)

    def _resolve(self, node: Tree, canonical: dict[int, _Occurrence]) -> Tree:
        if isinstance(node, _Occurrence):
            chosen = canonical[node.identity]
            if node is not chosen:
                return make_ref(chosen.path)
            return self._resolve(chosen.expansion, canonical)
        if isinstance(node, dict):
            return {key: self._resolve(item, canonical) for key, item in node.items()}
        if isinstance(node, (list, tuple)):
            return [self._resolve(item, canonical) for item in node]
        return node

    @contextmanager
    def _at(self, path: str) -> Iterator[None]:
        parent = self._path
        self._path = path
        try:
            yield
        finally:
            self._path = parent

    @contextmanager
    def _descend(self, segment: str) -> Iterator[None]:
        with self._at(self._path + segment):
            yield


_DEFAULT_EXPORTER = Exporter()


def export(value: Any, depth: int = DEFAULT_DEPTH) -> Tree:
    """Export a value with the default exporter configuration."""
    return _DEFAULT_EXPORTER.export(value, depth)


def _export_key(raw_key: Any) -> TreeKey:
    if type(raw_key) in (str, int):
        return raw_key
    if isinstance(raw_key, str):
        return str.__str__(raw_key)
    if isinstance(raw_key, int) and not isinstance(raw_key, bool):
        return int(raw_key)
    return str(raw_key)


def _plain_scalar(value: int | float | bytes) -> int | float | bytes:
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    return bytes(value)


def _ordered_members(value: set[Any] | frozenset[Any]) -> list[Any]:
    try:
        return sorted(value)
    except TypeError:
        return sorted(value, key=repr)


def _call_query(query: Callable[[], Any]) -> Any:
    try:
        return query()
    except Exception as error:
        _log.debug("query %r raised %s", query, error)
        return f"(raises {type(error).__name__})"
