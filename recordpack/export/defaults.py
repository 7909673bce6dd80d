"""Reference ("default") objects used to suppress boilerplate field values."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Union, get_args, get_origin
import types

from recordpack.export.exceptions import ExportConfigError

PLACEHOLDER_STRING = "?#?#?#*"

_STRING_ANNOTATIONS = frozenset({"str", "str | int", "int | str", "Union[str, int]", "Union[int, str]"})

_log = logging.getLogger(__name__)


def synthesize_default_object(cls: type) -> Any:
    """Instantiate `cls` with placeholders for its required string parameters.

    Raises `ExportConfigError` when a required parameter is not string-typed
    or when the constructor fails.
    """
    try:
        signature = inspect.signature(cls, eval_str=True)
    except NameError:
        signature = inspect.signature(cls)
    except (TypeError, ValueError) as error:
        raise ExportConfigError(
            f"Cannot synthesize a default {cls.__qualname__}: no inspectable constructor"
        ) from error

    args: list[str] = []
    kwargs: dict[str, str] = {}
    for parameter in signature.parameters.values():
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if parameter.default is not inspect.Parameter.empty:
            continue
        if not _is_string_annotation(parameter.annotation):
            raise ExportConfigError(
                f"Cannot synthesize a default {cls.__qualname__}: "
                f"required parameter '{parameter.name}' is not string-typed"
            )
        if parameter.kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[parameter.name] = PLACEHOLDER_STRING
        else:
            args.append(PLACEHOLDER_STRING)

    try:
        reference = cls(*args, **kwargs)
    except Exception as error:
        raise ExportConfigError(
            f"Cannot synthesize a default {cls.__qualname__}: constructor failed ({error})"
        ) from error

    _log.debug(
        "synthesized default %s with %d placeholder argument(s)",
        cls.__qualname__,
        len(args) + len(kwargs),
    )
    return reference


def strictly_equal(left: Any, right: Any) -> bool:
    """Strict, non-recursive equality of raw field values.

    Scalars must match in type and value, containers element by element, and
    any other object only by identity.
    """
    return _strictly_equal(left, right, set())


def _strictly_equal(left: Any, right: Any, seen: set[tuple[int, int]]) -> bool:
    if left is right:
        return True
    if type(left) is not type(right):
        return False

    if isinstance(left, (list, tuple, dict)):
        pair = (id(left), id(right))
        if pair in seen:
            return True
        seen.add(pair)
        if isinstance(left, dict):
            return list(left) == list(right) and all(
                _strictly_equal(left[key], right[key], seen) for key in left
            )
        return len(left) == len(right) and all(
            _strictly_equal(a, b, seen) for a, b in zip(left, right)
        )

    if left is None or isinstance(left, (bool, int, float, str, bytes)):
        return left == right

    return False


def _is_string_annotation(annotation: Any) -> bool:
    if annotation is str:
        return True
    if isinstance(annotation, str):
        return annotation.replace("typing.", "").strip() in _STRING_ANNOTATIONS
    if get_origin(annotation) in (Union, types.UnionType):
        members = set(get_args(annotation))
        return str in members and members <= {str, int}
    return False
