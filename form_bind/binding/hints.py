"""Helpers for inspecting type hints of bound properties."""

import inspect
import sys
import types
import typing
from typing import Annotated, Any, ClassVar, Union, get_args, get_origin

_NONE_TYPE = type(None)


def unwrap_type(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    """Strip ``Optional`` and ``Annotated`` wrappers from a type hint.

    Args:
        hint: A type hint, e.g. ``Annotated[list[int] | None, ...]``.

    Returns:
        Tuple of the underlying hint and the collected Annotated metadata.
    """
    metadata: tuple[Any, ...] = ()
    while True:
        origin = get_origin(hint)
        if origin is Annotated:
            args = get_args(hint)
            hint = args[0]
            metadata += tuple(args[1:])
        elif origin is Union or origin is types.UnionType:
            args = [a for a in get_args(hint) if a is not _NONE_TYPE]
            if len(args) != 1:
                # Real unions of several types are not unwrapped
                return hint, metadata
            hint = args[0]
        else:
            return hint, metadata


def raw_class(hint: Any) -> type | None:
    """Runtime class of a (possibly generic) hint, None for Any or unknown."""
    hint, _ = unwrap_type(hint)
    if hint is Any or hint is None:
        return None
    origin = get_origin(hint)
    if origin is not None:
        return origin if isinstance(origin, type) else None
    return hint if isinstance(hint, type) else None


def item_type(hint: Any) -> Any:
    """Item type of a generic collection hint, Any when not declared."""
    hint, _ = unwrap_type(hint)
    args = get_args(hint)
    if not args:
        return Any
    return args[0]


def is_class_var(hint: Any) -> bool:
    if isinstance(hint, str):
        return hint.split("[", 1)[0].rsplit(".", 1)[-1] == "ClassVar"
    return hint is ClassVar or get_origin(hint) is ClassVar


def _resolve(hint: Any, globalns: dict[str, Any], localns: dict[str, Any]) -> Any:
    """Resolve one (possibly string) hint, unchanged when it cannot be resolved."""
    holder = types.SimpleNamespace(__annotations__={"hint": hint})
    try:
        return typing.get_type_hints(holder, globalns=globalns, localns=localns, include_extras=True)["hint"]
    except (NameError, TypeError, SyntaxError, AttributeError):
        return hint


def _class_hints(cls: type) -> dict[str, Any]:
    hints: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        module = sys.modules.get(klass.__module__)
        globalns = dict(vars(module)) if module is not None else {}
        localns = dict(vars(klass))
        for name, hint in inspect.get_annotations(klass).items():
            hints[name] = _resolve(hint, globalns, localns)
    return hints


def type_hints(obj: Any) -> dict[str, Any]:
    """Resolved type hints of a class or function.

    When some hint of a class cannot be resolved (e.g. names imported only
    for type checking), the hints are resolved one by one and unresolvable
    ones are kept as strings.
    """
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except (NameError, TypeError, AttributeError):
        if isinstance(obj, type):
            return _class_hints(obj)
        return dict(getattr(obj, "__annotations__", None) or {})
