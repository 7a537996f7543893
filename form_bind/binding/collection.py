"""Collection shapes a multi-valued property can be bound to.

A small closed set of collection kinds, each with its own builder. The
kind is selected from the declared type hint of the property.
"""

import collections.abc
from collections.abc import Iterable
from enum import Enum
from typing import Any, get_origin

from pydantic import BaseModel, ConfigDict

from form_bind.binding.hints import item_type, unwrap_type


class CollectionKind(str, Enum):
    """Ordering of items in a built collection."""

    LINEAR = "linear"  # Keeps submitted order
    HASH = "hash"  # Unique items, no ordering guarantee
    SORTED = "sorted"  # Unique items in natural order


class CollectionSpec(BaseModel):
    """Resolved collection shape of a property."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    kind: CollectionKind
    container: type
    item_type: Any


_LINEAR_ORIGINS: dict[Any, type] = {
    list: list,
    tuple: tuple,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
}

_HASH_ORIGINS: dict[Any, type] = {
    set: set,
    frozenset: frozenset,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}


def _build_linear(container: type, items: list[Any]) -> Any:
    return tuple(items) if container is tuple else list(items)


def _build_hash(container: type, items: list[Any]) -> Any:
    return frozenset(items) if container is frozenset else set(items)


def _build_sorted(container: type, items: list[Any]) -> Any:
    unique = []
    for item in items:
        if item not in unique:
            unique.append(item)
    # None (unparseable items) is kept in front
    nones = [i for i in unique if i is None]
    ordered = nones + sorted(i for i in unique if i is not None)
    return tuple(ordered) if container is tuple else ordered


_BUILDERS = {
    CollectionKind.LINEAR: _build_linear,
    CollectionKind.HASH: _build_hash,
    CollectionKind.SORTED: _build_sorted,
}


def collection_spec(hint: Any) -> CollectionSpec | None:
    """Collection spec for a type hint, None if it is not a collection.

    ``str`` and ``bytes`` are never treated as collections. A linear hint
    annotated with ``CollectionKind.SORTED`` yields a sorted collection.
    """
    base, metadata = unwrap_type(hint)
    origin = get_origin(base) or base
    if origin in (str, bytes):
        return None
    if origin in _HASH_ORIGINS:
        return CollectionSpec(kind=CollectionKind.HASH, container=_HASH_ORIGINS[origin], item_type=item_type(base))
    if origin in _LINEAR_ORIGINS:
        kind = CollectionKind.SORTED if CollectionKind.SORTED in metadata else CollectionKind.LINEAR
        return CollectionSpec(kind=kind, container=_LINEAR_ORIGINS[origin], item_type=item_type(base))
    return None


def build_collection(spec: CollectionSpec, items: Iterable[Any]) -> Any:
    """Build the collection of the spec's shape from items."""
    return _BUILDERS[spec.kind](spec.container, list(items))


def is_collection_value(value: Any) -> bool:
    """True for already built collections (list mapping results)."""
    return isinstance(value, (list, tuple, set, frozenset))
