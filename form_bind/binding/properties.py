"""Per-class tables of readable and writable properties.

The table is built once per class from its annotations, properties and
``set_<name>`` methods, so binding and filling do not scan the class on
every call.
"""

import dataclasses
import inspect
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from pydantic import BaseModel

from form_bind.binding.hints import is_class_var, type_hints
from form_bind.errors import BindingError

SETTER_PREFIX = "set_"
# Bases whose attributes are never form properties
_INTERNAL_MODULES = frozenset({"pydantic", "pydantic_core"})


def _is_frozen(cls: type) -> bool:
    if dataclasses.is_dataclass(cls):
        return cls.__dataclass_params__.frozen
    if issubclass(cls, BaseModel):
        return bool(cls.model_config.get("frozen"))
    return False


def _own_members(cls: type) -> dict[str, Any]:
    """Attributes defined by the class and its bases, pydantic internals excluded."""
    members: dict[str, Any] = {}
    for klass in reversed(cls.__mro__):
        if klass is object or klass.__module__.split(".")[0] in _INTERNAL_MODULES:
            continue
        members.update(vars(klass))
    return members


def _first_param_hint(method: Callable[..., Any]) -> Any:
    params = [p for p in inspect.signature(method).parameters.values() if p.name != "self"]
    if not params:
        return Any
    return type_hints(method).get(params[0].name, Any)


def _setter_arity(method: Callable[..., Any]) -> int:
    try:
        params = list(inspect.signature(method).parameters.values())
    except (TypeError, ValueError):
        return -1
    return len([p for p in params if p.name != "self"])


class PropertySetter:
    """Writes one property of an instance."""

    def __init__(self, name: str, hint: Any, write: Callable[[Any, Any], None]) -> None:
        self.name = name
        self.hint = hint
        self._write = write

    def __call__(self, obj: Any, value: Any) -> None:
        self._write(obj, value)


class PropertyTable:
    """Explicit accessor and mutator table of a class.

    Readable properties are annotated attributes (dataclass and pydantic
    fields included) and Python properties. Writable properties are
    ``set_<name>(value)`` methods, properties with a setter and annotated
    attributes of classes that are not frozen.
    """

    def __init__(self, cls: type) -> None:
        self.cls = cls
        self._readable: dict[str, Any] = {}
        self._setters: dict[str, PropertySetter] = {}
        self._build()

    def _build(self) -> None:
        cls = self.cls
        frozen = _is_frozen(cls)
        for name, hint in type_hints(cls).items():
            if is_class_var(hint) or name.startswith("__"):
                continue
            if isinstance(inspect.getattr_static(cls, name, None), property):
                continue
            self._readable[name] = hint
            if not frozen:
                self._setters[name] = PropertySetter(name, hint, lambda obj, v, n=name: setattr(obj, n, v))
        members = _own_members(cls)
        for name, attr in members.items():
            if isinstance(attr, property):
                hint = type_hints(attr.fget).get("return", Any) if attr.fget else Any
                self._readable.setdefault(name, hint)
                if attr.fset is not None:
                    fset_hint = _first_param_hint(attr.fset)
                    self._setters[name] = PropertySetter(
                        name, hint if fset_hint is Any else fset_hint, lambda obj, v, n=name: setattr(obj, n, v)
                    )
        # Explicit setter methods win over plain attribute assignment
        for name in members:
            if not name.startswith(SETTER_PREFIX) or len(name) == len(SETTER_PREFIX):
                continue
            attr = getattr(cls, name)
            if not callable(attr) or _setter_arity(attr) != 1:
                continue
            prop = name[len(SETTER_PREFIX):]
            self._setters[prop] = PropertySetter(
                prop, _first_param_hint(attr), lambda obj, v, m=name: getattr(obj, m)(v)
            )

    @property
    def readable_names(self) -> list[str]:
        return list(self._readable)

    def is_readable(self, name: str) -> bool:
        return name in self._readable

    def property_type(self, name: str) -> Any:
        """Declared type of a property, the setter type when write-only."""
        if name in self._readable:
            return self._readable[name]
        setter = self._setters.get(name)
        return setter.hint if setter else Any

    def setter(self, name: str) -> PropertySetter | None:
        return self._setters.get(name)

    def get(self, obj: Any, name: str) -> Any:
        return getattr(obj, name, None)

    def set(self, obj: Any, name: str, value: Any) -> None:
        """Write a property.

        Raises:
            BindingError: If the property has no setter or cannot be written.
            ValueError, TypeError: If the setter rejects the value.
        """
        setter = self._setters.get(name)
        if setter is None:
            raise BindingError(f"Setter for property {name} was not found in {self.cls.__name__}")
        try:
            setter(obj, value)
        except AttributeError as e:
            raise BindingError(f"Setting property {name} of class {self.cls.__name__} failed: {e}") from e


@lru_cache(maxsize=None)
def property_table(cls: type) -> PropertyTable:
    """Cached property table of a class."""
    return PropertyTable(cls)
