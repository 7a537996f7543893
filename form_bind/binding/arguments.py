"""Resolution of logical property names of construction method parameters."""

import inspect
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from form_bind.binding.hints import type_hints, unwrap_type

VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class ArgumentName:
    """Marks a constructor parameter as bound to a differently named property.

    Usage: ``def __init__(self, nm: Annotated[str, ArgumentName("name")])``.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"ArgumentName({self.name!r})"


@runtime_checkable
class ArgumentNameResolver(Protocol):
    """Maps a parameter position of a construction method to a property name."""

    def argument_name(self, method: Callable[..., Any], index: int) -> str | None:
        ...


def construction_parameters(method: Callable[..., Any]) -> list[inspect.Parameter]:
    """Parameters of a construction method (``self``/``cls`` excluded)."""
    return list(inspect.signature(method).parameters.values())


def parameter_hints(method: Callable[..., Any]) -> dict[str, Any]:
    """Resolved type hints of the parameters of a construction method.

    For classes the constructor hints are merged with the class-level
    annotations, which win over unresolved (string) constructor hints.
    """
    hints: dict[str, Any] = {}
    if isinstance(method, type):
        init = getattr(method, "__init__", None)
        if inspect.isfunction(init):
            hints.update(type_hints(init))
        for name, hint in type_hints(method).items():
            if name not in hints or isinstance(hints[name], str):
                hints[name] = hint
    else:
        hints.update(type_hints(method))
    hints.pop("return", None)
    for param in construction_parameters(method):
        if param.name not in hints and param.annotation is not inspect.Parameter.empty:
            hints[param.name] = param.annotation
    return hints


class SignatureArgumentNameResolver:
    """Resolves argument names from the Python signature.

    The property name is the parameter name unless the parameter is
    annotated with ArgumentName. Variadic parameters have no name.
    """

    def argument_name(self, method: Callable[..., Any], index: int) -> str | None:
        params = construction_parameters(method)
        if index >= len(params):
            return None
        param = params[index]
        if param.kind in VARIADIC_KINDS:
            return None
        _, metadata = unwrap_type(parameter_hints(method).get(param.name, Any))
        for item in metadata:
            if isinstance(item, ArgumentName):
                return item.name
        return param.name
