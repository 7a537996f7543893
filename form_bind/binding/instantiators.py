"""Strategies for creating the object a mapping binds to.

Each strategy offers candidate construction methods; the one with the
most parameters resolvable to property names wins, a zero-argument
candidate being the fallback.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from form_bind.binding.arguments import (
    VARIADIC_KINDS,
    ArgumentNameResolver,
    construction_parameters,
    parameter_hints,
)
from form_bind.errors import ConstructionError

logger = logging.getLogger(__name__)


class ConstructionArgument(BaseModel):
    """One bindable parameter of a construction method."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str  # logical property name
    parameter: str  # Python parameter name
    hint: Any
    has_default: bool = False
    positional_only: bool = False


class ConstructionDescription(BaseModel):
    """Chosen construction method and its ordered, resolved arguments.

    Recomputed on every bind since argument names depend on the
    configured resolver.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    method: Callable[..., Any] | None = None
    arguments: list[ConstructionArgument] = Field(default_factory=list)

    @property
    def arg_names(self) -> list[str]:
        return [a.name for a in self.arguments]


@runtime_checkable
class Instantiator(Protocol):
    """Creates instances of a data class."""

    def describe(self, target_class: type, resolver: ArgumentNameResolver) -> ConstructionDescription:
        ...

    def instantiate(self, target_class: type, description: ConstructionDescription, args: dict[str, Any]) -> Any:
        ...


def _describe_candidate(method: Callable[..., Any], resolver: ArgumentNameResolver) -> ConstructionDescription | None:
    """Describe one candidate, None if some parameter cannot be resolved."""
    try:
        params = construction_parameters(method)
    except (TypeError, ValueError):
        # Classes without own constructor are zero-argument
        if not isinstance(method, type):
            return None
        params = []
    hints = parameter_hints(method) if params else {}
    arguments = []
    for index, param in enumerate(params):
        if param.kind in VARIADIC_KINDS:
            continue
        name = resolver.argument_name(method, index)
        if name is None:
            return None
        arguments.append(
            ConstructionArgument(
                name=name,
                parameter=param.name,
                hint=hints.get(param.name, Any),
                has_default=param.default is not inspect.Parameter.empty,
                positional_only=param.kind is inspect.Parameter.POSITIONAL_ONLY,
            )
        )
    return ConstructionDescription(method=method, arguments=arguments)


def choose_description(
    target_name: str,
    candidates: list[Callable[..., Any]],
    resolver: ArgumentNameResolver,
) -> ConstructionDescription:
    """Pick the candidate with the maximum count of resolvable arguments.

    Ties are broken by encounter order.

    Raises:
        ConstructionError: If no candidate is usable.
    """
    chosen: ConstructionDescription | None = None
    max_arg_count = -1
    for method in candidates:
        desc = _describe_candidate(method, resolver)
        if desc is not None and len(desc.arguments) > max_arg_count:
            max_arg_count = len(desc.arguments)
            chosen = desc
    if chosen is None:
        raise ConstructionError(target_name, "Did you forget to specify a custom instantiator?")
    logger.debug("Construction of %s uses arguments %s", target_name, chosen.arg_names)
    return chosen


def call_construction_method(description: ConstructionDescription, args: dict[str, Any]) -> Any:
    """Invoke the described method with arguments keyed by parameter name.

    Arguments missing from ``args`` are omitted so their defaults apply.
    """
    positional = []
    keywords = {}
    for argument in description.arguments:
        if argument.parameter not in args:
            continue
        if argument.positional_only:
            positional.append(args[argument.parameter])
        else:
            keywords[argument.parameter] = args[argument.parameter]
    return description.method(*positional, **keywords)


class ConstructorInstantiator:
    """Instantiates the class via its constructor.

    Pydantic models are created with ``model_construct`` so constraint
    violations are reported by validation rather than raised here.
    """

    def describe(self, target_class: type, resolver: ArgumentNameResolver) -> ConstructionDescription:
        return choose_description(target_class.__name__, [target_class], resolver)

    def instantiate(self, target_class: type, description: ConstructionDescription, args: dict[str, Any]) -> Any:
        if isinstance(target_class, type) and issubclass(target_class, BaseModel):
            return target_class.model_construct(**args)
        return call_construction_method(description, args)


class StaticFactoryMethod:
    """Instantiates via static or class methods with given names."""

    def __init__(self, factory_class: type, *method_names: str) -> None:
        if not method_names:
            raise ValueError("At least one factory method name is required")
        self.factory_class = factory_class
        self.method_names = method_names

    def _candidates(self) -> list[Callable[..., Any]]:
        return [
            getattr(self.factory_class, name)
            for name in self.method_names
            if callable(getattr(self.factory_class, name, None))
        ]

    def describe(self, target_class: type, resolver: ArgumentNameResolver) -> ConstructionDescription:
        names = ", ".join(self.method_names)
        return choose_description(f"{self.factory_class.__name__}.{{{names}}}", self._candidates(), resolver)

    def instantiate(self, target_class: type, description: ConstructionDescription, args: dict[str, Any]) -> Any:
        return call_construction_method(description, args)


class InstanceHoldingInstantiator:
    """Returns a client-supplied instance that is then filled via setters."""

    def __init__(self, instance: Any) -> None:
        if instance is None:
            raise ValueError("instance cannot be None")
        self.instance = instance

    def describe(self, target_class: type, resolver: ArgumentNameResolver) -> ConstructionDescription:
        return ConstructionDescription()

    def instantiate(self, target_class: type, description: ConstructionDescription, args: dict[str, Any]) -> Any:
        return self.instance
