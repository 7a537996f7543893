"""Binding of converted form values to new or client-supplied objects."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from form_bind.binding.arguments import ArgumentNameResolver, SignatureArgumentNameResolver
from form_bind.binding.conversion import BoundValuesInfo, ValueConverter
from form_bind.binding.instantiators import (
    ConstructorInstantiator,
    InstanceHoldingInstantiator,
    Instantiator,
)
from form_bind.binding.parse_error import ParseError
from form_bind.binding.properties import property_table
from form_bind.errors import BindingError
from form_bind.format import BasicFormatters, Formatters
from form_bind.paths import AUTH_TOKEN_FIELD_NAME

logger = logging.getLogger(__name__)


def _as_string(info: BoundValuesInfo) -> str:
    """Submitted text of a property for redisplay."""
    return ", ".join(v for v in info.values or () if isinstance(v, str))


class BoundData(BaseModel):
    """Bound object and the parse errors of its properties."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: Any = None
    property_bind_errors: dict[str, list[ParseError]] = Field(default_factory=dict)


class Binder:
    """Creates an object from values keyed by property name.

    Construction arguments are bound first, the remaining properties
    through setters. Unparseable values never abort binding; they are
    collected as ParseErrors per property.
    """

    def __init__(
        self,
        formatters: Formatters | None = None,
        argument_name_resolver: ArgumentNameResolver | None = None,
    ) -> None:
        self.formatters = formatters or BasicFormatters()
        self.argument_name_resolver = argument_name_resolver or SignatureArgumentNameResolver()
        self.converter = ValueConverter(self.formatters)

    def bind_to_new_instance(
        self,
        target_class: type,
        instantiator: Instantiator | None,
        values: dict[str, BoundValuesInfo],
    ) -> BoundData:
        """Bind values to an instance created by the instantiator.

        Args:
            target_class: Class of the bound object.
            instantiator: Construction strategy, the constructor when None.
            values: Values of declared properties keyed by property name.

        Returns:
            BoundData with the instance and parse errors per property.

        Raises:
            BindingError: If a construction argument was not declared or a
                submitted property cannot be written.
            ConstructionError: If the class has no usable construction method.
        """
        inst = instantiator or ConstructorInstantiator()
        errors: dict[str, list[ParseError]] = {}
        description = inst.describe(target_class, self.argument_name_resolver)

        args: dict[str, Any] = {}
        for argument in description.arguments:
            info = values.get(argument.name)
            if info is None:
                if argument.has_default:
                    continue
                raise BindingError(
                    f"Property '{argument.name}' required by the constructor of {target_class.__name__} "
                    "could not be bound. Value to bind was not found. "
                    "The appropriate field was probably not declared."
                )
            if not info.submitted and argument.has_default:
                continue
            parsed = self.converter.convert_to_value(argument.name, info, argument.hint)
            args[argument.parameter] = parsed.value
            if parsed.parse_errors:
                errors.setdefault(argument.name, []).extend(parsed.parse_errors)
        obj = inst.instantiate(target_class, description, args)

        client_instance = isinstance(inst, InstanceHoldingInstantiator)
        consumed = set(description.arg_names)
        for name, info in values.items():
            if name in consumed or not info.submitted:
                continue
            self._update_property(obj, name, info, errors, client_instance)
        return BoundData(data=obj, property_bind_errors=errors)

    def _update_property(
        self,
        obj: Any,
        name: str,
        info: BoundValuesInfo,
        errors: dict[str, list[ParseError]],
        client_instance: bool,
    ) -> None:
        table = property_table(type(obj))
        setter = table.setter(name)
        if setter is None:
            # A client-supplied instance may hold the value from its own constructor
            if client_instance or name == AUTH_TOKEN_FIELD_NAME:
                logger.debug("Skipping property %s of %s without setter", name, type(obj).__name__)
                return
            raise BindingError(f"Setter for property {name} was not found in {type(obj).__name__}")
        parsed = self.converter.convert_to_value(name, info, setter.hint)
        if parsed.parse_errors:
            errors.setdefault(name, []).extend(parsed.parse_errors)
        try:
            table.set(obj, name, parsed.value)
        except (TypeError, ValueError) as e:
            logger.debug("Setter of property %s of %s rejected the value: %s", name, type(obj).__name__, e)
            if parsed.parse_errors:
                return
            errors.setdefault(name, []).append(ParseError.rejected(name, setter.hint, _as_string(info), e))
