"""Conversion of submitted values to property types."""

import logging
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from form_bind.binding.collection import build_collection, collection_spec, is_collection_value
from form_bind.binding.hints import raw_class
from form_bind.binding.parse_error import ParseError
from form_bind.errors import MappingConfigurationError
from form_bind.format import Formatter, Formatters, StringParseError
from form_bind.upload import UploadedFile

logger = logging.getLogger(__name__)


class BoundValuesInfo(BaseModel):
    """Values submitted for one property plus how to parse them."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    # Strings, uploaded files or already bound nested objects;
    # None when the parameter was not submitted at all
    values: list[Any] | None = None
    formatter: Formatter | None = None
    pattern: str | None = None
    locale: str | None = None

    @property
    def submitted(self) -> bool:
        return self.values is not None

    @classmethod
    def of(cls, values: list[Any] | None, formatter: Formatter | None = None,
           pattern: str | None = None, locale: str | None = None) -> "BoundValuesInfo":
        return cls(values=None if values is None else list(values), formatter=formatter, pattern=pattern, locale=locale)


class ParsedValue(BaseModel):
    """Converted value with the parse errors of its items."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = None
    parse_errors: list[ParseError] = Field(default_factory=list)

    @property
    def successfully_parsed(self) -> bool:
        return not self.parse_errors


def _implicitly_convertible(value: Any, target_class: type) -> bool:
    # int widens to float and Decimal
    if isinstance(value, bool):
        return False
    return isinstance(value, int) and target_class in (float, Decimal)


class ValueConverter:
    """Converts raw form values to scalar or collection property values.

    Malformed input never raises: each failed string becomes None and a
    ParseError for the owning property.
    """

    def __init__(self, formatters: Formatters) -> None:
        self.formatters = formatters

    def convert_to_value(self, property_name: str, values_info: BoundValuesInfo, target_type: Any) -> ParsedValue:
        """Convert submitted values for a property of the given type.

        Args:
            property_name: Name of the property, used in parse errors.
            values_info: Submitted values with formatter, pattern and locale.
            target_type: Declared type hint of the property.

        Returns:
            ParsedValue with the converted value and parse errors.
        """
        parse_errors: list[ParseError] = []
        spec = collection_spec(target_type)
        values = values_info.values or []
        if spec is not None:
            if len(values) == 1 and is_collection_value(values[0]):
                # Already built by a list mapping
                items = [
                    self._convert_one(property_name, v, spec.item_type, values_info, parse_errors)
                    for v in values[0]
                ]
            else:
                items = [
                    self._convert_one(property_name, v, spec.item_type, values_info, parse_errors)
                    for v in values
                ]
            return ParsedValue(value=build_collection(spec, items), parse_errors=parse_errors)
        if not values:
            return ParsedValue()
        value = self._convert_one(property_name, values[0], target_type, values_info, parse_errors)
        return ParsedValue(value=value, parse_errors=parse_errors)

    def _convert_one(
        self,
        property_name: str,
        form_value: Any,
        target_type: Any,
        values_info: BoundValuesInfo,
        parse_errors: list[ParseError],
    ) -> Any:
        target_class = raw_class(target_type)
        if form_value is None or not isinstance(form_value, str) or target_class is None:
            if target_class is not None and _implicitly_convertible(form_value, target_class):
                return target_class(form_value)
            # Uploaded files, nested objects and untyped values pass through
            return form_value
        if isinstance(form_value, target_class):
            return form_value
        if issubclass(target_class, UploadedFile):
            raise MappingConfigurationError(
                f"Invalid string value for property '{property_name}' of type {UploadedFile.__name__}. "
                "Did you forget to submit the form as multipart?"
            )
        if form_value == "" and target_class is not str:
            return None
        try:
            if values_info.formatter is not None:
                return values_info.formatter.parse(form_value, target_class, values_info.pattern, values_info.locale)
            return self.formatters.parse(form_value, target_class, values_info.pattern, values_info.locale)
        except StringParseError:
            logger.debug("Value %r of property %s is not a valid %s", form_value, property_name, target_class.__name__)
            parse_errors.append(ParseError(property_name=property_name, target_type=target_class, value_as_string=form_value))
            return None
