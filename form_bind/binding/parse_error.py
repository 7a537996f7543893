"""Recoverable failures of converting a submitted string to a property type."""

from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError


class HumanReadableType(str, Enum):
    """Type category named in localized parse error messages."""

    NUMBER = "number"
    DECIMAL_NUMBER = "decimal"
    DATE = "date"
    TEXT = "text"
    LOGICAL = "logical"
    CHARACTER = "character"
    OBJECT = "object"


def human_readable_type(target_type: Any) -> HumanReadableType:
    if not isinstance(target_type, type):
        return HumanReadableType.OBJECT
    if issubclass(target_type, bool):
        return HumanReadableType.LOGICAL
    if issubclass(target_type, int):
        return HumanReadableType.NUMBER
    if issubclass(target_type, (float, Decimal)):
        return HumanReadableType.DECIMAL_NUMBER
    if issubclass(target_type, (date, datetime, time)):
        return HumanReadableType.DATE
    if issubclass(target_type, str):
        return HumanReadableType.TEXT
    return HumanReadableType.OBJECT


class ParseError(BaseModel):
    """A submitted value that could not be converted or set for a property.

    Keeps the original text so it can be shown again in the form.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    property_name: str
    target_type: Any
    value_as_string: str
    # Set when the property setter refused an already converted value
    reason: str | None = None
    reason_template: str | None = None
    reason_args: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def rejected(cls, property_name: str, target_type: Any, value_as_string: str, error: Exception) -> "ParseError":
        """Error for a value the setter of the property rejected."""
        if isinstance(error, ValidationError) and error.error_count():
            detail = error.errors()[0]
            return cls(
                property_name=property_name,
                target_type=target_type,
                value_as_string=value_as_string,
                reason=detail["msg"],
                reason_template=f"constraints.{detail['type']}",
                reason_args={k: str(v) for k, v in (detail.get("ctx") or {}).items()},
            )
        return cls(
            property_name=property_name,
            target_type=target_type,
            value_as_string=value_as_string,
            reason=str(error),
            reason_template="constraints.InvalidValue",
        )

    @property
    def human_readable_type(self) -> HumanReadableType:
        return human_readable_type(self.target_type)

    @property
    def msg_template(self) -> str:
        if self.reason_template:
            return self.reason_template
        return f"constraints.ParseError.{self.human_readable_type.value}"

    @property
    def message_args(self) -> dict[str, str]:
        args = {
            "valueAsString": self.value_as_string,
            "targetType": getattr(self.target_type, "__name__", str(self.target_type)),
            "humanReadableType": self.human_readable_type.value,
        }
        args.update(self.reason_args)
        return args

    @property
    def text(self) -> str:
        if self.reason:
            return self.reason
        return f"'{self.value_as_string}' is not a valid {self.human_readable_type.value}"
