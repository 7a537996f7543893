"""Semantic validation of bound objects.

Constraint checks are delegated to pydantic: pydantic models and
dataclasses are re-validated from their bound attribute values and the
resulting errors are reported under the full paths of the form fields.
"""

import dataclasses
import logging
from collections.abc import Sequence
from functools import lru_cache
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, TypeAdapter, ValidationError

from form_bind.binding.parse_error import ParseError
from form_bind.paths import PATH_SEP
from form_bind.upload import MaxSizeExceededError, RequestProcessingError
from form_bind.validation.models import ConstraintViolationMessage, Severity, ValidationResult

logger = logging.getLogger(__name__)


@runtime_checkable
class BeanValidator(Protocol):
    """Validates bound objects and reports messages for form fields."""

    def validate(
        self,
        obj: Any,
        path_prefix: str,
        request_errors: Sequence[RequestProcessingError],
        parse_errors: dict[str, list[ParseError]],
        locale: str | None = None,
        groups: Sequence[str] = (),
    ) -> ValidationResult:
        ...

    def is_required(self, cls: type, property_name: str) -> bool:
        ...


@lru_cache(maxsize=None)
def _adapter(cls: type) -> TypeAdapter:
    return TypeAdapter(cls)


def _bound_values(obj: Any) -> dict[str, Any] | None:
    if isinstance(obj, BaseModel):
        return dict(obj.__dict__)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj) if f.init}
    return None


def _field_path(path_prefix: str, property_name: str) -> str:
    return f"{path_prefix}{PATH_SEP}{property_name}" if path_prefix else property_name


def parse_error_message(error: ParseError) -> ConstraintViolationMessage:
    return ConstraintViolationMessage(
        severity=Severity.ERROR,
        text=error.text,
        msg_template=error.msg_template,
        msg_args=error.message_args,
        invalid_value=error.value_as_string,
    )


def request_error_message(error: RequestProcessingError) -> ConstraintViolationMessage:
    args: dict[str, Any] = {}
    if isinstance(error, MaxSizeExceededError):
        args = {"maxSize": error.max_size, "actualSize": error.actual_size}
    return ConstraintViolationMessage(
        severity=Severity.ERROR,
        text=error.message,
        msg_template=error.msg_template,
        msg_args=args,
    )


class DefaultBeanValidator:
    """Reports parse errors, request errors and pydantic constraint errors.

    Validation groups are passed to pydantic validators in the validation
    context (``info.context["groups"]``).
    """

    def validate(
        self,
        obj: Any,
        path_prefix: str,
        request_errors: Sequence[RequestProcessingError],
        parse_errors: dict[str, list[ParseError]],
        locale: str | None = None,
        groups: Sequence[str] = (),
    ) -> ValidationResult:
        """Validate a bound object.

        Args:
            obj: The bound object, may be None.
            path_prefix: Path of the mapping the object was bound by.
            request_errors: Errors of request processing (e.g. upload limits).
            parse_errors: Parse errors keyed by property name.
            locale: Locale of the messages.
            groups: Validation groups to check.

        Returns:
            ValidationResult with field messages keyed by full field path.
        """
        field_messages: dict[str, list[ConstraintViolationMessage]] = {}
        global_messages = [request_error_message(e) for e in request_errors if e is not None]

        for property_name, errors in parse_errors.items():
            if errors:
                msgs = field_messages.setdefault(_field_path(path_prefix, property_name), [])
                msgs.extend(parse_error_message(e) for e in errors)

        values = _bound_values(obj) if obj is not None else None
        if values is not None:
            try:
                _adapter(type(obj)).validate_python(values, context={"groups": tuple(groups)})
            except ValidationError as e:
                self._collect(e, path_prefix, parse_errors, field_messages, global_messages)

        return ValidationResult(field_messages=field_messages, global_messages=global_messages)

    def _collect(
        self,
        error: ValidationError,
        path_prefix: str,
        parse_errors: dict[str, list[ParseError]],
        field_messages: dict[str, list[ConstraintViolationMessage]],
        global_messages: list[ConstraintViolationMessage],
    ) -> None:
        for detail in error.errors():
            loc = detail["loc"]
            msg = ConstraintViolationMessage(
                severity=Severity.ERROR,
                text=detail["msg"],
                msg_template=f"constraints.{detail['type']}",
                msg_args={k: str(v) for k, v in (detail.get("ctx") or {}).items()},
            )
            if not loc:
                global_messages.append(msg)
                continue
            property_name = loc[0]
            # Deeper errors belong to nested mappings validating their own objects
            if not isinstance(property_name, str) or (len(loc) > 1 and not isinstance(loc[1], int)):
                continue
            if parse_errors.get(property_name):
                continue
            msgs = field_messages.setdefault(_field_path(path_prefix, property_name), [])
            if msg not in msgs:
                msgs.append(msg)
        logger.debug("Validation of %s found %d errors", path_prefix, error.error_count())

    def is_required(self, cls: type, property_name: str) -> bool:
        """Whether a value must be submitted for the property."""
        if isinstance(cls, type) and issubclass(cls, BaseModel):
            field = cls.model_fields.get(property_name)
            return field is not None and field.is_required()
        if dataclasses.is_dataclass(cls):
            for f in dataclasses.fields(cls):
                if f.name == property_name:
                    return f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        return False
