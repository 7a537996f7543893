"""Conversion of form strings to typed values and back.

The registry maps target types to formatters. Parse failures raise
StringParseError, which the binder turns into a ParseError for the
property instead of propagating it.
"""

from collections.abc import Callable
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

# Languages writing decimal numbers with a comma
COMMA_DECIMAL_LANGUAGES = frozenset({"cs", "sk", "de", "fr", "es", "it", "pl", "ru", "pt", "nl"})

TRUE_STRINGS = frozenset({"t", "y", "true", "1", "on", "yes"})


class StringParseError(ValueError):
    """Raised when a string cannot be converted to the target type."""

    def __init__(self, target_type: type, value: str, cause: Exception | None = None) -> None:
        self.target_type = target_type
        self.value = value
        message = f"Cannot parse {value!r} to {getattr(target_type, '__name__', target_type)}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


@runtime_checkable
class Formatter(Protocol):
    """Two-way conversion between strings and values of one type."""

    def parse(self, text: str, target_type: type, pattern: str | None, locale: str | None) -> Any:
        ...

    def make_string(self, value: Any, pattern: str | None, locale: str | None) -> str:
        ...


def _language(locale: str | None) -> str:
    if not locale:
        return ""
    return locale.replace("-", "_").split("_")[0].lower()


def _uses_decimal_comma(locale: str | None) -> bool:
    return _language(locale) in COMMA_DECIMAL_LANGUAGES


def _normalize_number(text: str, locale: str | None) -> str:
    amended = text.strip().replace(" ", "").replace("\u00a0", "")
    if _uses_decimal_comma(locale):
        amended = amended.replace(".", "").replace(",", ".")
    else:
        amended = amended.replace(",", "")
    return amended


class _FunctionFormatter:
    """Formatter assembled from a parse function and a format function."""

    def __init__(
        self,
        parse_fn: Callable[[str, type, str | None, str | None], Any],
        format_fn: Callable[[Any, str | None, str | None], str] | None = None,
    ) -> None:
        self._parse_fn = parse_fn
        self._format_fn = format_fn

    def parse(self, text: str, target_type: type, pattern: str | None, locale: str | None) -> Any:
        try:
            return self._parse_fn(text, target_type, pattern, locale)
        except StringParseError:
            raise
        except (ValueError, TypeError, ArithmeticError, InvalidOperation) as e:
            raise StringParseError(target_type, text, e) from e

    def make_string(self, value: Any, pattern: str | None, locale: str | None) -> str:
        if value is None:
            return ""
        if self._format_fn is None:
            return str(value)
        return self._format_fn(value, pattern, locale)


def _parse_int(text, target_type, pattern, locale):
    return int(_normalize_number(text, locale))


def _parse_float(text, target_type, pattern, locale):
    return float(_normalize_number(text, locale))


def _format_float(value, pattern, locale):
    text = format(value, pattern) if pattern else repr(float(value))
    if text.endswith(".0") and not pattern:
        text = text[:-2]
    return text.replace(".", ",") if _uses_decimal_comma(locale) else text


def _parse_decimal(text, target_type, pattern, locale):
    return Decimal(_normalize_number(text, locale))


def _format_decimal(value, pattern, locale):
    text = format(value, pattern) if pattern else str(value)
    return text.replace(".", ",") if _uses_decimal_comma(locale) else text


def _parse_bool(text, target_type, pattern, locale):
    return text.strip().lower() in TRUE_STRINGS


def _parse_str(text, target_type, pattern, locale):
    return text


def _parse_date(text, target_type, pattern, locale):
    if pattern:
        return datetime.strptime(text.strip(), pattern).date()
    return date.fromisoformat(text.strip())


def _parse_datetime(text, target_type, pattern, locale):
    if pattern:
        return datetime.strptime(text.strip(), pattern)
    return datetime.fromisoformat(text.strip())


def _parse_time(text, target_type, pattern, locale):
    if pattern:
        return datetime.strptime(text.strip(), pattern).time()
    return time.fromisoformat(text.strip())


def _format_temporal(value, pattern, locale):
    return value.strftime(pattern) if pattern else value.isoformat()


def _parse_uuid(text, target_type, pattern, locale):
    return UUID(text.strip())


def _parse_enum(text, target_type, pattern, locale):
    name = text.strip()
    if name in target_type.__members__:
        return target_type[name]
    # Also accept member values, e.g. for str-valued enums
    for member in target_type:
        if str(member.value) == name:
            return member
    raise ValueError(f"{name!r} is not a member of {target_type.__name__}")


def _format_enum(value, pattern, locale):
    return value.name


class Formatters:
    """Registry of formatters keyed by target type."""

    def __init__(self, formatters: dict[type, Formatter] | None = None) -> None:
        self._formatters: dict[type, Formatter] = dict(formatters or {})
        self._enum_formatter: Formatter = _FunctionFormatter(_parse_enum, _format_enum)

    def register(self, target_type: type, formatter: Formatter) -> None:
        """Register (or replace) the formatter for a type."""
        self._formatters[target_type] = formatter

    def find(self, target_type: type) -> Formatter | None:
        formatter = self._formatters.get(target_type)
        if formatter is not None:
            return formatter
        if isinstance(target_type, type):
            if issubclass(target_type, Enum):
                return self._enum_formatter
            # Subclasses (e.g. IntEnum is handled above, datetime before date)
            for registered, candidate in self._formatters.items():
                if issubclass(target_type, registered):
                    return candidate
        return None

    def can_handle(self, target_type: Any) -> bool:
        return self.find(target_type) is not None

    def parse(self, text: str, target_type: type, pattern: str | None = None, locale: str | None = None) -> Any:
        """Parse a string to the target type.

        Raises:
            StringParseError: If the string cannot be converted, or no
                formatter is registered for the type.
        """
        formatter = self.find(target_type)
        if formatter is None:
            raise StringParseError(target_type, text)
        return formatter.parse(text, target_type, pattern, locale)

    def make_string(self, value: Any, pattern: str | None = None, locale: str | None = None) -> str:
        """Format a value for display, falling back to str()."""
        if value is None:
            return ""
        formatter = self.find(type(value))
        if formatter is None:
            return str(value)
        return formatter.make_string(value, pattern, locale)


class BasicFormatters(Formatters):
    """Formatters for common scalar types."""

    def __init__(self) -> None:
        # Order matters for subclass lookup: datetime is a subclass of date
        super().__init__(
            {
                str: _FunctionFormatter(_parse_str),
                bool: _FunctionFormatter(_parse_bool, lambda v, p, loc: "true" if v else "false"),
                int: _FunctionFormatter(_parse_int),
                float: _FunctionFormatter(_parse_float, _format_float),
                Decimal: _FunctionFormatter(_parse_decimal, _format_decimal),
                datetime: _FunctionFormatter(_parse_datetime, _format_temporal),
                date: _FunctionFormatter(_parse_date, _format_temporal),
                time: _FunctionFormatter(_parse_time, _format_temporal),
                UUID: _FunctionFormatter(_parse_uuid),
            }
        )
