"""Formatters converting form strings to typed values and back."""

from form_bind.format.formatters import (
    BasicFormatters,
    Formatter,
    Formatters,
    StringParseError,
)

__all__ = [
    "BasicFormatters",
    "Formatter",
    "Formatters",
    "StringParseError",
]
