"""Validation messages and results produced by binding a form.

A ValidationResult is an immutable report for one mapping level. Results
of nested mappings are merged bottom-up into the report of the root.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity of a validation message."""

    ERROR = "error"  # Invalidates the bound data
    WARNING = "warning"
    INFO = "info"


class ConstraintViolationMessage(BaseModel):
    """A single validation message bound to a field or to the whole form."""

    model_config = ConfigDict(frozen=True)

    severity: Severity = Severity.ERROR
    text: str
    msg_template: str
    msg_args: dict[str, Any] = Field(default_factory=dict)
    # Raw user input that could not be converted, re-displayed on fill
    invalid_value: str | None = None


def _union(target: list[ConstraintViolationMessage], msgs: Iterable[ConstraintViolationMessage]) -> None:
    for msg in msgs:
        if msg not in target:
            target.append(msg)


class ValidationResult(BaseModel):
    """Field-level and global validation messages.

    Field messages are keyed by the full path of the field
    (e.g. ``person-age``).
    """

    model_config = ConfigDict(frozen=True)

    field_messages: dict[str, list[ConstraintViolationMessage]] = Field(default_factory=dict)
    global_messages: list[ConstraintViolationMessage] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> "ValidationResult":
        return cls()

    @classmethod
    def merge(cls, results: Iterable["ValidationResult | None"]) -> "ValidationResult":
        """Merge results into one.

        Field messages are unioned per key and global messages are unioned,
        both keeping the first-seen order and dropping duplicates.

        Args:
            results: Results to merge, None entries are skipped.

        Returns:
            A new merged ValidationResult.
        """
        field_msgs: dict[str, list[ConstraintViolationMessage]] = {}
        global_msgs: list[ConstraintViolationMessage] = []
        for result in results:
            if result is None:
                continue
            for path, msgs in result.field_messages.items():
                _union(field_msgs.setdefault(path, []), msgs)
            _union(global_msgs, result.global_messages)
        return cls(field_messages=field_msgs, global_messages=global_msgs)

    @property
    def success(self) -> bool:
        """No ERROR message is present (warnings and infos are allowed)."""
        for msgs in self.field_messages.values():
            if any(m.severity == Severity.ERROR for m in msgs):
                return False
        return not any(m.severity == Severity.ERROR for m in self.global_messages)

    @property
    def is_empty(self) -> bool:
        return not self.field_messages and not self.global_messages

    def messages_for(self, path: str) -> list[ConstraintViolationMessage]:
        return list(self.field_messages.get(path, []))

    def __str__(self) -> str:
        lines = ["globalMessages {"]
        lines.extend(f"  {m.text}" for m in self.global_messages)
        lines.append("}")
        lines.append("fieldMessages {")
        for path, msgs in self.field_messages.items():
            lines.append(f"  {path}=" + ";".join(m.text for m in msgs))
        lines.append("}")
        return "\n".join(lines)
