"""Form fields, the leaves of a mapping tree."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from form_bind import paths
from form_bind.format import Formatter
from form_bind.validation.models import ConstraintViolationMessage


class FieldType(str, Enum):
    """Widget type of a field, used by renderers."""

    TEXT = "text"
    TEXT_AREA = "textarea"
    PASSWORD = "password"
    HIDDEN = "hidden"
    CHECKBOX = "checkbox"
    RADIO_CHOICE = "radio"
    DROP_DOWN_CHOICE = "select"
    MULTIPLE_CHECK_CHOICE = "multiple-check"
    FILE_UPLOAD = "file"
    DATE_PICKER = "date"


class FormField(BaseModel):
    """Leaf of a mapping tree holding one (possibly multi-valued) input.

    ``name`` is the full path from the root mapping. A filled field carries
    the filled objects and their display string.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    # FieldType value or a custom type name
    type: str | None = None
    pattern: str | None = None
    formatter: Formatter | None = None
    filled_objects: tuple[Any, ...] = ()
    value: str | None = None
    required: bool = False
    order: int = 0
    messages: tuple[ConstraintViolationMessage, ...] = ()

    @property
    def label_key(self) -> str:
        return paths.label_key(self.name)

    @property
    def property_name(self) -> str:
        return paths.property_name(self.name)

    @property
    def filled_object(self) -> Any:
        """First filled object, None when not filled."""
        return self.filled_objects[0] if self.filled_objects else None

    def with_prefix(self, path_prefix: str) -> "FormField":
        return self.model_copy(update={"name": paths.prefix(self.name, path_prefix)})

    def with_index(self, index: int, path_prefix: str) -> "FormField":
        return self.model_copy(update={"name": paths.with_index(self.name, index, path_prefix)})

    def with_required(self, required: bool) -> "FormField":
        return self.model_copy(update={"required": required})

    def with_order(self, order: int) -> "FormField":
        return self.model_copy(update={"order": order})

    def filled(
        self,
        filled_objects: tuple[Any, ...],
        value: str | None,
        messages: tuple[ConstraintViolationMessage, ...] = (),
    ) -> "FormField":
        return self.model_copy(update={"filled_objects": filled_objects, "value": value, "messages": messages})

    def __str__(self) -> str:
        text = self.name
        if self.type:
            text += f" : {self.type}"
        if self.value:
            text += f" = {self.value!r}"
        return text
