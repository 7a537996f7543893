"""Data carried in and out of mappings together with validation results."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from form_bind.validation.models import ValidationResult


class FormData(BaseModel):
    """Bound or filled value paired with its validation result."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    data: Any = None
    validation_result: ValidationResult = Field(default_factory=ValidationResult.empty)

    @property
    def success(self) -> bool:
        return self.validation_result.success
