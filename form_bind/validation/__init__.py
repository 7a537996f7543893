"""Validation of bound form data."""

from form_bind.validation.models import ConstraintViolationMessage, Severity, ValidationResult
from form_bind.validation.validator import BeanValidator, DefaultBeanValidator

__all__ = [
    "BeanValidator",
    "ConstraintViolationMessage",
    "DefaultBeanValidator",
    "Severity",
    "ValidationResult",
]
