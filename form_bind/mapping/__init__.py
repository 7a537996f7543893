"""Mapping tree of forms."""

from form_bind.mapping.builder import MappingBuilder, field
from form_bind.mapping.field import FieldType, FormField
from form_bind.mapping.form_data import FormData
from form_bind.mapping.mapping import FormMapping, ListFormMapping

__all__ = [
    "FieldType",
    "FormData",
    "FormField",
    "FormMapping",
    "ListFormMapping",
    "MappingBuilder",
    "field",
]
