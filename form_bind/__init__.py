"""form-bind: bidirectional mapping between form parameters and objects."""

__version__ = "0.1.0"

from form_bind.config import Config
from form_bind.errors import BindingError, ConstructionError, MappingConfigurationError
from form_bind.mapping import FieldType, FormData, FormField, FormMapping, ListFormMapping, MappingBuilder
from form_bind.params import MapParams, RequestParams
from form_bind.paths import AUTH_TOKEN_FIELD_NAME, PATH_SEP
from form_bind.security import (
    InMemorySecretStorage,
    InvalidTokenError,
    RequestContext,
    TokenError,
    TokenMissingError,
)
from form_bind.validation import ConstraintViolationMessage, Severity, ValidationResult

__all__ = [
    "AUTH_TOKEN_FIELD_NAME",
    "BindingError",
    "Config",
    "ConstraintViolationMessage",
    "ConstructionError",
    "FieldType",
    "FormData",
    "FormField",
    "FormMapping",
    "InMemorySecretStorage",
    "InvalidTokenError",
    "ListFormMapping",
    "MappingBuilder",
    "MapParams",
    "MappingConfigurationError",
    "PATH_SEP",
    "RequestContext",
    "RequestParams",
    "Severity",
    "TokenError",
    "TokenMissingError",
    "ValidationResult",
    "__version__",
]
