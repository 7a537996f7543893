"""Configuration shared by a tree of form mappings.

Nested mappings without a configuration of their own inherit the
configuration of the outer mapping.
"""

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from form_bind.binding import (
    ArgumentNameResolver,
    BeanExtractor,
    Binder,
    CollectionKind,
    SignatureArgumentNameResolver,
)
from form_bind.format import BasicFormatters, Formatters
from form_bind.security import HashTokenAuthorizer
from form_bind.validation import BeanValidator, DefaultBeanValidator

DEFAULT_MAX_LIST_INDEX = 1000


class Config(BaseModel):
    """Collaborators and settings used when filling and binding forms."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    locale: str | None = None
    formatters: Formatters = Field(default_factory=BasicFormatters)
    argument_name_resolver: ArgumentNameResolver = Field(default_factory=SignatureArgumentNameResolver)
    bean_extractor: BeanExtractor = Field(default_factory=BeanExtractor)
    binder: Binder | None = None
    bean_validator: BeanValidator = Field(default_factory=DefaultBeanValidator)
    token_authorizer: HashTokenAuthorizer = Field(default_factory=HashTokenAuthorizer)
    # Strip whitespace of submitted string values
    input_trimmed: bool = True
    list_collection_kind: CollectionKind = CollectionKind.LINEAR
    # List indices above this are dropped
    max_list_index: int = Field(default=DEFAULT_MAX_LIST_INDEX, ge=0)

    @model_validator(mode="before")
    @classmethod
    def _wire_binder(cls, data: Any) -> Any:
        """Build the binder from the configured formatters and resolver."""
        if isinstance(data, dict) and data.get("binder") is None:
            data = dict(data)
            formatters = data.setdefault("formatters", BasicFormatters())
            resolver = data.setdefault("argument_name_resolver", SignatureArgumentNameResolver())
            data["binder"] = Binder(formatters, resolver)
        return data

    @classmethod
    def from_env(cls, **overrides: Any) -> "Config":
        """Create configuration from FORM_BIND_* environment variables.

        Args:
            **overrides: Settings taking precedence over the environment.

        Returns:
            A new Config.
        """
        settings: dict[str, Any] = {}
        if locale := os.environ.get("FORM_BIND_LOCALE"):
            settings["locale"] = locale
        if trim := os.environ.get("FORM_BIND_TRIM_INPUT"):
            settings["input_trimmed"] = trim.strip().lower() in ("1", "true", "yes", "on")
        if max_index := os.environ.get("FORM_BIND_MAX_LIST_INDEX"):
            settings["max_list_index"] = int(max_index)
        settings.update(overrides)
        return cls(**settings)


def default_config() -> Config:
    return Config()
