"""Builder of form mappings.

Fields and nested mappings are declared explicitly, or derived from the
readable properties of the data class for automatic mappings.
"""

import logging
from collections.abc import Mapping

from form_bind.binding import Instantiator, collection_spec
from form_bind.binding.hints import raw_class
from form_bind.config import Config
from form_bind.errors import MappingConfigurationError
from form_bind.format import Formatter
from form_bind.mapping.field import FieldType, FormField
from form_bind.mapping.mapping import FormMapping, ListFormMapping, configured_nested
from form_bind.paths import AUTH_TOKEN_FIELD_NAME, PATH_SEP
from form_bind.upload import UploadedFile

logger = logging.getLogger(__name__)

_MALFORMED_CHARS = (PATH_SEP, "[", "]")


def _check_name(name: str, what: str) -> None:
    if not name or any(c in name for c in _MALFORMED_CHARS):
        raise MappingConfigurationError(
            f"Invalid {what} name '{name}'. It must be non-empty and cannot contain "
            f"'{PATH_SEP}' or brackets."
        )


class MappingBuilder:
    """Collects the definition of a mapping and builds it.

    Args:
        data_class: Class of the bound objects (element class for lists).
        path: Name of the mapping; a property name for nested mappings.
        list_mapping: Build a mapping of a list of data_class objects.
        automatic: Derive undeclared fields and nested mappings from the
            readable properties of data_class.
    """

    def __init__(
        self,
        data_class: type,
        path: str,
        *,
        list_mapping: bool = False,
        automatic: bool = False,
        instantiator: Instantiator | None = None,
    ) -> None:
        if data_class is None:
            raise MappingConfigurationError("Data class of a mapping cannot be None")
        _check_name(path, "mapping")
        self.data_class = data_class
        self.path = path
        self.list_mapping = list_mapping
        self.automatic = automatic
        self._instantiator = instantiator
        self._secured = False
        self._fields: dict[str, FormField] = {}
        self._nested: dict[str, FormMapping] = {}

    def field(
        self,
        name: str | FormField,
        type: str | FieldType | None = None,
        pattern: str | None = None,
        formatter: Formatter | None = None,
    ) -> "MappingBuilder":
        """Declare a field bound to the property of the given name."""
        if isinstance(name, FormField):
            spec = name
        else:
            spec = FormField(
                name=name,
                type=type.value if isinstance(type, FieldType) else type,
                pattern=pattern,
                formatter=formatter,
            )
        _check_name(spec.name, "field")
        self._fields[spec.name] = spec.with_order(len(self._fields))
        return self

    def fields(self, *names: str | FormField) -> "MappingBuilder":
        for name in names:
            self.field(name)
        return self

    def nested(self, mapping: "FormMapping | MappingBuilder") -> "MappingBuilder":
        """Declare a nested mapping; its path is the property name.

        Raises:
            MappingConfigurationError: If the nested mapping is secured.
        """
        if isinstance(mapping, MappingBuilder):
            mapping = mapping.build()
        if mapping.secured:
            raise MappingConfigurationError(
                f"Nested mapping {mapping.path} cannot be secured. Only the root mapping can be secured."
            )
        _check_name(mapping.path, "nested mapping")
        self._nested[mapping.path] = mapping
        return self

    def instantiator(self, instantiator: Instantiator) -> "MappingBuilder":
        self._instantiator = instantiator
        return self

    def secured(self, secured: bool = True) -> "MappingBuilder":
        """Protect the form by an authorization token against CSRF."""
        self._secured = secured
        return self

    def build(self, config: Config | None = None) -> FormMapping:
        """Build the immutable mapping.

        Args:
            config: Configuration of the mapping, the default config if None.
                Nested mappings without own config inherit it.

        Returns:
            FormMapping, or ListFormMapping for list mappings.

        Raises:
            MappingConfigurationError: If the definition is inconsistent.
        """
        if self._secured and self.list_mapping:
            raise MappingConfigurationError(
                "Verification of authorization token is not supported in a list mapping. "
                "Please secure a single root mapping with a nested list mapping."
            )
        user_defined = config is not None
        config = config or Config()
        fields = dict(self._fields)
        nested = dict(self._nested)
        if self.automatic:
            self._derive(fields, nested, config, (self.data_class,))
        if self._secured:
            fields[AUTH_TOKEN_FIELD_NAME] = FormField(
                name=AUTH_TOKEN_FIELD_NAME, type=FieldType.HIDDEN.value, order=len(fields)
            )
        conflicts = set(fields) & set(nested)
        if conflicts:
            raise MappingConfigurationError(
                f"Properties {sorted(conflicts)} of mapping {self.path} are declared both as fields and nested mappings"
            )

        fields = {
            name: field.with_prefix(self.path).with_required(config.bean_validator.is_required(self.data_class, name))
            for name, field in fields.items()
        }
        nested = {name: m.with_path_prefix(self.path) for name, m in nested.items()}
        cls = ListFormMapping if self.list_mapping else FormMapping
        return cls(
            self.path,
            self.data_class,
            config=config,
            user_defined_config=user_defined,
            instantiator=self._instantiator,
            fields=fields,
            nested=configured_nested(self.data_class, nested, config),
            secured=self._secured,
        )

    def _derive(
        self,
        fields: dict[str, FormField],
        nested: dict[str, FormMapping],
        config: Config,
        ancestors: tuple[type, ...],
    ) -> None:
        """Add fields and nested mappings for undeclared readable properties."""
        extractor = config.bean_extractor
        for name in extractor.readable_properties(self.data_class):
            if name in fields or name in nested:
                continue
            hint = extractor.property_type(self.data_class, name)
            spec = collection_spec(hint)
            target = raw_class(spec.item_type if spec is not None else hint)
            if not self._is_complex(target, config):
                fields[name] = FormField(name=name, order=len(fields))
                continue
            if target in ancestors:
                logger.debug("Skipping recursive property %s of %s", name, self.data_class.__name__)
                continue
            builder = MappingBuilder(target, name, list_mapping=spec is not None)
            builder._derive(builder._fields, builder._nested, config, ancestors + (target,))
            nested[name] = builder.build()
            logger.debug("Derived nested mapping %s of %s", name, self.data_class.__name__)

    @staticmethod
    def _is_complex(target: type | None, config: Config) -> bool:
        if target is None or config.formatters.can_handle(target) or issubclass(target, UploadedFile):
            return False
        if issubclass(target, Mapping):
            raise MappingConfigurationError(
                f"Mapping-typed property of type {target.__name__} cannot be mapped automatically. "
                "List it in __form_ignored__ or declare it explicitly."
            )
        return True

    def __repr__(self) -> str:
        return f"MappingBuilder(data_class={self.data_class.__name__}, path={self.path!r})"


def field(
    name: str,
    type: str | FieldType | None = None,
    pattern: str | None = None,
    formatter: Formatter | None = None,
) -> FormField:
    """Specification of a field for MappingBuilder.field."""
    return FormField(
        name=name,
        type=type.value if isinstance(type, FieldType) else type,
        pattern=pattern,
        formatter=formatter,
    )
