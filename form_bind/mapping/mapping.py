"""Immutable mapping tree between request parameters and objects.

A FormMapping describes the form of one object: its fields and its nested
mappings (for nested objects or lists of objects). Mappings are never
modified; fill and the path/config transformations return new mappings,
so one built mapping can be shared by concurrent fill and bind calls.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from form_bind import paths
from form_bind.binding import CollectionSpec, InstanceHoldingInstantiator, Instantiator
from form_bind.binding.collection import CollectionKind, build_collection
from form_bind.binding.conversion import BoundValuesInfo
from form_bind.config import Config
from form_bind.errors import MappingConfigurationError
from form_bind.mapping.field import FormField
from form_bind.mapping.form_data import FormData
from form_bind.params import MapParams, RequestParams
from form_bind.paths import AUTH_TOKEN_FIELD_NAME, PATH_SEP
from form_bind.security import RequestContext, generate_auth_token, verify_auth_token
from form_bind.upload import MaxSizeExceededError
from form_bind.validation.models import ConstraintViolationMessage, Severity, ValidationResult

logger = logging.getLogger(__name__)

LIST_TOO_LONG_TEMPLATE = "constraints.ListTooLong"

_LIST_CONTAINERS = {
    CollectionKind.LINEAR: list,
    CollectionKind.HASH: set,
    CollectionKind.SORTED: list,
}


def _as_params(params: RequestParams | Mapping[str, Any]) -> RequestParams:
    if isinstance(params, Mapping):
        return MapParams(params)
    return params


def _as_form_data(form_data: Any) -> FormData:
    if isinstance(form_data, FormData):
        return form_data
    return FormData(data=form_data)


def _field_values(value: Any) -> tuple[Any, ...]:
    """Filled objects of a field, multi-valued for collections."""
    if value is None:
        return ()
    if isinstance(value, (str, bytes, Mapping)):
        return (value,)
    if isinstance(value, Iterable):
        return tuple(value)
    return (value,)


def _iterable(data: Any, path: str) -> list[Any]:
    if data is None:
        return []
    if isinstance(data, (str, bytes, Mapping)) or not isinstance(data, Iterable):
        raise MappingConfigurationError(f"Collection for list mapping {path} is not iterable")
    return list(data)


def _check_elements(data_class: type, kind: CollectionKind, path: str) -> None:
    """Reject element classes the configured list collection cannot hold."""
    if kind is CollectionKind.HASH and getattr(data_class, "__hash__", None) is None:
        raise MappingConfigurationError(
            f"Elements of list mapping {path} must be hashable for collection kind {kind.value}, "
            f"{data_class.__name__} is not. Use a frozen class or another collection kind."
        )
    if kind is CollectionKind.SORTED and getattr(data_class, "__lt__", None) is object.__lt__:
        raise MappingConfigurationError(
            f"Elements of list mapping {path} must be orderable for collection kind {kind.value}, "
            f"{data_class.__name__} does not define ordering."
        )


class FormMapping:
    """Mapping of a single object.

    Use the builders in ``form_bind.forms`` to create mappings.
    """

    def __init__(
        self,
        path: str,
        data_class: type,
        *,
        config: Config,
        user_defined_config: bool = False,
        instantiator: Instantiator | None = None,
        fields: Mapping[str, FormField] | None = None,
        nested: Mapping[str, "FormMapping"] | None = None,
        filled_object: Any = None,
        validation_result: ValidationResult | None = None,
        required: bool = False,
        secured: bool = False,
        list_mappings: Sequence["FormMapping"] = (),
    ) -> None:
        if data_class is None:
            raise MappingConfigurationError("Data class of a mapping cannot be None")
        if config is None:
            raise MappingConfigurationError("Config of a mapping cannot be None")
        self.path = path
        self.data_class = data_class
        self.config = config
        self.user_defined_config = user_defined_config
        self.instantiator = instantiator
        self.fields: Mapping[str, FormField] = MappingProxyType(dict(fields or {}))
        self.nested: Mapping[str, FormMapping] = MappingProxyType(dict(nested or {}))
        self.filled_object = filled_object
        self.validation_result = validation_result
        self.required = required
        self.secured = secured
        self.list_mappings: tuple[FormMapping, ...] = tuple(list_mappings)
        for field in self.fields.values():
            if not field.name.startswith(path + PATH_SEP):
                raise MappingConfigurationError(f"Field name '{field.name}' must start with prefix '{path}{PATH_SEP}'")

    def _state(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "data_class": self.data_class,
            "config": self.config,
            "user_defined_config": self.user_defined_config,
            "instantiator": self.instantiator,
            "fields": self.fields,
            "nested": self.nested,
            "filled_object": self.filled_object,
            "validation_result": self.validation_result,
            "required": self.required,
            "secured": self.secured,
            "list_mappings": self.list_mappings,
        }

    def _copy(self, **changes: Any) -> "FormMapping":
        state = self._state()
        state.update(changes)
        return type(self)(**state)

    @property
    def is_list(self) -> bool:
        return False

    @property
    def is_root(self) -> bool:
        return PATH_SEP not in self.path and "[" not in self.path

    @property
    def label_key(self) -> str:
        return paths.label_key(self.path)

    @property
    def property_name(self) -> str:
        return paths.property_name(self.path)

    def with_path_prefix(self, path_prefix: str) -> "FormMapping":
        """Copy with the prefix prepended to its path and all nested paths.

        Raises:
            MappingConfigurationError: If the mapping is secured (only root
                mappings may be secured) or already prefixed.
        """
        if path_prefix and self.secured:
            raise MappingConfigurationError(
                f"Mapping {self.path} is secured and cannot be nested. Only the root mapping can be secured."
            )
        return self._copy(
            path=paths.prefix(self.path, path_prefix),
            fields={k: f.with_prefix(path_prefix) for k, f in self.fields.items()},
            nested={k: m.with_path_prefix(path_prefix) for k, m in self.nested.items()},
            list_mappings=[m.with_path_prefix(path_prefix) for m in self.list_mappings],
        )

    def with_index_after_path_prefix(self, index: int, path_prefix: str) -> "FormMapping":
        """Copy with ``[index]`` inserted after the prefix in all paths."""
        return self._copy(
            path=paths.with_index(self.path, index, path_prefix),
            fields={k: f.with_index(index, path_prefix) for k, f in self.fields.items()},
            nested={k: m.with_index_after_path_prefix(index, path_prefix) for k, m in self.nested.items()},
            list_mappings=[m.with_index_after_path_prefix(index, path_prefix) for m in self.list_mappings],
        )

    def with_config(
        self,
        config: Config,
        required: bool | None = None,
        user_defined: bool = True,
    ) -> "FormMapping":
        """Copy using the config, propagated to nested mappings without own config.

        Args:
            config: The new configuration.
            required: New required flag, unchanged if None.
            user_defined: Whether the config counts as explicitly given;
                propagated configs are not.
        """
        fields = {
            name: field.with_required(config.bean_validator.is_required(self.data_class, name))
            for name, field in self.fields.items()
        }
        return self._copy(
            config=config,
            user_defined_config=user_defined,
            fields=fields,
            nested=configured_nested(self.data_class, self.nested, config),
            required=self.required if required is None else required,
        )

    def fill(
        self,
        form_data: FormData | Any,
        locale: str | None = None,
        context: RequestContext | None = None,
    ) -> "FormMapping":
        """Return a copy of this mapping filled with the data.

        Args:
            form_data: FormData, or the object itself.
            locale: Locale of the display strings, config locale if None.
            context: Request context, required for secured mappings.

        Returns:
            New filled mapping; this mapping is not modified.
        """
        form_data = _as_form_data(form_data)
        locale = locale or self.config.locale
        logger.debug("Filling mapping %s", self.path)
        result = form_data.validation_result
        extractor = self.config.bean_extractor
        obj = form_data.data

        nested = {}
        for name, mapping in self.nested.items():
            nested_data = extractor.extract_bean(obj, [name]).get(name)
            # Nested mappings share the result of the outer mapping
            nested[name] = mapping.fill(FormData(data=nested_data, validation_result=result), locale, context)

        allowed = [name for name in self.fields if name != AUTH_TOKEN_FIELD_NAME]
        values = extractor.extract_bean(obj, allowed)
        if self.secured and AUTH_TOKEN_FIELD_NAME in self.fields:
            values[AUTH_TOKEN_FIELD_NAME] = generate_auth_token(context, self.config.token_authorizer, self.path)

        fields = {
            name: self._filled_field(field, values.get(name), result, locale)
            for name, field in self.fields.items()
        }
        return self._copy(fields=fields, nested=nested, filled_object=obj, validation_result=result)

    def _filled_field(
        self,
        field: FormField,
        value: Any,
        result: ValidationResult,
        locale: str | None,
    ) -> FormField:
        messages = tuple(result.messages_for(field.name))
        filled_objects = _field_values(value)
        display = None
        for msg in messages:
            # Invalid input is shown again instead of the empty value
            if msg.invalid_value is not None:
                display = msg.invalid_value
                break
        if display is None and filled_objects:
            first = filled_objects[0]
            if field.formatter is not None and first is not None:
                display = field.formatter.make_string(first, field.pattern, locale)
            else:
                display = self.config.formatters.make_string(first, field.pattern, locale)
        return field.filled(filled_objects, display, messages)

    def bind(
        self,
        params: RequestParams | Mapping[str, Any],
        instance: Any = None,
        locale: str | None = None,
        context: RequestContext | None = None,
        validation_groups: Sequence[str] = (),
    ) -> FormData:
        """Bind request parameters to an object.

        Args:
            params: Request parameters, or a mapping of name to value(s).
            instance: Object to fill instead of creating a new one.
            locale: Locale for parsing, config locale if None.
            context: Request context, required for secured mappings.
            validation_groups: Validation groups passed to the validator.

        Returns:
            FormData with the bound object and merged validation result.

        Raises:
            TokenMissingError: If the mapping is secured and no token was sent.
            InvalidTokenError: If the mapping is secured and the token is invalid.
            BindingError: If the mapping does not fit the data class.
        """
        params = _as_params(params)
        locale = locale or self.config.locale
        logger.debug("Binding mapping %s", self.path)
        request_error = params.request_error()
        values = self._values_to_bind(params, locale)

        results = []
        extractor = self.config.bean_extractor
        for name, mapping in self.nested.items():
            nested_instance = extractor.extract_bean(instance, [name]).get(name) if instance is not None else None
            data = mapping.bind(params, nested_instance, locale, context, validation_groups)
            values[name] = BoundValuesInfo.of([data.data], locale=locale)
            results.append(data.validation_result)

        # After nested binds, so the secret is deleted only once the whole form is processed
        if self.secured and not isinstance(request_error, MaxSizeExceededError):
            verify_auth_token(context, self.config.token_authorizer, self.path, params)

        instantiator = InstanceHoldingInstantiator(instance) if instance is not None else self.instantiator
        bound = self.config.binder.bind_to_new_instance(self.data_class, instantiator, values)
        result = self.config.bean_validator.validate(
            bound.data,
            self.path,
            [request_error] if request_error is not None else [],
            bound.property_bind_errors,
            locale,
            validation_groups,
        )
        return FormData(data=bound.data, validation_result=ValidationResult.merge([result, *results]))

    def _values_to_bind(self, params: RequestParams, locale: str | None) -> dict[str, BoundValuesInfo]:
        values = {}
        for name, field in self.fields.items():
            param_name = field.name
            files = params.uploaded_files(param_name) or params.uploaded_files(param_name + "[]")
            if files:
                raw: list[Any] | None = list(files)
            else:
                raw = params.values(param_name)
                if raw is None:
                    raw = params.values(param_name + "[]")
                if self.config.input_trimmed:
                    raw = paths.trim_values(raw)
            values[name] = BoundValuesInfo.of(raw, field.formatter, field.pattern, locale)
        return values

    def describe(self, indent: str = "") -> str:
        """Readable outline of the mapping tree."""
        lines = [f"{indent}{self.path} : {self.data_class.__name__} {{"]
        if self.fields:
            lines.append(f"{indent}  fields {{")
            lines.extend(f"{indent}    {field}" for field in self.fields.values())
            lines.append(f"{indent}  }}")
        if self.nested:
            lines.append(f"{indent}  nested {{")
            lines.extend(m.describe(indent + "    ") for m in self.nested.values())
            lines.append(f"{indent}  }}")
        if self.list_mappings:
            lines.append(f"{indent}  list {{")
            lines.extend(m.describe(indent + "    ") for m in self.list_mappings)
            lines.append(f"{indent}  }}")
        lines.append(f"{indent}}}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(path={self.path!r}, data_class={self.data_class.__name__})"


class ListFormMapping(FormMapping):
    """Mapping of a list of objects of the same class.

    Fields and nested mappings are recipes for the elements; filling or
    binding expands them into one indexed single mapping per element
    (``path[0]``, ``path[1]``, ...).
    """

    def __init__(self, path: str, data_class: type, *, config: Config, **kwargs: Any) -> None:
        super().__init__(path, data_class, config=config, **kwargs)
        _check_elements(data_class, config.list_collection_kind, path)

    @property
    def is_list(self) -> bool:
        return True

    def indexed(self, index: int) -> FormMapping:
        """Single mapping for the list element at the index."""
        single = FormMapping(**self._state())
        return single.with_index_after_path_prefix(index, self.path)

    def fill(
        self,
        form_data: FormData | Any,
        locale: str | None = None,
        context: RequestContext | None = None,
    ) -> "FormMapping":
        form_data = _as_form_data(form_data)
        locale = locale or self.config.locale
        result = form_data.validation_result
        items = _iterable(form_data.data, self.path)
        logger.debug("Filling list mapping %s with %d items", self.path, len(items))
        filled = [
            self.indexed(index).fill(FormData(data=item, validation_result=result), locale, context)
            for index, item in enumerate(items)
        ]
        # Own fields and nested mappings exist only per index
        return self._copy(
            fields={},
            nested={},
            list_mappings=filled,
            filled_object=form_data.data,
            validation_result=result,
        )

    def bind(
        self,
        params: RequestParams | Mapping[str, Any],
        instance: Any = None,
        locale: str | None = None,
        context: RequestContext | None = None,
        validation_groups: Sequence[str] = (),
    ) -> FormData:
        params = _as_params(params)
        locale = locale or self.config.locale
        results = []
        max_index = paths.find_max_index(params.names(), self.path)
        if max_index > self.config.max_list_index:
            logger.warning(
                "List %s has index %d above the maximum %d, remaining items are dropped",
                self.path,
                max_index,
                self.config.max_list_index,
            )
            results.append(self._list_too_long(max_index))
            max_index = self.config.max_list_index
        logger.debug("Binding list mapping %s up to index %d", self.path, max_index)

        instances = _iterable(instance, self.path)
        items = []
        for index in range(max_index + 1):
            item_instance = instances[index] if index < len(instances) else None
            data = self.indexed(index).bind(params, item_instance, locale, context, validation_groups)
            items.append(data.data)
            results.append(data.validation_result)

        kind = self.config.list_collection_kind
        spec = CollectionSpec(kind=kind, container=_LIST_CONTAINERS[kind], item_type=self.data_class)
        return FormData(data=build_collection(spec, items), validation_result=ValidationResult.merge(results))

    def _list_too_long(self, max_index: int) -> ValidationResult:
        msg = ConstraintViolationMessage(
            severity=Severity.ERROR,
            text=f"List {self.path} has more than {self.config.max_list_index + 1} items",
            msg_template=LIST_TOO_LONG_TEMPLATE,
            msg_args={"path": self.path, "maxIndex": self.config.max_list_index, "index": max_index},
        )
        return ValidationResult(global_messages=[msg])


def configured_nested(
    data_class: type,
    nested: Mapping[str, FormMapping],
    outer_config: Config,
) -> dict[str, FormMapping]:
    """Nested mappings with the outer config where they have none of their own."""
    result = {}
    for name, mapping in nested.items():
        config = mapping.config if mapping.user_defined_config else outer_config
        required = config.bean_validator.is_required(data_class, name)
        result[name] = mapping.with_config(config, required, user_defined=mapping.user_defined_config)
    return result
