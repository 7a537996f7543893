"""Reading property values out of data objects."""

from collections.abc import Iterable, Mapping
from typing import Any

from form_bind.binding.properties import property_table

IGNORED_ATTRIBUTE = "__form_ignored__"


class BeanExtractor:
    """Extracts whitelisted property values from objects.

    A class can exclude properties from automatically derived mappings by
    listing them in a ``__form_ignored__`` class attribute; names starting
    with an underscore are always ignored.
    """

    def extract_bean(self, obj: Any, allowed_properties: Iterable[str]) -> dict[str, Any]:
        """Values of the allowed properties that the object has.

        Args:
            obj: Source object (a plain mapping is accepted too).
            allowed_properties: Names of the properties to read.

        Returns:
            Property name to value, in the order of allowed_properties.
        """
        result: dict[str, Any] = {}
        if obj is None:
            return result
        if isinstance(obj, Mapping):
            for name in allowed_properties:
                if name in obj:
                    result[name] = obj[name]
            return result
        table = property_table(type(obj))
        for name in allowed_properties:
            if table.is_readable(name) or hasattr(obj, name):
                result[name] = table.get(obj, name)
        return result

    def is_ignored(self, cls: type, name: str) -> bool:
        if name.startswith("_"):
            return True
        for klass in cls.__mro__:
            if name in getattr(klass, IGNORED_ATTRIBUTE, ()):
                return True
        return False

    def readable_properties(self, cls: type) -> list[str]:
        """Names of readable, not ignored properties in declaration order."""
        table = property_table(cls)
        return [name for name in table.readable_names if not self.is_ignored(cls, name)]

    def property_type(self, cls: type, name: str) -> Any:
        return property_table(cls).property_type(name)
