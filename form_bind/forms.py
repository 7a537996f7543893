"""Entry points for defining form mappings.

Example::

    person_form = (
        forms.basic(Person, "person")
        .fields("firstName", "age")
        .nested(forms.automatic(Address, "address").build())
        .build()
    )
    form_data = person_form.bind({"person-firstName": "Ann", "person-age": "42"})
"""

from form_bind.binding import Instantiator
from form_bind.config import Config
from form_bind.mapping.builder import MappingBuilder, field

__all__ = [
    "automatic",
    "automatic_list",
    "automatic_secured",
    "basic",
    "basic_list",
    "basic_secured",
    "default_config",
    "field",
]


def basic(data_class: type, path: str, instantiator: Instantiator | None = None) -> MappingBuilder:
    """Mapping with explicitly declared fields and nested mappings."""
    return MappingBuilder(data_class, path, instantiator=instantiator)


def basic_secured(data_class: type, path: str, instantiator: Instantiator | None = None) -> MappingBuilder:
    """Basic root mapping protected by an authorization token."""
    return basic(data_class, path, instantiator).secured()


def automatic(data_class: type, path: str, instantiator: Instantiator | None = None) -> MappingBuilder:
    """Mapping with fields and nested mappings derived from the data class.

    Explicitly declared fields and nested mappings take precedence over the
    derived ones.
    """
    return MappingBuilder(data_class, path, automatic=True, instantiator=instantiator)


def automatic_secured(data_class: type, path: str, instantiator: Instantiator | None = None) -> MappingBuilder:
    return automatic(data_class, path, instantiator).secured()


def basic_list(data_class: type, path: str, instantiator: Instantiator | None = None) -> MappingBuilder:
    """Mapping of a list of data_class objects with declared fields."""
    return MappingBuilder(data_class, path, list_mapping=True, instantiator=instantiator)


def automatic_list(data_class: type, path: str, instantiator: Instantiator | None = None) -> MappingBuilder:
    return MappingBuilder(data_class, path, list_mapping=True, automatic=True, instantiator=instantiator)


def default_config() -> Config:
    return Config()
