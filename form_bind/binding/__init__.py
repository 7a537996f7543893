"""Binding of form values to objects."""

from form_bind.binding.arguments import (
    ArgumentName,
    ArgumentNameResolver,
    SignatureArgumentNameResolver,
)
from form_bind.binding.binder import Binder, BoundData
from form_bind.binding.collection import CollectionKind, CollectionSpec, collection_spec
from form_bind.binding.conversion import BoundValuesInfo, ParsedValue, ValueConverter
from form_bind.binding.extractor import BeanExtractor
from form_bind.binding.instantiators import (
    ConstructionDescription,
    ConstructorInstantiator,
    InstanceHoldingInstantiator,
    Instantiator,
    StaticFactoryMethod,
)
from form_bind.binding.parse_error import HumanReadableType, ParseError
from form_bind.binding.properties import PropertyTable, property_table

__all__ = [
    "ArgumentName",
    "ArgumentNameResolver",
    "BeanExtractor",
    "Binder",
    "BoundData",
    "BoundValuesInfo",
    "CollectionKind",
    "CollectionSpec",
    "ConstructionDescription",
    "ConstructorInstantiator",
    "HumanReadableType",
    "InstanceHoldingInstantiator",
    "Instantiator",
    "ParseError",
    "ParsedValue",
    "PropertyTable",
    "SignatureArgumentNameResolver",
    "StaticFactoryMethod",
    "ValueConverter",
    "collection_spec",
    "property_table",
]
