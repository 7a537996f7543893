"""Tests for building mappings."""

from dataclasses import dataclass

import pytest

from form_bind import AUTH_TOKEN_FIELD_NAME, FieldType, MappingConfigurationError, forms

from sample_forms import Address, Category, Contact, Item, Order, Palette, Profile, Registration


@dataclass
class Settings:
    options: dict[str, str]


class TestBasicBuilder:
    """Tests for explicitly declared mappings."""

    def test_fields_are_prefixed_and_ordered(self) -> None:
        """Field names get the mapping path; declaration order is kept."""
        mapping = forms.basic(Contact, "person").fields("firstName", "age").build()
        assert [f.name for f in mapping.fields.values()] == ["person-firstName", "person-age"]
        assert [f.order for f in mapping.fields.values()] == [0, 1]

    def test_field_options(self) -> None:
        """Type and pattern are kept on the field."""
        mapping = (
            forms.basic(Palette, "palette")
            .field("primary", FieldType.DROP_DOWN_CHOICE)
            .field(forms.field("labels", FieldType.MULTIPLE_CHECK_CHOICE))
            .build()
        )
        assert mapping.fields["primary"].type == "select"
        assert mapping.fields["labels"].type == "multiple-check"

    @pytest.mark.parametrize("name", ["", "a-b", "a[0]", "tags[]"])
    def test_malformed_names(self, name: str) -> None:
        """Names with separators or brackets are rejected."""
        with pytest.raises(MappingConfigurationError):
            forms.basic(Contact, "person").field(name)

    def test_malformed_mapping_path(self) -> None:
        """Mapping paths follow the same rules."""
        with pytest.raises(MappingConfigurationError):
            forms.basic(Contact, "person-x")

    def test_field_and_nested_conflict(self) -> None:
        """A property cannot be both a field and a nested mapping."""
        builder = (
            forms.basic(Registration, "registration")
            .field("address")
            .nested(forms.basic(Address, "address").fields("street").build())
        )
        with pytest.raises(MappingConfigurationError):
            builder.build()

    def test_nested_builder_is_built(self) -> None:
        """Builders passed as nested mappings are built."""
        mapping = forms.basic(Order, "order").nested(forms.basic_list(Item, "items").field("name")).build()
        assert mapping.nested["items"].is_list
        assert mapping.nested["items"].path == "order-items"


class TestSecuredBuilder:
    """Tests for securing mappings."""

    def test_token_field_added(self) -> None:
        """Secured mappings render a hidden token field."""
        mapping = forms.basic_secured(Contact, "f").field("firstName").build()
        token_field = mapping.fields[AUTH_TOKEN_FIELD_NAME]
        assert token_field.name == "f-formAuthToken"
        assert token_field.type == FieldType.HIDDEN.value
        assert mapping.secured

    def test_secured_nested_rejected(self) -> None:
        """Only the root mapping can be secured."""
        with pytest.raises(MappingConfigurationError):
            forms.basic(Registration, "registration").nested(forms.basic_secured(Address, "address").build())

    def test_secured_list_rejected(self) -> None:
        """List mappings cannot be secured."""
        with pytest.raises(MappingConfigurationError):
            forms.basic_list(Item, "items").secured().build()


class TestAutomaticBuilder:
    """Tests for mappings derived from data classes."""

    def test_fields_and_nested_derived(self) -> None:
        """Simple properties become fields, complex ones nested mappings."""
        mapping = forms.automatic(Registration, "registration").build()
        assert list(mapping.fields) == ["name", "age", "newsletter", "tags"]
        assert list(mapping.nested) == ["address"]
        assert mapping.nested["address"].fields["street"].name == "registration-address-street"

    def test_list_of_objects_becomes_list_mapping(self) -> None:
        """Collections of complex objects become list mappings."""
        mapping = forms.automatic(Order, "order").build()
        assert mapping.nested["items"].is_list
        assert list(mapping.nested["items"].fields) == ["name", "quantity"]

    def test_declared_fields_win(self) -> None:
        """Explicit declarations are kept over derived ones."""
        mapping = forms.automatic(Contact, "person").field("age", FieldType.HIDDEN).build()
        assert mapping.fields["age"].type == "hidden"
        assert set(mapping.fields) == {"firstName", "age"}

    def test_ignored_properties(self) -> None:
        """Ignored and private properties are not derived."""
        mapping = forms.automatic(Profile, "profile").build()
        assert list(mapping.fields) == ["nickname"]

    def test_recursive_property_skipped(self) -> None:
        """Self-referencing properties are not expanded."""
        mapping = forms.automatic(Category, "category").build()
        assert list(mapping.fields) == ["name"]
        assert not mapping.nested

    def test_mapping_property_rejected(self) -> None:
        """Dictionary properties cannot be derived."""
        with pytest.raises(MappingConfigurationError, match="Mapping-typed"):
            forms.automatic(Settings, "settings").build()

    def test_automatic_list(self) -> None:
        """Automatic list mappings derive element fields."""
        mapping = forms.automatic_list(Contact, "people").build()
        assert mapping.is_list
        assert [f.name for f in mapping.fields.values()] == ["people-firstName", "people-age"]

    def test_describe(self) -> None:
        """The outline names paths and fields."""
        text = forms.automatic(Registration, "registration").build().describe()
        assert "registration : Registration" in text
        assert "registration-address-city" in text
