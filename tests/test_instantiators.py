"""Tests for construction strategies."""

from decimal import Decimal

import pytest

from form_bind.binding import (
    ConstructorInstantiator,
    InstanceHoldingInstantiator,
    SignatureArgumentNameResolver,
    StaticFactoryMethod,
)
from form_bind.binding.instantiators import choose_description
from form_bind.errors import ConstructionError

from sample_forms import Account, Contact, Money, Point, Registration


@pytest.fixture
def resolver() -> SignatureArgumentNameResolver:
    """Create the signature based argument name resolver."""
    return SignatureArgumentNameResolver()


class NoNames:
    """Resolver that cannot name any argument."""

    def argument_name(self, method, index):
        return None


class TestConstructorInstantiator:
    """Tests for instantiation via constructors."""

    def test_dataclass_arguments(self, resolver: SignatureArgumentNameResolver) -> None:
        """Dataclass fields are construction arguments."""
        desc = ConstructorInstantiator().describe(Contact, resolver)
        assert desc.arg_names == ["firstName", "age"]
        assert all(a.has_default for a in desc.arguments)

    def test_argument_name_annotation(self, resolver: SignatureArgumentNameResolver) -> None:
        """ArgumentName maps a parameter to another property."""
        desc = ConstructorInstantiator().describe(Account, resolver)
        assert desc.arg_names == ["owner", "balance"]
        assert desc.arguments[0].parameter == "owner_name"

    def test_missing_arguments_use_defaults(self, resolver: SignatureArgumentNameResolver) -> None:
        """Arguments not passed keep their defaults."""
        inst = ConstructorInstantiator()
        account = inst.instantiate(Account, inst.describe(Account, resolver), {"owner_name": "Ann"})
        assert account.owner == "Ann"
        assert account.balance == 0

    def test_zero_argument_constructor(self, resolver: SignatureArgumentNameResolver) -> None:
        """Classes bound through setters need no arguments."""
        desc = ConstructorInstantiator().describe(Point, resolver)
        assert desc.arguments == []

    def test_pydantic_model_is_not_validated(self, resolver: SignatureArgumentNameResolver) -> None:
        """Invalid values are left for validation to report."""
        inst = ConstructorInstantiator()
        reg = inst.instantiate(Registration, inst.describe(Registration, resolver), {"name": "A", "age": 200})
        assert reg.name == "A"
        assert reg.age == 200

    def test_unresolvable_arguments(self) -> None:
        """A constructor whose arguments have no names is not usable."""
        with pytest.raises(ConstructionError):
            ConstructorInstantiator().describe(Account, NoNames())


class TestStaticFactoryMethod:
    """Tests for instantiation via factory methods."""

    def test_most_arguments_win(self, resolver: SignatureArgumentNameResolver) -> None:
        """The candidate with more resolvable arguments is chosen."""
        inst = StaticFactoryMethod(Money, "zero", "of")
        desc = inst.describe(Money, resolver)
        assert desc.arg_names == ["amount", "currency"]
        money = inst.instantiate(Money, desc, {"amount": Decimal("5")})
        assert money.amount == Decimal("5")
        assert money.currency == "EUR"

    def test_zero_argument_fallback(self) -> None:
        """Without resolvable names the zero-argument factory is used."""
        inst = StaticFactoryMethod(Money, "of", "zero")
        desc = inst.describe(Money, NoNames())
        assert desc.arg_names == []
        assert inst.instantiate(Money, desc, {}).amount == Decimal("0")

    def test_unknown_method_names(self, resolver: SignatureArgumentNameResolver) -> None:
        """No candidate at all is a construction error."""
        with pytest.raises(ConstructionError):
            StaticFactoryMethod(Money, "create").describe(Money, resolver)

    def test_method_names_required(self) -> None:
        """At least one method name must be given."""
        with pytest.raises(ValueError):
            StaticFactoryMethod(Money)


class TestInstanceHolding:
    """Tests for filling client-supplied instances."""

    def test_returns_given_instance(self, resolver: SignatureArgumentNameResolver) -> None:
        """The held instance is returned unchanged."""
        point = Point()
        inst = InstanceHoldingInstantiator(point)
        assert inst.instantiate(Point, inst.describe(Point, resolver), {}) is point

    def test_choose_description_ties_keep_first(self, resolver: SignatureArgumentNameResolver) -> None:
        """Equal argument counts keep the candidate seen first."""

        def first(a: int) -> int:
            return a

        def second(b: int) -> int:
            return b

        desc = choose_description("pair", [first, second], resolver)
        assert desc.method is first
