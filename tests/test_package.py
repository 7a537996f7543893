"""Tests for importing the package and its modules."""

import importlib
import pkgutil
from typing import Any

import pytest

import form_bind
from form_bind.binding import CollectionSpec
from form_bind.binding.collection import CollectionKind
from form_bind.binding.instantiators import ConstructionArgument

MODULES = sorted(m.name for m in pkgutil.walk_packages(form_bind.__path__, "form_bind."))


class TestImports:
    """Tests that every module imports with the installed libraries."""

    @pytest.mark.parametrize("name", MODULES)
    def test_module_imports(self, name: str) -> None:
        """Each module imports cleanly."""
        assert importlib.import_module(name).__name__ == name

    def test_exported_names(self) -> None:
        """Every name in __all__ resolves."""
        for name in form_bind.__all__:
            assert getattr(form_bind, name) is not None


class TestTypeHoldingModels:
    """Tests for models whose fields hold type hints."""

    def test_collection_spec_holds_any(self) -> None:
        """Any is a valid item type."""
        spec = CollectionSpec(kind=CollectionKind.LINEAR, container=list, item_type=Any)
        assert spec.item_type is Any

    def test_construction_argument_requires_hint(self) -> None:
        """Arguments carry an explicit hint."""
        argument = ConstructionArgument(name="age", parameter="age", hint=int)
        assert argument.hint is int
        assert not argument.has_default
