"""Tests for reading parameter sets and writing bind reports."""

import json
from pathlib import Path

import jsonschema
import pytest

from form_bind.io import bind_report, jsonable, load_params, params_from_record, read_jsonl, write_jsonl

from sample_forms import Contact, Item, person_form


class TestParams:
    """Tests for loading parameter sets."""

    def test_record_to_params(self) -> None:
        """Strings and string lists are accepted."""
        params = params_from_record({"a": "1", "b": ["2", "3"]})
        assert params.values("a") == ["1"]
        assert params.values("b") == ["2", "3"]

    def test_invalid_record(self) -> None:
        """Numbers are not parameter values."""
        with pytest.raises(jsonschema.ValidationError):
            params_from_record({"a": 1})

    def test_record_must_be_object(self) -> None:
        """Parameter sets are JSON objects."""
        with pytest.raises(jsonschema.ValidationError):
            params_from_record(["a"])

    def test_load_params(self, tmp_path: Path) -> None:
        """A JSON file holds one parameter set."""
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"person-firstName": "Ann"}))
        assert load_params(path).value("person-firstName") == "Ann"


class TestJsonl:
    """Tests for JSONL files."""

    def test_write_then_read(self, tmp_path: Path) -> None:
        """Records are written one per line."""
        path = tmp_path / "out.jsonl"
        assert write_jsonl(path, [{"a": 1}, {"b": "x y"}]) == 2
        assert list(read_jsonl(path)) == [(1, {"a": 1}), (2, {"b": "x y"})]

    def test_blank_lines_skipped(self, tmp_path: Path) -> None:
        """Empty lines are ignored but still counted."""
        path = tmp_path / "in.jsonl"
        path.write_text('{"a": "1"}\n\n{"b": "2"}\n')
        assert [num for num, _ in read_jsonl(path)] == [1, 3]

    def test_invalid_line(self, tmp_path: Path) -> None:
        """Broken JSON names the line."""
        path = tmp_path / "in.jsonl"
        path.write_text('{"a": "1"}\nnot json\n')
        with pytest.raises(ValueError, match="line 2"):
            list(read_jsonl(path))


class TestReport:
    """Tests for bind reports."""

    def test_successful_report(self) -> None:
        """Bound data is serialized with the result."""
        report = bind_report(person_form.bind({"person-firstName": "Ann", "person-age": "42"}))
        assert report == {
            "success": True,
            "data": {"firstName": "Ann", "age": 42},
            "field_messages": {},
            "global_messages": [],
        }

    def test_failed_report(self) -> None:
        """Messages are reported per field with the invalid input."""
        report = bind_report(person_form.bind({"person-age": "x"}))
        assert not report["success"]
        msg = report["field_messages"]["person-age"][0]
        assert msg["msg_template"] == "constraints.ParseError.number"
        assert msg["invalid_value"] == "x"
        assert msg["severity"] == "error"

    def test_jsonable(self) -> None:
        """Models, dataclasses and lists are converted."""
        assert jsonable(Item(name="pen")) == {"name": "pen", "quantity": 1}
        assert jsonable([Contact(firstName="A")]) == [{"firstName": "A", "age": None}]
        assert jsonable(None) is None
