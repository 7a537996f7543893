"""Tests for the form-bind CLI."""

import json
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from form_bind import __version__
from form_bind.cli import app, load_mapping

runner = CliRunner()


@pytest.fixture
def params_file(tmp_path: Path) -> Path:
    """Write a valid parameter set for the person form."""
    path = tmp_path / "params.json"
    path.write_text(json.dumps({"person-firstName": "Ann", "person-age": "42"}))
    return path


class TestLoadMapping:
    """Tests for resolving mapping targets."""

    def test_built_mapping(self) -> None:
        """Module attributes holding mappings are returned."""
        assert load_mapping("sample_forms:person_form").path == "person"

    def test_builder_is_built(self) -> None:
        """Builders are built on load."""
        assert load_mapping("sample_forms:registration_builder").path == "registration"

    @pytest.mark.parametrize("target", ["sample_forms", "missing_module_xyz:form", "sample_forms:missing", "sample_forms:Contact"])
    def test_bad_targets(self, target: str) -> None:
        """Unresolvable targets are bad parameters."""
        with pytest.raises(typer.BadParameter):
            load_mapping(target)


class TestCommands:
    """Tests for CLI commands."""

    def test_version(self) -> None:
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_describe(self) -> None:
        """describe prints the mapping tree."""
        result = runner.invoke(app, ["describe", "sample_forms:order_form"])
        assert result.exit_code == 0
        assert "order-items-name" in result.output

    def test_bind_valid(self, params_file: Path) -> None:
        """Valid parameters print the data and succeed."""
        result = runner.invoke(app, ["bind", "sample_forms:person_form", "--params", str(params_file)])
        assert result.exit_code == 0
        assert "Ann" in result.output
        assert "Valid" in result.output

    def test_bind_invalid(self, tmp_path: Path) -> None:
        """Validation errors exit with status 1."""
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"person-age": "x"}))
        result = runner.invoke(app, ["bind", "sample_forms:person_form", "-p", str(path)])
        assert result.exit_code == 1
        assert "person-age" in result.output

    def test_bind_missing_file(self, tmp_path: Path) -> None:
        """A missing parameters file is reported."""
        result = runner.invoke(app, ["bind", "sample_forms:person_form", "-p", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_bind_malformed_params(self, tmp_path: Path) -> None:
        """Parameter sets not matching the schema are rejected."""
        path = tmp_path / "params.json"
        path.write_text(json.dumps({"person-age": 42}))
        result = runner.invoke(app, ["bind", "sample_forms:person_form", "-p", str(path)])
        assert result.exit_code == 1
        assert "Invalid parameters" in result.output

    def test_bind_batch(self, tmp_path: Path) -> None:
        """Each line gets a report; invalid lines are counted."""
        input_path = tmp_path / "in.jsonl"
        output_path = tmp_path / "out.jsonl"
        input_path.write_text(
            "\n".join(
                [
                    json.dumps({"person-firstName": "Ann", "person-age": "42"}),
                    json.dumps({"person-age": "x"}),
                    json.dumps({"person-age": 1}),
                ]
            )
        )
        result = runner.invoke(
            app, ["bind-batch", "sample_forms:person_form", "--in", str(input_path), "--out", str(output_path)]
        )
        assert result.exit_code == 0
        reports = [json.loads(line) for line in output_path.read_text().splitlines()]
        assert [r["success"] for r in reports] == [True, False]
        assert "Reports written: 2" in result.output

    def test_bind_batch_configuration_error(self, tmp_path: Path) -> None:
        """Mapping misuse in batch mode is reported instead of raised."""
        input_path = tmp_path / "in.jsonl"
        input_path.write_text(json.dumps({"person-firstName": "Ann"}))
        result = runner.invoke(
            app,
            ["bind-batch", "sample_forms:secured_person_form", "--in", str(input_path), "--out", str(tmp_path / "out.jsonl")],
        )
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "context" in result.output
