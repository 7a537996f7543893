"""Reading request parameter sets and writing bind reports.

Parameter sets are JSON objects mapping parameter names to a string or a
list of strings, one set per line in JSONL files.
"""

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

import jsonschema
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from form_bind.mapping.form_data import FormData
from form_bind.params import MapParams
from form_bind.validation.models import ConstraintViolationMessage

PARAMS_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": {
        "oneOf": [
            {"type": "string"},
            {"type": "array", "items": {"type": "string"}},
        ]
    },
}


def read_jsonl(path: Path | str) -> Iterator[tuple[int, Any]]:
    """Read records of a JSONL file, blank lines skipped.

    Yields:
        Tuples of the 1-based line number and the decoded record.

    Raises:
        ValueError: If a line is not valid JSON.
    """
    with open(path) as f:
        for line_num, text in enumerate(f, 1):
            if not text.strip():
                continue
            try:
                record = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON on line {line_num}: {e.msg}") from e
            yield line_num, record


def write_jsonl(path: Path | str, records: Iterable[dict[str, Any]]) -> int:
    """Write one compact JSON record per line, returning the record count."""
    lines = [json.dumps(record, ensure_ascii=False, separators=(",", ":")) for record in records]
    Path(path).write_text("".join(line + "\n" for line in lines))
    return len(lines)


def params_from_record(record: Any) -> MapParams:
    """Request parameters from a decoded JSON object.

    Raises:
        jsonschema.ValidationError: If the record is not a parameter set.
    """
    jsonschema.validate(record, PARAMS_SCHEMA)
    return MapParams(record)


def load_params(path: Path | str) -> MapParams:
    """Load one parameter set from a JSON file."""
    with open(path) as f:
        record = json.load(f)
    return params_from_record(record)


def _fallback(obj: Any) -> Any:
    attrs = getattr(obj, "__dict__", None)
    return attrs if attrs is not None else str(obj)


def jsonable(data: Any) -> Any:
    """JSON compatible form of bound data."""
    if isinstance(data, BaseModel):
        # Bound models may hold values that failed validation
        return data.model_dump(mode="json", warnings=False)
    return to_jsonable_python(data, fallback=_fallback)


def _message(msg: ConstraintViolationMessage) -> dict[str, Any]:
    return msg.model_dump(mode="json", exclude_none=True)


def bind_report(form_data: FormData) -> dict[str, Any]:
    """JSON record describing the result of one bind."""
    result = form_data.validation_result
    return {
        "success": result.success,
        "data": jsonable(form_data.data),
        "field_messages": {path: [_message(m) for m in msgs] for path, msgs in result.field_messages.items()},
        "global_messages": [_message(m) for m in result.global_messages],
    }
