"""JSON Schema definitions and validation utilities.

Schemas:
    - review_verdict.schema.json: structured reviewer output requested
      from the completion service

Usage:
    from verdant.schemas import get_review_verdict_schema, validate_against

    problems = validate_against(payload, get_review_verdict_schema())
"""

from __future__ import annotations

import json
from importlib.resources import files
from typing import Any

import jsonschema
from jsonschema.exceptions import relevance


def _load_schema(name: str) -> dict[str, Any]:
    """Load a JSON schema from the schemas package.

    Args:
        name: Schema filename (e.g., 'review_verdict.schema.json')

    Returns:
        Parsed JSON schema as a dictionary
    """
    schema_text = files("verdant.schemas").joinpath(name).read_text()
    result: dict[str, Any] = json.loads(schema_text)
    return result


def get_review_verdict_schema() -> dict[str, Any]:
    """Get the reviewer response schema."""
    return _load_schema("review_verdict.schema.json")


def validate_against(data: Any, schema: dict[str, Any]) -> list[str]:
    """Collect every violation of an arbitrary schema, best match first.

    Returns:
        Error messages (empty when valid)
    """
    validator = jsonschema.Draft7Validator(schema)
    errors = sorted(validator.iter_errors(data), key=relevance)
    return [
        f"{'/'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}"
        for e in errors
    ]


__all__ = [
    "get_review_verdict_schema",
    "validate_against",
]
