"""Validation of rendered Slack message documents.

The bundled schemas/message.json describes the document build_message()
produces: optional overrides, a summary attachment, then up to two node
attachments. The CLI checks every rendered document against it.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema import Draft202012Validator

MESSAGE_SCHEMA_PATH = Path(__file__).parent / "schemas" / "message.json"


class MessageSchemaError(Exception):
    """Raised when a message document does not match the message schema."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__(f"Message document is invalid ({len(errors)} error(s))")
        self.errors = errors


@lru_cache(maxsize=1)
def message_validator() -> Draft202012Validator:
    """Compiled validator for the bundled message schema, built once."""
    with open(MESSAGE_SCHEMA_PATH, encoding="utf-8") as f:
        schema = json.load(f)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def message_errors(document: Any) -> list[str]:
    """List schema violations in a message document, in document order.

    Returns an empty list for a valid document.
    """
    errors = sorted(message_validator().iter_errors(document), key=lambda e: e.json_path)
    return [_describe(e) for e in errors]


def validate_message(document: Any) -> None:
    """Check a message document against the message schema.

    Raises:
        MessageSchemaError: If the document has any violations.
    """
    errors = message_errors(document)
    if errors:
        raise MessageSchemaError(errors)


def _describe(error: jsonschema.ValidationError) -> str:
    # attachments.0.color style paths, matching record validation errors
    path = ".".join(str(p) for p in error.absolute_path) or "(root)"
    return f"At '{path}': {error.message}"
