"""Advisory JSON Schema validation of raw xcresulttool payloads.

Validation never gates parsing: payloads that do not match the schema
are logged and processed anyway, for forward compatibility with newer
Xcode releases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

logger = logging.getLogger(__name__)

MAX_LOGGED_ERRORS = 5


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one payload."""

    valid: bool
    errors: list[str] = field(default_factory=list)


class SchemaValidator:
    """Validates payloads against an xcresulttool JSON Schema, warning only."""

    def __init__(self, schema: dict | None = None) -> None:
        """Compile the schema; an absent or broken schema disables validation."""
        self._validator: Draft202012Validator | None = None
        if schema is None:
            return
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as e:
            logger.warning("validator_init_failed: error=%s", e.message)
            return
        self._validator = Draft202012Validator(schema)

    @property
    def enabled(self) -> bool:
        return self._validator is not None

    def validate(self, data: Any, context: str = "payload") -> ValidationResult:
        """Validate data, logging mismatches. Always passes when disabled."""
        if self._validator is None:
            return ValidationResult(valid=True)

        errors = [
            f"{'/'.join(str(p) for p in error.absolute_path) or '<root>'}: {error.message}"
            for error in self._validator.iter_errors(data)
        ]
        if errors:
            logger.warning(
                "schema_validation_failed: context=%s, errors=%d, first=%s",
                context,
                len(errors),
                errors[:MAX_LOGGED_ERRORS],
            )
        return ValidationResult(valid=not errors, errors=errors)
