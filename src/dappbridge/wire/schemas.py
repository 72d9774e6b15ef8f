from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema

SCHEMA_NAMES = {
    "request": "jsonrpc.request.schema.json",
    "response": "jsonrpc.response.schema.json",
}

SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"


class SchemaValidationError(ValueError):
    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@dataclass(frozen=True)
class SchemaRegistry:
    schema_root: Path

    @classmethod
    def default(cls) -> "SchemaRegistry":
        return cls(schema_root=SCHEMA_ROOT)

    def schema_path(self, schema_filename: str) -> Path:
        return self.schema_root / schema_filename

    def load_schema(self, schema_filename: str) -> dict[str, Any]:
        path = self.schema_path(schema_filename)
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)

    def validator_for(self, schema_filename: str) -> jsonschema.Validator:
        return _cached_validator(self.schema_root, schema_filename)

    def validate_instance(self, instance: Any, schema_filename: str) -> None:
        validator = self.validator_for(schema_filename)
        errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.path))
        if errors:
            formatted = [self._format_error(err) for err in errors]
            raise SchemaValidationError(
                f"Schema validation failed for {schema_filename}.",
                errors=formatted,
            )

    @staticmethod
    def _format_error(error: jsonschema.ValidationError) -> str:
        location = "/".join(str(part) for part in error.path) or "<root>"
        return f"{location}: {error.message}"


@lru_cache(maxsize=8)
def _cached_validator(schema_root: Path, schema_filename: str) -> jsonschema.Validator:
    schema = SchemaRegistry(schema_root).load_schema(schema_filename)
    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def validate_response(payload: Any) -> None:
    SchemaRegistry.default().validate_instance(payload, SCHEMA_NAMES["response"])


def validate_request(payload: Any) -> None:
    SchemaRegistry.default().validate_instance(payload, SCHEMA_NAMES["request"])
