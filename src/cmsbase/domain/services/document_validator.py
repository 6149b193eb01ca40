"""Storage-boundary validation of document payloads.

Documents are loosely shaped: the compiled storage schema only names the
primitive type expected under each key. Values are cast where the type
allows it; impossible casts are reported. Strict collections additionally
reject keys the schema does not know.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

# Keys managed by the storage layer, never validated as user data.
SYSTEM_KEYS = frozenset({"_id", "createdAt", "updatedAt"})

_TYPE_ALIASES = {
    "string": "string",
    "str": "string",
    "text": "string",
    "number": "number",
    "int": "number",
    "float": "number",
    "boolean": "boolean",
    "bool": "boolean",
    "date": "date",
    "datetime": "date",
    "object": "object",
    "dict": "object",
    "array": "array",
    "list": "array",
}


@dataclass
class DocumentValidationIssue:
    """A single validation problem."""

    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


class DocumentValidationError(Exception):
    """Raised when a payload cannot be stored in its collection."""

    def __init__(self, collection: str, issues: list[DocumentValidationIssue]) -> None:
        self.collection = collection
        self.issues = issues
        fields = ", ".join(issue.field for issue in issues)
        super().__init__(f"Invalid document for '{collection}': {fields}")


def _invalid(field: str, expected: str, value: Any) -> DocumentValidationIssue:
    return DocumentValidationIssue(
        field=field,
        message=f"Expected {expected} value, got {type(value).__name__}",
        code="invalid_type",
    )


class DocumentValidator:
    """Casts and checks payload values against a storage schema."""

    @classmethod
    def normalize_type(cls, declared: Any) -> str | None:
        """Map a declared primitive to a canonical type name, or None for anything else."""
        if isinstance(declared, str):
            return _TYPE_ALIASES.get(declared.lower())
        return None

    @classmethod
    def cast_value(cls, field: str, value: Any, type_name: str) -> tuple[Any, DocumentValidationIssue | None]:
        """Cast one value to ``type_name``.

        Returns:
            Tuple of (cast value, issue or None).
        """
        if value is None:
            return None, None

        if type_name == "string":
            if isinstance(value, str):
                return value, None
            if isinstance(value, bool):
                return "true" if value else "false", None
            if isinstance(value, (int, float)):
                return str(value), None
            if isinstance(value, dict):
                # Localized text: {"en": "...", "de": "..."}
                return value, None
            return value, _invalid(field, "text", value)

        if type_name == "number":
            if isinstance(value, bool):
                return value, _invalid(field, "number", value)
            if isinstance(value, int):
                return value, None
            if isinstance(value, str):
                try:
                    return int(value), None
                except ValueError:
                    pass
                try:
                    value = float(value)
                except ValueError:
                    return value, _invalid(field, "number", value)
            if isinstance(value, float):
                # NaN and infinities cannot be stored as JSON numbers.
                if not math.isfinite(value):
                    return value, _invalid(field, "number", value)
                return value, None
            return value, _invalid(field, "number", value)

        if type_name == "boolean":
            if isinstance(value, bool):
                return value, None
            if isinstance(value, str) and value.lower() in ("true", "false"):
                return value.lower() == "true", None
            if isinstance(value, int) and value in (0, 1):
                return bool(value), None
            return value, _invalid(field, "boolean", value)

        if type_name == "date":
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return value, None
            if isinstance(value, str):
                try:
                    datetime.fromisoformat(value)
                    return value, None
                except ValueError:
                    pass
            return value, DocumentValidationIssue(
                field=field,
                message="Expected ISO 8601 date or epoch milliseconds",
                code="invalid_date",
            )

        if type_name == "object":
            if isinstance(value, dict):
                return value, None
            return value, _invalid(field, "object", value)

        if type_name == "array":
            if isinstance(value, list):
                return value, None
            return [value], None

        return value, None

    @classmethod
    def validate(
        cls,
        data: Mapping[str, Any],
        storage_schema: Mapping[str, Any],
        strict: bool = False,
    ) -> tuple[dict[str, Any], list[DocumentValidationIssue]]:
        """Validate and cast a payload.

        Args:
            data: Payload after coercion and file placement.
            storage_schema: Compiled storage schema of the target collection.
            strict: Reject keys missing from the schema.

        Returns:
            Tuple of (processed payload, list of issues).
        """
        processed: dict[str, Any] = {}
        issues: list[DocumentValidationIssue] = []

        for key, value in data.items():
            if key in SYSTEM_KEYS:
                continue

            if key not in storage_schema:
                if strict:
                    issues.append(
                        DocumentValidationIssue(
                            field=key,
                            message=f"Unknown field '{key}'",
                            code="unknown_field",
                        )
                    )
                    continue
                processed[key] = value
                continue

            type_name = cls.normalize_type(storage_schema[key])
            if type_name is None:
                processed[key] = value
                continue

            cast, issue = cls.cast_value(key, value, type_name)
            if issue is not None:
                issues.append(issue)
            processed[key] = cast

        return processed, issues
