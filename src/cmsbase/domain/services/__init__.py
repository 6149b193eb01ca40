"""Domain services for cmsbase.

Services hold the schema-driven logic. They depend on the entities and on
the standard library, never on the web or persistence layers.
"""

from cmsbase.domain.services.document_validator import (
    SYSTEM_KEYS,
    DocumentValidationError,
    DocumentValidationIssue,
    DocumentValidator,
)
from cmsbase.domain.services.field_resolver import find_field, require_field
from cmsbase.domain.services.file_placement_service import FilePlacementService, metadata_by_field
from cmsbase.domain.services.image_redaction_service import (
    ImageRedactionService,
    RedactedImage,
    RedactionError,
)
from cmsbase.domain.services.presentation import format_entries, localize, present_document
from cmsbase.domain.services.query_matcher import QueryError, matches, parse_query
from cmsbase.domain.services.request_coercion import coerce_form_data, coerce_value
from cmsbase.domain.services.schema_compiler import RESERVED_WIDGET_KEY, compile_storage_schema
from cmsbase.domain.services.schema_registry import (
    SchemaRegistry,
    build_registry,
    load_registry,
    storage_key,
)

__all__ = [
    "DocumentValidationError",
    "DocumentValidationIssue",
    "DocumentValidator",
    "FilePlacementService",
    "ImageRedactionService",
    "QueryError",
    "RESERVED_WIDGET_KEY",
    "RedactedImage",
    "RedactionError",
    "SYSTEM_KEYS",
    "SchemaRegistry",
    "build_registry",
    "coerce_form_data",
    "coerce_value",
    "compile_storage_schema",
    "find_field",
    "format_entries",
    "load_registry",
    "localize",
    "matches",
    "metadata_by_field",
    "parse_query",
    "present_document",
    "require_field",
    "storage_key",
]
