"""Field-to-storage schema compilation."""

from typing import Any, Iterable

from cmsbase.domain.entities import FieldDefinition

# Key a field fragment may use to carry its presentation component.
RESERVED_WIDGET_KEY = "widget"


def compile_storage_schema(fields: Iterable[FieldDefinition]) -> dict[str, Any]:
    """Flatten field definitions into one storage schema.

    Fragments are shallow-merged left to right, so a later field wins on a
    key collision. Fragments are not validated.

    Args:
        fields: Ordered field definitions of a collection.

    Returns:
        Mapping of storage key to primitive type name.
    """
    schema: dict[str, Any] = {}
    for field in fields:
        schema.update(field.schema)
    schema.pop(RESERVED_WIDGET_KEY, None)
    return schema
