"""Nested field lookup by title."""

from typing import Protocol

from cmsbase.domain.entities import FieldDefinition
from cmsbase.domain.exceptions import FieldNotFoundError


class HasFields(Protocol):
    fields: tuple[FieldDefinition, ...]


def find_field(owner: HasFields, title: str) -> FieldDefinition | None:
    """Find a field definition by title anywhere below ``owner``.

    The immediate fields are checked first; then each composite child is
    searched depth-first, in declaration order.

    Returns:
        The first matching definition, or None.
    """
    for field in owner.fields:
        if field.title == title:
            return field
    for field in owner.fields:
        if field.fields:
            found = find_field(field, title)
            if found is not None:
                return found
    return None


def require_field(owner: HasFields, title: str) -> FieldDefinition:
    """Like :func:`find_field` but fails when nothing matches.

    Raises:
        FieldNotFoundError: If no field below ``owner`` has that title.
    """
    field = find_field(owner, title)
    if field is None:
        raise FieldNotFoundError(title, getattr(owner, "name", None) or getattr(owner, "title", None))
    return field
