"""Lookup errors shared by the schema services."""


class NotFoundError(Exception):
    """Base class for anything the client sees as a plain 404."""


class CollectionNotFoundError(NotFoundError):
    """Raised when a collection name matches no registered schema."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Collection '{name}' not found")


class FieldNotFoundError(NotFoundError):
    """Raised when no field definition carries the requested title."""

    def __init__(self, title: str, owner: str | None = None) -> None:
        self.title = title
        self.owner = owner
        where = f" in '{owner}'" if owner else ""
        super().__init__(f"Field '{title}' not found{where}")


class SchemaDefinitionError(ValueError):
    """Raised at startup when collection declarations are inconsistent."""
