"""Collection and field definitions.

Collections are declared once at process start and never mutated. A
collection owns an ordered tuple of field definitions; composite fields
(groups) own their own nested tuple of children.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

# (stored value, field, whole record) -> presentational value
DisplayTransform = Callable[[Any, "FieldDefinition", dict[str, Any]], Any]


def identity_display(value: Any, field: "FieldDefinition", entry: dict[str, Any]) -> Any:
    return value


@dataclass(frozen=True)
class FieldDefinition:
    """Declarative description of one attribute of a collection.

    Attributes:
        title: Field title, unique among its siblings. Used as the storage key
            and as the lookup key for file placement.
        schema: Storage schema fragment (storage key -> primitive type name).
            Empty for composite fields.
        widget: Name of the presentation widget rendering this field.
        fields: Nested child definitions for composite fields.
        path: Destination directory for file-accepting fields.
        display: Pure transform from stored value to presentational value.
        options: Extra widget parameters (icon, placeholder, required, ...).
    """

    title: str
    schema: dict[str, Any] = field(default_factory=dict)
    widget: str | None = None
    fields: tuple["FieldDefinition", ...] = ()
    path: str | None = None
    display: DisplayTransform = identity_display
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Field title is required")
        # Accept lists from declarations but keep the stored value immutable.
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))

    def to_dict(self) -> dict[str, Any]:
        """Serialize the definition for clients. The display transform is omitted."""
        data: dict[str, Any] = {
            "title": self.title,
            "schema": dict(self.schema),
            "widget": self.widget,
            "fields": [child.to_dict() for child in self.fields],
        }
        if self.path is not None:
            data["path"] = self.path
        data.update(self.options)
        return data


@dataclass(frozen=True)
class CollectionDefinition:
    """A named set of documents sharing a declared schema.

    Attributes:
        name: Unique collection name, matched against URL segments.
        fields: Ordered field definitions.
        strict: Whether unknown keys are rejected at storage time.
        icon: Optional icon name shown by clients.
    """

    name: str
    fields: tuple[FieldDefinition, ...] = ()
    strict: bool = False
    icon: str | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Collection name is required")
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "strict": self.strict,
            "fields": [f.to_dict() for f in self.fields],
        }
        if self.icon is not None:
            data["icon"] = self.icon
        return data
