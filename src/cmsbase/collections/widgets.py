"""Widget builders used to declare collection fields.

Each builder returns a :class:`FieldDefinition` whose schema fragment maps
the field title to the primitive type stored under it. Composite widgets
(``group``) contribute no schema, so their children are stored untyped.
"""

from typing import Any, Iterable

from cmsbase.domain.entities import DisplayTransform, FieldDefinition, identity_display


def _field(
    title: str,
    widget: str,
    primitive: str | None,
    display: DisplayTransform | None,
    path: str | None = None,
    fields: Iterable[FieldDefinition] = (),
    **options: Any,
) -> FieldDefinition:
    return FieldDefinition(
        title=title,
        schema={title: primitive} if primitive else {},
        widget=widget,
        fields=tuple(fields),
        path=path,
        display=display or identity_display,
        options={key: value for key, value in options.items() if value is not None},
    )


def text(
    title: str,
    *,
    icon: str | None = None,
    placeholder: str | None = None,
    required: bool = False,
    localized: bool = False,
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    """Single-line text. Localized text is stored as ``{language: text}``."""
    return _field(
        title,
        "Text",
        "object" if localized else "string",
        display,
        icon=icon,
        placeholder=placeholder,
        required=required,
        localized=localized or None,
    )


def rich_text(title: str, *, required: bool = False, display: DisplayTransform | None = None) -> FieldDefinition:
    return _field(title, "RichText", "string", display, required=required)


def email(
    title: str,
    *,
    icon: str | None = "mdi:email",
    placeholder: str | None = None,
    required: bool = False,
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    return _field(title, "Email", "string", display, icon=icon, placeholder=placeholder, required=required)


def number(title: str, *, required: bool = False, display: DisplayTransform | None = None) -> FieldDefinition:
    return _field(title, "Number", "number", display, required=required)


def date(title: str, *, required: bool = False, display: DisplayTransform | None = None) -> FieldDefinition:
    return _field(title, "Date", "date", display, required=required)


def checkbox(title: str, *, display: DisplayTransform | None = None) -> FieldDefinition:
    return _field(title, "Checkbox", "boolean", display)


def phone_number(
    title: str,
    *,
    icon: str | None = "mdi:phone",
    placeholder: str | None = None,
    required: bool = False,
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    return _field(title, "PhoneNumber", "string", display, icon=icon, placeholder=placeholder, required=required)


def relation(
    title: str,
    *,
    collection: str,
    required: bool = False,
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    """Reference to a document of another collection, stored by id."""
    return _field(title, "Relation", "string", display, required=required, relation=collection)


def image_upload(
    title: str,
    *,
    path: str,
    required: bool = False,
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    return _field(title, "ImageUpload", "object", display, path=path, required=required)


def file_upload(
    title: str,
    *,
    path: str | None = None,
    required: bool = False,
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    return _field(title, "FileUpload", "object", display, path=path, required=required)


def multi_image_array(
    title: str,
    *,
    path: str,
    fields: Iterable[FieldDefinition] = (),
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    """Image field fed by the redaction flow; may carry per-image child fields."""
    return _field(title, "MultiImageArray", "object", display, path=path, fields=fields)


def group(
    title: str,
    *,
    fields: Iterable[FieldDefinition],
    required: bool = False,
    display: DisplayTransform | None = None,
) -> FieldDefinition:
    """Visual grouping of child fields. Children are stored under their own titles."""
    return _field(title, "Group", None, display, fields=fields, required=required)
