"""Presentation helpers applied to stored documents."""

from html import escape
from typing import Any, Iterable, Mapping

from cmsbase.domain.entities import CollectionDefinition


def localize(value: Any, language: str, default_language: str) -> Any:
    """Resolve a multilingual value.

    Mappings are treated as ``{language: text}``; the requested language wins,
    then the default language. Anything else is returned unchanged.
    """
    if isinstance(value, dict):
        if language in value:
            return value[language]
        return value.get(default_language)
    return value


def present_document(
    collection: CollectionDefinition,
    document: Mapping[str, Any],
    language: str,
    default_language: str,
) -> dict[str, Any]:
    """Apply each top-level field's display transform to a document.

    Only fields declared ``localized`` are resolved to ``language``; other
    values reach their transform as stored. Keys without a matching field are
    copied as they are. Fields that store nothing themselves (groups) are
    rendered from the rest of the record.
    """
    entry = dict(document)
    presented = dict(document)
    for field in collection.fields:
        if field.title not in document and field.schema:
            continue
        value = document.get(field.title)
        if field.options.get("localized"):
            value = localize(value, language, default_language)
        presented[field.title] = field.display(value, field, entry)
    return presented


def format_entries(items: Iterable[Mapping[str, Any]]) -> str:
    """Render labelled text items as inline HTML.

    Each item takes ``text`` and optionally ``label``, ``labelColor``,
    ``textColor`` and ``newLine`` (paragraph instead of span).
    """
    html = ""
    for item in items:
        tag = "p" if item.get("newLine") else "span"
        label = f"{escape(str(item['label']))}:" if item.get("label") else ""
        html += (
            f' <{tag} style="color:{escape(str(item.get("textColor") or ""))}" class="dark:text-white text-black">'
            f' <span class="dark:text-white text-black" style="color:{escape(str(item.get("labelColor") or ""))}">'
            f" {label} </span> {escape(str(item.get('text', '')))}</{tag}>"
        )
    return html
