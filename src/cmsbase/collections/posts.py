from cmsbase.collections import widgets
from cmsbase.domain.entities import CollectionDefinition
from cmsbase.domain.services.presentation import format_entries


def _author_display(value, field, entry):
    return format_entries(
        [
            {"label": "Name", "text": entry.get("Author Name", "")},
            {"label": "Phone", "text": entry.get("Author Phone", ""), "newLine": True},
        ]
    )


posts = CollectionDefinition(
    name="Posts",
    icon="bi:card-text",
    fields=(
        widgets.text("Title", icon="mdi:format-title", required=True, localized=True),
        widgets.rich_text("Content"),
        widgets.date("Published"),
        widgets.checkbox("Featured"),
        widgets.group(
            "Author",
            display=_author_display,
            fields=[
                widgets.text("Author Name", placeholder="Full name"),
                widgets.phone_number("Author Phone"),
                widgets.image_upload("Author Avatar", path="media/images/avatars"),
            ],
        ),
        widgets.image_upload("Cover", path="media/images/posts"),
        widgets.file_upload("Attachment"),
    ),
)
