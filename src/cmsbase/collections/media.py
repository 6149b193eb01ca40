from cmsbase.collections import widgets
from cmsbase.domain.entities import CollectionDefinition

media = CollectionDefinition(
    name="Media",
    icon="bi:images",
    fields=(
        widgets.text("Name", required=True),
        widgets.multi_image_array(
            "Multi Image Array",
            path="media/image_array",
            fields=[widgets.text("Caption"), widgets.text("Credit")],
        ),
    ),
)
