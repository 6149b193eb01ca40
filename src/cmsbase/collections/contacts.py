from cmsbase.collections import widgets
from cmsbase.domain.entities import CollectionDefinition

contacts = CollectionDefinition(
    name="Contacts",
    icon="mdi:account-box",
    strict=True,
    fields=(
        widgets.text("First Name", required=True),
        widgets.text("Last Name"),
        widgets.email("Email", required=True),
        widgets.phone_number("Phone"),
        widgets.number("Age"),
        widgets.relation("Company Post", collection="Posts"),
    ),
)
