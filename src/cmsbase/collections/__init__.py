"""Collections served by cmsbase.

``COLLECTIONS`` is read once at startup (see ``Settings.collections_module``)
and turned into the schema registry.
"""

from cmsbase.collections.contacts import contacts
from cmsbase.collections.media import media
from cmsbase.collections.posts import posts

COLLECTIONS = [posts, media, contacts]

__all__ = ["COLLECTIONS"]
