from __future__ import annotations

from omnirest.catalog.entity_catalog import EntityCatalog, entity
from omnirest.catalog.models import PagingConfig

# Folder "0" is the account root; listing without a folder id means the root.
_ROOT_FOLDER = {"folder_id": "0"}

BOX = EntityCatalog(
    "box",
    [
        ("folder_items", entity("folders/{folder_id}/items", "entries", path_defaults=_ROOT_FOLDER)),
        ("folder", entity("folders/{folder_id}", path_defaults=_ROOT_FOLDER)),
        ("folders", entity(
            "folders", item_template="folders/{id}", writable=True,
        )),
        ("file", entity("files/{file_id}", required=["file_id"])),
        ("file_versions", entity("files/{file_id}/versions", "entries", ["file_id"])),
        ("file_metadata", entity("files/{file_id}/metadata", "entries", ["file_id"])),
        ("shared_items", entity("shared_items")),
        ("current_user", entity("users/me")),
        ("users", entity("users", "entries")),
        ("groups", entity("groups", "entries")),
        ("webhooks", entity("webhooks", "entries")),
        ("search", entity("search", "entries", ["query"])),
    ],
    paging=PagingConfig(
        strategy="offset", offset_param="offset", size_param="limit",
        min_size=1, max_size=1000, total_field="total_count",
    ),
)
