from __future__ import annotations

from omnirest.catalog.entity_catalog import EntityCatalog, entity
from omnirest.catalog.models import PagingConfig

# MediaFire answers {"response": {...}} and selects content with query
# parameters rather than path segments. "myfiles" is the root folder key.
_ROOT_FOLDER = {"folder_key": "myfiles"}

MEDIAFIRE = EntityCatalog(
    "mediafire",
    [
        ("files", entity(
            "folder/get_content.php?folder_key={folder_key}&content_type=files&response_format=json",
            "response.folder_content.files",
            path_defaults=_ROOT_FOLDER,
        )),
        ("folders", entity(
            "folder/get_content.php?folder_key={folder_key}&content_type=folders&response_format=json",
            "response.folder_content.folders",
            path_defaults=_ROOT_FOLDER,
        )),
        ("folder_info", entity(
            "folder/get_info.php?folder_key={folder_key}&response_format=json",
            "response.folder_info",
            path_defaults=_ROOT_FOLDER,
        )),
        ("file_info", entity(
            "file/get_info.php?quick_key={quick_key}&response_format=json",
            "response.file_info",
            ["quick_key"],
        )),
        ("shares", entity("share/get_content.php?response_format=json", "response.shares")),
        ("contacts", entity("contact/fetch.php?response_format=json", "response.contacts")),
        ("user_info", entity("user/get_info.php?response_format=json", "response.user_info")),
    ],
    paging=PagingConfig(
        strategy="page", page_param="chunk", size_param="chunk_size",
        min_size=100, max_size=1000,
    ),
)
