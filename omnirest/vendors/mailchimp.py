from __future__ import annotations

from omnirest.catalog.entity_catalog import EntityCatalog, entity
from omnirest.catalog.models import PagingConfig

_LIST = ["list_id"]

# Marketing API 3.0. Collections carry total_items next to the array.
MAILCHIMP = EntityCatalog(
    "mailchimp",
    [
        ("account", entity("")),
        ("lists", entity(
            "lists", "lists",
            item_template="lists/{id}", update_method="PATCH", writable=True,
        )),
        ("campaigns", entity(
            "campaigns", "campaigns",
            item_template="campaigns/{id}", update_method="PATCH", writable=True,
        )),
        ("templates", entity("templates", "templates")),
        ("automations", entity("automations", "automations")),
        ("reports", entity("reports", "reports")),
        ("segments", entity("lists/{list_id}/segments", "segments", _LIST)),
        ("members", entity(
            "lists/{list_id}/members", "members", _LIST,
            item_template="lists/{list_id}/members/{subscriber_hash}",
            update_method="PATCH", writable=True,
        )),
        ("merge-fields", entity("lists/{list_id}/merge-fields", "merge_fields", _LIST)),
        ("interest-categories", entity("lists/{list_id}/interest-categories", "categories", _LIST)),
        ("interests", entity(
            "lists/{list_id}/interest-categories/{interest_category_id}/interests",
            "interests", _LIST + ["interest_category_id"],
        )),
    ],
    paging=PagingConfig(
        strategy="offset", offset_param="offset", size_param="count",
        min_size=1, max_size=1000, total_field="total_items",
    ),
)
