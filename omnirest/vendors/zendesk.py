from __future__ import annotations

from omnirest.catalog.entity_catalog import EntityCatalog, entity
from omnirest.catalog.models import PagingConfig

ZENDESK = EntityCatalog(
    "zendesk",
    [
        ("tickets", entity(
            "api/v2/tickets.json", "tickets",
            item_template="api/v2/tickets/{id}.json", writable=True,
        )),
        ("ticket_comments", entity("api/v2/tickets/{ticket_id}/comments.json", "comments", ["ticket_id"])),
        ("users", entity(
            "api/v2/users.json", "users",
            item_template="api/v2/users/{id}.json", writable=True,
        )),
        ("organizations", entity("api/v2/organizations.json", "organizations")),
        ("groups", entity("api/v2/groups.json", "groups")),
        ("macros", entity("api/v2/macros.json", "macros")),
        ("views", entity("api/v2/views.json", "views")),
        ("satisfaction_ratings", entity("api/v2/satisfaction_ratings.json", "satisfaction_ratings")),
        ("tickets.search", entity("api/v2/search.json", "results", ["query"])),
    ],
    paging=PagingConfig(
        strategy="page", page_param="page", size_param="per_page",
        min_size=1, max_size=100, total_field="count",
    ),
)
