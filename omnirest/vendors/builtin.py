from __future__ import annotations
from types import MappingProxyType
from typing import List, Mapping

from omnirest.catalog.entity_catalog import EntityCatalog
from omnirest.errors import UnknownConnectorError
from omnirest.vendors.box import BOX
from omnirest.vendors.mailchimp import MAILCHIMP
from omnirest.vendors.mediafire import MEDIAFIRE
from omnirest.vendors.opencart import OPENCART
from omnirest.vendors.zendesk import ZENDESK
from omnirest.vendors.zohobooks import ZOHOBOOKS

BUILTIN_CATALOGS: Mapping[str, EntityCatalog] = MappingProxyType({
    c.name: c for c in (ZOHOBOOKS, OPENCART, ZENDESK, MAILCHIMP, BOX, MEDIAFIRE)
})


def get_builtin_catalog(vendor: str) -> EntityCatalog:
    catalog = BUILTIN_CATALOGS.get((vendor or "").strip().lower())
    if catalog is None:
        raise UnknownConnectorError(vendor)
    return catalog


def builtin_vendor_names() -> List[str]:
    return sorted(BUILTIN_CATALOGS)
