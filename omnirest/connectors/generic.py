from __future__ import annotations
from typing import Any, Optional

from omnirest.catalog.entity_catalog import EntityCatalog
from omnirest.catalog.models import ConnectorConfig, PagingConfig
from omnirest.connectors.rest import RestEntityConnector
from omnirest.transport.http import HttpTransport
from omnirest.vendors.builtin import get_builtin_catalog


def catalog_for(config: ConnectorConfig) -> EntityCatalog:
    """
    Built-in vendor table, or a zero-code catalog declared inline:

        vendor: custom
        entities:
          orders: {template: "orders", root: "data"}
          order:  {template: "orders/{order_id}", required: [order_id]}
    """
    if config.vendor.strip().lower() == "custom":
        return EntityCatalog.from_mapping(
            config.connector_id,
            config.entities,
            paging=config.paging or PagingConfig(strategy="none"),
        )
    return get_builtin_catalog(config.vendor)


def build_connector(
    config: ConnectorConfig,
    cache: Any,
    transport: Optional[HttpTransport] = None,
) -> RestEntityConnector:
    return RestEntityConnector(config, catalog_for(config), cache, transport)
