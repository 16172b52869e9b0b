from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional

from omnirest.catalog.entity_catalog import EntityCatalog
from omnirest.catalog.models import ConnectorConfig, EndpointDescriptor, PagingConfig
from omnirest.connectors.base import AsyncBaseConnector, RequestPlan
from omnirest.engine.filters import FilterLike, QueryMap, enforce_required, translate
from omnirest.engine.pagination import apply_paging
from omnirest.engine.resolver import remaining_params, resolve
from omnirest.engine.unwrap import Record, unwrap_document
from omnirest.errors import ReadOnlyEntityError
from omnirest.transport.http import HttpTransport


class RestEntityConnector(AsyncBaseConnector):
    """
    The one generic REST entity engine.

    Every vendor is just an EntityCatalog handed to this class:
    catalog lookup → filters to query map → required-filter check →
    paging params → path placeholders → transport → root unwrap.
    """

    def __init__(
        self,
        config: ConnectorConfig,
        catalog: EntityCatalog,
        cache: Any,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        super().__init__(config, cache, transport)
        self.catalog = catalog

    @property
    def paging(self) -> PagingConfig:
        return self.config.paging or self.catalog.paging

    def list_entity_names(self) -> List[str]:
        return self.catalog.list_entity_names()

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _query_for(
        self, entity_name: str, filters: Optional[Iterable[FilterLike]]
    ) -> tuple[EndpointDescriptor, QueryMap]:
        descriptor = self.catalog.resolve(entity_name)
        query = translate(filters)
        for key, value in self.config.default_params.items():
            if query.is_blank(key):
                query[key] = value
        enforce_required(entity_name, query, descriptor.required_filters)
        return descriptor, query

    def plan_read(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]],
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> RequestPlan:
        descriptor, query = self._query_for(entity_name, filters)

        effective_page, effective_size = 1, 0
        if page_number is not None and page_size is not None:
            effective_page, effective_size = apply_paging(
                query, self.paging, page_number, page_size
            )

        resolved = resolve(descriptor.template, query, descriptor.path_defaults)
        return RequestPlan(
            entity_name=entity_name,
            descriptor=descriptor,
            method="GET",
            path=resolved.path,
            params=remaining_params(query, resolved.consumed),
            page_number=effective_page,
            page_size=effective_size,
        )

    def plan_write(
        self,
        operation: str,
        entity_name: str,
        record: Optional[Dict[str, Any]],
        filters: Optional[Iterable[FilterLike]],
    ) -> RequestPlan:
        descriptor, query = self._query_for(entity_name, filters)
        if not descriptor.writable:
            raise ReadOnlyEntityError(entity_name)

        if operation == "create":
            template = descriptor.template
            method = "POST"
        elif operation in ("update", "delete"):
            template = descriptor.item_template or descriptor.template
            method = descriptor.update_method if operation == "update" else "DELETE"
        else:
            raise ValueError(f"Unknown write operation '{operation}'")

        # Placeholders may also come from the record itself (e.g. its "id").
        lookup = query.copy()
        for key, value in (record or {}).items():
            if lookup.is_blank(key) and isinstance(value, (str, int)) and not isinstance(value, bool):
                lookup[key] = value
        resolved = resolve(template, lookup, descriptor.path_defaults)

        return RequestPlan(
            entity_name=entity_name,
            descriptor=descriptor,
            method=method,
            path=resolved.path,
            params=remaining_params(query, resolved.consumed),
            json_body=record if operation != "delete" else None,
        )

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------

    def extract(self, plan: RequestPlan, document: Any) -> List[Record]:
        return unwrap_document(document, plan.descriptor.root_path)
