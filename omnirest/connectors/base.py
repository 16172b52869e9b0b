from __future__ import annotations
import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Coroutine, Dict, Iterable, List, Optional, TypeVar

from opentelemetry import trace

from omnirest.catalog.models import ConnectorConfig, EndpointDescriptor, PagingConfig
from omnirest.engine.filters import FilterLike, QueryMap
from omnirest.engine.pagination import PagedResult, build_paged_result, extract_total, slice_page
from omnirest.engine.unwrap import Record, parse_payload
from omnirest.errors import MalformedResponseError, TransportError, WriteError
from omnirest.transport.http import HttpTransport, RawResponse

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("omnirest.connector")

T = TypeVar("T")


@dataclass
class RequestPlan:
    """A fully validated call, ready for the transport."""

    entity_name: str
    descriptor: EndpointDescriptor
    method: str
    path: str
    params: QueryMap
    json_body: Any = None
    page_number: int = 1
    page_size: int = 0


@dataclass
class FetchResult:
    """
    Outcome of a read that tells "legitimately empty" apart from
    "the call failed and was swallowed".
    """

    records: List[Record] = field(default_factory=list)
    failed: bool = False
    reason: Optional[str] = None
    status: Optional[int] = None
    from_cache: bool = False
    freshness_ms: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.records and not self.failed


class AsyncBaseConnector(ABC):
    """
    Abstract base for entity connectors.

    Responsibilities (all handled here; subclasses only plan and extract):
    - Read path: cache check → transport → unwrap → cache write-back
    - Read failures (non-2xx, network errors) degrade to "no data" and are logged
    - Write failures raise WriteError with status and body; never swallowed
    - Paged reads: vendor paging parameters and the PagedResult envelope
    - Sync call shapes on top of the async ones
    - OpenTelemetry spans per entity call
    """

    def __init__(
        self,
        config: ConnectorConfig,
        cache: Any,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self.config = config
        self._cache = cache
        self._transport = transport or HttpTransport.from_config(config)
        self._logger = logging.getLogger(
            f"omnirest.connector.{config.connector_id}"
        )

    # ------------------------------------------------------------------
    # Abstract: subclasses describe their entity surface
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def paging(self) -> PagingConfig:
        ...

    @abstractmethod
    def list_entity_names(self) -> List[str]:
        ...

    @abstractmethod
    def plan_read(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]],
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> RequestPlan:
        """Validate and route a read. Raises before any network call."""

    @abstractmethod
    def plan_write(
        self,
        operation: str,
        entity_name: str,
        record: Optional[Dict[str, Any]],
        filters: Optional[Iterable[FilterLike]],
    ) -> RequestPlan:
        """Validate and route a create/update/delete."""

    @abstractmethod
    def extract(self, plan: RequestPlan, document: Any) -> List[Record]:
        ...

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        await self._transport.close()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def fetch_entity(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]] = None,
        max_staleness_ms: int = 0,
    ) -> FetchResult:
        """Unpaged read that reports swallowed failures instead of hiding them."""
        with tracer.start_as_current_span(
            f"connector.{self.config.connector_id}.get_entity",
            attributes={
                "connector.id": self.config.connector_id,
                "connector.entity": entity_name,
                "connector.max_staleness_ms": max_staleness_ms,
            },
        ) as span:
            plan = self.plan_read(entity_name, filters)
            cache_params = {"path": plan.path, **plan.params.to_params()}

            cached = await self._cache.get(
                self.config.connector_id, entity_name, max_staleness_ms, cache_params
            )
            if cached:
                data, age_ms = cached
                span.set_attribute("connector.from_cache", True)
                return FetchResult(records=data, from_cache=True, freshness_ms=age_ms)

            fetch_start = time.time()
            response = await self._invoke_read(plan)
            fetch_ms = int((time.time() - fetch_start) * 1000)
            span.set_attribute("connector.fetch_ms", fetch_ms)
            span.set_attribute("connector.from_cache", False)

            if isinstance(response, FetchResult):
                span.set_attribute("connector.read_failed", True)
                return response

            records = self.extract(plan, parse_payload(response.body))
            span.set_attribute("connector.rows_fetched", len(records))

            if max_staleness_ms > 0:
                await self._cache.put(
                    self.config.connector_id,
                    entity_name,
                    records,
                    self.config.freshness_ttl_ms,
                    cache_params,
                )
            return FetchResult(records=records, status=response.status, freshness_ms=fetch_ms)

    async def get_entity_async(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]] = None,
        max_staleness_ms: int = 0,
    ) -> List[Record]:
        """Unpaged read; a failed call comes back as an empty list."""
        result = await self.fetch_entity(entity_name, filters, max_staleness_ms)
        return result.records

    async def get_entity_page_async(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]],
        page_number: int,
        page_size: int,
    ) -> PagedResult:
        if self.paging.strategy == "none":
            result = await self.fetch_entity(entity_name, filters)
            if result.failed:
                # No total: a swallowed failure must not look like an exact empty set.
                return build_paged_result([], page_number, max(1, page_size))
            return slice_page(result.records, page_number, max(1, page_size))

        with tracer.start_as_current_span(
            f"connector.{self.config.connector_id}.get_entity_page",
            attributes={
                "connector.id": self.config.connector_id,
                "connector.entity": entity_name,
                "connector.page_number": page_number,
                "connector.page_size": page_size,
            },
        ) as span:
            plan = self.plan_read(entity_name, filters, page_number, page_size)
            response = await self._invoke_read(plan)
            if isinstance(response, FetchResult):
                return build_paged_result([], plan.page_number, plan.page_size)

            document = parse_payload(response.body)
            records = self.extract(plan, document)
            total = extract_total(document, self.paging)
            span.set_attribute("connector.rows_fetched", len(records))
            span.set_attribute("connector.total_is_exact", total is not None)
            return build_paged_result(records, plan.page_number, plan.page_size, total)

    async def get_entity_structure_async(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]] = None,
    ) -> List[Dict[str, Any]]:
        """Field names and JSON kinds seen in a live sample of the entity."""
        records = await self.get_entity_async(entity_name, filters)
        fields: Dict[str, Dict[str, Any]] = {}
        for record in records:
            for name, value in record.items():
                info = fields.setdefault(
                    name, {"field_name": name, "field_type": None, "is_nullable": False}
                )
                kind = _json_kind(value)
                if kind == "null":
                    info["is_nullable"] = True
                elif info["field_type"] is None:
                    info["field_type"] = kind
                elif info["field_type"] != kind:
                    info["field_type"] = _widen(info["field_type"], kind)
        for info in fields.values():
            if info["field_type"] is None:
                info["field_type"] = "string"
        return list(fields.values())

    async def _invoke_read(self, plan: RequestPlan):
        """RawResponse on success, or a failed FetchResult."""
        try:
            response = await self._transport.request(
                plan.method, plan.path, plan.params.to_params()
            )
        except TransportError as exc:
            self._logger.warning(
                "Read of %s failed (%s); returning no data", plan.entity_name, exc
            )
            return FetchResult(failed=True, reason=str(exc), status=exc.status)

        if not response.ok:
            self._logger.warning(
                "Read of %s returned HTTP %d; returning no data",
                plan.entity_name, response.status,
            )
            return FetchResult(
                failed=True,
                reason=f"HTTP {response.status}: {response.text[:200]}",
                status=response.status,
            )
        return response

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_entity_async(
        self,
        entity_name: str,
        record: Dict[str, Any],
        filters: Optional[Iterable[FilterLike]] = None,
    ) -> Dict[str, Any]:
        return await self._write("create", entity_name, record, filters)

    async def update_entity_async(
        self,
        entity_name: str,
        record: Dict[str, Any],
        filters: Optional[Iterable[FilterLike]] = None,
    ) -> Dict[str, Any]:
        return await self._write("update", entity_name, record, filters)

    async def delete_entity_async(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]] = None,
    ) -> Dict[str, Any]:
        return await self._write("delete", entity_name, None, filters)

    async def _write(
        self,
        operation: str,
        entity_name: str,
        record: Optional[Dict[str, Any]],
        filters: Optional[Iterable[FilterLike]],
    ) -> Dict[str, Any]:
        with tracer.start_as_current_span(
            f"connector.{self.config.connector_id}.{operation}_entity",
            attributes={
                "connector.id": self.config.connector_id,
                "connector.entity": entity_name,
            },
        ) as span:
            plan = self.plan_write(operation, entity_name, record, filters)
            response: RawResponse = await self._transport.request(
                plan.method, plan.path, plan.params.to_params(), plan.json_body
            )
            span.set_attribute("http.status_code", response.status)
            if not response.ok:
                self._logger.error(
                    "%s %s for %s failed: HTTP %d",
                    plan.method, plan.path, entity_name, response.status,
                )
                raise WriteError(entity_name, plan.method, response.status, response.text)

            await self._cache.invalidate(self.config.connector_id, entity_name)
            try:
                document = parse_payload(response.body)
            except MalformedResponseError:
                # The write went through; report the raw acknowledgement.
                self._logger.warning(
                    "%s %s for %s succeeded with a non-JSON body", plan.method, plan.path, entity_name
                )
                return {"status": response.status, "body": response.text}
            return document if isinstance(document, dict) else {}

    # ------------------------------------------------------------------
    # Sync call shapes
    # ------------------------------------------------------------------

    def get_entity(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]] = None,
    ) -> List[Record]:
        return self._run_sync(self.get_entity_async(entity_name, filters))

    def get_entity_page(
        self,
        entity_name: str,
        filters: Optional[Iterable[FilterLike]],
        page_number: int,
        page_size: int,
    ) -> PagedResult:
        return self._run_sync(
            self.get_entity_page_async(entity_name, filters, page_number, page_size)
        )

    def create_entity(self, entity_name: str, record: Dict[str, Any], filters=None) -> Dict[str, Any]:
        return self._run_sync(self.create_entity_async(entity_name, record, filters))

    def update_entity(self, entity_name: str, record: Dict[str, Any], filters=None) -> Dict[str, Any]:
        return self._run_sync(self.update_entity_async(entity_name, record, filters))

    def delete_entity(self, entity_name: str, filters=None) -> Dict[str, Any]:
        return self._run_sync(self.delete_entity_async(entity_name, filters))

    def _run_sync(self, coro: Coroutine[Any, Any, T]) -> T:
        """
        Run one call on a private event loop. The transport session is bound
        to that loop, so it is closed before returning.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            coro.close()
            raise RuntimeError(
                "Synchronous connector call inside a running event loop; "
                "await the *_async method instead"
            )

        async def _once() -> T:
            try:
                return await coro
            finally:
                await self.close()

        return asyncio.run(_once())


def _json_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _widen(current: str, seen: str) -> str:
    if {current, seen} == {"integer", "number"}:
        return "number"
    return "string"
