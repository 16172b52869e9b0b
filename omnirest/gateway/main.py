from __future__ import annotations
import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import redis.asyncio as aioredis
from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from omnirest.cache.redis_cache import NullCache, RedisCache
from omnirest.catalog.registry import ConnectorRegistry
from omnirest.connectors.base import AsyncBaseConnector
from omnirest.connectors.generic import build_connector
from omnirest.errors import OmniRestError, UnknownConnectorError

logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------
REQUEST_COUNT = Counter(
    "omnirest_entity_requests_total",
    "Total entity requests processed",
    ["status", "connector_id", "operation"],
)
REQUEST_LATENCY = Histogram(
    "omnirest_entity_request_latency_seconds",
    "Entity request latency",
    ["connector_id", "operation"],
    buckets=[0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# Error code -> HTTP status
_STATUS_BY_CODE = {
    "UNKNOWN_ENTITY": 404,
    "UNKNOWN_CONNECTOR": 404,
    "MISSING_FILTER": 400,
    "MISSING_PATH_PARAMETER": 400,
    "READ_ONLY_ENTITY": 405,
    "MALFORMED_RESPONSE": 502,
    "WRITE_FAILED": 502,
    "SOURCE_TIMEOUT": 504,
}

# Query-string keys that steer the call instead of becoming filters.
_RESERVED_PARAMS = {"page", "page_size", "max_staleness_ms"}

# ---------------------------------------------------------------------------
# Shared process-level resources (populated in lifespan)
# ---------------------------------------------------------------------------
_registry: Optional[ConnectorRegistry] = None
_connectors: Dict[str, AsyncBaseConnector] = {}
_redis: Optional[aioredis.Redis] = None


def _init_tracing() -> None:
    """
    Initialize OpenTelemetry tracing.

    - OTEL_EXPORTER_OTLP_ENDPOINT set → OTLP HTTP exporter (Jaeger, Tempo, etc.)
    - Otherwise → ConsoleSpanExporter
    """
    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )

        resource = Resource.create({
            "service.name": "omnirest-gateway",
            "service.version": "1.0.0",
        })
        provider = TracerProvider(resource=resource)

        otlp_endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "")
        if otlp_endpoint:
            try:
                from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
                    OTLPSpanExporter,
                )
                provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
                logger.info("OpenTelemetry: OTLP exporter → %s", otlp_endpoint)
            except ImportError:
                logger.warning(
                    "opentelemetry-exporter-otlp-proto-http not installed; "
                    "falling back to console"
                )
                provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
        else:
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
            logger.info("OpenTelemetry: ConsoleSpanExporter (set OTEL_EXPORTER_OTLP_ENDPOINT for production)")

        trace.set_tracer_provider(provider)
    except Exception as exc:
        logger.warning("OpenTelemetry init failed (non-fatal): %s", exc)


def _build_connectors(registry: ConnectorRegistry, cache: Any) -> Dict[str, AsyncBaseConnector]:
    connectors: Dict[str, AsyncBaseConnector] = {}
    for connector_id in registry.all_connector_ids():
        cfg = registry.require(connector_id)
        try:
            connectors[connector_id] = build_connector(cfg, cache)
        except OmniRestError as exc:
            logger.error("Skipping connector %s: %s", connector_id, exc)
    return connectors


# ---------------------------------------------------------------------------
# App lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    global _registry, _connectors, _redis

    _init_tracing()

    config_dir = os.environ.get("CONNECTOR_CONFIG_DIR", "configs/connectors")
    _registry = ConnectorRegistry(config_dir=config_dir)
    try:
        _registry.load_all()
    except FileNotFoundError:
        logger.warning("Connector config dir not found: %s; no connectors loaded", config_dir)

    redis_url = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    try:
        _redis = aioredis.from_url(redis_url, decode_responses=False)
        await _redis.ping()
        logger.info("Redis connected: %s", redis_url)
    except Exception as exc:
        logger.warning("Redis unavailable (%s); cache disabled", exc)
        _redis = None

    cache = RedisCache(_redis) if _redis else NullCache()
    _connectors = _build_connectors(_registry, cache)

    logger.info("omnirest gateway started. Connectors: %s", sorted(_connectors))

    yield

    for conn in _connectors.values():
        await conn.close()
    if _redis:
        await _redis.aclose()
    logger.info("omnirest gateway shut down.")


app = FastAPI(title="omnirest Gateway", version="1.0.0", lifespan=lifespan)


@app.exception_handler(OmniRestError)
async def _omnirest_error(request: Request, exc: OmniRestError):
    status_code = _STATUS_BY_CODE.get(exc.code, 500)
    content: Dict[str, Any] = {"error": exc.code, "details": str(exc)}
    if exc.code == "WRITE_FAILED":
        content["upstream_status"] = exc.status
        content["upstream_body"] = exc.body
    return JSONResponse(status_code=status_code, content=content)


def _connector(connector_id: str) -> AsyncBaseConnector:
    conn = _connectors.get(connector_id)
    if conn is None:
        raise UnknownConnectorError(connector_id)
    return conn


def _filters_from(request: Request) -> Dict[str, str]:
    return {
        key: value
        for key, value in request.query_params.items()
        if key not in _RESERVED_PARAMS
    }


async def _timed(connector_id: str, operation: str, call):
    start = time.time()
    try:
        result = await call
    except OmniRestError as exc:
        REQUEST_COUNT.labels(
            status=str(_STATUS_BY_CODE.get(exc.code, 500)),
            connector_id=connector_id, operation=operation,
        ).inc()
        raise
    REQUEST_LATENCY.labels(connector_id=connector_id, operation=operation).observe(time.time() - start)
    REQUEST_COUNT.labels(status="200", connector_id=connector_id, operation=operation).inc()
    return result


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@app.get("/v1/connectors")
async def list_connectors():
    return {
        "connectors": [
            {"connector_id": cid, "vendor": conn.config.vendor}
            for cid, conn in sorted(_connectors.items())
        ]
    }


@app.get("/v1/connectors/{connector_id}/entities")
async def list_entities(connector_id: str):
    return {"connector_id": connector_id, "entities": _connector(connector_id).list_entity_names()}


@app.get("/v1/connectors/{connector_id}/entities/{entity_name}")
async def get_entity(
    connector_id: str,
    entity_name: str,
    request: Request,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
    max_staleness_ms: int = 0,
):
    """
    Fetch an entity. Every query parameter except page, page_size and
    max_staleness_ms is passed through as a filter.

    A failed upstream read is reported as {"data": [], "failed": true}
    with HTTP 200, matching the read-path contract.
    """
    conn = _connector(connector_id)
    filters = list(_filters_from(request).items())

    if page is not None or page_size is not None:
        paged = await _timed(
            connector_id, "get_page",
            conn.get_entity_page_async(entity_name, filters, page or 1, page_size or 50),
        )
        return paged.to_dict()

    result = await _timed(
        connector_id, "get",
        conn.fetch_entity(entity_name, filters, max_staleness_ms),
    )
    return {
        "data": result.records,
        "count": len(result.records),
        "failed": result.failed,
        "reason": result.reason,
        "from_cache": result.from_cache,
        "freshness_ms": result.freshness_ms,
    }


@app.get("/v1/connectors/{connector_id}/entities/{entity_name}/structure")
async def get_entity_structure(connector_id: str, entity_name: str, request: Request):
    conn = _connector(connector_id)
    fields = await conn.get_entity_structure_async(
        entity_name, list(_filters_from(request).items())
    )
    return {"entity": entity_name, "fields": fields}


@app.post("/v1/connectors/{connector_id}/entities/{entity_name}", status_code=201)
async def create_entity(
    connector_id: str, entity_name: str, request: Request,
    record: Dict[str, Any] = Body(...),
):
    conn = _connector(connector_id)
    return await _timed(
        connector_id, "create",
        conn.create_entity_async(entity_name, record, list(_filters_from(request).items())),
    )


@app.put("/v1/connectors/{connector_id}/entities/{entity_name}")
async def update_entity(
    connector_id: str, entity_name: str, request: Request,
    record: Dict[str, Any] = Body(...),
):
    conn = _connector(connector_id)
    return await _timed(
        connector_id, "update",
        conn.update_entity_async(entity_name, record, list(_filters_from(request).items())),
    )


@app.delete("/v1/connectors/{connector_id}/entities/{entity_name}")
async def delete_entity(connector_id: str, entity_name: str, request: Request):
    conn = _connector(connector_id)
    return await _timed(
        connector_id, "delete",
        conn.delete_entity_async(entity_name, list(_filters_from(request).items())),
    )


@app.get("/health")
async def health():
    """Kubernetes liveness/readiness probe."""
    checks: Dict[str, str] = {}

    if _redis:
        try:
            await _redis.ping()
            checks["redis"] = "ok"
        except Exception as exc:
            checks["redis"] = f"error: {exc}"
    else:
        checks["redis"] = "disabled"

    checks["connectors"] = str(len(_connectors))

    all_ok = all(v in ("ok", "disabled") or v.isdigit() for v in checks.values())
    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
    )


@app.get("/metrics")
async def metrics():
    """Prometheus scrape endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8002)
