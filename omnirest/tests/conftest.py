"""Shared pytest fixtures for omnirest tests (no real network calls)."""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

from omnirest.cache.redis_cache import NullCache
from omnirest.catalog.models import ConnectorConfig
from omnirest.connectors.generic import build_connector
from omnirest.transport.http import RawResponse


@dataclass
class Call:
    method: str
    path: str
    params: Dict[str, str] = field(default_factory=dict)
    json_body: Any = None


class FakeTransport:
    """
    Stands in for HttpTransport: records every call and replays canned
    responses in order (the last one repeats once the queue is empty).
    """

    def __init__(self, responses: Optional[List[RawResponse]] = None, error: Exception = None):
        self.calls: List[Call] = []
        self._responses = list(responses or [RawResponse(200, "{}")])
        self._error = error
        self.closed = 0

    async def request(self, method, path, params=None, json_body=None):
        self.calls.append(Call(method, path, dict(params or {}), json_body))
        if self._error is not None:
            raise self._error
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    async def close(self):
        self.closed += 1


class DictCache:
    """In-memory cache with the RedisCache call signatures."""

    def __init__(self):
        self.store: Dict[Any, List[Dict]] = {}
        self.invalidated: List[str] = []

    async def get(self, connector_id, entity_name, max_staleness_ms, params=None):
        if max_staleness_ms <= 0:
            return None
        key = (connector_id, entity_name.lower(), json.dumps(sorted((params or {}).items())))
        if key in self.store:
            return self.store[key], 5
        return None

    async def put(self, connector_id, entity_name, data, ttl_ms, params=None):
        key = (connector_id, entity_name.lower(), json.dumps(sorted((params or {}).items())))
        self.store[key] = data

    async def invalidate(self, connector_id, entity_name):
        self.invalidated.append(entity_name)
        return 0


def json_response(payload: Any, status: int = 200) -> RawResponse:
    return RawResponse(status=status, body=json.dumps(payload))


@pytest.fixture
def respond():
    return json_response


@pytest.fixture
def make_connector():
    """
    make_connector("zohobooks", [json_response(...)], default_params={...})
    returns (connector, fake_transport).
    """

    def _make(vendor, responses=None, error=None, cache=None, **overrides):
        cfg = ConnectorConfig(
            connector_id=overrides.pop("connector_id", vendor),
            vendor=vendor,
            base_url="https://api.example.test",
            **overrides,
        )
        transport = FakeTransport(responses, error)
        return build_connector(cfg, cache or NullCache(), transport), transport

    return _make


@pytest.fixture
def dict_cache():
    return DictCache()
