from __future__ import annotations
import asyncio
import base64
import logging
import os
import random
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import aiohttp
from opentelemetry import trace

from omnirest.catalog.models import ConnectorConfig
from omnirest.errors import TransportError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer("omnirest.transport")


@dataclass
class RawResponse:
    """
    Status, headers and the undecoded body. Decoding happens in
    parse_payload so a bad byte sequence surfaces as a malformed response.
    """

    status: int
    body: Union[str, bytes] = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        """Lossy text view for logs and error messages only."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        return self.body


@dataclass
class AuthSettings:
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)


def _resolve_credential(credential_ref: str) -> str:
    if credential_ref.startswith("env://"):
        return os.environ.get(credential_ref[6:], "")
    return credential_ref  # raw token for dev/test


def build_auth(config: ConnectorConfig) -> AuthSettings:
    """Headers/params for config.auth_type. Token refresh flows are out of scope."""
    token = _resolve_credential(config.credential_ref)
    if not token or config.auth_type == "none":
        return AuthSettings()
    if config.auth_type == "bearer":
        return AuthSettings(headers={"Authorization": f"Bearer {token}"})
    if config.auth_type == "basic":
        encoded = base64.b64encode(token.encode()).decode()
        return AuthSettings(headers={"Authorization": f"Basic {encoded}"})
    if config.auth_type == "query":
        return AuthSettings(params={config.credential_param: token})
    raise ValueError(f"Unsupported auth_type '{config.auth_type}'")


class HttpTransport:
    """
    Shared HTTP transport for all connectors.

    Responsibilities (the entity engine never does any of this itself):
    - Shared aiohttp.ClientSession (connection pooling)
    - Auth headers / auth query params
    - Exponential-backoff retry on 429/5xx and connection errors, ±10% jitter
    - Per-request timeout via aiohttp.ClientTimeout

    Non-2xx responses that are not retryable are returned, not raised:
    the caller decides whether a failure is "no data" (reads) or an error
    (writes).
    """

    RETRY_BASE_DELAY_S = 0.5
    RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

    def __init__(
        self,
        base_url: str,
        auth: Optional[AuthSettings] = None,
        timeout_s: float = 10.0,
        max_retries: int = 3,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._auth = auth or AuthSettings()
        self._timeout_s = timeout_s
        self._max_retries = max(1, max_retries)
        self._session = session
        self._own_session = session is None

    @classmethod
    def from_config(cls, config: ConnectorConfig) -> "HttpTransport":
        return cls(
            config.base_url,
            auth=build_auth(config),
            timeout_s=config.timeout_s,
            max_retries=config.max_retries,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_s)
            )
        return self._session

    async def close(self) -> None:
        if self._own_session and self._session and not self._session.closed:
            await self._session.close()
        if self._own_session:
            self._session = None

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if not path:
            return self._base_url
        return f"{self._base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[Mapping[str, str]] = None,
        json_body: Any = None,
    ) -> RawResponse:
        """Send one request with retries. Raises TransportError when no response arrives."""
        url = self.build_url(path)
        query = {**self._auth.params, **dict(params or {})}
        last_exc: Optional[BaseException] = None

        for attempt in range(self._max_retries):
            with tracer.start_as_current_span(
                "transport.request",
                attributes={"http.method": method, "http.url": url, "attempt": attempt + 1},
            ) as span:
                try:
                    response = await self._send(method, url, query, json_body)
                except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                    last_exc = exc
                    span.set_attribute("transport.error", type(exc).__name__)
                    response = None
                else:
                    span.set_attribute("http.status_code", response.status)

            if response is not None and response.status not in self.RETRYABLE_STATUS_CODES:
                return response

            if attempt < self._max_retries - 1:
                delay = self.RETRY_BASE_DELAY_S * (2 ** attempt)
                jitter = random.uniform(0, delay * 0.1)
                logger.warning(
                    "Retryable failure %s %s (attempt %d/%d): %s, sleeping %.2fs",
                    method, url, attempt + 1, self._max_retries,
                    response.status if response is not None else last_exc,
                    delay + jitter,
                )
                await asyncio.sleep(delay + jitter)
            elif response is not None:
                # Out of retries but the server did answer: hand back the status.
                return response

        raise TransportError(
            f"{method} {url} failed after {self._max_retries} attempts: {last_exc}"
        ) from last_exc

    async def _send(
        self, method: str, url: str, params: Dict[str, str], json_body: Any
    ) -> RawResponse:
        session = await self._get_session()
        headers = dict(self._auth.headers)
        if json_body is not None:
            headers["Content-Type"] = "application/json"
        async with session.request(
            method, url, params=params or None, json=json_body, headers=headers
        ) as resp:
            body = await resp.read()
            return RawResponse(
                status=resp.status,
                body=body,
                headers={k: v for k, v in resp.headers.items()},
            )
