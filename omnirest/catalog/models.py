from __future__ import annotations
from typing import Any, Dict, FrozenSet, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EndpointDescriptor(BaseModel):
    """
    How one logical entity maps onto a remote REST endpoint.

    Immutable: descriptors are built once when a catalog is loaded and
    shared by every concurrent fetch.
    """

    model_config = ConfigDict(frozen=True)

    template: str
    # Property (or dotted path) to unwrap; empty means the raw payload.
    root_path: Optional[str] = None
    required_filters: FrozenSet[str] = Field(default_factory=frozenset)

    # Defaults for optional placeholders, e.g. {"folder_id": "0"} for the
    # root folder. Anything not listed here fails fast when missing.
    path_defaults: Dict[str, str] = Field(default_factory=dict)

    # Single-item route used by update/delete, e.g. "lists/{list_id}/members/{id}"
    item_template: Optional[str] = None
    update_method: Literal["PUT", "PATCH"] = "PUT"
    writable: bool = False

    @field_validator("required_filters", mode="before")
    @classmethod
    def _drop_blank_filters(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = [value]
        return frozenset(v.strip() for v in value if v and v.strip())

    @field_validator("root_path", mode="before")
    @classmethod
    def _blank_root_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PagingConfig(BaseModel):
    """Vendor paging scheme: page/per_page or offset/count."""

    model_config = ConfigDict(frozen=True)

    strategy: Literal["page", "offset", "none"] = "page"
    page_param: str = "page"
    size_param: str = "per_page"
    offset_param: str = "offset"
    min_size: int = 1
    max_size: int = 100
    # Dotted path to an authoritative total in the response, e.g. "total_items".
    total_field: Optional[str] = None


class ConnectorConfig(BaseModel):
    """Configuration for one connector instance (one remote account)."""

    connector_id: str
    vendor: str                        # built-in catalog name, or 'custom'
    base_url: str
    auth_type: str = "bearer"          # 'bearer' | 'basic' | 'query' | 'none'
    credential_ref: str = ""           # 'env://VAR_NAME' or raw token
    credential_param: str = "apikey"   # query parameter name for auth_type=query

    timeout_s: float = 10.0
    max_retries: int = 3
    freshness_ttl_ms: int = 60_000

    # Sent with every request unless the caller supplies the same key.
    default_params: Dict[str, str] = Field(default_factory=dict)

    # Overrides the catalog's paging scheme when set.
    paging: Optional[PagingConfig] = None

    # Inline catalog for vendor == 'custom':
    #   {"orders": {"template": "orders", "root": "data", "required": []}}
    entities: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
