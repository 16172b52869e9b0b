from __future__ import annotations
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from omnirest.catalog.models import EndpointDescriptor, PagingConfig
from omnirest.errors import UnknownEntityError


class EntityCatalog:
    """
    Read-only map of entity name -> EndpointDescriptor for one vendor.

    Lookups are case-insensitive exact matches. The table is frozen at
    construction, so a single instance can be shared by any number of
    concurrent fetches without locking.
    """

    def __init__(
        self,
        name: str,
        entries: Iterable[Tuple[str, EndpointDescriptor]],
        paging: Optional[PagingConfig] = None,
    ) -> None:
        self.name = name
        self.paging = paging or PagingConfig(strategy="none")

        table: Dict[str, EndpointDescriptor] = {}
        names: List[str] = []
        for entity_name, descriptor in entries:
            key = entity_name.strip().lower()
            if not key:
                raise ValueError(f"Catalog '{name}' has a blank entity name")
            if key in table:
                raise ValueError(
                    f"Catalog '{name}' declares entity '{entity_name}' twice"
                )
            table[key] = descriptor
            names.append(entity_name.strip())

        self._table: Mapping[str, EndpointDescriptor] = MappingProxyType(table)
        self._names: Tuple[str, ...] = tuple(names)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def resolve(self, entity_name: str) -> EndpointDescriptor:
        descriptor = self._table.get((entity_name or "").strip().lower())
        if descriptor is None:
            raise UnknownEntityError(entity_name, self.name)
        return descriptor

    def list_entity_names(self) -> List[str]:
        """Entity names in declaration order, original spelling."""
        return list(self._names)

    def __contains__(self, entity_name: object) -> bool:
        return isinstance(entity_name, str) and entity_name.strip().lower() in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"EntityCatalog(name={self.name!r}, entities={len(self)})"

    # ------------------------------------------------------------------
    # Construction from plain data (YAML manifests, inline config)
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(
        cls,
        name: str,
        raw: Mapping[str, Mapping[str, Any]],
        paging: Optional[PagingConfig] = None,
    ) -> "EntityCatalog":
        """
        Build a catalog from a manifest table:

            orders:
              template: orders/{order_id}/products
              root: data
              required: [order_id]
              defaults: {}
        """
        entries = []
        for entity_name, entry in raw.items():
            entry = dict(entry or {})
            entries.append((
                entity_name,
                EndpointDescriptor(
                    template=entry.get("template", ""),
                    root_path=entry.get("root", entry.get("root_path")),
                    required_filters=entry.get("required", entry.get("required_filters")),
                    path_defaults=entry.get("defaults", entry.get("path_defaults")) or {},
                    item_template=entry.get("item_template"),
                    update_method=entry.get("update_method", "PUT"),
                    writable=bool(entry.get("writable", False)),
                ),
            ))
        return cls(name, entries, paging)


def entity(
    template: str,
    root: Optional[str] = None,
    required: Iterable[str] = (),
    **extra: Any,
) -> EndpointDescriptor:
    """Shorthand used by the built-in vendor tables."""
    return EndpointDescriptor(
        template=template,
        root_path=root,
        required_filters=frozenset(required),
        **extra,
    )
