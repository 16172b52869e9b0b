from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, List, Mapping, MutableMapping, Optional, Tuple, Union

from pydantic import BaseModel

from omnirest.errors import MissingFilterError


class Filter(BaseModel):
    """
    One caller-supplied filter. `operator` is carried for callers that
    evaluate it themselves; the engine only uses field_name and value.
    """

    field_name: Optional[str] = None
    value: Any = None
    operator: str = "="


FilterLike = Union[Filter, Tuple[str, Any], Mapping[str, Any]]


class QueryMap(MutableMapping[str, str]):
    """
    Case-insensitive str -> str map built fresh for every call.

    Keys are matched case-insensitively; the spelling of the most recent
    assignment is what goes out on the wire.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._data: Dict[str, Tuple[str, str]] = {}
        if initial:
            for key, value in initial.items():
                self[key] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()][1]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key.lower()] = (key, "" if value is None else str(value))

    def __delitem__(self, key: str) -> None:
        del self._data[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._data

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._data.values())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryMap({self.to_params()!r})"

    def is_blank(self, key: str) -> bool:
        """True when the key is absent or holds only whitespace."""
        entry = self._data.get(key.lower())
        return entry is None or not entry[1].strip()

    def copy(self) -> "QueryMap":
        return QueryMap(self.to_params())

    def to_params(self) -> Dict[str, str]:
        """Plain dict with caller spelling, ready for aiohttp's params=."""
        return {original: value for original, value in self._data.values()}


def _normalize(item: FilterLike) -> Tuple[Optional[str], Any]:
    if isinstance(item, Filter):
        return item.field_name, item.value
    if isinstance(item, Mapping):
        name = item.get("field_name", item.get("fieldName", item.get("field")))
        return name, item.get("value", item.get("filter_value"))
    if isinstance(item, tuple) and len(item) >= 2:
        return item[0], item[1]
    raise TypeError(f"Unsupported filter: {item!r}")


def translate(filters: Optional[Iterable[FilterLike]]) -> QueryMap:
    """
    Turn caller filters into a QueryMap.

    Filters with a None/blank field name are skipped. Values are
    stringified as-is; formatting dates or decimals is up to the caller.
    A later filter with the same (case-insensitive) name wins.
    """
    query = QueryMap()
    for item in filters or ():
        if item is None:
            continue
        name, value = _normalize(item)
        if name is None or not str(name).strip():
            continue
        query[str(name).strip()] = value
    return query


def enforce_required(
    entity_name: str, query: QueryMap, required: Iterable[str]
) -> None:
    """Raise MissingFilterError naming every absent-or-blank required filter."""
    missing: List[str] = sorted(
        name for name in required if name and query.is_blank(name)
    )
    if missing:
        raise MissingFilterError(entity_name, missing)
