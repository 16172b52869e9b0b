from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from urllib.parse import quote

from omnirest.engine.filters import QueryMap
from omnirest.errors import MissingPathParameterError

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_.\-]*)\}")


@dataclass
class ResolvedEndpoint:
    path: str
    consumed: List[str] = field(default_factory=list)   # placeholder names used


def placeholders(template: str) -> List[str]:
    """Placeholder names in template order, without duplicates."""
    seen: List[str] = []
    for match in _PLACEHOLDER.finditer(template or ""):
        if match.group(1) not in seen:
            seen.append(match.group(1))
    return seen


def resolve(
    template: str,
    query: QueryMap,
    defaults: Optional[Mapping[str, str]] = None,
) -> ResolvedEndpoint:
    """
    Substitute every {name} in template from the query map.

    Values are percent-escaped with no safe characters, so '/', '?', '#'
    and spaces can never open a new path segment. A missing or blank value
    falls back to `defaults` (per-endpoint overrides such as the root
    folder id); anything else raises MissingPathParameterError.
    """
    defaults = {k.lower(): v for k, v in (defaults or {}).items()}
    values: Dict[str, str] = {}
    for name in placeholders(template):
        if not query.is_blank(name):
            values[name] = query[name]
        elif name.lower() in defaults:
            values[name] = defaults[name.lower()]
        else:
            raise MissingPathParameterError(name, template)

    path = _PLACEHOLDER.sub(lambda m: quote(values[m.group(1)], safe=""), template or "")
    return ResolvedEndpoint(path=path, consumed=list(values))


def remaining_params(query: QueryMap, consumed: List[str]) -> QueryMap:
    """Query map minus the keys that were substituted into the path."""
    rest = query.copy()
    for name in consumed:
        if name in rest:
            del rest[name]
    return rest
