from __future__ import annotations
import json
from typing import Any, Dict, List, Optional, Union

from omnirest.errors import MalformedResponseError

Record = Dict[str, Any]

MISSING = object()


def parse_payload(raw: Union[str, bytes, None]) -> Any:
    """
    Decode a response body into a JSON document.

    Integers decode as Python int (no 32/53-bit truncation for large ids);
    only values written with a fraction or exponent become float.
    An empty body is None rather than an error.
    """
    if raw is None:
        return None
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedResponseError(
                str(exc), raw[:120].decode("utf-8", errors="replace")
            ) from exc
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise MalformedResponseError(str(exc), raw[:120]) from exc


def navigate(document: Any, path: Optional[str]) -> Any:
    """
    Follow a dotted property path ("response.folder_content.files").
    Returns MISSING as soon as a segment is absent.
    """
    if not path:
        return document
    node = document
    for segment in path.split("."):
        if not segment:
            continue
        if not isinstance(node, dict) or segment not in node:
            return MISSING
        node = node[segment]
    return node


def _to_record(element: Any) -> Record:
    if isinstance(element, dict):
        # Shallow copy: nested objects/arrays stay nested.
        return dict(element)
    return {"value": element}


def unwrap(raw: Union[str, bytes, None], root_path: Optional[str] = None) -> List[Record]:
    """Parse a response body and extract its records."""
    return unwrap_document(parse_payload(raw), root_path)


def unwrap_document(document: Any, root_path: Optional[str] = None) -> List[Record]:
    """
    Extract records from a parsed document.

    Missing root -> [], array -> one record per element, object -> [object],
    any other JSON kind -> [].
    """
    node = navigate(document, root_path)
    if node is MISSING:
        return []
    if isinstance(node, list):
        return [_to_record(el) for el in node if el is not None]
    if isinstance(node, dict):
        return [dict(node)]
    return []
