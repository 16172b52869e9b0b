from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from omnirest.catalog.models import PagingConfig
from omnirest.engine.filters import QueryMap
from omnirest.engine.unwrap import Record, MISSING, navigate


@dataclass
class PagedResult:
    """
    Uniform page envelope.

    When total_is_exact is False, total_pages/total_records describe only
    this page and has_next_page comes from the full-page heuristic: a last
    page that happens to be exactly full still reports has_next_page=True.
    """

    data: List[Record] = field(default_factory=list)
    page_number: int = 1
    page_size: int = 0
    total_records: int = 0
    total_pages: int = 1
    has_previous_page: bool = False
    has_next_page: bool = False
    total_is_exact: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "page_number": self.page_number,
            "page_size": self.page_size,
            "total_records": self.total_records,
            "total_pages": self.total_pages,
            "has_previous_page": self.has_previous_page,
            "has_next_page": self.has_next_page,
            "total_is_exact": self.total_is_exact,
        }


def clamp_page_size(page_size: int, paging: PagingConfig) -> int:
    return max(paging.min_size, min(int(page_size), paging.max_size))


def apply_paging(
    query: QueryMap, paging: PagingConfig, page_number: int, page_size: int
) -> Tuple[int, int]:
    """
    Write vendor paging parameters into query.

    Returns (page_number, effective_page_size) after normalizing the page
    number to >= 1 and clamping the size to the vendor's range.
    """
    page_number = max(1, int(page_number))
    size = clamp_page_size(page_size, paging)

    if paging.strategy == "page":
        query[paging.page_param] = page_number
        query[paging.size_param] = size
    elif paging.strategy == "offset":
        query[paging.offset_param] = (page_number - 1) * size
        query[paging.size_param] = size
    # strategy 'none': the vendor returns everything; the connector uses slice_page

    return page_number, size


def extract_total(document: Any, paging: PagingConfig) -> Optional[int]:
    """Authoritative total from the response, if the vendor sends one."""
    if not paging.total_field:
        return None
    value = navigate(document, paging.total_field)
    if value is MISSING or value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def build_paged_result(
    records: List[Record],
    page_number: int,
    page_size: int,
    total: Optional[int] = None,
) -> PagedResult:
    page_number = max(1, page_number)

    if total is not None and page_size > 0:
        return PagedResult(
            data=records,
            page_number=page_number,
            page_size=page_size,
            total_records=total,
            total_pages=math.ceil(total / page_size),
            has_previous_page=page_number > 1,
            has_next_page=page_number * page_size < total,
            total_is_exact=True,
        )

    # No total: report this page only and guess from fullness.
    return PagedResult(
        data=records,
        page_number=page_number,
        page_size=page_size,
        total_records=len(records),
        total_pages=1,
        has_previous_page=page_number > 1,
        has_next_page=page_size > 0 and len(records) == page_size,
        total_is_exact=False,
    )


def slice_page(records: List[Record], page_number: int, page_size: int) -> PagedResult:
    """Local paging for vendors without server-side paging."""
    page_number = max(1, page_number)
    start = (page_number - 1) * page_size
    return build_paged_result(
        records[start:start + page_size], page_number, page_size, total=len(records)
    )
