"""Tests for the pagination adapter."""
import pytest

from omnirest.catalog.models import PagingConfig
from omnirest.engine.filters import QueryMap
from omnirest.engine.pagination import (
    apply_paging,
    build_paged_result,
    clamp_page_size,
    extract_total,
    slice_page,
)

PAGE = PagingConfig(strategy="page", page_param="page", size_param="per_page", min_size=10, max_size=200)
OFFSET = PagingConfig(
    strategy="offset", offset_param="offset", size_param="count",
    min_size=1, max_size=1000, total_field="total_items",
)


class TestApplyPaging:
    def test_page_strategy(self):
        q = QueryMap()
        assert apply_paging(q, PAGE, 2, 50) == (2, 50)
        assert q.to_params() == {"page": "2", "per_page": "50"}

    @pytest.mark.parametrize("requested,sent", [(5, 10), (500, 200), (10, 10), (200, 200)])
    def test_page_size_clamped(self, requested, sent):
        q = QueryMap()
        _, size = apply_paging(q, PAGE, 1, requested)
        assert size == sent
        assert q["per_page"] == str(sent)

    def test_offset_strategy(self):
        q = QueryMap()
        apply_paging(q, OFFSET, 3, 50)
        assert q.to_params() == {"offset": "100", "count": "50"}

    def test_page_number_floor(self):
        q = QueryMap()
        assert apply_paging(q, PAGE, 0, 50)[0] == 1
        assert q["page"] == "1"

    def test_none_strategy_sends_nothing(self):
        q = QueryMap()
        apply_paging(q, PagingConfig(strategy="none"), 2, 20)
        assert len(q) == 0

    def test_clamp_helper(self):
        assert clamp_page_size(0, OFFSET) == 1


class TestPagedResult:
    def test_exact_total(self):
        result = build_paged_result([{}] * 50, 3, 50, total=237)
        assert result.total_pages == 5
        assert result.has_next_page is True
        assert result.has_previous_page is True
        assert result.total_records == 237
        assert result.total_is_exact

    def test_exact_total_last_page(self):
        result = build_paged_result([{}] * 37, 5, 50, total=237)
        assert result.has_next_page is False

    def test_heuristic_full_page(self):
        result = build_paged_result([{}] * 50, 2, 50)
        assert result.has_next_page is True
        assert result.total_pages == 1
        assert result.total_records == 50
        assert not result.total_is_exact

    def test_heuristic_short_page(self):
        result = build_paged_result([{}] * 49, 2, 50)
        assert result.has_next_page is False

    def test_first_page_has_no_previous(self):
        assert build_paged_result([], 1, 50).has_previous_page is False

    def test_to_dict(self):
        d = build_paged_result([{"id": 1}], 1, 10, total=1).to_dict()
        assert d["data"] == [{"id": 1}]
        assert d["total_pages"] == 1


class TestExtractTotal:
    def test_found(self):
        assert extract_total({"total_items": 237}, OFFSET) == 237

    def test_digit_string(self):
        assert extract_total({"total_items": "12"}, OFFSET) == 12

    @pytest.mark.parametrize("doc", [{}, {"total_items": None}, {"total_items": "n/a"}, {"total_items": True}])
    def test_unusable(self, doc):
        assert extract_total(doc, OFFSET) is None

    def test_no_total_field_configured(self):
        assert extract_total({"total_items": 5}, PAGE) is None

    def test_dotted(self):
        paging = PagingConfig(strategy="offset", total_field="meta.total")
        assert extract_total({"meta": {"total": 9}}, paging) == 9


class TestSlicePage:
    def test_local_paging(self):
        records = [{"i": i} for i in range(25)]
        page = slice_page(records, 3, 10)
        assert [r["i"] for r in page.data] == list(range(20, 25))
        assert page.total_pages == 3
        assert page.has_next_page is False
