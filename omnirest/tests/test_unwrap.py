"""Tests for JSON payload parsing and root-node unwrapping."""
import pytest

from omnirest.engine.unwrap import MISSING, navigate, parse_payload, unwrap, unwrap_document
from omnirest.errors import MalformedResponseError


class TestUnwrap:
    def test_array_under_root(self):
        records = unwrap('{"invoices": [{"id": "1"}, {"id": "2"}]}', "invoices")
        assert [r["id"] for r in records] == ["1", "2"]

    def test_empty_array(self):
        assert unwrap('{"invoices": []}', "invoices") == []

    def test_missing_root_is_empty_not_error(self):
        assert unwrap("{}", "invoices") == []

    def test_singleton_without_root(self):
        records = unwrap('{"id": 7, "name": "store"}', "")
        assert records == [{"id": 7, "name": "store"}]

    def test_singleton_under_root(self):
        assert unwrap('{"invoice": {"id": "9"}}', "invoice") == [{"id": "9"}]

    def test_top_level_array_without_root(self):
        assert len(unwrap('[{"a": 1}, {"a": 2}]', None)) == 2

    @pytest.mark.parametrize("body", ['{"x": 5}', '{"x": "text"}', '{"x": null}', '{"x": true}'])
    def test_primitive_root_yields_nothing(self, body):
        assert unwrap(body, "x") == []

    def test_null_document(self):
        assert unwrap("null", None) == []

    def test_empty_body(self):
        assert unwrap("", "data") == []

    def test_nested_values_preserved(self):
        records = unwrap('{"data": [{"id": 1, "tags": ["a"], "owner": {"login": "x"}}]}', "data")
        assert records[0]["tags"] == ["a"]
        assert records[0]["owner"] == {"login": "x"}

    def test_non_object_elements_wrapped(self):
        assert unwrap('{"ids": [1, 2]}', "ids") == [{"value": 1}, {"value": 2}]

    def test_large_integers_exact(self):
        records = unwrap('{"items": [{"id": 460000000000012345678}]}', "items")
        assert records[0]["id"] == 460000000000012345678
        assert isinstance(records[0]["id"], int)

    def test_floats_stay_floats(self):
        assert isinstance(unwrap('{"a": [{"amount": 10.5}]}', "a")[0]["amount"], float)

    def test_dotted_root_path(self):
        body = '{"response": {"folder_content": {"files": [{"quickkey": "q1"}]}}}'
        assert unwrap(body, "response.folder_content.files") == [{"quickkey": "q1"}]

    def test_dotted_root_partially_missing(self):
        assert unwrap('{"response": {}}', "response.folder_content.files") == []

    def test_bytes_body(self):
        assert unwrap(b'{"data": [{"id": 1}]}', "data") == [{"id": 1}]

    def test_records_are_copies(self):
        doc = {"data": [{"id": 1}]}
        records = unwrap_document(doc, "data")
        records[0]["id"] = 2
        assert doc["data"][0]["id"] == 1


class TestParsePayload:
    def test_malformed_raises(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_payload("<html>oops</html>")
        assert exc_info.value.code == "MALFORMED_RESPONSE"
        assert exc_info.value.body_preview.startswith("<html>")

    def test_bom_is_tolerated(self):
        assert parse_payload("\ufeff{}".encode("utf-8")) == {}

    def test_invalid_utf8_raises(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_payload(b'{"a": "\xff"}')
        assert exc_info.value.code == "MALFORMED_RESPONSE"


class TestNavigate:
    def test_empty_path_returns_document(self):
        doc = {"a": 1}
        assert navigate(doc, "") is doc

    def test_missing_segment(self):
        assert navigate({"a": {"b": 1}}, "a.c") is MISSING

    def test_through_non_object(self):
        assert navigate({"a": [1]}, "a.b") is MISSING
