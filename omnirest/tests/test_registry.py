"""Tests for ConnectorRegistry: YAML loading, validation, hot reload."""
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from omnirest.cache.redis_cache import NullCache
from omnirest.catalog.models import ConnectorConfig
from omnirest.catalog.registry import ConnectorRegistry
from omnirest.connectors.generic import build_connector
from omnirest.errors import UnknownConnectorError

SHIPPED_CONFIGS = Path(__file__).parents[2] / "configs" / "connectors"


def _write(directory: Path, name: str, body: dict) -> None:
    (directory / name).write_text(yaml.safe_dump(body))


@pytest.fixture
def config_dir(tmp_path):
    _write(tmp_path, "books.yaml", {
        "connector_id": "books",
        "vendor": "zohobooks",
        "base_url": "https://www.zohoapis.com/books/v3",
        "default_params": {"organization_id": "42"},
    })
    _write(tmp_path, "shop.yml", {
        "connector_id": "shop",
        "vendor": "custom",
        "base_url": "https://shop.example.com",
        "entities": {"orders": {"template": "orders", "root": "data"}},
    })
    return tmp_path


class TestLoadAll:
    def test_loads_yaml_and_yml(self, config_dir):
        registry = ConnectorRegistry(str(config_dir))
        registry.load_all()
        assert registry.all_connector_ids() == ["books", "shop"]
        assert registry.count() == 2
        assert registry.get("books").default_params == {"organization_id": "42"}

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConnectorRegistry(str(tmp_path / "nope")).load_all()

    def test_duplicate_connector_id(self, config_dir):
        _write(config_dir, "books_copy.yaml", {
            "connector_id": "books", "vendor": "zohobooks", "base_url": "https://x",
        })
        with pytest.raises(ValueError):
            ConnectorRegistry(str(config_dir)).load_all()

    def test_invalid_config_raises(self, config_dir):
        _write(config_dir, "broken.yaml", {"connector_id": "broken"})
        with pytest.raises(ValidationError):
            ConnectorRegistry(str(config_dir)).load_all()

    def test_invalid_yaml_raises(self, config_dir):
        (config_dir / "garbage.yaml").write_text("connector_id: [unclosed")
        with pytest.raises(yaml.YAMLError):
            ConnectorRegistry(str(config_dir)).load_all()

    def test_failed_load_keeps_previous_configs(self, config_dir):
        registry = ConnectorRegistry(str(config_dir))
        registry.load_all()
        _write(config_dir, "broken.yaml", {"connector_id": "broken"})
        with pytest.raises(ValidationError):
            registry.reload()
        assert registry.all_connector_ids() == ["books", "shop"]


class TestLookup:
    def test_get_unknown_is_none(self, config_dir):
        registry = ConnectorRegistry(str(config_dir))
        registry.load_all()
        assert registry.get("jira") is None

    def test_require_unknown_raises(self, config_dir):
        registry = ConnectorRegistry(str(config_dir))
        registry.load_all()
        with pytest.raises(UnknownConnectorError):
            registry.require("jira")

    def test_register(self, tmp_path):
        registry = ConnectorRegistry(str(tmp_path))
        registry.register(ConnectorConfig(connector_id="box", vendor="box", base_url="https://api.box.com/2.0"))
        assert registry.require("box").vendor == "box"

    def test_reload_picks_up_new_file(self, config_dir):
        registry = ConnectorRegistry(str(config_dir))
        registry.load_all()
        _write(config_dir, "desk.yaml", {
            "connector_id": "desk", "vendor": "zendesk", "base_url": "https://acme.zendesk.com",
        })
        registry.reload()
        assert "desk" in registry.all_connector_ids()


class TestShippedConfigs:
    def test_shipped_configs_load(self):
        registry = ConnectorRegistry(str(SHIPPED_CONFIGS))
        registry.load_all()
        assert {"zohobooks", "mailchimp", "zendesk", "storefront"} <= set(registry.all_connector_ids())

    def test_every_shipped_config_builds_a_connector(self):
        registry = ConnectorRegistry(str(SHIPPED_CONFIGS))
        registry.load_all()
        for connector_id in registry.all_connector_ids():
            conn = build_connector(registry.require(connector_id), NullCache())
            assert conn.list_entity_names()

    def test_storefront_inline_catalog(self):
        registry = ConnectorRegistry(str(SHIPPED_CONFIGS))
        registry.load_all()
        conn = build_connector(registry.require("storefront"), NullCache())
        assert conn.paging.offset_param == "start"
        assert conn.catalog.resolve("order").required_filters == frozenset({"order_id"})
