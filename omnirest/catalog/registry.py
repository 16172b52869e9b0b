from __future__ import annotations
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import ValidationError

from omnirest.catalog.models import ConnectorConfig
from omnirest.errors import UnknownConnectorError

logger = logging.getLogger(__name__)


class ConnectorRegistry:
    """
    Loads, validates, and serves ConnectorConfig objects.

    Backend: directory of YAML files (one file per connector, *.yaml or *.yml).
    The registry is process-wide. It is initialized once at startup via
    load_all() and supports hot-reload via reload() (atomic dict swap).
    """

    def __init__(self, config_dir: str = "configs/connectors") -> None:
        self._config_dir = Path(config_dir)
        self._configs: Dict[str, ConnectorConfig] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load_all(self) -> None:
        """
        Parse every YAML file in config_dir into a ConnectorConfig.
        Replaces the in-memory map atomically on success.

        Raises:
            FileNotFoundError: if config_dir does not exist.
            ValueError: if two files declare the same connector_id.
        """
        if not self._config_dir.exists():
            raise FileNotFoundError(
                f"Connector config directory not found: {self._config_dir}"
            )

        paths = sorted(
            list(self._config_dir.glob("*.yaml")) + list(self._config_dir.glob("*.yml"))
        )
        new_configs: Dict[str, ConnectorConfig] = {}
        for yaml_path in paths:
            try:
                raw = yaml.safe_load(yaml_path.read_text())
                cfg = ConnectorConfig.model_validate(raw)
            except (ValidationError, yaml.YAMLError) as exc:
                logger.error("Failed to load connector config %s: %s", yaml_path, exc)
                raise
            if cfg.connector_id in new_configs:
                raise ValueError(
                    f"Duplicate connector_id '{cfg.connector_id}' in {yaml_path.name}"
                )
            new_configs[cfg.connector_id] = cfg
            logger.info(
                "Loaded connector config: %s (%s, %s)",
                cfg.connector_id, cfg.vendor, yaml_path.name,
            )

        with self._lock:
            self._configs = new_configs

        logger.info("ConnectorRegistry loaded %d connector(s).", len(new_configs))

    def register(self, config: ConnectorConfig) -> None:
        """Add or replace one config without touching the others."""
        with self._lock:
            self._configs = {**self._configs, config.connector_id: config}

    def get(self, connector_id: str) -> Optional[ConnectorConfig]:
        with self._lock:
            return self._configs.get(connector_id)

    def require(self, connector_id: str) -> ConnectorConfig:
        cfg = self.get(connector_id)
        if cfg is None:
            raise UnknownConnectorError(connector_id)
        return cfg

    def reload(self) -> None:
        logger.info("Hot-reloading connector configs from %s", self._config_dir)
        self.load_all()

    def all_connector_ids(self) -> List[str]:
        with self._lock:
            return sorted(self._configs.keys())

    def count(self) -> int:
        with self._lock:
            return len(self._configs)
