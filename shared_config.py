# shared_config.py - Shared Configuration Loader
# =============================================================================
# This module loads the YAML configuration and makes it available to all
# other modules in the system.
# =============================================================================

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SearchConfig:
    endpoint: str = "http://127.0.0.1:9200"
    index_name: Optional[str] = None
    field_name: Optional[str] = None
    request_timeout: float = 120.0


@dataclass
class PartitioningConfig:
    # Elasticsearch index.max_result_window default
    page_depth_limit: int = 10000
    partition_path: Optional[str] = None


@dataclass
class ExportConfig:
    directory: str = "."
    concurrent_partitions: int = 2
    page_size: int = 1000
    max_retries: int = 3
    retry_base_delay: float = 1.0
    include_partitions: list[int] = field(default_factory=list)
    exclude_partitions: list[int] = field(default_factory=list)


@dataclass
class Config:
    """Main configuration class that holds all settings."""
    search: SearchConfig = field(default_factory=SearchConfig)
    partitioning: PartitioningConfig = field(default_factory=PartitioningConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def _find_config_path() -> Optional[str]:
    config_path = os.environ.get("CONFIG_PATH")
    if config_path is not None:
        return config_path

    # Search for config.yaml in common locations
    search_paths = [
        Path("config.yaml"),
        Path("../config.yaml"),
        Path(__file__).parent / "config.yaml",
    ]

    for path in search_paths:
        if path.exists():
            return str(path)
    return None


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Loads configuration from YAML file.

    Args:
        config_path: Path to config.yaml. If None, searches in:
            1. CONFIG_PATH environment variable
            2. ./config.yaml
            3. ../config.yaml
            4. config.yaml next to this module

    Returns:
        Config object with all settings
    """
    if config_path is None:
        config_path = _find_config_path()

    if config_path is None or not Path(config_path).exists():
        raise FileNotFoundError(
            "config.yaml not found. Create one or set CONFIG_PATH environment variable."
        )

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    # Parse search config
    search_data = data.get("search") or {}
    search = SearchConfig(
        endpoint=search_data.get("endpoint", "http://127.0.0.1:9200"),
        index_name=search_data.get("index_name"),
        field_name=search_data.get("field_name"),
        request_timeout=float(search_data.get("request_timeout", 120.0))
    )

    # Parse partitioning config
    partitioning_data = data.get("partitioning") or {}
    partitioning = PartitioningConfig(
        page_depth_limit=int(partitioning_data.get("page_depth_limit", 10000)),
        partition_path=partitioning_data.get("partition_path")
    )

    # Parse export config
    export_data = data.get("export") or {}
    export = ExportConfig(
        directory=export_data.get("directory", "."),
        concurrent_partitions=int(export_data.get("concurrent_partitions", 2)),
        page_size=int(export_data.get("page_size", 1000)),
        max_retries=int(export_data.get("max_retries", 3)),
        retry_base_delay=float(export_data.get("retry_base_delay", 1.0)),
        include_partitions=[int(i) for i in export_data.get("include_partitions") or []],
        exclude_partitions=[int(i) for i in export_data.get("exclude_partitions") or []]
    )

    return Config(search=search, partitioning=partitioning, export=export)


# Global config instance (lazy loaded)
_config: Optional[Config] = None


def get_config(config_path: Optional[str] = None) -> Config:
    """
    Gets the global config instance, loading it if necessary.

    Args:
        config_path: Path to config.yaml (only used on first call)

    Returns:
        Config object
    """
    global _config
    if _config is None:
        _config = load_config(config_path)
    return _config


def reload_config(config_path: Optional[str] = None) -> Config:
    """
    Forces a reload of the configuration.

    Args:
        config_path: Path to config.yaml

    Returns:
        New Config object
    """
    global _config
    _config = load_config(config_path)
    return _config
