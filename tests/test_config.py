"""Tests for the YAML configuration loader."""

import pytest

import shared_config
from shared_config import load_config, reload_config


def test_load_full_config(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "search:\n"
        "  endpoint: http://search:9200\n"
        "  index_name: articles\n"
        "  field_name: created\n"
        "  request_timeout: 30\n"
        "partitioning:\n"
        "  page_depth_limit: 5000\n"
        "  partition_path: plans/articles.json\n"
        "export:\n"
        "  directory: out\n"
        "  concurrent_partitions: 4\n"
        "  page_size: 250\n"
        "  include_partitions: [0, 2]\n"
    )

    config = load_config(str(path))

    assert config.search.endpoint == "http://search:9200"
    assert config.search.index_name == "articles"
    assert config.search.field_name == "created"
    assert config.search.request_timeout == 30.0
    assert config.partitioning.page_depth_limit == 5000
    assert config.partitioning.partition_path == "plans/articles.json"
    assert config.export.directory == "out"
    assert config.export.concurrent_partitions == 4
    assert config.export.page_size == 250
    assert config.export.include_partitions == [0, 2]
    assert config.export.exclude_partitions == []


def test_missing_sections_use_defaults(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("search:\n  index_name: articles\n")

    config = load_config(str(path))

    assert config.search.endpoint == "http://127.0.0.1:9200"
    assert config.partitioning.page_depth_limit == 10000
    assert config.export.concurrent_partitions == 2
    assert config.export.page_size == 1000
    assert config.export.max_retries == 3


def test_empty_file_uses_defaults(tmp_path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("")

    assert load_config(str(path)).export.directory == "."


def test_missing_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "absent.yaml"))


def test_config_path_from_environment(tmp_path, monkeypatch) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text("search:\n  index_name: from-env\n")
    monkeypatch.setenv("CONFIG_PATH", str(path))

    assert load_config().search.index_name == "from-env"


def test_reload_replaces_global_config(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(shared_config, "_config", None)
    first = tmp_path / "first.yaml"
    first.write_text("search:\n  index_name: first\n")
    second = tmp_path / "second.yaml"
    second.write_text("search:\n  index_name: second\n")

    assert shared_config.get_config(str(first)).search.index_name == "first"
    assert shared_config.get_config(str(second)).search.index_name == "first"
    assert reload_config(str(second)).search.index_name == "second"
    assert shared_config.get_config().search.index_name == "second"
