"""Tests for the index-archiver command line."""

import json
from unittest.mock import AsyncMock

import pytest

import run_export
import shared_config
from archiver.export.partition_file import save_partition_file
from archiver.search.fields import FieldInfo
from archiver.search.values import INTEGER

from conftest import FakeBackend, five_partitions, make_int_documents, make_partition_file


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.setattr(shared_config, "_config", None)
    path = tmp_path / "config.yaml"
    path.write_text(
        "search:\n"
        "  endpoint: http://search:9200\n"
        "  index_name: articles\n"
        "  field_name: seq\n"
        "partitioning:\n"
        "  page_depth_limit: 30\n"
    )
    return str(path)


@pytest.fixture
def fake_service(monkeypatch):
    """Routes the command line to an in-memory backend."""
    backend = FakeBackend(make_int_documents(range(100)), "seq")
    client = AsyncMock()

    def make_backend(client, index_name, value_type, page_depth_limit=None):
        backend.page_depth_limit = page_depth_limit
        return backend

    monkeypatch.setattr(run_export, "create_client", lambda *args, **kwargs: client)
    monkeypatch.setattr(
        run_export,
        "get_field",
        AsyncMock(return_value=FieldInfo(name="seq", type_name="long", value_type=INTEGER))
    )
    monkeypatch.setattr(run_export, "ElasticsearchBackend", make_backend)
    return backend, client


class TestParser:
    def test_export_selection_is_repeatable(self) -> None:
        args = run_export.create_parser().parse_args([
            "export-partitions",
            "--partition-path", "plan.json",
            "--include-partition", "0",
            "--include-partition", "3",
        ])

        assert args.include_partition == [0, 3]
        assert args.exclude_partition is None
        assert args.handler is run_export.export_partitions

    def test_partition_index_options(self) -> None:
        args = run_export.create_parser().parse_args([
            "partition-index",
            "--index-name", "articles",
            "--field-name", "created",
            "--lower-bound", "2024-01-01T00:00:00Z",
            "--page-depth-limit", "500",
        ])

        assert args.index_name == "articles"
        assert args.lower_bound == "2024-01-01T00:00:00Z"
        assert args.upper_bound is None
        assert args.page_depth_limit == 500

    def test_command_is_required(self) -> None:
        with pytest.raises(SystemExit):
            run_export.create_parser().parse_args([])


def test_get_bounds(config_file, fake_service) -> None:
    backend, client = fake_service

    assert run_export.main(["--config", config_file, "get-bounds"]) == 0
    assert len(backend.query_calls) == 2
    assert backend.closed


def test_partition_then_export(config_file, fake_service, tmp_path) -> None:
    backend, _ = fake_service
    plan_path = tmp_path / "plan.json"
    export_path = tmp_path / "out"

    assert run_export.main([
        "--config", config_file,
        "partition-index",
        "--partition-path", str(plan_path),
    ]) == 0

    with open(plan_path, "r", encoding="utf-8") as f:
        plan = json.load(f)
    assert plan["indexName"] == "articles"
    assert plan["totalDocumentCount"] == 100
    assert all(p["documentCount"] <= 30 for p in plan["partitions"])

    assert run_export.main([
        "--config", config_file,
        "export-partitions",
        "--partition-path", str(plan_path),
        "--export-path", str(export_path),
        "--page-size", "7",
    ]) == 0

    files = sorted(export_path.glob("articles-*-documents.jsonl"))
    assert len(files) == len(plan["partitions"])
    assert sum(len(path.read_text().splitlines()) for path in files) == 100


def test_page_depth_limit_option_overrides_config(config_file, fake_service, tmp_path) -> None:
    plan_path = tmp_path / "plan.json"

    assert run_export.main([
        "--config", config_file,
        "partition-index",
        "--partition-path", str(plan_path),
        "--page-depth-limit", "1000",
    ]) == 0

    with open(plan_path, "r", encoding="utf-8") as f:
        assert len(json.load(f)["partitions"]) == 1


def test_malformed_bound_fails_before_counting(config_file, fake_service, tmp_path) -> None:
    backend, _ = fake_service

    assert run_export.main([
        "--config", config_file,
        "partition-index",
        "--lower-bound", "ten",
        "--partition-path", str(tmp_path / "plan.json"),
    ]) == 1
    assert backend.count_calls == []
    assert backend.query_calls == []


def test_conflicting_selection_fails_without_queries(config_file, fake_service, tmp_path) -> None:
    backend, _ = fake_service
    plan_path = save_partition_file(make_partition_file(five_partitions()), tmp_path / "plan.json")

    assert run_export.main([
        "--config", config_file,
        "export-partitions",
        "--partition-path", str(plan_path),
        "--export-path", str(tmp_path / "out"),
        "--include-partition", "0",
        "--exclude-partition", "1",
    ]) == 1
    assert backend.query_calls == []
    assert not (tmp_path / "out").exists()


def test_failed_partition_returns_error_code(config_file, fake_service, tmp_path) -> None:
    backend, _ = fake_service
    backend.fail_on = lambda range_filter, skip: range_filter.lower == 20
    plan_path = save_partition_file(make_partition_file(five_partitions()), tmp_path / "plan.json")

    with open(config_file, "a", encoding="utf-8") as f:
        f.write("export:\n  max_retries: 1\n")

    assert run_export.main([
        "--config", config_file,
        "export-partitions",
        "--partition-path", str(plan_path),
        "--export-path", str(tmp_path / "out"),
    ]) == 1
    assert (tmp_path / "out" / "articles-0-documents.jsonl").exists()


def test_missing_partition_file(config_file, fake_service, tmp_path) -> None:
    assert run_export.main([
        "--config", config_file,
        "export-partitions",
        "--partition-path", str(tmp_path / "absent.json"),
    ]) == 1
