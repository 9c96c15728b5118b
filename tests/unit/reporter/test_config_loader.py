"""
Tests unitaires: Reporter - Config Loader YAML
"""

from pathlib import Path

import pytest

from cloud_trace_reporter.model import BackendStatus
from cloud_trace_reporter.reporter import ConfigurationError, ReporterConfigLoader


class TestReporterConfigLoader:
    """Chargement YAML."""

    def test_load_fixture(self, fixtures_path: Path) -> None:
        config = ReporterConfigLoader(fixtures_path / "configs").load("reporter.yaml")

        assert config.project_id == "proj-1"
        assert config.service_name == "checkout"
        assert config.max_queued_spans == 4096
        assert config.retry_backoff_policy.initial_delay == 0.5
        assert config.attribute_mapper.map("http.method") == "/http/method"

    def test_flat_document(self, tmp_path: Path) -> None:
        path = tmp_path / "flat.yaml"
        path.write_text("project_id: proj-2\nmax_in_flight_batches: 2\n", encoding="utf-8")

        config = ReporterConfigLoader().load(path)

        assert config.project_id == "proj-2"
        assert config.max_in_flight_batches == 2

    def test_overrides_win(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("reporter:\n  project_id: proj-2\n", encoding="utf-8")

        config = ReporterConfigLoader().load(
            path,
            service_name="api",
            status_converter=lambda status: BackendStatus(code=0),
        )

        assert config.service_name == "api"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError):
            ReporterConfigLoader().load(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("reporter: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ReporterConfigLoader().load(path)

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- project_id\n", encoding="utf-8")

        with pytest.raises(ConfigurationError):
            ReporterConfigLoader().load(path)

    def test_empty_document_missing_project(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            ReporterConfigLoader().load(path)

        assert "project_id" in exc_info.value.options

    def test_unknown_option_in_file(self, tmp_path: Path) -> None:
        path = tmp_path / "unknown.yaml"
        path.write_text("project_id: p\nflush_interval: 5\n", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            ReporterConfigLoader().load(path)

        assert exc_info.value.option == "flush_interval"
