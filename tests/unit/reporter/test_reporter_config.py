"""
Tests unitaires: Reporter - Configuration

Tests:
- project_id obligatoire et non vide
- Valeurs de dimensionnement positives
- Options inconnues refusées
- Immuabilité
- Converters: instance, callable ou défaut
"""

import pytest

from cloud_trace_reporter.conversion import (
    CallableStatusConverter,
    DefaultSpanKindConverter,
    DefaultStatusConverter,
)
from cloud_trace_reporter.logging import LogLevel
from cloud_trace_reporter.model import BackendStatus
from cloud_trace_reporter.reporter import (
    BackoffPolicy,
    ConfigurationError,
    ReporterConfig,
    ReporterError,
    build_config,
)


class TestProjectId:
    """Identifiant de projet."""

    def test_empty_project_id_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_config(project_id="")

        assert exc_info.value.option == "project_id"

    def test_blank_project_id_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            build_config(project_id="   ")

    def test_missing_project_id_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_config()

        assert "project_id" in exc_info.value.options

    def test_project_id_stripped(self) -> None:
        assert build_config(project_id=" proj-1 ").project_id == "proj-1"


class TestDefaults:
    """Valeurs par défaut."""

    def test_defaults(self) -> None:
        config = build_config(project_id="proj-1")

        assert config.service_name is None
        assert config.max_in_flight_batches == 4
        assert config.max_queued_spans == 2048
        assert config.retry_max_attempts == 3
        assert config.retry_backoff_policy == BackoffPolicy()
        assert config.attempt_timeout == 30.0
        assert config.shutdown_timeout == 10.0
        assert config.log_level is LogLevel.INFO
        assert isinstance(config.status_converter, DefaultStatusConverter)
        assert isinstance(config.span_kind_converter, DefaultSpanKindConverter)

    def test_retry_policy(self) -> None:
        config = build_config(
            project_id="proj-1",
            retry_max_attempts=5,
            retry_backoff_policy={"initial_delay": 0.5, "max_delay": 4.0, "multiplier": 3.0},
            attempt_timeout=2.0,
        )

        policy = config.retry_policy

        assert policy.max_attempts == 5
        assert policy.initial_delay == 0.5
        assert policy.max_delay == 4.0
        assert policy.multiplier == 3.0
        assert policy.attempt_timeout == 2.0

    def test_blank_service_name_is_none(self) -> None:
        assert build_config(project_id="p", service_name=" ").service_name is None


class TestValidation:
    """Validation des options."""

    @pytest.mark.parametrize(
        "option,value",
        [
            ("max_in_flight_batches", 0),
            ("max_queued_spans", 0),
            ("retry_max_attempts", 0),
            ("attempt_timeout", 0),
            ("shutdown_timeout", -1),
        ],
    )
    def test_non_positive_values_rejected(self, option: str, value: int) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_config(project_id="proj-1", **{option: value})

        assert exc_info.value.option == option

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_config(project_id="proj-1", sampling_rate=0.5)

        assert exc_info.value.option == "sampling_rate"

    def test_backoff_bounds(self) -> None:
        with pytest.raises(ConfigurationError):
            build_config(
                project_id="proj-1",
                retry_backoff_policy={"initial_delay": 5.0, "max_delay": 1.0},
            )

    def test_multiplier_below_one_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            build_config(project_id="proj-1", retry_backoff_policy={"multiplier": 0.5})

    def test_invalid_converter_rejected(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_config(project_id="proj-1", status_converter=42)

        assert exc_info.value.option == "status_converter"

    def test_invalid_log_level_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            build_config(project_id="proj-1", log_level="LOUD")

    def test_log_level_parsed(self) -> None:
        assert build_config(project_id="proj-1", log_level="debug").log_level is LogLevel.DEBUG

    def test_errors_share_base_class(self) -> None:
        with pytest.raises(ReporterError):
            build_config(project_id="")


class TestImmutability:
    """Configuration en lecture seule."""

    def test_config_is_frozen(self) -> None:
        config = build_config(project_id="proj-1")

        with pytest.raises(Exception):
            config.project_id = "other"  # type: ignore[misc]

    def test_callable_converter_wrapped(self) -> None:
        config = build_config(project_id="proj-1", status_converter=lambda s: BackendStatus(code=1))

        assert isinstance(config.status_converter, CallableStatusConverter)

    def test_attribute_mapper_merges_mappings(self) -> None:
        config = build_config(
            project_id="proj-1",
            use_opentelemetry_mapping=True,
            attribute_name_mappings={"http.method": "verb"},
        )

        assert config.attribute_mapper.map("http.method") == "verb"
        assert config.attribute_mapper.map("http.route") == "/http/route"

    def test_direct_construction(self) -> None:
        config = ReporterConfig(project_id="proj-1", attribute_name_mappings={"a": "b"})

        assert config.attribute_mapper.map("a") == "b"
