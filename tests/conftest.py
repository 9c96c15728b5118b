"""
Cloud Trace Reporter - Pytest Configuration
Fixtures partagées pour tous les tests.
"""

import time
from pathlib import Path
from typing import Any, Callable, List

import pytest

from cloud_trace_reporter.logging import LogConfig, LogLevel, StructuredLogger
from cloud_trace_reporter.model import (
    ConvertedSpan,
    InternalSpan,
    SpanKind,
    SpanStatus,
    Timestamp,
    TraceBatch,
    TruncatableString,
)
from cloud_trace_reporter.reporter import ReporterConfig, build_config


# Backoff nul: les tests de retry ne doivent pas attendre
NO_BACKOFF = {"initial_delay": 0.0, "max_delay": 0.0, "multiplier": 1.0}


@pytest.fixture
def fixtures_path() -> Path:
    """Chemin vers le dossier fixtures."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def make_span() -> Callable[..., InternalSpan]:
    """Fabrique de spans internes avec des valeurs par défaut raisonnables."""

    def _make(
        name: str = "root_span",
        trace_id: Any = "4bf92f3577b34da6a3ce929d0e0e4736",
        span_id: Any = "00f067aa0ba902b7",
        **overrides: Any,
    ) -> InternalSpan:
        values = {
            "trace_id": trace_id,
            "span_id": span_id,
            "name": name,
            "start_time_unix_nano": 1_700_000_000_000_000_000,
            "end_time_unix_nano": 1_700_000_000_250_000_000,
            "kind": SpanKind.UNSPECIFIED,
            "status": SpanStatus(),
        }
        values.update(overrides)
        return InternalSpan(**values)

    return _make


@pytest.fixture
def config() -> ReporterConfig:
    """Configuration minimale (projet proj-1, converters par défaut)."""
    return build_config(project_id="proj-1")


@pytest.fixture
def log_lines() -> List[str]:
    """Lignes JSON émises par captured_logger."""
    return []


@pytest.fixture
def captured_logger(log_lines: List[str]) -> StructuredLogger:
    """Logger DEBUG dont la sortie est capturée au lieu d'aller sur stderr."""
    return StructuredLogger(
        "test",
        LogConfig(min_level=LogLevel.DEBUG, default_project_id="proj-1"),
        output_handler=log_lines.append,
    )


def wait_until(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Attend qu'un prédicat devienne vrai (état produit par un autre thread)."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture(name="wait_until")
def wait_until_fixture() -> Callable[..., bool]:
    return wait_until


@pytest.fixture
def no_backoff() -> dict:
    """Politique de backoff sans attente."""
    return dict(NO_BACKOFF)


@pytest.fixture
def make_batch() -> Callable[..., TraceBatch]:
    """Fabrique de TraceBatch de n spans déjà traduits."""

    def _make(trace_id: str = "t1", spans: int = 1) -> TraceBatch:
        return TraceBatch(
            trace_id=trace_id,
            spans=tuple(
                ConvertedSpan(
                    name=f"projects/proj-1/traces/{trace_id}/spans/{trace_id}-s{i}",
                    trace_id=trace_id,
                    span_id=f"{trace_id}-s{i}",
                    display_name=TruncatableString(f"op-{i}"),
                    start_time=Timestamp(seconds=1),
                    end_time=Timestamp(seconds=2),
                )
                for i in range(spans)
            ),
        )

    return _make
