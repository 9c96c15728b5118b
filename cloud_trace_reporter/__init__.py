"""
Cloud Trace Reporter

Export des spans terminés vers Google Cloud Trace (modèle v2):
traduction, regroupement par trace et soumission asynchrone avec retry
et backpressure, sans bloquer l'application instrumentée.

Example:
    reporter = await create_reporter(client, project_id="my-project")
    reporter.report(spans)
    reporter.shutdown()
"""

from .export import (
    DiagnosticsSnapshot,
    DropCause,
    CloudTraceClient,
    InMemoryTraceClient,
    ITraceClient,
    SubmissionOutcome,
)
from .model import (
    InternalSpan,
    SpanEvent,
    SpanKind,
    SpanStatus,
    StackFrame,
    StatusCode,
    TraceBatch,
)
from .reporter import (
    BackoffPolicy,
    ConfigurationError,
    ConnectivityError,
    ReporterConfig,
    ReporterConfigLoader,
    ReporterError,
    TraceReporter,
    build_config,
    build_reporter,
    create_reporter,
)

__version__ = "0.1.0"

__all__ = [
    # Reporter
    "TraceReporter",
    "ReporterConfig",
    "BackoffPolicy",
    "ReporterConfigLoader",
    "build_config",
    "build_reporter",
    "create_reporter",
    # Spans
    "InternalSpan",
    "SpanEvent",
    "SpanKind",
    "SpanStatus",
    "StackFrame",
    "StatusCode",
    "TraceBatch",
    # Export
    "ITraceClient",
    "CloudTraceClient",
    "InMemoryTraceClient",
    "SubmissionOutcome",
    "DiagnosticsSnapshot",
    "DropCause",
    # Exceptions
    "ReporterError",
    "ConfigurationError",
    "ConnectivityError",
]
