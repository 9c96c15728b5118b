"""
Export

Soumission asynchrone des batches au backend Cloud Trace:
- Regroupement des spans par trace
- File bornée avec éviction des plus anciens
- Pool de workers avec retry et backoff exponentiel
- Compteurs de diagnostics (exportés, abandonnés par cause)
- Client Cloud Trace v2 (google-cloud-trace) et client en mémoire
"""

from .interfaces import (
    # Constants
    TRANSIENT_GRPC_CODES,
    TRANSIENT_HTTP_CODES,
    # Enums
    OutcomeKind,
    BatchState,
    # Dataclasses
    SubmissionOutcome,
    RetryPolicy,
    RetryResult,
    # Interfaces
    ITraceClient,
    IRetryHandler,
)
from .retry_handler import RetryHandler, TRANSIENT_EXCEPTIONS
from .batch_grouper import BatchGrouper
from .batch_queue import BoundedBatchQueue, EnqueueResult
from .diagnostics import DropCause, DiagnosticsSnapshot, ExportCounters
from .memory_client import InMemoryTraceClient, SubmittedBatch
from .cloud_client import CloudTraceClient, build_batch_write_request, outcome_from_api_error
from .pipeline import SubmissionPipeline, THREAD_NAME

__all__ = [
    # Constants
    "TRANSIENT_GRPC_CODES",
    "TRANSIENT_HTTP_CODES",
    "TRANSIENT_EXCEPTIONS",
    "THREAD_NAME",
    # Enums
    "OutcomeKind",
    "BatchState",
    "DropCause",
    # Dataclasses
    "SubmissionOutcome",
    "RetryPolicy",
    "RetryResult",
    "EnqueueResult",
    "DiagnosticsSnapshot",
    "SubmittedBatch",
    # Interfaces
    "ITraceClient",
    "IRetryHandler",
    # Implementations
    "RetryHandler",
    "BatchGrouper",
    "BoundedBatchQueue",
    "ExportCounters",
    "InMemoryTraceClient",
    "CloudTraceClient",
    "SubmissionPipeline",
    # Functions
    "build_batch_write_request",
    "outcome_from_api_error",
]
