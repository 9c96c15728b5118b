"""
Export - Diagnostics

Compteurs d'export interrogeables par l'outillage d'observabilité:
spans exportés, spans abandonnés par cause, batches retentés.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class DropCause(Enum):
    """Cause d'abandon de spans."""

    OVERFLOW = "overflow"
    PERMANENT_FAILURE = "permanent_failure"
    RETRIES_EXHAUSTED = "retries_exhausted"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class DiagnosticsSnapshot:
    """Photographie immuable des compteurs."""

    spans_exported: int = 0
    spans_dropped: Dict[DropCause, int] = field(default_factory=dict)
    batches_succeeded: int = 0
    batches_failed: int = 0
    batches_retried: int = 0

    @property
    def spans_dropped_total(self) -> int:
        return sum(self.spans_dropped.values())

    def dropped(self, cause: DropCause) -> int:
        return self.spans_dropped.get(cause, 0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spans_exported": self.spans_exported,
            "spans_dropped": {cause.value: self.dropped(cause) for cause in DropCause},
            "spans_dropped_total": self.spans_dropped_total,
            "batches_succeeded": self.batches_succeeded,
            "batches_failed": self.batches_failed,
            "batches_retried": self.batches_retried,
        }


class ExportCounters:
    """
    Compteurs partagés entre threads appelants et workers.

    Chaque mise à jour est faite sous verrou: aucune incrémentation perdue.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._spans_exported = 0
        self._spans_dropped: Dict[DropCause, int] = {cause: 0 for cause in DropCause}
        self._batches_succeeded = 0
        self._batches_failed = 0
        self._batches_retried = 0

    def record_exported(self, span_count: int) -> None:
        """Batch livré avec succès."""
        with self._lock:
            self._spans_exported += span_count
            self._batches_succeeded += 1

    def record_dropped(self, cause: DropCause, span_count: int) -> None:
        """Spans abandonnés; les échecs de soumission comptent aussi un batch en échec."""
        with self._lock:
            self._spans_dropped[cause] += span_count
            if cause in (DropCause.PERMANENT_FAILURE, DropCause.RETRIES_EXHAUSTED):
                self._batches_failed += 1

    def record_retry(self) -> None:
        with self._lock:
            self._batches_retried += 1

    def snapshot(self) -> DiagnosticsSnapshot:
        with self._lock:
            return DiagnosticsSnapshot(
                spans_exported=self._spans_exported,
                spans_dropped=dict(self._spans_dropped),
                batches_succeeded=self._batches_succeeded,
                batches_failed=self._batches_failed,
                batches_retried=self._batches_retried,
            )
