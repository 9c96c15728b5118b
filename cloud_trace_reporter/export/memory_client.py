"""
Export - In-Memory Trace Client

Client Cloud Trace en mémoire (pour tests et démonstration).

Implémente ITraceClient en enregistrant chaque soumission; les résultats
peuvent être scriptés pour simuler des erreurs transitoires ou permanentes.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from ..model import TraceBatch
from .interfaces import ITraceClient, SubmissionOutcome


OutcomeScript = Union[
    Sequence[SubmissionOutcome],
    Callable[[TraceBatch], SubmissionOutcome],
]


@dataclass(frozen=True)
class SubmittedBatch:
    """Trace d'une soumission reçue par le client."""

    project_id: str
    batch: TraceBatch


class InMemoryTraceClient(ITraceClient):
    """
    Client en mémoire.

    Example:
        client = InMemoryTraceClient(outcomes=[SubmissionOutcome.transient()])
        # 1ère soumission: transitoire, suivantes: succès
    """

    def __init__(
        self,
        outcomes: Optional[OutcomeScript] = None,
        delay: float = 0.0,
        connect_error: Optional[Exception] = None,
    ) -> None:
        """
        Args:
            outcomes: Séquence de résultats successifs (puis succès) ou
                fonction batch -> résultat
            delay: Latence simulée par soumission (secondes)
            connect_error: Exception levée par connect()
        """
        self._script = outcomes
        self._script_index = 0
        self._delay = delay
        self._connect_error = connect_error
        self._attempts: List[SubmittedBatch] = []
        self._accepted: List[SubmittedBatch] = []
        self.connected = False
        self.closed = False

    async def connect(self) -> None:
        if self._connect_error is not None:
            raise self._connect_error
        self.connected = True

    async def submit_trace_batch(self, project_id: str, batch: TraceBatch) -> SubmissionOutcome:
        submission = SubmittedBatch(project_id=project_id, batch=batch)
        self._attempts.append(submission)
        if self._delay:
            await asyncio.sleep(self._delay)

        outcome = self._next_outcome(batch)
        if outcome.is_success:
            self._accepted.append(submission)
        return outcome

    async def close(self) -> None:
        self.closed = True

    def _next_outcome(self, batch: TraceBatch) -> SubmissionOutcome:
        if self._script is None:
            return SubmissionOutcome.success()
        if callable(self._script):
            return self._script(batch)
        if self._script_index < len(self._script):
            outcome = self._script[self._script_index]
            self._script_index += 1
            return outcome
        return SubmissionOutcome.success()

    @property
    def attempts(self) -> List[SubmittedBatch]:
        """Toutes les tentatives reçues, y compris en échec."""
        return list(self._attempts)

    @property
    def accepted(self) -> List[SubmittedBatch]:
        """Soumissions acceptées."""
        return list(self._accepted)

    @property
    def accepted_batches(self) -> List[TraceBatch]:
        return [submission.batch for submission in self._accepted]
