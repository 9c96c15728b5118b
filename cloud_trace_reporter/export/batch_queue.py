"""
Export - Bounded Batch Queue

File d'attente des batches prêts à être envoyés, bornée en nombre de spans.

Politique de débordement:
    Les batches les plus anciens, pas encore en cours d'envoi, sont évincés
    en premier jusqu'à libérer la place nécessaire. Un batch plus gros que la
    capacité totale est refusé sans rien évincer.

Invariants:
    - Jamais plus de max_spans spans résidents
    - Un batch n'est retiré qu'une seule fois (pas de double envoi)
    - Vérification de capacité atomique avec l'ajout
"""

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from ..model import TraceBatch


@dataclass
class EnqueueResult:
    """Résultat d'un ajout dans la file."""

    accepted: bool
    evicted: List[TraceBatch] = field(default_factory=list)
    closed: bool = False

    @property
    def evicted_spans(self) -> int:
        return sum(batch.span_count for batch in self.evicted)


class BoundedBatchQueue:
    """
    File FIFO bornée, partagée entre les threads appelants et les workers.

    Toutes les opérations prennent le même verrou.
    """

    def __init__(self, max_spans: int) -> None:
        """
        Args:
            max_spans: Capacité en nombre de spans

        Raises:
            ValueError: Si max_spans < 1
        """
        if max_spans < 1:
            raise ValueError("max_spans must be >= 1")
        self._max_spans = max_spans
        self._batches: Deque[TraceBatch] = deque()
        self._span_count = 0
        self._closed = False
        self._lock = threading.Lock()

    @property
    def max_spans(self) -> int:
        return self._max_spans

    @property
    def span_count(self) -> int:
        with self._lock:
            return self._span_count

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def __len__(self) -> int:
        with self._lock:
            return len(self._batches)

    def put(self, batch: TraceBatch) -> EnqueueResult:
        """
        Ajoute un batch, en évinçant les plus anciens si nécessaire.

        Args:
            batch: Batch à ajouter

        Returns:
            EnqueueResult (accepté ou non, batches évincés)
        """
        with self._lock:
            if self._closed:
                return EnqueueResult(accepted=False, closed=True)

            if batch.span_count > self._max_spans:
                return EnqueueResult(accepted=False)

            evicted: List[TraceBatch] = []
            while self._span_count + batch.span_count > self._max_spans:
                oldest = self._batches.popleft()
                self._span_count -= oldest.span_count
                evicted.append(oldest)

            self._batches.append(batch)
            self._span_count += batch.span_count
            return EnqueueResult(accepted=True, evicted=evicted)

    def pop(self) -> Optional[TraceBatch]:
        """
        Retire le batch le plus ancien.

        Returns:
            TraceBatch ou None si la file est vide
        """
        with self._lock:
            if not self._batches:
                return None
            batch = self._batches.popleft()
            self._span_count -= batch.span_count
            return batch

    def drain(self) -> List[TraceBatch]:
        """Retire et retourne tous les batches en attente."""
        with self._lock:
            batches = list(self._batches)
            self._batches.clear()
            self._span_count = 0
            return batches

    def close(self) -> None:
        """Refuse tout nouvel ajout; les batches présents restent à retirer."""
        with self._lock:
            self._closed = True
