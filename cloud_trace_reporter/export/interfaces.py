"""
Export - Interfaces

Contrats de la soumission des batches au backend:
- Client distant asynchrone (transport et authentification externes)
- Classification des résultats: succès, erreur transitoire, erreur permanente
- Politique de retry avec backoff exponentiel

Invariants:
    - Une erreur transitoire est retentée, jamais une erreur permanente
    - Le nombre total de tentatives est borné par max_attempts
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from ..model import TraceBatch


# Codes gRPC pour lesquels un nouvel essai peut réussir
TRANSIENT_GRPC_CODES = frozenset(
    {
        4,  # DEADLINE_EXCEEDED
        8,  # RESOURCE_EXHAUSTED
        10,  # ABORTED
        14,  # UNAVAILABLE
    }
)

# Codes HTTP équivalents
TRANSIENT_HTTP_CODES = frozenset({429, 500, 502, 503, 504})


class OutcomeKind(Enum):
    """Classification du résultat d'une soumission."""

    SUCCESS = "success"
    TRANSIENT = "transient"
    PERMANENT = "permanent"


class BatchState(Enum):
    """
    Cycle de vie d'un batch dans le pipeline.

    QUEUED -> SENDING -> {SUCCEEDED, RETRYING, FAILED}
    RETRYING -> SENDING (après backoff)
    DROPPED: évincé (débordement ou arrêt) avant envoi
    """

    QUEUED = "queued"
    SENDING = "sending"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    DROPPED = "dropped"


@dataclass(frozen=True)
class SubmissionOutcome:
    """Résultat d'une tentative de soumission d'un batch."""

    kind: OutcomeKind
    details: str = ""
    status_code: Optional[int] = None

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def is_transient(self) -> bool:
        return self.kind is OutcomeKind.TRANSIENT

    @classmethod
    def success(cls) -> "SubmissionOutcome":
        return cls(kind=OutcomeKind.SUCCESS)

    @classmethod
    def transient(cls, details: str = "", status_code: Optional[int] = None) -> "SubmissionOutcome":
        return cls(kind=OutcomeKind.TRANSIENT, details=details, status_code=status_code)

    @classmethod
    def permanent(cls, details: str = "", status_code: Optional[int] = None) -> "SubmissionOutcome":
        return cls(kind=OutcomeKind.PERMANENT, details=details, status_code=status_code)

    @classmethod
    def from_status_code(cls, status_code: int, details: str = "") -> "SubmissionOutcome":
        """
        Classe un code de statut renvoyé par le transport.

        Les codes < 100 sont interprétés comme des codes gRPC, les autres
        comme des codes HTTP.

        Args:
            status_code: Code gRPC ou HTTP
            details: Message d'erreur éventuel

        Returns:
            SubmissionOutcome classifié
        """
        if status_code < 100:
            if status_code == 0:
                return cls.success()
            transient = status_code in TRANSIENT_GRPC_CODES
        else:
            if 200 <= status_code < 300:
                return cls.success()
            transient = status_code in TRANSIENT_HTTP_CODES

        kind = OutcomeKind.TRANSIENT if transient else OutcomeKind.PERMANENT
        return cls(kind=kind, details=details, status_code=status_code)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Politique de retry d'une soumission.

    Backoff: delay = min(initial_delay * (multiplier ^ attempt), max_delay)
    """

    max_attempts: int = 3
    initial_delay: float = 0.2
    max_delay: float = 30.0
    multiplier: float = 2.0
    attempt_timeout: Optional[float] = 30.0


@dataclass(frozen=True)
class RetryResult:
    """Résultat final d'une soumission avec retry."""

    outcome: SubmissionOutcome
    attempts: int
    total_delay: float

    @property
    def success(self) -> bool:
        return self.outcome.is_success


class ITraceClient(ABC):
    """
    Interface client Cloud Trace.

    Le client est déjà authentifié; connect() permet une vérification
    anticipée de la connectivité à la construction du reporter.
    """

    async def connect(self) -> None:
        """
        Établit ou vérifie la connexion au backend.

        Raises:
            Exception: Toute erreur empêchant la connexion
        """
        return None

    @abstractmethod
    async def submit_trace_batch(self, project_id: str, batch: TraceBatch) -> SubmissionOutcome:
        """
        Soumet les spans d'une trace.

        Args:
            project_id: Projet Cloud Trace
            batch: Spans d'une même trace, ordre préservé

        Returns:
            SubmissionOutcome classifié (succès, transitoire, permanent)
        """
        pass

    async def close(self) -> None:
        """Libère les ressources du client."""
        return None


class IRetryHandler(ABC):
    """Interface gestion retries."""

    @abstractmethod
    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[SubmissionOutcome]],
        policy: Optional[RetryPolicy] = None,
        on_retry: Optional[Callable[[int, SubmissionOutcome, float], Any]] = None,
    ) -> RetryResult:
        """
        Exécute une soumission avec retry et backoff exponentiel.

        Args:
            operation: Fabrique de la coroutine de soumission (une par tentative)
            policy: Politique de retry optionnelle
            on_retry: Appelé avant chaque attente (tentative, résultat, délai)

        Returns:
            RetryResult avec dernier résultat et nombre de tentatives
        """
        pass

    @abstractmethod
    def calculate_delay(self, attempt: int, policy: RetryPolicy) -> float:
        """
        Calcule délai backoff exponentiel.

        Args:
            attempt: Numéro de tentative (0-indexed)
            policy: Politique de retry

        Returns:
            Délai en secondes
        """
        pass

    @abstractmethod
    def is_retryable(self, outcome: SubmissionOutcome) -> bool:
        """
        Vérifie si un résultat justifie un nouvel essai.

        Args:
            outcome: Résultat d'une tentative

        Returns:
            True si erreur transitoire
        """
        pass
