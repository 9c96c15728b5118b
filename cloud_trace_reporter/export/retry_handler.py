"""
Export - Retry Handler

Gestion des retries avec backoff exponentiel pour la soumission des batches.

Chaque tentative est bornée par un timeout; un dépassement est traité comme
une erreur transitoire. Les exceptions réseau levées par le client sont
transitoires, toute autre exception est permanente.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from .interfaces import (
    IRetryHandler,
    OutcomeKind,
    RetryPolicy,
    RetryResult,
    SubmissionOutcome,
)


TRANSIENT_EXCEPTIONS = (ConnectionError, TimeoutError, OSError)


class RetryHandler(IRetryHandler):
    """Gestion retries avec backoff exponentiel."""

    def __init__(self, default_policy: Optional[RetryPolicy] = None) -> None:
        """
        Initialise le gestionnaire de retries.

        Args:
            default_policy: Politique par défaut (optionnel)
        """
        self._default_policy = default_policy or RetryPolicy()

    @property
    def default_policy(self) -> RetryPolicy:
        return self._default_policy

    async def execute_with_retry(
        self,
        operation: Callable[[], Awaitable[SubmissionOutcome]],
        policy: Optional[RetryPolicy] = None,
        on_retry: Optional[Callable[[int, SubmissionOutcome, float], Any]] = None,
    ) -> RetryResult:
        """
        Exécute operation avec max_attempts tentatives et backoff exponentiel.

        Backoff (défauts): 0.2s, 0.4s, 0.8s ... plafonné à max_delay

        Args:
            operation: Fabrique de coroutine, appelée une fois par tentative
            policy: Politique de retry optionnelle
            on_retry: Appelé avant chaque attente (tentative, résultat, délai)

        Returns:
            RetryResult avec dernier résultat, tentatives et délai cumulé
        """
        retry_policy = policy or self._default_policy
        max_attempts = max(1, retry_policy.max_attempts)
        outcome = SubmissionOutcome.permanent("no attempt made")
        total_delay = 0.0

        for attempt in range(max_attempts):
            outcome = await self._attempt(operation, retry_policy)

            if not self.is_retryable(outcome):
                return RetryResult(outcome=outcome, attempts=attempt + 1, total_delay=total_delay)

            if attempt < max_attempts - 1:
                delay = self.calculate_delay(attempt, retry_policy)
                total_delay += delay
                if on_retry is not None:
                    on_retry(attempt + 1, outcome, delay)
                await asyncio.sleep(delay)

        return RetryResult(outcome=outcome, attempts=max_attempts, total_delay=total_delay)

    async def _attempt(
        self,
        operation: Callable[[], Awaitable[SubmissionOutcome]],
        policy: RetryPolicy,
    ) -> SubmissionOutcome:
        """Exécute une tentative et classe son résultat."""
        try:
            if policy.attempt_timeout is not None:
                outcome = await asyncio.wait_for(operation(), timeout=policy.attempt_timeout)
            else:
                outcome = await operation()
        except asyncio.TimeoutError:
            return SubmissionOutcome.transient(
                f"attempt timed out after {policy.attempt_timeout}s"
            )
        except TRANSIENT_EXCEPTIONS as e:
            return SubmissionOutcome.transient(f"{type(e).__name__}: {e}")
        except Exception as e:
            return SubmissionOutcome.permanent(f"{type(e).__name__}: {e}")

        if not isinstance(outcome, SubmissionOutcome):
            return SubmissionOutcome.permanent(
                f"client returned {type(outcome).__name__} instead of SubmissionOutcome"
            )
        return outcome

    def calculate_delay(self, attempt: int, policy: RetryPolicy) -> float:
        """
        Calcule délai backoff exponentiel.

        Formula: min(initial * (multiplier ^ attempt), max_delay)

        Args:
            attempt: Numéro de tentative (0-indexed)
            policy: Politique de retry

        Returns:
            Délai en secondes
        """
        delay = policy.initial_delay
        # Croissance arrêtée au plafond: pas de dépassement flottant
        for _ in range(attempt):
            if delay >= policy.max_delay:
                break
            delay *= policy.multiplier
        return min(delay, policy.max_delay)

    def is_retryable(self, outcome: SubmissionOutcome) -> bool:
        return outcome.kind is OutcomeKind.TRANSIENT
