"""
Export - Submission Pipeline

Envoi asynchrone des batches au backend, sans bloquer l'application.

Architecture:
    - Thread dédié "cloud-trace-reporter" propriétaire de sa boucle asyncio
    - Pool fixe de max_in_flight_batches workers
    - File bornée en spans (BoundedBatchQueue), éviction des plus anciens
    - Retry avec backoff exponentiel (RetryHandler)

Cycle de vie d'un batch:
    QUEUED -> SENDING -> {SUCCEEDED, RETRYING, FAILED}
    RETRYING -> SENDING après backoff
    DROPPED: débordement ou arrêt

Invariants:
    - enqueue() ne bloque jamais et ne lève jamais vers l'appelant
    - Un batch n'est envoyé que par un seul worker
    - Tout span accepté finit exporté ou compté dans une cause d'abandon
"""

import asyncio
import concurrent.futures
import threading
import time
from typing import Any, Coroutine, Dict, List, Optional, Sequence

from ..logging import IStructuredLogger, StructuredLogger
from ..model import TraceBatch
from .batch_queue import BoundedBatchQueue
from .diagnostics import DropCause, ExportCounters
from .interfaces import (
    BatchState,
    IRetryHandler,
    ITraceClient,
    OutcomeKind,
    RetryPolicy,
    RetryResult,
    SubmissionOutcome,
)
from .retry_handler import RetryHandler


THREAD_NAME = "cloud-trace-reporter"


class SubmissionPipeline:
    """
    Pipeline de soumission: file bornée + pool de workers asyncio.

    Example:
        pipeline = SubmissionPipeline(client, "my-project")
        pipeline.start()
        pipeline.enqueue(batches)
        pipeline.flush(timeout=5.0)
        pipeline.shutdown()
    """

    def __init__(
        self,
        client: ITraceClient,
        project_id: str,
        max_in_flight_batches: int = 4,
        max_queued_spans: int = 2048,
        retry_policy: Optional[RetryPolicy] = None,
        shutdown_timeout: float = 10.0,
        logger: Optional[IStructuredLogger] = None,
        counters: Optional[ExportCounters] = None,
        retry_handler: Optional[IRetryHandler] = None,
    ) -> None:
        """
        Args:
            client: Client Cloud Trace (déjà authentifié)
            project_id: Projet cible
            max_in_flight_batches: Nombre de workers (envois simultanés)
            max_queued_spans: Capacité de la file en spans
            retry_policy: Politique de retry (défaut: RetryPolicy())
            shutdown_timeout: Délai de vidage par défaut à l'arrêt (secondes)
            logger: Logger de diagnostics
            counters: Compteurs partagés (défaut: nouveaux compteurs)
            retry_handler: Gestionnaire de retry (défaut: RetryHandler)

        Raises:
            ValueError: Si un paramètre de dimensionnement est invalide
        """
        if max_in_flight_batches < 1:
            raise ValueError("max_in_flight_batches must be >= 1")
        if shutdown_timeout < 0:
            raise ValueError("shutdown_timeout must be >= 0")

        self._client = client
        self._project_id = project_id
        self._max_in_flight = max_in_flight_batches
        self._retry_policy = retry_policy or RetryPolicy()
        self._shutdown_timeout = shutdown_timeout
        self._logger = logger or StructuredLogger("cloud_trace_reporter.pipeline")
        self._counters = counters or ExportCounters()
        self._retry_handler = retry_handler or RetryHandler(self._retry_policy)
        self._queue = BoundedBatchQueue(max_queued_spans)

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._wakeup: Optional[asyncio.Event] = None
        self._workers: List["asyncio.Task[None]"] = []

        # Batches en cours d'envoi, par worker; protégé par _idle
        self._in_flight: Dict[int, TraceBatch] = {}
        self._idle = threading.Condition()

        self._lifecycle_lock = threading.Lock()
        self._stopped = False
        self._drained = True

    @property
    def counters(self) -> ExportCounters:
        return self._counters

    @property
    def queue(self) -> BoundedBatchQueue:
        return self._queue

    @property
    def is_running(self) -> bool:
        return self._loop is not None and not self._stopped

    @property
    def in_flight_count(self) -> int:
        with self._idle:
            return len(self._in_flight)

    # ------------------------------------------------------------------
    # Cycle de vie
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Démarre le thread de soumission et les workers.

        Raises:
            RuntimeError: Si déjà démarré ou arrêté
        """
        with self._lifecycle_lock:
            if self._loop is not None or self._stopped:
                raise RuntimeError("Submission pipeline already started")
            self._loop = asyncio.new_event_loop()

        ready = threading.Event()
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(ready,),
            name=THREAD_NAME,
            daemon=True,
        )
        self._thread.start()
        ready.wait()

        self.run_coroutine(self._start_workers()).result()
        self._logger.debug(
            "Submission pipeline started",
            workers=self._max_in_flight,
            max_queued_spans=self._queue.max_spans,
        )

    def _run_loop(self, ready: threading.Event) -> None:
        loop = self._loop
        assert loop is not None
        asyncio.set_event_loop(loop)
        loop.call_soon(ready.set)
        try:
            loop.run_forever()
        finally:
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.close()

    async def _start_workers(self) -> None:
        self._wakeup = asyncio.Event()
        loop = asyncio.get_running_loop()
        self._workers = [
            loop.create_task(self._worker(index)) for index in range(self._max_in_flight)
        ]

    def run_coroutine(self, coro: Coroutine[Any, Any, Any]) -> "concurrent.futures.Future[Any]":
        """
        Planifie une coroutine sur la boucle du pipeline.

        Returns:
            Future thread-safe du résultat

        Raises:
            RuntimeError: Si le pipeline n'est pas démarré
        """
        if self._loop is None or self._loop.is_closed():
            coro.close()
            raise RuntimeError("Submission pipeline is not running")
        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    # ------------------------------------------------------------------
    # Mise en file
    # ------------------------------------------------------------------

    def enqueue(self, batches: Sequence[TraceBatch]) -> int:
        """
        Met des batches en file. Ne bloque pas, ne lève pas.

        Les batches refusés (débordement ou arrêt) sont comptés comme abandonnés.

        Args:
            batches: Batches à envoyer

        Returns:
            Nombre de batches acceptés
        """
        accepted = 0
        for batch in batches:
            result = self._queue.put(batch)

            if result.closed:
                self._counters.record_dropped(DropCause.SHUTDOWN, batch.span_count)
                self._logger.warn(
                    "Batch dropped: reporter is shut down",
                    trace_id=batch.trace_id,
                    spans=batch.span_count,
                    state=BatchState.DROPPED.value,
                    cause=DropCause.SHUTDOWN.value,
                )
                continue

            if result.evicted:
                self._counters.record_dropped(DropCause.OVERFLOW, result.evicted_spans)
                self._logger.warn(
                    "Queue full: oldest batches evicted",
                    evicted_batches=len(result.evicted),
                    evicted_spans=result.evicted_spans,
                    state=BatchState.DROPPED.value,
                    cause=DropCause.OVERFLOW.value,
                )

            if not result.accepted:
                self._counters.record_dropped(DropCause.OVERFLOW, batch.span_count)
                self._logger.warn(
                    "Batch dropped: larger than queue capacity",
                    trace_id=batch.trace_id,
                    spans=batch.span_count,
                    max_queued_spans=self._queue.max_spans,
                    state=BatchState.DROPPED.value,
                    cause=DropCause.OVERFLOW.value,
                )
                continue

            accepted += 1

        if accepted:
            self._notify_workers()
        return accepted

    def _notify_workers(self) -> None:
        loop = self._loop
        wakeup = self._wakeup
        if loop is None or wakeup is None:
            return
        try:
            loop.call_soon_threadsafe(wakeup.set)
        except RuntimeError:
            # Boucle déjà fermée: shutdown() a compté les restes
            pass

    # ------------------------------------------------------------------
    # Workers
    # ------------------------------------------------------------------

    async def _worker(self, index: int) -> None:
        wakeup = self._wakeup
        assert wakeup is not None

        while True:
            wakeup.clear()
            batch = self._take(index)
            if batch is None:
                if self._queue.closed:
                    return
                await wakeup.wait()
                continue

            # Réveille un autre worker si du travail reste en file
            if len(self._queue):
                wakeup.set()

            await self._submit(index, batch)

    def _take(self, index: int) -> Optional[TraceBatch]:
        with self._idle:
            batch = self._queue.pop()
            if batch is not None:
                self._in_flight[index] = batch
            return batch

    def _finish(self, index: int) -> None:
        with self._idle:
            self._in_flight.pop(index, None)
            self._idle.notify_all()

    async def _submit(self, index: int, batch: TraceBatch) -> None:
        def on_retry(attempt: int, outcome: SubmissionOutcome, delay: float) -> None:
            if attempt == 1:
                self._counters.record_retry()
            self._logger.warn(
                "Batch submission failed, retrying",
                trace_id=batch.trace_id,
                spans=batch.span_count,
                attempt=attempt,
                delay=round(delay, 3),
                details=outcome.details,
                status_code=outcome.status_code,
                state=BatchState.RETRYING.value,
            )

        self._logger.debug(
            "Sending batch",
            trace_id=batch.trace_id,
            spans=batch.span_count,
            state=BatchState.SENDING.value,
        )

        try:
            result = await self._retry_handler.execute_with_retry(
                lambda: self._client.submit_trace_batch(self._project_id, batch),
                self._retry_policy,
                on_retry,
            )
            self._record_result(batch, result)
        except asyncio.CancelledError:
            self._counters.record_dropped(DropCause.SHUTDOWN, batch.span_count)
            self._logger.warn(
                "Batch dropped: shutdown deadline reached while sending",
                trace_id=batch.trace_id,
                spans=batch.span_count,
                state=BatchState.DROPPED.value,
                cause=DropCause.SHUTDOWN.value,
            )
            raise
        except Exception as e:
            self._counters.record_dropped(DropCause.PERMANENT_FAILURE, batch.span_count)
            self._logger.error(
                "Batch submission crashed",
                trace_id=batch.trace_id,
                spans=batch.span_count,
                error=f"{type(e).__name__}: {e}",
                state=BatchState.FAILED.value,
                cause=DropCause.PERMANENT_FAILURE.value,
            )
        finally:
            self._finish(index)

    def _record_result(self, batch: TraceBatch, result: RetryResult) -> None:
        outcome = result.outcome
        if outcome.is_success:
            self._counters.record_exported(batch.span_count)
            self._logger.debug(
                "Batch exported",
                trace_id=batch.trace_id,
                spans=batch.span_count,
                attempts=result.attempts,
                state=BatchState.SUCCEEDED.value,
            )
            return

        if outcome.kind is OutcomeKind.TRANSIENT:
            cause = DropCause.RETRIES_EXHAUSTED
            message = "Batch dropped: retries exhausted"
        else:
            cause = DropCause.PERMANENT_FAILURE
            message = "Batch dropped: permanent submission failure"

        self._counters.record_dropped(cause, batch.span_count)
        self._logger.error(
            message,
            trace_id=batch.trace_id,
            spans=batch.span_count,
            attempts=result.attempts,
            details=outcome.details,
            status_code=outcome.status_code,
            state=BatchState.FAILED.value,
            cause=cause.value,
        )

    # ------------------------------------------------------------------
    # Flush / arrêt
    # ------------------------------------------------------------------

    def _is_idle(self) -> bool:
        return len(self._queue) == 0 and not self._in_flight

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Attend que la file soit vide et qu'aucun envoi ne soit en cours.

        Ne ferme pas le pipeline.

        Args:
            timeout: Délai maximal en secondes (None: sans limite)

        Returns:
            True si le pipeline est inactif avant le délai

        Raises:
            RuntimeError: Si appelé depuis le thread de soumission
        """
        if self._loop is None:
            return len(self._queue) == 0
        if threading.current_thread() is self._thread:
            raise RuntimeError("flush() cannot be called from the submission thread")

        with self._idle:
            return self._idle.wait_for(self._is_idle, timeout)

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Arrêt gracieux.

        Processus:
            1. Ferme la file (les reports suivants sont comptés "shutdown")
            2. Vide la file et les envois en cours jusqu'au délai
            3. Annule les workers restants, compte les restes "shutdown"
            4. Ferme le client dans le reste du délai et arrête le thread

        Idempotent: les appels suivants retournent le résultat du premier.

        Args:
            timeout: Délai global, vidage et fermeture du client (défaut: shutdown_timeout)

        Returns:
            True si tout a été vidé avant le délai
        """
        if threading.current_thread() is self._thread:
            raise RuntimeError("shutdown() cannot be called from the submission thread")

        with self._lifecycle_lock:
            if self._stopped:
                return self._drained
            self._stopped = True

        deadline = self._shutdown_timeout if timeout is None else max(0.0, timeout)
        started_at = time.monotonic()
        self._queue.close()

        if self._loop is None:
            leftovers = self._queue.drain()
            self._drop_leftovers(leftovers)
            self._drained = not leftovers
            return self._drained

        self._notify_workers()
        drained = self.flush(deadline)

        remaining = max(0.0, deadline - (time.monotonic() - started_at))
        self.run_coroutine(self._stop_workers(remaining)).result()
        self._loop.call_soon_threadsafe(self._loop.stop)
        if self._thread is not None:
            self._thread.join()

        self._drained = drained
        snapshot = self._counters.snapshot()
        self._logger.info(
            "Submission pipeline stopped",
            drained=drained,
            elapsed=round(time.monotonic() - started_at, 3),
            spans_exported=snapshot.spans_exported,
            spans_dropped=snapshot.spans_dropped_total,
        )
        return drained

    async def _stop_workers(self, close_timeout: float) -> None:
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        self._drop_leftovers(self._queue.drain())

        # close() démarre même si le délai est épuisé; il n'est attendu que
        # pendant le reste du délai d'arrêt
        closing = asyncio.ensure_future(self._client.close())
        done, _ = await asyncio.wait({closing}, timeout=close_timeout)
        if not done:
            closing.cancel()
            await asyncio.gather(closing, return_exceptions=True)
            self._logger.error(
                "Trace client close failed",
                error=f"close timed out after {close_timeout:.3f}s",
            )
            return

        error = closing.exception()
        if error is not None:
            self._logger.error(
                "Trace client close failed",
                error=f"{type(error).__name__}: {error}",
            )

    def _drop_leftovers(self, batches: List[TraceBatch]) -> None:
        if not batches:
            return
        spans = sum(batch.span_count for batch in batches)
        self._counters.record_dropped(DropCause.SHUTDOWN, spans)
        self._logger.warn(
            "Queued batches dropped at shutdown",
            batches=len(batches),
            spans=spans,
            state=BatchState.DROPPED.value,
            cause=DropCause.SHUTDOWN.value,
        )
        with self._idle:
            self._idle.notify_all()
