"""
Reporter - Trace Reporter

Point d'entrée appelé par la bibliothèque d'instrumentation à chaque flush:
traduit les spans, les groupe par trace et les met en file pour envoi.

report() est thread-safe et ne bloque jamais: l'envoi se fait sur le
thread de soumission. Aucune erreur du chemin d'export ne remonte à
l'application instrumentée.
"""

from typing import Iterable, List, Optional

from ..conversion import SpanTranslator
from ..export import BatchGrouper, DiagnosticsSnapshot, SubmissionPipeline
from ..logging import IStructuredLogger, StructuredLogger
from ..model import ConvertedSpan, InternalSpan
from .config import ReporterConfig


class TraceReporter:
    """
    Reporter Cloud Trace.

    Construit par build_reporter() / create_reporter(), puis passé
    explicitement à l'API d'enregistrement de l'instrumentation.
    """

    def __init__(
        self,
        config: ReporterConfig,
        pipeline: SubmissionPipeline,
        translator: Optional[SpanTranslator] = None,
        grouper: Optional[BatchGrouper] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        self._config = config
        self._pipeline = pipeline
        self._logger = logger or StructuredLogger("cloud_trace_reporter")
        self._translator = translator or SpanTranslator(self._logger)
        self._grouper = grouper or BatchGrouper()

    @property
    def config(self) -> ReporterConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._pipeline.is_running

    def report(self, spans: Iterable[InternalSpan]) -> None:
        """
        Exporte les spans d'un flush.

        Traduit, groupe par trace puis met en file; retourne sans attendre
        l'envoi. Ne lève jamais.

        Args:
            spans: Spans terminés remis par l'instrumentation
        """
        converted: List[ConvertedSpan] = []
        for span in spans:
            try:
                converted.append(self._translator.translate(span, self._config))
            except Exception as e:
                self._logger.error(
                    "Span skipped: translation failed",
                    span=repr(span)[:256],
                    error=f"{type(e).__name__}: {e}",
                )

        if not converted:
            return

        batches = self._grouper.group(converted)
        self._pipeline.enqueue(batches)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Attend l'envoi de tout ce qui a été reporté, sans arrêter le reporter.

        Args:
            timeout: Délai maximal en secondes (None: sans limite)

        Returns:
            True si tout est envoyé (ou abandonné) avant le délai
        """
        return self._pipeline.flush(timeout)

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Arrêt gracieux: vide la file jusqu'au délai puis ferme le client.

        Les spans reportés ensuite sont comptés comme abandonnés ("shutdown").

        Args:
            timeout: Délai de vidage (défaut: config.shutdown_timeout)

        Returns:
            True si tout a été vidé avant le délai
        """
        return self._pipeline.shutdown(timeout)

    def diagnostics(self) -> DiagnosticsSnapshot:
        """Compteurs d'export courants."""
        return self._pipeline.counters.snapshot()
