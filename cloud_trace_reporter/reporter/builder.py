"""
Reporter - Builder

Assemble la configuration, le traducteur, le groupeur et le pipeline, puis
vérifie la connectivité du client avant de rendre le reporter.
"""

import asyncio
from typing import Any, Optional

from ..conversion import SpanTranslator
from ..export import (
    BatchGrouper,
    CloudTraceClient,
    ExportCounters,
    ITraceClient,
    SubmissionPipeline,
)
from ..logging import IStructuredLogger, LogConfig, StructuredLogger
from .config import ReporterConfig, ReporterError, build_config
from .reporter import TraceReporter


class ConnectivityError(ReporterError):
    """Connexion initiale au backend impossible."""

    def __init__(self, project_id: str, reason: str) -> None:
        self.project_id = project_id
        self.reason = reason
        super().__init__(f"Cannot connect to Cloud Trace for project {project_id}: {reason}")


def _default_logger(config: ReporterConfig) -> StructuredLogger:
    return StructuredLogger(
        "cloud_trace_reporter",
        LogConfig(min_level=config.log_level, default_project_id=config.project_id),
    )


async def build_reporter(
    config: ReporterConfig,
    client: Optional[ITraceClient] = None,
    logger: Optional[IStructuredLogger] = None,
) -> TraceReporter:
    """
    Construit un reporter à partir d'une configuration validée.

    Processus:
        1. Démarre le pipeline de soumission (thread dédié)
        2. Connecte le client sur la boucle du pipeline
        3. En cas d'échec, arrête le pipeline et lève ConnectivityError

    Args:
        config: Configuration validée (build_config)
        client: Client Cloud Trace (défaut: CloudTraceClient, identifiants ADC)
        logger: Logger de diagnostics (défaut: StructuredLogger au niveau config.log_level)

    Returns:
        TraceReporter prêt à recevoir des spans

    Raises:
        ConnectivityError: Si la connexion initiale échoue
    """
    log = logger or _default_logger(config)
    if client is None:
        client = CloudTraceClient()

    pipeline = SubmissionPipeline(
        client,
        config.project_id,
        max_in_flight_batches=config.max_in_flight_batches,
        max_queued_spans=config.max_queued_spans,
        retry_policy=config.retry_policy,
        shutdown_timeout=config.shutdown_timeout,
        logger=log,
        counters=ExportCounters(),
    )
    pipeline.start()

    try:
        await asyncio.wrap_future(
            pipeline.run_coroutine(asyncio.wait_for(client.connect(), config.attempt_timeout))
        )
    except Exception as e:
        reason = f"{type(e).__name__}: {e}"
        log.error("Trace client connection failed", reason=reason)
        await asyncio.get_running_loop().run_in_executor(None, pipeline.shutdown, 0.0)
        raise ConnectivityError(config.project_id, reason) from e

    log.info(
        "Cloud Trace reporter started",
        service_name=config.service_name,
        max_in_flight_batches=config.max_in_flight_batches,
        max_queued_spans=config.max_queued_spans,
    )
    return TraceReporter(
        config,
        pipeline,
        translator=SpanTranslator(log),
        grouper=BatchGrouper(),
        logger=log,
    )


async def create_reporter(
    client: Optional[ITraceClient] = None,
    logger: Optional[IStructuredLogger] = None,
    **options: Any,
) -> TraceReporter:
    """
    Valide les options puis construit le reporter.

    Example:
        reporter = await create_reporter(client, project_id="my-project")

    Raises:
        ConfigurationError: Options invalides (aucun span accepté)
        ConnectivityError: Connexion initiale impossible
    """
    config = build_config(**options)
    return await build_reporter(config, client, logger=logger)
