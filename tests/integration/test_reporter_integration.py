"""
Test intégration: chaîne complète du reporter

Valide la chaîne:
- Traduction des spans (converters, mapping, service.name)
- Regroupement par trace
- Soumission asynchrone (retry, backpressure, arrêt)
- Corps de requête BatchWriteSpans
"""

import asyncio
import threading
from typing import Callable, List

import pytest

from cloud_trace_reporter import (
    ConfigurationError,
    DropCause,
    InMemoryTraceClient,
    InternalSpan,
    SpanEvent,
    SpanKind,
    SpanStatus,
    StackFrame,
    StatusCode,
    SubmissionOutcome,
    build_config,
    build_reporter,
    create_reporter,
)
from cloud_trace_reporter.logging import StructuredLogger


MakeSpan = Callable[..., InternalSpan]

T1 = "11111111111111111111111111111111"
T2 = "22222222222222222222222222222222"


@pytest.mark.asyncio
async def test_single_root_span(make_span: MakeSpan, captured_logger: StructuredLogger):
    """Un span racine sans attribut: un batch d'un span, sans service.name."""
    client = InMemoryTraceClient()
    reporter = await create_reporter(client, logger=captured_logger, project_id="proj-1")
    try:
        reporter.report([make_span("root_span")])
        assert reporter.flush(timeout=5.0)
    finally:
        reporter.shutdown(timeout=1.0)

    assert len(client.accepted) == 1
    submitted = client.accepted[0]
    assert submitted.project_id == "proj-1"
    assert submitted.batch.span_count == 1

    body = submitted.batch.to_request(submitted.project_id)
    assert body["name"] == "projects/proj-1"
    span = body["spans"][0]
    assert span["displayName"] == {"value": "root_span"}
    assert "service.name" not in span["attributes"]["attributeMap"]
    assert "parentSpanId" not in span


@pytest.mark.asyncio
async def test_spans_grouped_by_trace(make_span: MakeSpan, captured_logger: StructuredLogger):
    """T1, T1, T2: deux batches (2 spans dans l'ordre, puis 1 span)."""
    client = InMemoryTraceClient()
    reporter = await create_reporter(client, logger=captured_logger, project_id="proj-1")
    try:
        reporter.report(
            [
                make_span("first", trace_id=T1, span_id="0000000000000001"),
                make_span("second", trace_id=T1, span_id="0000000000000002"),
                make_span("third", trace_id=T2, span_id="0000000000000003"),
            ]
        )
        assert reporter.flush(timeout=5.0)
    finally:
        reporter.shutdown(timeout=1.0)

    batches = {b.trace_id: b for b in client.accepted_batches}
    assert set(batches) == {T1, T2}
    assert [s.display_name.value for s in batches[T1].spans] == ["first", "second"]
    assert batches[T2].span_count == 1
    assert reporter.diagnostics().spans_exported == 3


@pytest.mark.asyncio
async def test_always_transient_dropped_after_retries(
    make_span: MakeSpan, captured_logger: StructuredLogger, no_backoff: dict
):
    """max_in_flight_batches=1, toujours transitoire, 3 tentatives puis abandon."""
    client = InMemoryTraceClient(outcomes=lambda batch: SubmissionOutcome.from_status_code(14))
    reporter = await create_reporter(
        client,
        logger=captured_logger,
        project_id="proj-1",
        max_in_flight_batches=1,
        retry_max_attempts=3,
        retry_backoff_policy=no_backoff,
    )
    try:
        reporter.report([make_span("a", span_id="01"), make_span("b", span_id="02")])
        assert reporter.flush(timeout=5.0)
        attempts_after_drop = len(client.attempts)
        await asyncio.sleep(0.05)
    finally:
        reporter.shutdown(timeout=1.0)

    snapshot = reporter.diagnostics()
    assert attempts_after_drop == 3
    assert len(client.attempts) == 3
    assert snapshot.dropped(DropCause.RETRIES_EXHAUSTED) == 2
    assert snapshot.spans_exported == 0


@pytest.mark.asyncio
async def test_empty_project_id_rejected_before_any_span():
    """project_id vide: ConfigurationError, aucun client contacté."""
    client = InMemoryTraceClient()

    with pytest.raises(ConfigurationError):
        await create_reporter(client, project_id="")

    assert not client.connected
    assert client.attempts == []


@pytest.mark.asyncio
async def test_full_span_translation(make_span: MakeSpan, captured_logger: StructuredLogger):
    """Span complet: kind, statut, événements, stack trace, mapping OpenTelemetry."""
    client = InMemoryTraceClient()
    config = build_config(
        project_id="proj-1",
        service_name="checkout",
        use_opentelemetry_mapping=True,
    )
    reporter = await build_reporter(config, client, captured_logger)
    span = make_span(
        "GET /orders",
        parent_span_id="b7ad6b7169203331",
        kind=SpanKind.SERVER,
        status=SpanStatus(StatusCode.ERROR, "upstream failed"),
        attributes={"http.method": "GET", "http.status_code": 502, "cached": False},
        events=[SpanEvent("retry", 1_700_000_000_100_000_000, {"attempt": 1})],
        stack_trace=[StackFrame("handle", "orders.py", 42), StackFrame("main", "app.py", 7)],
    )
    try:
        reporter.report([span])
        assert reporter.flush(timeout=5.0)
    finally:
        reporter.shutdown(timeout=1.0)

    body = client.accepted_batches[0].spans[0].to_dict()
    attributes = body["attributes"]["attributeMap"]
    assert body["spanKind"] == "SERVER"
    assert body["parentSpanId"] == "b7ad6b7169203331"
    assert body["status"] == {"code": 2, "message": "upstream failed"}
    assert attributes["service.name"] == {"stringValue": {"value": "checkout"}}
    assert attributes["/http/method"] == {"stringValue": {"value": "GET"}}
    assert attributes["/http/status_code"] == {"intValue": "502"}
    assert attributes["cached"] == {"boolValue": False}
    assert body["timeEvents"]["timeEvent"][0]["annotation"]["description"] == {"value": "retry"}
    frames = body["stackTrace"]["stackFrames"]["frame"]
    assert [f["functionName"]["value"] for f in frames] == ["handle", "main"]


@pytest.mark.asyncio
async def test_backpressure_bound(make_span: MakeSpan, captured_logger: StructuredLogger):
    """Client bloqué: jamais plus de max_queued_spans en file, excès compté overflow."""
    client = InMemoryTraceClient(delay=30.0)
    reporter = await create_reporter(
        client,
        logger=captured_logger,
        project_id="proj-1",
        max_in_flight_batches=1,
        max_queued_spans=5,
        shutdown_timeout=0.0,
    )
    try:
        for i in range(20):
            reporter.report([make_span(trace_id=f"{i:032x}", span_id=f"{i + 1:016x}")])
    finally:
        reporter.shutdown(timeout=0.0)

    snapshot = reporter.diagnostics()
    # 5 en file + au plus 1 en cours d'envoi, le reste évincé
    assert snapshot.dropped(DropCause.OVERFLOW) >= 14
    assert snapshot.spans_exported == 0
    assert snapshot.spans_dropped_total == 20


@pytest.mark.asyncio
async def test_concurrent_reports(make_span: MakeSpan, captured_logger: StructuredLogger):
    """report() appelé depuis plusieurs threads: aucun span perdu ni compté deux fois."""
    client = InMemoryTraceClient()
    reporter = await create_reporter(
        client, logger=captured_logger, project_id="proj-1", max_queued_spans=10_000
    )

    def producer(worker: int) -> None:
        for i in range(50):
            reporter.report(
                [make_span(trace_id=f"{worker:016x}{i:016x}", span_id=f"{i + 1:016x}")]
            )

    threads: List[threading.Thread] = [
        threading.Thread(target=producer, args=(w,)) for w in range(4)
    ]
    try:
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert reporter.flush(timeout=10.0)
    finally:
        reporter.shutdown(timeout=1.0)

    assert reporter.diagnostics().spans_exported == 200
    assert len(client.accepted_batches) == 200
