#!/usr/bin/env python3
"""
Cloud Trace Reporter - Sample Trace

Reporte une petite trace (un span racine, un span enfant avec événement et
erreur). Par défaut, le client en mémoire est utilisé et le corps
BatchWriteSpans est affiché; avec --cloud, la trace est envoyée à Cloud Trace
(identifiants Application Default Credentials).

Usage:
    python scripts/send_sample_trace.py [project_id] [--cloud]
"""

import asyncio
import json
import sys
import time

from cloud_trace_reporter import (
    CloudTraceClient,
    InMemoryTraceClient,
    InternalSpan,
    SpanEvent,
    SpanKind,
    SpanStatus,
    StatusCode,
    create_reporter,
)


def build_trace() -> list:
    now = time.time_ns()
    trace_id = int.from_bytes(b"sample-trace-id!", "big")
    root = InternalSpan(
        trace_id=trace_id,
        span_id=1,
        name="GET /orders",
        start_time_unix_nano=now,
        end_time_unix_nano=now + 120_000_000,
        kind=SpanKind.SERVER,
        status=SpanStatus(StatusCode.OK),
        attributes={"http.request.method": "GET", "http.response.status_code": 200},
    )
    child = InternalSpan(
        trace_id=trace_id,
        span_id=2,
        parent_span_id=1,
        name="SELECT orders",
        start_time_unix_nano=now + 10_000_000,
        end_time_unix_nano=now + 90_000_000,
        kind=SpanKind.CLIENT,
        status=SpanStatus(StatusCode.ERROR, "deadlock detected"),
        attributes=[("db.system", "postgresql"), ("db.rows", 0)],
        events=[SpanEvent("retry", now + 50_000_000, {"attempt": 2})],
    )
    return [root, child]


async def main(project_id: str, cloud: bool = False) -> int:
    client = CloudTraceClient() if cloud else InMemoryTraceClient()
    reporter = await create_reporter(
        client,
        project_id=project_id,
        service_name="sample-service",
        use_opentelemetry_mapping=True,
    )

    reporter.report(build_trace())
    reporter.flush(timeout=5.0)
    reporter.shutdown()

    if isinstance(client, InMemoryTraceClient):
        for submitted in client.accepted:
            print(json.dumps(submitted.batch.to_request(submitted.project_id), indent=2))

    print(json.dumps(reporter.diagnostics().to_dict(), indent=2), file=sys.stderr)
    return 0 if reporter.diagnostics().spans_dropped_total == 0 else 1


if __name__ == "__main__":
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    sys.exit(asyncio.run(main(args[0] if args else "sample-project", "--cloud" in sys.argv)))
