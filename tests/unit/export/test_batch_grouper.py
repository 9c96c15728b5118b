"""
Tests unitaires: Export - Batch Grouper
"""

from cloud_trace_reporter.export import BatchGrouper
from cloud_trace_reporter.model import ConvertedSpan, Timestamp, TruncatableString


def _span(trace_id: str, span_id: str) -> ConvertedSpan:
    return ConvertedSpan(
        name=f"projects/p/traces/{trace_id}/spans/{span_id}",
        trace_id=trace_id,
        span_id=span_id,
        display_name=TruncatableString(span_id),
        start_time=Timestamp(seconds=1),
        end_time=Timestamp(seconds=1),
    )


class TestBatchGrouper:
    """Regroupement par trace."""

    def test_groups_by_trace_in_first_seen_order(self) -> None:
        spans = [_span("T1", "a"), _span("T1", "b"), _span("T2", "c")]

        batches = BatchGrouper().group(spans)

        assert [b.trace_id for b in batches] == ["T1", "T2"]
        assert [s.span_id for s in batches[0].spans] == ["a", "b"]
        assert [s.span_id for s in batches[1].spans] == ["c"]

    def test_interleaved_traces_keep_relative_order(self) -> None:
        spans = [_span("T2", "a"), _span("T1", "b"), _span("T2", "c"), _span("T1", "d")]

        batches = BatchGrouper().group(spans)

        assert [b.trace_id for b in batches] == ["T2", "T1"]
        for batch in batches:
            assert {s.trace_id for s in batch.spans} == {batch.trace_id}
        regrouped = [s.span_id for b in batches for s in b.spans]
        assert sorted(regrouped) == ["a", "b", "c", "d"]
        assert [s.span_id for s in batches[0].spans] == ["a", "c"]

    def test_empty_input_gives_no_batch(self) -> None:
        assert BatchGrouper().group([]) == []
