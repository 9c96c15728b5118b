"""
Tests unitaires: Model - Schéma Cloud Trace v2

Tests:
- Troncature UTF-8 sans coupure de caractère
- Horodatages bornés et format RFC 3339
- Sérialisation JSON REST
- Intégrité des TraceBatch
"""

import pytest

from cloud_trace_reporter.model import (
    AttributeValue,
    Attributes,
    BackendSpanKind,
    BackendStatus,
    ConvertedSpan,
    InvalidBatchError,
    Timestamp,
    TraceBatch,
    TruncatableString,
)


def _span(trace_id: str = "t1", span_id: str = "s1") -> ConvertedSpan:
    return ConvertedSpan(
        name=f"projects/p/traces/{trace_id}/spans/{span_id}",
        trace_id=trace_id,
        span_id=span_id,
        display_name=TruncatableString("op"),
        start_time=Timestamp(seconds=1),
        end_time=Timestamp(seconds=2),
    )


class TestTruncatableString:
    """Troncature par octets UTF-8."""

    def test_short_value_untouched(self) -> None:
        result = TruncatableString.truncate("hello", 10)

        assert result.value == "hello"
        assert result.truncated_byte_count == 0

    def test_ascii_truncated_to_limit(self) -> None:
        result = TruncatableString.truncate("a" * 130, 128)

        assert result.value == "a" * 128
        assert result.truncated_byte_count == 2

    def test_multibyte_character_never_split(self) -> None:
        # "é" = 2 octets: 3 caractères = 6 octets, limite 5
        result = TruncatableString.truncate("ééé", 5)

        assert result.value == "éé"
        assert result.truncated_byte_count == 2

    def test_to_dict_omits_zero_count(self) -> None:
        assert TruncatableString("x").to_dict() == {"value": "x"}
        assert TruncatableString("x", 3).to_dict() == {"value": "x", "truncatedByteCount": 3}


class TestTimestamp:
    """Horodatages."""

    def test_split_seconds_and_nanos(self) -> None:
        ts = Timestamp.from_unix_nano(1_700_000_000_123_456_789)

        assert ts.seconds == 1_700_000_000
        assert ts.nanos == 123_456_789

    def test_negative_clamped_to_epoch(self) -> None:
        assert Timestamp.from_unix_nano(-5) == Timestamp(seconds=0, nanos=0)

    def test_rfc3339_format(self) -> None:
        assert Timestamp(seconds=0, nanos=5).to_rfc3339() == "1970-01-01T00:00:00.000000005Z"


class TestSerialization:
    """Sérialisation REST."""

    def test_int_value_serialized_as_string(self) -> None:
        assert AttributeValue(int_value=42).to_dict() == {"intValue": "42"}

    def test_bool_value(self) -> None:
        assert AttributeValue(bool_value=False).to_dict() == {"boolValue": False}

    def test_dropped_attributes_count_only_when_non_zero(self) -> None:
        assert "droppedAttributesCount" not in Attributes().to_dict()
        assert Attributes(dropped_attributes_count=3).to_dict()["droppedAttributesCount"] == 3

    def test_span_to_dict(self) -> None:
        span = ConvertedSpan(
            name="projects/p/traces/t1/spans/s2",
            trace_id="t1",
            span_id="s2",
            parent_span_id="s1",
            display_name=TruncatableString("op"),
            start_time=Timestamp(seconds=1),
            end_time=Timestamp(seconds=2),
            span_kind=BackendSpanKind.SERVER,
            status=BackendStatus(code=2, message="boom"),
        )

        body = span.to_dict()

        assert body["name"] == "projects/p/traces/t1/spans/s2"
        assert body["spanId"] == "s2"
        assert body["parentSpanId"] == "s1"
        assert body["displayName"] == {"value": "op"}
        assert body["spanKind"] == "SERVER"
        assert body["status"] == {"code": 2, "message": "boom"}
        assert "stackTrace" not in body

    def test_root_span_has_no_parent_field(self) -> None:
        assert "parentSpanId" not in _span().to_dict()


class TestTraceBatch:
    """Intégrité des batches."""

    def test_empty_batch_rejected(self) -> None:
        with pytest.raises(InvalidBatchError):
            TraceBatch(trace_id="t1", spans=())

    def test_mixed_traces_rejected(self) -> None:
        with pytest.raises(InvalidBatchError):
            TraceBatch(trace_id="t1", spans=(_span("t1"), _span("t2")))

    def test_of_uses_first_trace_id(self) -> None:
        batch = TraceBatch.of([_span("t1", "a"), _span("t1", "b")])

        assert batch.trace_id == "t1"
        assert batch.span_count == 2

    def test_to_request(self) -> None:
        request = TraceBatch.of([_span()]).to_request("proj-1")

        assert request["name"] == "projects/proj-1"
        assert len(request["spans"]) == 1
