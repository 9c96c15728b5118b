"""
Model

Types de données du reporter:
- Spans internes remis par l'instrumentation (lecture seule)
- Schéma Cloud Trace v2 produit par la traduction
- TraceBatch: unité d'écriture, une trace par batch
"""

from .spans import (
    # Enums
    StatusCode,
    SpanKind,
    # Data classes
    SpanStatus,
    StackFrame,
    SpanEvent,
    InternalSpan,
    # Helpers
    iter_attributes,
    format_trace_id,
    format_span_id,
    format_parent_span_id,
)
from .backend import (
    # Limites
    MAX_DISPLAY_NAME_BYTES,
    MAX_ATTRIBUTE_KEY_BYTES,
    MAX_ATTRIBUTE_VALUE_BYTES,
    MAX_ATTRIBUTES_PER_SPAN,
    MAX_ANNOTATIONS_PER_SPAN,
    MAX_ANNOTATION_DESCRIPTION_BYTES,
    MAX_STACK_FRAMES,
    MAX_FRAME_STRING_BYTES,
    # Enums
    BackendSpanKind,
    # Data classes
    TruncatableString,
    Timestamp,
    AttributeValue,
    Attributes,
    BackendStatus,
    BackendStackFrame,
    BackendStackTrace,
    Annotation,
    TimeEvent,
    TimeEvents,
    ConvertedSpan,
    TraceBatch,
    # Exceptions
    InvalidBatchError,
)

__all__ = [
    # Enums
    "StatusCode",
    "SpanKind",
    "BackendSpanKind",
    # Data classes - Instrumentation
    "SpanStatus",
    "StackFrame",
    "SpanEvent",
    "InternalSpan",
    # Data classes - Backend
    "TruncatableString",
    "Timestamp",
    "AttributeValue",
    "Attributes",
    "BackendStatus",
    "BackendStackFrame",
    "BackendStackTrace",
    "Annotation",
    "TimeEvent",
    "TimeEvents",
    "ConvertedSpan",
    "TraceBatch",
    # Helpers
    "iter_attributes",
    "format_trace_id",
    "format_span_id",
    "format_parent_span_id",
    # Limites
    "MAX_DISPLAY_NAME_BYTES",
    "MAX_ATTRIBUTE_KEY_BYTES",
    "MAX_ATTRIBUTE_VALUE_BYTES",
    "MAX_ATTRIBUTES_PER_SPAN",
    "MAX_ANNOTATIONS_PER_SPAN",
    "MAX_ANNOTATION_DESCRIPTION_BYTES",
    "MAX_STACK_FRAMES",
    "MAX_FRAME_STRING_BYTES",
    # Exceptions
    "InvalidBatchError",
]
