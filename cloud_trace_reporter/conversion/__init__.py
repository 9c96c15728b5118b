"""
Conversion

Traduction des spans internes vers le schéma Cloud Trace v2:
- Mapping des clés d'attributs (table configurable, identité par défaut)
- Converters statut / kind / stack trace enfichables
- Span Translator composant le tout, sans état
"""

from .interfaces import (
    IAttributeMapper,
    IStatusConverter,
    ISpanKindConverter,
    IStackTraceConverter,
)
from .attribute_mapper import AttributeMapper
from .semantic_mapping import opentelemetry_semantic_mapping
from .converters import (
    # Defaults
    DefaultStatusConverter,
    DefaultSpanKindConverter,
    DefaultStackTraceConverter,
    # Adapters
    CallableStatusConverter,
    CallableSpanKindConverter,
    CallableStackTraceConverter,
    as_status_converter,
    as_span_kind_converter,
    as_stack_trace_converter,
)
from .translator import (
    SERVICE_NAME_ATTRIBUTE,
    SPAN_KIND_ATTRIBUTE,
    SpanTranslator,
    build_attributes,
    coerce_attribute_value,
)

__all__ = [
    # Interfaces
    "IAttributeMapper",
    "IStatusConverter",
    "ISpanKindConverter",
    "IStackTraceConverter",
    # Implementations
    "AttributeMapper",
    "DefaultStatusConverter",
    "DefaultSpanKindConverter",
    "DefaultStackTraceConverter",
    "CallableStatusConverter",
    "CallableSpanKindConverter",
    "CallableStackTraceConverter",
    "SpanTranslator",
    # Helpers
    "opentelemetry_semantic_mapping",
    "as_status_converter",
    "as_span_kind_converter",
    "as_stack_trace_converter",
    "build_attributes",
    "coerce_attribute_value",
    # Constants
    "SERVICE_NAME_ATTRIBUTE",
    "SPAN_KIND_ATTRIBUTE",
]
