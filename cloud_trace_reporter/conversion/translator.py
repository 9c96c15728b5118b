"""
Conversion - Span Translator

Transforme un span interne (avec ses événements) en span Cloud Trace v2.

Invariants:
    - Traduction déterministe: même span + même config = même résultat
    - Aucune exception: toute ambiguïté est résolue par une valeur par défaut
    - Les attributs fournis par le span priment sur le service_name configuré

Valeurs par défaut documentées:
    - end_time antérieur à start_time -> end_time = start_time
    - horodatage négatif -> epoch
    - attribut None -> chaîne vide
    - converter personnalisé en échec -> converter par défaut pour ce span
"""

from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Tuple

from ..logging import IStructuredLogger, StructuredLogger
from ..model import (
    MAX_ANNOTATION_DESCRIPTION_BYTES,
    MAX_ANNOTATIONS_PER_SPAN,
    MAX_ATTRIBUTE_KEY_BYTES,
    MAX_ATTRIBUTE_VALUE_BYTES,
    MAX_ATTRIBUTES_PER_SPAN,
    MAX_DISPLAY_NAME_BYTES,
    Annotation,
    Attributes,
    AttributeValue,
    BackendSpanKind,
    BackendStackTrace,
    BackendStatus,
    ConvertedSpan,
    InternalSpan,
    SpanEvent,
    SpanKind,
    TimeEvent,
    TimeEvents,
    Timestamp,
    TruncatableString,
    format_parent_span_id,
    format_span_id,
    format_trace_id,
    iter_attributes,
)
from .converters import (
    DefaultSpanKindConverter,
    DefaultStackTraceConverter,
    DefaultStatusConverter,
)
from .interfaces import IAttributeMapper

if TYPE_CHECKING:
    from ..reporter.config import ReporterConfig


SERVICE_NAME_ATTRIBUTE: str = "service.name"
SPAN_KIND_ATTRIBUTE: str = "span.kind"

_INT64_MIN: int = -(2**63)
_INT64_MAX: int = 2**63 - 1


def coerce_attribute_value(value: Any) -> AttributeValue:
    """
    Convertit une valeur d'attribut vers les types acceptés par le backend.

    bool -> bool_value, int (int64) -> int_value, tout le reste -> string_value
    (les flottants n'existent pas côté Cloud Trace).
    """
    if isinstance(value, bool):
        return AttributeValue(bool_value=value)
    if isinstance(value, int) and _INT64_MIN <= value <= _INT64_MAX:
        return AttributeValue(int_value=value)
    text = "" if value is None else str(value)
    return AttributeValue(
        string_value=TruncatableString.truncate(text, MAX_ATTRIBUTE_VALUE_BYTES)
    )


def build_attributes(values: Dict[str, Any]) -> Attributes:
    """
    Construit la map d'attributs en respectant les limites du backend.

    Les premiers MAX_ATTRIBUTES_PER_SPAN attributs (ordre d'insertion) sont
    conservés, les suivants sont comptés comme supprimés.
    """
    items = list(values.items())
    kept = items[:MAX_ATTRIBUTES_PER_SPAN]
    attribute_map: Dict[str, AttributeValue] = {}
    for key, value in kept:
        backend_key = TruncatableString.truncate(key, MAX_ATTRIBUTE_KEY_BYTES).value
        attribute_map[backend_key] = coerce_attribute_value(value)
    return Attributes(
        attribute_map=attribute_map,
        dropped_attributes_count=len(items) - len(kept),
    )


class SpanTranslator:
    """
    Traduction InternalSpan -> ConvertedSpan.

    Ne conserve aucun état entre deux appels: peut être partagé entre threads.
    """

    def __init__(self, logger: Optional[IStructuredLogger] = None) -> None:
        """
        Args:
            logger: Logger des diagnostics (conversions par défaut)
        """
        self._logger = logger or StructuredLogger("cloud_trace_reporter.translator")
        self._default_status = DefaultStatusConverter()
        self._default_kind = DefaultSpanKindConverter()
        self._default_stack = DefaultStackTraceConverter()

    def translate(self, span: InternalSpan, config: "ReporterConfig") -> ConvertedSpan:
        """
        Traduit un span.

        Args:
            span: Span interne (non modifié)
            config: Configuration du reporter

        Returns:
            ConvertedSpan prêt à être groupé par trace
        """
        trace_id = format_trace_id(span.trace_id)
        span_id = format_span_id(span.span_id)
        mapper = config.attribute_mapper

        kind = span.kind if isinstance(span.kind, SpanKind) else SpanKind.parse(span.kind)
        values: Dict[str, Any] = {}
        if config.service_name:
            values[SERVICE_NAME_ATTRIBUTE] = config.service_name

        for key, value in iter_attributes(span.attributes):
            if key == SPAN_KIND_ATTRIBUTE and kind is SpanKind.UNSPECIFIED:
                kind = SpanKind.parse(value)
                continue
            values[mapper.map(str(key))] = value

        start_nano = span.start_time_unix_nano or 0
        end_nano = max(span.end_time_unix_nano or 0, start_nano)

        return ConvertedSpan(
            name=f"projects/{config.project_id}/traces/{trace_id}/spans/{span_id}",
            trace_id=trace_id,
            span_id=span_id,
            parent_span_id=format_parent_span_id(span.parent_span_id),
            display_name=TruncatableString.truncate(span.name or "", MAX_DISPLAY_NAME_BYTES),
            start_time=Timestamp.from_unix_nano(start_nano),
            end_time=Timestamp.from_unix_nano(end_nano),
            attributes=build_attributes(values),
            status=self._safe_convert(
                "status_converter",
                config.status_converter,
                self._default_status,
                span.status,
                (BackendStatus, type(None)),
                span_id,
            ),
            span_kind=self._safe_convert(
                "span_kind_converter",
                config.span_kind_converter,
                self._default_kind,
                kind,
                (BackendSpanKind,),
                span_id,
            ),
            stack_trace=self._safe_convert(
                "stack_trace_converter",
                config.stack_trace_converter,
                self._default_stack,
                tuple(span.stack_trace or ()),
                (BackendStackTrace, type(None)),
                span_id,
            ),
            time_events=self._convert_events(span.events or (), mapper),
        )

    def _convert_events(
        self, events: Sequence[SpanEvent], mapper: IAttributeMapper
    ) -> TimeEvents:
        events = list(events)
        kept = events[:MAX_ANNOTATIONS_PER_SPAN]
        return TimeEvents(
            time_event=tuple(self._convert_event(event, mapper) for event in kept),
            dropped_annotations_count=len(events) - len(kept),
        )

    def _convert_event(self, event: SpanEvent, mapper: IAttributeMapper) -> TimeEvent:
        values = {mapper.map(str(key)): value for key, value in iter_attributes(event.attributes)}
        return TimeEvent(
            time=Timestamp.from_unix_nano(event.timestamp_unix_nano or 0),
            annotation=Annotation(
                description=TruncatableString.truncate(
                    event.name or "", MAX_ANNOTATION_DESCRIPTION_BYTES
                ),
                attributes=build_attributes(values),
            ),
        )

    def _safe_convert(
        self,
        option: str,
        converter: Any,
        default: Any,
        value: Any,
        expected: Tuple[type, ...],
        span_id: str,
    ) -> Any:
        """
        Applique un converter; en cas d'échec ou de résultat invalide,
        applique le converter par défaut.
        """
        try:
            result = converter.convert(value)
        except Exception as e:
            self._logger.warn(
                "Converter failed, default conversion applied",
                option=option,
                span_id=span_id,
                error=f"{type(e).__name__}: {e}",
            )
            return default.convert(value)

        if not isinstance(result, expected):
            self._logger.warn(
                "Converter returned an invalid value, default conversion applied",
                option=option,
                span_id=span_id,
                returned=type(result).__name__,
            )
            return default.convert(value)
        return result
