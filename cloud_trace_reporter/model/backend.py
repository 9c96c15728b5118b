"""
Model - Schéma Cloud Trace v2

Représentation des spans au format attendu par le backend (Cloud Trace v2)
et sérialisation vers le corps JSON de l'API REST `BatchWriteSpans`.

Invariants:
    - Les chaînes tronquées ne coupent jamais un caractère UTF-8
    - Un TraceBatch n'est jamais vide
    - Tous les spans d'un TraceBatch partagent le même trace id
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


# Limites documentées du backend
MAX_DISPLAY_NAME_BYTES: int = 128
MAX_ATTRIBUTE_KEY_BYTES: int = 128
MAX_ATTRIBUTE_VALUE_BYTES: int = 256
MAX_ATTRIBUTES_PER_SPAN: int = 32
MAX_ANNOTATIONS_PER_SPAN: int = 32
MAX_ANNOTATION_DESCRIPTION_BYTES: int = 256
MAX_STACK_FRAMES: int = 128
MAX_FRAME_STRING_BYTES: int = 1024

# 9999-12-31T23:59:59Z
MAX_TIMESTAMP_SECONDS: int = 253402300799


class BackendSpanKind(Enum):
    """Span kind côté Cloud Trace."""

    SPAN_KIND_UNSPECIFIED = "SPAN_KIND_UNSPECIFIED"
    INTERNAL = "INTERNAL"
    SERVER = "SERVER"
    CLIENT = "CLIENT"
    PRODUCER = "PRODUCER"
    CONSUMER = "CONSUMER"


@dataclass(frozen=True)
class TruncatableString:
    """Chaîne éventuellement tronquée, avec le nombre d'octets retirés."""

    value: str
    truncated_byte_count: int = 0

    @classmethod
    def truncate(cls, value: str, limit: int) -> "TruncatableString":
        """
        Tronque `value` à `limit` octets UTF-8.

        Args:
            value: Chaîne source
            limit: Nombre d'octets maximum

        Returns:
            TruncatableString avec truncated_byte_count renseigné
        """
        encoded = value.encode("utf-8")
        if len(encoded) <= limit:
            return cls(value=value)
        kept = encoded[:limit].decode("utf-8", errors="ignore")
        return cls(
            value=kept,
            truncated_byte_count=len(encoded) - len(kept.encode("utf-8")),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"value": self.value}
        if self.truncated_byte_count:
            result["truncatedByteCount"] = self.truncated_byte_count
        return result


@dataclass(frozen=True)
class Timestamp:
    """Horodatage secondes + nanosecondes (clampé sur la plage valide)."""

    seconds: int
    nanos: int = 0

    @classmethod
    def from_unix_nano(cls, unix_nano: int) -> "Timestamp":
        """Convertit des nanosecondes Unix, bornées à [epoch, an 9999]."""
        unix_nano = max(0, int(unix_nano))
        seconds, nanos = divmod(unix_nano, 1_000_000_000)
        if seconds > MAX_TIMESTAMP_SECONDS:
            return cls(seconds=MAX_TIMESTAMP_SECONDS, nanos=999_999_999)
        return cls(seconds=seconds, nanos=nanos)

    def to_rfc3339(self) -> str:
        """Format RFC 3339 UTC avec nanosecondes."""
        moment = datetime.fromtimestamp(self.seconds, tz=timezone.utc)
        return moment.strftime("%Y-%m-%dT%H:%M:%S") + f".{self.nanos:09d}Z"


@dataclass(frozen=True)
class AttributeValue:
    """Valeur d'attribut: une seule des trois variantes est renseignée."""

    string_value: Optional[TruncatableString] = None
    int_value: Optional[int] = None
    bool_value: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        if self.bool_value is not None:
            return {"boolValue": self.bool_value}
        if self.int_value is not None:
            # int64 sérialisé en chaîne dans le JSON REST
            return {"intValue": str(self.int_value)}
        string_value = self.string_value or TruncatableString(value="")
        return {"stringValue": string_value.to_dict()}


@dataclass(frozen=True)
class Attributes:
    """Map d'attributs d'un span ou d'une annotation."""

    attribute_map: Dict[str, AttributeValue] = field(default_factory=dict)
    dropped_attributes_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "attributeMap": {key: value.to_dict() for key, value in self.attribute_map.items()}
        }
        if self.dropped_attributes_count:
            result["droppedAttributesCount"] = self.dropped_attributes_count
        return result


@dataclass(frozen=True)
class BackendStatus:
    """Statut au format google.rpc.Status (code gRPC + message)."""

    code: int
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"code": self.code}
        if self.message:
            result["message"] = self.message
        return result


@dataclass(frozen=True)
class BackendStackFrame:
    """Frame de stack trace côté backend."""

    function_name: TruncatableString
    file_name: TruncatableString
    line_number: int = 0

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "functionName": self.function_name.to_dict(),
            "fileName": self.file_name.to_dict(),
        }
        if self.line_number:
            result["lineNumber"] = str(self.line_number)
        return result


@dataclass(frozen=True)
class BackendStackTrace:
    """Stack trace tronquée aux frames les plus internes."""

    frames: Tuple[BackendStackFrame, ...] = ()
    dropped_frames_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        stack_frames: Dict[str, Any] = {"frame": [frame.to_dict() for frame in self.frames]}
        if self.dropped_frames_count:
            stack_frames["droppedFramesCount"] = self.dropped_frames_count
        return {"stackFrames": stack_frames}


@dataclass(frozen=True)
class Annotation:
    """Annotation (événement) d'un span."""

    description: TruncatableString
    attributes: Attributes = field(default_factory=Attributes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description.to_dict(),
            "attributes": self.attributes.to_dict(),
        }


@dataclass(frozen=True)
class TimeEvent:
    """Événement horodaté."""

    time: Timestamp
    annotation: Annotation

    def to_dict(self) -> Dict[str, Any]:
        return {"time": self.time.to_rfc3339(), "annotation": self.annotation.to_dict()}


@dataclass(frozen=True)
class TimeEvents:
    """Liste des événements d'un span."""

    time_event: Tuple[TimeEvent, ...] = ()
    dropped_annotations_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"timeEvent": [event.to_dict() for event in self.time_event]}
        if self.dropped_annotations_count:
            result["droppedAnnotationsCount"] = self.dropped_annotations_count
        return result


@dataclass(frozen=True)
class ConvertedSpan:
    """
    Span au format Cloud Trace v2.

    `name` est le nom de ressource complet:
    projects/{project_id}/traces/{trace_id}/spans/{span_id}
    """

    name: str
    trace_id: str
    span_id: str
    display_name: TruncatableString
    start_time: Timestamp
    end_time: Timestamp
    attributes: Attributes = field(default_factory=Attributes)
    span_kind: BackendSpanKind = BackendSpanKind.SPAN_KIND_UNSPECIFIED
    time_events: TimeEvents = field(default_factory=TimeEvents)
    parent_span_id: Optional[str] = None
    status: Optional[BackendStatus] = None
    stack_trace: Optional[BackendStackTrace] = None

    def to_dict(self) -> Dict[str, Any]:
        """Sérialise au format JSON REST de Cloud Trace."""
        result: Dict[str, Any] = {
            "name": self.name,
            "spanId": self.span_id,
            "displayName": self.display_name.to_dict(),
            "startTime": self.start_time.to_rfc3339(),
            "endTime": self.end_time.to_rfc3339(),
            "attributes": self.attributes.to_dict(),
            "timeEvents": self.time_events.to_dict(),
            "spanKind": self.span_kind.value,
        }
        if self.parent_span_id:
            result["parentSpanId"] = self.parent_span_id
        if self.status is not None:
            result["status"] = self.status.to_dict()
        if self.stack_trace is not None:
            result["stackTrace"] = self.stack_trace.to_dict()
        return result


class InvalidBatchError(ValueError):
    """TraceBatch vide ou mélangeant plusieurs traces."""

    pass


@dataclass(frozen=True)
class TraceBatch:
    """
    Groupe de spans d'une même trace, soumis en une seule écriture.

    Raises:
        InvalidBatchError: Si vide ou si un span appartient à une autre trace
    """

    trace_id: str
    spans: Tuple[ConvertedSpan, ...]

    def __post_init__(self) -> None:
        if not self.spans:
            raise InvalidBatchError(f"Empty batch for trace {self.trace_id}")
        for span in self.spans:
            if span.trace_id != self.trace_id:
                raise InvalidBatchError(
                    f"Span {span.span_id} belongs to trace {span.trace_id}, "
                    f"not {self.trace_id}"
                )

    @classmethod
    def of(cls, spans: Sequence[ConvertedSpan]) -> "TraceBatch":
        """Construit un batch depuis une séquence non vide de spans."""
        if not spans:
            raise InvalidBatchError("Cannot build a batch from no spans")
        return cls(trace_id=spans[0].trace_id, spans=tuple(spans))

    @property
    def span_count(self) -> int:
        return len(self.spans)

    def to_request(self, project_id: str) -> Dict[str, Any]:
        """Corps de la requête BatchWriteSpans."""
        return {
            "name": f"projects/{project_id}",
            "spans": [span.to_dict() for span in self.spans],
        }
