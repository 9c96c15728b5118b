"""
Model - Spans internes

Représentation des spans terminés remis par la librairie d'instrumentation
au moment du flush. Ces objets sont en lecture seule pour le reporter.

Invariants:
    - Un span n'est jamais modifié par le reporter
    - Les attributs et événements conservent leur ordre d'origine
    - La stack trace est ordonnée de la frame la plus interne à la plus externe
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping, Optional, Sequence, Tuple, Union


AttributePairs = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]


class StatusCode(Enum):
    """Code de statut d'un span."""

    UNSET = "unset"
    OK = "ok"
    ERROR = "error"


class SpanKind(Enum):
    """Type de span côté instrumentation."""

    UNSPECIFIED = "unspecified"
    INTERNAL = "internal"
    SERVER = "server"
    CLIENT = "client"
    PRODUCER = "producer"
    CONSUMER = "consumer"

    @classmethod
    def parse(cls, value: Any) -> "SpanKind":
        """
        Résout un SpanKind depuis une valeur libre (attribut `span.kind`).

        Args:
            value: Nom du kind, insensible à la casse

        Returns:
            SpanKind correspondant, UNSPECIFIED si inconnu
        """
        if isinstance(value, SpanKind):
            return value
        name = str(value).strip().lower()
        for kind in cls:
            if kind.value == name:
                return kind
        return cls.UNSPECIFIED


@dataclass(frozen=True)
class SpanStatus:
    """Statut d'un span (code + message optionnel)."""

    code: StatusCode = StatusCode.UNSET
    message: Optional[str] = None


@dataclass(frozen=True)
class StackFrame:
    """Frame d'une stack trace capturée."""

    function_name: str
    file_name: str = ""
    line_number: int = 0


@dataclass(frozen=True)
class SpanEvent:
    """Événement horodaté attaché à un span."""

    name: str
    timestamp_unix_nano: int
    attributes: AttributePairs = ()


@dataclass(frozen=True)
class InternalSpan:
    """
    Span terminé tel que collecté par l'instrumentation.

    Les identifiants sont fournis par l'instrumentation (chaînes hexadécimales
    ou entiers). Les horodatages sont en nanosecondes depuis l'epoch Unix.
    """

    trace_id: Union[str, int]
    span_id: Union[str, int]
    name: str
    start_time_unix_nano: int
    end_time_unix_nano: int
    parent_span_id: Optional[Union[str, int]] = None
    kind: SpanKind = SpanKind.UNSPECIFIED
    status: SpanStatus = field(default_factory=SpanStatus)
    attributes: AttributePairs = ()
    events: Sequence[SpanEvent] = ()
    stack_trace: Optional[Sequence[StackFrame]] = None


def iter_attributes(attributes: Optional[AttributePairs]) -> Iterator[Tuple[str, Any]]:
    """Itère les paires clé/valeur quel que soit le conteneur fourni."""
    if not attributes:
        return iter(())
    if isinstance(attributes, Mapping):
        return iter(attributes.items())
    return iter(attributes)


def format_trace_id(trace_id: Union[str, int]) -> str:
    """Formate un trace id (entier -> 32 caractères hexadécimaux)."""
    if isinstance(trace_id, int):
        return f"{trace_id:032x}"
    return str(trace_id)


def format_span_id(span_id: Union[str, int]) -> str:
    """Formate un span id (entier -> 16 caractères hexadécimaux)."""
    if isinstance(span_id, int):
        return f"{span_id:016x}"
    return str(span_id)


def format_parent_span_id(parent_span_id: Optional[Union[str, int]]) -> Optional[str]:
    """
    Formate l'id du span parent.

    Returns:
        None si absent ou nul (span racine)
    """
    if parent_span_id is None:
        return None
    if isinstance(parent_span_id, int):
        return format_span_id(parent_span_id) if parent_span_id != 0 else None
    value = str(parent_span_id).strip()
    if not value.strip("0"):
        return None
    return value
