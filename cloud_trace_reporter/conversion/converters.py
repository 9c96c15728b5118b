"""
Conversion - Converters par défaut

Implémentations par défaut des conversions statut / kind / stack trace,
et adaptateurs permettant de fournir une simple fonction en configuration.

Règle de troncature de la stack trace:
    Les frames sont ordonnées de la plus interne à la plus externe. Au-delà
    de max_frames, les frames les plus externes (les plus anciennes) sont
    supprimées; les frames internes, les plus utiles au diagnostic, sont
    conservées.
"""

from typing import Any, Callable, Optional, Sequence

from ..model import (
    MAX_FRAME_STRING_BYTES,
    MAX_STACK_FRAMES,
    BackendSpanKind,
    BackendStackFrame,
    BackendStackTrace,
    BackendStatus,
    SpanKind,
    SpanStatus,
    StackFrame,
    StatusCode,
    TruncatableString,
)
from .interfaces import IStackTraceConverter, ISpanKindConverter, IStatusConverter


# Codes google.rpc.Code
GRPC_CODE_OK: int = 0
GRPC_CODE_UNKNOWN: int = 2


class DefaultStatusConverter(IStatusConverter):
    """
    UNSET -> pas de statut, OK -> code 0, ERROR -> code 2 (UNKNOWN).

    Tout autre code est traité comme non spécifié.
    """

    def convert(self, status: SpanStatus) -> Optional[BackendStatus]:
        code = getattr(status, "code", None)
        if code is StatusCode.OK:
            return BackendStatus(code=GRPC_CODE_OK)
        if code is StatusCode.ERROR:
            return BackendStatus(code=GRPC_CODE_UNKNOWN, message=status.message or None)
        return None


class DefaultSpanKindConverter(ISpanKindConverter):
    """Mapping 1:1, UNSPECIFIED ou inconnu -> SPAN_KIND_UNSPECIFIED."""

    _MAPPING = {
        SpanKind.INTERNAL: BackendSpanKind.INTERNAL,
        SpanKind.SERVER: BackendSpanKind.SERVER,
        SpanKind.CLIENT: BackendSpanKind.CLIENT,
        SpanKind.PRODUCER: BackendSpanKind.PRODUCER,
        SpanKind.CONSUMER: BackendSpanKind.CONSUMER,
    }

    def convert(self, kind: SpanKind) -> BackendSpanKind:
        return self._MAPPING.get(kind, BackendSpanKind.SPAN_KIND_UNSPECIFIED)


class DefaultStackTraceConverter(IStackTraceConverter):
    """Conserve les max_frames frames les plus internes."""

    def __init__(self, max_frames: int = MAX_STACK_FRAMES) -> None:
        """
        Args:
            max_frames: Nombre maximum de frames conservées

        Raises:
            ValueError: Si max_frames < 1
        """
        if max_frames < 1:
            raise ValueError("max_frames must be >= 1")
        self._max_frames = max_frames

    @property
    def max_frames(self) -> int:
        return self._max_frames

    def convert(self, frames: Sequence[StackFrame]) -> Optional[BackendStackTrace]:
        if not frames:
            return None

        kept = frames[: self._max_frames]
        return BackendStackTrace(
            frames=tuple(self._convert_frame(frame) for frame in kept),
            dropped_frames_count=len(frames) - len(kept),
        )

    def _convert_frame(self, frame: StackFrame) -> BackendStackFrame:
        return BackendStackFrame(
            function_name=TruncatableString.truncate(
                frame.function_name or "", MAX_FRAME_STRING_BYTES
            ),
            file_name=TruncatableString.truncate(frame.file_name or "", MAX_FRAME_STRING_BYTES),
            line_number=max(0, int(frame.line_number or 0)),
        )


class CallableStatusConverter(IStatusConverter):
    """Adapte une fonction status -> BackendStatus."""

    def __init__(self, func: Callable[[SpanStatus], Optional[BackendStatus]]) -> None:
        self._func = func

    def convert(self, status: SpanStatus) -> Optional[BackendStatus]:
        return self._func(status)


class CallableSpanKindConverter(ISpanKindConverter):
    """Adapte une fonction kind -> BackendSpanKind."""

    def __init__(self, func: Callable[[SpanKind], BackendSpanKind]) -> None:
        self._func = func

    def convert(self, kind: SpanKind) -> BackendSpanKind:
        return self._func(kind)


class CallableStackTraceConverter(IStackTraceConverter):
    """Adapte une fonction frames -> BackendStackTrace."""

    def __init__(
        self, func: Callable[[Sequence[StackFrame]], Optional[BackendStackTrace]]
    ) -> None:
        self._func = func

    def convert(self, frames: Sequence[StackFrame]) -> Optional[BackendStackTrace]:
        return self._func(frames)


def as_status_converter(value: Any) -> IStatusConverter:
    """
    Normalise une valeur de configuration en IStatusConverter.

    Raises:
        TypeError: Si la valeur n'est ni un converter ni un callable
    """
    if value is None:
        return DefaultStatusConverter()
    if isinstance(value, IStatusConverter):
        return value
    if callable(value):
        return CallableStatusConverter(value)
    raise TypeError(f"status_converter must be IStatusConverter or callable, got {type(value).__name__}")


def as_span_kind_converter(value: Any) -> ISpanKindConverter:
    """
    Normalise une valeur de configuration en ISpanKindConverter.

    Raises:
        TypeError: Si la valeur n'est ni un converter ni un callable
    """
    if value is None:
        return DefaultSpanKindConverter()
    if isinstance(value, ISpanKindConverter):
        return value
    if callable(value):
        return CallableSpanKindConverter(value)
    raise TypeError(f"span_kind_converter must be ISpanKindConverter or callable, got {type(value).__name__}")


def as_stack_trace_converter(value: Any) -> IStackTraceConverter:
    """
    Normalise une valeur de configuration en IStackTraceConverter.

    Raises:
        TypeError: Si la valeur n'est ni un converter ni un callable
    """
    if value is None:
        return DefaultStackTraceConverter()
    if isinstance(value, IStackTraceConverter):
        return value
    if callable(value):
        return CallableStackTraceConverter(value)
    raise TypeError(
        f"stack_trace_converter must be IStackTraceConverter or callable, got {type(value).__name__}"
    )
