"""
Conversion - Interfaces

Contrats des conversions enfichables appliquées à chaque span:
- Mapping des clés d'attributs vers l'espace de noms du backend
- Conversion du statut, du span kind et de la stack trace

Invariants:
    - Toutes les conversions sont pures (pas d'effet de bord)
    - Toutes les conversions par défaut sont totales (jamais d'exception)
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional, Sequence

from ..model import (
    BackendSpanKind,
    BackendStackTrace,
    BackendStatus,
    SpanKind,
    SpanStatus,
    StackFrame,
)


class IAttributeMapper(ABC):
    """Interface mapping des clés d'attributs."""

    @abstractmethod
    def map(self, key: str) -> str:
        """
        Retourne la clé backend pour une clé d'attribut interne.

        Args:
            key: Clé interne

        Returns:
            Clé backend (la clé elle-même si aucun mapping)
        """
        pass

    @property
    @abstractmethod
    def mappings(self) -> Mapping[str, str]:
        """Table de mapping (lecture seule)."""
        pass


class IStatusConverter(ABC):
    """Interface conversion du statut."""

    @abstractmethod
    def convert(self, status: SpanStatus) -> Optional[BackendStatus]:
        """
        Convertit le statut interne.

        Args:
            status: Statut du span

        Returns:
            BackendStatus ou None (statut non spécifié côté backend)
        """
        pass


class ISpanKindConverter(ABC):
    """Interface conversion du span kind."""

    @abstractmethod
    def convert(self, kind: SpanKind) -> BackendSpanKind:
        """
        Convertit le span kind interne.

        Args:
            kind: Kind du span

        Returns:
            BackendSpanKind (SPAN_KIND_UNSPECIFIED si inconnu)
        """
        pass


class IStackTraceConverter(ABC):
    """Interface conversion de la stack trace."""

    @abstractmethod
    def convert(self, frames: Sequence[StackFrame]) -> Optional[BackendStackTrace]:
        """
        Convertit une stack trace (frame la plus interne en premier).

        Args:
            frames: Frames capturées

        Returns:
            BackendStackTrace ou None si aucune frame
        """
        pass
