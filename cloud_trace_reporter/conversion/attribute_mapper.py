"""
Conversion - Attribute Mapper

Traduit les clés d'attributs de l'instrumentation vers les clés attendues
par Cloud Trace. Les clés absentes de la table sont conservées telles quelles.
"""

from types import MappingProxyType
from typing import Mapping, Optional

from .interfaces import IAttributeMapper


class AttributeMapper(IAttributeMapper):
    """
    Mapping immuable clé interne -> clé backend.

    Example:
        mapper = AttributeMapper({"http.method": "/http/method"})
        mapper.map("http.method")  # "/http/method"
        mapper.map("custom.key")   # "custom.key"
    """

    def __init__(self, mappings: Optional[Mapping[str, str]] = None) -> None:
        """
        Args:
            mappings: Table {clé source: clé cible} (copiée)
        """
        self._mappings: Mapping[str, str] = MappingProxyType(dict(mappings or {}))

    @property
    def mappings(self) -> Mapping[str, str]:
        return self._mappings

    def map(self, key: str) -> str:
        return self._mappings.get(key, key)

    def __len__(self) -> int:
        return len(self._mappings)

    def __repr__(self) -> str:
        return f"AttributeMapper({len(self._mappings)} mappings)"
