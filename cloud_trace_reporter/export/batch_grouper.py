"""
Export - Batch Grouper

Regroupe les spans traduits par trace: le backend attend des écritures
limitées à une trace.

Invariants:
    - Ordre de première apparition des traces conservé
    - Ordre des spans à l'intérieur d'une trace conservé
    - Aucun batch vide
"""

from typing import Dict, Iterable, List

from ..model import ConvertedSpan, TraceBatch


class BatchGrouper:
    """Partitionne une collection de spans par trace id, en une passe."""

    def group(self, spans: Iterable[ConvertedSpan]) -> List[TraceBatch]:
        """
        Groupe les spans par trace.

        Args:
            spans: Spans traduits, dans l'ordre du flush

        Returns:
            Un TraceBatch par trace, dans l'ordre de première apparition
        """
        by_trace: Dict[str, List[ConvertedSpan]] = {}
        for span in spans:
            by_trace.setdefault(span.trace_id, []).append(span)

        return [
            TraceBatch(trace_id=trace_id, spans=tuple(trace_spans))
            for trace_id, trace_spans in by_trace.items()
        ]
