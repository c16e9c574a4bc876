"""Per-legislator service histories keyed by canonical id.

Terms keep their source order: historical collection first, then current,
each in file order. Terms are not sorted, merged, or deduplicated; party
labels are stored raw so the original text stays available for auditing.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from billvectors.models import LegislatorRecord, ServiceTerm


class TemporalProfileIndex:
    """Read-only mapping from canonical id to its ServiceTerms."""

    __slots__ = ("_terms",)

    def __init__(self, terms: Mapping[str, tuple[ServiceTerm, ...]]) -> None:
        self._terms = MappingProxyType({k: tuple(v) for k, v in terms.items()})

    @classmethod
    def build(cls, *collections: Iterable[LegislatorRecord]) -> TemporalProfileIndex:
        """Concatenate terms for each canonical id across *collections*.

        Records without a canonical id are skipped; nothing could look them up.
        Terms reaching this point already have a start date (the parser drops
        the rest).
        """
        terms: dict[str, list[ServiceTerm]] = {}
        for collection in collections:
            for record in collection:
                if not record.icpsr:
                    continue
                terms.setdefault(record.icpsr, []).extend(record.terms)
        return cls({k: tuple(v) for k, v in terms.items()})

    def terms_for(self, icpsr: str) -> tuple[ServiceTerm, ...]:
        """All terms for *icpsr*, or an empty tuple when unknown."""
        return self._terms.get(icpsr, ())

    def __contains__(self, icpsr: object) -> bool:
        return icpsr in self._terms

    def __len__(self) -> int:
        return len(self._terms)
