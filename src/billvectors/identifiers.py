"""Legacy identifier → canonical (ICPSR) identifier index.

Bill documents name sponsors by bioguide id (newer data) or thomas id (older
data). Every join downstream is keyed on ICPSR, so each legacy id is mapped
through this index once. Legislators without an ICPSR id contribute nothing:
their legacy ids stay unresolvable, which is expected for the oldest and the
newest members.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType

from billvectors.config import NA, THOMAS_ID_WIDTH
from billvectors.models import LegislatorRecord


def pad_thomas_id(value: int) -> str:
    """Thomas ids are zero-padded strings; integer sources lose the padding."""
    return str(value).zfill(THOMAS_ID_WIDTH)


class IdentifierIndex:
    """Read-only mapping from legacy id (either scheme) to canonical id.

    Build once per run with :meth:`build`; the mapping cannot be mutated
    afterwards and is safe to share between worker threads.
    """

    __slots__ = ("_mapping",)

    def __init__(self, mapping: Mapping[str, str]) -> None:
        self._mapping = MappingProxyType(dict(mapping))

    @classmethod
    def build(cls, *collections: Iterable[LegislatorRecord]) -> IdentifierIndex:
        """Index legislator collections given in ascending precedence.

        Pass the historical collection before the current one: a legacy id
        found in a later collection overrides the earlier mapping.
        """
        mapping: dict[str, str] = {}
        for collection in collections:
            for record in collection:
                if not record.icpsr:
                    continue
                for legacy_id in record.legacy_ids:
                    mapping[legacy_id] = record.icpsr
        return cls(mapping)

    def resolve(self, legacy_id: str | None) -> str:
        """Canonical id for *legacy_id*, or ``"NA"`` when unknown or absent."""
        if not legacy_id:
            return NA
        return self._mapping.get(legacy_id, NA)

    def __contains__(self, legacy_id: object) -> bool:
        return legacy_id in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    @property
    def canonical_ids(self) -> frozenset[str]:
        return frozenset(self._mapping.values())
