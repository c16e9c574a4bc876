"""Data models for legislators, service terms, bills, and vector rows."""

from dataclasses import dataclass
from datetime import date

from billvectors.config import NA


@dataclass(frozen=True)
class ServiceTerm:
    """One stint of elected service.

    ``end`` of None means the term is ongoing (open interval). ``party`` is the
    raw label from the source file; it is normalized only at lookup time.
    """

    role: str | None  # "upper", "lower", or None for unrecognized term types
    start: date
    end: date | None
    party: str | None

    def contains(self, day: date) -> bool:
        """True if *day* falls inside [start, end] (end unbounded when open)."""
        if day < self.start:
            return False
        return self.end is None or day <= self.end

    def contains_year(self, year: int) -> bool:
        """Year-only containment: start year <= year <= end year."""
        if year < self.start.year:
            return False
        return self.end is None or year <= self.end.year


@dataclass(frozen=True)
class LegislatorRecord:
    """One person entry from a legislator source collection."""

    icpsr: str | None  # canonical id; None → unresolvable
    bioguide: str | None = None
    thomas: str | None = None
    last_name: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    official_full: str | None = None
    birthday: date | None = None
    gender: str | None = None
    terms: tuple[ServiceTerm, ...] = ()

    @property
    def legacy_ids(self) -> tuple[str, ...]:
        return tuple(i for i in (self.bioguide, self.thomas) if i)

    @property
    def display_name(self) -> str:
        if self.official_full:
            return self.official_full
        parts = [p for p in (self.first_name, self.middle_name, self.last_name) if p]
        return " ".join(parts) if parts else NA


@dataclass(frozen=True)
class BillRecord:
    """Normalized bill: resolved sponsor/cosponsors plus date, year, and chamber.

    ``cosponsors`` holds resolved canonical ids in source order. When none
    resolve it is the single sentinel ``("NA",)``.
    """

    bill_id: str
    sponsor: str
    cosponsors: tuple[str, ...]
    introduced: str
    year: str
    chamber: str  # "upper" or "lower"


@dataclass(frozen=True)
class VectorRow:
    """One line of each of the six aligned output sequences."""

    sponsor: str
    cosponsors: str
    year: str
    chamber: str
    sponsor_party: str
    cosponsor_parties: str
