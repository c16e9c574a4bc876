"""Resolve a legislator's party (or chamber) on a given date.

Matching rules, applied to the terms of one canonical id:

1. Candidates are terms whose [start, end] interval contains the date; a term
   with no end contains every date on or after its start.
2. Among candidates the latest start wins. Overlapping or back-to-back terms
   therefore resolve to the most recent appointment. Equal starts keep the
   term seen first.
3. With no candidate, fall back to a year-only test
   (start year <= year <= end year) and take the first term that passes.
4. No match, or a match without a party label, gives ``"NA"``.

Callers that only want terms of one chamber pass ``role=`` and the terms are
filtered *before* the rules above run. The resolver never prefers one chamber
over another on its own.

Everything here is a pure function of its arguments. ``PartyResolver`` adds a
memo table on top; it never changes a result.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from billvectors.config import MID_YEAR_SUFFIX, NA, PARTY_PREFIXES, PARTY_SHORT_LABEL_MAX
from billvectors.models import ServiceTerm
from billvectors.profiles import TemporalProfileIndex

_FULL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_YEAR_RE = re.compile(r"^\d{4}$")


# ── Parsing and normalization ────────────────────────────────────────────────


def parse_query_date(value: date | str | None) -> date | None:
    """Parse ``YYYY-MM-DD``; a bare ``YYYY`` means July 1 of that year.

    Returns None for anything else, including the ``"NA"`` sentinel.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if _FULL_DATE_RE.match(text):
        try:
            return datetime.strptime(text, "%Y-%m-%d").date()
        except ValueError:
            pass
    if _YEAR_RE.match(text):
        return datetime.strptime(text + MID_YEAR_SUFFIX, "%Y-%m-%d").date()
    return None


def normalize_party(label: str | None) -> str:
    """Abbreviate a raw party label.

    The prefix table is checked first, so "Republican-Farmer-Labor" → "R".
    Labels of three characters or fewer that match no prefix are kept as
    uppercase ("DFL" → "DFL"). Anything else becomes its uppercased first
    letter ("Whig" → "W"). Whitespace inside a label is dropped first, so a
    code never spans two list items or two lines of output.

    Examples:
        "Democrat"   → "D"
        "democratic" → "D"
        "Unionist"   → "U"
        ""           → "NA"
    """
    if label is None:
        return NA
    text = "".join(label.split())
    if not text:
        return NA
    lower = text.lower()
    for prefix, code in PARTY_PREFIXES:
        if lower.startswith(prefix):
            return code
    if len(text) <= PARTY_SHORT_LABEL_MAX:
        return text.upper()
    return text[0].upper()


# ── Term selection ───────────────────────────────────────────────────────────


def filter_role(terms: Iterable[ServiceTerm], role: str | None) -> tuple[ServiceTerm, ...]:
    """Keep only terms served in *role*; None keeps everything."""
    if role is None:
        return tuple(terms)
    return tuple(t for t in terms if t.role == role)


def select_term(terms: Sequence[ServiceTerm], day: date) -> ServiceTerm | None:
    """Pick the term that best covers *day* (see module docstring)."""
    best: ServiceTerm | None = None
    for term in terms:
        if term.contains(day) and (best is None or term.start > best.start):
            best = term
    if best is not None:
        return best

    for term in terms:
        if term.contains_year(day.year):
            return term
    return None


def _matched_term(
    profiles: TemporalProfileIndex,
    icpsr: str | None,
    when: date | str | None,
    role: str | None,
) -> ServiceTerm | None:
    if not icpsr or icpsr == NA or icpsr not in profiles:
        return None
    day = parse_query_date(when)
    if day is None:
        return None
    return select_term(filter_role(profiles.terms_for(icpsr), role), day)


def resolve_party(
    profiles: TemporalProfileIndex,
    icpsr: str | None,
    when: date | str | None,
    role: str | None = None,
) -> str:
    """Party code for *icpsr* on *when*, or ``"NA"``. Never raises on bad input."""
    term = _matched_term(profiles, icpsr, when, role)
    if term is None:
        return NA
    return normalize_party(term.party)


def resolve_role(
    profiles: TemporalProfileIndex,
    icpsr: str | None,
    when: date | str | None,
) -> str:
    """Chamber ("upper"/"lower") the legislator served in on *when*, or ``"NA"``."""
    term = _matched_term(profiles, icpsr, when, None)
    if term is None or term.role is None:
        return NA
    return term.role


# ── Memoised resolver ────────────────────────────────────────────────────────


class PartyResolver:
    """Resolve parties against one profile index, memoising by (id, date, role).

    The same sponsor on the same day recurs across thousands of bills, so
    results are cached. Cached values are exactly what :func:`resolve_party`
    returns.
    """

    def __init__(self, profiles: TemporalProfileIndex) -> None:
        self.profiles = profiles
        self._cache: dict[tuple[str, str, str | None], str] = {}
        self._roles: dict[tuple[str, str], str] = {}
        self.lookups = 0
        self.unresolved = 0

    def party(self, icpsr: str, when: str, role: str | None = None) -> str:
        self.lookups += 1
        key = (icpsr, when, role)
        code = self._cache.get(key)
        if code is None:
            code = resolve_party(self.profiles, icpsr, when, role)
            self._cache[key] = code
        if code == NA:
            self.unresolved += 1
        return code

    def parties(self, icpsrs: Iterable[str], when: str, role: str | None = None) -> list[str]:
        """Party code per id, same order and length as *icpsrs*."""
        return [self.party(i, when, role) for i in icpsrs]

    def role(self, icpsr: str, when: str) -> str:
        """Chamber served in on *when*; not counted in lookups."""
        key = (icpsr, when)
        chamber = self._roles.get(key)
        if chamber is None:
            chamber = resolve_role(self.profiles, icpsr, when)
            self._roles[key] = chamber
        return chamber
