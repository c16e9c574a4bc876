"""Normalize per-bill JSON documents into BillRecords.

Input is the unitedstates/congress layout: one ``data.json`` per bill under
``<data_dir>/<congress>/bills/<type>/<type><number>/``. Each document carries
``bill_type``, ``congress``, ``introduced_at``, ``status_at``, a ``sponsor``
object and a ``cosponsors`` list; people are named by ``bioguide_id`` and/or
``thomas_id``.

Normalization never fails on a bad field: ids that do not resolve become
``"NA"`` (sponsor) or are dropped (cosponsors), dates fall back to a mid-year
placeholder, unknown bill types count as lower-chamber. Only a document that
is not valid JSON stops the run.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, fields
from pathlib import Path

from billvectors.config import (
    BILL_DOCUMENT_NAME,
    DEFAULT_CHAMBER,
    LOWER_BILL_TYPES,
    MID_YEAR_SUFFIX,
    NA,
    UPPER_BILL_TYPES,
)
from billvectors.identifiers import IdentifierIndex, pad_thomas_id
from billvectors.models import BillRecord
from billvectors.session import CongressSession, session_year

_DATE_PREFIX_RE = re.compile(r"^(\d{4})(-\d{2}-\d{2})?")


class BillDocumentError(ValueError):
    """A bill document could not be parsed as JSON."""


class SessionDataError(FileNotFoundError):
    """A session's bill directory does not exist."""


@dataclass
class NormalizationStats:
    """Per-session counters for the run summary and manifest."""

    bills: int = 0
    sponsors_resolved: int = 0
    sponsors_unresolved: int = 0
    cosponsors_resolved: int = 0
    cosponsors_dropped: int = 0
    dates_from_status: int = 0
    dates_synthesized: int = 0
    dates_missing: int = 0
    chamber_defaulted: int = 0

    def merge(self, other: NormalizationStats) -> None:
        for f in fields(self):
            setattr(self, f.name, getattr(self, f.name) + getattr(other, f.name))

    def as_dict(self) -> dict[str, int]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ── Field derivation ─────────────────────────────────────────────────────────


def chamber_for_bill_type(bill_type: object) -> tuple[str, bool]:
    """Map a bill-type code to ("upper" | "lower", recognized).

    Codes outside the known set count as lower chamber.
    """
    code = bill_type.strip().lower() if isinstance(bill_type, str) else ""
    if code in UPPER_BILL_TYPES:
        return "upper", True
    if code in LOWER_BILL_TYPES:
        return "lower", True
    return DEFAULT_CHAMBER, False


def _timestamp_parts(value: object) -> tuple[str, str | None] | None:
    """Split a timestamp into (year, full date or None); None if unusable."""
    if not isinstance(value, str):
        return None
    m = _DATE_PREFIX_RE.match(value.strip())
    if not m:
        return None
    year = m.group(1)
    full = year + m.group(2) if m.group(2) else None
    return year, full


def _session_number(value: object, fallback: int | None) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return fallback


def derive_dates(
    doc: dict,
    session_number: int | None = None,
    stats: NormalizationStats | None = None,
) -> tuple[str, str]:
    """Return (introduced date, year) for a bill document.

    Date: ``introduced_at``, else ``status_at``, else ``YEAR-07-01`` from the
    derived year, else ``"NA"``. Year: the timestamp's four-digit prefix, else
    ``1787 + 2*(congress-1)``, else ``"NA"``.
    """
    stats = stats if stats is not None else NormalizationStats()

    parts = _timestamp_parts(doc.get("introduced_at"))
    if parts is None:
        parts = _timestamp_parts(doc.get("status_at"))
        if parts is not None:
            stats.dates_from_status += 1

    if parts is not None:
        year, full = parts
    else:
        number = _session_number(doc.get("congress"), session_number)
        year = str(session_year(number)) if number is not None and number > 0 else NA
        full = None

    if full is not None:
        return full, year
    if year == NA:
        stats.dates_missing += 1
        return NA, NA
    stats.dates_synthesized += 1
    return year + MID_YEAR_SUFFIX, year


def person_legacy_id(person: object) -> str | None:
    """Legacy id to look up for a sponsor/cosponsor: bioguide first, then thomas.

    An integer thomas id is padded the same way as on the legislator side.
    """
    if not isinstance(person, dict):
        return None
    for key in ("bioguide_id", "thomas_id"):
        value = person.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            value = pad_thomas_id(value) if key == "thomas_id" else str(value)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


# ── Normalization ────────────────────────────────────────────────────────────


def normalize_bill(
    doc: dict,
    index: IdentifierIndex,
    session_number: int | None = None,
    fallback_bill_id: str = NA,
    stats: NormalizationStats | None = None,
) -> BillRecord:
    """Build a BillRecord from one parsed bill document."""
    stats = stats if stats is not None else NormalizationStats()
    stats.bills += 1

    introduced, year = derive_dates(doc, session_number, stats)

    chamber, recognized = chamber_for_bill_type(doc.get("bill_type"))
    if not recognized:
        stats.chamber_defaulted += 1

    sponsor = index.resolve(person_legacy_id(doc.get("sponsor")))
    if sponsor == NA:
        stats.sponsors_unresolved += 1
    else:
        stats.sponsors_resolved += 1

    raw_cosponsors = doc.get("cosponsors")
    if not isinstance(raw_cosponsors, list):
        raw_cosponsors = []
    cosponsors: list[str] = []
    for person in raw_cosponsors:
        icpsr = index.resolve(person_legacy_id(person))
        if icpsr == NA:
            stats.cosponsors_dropped += 1
        else:
            cosponsors.append(icpsr)
    stats.cosponsors_resolved += len(cosponsors)

    bill_id = doc.get("bill_id")
    if not isinstance(bill_id, str) or not bill_id.strip():
        bill_id = fallback_bill_id

    return BillRecord(
        bill_id=bill_id.strip(),
        sponsor=sponsor,
        cosponsors=tuple(cosponsors) if cosponsors else (NA,),
        introduced=introduced,
        year=year,
        chamber=chamber,
    )


# ── Session loading ──────────────────────────────────────────────────────────


def iter_bill_documents(bills_dir: Path) -> list[Path]:
    """All bill documents under *bills_dir*, in stable (sorted path) order."""
    return sorted(bills_dir.rglob(BILL_DOCUMENT_NAME))


def load_bill_document(path: Path) -> dict:
    """Read one bill document.

    Raises:
        BillDocumentError: If the file is not a JSON object.
    """
    try:
        with open(path, encoding="utf-8") as f:
            doc = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise BillDocumentError(f"Cannot parse bill document {path}: {e}") from e
    if not isinstance(doc, dict):
        raise BillDocumentError(f"Bill document {path} is not a JSON object")
    return doc


def normalize_session(
    session: CongressSession,
    data_dir: Path,
    index: IdentifierIndex,
) -> tuple[list[BillRecord], NormalizationStats]:
    """Normalize every bill in one session, in source order.

    Raises:
        SessionDataError: If the session's bill directory is missing.
    """
    bills_dir = session.bills_dir(data_dir)
    if not bills_dir.is_dir():
        raise SessionDataError(f"No bill directory for {session.label}: {bills_dir}")

    stats = NormalizationStats()
    records = [
        normalize_bill(
            load_bill_document(path),
            index,
            session_number=session.number,
            fallback_bill_id=path.parent.name,
            stats=stats,
        )
        for path in iter_bill_documents(bills_dir)
    ]
    return records, stats
