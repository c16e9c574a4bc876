"""Shared fixtures for billvectors tests.

Provides a small synthetic legislator corpus (historical + current
collections) in both parsed and YAML-file form, plus a builder for bill
documents in the unitedstates/congress ``data.json`` layout.
"""

import json
from datetime import date
from pathlib import Path

import pytest
import yaml

from billvectors.identifiers import IdentifierIndex
from billvectors.legislators import LegislatorParser
from billvectors.models import LegislatorRecord, ServiceTerm
from billvectors.profiles import TemporalProfileIndex

# ── Legislator entries ───────────────────────────────────────────────────────
# 12109: House Republican 2003-2005, then Senate Republican (open term).
# 20100: House Democrat, one open term from 2015.
# 30300: historical Senate entry, later re-listed in current with a new thomas id.
# No ICPSR: a member whose legacy ids cannot resolve.

HISTORICAL_ENTRIES: list[dict] = [
    {
        "id": {"bioguide": "A000001", "thomas": "00001", "icpsr": 12109},
        "name": {"first": "Alice", "last": "Adams", "official_full": "Alice Adams"},
        "bio": {"birthday": "1950-03-04", "gender": "F"},
        "terms": [
            {"type": "rep", "start": "2003-01-07", "end": "2005-01-03", "party": "Republican"},
        ],
    },
    {
        "id": {"bioguide": "C000003", "thomas": "00003", "icpsr": 30300},
        "name": {"first": "Carl", "middle": "J.", "last": "Cole"},
        "bio": {"birthday": "1931-12-01", "gender": "M"},
        "terms": [
            {"type": "sen", "start": "1991-01-03", "end": "1997-01-03", "party": "Democrat"},
        ],
    },
    {
        "id": {"bioguide": "Z000009", "thomas": "00009"},
        "name": {"first": "Zed", "last": "Zimmer"},
        "terms": [{"type": "rep", "start": "1995-01-04", "end": "1997-01-03", "party": "Whig"}],
    },
]

CURRENT_ENTRIES: list[dict] = [
    {
        "id": {"bioguide": "A000001", "thomas": "00001", "icpsr": 12109},
        "name": {"first": "Alice", "last": "Adams", "official_full": "Alice Adams"},
        "bio": {"birthday": "1950-03-04", "gender": "F"},
        "terms": [
            {"type": "sen", "start": "2005-01-04", "party": "Republican"},
        ],
    },
    {
        "id": {"bioguide": "B000002", "icpsr": 20100},
        "name": {"first": "Bob", "last": "Brown"},
        "bio": {"gender": "M"},
        "terms": [
            {"type": "rep", "start": "2015-01-06", "party": "Democrat"},
        ],
    },
    {
        "id": {"bioguide": "C000003", "thomas": "00033", "icpsr": 30300},
        "name": {"first": "Carl", "middle": "J.", "last": "Cole"},
        "terms": [],
    },
]


@pytest.fixture
def historical_records() -> list[LegislatorRecord]:
    return LegislatorParser().parse(HISTORICAL_ENTRIES)


@pytest.fixture
def current_records() -> list[LegislatorRecord]:
    return LegislatorParser().parse(CURRENT_ENTRIES)


@pytest.fixture
def identifier_index(historical_records, current_records) -> IdentifierIndex:
    return IdentifierIndex.build(historical_records, current_records)


@pytest.fixture
def profile_index(historical_records, current_records) -> TemporalProfileIndex:
    return TemporalProfileIndex.build(historical_records, current_records)


@pytest.fixture
def legislators_dir(tmp_path: Path) -> Path:
    """Directory with legislators-historical.yaml and legislators-current.yaml."""
    d = tmp_path / "legislators"
    d.mkdir()
    (d / "legislators-historical.yaml").write_text(
        yaml.safe_dump(HISTORICAL_ENTRIES, sort_keys=False), encoding="utf-8"
    )
    (d / "legislators-current.yaml").write_text(
        yaml.safe_dump(CURRENT_ENTRIES, sort_keys=False), encoding="utf-8"
    )
    return d


# ── Terms and bills ──────────────────────────────────────────────────────────


def make_term(
    start: str,
    end: str | None = None,
    party: str | None = "Democrat",
    role: str | None = "lower",
) -> ServiceTerm:
    return ServiceTerm(
        role=role,
        start=date.fromisoformat(start),
        end=date.fromisoformat(end) if end else None,
        party=party,
    )


def make_bill(
    bill_id: str = "hr1-108",
    bill_type: str | None = "hr",
    congress: int | str | None = 108,
    introduced_at: str | None = "2003-01-08",
    status_at: str | None = None,
    sponsor: dict | None = None,
    cosponsors: list | None = None,
) -> dict:
    """Bill document in the unitedstates/congress data.json layout."""
    doc: dict = {"bill_id": bill_id, "bill_type": bill_type, "congress": congress}
    if introduced_at is not None:
        doc["introduced_at"] = introduced_at
    if status_at is not None:
        doc["status_at"] = status_at
    doc["sponsor"] = sponsor if sponsor is not None else {"bioguide_id": "A000001"}
    doc["cosponsors"] = cosponsors if cosponsors is not None else []
    return doc


def write_bill(data_dir: Path, congress: int, doc: dict) -> Path:
    """Write *doc* to <data_dir>/<congress>/bills/<type>/<bill_id>/data.json."""
    bill_dir = data_dir / str(congress) / "bills" / str(doc.get("bill_type")) / doc["bill_id"]
    bill_dir.mkdir(parents=True, exist_ok=True)
    path = bill_dir / "data.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path
