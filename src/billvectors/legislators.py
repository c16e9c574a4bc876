"""Parse congress-legislators YAML collections into LegislatorRecord instances.

The source files (``legislators-historical.yaml``, ``legislators-current.yaml``)
are lists of person entries, each with nested ``id``, ``name``, ``bio`` and
``terms`` sections. Parsing is split in two: PyYAML turns the text into plain
Python structures, then ``LegislatorParser`` walks one entry at a time, handing
each section to its own handler which fills in the fields of the entry being
built. Only this second half knows about the layout; everything downstream sees
frozen ``LegislatorRecord`` objects.

Malformed optional fields degrade to None. A missing file is fatal.
"""

import re
import warnings
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

import yaml

from billvectors.config import (
    CURRENT_LEGISLATORS_FILE,
    HISTORICAL_LEGISLATORS_FILE,
    TERM_TYPE_ROLES,
)
from billvectors.identifiers import pad_thomas_id
from billvectors.models import LegislatorRecord, ServiceTerm

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class LegislatorSourceError(FileNotFoundError):
    """A required legislator source collection is missing or unreadable."""


@dataclass(frozen=True)
class LegislatorSources:
    """The two legislator collections, in precedence order (current wins)."""

    historical: tuple[LegislatorRecord, ...]
    current: tuple[LegislatorRecord, ...]

    @property
    def collections(self) -> tuple[tuple[LegislatorRecord, ...], ...]:
        """Collections in build order: historical first, current last."""
        return (self.historical, self.current)

    def by_icpsr(self) -> dict[str, LegislatorRecord]:
        """Canonical id → record, current entries replacing historical ones."""
        out: dict[str, LegislatorRecord] = {}
        for collection in self.collections:
            for record in collection:
                if record.icpsr:
                    out[record.icpsr] = record
        return out


# ── Field coercion ───────────────────────────────────────────────────────────


def parse_date(value: object) -> date | None:
    """Coerce a YAML value to a date.

    PyYAML returns ``datetime.date`` for unquoted ISO dates and ``str`` for
    quoted ones; both are accepted. Strings must be exactly ``YYYY-MM-DD``.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and _ISO_DATE_RE.match(value.strip()):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError:
            return None
    return None


def _clean_str(value: object) -> str | None:
    """Strip a scalar to a non-empty string, or None."""
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def _clean_thomas(value: object) -> str | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return pad_thomas_id(value)
    return _clean_str(value)


# ── Entry parser ─────────────────────────────────────────────────────────────


@dataclass
class _EntryState:
    """Mutable fields of the entry currently being parsed."""

    icpsr: str | None = None
    bioguide: str | None = None
    thomas: str | None = None
    last_name: str | None = None
    first_name: str | None = None
    middle_name: str | None = None
    official_full: str | None = None
    birthday: date | None = None
    gender: str | None = None
    terms: list[ServiceTerm] = field(default_factory=list)

    def freeze(self) -> LegislatorRecord:
        return LegislatorRecord(
            icpsr=self.icpsr,
            bioguide=self.bioguide,
            thomas=self.thomas,
            last_name=self.last_name,
            first_name=self.first_name,
            middle_name=self.middle_name,
            official_full=self.official_full,
            birthday=self.birthday,
            gender=self.gender,
            terms=tuple(self.terms),
        )


class LegislatorParser:
    """Segments a loaded legislator collection into records.

    Each top-level key of an entry selects a section handler; unknown sections
    (``social``, ``leadership_roles``, ``family``, …) are ignored. Counters are
    kept for the run summary.
    """

    def __init__(self) -> None:
        self.entries_seen = 0
        self.entries_skipped = 0
        self.terms_seen = 0
        self.terms_dropped = 0
        self._handlers = {
            "id": self._parse_ids,
            "name": self._parse_name,
            "bio": self._parse_bio,
            "terms": self._parse_terms,
        }

    def parse(self, documents: object) -> list[LegislatorRecord]:
        """Parse a loaded YAML document (a list of entries) into records."""
        if documents is None:
            return []
        if not isinstance(documents, list):
            raise ValueError(
                f"Legislator collection must be a list of entries, got {type(documents).__name__}"
            )

        records: list[LegislatorRecord] = []
        skipped = 0
        for entry in documents:
            self.entries_seen += 1
            if not isinstance(entry, dict):
                skipped += 1
                continue
            records.append(self.parse_entry(entry))

        self.entries_skipped += skipped
        if skipped:
            warnings.warn(
                f"Skipped {skipped} non-mapping legislator entries",
                stacklevel=2,
            )
        return records

    def parse_entry(self, entry: dict) -> LegislatorRecord:
        state = _EntryState()
        for section, body in entry.items():
            handler = self._handlers.get(section)
            if handler is not None and body is not None:
                handler(state, body)
        return state.freeze()

    def _parse_ids(self, state: _EntryState, body: object) -> None:
        if not isinstance(body, dict):
            return
        state.icpsr = _clean_str(body.get("icpsr"))
        state.bioguide = _clean_str(body.get("bioguide"))
        state.thomas = _clean_thomas(body.get("thomas"))

    def _parse_name(self, state: _EntryState, body: object) -> None:
        if not isinstance(body, dict):
            return
        state.last_name = _clean_str(body.get("last"))
        state.first_name = _clean_str(body.get("first"))
        state.middle_name = _clean_str(body.get("middle"))
        state.official_full = _clean_str(body.get("official_full"))

    def _parse_bio(self, state: _EntryState, body: object) -> None:
        if not isinstance(body, dict):
            return
        state.birthday = parse_date(body.get("birthday"))
        state.gender = _clean_str(body.get("gender"))

    def _parse_terms(self, state: _EntryState, body: object) -> None:
        if not isinstance(body, list):
            return
        for raw in body:
            self.terms_seen += 1
            term = self._parse_term(raw)
            if term is None:
                self.terms_dropped += 1
            else:
                state.terms.append(term)

    @staticmethod
    def _parse_term(raw: object) -> ServiceTerm | None:
        """Build a ServiceTerm, or None when the fragment has no usable start."""
        if not isinstance(raw, dict):
            return None
        start = parse_date(raw.get("start"))
        if start is None:
            return None
        term_type = _clean_str(raw.get("type"))
        return ServiceTerm(
            role=TERM_TYPE_ROLES.get(term_type.lower()) if term_type else None,
            start=start,
            end=parse_date(raw.get("end")),
            party=_clean_str(raw.get("party")),
        )


# ── Loading ──────────────────────────────────────────────────────────────────


def load_legislator_file(
    path: Path, parser: LegislatorParser | None = None
) -> list[LegislatorRecord]:
    """Load and parse one legislator YAML file.

    Raises:
        LegislatorSourceError: If the file does not exist or is not valid YAML.
    """
    if not path.exists():
        raise LegislatorSourceError(f"Legislator source not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            documents = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LegislatorSourceError(f"Legislator source is not valid YAML: {path} ({e})") from e
    try:
        return (parser or LegislatorParser()).parse(documents)
    except ValueError as e:
        raise LegislatorSourceError(f"{path}: {e}") from e


def load_legislator_sources(legislators_dir: Path) -> LegislatorSources:
    """Load the historical and current collections from *legislators_dir*."""
    parser = LegislatorParser()
    historical = load_legislator_file(legislators_dir / HISTORICAL_LEGISLATORS_FILE, parser)
    current = load_legislator_file(legislators_dir / CURRENT_LEGISLATORS_FILE, parser)
    print(
        f"  Legislators: {len(historical):,} historical, {len(current):,} current"
        f" ({parser.terms_seen - parser.terms_dropped:,} usable terms,"
        f" {parser.terms_dropped:,} dropped)"
    )
    return LegislatorSources(historical=tuple(historical), current=tuple(current))
