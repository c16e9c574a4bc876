"""Write the aligned bill vectors and per-chamber legislator reference tables.

Six text files, one line per bill, in the same row order:

    sponsors.txt          sponsor ICPSR id
    cosponsors.txt        cosponsor ICPSR ids, space separated
    years.txt             four-digit year
    chambers.txt          1 = upper (Senate), 0 = lower (House)
    sponsor_party.txt     sponsor party code on the introduction date
    cosponsor_party.txt   one party code per cosponsor id, same order

Every downstream analysis joins these files by line number, so after writing
the line counts are compared and any mismatch stops the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import polars as pl

from billvectors.config import (
    CHAMBER_CODES,
    LIST_SEPARATOR,
    NA,
    REFERENCE_TABLE_FILES,
    VECTOR_FILES,
)
from billvectors.models import BillRecord, LegislatorRecord, VectorRow
from billvectors.resolver import PartyResolver


class VectorAlignmentError(ValueError):
    """The output sequences ended up with different row counts."""


@dataclass
class SeenLegislators:
    """Canonical ids that appear in the emitted vectors, split by bill chamber.

    ``cross_chamber`` holds sponsors who, on the introduction date, were
    serving in the other chamber from the bill's.
    """

    upper: set[str] = field(default_factory=set)
    lower: set[str] = field(default_factory=set)
    cross_chamber: set[str] = field(default_factory=set)

    def add(self, chamber: str, icpsrs: tuple[str, ...] | list[str]) -> None:
        target = self.upper if chamber == "upper" else self.lower
        target.update(i for i in icpsrs if i != NA)

    def for_chamber(self, chamber: str) -> set[str]:
        return self.upper if chamber == "upper" else self.lower


# ── Row construction ─────────────────────────────────────────────────────────


def build_vector_row(
    record: BillRecord,
    resolver: PartyResolver,
    seen: SeenLegislators,
    match_chamber: bool = False,
) -> VectorRow:
    """Resolve parties for one bill and record its legislators in *seen*.

    With *match_chamber*, only terms served in the bill's chamber are
    considered when resolving party.
    """
    role = record.chamber if match_chamber else None
    sponsor_party = resolver.party(record.sponsor, record.introduced, role)
    cosponsor_parties = resolver.parties(record.cosponsors, record.introduced, role)

    seen.add(record.chamber, (record.sponsor, *record.cosponsors))
    sponsor_role = resolver.role(record.sponsor, record.introduced)
    if sponsor_role not in (NA, record.chamber):
        seen.cross_chamber.add(record.sponsor)

    return VectorRow(
        sponsor=record.sponsor,
        cosponsors=LIST_SEPARATOR.join(record.cosponsors),
        year=record.year,
        chamber=CHAMBER_CODES.get(record.chamber, NA),
        sponsor_party=sponsor_party,
        cosponsor_parties=LIST_SEPARATOR.join(cosponsor_parties),
    )


# ── Vector files ─────────────────────────────────────────────────────────────


def count_lines(path: Path) -> int:
    if not path.exists():
        return 0
    with open(path, encoding="utf-8") as f:
        return sum(1 for _ in f)


def check_alignment(counts: dict[str, int]) -> int:
    """Return the common row count.

    Raises:
        VectorAlignmentError: If the sequences differ in length.
    """
    distinct = set(counts.values())
    if len(distinct) > 1:
        detail = ", ".join(f"{name}={n:,}" for name, n in counts.items())
        raise VectorAlignmentError(f"Output vectors are misaligned: {detail}")
    return distinct.pop() if distinct else 0


class VectorWriter:
    """Appends rows to the six vector files, one batch per session."""

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.paths = {key: output_dir / name for key, name in VECTOR_FILES.items()}
        self.rows_written = 0

    def reset(self) -> None:
        """Create the output directory and truncate all six files."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        for path in self.paths.values():
            path.write_text("", encoding="utf-8")
        self.rows_written = 0

    def append(self, rows: list[VectorRow]) -> None:
        for key, path in self.paths.items():
            with open(path, "a", encoding="utf-8") as f:
                for row in rows:
                    f.write(getattr(row, key) + "\n")
        self.rows_written += len(rows)

    def line_counts(self) -> dict[str, int]:
        return {path.name: count_lines(path) for path in self.paths.values()}

    def verify(self) -> int:
        """Check the files on disk agree with each other and with what was written."""
        counts = self.line_counts()
        total = check_alignment(counts)
        if total != self.rows_written:
            raise VectorAlignmentError(
                f"Output vectors hold {total:,} rows but {self.rows_written:,} were written"
            )
        return total


def emit_session(
    records: list[BillRecord],
    resolver: PartyResolver,
    seen: SeenLegislators,
    writer: VectorWriter,
    match_chamber: bool = False,
) -> int:
    """Resolve and append one session's rows; returns the number of rows."""
    rows = [build_vector_row(r, resolver, seen, match_chamber) for r in records]
    writer.append(rows)
    return len(rows)


# ── Reference tables ─────────────────────────────────────────────────────────


def _id_sort_key(icpsr: str) -> tuple[int, int, str]:
    return (0, int(icpsr), "") if icpsr.isdigit() else (1, 0, icpsr)


def build_reference_table(
    icpsrs: set[str],
    legislators: dict[str, LegislatorRecord],
) -> pl.DataFrame:
    """One row per id: icpsr, name, birth_year, gender (``"NA"`` when unknown)."""
    rows = []
    for icpsr in sorted(icpsrs, key=_id_sort_key):
        record = legislators.get(icpsr)
        if record is None:
            rows.append((icpsr, NA, NA, NA))
            continue
        rows.append(
            (
                icpsr,
                record.display_name,
                str(record.birthday.year) if record.birthday else NA,
                record.gender or NA,
            )
        )
    columns = ("icpsr", "name", "birth_year", "gender")
    return pl.DataFrame(
        {name: [row[i] for row in rows] for i, name in enumerate(columns)},
        schema={name: pl.Utf8 for name in columns},
    )


def write_reference_tables(
    seen: SeenLegislators,
    legislators: dict[str, LegislatorRecord],
    output_dir: Path,
) -> dict[str, int]:
    """Write one CSV per chamber; returns row counts keyed by chamber."""
    counts: dict[str, int] = {}
    for chamber, filename in REFERENCE_TABLE_FILES.items():
        table = build_reference_table(seen.for_chamber(chamber), legislators)
        path = output_dir / filename
        table.write_csv(path)
        counts[chamber] = table.height
        print(f"  {path} ({table.height} rows)")
    return counts
