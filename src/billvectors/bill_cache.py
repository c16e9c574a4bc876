"""Per-session cache of normalized BillRecords (parquet via polars).

Normalizing a session means reading thousands of JSON documents, so each
session's table is written to ``<cache_dir>/bills_<congress>.parquet`` and
reused on later runs. A cached table missing any column in
:data:`CACHE_SCHEMA` is stale and gets rebuilt, as does any table when the
caller asks for a rebuild.
"""

from pathlib import Path

import polars as pl

from billvectors.bills import NormalizationStats, normalize_session
from billvectors.identifiers import IdentifierIndex
from billvectors.models import BillRecord
from billvectors.session import CongressSession

CACHE_SCHEMA = {
    "bill_id": pl.Utf8,
    "sponsor": pl.Utf8,
    "cosponsors": pl.List(pl.Utf8),
    "introduced": pl.Utf8,
    "year": pl.Utf8,
    "chamber": pl.Utf8,
}
"""Columns every cached session table must carry."""


def records_to_frame(records: list[BillRecord]) -> pl.DataFrame:
    """BillRecords → DataFrame with :data:`CACHE_SCHEMA` columns, order preserved."""
    return pl.DataFrame(
        {
            "bill_id": [r.bill_id for r in records],
            "sponsor": [r.sponsor for r in records],
            "cosponsors": [list(r.cosponsors) for r in records],
            "introduced": [r.introduced for r in records],
            "year": [r.year for r in records],
            "chamber": [r.chamber for r in records],
        },
        schema=CACHE_SCHEMA,
    )


def frame_to_records(df: pl.DataFrame) -> list[BillRecord]:
    """DataFrame → BillRecords in row order."""
    return [
        BillRecord(
            bill_id=row["bill_id"],
            sponsor=row["sponsor"],
            cosponsors=tuple(row["cosponsors"]),
            introduced=row["introduced"],
            year=row["year"],
            chamber=row["chamber"],
        )
        for row in df.select(list(CACHE_SCHEMA)).iter_rows(named=True)
    ]


def missing_columns(df: pl.DataFrame) -> list[str]:
    return [c for c in CACHE_SCHEMA if c not in df.columns]


def read_session_cache(path: Path) -> list[BillRecord] | None:
    """Cached records for a session, or None if absent, unreadable, or stale."""
    if not path.exists():
        return None
    try:
        df = pl.read_parquet(path)
    except (pl.exceptions.PolarsError, OSError) as e:
        print(f"    Cache unreadable ({e}), rebuilding: {path.name}")
        return None
    missing = missing_columns(df)
    if missing:
        print(f"    Cache stale (missing {', '.join(missing)}), rebuilding: {path.name}")
        return None
    return frame_to_records(df)


def write_session_cache(path: Path, records: list[BillRecord]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    records_to_frame(records).write_parquet(path)


def load_or_build_session(
    session: CongressSession,
    data_dir: Path,
    cache_dir: Path,
    index: IdentifierIndex,
    rebuild: bool = False,
) -> tuple[list[BillRecord], NormalizationStats | None]:
    """Return a session's records, from cache when possible.

    Stats are None when the records came from the cache.
    """
    cache_path = cache_dir / session.cache_name
    if not rebuild:
        cached = read_session_cache(cache_path)
        if cached is not None:
            return cached, None

    records, stats = normalize_session(session, data_dir, index)
    write_session_cache(cache_path, records)
    return records, stats
