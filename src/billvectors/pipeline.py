"""
Bill vector build: legislator indexes → normalized bills → aligned vectors

Stages:
1. Load legislator YAML (historical + current) and build the identifier and
   service-term indexes. Both are read-only from here on.
2. Normalize each session's bill documents, reusing the per-session parquet
   cache unless it is stale or --rebuild is given. Sessions may be normalized
   in parallel; results are always consumed in session order.
3. Resolve sponsor/cosponsor parties on each bill's introduction date and
   append the six aligned vector files, one session at a time.
4. Check the six files have identical line counts, write the per-chamber
   reference tables and manifest.json.

Usage:
  uv run billvectors --data-dir data/congress --legislators-dir data/legislators
  uv run billvectors --sessions 108 109 110 --exclude 109
  uv run billvectors --rebuild --workers 8
  uv run billvectors --match-chamber

Outputs (in --output-dir):
  - sponsors.txt, cosponsors.txt, years.txt, chambers.txt,
    sponsor_party.txt, cosponsor_party.txt
  - upper_legislators.csv, lower_legislators.csv
  - manifest.json, run_info.json, run_log.txt
"""

from __future__ import annotations

import argparse
import json
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from billvectors.bill_cache import load_or_build_session
from billvectors.bills import BillDocumentError, NormalizationStats, SessionDataError
from billvectors.config import DEFAULT_SESSIONS, MANIFEST_FILE, MAX_WORKERS
from billvectors.identifiers import IdentifierIndex
from billvectors.legislators import (
    LegislatorSourceError,
    LegislatorSources,
    load_legislator_sources,
)
from billvectors.models import BillRecord
from billvectors.output import (
    SeenLegislators,
    VectorAlignmentError,
    VectorWriter,
    emit_session,
    write_reference_tables,
)
from billvectors.profiles import TemporalProfileIndex
from billvectors.resolver import PartyResolver
from billvectors.run_context import RunContext
from billvectors.session import CongressSession

FATAL_ERRORS = (LegislatorSourceError, SessionDataError, BillDocumentError, VectorAlignmentError)


@dataclass(frozen=True)
class PipelineConfig:
    data_dir: Path
    legislators_dir: Path
    cache_dir: Path
    output_dir: Path
    sessions: tuple[int, ...] = DEFAULT_SESSIONS
    exclude: frozenset[int] = frozenset()
    rebuild: bool = False
    match_chamber: bool = False
    workers: int = MAX_WORKERS


@dataclass
class PipelineResult:
    rows: int
    session_rows: dict[int, int]
    seen: SeenLegislators
    stats: dict[int, NormalizationStats | None] = field(default_factory=dict)
    reference_counts: dict[str, int] = field(default_factory=dict)
    party_lookups: int = 0
    party_unresolved: int = 0
    cross_chamber_sponsors: int = 0


@dataclass(frozen=True)
class Indexes:
    """Everything built once from the legislator sources."""

    sources: LegislatorSources
    identifiers: IdentifierIndex
    profiles: TemporalProfileIndex


def print_header(title: str) -> None:
    width = 72
    print(f"\n{'=' * width}")
    print(f"  {title}")
    print(f"{'=' * width}")


# ── Stages ───────────────────────────────────────────────────────────────────


def build_indexes(legislators_dir: Path) -> Indexes:
    """Parse legislator sources and build both read-only indexes."""
    sources = load_legislator_sources(legislators_dir)
    identifiers = IdentifierIndex.build(*sources.collections)
    profiles = TemporalProfileIndex.build(*sources.collections)
    print(f"  Identifier index: {len(identifiers):,} legacy ids")
    print(f"  Profile index: {len(profiles):,} legislators with terms")
    return Indexes(sources=sources, identifiers=identifiers, profiles=profiles)


def select_sessions(sessions: tuple[int, ...], exclude: frozenset[int]) -> list[CongressSession]:
    """Sessions to process, in the given order, minus exclusions."""
    return [CongressSession(n) for n in sessions if n not in exclude]


def check_session_dirs(sessions: list[CongressSession], data_dir: Path) -> None:
    """Raise SessionDataError for the first session without a bill directory."""
    for session in sessions:
        bills_dir = session.bills_dir(data_dir)
        if not bills_dir.is_dir():
            raise SessionDataError(f"No bill directory for {session.label}: {bills_dir}")


def normalize_sessions(
    sessions: list[CongressSession],
    config: PipelineConfig,
    identifiers: IdentifierIndex,
) -> list[tuple[list[BillRecord], NormalizationStats | None]]:
    """Load or build every session's records; output order matches *sessions*."""

    def _one(session: CongressSession) -> tuple[list[BillRecord], NormalizationStats | None]:
        return load_or_build_session(
            session, config.data_dir, config.cache_dir, identifiers, rebuild=config.rebuild
        )

    if config.workers <= 1 or len(sessions) <= 1:
        return [_one(s) for s in sessions]
    with ThreadPoolExecutor(max_workers=config.workers) as pool:
        return list(pool.map(_one, sessions))


def _print_stats(session: CongressSession, n_rows: int, stats: NormalizationStats | None) -> None:
    if stats is None:
        print(f"  {session.label}: {n_rows:,} bills (cached)")
        return
    print(
        f"  {session.label}: {n_rows:,} bills"
        f" | sponsors unresolved {stats.sponsors_unresolved:,}"
        f" | cosponsors dropped {stats.cosponsors_dropped:,}"
        f" | dates synthesized {stats.dates_synthesized:,}"
        f" | chamber defaulted {stats.chamber_defaulted:,}"
    )


def write_manifest(result: PipelineResult, output_dir: Path) -> Path:
    sessions: dict[str, dict] = {}
    for number, rows in result.session_rows.items():
        stats = result.stats.get(number)
        sessions[str(number)] = {
            "rows": rows,
            "cached": stats is None,
            "stats": stats.as_dict() if stats is not None else None,
        }
    manifest = {
        "rows": result.rows,
        "sessions": sessions,
        "reference_tables": result.reference_counts,
        "party_lookups": result.party_lookups,
        "party_unresolved": result.party_unresolved,
        "cross_chamber_sponsors": result.cross_chamber_sponsors,
    }
    path = output_dir / MANIFEST_FILE
    with open(path, "w") as f:
        json.dump(manifest, f, indent=2)
    return path


def run_pipeline(config: PipelineConfig, indexes: Indexes | None = None) -> PipelineResult:
    """Run every stage. Raises one of FATAL_ERRORS on unrecoverable input."""
    sessions = select_sessions(config.sessions, config.exclude)
    check_session_dirs(sessions, config.data_dir)

    if indexes is None:
        print_header("Building legislator indexes")
        indexes = build_indexes(config.legislators_dir)

    print_header(f"Normalizing {len(sessions)} sessions")
    normalized = normalize_sessions(sessions, config, indexes.identifiers)

    print_header("Emitting vectors")
    resolver = PartyResolver(indexes.profiles)
    seen = SeenLegislators()
    writer = VectorWriter(config.output_dir)
    writer.reset()

    result = PipelineResult(rows=0, session_rows={}, seen=seen)
    for session, (records, stats) in zip(sessions, normalized):
        n_rows = emit_session(records, resolver, seen, writer, match_chamber=config.match_chamber)
        result.session_rows[session.number] = n_rows
        result.stats[session.number] = stats
        _print_stats(session, n_rows, stats)

    result.rows = writer.verify()
    result.party_lookups = resolver.lookups
    result.party_unresolved = resolver.unresolved
    result.cross_chamber_sponsors = len(seen.cross_chamber)
    print(f"  Rows per vector file: {result.rows:,} (all six aligned)")
    print(f"  Party lookups: {resolver.lookups:,} ({resolver.unresolved:,} NA)")
    print(f"  Sponsors serving in the other chamber: {result.cross_chamber_sponsors:,}")

    print_header("Writing reference tables")
    result.reference_counts = write_reference_tables(
        seen, indexes.sources.by_icpsr(), config.output_dir
    )
    manifest_path = write_manifest(result, config.output_dir)
    print(f"  {manifest_path}")
    return result


# ── CLI ──────────────────────────────────────────────────────────────────────


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build aligned bill sponsorship vectors with date-resolved party codes"
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path("data/congress"),
        help="Root of per-session bill documents, <dir>/<congress>/bills/ (default: data/congress)",
    )
    parser.add_argument(
        "--legislators-dir",
        type=Path,
        default=Path("data/legislators"),
        help="Directory holding legislators-historical.yaml and legislators-current.yaml",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=Path("data/cache"),
        help="Per-session normalized bill tables (default: data/cache)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("results/vectors"),
        help="Vector files, reference tables, and run metadata (default: results/vectors)",
    )
    parser.add_argument(
        "--sessions",
        nargs="+",
        default=[str(n) for n in DEFAULT_SESSIONS],
        help="Sessions to include, in output order, e.g. 108 109th (default: 103-113)",
    )
    parser.add_argument("--exclude", nargs="*", default=[], help="Sessions to skip")
    parser.add_argument(
        "--rebuild",
        action="store_true",
        help="Ignore cached bill tables and re-normalize every session",
    )
    parser.add_argument(
        "--match-chamber",
        action="store_true",
        help="Resolve party using only terms served in the bill's chamber",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=MAX_WORKERS,
        help=f"Threads for session normalization, 1 = sequential (default: {MAX_WORKERS})",
    )
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        data_dir=args.data_dir,
        legislators_dir=args.legislators_dir,
        cache_dir=args.cache_dir,
        output_dir=args.output_dir,
        sessions=tuple(CongressSession.parse(s).number for s in args.sessions),
        exclude=frozenset(CongressSession.parse(s).number for s in args.exclude),
        rebuild=args.rebuild,
        match_chamber=args.match_chamber,
        workers=args.workers,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        config = config_from_args(args)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    try:
        with RunContext(config.output_dir, params=vars(args)) as ctx:
            result = run_pipeline(config)
            ctx.record("rows", result.rows)
            ctx.record("session_rows", result.session_rows)
    except FATAL_ERRORS as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
