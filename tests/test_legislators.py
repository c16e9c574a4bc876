"""
Tests for the legislator record parser in billvectors/legislators.py.

Covers date coercion, id cleaning, section-by-section entry parsing, term
filtering, and loading the two YAML collections from disk.

Run: uv run pytest tests/test_legislators.py -v
"""

from datetime import date, datetime

import pytest

from billvectors.legislators import (
    LegislatorParser,
    LegislatorSourceError,
    load_legislator_file,
    load_legislator_sources,
    parse_date,
)

# ── parse_date() ─────────────────────────────────────────────────────────────


class TestParseDate:
    """Coerce YAML scalars (quoted or unquoted) to dates."""

    def test_iso_string(self):
        assert parse_date("2003-01-07") == date(2003, 1, 7)

    def test_date_object(self):
        """Unquoted YAML dates arrive as datetime.date."""
        assert parse_date(date(2003, 1, 7)) == date(2003, 1, 7)

    def test_datetime_object(self):
        assert parse_date(datetime(2003, 1, 7, 12, 30)) == date(2003, 1, 7)

    def test_whitespace_stripped(self):
        assert parse_date(" 2003-01-07 ") == date(2003, 1, 7)

    def test_year_only_rejected(self):
        assert parse_date("2003") is None

    def test_invalid_day(self):
        assert parse_date("2003-02-30") is None

    def test_non_string(self):
        assert parse_date(20030107) is None
        assert parse_date(None) is None


# ── LegislatorParser ─────────────────────────────────────────────────────────


class TestParseEntry:
    """One entry → one LegislatorRecord."""

    def test_full_entry(self):
        record = LegislatorParser().parse_entry(
            {
                "id": {"bioguide": "A000001", "thomas": "00001", "icpsr": 12109},
                "name": {"first": "Alice", "middle": "B.", "last": "Adams"},
                "bio": {"birthday": "1950-03-04", "gender": "F"},
                "terms": [
                    {
                        "type": "rep",
                        "start": "2003-01-07",
                        "end": "2005-01-03",
                        "party": "Republican",
                    }
                ],
            }
        )
        assert record.icpsr == "12109"
        assert record.bioguide == "A000001"
        assert record.thomas == "00001"
        assert record.first_name == "Alice"
        assert record.middle_name == "B."
        assert record.last_name == "Adams"
        assert record.birthday == date(1950, 3, 4)
        assert record.gender == "F"
        assert len(record.terms) == 1
        term = record.terms[0]
        assert term.role == "lower"
        assert term.start == date(2003, 1, 7)
        assert term.end == date(2005, 1, 3)
        assert term.party == "Republican"

    def test_icpsr_string_kept(self):
        record = LegislatorParser().parse_entry({"id": {"icpsr": "29389"}})
        assert record.icpsr == "29389"

    def test_missing_icpsr_is_none(self):
        record = LegislatorParser().parse_entry({"id": {"bioguide": "Z000009"}})
        assert record.icpsr is None
        assert record.legacy_ids == ("Z000009",)

    def test_integer_thomas_padded(self):
        """An unquoted thomas id loses its zero padding in YAML; restore it."""
        record = LegislatorParser().parse_entry({"id": {"thomas": 42, "icpsr": 1}})
        assert record.thomas == "00042"

    def test_unknown_sections_ignored(self):
        record = LegislatorParser().parse_entry(
            {"id": {"icpsr": 1}, "social": {"twitter": "x"}, "family": [{"name": "y"}]}
        )
        assert record.icpsr == "1"

    def test_malformed_section_ignored(self):
        record = LegislatorParser().parse_entry({"id": "not-a-mapping", "name": ["x"]})
        assert record.icpsr is None
        assert record.first_name is None

    def test_senate_term_role(self):
        record = LegislatorParser().parse_entry(
            {"id": {"icpsr": 1}, "terms": [{"type": "sen", "start": "2005-01-04"}]}
        )
        assert record.terms[0].role == "upper"
        assert record.terms[0].end is None
        assert record.terms[0].party is None

    def test_unknown_term_type(self):
        record = LegislatorParser().parse_entry(
            {"id": {"icpsr": 1}, "terms": [{"type": "prez", "start": "2005-01-04"}]}
        )
        assert record.terms[0].role is None


class TestTermFiltering:
    """Terms without a usable start are dropped; malformed ends are open."""

    def test_startless_term_dropped(self):
        parser = LegislatorParser()
        record = parser.parse_entry(
            {
                "id": {"icpsr": 1},
                "terms": [
                    {"type": "rep", "end": "2005-01-03", "party": "Democrat"},
                    {"type": "rep", "start": "2005-01-04", "party": "Democrat"},
                ],
            }
        )
        assert len(record.terms) == 1
        assert parser.terms_seen == 2
        assert parser.terms_dropped == 1

    def test_non_mapping_term_dropped(self):
        parser = LegislatorParser()
        record = parser.parse_entry({"id": {"icpsr": 1}, "terms": ["2003", None]})
        assert record.terms == ()
        assert parser.terms_dropped == 2

    def test_malformed_end_treated_as_open(self):
        record = LegislatorParser().parse_entry(
            {"id": {"icpsr": 1}, "terms": [{"start": "2003-01-07", "end": "sometime"}]}
        )
        assert record.terms[0].end is None

    def test_term_order_preserved(self):
        record = LegislatorParser().parse_entry(
            {
                "id": {"icpsr": 1},
                "terms": [
                    {"start": "2005-01-04"},
                    {"start": "2001-01-03"},
                ],
            }
        )
        assert [t.start.year for t in record.terms] == [2005, 2001]


class TestParseCollection:
    """A collection is a list of entries."""

    def test_none_document(self):
        assert LegislatorParser().parse(None) == []

    def test_not_a_list(self):
        with pytest.raises(ValueError, match="list of entries"):
            LegislatorParser().parse({"id": {}})

    def test_non_mapping_entries_skipped(self):
        parser = LegislatorParser()
        with pytest.warns(UserWarning, match="Skipped 2"):
            records = parser.parse([{"id": {"icpsr": 1}}, "junk", 7])
        assert len(records) == 1
        assert parser.entries_skipped == 2
        assert parser.entries_seen == 3


# ── Loading from disk ────────────────────────────────────────────────────────


class TestLoadSources:
    """YAML files on disk."""

    def test_loads_both_collections(self, legislators_dir):
        sources = load_legislator_sources(legislators_dir)
        assert len(sources.historical) == 3
        assert len(sources.current) == 3

    def test_quoted_thomas_survives_round_trip(self, legislators_dir):
        sources = load_legislator_sources(legislators_dir)
        assert sources.historical[0].thomas == "00001"

    def test_by_icpsr_prefers_current(self, legislators_dir):
        sources = load_legislator_sources(legislators_dir)
        by_icpsr = sources.by_icpsr()
        assert by_icpsr["30300"].thomas == "00033"
        assert "12109" in by_icpsr
        assert len(by_icpsr) == 3  # the entry without ICPSR is not indexed

    def test_missing_file_is_fatal(self, tmp_path):
        with pytest.raises(LegislatorSourceError, match="not found"):
            load_legislator_sources(tmp_path)

    def test_missing_file_is_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_legislator_file(tmp_path / "nope.yaml")

    def test_invalid_yaml_is_fatal(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- id: {icpsr: [1\n", encoding="utf-8")
        with pytest.raises(LegislatorSourceError, match="not valid YAML"):
            load_legislator_file(path)

    def test_mapping_document_is_fatal(self, tmp_path):
        path = tmp_path / "map.yaml"
        path.write_text("id: {icpsr: 1}\n", encoding="utf-8")
        with pytest.raises(LegislatorSourceError, match="list of entries"):
            load_legislator_file(path)

    def test_unquoted_dates(self, tmp_path):
        """PyYAML turns unquoted ISO dates into date objects."""
        path = tmp_path / "dates.yaml"
        path.write_text(
            "- id: {icpsr: 5}\n"
            "  bio: {birthday: 1940-05-06}\n"
            "  terms:\n"
            "  - {type: rep, start: 1993-01-05, end: 1995-01-03, party: Democrat}\n",
            encoding="utf-8",
        )
        (record,) = load_legislator_file(path)
        assert record.birthday == date(1940, 5, 6)
        assert record.terms[0].start == date(1993, 1, 5)
        assert record.terms[0].end == date(1995, 1, 3)
