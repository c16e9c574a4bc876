"""Configuration constants for the bill vector pipeline."""

try:
    from importlib.metadata import version as _pkg_version

    _VERSION = _pkg_version("billvectors")
except Exception:
    _VERSION = "dev"

NA = "NA"  # sentinel for absent/unresolved values in every output

# Year derivation from a session number: 1787 + 2 * (session - 1)
SESSION_BASE_YEAR = 1787
MID_YEAR_SUFFIX = "-07-01"  # placeholder month/day when only a year is known

DEFAULT_SESSIONS: tuple[int, ...] = tuple(range(103, 114))  # 103rd-113th, eleven sessions

# Bill-type codes by chamber. Anything not listed falls back to DEFAULT_CHAMBER.
UPPER_BILL_TYPES = frozenset({"s", "sres", "sjres", "sconres"})
LOWER_BILL_TYPES = frozenset({"hr", "hres", "hjres", "hconres"})
DEFAULT_CHAMBER = "lower"

CHAMBER_CODES: dict[str, str] = {"upper": "1", "lower": "0"}

# congress-legislators term "type" field → chamber
TERM_TYPE_ROLES: dict[str, str] = {"sen": "upper", "rep": "lower"}

# Checked in order, case-insensitive prefix match on the raw party label
PARTY_PREFIXES: tuple[tuple[str, str], ...] = (
    ("democrat", "D"),
    ("republican", "R"),
    ("independent", "I"),
    ("libertarian", "L"),
    ("green", "G"),
)
PARTY_SHORT_LABEL_MAX = 3  # labels this short are kept verbatim (uppercased)

THOMAS_ID_WIDTH = 5  # thomas ids are zero-padded strings in bill documents

# Input / output file names
HISTORICAL_LEGISLATORS_FILE = "legislators-historical.yaml"
CURRENT_LEGISLATORS_FILE = "legislators-current.yaml"
BILL_DOCUMENT_NAME = "data.json"

VECTOR_FILES: dict[str, str] = {
    "sponsor": "sponsors.txt",
    "cosponsors": "cosponsors.txt",
    "year": "years.txt",
    "chamber": "chambers.txt",
    "sponsor_party": "sponsor_party.txt",
    "cosponsor_parties": "cosponsor_party.txt",
}
LIST_SEPARATOR = " "  # joins cosponsor ids and party codes within one line

REFERENCE_TABLE_FILES: dict[str, str] = {
    "upper": "upper_legislators.csv",
    "lower": "lower_legislators.csv",
}
MANIFEST_FILE = "manifest.json"

MAX_WORKERS = 4  # concurrent session normalization threads
