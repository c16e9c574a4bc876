"""billvectors - congressional bill sponsorship vectors with date-resolved party labels."""

__version__ = "2026.10.18"

from billvectors.identifiers import IdentifierIndex as IdentifierIndex
from billvectors.models import BillRecord as BillRecord
from billvectors.models import LegislatorRecord as LegislatorRecord
from billvectors.models import ServiceTerm as ServiceTerm
from billvectors.profiles import TemporalProfileIndex as TemporalProfileIndex
from billvectors.resolver import PartyResolver as PartyResolver
