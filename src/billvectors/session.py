"""Congressional session numbering and per-session paths.

A session is one numbered Congress. Bills for a session live under
``<data_dir>/<number>/bills/`` and its normalized table is cached as
``bills_<number>.parquet``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from billvectors.config import SESSION_BASE_YEAR


def _ordinal(n: int) -> str:
    """Return ordinal string for a number (e.g., 1 → '1st', 113 → '113th')."""
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def session_year(number: int) -> int:
    """Year assigned to a session when a bill carries no usable timestamp."""
    return SESSION_BASE_YEAR + 2 * (number - 1)


@dataclass(frozen=True)
class CongressSession:
    """A numbered congressional session."""

    number: int

    @property
    def label(self) -> str:
        """Human-readable label, e.g. '108th Congress'."""
        return f"{_ordinal(self.number)} Congress"

    @property
    def derived_year(self) -> int:
        return session_year(self.number)

    def bills_dir(self, data_dir: Path) -> Path:
        return data_dir / str(self.number) / "bills"

    @property
    def cache_name(self) -> str:
        return f"bills_{self.number}.parquet"

    @classmethod
    def parse(cls, text: str) -> CongressSession:
        """Parse '108', '108th', or '108th Congress' into a session.

        Raises:
            ValueError: If *text* does not start with a positive session number.
        """
        head = text.strip().split()[0] if text.strip() else ""
        digits = head.rstrip("stndrh")
        if not digits.isdigit() or int(digits) < 1:
            raise ValueError(f"Not a session number: {text!r}")
        return cls(int(digits))
