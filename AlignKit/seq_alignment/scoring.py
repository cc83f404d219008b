"""
Scoring schemes for match/mismatch + affine gap alignment
"""

import math
from dataclasses import dataclass
from numbers import Real
from typing import Dict

from .errors import ScoringError


@dataclass(frozen=True)
class ScoringScheme:
    """
    Match/mismatch scores plus affine gap costs (Gotoh model).

    All four values are added to the alignment score, so penalties are
    normally negative. gap_open is charged for the first residue of a gap
    run and gap_extend for every further residue of the same run.
    Any finite real is accepted; unusual signs just change which
    alignment is optimal.
    """
    match: float
    mismatch: float
    gap_open: float
    gap_extend: float

    def __post_init__(self):
        for name in ("match", "mismatch", "gap_open", "gap_extend"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ScoringError(f"{name} must be a real number, got {value!r}")
            if not math.isfinite(value):
                raise ScoringError(f"{name} must be finite, got {value!r}")

    def score(self, a: str, b: str) -> float:
        """Substitution score for two symbols"""
        return self.match if a == b else self.mismatch

    def gap_cost(self, length: int) -> float:
        """Total cost of a single gap run of the given length"""
        if length <= 0:
            return 0
        return self.gap_open + (length - 1) * self.gap_extend

    @classmethod
    def preset(cls, name: str) -> "ScoringScheme":
        """Look up a named preset ("simple", "blast", "high_identity")"""
        key = name.strip().lower().replace("-", "_")
        try:
            return PRESETS[key]
        except KeyError:
            raise ScoringError(
                f"Unknown scoring preset: {name!r} (known: {', '.join(sorted(PRESETS))})"
            ) from None


# Simple DNA scoring: +1 match, -1 mismatch
SIMPLE = ScoringScheme(match=1, mismatch=-1, gap_open=-2, gap_extend=-1)

# BLAST blastn defaults
BLAST_DNA = ScoringScheme(match=2, mismatch=-3, gap_open=-5, gap_extend=-2)

# Closely related sequences; steep gap opening
HIGH_IDENTITY = ScoringScheme(match=5, mismatch=-4, gap_open=-10, gap_extend=-1)

PRESETS: Dict[str, ScoringScheme] = {
    "simple": SIMPLE,
    "blast": BLAST_DNA,
    "high_identity": HIGH_IDENTITY,
}
