"""
Sequence Alignment Module
Provides pairwise alignment (global, local, semi-global), statistics and
formatting
"""

from .errors import AlignmentError, MissingInputError, ScoringError
from .sequence import Sequence
from .scoring import (
    ScoringScheme,
    SIMPLE,
    BLAST_DNA,
    HIGH_IDENTITY,
    PRESETS
)
from .pairwise import (
    AlignmentMode,
    AlignmentResult,
    PairwiseAligner,
    align,
    global_align,
    local_align,
    semi_global_align,
    pairwise,
    align_many,
    align_async,
    align_many_async
)
from .statistics import (
    AlignmentStatistics,
    calculate_statistics,
    format_alignment,
    to_cigar
)

__all__ = [
    "AlignmentError",
    "MissingInputError",
    "ScoringError",
    "Sequence",
    "ScoringScheme",
    "SIMPLE",
    "BLAST_DNA",
    "HIGH_IDENTITY",
    "PRESETS",
    "AlignmentMode",
    "AlignmentResult",
    "PairwiseAligner",
    "align",
    "global_align",
    "local_align",
    "semi_global_align",
    "pairwise",
    "align_many",
    "align_async",
    "align_many_async",
    "AlignmentStatistics",
    "calculate_statistics",
    "format_alignment",
    "to_cigar"
]
