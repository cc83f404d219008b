"""
Multiple Sequence Alignment Module
Progressive consensus alignment built on the pairwise engine
"""

from .progressive import (
    MultipleAlignmentResult,
    multiple_align,
    derive_consensus,
    write_fasta
)

__all__ = [
    "MultipleAlignmentResult",
    "multiple_align",
    "derive_consensus",
    "write_fasta"
]
