"""
Alignment statistics and text formatting
"""

from dataclasses import dataclass
from typing import ClassVar, List, Optional

from .errors import MissingInputError
from .pairwise import GAP, AlignmentResult


@dataclass(frozen=True)
class AlignmentStatistics:
    """Column counts of a pairwise alignment; percentages are in [0, 100]"""
    matches: int
    mismatches: int
    gaps: int
    alignment_length: int
    identity: float
    similarity: float
    gap_percent: float

    EMPTY: ClassVar["AlignmentStatistics"]

    def __str__(self) -> str:
        return (
            f"Length: {self.alignment_length}\n"
            f"Matches: {self.matches}\n"
            f"Mismatches: {self.mismatches}\n"
            f"Gaps: {self.gaps}\n"
            f"Identity: {self.identity:.2f}%\n"
            f"Similarity: {self.similarity:.2f}%\n"
        )


AlignmentStatistics.EMPTY = AlignmentStatistics(0, 0, 0, 0, 0.0, 0.0, 0.0)


def calculate_statistics(result: Optional[AlignmentResult]) -> AlignmentStatistics:
    """
    Count matches, mismatches and gap columns of an alignment.

    A column with a gap in either row counts as a gap, never as a mismatch.
    """
    if result is None:
        raise MissingInputError("result")
    if result.is_empty:
        return AlignmentStatistics.EMPTY

    matches = mismatches = gaps = 0
    for a, b in zip(result.seq1_aligned, result.seq2_aligned):
        if a == GAP or b == GAP:
            gaps += 1
        elif a == b:
            matches += 1
        else:
            mismatches += 1

    length = result.length
    return AlignmentStatistics(
        matches=matches,
        mismatches=mismatches,
        gaps=gaps,
        alignment_length=length,
        identity=matches / length * 100,
        similarity=(matches + mismatches) / length * 100,
        gap_percent=gaps / length * 100,
    )


def format_alignment(result: Optional[AlignmentResult], line_width: int = 60) -> str:
    """
    Render the alignment as blocks of three lines (seq1, match line, seq2)
    separated by a blank line, at most line_width columns per block.
    """
    if result is None:
        raise MissingInputError("result")
    if line_width < 1:
        raise ValueError(f"line_width must be positive, got {line_width}")
    if result.is_empty:
        return ""

    match_string = result.match_string
    lines: List[str] = []
    for start in range(0, result.length, line_width):
        end = min(start + line_width, result.length)
        lines.append(result.seq1_aligned[start:end])
        lines.append(match_string[start:end])
        lines.append(result.seq2_aligned[start:end])
        lines.append("")
    return "\n".join(lines) + "\n"


def to_cigar(result: Optional[AlignmentResult]) -> str:
    """
    Run-length CIGAR string: M match, X mismatch, I gap in seq1,
    D gap in seq2.
    """
    if result is None:
        raise MissingInputError("result")

    ops: List[str] = []
    current, count = "", 0
    for a, b in zip(result.seq1_aligned, result.seq2_aligned):
        if a == GAP:
            op = "I"
        elif b == GAP:
            op = "D"
        elif a == b:
            op = "M"
        else:
            op = "X"
        if op == current:
            count += 1
        else:
            if count:
                ops.append(f"{count}{current}")
            current, count = op, 1
    if count:
        ops.append(f"{count}{current}")
    return "".join(ops)
