"""
Multiple Sequence Alignment (MSA) - progressive consensus alignment

Heuristic, not an exact multiple alignment: the first two sequences are
aligned globally, then every further sequence is aligned against the
running consensus. Gap columns opened against the consensus are copied
into all rows aligned so far, and the consensus is re-derived after each
step. total_score is the sum of the pairwise scores collected on the way
(a sum-of-pairs style approximation), not the score of an optimal
multiple alignment.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Mapping, Optional, Sequence as Seq, Tuple, Union

from AlignKit.seq_alignment.errors import MissingInputError
from AlignKit.seq_alignment.pairwise import GAP, AlignmentResult, PairwiseAligner
from AlignKit.seq_alignment.scoring import ScoringScheme
from AlignKit.seq_alignment.sequence import Sequence, SequenceLike, as_symbols


@dataclass(frozen=True)
class MultipleAlignmentResult:
    aligned_sequences: Tuple[str, ...]   # same length, input order
    consensus: str
    total_score: float
    names: Tuple[str, ...] = ()

    EMPTY: ClassVar["MultipleAlignmentResult"]

    def __post_init__(self):
        for row in self.aligned_sequences:
            if len(row) != len(self.consensus):
                raise ValueError("Aligned sequences and consensus must have equal length")

    @property
    def length(self) -> int:
        return len(self.consensus)

    @property
    def is_empty(self) -> bool:
        return len(self.aligned_sequences) == 0

    def as_dict(self) -> Dict[str, str]:
        """name -> aligned row; seq0..seqN-1 when no names were given"""
        names = self.names or tuple(f"seq{k}" for k in range(len(self.aligned_sequences)))
        return dict(zip(names, self.aligned_sequences))


MultipleAlignmentResult.EMPTY = MultipleAlignmentResult((), "", 0)


def derive_consensus(rows: Seq[str]) -> str:
    """
    Column-wise majority of non-gap symbols.
    Ties go to the symbol met first in row order; all-gap column -> '-'.
    """
    if not rows:
        return ""
    out = []
    for col in zip(*rows):
        # Counter keeps first-encountered order among equal counts
        counts = Counter(ch for ch in col if ch != GAP)
        out.append(counts.most_common(1)[0][0] if counts else GAP)
    return "".join(out)


def _merge_into_rows(rows: List[str], result: AlignmentResult,
                     consensus: str, new_seq: str) -> Tuple[List[str], str]:
    """
    Lay the earlier rows out along the consensus side of a pairwise result,
    inserting an all-gap column wherever the consensus side has a gap.
    Returns the updated rows and the new row.
    """
    if result.is_empty:
        # one side empty: nothing to align, pad both sides with gaps
        pad_new = GAP * len(consensus)
        return [r + GAP * len(new_seq) for r in rows], pad_new + new_seq

    merged = [[] for _ in rows]
    col = 0
    for ch in result.seq1_aligned:
        if ch == GAP:
            for m in merged:
                m.append(GAP)
        else:
            for m, r in zip(merged, rows):
                m.append(r[col])
            col += 1
    return ["".join(m) for m in merged], result.seq2_aligned


def _normalize_input(
    sequences: Union[Seq[SequenceLike], Mapping[str, SequenceLike], None]
) -> Tuple[List[str], Tuple[str, ...]]:
    if sequences is None:
        raise MissingInputError("sequences")
    if isinstance(sequences, (str, Sequence)):
        raise TypeError("sequences must be a list or dict of sequences, not a single sequence")
    if isinstance(sequences, Mapping):
        names = tuple(str(k) for k in sequences.keys())
        items = list(sequences.values())
    else:
        names = ()
        items = list(sequences)
    seqs = [as_symbols(s, f"sequences[{k}]") for k, s in enumerate(items)]
    return seqs, names


def multiple_align(
    sequences: Union[Seq[SequenceLike], Mapping[str, SequenceLike], None],
    scoring: Optional[ScoringScheme] = None,
    verbose: bool = False,
) -> MultipleAlignmentResult:
    """
    Progressive multiple alignment against an evolving consensus.

    Parameters
    ----------
    sequences : list or dict
        Sequences (str or Sequence) in alignment order, or {name: sequence}.
    scoring : ScoringScheme, optional
        Pairwise scoring (default SIMPLE).
    verbose : bool
        Print one line per progressive step.

    Returns
    -------
    MultipleAlignmentResult
        EMPTY for no input; a single sequence is returned unchanged.
    """
    seqs, names = _normalize_input(sequences)

    if not seqs:
        return MultipleAlignmentResult.EMPTY
    if len(seqs) == 1:
        return MultipleAlignmentResult((seqs[0],), seqs[0], 0, names)

    aligner = PairwiseAligner(scoring)

    first = aligner.align(seqs[0], seqs[1])
    rows, new_row = _merge_into_rows([seqs[0]], first, seqs[0], seqs[1])
    rows.append(new_row)
    total_score = first.score
    consensus = derive_consensus(rows)

    if verbose:
        print(f"[msa] step 1: seq0 + seq1 score={first.score:g} length={len(consensus)}")

    for k in range(2, len(seqs)):
        result = aligner.align(consensus, seqs[k])
        rows, new_row = _merge_into_rows(rows, result, consensus, seqs[k])
        rows.append(new_row)
        total_score += result.score
        consensus = derive_consensus(rows)

        if verbose:
            print(f"[msa] step {k}: consensus + seq{k} score={result.score:g} "
                  f"length={len(consensus)}")

    return MultipleAlignmentResult(tuple(rows), consensus, total_score, names)


# -------------------------
# Convenience I/O
# -------------------------
def write_fasta(result: MultipleAlignmentResult, path: str, width: int = 80) -> None:
    if result is None:
        raise MissingInputError("result")
    with open(path, "w") as f:
        for name, row in result.as_dict().items():
            f.write(f">{name}\n")
            for i in range(0, len(row), width):
                f.write(row[i:i + width] + "\n")
