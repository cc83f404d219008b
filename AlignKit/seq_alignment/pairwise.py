"""
Pairwise Sequence Alignment Module
Global (Needleman-Wunsch), local (Smith-Waterman) and semi-global (fitting)
alignment under an affine gap model (Gotoh three-state DP)
"""

import asyncio
import functools
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from .errors import MissingInputError
from .scoring import SIMPLE, ScoringScheme
from .sequence import SequenceLike, as_symbols


GAP = "-"
NEG_INF = -np.inf

# DP states; also the values stored in the M pointer matrix
STATE_M, STATE_IX, STATE_IY = 0, 1, 2
# Gap pointer values: run opened from M, or extended from the same gap state
_OPEN, _EXTEND = 0, 1


class AlignmentMode(Enum):
    """Alignment mode"""
    GLOBAL = "global"
    LOCAL = "local"
    SEMI_GLOBAL = "semi-global"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace("_", "-")
            if key == "semiglobal":
                key = "semi-global"
            for member in cls:
                if member.value == key:
                    return member
        return None


@dataclass(frozen=True)
class AlignmentResult:
    """
    Store a pairwise alignment.

    Offsets are 0-based and inclusive: for local and semi-global results the
    gap-free aligned rows are seq1[start1..end1] and seq2[start2..end2]. A
    zero-length alignment has end = start - 1.
    """
    seq1_aligned: str
    seq2_aligned: str
    score: float
    alignment_type: AlignmentMode
    start1: int
    end1: int
    start2: int
    end2: int

    EMPTY: ClassVar["AlignmentResult"]

    def __post_init__(self):
        if len(self.seq1_aligned) != len(self.seq2_aligned):
            raise ValueError("Aligned sequences must have equal length")

    @property
    def is_empty(self) -> bool:
        return len(self.seq1_aligned) == 0

    @property
    def length(self) -> int:
        return len(self.seq1_aligned)

    @property
    def match_string(self) -> str:
        """'|' for match, '.' for mismatch, ' ' for a gap column"""
        out = []
        for a, b in zip(self.seq1_aligned, self.seq2_aligned):
            if a == GAP or b == GAP:
                out.append(" ")
            elif a == b:
                out.append("|")
            else:
                out.append(".")
        return "".join(out)

    def nmatch(self) -> int:
        """Number of matching positions"""
        return sum(1 for a, b in zip(self.seq1_aligned, self.seq2_aligned)
                   if a == b and a != GAP)

    def __str__(self) -> str:
        return (
            f"Alignment Score: {self.score}\n"
            f"Type: {self.alignment_type.value}\n"
            f"Length: {self.length}\n"
            f"Range: [{self.start1}-{self.end1}] x [{self.start2}-{self.end2}]\n"
        )

    def view(self, width: int = 60) -> None:
        """Print the alignment blocks with match indicators"""
        from .statistics import format_alignment

        print(str(self))
        print(format_alignment(self, line_width=width))


AlignmentResult.EMPTY = AlignmentResult("", "", 0, AlignmentMode.GLOBAL, 0, 0, 0, 0)


@dataclass
class _Matrices:
    """Score and pointer matrices for one alignment call"""
    M: np.ndarray
    Ix: np.ndarray
    Iy: np.ndarray
    tb_m: np.ndarray
    tb_ix: np.ndarray
    tb_iy: np.ndarray

    @classmethod
    def allocate(cls, len1: int, len2: int) -> "_Matrices":
        shape = (len1 + 1, len2 + 1)
        return cls(
            M=np.full(shape, NEG_INF, dtype=np.float64),
            Ix=np.full(shape, NEG_INF, dtype=np.float64),
            Iy=np.full(shape, NEG_INF, dtype=np.float64),
            tb_m=np.zeros(shape, dtype=np.uint8),
            tb_ix=np.zeros(shape, dtype=np.uint8),
            tb_iy=np.zeros(shape, dtype=np.uint8),
        )

    def best_state(self, i: int, j: int) -> Tuple[int, float]:
        """Best state at a cell; M before Ix before Iy on ties"""
        state, value = STATE_M, self.M[i, j]
        if self.Ix[i, j] > value:
            state, value = STATE_IX, self.Ix[i, j]
        if self.Iy[i, j] > value:
            state, value = STATE_IY, self.Iy[i, j]
        return state, float(value)


# -------------------------
# Boundary strategies
# -------------------------
def _affine_column(mats: _Matrices, len1: int, scoring: ScoringScheme) -> None:
    for i in range(1, len1 + 1):
        mats.Ix[i, 0] = scoring.gap_open + (i - 1) * scoring.gap_extend
        mats.tb_ix[i, 0] = _OPEN if i == 1 else _EXTEND


def _affine_row(mats: _Matrices, len2: int, scoring: ScoringScheme) -> None:
    for j in range(1, len2 + 1):
        mats.Iy[0, j] = scoring.gap_open + (j - 1) * scoring.gap_extend
        mats.tb_iy[0, j] = _OPEN if j == 1 else _EXTEND


def _init_global(mats: _Matrices, len1: int, len2: int, scoring: ScoringScheme) -> None:
    mats.M[0, 0] = 0.0
    _affine_column(mats, len1, scoring)
    _affine_row(mats, len2, scoring)


def _init_local(mats: _Matrices, len1: int, len2: int, scoring: ScoringScheme) -> None:
    mats.M[:, 0] = 0.0
    mats.M[0, :] = 0.0


def _init_semi_global(mats: _Matrices, len1: int, len2: int, scoring: ScoringScheme) -> None:
    # skipping a prefix of seq2 (the reference) is free
    mats.M[0, :] = 0.0
    _affine_column(mats, len1, scoring)


# -------------------------
# End-cell strategies
# -------------------------
def _end_global(mats: _Matrices, len1: int, len2: int) -> Tuple[int, int, int, float]:
    state, value = mats.best_state(len1, len2)
    return len1, len2, state, value


def _end_local(mats: _Matrices, len1: int, len2: int) -> Tuple[int, int, int, float]:
    # argmax returns the first maximum in row-major order
    flat = int(np.argmax(mats.M))
    i, j = np.unravel_index(flat, mats.M.shape)
    return int(i), int(j), STATE_M, float(mats.M[i, j])


def _end_semi_global(mats: _Matrices, len1: int, len2: int) -> Tuple[int, int, int, float]:
    # seq1 fully consumed; trailing overhang of seq2 is free
    last = np.maximum(np.maximum(mats.M[len1], mats.Ix[len1]), mats.Iy[len1])
    j = int(np.argmax(last))
    state, value = mats.best_state(len1, j)
    return len1, j, state, value


_Initializer = Callable[[_Matrices, int, int, ScoringScheme], None]
_EndSelector = Callable[[_Matrices, int, int], Tuple[int, int, int, float]]

_STRATEGIES: Dict[AlignmentMode, Tuple[_Initializer, _EndSelector]] = {
    AlignmentMode.GLOBAL: (_init_global, _end_global),
    AlignmentMode.LOCAL: (_init_local, _end_local),
    AlignmentMode.SEMI_GLOBAL: (_init_semi_global, _end_semi_global),
}


class PairwiseAligner:
    """Pairwise aligner for a fixed scoring scheme"""

    def __init__(self, scoring: Optional[ScoringScheme] = None):
        """
        Parameters:
        -----------
        scoring : ScoringScheme
            Match/mismatch/gap parameters (default SIMPLE)
        """
        self.scoring = scoring if scoring is not None else SIMPLE

    def _fill_matrix(
        self,
        seq1: str,
        seq2: str,
        mats: _Matrices,
        mode: AlignmentMode,
        verbose: bool = False
    ) -> None:
        """Fill the three score matrices and their pointers"""
        len1, len2 = len(seq1), len(seq2)
        match, mismatch = self.scoring.match, self.scoring.mismatch
        gap_open, gap_extend = self.scoring.gap_open, self.scoring.gap_extend
        local = mode is AlignmentMode.LOCAL

        if verbose:
            print(f"\nFilling alignment matrices for sequences of length {len1} x {len2}")
            print(f"Total cells to compute: {len1 * len2}")
            print("Computing ", end="")

        # rows are worked on as python lists and written back once per row
        m_up, x_up = mats.M[0].tolist(), mats.Ix[0].tolist()
        y_up = mats.Iy[0].tolist()
        for i in range(1, len1 + 1):
            a = seq1[i - 1]
            m_row, x_row, y_row = mats.M[i].tolist(), mats.Ix[i].tolist(), mats.Iy[i].tolist()
            tbm_row = mats.tb_m[i].tolist()
            tbx_row = mats.tb_ix[i].tolist()
            tby_row = mats.tb_iy[i].tolist()

            for j in range(1, len2 + 1):
                # M: diagonal step from the best state at (i-1, j-1)
                best, src = m_up[j - 1], STATE_M
                if x_up[j - 1] > best:
                    best, src = x_up[j - 1], STATE_IX
                if y_up[j - 1] > best:
                    best, src = y_up[j - 1], STATE_IY
                m_val = best + (match if a == seq2[j - 1] else mismatch)
                if local and m_val < 0:
                    m_val = 0.0
                m_row[j] = m_val
                tbm_row[j] = src

                # Ix: gap consuming seq1[i-1]
                opened = m_up[j] + gap_open
                extended = x_up[j] + gap_extend
                if opened >= extended:
                    x_row[j], tbx_row[j] = opened, _OPEN
                else:
                    x_row[j], tbx_row[j] = extended, _EXTEND

                # Iy: gap consuming seq2[j-1]
                opened = m_row[j - 1] + gap_open
                extended = y_row[j - 1] + gap_extend
                if opened >= extended:
                    y_row[j], tby_row[j] = opened, _OPEN
                else:
                    y_row[j], tby_row[j] = extended, _EXTEND

            mats.M[i], mats.Ix[i], mats.Iy[i] = m_row, x_row, y_row
            mats.tb_m[i], mats.tb_ix[i], mats.tb_iy[i] = tbm_row, tbx_row, tby_row
            m_up, x_up, y_up = m_row, x_row, y_row

            if verbose and i % max(1, len1 // 10) == 0:
                print("█", end="", flush=True)

        if verbose:
            print(" 100.0%")
            print("✓ Matrix computation complete!")

    def _traceback(
        self,
        seq1: str,
        seq2: str,
        mats: _Matrices,
        end: Tuple[int, int, int],
        mode: AlignmentMode,
        verbose: bool = False
    ) -> Tuple[str, str, int, int]:
        """Walk the pointers back from the end cell; returns rows and start cell"""
        aligned1, aligned2 = [], []
        i, j, state = end

        if verbose:
            print(f"\nPerforming traceback from ({i}, {j})")

        while True:
            if state == STATE_M:
                if i == 0 or j == 0:
                    break
                if mode is AlignmentMode.LOCAL and mats.M[i, j] <= 0:
                    break
                aligned1.append(seq1[i - 1])
                aligned2.append(seq2[j - 1])
                state = int(mats.tb_m[i, j])
                i -= 1
                j -= 1
            elif state == STATE_IX:
                aligned1.append(seq1[i - 1])
                aligned2.append(GAP)
                state = STATE_M if mats.tb_ix[i, j] == _OPEN else STATE_IX
                i -= 1
            else:
                aligned1.append(GAP)
                aligned2.append(seq2[j - 1])
                state = STATE_M if mats.tb_iy[i, j] == _OPEN else STATE_IY
                j -= 1

            if mode is AlignmentMode.SEMI_GLOBAL and i == 0:
                break

        if verbose:
            print(f"✓ Traceback complete! Alignment length: {len(aligned1)}")

        return "".join(reversed(aligned1)), "".join(reversed(aligned2)), i, j

    def align(
        self,
        seq1: SequenceLike,
        seq2: SequenceLike,
        mode: Union[AlignmentMode, str] = AlignmentMode.GLOBAL,
        score_only: bool = False,
        verbose: bool = False
    ) -> Union[AlignmentResult, float]:
        """
        Perform pairwise sequence alignment

        Parameters:
        -----------
        seq1 : str or Sequence
            First sequence (the query in semi-global mode)
        seq2 : str or Sequence
            Second sequence (the reference in semi-global mode)
        mode : AlignmentMode or str
            "global", "local" or "semi-global" (default "global")
        score_only : bool
            If True, return only the optimal score
        verbose : bool
            If True, display progress during alignment

        Returns:
        --------
        AlignmentResult or float
            Alignment result, or score if score_only=True.
            AlignmentResult.EMPTY (or 0.0) when either sequence is empty.
        """
        seq1 = as_symbols(seq1, "seq1")
        seq2 = as_symbols(seq2, "seq2")
        mode = AlignmentMode(mode)

        if not seq1 or not seq2:
            return 0.0 if score_only else AlignmentResult.EMPTY

        if verbose:
            print("\n" + "=" * 70)
            print("PAIRWISE SEQUENCE ALIGNMENT")
            print("=" * 70)
            print(f"Sequence 1: {seq1}")
            print(f"Sequence 2: {seq2}")
            print(f"Mode: {mode.value}")
            print(f"Match: {self.scoring.match}, Mismatch: {self.scoring.mismatch}, "
                  f"Gap opening: {self.scoring.gap_open}, Gap extension: {self.scoring.gap_extend}")
            print("=" * 70)
            print("\nInitializing alignment matrices...")

        initialize, select_end = _STRATEGIES[mode]
        len1, len2 = len(seq1), len(seq2)
        mats = _Matrices.allocate(len1, len2)
        initialize(mats, len1, len2, self.scoring)

        if verbose:
            print(f"✓ Matrices initialized: {len1 + 1} x {len2 + 1}")

        self._fill_matrix(seq1, seq2, mats, mode, verbose)
        end_i, end_j, state, score = select_end(mats, len1, len2)

        if verbose:
            print(f"Max score: {score:.4f} at position {(end_i, end_j)}")

        if score_only:
            if verbose:
                print(f"\nFinal score: {score:.4f}")
                print("=" * 70 + "\n")
            return score

        aligned1, aligned2, start_i, start_j = self._traceback(
            seq1, seq2, mats, (end_i, end_j, state), mode, verbose
        )

        result = AlignmentResult(
            seq1_aligned=aligned1,
            seq2_aligned=aligned2,
            score=score,
            alignment_type=mode,
            start1=start_i,
            end1=end_i - 1,
            start2=start_j,
            end2=end_j - 1,
        )

        if verbose:
            print("\nALIGNMENT RESULTS")
            print("=" * 70)
            print(f"Score: {score:.4f}")
            print(f"Matches: {result.nmatch()}")
            print(f"Length: {result.length}")
            print("=" * 70 + "\n")

        return result


def align(
    seq1: SequenceLike,
    seq2: SequenceLike,
    mode: Union[AlignmentMode, str] = AlignmentMode.GLOBAL,
    scoring: Optional[ScoringScheme] = None
) -> AlignmentResult:
    """Align two sequences in the given mode"""
    return PairwiseAligner(scoring).align(seq1, seq2, mode=mode)


def global_align(seq1: SequenceLike, seq2: SequenceLike,
                 scoring: Optional[ScoringScheme] = None) -> AlignmentResult:
    """Needleman-Wunsch alignment of both sequences end to end"""
    return align(seq1, seq2, AlignmentMode.GLOBAL, scoring)


def local_align(seq1: SequenceLike, seq2: SequenceLike,
                scoring: Optional[ScoringScheme] = None) -> AlignmentResult:
    """Smith-Waterman alignment of the best-scoring pair of subsequences"""
    return align(seq1, seq2, AlignmentMode.LOCAL, scoring)


def semi_global_align(query: SequenceLike, reference: SequenceLike,
                      scoring: Optional[ScoringScheme] = None) -> AlignmentResult:
    """Fit the whole query into the reference; reference overhangs are free"""
    return align(query, reference, AlignmentMode.SEMI_GLOBAL, scoring)


def pairwise(
    seq1: SequenceLike,
    seq2: SequenceLike,
    mode: Union[AlignmentMode, str] = "local",
    scoring: Union[ScoringScheme, str, None] = None,
    verbose: bool = False
) -> AlignmentResult:
    """
    Convenience wrapper around PairwiseAligner

    Parameters:
    -----------
    seq1, seq2 : str or Sequence
        Sequences to align
    mode : str
        "local" (default), "global" or "semi-global"
    scoring : ScoringScheme or str
        Scheme or preset name ("simple", "blast", "high_identity")
    verbose : bool
        Show progress (default False)

    Examples:
    ---------
    >>> result = pairwise("AAATGCAAA", "CCCTGCCCC")
    >>> result.seq1_aligned
    'TGC'
    >>> result.view()
    """
    if isinstance(scoring, str):
        scoring = ScoringScheme.preset(scoring)
    return PairwiseAligner(scoring).align(seq1, seq2, mode=mode, verbose=verbose)


# -------------------------
# Batch / async helpers
# -------------------------
def _checked_pairs(pairs: Optional[Iterable[Tuple[SequenceLike, SequenceLike]]]
                   ) -> List[Tuple[SequenceLike, SequenceLike]]:
    if pairs is None:
        raise MissingInputError("pairs")
    checked = []
    for k, (seq1, seq2) in enumerate(pairs):
        if seq1 is None:
            raise MissingInputError(f"pairs[{k}][0]")
        if seq2 is None:
            raise MissingInputError(f"pairs[{k}][1]")
        checked.append((seq1, seq2))
    return checked


def align_many(
    pairs: Iterable[Tuple[SequenceLike, SequenceLike]],
    mode: Union[AlignmentMode, str] = AlignmentMode.GLOBAL,
    scoring: Optional[ScoringScheme] = None,
    n_jobs: Optional[int] = None
) -> List[AlignmentResult]:
    """
    Align independent sequence pairs on a thread pool.

    Results are returned in the order of ``pairs``. n_jobs=None lets the
    executor pick its default worker count; n_jobs=1 runs inline.
    """
    checked = _checked_pairs(pairs)
    mode = AlignmentMode(mode)
    aligner = PairwiseAligner(scoring)
    job = functools.partial(_align_pair, aligner, mode)

    if n_jobs == 1 or len(checked) <= 1:
        return [job(pair) for pair in checked]
    with ThreadPoolExecutor(max_workers=n_jobs) as ex:
        return list(ex.map(job, checked))


def _align_pair(aligner: PairwiseAligner, mode: AlignmentMode,
                pair: Tuple[SequenceLike, SequenceLike]) -> AlignmentResult:
    return aligner.align(pair[0], pair[1], mode=mode)


async def align_async(
    seq1: SequenceLike,
    seq2: SequenceLike,
    mode: Union[AlignmentMode, str] = AlignmentMode.GLOBAL,
    scoring: Optional[ScoringScheme] = None
) -> AlignmentResult:
    """
    Async version: runs align() in the default executor.
    (Does not speed up the DP itself; keeps the event loop responsive.)
    """
    as_symbols(seq1, "seq1")
    as_symbols(seq2, "seq2")
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None, functools.partial(align, seq1, seq2, mode, scoring)
    )


async def align_many_async(
    pairs: Iterable[Tuple[SequenceLike, SequenceLike]],
    mode: Union[AlignmentMode, str] = AlignmentMode.GLOBAL,
    scoring: Optional[ScoringScheme] = None
) -> List[AlignmentResult]:
    """Align independent pairs concurrently; results keep input order"""
    checked = _checked_pairs(pairs)
    return list(await asyncio.gather(
        *(align_async(seq1, seq2, mode, scoring) for seq1, seq2 in checked)
    ))
