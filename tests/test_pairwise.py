"""
Tests for the pairwise alignment engine.
"""

import pytest

from AlignKit.seq_alignment import (
    BLAST_DNA, HIGH_IDENTITY, SIMPLE,
    AlignmentMode, AlignmentResult, MissingInputError, PairwiseAligner, ScoringScheme,
    align, global_align, local_align, pairwise, semi_global_align
)


PAIRS = [
    ("ATGC", "AGC"),
    ("ATGCATGC", "ATGC"),
    ("GATTACA", "GCATGCT"),
    ("AAATGCAAA", "CCCTGCCCC"),
    ("ACGTACGT", "TTACG"),
    ("ACACACTA", "AGCACACA"),
    ("A", "T"),
    ("AAAA", "TTTT"),
]

SCHEMES = [SIMPLE, BLAST_DNA, HIGH_IDENTITY]


def rescore(result, scoring):
    """Score the aligned rows column by column under the affine model."""
    total = 0
    prev = None
    for a, b in zip(result.seq1_aligned, result.seq2_aligned):
        if b == "-":
            state = "x"
            total += scoring.gap_extend if prev == "x" else scoring.gap_open
        elif a == "-":
            state = "y"
            total += scoring.gap_extend if prev == "y" else scoring.gap_open
        else:
            state = "m"
            total += scoring.score(a, b)
        prev = state
    return total


class TestGlobalAlign:
    """Tests for Needleman-Wunsch global alignment."""

    def test_identical_sequences(self):
        result = global_align("ATGC", "ATGC", SIMPLE)
        assert result.seq1_aligned == "ATGC"
        assert result.seq2_aligned == "ATGC"
        assert result.score == 4
        assert result.alignment_type is AlignmentMode.GLOBAL

    def test_single_deletion(self):
        result = global_align("ATGC", "AGC", SIMPLE)
        assert result.length == 4
        gap_columns = sum(1 for a, b in zip(result.seq1_aligned, result.seq2_aligned)
                          if a == "-" or b == "-")
        assert gap_columns == 1
        assert result.seq1_aligned.replace("-", "") == "ATGC"
        assert result.seq2_aligned.replace("-", "") == "AGC"
        assert result.seq2_aligned == "A-GC"
        assert result.score == 1

    def test_offsets_cover_whole_sequences(self):
        result = global_align("ATGCATGC", "ATGC")
        assert (result.start1, result.end1) == (0, 7)
        assert (result.start2, result.end2) == (0, 3)

    def test_lowercase_input_normalized(self):
        result = global_align("atgc", "AtGc")
        assert result.seq1_aligned == "ATGC"
        assert result.score == 4

    def test_affine_prefers_single_gap_run(self):
        """Steep gap opening keeps the length difference in one run."""
        result = global_align("GATTACAGATTACA", "GATTACA", HIGH_IDENTITY)
        gap_runs = sum(1 for k, ch in enumerate(result.seq2_aligned)
                       if ch == "-" and (k == 0 or result.seq2_aligned[k - 1] != "-"))
        assert gap_runs == 1
        assert result.seq2_aligned.count("-") == 7
        assert result.score == 7 * 5 - 10 - 6

    def test_tie_prefers_diagonal_at_end(self):
        """
        Regression: "AA" vs "A" has two optimal alignments (score -1).
        The diagonal is preferred at the end cell, so the gap comes first.
        """
        result = global_align("AA", "A", SIMPLE)
        assert result.score == -1
        assert result.seq1_aligned == "AA"
        assert result.seq2_aligned == "-A"

    def test_tie_prefers_gap_in_seq2_over_gap_in_seq1(self):
        """
        "-AC"/"CA-" and "AC-"/"-CA" both score -3. The end cell prefers the
        state that consumes seq1 (gap in seq2), so the alignment ends "C"/"-".
        """
        result = global_align("AC", "CA", ScoringScheme(1, -100, -2, -1))
        assert result.score == -3
        assert result.seq1_aligned == "-AC"
        assert result.seq2_aligned == "CA-"


class TestLocalAlign:
    """Tests for Smith-Waterman local alignment."""

    def test_finds_best_subsequence(self):
        result = local_align("AAATGCAAA", "CCCTGCCCC", SIMPLE)
        assert "TGC" in result.seq1_aligned
        assert result.seq1_aligned == "TGC"
        assert result.score == 3
        assert result.alignment_type is AlignmentMode.LOCAL
        assert (result.start1, result.end1) == (3, 5)
        assert (result.start2, result.end2) == (3, 5)

    def test_identical_sequences(self):
        result = local_align("ATGC", "ATGC")
        assert result.seq1_aligned == "ATGC"
        assert result.score == 4

    def test_no_similarity(self):
        """No positive-scoring pair: zero-length alignment, score 0."""
        result = local_align("AAAA", "TTTT")
        assert result.score == 0
        assert result.seq1_aligned == ""
        assert result.end1 == result.start1 - 1

    def test_score_never_negative(self):
        for s1, s2 in PAIRS:
            assert local_align(s1, s2).score >= 0


class TestSemiGlobalAlign:
    """Tests for semi-global (fitting) alignment."""

    def test_short_query_inside_reference(self):
        result = semi_global_align("ATGC", "AAAATGCAAA", SIMPLE)
        assert result.alignment_type is AlignmentMode.SEMI_GLOBAL
        assert result.score == 4
        assert result.seq1_aligned == "ATGC"
        assert result.seq2_aligned == "ATGC"
        assert (result.start2, result.end2) == (3, 6)

    def test_free_trailing_overhang(self):
        result = semi_global_align("ATGC", "ATGCAAAA", SIMPLE)
        assert result.score == 4
        assert result.seq1_aligned.replace("-", "") == "ATGC"
        assert (result.start2, result.end2) == (0, 3)

    def test_query_always_fully_consumed(self):
        for s1, s2 in PAIRS:
            result = semi_global_align(s1, s2)
            assert result.seq1_aligned.replace("-", "") == s1
            assert (result.start1, result.end1) == (0, len(s1) - 1)


class TestInvariants:
    """Properties that hold for every pair, mode and scheme."""

    @pytest.mark.parametrize("mode", list(AlignmentMode))
    @pytest.mark.parametrize("scoring", SCHEMES)
    def test_equal_lengths_and_reconstruction(self, mode, scoring):
        for s1, s2 in PAIRS:
            result = align(s1, s2, mode, scoring)
            assert len(result.seq1_aligned) == len(result.seq2_aligned)
            stripped1 = result.seq1_aligned.replace("-", "")
            stripped2 = result.seq2_aligned.replace("-", "")
            if mode is AlignmentMode.GLOBAL:
                assert stripped1 == s1
                assert stripped2 == s2
            else:
                assert stripped1 == s1[result.start1:result.end1 + 1]
                assert stripped2 == s2[result.start2:result.end2 + 1]

    @pytest.mark.parametrize("mode", list(AlignmentMode))
    @pytest.mark.parametrize("scoring", SCHEMES)
    def test_score_matches_aligned_rows(self, mode, scoring):
        for s1, s2 in PAIRS:
            result = align(s1, s2, mode, scoring)
            assert rescore(result, scoring) == pytest.approx(result.score)

    @pytest.mark.parametrize("mode", list(AlignmentMode))
    def test_monotone_in_match_score(self, mode):
        for s1, s2 in PAIRS:
            scores = [
                align(s1, s2, mode, ScoringScheme(m, -1, -2, -1)).score
                for m in (0.5, 1, 2, 3, 5)
            ]
            assert scores == sorted(scores)

    def test_deterministic(self):
        first = align("GATTACA", "GCATGCT", "global")
        second = align("GATTACA", "GCATGCT", "global")
        assert first == second

    def test_unusual_scheme_keeps_invariants(self):
        scoring = ScoringScheme(match=-1, mismatch=-1, gap_open=1, gap_extend=1)
        result = global_align("ACGT", "TTGA", scoring)
        assert result.seq1_aligned.replace("-", "") == "ACGT"
        assert result.seq2_aligned.replace("-", "") == "TTGA"


class TestInputHandling:
    """Tests for None and empty inputs."""

    @pytest.mark.parametrize("mode", list(AlignmentMode))
    def test_none_fails_symmetrically(self, mode):
        with pytest.raises(MissingInputError) as first:
            align(None, "ATGC", mode)
        with pytest.raises(MissingInputError) as second:
            align("ATGC", None, mode)
        assert first.value.argument == "seq1"
        assert second.value.argument == "seq2"

    def test_missing_input_is_value_error(self):
        with pytest.raises(ValueError):
            global_align(None, "A")

    @pytest.mark.parametrize("mode", list(AlignmentMode))
    def test_empty_returns_empty_result(self, mode):
        assert align("", "ATGC", mode) is AlignmentResult.EMPTY
        assert align("ATGC", "", mode) is AlignmentResult.EMPTY

    def test_empty_result_shape(self):
        empty = AlignmentResult.EMPTY
        assert empty.seq1_aligned == "" and empty.seq2_aligned == ""
        assert empty.score == 0
        assert (empty.start1, empty.start2, empty.end1, empty.end2) == (0, 0, 0, 0)
        assert empty.is_empty

    def test_unequal_rows_rejected(self):
        with pytest.raises(ValueError):
            AlignmentResult("AT", "A", 0, AlignmentMode.GLOBAL, 0, 1, 0, 0)


class TestAlignmentMode:
    """Tests for mode parsing."""

    def test_string_values(self):
        assert AlignmentMode("global") is AlignmentMode.GLOBAL
        assert AlignmentMode("LOCAL") is AlignmentMode.LOCAL
        assert AlignmentMode("semi-global") is AlignmentMode.SEMI_GLOBAL
        assert AlignmentMode("semi_global") is AlignmentMode.SEMI_GLOBAL
        assert AlignmentMode("semiglobal") is AlignmentMode.SEMI_GLOBAL

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            AlignmentMode("glocal")


class TestPairwiseAligner:
    """Tests for the object API and the convenience wrapper."""

    def test_score_only(self):
        aligner = PairwiseAligner(SIMPLE)
        assert aligner.align("ATGC", "ATGC", score_only=True) == 4
        assert aligner.align("", "ATGC", score_only=True) == 0

    def test_score_only_matches_full_result(self):
        aligner = PairwiseAligner(BLAST_DNA)
        for s1, s2 in PAIRS:
            for mode in AlignmentMode:
                full = aligner.align(s1, s2, mode=mode)
                assert aligner.align(s1, s2, mode=mode, score_only=True) == full.score

    def test_default_scoring_is_simple(self):
        assert PairwiseAligner().scoring is SIMPLE

    def test_pairwise_defaults_to_local(self):
        result = pairwise("AAATGCAAA", "CCCTGCCCC")
        assert result.alignment_type is AlignmentMode.LOCAL
        assert result.seq1_aligned == "TGC"

    def test_pairwise_accepts_preset_name(self):
        result = pairwise("AAATGCAAA", "CCCTGCCCC", scoring="blast")
        assert result.score == 6

    def test_verbose_prints_progress(self, capsys):
        PairwiseAligner().align("ATGC", "AGC", verbose=True)
        out = capsys.readouterr().out
        assert "PAIRWISE SEQUENCE ALIGNMENT" in out
        assert "Traceback complete" in out

    def test_silent_by_default(self, capsys):
        PairwiseAligner().align("ATGC", "AGC")
        assert capsys.readouterr().out == ""

    def test_result_helpers(self, capsys):
        result = global_align("ATGC", "ATTC")
        assert result.match_string == "||.|"
        assert result.nmatch() == 3
        assert "Alignment Score: 2" in str(result)
        result.view()
        assert "||.|" in capsys.readouterr().out
