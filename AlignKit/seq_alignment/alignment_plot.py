"""
Pairwise alignment plotting (column track + sliding-window identity)
"""
from typing import Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .errors import MissingInputError
from .pairwise import GAP, AlignmentResult

# column classes for the track
_MATCH, _MISMATCH, _GAP = 0, 1, 2
_COLORS = {_MATCH: "#2b8cbe", _MISMATCH: "#fdae61", _GAP: "#d7191c"}


def _column_classes(result: AlignmentResult) -> np.ndarray:
    classes = np.empty(result.length, dtype=np.int8)
    for k, (a, b) in enumerate(zip(result.seq1_aligned, result.seq2_aligned)):
        if a == GAP or b == GAP:
            classes[k] = _GAP
        elif a == b:
            classes[k] = _MATCH
        else:
            classes[k] = _MISMATCH
    return classes


def window_identity(result: AlignmentResult, window: int = 10) -> np.ndarray:
    """
    Percent identity of a centered sliding window at every column.
    Windows are truncated at the alignment ends.
    """
    if result is None:
        raise MissingInputError("result")
    if window < 1:
        raise ValueError(f"window must be positive, got {window}")
    if result.is_empty:
        return np.zeros(0, dtype=np.float64)

    matches = (_column_classes(result) == _MATCH).astype(np.float64)
    csum = np.concatenate(([0.0], np.cumsum(matches)))
    n = len(matches)
    half = window // 2
    lo = np.clip(np.arange(n) - half, 0, n)
    hi = np.clip(np.arange(n) - half + window, 0, n)
    return (csum[hi] - csum[lo]) / (hi - lo) * 100.0


def plot_alignment(
    result: AlignmentResult,
    window: int = 10,
    figsize: Tuple[int, int] = (10, 4),
    title: Optional[str] = None,
    font_size: int = 10,
) -> plt.Figure:
    """
    Draw a match/mismatch/gap track over the alignment columns and the
    sliding-window identity beneath it.
    """
    identity = window_identity(result, window)
    fig, (ax_track, ax_id) = plt.subplots(
        2, 1, figsize=figsize, sharex=True,
        gridspec_kw={"height_ratios": [1, 3]},
    )

    if not result.is_empty:
        classes = _column_classes(result)
        xs = np.arange(result.length)
        for cls, label in ((_MATCH, "match"), (_MISMATCH, "mismatch"), (_GAP, "gap")):
            mask = classes == cls
            if mask.any():
                ax_track.bar(xs[mask], np.ones(mask.sum()), width=1.0,
                             color=_COLORS[cls], label=label)
        ax_track.legend(loc="upper right", fontsize=font_size - 2, ncol=3, frameon=False)
        ax_id.plot(xs, identity, "k-", lw=1.5)

    ax_track.set_yticks([])
    ax_track.set_ylim(0, 1)
    for side in ("top", "right", "left"):
        ax_track.spines[side].set_visible(False)

    ax_id.set_ylim(0, 105)
    ax_id.set_xlabel("Alignment column", fontsize=font_size)
    ax_id.set_ylabel(f"Identity % (window {window})", fontsize=font_size)

    if title:
        ax_track.set_title(title, fontsize=font_size + 2, fontweight="bold")

    plt.tight_layout()
    return fig
