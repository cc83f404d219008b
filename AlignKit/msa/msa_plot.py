"""
Conservation plot for a multiple alignment
"""
from typing import Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from AlignKit.seq_alignment.errors import MissingInputError
from AlignKit.seq_alignment.pairwise import GAP
from .progressive import MultipleAlignmentResult


def column_conservation(result: MultipleAlignmentResult) -> np.ndarray:
    """Fraction of rows equal to the (non-gap) consensus symbol per column"""
    if result is None:
        raise MissingInputError("result")
    if result.is_empty or result.length == 0:
        return np.zeros(0, dtype=np.float64)

    rows = np.array([list(r) for r in result.aligned_sequences])   # (n, L)
    cons = np.array(list(result.consensus))                         # (L,)
    agree = (rows == cons[None, :]) & (cons[None, :] != GAP)
    return agree.sum(axis=0) / rows.shape[0]


def plot_conservation(
    result: MultipleAlignmentResult,
    figsize: Tuple[int, int] = (10, 3),
    title: Optional[str] = None,
    font_size: int = 10,
    show_consensus: bool = True,
) -> plt.Figure:
    """Bar chart of per-column conservation, consensus symbols as tick labels"""
    cons = column_conservation(result)
    fig, ax = plt.subplots(figsize=figsize)

    xs = np.arange(len(cons))
    ax.bar(xs, cons, width=0.9, color="#4d9221")
    ax.set_ylim(0, 1.05)
    ax.set_ylabel("Conservation", fontsize=font_size)

    if show_consensus and len(cons) and len(cons) <= 120:
        ax.set_xticks(xs)
        ax.set_xticklabels(list(result.consensus), fontsize=max(font_size - 3, 5),
                           family="monospace")
    else:
        ax.set_xlabel("Alignment column", fontsize=font_size)

    for side in ("top", "right"):
        ax.spines[side].set_visible(False)

    if title:
        ax.set_title(title, fontsize=font_size + 2, fontweight="bold")

    plt.tight_layout()
    return fig
