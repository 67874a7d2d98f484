"""Plotting helper for allocation results.

Produces a matplotlib Figure with the weights per asset, marking the cap
when one was requested.
"""
import matplotlib.pyplot as plt
from typing import Optional, Sequence


def plot_allocations(symbols: Sequence[str], weights: Sequence[float], max_weight: Optional[float] = None,
                     title: Optional[str] = None) -> plt.Figure:
    fig, ax = plt.subplots()
    ax.bar(list(symbols), list(weights))
    if max_weight is not None:
        ax.axhline(max_weight, color='red', linestyle='--', label='Max weight')
        ax.legend()
    ax.set_ylabel('Weight')
    ax.set_ylim(0, 1)
    if title:
        ax.set_title(title)
    ax.grid(True, axis='y')
    return fig
