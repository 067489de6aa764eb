"""
Plotting utilities for contact graph analyses.

Generates the three figures of an analysis report:
- Inter-contact histogram (truncated)
- Fractions of created and deleted edges over time
- Average degree over time

Requires matplotlib (``pip install contactgraph[viz]``).
"""

import os
from pathlib import Path
from typing import List, Sequence, Union

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.figure import Figure

from ..workflows import AnalysisReport
from ..common.logging_config import get_logger

logger = get_logger(__name__)

FIGURE_SIZE = (10, 6.66)
FIGURE_DPI = 100


def plot_intercontact_histogram(
    histogram: Sequence[int],
    truncate: float,
    title_prefix: str = ""
) -> Figure:
    """Bar chart of an inter-contact histogram."""
    counts = np.asarray(histogram)
    fig, ax = plt.subplots(figsize=FIGURE_SIZE)

    ax.bar(np.arange(len(counts)), counts, width=1.0, color="black")
    ax.set_xlabel("inter-contact duration (in sample)")
    ax.set_ylabel("number of inter-contacts")
    ax.set_title(
        f"{title_prefix}Inter-contacts histogram "
        f"(truncated to {int(truncate * 100)}% of max intercontact)"
    )
    return fig


def plot_link_fractions(
    fraction_created: Sequence[float],
    fraction_deleted: Sequence[float],
    title_prefix: str = ""
) -> Figure:
    """Scatter plots of the created and deleted fractions, stacked vertically."""
    fig, (ax_created, ax_deleted) = plt.subplots(2, 1, figsize=FIGURE_SIZE)
    fig.suptitle(f"{title_prefix}Fractions of created and deleted edges")

    # Non-finite entries (saturated timesteps) are not drawn
    for ax, series, label in (
        (ax_created, fraction_created, "fraction of created edges"),
        (ax_deleted, fraction_deleted, "fraction of deleted edges"),
    ):
        values = np.asarray(series, dtype=np.float64)
        ax.scatter(np.arange(len(values)), values, s=4, color="black")
        ax.set_xlabel("time (in sample)")
        ax.set_ylabel(label)

    fig.tight_layout()
    return fig


def plot_average_degree(average_degree: Sequence[float], title_prefix: str = "") -> Figure:
    """Scatter plot of the average degree over time."""
    values = np.asarray(average_degree, dtype=np.float64)
    fig, ax = plt.subplots(figsize=FIGURE_SIZE)

    ax.scatter(np.arange(len(values)), values, s=4, color="black")
    ax.set_xlabel("time (in sample)")
    ax.set_ylabel("average degree")
    ax.set_title(f"{title_prefix}Average degree over time")
    return fig


def report_figures(report: AnalysisReport) -> List[Figure]:
    """
    Build the figures of an analysis report.

    Parameters
    ----------
    report : AnalysisReport
        Output of analyse_graph()

    Returns
    -------
    List[Figure]
        Histogram, link fractions and average degree figures, in that order
    """
    return [
        plot_intercontact_histogram(report.histogram, report.truncate, report.title_prefix),
        plot_link_fractions(report.fraction_created, report.fraction_deleted, report.title_prefix),
        plot_average_degree(report.average_degree, report.title_prefix),
    ]


def save_figures(figures: Sequence[Figure], directory: Union[str, Path]) -> List[Path]:
    """
    Save figures as ``figure_<i>.png`` in a directory.

    Parameters
    ----------
    figures : Sequence[Figure]
        Figures to save; i is the position in this sequence
    directory : str or Path
        Destination directory, created if missing

    Returns
    -------
    List[Path]
        The written files
    """
    directory = Path(directory)
    os.makedirs(directory, exist_ok=True)

    paths = []
    for i, figure in enumerate(figures):
        path = directory / f"figure_{i}.png"
        logger.debug(f"save file : {path}")
        figure.savefig(path, dpi=FIGURE_DPI)
        paths.append(path)

    return paths


def show_figures() -> None:
    """Display every open figure (blocks until the windows are closed)."""
    plt.show()


def close_figures(figures: Sequence[Figure]) -> None:
    for figure in figures:
        plt.close(figure)
