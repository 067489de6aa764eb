"""
Temporal metrics for contact graphs.

This module computes the aggregate temporal statistics of a contact trace:
inter-contact gaps and their histogram, the average degree over time, and
the fractions of created and deleted links at each timestep. It also
derives Edge-Markovian model parameters from these series.

Degenerate inputs are not errors: a saturated graph (every possible edge
active) makes the created-fraction denominator zero, and the resulting
``inf``/``nan`` values are returned as-is so callers can detect them.
"""

from typing import Optional, Sequence, Tuple

import numpy as np
import polars as pl

from .events import sweep_events
from ..network.graph import ContactGraph
from ..common.validators import validate_fraction
from ..common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)

# First entry of fraction_deleted_links(): no link count is known yet
NO_DATA = -1.0


def inter_contact(graph: ContactGraph, contact_index: int) -> Optional[int]:
    """
    Time separating a contact from the next contact of the same pair.

    Scans forward from ``contact_index`` for the first contact with the
    same node pair that starts strictly after this contact ends.

    Parameters
    ----------
    graph : ContactGraph
        Graph holding the contacts (sorted by start time)
    contact_index : int
        Index of the contact in ``graph.contacts``

    Returns
    -------
    int or None
        ``next.start - this.end`` (always >= 1), or None when no later
        contact involves the same pair

    Raises
    ------
    IndexError
        If contact_index is out of range

    Examples
    --------
    >>> from contactgraph.network.construction import parse_trace
    >>> graph = parse_trace("1 2 0 3\\n1 2 5 6\\n")
    >>> inter_contact(graph, 0), inter_contact(graph, 1)
    (2, None)
    """
    if not 0 <= contact_index < len(graph.contacts):
        raise IndexError(
            f"Contact index {contact_index} out of range for {len(graph.contacts)} contacts"
        )

    contact = graph.contacts[contact_index]
    for candidate in graph.contacts[contact_index:]:
        if candidate.start > contact.end and candidate.pair == contact.pair:
            return candidate.start - contact.end

    return None


def inter_contact_gaps(graph: ContactGraph) -> np.ma.MaskedArray:
    """
    Inter-contact gap of every contact, computed in one pass.

    Parameters
    ----------
    graph : ContactGraph
        Graph to analyse

    Returns
    -------
    np.ma.MaskedArray
        int64 array aligned with ``graph.contacts``; entry i equals
        ``inter_contact(graph, i)`` and is masked when that is None

    Notes
    -----
    Contacts are grouped by pair (keeping start order inside each group)
    and the next contact starting after each end is found with a binary
    search, giving O(C log C) instead of the O(C^2) forward scans.
    """
    arrays = graph.arrays
    n_contacts = len(arrays.start)
    if n_contacts == 0:
        return np.ma.masked_array(np.zeros(0, dtype=np.int64), mask=np.zeros(0, dtype=bool))

    pair_key = arrays.first * (int(arrays.second.max()) + 1) + arrays.second
    origin = int(arrays.start.min())
    starts = arrays.start - origin
    ends = arrays.end - origin
    span = int(ends.max()) + 1

    # Sort by pair, then by contact index (i.e. by start within a pair)
    order = np.lexsort((np.arange(n_contacts), pair_key))
    sorted_key = pair_key[order]
    sorted_start = starts[order]
    sorted_end = ends[order]

    # (pair, time) packed into one sortable integer per contact
    packed_starts = sorted_key * span + sorted_start
    packed_ends = sorted_key * span + sorted_end

    next_position = np.searchsorted(packed_starts, packed_ends, side="right")
    in_range = next_position < n_contacts
    clipped = np.minimum(next_position, n_contacts - 1)
    found = in_range & (sorted_key[clipped] == sorted_key)

    sorted_gaps = np.where(found, sorted_start[clipped] - sorted_end, 0)

    gaps = np.empty(n_contacts, dtype=np.int64)
    missing = np.empty(n_contacts, dtype=bool)
    gaps[order] = sorted_gaps
    missing[order] = ~found

    return np.ma.masked_array(gaps, mask=missing)


def inter_contact_histogram(graph: ContactGraph) -> np.ndarray:
    """
    Histogram of inter-contact gaps.

    Parameters
    ----------
    graph : ContactGraph
        Graph to analyse

    Returns
    -------
    np.ndarray
        Dense int64 array indexed ``0..max_gap``; bucket k counts the
        contacts whose next same-pair contact starts exactly k steps after
        they end. Empty when no pair has two contacts.

    Notes
    -----
    Gaps are counted per contact occurrence: a pair meeting many times
    contributes one entry per repeated contact. Bucket 0 is always zero
    since a following contact must start strictly after the end.

    Examples
    --------
    >>> from contactgraph.network.construction import parse_trace
    >>> inter_contact_histogram(parse_trace("1 2 0 3\\n1 2 5 6\\n")).tolist()
    [0, 0, 1]
    """
    with LoggingTimer("inter_contact_histogram", {"contacts": len(graph)}):
        gaps = inter_contact_gaps(graph).compressed()

    if len(gaps) == 0:
        logger.debug("No pair meets twice, inter-contact histogram is empty")
        return np.zeros(0, dtype=np.int64)

    return np.bincount(gaps).astype(np.int64)


def average_degrees(graph: ContactGraph) -> np.ndarray:
    """
    Average node degree at each timestep.

    ``avg[t] = avg[t-1] + 2 * (created[t] - deleted[t]) / N``: the series
    is a running sum of per-timestep degree changes, starting from an
    empty graph.

    Parameters
    ----------
    graph : ContactGraph
        Graph to analyse

    Returns
    -------
    np.ndarray
        float64 series with one value per flushed timestep of the event
        sweep (``max(end) + 1`` values, empty for a graph without contacts)
    """
    sweep = sweep_events(graph)
    n = float(graph.number_of_nodes)

    with np.errstate(divide="ignore", invalid="ignore"):
        increments = 2.0 * sweep.delta_edges / n

    return np.cumsum(increments, dtype=np.float64)


def fraction_created_links(graph: ContactGraph) -> np.ndarray:
    """
    Fraction of absent links that appear at each timestep.

    ``2 * created[t] / (N * (N - 1) - 2 * links_before[t])`` where
    ``links_before[t]`` is the number of active edges before timestep t.

    Parameters
    ----------
    graph : ContactGraph
        Graph to analyse

    Returns
    -------
    np.ndarray
        float64 series with one value per flushed timestep

    Notes
    -----
    There is no guard on the denominator: when every possible edge is
    active the value is ``inf`` (or ``nan`` when nothing was created).
    """
    sweep = sweep_events(graph)
    n = float(graph.number_of_nodes)

    absent_links = n * (n - 1.0) - 2.0 * sweep.links_before
    with np.errstate(divide="ignore", invalid="ignore"):
        return (2.0 * sweep.created) / absent_links


def fraction_deleted_links(graph: ContactGraph) -> np.ndarray:
    """
    Fraction of active links that disappear at each timestep.

    Parameters
    ----------
    graph : ContactGraph
        Graph to analyse

    Returns
    -------
    np.ndarray
        float64 series starting with a leading ``-1.0`` ("no data yet"),
        followed by one value per flushed timestep: ``-1.0`` for the first
        timestep, then ``0.0`` when no link was active, otherwise
        ``deleted[t] / links_before[t]``.

    Examples
    --------
    >>> from contactgraph.network.construction import parse_trace
    >>> fraction_deleted_links(parse_trace("1 3 0 2\\n2 3 1 4\\n"))[0]
    -1.0
    """
    sweep = sweep_events(graph)

    fractions = np.empty(sweep.n_steps + 1, dtype=np.float64)
    fractions[0] = NO_DATA

    if sweep.n_steps:
        links = sweep.links_before.astype(np.float64)
        with np.errstate(divide="ignore", invalid="ignore"):
            ratios = np.where(links == 0.0, 0.0, sweep.deleted / links)
        ratios[0] = NO_DATA
        fractions[1:] = ratios

    return fractions


def truncate_histogram(histogram: Sequence[int], fraction: float) -> np.ndarray:
    """
    Drop the rare gaps of a histogram.

    Buckets lower than ``int(fraction * max(histogram))`` are set to zero
    and trailing empty buckets are removed, so the remaining indices keep
    their gap meaning.
    Removing the small buckets instead would shift every later gap value,
    so they are zeroed rather than filtered out.

    Parameters
    ----------
    histogram : Sequence[int]
        Inter-contact histogram
    fraction : float
        Threshold as a fraction of the largest bucket, within [0, 1]

    Returns
    -------
    np.ndarray
        The truncated histogram (int64)

    Raises
    ------
    ConfigurationError
        If fraction is outside [0, 1]

    Examples
    --------
    >>> truncate_histogram([0, 50, 20, 1, 0, 1], 0.1).tolist()
    [0, 50, 20]
    """
    fraction = validate_fraction(fraction, "fraction")
    counts = np.asarray(histogram, dtype=np.int64)
    if counts.size == 0:
        return counts.copy()

    threshold = int(fraction * counts.max())
    kept = np.where(counts >= threshold, counts, 0)

    nonzero = np.flatnonzero(kept)
    if nonzero.size == 0:
        return np.zeros(0, dtype=np.int64)
    return kept[:nonzero[-1] + 1]


def estimate_edge_markovian_parameters(
    fraction_created: Sequence[float],
    fraction_deleted: Sequence[float]
) -> Tuple[float, float]:
    """
    Constant creation and deletion probabilities matching a trace.

    Each probability is the sum of the non-negative entries of its series
    divided by the full series length (the ``-1.0`` no-data markers count
    in the length but not in the sum, ``nan`` entries are skipped).

    Parameters
    ----------
    fraction_created : Sequence[float]
        Output of fraction_created_links()
    fraction_deleted : Sequence[float]
        Output of fraction_deleted_links()

    Returns
    -------
    Tuple[float, float]
        ``(creation_probability, deletion_probability)``
    """
    return _mean_of_non_negative(fraction_created), _mean_of_non_negative(fraction_deleted)


def clip_probabilities(series: Sequence[float]) -> np.ndarray:
    """
    Turn a fraction series into per-timestep probabilities.

    Negative entries (the ``-1.0`` no-data markers) and ``nan`` become 0;
    ``inf`` is kept and means "always".
    """
    return np.fmax(np.asarray(series, dtype=np.float64), 0.0)


def temporal_summary(graph: ContactGraph) -> pl.DataFrame:
    """
    Per-timestep metrics of a graph as a table.

    Parameters
    ----------
    graph : ContactGraph
        Graph to analyse

    Returns
    -------
    pl.DataFrame
        Columns ``t``, ``average_degree``, ``fraction_created`` and
        ``fraction_deleted``, one row per flushed timestep. The leading
        no-data entry of fraction_deleted_links() is dropped to align the
        series on t.

    Examples
    --------
    >>> from contactgraph.network.construction import parse_trace
    >>> temporal_summary(parse_trace("1 2 0 3\\n")).columns
    ['t', 'average_degree', 'fraction_created', 'fraction_deleted']
    """
    degrees = average_degrees(graph)

    return pl.DataFrame({
        "t": np.arange(len(degrees), dtype=np.int64),
        "average_degree": degrees,
        "fraction_created": fraction_created_links(graph),
        "fraction_deleted": fraction_deleted_links(graph)[1:],
    })


def histogram_frame(histogram: Sequence[int]) -> pl.DataFrame:
    """Inter-contact histogram as a table with ``gap`` and ``count`` columns."""
    counts = np.asarray(histogram, dtype=np.int64)
    return pl.DataFrame({
        "gap": np.arange(len(counts), dtype=np.int64),
        "count": counts,
    })


def _mean_of_non_negative(series: Sequence[float]) -> float:
    values = np.asarray(series, dtype=np.float64)
    if values.size == 0:
        return 0.0

    with np.errstate(invalid="ignore"):
        kept = values[values >= 0.0]
    return float(kept.sum() / values.size)
