"""
Analyse, simulate and compare workflows.

These functions chain the loader, the temporal metrics and the
Edge-Markovian generators the way the command line uses them:

- analyse_graph(): compute every metric of a graph
- simulate_graph(): generate a graph with constant probabilities and
  analyse it
- compare(): fit one of the three models to a trace, generate a synthetic
  graph with the fitted parameters and analyse both
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Union

import numpy as np
import polars as pl
from scipy import stats

from .network.graph import ContactGraph
from .timeseries.temporal_metrics import (
    average_degrees,
    clip_probabilities,
    estimate_edge_markovian_parameters,
    fraction_created_links,
    fraction_deleted_links,
    inter_contact_histogram,
    temporal_summary,
    truncate_histogram,
)
from .models.edge_markovian import (
    DelayedTimeDependentEdgeMarkovian,
    EdgeMarkovian,
    TimeDependentEdgeMarkovian,
)
from .common.validators import RandomState, coerce_random_state, validate_fraction
from .common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)

DEFAULT_TRUNCATE = 0.01


class ModelKind(IntEnum):
    """Model selector of the compare workflow."""
    EDGE_MARKOVIAN = 1
    TIME_DEPENDENT = 2
    DELAYED_TIME_DEPENDENT = 3


@dataclass(frozen=True, eq=False)
class AnalysisReport:
    """
    Every metric of one graph.

    Attributes
    ----------
    graph : ContactGraph
        The analysed graph
    truncate : float
        Fraction used to truncate the histogram
    histogram : np.ndarray
        Truncated inter-contact histogram
    fraction_created : np.ndarray
        Output of fraction_created_links()
    fraction_deleted : np.ndarray
        Output of fraction_deleted_links()
    average_degree : np.ndarray
        Output of average_degrees()
    creation_probability : float
        Mean creation probability (Edge-Markovian estimate)
    deletion_probability : float
        Mean deletion probability (Edge-Markovian estimate)
    title_prefix : str
        Label prepended to figure titles, e.g. "REAL GRAPH: "
    """
    graph: ContactGraph
    truncate: float
    histogram: np.ndarray
    fraction_created: np.ndarray
    fraction_deleted: np.ndarray
    average_degree: np.ndarray
    creation_probability: float
    deletion_probability: float
    title_prefix: str = ""

    def summary(self) -> pl.DataFrame:
        """Per-timestep metrics as a polars table (see temporal_summary)."""
        return temporal_summary(self.graph)


@dataclass(frozen=True, eq=False)
class ComparisonResult:
    """Reports of a trace and of the model fitted to it."""
    kind: ModelKind
    model: Union[EdgeMarkovian, TimeDependentEdgeMarkovian, DelayedTimeDependentEdgeMarkovian]
    real: AnalysisReport
    simulated: AnalysisReport

    @property
    def reports(self):
        return [self.real, self.simulated]

    def statistics(self) -> pl.DataFrame:
        """
        Side-by-side statistics of the real and simulated graphs.

        Returns
        -------
        pl.DataFrame
            One row per metric with columns ``metric``, ``real``,
            ``simulated`` (means) and ``wasserstein`` (earth mover's distance
            between the two empirical distributions, NaN when either side
            has no data)
        """
        rows = []

        rows.append(_histogram_row(self.real.histogram, self.simulated.histogram))
        for metric in ("average_degree", "fraction_created", "fraction_deleted"):
            rows.append(_series_row(
                metric,
                _valid_values(getattr(self.real, metric)),
                _valid_values(getattr(self.simulated, metric))
            ))

        for name, real, simulated in (
            ("contacts", len(self.real.graph), len(self.simulated.graph)),
            ("creation_probability",
             self.real.creation_probability, self.simulated.creation_probability),
            ("deletion_probability",
             self.real.deletion_probability, self.simulated.deletion_probability),
        ):
            rows.append({
                "metric": name,
                "real": float(real),
                "simulated": float(simulated),
                "wasserstein": float("nan"),
            })

        return pl.DataFrame(rows, schema={
            "metric": pl.Utf8,
            "real": pl.Float64,
            "simulated": pl.Float64,
            "wasserstein": pl.Float64,
        })


def analyse_graph(
    graph: ContactGraph,
    truncate: float = DEFAULT_TRUNCATE,
    title_prefix: str = ""
) -> AnalysisReport:
    """
    Compute and log the main characteristics of a graph.

    Parameters
    ----------
    graph : ContactGraph
        Graph to analyse
    truncate : float, default 0.01
        Histogram buckets below ``truncate * max`` are dropped
    title_prefix : str, default ""
        Label of the graph in logs and figures

    Returns
    -------
    AnalysisReport
        All metrics of the graph

    Raises
    ------
    ConfigurationError
        If truncate is outside [0, 1]
    """
    truncate = validate_fraction(truncate, "truncate")

    logger.info(f"{title_prefix}number of nodes: {graph.number_of_nodes}")
    logger.info(f"{title_prefix}number of contacts: {len(graph)}")
    logger.info(f"{title_prefix}duration: {graph.duration}")

    with LoggingTimer("analyse_graph", {"contacts": len(graph)}):
        histogram = truncate_histogram(inter_contact_histogram(graph), truncate)
        created = fraction_created_links(graph)
        deleted = fraction_deleted_links(graph)
        degrees = average_degrees(graph)

    creation_probability, deletion_probability = estimate_edge_markovian_parameters(
        created, deleted
    )
    logger.info(f"{title_prefix}average creation probability {creation_probability}")
    logger.info(f"{title_prefix}average deletion probability {deletion_probability}")

    return AnalysisReport(
        graph=graph,
        truncate=truncate,
        histogram=histogram,
        fraction_created=created,
        fraction_deleted=deleted,
        average_degree=degrees,
        creation_probability=creation_probability,
        deletion_probability=deletion_probability,
        title_prefix=title_prefix,
    )


def simulate_graph(
    duration: int,
    number_of_nodes: int,
    creation_probability: float,
    deletion_probability: float,
    truncate: float = DEFAULT_TRUNCATE,
    random_state: RandomState = None
) -> AnalysisReport:
    """
    Generate a constant-probability Edge-Markovian graph and analyse it.

    Raises
    ------
    ConfigurationError
        If the model parameters or truncate are invalid
    """
    model = EdgeMarkovian(
        duration=duration,
        number_of_nodes=number_of_nodes,
        creation_probability=creation_probability,
        deletion_probability=deletion_probability,
    )
    return analyse_graph(model.generate(random_state), truncate)


def build_model(
    graph: ContactGraph,
    kind: Union[ModelKind, int],
    truncate: float = DEFAULT_TRUNCATE
):
    """
    Fit an Edge-Markovian model to a graph.

    Parameters
    ----------
    graph : ContactGraph
        Observed graph
    kind : ModelKind or int
        - 1: EdgeMarkovian with the mean creation/deletion probabilities
        - 2: TimeDependentEdgeMarkovian with the per-timestep fractions,
          negative entries clipped to 0
        - 3: as 2, plus the truncated inter-contact histogram of the graph
    truncate : float, default 0.01
        Histogram truncation fraction (model 3 only)

    Returns
    -------
    EdgeMarkovian, TimeDependentEdgeMarkovian or DelayedTimeDependentEdgeMarkovian
        Model with the duration and node count of the graph

    Raises
    ------
    NotImplementedError
        If kind is not a known model
    InvalidDistributionError
        For model 3, if the graph has no usable inter-contact histogram
        (no pair meets twice)

    Notes
    -----
    Series are padded with zeros up to ``duration + 1`` entries when the
    graph's duration extends past its last event (simulated graphs).
    """
    try:
        kind = ModelKind(kind)
    except ValueError:
        raise NotImplementedError(f"Unknown model selector: {kind!r}") from None

    created = fraction_created_links(graph)
    deleted = fraction_deleted_links(graph)

    if kind is ModelKind.EDGE_MARKOVIAN:
        creation_probability, deletion_probability = estimate_edge_markovian_parameters(
            created, deleted
        )
        logger.debug(
            f"Edge-Markovian parameters: creation={creation_probability}, "
            f"deletion={deletion_probability}"
        )
        return EdgeMarkovian(
            duration=graph.duration,
            number_of_nodes=graph.number_of_nodes,
            creation_probability=creation_probability,
            deletion_probability=deletion_probability,
        )

    length = graph.duration + 1
    creation_probability = _pad(clip_probabilities(created), length)
    deletion_probability = _pad(clip_probabilities(deleted), length)

    if kind is ModelKind.TIME_DEPENDENT:
        return TimeDependentEdgeMarkovian(
            duration=graph.duration,
            number_of_nodes=graph.number_of_nodes,
            creation_probability=creation_probability,
            deletion_probability=deletion_probability,
        )

    histogram = truncate_histogram(inter_contact_histogram(graph), truncate)
    return DelayedTimeDependentEdgeMarkovian(
        duration=graph.duration,
        number_of_nodes=graph.number_of_nodes,
        creation_probability=creation_probability,
        deletion_probability=deletion_probability,
        intercontact_histogram=histogram,
    )


def compare(
    graph: ContactGraph,
    kind: Union[ModelKind, int],
    truncate: float = DEFAULT_TRUNCATE,
    random_state: RandomState = None
) -> ComparisonResult:
    """
    Analyse a graph and the synthetic graph of a model fitted to it.

    Parameters
    ----------
    graph : ContactGraph
        Observed graph
    kind : ModelKind or int
        Model selector, see build_model()
    truncate : float, default 0.01
        Histogram truncation fraction
    random_state : None, int or np.random.Generator
        Source of randomness of the simulation

    Returns
    -------
    ComparisonResult
        Reports of the real and simulated graphs

    Raises
    ------
    NotImplementedError
        If kind is not a known model

    Examples
    --------
    >>> result = compare(load_trace("trace.txt"), 2, random_state=7)
    >>> result.statistics()
    """
    truncate = validate_fraction(truncate, "truncate")
    rng = coerce_random_state(random_state)

    logger.debug("Analysing graph")
    real = analyse_graph(graph, truncate, title_prefix="REAL GRAPH: ")

    model = build_model(graph, kind, truncate)
    logger.debug(f"Creating model {type(model).__name__} (can take a very long time)")
    synthetic = model.generate(rng)

    logger.info("Analysing model")
    simulated = analyse_graph(synthetic, truncate, title_prefix="MODEL: ")

    return ComparisonResult(kind=ModelKind(kind), model=model, real=real, simulated=simulated)


def _pad(series: np.ndarray, length: int) -> np.ndarray:
    if len(series) >= length:
        return series
    return np.concatenate((series, np.zeros(length - len(series))))


def _valid_values(series: np.ndarray) -> np.ndarray:
    """Finite, non-negative entries (drops no-data markers, nan and inf)."""
    values = np.asarray(series, dtype=np.float64)
    return values[np.isfinite(values) & (values >= 0.0)]


def _series_row(metric: str, real: np.ndarray, simulated: np.ndarray) -> dict:
    distance = float("nan")
    if real.size and simulated.size:
        distance = float(stats.wasserstein_distance(real, simulated))

    return {
        "metric": metric,
        "real": float(real.mean()) if real.size else float("nan"),
        "simulated": float(simulated.mean()) if simulated.size else float("nan"),
        "wasserstein": distance,
    }


def _histogram_row(real: np.ndarray, simulated: np.ndarray) -> dict:
    """Mean gap and distance between two inter-contact histograms."""
    def mean_gap(histogram):
        total = histogram.sum()
        if total == 0:
            return float("nan")
        return float(np.dot(np.arange(len(histogram)), histogram) / total)

    distance = float("nan")
    if real.sum() > 0 and simulated.sum() > 0:
        distance = float(stats.wasserstein_distance(
            np.arange(len(real)), np.arange(len(simulated)),
            u_weights=real, v_weights=simulated
        ))

    return {
        "metric": "inter_contact_gap",
        "real": mean_gap(real),
        "simulated": mean_gap(simulated),
        "wasserstein": distance,
    }
