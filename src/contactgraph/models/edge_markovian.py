"""
Edge-Markovian generators of synthetic contact graphs.

In an Edge-Markovian model every pair of nodes is an independent two-state
Markov chain: at each timestep an absent edge appears with the creation
probability and a present edge disappears with the deletion probability.
Three variants are provided:

- EdgeMarkovian: constant probabilities
- TimeDependentEdgeMarkovian: probabilities indexed by timestep
- DelayedTimeDependentEdgeMarkovian: time-dependent probabilities, plus a
  reconnection cooldown drawn from an observed inter-contact histogram

Update rule, for t = 1..duration and every pair (1,2), (1,3), ..., (N-1,N):
1. Draw u1 in [0, 1). A connected pair with u1 <= d(t) is closed (its
   contact ends at t); the delayed variant also sets a cooldown.
2. Draw u2 in [0, 1). A disconnected pair (after step 1) that is not
   cooling down, with u2 <= c(t), opens a contact starting at t.

At t = 0 no edge exists. Contacts still open when the simulation ends are
dropped. Runtime is O(N^2 * T); each timestep is vectorised over all pairs.
"""

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .delay_sampler import DelaySampler
from ..network.graph import Contact, ContactGraph
from ..common.exceptions import ConfigurationError, require_positive
from ..common.validators import RandomState, coerce_random_state, validate_probability_series
from ..common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)


@dataclass(frozen=True)
class EdgeMarkovian:
    """
    Edge-Markovian model with constant probabilities.

    Parameters
    ----------
    duration : int
        Number of simulated timesteps
    number_of_nodes : int
        Nodes of the generated graph, numbered 1..number_of_nodes
    creation_probability : float
        Probability that an absent edge appears at a timestep
    deletion_probability : float
        Probability that a present edge disappears at a timestep

    Examples
    --------
    >>> model = EdgeMarkovian(duration=100, number_of_nodes=10,
    ...                       creation_probability=0.05, deletion_probability=0.3)
    >>> graph = model.generate(random_state=42)
    >>> graph.number_of_nodes, graph.duration
    (10, 100)
    """
    duration: int
    number_of_nodes: int
    creation_probability: float
    deletion_probability: float

    def __post_init__(self):
        _validate_dimensions(self.duration, self.number_of_nodes)

    def creation_probability_at(self, t: int) -> float:
        return self.creation_probability

    def deletion_probability_at(self, t: int) -> float:
        return self.deletion_probability

    def generate(self, random_state: RandomState = None) -> ContactGraph:
        """Simulate the model; see simulate()."""
        return simulate(self, random_state)


@dataclass(frozen=True, eq=False)
class TimeDependentEdgeMarkovian:
    """
    Edge-Markovian model whose probabilities change over time.

    Parameters
    ----------
    duration : int
        Number of simulated timesteps
    number_of_nodes : int
        Nodes of the generated graph, numbered 1..number_of_nodes
    creation_probability : Sequence[float]
        ``creation_probability[t]`` is used at timestep t; at least
        ``duration + 1`` entries (entry 0 is never used)
    deletion_probability : Sequence[float]
        Same for deletions

    Raises
    ------
    ConfigurationError
        If duration or number_of_nodes are invalid
    ValidationError
        If a probability sequence is too short
    """
    duration: int
    number_of_nodes: int
    creation_probability: Sequence[float]
    deletion_probability: Sequence[float]

    def __post_init__(self):
        _validate_dimensions(self.duration, self.number_of_nodes)
        object.__setattr__(self, "creation_probability", validate_probability_series(
            self.creation_probability, "creation_probability", self.duration + 1
        ))
        object.__setattr__(self, "deletion_probability", validate_probability_series(
            self.deletion_probability, "deletion_probability", self.duration + 1
        ))

    def creation_probability_at(self, t: int) -> float:
        return self.creation_probability[t]

    def deletion_probability_at(self, t: int) -> float:
        return self.deletion_probability[t]

    def generate(self, random_state: RandomState = None) -> ContactGraph:
        """Simulate the model; see simulate()."""
        return simulate(self, random_state)


@dataclass(frozen=True, eq=False)
class DelayedTimeDependentEdgeMarkovian(TimeDependentEdgeMarkovian):
    """
    Time-dependent Edge-Markovian model with reconnection cooldowns.

    After a deletion at t the pair draws a delay d from the inter-contact
    histogram (see DelaySampler) and cannot reconnect while ``t + d >= now``.

    Parameters
    ----------
    intercontact_histogram : Sequence[int]
        Observed inter-contact histogram, typically the (truncated) output
        of inter_contact_histogram() on the trace being modelled
    single_creation_per_step : bool, default True
        When True, the first pair that opens a contact ends the scan of
        the timestep: the following pairs are neither deleted nor created
        at that step, so at most one edge appears per timestep. Set to
        False to update every pair like the other variants.

    Raises
    ------
    InvalidDistributionError
        If the histogram cannot be sampled, before anything is simulated
    """
    intercontact_histogram: Sequence[int] = ()
    single_creation_per_step: bool = True
    sampler: DelaySampler = field(init=False, repr=False)

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, "sampler", DelaySampler(self.intercontact_histogram))


def simulate(model, random_state: RandomState = None) -> ContactGraph:
    """
    Generate a contact graph from an Edge-Markovian model.

    Parameters
    ----------
    model : EdgeMarkovian, TimeDependentEdgeMarkovian or DelayedTimeDependentEdgeMarkovian
        Model to simulate
    random_state : None, int or np.random.Generator
        Source of randomness. The same seed and model always give the same
        graph.

    Returns
    -------
    ContactGraph
        Graph with nodes ``1..number_of_nodes``, ``duration`` equal to the
        simulated duration and the contacts that were closed before the end,
        ordered by start time then pair order

    Notes
    -----
    Each timestep draws an ``(n_pairs, 2)`` block of uniforms: row i holds
    the deletion and creation draws of pair i, in pair order. The delayed
    variant then draws one delay per deleted pair from the same generator.
    """
    rng = coerce_random_state(random_state)
    sampler = getattr(model, "sampler", None)
    single_creation = bool(getattr(model, "single_creation_per_step", False))

    rows, cols = np.triu_indices(model.number_of_nodes, k=1)
    first = rows.astype(np.int64) + 1
    second = cols.astype(np.int64) + 1
    n_pairs = len(first)

    connected = np.zeros(n_pairs, dtype=bool)
    # Start of the open contact; meaningful only where connected
    opened_at = np.zeros(n_pairs, dtype=np.int64)
    # A pair may reconnect at t only if cooldown_until < t
    cooldown_until = np.zeros(n_pairs, dtype=np.int64)

    closed_pairs = []
    closed_starts = []
    closed_ends = []

    progress_every = max(1, model.duration // 10)
    details = {
        "model": type(model).__name__,
        "nodes": model.number_of_nodes,
        "duration": model.duration,
    }

    logger.info(f"Simulating {type(model).__name__}: {model.number_of_nodes} nodes, "
                f"{n_pairs} pairs, {model.duration} timesteps")

    with LoggingTimer("simulate_edge_markovian", details):
        for t in range(1, model.duration + 1):
            draws = rng.random((n_pairs, 2))

            deleting = connected & (draws[:, 0] <= model.deletion_probability_at(t))
            creating = ~(connected & ~deleting) & (draws[:, 1] <= model.creation_probability_at(t))

            if sampler is not None:
                cooldown_next = cooldown_until.copy()
                cooldown_next[deleting] = t + sampler.sample(rng, size=int(deleting.sum()))
                creating &= cooldown_next < t

            if single_creation:
                hits = np.flatnonzero(creating)
                if hits.size:
                    # Pairs after the first creation are not visited this step
                    stop = hits[0]
                    deleting[stop + 1:] = False
                    creating[:] = False
                    creating[stop] = True

            if sampler is not None:
                cooldown_until[deleting] = cooldown_next[deleting]

            closing = np.flatnonzero(deleting)
            if closing.size:
                closed_pairs.append(closing)
                closed_starts.append(opened_at[closing])
                closed_ends.append(np.full(closing.size, t, dtype=np.int64))
                connected[closing] = False

            opened_at[creating] = t
            connected[creating] = True

            if t % progress_every == 0:
                logger.debug(f"t={t}/{model.duration}: {int(connected.sum())} active edges")

    dropped = int(connected.sum())
    if dropped:
        logger.debug(f"Dropping {dropped} contacts still open at the end of the simulation")

    contacts = _assemble_contacts(first, second, closed_pairs, closed_starts, closed_ends)
    graph = ContactGraph.from_node_count(model.number_of_nodes, contacts, model.duration)

    logger.info(f"Generated {len(graph)} contacts")
    return graph


def simulate_edge_markovian(
    duration: int,
    number_of_nodes: int,
    creation_probability: float,
    deletion_probability: float,
    random_state: RandomState = None
) -> ContactGraph:
    """
    Generate a graph from a constant-probability Edge-Markovian model.

    Examples
    --------
    >>> graph = simulate_edge_markovian(5, 2, 0.0, 0.5, random_state=0)
    >>> len(graph)
    0
    """
    model = EdgeMarkovian(
        duration=duration,
        number_of_nodes=number_of_nodes,
        creation_probability=creation_probability,
        deletion_probability=deletion_probability,
    )
    return model.generate(random_state)


def _assemble_contacts(first, second, closed_pairs, closed_starts, closed_ends):
    """Turn the closed (pair, start, end) records into sorted Contacts."""
    if not closed_pairs:
        return []

    pairs = np.concatenate(closed_pairs)
    starts = np.concatenate(closed_starts)
    ends = np.concatenate(closed_ends)

    # Creation order: by start time, then by pair order within a timestep
    order = np.lexsort((pairs, starts))

    return [
        Contact(int(first[p]), int(second[p]), int(s), int(e))
        for p, s, e in zip(pairs[order], starts[order], ends[order])
    ]


def _validate_dimensions(duration: int, number_of_nodes: int) -> None:
    for name, value in (("duration", duration), ("number_of_nodes", number_of_nodes)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise ConfigurationError(
                f"Parameter '{name}' must be an integer, got {value!r}",
                parameter=name,
                value=value
            )

    require_positive(duration, "duration", allow_zero=True)
    require_positive(number_of_nodes, "number_of_nodes")
