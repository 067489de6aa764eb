"""
Edge-Markovian generative models.
"""

from .delay_sampler import DelaySampler

from .edge_markovian import (
    EdgeMarkovian,
    TimeDependentEdgeMarkovian,
    DelayedTimeDependentEdgeMarkovian,
    simulate,
    simulate_edge_markovian
)
