"""
contactgraph - Temporal contact graph analysis and Edge-Markovian synthesis.

This package loads contact traces (undirected edges active over integer time
intervals), computes their temporal statistics and generates synthetic
graphs with Edge-Markovian models fitted to them.

Modules:
    common: Exceptions, validation helpers and logging configuration
    network: Contact graph model, trace loading and export
    timeseries: Event sweep and temporal metrics
    models: Edge-Markovian generators and the delay sampler
    workflows: Analyse, simulate and compare pipelines
    visualization: matplotlib figures (optional, requires the viz extra)
"""

__version__ = "0.1.0"

from .network import Contact, ContactGraph, load_trace, parse_trace
from .models import (
    EdgeMarkovian,
    TimeDependentEdgeMarkovian,
    DelayedTimeDependentEdgeMarkovian,
)
