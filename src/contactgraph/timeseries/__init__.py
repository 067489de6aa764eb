"""
Temporal analysis module.

This module provides the time-indexed statistics of contact graphs:
- Event sweep (creations and suppressions per timestep)
- Inter-contact gaps and their histogram
- Average degree and fractions of created/deleted links over time
- Edge-Markovian parameter estimation from these series
"""

from .events import (
    ContactEvent,
    EventSweep,
    contact_events,
    sweep_events
)

from .temporal_metrics import (
    inter_contact,
    inter_contact_gaps,
    inter_contact_histogram,
    average_degrees,
    fraction_created_links,
    fraction_deleted_links,
    truncate_histogram,
    estimate_edge_markovian_parameters,
    clip_probabilities,
    temporal_summary,
    histogram_frame
)
