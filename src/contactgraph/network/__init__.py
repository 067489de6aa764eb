"""
Contact graph module.

This module provides the temporal graph representation and its I/O:
- Contact and ContactGraph data model
- Trace loading with normalization (time shift, stable sort by start)
- StartEnd and CreateDelete export, CSV export of series
"""

# Data model
from .graph import (
    Contact,
    ContactArrays,
    ContactGraph
)

# Trace loading
from .construction import (
    build_graph_from_contacts,
    parse_trace,
    load_trace
)

# Export
from .export import (
    to_start_end,
    to_create_delete,
    export_graph,
    export_series
)
