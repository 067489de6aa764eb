"""
Common utilities for the contactgraph library.

This module provides shared functionality used across all other modules:
- Custom exception hierarchy
- Parameter validation and random-state handling
- Logging configuration
"""

# Exception hierarchy - available for import throughout the library
from .exceptions import (
    NetworkAnalysisError,
    ValidationError,
    GraphConstructionError,
    ConfigurationError,
    ComputationError,
    DataFormatError,
    InvalidDistributionError,
    validate_parameter,
    require_positive
)

from .validators import (
    RandomState,
    coerce_random_state,
    validate_probability_series,
    validate_fraction
)

# Logging configuration
from .logging_config import (
    setup_logging,
    get_logger,
    configure_external_library_logging,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter,
    PerformanceFilter
)
