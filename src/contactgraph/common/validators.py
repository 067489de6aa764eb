"""
Input validation utilities for the contactgraph library.

This module provides validation helpers shared by the metric functions,
the Edge-Markovian models and the workflows, ensuring parameters are
usable before any expensive computation starts.
"""

from typing import Any, Sequence, Union

import numpy as np

from .exceptions import ConfigurationError, ValidationError

RandomState = Union[None, int, np.random.Generator]


def coerce_random_state(random_state: RandomState = None) -> np.random.Generator:
    """
    Turn a seed-like value into a numpy random Generator.

    Parameters
    ----------
    random_state : None, int or np.random.Generator
        - None: fresh, non-reproducible generator
        - int: seed for a new generator
        - Generator: returned unchanged, so callers can share one stream

    Returns
    -------
    np.random.Generator
        Generator to draw from

    Raises
    ------
    ConfigurationError
        If random_state is of any other type (including bool and
        negative seeds)

    Examples
    --------
    >>> rng = coerce_random_state(42)
    >>> rng is coerce_random_state(rng)
    True
    """
    if random_state is None or isinstance(random_state, np.random.Generator):
        return np.random.default_rng(random_state)

    if isinstance(random_state, (int, np.integer)) and not isinstance(random_state, bool):
        if random_state < 0:
            raise ConfigurationError(
                f"Random seed must be non-negative, got {random_state}",
                parameter="random_state",
                value=random_state
            )
        return np.random.default_rng(int(random_state))

    raise ConfigurationError(
        f"random_state must be None, an int seed or a numpy Generator, "
        f"got {type(random_state).__name__}",
        parameter="random_state"
    )


def validate_probability_series(
    values: Sequence[float],
    name: str,
    min_length: int
) -> np.ndarray:
    """
    Validate a per-timestep probability sequence.

    Parameters
    ----------
    values : Sequence[float]
        Probabilities indexed by timestep
    name : str
        Parameter name used in error messages
    min_length : int
        Minimum number of entries (duration + 1 for a simulation)

    Returns
    -------
    np.ndarray
        The values as a read-only float64 array

    Raises
    ------
    ValidationError
        If the sequence is not one-dimensional or too short

    Notes
    -----
    Values are not range-checked: probabilities estimated from a trace can
    be infinite or NaN (saturated graphs), and the update rule
    ``u <= p`` handles them without special cases.
    """
    array = np.array(values, dtype=np.float64)

    if array.ndim != 1:
        raise ValidationError(
            f"Probability sequence must be one-dimensional, got shape {array.shape}",
            field=name
        )

    if len(array) < min_length:
        raise ValidationError(
            f"Probability sequence has {len(array)} entries, "
            f"at least {min_length} are required",
            field=name,
            expected=f">= {min_length} entries"
        )

    array.setflags(write=False)
    return array


def validate_fraction(value: Any, name: str) -> float:
    """
    Validate a fraction in the closed interval [0, 1].

    Parameters
    ----------
    value : Any
        Value to check
    name : str
        Parameter name used in error messages

    Returns
    -------
    float
        The value as a float

    Raises
    ------
    ConfigurationError
        If the value is not a number in [0, 1]
    """
    try:
        fraction = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Parameter '{name}' must be a number, got {value!r}",
            parameter=name,
            value=value
        ) from e

    if not 0.0 <= fraction <= 1.0:
        raise ConfigurationError(
            f"Parameter '{name}' must be within [0, 1], got {fraction}",
            parameter=name,
            value=fraction
        )

    return fraction
