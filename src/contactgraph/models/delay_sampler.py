"""
Reconnection delays drawn from an observed inter-contact histogram.

The delayed Edge-Markovian model forbids a pair to reconnect right after a
disconnection: it must wait for a cooldown drawn from the inter-contact
distribution of a real trace.

Bucket ``k`` of the histogram counts observed gaps of length ``k``. In the
model a pair closed at t with cooldown ``d`` may reopen at ``t + d + 1`` at
the earliest, i.e. after a gap of ``d + 1``. The sampler therefore returns
``k - 1`` for bucket k: bucket 0 stands for delay -1 ("immediate", the pair
may reopen in the very step it closed).
"""

from typing import Optional, Sequence, Union

import numpy as np
from scipy import stats

from ..common.exceptions import InvalidDistributionError
from ..common.validators import RandomState, coerce_random_state
from ..common.logging_config import get_logger

logger = get_logger(__name__)

# Bucket k of the histogram yields a delay of k + DELAY_OFFSET
DELAY_OFFSET = -1


class DelaySampler:
    """
    Weighted discrete distribution of reconnection delays.

    Parameters
    ----------
    histogram : Sequence[float]
        Inter-contact histogram; weights must be finite, non-negative and
        not all zero

    Raises
    ------
    InvalidDistributionError
        If the histogram is empty or no delay could ever be drawn from it

    Examples
    --------
    >>> sampler = DelaySampler([0, 3, 1])
    >>> sampler.support.tolist()
    [-1, 0, 1]
    >>> sampler.probabilities.tolist()
    [0.0, 0.75, 0.25]
    >>> int(sampler.sample(42)) in (0, 1)
    True
    """

    def __init__(self, histogram: Sequence[float]):
        weights = np.asarray(histogram, dtype=np.float64)
        _validate_histogram(weights)

        self._weights = weights
        self._support = np.arange(len(weights), dtype=np.int64) + DELAY_OFFSET
        self._probabilities = weights / weights.sum()
        self._distribution = stats.rv_discrete(
            name="intercontact_delay",
            values=(self._support, self._probabilities)
        )

        logger.debug(
            f"Delay sampler over {len(weights)} buckets, "
            f"mean delay {self.mean:.3f}"
        )

    @property
    def support(self) -> np.ndarray:
        """Delay values that can be drawn, one per histogram bucket."""
        return self._support.copy()

    @property
    def probabilities(self) -> np.ndarray:
        """Probability of each value of ``support``."""
        return self._probabilities.copy()

    @property
    def mean(self) -> float:
        return float(self._distribution.mean())

    def sample(
        self,
        random_state: RandomState = None,
        size: Optional[int] = None
    ) -> Union[int, np.ndarray]:
        """
        Draw delays with probability proportional to the histogram weights.

        Parameters
        ----------
        random_state : None, int or np.random.Generator
            Source of randomness; pass the simulation's Generator to keep a
            single reproducible stream
        size : int, optional
            Number of draws. None draws a single value.

        Returns
        -------
        int or np.ndarray
            One delay, or an int64 array of ``size`` delays
        """
        rng = coerce_random_state(random_state)

        if size is None:
            return int(self._distribution.rvs(random_state=rng))
        if size == 0:
            return np.zeros(0, dtype=np.int64)
        return np.asarray(self._distribution.rvs(size=size, random_state=rng), dtype=np.int64)

    def __repr__(self) -> str:
        return f"DelaySampler(buckets={len(self._weights)}, mean={self.mean:.3f})"


def _validate_histogram(weights: np.ndarray) -> None:
    """Reject histograms that cannot define a distribution."""
    if weights.ndim != 1 or weights.size == 0:
        raise InvalidDistributionError(
            "Delay histogram must be a non-empty one-dimensional sequence",
            bucket_count=int(weights.size)
        )

    if not np.all(np.isfinite(weights)):
        raise InvalidDistributionError(
            "Delay histogram contains non-finite weights",
            bucket_count=int(weights.size)
        )

    if np.any(weights < 0):
        raise InvalidDistributionError(
            "Delay histogram contains negative weights",
            bucket_count=int(weights.size)
        )

    total = float(weights.sum())
    if total <= 0.0:
        raise InvalidDistributionError(
            "Delay histogram has no positive weight, no delay can be drawn",
            total_weight=total,
            bucket_count=int(weights.size)
        )
