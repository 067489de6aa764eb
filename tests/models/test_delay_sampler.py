"""
Tests for the reconnection delay sampler.
"""

import numpy as np
import pytest

from contactgraph.common.exceptions import InvalidDistributionError
from contactgraph.models.delay_sampler import DELAY_OFFSET, DelaySampler


class TestDelaySampler:
    """Test DelaySampler."""

    def test_support_is_offset(self):
        """Test bucket k yields a delay of k - 1."""
        sampler = DelaySampler([0, 3, 1])
        assert DELAY_OFFSET == -1
        assert sampler.support.tolist() == [-1, 0, 1]
        np.testing.assert_allclose(sampler.probabilities, [0.0, 0.75, 0.25])
        assert sampler.mean == pytest.approx(0.25)

    def test_single_bucket(self):
        """Test a one-point distribution always returns the same delay."""
        sampler = DelaySampler([0, 0, 0, 7])
        draws = sampler.sample(1, size=50)
        assert draws.dtype == np.int64
        assert set(draws.tolist()) == {2}

    def test_single_draw_is_int(self):
        """Test size=None returns a plain integer."""
        assert isinstance(DelaySampler([5]).sample(0), int)
        assert DelaySampler([5]).sample(0) == -1

    def test_zero_size(self):
        """Test size=0 returns an empty array."""
        assert DelaySampler([1, 1]).sample(0, size=0).size == 0

    def test_zero_weight_never_drawn(self):
        """Test empty buckets are never sampled."""
        draws = DelaySampler([0, 1, 0, 1]).sample(3, size=500)
        assert set(draws.tolist()) <= {0, 2}

    def test_frequencies_follow_weights(self):
        """Test draw frequencies approach the bucket proportions."""
        draws = DelaySampler([0, 3, 1]).sample(12345, size=20000)
        assert np.mean(draws == 0) == pytest.approx(0.75, abs=0.02)

    def test_seeded_draws_reproducible(self):
        """Test the same seed gives the same draws."""
        sampler = DelaySampler([1, 2, 3, 4])
        np.testing.assert_array_equal(sampler.sample(9, size=20), sampler.sample(9, size=20))

    @pytest.mark.parametrize("histogram", [
        [],
        [0, 0, 0],
        [1, -1, 2],
        [1, np.inf],
        [[1, 2], [3, 4]],
    ])
    def test_invalid_histogram(self, histogram):
        """Test unusable histograms raise InvalidDistributionError."""
        with pytest.raises(InvalidDistributionError):
            DelaySampler(histogram)
