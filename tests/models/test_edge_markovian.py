"""
Tests for the Edge-Markovian generators.

The degenerate probabilities 0 and 1 make the update rule deterministic
(uniform draws lie in [0, 1)), which pins down the exact output of each
variant independently of the random stream.
"""

import numpy as np
import pytest

from contactgraph.common.exceptions import (
    ConfigurationError,
    InvalidDistributionError,
    ValidationError
)
from contactgraph.models.edge_markovian import (
    DelayedTimeDependentEdgeMarkovian,
    EdgeMarkovian,
    TimeDependentEdgeMarkovian,
    simulate_edge_markovian
)
from contactgraph.timeseries.temporal_metrics import (
    average_degrees,
    inter_contact_gaps,
    inter_contact_histogram
)


def records(graph):
    return [contact.as_record() for contact in graph.contacts]


class TestEdgeMarkovian:
    """Test the constant-probability model."""

    def test_never_deleted_contacts_are_dropped(self):
        """Test contacts still open at the end are not reported."""
        graph = EdgeMarkovian(5, 2, 1.0, 0.0).generate(random_state=0)
        assert records(graph) == []
        assert graph.nodes == (1, 2)
        assert graph.duration == 5

    def test_always_toggling(self):
        """Test a closed edge can reopen in the same timestep."""
        graph = EdgeMarkovian(4, 2, 1.0, 1.0).generate(random_state=0)
        assert records(graph) == [(1, 2, 1, 2), (1, 2, 2, 3), (1, 2, 3, 4)]

    def test_pair_order_within_timestep(self):
        """Test contacts are ordered by start, then by pair order."""
        graph = EdgeMarkovian(2, 3, 1.0, 1.0).generate(random_state=0)
        assert records(graph) == [(1, 2, 1, 2), (1, 3, 1, 2), (2, 3, 1, 2)]

    def test_no_creation_gives_no_contacts(self):
        """Test a zero creation probability never creates an edge."""
        graph = EdgeMarkovian(50, 6, 0.0, 0.5).generate(random_state=3)
        assert len(graph) == 0

    def test_zero_duration(self):
        """Test a zero-length simulation is valid."""
        graph = EdgeMarkovian(0, 3, 0.5, 0.5).generate(random_state=1)
        assert len(graph) == 0
        assert graph.duration == 0

    def test_single_node(self):
        """Test one node has no pair and therefore no contact."""
        assert len(EdgeMarkovian(10, 1, 1.0, 1.0).generate(random_state=1)) == 0

    def test_seeded_determinism(self):
        """Test the same seed gives the same graph."""
        model = EdgeMarkovian(100, 8, 0.05, 0.3)
        assert model.generate(random_state=42) == model.generate(random_state=42)

    def test_generator_random_state(self):
        """Test a numpy Generator can drive the simulation."""
        first = EdgeMarkovian(60, 5, 0.1, 0.3).generate(np.random.default_rng(5))
        second = EdgeMarkovian(60, 5, 0.1, 0.3).generate(np.random.default_rng(5))
        assert records(first) == records(second)

    def test_output_invariants(self):
        """Test a random graph satisfies the graph invariants and metric bounds."""
        graph = EdgeMarkovian(200, 10, 0.05, 0.2).generate(random_state=11)

        assert len(graph) > 0
        starts = [c.start for c in graph.contacts]
        assert starts == sorted(starts)
        assert all(1 <= c.start < c.end <= graph.duration for c in graph.contacts)
        assert all(1 <= c.first < c.second <= 10 for c in graph.contacts)

        assert len(average_degrees(graph)) <= graph.duration + 1
        gaps = inter_contact_gaps(graph)
        assert inter_contact_histogram(graph).sum() == gaps.count()

    def test_contacts_of_a_pair_do_not_overlap(self):
        """Test each pair has at most one open contact at a time."""
        graph = EdgeMarkovian(300, 6, 0.1, 0.4).generate(random_state=2)
        last_end = {}
        for contact in graph.contacts:
            assert contact.start >= last_end.get(contact.pair, 0)
            last_end[contact.pair] = contact.end

    def test_convenience_function(self):
        """Test simulate_edge_markovian builds and runs the model."""
        graph = simulate_edge_markovian(5, 2, 0.0, 0.5, random_state=0)
        assert len(graph) == 0

    @pytest.mark.parametrize("duration,nodes", [(-1, 3), (10, 0), (2.5, 3), (10, True)])
    def test_invalid_dimensions(self, duration, nodes):
        """Test invalid duration or node count raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            EdgeMarkovian(duration, nodes, 0.1, 0.1)


class TestTimeDependentEdgeMarkovian:
    """Test the time-dependent model."""

    def test_probabilities_indexed_by_time(self):
        """Test the probability of timestep t is read at index t."""
        # Creation only possible at t=2, deletion only at t=4
        creation = [0.0, 0.0, 1.0, 0.0, 0.0, 0.0]
        deletion = [0.0, 0.0, 0.0, 0.0, 1.0, 0.0]
        graph = TimeDependentEdgeMarkovian(5, 2, creation, deletion).generate(random_state=0)
        assert records(graph) == [(1, 2, 2, 4)]

    def test_matches_constant_model(self):
        """Test constant sequences reproduce the constant model."""
        constant = EdgeMarkovian(80, 5, 0.1, 0.3).generate(random_state=21)
        varying = TimeDependentEdgeMarkovian(80, 5, [0.1] * 81, [0.3] * 81).generate(random_state=21)
        assert records(constant) == records(varying)

    def test_sequences_are_frozen(self):
        """Test the stored probabilities are read-only arrays."""
        model = TimeDependentEdgeMarkovian(2, 2, [0.1, 0.2, 0.3], [0.1, 0.2, 0.3])
        assert not model.creation_probability.flags.writeable

    def test_sequence_too_short(self):
        """Test sequences need duration + 1 entries."""
        with pytest.raises(ValidationError):
            TimeDependentEdgeMarkovian(5, 2, [0.1] * 5, [0.1] * 6)

    def test_seeded_determinism(self):
        """Test the same seed gives the same graph."""
        model = TimeDependentEdgeMarkovian(
            50, 6, np.linspace(0, 0.2, 51), np.linspace(0.5, 0.1, 51)
        )
        assert records(model.generate(7)) == records(model.generate(7))


class TestDelayedTimeDependentEdgeMarkovian:
    """Test the time-dependent model with reconnection cooldowns."""

    def _model(self, duration, nodes, histogram, single_creation=True):
        return DelayedTimeDependentEdgeMarkovian(
            duration=duration,
            number_of_nodes=nodes,
            creation_probability=[1.0] * (duration + 1),
            deletion_probability=[1.0] * (duration + 1),
            intercontact_histogram=histogram,
            single_creation_per_step=single_creation,
        )

    def test_cooldown_delays_reconnection(self):
        """Test a delay of 1 keeps the pair apart for two timesteps."""
        # Only bucket 2 is populated: every delay is 1
        graph = self._model(4, 2, [0, 0, 1]).generate(random_state=0)
        assert records(graph) == [(1, 2, 1, 2)]

    def test_immediate_reconnection(self):
        """Test bucket 0 (delay -1) lets the pair reopen in the same step."""
        graph = self._model(4, 2, [1]).generate(random_state=0)
        assert records(graph) == [(1, 2, 1, 2), (1, 2, 2, 3), (1, 2, 3, 4)]

    def test_single_creation_per_step(self):
        """Test the first creation ends the scan of the timestep."""
        graph = self._model(3, 3, [1]).generate(random_state=0)
        assert records(graph) == [(1, 2, 1, 2), (1, 2, 2, 3)]

    def test_every_pair_updated_without_cap(self):
        """Test single_creation_per_step=False updates every pair."""
        graph = self._model(3, 3, [1], single_creation=False).generate(random_state=0)
        assert records(graph) == [
            (1, 2, 1, 2), (1, 3, 1, 2), (2, 3, 1, 2),
            (1, 2, 2, 3), (1, 3, 2, 3), (2, 3, 2, 3),
        ]

    def test_invalid_histogram_rejected_at_construction(self):
        """Test an all-zero histogram fails before simulating."""
        with pytest.raises(InvalidDistributionError):
            self._model(10, 3, [0, 0, 0])

    def test_sampler_built_once(self):
        """Test the delay sampler is available on the model."""
        model = self._model(2, 2, [0, 1, 1])
        assert model.sampler.support.tolist() == [-1, 0, 1]

    def test_seeded_determinism(self):
        """Test the same seed gives the same graph."""
        model = DelayedTimeDependentEdgeMarkovian(
            duration=80,
            number_of_nodes=6,
            creation_probability=[0.2] * 81,
            deletion_probability=[0.4] * 81,
            intercontact_histogram=[0, 5, 3, 2, 1],
        )
        first = model.generate(random_state=13)
        second = model.generate(random_state=13)
        assert records(first) == records(second)

    def test_gaps_respect_cooldown(self):
        """Test every observed gap is at least the smallest sampled gap."""
        model = DelayedTimeDependentEdgeMarkovian(
            duration=300,
            number_of_nodes=5,
            creation_probability=[0.5] * 301,
            deletion_probability=[0.5] * 301,
            intercontact_histogram=[0, 0, 0, 4, 1],
            single_creation_per_step=False,
        )
        gaps = inter_contact_gaps(model.generate(random_state=4)).compressed()
        assert gaps.size > 0
        assert gaps.min() >= 3
