"""
Temporal contact graph data model.

A contact graph is a set of numbered nodes plus a time-ordered list of
contacts: undirected edges that exist at every integer time of a closed
interval. Graphs are immutable once built; construction from external
traces lives in construction.py, synthetic graphs come from the
Edge-Markovian models.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Iterator, Tuple

import numpy as np

from ..common.exceptions import GraphConstructionError


@dataclass(frozen=True)
class Contact:
    """
    An undirected edge present at every integer time in [start, end].

    The pair is stored in canonical order (first < second).
    """
    first: int
    second: int
    start: int
    end: int

    @property
    def pair(self) -> Tuple[int, int]:
        """The unordered node pair as (smaller id, larger id)."""
        return (self.first, self.second)

    @property
    def length(self) -> int:
        """Number of timesteps the edge is present."""
        return self.end - self.start + 1

    def as_record(self) -> Tuple[int, int, int, int]:
        return (self.first, self.second, self.start, self.end)


@dataclass(frozen=True, eq=False)
class ContactArrays:
    """Column view of the contacts of a graph as int64 numpy arrays."""
    first: np.ndarray
    second: np.ndarray
    start: np.ndarray
    end: np.ndarray


@dataclass(frozen=True)
class ContactGraph:
    """
    A temporal graph made of contacts between nodes 1..N.

    Parameters
    ----------
    nodes : Tuple[int, ...]
        Node identifiers, always the dense range 1..N
    contacts : Tuple[Contact, ...]
        Contacts ordered by non-decreasing start time
    duration : int
        Observation horizon. For a loaded trace this is the largest contact
        end; for a simulated graph it is the simulated number of steps.

    Raises
    ------
    GraphConstructionError
        If a contact has an unordered pair, ends before it starts, refers
        to a node outside 1..N, or if contacts are not sorted by start.

    Examples
    --------
    >>> graph = ContactGraph.from_node_count(
    ...     2, [Contact(1, 2, 0, 3), Contact(1, 2, 5, 6)], duration=6
    ... )
    >>> graph.number_of_nodes, len(graph)
    (2, 2)
    """
    nodes: Tuple[int, ...]
    contacts: Tuple[Contact, ...]
    duration: int

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "contacts", tuple(self.contacts))
        self._check_invariants()

    @classmethod
    def from_node_count(cls, number_of_nodes: int, contacts, duration: int) -> "ContactGraph":
        """Build a graph whose nodes are 1..number_of_nodes."""
        return cls(tuple(range(1, number_of_nodes + 1)), tuple(contacts), duration)

    def _check_invariants(self) -> None:
        n_nodes = len(self.nodes)
        previous_start = None

        for index, contact in enumerate(self.contacts):
            if not contact.first < contact.second:
                raise GraphConstructionError(
                    f"Contact {index} has pair {contact.pair}, expected first < second",
                    operation="check_pair",
                    contact_count=len(self.contacts)
                )
            if contact.start < 0:
                raise GraphConstructionError(
                    f"Contact {index} starts at {contact.start}, time is zero-based",
                    operation="check_time_origin",
                    contact_count=len(self.contacts)
                )
            if contact.end < contact.start:
                raise GraphConstructionError(
                    f"Contact {index} ends at {contact.end} before its start {contact.start}",
                    operation="check_interval",
                    contact_count=len(self.contacts)
                )
            if contact.first < 1 or contact.second > n_nodes:
                raise GraphConstructionError(
                    f"Contact {index} refers to nodes {contact.pair} outside 1..{n_nodes}",
                    operation="check_nodes",
                    node_count=n_nodes
                )
            if previous_start is not None and contact.start < previous_start:
                raise GraphConstructionError(
                    f"Contact {index} starts at {contact.start}, before the previous contact",
                    operation="check_order",
                    contact_count=len(self.contacts)
                )
            previous_start = contact.start

    @property
    def number_of_nodes(self) -> int:
        return len(self.nodes)

    @property
    def number_of_pairs(self) -> int:
        """Number of possible undirected edges, N * (N - 1) / 2."""
        n = self.number_of_nodes
        return n * (n - 1) // 2

    @cached_property
    def arrays(self) -> ContactArrays:
        """Contacts as int64 column arrays, computed once per graph."""
        if not self.contacts:
            empty = np.empty(0, dtype=np.int64)
            return ContactArrays(empty, empty, empty, empty)

        records = np.array([c.as_record() for c in self.contacts], dtype=np.int64)
        columns = [np.ascontiguousarray(records[:, i]) for i in range(4)]
        for column in columns:
            column.setflags(write=False)
        return ContactArrays(*columns)

    def __len__(self) -> int:
        return len(self.contacts)

    def __iter__(self) -> Iterator[Contact]:
        return iter(self.contacts)

    def __str__(self) -> str:
        return (
            f"({self.number_of_nodes} nodes, {self.duration} time samples, "
            f"{len(self.contacts)} contacts)"
        )
