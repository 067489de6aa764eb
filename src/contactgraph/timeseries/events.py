"""
Event sweep over the contacts of a temporal graph.

Every contact is turned into two events: a creation at its start and a
suppression at ``end + 1`` (the first time the edge is absent again).
Sorting the events by timestamp and sweeping t = 0, 1, 2, ... gives, for
each timestep, how many edges appeared and disappeared. The per-timestep
metrics (average degree, created and deleted fractions) and the
CreateDelete export format are all built on this sweep.
"""

from dataclasses import dataclass
from typing import List, NamedTuple

import numpy as np

from ..network.graph import ContactGraph

CREATION = "C"
SUPPRESSION = "S"


class ContactEvent(NamedTuple):
    """A creation or suppression of the edge ``(first, second)`` at ``time``."""
    time: int
    first: int
    second: int
    kind: str


@dataclass(frozen=True, eq=False)
class EventSweep:
    """
    Per-timestep event counts of a contact graph.

    Attributes
    ----------
    created : np.ndarray
        ``created[t]`` is the number of contacts starting at t
    deleted : np.ndarray
        ``deleted[t]`` is the number of contacts whose last timestep is t - 1

    Both arrays cover the flushed timesteps ``0 .. last_event - 1``: the
    sweep emits a timestep when it moves past it, so the counts of the very
    last event timestamp are never emitted.
    """
    created: np.ndarray
    deleted: np.ndarray

    @property
    def n_steps(self) -> int:
        return len(self.created)

    @property
    def delta_edges(self) -> np.ndarray:
        """Net change in the number of active edges at each timestep."""
        return self.created - self.deleted

    @property
    def links_before(self) -> np.ndarray:
        """Number of active edges before the changes of each timestep apply."""
        active_after = np.cumsum(self.delta_edges)
        if len(active_after) == 0:
            return active_after.astype(np.int64)
        return np.concatenate(([0], active_after[:-1])).astype(np.int64)


def contact_events(graph: ContactGraph) -> List[ContactEvent]:
    """
    List the creation and suppression events of a graph in time order.

    Parameters
    ----------
    graph : ContactGraph
        Graph to convert

    Returns
    -------
    List[ContactEvent]
        Events sorted by timestamp. The sort is stable, so simultaneous
        events keep contact order with each contact's creation before its
        suppression; consumers must not rely on any order within a
        timestep.

    Examples
    --------
    >>> from contactgraph.network.construction import parse_trace
    >>> [tuple(e) for e in contact_events(parse_trace("1 2 0 3"))]
    [(0, 1, 2, 'C'), (4, 1, 2, 'S')]
    """
    events: List[ContactEvent] = []
    for contact in graph.contacts:
        events.append(ContactEvent(contact.start, contact.first, contact.second, CREATION))
        events.append(ContactEvent(contact.end + 1, contact.first, contact.second, SUPPRESSION))

    events.sort(key=lambda event: event.time)
    return events


def sweep_events(graph: ContactGraph) -> EventSweep:
    """
    Count creations and suppressions per timestep.

    Parameters
    ----------
    graph : ContactGraph
        Graph to sweep. Its timestamps must be non-negative.

    Returns
    -------
    EventSweep
        Created and deleted counts for each flushed timestep. Both arrays
        are empty when the graph has no contacts.

    Notes
    -----
    Counting with ``np.bincount`` is equivalent to sorting the events and
    accumulating per timestep, since only the totals of each timestep
    matter. Time complexity is O(C + T) for C contacts and T timesteps.
    """
    arrays = graph.arrays
    if len(arrays.start) == 0:
        empty = np.zeros(0, dtype=np.int64)
        return EventSweep(created=empty, deleted=empty)

    suppressions = arrays.end + 1
    n_steps = int(suppressions.max())

    created = np.bincount(arrays.start, minlength=n_steps + 1)[:n_steps]
    deleted = np.bincount(suppressions, minlength=n_steps + 1)[:n_steps]

    return EventSweep(
        created=created.astype(np.int64),
        deleted=deleted.astype(np.int64)
    )
