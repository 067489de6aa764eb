"""
Contact graph construction from raw contact traces.

This module turns external contact traces into normalized ContactGraph
objects. A trace is a list of contacts ``n1 n2 ts te`` where n1 and n2 are
the two nodes involved, ts is the first time the contact was observed and
te the last one. Contacts are undirected; by convention n1 < n2.

Normalization:
- timestamps are shifted so that the earliest start is 0
- contacts are sorted (stably) by start time
- the node count is the largest node identifier found in the trace
- the duration is the largest contact end
"""

from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .graph import Contact, ContactGraph
from ..common.exceptions import DataFormatError
from ..common.logging_config import get_logger, LoggingTimer

logger = get_logger(__name__)

TRACE_FORMAT = "start_end"
FIELDS_PER_CONTACT = 4

ContactRecord = Tuple[int, int, int, int]


def build_graph_from_contacts(
    records: Iterable[Sequence[int]],
    file_path: Optional[str] = None
) -> ContactGraph:
    """
    Build a normalized ContactGraph from raw ``(n1, n2, start, end)`` records.

    Parameters
    ----------
    records : Iterable[Sequence[int]]
        Contact records, each with exactly four integer fields. Timestamps
        may use any time origin.
    file_path : str, optional
        Source file, only used to enrich error messages

    Returns
    -------
    ContactGraph
        Graph with zero-based timestamps, contacts sorted by start time,
        nodes ``1..max_node_id`` and ``duration == max(end)``

    Raises
    ------
    DataFormatError
        If there are no records, or a record has the wrong number of
        fields, a non-integer field, identical nodes, a node identifier
        below 1, or an end before its start

    Examples
    --------
    >>> graph = build_graph_from_contacts([(1, 2, 10, 13), (1, 2, 15, 16)])
    >>> graph.duration
    6
    >>> [c.as_record() for c in graph.contacts]
    [(1, 2, 0, 3), (1, 2, 5, 6)]

    Notes
    -----
    Pairs given as ``n1 > n2`` are swapped into canonical order rather than
    rejected.
    """
    contacts = [
        _record_to_contact(record, index + 1, file_path)
        for index, record in enumerate(records)
    ]

    if not contacts:
        raise DataFormatError(
            "Contact trace is empty",
            format_type=TRACE_FORMAT,
            file_path=file_path
        )

    t_start = min(contact.start for contact in contacts)
    if t_start != 0:
        logger.debug(f"Shifting timestamps by {-t_start} to start at 0")
        contacts = [
            Contact(c.first, c.second, c.start - t_start, c.end - t_start)
            for c in contacts
        ]

    # sorted() is stable: contacts starting together keep their trace order
    contacts = sorted(contacts, key=lambda c: c.start)

    number_of_nodes = max(contact.second for contact in contacts)
    duration = max(contact.end for contact in contacts)

    graph = ContactGraph.from_node_count(number_of_nodes, contacts, duration)
    logger.info(
        f"Built contact graph: {graph.number_of_nodes} nodes, "
        f"{len(graph)} contacts, duration {graph.duration}"
    )
    return graph


def parse_trace(text: str, file_path: Optional[str] = None) -> ContactGraph:
    """
    Parse a textual contact trace.

    Parameters
    ----------
    text : str
        One contact per line, four whitespace-separated integers
        ``n1 n2 ts te``. Blank lines are ignored.
    file_path : str, optional
        Source file, only used to enrich error messages

    Returns
    -------
    ContactGraph
        The normalized graph (see build_graph_from_contacts)

    Raises
    ------
    DataFormatError
        If a line is malformed (the error carries its 1-based line number)
        or the trace holds no contact

    Examples
    --------
    >>> graph = parse_trace("1 2 0 3\\n1 2 5 6\\n")
    >>> graph.duration, len(graph)
    (6, 2)
    """
    records: List[ContactRecord] = []

    for line_number, line in enumerate(text.splitlines(), start=1):
        tokens = line.split()
        if not tokens:
            continue

        if len(tokens) != FIELDS_PER_CONTACT:
            raise DataFormatError(
                f"Expected {FIELDS_PER_CONTACT} fields, got {len(tokens)}",
                format_type=TRACE_FORMAT,
                file_path=file_path,
                line_number=line_number
            )

        try:
            n1, n2, start, end = (int(token) for token in tokens)
        except ValueError as e:
            raise DataFormatError(
                f"Non-integer field in line {line.strip()!r}",
                format_type=TRACE_FORMAT,
                file_path=file_path,
                line_number=line_number,
                cause=e
            ) from e

        _check_record(n1, n2, start, end, line_number, file_path)
        records.append((n1, n2, start, end))

    return build_graph_from_contacts(records, file_path=file_path)


def load_trace(path: Union[str, Path], encoding: str = "utf-8") -> ContactGraph:
    """
    Load a contact trace file.

    Parameters
    ----------
    path : str or Path
        File in the ``n1 n2 ts te`` format
    encoding : str, default "utf-8"
        Text encoding of the file

    Returns
    -------
    ContactGraph
        The normalized graph

    Raises
    ------
    DataFormatError
        If the file content is malformed
    OSError
        If the file cannot be read (propagated unchanged)
    """
    path = Path(path)

    with LoggingTimer("load_trace", {"file": str(path)}):
        text = path.read_text(encoding=encoding)
        return parse_trace(text, file_path=str(path))


def _record_to_contact(
    record: Sequence[int],
    record_number: int,
    file_path: Optional[str]
) -> Contact:
    """Validate one raw record and return it as a canonical Contact."""
    if isinstance(record, Contact):
        record = record.as_record()
    record = tuple(record)

    if len(record) != FIELDS_PER_CONTACT:
        raise DataFormatError(
            f"Expected {FIELDS_PER_CONTACT} fields, got {len(record)}",
            format_type=TRACE_FORMAT,
            file_path=file_path,
            line_number=record_number
        )

    values = []
    for value in record:
        try:
            is_integer = not isinstance(value, (bool, str)) and int(value) == value
        except (TypeError, ValueError, OverflowError):
            is_integer = False

        if not is_integer:
            raise DataFormatError(
                f"Non-integer field {value!r}",
                format_type=TRACE_FORMAT,
                file_path=file_path,
                line_number=record_number
            )
        values.append(int(value))

    n1, n2, start, end = values
    _check_record(n1, n2, start, end, record_number, file_path)

    if n1 > n2:
        n1, n2 = n2, n1
    return Contact(n1, n2, start, end)


def _check_record(
    n1: int,
    n2: int,
    start: int,
    end: int,
    line_number: int,
    file_path: Optional[str]
) -> None:
    if n1 == n2:
        raise DataFormatError(
            f"Contact between node {n1} and itself",
            format_type=TRACE_FORMAT,
            file_path=file_path,
            line_number=line_number
        )

    if min(n1, n2) < 1:
        raise DataFormatError(
            f"Node identifiers start at 1, got pair ({n1}, {n2})",
            format_type=TRACE_FORMAT,
            file_path=file_path,
            line_number=line_number
        )

    if end < start:
        raise DataFormatError(
            f"Contact ends at {end} before its start {start}",
            format_type=TRACE_FORMAT,
            file_path=file_path,
            line_number=line_number
        )
