"""
Network export module for the contactgraph library.

This module writes contact graphs and their derived series to flat files:

- StartEnd: one contact per line, ``n1 n2 ts te``, in contact order. This
  is the same format the loader reads, so an exported graph can be loaded
  back unchanged.
- CreateDelete: one event per line, ``t n1 n2 C`` for a creation and
  ``t n1 n2 S`` for a suppression, sorted by event timestamp.
- CSV export of polars tables (temporal summaries, histograms).
"""

import os
from pathlib import Path
from typing import List, Union

import polars as pl

from .graph import ContactGraph
from ..timeseries.events import contact_events
from ..common.exceptions import ComputationError, ValidationError, validate_parameter
from ..common.logging_config import get_logger, log_function_entry, LoggingTimer

logger = get_logger(__name__)

# Supported export formats
SUPPORTED_FORMATS = ["start_end", "create_delete"]


def to_start_end(graph: ContactGraph) -> List[str]:
    """
    Render a graph in the StartEnd format.

    Parameters
    ----------
    graph : ContactGraph
        Graph to render

    Returns
    -------
    List[str]
        One ``"n1 n2 ts te"`` line per contact, in contact order

    Examples
    --------
    >>> from contactgraph.network.construction import parse_trace
    >>> to_start_end(parse_trace("1 2 0 3\\n1 2 5 6"))
    ['1 2 0 3', '1 2 5 6']
    """
    return [
        f"{contact.first} {contact.second} {contact.start} {contact.end}"
        for contact in graph.contacts
    ]


def to_create_delete(graph: ContactGraph) -> List[str]:
    """
    Render a graph in the CreateDelete format.

    Each contact ``(n1, n2, ts, te)`` yields a creation ``ts n1 n2 C`` and a
    suppression ``te+1 n1 n2 S``.

    Parameters
    ----------
    graph : ContactGraph
        Graph to render

    Returns
    -------
    List[str]
        One ``"t n1 n2 C|S"`` line per event, sorted by timestamp

    Examples
    --------
    >>> from contactgraph.network.construction import parse_trace
    >>> to_create_delete(parse_trace("1 2 0 3"))
    ['0 1 2 C', '4 1 2 S']
    """
    return [
        f"{event.time} {event.first} {event.second} {event.kind}"
        for event in contact_events(graph)
    ]


def export_graph(
    graph: ContactGraph,
    output_path: Union[str, Path],
    format: str = "start_end",
    overwrite: bool = False
) -> Path:
    """
    Write a contact graph to a text file.

    Parameters
    ----------
    graph : ContactGraph
        Graph to export
    output_path : str or Path
        Destination file; missing parent directories are created
    format : str, default "start_end"
        Export format, one of:
        - "start_end": ``n1 n2 ts te`` per contact (loadable by load_trace)
        - "create_delete": ``t n1 n2 C|S`` per event
    overwrite : bool, default False
        Replace an existing file

    Returns
    -------
    Path
        The written file

    Raises
    ------
    ConfigurationError
        If format is not supported
    ValidationError
        If the file exists and overwrite is False
    ComputationError
        If writing the file fails

    Examples
    --------
    >>> export_graph(graph, "trace.txt")
    >>> export_graph(graph, "events.txt", format="create_delete")
    """
    log_function_entry(
        "export_graph",
        contacts=len(graph),
        format=format,
        output_path=output_path,
        overwrite=overwrite
    )

    validate_parameter(format, SUPPORTED_FORMATS, "format", "export_graph")
    path = _prepare_output_path(output_path, overwrite)

    if not graph.contacts:
        logger.warning("Graph has no contacts. Creating empty export file.")

    with LoggingTimer("export_graph", {"format": format, "contacts": len(graph)}):
        if format == "start_end":
            lines = to_start_end(graph)
        else:
            lines = to_create_delete(graph)

        try:
            with open(path, "w", encoding="utf-8") as handle:
                for line in lines:
                    handle.write(line + "\n")
        except OSError as e:
            raise ComputationError(
                f"Graph export failed: {str(e)}",
                operation="export_graph",
                error_type="export_failure",
                resource_info={"output_path": str(path), "format": format},
                cause=e
            ) from e

    logger.info(f"Graph exported successfully to {path}")
    return path


def export_series(
    frame: pl.DataFrame,
    output_path: Union[str, Path],
    overwrite: bool = False
) -> Path:
    """
    Write a table of series (e.g. temporal_summary()) to CSV.

    Parameters
    ----------
    frame : pl.DataFrame
        Table to write
    output_path : str or Path
        Destination CSV file; missing parent directories are created
    overwrite : bool, default False
        Replace an existing file

    Returns
    -------
    Path
        The written file

    Raises
    ------
    ValidationError
        If frame is not a polars DataFrame, or the file exists and
        overwrite is False
    ComputationError
        If writing the file fails
    """
    if not isinstance(frame, pl.DataFrame):
        raise ValidationError(
            "frame must be a Polars DataFrame",
            field="frame",
            value=type(frame).__name__,
            expected="polars.DataFrame"
        )

    path = _prepare_output_path(output_path, overwrite)

    try:
        frame.write_csv(path)
    except OSError as e:
        raise ComputationError(
            f"Series export failed: {str(e)}",
            operation="export_series",
            error_type="export_failure",
            resource_info={"output_path": str(path)},
            cause=e
        ) from e

    logger.debug(f"Wrote {frame.height} rows to {path}")
    return path


def _prepare_output_path(output_path: Union[str, Path], overwrite: bool) -> Path:
    """Validate the destination and create its directory."""
    if not output_path:
        raise ValidationError("output_path must be a non-empty path", field="output_path")

    path = Path(output_path)

    if path.exists() and not overwrite:
        raise ValidationError(
            f"File {path} already exists. Use overwrite=True to replace it.",
            field="output_path",
            value=str(path)
        )

    os.makedirs(path.parent, exist_ok=True)
    return path
