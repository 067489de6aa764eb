"""
Tests for network export module.

This module tests the StartEnd and CreateDelete writers, file handling
(overwrite protection, directory creation) and CSV export of series.
"""

import os
import shutil
import tempfile

import polars as pl
import pytest

from contactgraph.common.exceptions import ComputationError, ConfigurationError, ValidationError
from contactgraph.network.construction import load_trace, parse_trace
from contactgraph.network.export import (
    export_graph,
    export_series,
    to_create_delete,
    to_start_end
)
from contactgraph.network.graph import ContactGraph
from contactgraph.timeseries.temporal_metrics import temporal_summary


class TestFormats:
    """Test in-memory rendering."""

    def setup_method(self):
        """Set up test fixtures."""
        self.graph = parse_trace("1 2 0 3\n2 3 1 1\n1 2 5 6\n")

    def test_start_end(self):
        """Test one line per contact, in contact order."""
        assert to_start_end(self.graph) == ["1 2 0 3", "2 3 1 1", "1 2 5 6"]

    def test_create_delete(self):
        """Test creation/suppression events sorted by timestamp."""
        lines = to_create_delete(self.graph)
        assert lines == [
            "0 1 2 C",
            "1 2 3 C",
            "2 2 3 S",
            "4 1 2 S",
            "5 1 2 C",
            "7 1 2 S",
        ]

    def test_create_delete_timestamps_sorted(self):
        """Test event times never decrease."""
        times = [int(line.split()[0]) for line in to_create_delete(self.graph)]
        assert times == sorted(times)

    def test_empty_graph(self):
        """Test a graph without contacts renders no lines."""
        graph = ContactGraph.from_node_count(3, [], duration=4)
        assert to_start_end(graph) == []
        assert to_create_delete(graph) == []


class TestExportGraph:
    """Test graph export to files."""

    def setup_method(self):
        """Set up test fixtures."""
        self.graph = parse_trace("1 3 2 4\n1 2 0 1\n2 3 0 5\n1 2 3 3\n")
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        """Clean up test files."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def test_start_end_round_trip(self):
        """Test an exported normalized graph loads back identical."""
        output_path = os.path.join(self.temp_dir, "trace.txt")
        export_graph(self.graph, output_path)

        reloaded = load_trace(output_path)
        assert reloaded.contacts == self.graph.contacts
        assert reloaded.nodes == self.graph.nodes
        assert reloaded.duration == self.graph.duration

    def test_create_delete_file(self):
        """Test the CreateDelete file holds two events per contact."""
        output_path = os.path.join(self.temp_dir, "events.txt")
        path = export_graph(self.graph, output_path, format="create_delete")

        lines = path.read_text().splitlines()
        assert len(lines) == 2 * len(self.graph)
        assert lines == to_create_delete(self.graph)

    def test_creates_directories(self):
        """Test missing parent directories are created."""
        output_path = os.path.join(self.temp_dir, "nested", "dir", "trace.txt")
        export_graph(self.graph, output_path)
        assert os.path.exists(output_path)

    def test_refuses_overwrite(self):
        """Test an existing file is kept unless overwrite is set."""
        output_path = os.path.join(self.temp_dir, "trace.txt")
        export_graph(self.graph, output_path)

        with pytest.raises(ValidationError):
            export_graph(self.graph, output_path)

        export_graph(self.graph, output_path, overwrite=True)

    def test_unsupported_format(self):
        """Test unknown formats raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            export_graph(self.graph, os.path.join(self.temp_dir, "x.gexf"), format="gexf")

    def test_write_failure(self):
        """Test I/O failures are wrapped in ComputationError."""
        with pytest.raises(ComputationError) as exc_info:
            export_graph(self.graph, self.temp_dir, overwrite=True)
        assert isinstance(exc_info.value.__cause__, OSError)


class TestExportSeries:
    """Test CSV export of polars tables."""

    def test_summary_csv(self, tmp_path):
        """Test a temporal summary is written with its header."""
        graph = parse_trace("1 2 0 3\n1 2 5 6\n")
        path = export_series(temporal_summary(graph), tmp_path / "summary.csv")

        frame = pl.read_csv(path)
        assert frame.columns == ["t", "average_degree", "fraction_created", "fraction_deleted"]
        assert frame.height == 7

    def test_rejects_non_frame(self, tmp_path):
        """Test only polars DataFrames are accepted."""
        with pytest.raises(ValidationError):
            export_series({"t": [0]}, tmp_path / "bad.csv")
