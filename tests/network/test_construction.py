"""
Tests for contact graph construction from traces.

This module tests the normalization applied by the loader (time shift,
stable ordering, node count) and the errors raised for malformed input.
"""

import pytest

from contactgraph.common.exceptions import DataFormatError
from contactgraph.network.construction import (
    build_graph_from_contacts,
    load_trace,
    parse_trace
)
from contactgraph.network.graph import Contact


class TestParseTrace:
    """Test parse_trace normalization."""

    def test_two_contacts(self):
        """Test a simple trace is parsed as-is."""
        graph = parse_trace("1 2 0 3\n1 2 5 6\n")
        assert graph.duration == 6
        assert graph.nodes == (1, 2)
        assert [c.as_record() for c in graph.contacts] == [(1, 2, 0, 3), (1, 2, 5, 6)]

    def test_negative_timestamps_shifted(self):
        """Test traces starting before zero are moved to a zero origin."""
        graph = parse_trace("1 2 -2 1\n2 3 -1 0\n")
        assert [c.as_record() for c in graph.contacts] == [(1, 2, 0, 3), (2, 3, 1, 2)]
        assert graph.duration == 3

    def test_time_shift(self):
        """Test timestamps are shifted to start at 0."""
        graph = parse_trace("1 2 10 13\n1 2 15 16\n")
        assert [c.as_record() for c in graph.contacts] == [(1, 2, 0, 3), (1, 2, 5, 6)]
        assert graph.duration == 6

    def test_stable_sort_by_start(self):
        """Test contacts are sorted by start, keeping trace order for ties."""
        graph = parse_trace("1 3 2 4\n1 2 0 1\n2 3 0 5\n")
        assert [c.as_record() for c in graph.contacts] == [
            (1, 2, 0, 1), (2, 3, 0, 5), (1, 3, 2, 4)
        ]

    def test_node_count_is_max_identifier(self):
        """Test nodes cover 1..max id even when some never appear."""
        graph = parse_trace("1 5 0 1\n")
        assert graph.number_of_nodes == 5

    def test_reversed_pair_is_swapped(self):
        """Test 'n1 > n2' is stored in canonical order."""
        graph = parse_trace("2 1 0 3\n")
        assert graph.contacts[0] == Contact(1, 2, 0, 3)

    def test_blank_lines_ignored(self):
        """Test empty and whitespace-only lines are skipped."""
        graph = parse_trace("\n1 2 0 3\n   \n1 3 1 2\n\n")
        assert len(graph) == 2

    def test_every_contact_within_duration(self):
        """Test 0 <= start <= end <= duration for every contact."""
        graph = parse_trace("4 2 7 9\n1 3 5 20\n2 3 6 6\n")
        assert all(0 <= c.start <= c.end <= graph.duration for c in graph.contacts)
        assert all(c.first < c.second for c in graph.contacts)


class TestParseTraceErrors:
    """Test malformed traces."""

    @pytest.mark.parametrize("text,line_number", [
        ("1 2 0\n", 1),
        ("1 2 0 3\n1 2 4 5 6\n", 2),
        ("1 2 0 3\n\n1 2 x 4\n", 3),
        ("1 2 0.5 3\n", 1),
        ("1 1 0 3\n", 1),
        ("0 1 0 3\n", 1),
        ("1 2 5 3\n", 1),
    ])
    def test_malformed_line(self, text, line_number):
        """Test each malformed line reports its 1-based line number."""
        with pytest.raises(DataFormatError) as exc_info:
            parse_trace(text)
        assert exc_info.value.line_number == line_number

    def test_empty_trace(self):
        """Test a trace without contacts is rejected."""
        with pytest.raises(DataFormatError):
            parse_trace("\n\n")


class TestBuildGraphFromContacts:
    """Test building from in-memory records."""

    def test_records(self):
        """Test tuples are normalized like a parsed trace."""
        graph = build_graph_from_contacts([(1, 2, 10, 13), (1, 2, 15, 16)])
        assert graph.duration == 6
        assert [c.as_record() for c in graph.contacts] == [(1, 2, 0, 3), (1, 2, 5, 6)]

    def test_contact_objects(self):
        """Test Contact instances are accepted as records."""
        graph = build_graph_from_contacts([Contact(1, 2, 3, 4)])
        assert graph.contacts[0] == Contact(1, 2, 0, 1)

    @pytest.mark.parametrize("record", [
        (1, 2, 0),
        (1, 2, 0.5, 3),
        (True, 2, 0, 1),
        ("1", 2, 0, 1),
        (3, 3, 0, 1),
    ])
    def test_invalid_record(self, record):
        """Test records with bad fields raise DataFormatError."""
        with pytest.raises(DataFormatError):
            build_graph_from_contacts([record])

    def test_no_records(self):
        """Test an empty record list is rejected."""
        with pytest.raises(DataFormatError):
            build_graph_from_contacts([])


class TestLoadTrace:
    """Test loading trace files."""

    def test_load_file(self, tmp_path):
        """Test a trace file is parsed."""
        path = tmp_path / "trace.txt"
        path.write_text("1 2 0 3\n1 2 5 6\n")
        graph = load_trace(path)
        assert len(graph) == 2
        assert graph.duration == 6

    def test_error_carries_file_path(self, tmp_path):
        """Test parse errors name the file."""
        path = tmp_path / "broken.txt"
        path.write_text("1 2 0 3\n1 2\n")
        with pytest.raises(DataFormatError) as exc_info:
            load_trace(str(path))
        assert exc_info.value.file_path == str(path)
        assert exc_info.value.line_number == 2

    def test_missing_file(self, tmp_path):
        """Test I/O errors propagate unchanged."""
        with pytest.raises(FileNotFoundError):
            load_trace(tmp_path / "missing.txt")
