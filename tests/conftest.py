"""
Shared fixtures for the contactgraph test suite.
"""

import logging

import pytest

from contactgraph.network.construction import parse_trace


# Two contacts of the same pair separated by a gap of 2
TWO_CONTACTS_TRACE = "1 2 0 3\n1 2 5 6\n"

# Six contacts over two pairs, with gaps of 2 and 5
MULTI_PAIR_TRACE = """\
1 2 0 1
1 3 0 2
1 3 2 5
1 2 3 4
1 3 7 8
1 2 9 9
"""


@pytest.fixture(autouse=True)
def reset_library_logging():
    """Undo setup_logging() so every test starts from the default configuration."""
    yield
    root = logging.getLogger("contactgraph")
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture
def two_contacts_graph():
    return parse_trace(TWO_CONTACTS_TRACE)


@pytest.fixture
def multi_pair_graph():
    return parse_trace(MULTI_PAIR_TRACE)
