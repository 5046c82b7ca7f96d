"""Tests for the process directory."""

import pytest

from ptsim.memory.directory import InvalidProcessError, NoSuchProcessError, ProcessDirectory

CAPACITY = 4


class TestProcessDirectory:
    """Verify slot bookkeeping and bounds checks."""

    def test_slots_start_empty(self) -> None:
        """Every slot is unused initially."""
        directory = ProcessDirectory(capacity=CAPACITY)
        assert directory.capacity == CAPACITY
        assert len(directory) == 0
        assert directory.get(0) is None

    def test_set_and_get(self) -> None:
        """A recorded page can be looked up."""
        directory = ProcessDirectory(capacity=CAPACITY)
        directory.set(2, 17)
        assert directory.get(2) == 17
        assert directory.require(2) == 17

    def test_clear(self) -> None:
        """Clearing empties the slot."""
        directory = ProcessDirectory(capacity=CAPACITY)
        directory.set(1, 5)
        directory.clear(1)
        assert directory.get(1) is None

    def test_require_missing(self) -> None:
        """Requiring an empty slot raises NoSuchProcessError."""
        directory = ProcessDirectory(capacity=CAPACITY)
        with pytest.raises(NoSuchProcessError, match="no page table"):
            directory.require(0)

    def test_pid_out_of_range(self) -> None:
        """Pids outside 0..capacity-1 are refused."""
        directory = ProcessDirectory(capacity=CAPACITY)
        with pytest.raises(InvalidProcessError):
            directory.get(CAPACITY)
        with pytest.raises(InvalidProcessError):
            directory.set(-1, 3)

    def test_iteration_yields_used_slots(self) -> None:
        """Iterating lists (pid, page) pairs in pid order."""
        directory = ProcessDirectory(capacity=CAPACITY)
        directory.set(3, 9)
        directory.set(0, 4)
        assert list(directory) == [(0, 4), (3, 9)]
        assert len(directory) == 2
