"""Tests for the simulator event log.

The logger records structured entries for allocation, process and
MMU events so a run can be inspected after the fact.
"""

from ptsim.logging import LogEntry, Logger, LogLevel
from ptsim.simulator import Simulator


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry formatting."""

    def test_str_without_pid(self) -> None:
        """Entries without a pid show level, source and message."""
        entry = LogEntry(level=LogLevel.INFO, message="ready", source="simulator")
        assert str(entry) == "[INFO] simulator: ready"

    def test_str_with_pid(self) -> None:
        """Entries tied to a process show its pid."""
        entry = LogEntry(level=LogLevel.WARNING, message="no room", source="process", pid=3)
        assert str(entry) == "[WARNING] process (pid 3): no room"


class TestLogger:
    """Verify the append-only log."""

    def test_starts_empty(self) -> None:
        """A new logger has no entries."""
        assert Logger().entries == []

    def test_log_appends(self) -> None:
        """Logged messages are kept in order."""
        logger = Logger()
        logger.log(LogLevel.INFO, "first", source="a")
        logger.log(LogLevel.ERROR, "second", source="b")
        assert [e.message for e in logger.entries] == ["first", "second"]

    def test_min_level_drops_quiet_entries(self) -> None:
        """Entries below the configured level are not recorded."""
        logger = Logger(min_level=LogLevel.WARNING)
        logger.log(LogLevel.DEBUG, "noise", source="a")
        logger.log(LogLevel.WARNING, "signal", source="a")
        assert [e.message for e in logger.entries] == ["signal"]

    def test_filter_by_level_source_and_pid(self) -> None:
        """Filters combine."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="process", pid=1)
        logger.log(LogLevel.ERROR, "b", source="process", pid=2)
        logger.log(LogLevel.ERROR, "c", source="mmu", pid=2)
        result = logger.filter(min_level=LogLevel.ERROR, source="process", pid=2)
        assert [e.message for e in result] == ["b"]

    def test_entries_is_a_copy(self) -> None:
        """Mutating the returned list does not touch the log."""
        logger = Logger()
        logger.log(LogLevel.INFO, "x", source="a")
        logger.entries.clear()
        assert len(logger.entries) == 1

    def test_clear(self) -> None:
        """Clear removes everything."""
        logger = Logger()
        logger.log(LogLevel.INFO, "x", source="a")
        logger.clear()
        assert logger.entries == []


class TestSimulatorLogging:
    """Verify that the simulator writes to its log."""

    def test_initialisation_logged(self) -> None:
        """Building a machine records its geometry."""
        sim = Simulator()
        assert any("64 pages" in e.message for e in sim.logger.filter(source="simulator"))

    def test_process_creation_logged(self) -> None:
        """Creating a process records an INFO entry for that pid."""
        sim = Simulator()
        sim.create_process(4, 1)
        entries = sim.logger.filter(source="process", pid=4)
        assert entries
        assert entries[0].level is LogLevel.INFO

    def test_shared_logger(self) -> None:
        """A caller-supplied logger receives the simulator's entries."""
        logger = Logger()
        Simulator(logger=logger)
        assert logger.entries
