"""Tests for the simulator: end-to-end loads, stores and teardown."""

import pytest

from ptsim.config import MemoryConfig, SimulatorOptions
from ptsim.logging import LogLevel
from ptsim.memory import InsufficientMemoryError, PageFaultError
from ptsim.simulator import AccessEvent, AccessKind, Simulator

PAGE_SIZE = 256
SHIFT = 8
FREE_AT_START = 63


class TestScenario:
    """The canonical two-page walk-through on a 64 x 256 machine."""

    def test_store_load_destroy(self) -> None:
        """Bytes stored in two pages read back, and teardown frees everything."""
        sim = Simulator()
        sim.create_process(0, 2)
        sim.store(0, 0, 42)
        sim.store(0, 256, 99)
        assert sim.load(0, 0) == 42
        assert sim.load(0, 256) == 99
        sim.destroy_process(0)
        assert sim.free_page_count == FREE_AT_START

    def test_insufficient_space(self) -> None:
        """With one free page a two-page process is refused."""
        sim = Simulator()
        sim.create_process(0, FREE_AT_START - 2)
        assert sim.free_page_count == 1
        with pytest.raises(InsufficientMemoryError):
            sim.create_process(1, 2)
        assert sim.free_page_count == 1


class TestLoadStore:
    """Verify byte access through the page table."""

    def test_store_lands_in_data_page(self) -> None:
        """A store writes the translated physical address."""
        sim = Simulator()
        info = sim.create_process(0, 2)
        sim.store(0, (1 << SHIFT) | 10, 7)
        physical = (info.data_pages[1] << SHIFT) | 10
        assert sim.memory.read_byte(physical) == 7

    @pytest.mark.parametrize("address", [0, 1, 255, 256, 511])
    def test_store_then_load(self, address: int) -> None:
        """Any mapped address returns what was stored there."""
        sim = Simulator()
        sim.create_process(3, 2)
        sim.store(3, address, address % 256)
        assert sim.load(3, address) == address % 256

    def test_value_out_of_range(self) -> None:
        """Only byte values can be stored."""
        sim = Simulator()
        sim.create_process(0, 1)
        with pytest.raises(ValueError, match="byte"):
            sim.store(0, 0, 256)

    def test_freed_pages_not_scrubbed(self) -> None:
        """A freed data page keeps its bytes until overwritten."""
        sim = Simulator()
        info = sim.create_process(0, 1)
        sim.store(0, 5, 123)
        sim.destroy_process(0)
        assert sim.memory.read_byte((info.data_pages[0] << SHIFT) | 5) == 123


class TestIsolation:
    """Verify that processes do not share pages."""

    def test_same_virtual_address_different_physical(self) -> None:
        """Two processes resolve the same virtual address to different pages."""
        sim = Simulator()
        sim.create_process(0, 2)
        sim.create_process(1, 2)
        for address in (0, 300):
            a = sim.translate(0, address)
            b = sim.translate(1, address)
            assert a.physical_page != b.physical_page

    def test_writes_do_not_leak(self) -> None:
        """A store in one process is invisible to another."""
        sim = Simulator()
        sim.create_process(0, 1)
        sim.create_process(1, 1)
        sim.store(0, 0, 55)
        assert sim.load(1, 0) == 0

    def test_recycled_page_table_maps_nothing(self) -> None:
        """Data left in a freed page cannot map another process's page."""
        sim = Simulator()
        sim.create_process(0, 1)
        victim = sim.create_process(1, 1)
        sim.store(0, 1, victim.data_pages[0])
        sim.destroy_process(0)
        sim.create_process(2, 0)
        sim.create_process(3, 0)
        assert sim.page_table_entries(3) == []
        assert sim.translate(3, 1 << SHIFT).mapped is False
        with pytest.raises(PageFaultError):
            sim.load(3, 1 << SHIFT)

        sim.destroy_process(3)
        sim.destroy_process(2)
        assert sim.destroy_process(1) == 2
        assert sim.free_page_count == FREE_AT_START


class TestUnmappedAccess:
    """Verify safe and unsafe handling of unmapped pages."""

    def test_safe_mode_faults(self) -> None:
        """Accessing past the mapped pages raises PageFaultError."""
        sim = Simulator()
        sim.create_process(0, 1)
        with pytest.raises(PageFaultError):
            sim.load(0, 1 << SHIFT)

    def test_fault_is_logged(self) -> None:
        """A page fault leaves an ERROR entry from the mmu."""
        sim = Simulator()
        sim.create_process(0, 1)
        with pytest.raises(PageFaultError):
            sim.store(0, 1 << SHIFT, 1)
        assert sim.logger.filter(min_level=LogLevel.ERROR, source="mmu", pid=0)

    def test_unsafe_mode_aliases_page_zero(self) -> None:
        """In unsafe mode an unmapped store writes into reserved page 0."""
        sim = Simulator(options=SimulatorOptions(unsafe_translation=True))
        sim.create_process(0, 1)
        sim.store(0, (4 << SHIFT) | 200, 17)
        assert sim.memory.read_byte(200) == 17
        assert sim.load(0, (9 << SHIFT) | 200) == 17
        assert sim.logger.filter(min_level=LogLevel.WARNING, source="mmu")


class TestAccessEvents:
    """Verify load/store reporting."""

    def test_listener_receives_events(self) -> None:
        """Both loads and stores are reported with both addresses."""
        sim = Simulator()
        events: list[AccessEvent] = []
        sim.add_listener(events.append)
        info = sim.create_process(0, 2)
        sim.store(0, 256, 99)
        sim.load(0, 256)
        physical = info.data_pages[1] << SHIFT
        assert events == [
            AccessEvent(AccessKind.STORE, 0, 256, physical, 99),
            AccessEvent(AccessKind.LOAD, 0, 256, physical, 99),
        ]

    def test_remove_listener(self) -> None:
        """A removed listener hears nothing more."""
        sim = Simulator()
        events: list[AccessEvent] = []
        sim.add_listener(events.append)
        sim.remove_listener(events.append)
        sim.create_process(0, 1)
        sim.store(0, 0, 1)
        assert events == []

    def test_faulting_access_not_reported(self) -> None:
        """A failed access produces no event."""
        sim = Simulator()
        events: list[AccessEvent] = []
        sim.add_listener(events.append)
        sim.create_process(0, 1)
        with pytest.raises(PageFaultError):
            sim.load(0, 1 << SHIFT)
        assert events == []


class TestIndependentInstances:
    """Verify that simulators share no state."""

    def test_two_simulators(self) -> None:
        """Work in one machine does not touch another."""
        first = Simulator()
        second = Simulator()
        first.create_process(0, 5)
        assert second.free_page_count == FREE_AT_START
        assert second.processes() == []

    def test_custom_geometry(self) -> None:
        """A smaller machine has fewer pages."""
        sim = Simulator(MemoryConfig.from_page_size(page_size=64, page_count=8))
        assert sim.free_page_count == 7
        assert len(sim.free_page_bitmap()) == 8
        assert sim.config.max_processes == 56
