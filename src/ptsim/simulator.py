"""The simulator — one machine's worth of memory state.

A ``Simulator`` owns a single physical memory store and every structure
that describes it: the free-page allocator, the process directory, the
memory manager and the MMU.  Nothing is global, so tests (or a web
server) can run as many independent machines as they like.

Loads and stores are reported as ``AccessEvent`` records to any
registered listener and to the event log.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeAlias

from ptsim.config import MemoryConfig, SimulatorOptions
from ptsim.logging import Logger, LogLevel
from ptsim.memory.allocator import FreePageAllocator
from ptsim.memory.directory import ProcessDirectory
from ptsim.memory.manager import MemoryManager, ProcessInfo
from ptsim.memory.physical import PhysicalMemory
from ptsim.memory.translator import AddressTranslator, PageFaultError, Translation

_MAX_BYTE = 0xFF


class AccessKind(StrEnum):
    """Which way a memory access went."""

    LOAD = "load"
    STORE = "store"


@dataclass(frozen=True)
class AccessEvent:
    """One completed load or store."""

    kind: AccessKind
    pid: int
    virtual_address: int
    physical_address: int
    value: int


AccessListener: TypeAlias = Callable[[AccessEvent], None]


class Simulator:
    """A page-table machine: allocate, map, translate, load, store."""

    def __init__(
        self,
        config: MemoryConfig | None = None,
        *,
        options: SimulatorOptions | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Build a fresh machine with all memory zeroed.

        Args:
            config: Memory geometry (defaults: 64 pages of 256 bytes).
            options: Runtime switches such as unsafe translation.
            logger: Event log to write to; a new one is created if omitted.

        """
        self._config = config or MemoryConfig()
        self._options = options or SimulatorOptions()
        self._logger = logger or Logger()
        self._memory = PhysicalMemory(self._config)
        self._allocator = FreePageAllocator(
            page_count=self._config.page_count, logger=self._logger
        )
        self._directory = ProcessDirectory(capacity=self._config.max_processes)
        self._manager = MemoryManager(
            memory=self._memory,
            allocator=self._allocator,
            directory=self._directory,
            logger=self._logger,
        )
        self._mmu = AddressTranslator(self._memory, self._directory)
        self._listeners: list[AccessListener] = []
        self._logger.log(
            LogLevel.INFO,
            f"Memory initialised: {self._config.page_count} pages x "
            f"{self._config.page_size} bytes, {self._config.max_processes} process slots",
            source="simulator",
        )

    @property
    def config(self) -> MemoryConfig:
        """Return the memory geometry."""
        return self._config

    @property
    def options(self) -> SimulatorOptions:
        """Return the runtime switches."""
        return self._options

    @property
    def logger(self) -> Logger:
        """Return the event log."""
        return self._logger

    @property
    def memory(self) -> PhysicalMemory:
        """Return the physical memory store."""
        return self._memory

    @property
    def allocator(self) -> FreePageAllocator:
        """Return the free-page allocator."""
        return self._allocator

    @property
    def manager(self) -> MemoryManager:
        """Return the process memory manager."""
        return self._manager

    @property
    def free_page_count(self) -> int:
        """Return the number of unallocated pages."""
        return self._allocator.free_count

    def add_listener(self, listener: AccessListener) -> None:
        """Register a callback to receive every ``AccessEvent``."""
        self._listeners.append(listener)

    def remove_listener(self, listener: AccessListener) -> None:
        """Unregister a previously added callback (no-op if absent)."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -- Lifecycle ------------------------------------------------------------

    def create_process(self, pid: int, page_count: int) -> ProcessInfo:
        """Create a process with ``page_count`` data pages."""
        return self._manager.create_process(pid, page_count)

    def destroy_process(self, pid: int) -> int:
        """Destroy a process and return how many pages were released."""
        return self._manager.destroy_process(pid)

    # -- Translation and access ----------------------------------------------

    def translate(self, pid: int, virtual_address: int) -> Translation:
        """Translate without accessing memory."""
        return self._mmu.translate(pid, virtual_address)

    def load(self, pid: int, virtual_address: int) -> int:
        """Read one byte from ``pid``'s virtual address.

        Raises:
            PageFaultError: If the page is unmapped (safe mode only).

        """
        address = self._resolve(pid, virtual_address)
        value = self._memory.read_byte(address)
        self._report(AccessEvent(AccessKind.LOAD, pid, virtual_address, address, value))
        return value

    def store(self, pid: int, virtual_address: int, value: int) -> None:
        """Write one byte to ``pid``'s virtual address.

        Raises:
            ValueError: If ``value`` is outside 0..255.
            PageFaultError: If the page is unmapped (safe mode only).

        """
        if not 0 <= value <= _MAX_BYTE:
            msg = f"Value {value} does not fit in a byte"
            raise ValueError(msg)
        address = self._resolve(pid, virtual_address)
        self._memory.write_byte(address, value)
        self._report(AccessEvent(AccessKind.STORE, pid, virtual_address, address, value))

    # -- Read-only queries for diagnostics -----------------------------------

    def free_page_bitmap(self) -> tuple[bool, ...]:
        """Return the in-use flag of every physical page."""
        return self._allocator.bitmap()

    def page_table_entries(self, pid: int) -> list[tuple[int, int]]:
        """Return ``(virtual_page, physical_page)`` for ``pid``'s mapped pages."""
        return self._manager.page_table_entries(pid)

    def processes(self) -> list[int]:
        """Return the pids that currently exist."""
        return self._manager.processes()

    def _resolve(self, pid: int, virtual_address: int) -> int:
        unsafe = self._options.unsafe_translation
        try:
            address = self._mmu.resolve(pid, virtual_address, unsafe=unsafe)
        except PageFaultError as e:
            self._logger.log(LogLevel.ERROR, str(e), source="mmu", pid=pid)
            raise
        if unsafe and address >> self._config.page_shift == 0:
            self._logger.log(
                LogLevel.WARNING,
                f"Unmapped address {virtual_address} aliased to reserved page 0",
                source="mmu",
                pid=pid,
            )
        return address

    def _report(self, event: AccessEvent) -> None:
        self._logger.log(
            LogLevel.DEBUG,
            f"{event.kind} {event.virtual_address} => {event.physical_address}, value={event.value}",
            source="mmu",
            pid=event.pid,
        )
        for listener in list(self._listeners):
            listener(event)
