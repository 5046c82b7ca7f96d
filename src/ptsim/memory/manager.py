"""Memory manager — process creation and teardown.

Creating a process costs one page for its page table plus one page per
requested virtual page.  The manager checks that *all* of them are
available before touching anything, so a refused request leaves the
bitmap, the directory and every page table exactly as they were.

A recycled page still holds its old bytes, so a fresh page table is
zeroed before any entry is written.

Destroying a process first checks that every entry names a distinct,
allocated page; only then does it free the data pages, clear the
entries, free the page-table page, and empty the directory slot so the
pid no longer points at a page that may be handed to someone else.
"""

from dataclasses import dataclass

from ptsim.config import MemoryConfig
from ptsim.logging import Logger, LogLevel
from ptsim.memory.allocator import FreePageAllocator, OutOfMemoryError
from ptsim.memory.directory import ProcessDirectory
from ptsim.memory.page_table import PageTable
from ptsim.memory.physical import PhysicalMemory


class InsufficientMemoryError(OutOfMemoryError):
    """Raise when a process cannot be created for lack of free pages."""


class ProcessExistsError(Exception):
    """Raise when creating a process whose pid already has a page table."""


class CorruptPageTableError(Exception):
    """Raise when a page table references a page it cannot own."""


@dataclass(frozen=True)
class ProcessInfo:
    """The pages a newly created process received."""

    pid: int
    page_table_page: int
    data_pages: tuple[int, ...]

    @property
    def total_pages(self) -> int:
        """Return the page table plus data pages."""
        return 1 + len(self.data_pages)


class MemoryManager:
    """Create and destroy processes on top of the allocator and directory."""

    def __init__(
        self,
        *,
        memory: PhysicalMemory,
        allocator: FreePageAllocator,
        directory: ProcessDirectory,
        logger: Logger | None = None,
    ) -> None:
        """Create a manager over shared memory structures."""
        self._memory = memory
        self._allocator = allocator
        self._directory = directory
        self._logger = logger

    @property
    def config(self) -> MemoryConfig:
        """Return the memory geometry."""
        return self._memory.config

    def create_process(self, pid: int, page_count: int) -> ProcessInfo:
        """Give ``pid`` a page table and ``page_count`` data pages.

        Virtual pages ``0..page_count-1`` are mapped in allocation order.

        Raises:
            InvalidProcessError: If ``pid`` is outside the directory.
            ProcessExistsError: If ``pid`` already has a page table.
            ValueError: If ``page_count`` is negative or larger than a
                page table can hold.
            InsufficientMemoryError: If fewer than ``page_count + 1``
                pages are free.

        """
        self._directory.check_pid(pid)
        if self._directory.get(pid) is not None:
            msg = f"Process {pid} already exists"
            raise ProcessExistsError(msg)
        limit = self.config.entries_per_table
        if not 0 <= page_count <= limit:
            msg = f"Page count {page_count} outside 0..{limit}"
            raise ValueError(msg)

        needed = page_count + 1
        free = self._allocator.free_count
        if needed > free:
            msg = f"Could not allocate space for process #{pid}: need {needed} pages, {free} free"
            self._log(LogLevel.WARNING, msg, pid)
            raise InsufficientMemoryError(msg)

        table_page = self._allocator.allocate()
        self._directory.set(pid, table_page)
        table = PageTable(self._memory, page=table_page)
        table.clear()
        data_pages = self._allocator.allocate_many(page_count)
        for virtual_page, data_page in enumerate(data_pages):
            table.map(virtual_page=virtual_page, physical_page=data_page)

        self._log(
            LogLevel.INFO,
            f"Created with page table at page {table_page} and {page_count} data pages",
            pid,
        )
        return ProcessInfo(pid=pid, page_table_page=table_page, data_pages=tuple(data_pages))

    def destroy_process(self, pid: int) -> int:
        """Free every page owned by ``pid``.

        Returns:
            The number of pages released (page table included).

        Raises:
            InvalidProcessError: If ``pid`` is outside the directory.
            NoSuchProcessError: If ``pid`` has no page table.
            CorruptPageTableError: If an entry names a page that is not a
                live data page; nothing is freed in that case.

        """
        table_page = self._directory.require(pid)
        table = PageTable(self._memory, page=table_page)
        mappings = table.mappings()
        self._check_mappings(pid, table_page, mappings)

        for virtual_page, data_page in mappings:
            self._allocator.free(data_page)
            table.unmap(virtual_page=virtual_page)
        self._allocator.free(table_page)
        self._directory.clear(pid)
        released = len(mappings) + 1
        self._log(LogLevel.INFO, f"Destroyed, released {released} pages", pid)
        return released

    def _check_mappings(
        self, pid: int, table_page: int, mappings: list[tuple[int, int]]
    ) -> None:
        seen: set[int] = {table_page}
        for virtual_page, data_page in mappings:
            if (
                data_page in seen
                or not 0 < data_page < self._allocator.total_pages
                or not self._allocator.is_in_use(data_page)
            ):
                msg = (
                    f"Process {pid}: virtual page {virtual_page} maps page {data_page}, "
                    "which is not a live data page of this process"
                )
                self._log(LogLevel.ERROR, msg, pid)
                raise CorruptPageTableError(msg)
            seen.add(data_page)

    def page_table_page(self, pid: int) -> int | None:
        """Return the page holding ``pid``'s page table, if any."""
        return self._directory.get(pid)

    def page_table_entries(self, pid: int) -> list[tuple[int, int]]:
        """Return ``(virtual_page, physical_page)`` for each mapped entry.

        Raises:
            NoSuchProcessError: If ``pid`` has no page table.

        """
        return PageTable(self._memory, page=self._directory.require(pid)).mappings()

    def pages_for(self, pid: int) -> list[int]:
        """Return every physical page owned by ``pid``, page table first."""
        table_page = self._directory.get(pid)
        if table_page is None:
            return []
        return [table_page, *(page for _, page in self.page_table_entries(pid))]

    def processes(self) -> list[int]:
        """Return the pids that currently have a page table."""
        return [pid for pid, _ in self._directory]

    def _log(self, level: LogLevel, message: str, pid: int) -> None:
        if self._logger is not None:
            self._logger.log(level, message, source="process", pid=pid)
