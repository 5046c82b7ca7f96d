"""Address translation — the simulated MMU.

On every load and store the MMU turns a process's virtual address into
a physical one::

    virtual address  →  (virtual page, offset)
    directory[pid]   →  page-table page
    page table[vpn]  →  physical page
    physical address →  (physical page << shift) | offset

The result says whether the virtual page was actually mapped.  An
unmapped page (a zero entry) translates to physical page 0 with
``mapped=False``; the caller decides whether that is a page fault or,
in unsafe mode, an access to page 0.
"""

from dataclasses import dataclass

from ptsim.memory.directory import ProcessDirectory
from ptsim.memory.page_table import UNMAPPED, PageTable
from ptsim.memory.physical import AddressError, PhysicalMemory


class PageFaultError(Exception):
    """Raised when a virtual address has no physical mapping."""


@dataclass(frozen=True)
class Translation:
    """Outcome of translating one virtual address."""

    pid: int
    virtual_address: int
    virtual_page: int
    offset: int
    physical_page: int
    physical_address: int
    mapped: bool


class AddressTranslator:
    """Walk a process's page table to resolve virtual addresses."""

    def __init__(self, memory: PhysicalMemory, directory: ProcessDirectory) -> None:
        """Create a translator over the given memory and directory."""
        self._memory = memory
        self._directory = directory
        self._shift = memory.config.page_shift
        self._offset_mask = memory.config.page_size - 1
        self._max_virtual = memory.config.max_virtual_address

    def split(self, virtual_address: int) -> tuple[int, int]:
        """Split a virtual address into ``(virtual_page, offset)``.

        Raises:
            AddressError: If the address is negative or beyond what a
                page table can describe.

        """
        if not 0 <= virtual_address <= self._max_virtual:
            msg = f"Virtual address {virtual_address} outside 0..{self._max_virtual}"
            raise AddressError(msg)
        return virtual_address >> self._shift, virtual_address & self._offset_mask

    def translate(self, pid: int, virtual_address: int) -> Translation:
        """Translate ``virtual_address`` in process ``pid``.

        Raises:
            AddressError: If the virtual address is out of range.
            InvalidProcessError: If ``pid`` is outside the directory.
            NoSuchProcessError: If ``pid`` has no page table.

        """
        virtual_page, offset = self.split(virtual_address)
        table = PageTable(self._memory, page=self._directory.require(pid))
        physical_page = table.get(virtual_page)
        return Translation(
            pid=pid,
            virtual_address=virtual_address,
            virtual_page=virtual_page,
            offset=offset,
            physical_page=physical_page,
            physical_address=(physical_page << self._shift) | offset,
            mapped=physical_page != UNMAPPED,
        )

    def resolve(self, pid: int, virtual_address: int, *, unsafe: bool = False) -> int:
        """Return the physical address for an access, faulting if unmapped.

        Args:
            pid: The accessing process.
            virtual_address: The address the process used.
            unsafe: Let unmapped pages alias reserved page 0 instead of
                raising.

        Raises:
            PageFaultError: If the page is unmapped and ``unsafe`` is False.

        """
        result = self.translate(pid, virtual_address)
        if not result.mapped and not unsafe:
            msg = (
                f"Process {pid}: virtual page {result.virtual_page} "
                f"(address {virtual_address}) is not mapped"
            )
            raise PageFaultError(msg)
        return result.physical_address
