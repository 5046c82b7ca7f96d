"""Page table — a view onto one physical page.

A page table is not a separate Python object holding a dict: it *is* a
page of simulated RAM.  Entry ``v`` lives at byte offset
``v * entry_width`` inside that page and holds the physical page number
backing virtual page ``v``.  The value ``0`` means "unmapped", which is
safe because page 0 is reserved and never handed out.

Entries are little-endian and as wide as the geometry needs
(one byte for up to 256 physical pages).
"""

from ptsim.memory.physical import AddressError, PhysicalMemory

UNMAPPED = 0


class PageTable:
    """Read and write the entries stored in one physical page."""

    def __init__(self, memory: PhysicalMemory, *, page: int) -> None:
        """Wrap physical page ``page`` as a page table."""
        self._memory = memory
        self._page = page
        self._base = memory.address_of(page)
        self._width = memory.config.entry_width
        self._capacity = memory.config.entries_per_table

    @property
    def page(self) -> int:
        """Return the physical page that holds this table."""
        return self._page

    @property
    def capacity(self) -> int:
        """Return how many entries the table can hold."""
        return self._capacity

    def get(self, virtual_page: int) -> int:
        """Return the entry for ``virtual_page`` (``0`` when unmapped).

        Raises:
            AddressError: If ``virtual_page`` is past the end of the table.

        """
        address = self._entry_address(virtual_page)
        value = 0
        for i in range(self._width):
            value |= self._memory.read_byte(address + i) << (8 * i)
        return value

    def map(self, *, virtual_page: int, physical_page: int) -> None:
        """Point ``virtual_page`` at ``physical_page``."""
        address = self._entry_address(virtual_page)
        for i in range(self._width):
            self._memory.write_byte(address + i, (physical_page >> (8 * i)) & 0xFF)

    def unmap(self, *, virtual_page: int) -> None:
        """Clear the entry for ``virtual_page``."""
        self.map(virtual_page=virtual_page, physical_page=UNMAPPED)

    def clear(self) -> None:
        """Unmap every entry.

        Freed pages keep their bytes, so a recycled page must be cleared
        before it is used as a page table.
        """
        self._memory.zero_page(self._page)

    def mappings(self) -> list[tuple[int, int]]:
        """Return ``(virtual_page, physical_page)`` for every non-zero entry."""
        result: list[tuple[int, int]] = []
        for virtual_page in range(self._capacity):
            physical_page = self.get(virtual_page)
            if physical_page != UNMAPPED:
                result.append((virtual_page, physical_page))
        return result

    def _entry_address(self, virtual_page: int) -> int:
        if not 0 <= virtual_page < self._capacity:
            msg = f"Virtual page {virtual_page} outside page table (0..{self._capacity - 1})"
            raise AddressError(msg)
        return self._base + virtual_page * self._width
