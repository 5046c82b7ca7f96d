"""Physical memory — the simulated RAM chip.

A single zero-initialised ``bytearray`` of ``page_count * page_size``
bytes.  Every other structure in the simulator (page tables, data
pages) is just a view onto a range of it.

Addresses are split with a fixed bit pattern::

    address = (page << page_shift) | offset      offset < page_size
"""

from ptsim.config import MemoryConfig


class AddressError(ValueError):
    """Raise when an address or page number falls outside its range."""


class PhysicalMemory:
    """Fixed-size byte-addressable store."""

    def __init__(self, config: MemoryConfig) -> None:
        """Allocate ``config.total_size`` zeroed bytes."""
        self._config = config
        self._data = bytearray(config.total_size)

    @property
    def config(self) -> MemoryConfig:
        """Return the geometry this store was built with."""
        return self._config

    @property
    def size(self) -> int:
        """Return the total number of bytes."""
        return len(self._data)

    def address_of(self, page: int, offset: int = 0) -> int:
        """Compose a physical address from a page number and offset.

        Raises:
            AddressError: If the page or offset is out of range.

        """
        self._check_page(page)
        if not 0 <= offset < self._config.page_size:
            msg = f"Offset {offset} outside page of {self._config.page_size} bytes"
            raise AddressError(msg)
        return (page << self._config.page_shift) | offset

    def split(self, address: int) -> tuple[int, int]:
        """Split an address into ``(page, offset)``."""
        self._check_address(address)
        return address >> self._config.page_shift, address & (self._config.page_size - 1)

    def read_byte(self, address: int) -> int:
        """Return the byte stored at a physical address."""
        self._check_address(address)
        return self._data[address]

    def write_byte(self, address: int, value: int) -> None:
        """Store one byte at a physical address.

        Raises:
            AddressError: If the address is out of range.
            ValueError: If the value does not fit in a byte.

        """
        self._check_address(address)
        self._data[address] = value

    def read_page(self, page: int) -> bytes:
        """Return a copy of one whole page."""
        start = self.address_of(page)
        return bytes(self._data[start : start + self._config.page_size])

    def zero_page(self, page: int) -> None:
        """Overwrite one whole page with zero bytes."""
        start = self.address_of(page)
        self._data[start : start + self._config.page_size] = bytes(self._config.page_size)

    def _check_address(self, address: int) -> None:
        if not 0 <= address < len(self._data):
            msg = f"Physical address {address} outside 0..{len(self._data) - 1}"
            raise AddressError(msg)

    def _check_page(self, page: int) -> None:
        if not 0 <= page < self._config.page_count:
            msg = f"Page {page} outside 0..{self._config.page_count - 1}"
            raise AddressError(msg)
