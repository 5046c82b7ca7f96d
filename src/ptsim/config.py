"""Memory geometry and runtime options.

The simulator's physical memory is described by four numbers that must
agree with each other:

    total_size == page_count * page_size
    page_size  == 2 ** page_shift

The classic teaching layout keeps the free-page bitmap *and* the process
directory inside page 0, so the bitmap uses the first ``page_count``
bytes and the directory gets whatever is left.  We keep that capacity
rule (``max_processes = page_size - page_count``) even though both
structures now live in their own fields.

Configuration can come from Python or from a small JSON file::

    {"page_size": 256, "page_count": 64, "unsafe_translation": false}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

DEFAULT_TOTAL_SIZE = 16384
DEFAULT_PAGE_SIZE = 256
DEFAULT_PAGE_COUNT = 64
DEFAULT_PAGE_SHIFT = 8

_BITS_PER_BYTE = 8
_MIN_PAGE_COUNT = 2


class ConfigError(ValueError):
    """Raise when a memory geometry or config file is invalid."""


@dataclass(frozen=True)
class MemoryConfig:
    """Validated physical memory geometry.

    Attributes:
        total_size: Total bytes of simulated RAM.
        page_size: Bytes per page (a power of two).
        page_count: Number of physical pages.
        page_shift: log2 of ``page_size``; the page number's bit offset.

    """

    total_size: int = DEFAULT_TOTAL_SIZE
    page_size: int = DEFAULT_PAGE_SIZE
    page_count: int = DEFAULT_PAGE_COUNT
    page_shift: int = DEFAULT_PAGE_SHIFT

    def __post_init__(self) -> None:
        """Check that the four geometry numbers agree."""
        if self.page_count < _MIN_PAGE_COUNT:
            msg = f"page_count must be at least 2, got {self.page_count}"
            raise ConfigError(msg)
        if self.page_shift < 0 or self.page_size != 1 << self.page_shift:
            msg = f"page_size {self.page_size} must equal 2**page_shift (shift={self.page_shift})"
            raise ConfigError(msg)
        if self.page_count * self.page_size != self.total_size:
            msg = (
                f"page_count * page_size ({self.page_count} * {self.page_size}) "
                f"must equal total_size {self.total_size}"
            )
            raise ConfigError(msg)
        if self.page_size <= self.page_count:
            msg = (
                f"page_size {self.page_size} leaves no room for a process directory "
                f"after {self.page_count} bitmap entries"
            )
            raise ConfigError(msg)

    @classmethod
    def from_page_size(cls, *, page_size: int, page_count: int) -> MemoryConfig:
        """Build a config from page size and count, deriving the rest.

        Raises:
            ConfigError: If ``page_size`` is not a power of two.

        """
        if page_size <= 0 or page_size & (page_size - 1):
            msg = f"page_size must be a positive power of two, got {page_size}"
            raise ConfigError(msg)
        return cls(
            total_size=page_size * page_count,
            page_size=page_size,
            page_count=page_count,
            page_shift=page_size.bit_length() - 1,
        )

    @property
    def max_processes(self) -> int:
        """Return how many process slots the directory holds."""
        return self.page_size - self.page_count

    @property
    def entry_width(self) -> int:
        """Return the bytes needed for one page-table entry."""
        bits = (self.page_count - 1).bit_length()
        return max(1, -(-bits // _BITS_PER_BYTE))

    @property
    def entries_per_table(self) -> int:
        """Return how many entries fit in one page-table page."""
        return self.page_size // self.entry_width

    @property
    def max_virtual_address(self) -> int:
        """Return the highest virtual address a page table can describe."""
        return self.entries_per_table * self.page_size - 1


@dataclass(frozen=True)
class SimulatorOptions:
    """Runtime behaviour switches.

    Attributes:
        unsafe_translation: When True, accesses through an unmapped
            page-table entry alias reserved page 0 instead of faulting,
            the way the classic page-table teaching tool behaves.

    """

    unsafe_translation: bool = False


def load_config(path: Path) -> tuple[MemoryConfig, SimulatorOptions]:
    """Load geometry and options from a JSON file.

    Missing keys fall back to the defaults; unknown keys are ignored.

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object,
            holds a non-boolean ``unsafe_translation``,
            or describes an invalid geometry.

    """
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Cannot load config: {e}"
        raise ConfigError(msg) from e

    if not isinstance(data, dict):
        msg = f"Config file {path} must contain a JSON object"
        raise ConfigError(msg)

    try:
        page_size = int(data.get("page_size", DEFAULT_PAGE_SIZE))
        page_count = int(data.get("page_count", DEFAULT_PAGE_COUNT))
    except (TypeError, ValueError) as e:
        msg = f"Config values must be integers: {e}"
        raise ConfigError(msg) from e

    unsafe = data.get("unsafe_translation", False)
    if not isinstance(unsafe, bool):
        msg = f"unsafe_translation must be a JSON boolean, got {unsafe!r}"
        raise ConfigError(msg)

    config = MemoryConfig.from_page_size(page_size=page_size, page_count=page_count)
    return config, SimulatorOptions(unsafe_translation=unsafe)
