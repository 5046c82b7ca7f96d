"""Memory subsystem — physical pages, page tables, and translation.

Re-exports public symbols so callers can write::

    from ptsim.memory import FreePageAllocator, MemoryManager
"""

from ptsim.memory.allocator import (
    FreePageAllocator,
    InvalidFreeError,
    OutOfMemoryError,
    PageExhaustedError,
)
from ptsim.memory.directory import InvalidProcessError, NoSuchProcessError, ProcessDirectory
from ptsim.memory.manager import (
    CorruptPageTableError,
    InsufficientMemoryError,
    MemoryManager,
    ProcessExistsError,
    ProcessInfo,
)
from ptsim.memory.page_table import PageTable
from ptsim.memory.physical import AddressError, PhysicalMemory
from ptsim.memory.translator import AddressTranslator, PageFaultError, Translation

__all__ = [
    "AddressError",
    "AddressTranslator",
    "CorruptPageTableError",
    "FreePageAllocator",
    "InsufficientMemoryError",
    "InvalidFreeError",
    "InvalidProcessError",
    "MemoryManager",
    "NoSuchProcessError",
    "OutOfMemoryError",
    "PageExhaustedError",
    "PageFaultError",
    "PageTable",
    "PhysicalMemory",
    "ProcessDirectory",
    "ProcessExistsError",
    "ProcessInfo",
    "Translation",
]
