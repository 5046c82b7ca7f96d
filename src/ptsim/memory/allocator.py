"""Free-page allocator — which physical pages are in use.

The allocator keeps one boolean per physical page (``True`` = in use).
Page 0 is reserved for the system and is marked used from the start,
so a page-table entry of ``0`` can always mean "unmapped".

Allocation is deterministic: the lowest-numbered free page wins.  That
makes the memory map easy to predict by hand, which is the point of a
teaching simulator.

Failure is signalled with exceptions, never with a sentinel page
number, so no legitimate page can be mistaken for "out of memory".
"""

from ptsim.logging import Logger, LogLevel

RESERVED_PAGE = 0


class OutOfMemoryError(Exception):
    """Raise when a memory allocation cannot be satisfied."""


class PageExhaustedError(OutOfMemoryError):
    """Raise when there is no free physical page left."""


class InvalidFreeError(ValueError):
    """Raise when freeing a reserved, out-of-range, or already free page."""


class FreePageAllocator:
    """Track and hand out physical pages, lowest first."""

    def __init__(self, *, page_count: int, logger: Logger | None = None) -> None:
        """Create an allocator where every page except page 0 is free.

        Args:
            page_count: Total number of physical pages.
            logger: Optional event log.

        """
        self._page_count = page_count
        self._in_use: list[bool] = [False] * page_count
        self._in_use[RESERVED_PAGE] = True
        self._free_count = page_count - 1
        self._logger = logger

    @property
    def total_pages(self) -> int:
        """Return the number of physical pages, reserved page included."""
        return self._page_count

    @property
    def free_count(self) -> int:
        """Return the number of pages available for allocation."""
        return self._free_count

    def is_in_use(self, page: int) -> bool:
        """Return True if the page is currently allocated or reserved."""
        self._check_range(page)
        return self._in_use[page]

    def bitmap(self) -> tuple[bool, ...]:
        """Return the in-use flag of every page, page 0 first."""
        return tuple(self._in_use)

    def allocate(self) -> int:
        """Claim the lowest-numbered free page.

        Returns:
            The page number.

        Raises:
            PageExhaustedError: If every page is in use.

        """
        for page in range(1, self._page_count):
            if not self._in_use[page]:
                self._in_use[page] = True
                self._free_count -= 1
                self._log(LogLevel.DEBUG, f"Allocated page {page}")
                return page
        msg = f"No free pages (0 of {self._page_count - 1} available)"
        self._log(LogLevel.WARNING, msg)
        raise PageExhaustedError(msg)

    def allocate_many(self, count: int) -> list[int]:
        """Claim ``count`` pages, or none at all.

        Raises:
            OutOfMemoryError: If fewer than ``count`` pages are free.
            ValueError: If ``count`` is negative.

        """
        if count < 0:
            msg = f"Page count must be non-negative, got {count}"
            raise ValueError(msg)
        if count > self._free_count:
            msg = f"Cannot allocate {count} pages: only {self._free_count} free"
            raise OutOfMemoryError(msg)
        return [self.allocate() for _ in range(count)]

    def free(self, page: int) -> None:
        """Return a page to the free pool.

        The page's contents are left as they are.

        Raises:
            InvalidFreeError: If the page is reserved, out of range, or
                already free.

        """
        if page == RESERVED_PAGE:
            msg = f"Page {RESERVED_PAGE} is reserved and cannot be freed"
            raise InvalidFreeError(msg)
        if not 0 < page < self._page_count:
            msg = f"Page {page} outside 1..{self._page_count - 1}"
            raise InvalidFreeError(msg)
        if not self._in_use[page]:
            msg = f"Page {page} is already free"
            raise InvalidFreeError(msg)
        self._in_use[page] = False
        self._free_count += 1
        self._log(LogLevel.DEBUG, f"Freed page {page}")

    def _check_range(self, page: int) -> None:
        if not 0 <= page < self._page_count:
            msg = f"Page {page} outside 0..{self._page_count - 1}"
            raise IndexError(msg)

    def _log(self, level: LogLevel, message: str) -> None:
        if self._logger is not None:
            self._logger.log(level, message, source="allocator")
