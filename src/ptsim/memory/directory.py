"""Process directory — where each process keeps its page table.

One slot per process id.  A slot holds the physical page number of the
process's page table, or ``None`` when the process does not exist.
The number of slots is fixed by the memory geometry
(``MemoryConfig.max_processes``).
"""

from collections.abc import Iterator


class InvalidProcessError(ValueError):
    """Raise when a process id falls outside the directory."""


class NoSuchProcessError(LookupError):
    """Raise when a process id has no page table."""


class ProcessDirectory:
    """Fixed-size table of page-table page numbers, indexed by pid."""

    def __init__(self, *, capacity: int) -> None:
        """Create a directory with ``capacity`` empty slots."""
        self._slots: list[int | None] = [None] * capacity

    @property
    def capacity(self) -> int:
        """Return the number of process slots."""
        return len(self._slots)

    def get(self, pid: int) -> int | None:
        """Return the page-table page for ``pid``, or None if unused."""
        self.check_pid(pid)
        return self._slots[pid]

    def require(self, pid: int) -> int:
        """Return the page-table page for ``pid``.

        Raises:
            InvalidProcessError: If ``pid`` is out of range.
            NoSuchProcessError: If ``pid`` has no page table.

        """
        page = self.get(pid)
        if page is None:
            msg = f"Process {pid} has no page table"
            raise NoSuchProcessError(msg)
        return page

    def set(self, pid: int, page: int) -> None:
        """Record ``page`` as the page table of ``pid``."""
        self.check_pid(pid)
        self._slots[pid] = page

    def clear(self, pid: int) -> None:
        """Mark ``pid``'s slot as unused."""
        self.check_pid(pid)
        self._slots[pid] = None

    def check_pid(self, pid: int) -> None:
        """Raise ``InvalidProcessError`` unless ``pid`` names a slot."""
        if not 0 <= pid < len(self._slots):
            msg = f"Process id {pid} outside 0..{len(self._slots) - 1}"
            raise InvalidProcessError(msg)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        """Yield ``(pid, page_table_page)`` for every used slot."""
        for pid, page in enumerate(self._slots):
            if page is not None:
                yield pid, page

    def __len__(self) -> int:
        """Return the number of used slots."""
        return sum(1 for page in self._slots if page is not None)
