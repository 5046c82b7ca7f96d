"""Text rendering of memory state.

Pure functions: they take the simulator's read-only query results and
return strings.  Nothing here touches the simulator itself, so the same
renderers serve the CLI, the shell and the web page.
"""

from collections.abc import Iterable, Sequence

from ptsim.simulator import AccessEvent, AccessKind

_PAGES_PER_ROW = 16
_USED = "#"
_FREE = "."


def render_free_map(bitmap: Sequence[bool], *, per_row: int = _PAGES_PER_ROW) -> str:
    """Draw the free-page map, ``#`` for used pages and ``.`` for free ones.

    Args:
        bitmap: In-use flag for every physical page, page 0 first.
        per_row: Pages drawn per line.

    Returns:
        A header line followed by rows of page markers.

    """
    cells = "".join(_USED if used else _FREE for used in bitmap)
    rows = [cells[i : i + per_row] for i in range(0, len(cells), per_row)]
    return "\n".join(["--- PAGE FREE MAP ---", *rows])


def render_page_table(pid: int, entries: Iterable[tuple[int, int]]) -> str:
    """List a process's mappings as ``vv -> pp`` in hexadecimal."""
    lines = [f"--- PROCESS {pid} PAGE TABLE ---"]
    lines.extend(f"{virtual:02x} -> {physical:02x}" for virtual, physical in entries)
    return "\n".join(lines)


def render_access(event: AccessEvent) -> str:
    """Describe one load or store, e.g. ``Store proc 0: 256 => 1280, value=99``."""
    verb = "Store" if event.kind is AccessKind.STORE else "Load"
    return (
        f"{verb} proc {event.pid}: {event.virtual_address} => "
        f"{event.physical_address}, value={event.value}"
    )
