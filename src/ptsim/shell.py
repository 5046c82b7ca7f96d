"""The shell — turns command tokens into simulator operations.

Commands arrive as a flat token stream, exactly as they appear on the
command line::

    np 1 2  sb 1 0 42  lb 1 0  pfm  kp 1

Each command name is followed by a fixed number of integer arguments.
The shell consumes one group at a time, left to right, and collects
every line of output.

Design choices:
    - **Returns strings, not prints.**  The caller decides how to
      display output, which keeps the shell fully testable.
    - **Command dispatch via a dict.**  Adding a command means writing a
      method and adding one table entry.
    - **Errors are text.**  A failing command produces an ``Error: ...``
      line and the next command still runs.
"""

import shlex
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeAlias

from ptsim.diagnostics import render_access, render_free_map, render_page_table
from ptsim.memory.allocator import OutOfMemoryError
from ptsim.memory.manager import CorruptPageTableError, ProcessExistsError
from ptsim.memory.translator import PageFaultError
from ptsim.simulator import AccessEvent, Simulator

# Type alias for a command handler: takes parsed int args, returns output.
_Handler: TypeAlias = Callable[[list[int]], str]

# Everything the core raises for a bad request; anything else is a bug.
_CORE_ERRORS = (
    OutOfMemoryError,
    ProcessExistsError,
    CorruptPageTableError,
    PageFaultError,
    LookupError,
    ValueError,
)


@dataclass(frozen=True)
class _Command:
    """A dispatch-table entry."""

    handler: _Handler
    args: tuple[str, ...]
    summary: str


class Shell:
    """Command interpreter bound to one simulator."""

    def __init__(self, *, simulator: Simulator) -> None:
        """Create a shell that drives ``simulator``."""
        self._sim = simulator
        self._access_lines: list[str] = []
        self._sim.add_listener(self._on_access)

        self._commands: dict[str, _Command] = {
            "np": _Command(self._cmd_np, ("pid", "pages"), "create a process"),
            "kp": _Command(self._cmd_kp, ("pid",), "kill a process"),
            "sb": _Command(self._cmd_sb, ("pid", "vaddr", "value"), "store a byte"),
            "lb": _Command(self._cmd_lb, ("pid", "vaddr"), "load a byte"),
            "pfm": _Command(self._cmd_pfm, (), "print the page free map"),
            "ppt": _Command(self._cmd_ppt, ("pid",), "print a page table"),
            "help": _Command(self._cmd_help, (), "list commands"),
            "log": _Command(self._cmd_log, (), "show the event log"),
        }

    @property
    def command_names(self) -> list[str]:
        """Return every command the shell understands."""
        return sorted(self._commands)

    def execute(self, line: str) -> str:
        """Run every command in a single line of text."""
        return "\n".join(self.run(shlex.split(line)))

    def run(self, tokens: Sequence[str]) -> list[str]:
        """Run a token stream and return its output lines.

        Args:
            tokens: Command names followed by their arguments.

        Returns:
            One string per command that produced output.

        """
        output: list[str] = []
        i = 0
        while i < len(tokens):
            name = tokens[i]
            i += 1
            command = self._commands.get(name)
            if command is None:
                output.append(f"Error: unknown command '{name}'")
                continue

            raw = list(tokens[i : i + len(command.args)])
            i += len(command.args)
            if len(raw) < len(command.args):
                output.append(f"Error: usage: {self._usage(name)}")
                break

            result = self._dispatch(name, command, raw)
            if result:
                output.append(result)
        return output

    def _dispatch(self, name: str, command: _Command, raw: list[str]) -> str:
        try:
            args = [int(arg) for arg in raw]
        except ValueError:
            return f"Error: {name} expects integer arguments, got {' '.join(raw)}"

        try:
            result = command.handler(args)
        except _CORE_ERRORS as e:
            result = f"Error: {e}"
        finally:
            accesses = self._access_lines
            self._access_lines = []
        return "\n".join([*accesses, result]) if result else "\n".join(accesses)

    def _usage(self, name: str) -> str:
        args = " ".join(f"<{arg}>" for arg in self._commands[name].args)
        return f"{name} {args}".rstrip()

    def _on_access(self, event: AccessEvent) -> None:
        self._access_lines.append(render_access(event))

    # -- Command handlers -------------------------------------------------

    def _cmd_np(self, args: list[int]) -> str:
        pid, pages = args
        info = self._sim.create_process(pid, pages)
        return f"Process {pid}: page table at page {info.page_table_page}, {pages} data pages"

    def _cmd_kp(self, args: list[int]) -> str:
        (pid,) = args
        released = self._sim.destroy_process(pid)
        return f"Process {pid} killed, {released} pages freed"

    def _cmd_sb(self, args: list[int]) -> str:
        pid, vaddr, value = args
        self._sim.store(pid, vaddr, value)
        return ""

    def _cmd_lb(self, args: list[int]) -> str:
        pid, vaddr = args
        self._sim.load(pid, vaddr)
        return ""

    def _cmd_pfm(self, _args: list[int]) -> str:
        return render_free_map(self._sim.free_page_bitmap())

    def _cmd_ppt(self, args: list[int]) -> str:
        (pid,) = args
        return render_page_table(pid, self._sim.page_table_entries(pid))

    def _cmd_help(self, _args: list[int]) -> str:
        lines = ["Commands:"]
        for name in self._commands:
            lines.append(f"  {self._usage(name):<24} {self._commands[name].summary}")
        return "\n".join(lines)

    def _cmd_log(self, _args: list[int]) -> str:
        return "\n".join(str(entry) for entry in self._sim.logger.entries)
