"""Command-line entry point.

Usage::

    ptsim [--config FILE] [--unsafe] COMMAND...

Every invocation builds a fresh machine, runs the commands in order,
prints their output and exits.  Individual command failures are
reported as text; only a missing command list or a bad config file
changes the exit code.
"""

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import NoReturn

from ptsim.config import ConfigError, MemoryConfig, SimulatorOptions, load_config
from ptsim.shell import Shell
from ptsim.simulator import Simulator

_EPILOG = """commands:
  np PID PAGES        create a process
  kp PID              kill a process
  sb PID VADDR VALUE  store a byte
  lb PID VADDR        load a byte
  pfm                 print the page free map
  ppt PID             print a page table
"""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that raises instead of exiting on bad options."""

    def error(self, message: str) -> NoReturn:
        """Turn a parse failure into a ``ConfigError``."""
        raise ConfigError(message)


def build_parser() -> argparse.ArgumentParser:
    """Create the ``ptsim`` argument parser."""
    parser = _ArgumentParser(
        prog="ptsim",
        description="Simulate single-level page tables.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, metavar="FILE", help="JSON memory config")
    parser.add_argument(
        "--unsafe",
        action="store_true",
        help="let unmapped accesses alias reserved page 0 instead of faulting",
    )
    parser.add_argument("commands", nargs=argparse.REMAINDER, help="commands to run in order")
    return parser


USAGE = build_parser().format_usage().strip()


def parse_options(
    argv: Sequence[str],
) -> tuple[MemoryConfig, SimulatorOptions, list[str]]:
    """Split ``argv`` into machine settings and command tokens.

    Returns:
        The memory config, runtime options, and the command tokens.

    Raises:
        ConfigError: If an option is unknown or malformed, or the
            config file is invalid.

    """
    args = build_parser().parse_args(list(argv))
    config, options = MemoryConfig(), SimulatorOptions()
    if args.config is not None:
        config, options = load_config(args.config)
    if args.unsafe:
        options = SimulatorOptions(unsafe_translation=True)
    return config, options, list(args.commands)


def run(argv: Sequence[str]) -> tuple[int, str]:
    """Run a full invocation without touching stdout.

    Returns:
        The exit code and the text to print.

    """
    try:
        config, options, tokens = parse_options(argv)
    except ConfigError as e:
        return 1, f"Error: {e}\n{USAGE}"
    if not tokens:
        return 1, USAGE

    shell = Shell(simulator=Simulator(config, options=options))
    return 0, "\n".join(shell.run(tokens))


def main() -> None:
    """Run the ``ptsim`` console script."""
    code, text = run(sys.argv[1:])
    if code:
        print(text, file=sys.stderr)  # noqa: T201
    elif text:
        print(text)  # noqa: T201
    sys.exit(code)
