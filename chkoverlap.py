#!/usr/bin/env python3
"""
chkoverlap — PDP-8 BIN/RIM overlap checker CLI

Usage:
    python chkoverlap.py [-b | -r] [-v] [-s] [-c | -f | --map MODE] <tape>

Tapes are read as RIM unless -b is given. BIN tapes end with a checksum
word which is not counted as a load.

Exit status is the number of overlapping areas found (0 = clean, capped
at 254). Errors exit with 255.

Examples:
    python chkoverlap.py -b focal.bin
    python chkoverlap.py -v -r loader.rim
    python chkoverlap.py -b -s -f prog.bin       # usage map only
"""

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from typing import List, Optional

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from pdp8_tape import __version__, analyze, trace_line, overlap_lines, render_map
from pdp8_tape import MAP_NONE, MAP_COMPRESSED, MAP_FULL, MAP_MODES
from pdp8_tape import TapeError, TapeInputError
from pdp8_tape.log_setup import setup_logging

PROG = "chkoverlap"
FAULT_EXIT = 255
MAX_OVERLAP_EXIT = 254

log = logging.getLogger(PROG)


@dataclass
class CheckOptions:
    """Settings for one run, resolved from the command line."""
    path: str
    checksummed: bool = False
    verbose: bool = False
    silent: bool = False
    map_mode: str = MAP_NONE


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(FAULT_EXIT, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog=PROG,
        description="Checks for overlapping addresses in PDP8 .RIM or .BIN files.",
    )
    parser.add_argument("tape", help="BIN or RIM tape image")
    kind = parser.add_mutually_exclusive_group()
    kind.add_argument("-b", "--bin", action="store_true",
                      help="process a .BIN file (drop trailing checksum)")
    kind.add_argument("-r", "--rim", action="store_true",
                      help="process a .RIM file")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="verbose operation (print decoded records)")
    parser.add_argument("-s", "--silent", action="store_true",
                        help="silent operation (no overlap list)")
    parser.add_argument("-m", "--map", dest="map_mode", choices=MAP_MODES,
                        default=MAP_NONE, help="print a usage map")
    parser.add_argument("-c", dest="map_mode", action="store_const",
                        const=MAP_COMPRESSED, help="same as --map compressed")
    parser.add_argument("-f", dest="map_mode", action="store_const",
                        const=MAP_FULL, help="same as --map full")
    parser.set_defaults(map_mode=MAP_NONE)
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        help="console log level (default: WARNING)")
    parser.add_argument("-V", "--version", action="version",
                        version=f"{PROG} version {__version__}")
    return parser


def resolve_options(args: argparse.Namespace) -> CheckOptions:
    return CheckOptions(
        path=args.tape,
        checksummed=args.bin,
        verbose=args.verbose,
        silent=args.silent,
        map_mode=args.map_mode,
    )


def _print_trace(rec):
    line = trace_line(rec)
    if line is not None:
        print(line)


def run(opts: CheckOptions) -> int:
    """Check one tape and print the report. Returns the overlap count."""
    try:
        f = open(opts.path, "rb")
    except OSError as e:
        raise TapeInputError(opts.path, e.strerror or str(e)) from e

    log.info("Checking %s (%s)", opts.path, "BIN" if opts.checksummed else "RIM")
    with f:
        result = analyze(f, checksummed=opts.checksummed,
                         on_record=_print_trace if opts.verbose else None)
    log.info("%d data words, %d addresses used, %d overlap(s)",
             result.writes, result.usage.used(), result.overlaps)

    if not opts.silent:
        for line in overlap_lines(result.regions):
            print(line)

    map_lines = render_map(result.usage.counts, opts.map_mode)
    if map_lines:
        if result.overlaps and not opts.silent:
            print()
        for line in map_lines:
            print(line)

    return result.overlaps


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(PROG, console_level=args.log_level)
    opts = resolve_options(args)

    try:
        overlaps = run(opts)
    except TapeError as e:
        log.error("%s", e)
        return FAULT_EXIT
    except Exception as e:
        log.exception("Internal error: %s", e)
        return FAULT_EXIT

    return min(overlaps, MAX_OVERLAP_EXIT)


if __name__ == "__main__":
    sys.exit(main())
