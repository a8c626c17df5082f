# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
psfreq - CPU frequency scaling configuration tool for Linux.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import os
import sys
import time
import typing
from psfreqlibs import _SysfsIO
from psfreqlibs.helperlibs import ArgParse, Logging
from psfreqlibs.helperlibs.Exceptions import Error
from psfreqtool import _PsfreqPrinter

if typing.TYPE_CHECKING:
    import argparse
    from psfreqlibs.helperlibs.ArgParse import ArgTypedDict

if sys.version_info < (3, 8):
    raise SystemExit("this tool requires python version 3.8 or higher")

_VERSION = "1.0.0"
TOOLNAME = "psfreq"

# How long the '--delay' option waits, seconds.
DELAY = 5

# The environment variable providing the default '--sysfs-root' value.
SYSFS_ROOT_ENVAR = "PSFREQ_SYSFS_ROOT"

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq").configure(prefix=TOOLNAME)

_DELAY_OPTION: ArgTypedDict = {
    "short": None,
    "long": "--delay",
    "argcomplete": None,
    "kwargs": {
        "dest": "delay",
        "action": "store_true",
        "help": f"""Wait {DELAY} seconds before doing anything. Useful when the tool is started
                    at boot time, before the CPU frequency driver is ready.""",
    },
}

_SYSFS_ROOT_OPTION: ArgTypedDict = {
    "short": "-D",
    "long": "--sysfs-root",
    "argcomplete": "DirectoriesCompleter",
    "kwargs": {
        "dest": "sysfs_root",
        "metavar": "PATH",
        "help": f"""This option is for debugging and testing. Operate on a copy of the sysfs
                    tree located at PATH instead of the real sysfs. The default is the value of
                    the '{SYSFS_ROOT_ENVAR}' environment variable, or '/' if it is not set.""",
    },
}

def build_arguments_parser() -> ArgParse.ArgsParser:
    """Build and return the the command-line arguments parser object."""

    text = "psfreq - CPU frequency scaling configuration tool for Linux."
    parser = ArgParse.ArgsParser(description=text, prog=TOOLNAME, ver=_VERSION)

    ArgParse.add_options(parser, (_DELAY_OPTION, _SYSFS_ROOT_OPTION))

    subparsers = parser.add_subparsers(title="commands", dest="a command")
    subparsers.required = True

    #
    # Create parser for the 'get' command.
    #
    text = "Print CPU frequency settings."
    descr = """Print CPU frequency settings: the current configuration (default) and/or the real
               CPU frequencies."""
    subpars = subparsers.add_parser("get", help=text, description=descr)
    subpars.set_defaults(func=_get_command)

    text = """Print the current configuration: the CPU frequency driver, the governor, the turbo
              on/off status, and the min. and max. CPU frequency."""
    subpars.add_argument("-c", "--current", action="store_true", help=text)

    text = "Print the current frequency of every CPU."
    subpars.add_argument("-r", "--real", action="store_true", help=text)

    text = "Print information in YAML format."
    subpars.add_argument("--yaml", action="store_true", help=text)

    #
    # Create parser for the 'set' command.
    #
    text = "Change CPU frequency settings."
    descr = """Change CPU frequency settings. Requires superuser privileges. The plan (if any)
               provides the base settings, other options override them. The min. and max. CPU
               frequency are percentages of the hardware CPU frequency range (e.g., '20' or
               '20%'), frequencies with a unit (e.g., '1.2GHz'), or 'min' and 'max' for the hardware
               limits."""
    subpars = subparsers.add_parser("set", help=text, description=descr)
    subpars.set_defaults(func=_set_command)

    text = """Name or number of the CPU frequency plan to apply. Use the 'plans' command to list
              the plans."""
    subpars.add_argument("-p", "--plan", metavar="PLAN", help=text)

    text = "Name of the CPU frequency governor to set."
    subpars.add_argument("-g", "--governor", metavar="GOVERNOR", help=text)

    text = "The min. CPU frequency to set."
    subpars.add_argument("-n", "--min", dest="min_freq", metavar="MIN", help=text)

    text = "The max. CPU frequency to set."
    subpars.add_argument("-m", "--max", dest="max_freq", metavar="MAX", help=text)

    text = "Enable or disable turbo."
    subpars.add_argument("-t", "--turbo", choices=("on", "off"), help=text)

    text = "Wait 5 seconds before changing the settings."
    subpars.add_argument("--sleep", action="store_true", help=text)

    #
    # Create parser for the 'plans' command.
    #
    text = "List the CPU frequency plans."
    descr = """List the built-in CPU frequency plans and their numbers."""
    subpars = subparsers.add_parser("plans", help=text, description=descr)
    subpars.set_defaults(func=_plans_command)

    text = "Print information in YAML format."
    subpars.add_argument("--yaml", action="store_true", help=text)

    return parser

def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: The arguments to parse. Defaults to 'sys.argv'.

    Returns:
        The parsed arguments.
    """

    parser = build_arguments_parser()
    args = parser.parse_args(argv)

    if not args.sysfs_root:
        args.sysfs_root = os.environ.get(SYSFS_ROOT_ENVAR, "/")

    return args

def _get_printer(args: argparse.Namespace) -> _PsfreqPrinter.Printer:
    """Create and return a printer object configured according to the command-line arguments."""

    fmt: _PsfreqPrinter.PrintFormatType = "yaml" if getattr(args, "yaml", False) else "human"
    return _PsfreqPrinter.Printer(colored=_LOG.colored, fmt=fmt, header=f"{TOOLNAME} {_VERSION}")

# pylint: disable=import-outside-toplevel

def _get_command(args: argparse.Namespace, sysfs_io: _SysfsIO.SysfsIO):
    """Implement the 'get' command."""

    from psfreqtool import _PsfreqGet

    with _get_printer(args) as printer:
        _PsfreqGet.get_command(args, sysfs_io, printer)

def _set_command(args: argparse.Namespace, sysfs_io: _SysfsIO.SysfsIO):
    """Implement the 'set' command."""

    from psfreqtool import _PsfreqSet

    with _get_printer(args) as printer:
        _PsfreqSet.set_command(args, sysfs_io, printer)

def _plans_command(args: argparse.Namespace, _: _SysfsIO.SysfsIO):
    """Implement the 'plans' command."""

    from psfreqlibs import Plans

    with _get_printer(args) as printer:
        printer.print_plans(Plans.PLANS, Plans.ALIASES)

def main(argv: list[str] | None = None) -> int:
    """
    Script entry point.

    Args:
        argv: The command-line arguments. Defaults to 'sys.argv'.

    Returns:
        The program exit code.
    """

    try:
        args = parse_arguments(argv)

        if not getattr(args, "func", None):
            _LOG.error("please, run '%s -h' for help", TOOLNAME)
            return -1

        if args.delay:
            _LOG.notice("Waiting %d seconds before starting", DELAY)
            time.sleep(DELAY)

        with _SysfsIO.SysfsIO(root=args.sysfs_root) as sysfs_io:
            args.func(args, sysfs_io)
    except KeyboardInterrupt:
        _LOG.info("\nInterrupted, exiting")
        return -1
    except Error as err:
        _LOG.error_out(err)

    return 0

if __name__ == "__main__":
    sys.exit(main())
