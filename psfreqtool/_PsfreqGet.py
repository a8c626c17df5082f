# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Implement the 'psfreq get' command.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from psfreqlibs import CPUFreq
from psfreqlibs.helperlibs import Logging, Trivial

if typing.TYPE_CHECKING:
    import argparse
    from psfreqlibs import _SysfsIO
    from psfreqtool._PsfreqPrinter import Printer

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

_NAMES = {
    "governor": "CPU frequency governor",
    "min_freq": "min. CPU frequency",
    "max_freq": "max. CPU frequency",
}

def warn_divergent_cpus(cpufreq: CPUFreq.CPUFreq):
    """
    Print a warning if some CPUs are configured differently than the first CPU, because the
    first CPU configuration is printed as the configuration of all CPUs.
    """

    first = cpufreq.discover_cpus()[0]

    for name, cpus in cpufreq.get_divergent_cpus().items():
        if not cpus:
            continue

        plural = "s" if len(cpus) > 1 else ""
        _LOG.warning("CPU%s %s: %s differs from CPU %d, printing the CPU %d value",
                     plural, Trivial.rangify(cpus), _NAMES.get(name, name), first, first)

def get_command(args: argparse.Namespace, sysfs_io: _SysfsIO.SysfsIO, printer: Printer):
    """
    Implement the 'get' command.

    Args:
        args: The command-line arguments.
        sysfs_io: The sysfs access object.
        printer: The printer object to print the settings with.
    """

    current = args.current or not args.real

    with CPUFreq.CPUFreq(sysfs_io=sysfs_io) as cpufreq:
        printer.print_header()

        if current:
            snapshot = cpufreq.read_snapshot()
            warn_divergent_cpus(cpufreq)
            printer.print_current(snapshot)

        if args.real:
            printer.print_real(cpufreq.discover_cpus(), cpufreq.read_real_frequencies())
