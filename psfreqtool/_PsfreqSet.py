# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Implement the 'psfreq set' command.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import time
import typing
from psfreqlibs import CPUFreq, FreqSetter
from psfreqlibs.helperlibs import Logging, Trivial
from psfreqlibs.helperlibs.Exceptions import Error
from psfreqtool import _PsfreqGet

if typing.TYPE_CHECKING:
    import argparse
    from psfreqlibs import _SysfsIO
    from psfreqlibs.FreqSetter import SettingsTypedDict
    from psfreqtool._PsfreqPrinter import Printer

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

# How long the '--sleep' option waits, seconds.
SLEEP = 5

def _get_settings(args: argparse.Namespace) -> SettingsTypedDict:
    """Build the settings dictionary from the command-line arguments."""

    settings: SettingsTypedDict = {}

    if args.plan is not None:
        settings["plan"] = args.plan
    if args.governor is not None:
        settings["governor"] = args.governor
    if args.min_freq is not None:
        settings["min_freq"] = args.min_freq
    if args.max_freq is not None:
        settings["max_freq"] = args.max_freq
    if args.turbo is not None:
        settings["turbo"] = args.turbo

    return settings

def set_command(args: argparse.Namespace, sysfs_io: _SysfsIO.SysfsIO, printer: Printer):
    """
    Implement the 'set' command.

    Args:
        args: The command-line arguments.
        sysfs_io: The sysfs access object.
        printer: The printer object to print the new settings with.
    """

    settings = _get_settings(args)
    if not settings:
        raise Error("Please, specify at least one setting to change, use 'set -h' for help")

    privileged = Trivial.is_root()

    if args.sleep:
        _LOG.notice("Waiting %d seconds before changing the settings", SLEEP)
        time.sleep(SLEEP)

    with CPUFreq.CPUFreq(sysfs_io=sysfs_io) as cpufreq, \
         FreqSetter.FreqSetter(cpufreq, sysfs_io=sysfs_io) as setter:
        result = setter.apply(settings, privileged)

        if result.status == "invalid" and result.error:
            raise result.error
        if result.status == "partial" and result.error:
            if result.completed:
                done = f"CPUs {Trivial.rangify(result.completed)} were changed"
            else:
                done = "no CPUs were fully changed"
            raise Error(f"CPU frequency settings were applied only partially, {done}:\n"
                        f"{result.error.indent(2)}") from result.error

        printer.print_header()
        _PsfreqGet.warn_divergent_cpus(cpufreq)
        printer.print_current(cpufreq.read_snapshot())
