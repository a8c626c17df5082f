# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
This module provides API for printing CPU frequency settings and plans.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import typing
import colorama
from psfreqlibs import CPUFreq
from psfreqlibs.helperlibs import Logging, ClassHelpers, YAML
from psfreqlibs.helperlibs.Exceptions import Error, ErrorInvalidRange

if typing.TYPE_CHECKING:
    from typing import IO, Any, Literal
    from psfreqlibs.Plans import FrequencyPlan

    PrintFormatType = Literal["human", "yaml"]

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

# The prefix of every line of the "human" format.
_PFX = "pstate::"

def _fmt_turbo(turbo_disabled: bool | None) -> str:
    """Format the turbo on/off status for the "human" format."""

    if turbo_disabled is None:
        return "unsupported"
    return f"{int(turbo_disabled)} [{'OFF' if turbo_disabled else 'ON'}]"

def _fmt_turbo_yaml(turbo_disabled: bool | None) -> str | None:
    """Format the turbo on/off status for the "yaml" format."""

    if turbo_disabled is None:
        return None
    return "off" if turbo_disabled else "on"

def _get_percent(freq: int, snapshot: CPUFreq.CPUSnapshot) -> int | None:
    """Return 'freq' as percent of the hardware frequency range, or 'None' if the range is empty."""

    try:
        return CPUFreq.compute_percent(freq, snapshot.hw_min_freq, snapshot.hw_max_freq)
    except ErrorInvalidRange as err:
        _LOG.debug("Cannot express %d kHz as a percentage:\n%s", freq, err.indent(2))
        return None

class Printer(ClassHelpers.SimpleCloseContext):
    """
    Print CPU frequency settings in the "human" or "yaml" format.

    The printer is configured explicitly by the constructor arguments, and does not depend on
    any global state.
    """

    def __init__(self,
                 colored: bool = False,
                 fmt: PrintFormatType = "human",
                 header: str = "",
                 fobj: IO[str] | None = None):
        """
        Initialize a class instance.

        Args:
            colored: Whether to colorize the "human" format output.
            fmt: The output format.
            header: The header line of the "human" format output (e.g., the tool name and version).
            fobj: The stream to print to. By default, the messages are printed with the logger,
                  which prints them to the standard output.
        """

        if fmt not in ("human", "yaml"):
            raise Error(f"BUG: unsupported output format '{fmt}'")

        self.colored = colored
        self.fmt = fmt
        self._header = header
        self._fobj = fobj

    def close(self):
        """Uninitialize the class object."""
        ClassHelpers.close(self, unref_attrs=("_fobj",))

    def _print(self, msg: str):
        """Print message 'msg'."""

        if self._fobj:
            self._fobj.write(msg + "\n")
        else:
            _LOG.info(msg)

    def _paint(self, text: str, color: str) -> str:
        """Wrap 'text' into 'color' codes if colored output is enabled."""

        if not self.colored:
            return text
        return color + text + colorama.Style.RESET_ALL

    def _print_line(self, label: str, value: str):
        """Print a "human" format line."""

        label = self._paint(f"{_PFX}{label}", colorama.Fore.BLUE + colorama.Style.BRIGHT)
        value = self._paint(value, colorama.Fore.GREEN)
        self._print(f"    {label} -> {value}")

    def _print_yaml(self, data: dict[str, Any]):
        """Print 'data' in the YAML format."""

        if self._fobj:
            YAML.dump(data, self._fobj)
        else:
            YAML.dump(data, sys.stdout)

    def print_header(self):
        """Print the header line. Do nothing for the "yaml" format."""

        if self.fmt == "human" and self._header:
            self._print(self._paint(self._header, colorama.Style.BRIGHT))

    def print_current(self, snapshot: CPUFreq.CPUSnapshot):
        """
        Print the current CPU frequency configuration.

        Args:
            snapshot: The 'CPUFreq.CPUSnapshot' object to print.
        """

        min_pct = _get_percent(snapshot.min_freq, snapshot)
        max_pct = _get_percent(snapshot.max_freq, snapshot)

        if self.fmt == "yaml":
            data = {
                "driver": snapshot.driver,
                "governor": snapshot.governor,
                "turbo": _fmt_turbo_yaml(snapshot.turbo_disabled),
                "min_freq": {"percent": min_pct, "khz": snapshot.min_freq},
                "max_freq": {"percent": max_pct, "khz": snapshot.max_freq},
                "hw_min_freq": snapshot.hw_min_freq,
                "hw_max_freq": snapshot.hw_max_freq,
                "cpu_count": snapshot.cpu_count,
                "available_governors": snapshot.available_governors,
            }
            self._print_yaml(data)
            return

        self._print_line("CPU_DRIVER  ", snapshot.driver)
        self._print_line("CPU_GOVERNOR", snapshot.governor)
        self._print_line("TURBO       ", _fmt_turbo(snapshot.turbo_disabled))

        for label, pct, freq in (("CPU_MIN     ", min_pct, snapshot.min_freq),
                                 ("CPU_MAX     ", max_pct, snapshot.max_freq)):
            pct_str = "?" if pct is None else str(pct)
            self._print_line(label, f"{pct_str}% [{freq}KHz]")

    def print_real(self, cpus: list[int], freqs: list[int | None]):
        """
        Print the current frequencies of the CPUs.

        Args:
            cpus: The CPU numbers.
            freqs: The CPU frequencies (kHz), indexed the same way as 'cpus'. 'None' means that the
                   frequency is unavailable.
        """

        if self.fmt == "yaml":
            self._print_yaml({"real_freqs": dict(zip(cpus, freqs))})
            return

        for cpu, freq in zip(cpus, freqs):
            if freq is None:
                val = "unavailable"
            else:
                val = f"{round(freq / 1000)}MHz"
            self._print_line(f"CPU[{cpu}]".ljust(8), val)

    def print_plans(self, plans: dict[str, FrequencyPlan], aliases: dict[str, str]):
        """
        Print the CPU frequency plans.

        Args:
            plans: The plans dictionary, indexed by plan name.
            aliases: The plan name aliases dictionary, maps an alias to a plan name.
        """

        name2alias = {name: alias for alias, name in aliases.items()}

        if self.fmt == "yaml":
            data: dict[str, Any] = {}
            for name, plan in plans.items():
                data[name] = {"alias": name2alias.get(name), "governor": plan.governor,
                              "min_percent": plan.min_percent, "max_percent": plan.max_percent,
                              "turbo": _fmt_turbo_yaml(plan.turbo_disabled)}
            self._print_yaml({"plans": data})
            return

        for alias, name in sorted(aliases.items()):
            if name not in plans:
                self._print_line(f"PLAN[{alias}] ", f"{name}: performance on AC power, powersave "
                                                    f"on battery")
                continue

            plan = plans[name]
            turbo = "off" if plan.turbo_disabled else "on"
            self._print_line(f"PLAN[{alias}] ", f"{name}: governor {plan.governor}, min "
                                                f"{plan.min_percent}%, max {plan.max_percent}%, "
                                                f"turbo {turbo}")
