# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Provide the built-in CPU frequency plans: named presets of the CPU frequency governor, the min. and
max. CPU frequency and the turbo on/off status.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from pathlib import Path
from typing import NamedTuple
from psfreqlibs import _SysfsIO
from psfreqlibs.CPUFreq import resolve_percent
from psfreqlibs.helperlibs import Logging, DamerauLevenshtein
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNotFound, ErrorUnknownPlan

if typing.TYPE_CHECKING:
    from psfreqlibs.CPUFreq import CPUFreq

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

class FrequencyPlan(NamedTuple):
    """
    A CPU frequency plan.

    Attributes:
        name: The plan name.
        governor: The CPU frequency governor name.
        min_percent: The min. CPU frequency, percent of the hardware frequency range.
        max_percent: The max. CPU frequency, percent of the hardware frequency range.
        turbo_disabled: Whether turbo should be disabled.
    """

    name: str
    governor: str
    min_percent: int
    max_percent: int
    turbo_disabled: bool

PLANS: dict[str, FrequencyPlan] = {
    "powersave": FrequencyPlan("powersave", "powersave", 0, 0, True),
    "balanced": FrequencyPlan("balanced", "powersave", 0, 50, True),
    "performance": FrequencyPlan("performance", "powersave", 0, 100, True),
    "max-performance": FrequencyPlan("max-performance", "performance", 100, 100, False),
}

# The special plan selecting "performance" on AC power and "powersave" on battery.
AUTO_PLAN = "auto"

ALIASES: dict[str, str] = {
    "0": AUTO_PLAN,
    "1": "powersave",
    "2": "balanced",
    "3": "performance",
    "4": "max-performance",
}

_POWER_SUPPLY_BASE = Path("/sys/class/power_supply")

def _is_on_ac_power(sysfs_io: _SysfsIO.SysfsIO) -> bool | None:
    """
    Check whether the system is on AC power.

    Args:
        sysfs_io: The sysfs access object.

    Returns:
        True if an AC adapter is online, False if all AC adapters are offline, 'None' if the system
        has no AC adapters.
    """

    if not sysfs_io.exists(_POWER_SUPPLY_BASE):
        return None

    found = False
    for name in sysfs_io.lsdir(_POWER_SUPPLY_BASE):
        try:
            supply_type = sysfs_io.read(_POWER_SUPPLY_BASE / name / "type",
                                        what=f"power supply '{name}' type")
        except ErrorNotFound:
            continue

        if supply_type != "Mains":
            continue

        found = True
        online = sysfs_io.read_int(_POWER_SUPPLY_BASE / name / "online",
                                   what=f"power supply '{name}' online status")
        _LOG.debug("AC adapter '%s' online status: %d", name, online)
        if online == 1:
            return True

    if not found:
        return None
    return False

def _resolve_auto(sysfs_io: _SysfsIO.SysfsIO) -> FrequencyPlan:
    """Select the plan for the "auto" plan name."""

    on_ac = _is_on_ac_power(sysfs_io)
    if on_ac is None:
        _LOG.debug("No AC adapters found, assuming AC power")
        on_ac = True

    if on_ac:
        return PLANS["performance"]
    return PLANS["powersave"]

def resolve_plan(name: str, sysfs_io: _SysfsIO.SysfsIO | None = None) -> FrequencyPlan:
    """
    Find a built-in plan by name or alias.

    Args:
        name: The plan name or alias (case-sensitive).
        sysfs_io: A '_SysfsIO.SysfsIO' object for resolving the "auto" plan. Will be created if not
                  provided.

    Returns:
        The 'FrequencyPlan' object.

    Raises:
        ErrorUnknownPlan: If there is no plan called 'name'.
    """

    plan_name = ALIASES.get(name, name)

    if plan_name == AUTO_PLAN:
        if sysfs_io:
            plan = _resolve_auto(sysfs_io)
        else:
            with _SysfsIO.SysfsIO() as _sysfs_io:
                plan = _resolve_auto(_sysfs_io)

        _LOG.debug("Plan '%s' resolved to '%s'", name, plan.name)
        return plan

    if plan_name in PLANS:
        return PLANS[plan_name]

    names = list(PLANS) + [AUTO_PLAN]
    msg = f"Unknown CPU frequency plan '{name}', use one of: {', '.join(names)}"
    suggestion = DamerauLevenshtein.closest_match(name, names)
    if suggestion:
        msg += f"\nDid you mean '{suggestion}'?"

    raise ErrorUnknownPlan(msg)

def apply_plan(plan: FrequencyPlan, model: CPUFreq):
    """
    Apply a plan: set the governor, then the min. and max. CPU frequency, then the turbo on/off
    status. Stop on the first failure, leaving the rest of the plan unapplied.

    Args:
        plan: The plan to apply.
        model: The 'CPUFreq' object to apply the plan with.

    Raises:
        ErrorNotSupported: If the system does not provide turbo control.
    """

    _LOG.debug("Applying plan '%s'", plan.name)

    hw_min, hw_max = model.get_hw_bounds()
    min_freq = resolve_percent(plan.min_percent, hw_min, hw_max)
    max_freq = resolve_percent(plan.max_percent, hw_min, hw_max)

    try:
        model.apply_governor(plan.governor)
        model.apply_min_max(min_freq, max_freq)
        model.apply_turbo(plan.turbo_disabled)
    except Error as err:
        _LOG.debug("Failed to apply plan '%s':\n%s", plan.name, err.indent(2))
        raise
