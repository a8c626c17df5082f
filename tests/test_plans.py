#!/usr/bin/env python3
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""Test the 'Plans' module."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
import pytest
import common
from psfreqlibs import Plans, CPUFreq, _SysfsIO
from psfreqlibs.helperlibs.Exceptions import ErrorUnknownPlan, ErrorNotSupported

def test_plans_table():
    """Check the built-in plans table."""

    assert list(Plans.PLANS) == ["powersave", "balanced", "performance", "max-performance"]

    for name, plan in Plans.PLANS.items():
        assert plan.name == name
        assert 0 <= plan.min_percent <= plan.max_percent <= 100

    assert Plans.PLANS["powersave"] == ("powersave", "powersave", 0, 0, True)
    assert Plans.PLANS["balanced"] == ("balanced", "powersave", 0, 50, True)
    assert Plans.PLANS["performance"] == ("performance", "powersave", 0, 100, True)
    assert Plans.PLANS["max-performance"] == ("max-performance", "performance", 100, 100, False)

    # Every alias refers to a plan.
    for name in Plans.ALIASES.values():
        assert name in Plans.PLANS or name == Plans.AUTO_PLAN

def test_resolve_plan():
    """Test resolving plans by name and by alias."""

    for name, plan in Plans.PLANS.items():
        assert Plans.resolve_plan(name) is plan

    assert Plans.resolve_plan("1").name == "powersave"
    assert Plans.resolve_plan("2").name == "balanced"
    assert Plans.resolve_plan("3").name == "performance"
    assert Plans.resolve_plan("4").name == "max-performance"

def test_resolve_plan_unknown():
    """Test that unknown plan names are refused, with a suggestion for typos."""

    with pytest.raises(ErrorUnknownPlan) as excinfo:
        Plans.resolve_plan("balnced")
    assert "Did you mean 'balanced'?" in str(excinfo.value)

    # Plan names are case-sensitive.
    with pytest.raises(ErrorUnknownPlan) as excinfo:
        Plans.resolve_plan("Powersave")
    assert "Did you mean 'powersave'?" in str(excinfo.value)

    for name in ("", "5", "turbo-ludicrous-mode"):
        with pytest.raises(ErrorUnknownPlan) as excinfo:
            Plans.resolve_plan(name)
        assert "use one of: powersave, balanced, performance, max-performance, auto" in \
               str(excinfo.value)

def test_resolve_plan_auto(sysfs_root: Path, dataset: str):
    """Test resolving the "auto" plan depending on the power supply."""

    power_supply = common.DATASETS[dataset]["power_supply"]
    on_battery = power_supply is not None and \
                 all(files.get("online") != "1" for files in power_supply.values())
    expected = "powersave" if on_battery else "performance"

    with _SysfsIO.SysfsIO(root=sysfs_root) as sysfs_io:
        assert Plans.resolve_plan("auto", sysfs_io=sysfs_io).name == expected
        assert Plans.resolve_plan("0", sysfs_io=sysfs_io).name == expected

def test_resolve_plan_auto_switch(tmp_path: Path):
    """Test that the "auto" plan follows the AC adapter online status."""

    root = common.build_sysfs(tmp_path, common.DATASETS["intel_pstate_4cpus"])

    with _SysfsIO.SysfsIO(root=root) as sysfs_io:
        assert Plans.resolve_plan("auto", sysfs_io=sysfs_io).name == "performance"

        common.write_file(root, common.POWER_SUPPLY_BASE / "AC" / "online", "0")
        assert Plans.resolve_plan("auto", sysfs_io=sysfs_io).name == "powersave"

        # A power supply without the type file is ignored.
        common.remove_file(root, common.POWER_SUPPLY_BASE / "BAT0" / "type")
        assert Plans.resolve_plan("auto", sysfs_io=sysfs_io).name == "powersave"

        # No AC adapters at all.
        common.remove_file(root, common.POWER_SUPPLY_BASE / "AC" / "type")
        assert Plans.resolve_plan("auto", sysfs_io=sysfs_io).name == "performance"

@pytest.mark.parametrize("name", ("powersave", "balanced", "performance", "max-performance"))
def test_apply_plan(sysfs_root: Path, dataset: str, name: str):
    """Test applying the plans."""

    data = common.DATASETS[dataset]
    plan = Plans.PLANS[name]
    hw_min, hw_max = data["hw_min"], data["hw_max"]

    with CPUFreq.CPUFreq(root=sysfs_root) as cpufreq:
        if data["turbo"] is None:
            # The governor and the frequencies get changed, then turbo fails.
            with pytest.raises(ErrorNotSupported):
                Plans.apply_plan(plan, cpufreq)
        else:
            Plans.apply_plan(plan, cpufreq)

        snapshot = cpufreq.read_snapshot()
        assert snapshot.governor == plan.governor
        assert snapshot.min_freq == CPUFreq.resolve_percent(plan.min_percent, hw_min, hw_max)
        assert snapshot.max_freq == CPUFreq.resolve_percent(plan.max_percent, hw_min, hw_max)

        if data["turbo"] is None:
            assert snapshot.turbo_disabled is None
        else:
            assert snapshot.turbo_disabled is plan.turbo_disabled

        for cpu in data["cpus"]:
            assert common.read_file(sysfs_root, common.cpufreq_path(cpu, "scaling_governor")) == \
                   plan.governor

def test_apply_plan_balanced_values(tmp_path: Path):
    """Check the exact values the "balanced" plan results in."""

    root = common.build_sysfs(tmp_path, common.DATASETS["intel_pstate_4cpus"])

    with CPUFreq.CPUFreq(root=root) as cpufreq:
        Plans.apply_plan(Plans.resolve_plan("balanced"), cpufreq)

    assert common.read_file(root, common.cpufreq_path(3, "scaling_min_freq")) == "800000"
    assert common.read_file(root, common.cpufreq_path(3, "scaling_max_freq")) == "2200000"
    assert common.read_file(root, common.CPU_BASE / "intel_pstate" / "no_turbo") == "1"
