#!/usr/bin/env python3
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""Common functions for psfreq tests."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from pathlib import Path
from psfreqlibs import _SysfsIO
from psfreqlibs.helperlibs.Exceptions import ErrorRejected, ErrorPermissionDenied

if typing.TYPE_CHECKING:
    from typing import TypedDict, Iterable
    from psfreqlibs.helperlibs.Exceptions import Error

    class DatasetTypedDict(TypedDict, total=False):
        """
        A description of an emulated system's sysfs tree.

        Attributes:
            cpus: Logical CPU numbers.
            online: Contents of the 'online' file, 'None' if the file does not exist.
            driver: The CPU frequency driver name.
            governor: The CPU frequency governor name.
            available_governors: Contents of the 'scaling_available_governors' file, 'None' if
                                 the file does not exist.
            hw_min: The min. hardware CPU frequency (kHz).
            hw_max: The max. hardware CPU frequency (kHz).
            min: The min. CPU frequency (kHz).
            max: The max. CPU frequency (kHz).
            cur: The current CPU frequencies (kHz), one per CPU.
            turbo: The turbo file path relative to '/sys/devices/system/cpu' and its contents,
                   'None' if there is no turbo file.
            power_supply: Power supply names mapped to their file contents, 'None' if there is no
                          power supply directory.
        """

        cpus: list[int]
        online: str | None
        driver: str
        governor: str
        available_governors: str | None
        hw_min: int
        hw_max: int
        min: int
        max: int
        cur: list[int]
        turbo: tuple[str, str] | None
        power_supply: dict[str, dict[str, str]] | None

CPU_BASE = Path("/sys/devices/system/cpu")
POWER_SUPPLY_BASE = Path("/sys/class/power_supply")

DATASETS: dict[str, DatasetTypedDict] = {
    "intel_pstate_4cpus": {
        "cpus": [0, 1, 2, 3],
        "online": "0-3",
        "driver": "intel_pstate",
        "governor": "powersave",
        "available_governors": "performance powersave",
        "hw_min": 800000,
        "hw_max": 3600000,
        "min": 800000,
        "max": 3600000,
        "cur": [2400000, 1800000, 800000, 3600000],
        "turbo": ("intel_pstate/no_turbo", "0"),
        "power_supply": {
            "AC": {"type": "Mains", "online": "1"},
            "BAT0": {"type": "Battery", "status": "Full"},
        },
    },
    "acpi_cpufreq_2cpus": {
        "cpus": [0, 1],
        "online": None,
        "driver": "acpi-cpufreq",
        "governor": "ondemand",
        "available_governors": "conservative ondemand userspace powersave performance schedutil",
        "hw_min": 1200000,
        "hw_max": 3000000,
        "min": 1200000,
        "max": 3000000,
        "cur": [1200000, 2999000],
        "turbo": ("cpufreq/boost", "1"),
        "power_supply": None,
    },
    "intel_cpufreq_3cpus": {
        "cpus": [0, 1, 2],
        "online": "0-2",
        "driver": "intel_cpufreq",
        "governor": "schedutil",
        "available_governors": None,
        "hw_min": 400000,
        "hw_max": 4000000,
        "min": 1000000,
        "max": 3000000,
        "cur": [400000, 2200000, 3999000],
        "turbo": None,
        "power_supply": {
            "ADP1": {"type": "Mains", "online": "0"},
        },
    },
}

def cpufreq_path(cpu: int, fname: str) -> Path:
    """Return the sysfs path of "cpufreq" file 'fname' of CPU 'cpu'."""
    return CPU_BASE / f"cpu{cpu}" / "cpufreq" / fname

def _write_file(root: Path, path: Path, val: str | int):
    """Create file 'path' in the sysfs tree at 'root'."""

    realpath = root / path.relative_to("/")
    realpath.parent.mkdir(parents=True, exist_ok=True)
    realpath.write_text(f"{val}\n", encoding="utf-8")

def read_file(root: Path, path: Path) -> str:
    """Return the stripped contents of file 'path' in the sysfs tree at 'root'."""
    return (root / path.relative_to("/")).read_text(encoding="utf-8").strip()

def write_file(root: Path, path: Path, val: str | int):
    """Change contents of file 'path' in the sysfs tree at 'root'."""
    _write_file(root, path, val)

def remove_file(root: Path, path: Path):
    """Remove file 'path' from the sysfs tree at 'root'."""
    (root / path.relative_to("/")).unlink()

def build_sysfs(root: Path, dataset: DatasetTypedDict) -> Path:
    """
    Build a sysfs tree for an emulated system.

    Args:
        root: The directory to build the tree in.
        dataset: The emulated system description.

    Returns:
        The root directory of the tree.
    """

    root.mkdir(parents=True, exist_ok=True)

    if dataset["online"] is not None:
        _write_file(root, CPU_BASE / "online", dataset["online"])

    # Some non-CPU entries exist in the real CPU directory too.
    (root / CPU_BASE.relative_to("/") / "cpuidle").mkdir(parents=True, exist_ok=True)

    for idx, cpu in enumerate(dataset["cpus"]):
        _write_file(root, cpufreq_path(cpu, "scaling_driver"), dataset["driver"])
        _write_file(root, cpufreq_path(cpu, "scaling_governor"), dataset["governor"])
        _write_file(root, cpufreq_path(cpu, "scaling_min_freq"), dataset["min"])
        _write_file(root, cpufreq_path(cpu, "scaling_max_freq"), dataset["max"])
        _write_file(root, cpufreq_path(cpu, "cpuinfo_min_freq"), dataset["hw_min"])
        _write_file(root, cpufreq_path(cpu, "cpuinfo_max_freq"), dataset["hw_max"])
        _write_file(root, cpufreq_path(cpu, "scaling_cur_freq"), dataset["cur"][idx])
        if dataset["available_governors"] is not None:
            _write_file(root, cpufreq_path(cpu, "scaling_available_governors"),
                        dataset["available_governors"])

    if dataset["turbo"] is not None:
        relpath, val = dataset["turbo"]
        _write_file(root, CPU_BASE / relpath, val)

    if dataset["power_supply"] is not None:
        for name, files in dataset["power_supply"].items():
            for fname, val in files.items():
                _write_file(root, POWER_SUPPLY_BASE / name / fname, val)

    return root

class RecordingSysfsIO(_SysfsIO.SysfsIO):
    """
    A sysfs access object recording the writes and failing on chosen paths.

    Attributes:
        attempts: All write attempts, a list of '(path, value)' tuples.
        writes: The successful writes, a list of '(path, value)' tuples.
    """

    def __init__(self,
                 root: Path,
                 fail_read: Iterable[Path] = (),
                 fail_write: Iterable[Path] = (),
                 write_exc: type[Error] = ErrorRejected):
        """
        Initialize a class instance.

        Args:
            root: The sysfs tree root directory.
            fail_read: Paths that reading fails for with 'ErrorPermissionDenied'.
            fail_write: Paths that writing fails for.
            write_exc: The exception type to raise for 'fail_write' paths.
        """

        super().__init__(root=root)

        self.attempts: list[tuple[Path, str]] = []
        self.writes: list[tuple[Path, str]] = []

        self._fail_read = {Path(path) for path in fail_read}
        self._fail_write = {Path(path) for path in fail_write}
        self._write_exc = write_exc

    def read(self, path: Path, what: str = "") -> str:
        """Read a sysfs file, fail for 'fail_read' paths."""

        if Path(path) in self._fail_read:
            raise ErrorPermissionDenied(f"Failed to read from '{path}': emulated failure",
                                        path=path)
        return super().read(path, what=what)

    def write(self, path: Path, val: str, what: str = ""):
        """Write a sysfs file and record the write, fail for 'fail_write' paths."""

        self.attempts.append((Path(path), val))

        if Path(path) in self._fail_write:
            raise self._write_exc(f"Failed to write value '{val}' to '{path}': emulated failure",
                                  path=path)

        super().write(path, val, what=what)
        self.writes.append((Path(path), val))
