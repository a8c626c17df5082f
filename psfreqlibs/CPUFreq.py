# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Provide a capability for reading and modifying CPU frequency settings via the Linux kernel CPU
frequency subsystem ("cpufreq") sysfs interface.

All frequencies are in kHz, which is the unit the "cpufreq" sysfs files use.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import re
import typing
from fractions import Fraction
from pathlib import Path
from typing import NamedTuple
from psfreqlibs import _SysfsIO
from psfreqlibs.helperlibs import Logging, ClassHelpers, Trivial
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNotFound, ErrorNotSupported
from psfreqlibs.helperlibs.Exceptions import ErrorBadFormat, ErrorNoCPUs, ErrorPartialFailure
from psfreqlibs.helperlibs.Exceptions import ErrorInvalidBounds, ErrorOutOfRange
from psfreqlibs.helperlibs.Exceptions import ErrorInvalidRange, ErrorUnsupportedGovernor

if typing.TYPE_CHECKING:
    from typing import Callable, Generator, Iterator

    # A generator of '(path, value, what)' tuples describing sysfs writes for a CPU.
    _WritesType = Iterator[tuple[Path, str, str]]

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

_SYSFS_BASE = Path("/sys/devices/system/cpu")

# The global turbo knobs. The 'intel_pstate' driver provides the "no turbo" file, where "1" means
# that turbo is disabled. Other drivers (e.g., 'acpi-cpufreq') provide the "boost" file, where "1"
# means that turbo is enabled.
_NO_TURBO_PATH = _SYSFS_BASE / "intel_pstate" / "no_turbo"
_BOOST_PATH = _SYSFS_BASE / "cpufreq" / "boost"

class CPUSnapshot(NamedTuple):
    """
    The CPU frequency configuration as read at a point in time.

    Attributes:
        cpu_count: Number of logical CPUs.
        cpus: Logical CPU numbers, sorted in ascending order.
        driver: The CPU frequency driver name.
        governor: The CPU frequency governor name.
        turbo_disabled: True if turbo is disabled, False if enabled, 'None' if the system does not
                        provide turbo control.
        min_freq: The minimum CPU frequency (kHz).
        max_freq: The maximum CPU frequency (kHz).
        hw_min_freq: The minimum CPU frequency supported by the hardware (kHz).
        hw_max_freq: The maximum CPU frequency supported by the hardware (kHz).
        available_governors: Names of the governors the kernel supports, 'None' if the kernel does
                             not provide the list.
    """

    cpu_count: int
    cpus: list[int]
    driver: str
    governor: str
    turbo_disabled: bool | None
    min_freq: int
    max_freq: int
    hw_min_freq: int
    hw_max_freq: int
    available_governors: list[str] | None

def _div_round(numerator: int | Fraction, denominator: int) -> int:
    """Divide 'numerator' by a positive 'denominator' and round the result half-up."""
    return int((2 * numerator + denominator) // (2 * denominator))

def compute_percent(cur: int, hw_min: int, hw_max: int) -> int:
    """
    Express a CPU frequency as a percentage of the hardware frequency range.

    Args:
        cur: The CPU frequency (kHz).
        hw_min: The minimum hardware CPU frequency (kHz).
        hw_max: The maximum hardware CPU frequency (kHz).

    Returns:
        The percentage, an integer within [0, 100]. Halves are rounded up.

    Raises:
        ErrorInvalidRange: If 'hw_max' is not greater than 'hw_min'.
    """

    if hw_max <= hw_min:
        raise ErrorInvalidRange(f"Bad hardware CPU frequency range [{hw_min}, {hw_max}] kHz: the "
                                f"maximum must be greater than the minimum")

    percent = _div_round(100 * (cur - hw_min), hw_max - hw_min)
    return min(max(percent, 0), 100)

def resolve_percent(percent: int | float, hw_min: int, hw_max: int) -> int:
    """
    Convert a percentage of the hardware frequency range to a CPU frequency. This is the inverse of
    'compute_percent()'.

    Args:
        percent: The percentage, within [0, 100].
        hw_min: The minimum hardware CPU frequency (kHz).
        hw_max: The maximum hardware CPU frequency (kHz).

    Returns:
        The CPU frequency (kHz). Halves are rounded up.

    Raises:
        ErrorOutOfRange: If 'percent' is outside of [0, 100].
        ErrorInvalidRange: If 'hw_max' is less than 'hw_min'.
    """

    if not Trivial.is_num(percent) or isinstance(percent, str):
        raise ErrorBadFormat(f"Bad percentage '{percent}': should be a number")
    if not 0 <= percent <= 100:
        raise ErrorOutOfRange(f"Bad percentage '{percent}': should be within [0, 100]")
    if hw_max < hw_min:
        raise ErrorInvalidRange(f"Bad hardware CPU frequency range [{hw_min}, {hw_max}] kHz: the "
                                f"maximum must not be less than the minimum")

    return hw_min + _div_round(Fraction(percent) * (hw_max - hw_min), 100)

def _turbo_from_raw(raw: str, inverted: bool) -> bool:
    """
    Convert the contents of a turbo sysfs file to the "turbo disabled" flag.

    Args:
        raw: The sysfs file contents.
        inverted: True for the "no turbo" file, False for the "boost" file.

    Returns:
        True if turbo is disabled, False if it is enabled.

    Raises:
        ErrorBadFormat: If 'raw' is neither "0" nor "1".
    """

    if raw not in ("0", "1"):
        raise ErrorBadFormat(f"Bad turbo on/off status value '{raw}': should be '0' or '1'")

    if inverted:
        return raw == "1"
    return raw == "0"

def _turbo_to_raw(disabled: bool, inverted: bool) -> str:
    """Inverse of '_turbo_from_raw()'."""

    if inverted:
        return "1" if disabled else "0"
    return "0" if disabled else "1"

class CPUFreq(ClassHelpers.SimpleCloseContext):
    """
    Provide a capability to read and modify CPU frequency settings via the Linux "cpufreq" sysfs
    interface.

    Public methods overview.

    1. Discovery.
        * 'discover_cpus()' - logical CPU numbers.
        * 'discover_core_count()' - number of logical CPUs.
        * 'get_hw_bounds()' - hardware CPU frequency limits.
        * 'read_available_governors()' - names of available governors.
    2. Reading.
        * 'read_snapshot()' - current configuration.
        * 'read_real_frequencies()' - current per-CPU frequencies.
        * 'get_divergent_cpus()' - CPUs configured differently than the first CPU.
    3. Writing.
        * 'apply_governor()' - set the governor.
        * 'apply_min_max()' - set the min. and max. frequencies.
        * 'apply_turbo()' - enable or disable turbo.
    4. Conversion.
        * 'compute_percent()' - frequency to percentage.
        * 'resolve_percent()' - percentage to frequency.

    The configuration of the first CPU is considered to be the configuration of the system, the
    design assumption is that all CPUs share the same governor and frequency limits. Use
    'get_divergent_cpus()' to check this assumption.

    Multi-CPU writes are done one CPU at a time, in ascending CPU number order, and they are not
    atomic. If a write fails after some CPUs were already modified, 'ErrorPartialFailure' is raised.
    Its 'completed' attribute lists the modified CPUs, and the 'cpu' and 'path' attributes describe
    the failure.
    """

    compute_percent = staticmethod(compute_percent)
    resolve_percent = staticmethod(resolve_percent)

    def __init__(self, sysfs_io: _SysfsIO.SysfsIO | None = None, root: str | Path = "/"):
        """
        Initialize a class instance.

        Args:
            sysfs_io: A '_SysfsIO.SysfsIO' object for sysfs access. Will be created if not provided.
            root: The directory to resolve the sysfs paths relative to, used only when 'sysfs_io'
                  is not provided.
        """

        self._sysfs_io: _SysfsIO.SysfsIO
        self._close_sysfs_io = sysfs_io is None

        if not sysfs_io:
            self._sysfs_io = _SysfsIO.SysfsIO(root=root)
        else:
            self._sysfs_io = sysfs_io

        # The CPUs and the hardware limits do not change during the lifetime of the object.
        self._cpus: list[int] | None = None
        self._hw_bounds: tuple[int, int] | None = None
        # The turbo sysfs file path and whether its value is inverted. 'None' if not detected yet.
        self._turbo_info: tuple[Path | None, bool] | None = None

    def close(self):
        """Uninitialize the class instance."""
        ClassHelpers.close(self, close_attrs=("_sysfs_io",))

    @staticmethod
    def _get_sysfs_path(cpu: int, fname: str) -> Path:
        """Return path to the "cpufreq" sysfs file 'fname' of CPU 'cpu'."""
        return _SYSFS_BASE / f"cpu{cpu}" / "cpufreq" / fname

    def discover_cpus(self) -> list[int]:
        """
        Discover the logical CPUs.

        Returns:
            The logical CPU numbers, sorted in ascending order.

        Raises:
            ErrorNoCPUs: If no CPUs were found.
        """

        if self._cpus is not None:
            return list(self._cpus)

        what = "online CPUs list"
        path = _SYSFS_BASE / "online"
        cpus: list[int] = []

        if self._sysfs_io.exists(path):
            cpus = Trivial.split_csv_line_int(self._sysfs_io.read(path, what=what), dedup=True,
                                              what=what)
        else:
            _LOG.debug("File '%s' does not exist, looking for CPU directories in '%s'",
                       path, _SYSFS_BASE)
            try:
                names = self._sysfs_io.lsdir(_SYSFS_BASE)
            except ErrorNotFound as err:
                raise ErrorNoCPUs(f"No CPUs found:\n{err.indent(2)}") from err

            for name in names:
                mobj = re.fullmatch(r"cpu([0-9]+)", name)
                if mobj:
                    cpus.append(int(mobj.group(1)))

        if not cpus:
            raise ErrorNoCPUs(f"No CPUs found in '{_SYSFS_BASE}'")

        self._cpus = sorted(cpus)
        _LOG.debug("Discovered CPUs: %s", Trivial.rangify(self._cpus))
        return list(self._cpus)

    def discover_core_count(self) -> int:
        """Return the number of logical CPUs."""
        return len(self.discover_cpus())

    def get_hw_bounds(self) -> tuple[int, int]:
        """
        Return the minimum and maximum CPU frequencies supported by the hardware.

        Returns:
            A '(hw_min, hw_max)' tuple (kHz).

        Raises:
            ErrorBadFormat: If the minimum is greater than the maximum.
        """

        if self._hw_bounds:
            return self._hw_bounds

        cpu = self.discover_cpus()[0]
        path = self._get_sysfs_path(cpu, "cpuinfo_min_freq")
        hw_min = self._sysfs_io.read_int(path, what=f"min. hardware frequency of CPU {cpu}")
        path = self._get_sysfs_path(cpu, "cpuinfo_max_freq")
        hw_max = self._sysfs_io.read_int(path, what=f"max. hardware frequency of CPU {cpu}")

        if hw_min > hw_max:
            raise ErrorBadFormat(f"Bad hardware CPU frequency limits of CPU {cpu}: min. frequency "
                                 f"{hw_min} kHz is greater than max. frequency {hw_max} kHz",
                                 path=path)

        self._hw_bounds = (hw_min, hw_max)
        return self._hw_bounds

    def read_available_governors(self) -> list[str] | None:
        """
        Read the names of the CPU frequency governors the kernel supports.

        Returns:
            The list of governor names, or 'None' if the kernel does not provide it.
        """

        cpu = self.discover_cpus()[0]
        path = self._get_sysfs_path(cpu, "scaling_available_governors")
        if not self._sysfs_io.exists(path):
            return None

        names = self._sysfs_io.read(path, what=f"available CPU frequency governors of CPU {cpu}")
        return Trivial.split_csv_line(names, sep=" ")

    def _get_turbo_info(self) -> tuple[Path | None, bool]:
        """
        Return the turbo sysfs file path and whether its value is inverted. The path is 'None' if
        the system does not provide turbo control.
        """

        if self._turbo_info:
            return self._turbo_info

        if self._sysfs_io.exists(_NO_TURBO_PATH):
            self._turbo_info = (_NO_TURBO_PATH, True)
        elif self._sysfs_io.exists(_BOOST_PATH):
            self._turbo_info = (_BOOST_PATH, False)
        else:
            _LOG.debug("Neither '%s' nor '%s' exist, turbo control is not supported",
                       _NO_TURBO_PATH, _BOOST_PATH)
            self._turbo_info = (None, False)

        return self._turbo_info

    def _read_turbo_disabled(self) -> bool | None:
        """Return True if turbo is disabled, False if enabled, 'None' if not supported."""

        path, inverted = self._get_turbo_info()
        if not path:
            return None

        raw = self._sysfs_io.read(path, what="turbo on/off status")
        try:
            return _turbo_from_raw(raw, inverted)
        except ErrorBadFormat as err:
            raise ErrorBadFormat(f"Bad contents of sysfs file '{path}':\n{err.indent(2)}",
                                 path=path) from err

    def read_snapshot(self) -> CPUSnapshot:
        """
        Read the current CPU frequency configuration.

        Returns:
            A 'CPUSnapshot' object.

        Raises:
            ErrorNoCPUs: If no CPUs were found.
            ErrorNotFound: If a "cpufreq" sysfs file does not exist.
            ErrorBadFormat: If a sysfs file has unexpected contents.
        """

        cpus = self.discover_cpus()
        cpu = cpus[0]

        path = self._get_sysfs_path(cpu, "scaling_driver")
        driver = self._sysfs_io.read(path, what=f"CPU frequency driver name of CPU {cpu}")
        path = self._get_sysfs_path(cpu, "scaling_governor")
        governor = self._sysfs_io.read(path, what=f"CPU frequency governor of CPU {cpu}")
        path = self._get_sysfs_path(cpu, "scaling_min_freq")
        min_freq = self._sysfs_io.read_int(path, what=f"min. frequency of CPU {cpu}")
        path = self._get_sysfs_path(cpu, "scaling_max_freq")
        max_freq = self._sysfs_io.read_int(path, what=f"max. frequency of CPU {cpu}")

        hw_min, hw_max = self.get_hw_bounds()

        snapshot = CPUSnapshot(cpu_count=len(cpus), cpus=cpus, driver=driver, governor=governor,
                               turbo_disabled=self._read_turbo_disabled(), min_freq=min_freq,
                               max_freq=max_freq, hw_min_freq=hw_min, hw_max_freq=hw_max,
                               available_governors=self.read_available_governors())

        if not 0 < min_freq <= max_freq <= hw_max:
            _LOG.warning("Unexpected CPU %d frequency limits: min. %d kHz, max. %d kHz, hardware "
                         "max. %d kHz", cpu, min_freq, max_freq, hw_max)

        return snapshot

    def read_real_frequencies(self) -> list[int | None]:
        """
        Read the current frequency of every CPU.

        Returns:
            A list of frequencies (kHz) indexed the same way as the 'discover_cpus()' list. The
            frequency is 'None' for CPUs it could not be read for.
        """

        freqs: list[int | None] = []

        for cpu in self.discover_cpus():
            path = self._get_sysfs_path(cpu, "scaling_cur_freq")
            try:
                freqs.append(self._sysfs_io.read_int(path, what=f"current frequency of CPU {cpu}"))
            except Error as err:
                _LOG.debug("Frequency of CPU %d is unavailable:\n%s", cpu, err.indent(2))
                freqs.append(None)

        return freqs

    def get_divergent_cpus(self) -> dict[str, list[int]]:
        """
        Find CPUs configured differently than the first CPU.

        Returns:
            A dictionary with the "governor", "min_freq" and "max_freq" keys, each mapping to the
            list of CPUs where the value differs from the value of the first CPU. CPUs with
            unreadable values are skipped.
        """

        divergent: dict[str, list[int]] = {}
        cpus = self.discover_cpus()

        for name, fname in (("governor", "scaling_governor"), ("min_freq", "scaling_min_freq"),
                            ("max_freq", "scaling_max_freq")):
            divergent[name] = []
            first_val: str | None = None

            for cpu in cpus:
                try:
                    val = self._sysfs_io.read(self._get_sysfs_path(cpu, fname),
                                              what=f"{fname} of CPU {cpu}")
                except Error as err:
                    _LOG.debug("Skipping CPU %d in the %s comparison:\n%s",
                               cpu, name, err.indent(2))
                    continue

                if first_val is None:
                    first_val = val
                elif val != first_val:
                    divergent[name].append(cpu)

        return divergent

    def _apply_per_cpu(self, get_writes: Callable[[int], _WritesType], what: str):
        """
        Run sysfs writes for every CPU, one CPU at a time.

        Args:
            get_writes: A callable returning an iterator of '(path, value, what)' tuples describing
                        the writes for a CPU.
            what: Description of the setting being changed, for the error message.

        Raises:
            ErrorPartialFailure: If a write failed after some writes succeeded.
        """

        completed: list[int] = []
        changed = False

        for cpu in self.discover_cpus():
            try:
                for path, val, write_what in get_writes(cpu):
                    self._sysfs_io.write(path, val, what=write_what)
                    changed = True
            except Error as err:
                if not changed:
                    raise

                if completed:
                    done = f"CPUs {Trivial.rangify(completed)} were already changed"
                else:
                    done = "no CPUs were fully changed"

                raise ErrorPartialFailure(f"Failed to set {what} for CPU {cpu}, {done}:\n"
                                          f"{err.indent(2)}", completed=completed, cpu=cpu,
                                          path=getattr(err, "path", None)) from err

            completed.append(cpu)

    def apply_governor(self, name: str):
        """
        Set the CPU frequency governor for all CPUs.

        Args:
            name: Name of the governor to set.

        Raises:
            ErrorUnsupportedGovernor: If the kernel does not support governor 'name'.
            ErrorPartialFailure: If the governor was set only for some CPUs.
        """

        governors = self.read_available_governors()
        if governors is not None and name not in governors:
            governors_str = ", ".join(governors)
            raise ErrorUnsupportedGovernor(f"Bad governor name '{name}', use one of: "
                                           f"{governors_str}")

        def _get_writes(cpu: int) -> Generator[tuple[Path, str, str], None, None]:
            """Yield the governor write for CPU 'cpu'."""
            yield self._get_sysfs_path(cpu, "scaling_governor"), name, \
                  f"CPU frequency governor of CPU {cpu}"

        _LOG.debug("Setting CPU frequency governor to '%s'", name)
        self._apply_per_cpu(_get_writes, "CPU frequency governor")

    def apply_min_max(self, min_freq: int, max_freq: int):
        """
        Set the minimum and maximum CPU frequency for all CPUs.

        For every CPU, the maximum frequency is written first if it does not decrease, otherwise the
        minimum frequency is written first. This way the minimum never exceeds the maximum in
        between the two writes.

        Args:
            min_freq: The minimum CPU frequency (kHz).
            max_freq: The maximum CPU frequency (kHz).

        Raises:
            ErrorInvalidBounds: If the frequencies are out of order or outside of the hardware
                                limits. Nothing is written in this case.
            ErrorPartialFailure: If the frequencies were set only for some CPUs.
        """

        hw_min, hw_max = self.get_hw_bounds()

        for freq in (min_freq, max_freq):
            if not Trivial.is_int(freq) or isinstance(freq, (str, float)):
                raise ErrorInvalidBounds(f"Bad CPU frequency value '{freq}': should be an integer "
                                         f"amount of kHz")

        if not hw_min <= min_freq <= max_freq <= hw_max:
            raise ErrorInvalidBounds(f"Bad min. and max. CPU frequency values {min_freq} kHz and "
                                     f"{max_freq} kHz: should be within the hardware limits of "
                                     f"[{hw_min}, {hw_max}] kHz, and min. should not be greater "
                                     f"than max.")

        def _get_writes(cpu: int) -> Generator[tuple[Path, str, str], None, None]:
            """Yield the min. and max. frequency writes for CPU 'cpu' in the safe order."""

            max_path = self._get_sysfs_path(cpu, "scaling_max_freq")
            cur_max = self._sysfs_io.read_int(max_path, what=f"max. frequency of CPU {cpu}")

            min_write = (self._get_sysfs_path(cpu, "scaling_min_freq"), str(min_freq),
                         f"min. frequency of CPU {cpu}")
            max_write = (max_path, str(max_freq), f"max. frequency of CPU {cpu}")

            if max_freq >= cur_max:
                yield max_write
                yield min_write
            else:
                yield min_write
                yield max_write

        _LOG.debug("Setting CPU frequency limits to [%d, %d] kHz", min_freq, max_freq)
        self._apply_per_cpu(_get_writes, "min. and max. CPU frequency")

    def apply_turbo(self, disabled: bool):
        """
        Enable or disable turbo. Turbo is a global setting, so there is only one sysfs write.

        Args:
            disabled: Disable turbo if True, enable if False.

        Raises:
            ErrorNotSupported: If the system does not provide turbo control.
        """

        path, inverted = self._get_turbo_info()
        if not path:
            raise ErrorNotSupported(f"Turbo on/off control is not supported: neither "
                                    f"'{_NO_TURBO_PATH}' nor '{_BOOST_PATH}' exist")

        _LOG.debug("%s turbo", "Disabling" if disabled else "Enabling")
        self._sysfs_io.write(path, _turbo_to_raw(disabled, inverted), what="turbo on/off status")
