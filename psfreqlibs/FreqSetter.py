# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Provide the capability of changing CPU frequency settings given a plan name and/or individual
settings, and reporting the outcome as a tagged result.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from typing import NamedTuple
from psfreqlibs import Plans
from psfreqlibs.CPUFreq import resolve_percent
from psfreqlibs.helperlibs import Logging, Trivial, Human, ClassHelpers
from psfreqlibs.helperlibs.Exceptions import Error, ErrorNotSupported, ErrorPermissionDenied
from psfreqlibs.helperlibs.Exceptions import ErrorValidation, ErrorPartialFailure
from psfreqlibs.helperlibs.Exceptions import ErrorInvalidBounds, ErrorUnsupportedGovernor

if typing.TYPE_CHECKING:
    from typing import Any, Callable, TypedDict, Literal
    from psfreqlibs import _SysfsIO
    from psfreqlibs.CPUFreq import CPUFreq, CPUSnapshot

    class SettingsTypedDict(TypedDict, total=False):
        """
        The settings to apply.

        Attributes:
            plan: Name or alias of the plan to use as the base settings.
            governor: The CPU frequency governor name.
            min_freq: The min. CPU frequency: a percentage of the hardware frequency range (a number
                      without a unit, optionally followed by "%"), a frequency with a unit (e.g.,
                      "1.2GHz"), or "min" or "max" for the hardware limits.
            max_freq: The max. CPU frequency, same format as 'min_freq'.
            turbo: "on" or "off", or a boolean (True for "on").
        """

        plan: str
        governor: str
        min_freq: str | int | float
        max_freq: str | int | float
        turbo: str | bool

    StatusType = Literal["success", "partial", "invalid"]

    # A setting application step: the setting name, the function applying it and its arguments.
    _StepType = tuple[str, Callable[..., None], tuple[Any, ...]]

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

class SetResult(NamedTuple):
    """
    The outcome of applying settings.

    Attributes:
        status: "success" if all settings were applied, "partial" if a write failed after something
                had already been changed, "invalid" if the settings were rejected before anything
                was written.
        completed: CPUs that were modified before the failure (for "partial").
        error: The exception describing the failure, 'None' on success.
        applied: Names of the settings that were fully applied (e.g., "governor").
    """

    status: StatusType
    completed: list[int]
    error: Error | None
    applied: list[str]

def _parse_turbo(val: str | bool) -> bool:
    """Convert a turbo on/off value to the "turbo disabled" flag."""

    if isinstance(val, bool):
        return not val
    if val == "on":
        return False
    if val == "off":
        return True
    raise ErrorValidation(f"Bad turbo on/off value '{val}': use 'on' or 'off'")

class FreqSetter(ClassHelpers.SimpleCloseContext):
    """
    Change CPU frequency settings and report the outcome as a 'SetResult' object.

    All settings are validated before the first write. Settings are applied in the following
    order: the governor, the min. and max. CPU frequency, the turbo on/off status.
    """

    def __init__(self, cpufreq: CPUFreq, sysfs_io: _SysfsIO.SysfsIO | None = None):
        """
        Initialize a class instance.

        Args:
            cpufreq: The 'CPUFreq' object to change the settings with.
            sysfs_io: A '_SysfsIO.SysfsIO' object for resolving the "auto" plan. Will be created
                      on demand if not provided.
        """

        self._cpufreq = cpufreq
        self._sysfs_io = sysfs_io

    def close(self):
        """Uninitialize the class instance."""
        ClassHelpers.close(self, unref_attrs=("_cpufreq", "_sysfs_io"))

    @staticmethod
    def _parse_freq(val: str | int | float, snapshot: CPUSnapshot, what: str) -> int:
        """
        Convert a user-provided min. or max. CPU frequency value to kHz.

        Args:
            val: The value to convert, see 'SettingsTypedDict.min_freq' for the format.
            snapshot: The current configuration, provides the hardware limits.
            what: Description of the value for the error message.

        Returns:
            The CPU frequency (kHz).
        """

        hw_min, hw_max = snapshot.hw_min_freq, snapshot.hw_max_freq
        sval = str(val).strip()

        if sval == "min":
            return hw_min
        if sval == "max":
            return hw_max

        if sval.endswith("%") and Trivial.is_num(sval[:-1].strip()):
            sval = sval[:-1].strip()

        if Trivial.is_num(sval):
            percent: int | float
            if Trivial.is_int(sval, base=10):
                percent = int(sval)
            else:
                percent = float(sval)
            return resolve_percent(percent, hw_min, hw_max)

        try:
            return int(Human.parse_human(sval, unit="Hz", target_unit="kHz", what=what))
        except Error as err:
            raise ErrorInvalidBounds(f"Bad {what} value '{val}': use a percentage, a frequency "
                                     f"with a unit (e.g., '1.2GHz'), 'min' or 'max':\n"
                                     f"{err.indent(2)}") from err

    def _validate(self, settings: SettingsTypedDict) -> list[_StepType]:
        """
        Validate 'settings' and turn them into the list of steps to apply.

        Args:
            settings: The settings to validate.

        Returns:
            List of '(name, apply function, arguments)' tuples, in the order they should be applied.
        """

        snapshot = self._cpufreq.read_snapshot()

        governor: str | None = None
        min_freq: int | None = None
        max_freq: int | None = None
        turbo_disabled: bool | None = None

        if settings.get("plan") is not None:
            plan = Plans.resolve_plan(settings["plan"], sysfs_io=self._sysfs_io)
            _LOG.debug("Using plan '%s' as the base settings", plan.name)

            governor = plan.governor
            min_freq = resolve_percent(plan.min_percent, snapshot.hw_min_freq,
                                       snapshot.hw_max_freq)
            max_freq = resolve_percent(plan.max_percent, snapshot.hw_min_freq,
                                       snapshot.hw_max_freq)
            turbo_disabled = plan.turbo_disabled

        if settings.get("governor") is not None:
            governor = settings["governor"]
        if settings.get("min_freq") is not None:
            min_freq = self._parse_freq(settings["min_freq"], snapshot, "min. CPU frequency")
        if settings.get("max_freq") is not None:
            max_freq = self._parse_freq(settings["max_freq"], snapshot, "max. CPU frequency")
        if settings.get("turbo") is not None:
            turbo_disabled = _parse_turbo(settings["turbo"])

        if governor is not None and snapshot.available_governors is not None and \
           governor not in snapshot.available_governors:
            governors_str = ", ".join(snapshot.available_governors)
            raise ErrorUnsupportedGovernor(f"Bad governor name '{governor}', use one of: "
                                           f"{governors_str}")

        set_min_max = min_freq is not None or max_freq is not None
        if min_freq is None:
            min_freq = snapshot.min_freq
        if max_freq is None:
            max_freq = snapshot.max_freq

        if set_min_max and \
           not snapshot.hw_min_freq <= min_freq <= max_freq <= snapshot.hw_max_freq:
            raise ErrorInvalidBounds(f"Bad min. and max. CPU frequency values {min_freq} kHz and "
                                     f"{max_freq} kHz: should be within the hardware limits of "
                                     f"[{snapshot.hw_min_freq}, {snapshot.hw_max_freq}] kHz, and "
                                     f"min. should not be greater than max.")

        if turbo_disabled is not None and snapshot.turbo_disabled is None:
            raise ErrorNotSupported("Turbo on/off control is not supported on this system")

        steps: list[_StepType] = []
        if governor is not None:
            steps.append(("governor", self._cpufreq.apply_governor, (governor,)))
        if set_min_max:
            steps.append(("min. and max. CPU frequency", self._cpufreq.apply_min_max,
                          (min_freq, max_freq)))
        if turbo_disabled is not None:
            steps.append(("turbo", self._cpufreq.apply_turbo, (turbo_disabled,)))

        return steps

    def _run_steps(self, steps: list[_StepType]) -> SetResult:
        """
        Apply the validated settings one step at a time.

        Args:
            steps: The steps returned by '_validate()'.

        Returns:
            The 'SetResult' object with status "success" or "partial".

        Raises:
            Error: If the very first write failed, so that nothing has been changed.
        """

        applied: list[str] = []

        for name, apply_func, apply_args in steps:
            try:
                apply_func(*apply_args)
            except Error as err:
                if not applied:
                    if isinstance(err, ErrorPartialFailure):
                        _LOG.debug("Failed to apply the %s:\n%s", name, err.indent(2))
                        return SetResult("partial", err.completed, err, applied)
                    raise

                # The earlier steps changed every CPU.
                applied_str = ", ".join(applied)
                error = ErrorPartialFailure(f"Failed to apply the {name} after the {applied_str} "
                                            f"had been applied:\n{err.indent(2)}",
                                            completed=self._cpufreq.discover_cpus(),
                                            cpu=getattr(err, "cpu", None),
                                            path=getattr(err, "path", None))
                _LOG.debug("%s", error)
                return SetResult("partial", error.completed, error, applied)

            applied.append(name)

        return SetResult("success", [], None, applied)

    def apply(self, settings: SettingsTypedDict, privileged: bool) -> SetResult:
        """
        Validate and apply CPU frequency settings.

        Args:
            settings: The settings to apply. Settings not included in the plan or specified
                      explicitly are not changed. Explicitly specified settings override the plan.
            privileged: Whether the caller has the privileges to change the settings.

        Returns:
            The 'SetResult' object.

        Raises:
            Error: Failures other than input validation failures and partial failures, e.g.,
                   'ErrorRejected' if the kernel refused the first write.
        """

        if not privileged:
            error = ErrorPermissionDenied("Changing CPU frequency settings requires superuser "
                                          "privileges")
            return SetResult("invalid", [], error, [])

        try:
            steps = self._validate(settings)
        except ErrorValidation as err:
            _LOG.debug("Rejected CPU frequency settings:\n%s", err.indent(2))
            return SetResult("invalid", [], err, [])

        return self._run_steps(steps)
