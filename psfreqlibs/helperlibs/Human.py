# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Helpers for parsing human-readable values with SI units, such as CPU frequencies.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import re
from psfreqlibs.helperlibs import Trivial
from psfreqlibs.helperlibs.Exceptions import Error

# The units this module supports.
SUPPORTED_UNITS = {
    "Hz" : "hertz",
}

# SI prefix to scaling factor. Both "k" and "K" are accepted for "kilo", because the kernel and many
# tools spell kilohertz as "KHz".
_SIPFX_SCALERS = {
    "G": 1000000000,
    "M": 1000000,
    "k": 1000,
    "K": 1000,
    "m": 0.001,
    "u": 0.000001,
    "n": 0.000000001,
}

def separate_si_prefix(unit: str) -> tuple[str | None, str]:
    """
    Split the SI prefix from the base unit.

    Args:
        unit: The unit, possibly with a SI prefix.

    Returns:
        A tuple of the SI prefix (or 'None') and the base unit.

    Examples:
        >>> separate_si_prefix("kHz")
        ("k", "Hz")
        >>> separate_si_prefix("Hz")
        (None, "Hz")
    """

    if len(unit) < 2 or unit in SUPPORTED_UNITS:
        return None, unit

    if unit[0] in _SIPFX_SCALERS and unit[1:] in SUPPORTED_UNITS:
        return unit[0], unit[1:]

    return None, unit

def parse_human(hval: str | int | float,
                unit: str,
                target_unit: str | None = None,
                integer: bool = True,
                what: str = "") -> int | float:
    """
    Convert a human-provided value, like "1.2GHz", to an amount of 'target_unit' units.

    Args:
        hval: The value to convert. Values without a unit are assumed to be in 'unit' units.
        unit: The default unit of 'hval', possibly with a SI prefix.
        target_unit: The unit of the result, possibly with a SI prefix. Defaults to the base unit of
                     'unit'.
        integer: Round the result to the nearest integer if True.
        what: Description of the value, for the possible error message.

    Returns:
        The converted value.

    Examples:
        >>> parse_human("1.2GHz", unit="Hz", target_unit="kHz")
        1200000
        >>> parse_human("800", unit="MHz", target_unit="kHz")
        800000
    """

    what = f" {what}" if what else ""

    sipfx, base_unit = separate_si_prefix(unit)
    target_sipfx: str | None = None
    if target_unit:
        target_sipfx, target_base_unit = separate_si_prefix(target_unit)
        if target_base_unit != base_unit:
            raise Error(f"BUG: the target base unit has to be '{base_unit}', not "
                        f"'{target_base_unit}'")

    sval = str(hval).strip()
    if Trivial.is_num(sval):
        num = float(sval)
        if sipfx:
            num *= _SIPFX_SCALERS[sipfx]
    else:
        mobj = re.fullmatch(r"([-+]?[0-9]*\.?[0-9]+)\s*([a-zA-Z]*)", sval)
        if not mobj:
            raise Error(f"Failed to parse{what} value '{hval}'")

        num = float(mobj.group(1))
        val_sipfx, val_base_unit = separate_si_prefix(mobj.group(2))
        if val_base_unit.lower() != base_unit.lower():
            raise Error(f"Failed to parse{what} value '{hval}': unknown unit '{mobj.group(2)}', "
                        f"use '{base_unit}' with an optional SI prefix (e.g., 'M{base_unit}')")
        if val_sipfx:
            num *= _SIPFX_SCALERS[val_sipfx]

    if target_sipfx:
        num /= _SIPFX_SCALERS[target_sipfx]

    if integer:
        return round(num)
    return num
