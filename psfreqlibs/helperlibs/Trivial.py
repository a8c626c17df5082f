# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Common trivial helpers.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import os
import typing
from itertools import groupby
from psfreqlibs.helperlibs.Exceptions import Error, ErrorBadFormat

if typing.TYPE_CHECKING:
    from typing import Iterable

def is_root() -> bool:
    """
    Check if the current process has superuser privileges.

    Returns:
        True if the real or the effective UID of the process is 0, False otherwise.
    """

    try:
        return os.getuid() == 0 or os.geteuid() == 0
    except OSError as err:
        errmsg = Error(str(err)).indent(2)
        raise Error(f"Failed to get process UID:\n{errmsg}") from None

def str_to_int(snum: str | int, base: int = 0, what: str = "") -> int:
    """
    Convert a string to an integer.

    Args:
        snum: The value to convert.
        base: Base of 'snum'. Auto-detect based on the prefix by default.
        what: Description of the value, for the possible error message.

    Returns:
        The integer value.

    Raises:
        ErrorBadFormat: If 'snum' is not an integer.
    """

    try:
        return int(str(snum).strip(), base)
    except (ValueError, TypeError):
        if not what:
            what = "value"
        if base:
            expected = f"a base {base} integer"
        else:
            expected = "an integer"
        raise ErrorBadFormat(f"Bad {what} '{snum}': should be {expected}") from None

def is_int(value: str | int | float, base: int = 0) -> bool:
    """Return True if 'value' can be converted to an integer, False otherwise."""

    try:
        int(str(value), base)
    except (ValueError, TypeError):
        return False
    return True

def is_num(value: str | int | float) -> bool:
    """Return True if 'value' can be converted to an integer or a floating point number."""

    try:
        float(str(value))
    except (ValueError, TypeError):
        return False
    return True

def split_csv_line(csv_line: str, sep: str = ",", dedup: bool = False) -> list[str]:
    """
    Split a line of values separated by 'sep', drop empty values.

    Args:
        csv_line: The line to split.
        sep: The separator.
        dedup: Remove duplicate values if True.

    Returns:
        The list of values.
    """

    result = [val.strip() for val in csv_line.strip(sep).split(sep) if val.strip()]

    if dedup:
        return list(dict.fromkeys(result))
    return result

def split_csv_line_int(csv_line: str, sep: str = ",", dedup: bool = False,
                       what: str = "") -> list[int]:
    """
    Split a line of integers and integer ranges, like the contents of the
    '/sys/devices/system/cpu/online' file.

    Args:
        csv_line: The line to split.
        sep: The separator.
        dedup: Remove duplicate values if True.
        what: Description of the values, for the possible error message.

    Returns:
        The list of integers.

    Example:
        Input: csv_line = "0,1-3,7"
        Output: [0, 1, 2, 3, 7].
    """

    if not what:
        what = "value"

    result: list[int] = []
    for val in split_csv_line(csv_line, sep=sep):
        if "-" not in val:
            result.append(str_to_int(val, what=what))
            continue

        range_vals = [rval for rval in val.split("-") if rval]
        if len(range_vals) != 2:
            raise ErrorBadFormat(f"Bad {what} '{csv_line}': error in '{val}': should be two "
                                 f"integers separated by '-'")

        first, last = (str_to_int(rval, what=what) for rval in range_vals)
        if first > last:
            raise ErrorBadFormat(f"Bad {what} '{csv_line}': error in range '{val}': the first "
                                 f"number should not be greater than the second")

        result += range(first, last + 1)

    if dedup:
        return list(dict.fromkeys(result))
    return result

def rangify(numbers: Iterable[int]) -> str:
    """
    Format a list of integers as a comma-separated string of ranges.

    Args:
        numbers: The integers to format.

    Returns:
        A string like "0-3,6,8-9".
    """

    range_strs = []
    for _, pairs in groupby(enumerate(sorted(numbers)), lambda pair: pair[0] - pair[1]):
        nums = [num for _, num in pairs]
        if len(nums) > 2:
            range_strs.append(f"{nums[0]}-{nums[-1]}")
        else:
            range_strs += [str(num) for num in nums]

    return ",".join(range_strs)
