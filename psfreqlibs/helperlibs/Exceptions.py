# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Exception types used in this project.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
from typing import Any, Match
import re

class Error(Exception):
    """The base class for all exceptions raised by this project."""

    def __init__(self, msg: str, *args: Any, **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for formatting the message with the '%' operator.
            **kwargs: Additional attributes to set on the exception object.
        """

        msg = str(msg)
        super().__init__(msg)

        for key, val in kwargs.items():
            setattr(self, key, val)

        if args:
            self.msg = msg % tuple(args)
        else:
            self.msg = msg

    def indent(self, indent: int | str, capitalize: bool = True) -> str:
        """
        Prefix each line of the error message.

        Args:
            indent: Number of white-spaces to prefix each line with, or the prefix string itself.
            capitalize: Make the first letter of the message a capital letter if True.

        Returns:
            The prefixed error message.
        """

        def _capitalize(mobj: Match[str]) -> str:
            """Capitalize the first non-white-space character of the matched message."""
            return mobj.group(1) + mobj.group(2).capitalize()

        if isinstance(indent, int):
            pfx = " " * indent
        else:
            pfx = indent

        msg = pfx + self.msg.replace("\n", f"\n{pfx}")
        if capitalize:
            msg = re.sub(r"^(\s*)(\S)", _capitalize, msg)

        return msg

    def __str__(self):
        """The string representation of the exception."""
        return self.msg

class ErrorNotFound(Error):
    """Something was not found, e.g., a sysfs file does not exist."""

class ErrorNotSupported(Error):
    """Feature is not supported on this system."""

class ErrorPermissionDenied(Error):
    """Insufficient privileges."""

class ErrorBadFormat(Error):
    """Bad format of something, e.g., sysfs file contents."""

class ErrorRejected(Error):
    """The kernel refused to accept a value written to a sysfs file."""

class ErrorNoCPUs(Error):
    """No CPUs were discovered."""

class ErrorValidation(Error):
    """The base class for caller input validation failures."""

class ErrorInvalidBounds(ErrorValidation):
    """Min. and max. frequency bounds are out of order or outside of the hardware limits."""

class ErrorOutOfRange(ErrorValidation):
    """A value is out of the allowed range."""

class ErrorInvalidRange(ErrorValidation):
    """A range is invalid, e.g., the upper limit is not greater than the lower limit."""

class ErrorUnsupportedGovernor(ErrorValidation):
    """The kernel does not provide the requested CPU frequency governor."""

class ErrorUnknownPlan(ErrorValidation):
    """There is no frequency plan with the requested name."""

class ErrorPartialFailure(Error):
    """A multi-CPU write operation stopped part way through."""

    def __init__(self,
                 msg: str,
                 *args: Any,
                 completed: list[int] | None = None,
                 cpu: int | None = None,
                 path: Path | None = None,
                 **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for the message.
            completed: CPU numbers that were successfully modified before the failure.
            cpu: The CPU number the failure happened on.
            path: The sysfs file the failure happened on.
            **kwargs: Additional keyword arguments.
        """

        if completed is None:
            completed = []

        self.completed = completed
        self.cpu = cpu
        self.path = path

        super().__init__(msg, *args, **kwargs)
