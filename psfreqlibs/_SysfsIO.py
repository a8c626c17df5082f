# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Provide API for reading and writing sysfs files.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
from typing import IO, cast
from psfreqlibs.helperlibs import Logging, ClassHelpers, Trivial
from psfreqlibs.helperlibs.Exceptions import Error, ErrorBadFormat

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

def _get_err_prefix(fobj: IO[str], method: str) -> str:
    """Return the exception message prefix for a failed file object method."""
    return f"method '{method}()' failed for file '{fobj.name}'"

def _snip(val: str) -> str:
    """Shorten a long value for an error message."""

    if len(val) > 24:
        return f"{val[:23]}...snip..."
    return val

class SysfsIO(ClassHelpers.SimpleCloseContext):
    """
    Provide API for reading and writing sysfs files.

    Public methods overview.

    1. Read / write to a file.
        * 'read()' - read a string.
        * 'read_int()' - read an integer.
        * 'write()' - write a string.
        * 'write_int()' - write an integer.
    2. Misc.
        * 'exists()' - check if a sysfs path exists.
        * 'lsdir()' - list a sysfs directory.

    All paths are absolute sysfs paths, like '/sys/devices/system/cpu/online'. If the object was
    created with a 'root' other than "/", the paths are resolved relative to 'root' instead, which
    allows for operating on a copy of a sysfs tree.

    The class caches nothing: every read goes to the file, and every write goes to the file
    immediately. Nothing is retried. Exceptions carry the 'path' attribute with the sysfs path
    (not including 'root') the operation failed on.
    """

    def __init__(self, root: str | Path = "/"):
        """
        Initialize a class instance.

        Args:
            root: The directory to resolve the sysfs paths relative to.
        """

        self.root = Path(root)

    def close(self):
        """Uninitialize the class object."""

    def _path(self, path: Path) -> Path:
        """Return the real file-system path for sysfs path 'path'."""

        path = Path(path)
        if str(self.root) == "/":
            return path
        return self.root / path.relative_to(path.anchor)

    def _open(self, path: Path, mode: str) -> IO[str]:
        """
        Open a sysfs file and return a file object with methods raising only 'Error'-based
        exceptions.
        """

        realpath = self._path(path)

        # pylint: disable=consider-using-with
        try:
            fobj = open(realpath, mode, encoding="utf-8")
        except OSError as err:
            exc_type = ClassHelpers.translate_oserror(err)
            errmsg = Error(str(err)).indent(2)
            raise exc_type(f"failed to open file '{realpath}' with mode '{mode}':\n{errmsg}",
                           errno=err.errno) from None

        wfobj = ClassHelpers.WrapExceptions(fobj, get_err_prefix=_get_err_prefix)
        return cast(IO[str], wfobj)

    def read(self, path: Path, what: str = "") -> str:
        """
        Read the contents of a sysfs file at the specified path.

        Args:
            path: Path to the sysfs file to read.
            what: Optional short description of what is being read, included in exception messages.

        Returns:
            The contents of the file as a string, with the leading and trailing white-spaces
            stripped.

        Raises:
            ErrorNotFound: If the file does not exist.
            ErrorPermissionDenied: If the file is not readable.
        """

        if what:
            what = f" {what}"

        try:
            with self._open(path, "r") as fobj:
                val = fobj.read().strip()
        except Error as err:
            raise type(err)(f"Failed to read{what} from '{path}':\n{err.indent(2)}",
                            path=path) from err

        _LOG.debug("Read%s from '%s': '%s'", what, path, _snip(val))
        return val

    def read_int(self, path: Path, what: str = "") -> int:
        """
        Read a sysfs file and return its contents as an integer.

        Args:
            path: Path to the sysfs file to read.
            what: Optional short description of what is being read, included in exception messages.

        Returns:
            The integer value read from the file.

        Raises:
            ErrorNotFound: If the file does not exist.
            ErrorPermissionDenied: If the file is not readable.
            ErrorBadFormat: If the file contents cannot be parsed as an integer.
        """

        val = self.read(path, what=what)

        try:
            return Trivial.str_to_int(val, base=10, what=what)
        except Error as err:
            if what:
                what = f" {what}"
            raise ErrorBadFormat(f"Bad contents of{what} sysfs file '{path}'\n{err.indent(2)}",
                                 path=path) from err

    def write(self, path: Path, val: str, what: str = ""):
        """
        Write a value to a sysfs file.

        Args:
            path: Path to the sysfs file to write to.
            val: Value to write to the file.
            what: Optional short description of what is being written, included in exception
                  messages.

        Raises:
            ErrorNotFound: If the file does not exist.
            ErrorPermissionDenied: If the file is not writable.
            ErrorRejected: If the kernel refused to accept the value.
        """

        if what:
            what = f" {what}"

        _LOG.debug("Writing value '%s' to%s sysfs file '%s'", _snip(val), what, path)

        # Note, the kernel validates the value when the data are flushed, which may happen when the
        # file is closed. Therefore, the 'with' statement is inside the 'try' block.
        try:
            with self._open(path, "w") as fobj:
                fobj.write(val)
        except Error as err:
            raise type(err)(f"Failed to write value '{_snip(val)}' to{what} sysfs file '{path}':\n"
                            f"{err.indent(2)}", path=path) from err

    def write_int(self, path: Path, val: str | int, what: str = ""):
        """
        Write an integer value to a sysfs file.

        Args:
            path: Path to the sysfs file to write to.
            val: Value to write to the file.
            what: Optional short description of what is being written, included in exception
                  messages.

        Raises:
            ErrorBadFormat: If 'val' is not an integer.
            ErrorNotFound: If the file does not exist.
            ErrorPermissionDenied: If the file is not writable.
            ErrorRejected: If the kernel refused to accept the value.
        """

        int_val = Trivial.str_to_int(val, what=what)
        self.write(path, str(int_val), what=what)

    def exists(self, path: Path) -> bool:
        """Return True if sysfs path 'path' exists, False otherwise."""

        exists = self._path(path).exists()
        _LOG.debug("Sysfs path '%s' exists: %s", path, exists)
        return exists

    def lsdir(self, path: Path) -> list[str]:
        """
        List a sysfs directory.

        Args:
            path: Path to the sysfs directory to list.

        Returns:
            A sorted list of directory entry names.

        Raises:
            ErrorNotFound: If the directory does not exist.
            ErrorPermissionDenied: If the directory is not readable.
        """

        _LOG.debug("Listing sysfs directory '%s'", path)

        try:
            return sorted(entry.name for entry in self._path(path).iterdir())
        except OSError as err:
            exc_type = ClassHelpers.translate_oserror(err)
            errmsg = Error(str(err)).indent(2)
            raise exc_type(f"Failed to list directory '{path}':\n{errmsg}", path=path,
                           errno=err.errno) from None
