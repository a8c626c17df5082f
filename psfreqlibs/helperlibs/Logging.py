# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Logging helpers: a logger class with colored level prefixes, the NOTICE and ERRINFO levels, and
the 'error_out()' method for terminating the program on fatal errors.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import logging
import traceback
from typing import NoReturn, Any, IO, cast
import colorama

# Log levels.
#   * INFO: the message goes to stdout as-is, no prefix.
#   * NOTICE: like INFO, but with a prefix and to stderr.
#   * DEBUG, WARNING, ERROR, CRITICAL: with a prefix.
#   * ERRINFO: like ERROR, but without a prefix.
INFO = logging.INFO
NOTICE = logging.INFO + 1
DEBUG = logging.DEBUG
WARNING = logging.WARNING
ERROR = logging.ERROR
ERRINFO = logging.ERROR + 1
CRITICAL = logging.CRITICAL

# Name of the main logger instance. All project loggers are its children.
MAIN_LOGGER_NAME = "main"

_DEFAULT_DBG_PREFIX = "[%(created)f] [%(module)s,%(lineno)d]"

class _LevelFormatter(logging.Formatter):
    """Format messages differently depending on the log level."""

    def __init__(self, prefix: str = "", colors: dict[int, str] | None = None):
        """
        Initialize the formatter.

        Args:
            prefix: Prefix for messages of all levels except for 'INFO' and 'ERRINFO' (usually the
                    tool name).
            colors: Colorama color codes to use for the prefixes, indexed by log level.
        """

        super().__init__("%(levelname)s: %(message)s", "%H:%M:%S")

        self._colors: dict[int, str] = colors if colors else {}
        self._fmts: dict[int, str] = {}

        if prefix:
            prefix += ": "

        for lvl, name in ((WARNING, "warning"), (ERROR, "error"), (CRITICAL, "critical error"),
                          (NOTICE, "notice")):
            if not prefix:
                name = name.title()
            self._fmts[lvl] = self._paint(lvl, prefix + name) + ": %(message)s"

        dbg_fmt = _DEFAULT_DBG_PREFIX.replace("[", "[" + self._colors.get(DEBUG, ""))
        if DEBUG in self._colors:
            dbg_fmt = dbg_fmt.replace("]", colorama.Style.RESET_ALL + "]")
        self._fmts[DEBUG] = dbg_fmt + ": %(message)s"

        self._fmts[INFO] = self._fmts[ERRINFO] = "%(message)s"

    def _paint(self, level: int, text: str) -> str:
        """Return 'text' wrapped into the color codes for 'level'."""

        if level not in self._colors:
            return text
        return self._colors[level] + text + colorama.Style.RESET_ALL

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record using the format of its level."""

        # pylint: disable=protected-access
        self._style._fmt = self._fmts.get(record.levelno, "%(message)s")
        return super().format(record)

class _LevelFilter(logging.Filter):
    """Let through only the records of specific log levels."""

    def __init__(self, levels: tuple[int, ...]):
        """Initialize the filter to let through records of levels in 'levels'."""

        super().__init__()
        self._levels = levels

    def filter(self, record: logging.LogRecord) -> bool:
        """Return True if the record should be logged."""
        return record.levelno in self._levels

class Logger(logging.Logger):
    """
    A logger that adds the following on top of the standard logger.
      * Colored prefixes for different log levels.
      * The NOTICE and ERRINFO log levels.
      * The 'error_out()' method.
      * INFO messages go to stdout, all other messages go to stderr.
    """

    def __init__(self, name: str | None = None):
        """
        Initialize the logger.

        Args:
            name: The logger name (same as in 'logging.Logger()').
        """

        self.prefix = ""
        self.colored = False

        super().__init__(name if name else "default")

    def configure(self,
                  prefix: str | None = None,
                  level: int | None = None,
                  colored: bool | None = None,
                  info_stream: IO[str] = sys.stdout,
                  error_stream: IO[str] = sys.stderr) -> Logger:
        """
        Configure the logger.

        Args:
            prefix: Prefix for messages of all levels except for 'INFO' and 'ERRINFO'.
            level: The log level. Detected from the '-q' and '-d' command line options by default.
            colored: Whether to color the output. By default, the output is colored if both streams
                     are TTYs or if the '--force-color' command line option was used.
            info_stream: The stream for 'INFO' messages.
            error_stream: The stream for all other messages.

        Returns:
            The logger instance.
        """

        self.prefix = prefix if prefix else ""

        if not level:
            if "-q" in sys.argv or "--quiet" in sys.argv:
                level = WARNING
            elif "-d" in sys.argv or "--debug" in sys.argv:
                level = DEBUG
            else:
                level = INFO

        self.setLevel(level)

        if colored is None:
            if "--force-color" in sys.argv:
                colored = True
            else:
                colored = info_stream.isatty() and error_stream.isatty()

        self.colored = colored

        colors: dict[int, str] = {}
        if colored:
            colors[DEBUG] = colorama.Fore.GREEN
            colors[WARNING] = colorama.Fore.YELLOW + colorama.Style.BRIGHT
            colors[NOTICE] = colorama.Fore.CYAN + colorama.Style.BRIGHT
            colors[ERROR] = colors[CRITICAL] = colorama.Fore.RED + colorama.Style.BRIGHT

        formatter = _LevelFormatter(prefix=self.prefix, colors=colors)

        self.handlers = []

        handler = logging.StreamHandler(info_stream)
        handler.setFormatter(formatter)
        handler.addFilter(_LevelFilter((INFO,)))
        self.addHandler(handler)

        handler = logging.StreamHandler(error_stream)
        handler.setFormatter(formatter)
        handler.addFilter(_LevelFilter((DEBUG, NOTICE, WARNING, ERROR, ERRINFO, CRITICAL)))
        self.addHandler(handler)

        return self

    def _print_traceback(self, level: int = ERRINFO):
        """Log the traceback of the exception being handled, or the current stack."""

        if sys.exc_info()[0]:
            tback = traceback.format_exc().rstrip()
        else:
            tback = "".join(traceback.format_stack()).rstrip()

        self.log(level, "--- Debug trace starts here ---")
        self.log(level, "An error occurred, here is the traceback:\n%s", tback)
        self.log(level, "--- Debug trace ends here ---\n")

    def error_out(self, fmt: Any, *args: Any, print_tb: bool = False) -> NoReturn:
        """
        Log an error message and terminate the program with exit code 1.

        Args:
            fmt: The error message format string (or an exception object).
            *args: The arguments for the format string.
            print_tb: Print the traceback if True. The traceback is always printed in debug mode.

        Raises:
            SystemExit: Always.
        """

        errmsg = fmt % args if args else str(fmt)

        if print_tb or self.getEffectiveLevel() == DEBUG:
            self._print_traceback()

        self.error(errmsg)
        raise SystemExit(1)

    def notice(self, fmt: str, *args: Any):
        """Log a message with the 'NOTICE' level."""
        self.log(NOTICE, fmt, *args)

logging.addLevelName(NOTICE, "NOTICE")
logging.addLevelName(ERRINFO, "ERRINFO")
logging.setLoggerClass(Logger)

def getLogger(name: str | None = None) -> Logger:
    """
    Return a logger by name (same as 'logging.getLogger()', but returns the 'Logger' type).

    Args:
        name: The logger name.

    Returns:
        The logger instance.
    """

    return cast(Logger, logging.getLogger(name=name))
