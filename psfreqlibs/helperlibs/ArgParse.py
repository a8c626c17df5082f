# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Helpful classes extending 'argparse.ArgumentParser' class functionality.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import types
import typing
import argparse
import argcomplete
from psfreqlibs.helperlibs import DamerauLevenshtein
from psfreqlibs.helperlibs.Exceptions import Error

if typing.TYPE_CHECKING:
    from typing import TypedDict, Iterable, Any

    # The class type returned by the 'add_subparsers()' method.
    SubParsersType = argparse._SubParsersAction # pylint: disable=protected-access

    class ArgKwargsTypedDict(TypedDict, total=False):
        """
        Keyword arguments for 'argparse.add_argument()'.

        Attributes:
            dest: The 'argparse' attribute name where the command line argument will be stored.
            default: The default value for the argument.
            nargs: The number of command line arguments that should be consumed.
            metavar: The name of the argument in the help text.
            action: The 'argparse' action to use for the argument.
            choices: The allowed argument values.
            help: A brief description of the argument.
        """

        dest: str
        default: str | int | None
        nargs: str | int
        metavar: str
        action: str | type[argparse.Action]
        choices: list[str]
        help: str

    class ArgTypedDict(TypedDict, total=False):
        """
        A command line option definition.

        Attributes:
            short: The short option name.
            long: The long option name.
            argcomplete: Name of the 'argcomplete.completers' class to use for tab completion.
            kwargs: Keyword arguments for 'argparse.add_argument()'.
        """

        short: str | None
        long: str
        argcomplete: str | None
        kwargs: ArgKwargsTypedDict

    class CommonArgsTypedDict(TypedDict, total=False):
        """
        The common command line arguments.

        Attributes:
            quiet: Print only important messages (-q option).
            debug: Print debugging messages (-d option).
            force_color: Force colorized output (--force-color option).
        """

        quiet: bool
        debug: bool
        force_color: bool

def add_options(parser: argparse.ArgumentParser, options: Iterable[ArgTypedDict]):
    """
    Add command line options to a parser.

    Args:
        parser: The parser to add the options to.
        options: The option definitions.
    """

    for opt in options:
        if opt["short"] is None:
            args: tuple[str, ...] = (opt["long"], )
        else:
            args = (opt["short"], opt["long"])

        arg = parser.add_argument(*args, **opt["kwargs"])
        if opt["argcomplete"]:
            setattr(arg, "completer", getattr(argcomplete.completers, opt["argcomplete"]))

def format_common_args(args: argparse.Namespace) -> CommonArgsTypedDict:
    """
    Validate the common command line arguments and return them as a dictionary.

    Args:
        args: The parsed command line arguments.

    Returns:
        The common arguments dictionary.
    """

    cmdl: CommonArgsTypedDict = {}

    cmdl["quiet"] = getattr(args, "quiet", False)
    cmdl["debug"] = getattr(args, "debug", False)
    if cmdl["quiet"] and cmdl["debug"]:
        raise Error("The '-q' and '-d' options cannot be used together")

    cmdl["force_color"] = getattr(args, "force_color", False)
    return cmdl

def _add_parser(subparsers: SubParsersType, *args: Any, **kwargs: Any) -> argparse.ArgumentParser:
    """
    Replacement for the 'add_parser()' method of a subparsers object: squeeze white-spaces and
    newlines in the 'description' argument, so that triple-quoted descriptions look right in the
    help text.
    """

    if "description" in kwargs:
        kwargs["description"] = " ".join(kwargs["description"].split())

    orig_add_parser = getattr(subparsers, "__orig_add_parser")
    return orig_add_parser(*args, **kwargs)

class ArgsParser(argparse.ArgumentParser):
    """
    Enhance 'argparse.ArgumentParser' with standard options and improved usability.
      - Add the standard options, such as '-h', '-q' and '-d'.
      - Squeeze white-spaces in sub-command descriptions.
      - Raise 'Error' instead of exiting on bad arguments, suggest the closest choice on typos.
    """

    def __init__(self, *args: Any, ver: str | None = None, **kwargs: Any):
        """
        Initialize the parser.

        Args:
            *args: Positional arguments for 'argparse.ArgumentParser'.
            ver: The tool version to print with the '--version' option.
            **kwargs: Keyword arguments for 'argparse.ArgumentParser'.
        """

        kwargs["add_help"] = False
        super().__init__(*args, **kwargs)

        text = "Show this help message and exit."
        self.add_argument("-h", "--help", dest="help", action="help", help=text)

        text = "Be quiet (print only important messages like warnings)."
        self.add_argument("-q", "--quiet", dest="quiet", action="store_true", help=text)

        text = """Force colorized output even if the output stream is not a terminal (adds ANSI
                  escape codes)."""
        self.add_argument("--force-color", action="store_true", help=text)

        text = "Print debugging information."
        self.add_argument("-d", "--debug", dest="debug", action="store_true", help=text)

        if ver:
            text = "Print the version number and exit."
            self.add_argument("--version", action="version", help=text, version=ver)

    def parse_args(self, *args: Any, **kwargs: Any) -> argparse.Namespace: # type: ignore[override]
        """Parse command line arguments and validate the common ones."""

        argcomplete.autocomplete(self)
        _args = super().parse_args(*args, **kwargs)
        format_common_args(_args)
        return _args

    def add_subparsers(self, *args: Any, **kwargs: Any) -> SubParsersType:
        """Create subparsers with the customized 'add_parser()' method."""

        subparsers = super().add_subparsers(*args, **kwargs)
        setattr(subparsers, "__orig_add_parser", subparsers.add_parser)
        setattr(subparsers, "add_parser", types.MethodType(_add_parser, subparsers))

        return subparsers

    def error(self, message: str):
        """
        Raise 'Error' with an improved message instead of printing the usage and exiting.

        Args:
            message: The original error message.
        """

        if "invalid choice: " not in message:
            message += "\nUse -h for help."
        else:
            offending, opts = message.split(" (choose from ")
            offending = offending.split("invalid choice: ")[1].strip("'")
            options = [opt.strip(")'") for opt in opts.split(", ")]
            suggestion = DamerauLevenshtein.closest_match(offending, options)
            message = f"bad argument '{offending}', use '{self.prog} -h'."
            if suggestion:
                message += f"\n\nThe most similar argument is\n  {suggestion}"

        raise Error(message)
