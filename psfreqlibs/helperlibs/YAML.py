# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Provide YAML output capabilities.
"""

from  __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import PosixPath
from typing import Any, IO
import yaml
from psfreqlibs.helperlibs.Exceptions import Error

def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of 'data' without the keys that have 'None' values."""

    copy: dict[str, Any] = {}
    for key, val in data.items():
        if val is None:
            continue
        if isinstance(val, dict):
            copy[key] = _drop_none(val)
        else:
            copy[key] = val

    return copy

def _represent_none(dumper: yaml.Dumper, _) -> yaml.ScalarNode:
    """Represent 'None' as an empty value."""
    return dumper.represent_scalar("tag:yaml.org,2002:null", "")

def _represent_posixpath(dumper: yaml.Dumper, value: PosixPath) -> yaml.ScalarNode:
    """Represent a path as a plain string."""
    return dumper.represent_scalar("tag:yaml.org,2002:str", str(value))

def dump(data: dict[str, Any], fobj: IO[str], skip_none: bool = False):
    """
    Dump a dictionary in YAML format.

    Args:
        data: The dictionary to dump.
        fobj: The file object to write the YAML data to.
        skip_none: Exclude keys with 'None' values from the output if True.
    """

    class _Dumper(yaml.SafeDumper): # pylint: disable=too-many-ancestors
        """A dumper with custom representers, to avoid modifying the global 'SafeDumper'."""

    _Dumper.add_representer(type(None), _represent_none)
    _Dumper.add_representer(PosixPath, _represent_posixpath)

    if skip_none:
        data = _drop_none(data)

    try:
        yaml.dump(data, fobj, Dumper=_Dumper, default_flow_style=False, sort_keys=False)
    except (yaml.YAMLError, OSError) as err:
        errmsg = Error(str(err)).indent(2)
        raise Error(f"Failed to dump YAML data:\n{errmsg}") from err
