# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Miscellaneous common helpers for class objects.
"""

from  __future__ import annotations # Remove when switching to Python 3.10+.

import errno
from typing import Any, Callable
from psfreqlibs.helperlibs import Logging
from psfreqlibs.helperlibs.Exceptions import Error, ErrorPermissionDenied, ErrorNotFound
from psfreqlibs.helperlibs.Exceptions import ErrorRejected

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.psfreq.{__name__}")

# 'errno' values meaning that the kernel refused a value written to a sysfs file.
REJECTED_ERRNOS = (errno.EINVAL, errno.EBUSY, errno.ERANGE, errno.EIO, errno.EOPNOTSUPP,
                   errno.EAGAIN)

class SimpleCloseContext:
    """
    A context manager implementation for classes that have the 'close()' method. Subclass it to
    avoid duplicating '__enter__()' and '__exit__()'.
    """

    def close(self):
        """Uninitialize the class object. Supposed to be implemented by the subclass."""

    def __enter__(self):
        """Enter the runtime context."""
        return self

    def __exit__(self, *_: Any):
        """Exit the runtime context."""
        self.close()

def translate_oserror(err: BaseException) -> type[Error]:
    """
    Return the project exception type corresponding to a python exception.

    Args:
        err: The exception to translate.

    Returns:
        'ErrorPermissionDenied' for 'PermissionError', 'ErrorNotFound' for 'FileNotFoundError',
        'ErrorRejected' for 'OSError' with one of the 'REJECTED_ERRNOS' error codes, and 'Error' for
        everything else.
    """

    if isinstance(err, PermissionError):
        return ErrorPermissionDenied
    if isinstance(err, FileNotFoundError):
        return ErrorNotFound
    if isinstance(err, OSError) and err.errno in REJECTED_ERRNOS:
        return ErrorRejected
    return Error

class WrapExceptions:
    """
    Wrap an object and translate exceptions raised by its public methods into project exceptions
    (see 'translate_oserror()'). Exceptions that are already based on 'Error' are not translated.
    """

    def __init__(self, obj: Any, get_err_prefix: Callable[[Any, str], str] | None = None):
        """
        Initialize the wrapper.

        Args:
            obj: The object to wrap.
            get_err_prefix: A callable returning the exception message prefix. Called with the
                            wrapped object and the name of the method that raised the exception.
        """

        self._obj = obj
        self._get_err_prefix = get_err_prefix

    def _get_wrapper(self, name: str, method: Callable) -> Callable:
        """Return 'method' wrapped into the exception translation code."""

        def wrapper(*args: Any, **kwargs: Any) -> Any:
            """Call the method and translate its exceptions."""

            try:
                return method(*args, **kwargs)
            except Error:
                raise
            except StopIteration:
                raise
            except Exception as err: # pylint: disable=broad-except
                errmsg = Error(str(err)).indent(2)
                if self._get_err_prefix:
                    msg = f"{self._get_err_prefix(self._obj, name)}:\n{errmsg}"
                else:
                    msg = f"method '{name}()' failed:\n{errmsg}"

                exc_type = translate_oserror(err)
                raise exc_type(msg, errno=getattr(err, "errno", None)) from err

        return wrapper

    def __getattr__(self, name: str) -> Any:
        """Return the attribute of the wrapped object, wrap it if it is a public method."""

        attr = getattr(self._obj, name)

        if name.startswith("_") or not callable(attr):
            return attr

        return self._get_wrapper(name, attr)

    def __enter__(self):
        """Enter the runtime context."""

        self._get_wrapper("__enter__", self._obj.__enter__)()
        return self

    def __exit__(self, *args: Any):
        """Exit the runtime context."""
        return self._get_wrapper("__exit__", self._obj.__exit__)(*args)

def close(cls_obj: Any,
          close_attrs: list[str] | tuple[str, ...] = tuple(),
          unref_attrs: list[str] | tuple[str, ...] = tuple()):
    """
    Uninitialize a class object by closing and dropping objects referred to by its attributes.

    Args:
        cls_obj: The class object to uninitialize.
        close_attrs: Names of attributes referring to objects that should be closed with their
                     'close()' method and then set to 'None'. If the class object has the
                     '_close_{attr}' attribute (or '_close{attr}' for names starting with '_'), the
                     object is closed only if that attribute is 'True'.
        unref_attrs: Names of attributes that should only be set to 'None'.
    """

    for attr in close_attrs:
        obj = getattr(cls_obj, attr, None)
        if not obj:
            continue

        flag_name = f"_close{attr}" if attr.startswith("_") else f"_close_{attr}"
        if getattr(cls_obj, flag_name, True):
            if hasattr(obj, "close"):
                obj.close()
            else:
                _LOG.debug("No 'close()' method in '%s'", obj)

        setattr(cls_obj, attr, None)

    for attr in unref_attrs:
        if getattr(cls_obj, attr, None):
            setattr(cls_obj, attr, None)
