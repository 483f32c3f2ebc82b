# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import functools
import io
import os
import platform
import sys
import threading
import time
import traceback

import propertystring
from propertystring.common import options


LEVELS = ("debug", "info", "warning", "error")
"""Logging levels, lowest to highest importance.
"""

stderr = sys.__stderr__

stderr_levels = {"warning", "error"}
"""What should be logged to stderr.
"""

file_levels = set(LEVELS)
"""What should be logged to file, when it is not None.
"""

file = None
"""If not None, which file to log to.

This can be automatically set by to_file().
"""

timestamp_format = "09.3f"
"""Format spec used for timestamps. Can be changed to dial precision up or down.
"""


_lock = threading.RLock()
_start = time.monotonic()


def timestamp():
    """Seconds elapsed since the module was imported."""
    return time.monotonic() - _start


def write(level, text):
    assert level in LEVELS

    prefix = "{0}+{1:{2}}: ".format(level[0].upper(), timestamp(), timestamp_format)

    indent = "\n" + (" " * len(prefix))
    output = indent.join(text.split("\n"))
    output = prefix + output + "\n\n"

    with _lock:
        if level in stderr_levels and stderr is not None:
            try:
                stderr.write(output)
            except Exception:
                pass

        if file is not None and level in file_levels:
            try:
                file.write(output)
                file.flush()
            except Exception:
                pass

    return text


def is_logged(level):
    """Whether messages of the specified level currently go anywhere."""
    return level in stderr_levels or (file is not None and level in file_levels)


def write_format(level, format_string, *args, **kwargs):
    if not is_logged(level):
        return ""

    try:
        text = format_string.format(*args, **kwargs)
    except Exception:
        exception()
        raise
    return write(level, text)


debug = functools.partial(write_format, "debug")
info = functools.partial(write_format, "info")
warning = functools.partial(write_format, "warning")
error = functools.partial(write_format, "error")


def exception(format_string="", *args, **kwargs):
    """Logs an exception with full traceback.

    If format_string is specified, it is formatted with format(*args, **kwargs),
    and prepended to the exception traceback on a separate line.

    If exc_info is specified, the exception it describes will be logged. Otherwise,
    sys.exc_info() - i.e. the exception being handled currently - will be logged.

    If level is specified, the exception will be logged as a message of that level.
    The default is "error".

    Returns the exception object, for convenient re-raising::

        try:
            ...
        except Exception:
            raise log.exception()  # log it and re-raise
    """

    level = kwargs.pop("level", "error")
    exc_info = kwargs.pop("exc_info", sys.exc_info())
    if not is_logged(level):
        return exc_info[1]

    if format_string:
        format_string += "\n\n"
    format_string += "{exception}"

    exception = "".join(traceback.format_exception(*exc_info))
    write_format(level, format_string, *args, exception=exception, **kwargs)

    return exc_info[1]


def swallow_exception(format_string="", *args, **kwargs):
    """Logs an exception that is being deliberately handled and not re-raised.

    Same as exception(), except that the default level is "debug", since such
    exceptions are expected when rendering arbitrary user objects.
    """
    kwargs.setdefault("level", "debug")
    return exception(format_string, *args, **kwargs)


def to_file(filename=None, prefix=None):
    """Starts logging all messages at file_levels to the specified file.

    If filename is None, the file is created in options.log_dir and named
    "<prefix>-<pid>.log", where prefix defaults to "propertystring". If both
    filename and options.log_dir are None, this is a no-op.
    """
    global file
    if file is not None:
        return

    if filename is None:
        if options.log_dir is None:
            return
        if prefix is None:
            prefix = "propertystring"
        filename = os.path.join(options.log_dir, "{0}-{1}.log".format(prefix, os.getpid()))
        os.makedirs(options.log_dir, exist_ok=True)

    file = io.open(filename, "w", encoding="utf-8")

    info(
        "{0} {1}\n{2} {3} ({4}-bit)\npropertystring {5}",
        platform.platform(),
        platform.machine(),
        platform.python_implementation(),
        platform.python_version(),
        64 if sys.maxsize > 2 ** 32 else 32,
        propertystring.__version__,
    )


def close_file():
    """Stops logging to file, if it was enabled by to_file()."""
    global file
    with _lock:
        if file is None:
            return
        try:
            file.close()
        finally:
            file = None
