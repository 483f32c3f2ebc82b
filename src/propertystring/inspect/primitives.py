# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""
Culture-invariant formatting of values that are rendered directly, without
recursing into them: primitives, enums and flags, pointers, type metadata, and
callables.
"""

import ctypes
import datetime
import enum
import functools
import inspect
import types

from propertystring.inspect import NULL_MARKER, RenderOptions
from propertystring.inspect.kinds import Kind
from propertystring.inspect.members import nameof


POINTER_FORMAT = "0x{{0:0{0}X}}".format(ctypes.sizeof(ctypes.c_void_p) * 2)


def safe_str(value: object) -> str:
    """str(value), or an error marker if str() raises."""
    try:
        return str(value)
    except Exception as exc:
        return error_marker(exc)


def error_marker(exc: BaseException, index=None) -> str:
    """
    Renders an exception raised by user code, e.g. "<ValueError: bad value>", or
    "<ValueError at index 3: bad value>" for collection items.
    """

    name = type(exc).__name__
    if index is not None:
        name = f"{name} at index {index}"
    try:
        message = str(exc)
    except Exception:
        message = ""
    return f"<{name}: {message}>" if message else f"<{name}>"


def ui_string(value) -> str:
    """
    Wraps a string in double quotes, doubling every double quote inside it; e.g.
    'a"b' is rendered as '"a""b"'. None is rendered as NULL_MARKER.
    """

    if value is None:
        return NULL_MARKER
    return '"' + value.replace('"', '""') + '"'


def format_int(value: int, options: RenderOptions) -> str:
    fs = "{:#x}" if options.hex else "{}"
    return fs.format(value)


def format_datetime(value: datetime.datetime) -> str:
    # strftime("%Y") isn't zero-padded for years before 1000 on all platforms.
    text = "{0:04d}-{1}".format(value.year, value.strftime("%m-%d %H:%M:%S.%f"))
    offset = value.utcoffset()
    if offset is not None:
        sign = "-" if offset < datetime.timedelta(0) else "+"
        seconds = abs(offset) // datetime.timedelta(seconds=1)
        hours, seconds = divmod(seconds, 3600)
        minutes, seconds = divmod(seconds, 60)
        text += " UTC{0}{1:02d}:{2:02d}".format(sign, hours, minutes)
        if seconds:
            text += ":{0:02d}".format(seconds)
    return text


def format_enum(value: enum.Enum) -> str:
    name = value.name
    return safe_str(value.value) if name is None else name


def format_flags(value: enum.Flag) -> str:
    """
    Renders flags as a set of names, e.g. "{READ, WRITE}". If the value matches a
    single named member exactly (including aliases for combinations), that name is
    used. Otherwise the value is decomposed into named members, in ascending order.
    """

    flags_type = type(value)
    bits = value.value
    members = list(flags_type.__members__.items())

    for name, member in members:
        if member.value == bits:
            return "{" + name + "}"

    names = []
    remaining = bits
    for name, member in sorted(members, key=lambda item: item[1].value, reverse=True):
        member_bits = member.value
        if member_bits and remaining & member_bits == member_bits:
            names.append(name)
            remaining &= ~member_bits
    if remaining or not names:
        return "{" + str(bits) + "}"
    return "{" + ", ".join(reversed(names)) + "}"


def format_primitive(value: object, options: RenderOptions) -> str:
    match value:
        case str():
            return ui_string(value)
        case bool():
            return str(value)
        case enum.Enum():
            return format_enum(value)
        case int():
            return format_int(value, options)
        case float() | bytes() | bytearray():
            return repr(value)
        case memoryview():
            return f"memoryview({value.nbytes} bytes)"
        case datetime.datetime():
            return format_datetime(value)
        case datetime.date() | datetime.time():
            return value.isoformat()
        case _:
            return safe_str(value)


def pointer_address(value: object) -> int:
    if isinstance(value, ctypes.c_void_p):
        return value.value or 0
    return ctypes.cast(value, ctypes.c_void_p).value or 0


def format_pointer(value: object) -> str:
    try:
        address = pointer_address(value)
    except Exception as exc:
        return error_marker(exc)
    return POINTER_FORMAT.format(address)


def qualified_name(obj: object) -> str:
    """
    Returns "module.qualname" for classes and functions, or just the qualified name
    if the module is unknown.
    """

    name = getattr(obj, "__qualname__", None) or getattr(obj, "__name__", None)
    if not isinstance(name, str):
        name = nameof(obj)
    module = getattr(obj, "__module__", None)
    if isinstance(module, str) and module:
        return f"{module}.{name}"
    return name


def format_type_metadata(value: object) -> str:
    if isinstance(value, types.ModuleType):
        location = getattr(value, "__file__", None)
        if not isinstance(location, str):
            location = value.__name__
        return ui_string(location)
    return ui_string(qualified_name(value))


def short_object_reference_description(obj: object) -> str:
    """Describes the identity of an object, e.g. "Node:0x7F3A2C1B9E50"."""
    if obj is None:
        return NULL_MARKER
    return "{0}:0x{1:08X}".format(nameof(type(obj)), id(obj))


def format_delegate(value: object) -> str:
    if isinstance(value, functools.partial):
        return "partial of " + format_delegate(value.func)

    target = getattr(value, "__self__", None)
    func = getattr(value, "__func__", value)
    text = qualified_name(func)
    try:
        text += str(inspect.signature(value))
    except (TypeError, ValueError):
        text += "(...)"

    # Builtin functions report their module as __self__.
    if target is not None and not isinstance(target, types.ModuleType):
        text += " bound to " + short_object_reference_description(target)
    return text


def format_simple(kind: Kind, value: object, options: RenderOptions) -> str:
    """Formats a value of a simple kind, as determined by kinds.classify()."""

    match kind:
        case Kind.NULL:
            return NULL_MARKER
        case Kind.FLAGS_ENUM:
            return format_flags(value)
        case Kind.PRIMITIVE:
            return format_primitive(value, options)
        case Kind.POINTER:
            return format_pointer(value)
        case Kind.TYPE_METADATA:
            return format_type_metadata(value)
        case Kind.DELEGATE:
            return format_delegate(value)
        case _:
            raise ValueError(f"{kind} is not a simple kind")
