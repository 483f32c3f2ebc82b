# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Classification of values into the kinds that the renderer distinguishes."""

import ctypes
import datetime
import decimal
import enum
import fractions
import functools
import inspect
import types
import uuid
from collections.abc import Iterable, Iterator


class Kind(enum.Enum):
    NULL = "null"
    FLAGS_ENUM = "flags enum"
    PRIMITIVE = "primitive"
    POINTER = "pointer"
    TYPE_METADATA = "type metadata"
    DELEGATE = "delegate"
    COMPOUND_PAIR = "compound pair"
    SEQUENCE = "sequence"
    COMPLEX_OBJECT = "complex object"

    @property
    def is_simple(self) -> bool:
        """Whether values of this kind are formatted directly, without recursion."""
        return self not in _COMPOUND_KINDS


_COMPOUND_KINDS = frozenset({Kind.COMPOUND_PAIR, Kind.SEQUENCE, Kind.COMPLEX_OBJECT})

PRIMITIVE_TYPES = (
    bool,
    int,
    float,
    complex,
    decimal.Decimal,
    fractions.Fraction,
    str,
    bytes,
    bytearray,
    memoryview,
    enum.Enum,
    datetime.date,  # includes datetime.datetime
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
)

POINTER_TYPES = (ctypes._Pointer, ctypes.c_void_p)

TYPE_METADATA_TYPES = (type, types.ModuleType)


def is_named_tuple(value: object) -> bool:
    return isinstance(value, tuple) and isinstance(
        getattr(type(value), "_fields", None), tuple
    )


def classify(value: object) -> Kind:
    # The order of checks matters, since the categories overlap in Python: IntFlag
    # is an int, a named tuple is iterable, a class is callable and so on.
    if value is None:
        return Kind.NULL
    if isinstance(value, enum.Flag):
        return Kind.FLAGS_ENUM
    if isinstance(value, PRIMITIVE_TYPES):
        return Kind.PRIMITIVE
    if isinstance(value, POINTER_TYPES):
        return Kind.POINTER
    if isinstance(value, TYPE_METADATA_TYPES):
        return Kind.TYPE_METADATA
    if inspect.isroutine(value) or isinstance(value, functools.partial):
        return Kind.DELEGATE
    if is_named_tuple(value):
        return Kind.COMPOUND_PAIR
    # Iterators are single-use; rendering must not consume them.
    if isinstance(value, Iterable) and not isinstance(value, Iterator):
        return Kind.SEQUENCE
    return Kind.COMPLEX_OBJECT
