# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""
Introspection of the readable members of arbitrary objects.

Members are enumerated in declaration order: __slots__ entries first (base classes
first), then the instance __dict__ in insertion order, then readable class-level
descriptors - properties with a getter and functools.cached_property - in class
body order, base classes first.
"""

import functools
import inspect
import types
import weakref
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

from propertystring.inspect import RenderOptions


@dataclass(frozen=True)
class Outcome:
    """
    Result of invoking user code: either the value it returned, or the exception it
    raised. Exactly one of value and error is meaningful; error is None on success.
    """

    value: object = None
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def fetch(func: Callable, *args) -> Outcome:
    """Calls func(*args), capturing any exception it raises into the Outcome."""
    try:
        return Outcome(func(*args))
    except Exception as exc:
        return Outcome(error=exc)


class Member:
    """
    A readable member of an object.
    """

    name: str

    annotation: object
    """Declared type of the member, or None if it isn't annotated."""

    def __init__(self, name: str, annotation: object = None):
        self.name = name
        self.annotation = annotation

    def __repr__(self):
        return f"{type(self).__name__}({self.name!r})"

    def __eq__(self, other):
        if not isinstance(other, Member):
            return NotImplemented
        return (self.name, self.annotation) == (other.name, other.annotation)

    def __hash__(self):
        return hash(self.name)

    def type_name(self) -> Optional[str]:
        if self.annotation is None:
            return None
        return nameof(self.annotation)

    def get(self, obj: object) -> Outcome:
        return fetch(getattr, obj, self.name)


def nameof(obj: object) -> str:
    """
    Returns a short display name for a type or type annotation, e.g. "int", "Node",
    "list[int]" or "Optional[str]".
    """

    if isinstance(obj, str):
        # Forward reference or postponed annotation.
        return obj
    if isinstance(obj, type) and not isinstance(obj, types.GenericAlias):
        try:
            return obj.__qualname__
        except AttributeError:
            return obj.__name__
    try:
        return repr(obj).replace("typing.", "")
    except Exception:
        return "<unknown>"


def is_public(name: str) -> bool:
    return not name.startswith("_")


def is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def annotations_of(obj: object) -> dict:
    try:
        return dict(inspect.get_annotations(obj))
    except Exception:
        return {}


_class_members_cache = weakref.WeakKeyDictionary()


def class_members(cls: type) -> tuple:
    """
    Returns a tuple of (slots, descriptors, annotations) of cls, where slots and
    descriptors are Members for names declared in __slots__ and for readable
    class-level descriptors respectively, both in declaration order, base classes
    first; and annotations maps member names to their declared types.
    """

    try:
        return _class_members_cache[cls]
    except KeyError:
        pass
    except TypeError:
        # Unhashable metaclass instance, can't be cached.
        return _collect_class_members(cls)

    result = _collect_class_members(cls)
    _class_members_cache[cls] = result
    return result


def _collect_class_members(cls: type) -> tuple:
    slots = []
    descriptors = {}
    annotations = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        annotations.update(annotations_of(klass))

        klass_slots = klass.__dict__.get("__slots__", ())
        if isinstance(klass_slots, str):
            klass_slots = (klass_slots,)
        for name in klass_slots:
            if name not in ("__dict__", "__weakref__") and name not in slots:
                slots.append(name)

        for name, attr in klass.__dict__.items():
            if isinstance(attr, property):
                if attr.fget is None:
                    # Write-only property.
                    descriptors.pop(name, None)
                    continue
                annotation = annotations_of(attr.fget).get("return")
            elif isinstance(attr, functools.cached_property):
                annotation = annotations_of(attr.func).get("return")
            else:
                continue
            descriptors[name] = Member(name, annotation)

    slot_members = tuple(Member(name, annotations.get(name)) for name in slots)
    descriptor_members = tuple(
        member if member.annotation is not None
        # Fall back to the class-level annotation, e.g. for overridden properties.
        else Member(member.name, annotations.get(member.name))
        for member in descriptors.values()
    )
    return slot_members, descriptor_members, annotations


def get_members(value: object, options: RenderOptions) -> list[Member]:
    """
    Returns the readable members of value that should be rendered, in order.
    """

    cls = type(value)
    slot_members, descriptor_members, annotations = class_members(cls)

    members = list(slot_members)
    seen = {member.name for member in members}

    try:
        instance_dict = vars(value)
    except Exception:
        instance_dict = {}
    try:
        names = list(instance_dict)
    except Exception:
        names = []
    for name in names:
        if not isinstance(name, str) or name in seen:
            continue
        seen.add(name)
        members.append(Member(name, annotations.get(name)))

    for member in descriptor_members:
        if member.name not in seen:
            seen.add(member.name)
            members.append(member)

    if options.include_non_public_members:
        members = [member for member in members if not is_dunder(member.name)]
    else:
        members = [member for member in members if is_public(member.name)]

    if options.sort_members_alphabetically:
        members.sort(key=lambda member: member.name)
    return members
