# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""
Object inspection: classifying values, enumerating their members, and rendering
whole object graphs as human-readable strings.

This module defines the options that control rendering. The rendering engine
itself lives in propertystring.inspect.repr.
"""

import dataclasses
import sys
from dataclasses import dataclass
from typing import Optional


NULL_MARKER = "<null>"
"""Text rendered for None, regardless of the declared type."""

CIRCULAR_REF_MARKER = "<circular reference>"

MAX_RECURSION_MARKER = "<max recursion level reached>"

DEFAULT_MAX_COLLECTION_ITEM_COUNT = 32

DEFAULT_MAX_RECURSION_LEVEL = 16


# Boolean options that with_all_flags() toggles. hex is deliberately not among them,
# since it changes how values are rendered rather than how much is rendered.
_RENDER_FLAGS = (
    "render_root_actual_type",
    "render_actual_type",
    "render_complex_properties",
    "include_non_public_members",
    "render_member_type",
    "sort_members_alphabetically",
)


@dataclass(frozen=True)
class RenderOptions:
    render_root_actual_type: bool = False
    """Whether the runtime type of the root value should be rendered."""

    render_actual_type: bool = False
    """Whether the runtime type of each nested value should be rendered."""

    render_complex_properties: bool = False
    """
    Whether non-primitive values below the root should be expanded recursively. If
    False, they are rendered with str() instead.
    """

    include_non_public_members: bool = False
    """Whether _private members should be rendered. __dunder__ members never are."""

    render_member_type: bool = False
    """Whether the declared (annotated) type of each member should be rendered."""

    sort_members_alphabetically: bool = False
    """Whether members should be sorted by name rather than by declaration order."""

    hex: bool = False
    """Whether integers should be rendered in hexadecimal."""

    max_collection_item_count: Optional[int] = DEFAULT_MAX_COLLECTION_ITEM_COUNT
    """
    Maximum number of items rendered from a single collection. Remaining items are
    summarized as "+N more". None means no limit.
    """

    max_recursion_level: Optional[int] = DEFAULT_MAX_RECURSION_LEVEL
    """
    Maximum depth at which values are still expanded. Values that would be expanded
    deeper than that are rendered as MAX_RECURSION_MARKER. None means no limit, in
    which case very deep object graphs are only bounded by the interpreter stack.
    """

    max_length: int = sys.maxsize
    """Maximum length of the rendered string."""

    truncation_suffix: str = ""
    """Suffix to append to the rendered string when truncation occurs.
    Counts towards max_length."""

    circular_ref_marker: str = CIRCULAR_REF_MARKER
    """String to use for nested circular references (e.g. object referencing itself)."""

    def __post_init__(self):
        for name in ("max_collection_item_count", "max_recursion_level"):
            _check_count(name, getattr(self, name), optional=True)
        _check_count("max_length", self.max_length, optional=False)
        if len(self.truncation_suffix) > self.max_length:
            raise ValueError("truncation_suffix cannot be longer than max_length")

    def with_all_flags(self, value: bool) -> "RenderOptions":
        """Returns a copy of these options with every rendering flag set to value."""
        return dataclasses.replace(self, **{name: value for name in _RENDER_FLAGS})


def _check_count(name: str, value: object, *, optional: bool):
    if value is None and optional:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, not {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} cannot be negative: {value}")
