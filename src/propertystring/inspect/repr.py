# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import contextlib
import functools
import io
from collections.abc import Callable, Iterable, Mapping, Sized
from typing import Optional

from propertystring.common import log
from propertystring.inspect import MAX_RECURSION_MARKER, RenderOptions
from propertystring.inspect import kinds, members, primitives
from propertystring.inspect.kinds import Kind


class ReprTooLongError(Exception):
    pass


class VisitedSet:
    """
    Identity-keyed set of the compound objects on the active rendering path, from the
    root down to the object currently being rendered.

    Membership is by identity, not equality. The objects themselves are kept alive
    while they're in the set, so that their ids cannot be reused.
    """

    def __init__(self):
        self._objects = {}

    def __contains__(self, value: object) -> bool:
        return id(value) in self._objects

    def __len__(self) -> int:
        return len(self._objects)

    @contextlib.contextmanager
    def visiting(self, value: object):
        key = id(value)
        assert key not in self._objects
        self._objects[key] = value
        try:
            yield
        finally:
            del self._objects[key]


class RenderContext:
    output: io.StringIO

    options: RenderOptions

    visited: VisitedSet

    depth: int
    """
    Depth of the value currently being rendered, starting with 0 for the root value on
    which render() was called, and incremented for each expanded compound value.
    """

    chars_remaining: int
    """
    How many more characters are allowed in the output.

    Formatters can use this to optimize by appending larger chunks if there is enough
    space left for them. However, this is just a hint, and formatters aren't required
    to truncate their output - the RenderContext will take care of that automatically.
    """

    truncated: bool
    """Whether max_length was exceeded. No more text can be appended after that."""

    def __init__(self, options: RenderOptions):
        self.output = io.StringIO()
        self.options = options
        self.visited = VisitedSet()
        self.depth = 0
        self.chars_remaining = options.max_length
        self.truncated = False

    def __str__(self) -> str:
        return self.output.getvalue()

    def append_text(self, text: str):
        if self.truncated:
            raise ReprTooLongError
        self.output.write(text)
        self.chars_remaining -= len(text)
        if self.chars_remaining < 0:
            self.output.seek(
                self.options.max_length - len(self.options.truncation_suffix)
            )
            self.output.truncate()
            self.output.write(self.options.truncation_suffix)
            self.truncated = True
            raise ReprTooLongError

    def append_object(self, value: object, *, is_root=False, declared_type=None):
        options = self.options
        if is_root:
            render_type = options.render_root_actual_type
        else:
            render_type = options.render_actual_type

        if not render_type:
            self._append_value(value, is_root)
            return

        if value is None and declared_type is not None:
            type_name = members.nameof(declared_type)
        else:
            type_name = members.nameof(type(value))

        if not is_root:
            self.append_text("{")
        self.append_text(type_name + " :: ")
        self._append_value(value, is_root, braced=not is_root)
        if not is_root:
            self.append_text("}")

    def _append_value(self, value: object, is_root: bool, braced=False):
        kind = kinds.classify(value)
        if kind.is_simple:
            self.append_text(primitives.format_simple(kind, value, self.options))
            return

        options = self.options
        if not is_root and not options.render_complex_properties:
            self.append_text(primitives.safe_str(value))
            return

        max_level = options.max_recursion_level
        if max_level is not None and self.depth > max_level:
            self.append_text(MAX_RECURSION_MARKER)
            return

        if value in self.visited:
            self.append_text(options.circular_ref_marker)
            return

        formatter = get_formatter(kind, value)
        with self.visited.visiting(value):
            self.depth += 1
            try:
                formatter(value, self, is_root=is_root, braced=braced)
            finally:
                self.depth -= 1

    def append_outcome(self, outcome: members.Outcome):
        if outcome.failed:
            self.append_text(primitives.error_marker(outcome.error))
        else:
            self.append_object(outcome.value)

    def append_items(self, value: Iterable, append_item: Callable[[object], None]):
        """
        Appends the items produced by iterating over value, separated by commas, up to
        options.max_collection_item_count. If there are more items than that, the rest
        are summarized as "+N more".

        An exception raised while retrieving an item is rendered in place of that item,
        and iteration continues. Iteration ends after two consecutive exceptions, since
        most iterators cannot proceed after raising.
        """

        outcome = members.fetch(iter, value)
        if outcome.failed:
            log.swallow_exception(
                "Error iterating over {0}", members.nameof(type(value)),
                exc_info=_exc_info(outcome.error),
            )
            self.append_text(primitives.error_marker(outcome.error))
            return
        it = outcome.value

        limit = self.options.max_collection_item_count
        count = 0
        previous_failed = False
        while True:
            outcome = members.fetch(next, it, _END)
            if outcome.value is _END:
                break

            if count > 0:
                self.append_text(", ")
            if limit is not None and count >= limit:
                self.append_text(f"+{_count_remaining(value, it, count)} more")
                break

            if outcome.failed:
                log.swallow_exception(
                    "Error retrieving item {0} of {1}",
                    count,
                    members.nameof(type(value)),
                    exc_info=_exc_info(outcome.error),
                )
                self.append_text(primitives.error_marker(outcome.error, count))
                count += 1
                if previous_failed:
                    break
                previous_failed = True
                continue

            previous_failed = False
            append_item(outcome.value)
            count += 1

    def append_members(self, value: object, member_list: Iterable[members.Member]):
        render_member_type = self.options.render_member_type
        for i, member in enumerate(member_list):
            if i > 0:
                self.append_text(", ")
            self.append_text(member.name)
            if render_member_type:
                type_name = member.type_name()
                if type_name is not None:
                    self.append_text(f" ({type_name})")
            self.append_text(": ")

            outcome = member.get(value)
            if outcome.failed:
                log.swallow_exception(
                    "Error getting value of {0}.{1}",
                    members.nameof(type(value)),
                    member.name,
                    exc_info=_exc_info(outcome.error),
                )
            self.append_outcome(outcome)


_END = object()


def _exc_info(exc: BaseException):
    return type(exc), exc, exc.__traceback__


MAX_ITEMS_COUNTED = 1000
"""
How many of the items that weren't rendered are counted by iterating, when the
collection can't report its length. If there are more, "+N more" becomes
"+N+ more", with N == MAX_ITEMS_COUNTED.
"""


def _count_remaining(value: Iterable, it, count: int) -> str:
    # The item that was just retrieved, but not rendered, counts as well.
    if isinstance(value, Sized):
        outcome = members.fetch(len, value)
        if not outcome.failed and outcome.value > count:
            return str(outcome.value - count)
    remaining = 1
    while remaining < MAX_ITEMS_COUNTED:
        outcome = members.fetch(next, it, _END)
        if outcome.failed or outcome.value is _END:
            return str(remaining)
        remaining += 1
    return f"{remaining}+"


def format_object(value: object, context: RenderContext, *, is_root, braced):
    member_list = members.get_members(value, context.options)
    if not member_list:
        # Nothing to expand; str() is the best we can do.
        context.append_text(primitives.safe_str(value))
        return

    open_brace = not is_root and not braced
    if open_brace:
        context.append_text("{")
    context.append_members(value, member_list)
    if open_brace:
        context.append_text("}")


def format_named_tuple(value: tuple, context: RenderContext, **kwargs):
    context.append_text("(")
    annotations = members.annotations_of(type(value))
    field_members = [
        members.Member(name, annotations.get(name)) for name in type(value)._fields
    ]
    if context.options.sort_members_alphabetically:
        field_members.sort(key=lambda member: member.name)
    context.append_members(value, field_members)
    context.append_text(")")


def format_iterable(
    value: Iterable,
    context: RenderContext,
    *,
    prefix: Optional[str] = None,
    suffix: Optional[str] = None,
    **kwargs,
):
    if prefix is None:
        prefix = members.nameof(type(value)) + "(("
    context.append_text(prefix)
    context.append_items(value, context.append_object)
    if suffix is None:
        suffix = "))"
    context.append_text(suffix)


def format_mapping(
    value: Mapping,
    context: RenderContext,
    *,
    prefix: Optional[str] = None,
    suffix: Optional[str] = None,
    **kwargs,
):
    if prefix is None:
        prefix = members.nameof(type(value)) + "({"
    context.append_text(prefix)

    def append_item(item):
        key, item_value = item
        context.append_object(key)
        context.append_text(": ")
        context.append_object(item_value)

    outcome = members.fetch(value.items)
    if outcome.failed:
        context.append_text(primitives.error_marker(outcome.error))
    else:
        context.append_items(outcome.value, append_item)

    if suffix is None:
        suffix = "})"
    context.append_text(suffix)


def format_tuple(value: tuple, context: RenderContext, **kwargs):
    limit = context.options.max_collection_item_count
    single = len(value) == 1 and (limit is None or limit >= 1)
    suffix = ",)" if single else ")"
    format_iterable(value, context, prefix="(", suffix=suffix)


format_list = functools.partial(format_iterable, prefix="[", suffix="]")

format_set = functools.partial(format_iterable, prefix="{", suffix="}")

format_frozenset = functools.partial(format_iterable, prefix="frozenset({", suffix="})")

format_dict = functools.partial(format_mapping, prefix="{", suffix="}")


Formatter = Callable[..., None]

formatters: Mapping[type, Formatter] = {
    tuple: format_tuple,
    list: format_list,
    set: format_set,
    frozenset: format_frozenset,
    dict: format_dict,
}


def get_formatter(kind: Kind, value: object) -> Formatter:
    match kind:
        case Kind.COMPOUND_PAIR:
            return format_named_tuple
        case Kind.SEQUENCE:
            # Exact type match only, so that subclasses render with their own name.
            formatter = formatters.get(type(value), None)
            if formatter is not None:
                return formatter
            if isinstance(value, Mapping):
                return format_mapping
            return format_iterable
        case _:
            return format_object


def render(value: object, options: Optional[RenderOptions] = None, *, declared_type=None) -> str:
    """
    Renders value and, recursively, its members and items as a human-readable string.

    This never raises for any value: exceptions raised by property getters, iterators
    and other user code are rendered inline as error markers, and cyclic or overly
    deep object graphs are cut short with markers. Only invalid options are rejected.

    declared_type is used to annotate None when options.render_root_actual_type is
    set; otherwise, the runtime type of value is used.
    """

    if options is None:
        options = RenderOptions()
    elif not isinstance(options, RenderOptions):
        raise TypeError(
            f"options must be RenderOptions or None, not {type(options).__name__}"
        )

    context = RenderContext(options)
    try:
        context.append_object(value, is_root=True, declared_type=declared_type)
    except ReprTooLongError:
        pass
    except Exception as exc:
        # Most commonly RecursionError, for very deep graphs with no recursion limit.
        log.swallow_exception("Error rendering {0}", members.nameof(type(value)))
        try:
            context.append_text(f"<error: {primitives.safe_str(exc)}>")
        except ReprTooLongError:
            pass
    return str(context)
