# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""Cycle-safe, depth-limited rendering of object graphs as human-readable strings.

Typical use is in logging and diagnostics::

    from propertystring import PropertyString, RenderOptions, render

    print(render(order, RenderOptions(render_complex_properties=True)))
    log.info("Processing {0}", PropertyString(order))
"""

__all__ = [
    "__version__",
    "PropertyString",
    "RenderOptions",
    "render",
]

__version__ = "1.0.0"

from propertystring.inspect import RenderOptions  # noqa
from propertystring.inspect.repr import render  # noqa


class PropertyString(object):
    """A wrapped Python object that renders itself with render() when asked for a
    string representation via str() or format().

    Rendering is deferred until then, so that wrapping values passed to logging calls
    costs nothing if the message is never written.
    """

    def __init__(self, value, options=None):
        self.value = value
        self.options = options

    def __repr__(self):
        return "PropertyString({0!r})".format(self.value)

    def __str__(self):
        return render(self.value, self.options)

    def __format__(self, format_spec):
        return format(str(self), format_spec)
