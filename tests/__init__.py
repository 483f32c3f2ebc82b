# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""propertystring tests
"""

import os
import pathlib
import pkgutil

import pytest

# Do not import anything from propertystring until assert rewriting is enabled below!

root = pathlib.Path(__file__).parent


# This is only imported to ensure that the module is actually installed and the
# timeout setting in pytest.ini is active, since otherwise tests that exercise
# cyclic object graphs will hang indefinitely if cycle detection regresses.
import pytest_timeout  # noqa


# We want pytest to rewrite asserts (for better error messages) in the common code
# used by the tests, and in all the test helpers.


def _register_assert_rewrite(modname):
    modname = str(modname)
    pytest.register_assert_rewrite(modname)


_register_assert_rewrite("propertystring.common")
tests_submodules = pkgutil.iter_modules([str(root)])
for _, submodule, _ in tests_submodules:
    submodule = str("{0}.{1}".format(__name__, submodule))
    _register_assert_rewrite(submodule)


# Now we can import these, and pytest will rewrite asserts in them.
from propertystring.common import log, options  # noqa

# Make timestamps shorter to match maximum test run time better, and log everything
# to file if PROPERTYSTRING_LOG_DIR is set.
log.timestamp_format = "06.3f"
if options.log_dir is not None:
    log.to_file(prefix="tests")
os.environ.pop("PROPERTYSTRING_LOG_DIR", None)
