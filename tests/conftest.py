# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

"""pytest configuration.
"""

import pytest

from propertystring import RenderOptions
from propertystring.common import log


@pytest.fixture
def complex_options():
    """Options that expand nested objects, with everything else at defaults."""
    return RenderOptions(render_complex_properties=True)


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    """Redirects file logging to a fresh file for the duration of the test, and
    returns a callable that reads back everything logged so far.
    """

    filename = tmp_path / "test.log"
    monkeypatch.setattr(log, "file", None)
    log.to_file(str(filename))
    yield lambda: filename.read_text(encoding="utf-8")
    log.close_file()
