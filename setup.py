#!/usr/bin/env python

# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import os
import re

import setuptools


ROOT = os.path.dirname(os.path.abspath(__file__))


def get_version():
    # Read the version without importing the package, which may not be importable
    # before its build dependencies are installed.
    with open(os.path.join(ROOT, "src", "propertystring", "__init__.py")) as fh:
        match = re.search(r'^__version__ = "([^"]+)"', fh.read(), re.MULTILINE)
    return match.group(1)


with open(os.path.join(ROOT, "DESCRIPTION.md"), "r") as fh:
    long_description = fh.read()


if __name__ == "__main__":
    setuptools.setup(
        name="propertystring",
        version=get_version(),
        description="Cycle-safe, depth-limited rendering of object graphs as human-readable strings",  # noqa
        long_description=long_description,
        long_description_content_type="text/markdown",
        license="MIT",
        python_requires=">=3.10",
        classifiers=[
            "Development Status :: 5 - Production/Stable",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Software Development :: Debuggers",
            "Topic :: System :: Logging",
            "License :: OSI Approved :: MIT License",
        ],
        package_dir={"": "src"},
        packages=setuptools.find_namespace_packages(
            where="src", include=["propertystring*"]
        ),
        extras_require={
            "tests": ["pytest", "pytest-timeout"],
        },
    )
