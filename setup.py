#!/usr/bin/python3
# Setup file for gitward
# Copyright (C) 2026 The gitward authors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

gitward_version_string = "0.1.0"

tests_require = ["pytest"]


setup(
    name="gitward",
    version=gitward_version_string,
    description="Open git repositories and decide how far they can be trusted",
    long_description=(
        "gitward finds the git directory, common directory and work tree of a "
        "repository, loads its configuration with per-source trust and applies "
        "git's safe.directory rules to repositories owned by other users."
    ),
    author="The gitward authors",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["gitward"],
    package_data={"": ["py.typed"]},
    install_requires=[],
    extras_require={
        "test": tests_require,
    },
    entry_points={
        "console_scripts": [
            "gitward=gitward.cli:_main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
