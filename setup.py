#!/usr/bin/env python

# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later

# -*- encoding: utf-8 -*-

from setuptools import find_packages
from setuptools import setup


setup(
    name="teapot",
    version="0.0.0",
    license="GPL-3.0-or-later",
    description="terminal user interfaces, the Elm way, on trio",
    long_description="TODO",
    author="Rose Davidson",
    author_email="rose@metaclassical.com",
    url="https://github.com/inklesspen/teapot",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        # complete classifier list: http://pypi.python.org/pypi?%3Aaction=list_classifiers
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Operating System :: POSIX",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: Implementation :: CPython",
        "Framework :: Trio",
        "Environment :: Console :: Curses",
        "Topic :: Terminals",
        "Topic :: Software Development :: User Interfaces",
    ],
    project_urls={
        "Issue Tracker": "https://github.com/inklesspen/teapot/issues",
    },
    keywords=["terminal", "tui", "ansi", "trio"],
    python_requires=">=3.11",
    install_requires=[
        "cattrs>=22.1.0",
        "msgspec",
        "outcome>=1.1.0",
        "pygtrie>=2.4.2",
        "trio>=0.25.0",
        "trio-util>=0.7.0",
    ],
    tests_require=["pytest>=8.0", "pytest-trio>=0.8.0"],
    extras_require={
        "test": ["pytest>=8.0", "pytest-trio>=0.8.0"],
    },
    entry_points={
        "console_scripts": [
            "teapot-keys = teapot.scripts:print_key_events",
        ],
    },
)
