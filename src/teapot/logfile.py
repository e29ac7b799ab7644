# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import pathlib


def log_to_file(path: os.PathLike | str, prefix: str = "") -> logging.FileHandler:
    """Send all logging to path (appending), since the terminal itself is busy.

    The returned handler is already installed on the root logger; remove and close
    it when you're done.
    """
    handler = logging.FileHandler(pathlib.Path(path), mode="a", encoding="utf-8")
    if prefix and not prefix.endswith(" "):
        prefix += " "
    handler.setFormatter(logging.Formatter(prefix.replace("%", "%%") + "%(asctime)s %(name)s %(levelname)s %(message)s"))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    return handler
