# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import dataclasses
import datetime
import enum
import json
import operator
import pathlib
import typing

import cattrs


class MouseMode(enum.Enum):
    NONE = enum.auto()
    CELL_MOTION = enum.auto()
    ALL_MOTION = enum.auto()


options_converter = cattrs.Converter()
options_converter.register_unstructure_hook(datetime.timedelta, operator.methodcaller("total_seconds"))
options_converter.register_structure_hook(datetime.timedelta, lambda v, _: v if isinstance(v, datetime.timedelta) else datetime.timedelta(seconds=float(v)))
options_converter.register_unstructure_hook(MouseMode, operator.attrgetter("name"))
options_converter.register_structure_hook(MouseMode, lambda v, _: v if isinstance(v, MouseMode) else MouseMode[v.upper()])


@dataclasses.dataclass(kw_only=True)
class ProgramOptions:
    alt_screen: bool = False
    mouse_mode: MouseMode = MouseMode.NONE
    bracketed_paste: bool = True
    report_focus: bool = False
    # recover from exceptions in model code and commands, restoring the terminal before reporting them
    catch_panics: bool = True
    handle_signals: bool = True
    # read from /dev/tty even if stdin isn't a terminal
    input_tty: bool = False
    # how long a lone ESC (or other undecidable input) may wait for the rest of its sequence
    escape_timeout: typing.Optional[datetime.timedelta] = datetime.timedelta(milliseconds=25)
    # environment for processes started with exec_process; None inherits ours
    environ: typing.Optional[dict[str, str]] = None

    def save(self, dest: pathlib.Path):
        with dest.open("w") as f:
            json.dump(options_converter.unstructure(self), f, indent=2)

    @classmethod
    def load(cls, src: pathlib.Path):
        with src.open() as f:
            raw = json.load(f)
        return options_converter.structure(raw, cls)

    @classmethod
    def for_test(cls, **overrides):
        raw = {
            "handle_signals": False,
            "escape_timeout": 0.005,
        }
        raw.update(overrides)
        return options_converter.structure(raw, cls)
