# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import argparse
import logging
import pathlib

import trio

from . import commands
from .decoder import BlurMsg, FocusMsg, UnknownCSISequenceMsg, UnknownInputByteMsg
from .keys import Key, KeyType
from .logfile import log_to_file
from .mouse import MouseEvent
from .options import MouseMode, ProgramOptions
from .program import Model, Program

logger = logging.getLogger(__name__)


class KeyEventPrinter(Model):
    """Prints every input message it gets. ctrl+c quits."""

    def __init__(self):
        self.count = 0

    def update(self, msg):
        match msg:
            case Key(type=KeyType.CTRL_C):
                return self, commands.quit
            case Key() | MouseEvent() | FocusMsg() | BlurMsg() | UnknownInputByteMsg() | UnknownCSISequenceMsg():
                self.count += 1
                return self, commands.printf("%r  %s", msg, msg)
        return self, None

    def view(self):
        return f"{self.count} input message(s). Press ctrl+c to quit."


key_events_parser = argparse.ArgumentParser(description="Print decoded terminal input until ctrl+c.")
key_events_parser.add_argument("--options", type=pathlib.Path, help="JSON file of program options")
key_events_parser.add_argument("--mouse", choices=[m.name.lower() for m in MouseMode], default=None)
key_events_parser.add_argument("--report-focus", action="store_true")
key_events_parser.add_argument("--log-file", type=pathlib.Path, help="log to this file instead of stderr")


def print_key_events():
    args = key_events_parser.parse_args()
    if args.log_file is not None:
        log_to_file(args.log_file, prefix="teapot-keys")
    else:
        logging.basicConfig(level=logging.WARNING)

    options = ProgramOptions.load(args.options) if args.options is not None else ProgramOptions()
    if args.mouse is not None:
        options.mouse_mode = MouseMode[args.mouse.upper()]
    if args.report_focus:
        options.report_focus = True

    program = Program(KeyEventPrinter(), options=options)
    model = trio.run(program.run)
    logger.debug("Printed %d message(s)", model.count)
