# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import logging
import os
import typing

import trio

from .commontypes import TTYError

try:
    import termios
    import tty
except ImportError:  # Windows has neither; raw mode is simply unavailable there
    termios = None
    tty = None

logger = logging.getLogger(__name__)

TTY_DEVICE = "/dev/tty"


class TerminalInput(trio.abc.ReceiveStream):
    """Reads keystrokes from a terminal device and controls its raw mode.

    Owns its file descriptor. The descriptor is put in non-blocking mode, so it
    must not share an open file description with anything that writes to the
    terminal; open_input_tty() gets a private one.
    """

    def __init__(self, fd: int):
        self.fd = fd
        self._stream = trio.lowlevel.FdStream(fd)
        self._saved_attrs: typing.Optional[list] = None
        self.is_raw = False

    def set_raw_mode(self, enabled: bool):
        if termios is None or enabled == self.is_raw or not os.isatty(self.fd):
            return
        if enabled:
            self._saved_attrs = termios.tcgetattr(self.fd)
            tty.setraw(self.fd, termios.TCSANOW)
        elif self._saved_attrs is not None:
            termios.tcsetattr(self.fd, termios.TCSANOW, self._saved_attrs)
        self.is_raw = enabled
        logger.debug("Raw mode %s on fd %d", "enabled" if enabled else "disabled", self.fd)

    async def receive_some(self, max_bytes: typing.Optional[int] = None) -> bytes:
        return await self._stream.receive_some(max_bytes)

    async def aclose(self):
        self.set_raw_mode(False)
        await self._stream.aclose()


def open_input_tty() -> TerminalInput:
    try:
        fd = os.open(TTY_DEVICE, os.O_RDWR | os.O_NOCTTY)
    except OSError as exc:
        raise TTYError(f"failed to open tty device {TTY_DEVICE}", cause=exc) from exc
    return TerminalInput(fd)


def terminal_size(fd: int) -> typing.Optional[tuple[int, int]]:
    """(columns, lines) for the terminal on fd, or None if fd isn't a terminal."""
    try:
        size = os.get_terminal_size(fd)
    except (OSError, ValueError):
        return None
    return size.columns, size.lines


def output_fd(output: typing.Any) -> typing.Optional[int]:
    try:
        fd = output.fileno()
    except (AttributeError, OSError, ValueError):
        return None
    return fd if os.isatty(fd) else None
