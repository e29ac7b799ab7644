# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import abc
import logging
import typing

from .commontypes import Msg
from .messages import (
    ClearScrollAreaMsg,
    PrintLineMsg,
    ScrollDownMsg,
    ScrollUpMsg,
    SyncScrollAreaMsg,
    WindowSizeMsg,
)

logger = logging.getLogger(__name__)

CSI = "\x1b["
ALT_SCREEN_ON = CSI + "?1049h"
ALT_SCREEN_OFF = CSI + "?1049l"
CURSOR_SHOW = CSI + "?25h"
CURSOR_HIDE = CSI + "?25l"
CURSOR_HOME = CSI + "H"
CLEAR_SCREEN = CSI + "2J"
ERASE_DOWN = CSI + "0J"
MOUSE_CELL_MOTION_ON = CSI + "?1002h"
MOUSE_CELL_MOTION_OFF = CSI + "?1002l"
MOUSE_ALL_MOTION_ON = CSI + "?1003h"
MOUSE_ALL_MOTION_OFF = CSI + "?1003l"
MOUSE_SGR_ON = CSI + "?1006h"
MOUSE_SGR_OFF = CSI + "?1006l"
BRACKETED_PASTE_ON = CSI + "?2004h"
BRACKETED_PASTE_OFF = CSI + "?2004l"
REPORT_FOCUS_ON = CSI + "?1004h"
REPORT_FOCUS_OFF = CSI + "?1004l"


def cursor_up(n: int):
    return f"{CSI}{n}A"


def cursor_position(row: int, col: int):
    return f"{CSI}{row};{col}H"


def scroll_region(top: int, bottom: int):
    return f"{CSI}{top};{bottom}r"


def insert_lines(n: int):
    return f"{CSI}{n}L"


def window_title(title: str):
    return f"\x1b]2;{title}\x07"


class Renderer(abc.ABC):
    """What the program needs from whatever paints the screen."""

    @abc.abstractmethod
    def start(self):
        ...

    @abc.abstractmethod
    def stop(self):
        ...

    @abc.abstractmethod
    def kill(self):
        ...

    @abc.abstractmethod
    def write(self, view: str):
        ...

    @abc.abstractmethod
    def repaint(self):
        ...

    @abc.abstractmethod
    def clear_screen(self):
        ...

    @property
    @abc.abstractmethod
    def alt_screen(self) -> bool:
        ...

    @abc.abstractmethod
    def enter_alt_screen(self):
        ...

    @abc.abstractmethod
    def exit_alt_screen(self):
        ...

    @abc.abstractmethod
    def show_cursor(self):
        ...

    @abc.abstractmethod
    def hide_cursor(self):
        ...

    @abc.abstractmethod
    def enable_mouse_cell_motion(self):
        ...

    @abc.abstractmethod
    def disable_mouse_cell_motion(self):
        ...

    @abc.abstractmethod
    def enable_mouse_all_motion(self):
        ...

    @abc.abstractmethod
    def disable_mouse_all_motion(self):
        ...

    @abc.abstractmethod
    def enable_mouse_sgr_mode(self):
        ...

    @abc.abstractmethod
    def disable_mouse_sgr_mode(self):
        ...

    @property
    @abc.abstractmethod
    def bracketed_paste_active(self) -> bool:
        ...

    @abc.abstractmethod
    def enable_bracketed_paste(self):
        ...

    @abc.abstractmethod
    def disable_bracketed_paste(self):
        ...

    @property
    @abc.abstractmethod
    def reporting_focus(self) -> bool:
        ...

    @abc.abstractmethod
    def enable_report_focus(self):
        ...

    @abc.abstractmethod
    def disable_report_focus(self):
        ...

    @abc.abstractmethod
    def set_window_title(self, title: str):
        ...

    @abc.abstractmethod
    def reset_lines_rendered(self):
        ...

    @abc.abstractmethod
    def handle_message(self, msg: Msg):
        ...


class NilRenderer(Renderer):
    """Renders nothing, for programs that don't own a screen."""

    def start(self):
        pass

    def stop(self):
        pass

    def kill(self):
        pass

    def write(self, view: str):
        pass

    def repaint(self):
        pass

    def clear_screen(self):
        pass

    @property
    def alt_screen(self):
        return False

    def enter_alt_screen(self):
        pass

    def exit_alt_screen(self):
        pass

    def show_cursor(self):
        pass

    def hide_cursor(self):
        pass

    def enable_mouse_cell_motion(self):
        pass

    def disable_mouse_cell_motion(self):
        pass

    def enable_mouse_all_motion(self):
        pass

    def disable_mouse_all_motion(self):
        pass

    def enable_mouse_sgr_mode(self):
        pass

    def disable_mouse_sgr_mode(self):
        pass

    @property
    def bracketed_paste_active(self):
        return False

    def enable_bracketed_paste(self):
        pass

    def disable_bracketed_paste(self):
        pass

    @property
    def reporting_focus(self):
        return False

    def enable_report_focus(self):
        pass

    def disable_report_focus(self):
        pass

    def set_window_title(self, title: str):
        pass

    def reset_lines_rendered(self):
        pass

    def handle_message(self, msg: Msg):
        pass


class StandardRenderer(Renderer):
    """Writes each new frame over the last one, in place.

    There is no line diffing: a changed frame is redrawn from its first line. Frames
    go out as soon as they are written, so there's no frame-rate ticker either.
    """

    def __init__(self, output: typing.TextIO):
        self.output = output
        self.running = False
        self.width = 0
        self.height = 0
        self._alt_screen = False
        self._bracketed_paste = False
        self._report_focus = False
        self._cursor_hidden = False
        self._view = ""
        self._last_render: typing.Optional[str] = None
        self._lines_rendered = 0
        self._queued_lines: list[str] = []

    def _execute(self, seq: str):
        self.output.write(seq)
        self.output.flush()

    def start(self):
        self.running = True
        self.hide_cursor()

    def stop(self):
        if not self.running:
            return
        self.flush()
        self.running = False
        if not self._alt_screen and self._lines_rendered > 0:
            self._execute("\r\n")

    def kill(self):
        if not self.running:
            return
        self.running = False
        self._execute("\r" + ERASE_DOWN)

    def write(self, view: str):
        # an empty frame would leave the cursor where it is and the old frame on screen
        self._view = view if view else " "
        if self.running:
            self.flush()

    def flush(self):
        if self._view == self._last_render and not self._queued_lines:
            return
        lines = self._view.split("\n")
        if self.height > 0 and len(lines) > self.height:
            lines = lines[len(lines) - self.height :]
        if self.width > 0:
            lines = [line[: self.width] for line in lines]

        out = []
        if self._alt_screen:
            out.append(CURSOR_HOME)
        elif self._lines_rendered > 1:
            out.append(cursor_up(self._lines_rendered - 1))
        out.append("\r" + ERASE_DOWN)
        if not self._alt_screen:
            out.extend(line + "\r\n" for line in self._queued_lines)
        self._queued_lines.clear()
        out.append("\r\n".join(lines))
        self._execute("".join(out))
        self._last_render = self._view
        self._lines_rendered = len(lines)

    def repaint(self):
        self._last_render = None

    def clear_screen(self):
        self._execute(CLEAR_SCREEN + CURSOR_HOME)
        self.repaint()

    @property
    def alt_screen(self):
        return self._alt_screen

    def enter_alt_screen(self):
        if self._alt_screen:
            return
        self._alt_screen = True
        self._execute(ALT_SCREEN_ON + CLEAR_SCREEN + CURSOR_HOME)
        # entering the alt screen shows the cursor on some terminals
        if self._cursor_hidden:
            self._execute(CURSOR_HIDE)
        self.repaint()

    def exit_alt_screen(self):
        if not self._alt_screen:
            return
        self._alt_screen = False
        self._execute(ALT_SCREEN_OFF)
        if self._cursor_hidden:
            self._execute(CURSOR_HIDE)
        self.repaint()

    def show_cursor(self):
        self._cursor_hidden = False
        self._execute(CURSOR_SHOW)

    def hide_cursor(self):
        self._cursor_hidden = True
        self._execute(CURSOR_HIDE)

    def enable_mouse_cell_motion(self):
        self._execute(MOUSE_CELL_MOTION_ON)

    def disable_mouse_cell_motion(self):
        self._execute(MOUSE_CELL_MOTION_OFF)

    def enable_mouse_all_motion(self):
        self._execute(MOUSE_ALL_MOTION_ON)

    def disable_mouse_all_motion(self):
        self._execute(MOUSE_ALL_MOTION_OFF)

    def enable_mouse_sgr_mode(self):
        self._execute(MOUSE_SGR_ON)

    def disable_mouse_sgr_mode(self):
        self._execute(MOUSE_SGR_OFF)

    @property
    def bracketed_paste_active(self):
        return self._bracketed_paste

    def enable_bracketed_paste(self):
        self._bracketed_paste = True
        self._execute(BRACKETED_PASTE_ON)

    def disable_bracketed_paste(self):
        self._bracketed_paste = False
        self._execute(BRACKETED_PASTE_OFF)

    @property
    def reporting_focus(self):
        return self._report_focus

    def enable_report_focus(self):
        self._report_focus = True
        self._execute(REPORT_FOCUS_ON)

    def disable_report_focus(self):
        self._report_focus = False
        self._execute(REPORT_FOCUS_OFF)

    def set_window_title(self, title: str):
        self._execute(window_title(title))

    def reset_lines_rendered(self):
        self._lines_rendered = 0

    def handle_message(self, msg: Msg):
        match msg:
            case WindowSizeMsg(width=width, height=height):
                self.width = width
                self.height = height
                self.repaint()
            case PrintLineMsg(body=body):
                if not self._alt_screen:
                    self._queued_lines.extend(body.split("\n"))
                    if self.running:
                        self.flush()
            case SyncScrollAreaMsg(lines=lines, top_boundary=top, bottom_boundary=bottom):
                self._execute(
                    scroll_region(top, bottom) + cursor_position(top, 0) + "\r\n".join(lines) + scroll_region(0, self.height)
                )
                self.repaint()
            case ScrollUpMsg(lines=lines, top_boundary=top, bottom_boundary=bottom):
                self._execute(
                    scroll_region(top, bottom)
                    + cursor_position(top, 0)
                    + insert_lines(len(lines))
                    + "\r\n".join(lines)
                    + scroll_region(0, self.height)
                )
                self.repaint()
            case ScrollDownMsg(lines=lines, top_boundary=top, bottom_boundary=bottom):
                self._execute(
                    scroll_region(top, bottom)
                    + cursor_position(bottom, 0)
                    + "".join("\r\n" + line for line in lines)
                    + scroll_region(0, self.height)
                )
                self.repaint()
            case ClearScrollAreaMsg():
                self.repaint()
