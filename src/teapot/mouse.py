# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import enum

import msgspec

X10_MOUSE_BYTE_OFFSET = 32
X10_MOUSE_EVENT_LENGTH = 6

_BIT_SHIFT = 0b0000_0100
_BIT_ALT = 0b0000_1000
_BIT_CTRL = 0b0001_0000
_BIT_MOTION = 0b0010_0000
_BIT_WHEEL = 0b0100_0000
_BIT_ADD = 0b1000_0000
_BITS_MASK = 0b0000_0011


class MouseAction(enum.IntEnum):
    PRESS = 0
    RELEASE = 1
    MOTION = 2


class MouseButton(enum.IntEnum):
    NONE = 0
    LEFT = 1
    MIDDLE = 2
    RIGHT = 3
    WHEEL_UP = 4
    WHEEL_DOWN = 5
    WHEEL_LEFT = 6
    WHEEL_RIGHT = 7
    BACKWARD = 8
    FORWARD = 9
    BUTTON_10 = 10
    BUTTON_11 = 11


class MouseEventType(enum.IntEnum):
    UNKNOWN = 0
    LEFT = 1
    RIGHT = 2
    MIDDLE = 3
    RELEASE = 4
    WHEEL_UP = 5
    WHEEL_DOWN = 6
    WHEEL_LEFT = 7
    WHEEL_RIGHT = 8
    BACKWARD = 9
    FORWARD = 10
    MOTION = 11


ACTION_LABELS = {
    MouseAction.PRESS: "press",
    MouseAction.RELEASE: "release",
    MouseAction.MOTION: "motion",
}

BUTTON_LABELS = {
    MouseButton.NONE: "none",
    MouseButton.LEFT: "left",
    MouseButton.MIDDLE: "middle",
    MouseButton.RIGHT: "right",
    MouseButton.WHEEL_UP: "wheel up",
    MouseButton.WHEEL_DOWN: "wheel down",
    MouseButton.WHEEL_LEFT: "wheel left",
    MouseButton.WHEEL_RIGHT: "wheel right",
    MouseButton.BACKWARD: "backward",
    MouseButton.FORWARD: "forward",
    MouseButton.BUTTON_10: "button 10",
    MouseButton.BUTTON_11: "button 11",
}

WHEEL_BUTTONS = frozenset(
    {MouseButton.WHEEL_UP, MouseButton.WHEEL_DOWN, MouseButton.WHEEL_LEFT, MouseButton.WHEEL_RIGHT}
)

_BUTTON_EVENT_TYPES = {
    MouseButton.LEFT: MouseEventType.LEFT,
    MouseButton.MIDDLE: MouseEventType.MIDDLE,
    MouseButton.RIGHT: MouseEventType.RIGHT,
    MouseButton.WHEEL_UP: MouseEventType.WHEEL_UP,
    MouseButton.WHEEL_DOWN: MouseEventType.WHEEL_DOWN,
    MouseButton.WHEEL_LEFT: MouseEventType.WHEEL_LEFT,
    MouseButton.WHEEL_RIGHT: MouseEventType.WHEEL_RIGHT,
    MouseButton.BACKWARD: MouseEventType.BACKWARD,
    MouseButton.FORWARD: MouseEventType.FORWARD,
}


class MouseEvent(msgspec.Struct, frozen=True, kw_only=True):
    x: int
    y: int
    shift: bool = False
    alt: bool = False
    ctrl: bool = False
    action: MouseAction = MouseAction.PRESS
    button: MouseButton = MouseButton.NONE
    type: MouseEventType = MouseEventType.UNKNOWN

    def is_wheel(self):
        return self.button in WHEEL_BUTTONS

    def __str__(self):
        prefix = ""
        if self.ctrl:
            prefix += "ctrl+"
        if self.alt:
            prefix += "alt+"
        if self.shift:
            prefix += "shift+"

        if self.button == MouseButton.NONE:
            if self.action in (MouseAction.MOTION, MouseAction.RELEASE):
                return prefix + ACTION_LABELS[self.action]
            return prefix + "unknown"
        if self.is_wheel():
            return prefix + BUTTON_LABELS[self.button]
        return f"{prefix}{BUTTON_LABELS.get(self.button, '')} {ACTION_LABELS.get(self.action, '')}".rstrip()


MouseMsg = MouseEvent


def event_type_for(action: MouseAction, button: MouseButton) -> MouseEventType:
    if action == MouseAction.RELEASE:
        return MouseEventType.RELEASE
    if action == MouseAction.MOTION:
        # dragging with a button held reports as that button
        if button in WHEEL_BUTTONS:
            return MouseEventType.MOTION
        return _BUTTON_EVENT_TYPES.get(button, MouseEventType.MOTION)
    return _BUTTON_EVENT_TYPES.get(button, MouseEventType.UNKNOWN)


def _parse_button(encoded: int, is_sgr: bool):
    if not is_sgr:
        encoded -= X10_MOUSE_BYTE_OFFSET
    index = encoded & _BITS_MASK
    action = MouseAction.PRESS
    if encoded & _BIT_ADD:
        button = MouseButton(MouseButton.BACKWARD + index)
    elif encoded & _BIT_WHEEL:
        button = MouseButton(MouseButton.WHEEL_UP + index)
    elif index == _BITS_MASK:
        # legacy encoding: all ones means "some button was released"
        button = MouseButton.NONE
        action = MouseAction.RELEASE
    else:
        button = MouseButton(MouseButton.LEFT + index)

    if encoded & _BIT_MOTION and button not in WHEEL_BUTTONS:
        action = MouseAction.MOTION

    return dict(
        shift=bool(encoded & _BIT_SHIFT),
        alt=bool(encoded & _BIT_ALT),
        ctrl=bool(encoded & _BIT_CTRL),
        action=action,
        button=button,
    )


def parse_x10_mouse_event(buf: bytes) -> MouseEvent:
    """Parse a legacy (X10) mouse report: ESC [ M Cb Cx Cy.

    Coordinates are offset by 32 and start at 1; we report them zero-based.
    """
    fields = _parse_button(buf[3], is_sgr=False)
    x = buf[4] - X10_MOUSE_BYTE_OFFSET - 1
    y = buf[5] - X10_MOUSE_BYTE_OFFSET - 1
    return MouseEvent(x=x, y=y, type=event_type_for(fields["action"], fields["button"]), **fields)


def parse_sgr_mouse_event(encoded: int, x: int, y: int, release: bool) -> MouseEvent:
    """Build an event from the pieces of an SGR report: ESC [ < Cb ; Cx ; Cy (M | m)."""
    fields = _parse_button(encoded, is_sgr=True)
    if release and fields["action"] != MouseAction.MOTION and fields["button"] not in WHEEL_BUTTONS:
        fields["action"] = MouseAction.RELEASE
    return MouseEvent(x=x - 1, y=y - 1, type=event_type_for(fields["action"], fields["button"]), **fields)


def encode_x10_mouse_event(button: int, x: int, y: int) -> bytes:
    """Inverse of parse_x10_mouse_event, for the raw button byte before offsetting.

    Positions past the encodable range wrap around, just as they do on the wire.
    """
    offset = X10_MOUSE_BYTE_OFFSET
    return bytes((0x1B, ord("["), ord("M"), (button + offset) & 0xFF, (x + offset + 1) & 0xFF, (y + offset + 1) & 0xFF))


def encode_sgr_mouse_event(button: int, x: int, y: int, release: bool = False) -> bytes:
    return f"\x1b[<{button};{x + 1};{y + 1}{'m' if release else 'M'}".encode("ascii")
