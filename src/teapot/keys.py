# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import enum

import msgspec


class KeyType(enum.IntEnum):
    # C0 control characters keep their byte values.
    NULL = 0
    CTRL_A = 1
    CTRL_B = 2
    BREAK = 3
    CTRL_D = 4
    CTRL_E = 5
    CTRL_F = 6
    CTRL_G = 7
    CTRL_H = 8
    TAB = 9
    CTRL_J = 10
    CTRL_K = 11
    CTRL_L = 12
    ENTER = 13
    CTRL_N = 14
    CTRL_O = 15
    CTRL_P = 16
    CTRL_Q = 17
    CTRL_R = 18
    CTRL_S = 19
    CTRL_T = 20
    CTRL_U = 21
    CTRL_V = 22
    CTRL_W = 23
    CTRL_X = 24
    CTRL_Y = 25
    CTRL_Z = 26
    ESC = 27
    CTRL_BACKSLASH = 28
    CTRL_CLOSE_BRACKET = 29
    CTRL_CARET = 30
    CTRL_UNDERSCORE = 31
    BACKSPACE = 127

    # aliases
    CTRL_AT = 0
    CTRL_C = 3
    CTRL_I = 9
    CTRL_M = 13
    ESCAPE = 27
    CTRL_OPEN_BRACKET = 27
    CTRL_QUESTION_MARK = 127

    # Everything else is negative so it can never collide with a byte value.
    RUNES = -1
    UP = -2
    DOWN = -3
    RIGHT = -4
    LEFT = -5
    SHIFT_TAB = -6
    HOME = -7
    END = -8
    PGUP = -9
    PGDOWN = -10
    CTRL_PGUP = -11
    CTRL_PGDOWN = -12
    DELETE = -13
    INSERT = -14
    SPACE = -15
    CTRL_UP = -16
    CTRL_DOWN = -17
    CTRL_RIGHT = -18
    CTRL_LEFT = -19
    CTRL_HOME = -20
    CTRL_END = -21
    SHIFT_UP = -22
    SHIFT_DOWN = -23
    SHIFT_RIGHT = -24
    SHIFT_LEFT = -25
    SHIFT_HOME = -26
    SHIFT_END = -27
    CTRL_SHIFT_UP = -28
    CTRL_SHIFT_DOWN = -29
    CTRL_SHIFT_LEFT = -30
    CTRL_SHIFT_RIGHT = -31
    CTRL_SHIFT_HOME = -32
    CTRL_SHIFT_END = -33
    F1 = -34
    F2 = -35
    F3 = -36
    F4 = -37
    F5 = -38
    F6 = -39
    F7 = -40
    F8 = -41
    F9 = -42
    F10 = -43
    F11 = -44
    F12 = -45
    F13 = -46
    F14 = -47
    F15 = -48
    F16 = -49
    F17 = -50
    F18 = -51
    F19 = -52
    F20 = -53


KEY_NAMES: dict[int, str] = {
    KeyType.NULL: "ctrl+@",
    KeyType.TAB: "tab",
    KeyType.ENTER: "enter",
    KeyType.ESC: "esc",
    KeyType.CTRL_BACKSLASH: "ctrl+\\",
    KeyType.CTRL_CLOSE_BRACKET: "ctrl+]",
    KeyType.CTRL_CARET: "ctrl+^",
    KeyType.CTRL_UNDERSCORE: "ctrl+_",
    KeyType.BACKSPACE: "backspace",
    KeyType.RUNES: "runes",
    KeyType.UP: "up",
    KeyType.DOWN: "down",
    KeyType.RIGHT: "right",
    KeyType.LEFT: "left",
    KeyType.SPACE: " ",
    KeyType.SHIFT_TAB: "shift+tab",
    KeyType.HOME: "home",
    KeyType.END: "end",
    KeyType.CTRL_HOME: "ctrl+home",
    KeyType.CTRL_END: "ctrl+end",
    KeyType.SHIFT_HOME: "shift+home",
    KeyType.SHIFT_END: "shift+end",
    KeyType.CTRL_SHIFT_HOME: "ctrl+shift+home",
    KeyType.CTRL_SHIFT_END: "ctrl+shift+end",
    KeyType.PGUP: "pgup",
    KeyType.PGDOWN: "pgdown",
    KeyType.CTRL_PGUP: "ctrl+pgup",
    KeyType.CTRL_PGDOWN: "ctrl+pgdown",
    KeyType.DELETE: "delete",
    KeyType.INSERT: "insert",
    KeyType.CTRL_UP: "ctrl+up",
    KeyType.CTRL_DOWN: "ctrl+down",
    KeyType.CTRL_RIGHT: "ctrl+right",
    KeyType.CTRL_LEFT: "ctrl+left",
    KeyType.SHIFT_UP: "shift+up",
    KeyType.SHIFT_DOWN: "shift+down",
    KeyType.SHIFT_RIGHT: "shift+right",
    KeyType.SHIFT_LEFT: "shift+left",
    KeyType.CTRL_SHIFT_UP: "ctrl+shift+up",
    KeyType.CTRL_SHIFT_DOWN: "ctrl+shift+down",
    KeyType.CTRL_SHIFT_LEFT: "ctrl+shift+left",
    KeyType.CTRL_SHIFT_RIGHT: "ctrl+shift+right",
}
# ctrl+a through ctrl+z, minus the ones with names of their own
for _value in range(KeyType.CTRL_A, KeyType.CTRL_Z + 1):
    KEY_NAMES.setdefault(_value, "ctrl+" + chr(ord("a") + _value - 1))
for _number in range(1, 21):
    KEY_NAMES[KeyType[f"F{_number}"]] = f"f{_number}"
del _value, _number


class Key(msgspec.Struct, frozen=True):
    type: KeyType
    runes: tuple[str, ...] = ()
    alt: bool = False
    paste: bool = False

    def __str__(self):
        if self.type == KeyType.RUNES:
            text = "".join(self.runes)
            if self.paste:
                text = f"[{text}]"
            return ("alt+" if self.alt else "") + text
        name = KEY_NAMES.get(self.type)
        if name is None:
            return ""
        return ("alt+" if self.alt else "") + name

    @classmethod
    def from_runes(cls, text: str, alt: bool = False):
        return cls(type=KeyType.RUNES, runes=tuple(text), alt=alt)


KeyMsg = Key
