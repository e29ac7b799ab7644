# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import functools
import typing

import msgspec
import pygtrie

from .keys import Key, KeyType

ESC = "\x1b"


class SequenceEntry(msgspec.Struct, frozen=True):
    type: KeyType
    alt: bool = False
    runes: tuple[str, ...] = ()

    def as_key(self):
        return Key(type=self.type, runes=self.runes, alt=self.alt)


def _e(key_type: KeyType, alt: bool = False):
    return SequenceEntry(type=key_type, alt=alt)


K = KeyType

# Named escape sequences, as sent by the usual suspects (xterm, urxvt, the Linux console, PowerShell).
BASE_SEQUENCES: dict[str, SequenceEntry] = {
    # arrow keys
    "\x1b[A": _e(K.UP),
    "\x1b[B": _e(K.DOWN),
    "\x1b[C": _e(K.RIGHT),
    "\x1b[D": _e(K.LEFT),
    "\x1b[1;2A": _e(K.SHIFT_UP),
    "\x1b[1;2B": _e(K.SHIFT_DOWN),
    "\x1b[1;2C": _e(K.SHIFT_RIGHT),
    "\x1b[1;2D": _e(K.SHIFT_LEFT),
    "\x1b[OA": _e(K.SHIFT_UP),  # DECCKM
    "\x1b[OB": _e(K.SHIFT_DOWN),
    "\x1b[OC": _e(K.SHIFT_RIGHT),
    "\x1b[OD": _e(K.SHIFT_LEFT),
    "\x1b[a": _e(K.SHIFT_UP),  # urxvt
    "\x1b[b": _e(K.SHIFT_DOWN),
    "\x1b[c": _e(K.SHIFT_RIGHT),
    "\x1b[d": _e(K.SHIFT_LEFT),
    "\x1b[1;3A": _e(K.UP, True),
    "\x1b[1;3B": _e(K.DOWN, True),
    "\x1b[1;3C": _e(K.RIGHT, True),
    "\x1b[1;3D": _e(K.LEFT, True),
    "\x1b[1;4A": _e(K.SHIFT_UP, True),
    "\x1b[1;4B": _e(K.SHIFT_DOWN, True),
    "\x1b[1;4C": _e(K.SHIFT_RIGHT, True),
    "\x1b[1;4D": _e(K.SHIFT_LEFT, True),
    "\x1b[1;5A": _e(K.CTRL_UP),
    "\x1b[1;5B": _e(K.CTRL_DOWN),
    "\x1b[1;5C": _e(K.CTRL_RIGHT),
    "\x1b[1;5D": _e(K.CTRL_LEFT),
    "\x1b[Oa": _e(K.CTRL_UP, True),  # urxvt
    "\x1b[Ob": _e(K.CTRL_DOWN, True),
    "\x1b[Oc": _e(K.CTRL_RIGHT, True),
    "\x1b[Od": _e(K.CTRL_LEFT, True),
    "\x1b[1;6A": _e(K.CTRL_SHIFT_UP),
    "\x1b[1;6B": _e(K.CTRL_SHIFT_DOWN),
    "\x1b[1;6C": _e(K.CTRL_SHIFT_RIGHT),
    "\x1b[1;6D": _e(K.CTRL_SHIFT_LEFT),
    "\x1b[1;7A": _e(K.CTRL_UP, True),
    "\x1b[1;7B": _e(K.CTRL_DOWN, True),
    "\x1b[1;7C": _e(K.CTRL_RIGHT, True),
    "\x1b[1;7D": _e(K.CTRL_LEFT, True),
    "\x1b[1;8A": _e(K.CTRL_SHIFT_UP, True),
    "\x1b[1;8B": _e(K.CTRL_SHIFT_DOWN, True),
    "\x1b[1;8C": _e(K.CTRL_SHIFT_RIGHT, True),
    "\x1b[1;8D": _e(K.CTRL_SHIFT_LEFT, True),
    # miscellaneous keys
    "\x1b[Z": _e(K.SHIFT_TAB),
    "\x1b[2~": _e(K.INSERT),
    "\x1b[3;2~": _e(K.INSERT, True),
    "\x1b[3~": _e(K.DELETE),
    "\x1b[3;3~": _e(K.DELETE, True),
    "\x1b[5~": _e(K.PGUP),
    "\x1b[5;3~": _e(K.PGUP, True),
    "\x1b[5;5~": _e(K.CTRL_PGUP),
    "\x1b[5^": _e(K.CTRL_PGUP),  # urxvt
    "\x1b[5;7~": _e(K.CTRL_PGUP, True),
    "\x1b[6~": _e(K.PGDOWN),
    "\x1b[6;3~": _e(K.PGDOWN, True),
    "\x1b[6;5~": _e(K.CTRL_PGDOWN),
    "\x1b[6^": _e(K.CTRL_PGDOWN),  # urxvt
    "\x1b[6;7~": _e(K.CTRL_PGDOWN, True),
    "\x1b[1~": _e(K.HOME),
    "\x1b[H": _e(K.HOME),  # xterm, lxterm
    "\x1b[1;3H": _e(K.HOME, True),
    "\x1b[1;5H": _e(K.CTRL_HOME),
    "\x1b[1;7H": _e(K.CTRL_HOME, True),
    "\x1b[1;2H": _e(K.SHIFT_HOME),
    "\x1b[1;4H": _e(K.SHIFT_HOME, True),
    "\x1b[1;6H": _e(K.CTRL_SHIFT_HOME),
    "\x1b[1;8H": _e(K.CTRL_SHIFT_HOME, True),
    "\x1b[4~": _e(K.END),
    "\x1b[F": _e(K.END),  # xterm, lxterm
    "\x1b[1;3F": _e(K.END, True),
    "\x1b[1;5F": _e(K.CTRL_END),
    "\x1b[1;7F": _e(K.CTRL_END, True),
    "\x1b[1;2F": _e(K.SHIFT_END),
    "\x1b[1;4F": _e(K.SHIFT_END, True),
    "\x1b[1;6F": _e(K.CTRL_SHIFT_END),
    "\x1b[1;8F": _e(K.CTRL_SHIFT_END, True),
    "\x1b[7~": _e(K.HOME),  # urxvt
    "\x1b[7^": _e(K.CTRL_HOME),
    "\x1b[7$": _e(K.SHIFT_HOME),
    "\x1b[7@": _e(K.CTRL_SHIFT_HOME),
    "\x1b[8~": _e(K.END),  # urxvt
    "\x1b[8^": _e(K.CTRL_END),
    "\x1b[8$": _e(K.SHIFT_END),
    "\x1b[8@": _e(K.CTRL_SHIFT_END),
    # function keys, Linux console
    "\x1b[[A": _e(K.F1),
    "\x1b[[B": _e(K.F2),
    "\x1b[[C": _e(K.F3),
    "\x1b[[D": _e(K.F4),
    "\x1b[[E": _e(K.F5),
    # function keys, X11
    "\x1bOP": _e(K.F1),  # vt100, xterm
    "\x1bOQ": _e(K.F2),
    "\x1bOR": _e(K.F3),
    "\x1bOS": _e(K.F4),
    "\x1b[1;3P": _e(K.F1, True),
    "\x1b[1;3Q": _e(K.F2, True),
    "\x1b[1;3R": _e(K.F3, True),
    "\x1b[1;3S": _e(K.F4, True),
    "\x1b[11~": _e(K.F1),  # urxvt
    "\x1b[12~": _e(K.F2),
    "\x1b[13~": _e(K.F3),
    "\x1b[14~": _e(K.F4),
    "\x1b[15~": _e(K.F5),  # vt100, xterm, also urxvt
    "\x1b[15;3~": _e(K.F5, True),
    "\x1b[17~": _e(K.F6),
    "\x1b[18~": _e(K.F7),
    "\x1b[19~": _e(K.F8),
    "\x1b[20~": _e(K.F9),
    "\x1b[21~": _e(K.F10),
    "\x1b[17;3~": _e(K.F6, True),
    "\x1b[18;3~": _e(K.F7, True),
    "\x1b[19;3~": _e(K.F8, True),
    "\x1b[20;3~": _e(K.F9, True),
    "\x1b[21;3~": _e(K.F10, True),
    "\x1b[23~": _e(K.F11),
    "\x1b[24~": _e(K.F12),
    "\x1b[23;3~": _e(K.F11, True),
    "\x1b[24;3~": _e(K.F12, True),
    "\x1b[1;2P": _e(K.F13),
    "\x1b[1;2Q": _e(K.F14),
    "\x1b[25~": _e(K.F13),
    "\x1b[26~": _e(K.F14),
    "\x1b[25;3~": _e(K.F13, True),
    "\x1b[26;3~": _e(K.F14, True),
    "\x1b[1;2R": _e(K.F15),
    "\x1b[1;2S": _e(K.F16),
    "\x1b[28~": _e(K.F15),
    "\x1b[29~": _e(K.F16),
    "\x1b[28;3~": _e(K.F15, True),
    "\x1b[29;3~": _e(K.F16, True),
    "\x1b[15;2~": _e(K.F17),
    "\x1b[17;2~": _e(K.F18),
    "\x1b[18;2~": _e(K.F19),
    "\x1b[19;2~": _e(K.F20),
    "\x1b[31~": _e(K.F17),
    "\x1b[32~": _e(K.F18),
    "\x1b[33~": _e(K.F19),
    "\x1b[34~": _e(K.F20),
    # PowerShell
    "\x1bOA": _e(K.UP),
    "\x1bOB": _e(K.DOWN),
    "\x1bOC": _e(K.RIGHT),
    "\x1bOD": _e(K.LEFT),
}

del K


def _key(seq: str) -> tuple[int, ...]:
    return tuple(seq.encode("latin-1"))


class SequenceTable:
    """Exact byte sequences mapped to key descriptions, with longest-match lookup.

    Built once by build_sequence_table; nothing mutates it afterwards.
    """

    def __init__(self, entries: typing.Mapping[str, SequenceEntry]):
        self._trie = pygtrie.Trie({_key(seq): entry for seq, entry in entries.items()})
        self.lengths: tuple[int, ...] = tuple(sorted({len(seq) for seq in entries}, reverse=True))

    def __len__(self):
        return len(self._trie)

    def __contains__(self, seq: bytes):
        return tuple(seq) in self._trie

    def __getitem__(self, seq: bytes) -> SequenceEntry:
        return self._trie[tuple(seq)]

    def items(self):
        for seq, entry in self._trie.iteritems():
            yield bytes(seq), entry

    def lookup(self, buf: bytes) -> tuple[int, typing.Optional[SequenceEntry]]:
        """Find the longest registered sequence that buf starts with."""
        for length in self.lengths:
            if length > len(buf):
                continue
            candidate = tuple(buf[:length])
            if candidate in self._trie:
                return length, self._trie[candidate]
        return 0, None

    def could_extend(self, buf: bytes):
        """True if buf is a proper prefix of some registered sequence."""
        if not buf or len(buf) >= self.lengths[0]:
            return False
        return self._trie.has_subtrie(tuple(buf))


def build_sequence_table() -> SequenceTable:
    entries: dict[str, SequenceEntry] = {}
    for seq, entry in BASE_SEQUENCES.items():
        entries[seq] = entry
        if not entry.alt:
            entries[ESC + seq] = SequenceEntry(type=entry.type, alt=True)
    for value in (*range(KeyType.NULL + 1, KeyType.CTRL_UNDERSCORE + 1), KeyType.BACKSPACE):
        if value == KeyType.ESC:
            continue
        entries[chr(value)] = SequenceEntry(type=KeyType(value))
        entries[ESC + chr(value)] = SequenceEntry(type=KeyType(value), alt=True)
    entries[" "] = SequenceEntry(type=KeyType.SPACE, runes=(" ",))
    entries[ESC + " "] = SequenceEntry(type=KeyType.SPACE, alt=True, runes=(" ",))
    entries[ESC + ESC] = SequenceEntry(type=KeyType.ESC, alt=True)
    return SequenceTable(entries)


@functools.cache
def sequence_table() -> SequenceTable:
    return build_sequence_table()
