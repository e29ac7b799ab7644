# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Turn raw terminal input bytes into messages.

detect_one_msg looks at the front of a buffer and reports how many bytes the first
recognizable message occupies. A width of zero means "can't tell yet"; that only
happens while more data might still arrive, so a caller that flushes with
can_have_more_data=False is guaranteed to make progress.
"""
from __future__ import annotations

import re
import typing

import msgspec

from .keys import Key, KeyType
from .mouse import X10_MOUSE_EVENT_LENGTH, MouseEvent, parse_sgr_mouse_event, parse_x10_mouse_event
from .runes import RUNE_ERROR, decode_rune, decode_runes, is_incomplete_rune
from .sequences import sequence_table

ESC = 0x1B
SPACE = 0x20
DEL = 0x7F

X10_MOUSE_PREFIX = b"\x1b[M"
SGR_MOUSE_PREFIX = b"\x1b[<"
FOCUS_IN = b"\x1b[I"
FOCUS_OUT = b"\x1b[O"
BRACKETED_PASTE_START = b"\x1b[200~"
BRACKETED_PASTE_END = b"\x1b[201~"

SGR_MOUSE_PATTERN = re.compile(rb"(\d+);(\d+);(\d+)([Mm])")
UNKNOWN_CSI_PATTERN = re.compile(rb"\x1b\[[\x30-\x3f]*[\x20-\x2f]*[\x40-\x7e]")
PARTIAL_CSI_PATTERN = re.compile(rb"\x1b\[[\x30-\x3f]*[\x20-\x2f]*\Z")


class FocusMsg(msgspec.Struct, frozen=True):
    pass


class BlurMsg(msgspec.Struct, frozen=True):
    pass


class UnknownInputByteMsg(msgspec.Struct, frozen=True):
    byte: int

    def __str__(self):
        return f"?{self.byte:#x}?"


class UnknownCSISequenceMsg(msgspec.Struct, frozen=True):
    sequence: bytes

    def __str__(self):
        return "?CSI" + str(list(self.sequence[2:])).replace(",", "") + "?"


InputMsg = typing.Union[Key, MouseEvent, FocusMsg, BlurMsg, UnknownInputByteMsg, UnknownCSISequenceMsg]

DetectResult = tuple[int, typing.Optional[typing.Any]]


def detect_sequence(buf: bytes) -> tuple[bool, int, typing.Optional[typing.Any]]:
    """Look buf up in the sequence table, falling back to a generic CSI match."""
    width, entry = sequence_table().lookup(buf)
    if entry is not None:
        return True, width, entry.as_key()
    match = UNKNOWN_CSI_PATTERN.match(buf)
    if match is not None:
        return True, match.end(), UnknownCSISequenceMsg(sequence=bytes(match.group()))
    return False, 0, None


def detect_report_focus(buf: bytes) -> tuple[bool, int, typing.Optional[typing.Any]]:
    # the marker has to be the whole buffer, or the arrow-key-alike "\x1b[O" prefix would swallow SS3 keys
    if buf == FOCUS_IN:
        return True, len(buf), FocusMsg()
    if buf == FOCUS_OUT:
        return True, len(buf), BlurMsg()
    return False, 0, None


def detect_bracketed_paste(buf: bytes, can_have_more_data: bool = True) -> tuple[bool, int, typing.Optional[Key]]:
    """Recognize a bracketed paste at the start of buf.

    Returns (matched, width, key). While the end marker is missing the width is 0, so
    the caller waits for more data; once the stream has ended, the partial paste is
    returned as a paste key covering the rest of the buffer, so decoding always advances.
    """
    if not buf.startswith(BRACKETED_PASTE_START):
        return False, 0, None
    body_start = len(BRACKETED_PASTE_START)
    end = buf.find(BRACKETED_PASTE_END, body_start)
    if end == -1:
        if can_have_more_data:
            return True, 0, None
        # the stream ended mid-paste; hand over what we have rather than dropping it
        return True, len(buf), _paste_key(buf[body_start:])
    return True, end + len(BRACKETED_PASTE_END), _paste_key(buf[body_start:end])


def _paste_key(payload: bytes):
    return Key(type=KeyType.RUNES, runes=decode_runes(payload), paste=True)


def _detect_mouse(buf: bytes, can_have_more_data: bool) -> tuple[bool, int, typing.Optional[typing.Any]]:
    if buf.startswith(X10_MOUSE_PREFIX):
        if len(buf) >= X10_MOUSE_EVENT_LENGTH:
            return True, X10_MOUSE_EVENT_LENGTH, parse_x10_mouse_event(buf[:X10_MOUSE_EVENT_LENGTH])
        if can_have_more_data:
            return True, 0, None
    elif buf.startswith(SGR_MOUSE_PREFIX):
        match = SGR_MOUSE_PATTERN.match(buf, len(SGR_MOUSE_PREFIX))
        if match is not None:
            button, x, y = (int(g) for g in match.group(1, 2, 3))
            return True, match.end(), parse_sgr_mouse_event(button, x, y, release=match.group(4) == b"m")
    return False, 0, None


def _waiting_on_sequence(buf: bytes):
    return sequence_table().could_extend(buf) or PARTIAL_CSI_PATTERN.match(buf) is not None


def detect_one_msg(buf: bytes, can_have_more_data: bool) -> DetectResult:
    if not buf:
        return 0, None

    for detector in (
        lambda: _detect_mouse(buf, can_have_more_data),
        lambda: detect_report_focus(buf),
        lambda: detect_bracketed_paste(buf, can_have_more_data),
        lambda: detect_sequence(buf),
    ):
        found, width, msg = detector()
        if found:
            return width, msg

    if can_have_more_data and _waiting_on_sequence(buf):
        return 0, None

    alt = False
    offset = 0
    if buf[0] == ESC:
        alt = True
        offset = 1
        if offset < len(buf) and buf[offset] == 0:
            return 2, Key(type=KeyType.NULL, alt=True)
    elif buf[0] == 0:
        return 1, Key(type=KeyType.NULL)

    runes: list[str] = []
    while offset < len(buf):
        rune, width = decode_rune(buf, offset)
        if rune == RUNE_ERROR and width == 1:
            if can_have_more_data and is_incomplete_rune(buf, offset):
                return 0, None
            break
        if ord(rune) <= 0x1F or ord(rune) == DEL or ord(rune) == SPACE:
            break
        runes.append(rune)
        offset += width
        if alt:
            break

    if offset >= len(buf) and can_have_more_data:
        # the run might keep going in the next chunk
        return 0, None

    if runes:
        if runes == [" "]:
            return offset, Key(type=KeyType.SPACE, runes=(" ",), alt=alt)
        return offset, Key(type=KeyType.RUNES, runes=tuple(runes), alt=alt)

    if alt:
        # a bare ESC, or an ESC followed by something we can't pair it with. Only the ESC is
        # consumed, rather than reporting the following byte as unknown; that byte is
        # decoded on its own next time round.
        return 1, Key(type=KeyType.ESC)

    return 1, UnknownInputByteMsg(byte=buf[0])


def detect_all(buf: bytes) -> list[typing.Any]:
    """Decode a complete buffer, as if the stream ended right after it."""
    msgs = []
    while buf:
        width, msg = detect_one_msg(buf, can_have_more_data=False)
        buf = buf[width:]
        if msg is not None:
            msgs.append(msg)
    return msgs
