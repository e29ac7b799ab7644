# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""A strict UTF-8 decoder that works one code point at a time.

Python's own codecs want whole buffers; the input decoder needs to know how many
bytes a single rune took, and must never get stuck on garbage, so every invalid
form decodes to the replacement character with a width of exactly one byte.
"""
from __future__ import annotations

RUNE_ERROR = "�"
MAX_RUNE = 0x10FFFF
SURROGATE_MIN = 0xD800
SURROGATE_MAX = 0xDFFF

# (lead byte mask, lead byte value, payload mask, smallest legal code point) by width
_FORMS = (
    (0xE0, 0xC0, 0x1F, 0x80),
    (0xF0, 0xE0, 0x0F, 0x800),
    (0xF8, 0xF0, 0x07, 0x10000),
)


def _is_continuation(byte: int):
    return byte & 0xC0 == 0x80


def _width_for_lead(lead: int):
    if lead < 0x80:
        return 1
    for extra, (mask, value, _, _) in enumerate(_FORMS, start=2):
        if lead & mask == value:
            return extra
    return 0


def decode_rune(buf: bytes, offset: int = 0) -> tuple[str, int]:
    if offset >= len(buf):
        return RUNE_ERROR, 0
    lead = buf[offset]
    if lead < 0x80:
        return chr(lead), 1
    width = _width_for_lead(lead)
    if width == 0 or offset + width > len(buf):
        return RUNE_ERROR, 1
    _, _, payload_mask, minimum = _FORMS[width - 2]
    value = lead & payload_mask
    for byte in buf[offset + 1 : offset + width]:
        if not _is_continuation(byte):
            return RUNE_ERROR, 1
        value = (value << 6) | (byte & 0x3F)
    if value < minimum or value > MAX_RUNE:
        return RUNE_ERROR, 1
    if SURROGATE_MIN <= value <= SURROGATE_MAX:
        return RUNE_ERROR, 1
    return chr(value), width


def is_incomplete_rune(buf: bytes, offset: int = 0):
    """True if buf ends partway through an otherwise well-formed multi-byte rune."""
    if offset >= len(buf):
        return False
    width = _width_for_lead(buf[offset])
    available = len(buf) - offset
    if width < 2 or available >= width:
        return False
    return all(_is_continuation(b) for b in buf[offset + 1 :])


def decode_runes(buf: bytes) -> tuple[str, ...]:
    """Decode a whole buffer, silently dropping anything that isn't valid UTF-8."""
    runes = []
    offset = 0
    while offset < len(buf):
        rune, width = decode_rune(buf, offset)
        offset += width
        # a literal U+FFFD in the input is three bytes wide and is kept
        if rune == RUNE_ERROR and width == 1:
            continue
        runes.append(rune)
    return tuple(runes)
