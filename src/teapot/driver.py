# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import collections.abc
import inspect
import logging
import math
import typing

import trio

from .decoder import BRACKETED_PASTE_START, detect_one_msg

logger = logging.getLogger(__name__)

Emit = collections.abc.Callable[[typing.Any], typing.Any]
ChunkSource = typing.Union[
    trio.abc.ReceiveChannel,
    collections.abc.AsyncIterable[typing.Union[bytes, str]],
    collections.abc.Iterable[typing.Union[bytes, str]],
]


def normalize_chunk(chunk: typing.Union[bytes, bytearray, memoryview, str]) -> bytes:
    if isinstance(chunk, str):
        return chunk.encode("utf-8")
    return bytes(chunk)


async def _emit(emit: Emit, msg):
    result = emit(msg)
    if inspect.isawaitable(result):
        await result


async def consume_buffer(buf: bytes, can_have_more_data: bool, emit: Emit) -> bytes:
    """Emit every message at the front of buf; return the undecided remainder."""
    offset = 0
    while offset < len(buf):
        width, msg = detect_one_msg(buf[offset:], can_have_more_data)
        if width == 0:
            break
        offset += width
        if msg is not None:
            await _emit(emit, msg)
    return buf[offset:]


def _receiver(source: ChunkSource):
    if isinstance(source, trio.abc.ReceiveChannel):

        async def receive():
            try:
                return await source.receive()
            except trio.EndOfChannel:
                raise StopAsyncIteration

        return receive, True
    if isinstance(source, collections.abc.AsyncIterable):
        return source.__aiter__().__anext__, False
    iterator = iter(source)

    async def receive_sync():
        await trio.lowlevel.checkpoint()
        try:
            return next(iterator)
        except StopIteration:
            raise StopAsyncIteration

    return receive_sync, False


async def read_ansi_inputs(source: ChunkSource, emit: Emit, *, flush_timeout: typing.Optional[float] = None):
    """Decode chunks from source into messages, handing each to emit in order.

    Bytes the decoder can't make a call on yet are held over until the next chunk.
    If flush_timeout is set (and source is a trio channel, which can be waited on
    without being damaged by cancellation), a held-over remainder that sits for
    that long is decoded as if the stream had ended there. A half-received
    bracketed paste is exempt and is always waited for.
    """
    receive, can_time_out = _receiver(source)
    pending = b""
    while True:
        timeout = math.inf
        if can_time_out and flush_timeout is not None and pending and not pending.startswith(BRACKETED_PASTE_START):
            timeout = flush_timeout
        with trio.move_on_after(timeout) as cancel_scope:
            try:
                chunk = await receive()
            except StopAsyncIteration:
                break
        if cancel_scope.cancelled_caught:
            logger.debug("Flushing %d stale pending byte(s)", len(pending))
            pending = await consume_buffer(pending, False, emit)
            continue
        pending = await consume_buffer(pending + normalize_chunk(chunk), True, emit)

    while pending:
        previous_length = len(pending)
        pending = await consume_buffer(pending, False, emit)
        if len(pending) == previous_length:
            break
