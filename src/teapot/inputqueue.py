# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import collections
import logging
import typing

import trio

from .commontypes import InputReaderCanceledError

logger = logging.getLogger(__name__)

Chunk = typing.Union[bytes, str]

READ_SIZE = 256


class InputQueue(trio.abc.ReceiveChannel[Chunk]):
    """Adapts a push-style producer into something the input loop can pull from.

    push() never blocks; chunks are buffered until received. finish() ends the
    stream once the buffer drains, while fail() ends it immediately for waiting and
    future receivers alike. Whichever of the two happens first sticks. aclose() is
    the consumer walking away; anything still buffered is thrown out.
    """

    def __init__(self):
        self._chunks: collections.deque[Chunk] = collections.deque()
        self._lot = trio.lowlevel.ParkingLot()
        self._finished = False
        self._error: typing.Optional[BaseException] = None
        self._closed = False

    @property
    def done(self):
        return self._finished or self._error is not None

    def push(self, chunk: Chunk):
        if self.done or self._closed:
            return
        self._chunks.append(chunk)
        self._lot.unpark_all()

    def finish(self):
        if self.done:
            return
        self._finished = True
        self._lot.unpark_all()

    def fail(self, error: BaseException):
        if self.done:
            return
        self._error = error
        self._lot.unpark_all()

    def receive_nowait(self) -> Chunk:
        if self._closed:
            raise trio.ClosedResourceError
        if self._error is not None:
            raise self._error
        if self._chunks:
            return self._chunks.popleft()
        if self._finished:
            raise trio.EndOfChannel
        raise trio.WouldBlock

    async def receive(self) -> Chunk:
        await trio.lowlevel.checkpoint_if_cancelled()
        while True:
            try:
                chunk = self.receive_nowait()
            except trio.WouldBlock:
                await self._lot.park()
            else:
                await trio.lowlevel.cancel_shielded_checkpoint()
                return chunk

    async def aclose(self):
        self._closed = True
        self._chunks.clear()
        self._lot.unpark_all()
        await trio.lowlevel.checkpoint()


class InputReader:
    """Pumps an input stream into an InputQueue until cancelled or the stream ends."""

    def __init__(self, stream: trio.abc.ReceiveStream, read_size: int = READ_SIZE):
        self.stream = stream
        self.read_size = read_size
        self.queue = InputQueue()
        self._cancel_scope = trio.CancelScope()

    async def run(self, *, task_status=trio.TASK_STATUS_IGNORED):
        with self._cancel_scope:
            task_status.started()
            try:
                while True:
                    data = await self.stream.receive_some(self.read_size)
                    if not data:
                        break
                    self.queue.push(bytes(data))
            except (trio.ClosedResourceError, trio.BrokenResourceError) as exc:
                logger.debug("Input stream went away: %r", exc)
            except OSError as exc:
                self.queue.fail(exc)
                return
        # cancel() having gotten there first makes this a no-op
        self.queue.finish()

    def cancel(self):
        self.queue.fail(InputReaderCanceledError())
        self._cancel_scope.cancel()

    def close(self):
        self.queue.finish()
        self._cancel_scope.cancel()
