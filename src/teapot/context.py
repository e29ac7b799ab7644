# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import collections.abc
import typing

import trio

from .commontypes import ContextCanceledError


class Context:
    """A cancellation source that a program can be bound to from outside.

    cancel() may be called from any task (or from outside trio entirely, as long as
    it's the same thread); every bound program stops right away, with the given
    cause, or a ContextCanceledError if none was given.
    """

    def __init__(self):
        self._callbacks: list[collections.abc.Callable[[BaseException], None]] = []
        self._event = trio.Event()
        self.cause: typing.Optional[BaseException] = None

    @property
    def cancelled(self):
        return self._event.is_set()

    def cancel(self, cause: typing.Optional[BaseException] = None):
        if self.cancelled:
            return
        self.cause = cause if cause is not None else ContextCanceledError()
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self.cause)

    def add_callback(self, callback: collections.abc.Callable[[BaseException], None]):
        """Call callback(cause) on cancellation, immediately if that already happened."""
        if self.cancelled:
            callback(self.cause)
            return
        self._callbacks.append(callback)

    def remove_callback(self, callback: collections.abc.Callable[[BaseException], None]):
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    async def wait(self) -> BaseException:
        await self._event.wait()
        return self.cause
