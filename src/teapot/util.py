# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import inspect
import typing

import outcome
import trio

V = typing.TypeVar("V")


async def maybe_await(result):
    if inspect.isawaitable(result):
        return await result
    return result


class Future(typing.Generic[V]):
    _outcome: typing.Optional[outcome.Outcome]

    def __init__(self):
        self._event = trio.Event()
        self._outcome = None

    def finalize(self, result: V | outcome.Outcome[V]):
        if self._outcome is not None:
            raise Exception("already finalized")
        if isinstance(result, outcome.Outcome):
            self._outcome = result
        else:
            self._outcome = outcome.Value(result)
        self._event.set()

    async def wait(self) -> V:
        await self._event.wait()
        # unwrap() is single-use, and there may be several waiters
        if isinstance(self._outcome, outcome.Error):
            raise self._outcome.error
        return self._outcome.value

    @property
    def is_final(self):
        return self._event.is_set()
