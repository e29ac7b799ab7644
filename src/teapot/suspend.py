# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import errno
import logging
import os
import signal

import trio

from .commontypes import SuspendProcessError

logger = logging.getLogger(__name__)

# errors that mean "no process group to signal"; fall back to signalling ourselves
_GROUP_FALLBACK_ERRNOS = frozenset({errno.ESRCH, errno.EPERM, errno.EINVAL})


def suspend_supported():
    return hasattr(signal, "SIGTSTP") and hasattr(signal, "SIGCONT")


def _send_stop():
    pid = os.getpid()
    try:
        os.killpg(os.getpgid(pid), signal.SIGTSTP)
    except OSError as exc:
        if exc.errno not in _GROUP_FALLBACK_ERRNOS:
            raise SuspendProcessError("unable to suspend process group", cause=exc) from exc
        logger.debug("Could not stop process group (%s), stopping just this process", exc)
        try:
            os.kill(pid, signal.SIGTSTP)
        except OSError as inner:
            raise SuspendProcessError("unable to suspend process", cause=inner) from inner


async def suspend_process():
    """Stop the process (as ctrl+z would) and return once something continues it."""
    if not suspend_supported():
        return
    with trio.open_signal_receiver(signal.SIGCONT) as signals:
        _send_stop()
        async for _ in signals:
            break
    logger.debug("Resumed after suspend")
