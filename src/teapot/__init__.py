# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from . import commands
from .commontypes import (
    ContextCanceledError,
    InputReaderCanceledError,
    Interrupted,
    Killed,
    Panicked,
    ProgramFinishedError,
    ProgramInterruptedError,
    ProgramKilledError,
    ProgramPanicError,
    Quit,
    SuspendProcessError,
    TeapotError,
    TTYError,
)
from .context import Context
from .decoder import BlurMsg, FocusMsg, UnknownCSISequenceMsg, UnknownInputByteMsg, detect_one_msg
from .driver import read_ansi_inputs
from .keys import Key, KeyMsg, KeyType
from .messages import (
    BatchMsg,
    ClearScreenMsg,
    ClearScrollAreaMsg,
    DisableBracketedPasteMsg,
    DisableMouseMsg,
    DisableReportFocusMsg,
    EnableBracketedPasteMsg,
    EnableMouseAllMotionMsg,
    EnableMouseCellMotionMsg,
    EnableReportFocusMsg,
    EnterAltScreenMsg,
    ExecMsg,
    ExitAltScreenMsg,
    HideCursorMsg,
    InterruptMsg,
    PrintLineMsg,
    QuitMsg,
    ResumeMsg,
    ScrollDownMsg,
    ScrollUpMsg,
    SequenceMsg,
    SetWindowTitleMsg,
    ShowCursorMsg,
    SuspendMsg,
    SyncScrollAreaMsg,
    WindowSizeMsg,
)
from .mouse import MouseAction, MouseButton, MouseEvent, MouseEventType, MouseMsg
from .options import MouseMode, ProgramOptions
from .program import Model, Program, ProgramState, run_program
from .renderer import NilRenderer, Renderer, StandardRenderer
