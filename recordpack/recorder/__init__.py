"""Recorded assertion subsystem for RecordKit."""

from recordpack.recorder.engine import (
    AssertionRecorder,
    RecordingModeRecorder,
    ReplayModeRecorder,
    create_recorder,
)
from recordpack.recorder.exceptions import (
    PrematureEndError,
    RecordedAssertionError,
    RecordedValueMismatchError,
    UnexpectedAssertionError,
)
from recordpack.recorder.mode import UPDATE_ENV_VAR, is_recording

__all__ = [
    "UPDATE_ENV_VAR",
    "is_recording",
    "AssertionRecorder",
    "RecordingModeRecorder",
    "ReplayModeRecorder",
    "create_recorder",
    "RecordedAssertionError",
    "UnexpectedAssertionError",
    "RecordedValueMismatchError",
    "PrematureEndError",
]
