"""Recorded assertions for whole generated files."""

from __future__ import annotations

import logging
from pathlib import Path

from recordpack.recorder.exceptions import RecordedValueMismatchError
from recordpack.recorder.mode import is_recording

_log = logging.getLogger(__name__)


def assert_file_as_recorded(
    path: str | Path,
    content: str | None,
    *,
    recording: bool | None = None,
) -> None:
    """Compare generated file content with the file on disk, or update it.

    A `content` of `None` means the file should not exist.
    """
    target = Path(path)
    if recording is None:
        recording = is_recording()

    if recording:
        if content is None:
            if target.exists():
                _log.debug("removing recorded file %s", target)
                target.unlink()
            return
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        _log.debug("wrote recorded file %s", target)
        return

    if not target.exists():
        if content is not None:
            raise RecordedValueMismatchError(f"File '{target}' is missing.")
        return

    expected = target.read_text(encoding="utf-8")
    if content is None:
        raise RecordedValueMismatchError(f"File '{target}' should not exist.")
    if expected != content:
        raise RecordedValueMismatchError(
            f"Content in '{target}' differs from the generated content.\n"
            f"--- recorded\n{expected}\n+++ generated\n{content}"
        )
