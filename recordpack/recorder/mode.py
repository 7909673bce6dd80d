"""Recording vs replay mode selection."""

from __future__ import annotations

import logging
import os
from typing import Mapping

UPDATE_ENV_VAR = "UPDATE_TESTS"

_FALSE_VALUES = frozenset({"0", "false", "no"})

_log = logging.getLogger(__name__)


def is_recording(environ: Mapping[str, str] | None = None) -> bool:
    """Check whether recorded assertions should overwrite their recordings."""
    source = os.environ if environ is None else environ
    raw_value = source.get(UPDATE_ENV_VAR, "").strip()
    recording = bool(raw_value) and raw_value.lower() not in _FALSE_VALUES
    _log.debug("%s=%r, recording mode: %s", UPDATE_ENV_VAR, raw_value, recording)
    return recording
