"""
Fixed ACH layout rules and runtime switches.

This file exists to make the record geometry explicit and enforceable.
"""

import logging
import os

ACH_RECORD_LENGTH = 94  # characters per ACH record

NEWLINE = "\n"
CARRIAGE_RETURN = "\r"
LINE_TERMINATOR = NEWLINE  # written after each record in split output

DEFAULT_ENCODING = "utf-8"
ENCODING_SAMPLE_BYTES = 64 * 1024


def atomic_default() -> bool:
    raw = os.environ.get("ACH_TOGGLE_ATOMIC")
    if raw is None:
        return False
    return raw.strip().lower() not in {"", "0", "false", "no"}


def log_level_default() -> int:
    name = os.environ.get("ACH_TOGGLE_LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    # getLevelName returns a "Level X" string for unknown names
    if isinstance(level, int):
        return level
    return logging.WARNING
