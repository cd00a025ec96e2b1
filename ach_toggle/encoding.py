"""
Text encoding resolution for ACH files.

Records are counted in characters, so the file has to be decoded before the
detector can measure anything. The encoding found here is also the one the
rewrite writes back with.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

from charset_normalizer import from_bytes

from .rules import DEFAULT_ENCODING, ENCODING_SAMPLE_BYTES

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"
ASCII_ALIASES = {"ascii", "us_ascii", "us-ascii"}


def resolve_encoding_bytes(raw: bytes) -> str:
    """
    Pick a decoding for ``raw``.

    Rules:
    - A UTF-8 BOM means utf-8-sig, so the BOM is not counted as record data
      and is written back on rewrite.
    - Otherwise use the best charset-normalizer guess. An ascii guess only
      describes the sample, so it widens to utf-8.
    - Nothing to go on (empty sample, no match) means utf-8.
    """
    if raw.startswith(UTF8_BOM):
        return "utf-8-sig"
    if not raw:
        return DEFAULT_ENCODING

    match = from_bytes(raw).best()
    if match is None:
        logger.debug("no encoding match for %d byte sample, using %s", len(raw), DEFAULT_ENCODING)
        return DEFAULT_ENCODING
    if match.encoding in ASCII_ALIASES:
        return DEFAULT_ENCODING
    return match.encoding


def resolve_encoding(path: Union[str, Path], sample_size: int = ENCODING_SAMPLE_BYTES) -> str:
    with open(path, "rb") as f:
        sample = f.read(sample_size)
    encoding = resolve_encoding_bytes(sample)
    logger.debug("resolved encoding %s for %s", encoding, path)
    return encoding
