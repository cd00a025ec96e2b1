"""
Split/unsplit toggling for fixed-width ACH files.

Responsibilities:
- format detection from the first record plus one character of lookahead
- rewriting the record sequence in the opposite format
- the open -> detect -> close -> reopen -> rewrite -> close pipeline
- read-only inspection of uploaded bytes
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import IO, Iterable, List, Optional, Union

from .encoding import resolve_encoding, resolve_encoding_bytes
from .models import Detection, FormatTag, InspectResponse, ToggleReport, ToggleStatus
from .rules import (
    ACH_RECORD_LENGTH,
    CARRIAGE_RETURN,
    DEFAULT_ENCODING,
    LINE_TERMINATOR,
    NEWLINE,
    atomic_default,
)

logger = logging.getLogger(__name__)


class PeekableReader:
    """
    Text stream wrapper with one character of non-consuming lookahead.

    Python text streams have no peek(), so a peeked character is held back
    and handed out by the next read.
    """

    def __init__(self, stream: IO[str]):
        self._stream = stream
        self._pending = ""

    def read(self, size: int) -> str:
        if size <= 0:
            return ""
        out = self._pending[:size]
        self._pending = self._pending[size:]
        # keep reading until size characters or end of stream, like a block read
        while len(out) < size:
            chunk = self._stream.read(size - len(out))
            if not chunk:
                break
            out += chunk
        return out

    def peek(self) -> str:
        """Return the next character without consuming it, or "" at end of stream."""
        if not self._pending:
            self._pending = self._stream.read(1)
        return self._pending[:1]

    def at_end(self) -> bool:
        return self.peek() == ""

    def rewind(self) -> None:
        self._stream.seek(0)
        self._pending = ""

    def lines(self) -> Iterable[str]:
        """Yield lines with their terminator (\\r\\n, \\n or \\r) removed."""
        if self._pending:
            raise RuntimeError("lines() after a pending lookahead; rewind first")
        for line in self._stream:
            yield _strip_terminator(line)


def _strip_terminator(line: str) -> str:
    if line.endswith(CARRIAGE_RETURN + NEWLINE):
        return line[:-2]
    if line.endswith(NEWLINE) or line.endswith(CARRIAGE_RETURN):
        return line[:-1]
    return line


def detect_format(stream: IO[str], record_length: int = ACH_RECORD_LENGTH) -> Detection:
    """
    Classify ``stream`` as split or unsplit and read its records.

    The stream must be positioned at offset 0 and seekable. Reads
    ``record_length`` characters, then peeks one more:

    - end of stream: undetermined, no records
    - newline or carriage return: split, the stream is re-read line by line
    - anything else: unsplit, the stream is read in record_length blocks
    """
    reader = PeekableReader(stream)
    encoding = getattr(stream, "encoding", None) or DEFAULT_ENCODING

    first = reader.read(record_length)
    next_char = reader.peek()

    if next_char == "":
        logger.debug("end of stream at character %d after %d read", record_length + 1, len(first))
        return Detection(tag=FormatTag.UNDETERMINED, encoding=encoding)

    records: List[str] = []

    if next_char in (NEWLINE, CARRIAGE_RETURN):
        # a single record with a trailing newline also lands here
        reader.rewind()
        records.extend(reader.lines())
        tag = FormatTag.SPLIT
    else:
        records.append(first)
        while not reader.at_end():
            records.append(reader.read(record_length))
        tag = FormatTag.UNSPLIT

    logger.debug("detected %s with %d records", tag.value, len(records))
    return Detection(tag=tag, records=records, encoding=encoding)


def rewrite_records(
    stream: IO[str],
    tag: FormatTag,
    records: Iterable[str],
    line_terminator: str = LINE_TERMINATOR,
) -> int:
    """
    Write ``records`` to ``stream`` in the format opposite to ``tag``.

    Returns the number of characters written.
    """
    if tag is FormatTag.SPLIT:
        separator = ""
    elif tag is FormatTag.UNSPLIT:
        separator = line_terminator
    else:
        raise ValueError(f"cannot rewrite records of {tag.value} format")

    written = 0
    for record in records:
        written += stream.write(record)
        if separator:
            written += stream.write(separator)
    stream.flush()
    return written


def too_short_message(size: int, record_length: int = ACH_RECORD_LENGTH) -> str:
    return (
        f"file is {size} characters (less than or equal to {record_length}) "
        "so no operations were performed"
    )


def undetermined_message(record_length: int = ACH_RECORD_LENGTH) -> str:
    return (
        f"failed to read character {record_length + 1} "
        "to determine whether file is original or split"
    )


def _write_in_place(path: Path, encoding: str, detection: Detection, line_terminator: str) -> None:
    # truncates first; a failure mid-write leaves a partial file
    with open(path, "w", encoding=encoding, newline="") as f:
        rewrite_records(f, detection.tag, detection.records, line_terminator)


def _write_atomic(path: Path, encoding: str, detection: Detection, line_terminator: str) -> None:
    tmp = tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        newline="",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    try:
        with tmp as f:
            rewrite_records(f, detection.tag, detection.records, line_terminator)
            os.fsync(f.fileno())
        shutil.copymode(path, tmp.name)
        os.replace(tmp.name, path)
    except BaseException:
        if os.path.exists(tmp.name):
            os.unlink(tmp.name)
        raise


def toggle_file(
    path: Union[str, Path],
    *,
    record_length: int = ACH_RECORD_LENGTH,
    atomic: Optional[bool] = None,
    line_terminator: str = LINE_TERMINATOR,
) -> ToggleReport:
    """
    Toggle the file at ``path`` between split and unsplit, overwriting it.

    Never raises for I/O or decoding failures: they come back as a report
    with status ``failed`` and the error's errno (when it has one).
    """
    path = Path(path)
    if atomic is None:
        atomic = atomic_default()

    report = ToggleReport(path=str(path), status=ToggleStatus.FAILED, atomic=atomic)

    try:
        encoding = resolve_encoding(path)
        report.encoding = encoding

        with open(path, "r", encoding=encoding, newline="") as f:
            size = os.fstat(f.fileno()).st_size
            report.size_before = size
            if size <= record_length:
                report.status = ToggleStatus.TOO_SHORT
                report.message = too_short_message(size, record_length)
                logger.info("%s: %s", path, report.message)
                return report
            detection = detect_format(f, record_length)

        report.detected = detection.tag
        if detection.tag is FormatTag.UNDETERMINED:
            report.status = ToggleStatus.UNDETERMINED
            report.message = undetermined_message(record_length)
            logger.info("%s: %s", path, report.message)
            return report

        report.records = len(detection.records)
        report.written = detection.tag.opposite()

        if atomic:
            _write_atomic(path, encoding, detection, line_terminator)
        else:
            _write_in_place(path, encoding, detection, line_terminator)

        report.size_after = os.path.getsize(path)
        report.status = ToggleStatus.TOGGLED
        report.message = (
            f"{detection.tag.value} -> {report.written.value}: {report.records} records"
        )
        logger.info("%s: %s", path, report.message)
        return report

    except (OSError, UnicodeError) as e:
        logger.debug("toggle of %s failed", path, exc_info=True)
        report.status = ToggleStatus.FAILED
        report.message = str(e)
        report.error_code = getattr(e, "errno", None)
        return report


def inspect_bytes(
    raw: bytes,
    filename: Optional[str] = None,
    record_length: int = ACH_RECORD_LENGTH,
) -> InspectResponse:
    """
    Run detection over uploaded bytes without writing anything.
    """
    encoding = resolve_encoding_bytes(raw)
    result = InspectResponse(
        filename=filename,
        record_length=record_length,
        size=len(raw),
        encoding=encoding,
    )

    if len(raw) <= record_length:
        result.too_short = True
        result.message = too_short_message(len(raw), record_length)
        return result

    text = raw.decode(encoding, errors="replace")
    detection = detect_format(io.StringIO(text, newline=""), record_length)
    result.detected = detection.tag

    if detection.tag is FormatTag.UNDETERMINED:
        result.message = undetermined_message(record_length)
        return result

    result.records = len(detection.records)
    result.short_records = sum(1 for r in detection.records if len(r) != record_length)
    if result.short_records:
        result.message = f"{result.short_records} records are not {record_length} characters"
    return result
