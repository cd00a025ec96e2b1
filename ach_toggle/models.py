from __future__ import annotations

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class FormatTag(str, Enum):
    SPLIT = "split"
    UNSPLIT = "unsplit"
    UNDETERMINED = "undetermined"

    def opposite(self) -> "FormatTag":
        if self is FormatTag.SPLIT:
            return FormatTag.UNSPLIT
        if self is FormatTag.UNSPLIT:
            return FormatTag.SPLIT
        raise ValueError("undetermined format has no opposite")


class ToggleStatus(str, Enum):
    TOGGLED = "toggled"
    NO_ARGUMENT = "no_argument"
    TOO_SHORT = "too_short"
    UNDETERMINED = "undetermined"
    FAILED = "failed"


class Detection(BaseModel):
    tag: FormatTag
    records: List[str] = Field(default_factory=list)
    encoding: str = Field(default="utf-8")


class ToggleReport(BaseModel):
    path: Optional[str] = None
    status: ToggleStatus
    detected: Optional[FormatTag] = None
    written: Optional[FormatTag] = None
    records: int = 0
    size_before: Optional[int] = Field(default=None, examples=[188])
    size_after: Optional[int] = Field(default=None, examples=[190])
    encoding: Optional[str] = None
    atomic: bool = False
    message: Optional[str] = None
    error_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.status is not ToggleStatus.FAILED


class InspectResponse(BaseModel):
    filename: Optional[str] = None
    too_short: bool = False
    detected: Optional[FormatTag] = None
    records: int = 0
    record_length: int = 94
    short_records: int = 0
    size: int = 0
    encoding: Optional[str] = None
    message: Optional[str] = None


class HealthResponse(BaseModel):
    ok: bool = True
