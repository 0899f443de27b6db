"""Shared data types used across clipfetch."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class FailureKind(str, Enum):
    """Why an extraction did not produce a clip."""

    INVALID_REQUEST = "InvalidRequest"
    TOOL_UNAVAILABLE = "ToolUnavailable"
    TOOL_EXECUTION_FAILED = "ToolExecutionFailed"
    OUTPUT_MISSING = "OutputMissing"
    INTERNAL_ERROR = "InternalError"

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS[self]


_HTTP_STATUS = {
    FailureKind.INVALID_REQUEST: 400,
    FailureKind.TOOL_UNAVAILABLE: 503,
    FailureKind.TOOL_EXECUTION_FAILED: 500,
    FailureKind.OUTPUT_MISSING: 500,
    FailureKind.INTERNAL_ERROR: 500,
}


@dataclass(frozen=True)
class ClipRequest:
    """A validated request for the clip between two offsets in seconds."""

    url: str
    start_time: float
    end_time: float
    title: str | None = None


@dataclass(frozen=True)
class SegmentSpec:
    """Start/end timestamps in the tool's ``HH:MM:SS.mmm`` notation."""

    start_formatted: str
    end_formatted: str

    def __str__(self) -> str:
        return f"*{self.start_formatted}-{self.end_formatted}"


@dataclass(frozen=True)
class Success:
    file_path: Path
    byte_size: int


@dataclass(frozen=True)
class Failure:
    """A classified failure; ``details`` carries the low-level diagnostic."""

    kind: FailureKind
    message: str
    details: str | None = None

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


ExtractionOutcome = Success | Failure


@dataclass(frozen=True)
class ToolRun:
    """Result of one external tool invocation."""

    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    failure: Failure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None


@dataclass(frozen=True)
class ClipResult:
    """A finished clip, held in memory after its temporary file is gone."""

    content: bytes
    filename: str
    content_type: str = "video/mp4"

    @property
    def byte_size(self) -> int:
        return len(self.content)
