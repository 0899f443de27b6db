"""Orchestrator: runs one clip extraction from request to cleanup.

Each step either hands a value to the next or returns a ``Failure``; the
first failure ends the job. Once a job identifier exists, the job's
temporary files are removed in a ``finally`` block whatever happens next.
"""

import logging
import math
import re
import threading
from collections.abc import Mapping
from numbers import Real
from pathlib import Path

from clipfetch import timecode, ytdlp
from clipfetch.config import ClipConfig
from clipfetch.jobid import new_job_id
from clipfetch.models import (
    ClipRequest,
    ClipResult,
    ExtractionOutcome,
    Failure,
    FailureKind,
    Success,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "clip"

_UNSAFE_TITLE_CHARS = re.compile(r"[^a-zA-Z0-9\-_ ]")


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _is_finite(value) -> bool:
    # Integers beyond float range overflow rather than report infinity.
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def parse_clip_request(payload) -> ClipRequest | Failure:
    """Validate a ``{url, startTime, endTime, videoTitle?}`` payload."""
    if not isinstance(payload, Mapping):
        return Failure(FailureKind.INVALID_REQUEST, "Request body must be a JSON object")

    url = payload.get("url")
    start = payload.get("startTime")
    end = payload.get("endTime")

    if not isinstance(url, str) or not url.strip() or not _is_number(start) or not _is_number(end):
        return Failure(FailureKind.INVALID_REQUEST, "URL, startTime, and endTime are required")
    if not (_is_finite(start) and _is_finite(end)):
        return Failure(FailureKind.INVALID_REQUEST, "startTime and endTime must be finite numbers")
    if start < 0:
        return Failure(FailureKind.INVALID_REQUEST, "startTime must not be negative")
    if start >= end:
        return Failure(FailureKind.INVALID_REQUEST, "startTime must be less than endTime")
    # Timestamps carry milliseconds; a range that rounds to nothing is empty.
    if round(start * 1000) >= round(end * 1000):
        return Failure(
            FailureKind.INVALID_REQUEST,
            "startTime and endTime must be at least one millisecond apart",
        )

    title = payload.get("videoTitle")
    return ClipRequest(
        url=url.strip(),
        start_time=float(start),
        end_time=float(end),
        title=title if isinstance(title, str) else None,
    )


def sanitize_title(title: str | None) -> str:
    """Keep ASCII letters, digits, hyphen, underscore and space."""
    cleaned = _UNSAFE_TITLE_CHARS.sub("", title or "").strip()
    return cleaned or DEFAULT_TITLE


def clip_filename(request: ClipRequest, ext: str = "mp4") -> str:
    return (
        f"{sanitize_title(request.title)}"
        f"_{math.floor(request.start_time)}s-{math.floor(request.end_time)}s.{ext}"
    )


def _read_artifact(path: Path) -> bytes:
    return path.read_bytes()


class ClipExtractor:
    """Runs clip jobs against one immutable configuration.

    At most ``config.max_concurrent_jobs`` jobs run at once; further
    requests are refused rather than queued.
    """

    def __init__(self, config: ClipConfig):
        self.config = config
        self._slots = threading.BoundedSemaphore(config.max_concurrent_jobs)

    def health(self) -> dict:
        version = ytdlp.tool_version(self.config.tool_path, timeout=self.config.probe_timeout)
        if version is None:
            return {
                "status": "degraded",
                "tool": "unavailable",
                "message": "Local yt-dlp binary is required for video processing",
            }
        return {"status": "healthy", "tool": "available", "version": version}

    def extract(self, payload) -> ClipResult | Failure:
        """Execute the full extraction pipeline for one request payload.

        Never raises: every problem comes back as a ``Failure``.
        """
        try:
            request = parse_clip_request(payload)
            if isinstance(request, Failure):
                return request

            if not self._slots.acquire(blocking=False):
                logger.warning("Refusing clip of %s: all job slots are busy", request.url)
                return Failure(
                    FailureKind.TOOL_UNAVAILABLE,
                    "Too many clip jobs in progress",
                    details=f"Limit is {self.config.max_concurrent_jobs} concurrent jobs",
                )
            try:
                return self._run_job(request)
            finally:
                self._slots.release()
        except Exception as e:
            logger.exception("Clipping error")
            return Failure(FailureKind.INTERNAL_ERROR, "Internal server error", details=str(e))

    def _run_job(self, request: ClipRequest) -> ClipResult | Failure:
        failure = self._check_tool()
        if failure:
            return failure

        self.config.temp_dir.mkdir(parents=True, exist_ok=True)
        job_id = new_job_id()
        output_path = self.config.temp_dir / f"clip-{job_id}.{self.config.output_ext}"
        try:
            outcome = self._download(request, output_path)
            if isinstance(outcome, Failure):
                return outcome

            content = _read_artifact(outcome.file_path)
            filename = clip_filename(request, self.config.output_ext)
            logger.info("Clip %s ready: %s (%d bytes)", job_id, filename, outcome.byte_size)
            return ClipResult(
                content=content,
                filename=filename,
                content_type=f"video/{self.config.output_ext}",
            )
        finally:
            self._cleanup(job_id)

    def _check_tool(self) -> Failure | None:
        if ytdlp.probe(self.config.tool_path, timeout=self.config.probe_timeout):
            return None
        return Failure(
            FailureKind.TOOL_UNAVAILABLE,
            "Video processing service unavailable. Local yt-dlp binary not found.",
            details=f"yt-dlp binary should be available at {self.config.tool_path}",
        )

    def _download(self, request: ClipRequest, output_path: Path) -> ExtractionOutcome:
        segment = timecode.segment_spec(request.start_time, request.end_time)
        logger.info("Processing clip: %s from %s", segment, request.url)

        args = ytdlp.build_clip_args(request.url, segment, output_path, self.config)
        result = ytdlp.run_tool(self.config.tool_path, args, timeout=self.config.job_timeout)
        if not result.ok:
            logger.error("yt-dlp failed: %s", result.failure.message)
            if result.failure.kind is FailureKind.TOOL_UNAVAILABLE:
                return result.failure
            details = result.failure.details or result.failure.message
            return Failure(
                FailureKind.TOOL_EXECUTION_FAILED,
                "Failed to download and clip video",
                details=details,
            )

        if not output_path.is_file():
            logger.error("yt-dlp exited cleanly but %s was not created", output_path)
            return Failure(FailureKind.OUTPUT_MISSING, "Clipped video file was not created")

        return Success(file_path=output_path, byte_size=output_path.stat().st_size)

    def _cleanup(self, job_id: str) -> None:
        # yt-dlp may leave .part files or per-format fragments beside the
        # output, all sharing the job's prefix.
        for path in self.config.temp_dir.glob(f"clip-{job_id}.*"):
            try:
                path.unlink()
            except OSError as e:
                logger.warning("Failed to cleanup temp file %s: %s", path, e)
