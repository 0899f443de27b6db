"""yt-dlp subprocess helpers."""

import logging
import os
import shutil
import signal
import subprocess
from pathlib import Path

from clipfetch.config import ClipConfig
from clipfetch.models import Failure, FailureKind, SegmentSpec, ToolRun

logger = logging.getLogger(__name__)


def _kill_process_group(proc: subprocess.Popen) -> None:
    """Kill *proc* and every process it started in its session."""
    if not hasattr(os, "killpg"):
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


def run_tool(executable: str, args: list[str], timeout: float | None = None) -> ToolRun:
    """Run *executable* with *args* and classify the outcome.

    stdout and stderr are drained together while waiting for exit so a
    chatty tool cannot stall on a full pipe. A launch failure is reported
    as ``ToolUnavailable``; a non-zero exit or a timeout as
    ``ToolExecutionFailed`` carrying the captured stderr.
    """
    cmd = [executable, *args]
    logger.debug("Running: %s", " ".join(cmd))

    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            # yt-dlp hands sections to ffmpeg, which inherits our pipes; a
            # session of its own lets a timeout kill both.
            start_new_session=True,
        )
    except OSError as e:
        logger.error("Failed to start %s: %s", executable, e)
        return ToolRun(
            returncode=None,
            failure=Failure(
                FailureKind.TOOL_UNAVAILABLE,
                f"Failed to start {executable}",
                details=str(e),
            ),
        )

    try:
        stdout, stderr = proc.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_process_group(proc)
        stdout, stderr = proc.communicate()
        logger.error("%s timed out after %ss and was killed", executable, timeout)
        return ToolRun(
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            failure=Failure(
                FailureKind.TOOL_EXECUTION_FAILED,
                f"{executable} timed out after {timeout:g}s",
                details=stderr or None,
            ),
        )

    for line in stderr.splitlines():
        logger.debug("%s stderr: %s", Path(executable).name, line)

    if proc.returncode != 0:
        return ToolRun(
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            failure=Failure(
                FailureKind.TOOL_EXECUTION_FAILED,
                f"{executable} exited with code {proc.returncode}",
                details=stderr,
            ),
        )

    return ToolRun(returncode=0, stdout=stdout, stderr=stderr)


def resolve_tool(executable: str) -> str | None:
    """Return the runnable path for *executable*, or None if it is missing.

    A value containing a path separator must name an existing file; a bare
    name is looked up on PATH.
    """
    if os.sep in executable or (os.altsep and os.altsep in executable):
        return executable if Path(executable).is_file() else None
    return shutil.which(executable)


def _version_check(executable: str, timeout: float) -> ToolRun | None:
    resolved = resolve_tool(executable)
    if resolved is None:
        logger.warning("yt-dlp not found at %s", executable)
        return None
    result = run_tool(resolved, ["--version"], timeout=timeout)
    if not result.ok:
        logger.warning("yt-dlp at %s failed its version check: %s",
                       resolved, result.failure.details or result.failure.message)
        return None
    return result


def probe(executable: str, timeout: float = 15.0) -> bool:
    """True if the tool exists and answers ``--version`` successfully."""
    return _version_check(executable, timeout) is not None


def tool_version(executable: str, timeout: float = 15.0) -> str | None:
    result = _version_check(executable, timeout)
    if result is None:
        return None
    lines = result.stdout.strip().splitlines()
    return lines[0] if lines else ""


def build_clip_args(
    url: str, segment: SegmentSpec, output_path: Path, config: ClipConfig
) -> list[str]:
    """Arguments that download only *segment* of *url* into *output_path*."""
    return [
        url,
        "-f", config.format_selector,
        "--download-sections", str(segment),
        "-o", str(output_path),
        "--merge-output-format", config.output_ext,
        "--no-check-certificates",
        "--no-warnings",
        "--add-header", f"referer:{config.referer}",
        "--add-header", f"user-agent:{config.user_agent}",
    ]
