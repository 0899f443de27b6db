"""Shared test fixtures."""

import json
import stat
import sys
from pathlib import Path

import pytest

from clipfetch.config import ClipConfig

UNSUPPORTED_URL_STDERR = "ERROR: [generic] Unsupported URL: https://example.com/video\n"

# Stand-in for yt-dlp. MODE decides how the download behaves; every call's
# arguments are appended to CALLS so tests can inspect the command line.
FAKE_TOOL = """\
import json
import sys
import time
from pathlib import Path

MODE = {mode!r}
SIZE = {size!r}
CALLS = Path({calls!r})

args = sys.argv[1:]
with CALLS.open("a") as f:
    f.write(json.dumps(args) + "\\n")

if args == ["--version"]:
    if MODE == "broken":
        sys.stderr.write("ImportError: yt_dlp\\n")
        sys.exit(1)
    print("2025.01.15")
    sys.exit(0)

if MODE == "fail":
    sys.stderr.write({stderr!r})
    sys.exit(1)
if MODE == "hang":
    time.sleep(60)

out = Path(args[args.index("-o") + 1])
if MODE == "partial":
    out.with_name(out.name + ".part").write_bytes(b"partial")
    sys.stderr.write("ERROR: fragment 3 not found\\n")
    sys.exit(1)
if MODE == "ok":
    out.write_bytes(b"\\x00" * SIZE)
"""


class FakeTool:
    def __init__(self, path: Path, calls: Path):
        self.path = path
        self.calls_file = calls

    @property
    def calls(self) -> list[list[str]]:
        if not self.calls_file.exists():
            return []
        return [json.loads(line) for line in self.calls_file.read_text().splitlines()]


@pytest.fixture
def make_tool(tmp_path):
    """Factory writing a fake yt-dlp executable into ``tmp_path/bin``."""

    def make(mode: str = "ok", size: int = 1024) -> FakeTool:
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir(exist_ok=True)
        calls = tmp_path / "calls.jsonl"
        script = bin_dir / "fake_ytdlp.py"
        script.write_text(FAKE_TOOL.format(
            mode=mode, size=size, calls=str(calls), stderr=UNSUPPORTED_URL_STDERR,
        ))
        tool = bin_dir / "yt-dlp"
        tool.write_text(f'#!/bin/sh\nexec "{sys.executable}" "{script}" "$@"\n')
        tool.chmod(tool.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakeTool(tool, calls)

    return make


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    return tmp_path / "temp"


@pytest.fixture
def make_config(temp_dir):
    def make(tool_path, **overrides) -> ClipConfig:
        return ClipConfig(tool_path=str(tool_path), temp_dir=temp_dir, **overrides)

    return make


@pytest.fixture
def missing_tool(tmp_path) -> Path:
    return tmp_path / "bin" / "no-such-yt-dlp"
