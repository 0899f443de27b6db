"""Runtime configuration — built once at startup and passed to the extractor."""

import json
import os
import tempfile
from dataclasses import dataclass, fields, replace
from pathlib import Path

DEFAULT_FORMAT = "bv[ext=mp4][height<=?1080]+ba[ext=m4a]/best[ext=mp4][height<=?1080]"
DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


@dataclass(frozen=True)
class ClipConfig:
    """Where the tool lives, where clips are written and how long jobs may run."""

    tool_path: str = "yt-dlp"
    temp_dir: Path = Path(tempfile.gettempdir()) / "clipfetch"
    output_ext: str = "mp4"
    format_selector: str = DEFAULT_FORMAT
    referer: str = "youtube.com"
    user_agent: str = DEFAULT_USER_AGENT
    job_timeout: float = 600.0
    probe_timeout: float = 15.0
    max_concurrent_jobs: int = 4

    def __post_init__(self):
        if self.job_timeout <= 0 or self.probe_timeout <= 0:
            raise ValueError("Timeouts must be positive")
        if self.max_concurrent_jobs < 1:
            raise ValueError("max_concurrent_jobs must be at least 1")
        if not self.output_ext or "/" in self.output_ext:
            raise ValueError(f"Invalid output extension: {self.output_ext!r}")


_ENV_VARS = {
    "CLIPFETCH_YTDLP_PATH": ("tool_path", str),
    "CLIPFETCH_TEMP_DIR": ("temp_dir", Path),
    "CLIPFETCH_JOB_TIMEOUT": ("job_timeout", float),
    "CLIPFETCH_MAX_JOBS": ("max_concurrent_jobs", int),
}

# JSON type each file key must have, and how it becomes the field value.
_FIELD_TYPES = {
    "tool_path": (str, str),
    "temp_dir": (str, Path),
    "output_ext": (str, str),
    "format_selector": (str, str),
    "referer": (str, str),
    "user_agent": (str, str),
    "job_timeout": ((int, float), float),
    "probe_timeout": ((int, float), float),
    "max_concurrent_jobs": (int, int),
}


def _field_value(name: str, value, path: Path):
    accepted, convert = _FIELD_TYPES[name]
    if isinstance(value, bool) or not isinstance(value, accepted):
        raise ValueError(f"Config key {name!r} in {path} has the wrong type: {value!r}")
    return convert(value)


def config_from_env(environ: dict | None = None) -> ClipConfig:
    """Defaults overridden by ``CLIPFETCH_*`` environment variables."""
    environ = os.environ if environ is None else environ
    overrides = {}
    for var, (name, cast) in _ENV_VARS.items():
        if environ.get(var):
            overrides[name] = cast(environ[var])
    return ClipConfig(**overrides)


def load_config(path: str | Path | None = None, environ: dict | None = None) -> ClipConfig:
    """Load configuration from the environment and an optional JSON file.

    Keys in the file take precedence over environment variables. Unknown
    keys are rejected so that typos do not silently fall back to defaults.
    """
    config = config_from_env(environ)
    if path is None:
        return config

    path = Path(path)
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    known = {f.name for f in fields(ClipConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    return replace(config, **{k: _field_value(k, v, path) for k, v in data.items()})
