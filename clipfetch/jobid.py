"""Job identifiers used to namespace temporary clip files."""

import time
import uuid


def new_job_id() -> str:
    # Millisecond clock in hex, then random bits so that jobs started in the
    # same millisecond still get distinct names.
    return f"{time.time_ns() // 1_000_000:x}{uuid.uuid4().hex[:8]}"
