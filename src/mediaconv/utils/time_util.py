"""
Time helpers for progress reporting.

Encodes report how far ffmpeg has got through the source (`time=` on its
-stats lines) and batches report how many files are done. Both are turned
into an ETA label of the form ``2024-05-01 21:14:09 (1h3m20s)``: the UTC
wall-clock finish time followed by the remaining duration.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from mediaconv.utils.constants import PROGRESS_TIME_REGEX


def parse_progress_seconds(line: str) -> Optional[float]:
    """Return the encoded position from an ffmpeg `time=HH:MM:SS.xx` field, if present."""
    match = PROGRESS_TIME_REGEX.search(line)
    if not match:
        return None
    hours, mins, secs = match.groups()
    return int(hours) * 3600 + int(mins) * 60 + float(secs)


def get_eta_single_file(duration: float, speed: float, position: float) -> str:
    """ETA for one encode running at `speed`x, currently at `position` seconds of `duration`."""
    return _eta_label(max(duration - position, 0) / speed)


def get_eta_total(done: int, total: int, elapsed: float) -> str:
    """ETA for the rest of a batch, assuming remaining files take the average so far."""
    return _eta_label(elapsed / done * (total - done))


def format_runtime(seconds) -> str:
    """HH:MM:SS for the batch end summary."""
    hours, rest = divmod(int(seconds), 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


def _compact_duration(seconds: float) -> str:
    hours, rest = divmod(int(seconds), 3600)
    mins, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{mins}m{secs}s"
    if mins:
        return f"{mins}m{secs}s"
    return f"{secs}s"


def _eta_label(remaining: float) -> str:
    finish = datetime.now(timezone.utc) + timedelta(seconds=remaining)
    return f"{finish:%Y-%m-%d %H:%M:%S} ({_compact_duration(remaining)})"
