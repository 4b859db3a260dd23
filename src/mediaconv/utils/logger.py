"""
Provides structured logging with log levels.

Every event is written as a single line: a UTC timestamp, the level, an event
name and key-value pairs, separated by `` | ``. Lines go through
``tqdm.write`` so they do not tear an active progress bar.
"""
import sys
import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any

from tqdm import tqdm

_print_lock = threading.Lock()
_separator = " | "


class LogLevel(Enum):
    """Event severity. WARN and ERROR go to stderr, the rest to stdout."""
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4


# Raised to DEBUG by --debug
_threshold = LogLevel.INFO


def set_log_level(level: LogLevel) -> None:
    """Drop events below `level` from now on."""
    global _threshold
    _threshold = level


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        # ffmpeg/age error text may span lines; each event stays on one
        escaped = value.replace("\r", "\\r").replace("\n", "\\n").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)


def format_kv(data: Dict[str, Any]) -> str:
    """Render fields as ``key=value`` pairs; strings are quoted, None is ``null``."""
    return _separator.join(f"{key}={_format_value(value)}" for key, value in data.items())


def log(event: str, level: LogLevel = LogLevel.INFO, **kwargs) -> None:
    """
    Write one structured event.

    Args:
        event: Dotted event name, `<command>.<what>` (e.g. 'video.result', 'rip.progress')
        level: Severity; events below the current threshold are dropped
        **kwargs: Fields appended after the event name
    """
    if level.value < _threshold.value:
        return

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
    fields = [timestamp, f"[{level.name}]", event]
    if kwargs:
        fields.append(format_kv(kwargs))

    stream = sys.stderr if level in (LogLevel.WARN, LogLevel.ERROR) else sys.stdout
    with _print_lock:
        tqdm.write(_separator.join(fields), file=stream)


def safe_print(*args, **kwargs) -> None:
    """Plain console output (summary lines, prompts) under the same lock as log()."""
    with _print_lock:
        print(*args, **kwargs, flush=True)
