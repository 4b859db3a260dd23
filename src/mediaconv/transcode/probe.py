"""
Lightweight media probes and the parsers for their text output.

Each probe runs one read-only subprocess and parses a single value out of its
output. Results are ProbeResult values so that "tool failed", "nothing found"
and "found a value" stay distinguishable.
"""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from mediaconv.utils import system_util
from mediaconv.utils.constants import CROP_PROBE_SECONDS, CROP_REGEX


class ProbeStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class ProbeResult:
    status: ProbeStatus
    value: Any = None
    detail: str = ""

    @classmethod
    def found(cls, value) -> "ProbeResult":
        return cls(ProbeStatus.FOUND, value)

    @classmethod
    def not_found(cls, detail: str = "") -> "ProbeResult":
        return cls(ProbeStatus.NOT_FOUND, None, detail)

    @classmethod
    def failed(cls, detail: str) -> "ProbeResult":
        return cls(ProbeStatus.FAILED, None, detail)

    @property
    def is_found(self) -> bool:
        return self.status is ProbeStatus.FOUND

    @property
    def is_failed(self) -> bool:
        return self.status is ProbeStatus.FAILED


def _failure_detail(tool: str, code: int, err: str) -> str:
    last_line = err.strip().splitlines()[-1] if err.strip() else ""
    return f"{tool} code {code}" + (f": {last_line}" if last_line else "")


def channel_probe_cmd(path: Path):
    return [
        "ffprobe", "-v", "error",
        "-select_streams", "a:0",
        "-show_entries", "stream=channels",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(path),
    ]


def parse_channels(output: str) -> ProbeResult:
    """Parse the compact ffprobe output (a single integer line)."""
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            return ProbeResult.found(int(line))
        except ValueError:
            return ProbeResult.not_found(f"unparseable channel count '{line}'")
    return ProbeResult.not_found("no audio stream")


def probe_channels(path: Path) -> ProbeResult:
    """Channel count of the first audio stream."""
    code, out, err = system_util.run_cmd(channel_probe_cmd(path))
    if code != 0:
        return ProbeResult.failed(_failure_detail("ffprobe", code, err))
    return parse_channels(out)


def crop_probe_cmd(path: Path, seconds: int = CROP_PROBE_SECONDS):
    return [
        "ffmpeg", "-hide_banner", "-nostdin",
        "-i", str(path),
        "-t", str(seconds),
        "-an", "-sn",
        "-vf", "cropdetect",
        "-f", "null", "-",
    ]


def parse_crop(output: str) -> ProbeResult:
    """Use the last `crop=W:H:X:Y` reported by cropdetect."""
    matches = CROP_REGEX.findall(output)
    if not matches:
        return ProbeResult.not_found("no crop data")
    return ProbeResult.found(matches[-1])


def probe_crop(path: Path, seconds: int = CROP_PROBE_SECONDS) -> ProbeResult:
    """Detect black bars over the first `seconds` of video. cropdetect reports on stderr."""
    code, _, err = system_util.run_cmd(crop_probe_cmd(path, seconds))
    if code != 0:
        return ProbeResult.failed(_failure_detail("ffmpeg", code, err))
    return parse_crop(err)


def probe_duration(path: Path) -> Optional[float]:
    """Container duration in seconds, used only for progress estimates."""
    code, out, _ = system_util.run_cmd([
        "ffprobe", "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        str(path),
    ])
    if code != 0:
        return None
    try:
        return float(out.strip())
    except ValueError:
        return None
