"""
ffmpeg command assembly and execution for video and audio transcodes.

Video is encoded to AV1 with SVT-AV1 and audio to Opus. The builders only
assemble argument vectors; `run_encode` runs one of them with progress
logging and the per-call encoder environment.
"""
import time
from pathlib import Path
from typing import List, Optional, Tuple

from mediaconv.transcode.profiles import ChannelPolicy, EncodingProfile
from mediaconv.utils import LogLevel, logger, system_util, time_util
from mediaconv.utils.constants import (
    AUDIO_CODEC,
    ENCODER_LOG_ENV,
    PROGRESS_LOG_INTERVAL,
    PROGRESS_SPEED_REGEX,
    VIDEO_CODEC,
)


def _ffmpeg_base(src: Path) -> List[str]:
    return [
        "ffmpeg",
        "-hide_banner",
        "-nostdin",
        "-loglevel", "error",
        "-stats",
        "-i", str(src),
    ]


def channel_args(policy: ChannelPolicy, channels: Optional[int]) -> List[str]:
    """Channel mixing directive for libopus."""
    if policy is ChannelPolicy.STEREO:
        return ["-ac", "2"]
    if channels is not None and channels > 2:
        # Surround layouts need the Vorbis channel mapping family
        return ["-mapping_family", "1"]
    return []


def build_video_cmd(src: Path, dst: Path, profile: EncodingProfile, audio_bitrate: int,
                    channels: Optional[int] = None, crop: Optional[str] = None) -> List[str]:
    """Build the ffmpeg command for an AV1/Opus transcode into Matroska."""
    cmd = _ffmpeg_base(src) + [
        "-map", "0:v:0",
        "-map", "0:a?",
        "-map", "0:s?",
        "-c:v", VIDEO_CODEC,
        "-crf", str(profile.quality),
        "-preset", str(profile.speed_preset),
        "-pix_fmt", "yuv420p10le",
    ]

    if crop:
        cmd += ["-vf", crop]

    cmd += ["-c:a", AUDIO_CODEC, "-b:a", str(audio_bitrate)]
    cmd += channel_args(profile.channel_policy, channels)
    cmd += ["-c:s", "copy", str(dst)]
    return cmd


def build_audio_cmd(src: Path, dst: Path, profile: EncodingProfile, audio_bitrate: int,
                    channels: Optional[int] = None) -> List[str]:
    """Build the ffmpeg command for an audio-only Opus transcode."""
    cmd = _ffmpeg_base(src) + [
        "-map", "0:a:0",
        "-vn",
        "-c:a", AUDIO_CODEC,
        "-b:a", str(audio_bitrate),
    ]
    cmd += channel_args(profile.channel_policy, channels)
    cmd.append(str(dst))
    return cmd


class _ProgressReporter:
    """Turns ffmpeg -stats lines into periodic progress log events."""

    def __init__(self, name: str, duration: Optional[float], interval: float = PROGRESS_LOG_INTERVAL):
        self.name = name
        self.duration = duration
        self.interval = interval
        self.last_log = time.time()

    def __call__(self, line: str) -> None:
        if "time=" not in line or "speed=" not in line:
            return
        now = time.time()
        if now - self.last_log < self.interval:
            return

        elapsed = time_util.parse_progress_seconds(line)
        speed_match = PROGRESS_SPEED_REGEX.search(line)
        if elapsed is None or not speed_match:
            return
        speed = float(speed_match.group(1))
        self.last_log = now

        if not self.duration:
            logger.log("transcode.progress", LogLevel.INFO,
                       file=self.name, pct="N/A", eta="N/A", speed=f"{speed}x")
            return

        pct = round(min(elapsed / self.duration, 1.0) * 100, 1)
        if speed > 0:
            logger.log("transcode.progress", LogLevel.INFO,
                       file=self.name, pct=pct,
                       eta=time_util.get_eta_single_file(self.duration, speed, elapsed),
                       speed=f"{speed}x")
        else:
            logger.log("transcode.progress", LogLevel.INFO,
                       file=self.name, pct=pct, speed=f"{speed}x")


def run_encode(cmd: List[str], src: Path, duration: Optional[float] = None,
               debug: bool = False) -> Tuple[int, str]:
    """
    Run one encode command with progress monitoring.

    The encoder's log suppression is passed in the child's environment only;
    nothing in this process's environment changes.

    Returns:
        Tuple of (exit_code, stderr)
    """
    logger.log("transcode.start", LogLevel.INFO, file=src.name, dst=Path(cmd[-1]).name)
    if debug:
        logger.log("transcode.command", LogLevel.DEBUG, cmd=" ".join(cmd))

    code, err = system_util.stream_cmd(cmd, on_line=_ProgressReporter(src.name, duration),
                                       env=ENCODER_LOG_ENV)

    if code != 0:
        logger.log("transcode.failed", LogLevel.ERROR,
                   file=src.name,
                   exit_code=code,
                   error=err.strip()[-200:] if debug else "see logs")
    return code, err
