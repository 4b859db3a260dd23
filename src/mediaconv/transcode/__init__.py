"""Video and audio transcoding.

This package provides three levels of functionality:
- profiles: presets, overrides and the channel-count bitrate table
- probe/core: ffprobe/ffmpeg probes and command building
- batch: per-file steps and the video/audio batch commands
"""

from .profiles import (
    PRESETS,
    ChannelPolicy,
    ChannelTier,
    EncodingProfile,
    bitrate_for_channels,
    channel_tier,
    preset_names,
    resolve_profile,
)
from .probe import (
    ProbeResult,
    ProbeStatus,
    parse_channels,
    parse_crop,
    probe_channels,
    probe_crop,
    probe_duration,
)
from .core import build_audio_cmd, build_video_cmd, run_encode
from .batch import (
    ConversionRequest,
    convert_audio,
    convert_audio_one,
    convert_video_one,
    convert_videos,
)

__all__ = [
    # Presets
    "PRESETS",
    "ChannelPolicy",
    "ChannelTier",
    "EncodingProfile",
    "bitrate_for_channels",
    "channel_tier",
    "preset_names",
    "resolve_profile",
    # Probes
    "ProbeResult",
    "ProbeStatus",
    "parse_channels",
    "parse_crop",
    "probe_channels",
    "probe_crop",
    "probe_duration",
    # Transcoding
    "build_audio_cmd",
    "build_video_cmd",
    "run_encode",
    "ConversionRequest",
    "convert_audio",
    "convert_audio_one",
    "convert_video_one",
    "convert_videos",
]
