"""
Encoding presets and the channel-count to bitrate table.

A preset is a named bundle of encoder settings. `resolve_profile` turns a
preset name plus any explicit overrides into the EncodingProfile used for a
whole batch; it has no side effects.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from mediaconv.utils import PRESET_HIGH, PRESET_STANDARD


class ChannelPolicy(Enum):
    """What to do with the source's audio channel layout."""
    STEREO = "stereo"      # downmix everything to two channels
    PRESERVE = "preserve"  # keep the source layout, bitrate follows channel count


class ChannelTier(Enum):
    BASE = "base"
    MID = "mid"
    TOP = "top"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class EncodingProfile:
    quality: int               # CRF, lower is better
    speed_preset: int          # SVT-AV1 preset, lower is slower and better
    audio_bitrate: int         # bps, base tier and the fallback for odd layouts
    channel_policy: ChannelPolicy
    surround_bitrate: int      # bps for 5-6 channels
    immersive_bitrate: int     # bps for 7+ channels
    bitrate_pinned: bool = False


PRESETS = {
    PRESET_STANDARD: EncodingProfile(
        quality=30,
        speed_preset=6,
        audio_bitrate=128000,
        channel_policy=ChannelPolicy.STEREO,
        surround_bitrate=256000,
        immersive_bitrate=384000,
    ),
    PRESET_HIGH: EncodingProfile(
        quality=24,
        speed_preset=4,
        audio_bitrate=160000,
        channel_policy=ChannelPolicy.PRESERVE,
        surround_bitrate=320000,
        immersive_bitrate=448000,
    ),
}


def preset_names():
    return list(PRESETS)


def lookup_preset(name: str) -> EncodingProfile:
    """Find a preset by case-insensitive name. Raises ValueError for unknown names."""
    for key, profile in PRESETS.items():
        if key.lower() == (name or "").strip().lower():
            return profile
    raise ValueError(f"Unknown preset '{name}'. Choose one of: {', '.join(PRESETS)}")


def resolve_profile(preset: str, quality: Optional[int] = None, speed_preset: Optional[int] = None,
                    audio_bitrate: Optional[int] = None,
                    keep_channels: Optional[bool] = None) -> EncodingProfile:
    """
    Build the batch profile from a preset name and explicit overrides.

    Args:
        preset: Preset name ('Standard' or 'High', case-insensitive).
        quality: CRF override.
        speed_preset: Encoder speed preset override.
        audio_bitrate: Audio bitrate override in bps; applies to every file
            regardless of its channel count.
        keep_channels: True keeps the source layout, False downmixes to
            stereo, None uses the preset's policy.

    Returns:
        EncodingProfile with overrides applied.

    Raises:
        ValueError: Unknown preset name or a non-positive override.
    """
    profile = lookup_preset(preset)
    changes = {}

    if quality is not None:
        if quality < 0:
            raise ValueError(f"quality must be >= 0, got {quality}")
        changes["quality"] = quality
    if speed_preset is not None:
        if speed_preset < 0:
            raise ValueError(f"speed preset must be >= 0, got {speed_preset}")
        changes["speed_preset"] = speed_preset
    if audio_bitrate is not None:
        if audio_bitrate <= 0:
            raise ValueError(f"audio bitrate must be > 0, got {audio_bitrate}")
        changes["audio_bitrate"] = audio_bitrate
        changes["bitrate_pinned"] = True
    if keep_channels is not None:
        changes["channel_policy"] = ChannelPolicy.PRESERVE if keep_channels else ChannelPolicy.STEREO

    return replace(profile, **changes) if changes else profile


def channel_tier(channels: int) -> ChannelTier:
    """Classify a channel count. 3 and 4 channels have no tier of their own."""
    if channels >= 7:
        return ChannelTier.TOP
    if 5 <= channels <= 6:
        return ChannelTier.MID
    if 1 <= channels <= 2:
        return ChannelTier.BASE
    return ChannelTier.UNRECOGNIZED


def bitrate_for_channels(channels: int, profile: EncodingProfile) -> Tuple[int, ChannelTier]:
    """Return (bitrate, tier) for a probed channel count; unrecognized counts use the profile default."""
    tier = channel_tier(channels)
    if profile.bitrate_pinned:
        return profile.audio_bitrate, tier
    if tier is ChannelTier.TOP:
        return profile.immersive_bitrate, tier
    if tier is ChannelTier.MID:
        return profile.surround_bitrate, tier
    return profile.audio_bitrate, tier
