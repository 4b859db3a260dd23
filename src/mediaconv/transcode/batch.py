"""
Video and audio batch transcoding.

`convert_videos` and `convert_audio` check their preconditions, resolve the
batch profile once and then run one step per input file through the shared
pipeline. The per-file steps probe the source, build the ffmpeg command and
run it, returning a FileResult in every case.
"""
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import AbstractSet, Optional, Tuple

from mediaconv.pipeline import (
    BatchSummary,
    FileResult,
    ResolvedTarget,
    check_source,
    delete_source,
    discard_partial_output,
    input_root,
    iter_input_files,
    plan_destination,
    replace_suffix,
    run_batch,
)
from mediaconv.transcode import core, probe
from mediaconv.transcode.profiles import (
    ChannelPolicy,
    ChannelTier,
    EncodingProfile,
    bitrate_for_channels,
    resolve_profile,
)
from mediaconv.utils import (
    AUDIO_EXTENSIONS,
    DEFAULT_PRESET,
    STATUS_DRY_RUN,
    VIDEO_EXTENSIONS,
    LogLevel,
    logger,
    system_util,
)
from mediaconv.utils.constants import AUDIO_OUTPUT_SUFFIX, VIDEO_OUTPUT_SUFFIX


@dataclass(frozen=True)
class ConversionRequest:
    """Everything the user asked for in one transcode invocation."""
    source: Path
    destination: Path
    extensions: Optional[AbstractSet[str]] = None
    recursive: bool = False
    preset: str = DEFAULT_PRESET
    quality: Optional[int] = None
    speed_preset: Optional[int] = None
    audio_bitrate: Optional[int] = None
    keep_channels: Optional[bool] = None
    skip_crop: bool = False
    preserve_structure: bool = False
    delete_source: bool = False
    dry_run: bool = False
    debug: bool = False


def _resolve_audio(src: Path, profile: EncodingProfile) -> Tuple[Optional[FileResult], int, Optional[int]]:
    """
    Pick the audio bitrate and channel count for one file.

    Returns (failure, bitrate, channels); failure is a FileResult when the
    channel probe could not run, otherwise None.
    """
    if profile.channel_policy is ChannelPolicy.STEREO:
        return None, profile.audio_bitrate, None

    result = probe.probe_channels(src)
    if result.is_failed:
        return FileResult.failed(src, f"channel probe failed: {result.detail}"), 0, None
    if not result.is_found:
        logger.log("probe.channels", LogLevel.DEBUG, file=src.name, detail=result.detail)
        return None, profile.audio_bitrate, None

    channels = result.value
    bitrate, tier = bitrate_for_channels(channels, profile)
    if tier is ChannelTier.UNRECOGNIZED:
        logger.log("probe.channels", LogLevel.WARN,
                   file=src.name,
                   channels=channels,
                   msg="Unrecognized channel count, using default bitrate",
                   bitrate=bitrate)
    else:
        logger.log("probe.channels", LogLevel.DEBUG,
                   file=src.name, channels=channels, tier=tier.value, bitrate=bitrate)
    return None, bitrate, channels


def _execute(target: ResolvedTarget, cmd, request: ConversionRequest) -> FileResult:
    src, dst = target.input_file, target.output_file

    if request.dry_run:
        logger.log("transcode.dry_run", LogLevel.INFO, file=src.name, cmd=" ".join(cmd))
        return FileResult.skipped(src, STATUS_DRY_RUN, dst)

    dst.parent.mkdir(parents=True, exist_ok=True)
    duration = probe.probe_duration(src)
    code, err = core.run_encode(cmd, src, duration=duration, debug=request.debug)

    if code != 0:
        discard_partial_output(dst)
        return FileResult.failed(src, f"ffmpeg code {code}")

    if request.delete_source and delete_source(src):
        return FileResult.succeeded(src, dst, "source deleted")
    return FileResult.succeeded(src, dst)


def convert_video_one(target: ResolvedTarget, request: ConversionRequest,
                      profile: EncodingProfile) -> FileResult:
    """Probe and transcode a single video file."""
    src = target.input_file

    failure, bitrate, channels = _resolve_audio(src, profile)
    if failure:
        return failure

    crop = None
    if not request.skip_crop:
        crop_result = probe.probe_crop(src)
        if crop_result.is_failed:
            return FileResult.failed(src, f"crop probe failed: {crop_result.detail}")
        if crop_result.is_found:
            crop = crop_result.value
        logger.log("probe.crop", LogLevel.DEBUG, file=src.name, crop=crop)

    cmd = core.build_video_cmd(src, target.output_file, profile, bitrate, channels=channels, crop=crop)
    return _execute(target, cmd, request)


def convert_audio_one(target: ResolvedTarget, request: ConversionRequest,
                      profile: EncodingProfile) -> FileResult:
    """Probe and transcode a single audio file."""
    src = target.input_file

    failure, bitrate, channels = _resolve_audio(src, profile)
    if failure:
        return failure

    cmd = core.build_audio_cmd(src, target.output_file, profile, bitrate, channels=channels)
    return _execute(target, cmd, request)


def _profile_or_die(request: ConversionRequest) -> EncodingProfile:
    try:
        return resolve_profile(request.preset,
                               quality=request.quality,
                               speed_preset=request.speed_preset,
                               audio_bitrate=request.audio_bitrate,
                               keep_channels=request.keep_channels)
    except ValueError as e:
        system_util.fatal("startup.error", msg=str(e))


def _run(command: str, request: ConversionRequest, default_extensions, suffix, step) -> BatchSummary:
    system_util.which_or_die("ffmpeg")
    system_util.which_or_die("ffprobe")

    profile = _profile_or_die(request)
    source = check_source(request.source)
    plan = plan_destination(request.destination, input_root(source),
                            output_name=replace_suffix(suffix),
                            preserve_structure=request.preserve_structure)

    logger.log(f"{command}.profile", LogLevel.INFO,
               preset=request.preset,
               crf=profile.quality,
               speed=profile.speed_preset,
               audio_bitrate=profile.audio_bitrate,
               channels=profile.channel_policy.value)

    extensions = request.extensions or default_extensions
    files = iter_input_files(source, extensions, recursive=request.recursive)
    return run_batch(command, files, plan, partial(step, request=request, profile=profile))


def convert_videos(request: ConversionRequest) -> BatchSummary:
    """Transcode every video under `request.source` to AV1/Opus Matroska."""
    return _run("video", request, VIDEO_EXTENSIONS, VIDEO_OUTPUT_SUFFIX, convert_video_one)


def convert_audio(request: ConversionRequest) -> BatchSummary:
    """Transcode every audio file under `request.source` to Opus."""
    return _run("audio", request, AUDIO_EXTENSIONS, AUDIO_OUTPUT_SUFFIX, convert_audio_one)
