"""
mediaconv command-line interface.

One subcommand per wrapper: ``video``, ``audio``, ``encrypt``, ``decrypt`` and
``rip``. Exit status is 0 when every file succeeded or was skipped, 1 when any
file failed and 2 when a precondition stopped the run before it started.
"""

import argparse
import atexit
import sys
from datetime import datetime
from pathlib import Path

import mediaconv as mediaconv_module
from mediaconv import archive, disc, transcode
from mediaconv.pipeline import normalize_extensions
from mediaconv.utils import DEFAULT_PRESET, EXIT_FATAL, LogLevel, logger
from mediaconv.utils.constants import (
    AGE_IDENTITY_FILE,
    AGE_RECIPIENTS_FILE,
    DEFAULT_DRIVE_INDEX,
    DEFAULT_MIN_LENGTH,
    LOG_DIR,
    LOG_FILE,
)


class _TeeStream:
    def __init__(self, *streams):
        self._streams = streams

    def write(self, data):
        for stream in self._streams:
            stream.write(data)
        return len(data)

    def flush(self):
        for stream in self._streams:
            stream.flush()

    def isatty(self):
        return any(getattr(stream, "isatty", lambda: False)() for stream in self._streams)


def _bitrate(value: str) -> int:
    """Accept `160000`, `160k` or `0.16M`."""
    text = value.strip().lower()
    scale = 1
    if text.endswith("k"):
        scale, text = 1000, text[:-1]
    elif text.endswith("m"):
        scale, text = 1000000, text[:-1]
    try:
        bps = int(float(text) * scale)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid bitrate '{value}'")
    if bps <= 0:
        raise argparse.ArgumentTypeError(f"bitrate must be positive, got '{value}'")
    return bps


def _optional_path(value):
    return Path(value).expanduser() if value else None


def _add_batch_args(p: argparse.ArgumentParser, ext_help=None) -> None:
    p.add_argument("source", type=Path, help="Input file or directory")
    p.add_argument("destination", type=Path,
                   help="Output directory, or a single output file when the path has an extension")
    if ext_help:
        p.add_argument("--ext", nargs="+", metavar="EXT", help=ext_help)
    p.add_argument("-r", "--recursive", action="store_true", help="Descend into subdirectories of the source")
    p.add_argument("--preserve-structure", action="store_true",
                   help="Mirror the source folder layout under the destination")
    p.add_argument("--delete-source", action="store_true", help="Delete each input after its output completes")
    p.add_argument("--dry-run", action="store_true", help="Show what would be done without running the tools")


def _add_encoding_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--preset", default=DEFAULT_PRESET,
                   help=f"Encoding preset: {', '.join(transcode.preset_names())} (default: {DEFAULT_PRESET})")
    p.add_argument("--crf", type=int, dest="quality", help="Override the preset's quality level")
    p.add_argument("--speed", type=int, dest="speed_preset", help="Override the encoder speed preset")
    p.add_argument("--audio-bitrate", type=_bitrate,
                   help="Fixed audio bitrate for every file (e.g. 192k); disables channel-based bitrates")
    channels = p.add_mutually_exclusive_group()
    channels.add_argument("--keep-channels", dest="keep_channels", action="store_true", default=None,
                          help="Keep the source channel layout")
    channels.add_argument("--stereo", dest="keep_channels", action="store_false",
                          help="Downmix audio to stereo")
    p.set_defaults(keep_channels=None)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mediaconv",
        description="Batch wrappers around ffmpeg, age, tar and makemkvcon.",
        epilog="Example: mediaconv video ~/Rips ~/Encoded --preset High --recursive",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--log-dir", help="Directory for a timestamped log file (or $MEDIACONV_LOG_DIR)")
    parser.add_argument("--log-file", help="Also write console output to this file (or $MEDIACONV_LOG_FILE)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {mediaconv_module.__version__}")
    commands = parser.add_subparsers(dest="command", required=True)

    video = commands.add_parser("video", help="Transcode video files to AV1/Opus MKV")
    _add_batch_args(video, "Video extensions to accept (default: common video formats)")
    _add_encoding_args(video)
    video.add_argument("--skip-crop", action="store_true", help="Do not detect and remove black bars")

    audio = commands.add_parser("audio", help="Transcode audio files to Opus")
    _add_batch_args(audio, "Audio extensions to accept (default: common audio formats)")
    _add_encoding_args(audio)

    encrypt = commands.add_parser("encrypt", help="Encrypt files with age")
    _add_batch_args(encrypt, "Only encrypt files with these extensions (default: all files)")
    encrypt.add_argument("--recipients", default=AGE_RECIPIENTS_FILE,
                         help="age recipients file (or $MEDIACONV_AGE_RECIPIENTS); "
                              "prompts for a passphrase when omitted")
    encrypt.add_argument("--archive", action="store_true",
                         help="Stream the whole source through tar into one .tar.age file")

    decrypt = commands.add_parser("decrypt", help="Decrypt .age files")
    _add_batch_args(decrypt)
    decrypt.add_argument("--identity", default=AGE_IDENTITY_FILE,
                         help="age identity file (or $MEDIACONV_AGE_IDENTITY)")
    decrypt.add_argument("--extract", action="store_true",
                         help="Unpack .tar.age archives into the destination directory")

    rip = commands.add_parser("rip", help="Rip an optical disc with makemkvcon")
    rip.add_argument("destination", type=Path, help="Output directory for MKV files")
    rip.add_argument("--drive", type=int, default=DEFAULT_DRIVE_INDEX, help="Drive index (default: 0)")
    rip.add_argument("--min-length", type=int, default=DEFAULT_MIN_LENGTH,
                     help=f"Skip titles shorter than this many seconds (default: {DEFAULT_MIN_LENGTH})")
    rip.add_argument("--repeat", action="store_true",
                     help="Keep ripping discs, one numbered folder each, until interrupted")

    return parser


def _setup_logging(args) -> None:
    logger.set_log_level(LogLevel.DEBUG if args.debug else LogLevel.INFO)

    log_file = args.log_file or LOG_FILE
    log_dir = args.log_dir or LOG_DIR
    if not log_file and not log_dir:
        return

    if log_file:
        log_path = Path(log_file).expanduser().resolve()
    else:
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        log_path = (Path(log_dir).expanduser() / f"mediaconv-{timestamp}.log").resolve()

    log_path.parent.mkdir(parents=True, exist_ok=True)
    log_file_handle = open(log_path, "a", encoding="utf-8", buffering=1)
    sys.stdout = _TeeStream(sys.stdout, log_file_handle)
    sys.stderr = _TeeStream(sys.stderr, log_file_handle)
    atexit.register(log_file_handle.close)
    logger.safe_print(f"Logging to: {log_path}")


def _transcode_request(args) -> transcode.ConversionRequest:
    return transcode.ConversionRequest(
        source=args.source,
        destination=args.destination,
        extensions=normalize_extensions(args.ext),
        recursive=args.recursive,
        preset=args.preset,
        quality=args.quality,
        speed_preset=args.speed_preset,
        audio_bitrate=args.audio_bitrate,
        keep_channels=args.keep_channels,
        skip_crop=getattr(args, "skip_crop", False),
        preserve_structure=args.preserve_structure,
        delete_source=args.delete_source,
        dry_run=args.dry_run,
        debug=args.debug,
    )


def _archive_request(args, key_file) -> archive.ArchiveRequest:
    return archive.ArchiveRequest(
        source=args.source,
        destination=args.destination,
        key_file=_optional_path(key_file),
        archive=getattr(args, "archive", False) or getattr(args, "extract", False),
        extensions=normalize_extensions(getattr(args, "ext", None)),
        recursive=args.recursive,
        preserve_structure=args.preserve_structure,
        delete_source=args.delete_source,
        dry_run=args.dry_run,
    )


def run(args) -> int:
    """Dispatch a parsed command line and return the process exit code."""
    if args.command == "video":
        summary = transcode.convert_videos(_transcode_request(args))
    elif args.command == "audio":
        summary = transcode.convert_audio(_transcode_request(args))
    elif args.command == "encrypt":
        summary = archive.encrypt_paths(_archive_request(args, args.recipients))
    elif args.command == "decrypt":
        summary = archive.decrypt_paths(_archive_request(args, args.identity))
    elif args.command == "rip":
        summary = disc.rip_discs(disc.RipRequest(
            destination=args.destination,
            drive=args.drive,
            min_length=args.min_length,
            repeat=args.repeat,
            debug=args.debug,
        ))
    else:
        logger.log("startup.error", LogLevel.ERROR, msg="Unknown command", command=args.command)
        return EXIT_FATAL
    return summary.exit_code


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args)
    try:
        return run(args)
    except KeyboardInterrupt:
        logger.safe_print("\nInterrupted.")
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
