"""
Constants and configuration settings for the media conversion commands.

This module contains the defaults used by every wrapper command: accepted
file extensions, output suffixes, encoder and probe settings, result status
labels and the environment variables that override them. Values from a local
``.env`` file are loaded before the environment is read.
"""

import os
import re

from dotenv import load_dotenv

load_dotenv()

# Accepted input file extensions
VIDEO_EXTENSIONS = {".mkv", ".mp4", ".avi", ".mov", ".m4v", ".webm", ".ts", ".wmv"}
AUDIO_EXTENSIONS = {".flac", ".wav", ".mp3", ".m4a", ".aac", ".ogg", ".opus", ".wma", ".aiff"}
ENCRYPTED_EXTENSIONS = {".age"}

# Output suffixes used in directory mode
VIDEO_OUTPUT_SUFFIX = ".mkv"
AUDIO_OUTPUT_SUFFIX = ".opus"
AGE_SUFFIX = ".age"
TAR_AGE_SUFFIX = ".tar.age"

# Encoders
VIDEO_CODEC = "libsvtav1"
AUDIO_CODEC = "libopus"

# SVT-AV1 prints its banner and per-frame info unless told otherwise; 1 = errors only
ENCODER_LOG_ENV = {"SVT_LOG": "1"}

# Crop detection scans this many seconds from the start of the video
CROP_PROBE_SECONDS = 120
CROP_REGEX = re.compile(r"crop=\d+:\d+:\d+:\d+")

# ffmpeg -stats progress line, e.g. "frame= 1234 fps=18 ... time=00:01:23.45 bitrate=... speed=0.75x"
PROGRESS_TIME_REGEX = re.compile(r"time=(\d+):(\d+):(\d+(?:\.\d+)?)")
PROGRESS_SPEED_REGEX = re.compile(r"speed=\s*(\d+(?:\.\d+)?)x")
PROGRESS_LOG_INTERVAL = 60  # seconds between progress log events
TOOL_OUTPUT_TAIL_LINES = 200  # output lines kept from a streamed tool for error reports

# Disc ripping
DEFAULT_MIN_LENGTH = 120  # seconds; titles shorter than this are skipped by MakeMKV
DEFAULT_DRIVE_INDEX = 0
DISC_FOLDER_FORMAT = "disc-{:03d}"

# Presets
PRESET_STANDARD = "Standard"
PRESET_HIGH = "High"
DEFAULT_PRESET = os.getenv("MEDIACONV_PRESET", PRESET_STANDARD)

# Key files for age
AGE_RECIPIENTS_FILE = os.getenv("MEDIACONV_AGE_RECIPIENTS")
AGE_IDENTITY_FILE = os.getenv("MEDIACONV_AGE_IDENTITY")

# Executable override for MakeMKV's command-line tool
MAKEMKVCON_BINARY = os.getenv("MEDIACONV_MAKEMKVCON")

# Logging destinations
LOG_DIR = os.getenv("MEDIACONV_LOG_DIR")
LOG_FILE = os.getenv("MEDIACONV_LOG_FILE")

# Processing status labels
STATUS_OK = "OK"
STATUS_SKIP = "SKIP"
STATUS_FAIL = "FAIL"
STATUS_DRY_RUN = "DRY-RUN"

# Exit codes
EXIT_OK = 0
EXIT_FILE_FAILED = 1
EXIT_FATAL = 2
