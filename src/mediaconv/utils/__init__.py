"""
Constants, logging and process helpers shared by every wrapper command.

This package holds the defaults and status labels used across the toolkit,
the structured logger, helpers to run external tools and check that they are
installed, and ETA formatting for long-running encodes.
"""

from .constants import (
    AUDIO_EXTENSIONS,
    DEFAULT_PRESET,
    ENCRYPTED_EXTENSIONS,
    EXIT_FATAL,
    EXIT_FILE_FAILED,
    EXIT_OK,
    PRESET_HIGH,
    PRESET_STANDARD,
    STATUS_DRY_RUN,
    STATUS_FAIL,
    STATUS_OK,
    STATUS_SKIP,
    VIDEO_EXTENSIONS,
)
from .logger import LogLevel

__all__ = [
    "VIDEO_EXTENSIONS",
    "AUDIO_EXTENSIONS",
    "ENCRYPTED_EXTENSIONS",
    "DEFAULT_PRESET",
    "PRESET_STANDARD",
    "PRESET_HIGH",
    "STATUS_OK",
    "STATUS_SKIP",
    "STATUS_FAIL",
    "STATUS_DRY_RUN",
    "EXIT_OK",
    "EXIT_FILE_FAILED",
    "EXIT_FATAL",
    "LogLevel",
]
