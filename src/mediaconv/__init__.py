"""
Command-line wrappers around external media and archive tools.

The toolkit drives ffmpeg/ffprobe for video and audio transcoding, age and tar
for encrypted archives, and MakeMKV's makemkvcon for disc ripping. Every
command follows the same batch shape: resolve the input files, plan one
output per input, resolve encoding parameters, probe when needed, run the
tool once per file and report a per-file result.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
