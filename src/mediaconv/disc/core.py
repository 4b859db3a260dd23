"""
MakeMKV command-line ripping.

makemkvcon runs in robot mode (`-r`), which prints machine-readable lines:
`MSG:` for messages, `PRGT:`/`PRGC:` for the current task titles and
`PRGV:current,total,max` for progress. Those lines are turned into log
events and a tqdm bar.
"""
import csv
import platform
from pathlib import Path
from typing import List, Optional, Tuple

from tqdm import tqdm

from mediaconv.utils import LogLevel, logger, system_util
from mediaconv.utils.constants import DEFAULT_DRIVE_INDEX, DEFAULT_MIN_LENGTH, MAKEMKVCON_BINARY


def makemkvcon_binary() -> str:
    """Executable name: env override, else the 64-bit Windows build or the plain name."""
    if MAKEMKVCON_BINARY:
        return MAKEMKVCON_BINARY
    return "makemkvcon64" if platform.system() == "Windows" else "makemkvcon"


def rip_cmd(binary: str, out_dir: Path, drive: int = DEFAULT_DRIVE_INDEX,
            min_length: int = DEFAULT_MIN_LENGTH) -> List[str]:
    return [
        binary,
        "-r",
        "--progress=-same",
        f"--minlength={min_length}",
        "mkv",
        f"disc:{drive}",
        "all",
        str(out_dir),
    ]


def parse_robot_line(line: str) -> Optional[Tuple[str, list]]:
    """Split a robot-mode line into (kind, fields). Returns None for anything else."""
    kind, sep, rest = line.strip().partition(":")
    if not sep or not kind.isupper():
        return None
    fields = next(csv.reader([rest]), [])
    return kind, fields


class _RipProgress:
    """Feeds robot-mode output into the logger and a progress bar."""

    def __init__(self, label: str):
        self.label = label
        self.bar: Optional[tqdm] = None
        self.task = ""

    def __call__(self, line: str) -> None:
        parsed = parse_robot_line(line)
        if parsed is None:
            return
        kind, fields = parsed

        if kind == "MSG" and len(fields) >= 4:
            logger.log("rip.message", LogLevel.INFO, disc=self.label, msg=fields[3])
        elif kind == "PRGT" and len(fields) >= 3:
            self.task = fields[2]
            self._reset_bar()
        elif kind == "PRGV" and len(fields) >= 3:
            self._update(fields)

    def _reset_bar(self) -> None:
        if self.bar is not None:
            self.bar.close()
        self.bar = tqdm(total=100, desc=self.task or self.label, unit="%", leave=False)

    def _update(self, fields) -> None:
        try:
            total, maximum = int(fields[1]), int(fields[2])
        except ValueError:
            return
        if maximum <= 0:
            return
        if self.bar is None:
            self._reset_bar()
        self.bar.n = round(total * 100 / maximum, 1)
        self.bar.refresh()

    def close(self) -> None:
        if self.bar is not None:
            self.bar.close()
            self.bar = None


def rip_disc(binary: str, out_dir: Path, drive: int = DEFAULT_DRIVE_INDEX,
             min_length: int = DEFAULT_MIN_LENGTH, debug: bool = False) -> Tuple[int, str]:
    """Rip every title of at least `min_length` seconds from `drive` into `out_dir`."""
    cmd = rip_cmd(binary, out_dir, drive, min_length)
    logger.log("rip.start", LogLevel.INFO, drive=drive, dst=str(out_dir), min_length=min_length)
    if debug:
        logger.log("rip.command", LogLevel.DEBUG, cmd=" ".join(cmd))

    progress = _RipProgress(f"disc:{drive}")
    try:
        code, output = system_util.stream_cmd(cmd, on_line=progress, merge_stdout=True)
    finally:
        progress.close()

    if code != 0:
        logger.log("rip.failed", LogLevel.ERROR, drive=drive, exit_code=code)
    return code, output
