"""
Disc ripping sessions.

A session rips one disc, or with `repeat` keeps prompting for the next disc
until the user interrupts. Each disc in a repeating session gets its own
numbered folder so titles from different discs never collide.
"""
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Set

from mediaconv.disc import core
from mediaconv.pipeline import BatchSummary, FileResult, discard_partial_output, log_result
from mediaconv.utils import LogLevel, logger, system_util
from mediaconv.utils.constants import DEFAULT_DRIVE_INDEX, DEFAULT_MIN_LENGTH, DISC_FOLDER_FORMAT


@dataclass(frozen=True)
class RipRequest:
    destination: Path
    drive: int = DEFAULT_DRIVE_INDEX
    min_length: int = DEFAULT_MIN_LENGTH
    repeat: bool = False
    debug: bool = False


def _files_in(folder: Path) -> Set[Path]:
    if not folder.exists():
        return set()
    return {p for p in folder.rglob("*") if p.is_file()}


def next_disc_folder(root: Path, start: int = 1) -> Path:
    """First `disc-NNN` folder under `root` that does not exist yet."""
    number = start
    while (root / DISC_FOLDER_FORMAT.format(number)).exists():
        number += 1
    return root / DISC_FOLDER_FORMAT.format(number)


def rip_one(binary: str, out_dir: Path, request: RipRequest) -> FileResult:
    """Rip the disc currently in the drive; new files are removed if the rip fails."""
    label = Path(f"disc{request.drive}")
    out_dir.mkdir(parents=True, exist_ok=True)
    before = _files_in(out_dir)

    try:
        code, _ = core.rip_disc(binary, out_dir, request.drive, request.min_length, debug=request.debug)
    except KeyboardInterrupt:
        for partial in _files_in(out_dir) - before:
            discard_partial_output(partial)
        raise

    created = _files_in(out_dir) - before
    if code != 0:
        for partial in created:
            discard_partial_output(partial)
        return FileResult.failed(label, f"makemkvcon code {code}", out_dir)
    if not created:
        return FileResult.skipped(label, "no titles longer than minimum length", out_dir)
    return FileResult.succeeded(label, out_dir, f"{len(created)} title(s)")


def _wait_for_next_disc() -> bool:
    """Prompt for the next disc. False when the user wants to stop."""
    try:
        input("Insert the next disc and press Enter (Ctrl+C to stop)... ")
    except (KeyboardInterrupt, EOFError):
        logger.safe_print()
        return False
    return True


def rip_discs(request: RipRequest) -> BatchSummary:
    """Rip one disc, or keep ripping discs until interrupted when `request.repeat` is set."""
    binary = core.makemkvcon_binary()
    system_util.which_or_die(binary)

    root = Path(request.destination).expanduser()
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        system_util.fatal("startup.error", msg="Cannot create destination", path=str(root), error=str(e))
    root = root.resolve()

    summary = BatchSummary("rip")
    start_time = time.time()
    logger.log("rip.session", LogLevel.INFO, drive=request.drive, destination=str(root), repeat=request.repeat)

    while True:
        out_dir = next_disc_folder(root) if request.repeat else root
        try:
            result = rip_one(binary, out_dir, request)
        except KeyboardInterrupt:
            summary.add(FileResult.failed(Path(f"disc{request.drive}"), "interrupted", out_dir))
            logger.log("rip.interrupted", LogLevel.WARN, dst=str(out_dir))
            break

        summary.add(result)
        log_result("rip", result)

        if not request.repeat or not _wait_for_next_disc():
            break

    summary.log_end(time.time() - start_time)
    return summary
