"""
Generic per-file batch loop shared by every conversion command.

The loop plans one target per input and skips inputs whose target already
exists or was claimed by an earlier input of the same batch. The rest go to a
command-specific step function, which yields one FileResult per file. A
failure in one file, including an OSError from the step, never stops the
batch.
"""
import time
from pathlib import Path
from typing import Callable, Dict, Iterable

from tqdm import tqdm

from mediaconv.pipeline.destination import DestinationPlan, ResolvedTarget, resolve_target
from mediaconv.pipeline.results import BatchSummary, FileResult, FileStatus
from mediaconv.utils import LogLevel, logger, system_util, time_util

StepFunction = Callable[[ResolvedTarget], FileResult]


def discard_partial_output(target: Path) -> None:
    """Remove an incomplete output left behind by a failed tool run."""
    if target.exists():
        try:
            target.unlink()
        except OSError as e:
            logger.log("cleanup.failed", LogLevel.WARN, file=str(target), error=str(e))


def delete_source(source: Path) -> bool:
    """Delete an input after its output completed. Returns True when removed."""
    try:
        source.unlink()
        return True
    except OSError as e:
        logger.log("cleanup.delete_failed", LogLevel.WARN, file=source.name, error=str(e))
        return False


def _collision_name(plan: DestinationPlan, first: Path) -> str:
    try:
        return str(first.relative_to(plan.input_root))
    except ValueError:
        return str(first)


def _plan_or_skip(plan: DestinationPlan, source: Path, step: StepFunction,
                  claimed: Dict[Path, Path]) -> FileResult:
    target = resolve_target(plan, source)
    first = claimed.get(target.output_file)
    if first is not None:
        return FileResult.skipped(source, f"target collides with {_collision_name(plan, first)}",
                                  target.output_file)
    claimed[target.output_file] = source

    if target.output_file.exists():
        return FileResult.skipped(source, "already exists", target.output_file)
    try:
        return step(target)
    except OSError as e:
        return FileResult.failed(source, str(e), target.output_file)


def log_result(command: str, result: FileResult) -> None:
    if result.status is FileStatus.FAILED:
        level = LogLevel.ERROR
    elif result.status is FileStatus.SKIPPED:
        level = LogLevel.WARN
    else:
        level = LogLevel.INFO
    logger.log(f"{command}.result", level,
               file=result.source.name,
               status=result.status.value,
               reason=result.reason or None,
               dst=str(result.target) if result.target else None)


def run_batch(command: str, files: Iterable[Path], plan: DestinationPlan, step: StepFunction,
              show_progress: bool = True) -> BatchSummary:
    """
    Run `step` once per input file and return the collected results.

    Args:
        command: Name used as the log event prefix (e.g. 'video').
        files: Candidate inputs from the input resolver.
        plan: Destination plan decided for this batch.
        step: Converts one ResolvedTarget into a FileResult.
        show_progress: Display a tqdm bar over the batch.

    Returns:
        BatchSummary with one FileResult per input, in input order.

    Raises:
        SystemExit: When a single-file destination is given more than one input.
    """
    files = list(files)
    if not plan.is_directory_mode and len(files) > 1:
        system_util.fatal("startup.error",
                          msg="Destination is a single file but the source holds several inputs",
                          destination=str(plan.root),
                          files=len(files))

    summary = BatchSummary(command)
    claimed: Dict[Path, Path] = {}
    start_time = time.time()
    logger.log(f"{command}.start", LogLevel.INFO,
               files_found=len(files),
               destination=str(plan.root),
               directory_mode=plan.is_directory_mode)

    for done, source in enumerate(tqdm(files, desc=command.capitalize(), unit="file",
                                       disable=not show_progress), start=1):
        result = _plan_or_skip(plan, source, step, claimed)
        summary.add(result)
        log_result(command, result)

        if done < len(files):
            logger.log(f"{command}.progress", LogLevel.DEBUG,
                       completed=done,
                       total=len(files),
                       eta=time_util.get_eta_total(done, len(files), time.time() - start_time))

    summary.log_end(time.time() - start_time)
    return summary
