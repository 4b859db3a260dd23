"""
Destination planning for batch commands.

The destination argument is classified once per batch. A path that is an
existing directory, or that carries no file extension, is a directory: every
input gets its own output file inside it. Anything else is a single output
file, which only makes sense for a batch of one.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from mediaconv.utils import system_util

NameMapper = Callable[[Path], Path]


@dataclass(frozen=True)
class DestinationPlan:
    """How outputs are placed for one batch."""
    root: Path
    is_directory_mode: bool
    input_root: Path
    output_name: Optional[NameMapper] = None
    preserve_structure: bool = False


@dataclass(frozen=True)
class ResolvedTarget:
    """One input file and the single output it will produce."""
    input_file: Path
    output_file: Path
    is_directory_mode: bool


def replace_suffix(suffix: str) -> NameMapper:
    """Output named after the input with its extension swapped (movie.mp4 -> movie.mkv)."""
    return lambda rel: rel.with_suffix(suffix)


def append_suffix(suffix: str) -> NameMapper:
    """Output named after the input with `suffix` added (notes.txt -> notes.txt.age)."""
    return lambda rel: rel.with_name(rel.name + suffix)


def strip_suffix(suffix: str) -> NameMapper:
    """Output named after the input with a trailing `suffix` removed (notes.txt.age -> notes.txt)."""
    def _strip(rel: Path) -> Path:
        if rel.name.lower().endswith(suffix.lower()) and len(rel.name) > len(suffix):
            return rel.with_name(rel.name[:-len(suffix)])
        return rel
    return _strip


def is_directory_destination(destination: Path) -> bool:
    return destination.is_dir() or not destination.suffix


def plan_destination(destination: Path, input_root: Path, output_name: Optional[NameMapper] = None,
                     preserve_structure: bool = False) -> DestinationPlan:
    """Classify `destination` and create the directory it needs. Creation failure is fatal."""
    destination = Path(destination).expanduser()
    directory_mode = is_directory_destination(destination)
    to_create = destination if directory_mode else destination.parent

    try:
        to_create.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        system_util.fatal("startup.error", msg="Cannot create destination", path=str(to_create), error=str(e))

    return DestinationPlan(
        root=destination.resolve(),
        is_directory_mode=directory_mode,
        input_root=input_root,
        output_name=output_name,
        preserve_structure=preserve_structure,
    )


def resolve_target(plan: DestinationPlan, input_file: Path) -> ResolvedTarget:
    """Compute the output path for `input_file` under `plan`."""
    if not plan.is_directory_mode:
        return ResolvedTarget(input_file, plan.root, False)

    if plan.preserve_structure:
        try:
            rel = input_file.relative_to(plan.input_root)
        except ValueError:
            rel = Path(input_file.name)
    else:
        rel = Path(input_file.name)

    if plan.output_name:
        rel = plan.output_name(rel)
    return ResolvedTarget(input_file, plan.root / rel, True)
