"""Batch pipeline shared by the conversion commands.

- inputs: source resolution and extension filtering
- destination: directory-vs-file planning and per-file target paths
- results: per-file outcomes and the batch summary
- batch: the sequential per-file loop
"""

from .inputs import (
    check_source,
    input_root,
    iter_input_files,
    matches_extension,
    normalize_extensions,
)
from .destination import (
    DestinationPlan,
    ResolvedTarget,
    append_suffix,
    plan_destination,
    replace_suffix,
    resolve_target,
    strip_suffix,
)
from .results import BatchSummary, FileResult, FileStatus
from .batch import delete_source, discard_partial_output, log_result, run_batch

__all__ = [
    "check_source",
    "input_root",
    "iter_input_files",
    "matches_extension",
    "normalize_extensions",
    "DestinationPlan",
    "ResolvedTarget",
    "append_suffix",
    "plan_destination",
    "replace_suffix",
    "resolve_target",
    "strip_suffix",
    "BatchSummary",
    "FileResult",
    "FileStatus",
    "delete_source",
    "discard_partial_output",
    "log_result",
    "run_batch",
]
