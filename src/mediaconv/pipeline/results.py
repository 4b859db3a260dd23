"""Per-file outcomes and the batch summary built from them."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from mediaconv.utils import EXIT_FILE_FAILED, EXIT_OK, STATUS_FAIL, STATUS_OK, STATUS_SKIP, LogLevel
from mediaconv.utils import logger, time_util


class FileStatus(Enum):
    SKIPPED = STATUS_SKIP
    SUCCEEDED = STATUS_OK
    FAILED = STATUS_FAIL


@dataclass(frozen=True)
class FileResult:
    """What happened to one input file."""
    source: Path
    status: FileStatus
    target: Optional[Path] = None
    reason: str = ""

    @classmethod
    def skipped(cls, source: Path, reason: str, target: Optional[Path] = None) -> "FileResult":
        return cls(source, FileStatus.SKIPPED, target, reason)

    @classmethod
    def succeeded(cls, source: Path, target: Optional[Path], reason: str = "") -> "FileResult":
        return cls(source, FileStatus.SUCCEEDED, target, reason)

    @classmethod
    def failed(cls, source: Path, reason: str, target: Optional[Path] = None) -> "FileResult":
        return cls(source, FileStatus.FAILED, target, reason)

    @property
    def label(self) -> str:
        return f"{self.status.value} ({self.reason})" if self.reason else self.status.value


@dataclass
class BatchSummary:
    """Ordered results of one batch run."""
    command: str
    results: List[FileResult] = field(default_factory=list)

    def add(self, result: FileResult) -> None:
        self.results.append(result)

    def count(self, status: FileStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def succeeded(self) -> int:
        return self.count(FileStatus.SUCCEEDED)

    @property
    def skipped(self) -> int:
        return self.count(FileStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self.count(FileStatus.FAILED)

    @property
    def exit_code(self) -> int:
        return EXIT_FILE_FAILED if self.failed else EXIT_OK

    def log_end(self, runtime_seconds: float) -> None:
        logger.log(f"{self.command}.end", LogLevel.INFO,
                   runtime=time_util.format_runtime(runtime_seconds),
                   total=len(self.results),
                   ok=self.succeeded,
                   skip=self.skipped,
                   fail=self.failed)
        for r in self.results:
            if r.status is FileStatus.FAILED:
                logger.safe_print(f"  {r.label}: {r.source}")
