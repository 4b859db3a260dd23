"""
Batch encryption and decryption with age.

Plain mode encrypts each resolved file on its own (`notes.txt` ->
`notes.txt.age`). Archive mode streams the whole source through tar into a
single `<name>.tar.age`. Decryption reverses both; with `extract`, `.tar.age`
inputs are unpacked straight into the destination directory.
"""
import shutil
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import AbstractSet, Optional

from mediaconv.archive import core
from mediaconv.pipeline import (
    BatchSummary,
    FileResult,
    ResolvedTarget,
    append_suffix,
    check_source,
    delete_source,
    discard_partial_output,
    input_root,
    iter_input_files,
    matches_extension,
    plan_destination,
    run_batch,
    strip_suffix,
)
from mediaconv.utils import ENCRYPTED_EXTENSIONS, STATUS_DRY_RUN, LogLevel, logger, system_util
from mediaconv.utils.constants import AGE_SUFFIX, TAR_AGE_SUFFIX


@dataclass(frozen=True)
class ArchiveRequest:
    """Parameters of one encrypt or decrypt invocation."""
    source: Path
    destination: Path
    key_file: Optional[Path] = None  # recipients for encrypt, identity for decrypt
    archive: bool = False            # encrypt: tar the whole source; decrypt: extract .tar.age
    extensions: Optional[AbstractSet[str]] = None
    recursive: bool = False
    preserve_structure: bool = False
    delete_source: bool = False
    dry_run: bool = False


def _remove_source(src: Path) -> bool:
    if src.is_dir():
        try:
            shutil.rmtree(src)
            return True
        except OSError as e:
            logger.log("cleanup.delete_failed", LogLevel.WARN, file=src.name, error=str(e))
            return False
    return delete_source(src)


def _finish(src: Path, dst: Path, code: int, tool: str, request: ArchiveRequest) -> FileResult:
    if code != 0:
        if dst.is_dir():
            shutil.rmtree(dst, ignore_errors=True)
        else:
            discard_partial_output(dst)
        return FileResult.failed(src, f"{tool} code {code}")

    if request.delete_source and _remove_source(src):
        return FileResult.succeeded(src, dst, "source deleted")
    return FileResult.succeeded(src, dst)


def encrypt_one(target: ResolvedTarget, request: ArchiveRequest) -> FileResult:
    """Encrypt one file, or the whole source tree in archive mode."""
    src, dst = target.input_file, target.output_file
    if request.dry_run:
        return FileResult.skipped(src, STATUS_DRY_RUN, dst)

    dst.parent.mkdir(parents=True, exist_ok=True)
    if request.archive:
        code, _ = core.encrypt_archive(src, dst, request.key_file)
        return _finish(src, dst, code, "tar|age", request)

    code, _ = core.encrypt_file(src, dst, request.key_file)
    return _finish(src, dst, code, "age", request)


def decrypt_one(target: ResolvedTarget, request: ArchiveRequest) -> FileResult:
    """Decrypt one `.age` file, extracting `.tar.age` archives when asked."""
    src, dst = target.input_file, target.output_file
    if request.dry_run:
        return FileResult.skipped(src, STATUS_DRY_RUN, dst)

    dst.parent.mkdir(parents=True, exist_ok=True)
    if request.archive and src.name.lower().endswith(TAR_AGE_SUFFIX):
        # The archive holds its own top-level folder; `dst` is where it lands
        code, _ = core.decrypt_archive(src, dst.parent, request.key_file)
        return _finish(src, dst, code, "age|tar", request)

    code, _ = core.decrypt_file(src, dst, request.key_file)
    return _finish(src, dst, code, "age", request)


def _decrypted_name(extract: bool):
    strip_age = strip_suffix(AGE_SUFFIX)
    strip_tar_age = strip_suffix(TAR_AGE_SUFFIX)

    def _name(rel: Path) -> Path:
        if extract and rel.name.lower().endswith(TAR_AGE_SUFFIX):
            return strip_tar_age(rel)
        return strip_age(rel)
    return _name


def _check_key_file(key_file: Optional[Path]) -> None:
    if key_file is not None and not Path(key_file).expanduser().is_file():
        system_util.fatal("startup.error", msg="Key file does not exist", key_file=str(key_file))


def encrypt_paths(request: ArchiveRequest) -> BatchSummary:
    """Encrypt `request.source` into `request.destination`."""
    system_util.which_or_die("age")
    if request.archive:
        system_util.which_or_die("tar")
    _check_key_file(request.key_file)

    source = check_source(request.source)

    if request.archive:
        plan = plan_destination(request.destination, source.parent,
                                output_name=append_suffix(TAR_AGE_SUFFIX))
        files = [source]
    else:
        plan = plan_destination(request.destination, input_root(source),
                                output_name=append_suffix(AGE_SUFFIX),
                                preserve_structure=request.preserve_structure)
        files = (f for f in iter_input_files(source, request.extensions or frozenset(), request.recursive)
                 if not matches_extension(f, ENCRYPTED_EXTENSIONS))

    return run_batch("encrypt", files, plan, partial(encrypt_one, request=request))


def decrypt_paths(request: ArchiveRequest) -> BatchSummary:
    """Decrypt every `.age` file under `request.source` into `request.destination`."""
    system_util.which_or_die("age")
    if request.archive:
        system_util.which_or_die("tar")
    _check_key_file(request.key_file)

    source = check_source(request.source)
    plan = plan_destination(request.destination, input_root(source),
                            output_name=_decrypted_name(request.archive),
                            preserve_structure=request.preserve_structure)
    if request.archive and not plan.is_directory_mode:
        system_util.fatal("startup.error", msg="Extracting archives needs a destination directory",
                          destination=str(plan.root))

    files = iter_input_files(source, ENCRYPTED_EXTENSIONS, request.recursive)
    return run_batch("decrypt", files, plan, partial(decrypt_one, request=request))
