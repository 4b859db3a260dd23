"""
Input discovery for batch commands.

A source argument may name a single file or a directory. Directories are
expanded (optionally recursively) and filtered against a case-insensitive
extension allow-list; an empty allow-list accepts every file.
"""
from pathlib import Path
from typing import AbstractSet, Iterator

from mediaconv.utils import system_util


def normalize_extensions(extensions) -> frozenset:
    """Turn user input like ``["MKV", ".mp4"]`` into ``{".mkv", ".mp4"}``."""
    normalized = set()
    for ext in extensions or ():
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(normalized)


def matches_extension(path: Path, extensions: AbstractSet[str]) -> bool:
    """Check a file against the allow-list. Multi-part suffixes such as `.tar.age` match by ending."""
    if not extensions:
        return True
    name = path.name.lower()
    return any(name.endswith(ext) for ext in extensions)


def check_source(root: Path) -> Path:
    """Resolve the source root, aborting the invocation when it does not exist."""
    root = Path(root).expanduser()
    if not root.exists():
        system_util.fatal("startup.error", msg="Source path does not exist", source=str(root))
    return root.resolve()


def input_root(root: Path) -> Path:
    """Directory that relative output paths are computed from."""
    return root if root.is_dir() else root.parent


def iter_input_files(root: Path, extensions: AbstractSet[str], recursive: bool = False) -> Iterator[Path]:
    """Yield candidate files under `root` whose extension is in `extensions`."""
    if root.is_file():
        if matches_extension(root, extensions):
            yield root
        return

    candidates = root.rglob("*") if recursive else root.iterdir()
    for p in sorted(candidates):
        if p.is_file() and matches_extension(p, extensions):
            yield p
