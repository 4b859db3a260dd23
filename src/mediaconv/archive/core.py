"""
Command builders and runners for age encryption and tar streaming.

age reads recipients (public keys) from a file for encryption and an identity
(private key) file for decryption. Without a recipients file, encryption
falls back to an interactive passphrase; without an identity, age prompts for
the passphrase itself when the file needs one.
"""
from pathlib import Path
from typing import List, Optional, Tuple

from mediaconv.utils import LogLevel, logger, system_util


def age_encrypt_cmd(dst: Path, recipients: Optional[Path] = None, src: Optional[Path] = None) -> List[str]:
    """`age -e`; reads stdin when `src` is None."""
    cmd = ["age", "-e"]
    cmd += ["-R", str(recipients)] if recipients else ["-p"]
    cmd += ["-o", str(dst)]
    if src is not None:
        cmd.append(str(src))
    return cmd


def age_decrypt_cmd(src: Path, identity: Optional[Path] = None, dst: Optional[Path] = None) -> List[str]:
    """`age -d`; writes stdout when `dst` is None."""
    cmd = ["age", "-d"]
    if identity:
        cmd += ["-i", str(identity)]
    if dst is not None:
        cmd += ["-o", str(dst)]
    cmd.append(str(src))
    return cmd


def tar_create_cmd(path: Path) -> List[str]:
    """Stream `path` as a tar archive on stdout, stored under its own name."""
    return ["tar", "-cf", "-", "-C", str(path.parent), path.name]


def tar_extract_cmd(dst_dir: Path) -> List[str]:
    return ["tar", "-xf", "-", "-C", str(dst_dir)]


def _report(event: str, src: Path, code: int, err: str) -> None:
    if code != 0:
        logger.log(f"{event}.failed", LogLevel.ERROR,
                   file=src.name,
                   exit_code=code,
                   error=err.strip()[-200:] or None)


def encrypt_file(src: Path, dst: Path, recipients: Optional[Path] = None) -> Tuple[int, str]:
    code, _, err = system_util.run_cmd(age_encrypt_cmd(dst, recipients, src))
    _report("encrypt", src, code, err)
    return code, err


def encrypt_archive(src: Path, dst: Path, recipients: Optional[Path] = None) -> Tuple[int, str]:
    """`tar -cf - src | age -e ... -o dst`"""
    code, err = system_util.run_pipeline(tar_create_cmd(src), age_encrypt_cmd(dst, recipients))
    _report("encrypt", src, code, err)
    return code, err


def decrypt_file(src: Path, dst: Path, identity: Optional[Path] = None) -> Tuple[int, str]:
    code, _, err = system_util.run_cmd(age_decrypt_cmd(src, identity, dst))
    _report("decrypt", src, code, err)
    return code, err


def decrypt_archive(src: Path, dst_dir: Path, identity: Optional[Path] = None) -> Tuple[int, str]:
    """`age -d ... src | tar -xf - -C dst_dir`"""
    code, err = system_util.run_pipeline(age_decrypt_cmd(src, identity), tar_extract_cmd(dst_dir))
    _report("decrypt", src, code, err)
    return code, err
