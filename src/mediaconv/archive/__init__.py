"""Encrypted archives with age and tar.

- core: age/tar command builders and the single-file and piped runners
- batch: encrypt/decrypt batch commands
"""

from .core import (
    age_decrypt_cmd,
    age_encrypt_cmd,
    decrypt_archive,
    decrypt_file,
    encrypt_archive,
    encrypt_file,
    tar_create_cmd,
    tar_extract_cmd,
)
from .batch import ArchiveRequest, decrypt_one, decrypt_paths, encrypt_one, encrypt_paths

__all__ = [
    "age_decrypt_cmd",
    "age_encrypt_cmd",
    "tar_create_cmd",
    "tar_extract_cmd",
    "encrypt_file",
    "encrypt_archive",
    "decrypt_file",
    "decrypt_archive",
    "ArchiveRequest",
    "encrypt_one",
    "decrypt_one",
    "encrypt_paths",
    "decrypt_paths",
]
