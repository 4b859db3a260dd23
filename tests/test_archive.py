"""Tests for age/tar command assembly and the encrypt/decrypt batches."""

from pathlib import Path

import pytest

from mediaconv.archive import (
    ArchiveRequest,
    age_decrypt_cmd,
    age_encrypt_cmd,
    decrypt_paths,
    encrypt_paths,
    tar_create_cmd,
    tar_extract_cmd,
)
from mediaconv.pipeline import FileStatus
from mediaconv.utils import EXIT_FILE_FAILED


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "taxes.pdf").write_bytes(b"pdf")
    (docs / "notes.txt").write_text("notes")
    (docs / "old.txt.age").write_bytes(b"already encrypted")
    return docs


@pytest.fixture
def recipients(tmp_path: Path) -> Path:
    path = tmp_path / "recipients.txt"
    path.write_text("age1examplepublickey\n")
    return path


class TestCommands:

    def test_encrypt_with_recipients(self):
        cmd = age_encrypt_cmd(Path("out.age"), Path("keys.txt"), Path("in.txt"))
        assert cmd == ["age", "-e", "-R", "keys.txt", "-o", "out.age", "in.txt"]

    def test_encrypt_with_passphrase_from_stdin(self):
        assert age_encrypt_cmd(Path("out.age")) == ["age", "-e", "-p", "-o", "out.age"]

    def test_decrypt(self):
        assert age_decrypt_cmd(Path("in.age"), Path("id.txt"), Path("out")) == \
            ["age", "-d", "-i", "id.txt", "-o", "out", "in.age"]
        assert age_decrypt_cmd(Path("in.age")) == ["age", "-d", "in.age"]

    def test_tar(self):
        assert tar_create_cmd(Path("/data/photos")) == ["tar", "-cf", "-", "-C", "/data", "photos"]
        assert tar_extract_cmd(Path("/restore")) == ["tar", "-xf", "-", "-C", "/restore"]


class TestEncrypt:

    def test_each_file_encrypted_and_age_files_skipped(self, fake_tools, docs_dir, recipients, tmp_path):
        dest = tmp_path / "vault"

        summary = encrypt_paths(ArchiveRequest(docs_dir, dest, key_file=recipients))

        assert summary.succeeded == 2
        assert (dest / "taxes.pdf.age").exists()
        assert (dest / "notes.txt.age").exists()
        assert not (dest / "old.txt.age.age").exists()
        assert all("-R" in cmd for cmd, _ in fake_tools.calls)

    def test_failure_removes_partial_output(self, fake_tools, docs_dir, recipients, tmp_path):
        fake_tools.encode_failures.add("notes.txt")
        dest = tmp_path / "vault"

        summary = encrypt_paths(ArchiveRequest(docs_dir, dest, key_file=recipients))

        assert not (dest / "notes.txt.age").exists()
        assert summary.exit_code == EXIT_FILE_FAILED
        assert summary.succeeded == 1

    def test_archive_mode_pipes_tar_into_age(self, fake_tools, docs_dir, recipients, tmp_path):
        dest = tmp_path / "vault"

        summary = encrypt_paths(ArchiveRequest(docs_dir, dest, key_file=recipients, archive=True))

        assert summary.succeeded == 1
        producer, consumer = fake_tools.pipelines[0]
        assert producer[:3] == ["tar", "-cf", "-"]
        assert producer[-1] == "docs"
        assert consumer[:2] == ["age", "-e"]
        assert (dest / "docs.tar.age").exists()

    def test_archive_pipeline_failure(self, fake_tools, docs_dir, recipients, tmp_path):
        fake_tools.pipeline_code = 2
        dest = tmp_path / "vault"

        summary = encrypt_paths(ArchiveRequest(docs_dir, dest, key_file=recipients, archive=True))

        assert summary.failed == 1
        assert not (dest / "docs.tar.age").exists()

    def test_archive_delete_source_removes_tree(self, fake_tools, docs_dir, recipients, tmp_path):
        encrypt_paths(ArchiveRequest(docs_dir, tmp_path / "vault", key_file=recipients, archive=True,
                                     delete_source=True))
        assert not docs_dir.exists()

    def test_missing_key_file_is_fatal(self, fake_tools, docs_dir, tmp_path):
        with pytest.raises(SystemExit) as exc:
            encrypt_paths(ArchiveRequest(docs_dir, tmp_path / "vault", key_file=tmp_path / "nokeys.txt"))
        assert exc.value.code == 2


class TestDecrypt:

    def test_decrypts_only_age_files(self, fake_tools, docs_dir, tmp_path):
        dest = tmp_path / "plain"

        summary = decrypt_paths(ArchiveRequest(docs_dir, dest))

        assert [r.source.name for r in summary.results] == ["old.txt.age"]
        assert (dest / "old.txt").exists()

    def test_extract_pipes_age_into_tar(self, fake_tools, tmp_path):
        vault = tmp_path / "vault"
        vault.mkdir()
        (vault / "photos.tar.age").write_bytes(b"age")
        dest = tmp_path / "restore"

        summary = decrypt_paths(ArchiveRequest(vault, dest, archive=True))

        assert summary.results[0].status is FileStatus.SUCCEEDED
        producer, consumer = fake_tools.pipelines[0]
        assert producer == ["age", "-d", str(vault.resolve() / "photos.tar.age")]
        assert consumer == ["tar", "-xf", "-", "-C", str(dest.resolve())]

    def test_extract_needs_directory_destination(self, fake_tools, tmp_path):
        vault = tmp_path / "vault"
        vault.mkdir()
        (vault / "photos.tar.age").write_bytes(b"age")
        with pytest.raises(SystemExit):
            decrypt_paths(ArchiveRequest(vault, tmp_path / "photos.tar", archive=True))
