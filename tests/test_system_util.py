"""Tests for subprocess helpers, run against the current Python interpreter."""

import os
import sys
import threading

import pytest

from mediaconv.utils import system_util
from mediaconv.utils.constants import TOOL_OUTPUT_TAIL_LINES

PY = sys.executable


class TestRunCmd:

    def test_captures_output_and_code(self):
        code, out, err = system_util.run_cmd([PY, "-c", "import sys; print('hi'); sys.exit(3)"])
        assert code == 3
        assert out.strip() == "hi"

    def test_env_overrides_apply_to_child_only(self, monkeypatch):
        monkeypatch.delenv("SVT_LOG", raising=False)
        code, out, _ = system_util.run_cmd([PY, "-c", "import os; print(os.environ['SVT_LOG'])"],
                                           env={"SVT_LOG": "1"})
        assert out.strip() == "1"
        assert "SVT_LOG" not in os.environ


class TestStreamCmd:

    def test_lines_are_streamed_from_stderr(self):
        seen = []
        code, err = system_util.stream_cmd(
            [PY, "-c", "import sys; sys.stderr.write('one\\ntwo\\n')"], on_line=seen.append)
        assert code == 0
        assert seen == ["one\n", "two\n"]
        assert err == "one\ntwo\n"

    def test_merge_stdout(self):
        seen = []
        code, _ = system_util.stream_cmd([PY, "-c", "print('PRGV:1,2,3')"], on_line=seen.append,
                                         merge_stdout=True)
        assert seen == ["PRGV:1,2,3\n"]

    def test_only_a_bounded_tail_is_returned(self):
        code, output = system_util.stream_cmd(
            [PY, "-c", "import sys\nfor i in range(5000): sys.stderr.write(f'PRGV:{i},0,0\\n')"])
        lines = output.splitlines()
        assert code == 0
        assert len(lines) == TOOL_OUTPUT_TAIL_LINES
        assert lines[-1] == "PRGV:4999,0,0"


class TestRunPipeline:

    def test_success(self):
        code, _ = system_util.run_pipeline([PY, "-c", "print('data')"],
                                           [PY, "-c", "import sys; assert sys.stdin.read() == 'data\\n'"])
        assert code == 0

    def test_producer_failure_wins(self):
        code, _ = system_util.run_pipeline([PY, "-c", "import sys; sys.exit(4)"],
                                           [PY, "-c", "import sys; sys.stdin.read()"])
        assert code == 4

    def test_consumer_failure(self):
        code, _ = system_util.run_pipeline([PY, "-c", "print('x')"],
                                           [PY, "-c", "import sys; sys.stdin.read(); sys.exit(5)"])
        assert code == 5

    def test_noisy_producer_stderr_does_not_block(self):
        producer = [PY, "-c", "import sys; sys.stderr.write('w' * 500000); sys.stdout.write('data')"]
        consumer = [PY, "-c", "import sys; sys.stdin.read()"]
        result = {}

        def run():
            result["code"], result["err"] = system_util.run_pipeline(producer, consumer)

        worker = threading.Thread(target=run, daemon=True)
        worker.start()
        worker.join(timeout=30)

        assert not worker.is_alive()
        assert result["code"] == 0
        assert len(result["err"]) == 500000


class TestPreconditions:

    def test_which_or_die(self, monkeypatch):
        monkeypatch.setattr(system_util.shutil, "which", lambda binary: None)
        with pytest.raises(SystemExit) as exc:
            system_util.which_or_die("ffmpeg")
        assert exc.value.code == 2

    def test_tool_env(self):
        assert system_util.tool_env(None) is None
        assert system_util.tool_env({"A": "b"})["A"] == "b"
