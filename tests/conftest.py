"""Shared fixtures: fake external tools and scratch media trees."""

from pathlib import Path

import pytest

from mediaconv.utils import logger, system_util, LogLevel


class FakeTools:
    """Stands in for the subprocess helpers and records every command."""

    def __init__(self):
        self.calls = []
        self.streamed = []
        self.pipelines = []
        self.channels = {}          # file name -> channel count output
        self.crop_output = {}       # file name -> cropdetect stderr
        self.probe_failures = set()  # file names whose probes exit non-zero
        self.encode_failures = set()  # file names whose encode exits non-zero
        self.pipeline_code = 0
        self.stream_lines = []

    def run_cmd(self, cmd, env=None):
        self.calls.append((list(cmd), env))
        name = Path(cmd[-1]).name if cmd[-1] != "-" else Path(cmd[cmd.index("-i") + 1]).name
        if cmd[0] == "ffprobe":
            if name in self.probe_failures:
                return 1, "", f"{name}: Invalid data found when processing input"
            if "stream=channels" in cmd:
                return 0, self.channels.get(name, "2\n"), ""
            return 0, "60.000000\n", ""
        if cmd[0] == "ffmpeg" and "cropdetect" in cmd:
            if name in self.probe_failures:
                return 1, "", "decode error"
            return 0, "", self.crop_output.get(name, "")
        if cmd[0] == "age":
            out = Path(cmd[cmd.index("-o") + 1])
            if Path(cmd[-1]).name in self.encode_failures:
                out.write_bytes(b"partial")
                return 1, "", "age: error: no identity matched"
            out.write_bytes(b"age-data")
            return 0, "", ""
        return 0, "", ""

    def stream_cmd(self, cmd, on_line=None, env=None, merge_stdout=False):
        self.streamed.append((list(cmd), env))
        for line in self.stream_lines:
            if on_line:
                on_line(line)
        dst = Path(cmd[-1])
        src = Path(cmd[cmd.index("-i") + 1]) if "-i" in cmd else None
        if src is not None and src.name in self.encode_failures:
            dst.write_bytes(b"partial")
            return 1, "Conversion failed!"
        if cmd[0] == "ffmpeg":
            dst.write_bytes(b"encoded")
        return 0, ""

    def run_pipeline(self, producer, consumer):
        self.pipelines.append((list(producer), list(consumer)))
        if "-o" in consumer:
            out = Path(consumer[consumer.index("-o") + 1])
            out.write_bytes(b"partial" if self.pipeline_code else b"age-data")
        return self.pipeline_code, "tar: broken pipe" if self.pipeline_code else ""

    @property
    def encodes(self):
        return [cmd for cmd, _ in self.streamed if cmd[0] == "ffmpeg"]


@pytest.fixture
def fake_tools(monkeypatch):
    tools = FakeTools()
    monkeypatch.setattr(system_util, "run_cmd", tools.run_cmd)
    monkeypatch.setattr(system_util, "stream_cmd", tools.stream_cmd)
    monkeypatch.setattr(system_util, "run_pipeline", tools.run_pipeline)
    monkeypatch.setattr(system_util.shutil, "which", lambda binary: f"/usr/bin/{binary}")
    return tools


@pytest.fixture(autouse=True)
def reset_log_level():
    yield
    logger.set_log_level(LogLevel.INFO)


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """Source tree with two videos, an unrelated file and a nested video."""
    src = tmp_path / "src"
    src.mkdir()
    (src / "a.mp4").write_bytes(b"video")
    (src / "b.MKV").write_bytes(b"video")
    (src / "notes.txt").write_text("not media")
    nested = src / "season1"
    nested.mkdir()
    (nested / "c.avi").write_bytes(b"video")
    return src
