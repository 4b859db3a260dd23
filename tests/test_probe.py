"""Tests for probe output parsers and the probe subprocess wrappers."""

from pathlib import Path

from mediaconv.transcode import probe
from mediaconv.transcode.probe import ProbeStatus, parse_channels, parse_crop

CROPDETECT_STDERR = """\
Input #0, matroska,webm, from 'film.mkv':
[Parsed_cropdetect_0 @ 0x55d] x1:0 x2:1919 y1:138 y2:941 w:1920 h:800 x:0 y:140 pts:1 t:0.04 crop=1920:800:0:140
[Parsed_cropdetect_0 @ 0x55d] x1:0 x2:1919 y1:136 y2:943 w:1920 h:800 x:0 y:140 pts:2 t:0.08 crop=1920:800:0:140
[Parsed_cropdetect_0 @ 0x55d] x1:0 x2:1919 y1:132 y2:947 w:1920 h:816 x:0 y:132 pts:3 t:0.12 crop=1920:816:0:132
frame=  300 fps=150 q=-0.0 Lsize=N/A time=00:00:12.01 bitrate=N/A speed=6.01x
"""


class TestParseChannels:

    def test_single_line(self):
        result = parse_channels("6\n")
        assert result.status is ProbeStatus.FOUND
        assert result.value == 6

    def test_empty_output_means_no_audio(self):
        result = parse_channels("")
        assert result.status is ProbeStatus.NOT_FOUND
        assert result.value is None

    def test_garbage_is_not_found(self):
        assert parse_channels("N/A\n").status is ProbeStatus.NOT_FOUND

    def test_leading_blank_lines(self):
        assert parse_channels("\n\n2\n").value == 2


class TestParseCrop:

    def test_last_match_wins(self):
        result = parse_crop(CROPDETECT_STDERR)
        assert result.is_found
        assert result.value == "crop=1920:816:0:132"

    def test_no_match_is_distinct_from_zero_offset(self):
        missing = parse_crop("frame=  300 fps=150 time=00:00:12.01 speed=6.01x\n")
        zero = parse_crop("crop=1920:1080:0:0")
        assert missing.status is ProbeStatus.NOT_FOUND
        assert missing.value is None
        assert zero.is_found
        assert zero.value == "crop=1920:1080:0:0"


class TestProbeCommands:

    def test_channel_probe_selects_first_audio_stream(self):
        cmd = probe.channel_probe_cmd(Path("movie.mkv"))
        assert cmd[:3] == ["ffprobe", "-v", "error"]
        assert cmd[cmd.index("-select_streams") + 1] == "a:0"
        assert cmd[cmd.index("-show_entries") + 1] == "stream=channels"
        assert cmd[-1] == "movie.mkv"

    def test_crop_probe_is_bounded_and_discards_output(self):
        cmd = probe.crop_probe_cmd(Path("movie.mkv"), seconds=90)
        assert cmd[cmd.index("-t") + 1] == "90"
        assert "-an" in cmd
        assert cmd[cmd.index("-vf") + 1] == "cropdetect"
        assert cmd[-3:] == ["-f", "null", "-"]


class TestProbeRunners:

    def test_probe_channels(self, fake_tools):
        fake_tools.channels["film.mkv"] = "8\n"
        assert probe.probe_channels(Path("film.mkv")).value == 8

    def test_probe_channels_failure(self, fake_tools):
        fake_tools.probe_failures.add("broken.mkv")
        result = probe.probe_channels(Path("broken.mkv"))
        assert result.is_failed
        assert "ffprobe code 1" in result.detail
        assert "Invalid data" in result.detail

    def test_probe_crop_reads_stderr(self, fake_tools):
        fake_tools.crop_output["film.mkv"] = CROPDETECT_STDERR
        assert probe.probe_crop(Path("film.mkv")).value == "crop=1920:816:0:132"

    def test_probe_crop_failure(self, fake_tools):
        fake_tools.probe_failures.add("broken.mkv")
        assert probe.probe_crop(Path("broken.mkv")).is_failed

    def test_probe_duration(self, fake_tools):
        assert probe.probe_duration(Path("film.mkv")) == 60.0

    def test_probe_duration_failure(self, fake_tools):
        fake_tools.probe_failures.add("broken.mkv")
        assert probe.probe_duration(Path("broken.mkv")) is None
