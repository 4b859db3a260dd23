"""Tests for the structured logger and time helpers."""

from mediaconv.utils import LogLevel, logger, time_util


class TestFormatKv:

    def test_types(self):
        line = logger.format_kv({"file": 'a "b".mkv', "code": 1, "ok": True, "dst": None})
        assert line == 'file="a \\"b\\".mkv" | code=1 | ok=true | dst=null'

    def test_newlines_are_escaped(self):
        assert logger.format_kv({"error": "line1\nline2"}) == 'error="line1\\nline2"'


class TestLog:

    def test_level_filtering(self, capsys):
        logger.set_log_level(LogLevel.INFO)
        logger.log("hidden.event", LogLevel.DEBUG, x=1)
        logger.log("shown.event", LogLevel.INFO, x=1)
        out = capsys.readouterr().out
        assert "hidden.event" not in out
        assert "[INFO] | shown.event | x=1" in out

    def test_warnings_go_to_stderr(self, capsys):
        logger.log("something.odd", LogLevel.WARN, file="a.mkv")
        captured = capsys.readouterr()
        assert "something.odd" in captured.err
        assert "something.odd" not in captured.out


class TestTimeUtil:

    def test_parse_progress_seconds(self):
        assert time_util.parse_progress_seconds("frame=1 time=01:02:03.50 speed=1x") == 3723.5
        assert time_util.parse_progress_seconds("time=N/A") is None

    def test_format_runtime(self):
        assert time_util.format_runtime(3725.9) == "01:02:05"

    def test_eta_strings(self):
        assert time_util.get_eta_single_file(100, 2.0, 40).endswith("(30s)")
        assert time_util.get_eta_total(1, 3, 600).endswith("(20m0s)")

    def test_eta_includes_hours_for_long_batches(self):
        assert time_util.get_eta_total(1, 2, 3725).endswith("(1h2m5s)")
