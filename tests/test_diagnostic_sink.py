"""Tests for the diagnostic sink and logging setup"""
import io
import json
import logging
import re

import pytest

from db_changelog.core.exceptions import ConfigurationError, InternalError
from db_changelog.core.logging import SEVERE, DiagnosticSink, LogLevel, setup_logging

LINE_PATTERN = r"^\[{level}\] \d{{4}}-\d{{2}}-\d{{2}} \d{{2}}:\d{{2}}:\d{{2}}: {name}: {message}$"


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


@pytest.fixture
def sink_factory(request, streams):
    """Build sinks on a per-test logger name and close them afterwards"""
    created = []

    def factory(level="DEBUG", **kwargs):
        out, err = streams
        name = f"tests.sink.{request.node.name}"
        sink = DiagnosticSink(name, level, stdout=out, stderr=err, **kwargs)
        created.append(sink)
        return sink

    yield factory
    for sink in created:
        sink.close()


class TestLogLevel:
    """Tests for LogLevel parsing"""

    def test_ordering(self):
        assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARNING < LogLevel.SEVERE

    def test_severe_is_registered(self):
        assert logging.getLevelName(SEVERE) == "SEVERE"

    @pytest.mark.parametrize("value,expected", [
        ("debug", LogLevel.DEBUG),
        ("INFO", LogLevel.INFO),
        ("warn", LogLevel.WARNING),
        ("ERROR", LogLevel.SEVERE),
        (logging.WARNING, LogLevel.WARNING),
        (LogLevel.SEVERE, LogLevel.SEVERE),
    ])
    def test_parse(self, value, expected):
        assert LogLevel.parse(value) is expected

    @pytest.mark.parametrize("value", ["LOUD", 13, None, True])
    def test_unknown_level(self, value):
        with pytest.raises(InternalError, match="Encountered an unknown log level"):
            LogLevel.parse(value)


class TestDiagnosticSink:
    """Tests for DiagnosticSink routing and gating"""

    def test_warning_gate(self, sink_factory, streams):
        out, err = streams
        sink = sink_factory("WARNING")
        sink.debug("hidden detail")
        sink.severe("Unable to write changelog")
        assert out.getvalue() == ""
        lines = err.getvalue().splitlines()
        assert len(lines) == 1
        assert re.match(
            LINE_PATTERN.format(level=r"SEVERE", name=re.escape(sink.name), message="Unable to write changelog"),
            lines[0],
        )

    def test_routing(self, sink_factory, streams):
        out, err = streams
        sink = sink_factory("DEBUG")
        sink.debug("d")
        sink.info("i")
        sink.warning("w")
        sink.severe("s")
        assert [line.split("]")[0] for line in out.getvalue().splitlines()] == ["[DEBUG", "[INFO"]
        assert [line.split("]")[0] for line in err.getvalue().splitlines()] == ["[WARNING", "[SEVERE"]

    def test_blank_messages_dropped(self, sink_factory, streams):
        out, err = streams
        sink = sink_factory("DEBUG")
        sink.info("")
        sink.severe("   ")
        assert out.getvalue() == ""
        assert err.getvalue() == ""

    def test_traceback_follows_message(self, sink_factory, streams):
        _, err = streams
        sink = sink_factory("DEBUG")
        try:
            raise ValueError("broken")
        except ValueError as e:
            sink.severe("Write failed", exc_info=e)
        text = err.getvalue()
        assert "Write failed" in text
        assert "Traceback" in text
        assert text.index("Write failed") < text.index("ValueError: broken")

    def test_unknown_level_raises(self, sink_factory):
        sink = sink_factory()
        with pytest.raises(InternalError):
            sink.log("LOUD", "message")

    def test_set_level(self, sink_factory, streams):
        out, _ = streams
        sink = sink_factory("SEVERE")
        assert not sink.is_enabled_for("INFO")
        sink.set_level("INFO")
        assert sink.level is LogLevel.INFO
        sink.info("now visible")
        assert "now visible" in out.getvalue()

    def test_child_loggers_propagate(self, sink_factory, streams):
        _, err = streams
        sink = sink_factory("INFO")
        logging.getLogger(f"{sink.name}.child").warning("from child")
        assert "from child" in err.getvalue()

    def test_json_format(self, sink_factory, streams):
        _, err = streams
        sink = sink_factory("INFO", log_format="json")
        sink.severe("structured")
        entry = json.loads(err.getvalue().strip())
        assert entry["level"] == "SEVERE"
        assert entry["message"] == "structured"
        assert entry["logger"] == sink.name


class TestLogFile:
    """Tests for the log file route"""

    def test_log_file_takes_error_route(self, sink_factory, streams, tmp_path):
        _, err = streams
        log_file = tmp_path / "logs" / "changelog.log"
        sink = sink_factory("INFO", log_file=log_file)
        sink.severe("to the file")
        sink.close_log_file()
        assert "to the file" in log_file.read_text(encoding="utf-8")
        assert err.getvalue() == ""

    def test_close_log_file_restores_stream(self, sink_factory, streams, tmp_path):
        _, err = streams
        sink = sink_factory("INFO", log_file=tmp_path / "a.log")
        sink.close_log_file()
        assert sink.log_file is None
        sink.warning("back on stderr")
        assert "back on stderr" in err.getvalue()

    def test_log_file_encoding(self, sink_factory, tmp_path):
        log_file = tmp_path / "wide.log"
        sink = sink_factory("INFO", log_file=log_file, encoding="UTF-16")
        sink.severe("wide")
        sink.close_log_file()
        assert "wide" in log_file.read_bytes().decode("utf-16")

    def test_unsupported_log_file_encoding(self, sink_factory, tmp_path):
        with pytest.raises(ConfigurationError, match="not supported"):
            sink_factory("INFO", log_file=tmp_path / "x.log", encoding="no-such-encoding")

    def test_unopenable_log_file(self, sink_factory, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        with pytest.raises(ConfigurationError, match="Could not create log file"):
            sink_factory("INFO", log_file=blocker / "x.log")


class TestSinkLifecycle:
    """Tests for closing and re-attaching sinks"""

    def test_close_detaches_and_restores_propagation(self, streams):
        out, err = streams
        logger = logging.getLogger("tests.sink.lifecycle")
        logger.propagate = True
        with DiagnosticSink("tests.sink.lifecycle", "DEBUG", stdout=out, stderr=err) as sink:
            assert logger.propagate is False
            sink.info("inside")
        assert logger.propagate is True
        logger.warning("after close")
        assert "after close" not in err.getvalue()
        assert "inside" in out.getvalue()

    def test_close_restores_logger_level(self, streams):
        out, err = streams
        logger = logging.getLogger("tests.sink.level_restore")
        logger.setLevel(logging.INFO)
        with DiagnosticSink("tests.sink.level_restore", "SEVERE", stdout=out, stderr=err):
            assert logger.level == SEVERE
        assert logger.level == logging.INFO

    def test_new_sink_replaces_previous_handlers(self, streams):
        out, err = streams
        first_out = io.StringIO()
        first = DiagnosticSink("tests.sink.replace", "INFO", stdout=first_out, stderr=io.StringIO())
        second = DiagnosticSink("tests.sink.replace", "INFO", stdout=out, stderr=err)
        try:
            second.info("only once")
            assert first_out.getvalue() == ""
            assert out.getvalue().count("only once") == 1
        finally:
            second.close()
            first.close()


class TestSetupLogging:
    """Tests for setup_logging"""

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        sink = setup_logging(name="tests.setup.env")
        try:
            assert sink.level is LogLevel.WARNING
        finally:
            sink.close()

    def test_invalid_level_falls_back_to_info(self, capsys):
        sink = setup_logging("LOUD", name="tests.setup.invalid")
        try:
            assert sink.level is LogLevel.INFO
        finally:
            sink.close()
        assert "Invalid log level 'LOUD'" in capsys.readouterr().err
