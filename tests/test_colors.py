"""Tests for console color helpers"""
import io
import sys

import pytest

from db_changelog.core.colors import ConsoleColors, _format_error_msg, format_file_size


class TerminalStream(io.StringIO):
    def isatty(self):
        return True


@pytest.fixture
def colors_enabled(monkeypatch):
    monkeypatch.setattr(ConsoleColors, "_enabled", True)


class TestConsoleColors:
    def test_disabled_returns_plain_text(self, monkeypatch):
        monkeypatch.setattr(ConsoleColors, "_enabled", False)
        assert ConsoleColors.success("ok") == "ok"
        assert ConsoleColors.status(False, "bad") == "bad"

    def test_enabled_wraps_text(self, colors_enabled):
        assert ConsoleColors.success("ok") == f"{ConsoleColors.GREEN}ok{ConsoleColors.RESET}"
        assert ConsoleColors.status(False, "bad").startswith(ConsoleColors.RED)

    def test_ljust_ignores_escape_codes(self, colors_enabled):
        styled = ConsoleColors.bold("abc")
        assert ConsoleColors.visible_len(styled) == 3
        assert ConsoleColors.ljust(styled, 6).endswith("abc" + ConsoleColors.RESET + "   ")

    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        ConsoleColors.configure()
        assert not ConsoleColors.is_enabled()

    def test_no_color_flag(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setattr(ConsoleColors, "_enabled", True)
        ConsoleColors.configure(no_color=True)
        assert not ConsoleColors.is_enabled()

    def test_detection_follows_report_stream(self, monkeypatch):
        monkeypatch.setattr(ConsoleColors, "_enabled", False)
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm")
        monkeypatch.setattr(sys, "stdout", io.StringIO())
        ConsoleColors.configure(stream=TerminalStream())
        assert ConsoleColors.is_enabled()
        ConsoleColors.configure(stream=io.StringIO())
        assert not ConsoleColors.is_enabled()
        ConsoleColors.configure()
        assert not ConsoleColors.is_enabled()


@pytest.mark.parametrize("size,expected", [
    (0, "0 B"),
    (42, "42 B"),
    (1536, "1.5 KB"),
    (5 * 1024 * 1024, "5.0 MB"),
])
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_format_error_msg():
    assert _format_error_msg("serializing", "xml", ValueError("bad")) == "Error serializing for xml: bad"
    assert _format_error_msg("reading diff data") == "Error reading diff data"
