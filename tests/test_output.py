"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode
- JSON, plain and rich rendering of auth results
- Output file redirection
- The logging handler used for library log records
- Global instance management and convenience functions
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from authflow import output as output_module
from authflow.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("authflow.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("authflow.output._is_tty", lambda: True)


RESULT = {
    "success": True,
    "redirect": "/",
    "errors": [],
    "messages": ["You have been successfully logged in."],
    "token": "abc",
    "failure_kind": None,
    "response": {"status": 200, "body": {"data": {"token": "abc"}}},
}


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty):
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON

    def test_enum_from_config_string(self):
        assert OutputFormat("plain") is OutputFormat.PLAIN


class TestColorDisabling:
    def test_no_color_env_disables_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("hello world")
        captured = capfd.readouterr()
        assert "hello world" in captured.out
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic text" in captured.err

    def test_format_response_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.info("status")
        mgr.format_response(RESULT)
        captured = capfd.readouterr()
        assert json.loads(captured.out) == RESULT
        assert "status" in captured.err


class TestQuietMode:
    def test_quiet_suppresses_success_and_info(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("info")
        mgr.success("done")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.error("Bad credentials")
        assert "Error: Bad credentials" in capfd.readouterr().err

    def test_quiet_suppresses_suggestions(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).suggest("Check the base URL")
        assert capfd.readouterr().err == ""

    def test_suggest_has_arrow(self, capfd, non_tty):
        OutputManager(no_color=True).suggest("Check the base URL")
        assert capfd.readouterr().err == "→ Check the base URL\n"


# ------------------------------------------------------------------ #
# Rendering
# ------------------------------------------------------------------ #


class TestPlainFormat:
    def test_result_as_key_value_lines(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response(RESULT)
        lines = capfd.readouterr().out.splitlines()
        assert "success\tTrue" in lines
        assert "redirect\t/" in lines
        assert "messages\tYou have been successfully logged in." in lines
        assert "errors\t" in lines
        assert "failure_kind\t" in lines
        assert 'response\t{"status": 200, "body": {"data": {"token": "abc"}}}' in lines

    def test_multiple_errors_joined(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response({"errors": ["first", "second"]})
        assert capfd.readouterr().out == "errors\tfirst; second\n"

    def test_string(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response("ok")
        assert capfd.readouterr().out == "ok\n"


class TestJsonFormat:
    def test_string_that_is_json_is_reindented(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response('{"a":1}')
        assert capfd.readouterr().out == '{\n  "a": 1\n}\n'

    def test_plain_string(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response("not json")
        assert capfd.readouterr().out == "not json\n"

    def test_unicode_kept(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"msg": "Willkommen zurück"})
        assert "zurück" in capfd.readouterr().out


class TestRichFormat:
    def test_dict_produces_output(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH).format_response(RESULT)
        out = capfd.readouterr().out
        assert "success" in out
        assert "abc" in out


class TestOutputFile:
    def test_format_response_writes_to_file(self, tmp_path, capfd, non_tty):
        target = tmp_path / "result.json"
        mgr = OutputManager(format=OutputFormat.PLAIN, output_file=str(target))
        mgr.format_response(RESULT)
        assert capfd.readouterr().out == ""
        assert json.loads(target.read_text(encoding="utf-8")) == RESULT

    def test_print_data_appends(self, tmp_path, non_tty):
        target = tmp_path / "out.txt"
        mgr = OutputManager(format=OutputFormat.PLAIN, output_file=str(target))
        mgr.print_data("one")
        mgr.print_data("two\n")
        assert target.read_text(encoding="utf-8") == "one\ntwo\n"


# ------------------------------------------------------------------ #
# Logging handler
# ------------------------------------------------------------------ #


class TestLoggingHandler:
    def test_plain_handler_without_color(self, non_tty):
        handler = OutputManager(no_color=True).logging_handler()
        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.WARNING

    def test_rich_handler_with_color(self, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        handler = OutputManager().logging_handler()
        assert isinstance(handler, RichHandler)

    def test_verbose_lowers_level(self, non_tty):
        handler = OutputManager(no_color=True, verbose=True).logging_handler()
        assert handler.level == logging.DEBUG

    def test_records_reach_stderr(self, capfd, non_tty):
        handler = OutputManager(no_color=True).logging_handler()
        logger = logging.getLogger("authflow.test_output")
        logger.addHandler(handler)
        try:
            logger.warning("token is not provided under 'data.token' key")
        finally:
            logger.removeHandler(handler)
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "WARNING authflow.test_output: token is not provided" in captured.err


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_set_then_reset(self):
        custom = OutputManager(quiet=True)
        set_output(custom)
        assert get_output() is custom
        reset_output()
        assert get_output() is not custom


class TestConvenienceFunctions:
    def test_format_response_convenience(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True))
        output_module.format_response({"ok": True})
        assert json.loads(capfd.readouterr().out) == {"ok": True}

    def test_error_convenience(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.error("fail")
        assert "Error: fail" in capfd.readouterr().err

    def test_suggest_convenience(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.suggest("retry later")
        assert "→ retry later" in capfd.readouterr().err
