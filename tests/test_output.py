"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- format_response and print_table in JSON and plain modes
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from bbcreds.output import (
    REDACTED,
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    redact,
    reset_output,
    set_output,
)
from bbcreds import output as output_module


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("bbcreds.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("bbcreds.output._is_tty", lambda: True)


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
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


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert "hello world" in captured.out
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic text" in captured.err

    def test_error_and_warning_prefixes(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.error("boom")
        mgr.warning("careful")
        err = capfd.readouterr().err
        assert "Error: boom" in err
        assert "Warning: careful" in err


class TestQuietAndVerbose:
    def test_quiet_suppresses_info_and_success(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("info")
        mgr.success("done")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors_and_warnings(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.error("bad")
        mgr.warning("hmm")
        err = capfd.readouterr().err
        assert "bad" in err
        assert "hmm" in err

    def test_debug_hidden_without_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.debug("internals")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.debug("internals")
        assert "[debug] internals" in capfd.readouterr().err


class TestFormatResponse:
    def test_json_dict(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response({"id": "pat", "scope": "GLOBAL"})
        assert json.loads(capfd.readouterr().out) == {"id": "pat", "scope": "GLOBAL"}

    def test_plain_dict_is_key_tab_value(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response({"id": "pat", "kind": "personal_access_token"})
        lines = capfd.readouterr().out.splitlines()
        assert lines == ["id\tpat", "kind\tpersonal_access_token"]

    def test_plain_list_of_dicts(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response([{"a": 1, "b": 2}, "x"])
        assert capfd.readouterr().out.splitlines() == ["1\t2", "x"]


class TestPrintTable:
    def test_json_records(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.print_table(["ID", "KIND"], [["a", "username_password"]])
        assert json.loads(capfd.readouterr().out) == [{"ID": "a", "KIND": "username_password"}]

    def test_plain_tab_separated(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["ID", "KIND"], [["a", "x"], ["b", "y"]])
        assert capfd.readouterr().out.splitlines() == ["ID\tKIND", "a\tx", "b\ty"]

    def test_rich_table_renders_cells(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["ID"], [["cred-1"]], title="Credentials")
        assert "cred-1" in capfd.readouterr().out


class TestGlobalInstance:
    def test_get_output_creates_default_lazily(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_installs_instance(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_module_helpers_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.print_data("via helper")
        output_module.error("helper error")
        captured = capfd.readouterr()
        assert "via helper" in captured.out
        assert "Error: helper error" in captured.err


class TestRedaction:
    def test_secret_fields_masked(self):
        record = {"id": "b", "token": "s3cret", "nested": [{"Password": "hunter2"}]}
        assert redact(record) == {
            "id": "b",
            "token": REDACTED,
            "nested": [{"Password": REDACTED}],
        }

    def test_format_response_never_prints_secret(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response({"id": "b", "token": "s3cret"})
        out = capfd.readouterr().out
        assert "s3cret" not in out
        assert json.loads(out)["token"] == REDACTED

    def test_markup_in_messages_is_literal(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.PLAIN)
        mgr.error("bad value [red]x[/red]")
        assert "bad value [red]x[/red]" in capfd.readouterr().err
