"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline and quiet/verbose rules
- JSON and plain rendering of responses and tables
- Pagination envelopes
- Global instance management and convenience functions
"""

from __future__ import annotations

import json

import pytest

from traktclient import output as output_module
from traktclient.models import PaginatedResponse, Pagination
from traktclient.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("traktclient.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("traktclient.output._is_tty", lambda: True)


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_no_color(self, tty):
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


class TestStreams:
    def test_data_to_stdout_diagnostics_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.print_data("payload")
        mgr.info("info")
        mgr.success("done")
        mgr.warning("careful")
        mgr.error("broken")
        mgr.suggest("next")
        mgr.debug("details")
        captured = capfd.readouterr()
        assert captured.out == "payload\n"
        for text in ("info", "done", "Warning: careful", "Error: broken", "→ next", "[debug] details"):
            assert text in captured.err

    def test_quiet_keeps_warnings_and_errors(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("info")
        mgr.success("done")
        mgr.suggest("next")
        mgr.warning("careful")
        mgr.error("broken")
        err = capfd.readouterr().err
        assert "info" not in err
        assert "done" not in err
        assert "next" not in err
        assert "careful" in err
        assert "broken" in err

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("details")
        assert capfd.readouterr().err == ""


class TestFormatResponse:
    def test_json(self, capfd):
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response({"title": "Tron", "year": 2010})
        out = capfd.readouterr().out
        assert json.loads(out) == {"title": "Tron", "year": 2010}
        assert "\n  " in out

    def test_plain_dict(self, capfd):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response({"title": "Tron", "ids": {"trakt": 1}})
        assert capfd.readouterr().out.splitlines() == ["title\tTron", 'ids\t{"trakt": 1}']

    def test_plain_list_of_dicts(self, capfd):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}])
        assert capfd.readouterr().out.splitlines() == ["1\tx", "2\ty"]

    def test_none_prints_nothing(self, capfd):
        OutputManager(format=OutputFormat.JSON, no_color=True).format_response(None)
        assert capfd.readouterr().out == ""

    def test_rich_renders_something(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH, no_color=True).format_response({"key": "value"})
        assert "key" in capfd.readouterr().out


class TestPrintResponse:
    envelope = PaginatedResponse(
        data=[{"title": "Tron"}],
        pagination=Pagination(item_count=30, limit=10, page=1, page_count=3),
    )

    def test_json_prints_whole_envelope(self, capfd):
        OutputManager(format=OutputFormat.JSON, no_color=True).print_response(self.envelope)
        assert json.loads(capfd.readouterr().out) == {
            "data": [{"title": "Tron"}],
            "pagination": {"item-count": 30, "limit": 10, "page": 1, "page-count": 3},
        }

    def test_plain_splits_data_and_summary(self, capfd):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_response(self.envelope)
        captured = capfd.readouterr()
        assert captured.out == "Tron\n"
        assert "Page 1/3 (30 items, 10 per page)" in captured.err

    def test_not_paginated(self, capfd):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_response(
            PaginatedResponse(data="x", pagination=False)
        )
        assert "Endpoint is not paginated" in capfd.readouterr().err


class TestPrintTable:
    def test_json_records(self, capfd):
        OutputManager(format=OutputFormat.JSON, no_color=True).print_table(["Key", "URL"], [["a", "/a"]])
        assert json.loads(capfd.readouterr().out) == [{"Key": "a", "URL": "/a"}]

    def test_plain_tsv(self, capfd):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_table(["Key", "URL"], [["a", "/a"]])
        assert capfd.readouterr().out == "Key\tURL\na\t/a\n"


class TestGlobalInstance:
    def test_lazy_default_and_reset(self):
        reset_output()
        first = get_output()
        assert get_output() is first
        reset_output()
        assert get_output() is not first

    def test_convenience_functions_delegate(self, capfd):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True))
        output_module.info("hello")
        output_module.error("bad")
        output_module.debug("dbg")
        err = capfd.readouterr().err
        assert "hello" in err
        assert "Error: bad" in err
        assert "[debug] dbg" in err
