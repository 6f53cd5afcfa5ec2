"""Tests for gplay.output.console module."""

from __future__ import annotations

import pytest

from gplay.output.console import ConsoleProtocol, MockConsole, RichConsole, Style


class TestStyle:
    def test_str_conversion(self) -> None:
        assert str(Style.SUCCESS) == "success"
        assert str(Style.DEBUG) == "debug"

    def test_all_styles_exist(self) -> None:
        expected = {"DEFAULT", "SUCCESS", "ERROR", "WARNING", "INFO", "DIM", "DEBUG", "HEADER"}
        assert {s.name for s in Style} == expected


class TestMockConsole:
    def test_prefixes(self) -> None:
        console = MockConsole()
        console.success("done")
        console.error("failed")
        console.warning("careful")

        assert console.messages == ["OK done", "error: failed", "warning: careful"]
        assert console.has_error()
        assert console.has_warning()

    def test_debug_hidden_when_not_verbose(self) -> None:
        console = MockConsole(verbose=False)
        console.debug("details")
        assert console.outputs == []

    def test_debug_shown_when_verbose(self) -> None:
        console = MockConsole(verbose=True)
        console.debug("details")
        assert console.count(Style.DEBUG) == 1

    def test_find_and_text(self) -> None:
        console = MockConsole()
        console.header("Configs")
        console.print("- track: beta", Style.DIM)
        console.newline()

        assert len(console.find("track")) == 1
        assert console.text == "Configs\n- track: beta\n"

    def test_satisfies_protocol(self) -> None:
        console: ConsoleProtocol = MockConsole()
        console.info("ok")


class TestRichConsole:
    def test_messages_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        console = RichConsole()
        console.print("[bold]not markup[/bold]")
        console.warning("path [x]")

        out = capsys.readouterr().out
        assert "[bold]not markup[/bold]" in out
        assert "warning: path [x]" in out

    def test_errors_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole().error("bad key")

        captured = capsys.readouterr()
        assert "error: bad key" in captured.err
        assert "bad key" not in captured.out

    def test_debug_respects_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        RichConsole(verbose=False).debug("hidden")
        RichConsole(verbose=True).debug("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
