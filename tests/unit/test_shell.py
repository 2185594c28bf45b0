"""
Tests for shell.py.

Tests key functionality including:
- Line splitting
- Routing by name and alias
- Global and per-command help
- Unknown commands and blank lines
- Loop termination, shutdown and error hardening
"""

import io
import logging

import pytest

from cmdshell import (
    BufferedOutput,
    CommandContext,
    ExitCommand,
    RegistryLockedError,
    Shell,
    ShellConfig,
    StaticDiscovery,
    split_line,
)
from tests.helpers.commands import FailingCommand, RecordingCommand, ShellBuilder


def _echo() -> RecordingCommand:
    return RecordingCommand(
        ["echo", "say"],
        "Echoes input",
        long_description="Prints its arguments.",
    )


def _help_rows(lines: list[str], pairs: list[tuple[str, str]]) -> set[tuple[str, str]]:
    """Parse unframed help lines back into (key, value) pairs."""
    key_width = max(len(key) for key, _ in pairs)
    return {(line[:key_width].rstrip(), line[key_width + 1 :].rstrip()) for line in lines}


# =============================================================================
# Test split_line
# =============================================================================


@pytest.mark.unit
class TestSplitLine:
    """Test split_line helper function."""

    def test_name_lowercased_args_preserved(self):
        """Test the name is lower-cased while arguments keep their case."""
        assert split_line("SAY Hello World") == ("say", ["Hello", "World"])

    def test_whitespace_runs_collapse(self):
        """Test arguments split on arbitrary runs of whitespace."""
        assert split_line("  echo \t a   b\tc  ") == ("echo", ["a", "b", "c"])

    def test_name_only(self):
        """Test a bare name has no arguments."""
        assert split_line("exit") == ("exit", [])

    def test_blank_line(self):
        """Test blank lines yield an empty name."""
        assert split_line("") == ("", [])
        assert split_line(" \t ") == ("", [])


# =============================================================================
# Test dispatch through run()
# =============================================================================


@pytest.mark.unit
class TestRouting:
    """Test command routing in the shell loop."""

    def test_alias_invokes_command_with_name_and_args(self):
        """Test 'say hello world' runs Echo with the invoked alias."""
        echo = _echo()
        shell, out, _ = (
            ShellBuilder()
            .with_commands(echo)
            .with_lines("say hello world")
            .build()
        )

        shell.run()

        assert echo.calls == [("say", ["hello", "world"])]
        assert out.text == "> hello world\n> "

    @pytest.mark.parametrize("name", ["echo", "say", "ECHO", "Say"])
    def test_every_alias_routes_to_command(self, name):
        """Test each alias, in any case, reaches the same command."""
        echo = _echo()
        shell, _, _ = ShellBuilder().with_commands(echo).with_lines(f"{name} x").build()

        shell.run()

        assert echo.calls == [(name.lower(), ["x"])]

    def test_later_registration_shadows(self):
        """Test the most recently registered command handles a shared name."""
        builtin = RecordingCommand(["ls"])
        override = RecordingCommand(["ls"])
        shell, _, _ = ShellBuilder().with_commands(builtin, override).with_lines("ls").build()

        shell.run()

        assert builtin.calls == []
        assert override.calls == [("ls", [])]

    def test_loop_continues_after_command(self):
        """Test commands returning True keep the loop going."""
        echo = _echo()
        shell, out, _ = (
            ShellBuilder()
            .with_commands(echo)
            .with_lines("echo 1", "echo 2")
            .build()
        )

        shell.run()

        assert echo.calls == [("echo", ["1"]), ("echo", ["2"])]
        assert out.text.count("> ") == 3

    def test_none_result_continues(self):
        """Test only False stops the loop."""
        quiet = RecordingCommand(["quiet"], result=None)
        shell, _, _ = ShellBuilder().with_commands(quiet).with_lines("quiet", "quiet").build()

        shell.run()

        assert len(quiet.calls) == 2


@pytest.mark.unit
class TestBlankAndUnknown:
    """Test lines that do not invoke commands."""

    def test_blank_lines_do_nothing(self, caplog):
        """Test empty and whitespace lines neither invoke nor warn."""
        echo = _echo()
        shell, out, err = (
            ShellBuilder()
            .with_commands(echo)
            .with_lines("", "   ", "\t")
            .build()
        )

        with caplog.at_level(logging.DEBUG):
            shell.run()

        assert echo.calls == []
        assert out.text == "> " * 4
        assert err.text == ""
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_unknown_command_warns_and_continues(self, caplog):
        """Test 'bogus' logs a warning naming it and the loop re-prompts."""
        echo = _echo()
        shell, out, err = (
            ShellBuilder()
            .with_commands(echo)
            .with_lines("bogus", "echo ok")
            .build()
        )

        with caplog.at_level(logging.WARNING):
            shell.run()

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "bogus" in warnings[0].getMessage()
        assert echo.calls == [("echo", ["ok"])]
        assert sorted(shell.registry.names()) == ["echo", "say"]
        assert out.text == "> > ok\n> "
        assert err.lines == ["No such command 'bogus' registered"]


@pytest.mark.unit
class TestGlobalHelp:
    """Test the global help listing."""

    @pytest.mark.parametrize("token", ["help", "?", "HELP", "  Help  "])
    def test_help_token_lists_commands(self, token):
        """Test each help token renders one row per distinct command."""
        echo = _echo()
        shell, out, _ = (
            ShellBuilder()
            .with_prompt("")
            .with_commands(echo, ExitCommand())
            .with_lines(token)
            .build()
        )

        shell.run()

        pairs = [("echo, say", "Echoes input"), ("exit, quit, bye", "Exit the shell")]
        assert len(out.lines) == 2
        assert _help_rows(out.lines, pairs) == set(pairs)
        assert echo.calls == []

    def test_help_token_wins_over_command_named_help(self):
        """Test a command named 'help' is shadowed by the help token."""
        named_help = RecordingCommand(["help"], "A command called help")
        shell, out, _ = (
            ShellBuilder()
            .with_prompt("")
            .with_commands(named_help)
            .with_lines("help")
            .build()
        )

        shell.run()

        assert named_help.calls == []
        assert out.lines == ["help A command called help"]

    def test_help_with_arguments_still_global(self):
        """Test 'help echo' shows the global listing."""
        echo = _echo()
        shell, out, _ = (
            ShellBuilder()
            .with_prompt("")
            .with_commands(echo)
            .with_lines("help echo")
            .build()
        )

        shell.run()

        assert out.lines == ["echo, say Echoes input"]

    def test_reconfigured_tokens_free_help_name(self):
        """Test a command named 'help' is reachable once tokens change."""
        named_help = RecordingCommand(["help"])
        shell, out, _ = (
            ShellBuilder()
            .with_prompt("")
            .with_commands(named_help)
            .with_lines("help me", "h")
            .build()
        )
        shell.with_help_tokens(["H"])

        shell.run()

        assert named_help.calls == [("help", ["me"])]
        assert out.lines[-1] == "help Records calls"


@pytest.mark.unit
class TestCommandHelp:
    """Test per-command help."""

    @pytest.mark.parametrize("line", ["echo help", "say ?", "SAY Help extra"])
    def test_shows_forms_and_long_description(self, line):
        """Test '<name> help' prints forms and the long description."""
        echo = _echo()
        shell, out, _ = (
            ShellBuilder()
            .with_prompt("")
            .with_commands(echo)
            .with_lines(line)
            .build()
        )

        shell.run()

        name = line.split()[0].lower()
        assert out.lines == [
            f"{name} command help:",
            "",
            "Command forms: echo, say",
            "Prints its arguments.",
        ]
        assert echo.calls == []

    def test_without_long_description(self):
        """Test nothing follows the forms line when there is no long description."""
        plain = RecordingCommand(["plain"])
        shell, out, _ = (
            ShellBuilder()
            .with_prompt("")
            .with_commands(plain)
            .with_lines("plain help")
            .build()
        )

        shell.run()

        assert out.lines == ["plain command help:", "", "Command forms: plain"]

    def test_help_token_later_is_an_argument(self):
        """Test only the first argument is checked for help."""
        echo = _echo()
        shell, _, _ = ShellBuilder().with_commands(echo).with_lines("echo me help").build()

        shell.run()

        assert echo.calls == [("echo", ["me", "help"])]


@pytest.mark.unit
class TestTermination:
    """Test loop termination and shutdown."""

    def test_false_stops_without_further_reads(self):
        """Test a False result returns from run() leaving input unread."""
        echo = _echo()
        stream = io.StringIO("echo before\nexit\necho after\n")
        out = BufferedOutput()
        shell = (
            Shell()
            .with_input(stream)
            .with_output(out, BufferedOutput())
            .with_commands([echo, ExitCommand()])
        )

        shell.run()

        assert echo.calls == [("echo", ["before"])]
        assert stream.readline() == "echo after\n"
        assert out.text == "> before\n> "

    def test_end_of_input_stops(self):
        """Test the loop ends when input is exhausted."""
        shell, out, _ = ShellBuilder().build()

        shell.run()

        assert out.text == "> "

    def test_shutdown_called_once(self):
        """Test shutdown() runs when the loop exits."""
        calls = []

        class TrackingShell(Shell):
            def shutdown(self):
                calls.append("shutdown")

        shell = (
            TrackingShell()
            .with_input(io.StringIO("quit\n"))
            .with_output(BufferedOutput(), BufferedOutput())
            .with_command(ExitCommand())
        )

        shell.run()

        assert calls == ["shutdown"]

    def test_shutdown_called_when_command_raises(self):
        """Test shutdown() runs even if an exception escapes the loop."""
        calls = []

        class TrackingShell(Shell):
            def shutdown(self):
                calls.append("shutdown")

        shell = (
            TrackingShell()
            .with_input(io.StringIO("fail\n"))
            .with_output(BufferedOutput(), BufferedOutput())
            .with_command(FailingCommand())
            .with_harden(False)
        )

        with pytest.raises(RuntimeError, match="boom"):
            shell.run()

        assert calls == ["shutdown"]
        assert not shell.registry.locked


@pytest.mark.unit
class TestHardening:
    """Test handling of exceptions raised by commands."""

    def test_failure_reported_and_loop_continues(self, caplog):
        """Test a failing command is reported on err and logged."""
        failing = FailingCommand()
        echo = _echo()
        shell, out, err = (
            ShellBuilder()
            .with_commands(failing, echo)
            .with_lines("fail x", "echo next")
            .build()
        )

        with caplog.at_level(logging.ERROR):
            shell.run()

        assert failing.calls == [("fail", ["x"])]
        assert echo.calls == [("echo", ["next"])]
        assert err.lines == ["Error: fail: boom"]
        assert "command failed" in caplog.text
        failures = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert failures[0].exc_info[0] is RuntimeError

    def test_unhardened_failure_propagates(self):
        """Test harden=False lets the exception escape run()."""
        shell, _, _ = (
            ShellBuilder()
            .with_harden(False)
            .with_commands(FailingCommand())
            .with_lines("fail")
            .build()
        )

        with pytest.raises(RuntimeError):
            shell.run()

    def test_keyboard_interrupt_propagates(self):
        """Test KeyboardInterrupt is never swallowed."""

        class Interrupting(RecordingCommand):
            def run(self, command_name, args, out, err):
                raise KeyboardInterrupt

        shell, _, _ = (
            ShellBuilder()
            .with_commands(Interrupting(["stop"]))
            .with_lines("stop")
            .build()
        )

        with pytest.raises(KeyboardInterrupt):
            shell.run()

    def test_registration_during_run_rejected(self):
        """Test commands cannot register new commands mid-loop."""

        class Registering(RecordingCommand):
            def __init__(self, shell_ref):
                super().__init__(["register"])
                self.shell_ref = shell_ref

            def run(self, command_name, args, out, err):
                self.shell_ref.append(True)
                shell.with_command(RecordingCommand(["late"]))
                return True

        ran: list[bool] = []
        shell, _, err = ShellBuilder().with_lines("register").build()
        shell.with_command(Registering(ran))

        shell.run()

        assert ran == [True]
        assert "late" not in shell.registry
        assert err.lines[0].startswith("Error: register: Cannot register command")

    def test_registry_lock_error_type(self):
        """Test the lock raises RegistryLockedError directly when unhardened."""
        seen = []

        class Registering(RecordingCommand):
            def run(self, command_name, args, out, err):
                try:
                    shell.with_command(RecordingCommand(["late"]))
                except RegistryLockedError as e:
                    seen.append(e)
                return False

        shell, _, _ = (
            ShellBuilder()
            .with_commands(Registering(["register"]))
            .with_lines("register")
            .build()
        )

        shell.run()

        assert len(seen) == 1


@pytest.mark.unit
class TestContext:
    """Test the session context."""

    def test_context_updated_before_each_invocation(self):
        """Test commands see their own name and args in the context."""
        echo = _echo()
        shell, _, _ = (
            ShellBuilder()
            .with_commands(echo)
            .with_lines("say a b", "echo c")
            .build()
        )

        shell.run()

        assert echo.contexts == [("say", ["a", "b"]), ("echo", ["c"])]
        assert shell.context.invocations == 2

    def test_help_and_unknown_do_not_update_context(self):
        """Test only real invocations touch the context."""
        echo = _echo()
        shell, _, _ = (
            ShellBuilder()
            .with_commands(echo)
            .with_lines("help", "echo help", "bogus")
            .build()
        )

        shell.run()

        assert shell.context.invocations == 0
        assert shell.context.command_name is None

    def test_host_supplied_context(self):
        """Test a context passed by the host is the one updated."""
        context = CommandContext(data={"user": "alice"})
        echo = _echo()
        shell, _, _ = ShellBuilder().with_commands(echo).with_lines("echo hi").build()
        shell.with_context(context)

        shell.run()

        assert context.command_name == "echo"
        assert echo.context is context
        assert context.data == {"user": "alice"}


@pytest.mark.unit
class TestConfiguration:
    """Test shell setup helpers."""

    def test_from_config(self):
        """Test prompt, help tokens and hardening come from ShellConfig."""
        config = ShellConfig(prompt="app> ", help_tokens=("h",), harden=False)

        shell = Shell.from_config(config)

        assert shell.prompt == "app> "
        assert shell.help_tokens == frozenset({"h"})
        assert shell.lg.name == "/cmdshell"

    def test_from_config_applies_level_to_existing_logger(self):
        """Test from_config sets the level even after a default Shell()."""
        Shell()

        shell = Shell.from_config(ShellConfig(log_level="debug"))

        assert shell.lg.getEffectiveLevel() == logging.DEBUG
        assert shell.lg.config.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in shell.lg.handlers)

    def test_from_config_disables_logging(self):
        """Test log_level false silences an already created logger."""
        Shell()

        shell = Shell.from_config(ShellConfig(log_level=False))

        assert shell.lg.disabled

    def test_with_discovery_registers_found_commands(self):
        """Test commands from a discovery collaborator are registered in order."""
        first = RecordingCommand(["a"])
        second = RecordingCommand(["a", "b"])
        discovery = StaticDiscovery({"tools": [first, second]})

        shell = Shell().with_discovery(discovery, "tools")

        assert shell.registry.get("a") is second
        assert shell.registry.get("b") is second

    def test_dispatch_single_line(self):
        """Test dispatch() handles one line without the loop."""
        echo = _echo()
        out = BufferedOutput()
        shell = Shell().with_output(out).with_commands([echo, ExitCommand()])

        assert shell.dispatch("say hi") is True
        assert shell.dispatch("bye") is False
        assert out.text == "hi\n"

    def test_prompt_written_to_stdout(self, capsys, monkeypatch):
        """Test default channels and stdin are the process streams."""
        monkeypatch.setattr("sys.stdin", io.StringIO("echo hi\n"))
        shell = Shell().with_prompt("$ ").with_command(_echo())

        shell.run()

        assert capsys.readouterr().out == "$ hi\n$ "

    def test_with_logger(self, test_logger, caplog):
        """Test a replacement logger receives unknown-command warnings."""
        shell, _, _ = ShellBuilder().with_lines("bogus").build()
        shell.with_logger(test_logger)

        with caplog.at_level(logging.WARNING, logger="/test"):
            shell.run()

        assert shell.lg is test_logger
        assert shell.registry.lg is test_logger
        assert [r.name for r in caplog.records] == ["/test"]
