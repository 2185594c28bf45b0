"""
The shell driver.

Shell owns the read-dispatch-print loop and the command registry. Hosts
provide a prompt and commands, then call run():

    shell = (
        Shell()
        .with_prompt("app> ")
        .with_commands([Echo(), ExitCommand()])
    )
    shell.run()

Each iteration prints the prompt, reads one line and either renders help,
dispatches to a registered command, or warns about an unknown command.
The loop ends when a command returns False or input is exhausted.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import TYPE_CHECKING, TextIO

from .constants import DEFAULT_HELP_TOKENS, DEFAULT_PROMPT
from .context import CommandContext
from .help import print_command_help, print_help
from .log import LogConfig, LoggerFactory
from .output import ConsoleOutput, OutputWriter
from .registry import CommandRegistry

if TYPE_CHECKING:
    from .command import Command
    from .config import ShellConfig
    from .discovery import CommandDiscovery


def split_line(line: str) -> tuple[str, list[str]]:
    """
    Split an input line into a lower-cased command name and its arguments.

    Arguments keep their case. A blank line yields an empty name.

    Example:
        >>> split_line("  Say Hello   World ")
        ('say', ['Hello', 'World'])
    """
    parts = line.strip().split(None, 1)
    if not parts:
        return "", []
    command_name = parts[0].lower()
    args = parts[1].split() if len(parts) > 1 else []
    return command_name, args


class Shell:
    """
    Interactive command-line shell driver.

    Registration methods return the shell for chaining and must be
    called before run(); the registry is locked while the loop runs.
    """

    def __init__(self, lg: logging.Logger | None = None) -> None:
        """
        Initialize an empty shell.

        Args:
            lg: Logger for warnings and errors (defaults to "/cmdshell" at warning level)
        """
        self._lg = lg or LoggerFactory.create(
            "/cmdshell", LogConfig.from_params("warning")
        )
        self._prompt = DEFAULT_PROMPT
        self._help_tokens: frozenset[str] = frozenset(DEFAULT_HELP_TOKENS)
        self._registry = CommandRegistry(self._lg)
        self._context = CommandContext()
        self._input: TextIO | None = None
        self._out: OutputWriter = ConsoleOutput(sys.stdout)
        self._err: OutputWriter = ConsoleOutput(sys.stderr)
        self._harden = True

    @classmethod
    def from_config(cls, config: ShellConfig, lg: logging.Logger | None = None) -> Shell:
        """Create a shell from a ShellConfig."""
        if lg is None:
            log_config = config.log_config()
            lg = LoggerFactory.reconfigure(
                LoggerFactory.create("/cmdshell", log_config), log_config
            )
        return (
            cls(lg)
            .with_prompt(config.prompt)
            .with_help_tokens(config.help_tokens)
            .with_harden(config.harden)
        )

    # Configuration

    def with_prompt(self, prompt: str) -> Shell:
        """Set the prompt printed before each line is read."""
        self._prompt = prompt
        return self

    def with_help_tokens(self, tokens: Iterable[str]) -> Shell:
        """Replace the set of strings that request help."""
        self._help_tokens = frozenset(token.strip().lower() for token in tokens)
        return self

    def with_context(self, context: CommandContext) -> Shell:
        """Use a host-supplied session context."""
        self._context = context
        return self

    def with_input(self, stream: TextIO) -> Shell:
        """Read lines from a stream instead of stdin."""
        self._input = stream
        return self

    def with_output(
        self, out: OutputWriter, err: OutputWriter | None = None
    ) -> Shell:
        """Set the output (and optionally error) channels."""
        self._out = out
        if err is not None:
            self._err = err
        return self

    def with_logger(self, lg: logging.Logger) -> Shell:
        """Replace the logger used for warnings and command failures."""
        self._lg = lg
        self._registry.lg = lg
        return self

    def with_harden(self, harden: bool) -> Shell:
        """
        Set whether command exceptions are reported instead of propagated.

        When hardened (the default), an exception raised by a command is
        logged, reported on the error channel, and the loop continues.
        """
        self._harden = harden
        return self

    # Registration

    def with_command(self, command: Command) -> Shell:
        """Register a command under all of its names."""
        self._registry.register(command)
        return self

    def with_commands(self, commands: Iterable[Command]) -> Shell:
        """Register commands in order; later commands shadow earlier names."""
        self._registry.register_all(list(commands))
        return self

    def with_discovery(self, discovery: CommandDiscovery, namespace: str) -> Shell:
        """Register every command a discovery collaborator finds in a namespace."""
        commands = discovery.discover(namespace)
        self._lg.debug(
            "discovered commands",
            extra={"namespace": namespace, "count": len(commands)},
        )
        return self.with_commands(commands)

    # Accessors

    @property
    def prompt(self) -> str:
        return self._prompt

    @property
    def help_tokens(self) -> frozenset[str]:
        return self._help_tokens

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def context(self) -> CommandContext:
        return self._context

    @property
    def lg(self) -> logging.Logger:
        return self._lg

    def is_help_token(self, text: str) -> bool:
        """Check whether text requests help."""
        return text.strip().lower() in self._help_tokens

    # Loop

    def _read_line(self) -> str | None:
        """Read one line, or None at end of input."""
        stream = self._input if self._input is not None else sys.stdin
        line = stream.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def _invoke(self, command: Command, command_name: str, args: list[str]) -> bool:
        """Run a command and return whether the loop should continue."""
        self._context.update(command_name, args)
        try:
            result = command.run(command_name, args, self._out, self._err)
        except Exception as e:
            if not self._harden:
                raise
            self._lg.error(
                "command failed",
                extra={"command": command_name, "exception": e},
                exc_info=True,
            )
            self._err.write(f"Error: {command_name}: {e}")
            return True
        return result is not False

    def dispatch(self, line: str) -> bool:
        """
        Process a single input line.

        Args:
            line: Raw input line

        Returns:
            bool: False if a command asked the shell to stop; True otherwise
        """
        command_name, args = split_line(line)
        if not command_name:
            return True

        if command_name in self._help_tokens:
            print_help(self._registry, self._out)
            return True

        command = self._registry.get(command_name)
        if command is None:
            message = f"No such command '{command_name}' registered"
            self._lg.warning(message, extra={"command": command_name})
            self._err.write(message)
            return True

        if args and self.is_help_token(args[0]):
            print_command_help(command_name, command, self._out)
            return True

        return self._invoke(command, command_name, args)

    def run(self) -> None:
        """
        Run the shell until a command stops it or input ends.

        shutdown() is called when the loop exits, however it exits.
        """
        for command in self._registry.commands():
            attach = getattr(command, "attach", None)
            if attach is not None:
                attach(self._context)

        self._registry.lock()
        try:
            while True:
                self._out.write_raw(self._prompt)
                self._out.flush()

                line = self._read_line()
                if line is None:
                    self._lg.debug("end of input")
                    break
                if not self.dispatch(line):
                    break
        finally:
            self._registry.unlock()
            self.shutdown()

    def shutdown(self) -> None:
        """
        Called when the shell loop exits.

        Override to release resources held by the host or its commands.
        """
        pass
