"""
Command contract and helpers for building commands from functions.

A command is anything the shell can dispatch to: it exposes one or more
invocation names, a one-line description for the help listing, an
optional long description for ``<name> help``, and a ``run`` method.

Example:
    class Echo(Command):
        names = ["echo", "say"]
        short_description = "Echoes input"

        def run(self, command_name, args, out, err):
            out.write(" ".join(args))
            return True
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from .context import CommandContext
from .exceptions import CommandRegistrationError
from .output import OutputWriter

RunFunc = Callable[[str, list[str], OutputWriter, OutputWriter], Any]


class Command(ABC):
    """
    Abstract base class for shell commands.

    Subclasses provide ``names``, ``short_description`` and ``run``;
    ``long_description`` is optional. Plain class attributes satisfy the
    name and description properties.
    """

    @property
    @abstractmethod
    def names(self) -> list[str]:
        """
        Invocation names, in display order.

        Any of the names runs the command; e.g. an exit command might be
        reachable as "exit", "quit" and "bye".
        """
        pass

    @property
    @abstractmethod
    def short_description(self) -> str:
        """One-line description shown in the help listing."""
        pass

    @property
    def long_description(self) -> str | None:
        """Detailed description shown by ``<name> help``, or None."""
        return None

    @abstractmethod
    def run(
        self,
        command_name: str,
        args: list[str],
        out: OutputWriter,
        err: OutputWriter,
    ) -> bool:
        """
        Execute the command.

        Args:
            command_name: The name used to invoke the command
            args: Arguments following the name, case preserved
            out: Channel for regular output
            err: Channel for error output

        Returns:
            bool: False if the shell should stop; True otherwise
        """
        pass

    @property
    def context(self) -> CommandContext | None:
        """Session context of the shell this command is attached to."""
        return getattr(self, "_context", None)

    def attach(self, context: CommandContext) -> None:
        """Bind the command to a shell session context."""
        self._context = context


@dataclass
class CommandConfig:
    """Configuration for a function-backed command."""

    names: list[str]
    short_description: str = ""
    long_description: str | None = None
    aliases: list[str] = field(default_factory=list)


class BuiltCommand(Command):
    """Command implementation built by CommandBuilder."""

    def __init__(self, config: CommandConfig, run_func: RunFunc) -> None:
        self.config = config
        self._run_func = run_func

    @property
    def names(self) -> list[str]:
        return [*self.config.names, *self.config.aliases]

    @property
    def short_description(self) -> str:
        return self.config.short_description

    @property
    def long_description(self) -> str | None:
        return self.config.long_description

    def run(
        self,
        command_name: str,
        args: list[str],
        out: OutputWriter,
        err: OutputWriter,
    ) -> bool:
        # Functions that return nothing keep the shell running
        result = self._run_func(command_name, args, out, err)
        return result is not False


class CommandBuilder:
    """
    Builder for creating commands from plain functions.

    Example:
        cmd = (
            CommandBuilder("echo")
            .with_alias("say")
            .with_description("Echoes input")
            .with_run_function(lambda name, args, out, err: out.write(" ".join(args)))
            .build()
        )
    """

    def __init__(self, name: str):
        """
        Initialize the command builder.

        Args:
            name: Primary command name
        """
        self._name = name
        self._aliases: list[str] = []
        self._description = ""
        self._long_description: str | None = None
        self._run_func: RunFunc | None = None

    def with_alias(self, alias: str) -> CommandBuilder:
        """Add an alias for the command."""
        self._aliases.append(alias)
        return self

    def with_aliases(self, *aliases: str) -> CommandBuilder:
        """Add multiple aliases for the command."""
        self._aliases.extend(aliases)
        return self

    def with_description(self, desc: str) -> CommandBuilder:
        """Set the one-line description."""
        self._description = desc
        return self

    def with_long_description(self, desc: str) -> CommandBuilder:
        """Set the description shown by ``<name> help``."""
        self._long_description = desc
        return self

    def with_run_function(self, func: RunFunc) -> CommandBuilder:
        """Set the function executed when the command runs."""
        self._run_func = func
        return self

    def build(self) -> BuiltCommand:
        """Build the command with all configured options."""
        if self._run_func is None:
            raise CommandRegistrationError(
                "Command requires a run function", name=self._name
            )
        config = CommandConfig(
            names=[self._name],
            short_description=self._description,
            long_description=self._long_description,
            aliases=list(self._aliases),
        )
        return BuiltCommand(config, self._run_func)
