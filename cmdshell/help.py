"""
Help output for the shell.

Global help lists every distinct command once, keyed by its aliases;
per-command help shows the command's forms and long description.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .constants import ALIAS_SEPARATOR
from .output import OutputWriter
from .table import OutputTable

if TYPE_CHECKING:
    from .command import Command
    from .registry import CommandRegistry


def format_aliases(command: Command) -> str:
    """Join a command's names for display."""
    return ALIAS_SEPARATOR.join(command.names)


def build_help_table(registry: CommandRegistry, out: OutputWriter) -> OutputTable:
    """Build the unframed help table, one row per distinct command."""
    table = OutputTable(out).with_lines(False)
    for command in registry.commands():
        table.add_row(format_aliases(command), command.short_description)
    return table


def print_help(registry: CommandRegistry, out: OutputWriter) -> None:
    """Print the global help listing."""
    build_help_table(registry, out).print()


def print_command_help(command_name: str, command: Command, out: OutputWriter) -> None:
    """Print help for a single command."""
    out.write(f"{command_name} command help:")
    out.write()
    out.write(f"Command forms: {format_aliases(command)}")
    if command.long_description:
        out.write(command.long_description)
