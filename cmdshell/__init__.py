"""
Embeddable command-line shell driver.

Example:
    from cmdshell import Command, ExitCommand, Shell

    class Echo(Command):
        names = ["echo", "say"]
        short_description = "Echoes input"

        def run(self, command_name, args, out, err):
            out.write(" ".join(args))
            return True

    Shell().with_prompt("> ").with_commands([Echo(), ExitCommand()]).run()
"""

from importlib.metadata import PackageNotFoundError, version

from .builtins import ExitCommand
from .command import BuiltCommand, Command, CommandBuilder, CommandConfig
from .config import ShellConfig
from .context import CommandContext
from .discovery import CommandDiscovery, ModuleDiscovery, StaticDiscovery
from .exceptions import (
    CommandRegistrationError,
    ConfigError,
    DiscoveryError,
    RegistryLockedError,
    ShellError,
)
from .output import BufferedOutput, ConsoleOutput, NullOutput, OutputWriter
from .registry import CommandRegistry
from .shell import Shell, split_line
from .table import OutputTable

try:
    __version__ = version("cmdshell")
except PackageNotFoundError:
    # Package not installed (development mode)
    __version__ = "0.1.0-dev"

__all__ = [
    "__version__",
    # Shell
    "Shell",
    "split_line",
    "ShellConfig",
    "CommandContext",
    # Commands
    "Command",
    "CommandConfig",
    "CommandBuilder",
    "BuiltCommand",
    "ExitCommand",
    "CommandRegistry",
    # Discovery
    "CommandDiscovery",
    "ModuleDiscovery",
    "StaticDiscovery",
    # Output
    "OutputWriter",
    "ConsoleOutput",
    "BufferedOutput",
    "NullOutput",
    "OutputTable",
    # Exceptions
    "ShellError",
    "CommandRegistrationError",
    "RegistryLockedError",
    "DiscoveryError",
    "ConfigError",
]
