"""
Commands shipped with the shell.
"""

from .command import Command
from .output import OutputWriter


class ExitCommand(Command):
    """Stops the shell."""

    names = ["exit", "quit", "bye"]
    short_description = "Exit the shell"
    long_description = "Stops reading input and returns control to the host application."

    def run(
        self,
        command_name: str,
        args: list[str],
        out: OutputWriter,
        err: OutputWriter,
    ) -> bool:
        return False
