"""
Session state shared between the shell loop and commands.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandContext:
    """
    State of the current shell session.

    The shell owns the context and updates it immediately before each
    command invocation. Commands read it (and may store values in
    ``data``) only for the duration of their own ``run`` call.
    """

    command_name: str | None = None
    args: list[str] = field(default_factory=list)
    invocations: int = 0
    data: dict[str, Any] = field(default_factory=dict)

    def update(self, command_name: str, args: list[str]) -> CommandContext:
        """Record the command about to run and return self."""
        self.command_name = command_name
        self.args = list(args)
        self.invocations += 1
        return self
