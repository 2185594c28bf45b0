"""
Command registration and lookup.

Names are stored lower-cased. Registering a name that is already taken
replaces the earlier mapping, which lets hosts and test doubles shadow
built-in commands.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .exceptions import CommandRegistrationError, RegistryLockedError

if TYPE_CHECKING:
    from .command import Command


def _normalize_names(command: Command) -> list[str]:
    """Validate a command's names and return them lower-cased."""
    names = list(command.names or [])
    if not names:
        raise CommandRegistrationError(
            "Command must have at least one name", command=type(command).__name__
        )

    normalized = []
    for name in names:
        if not isinstance(name, str) or not name.strip():
            raise CommandRegistrationError(
                "Command name must be a non-empty string",
                command=type(command).__name__,
            )
        if len(name.split()) != 1:
            raise CommandRegistrationError(
                "Command name must not contain whitespace", name=name
            )
        normalized.append(name.lower())
    return normalized


class CommandRegistry:
    """Mapping from lower-cased command name to command."""

    def __init__(self, lg: logging.Logger | None = None) -> None:
        self._commands: dict[str, Command] = {}
        self._locked = False
        self._lg = lg

    def register(self, command: Command) -> None:
        """
        Register a command under every one of its names.

        Args:
            command: Command instance to register

        Raises:
            CommandRegistrationError: If the command has no usable names
            RegistryLockedError: If the registry is locked
        """
        names = _normalize_names(command)
        if self._locked:
            raise RegistryLockedError(names[0])

        for name in names:
            previous = self._commands.get(name)
            if previous is not None and previous is not command and self._lg:
                self._lg.debug(
                    "command name shadowed",
                    extra={
                        "name": name,
                        "old": type(previous).__name__,
                        "new": type(command).__name__,
                    },
                )
            self._commands[name] = command

    def register_all(self, commands: list[Command]) -> None:
        """Register commands in order, so later entries win name clashes."""
        for command in commands:
            self.register(command)

    def get(self, name: str) -> Command | None:
        """Get a command by name, case-insensitively."""
        return self._commands.get(name.lower())

    def commands(self) -> list[Command]:
        """Distinct registered commands, in order of first registration."""
        distinct: dict[int, Command] = {}
        for command in self._commands.values():
            distinct.setdefault(id(command), command)
        return list(distinct.values())

    def names(self) -> list[str]:
        """All registered names."""
        return list(self._commands.keys())

    def lock(self) -> None:
        """Reject further registration until unlock()."""
        self._locked = True

    def unlock(self) -> None:
        """Allow registration again."""
        self._locked = False

    @property
    def locked(self) -> bool:
        return self._locked

    @property
    def lg(self) -> logging.Logger | None:
        return self._lg

    @lg.setter
    def lg(self, lg: logging.Logger | None) -> None:
        self._lg = lg

    def clear(self) -> None:
        """Remove all registered commands."""
        self._commands.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._commands

    def __len__(self) -> int:
        return len(self._commands)
