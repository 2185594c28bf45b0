"""
Exception hierarchy for cmdshell.

All errors raised by the shell driver inherit from ShellError, so a host
can catch every shell-specific failure with a single except clause.
"""

from typing import Any


class ShellError(Exception):
    """
    Base exception for all cmdshell errors.

    Example:
        try:
            shell.with_commands(commands)
        except ShellError as e:
            lg.error(f"shell setup failed: {e}")
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class CommandRegistrationError(ShellError):
    """
    Raised when a command cannot be registered.

    Examples:
        - Command exposes no names
        - Command name is blank or contains whitespace
    """

    pass


class RegistryLockedError(ShellError):
    """Raised when registering a command while the shell loop is running."""

    def __init__(self, name: str) -> None:
        super().__init__("Cannot register command while the shell is running", name=name)


class DiscoveryError(ShellError):
    """Raised when a discovery namespace cannot be resolved."""

    pass


class ConfigError(ShellError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Unknown key or wrongly typed value
    """

    pass
