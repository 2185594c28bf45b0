"""
Shell configuration.

ShellConfig holds the settings a host may want to keep out of code:
prompt, help tokens, error hardening and log level. It can be built
from a dict or loaded from a YAML file:

    # shell.yaml
    shell:
      prompt: "app> "
      help_tokens: ["?", "help", "h"]
      harden: true
      log_level: info
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .constants import DEFAULT_HELP_TOKENS, DEFAULT_PROMPT, MAX_CONFIG_SIZE_BYTES
from .exceptions import ConfigError
from .log import InvalidLogLevelError, LogConfig

SECTION = "shell"


def _check_file_size(path: Path) -> None:
    """Check file size limit."""
    file_size = os.path.getsize(path)
    if file_size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            f"Configuration file is {file_size} bytes, "
            f"exceeding maximum size of {MAX_CONFIG_SIZE_BYTES} bytes",
            path=str(path),
        )


def _check_type(key: str, value: Any, expected: type) -> None:
    # bool is an int subclass, so compare exact types
    if type(value) is not expected:
        raise ConfigError("Invalid configuration value type", key=key, value=value)


def _normalize_help_tokens(value: Any) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ConfigError("help_tokens must be a list of strings", value=value)
    tokens = []
    for token in value:
        if not isinstance(token, str) or not token.strip():
            raise ConfigError("help token must be a non-empty string", value=token)
        tokens.append(token.strip().lower())
    return tuple(tokens)


@dataclass(frozen=True)
class ShellConfig:
    """Immutable shell settings."""

    prompt: str = DEFAULT_PROMPT
    help_tokens: tuple[str, ...] = DEFAULT_HELP_TOKENS
    harden: bool = True
    log_level: str | int | bool = "warning"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ShellConfig:
        """
        Create a ShellConfig from a mapping.

        A nested ``shell`` section is used when present. Missing keys keep
        their defaults.

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")
        if isinstance(data.get(SECTION), dict):
            data = data[SECTION]

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError("Unknown configuration keys", keys=",".join(unknown))

        values: dict[str, Any] = {}
        if "prompt" in data:
            _check_type("prompt", data["prompt"], str)
            values["prompt"] = data["prompt"]
        if "help_tokens" in data:
            values["help_tokens"] = _normalize_help_tokens(data["help_tokens"])
        if "harden" in data:
            _check_type("harden", data["harden"], bool)
            values["harden"] = data["harden"]
        if "log_level" in data:
            try:
                LogConfig.from_params(data["log_level"])
            except InvalidLogLevelError as e:
                raise ConfigError(str(e), key="log_level") from e
            values["log_level"] = data["log_level"]
        return cls(**values)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ShellConfig:
        """
        Load a ShellConfig from a YAML file.

        Raises:
            ConfigError: If the file is missing, too large, not valid YAML,
                or holds invalid values
        """
        path = Path(path)
        if not path.is_file():
            raise ConfigError("Configuration file not found", path=str(path))
        _check_file_size(path)

        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError("Invalid YAML", path=str(path)) from e
        return cls.from_dict(data)

    def log_config(self) -> LogConfig:
        """LogConfig matching log_level."""
        return LogConfig.from_params(self.log_level)
