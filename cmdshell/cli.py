#!/usr/bin/env python3
"""
cmdshell demo CLI - runs a shell with the built-in commands.

Usage:
    cmdshell
    cmdshell --prompt "demo> " --log-level info
    cmdshell --config shell.yaml --discover myapp.commands
"""

import argparse
import dataclasses
import sys

from . import __version__
from .builtins import ExitCommand
from .command import CommandBuilder
from .config import ShellConfig
from .discovery import ModuleDiscovery
from .exceptions import ShellError
from .log import LoggerFactory
from .output import OutputWriter
from .shell import Shell


def _echo(
    command_name: str, args: list[str], out: OutputWriter, err: OutputWriter
) -> bool:
    out.write(" ".join(args))
    return True


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmdshell", description="Interactive command shell"
    )
    parser.add_argument("-c", "--config", help="YAML configuration file")
    parser.add_argument("-p", "--prompt", help="prompt string")
    parser.add_argument("-l", "--log-level", help="log level (debug, info, warning, ...)")
    parser.add_argument(
        "-d",
        "--discover",
        action="append",
        default=[],
        metavar="PACKAGE",
        help="package to search for commands (repeatable)",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"cmdshell {__version__}"
    )
    return parser


def _load_config(args: argparse.Namespace) -> ShellConfig:
    """Load the config file, if any, and apply command-line overrides."""
    config = ShellConfig.from_yaml(args.config) if args.config else ShellConfig()
    overrides = {}
    if args.prompt is not None:
        overrides["prompt"] = args.prompt
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    return dataclasses.replace(config, **overrides)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the demo shell."""
    args = _build_parser().parse_args(argv)
    try:
        config = _load_config(args)
        shell = Shell.from_config(config)
        shell.with_commands(
            [
                CommandBuilder("echo")
                .with_alias("say")
                .with_description("Echoes input")
                .with_long_description("Prints its arguments separated by single spaces.")
                .with_run_function(_echo)
                .build(),
                ExitCommand(),
            ]
        )
        discovery = ModuleDiscovery(lg=LoggerFactory.derive(shell.lg, "discovery"))
        for namespace in args.discover:
            shell.with_discovery(discovery, namespace)
    except ShellError as e:
        print(f"cmdshell: {e}", file=sys.stderr)
        return 2

    try:
        shell.run()
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
