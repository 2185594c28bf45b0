"""
Command discovery.

Discovery turns a namespace into constructed command instances. The
shell only consumes the resulting list; how commands are found and
built is up to the collaborator:

- ModuleDiscovery imports a package and its submodules and instantiates
  every concrete Command subclass defined there.
- StaticDiscovery serves commands from an explicit registration table.

Example:
    discovery = ModuleDiscovery(factory=lambda cls: cls(db=db))
    shell.with_discovery(discovery, "myapp.commands")
"""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from collections.abc import Callable, Iterable, Iterator
from types import ModuleType
from typing import Protocol

from .command import Command
from .exceptions import DiscoveryError

CommandFactory = Callable[[type[Command]], Command]


class CommandDiscovery(Protocol):
    """Protocol for command discovery collaborators."""

    def discover(self, namespace: str) -> list[Command]:
        """Return constructed commands found in the namespace."""
        ...


def _default_factory(cls: type[Command]) -> Command:
    """Construct a command with its no-argument constructor."""
    return cls()


def _iter_modules(package: ModuleType, lg: logging.Logger) -> Iterator[ModuleType]:
    """
    Yield a package and all of its submodules, recursively.

    Submodules that fail to import are logged and skipped.
    """
    yield package
    path = getattr(package, "__path__", None)
    if path is None:
        return
    for info in pkgutil.walk_packages(
        path, prefix=package.__name__ + ".", onerror=lambda name: None
    ):
        try:
            module = importlib.import_module(info.name)
        except Exception as e:
            lg.debug(
                "skipping module that failed to import",
                extra={"module": info.name, "exception": e},
            )
            continue
        yield module


def _construct(
    entries: Iterable[Command | type[Command]],
    factory: CommandFactory,
    lg: logging.Logger,
) -> list[Command]:
    """Build command classes with the factory, skipping failures."""
    commands: list[Command] = []
    for entry in entries:
        if not inspect.isclass(entry):
            commands.append(entry)
            continue
        name = f"{entry.__module__}.{entry.__qualname__}"
        try:
            command = factory(entry)
        except Exception as e:
            lg.debug(
                "skipping command that failed to construct",
                extra={"command": name, "exception": e},
            )
            continue
        lg.info("found command", extra={"command": name})
        commands.append(command)
    return commands


def _is_command_class(obj: object, module: ModuleType) -> bool:
    """Check for a concrete Command subclass defined in the module itself."""
    return (
        inspect.isclass(obj)
        and issubclass(obj, Command)
        and not inspect.isabstract(obj)
        and obj.__module__ == module.__name__
    )


class ModuleDiscovery:
    """Finds Command subclasses by walking a package."""

    def __init__(
        self,
        factory: CommandFactory | None = None,
        lg: logging.Logger | None = None,
    ) -> None:
        """
        Initialize module discovery.

        Args:
            factory: Builds a command from its class (defaults to cls())
            lg: Logger for discovery progress
        """
        self._factory = factory or _default_factory
        self._lg = lg or logging.getLogger(__name__)

    def find_classes(self, namespace: str) -> list[type[Command]]:
        """
        List concrete Command classes defined under a package.

        Raises:
            DiscoveryError: If the namespace cannot be imported
        """
        try:
            package = importlib.import_module(namespace)
        except ImportError as e:
            raise DiscoveryError(
                "Cannot import command namespace", namespace=namespace
            ) from e

        found: list[type[Command]] = []
        for module in _iter_modules(package, self._lg):
            for _, obj in inspect.getmembers(module):
                if _is_command_class(obj, module) and obj not in found:
                    found.append(obj)
        return found

    def discover(self, namespace: str) -> list[Command]:
        """
        Instantiate every command class found under a package.

        Classes whose construction fails are logged and skipped.
        """
        return _construct(self.find_classes(namespace), self._factory, self._lg)


class StaticDiscovery:
    """
    Discovery backed by an explicit registration table.

    Entries may be Command instances or classes; classes are built with
    the factory on every discover() call.
    """

    def __init__(
        self,
        table: dict[str, list[Command | type[Command]]] | None = None,
        factory: CommandFactory | None = None,
        lg: logging.Logger | None = None,
    ) -> None:
        self._table: dict[str, list[Command | type[Command]]] = {
            namespace: list(entries) for namespace, entries in (table or {}).items()
        }
        self._factory = factory or _default_factory
        self._lg = lg or logging.getLogger(__name__)

    def register(
        self, namespace: str
    ) -> Callable[[type[Command]], type[Command]]:
        """
        Class decorator adding a command class to a namespace.

        Example:
            commands = StaticDiscovery()

            @commands.register("admin")
            class Reload(Command):
                ...
        """

        def decorator(cls: type[Command]) -> type[Command]:
            self._table.setdefault(namespace, []).append(cls)
            return cls

        return decorator

    def discover(self, namespace: str) -> list[Command]:
        """
        Return the commands registered under a namespace.

        Classes whose construction fails are logged and skipped.

        Raises:
            DiscoveryError: If nothing was registered under the namespace
        """
        if namespace not in self._table:
            raise DiscoveryError("Unknown command namespace", namespace=namespace)
        return _construct(self._table[namespace], self._factory, self._lg)
