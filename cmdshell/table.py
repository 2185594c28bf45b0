"""
Two-column text table.

OutputTable lays out (key, value) rows in aligned columns, optionally
framed. The frame lines are a plus sign, spaces and a plus sign; they
carry no dashes:

    +        +
    | a  | xyz |
    | bb | y   |
    +        +
"""

from __future__ import annotations

from .output import ConsoleOutput, OutputWriter


class OutputTable:
    """
    Accumulates rows and prints them as an aligned two-column table.

    Example:
        table = OutputTable(out).with_lines(False)
        table.add_row("exit, quit", "Leave the shell")
        table.print()
    """

    def __init__(self, out: OutputWriter | None = None) -> None:
        """
        Initialize an empty table.

        Args:
            out: Output channel the table prints to (defaults to stdout)
        """
        self._out = out if out is not None else ConsoleOutput()
        self._with_lines = True
        self._rows: list[tuple[str, str]] = []
        self._longest_key = 0
        self._longest_value = 0

    def with_lines(self, with_lines: bool) -> OutputTable:
        """Set whether the table is printed with a frame (default True)."""
        self._with_lines = with_lines
        return self

    def add_row(self, key: str, value: str) -> None:
        """Append a row and widen the columns if needed."""
        self._rows.append((key, value))
        self._longest_key = max(self._longest_key, len(key))
        self._longest_value = max(self._longest_value, len(value))

    @property
    def rows(self) -> list[tuple[str, str]]:
        """Rows in insertion order."""
        return list(self._rows)

    def _horizontal_line(self) -> str:
        width = self._longest_key + self._longest_value + 1
        if self._with_lines:
            width += 2
        return "+" + " " * width + "+"

    def _format_row(self, key: str, value: str) -> str:
        key = key.ljust(self._longest_key)
        value = value.ljust(self._longest_value)
        if self._with_lines:
            return f"| {key} | {value} |"
        return f"{key} {value}"

    def lines(self) -> list[str]:
        """Rendered table as a list of lines."""
        rendered = [self._format_row(key, value) for key, value in self._rows]
        if self._with_lines:
            border = self._horizontal_line()
            rendered = [border, *rendered, border]
        return rendered

    def render(self) -> str:
        """Rendered table as a string, each line newline-terminated."""
        return "".join(line + "\n" for line in self.lines())

    def print(self) -> None:
        """Print the table to the output channel."""
        for line in self.lines():
            self._out.write(line)
