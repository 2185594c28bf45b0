"""
Output channels handed to commands.

The shell never prints directly: the prompt, help tables and command
output all go through an OutputWriter, so a host can redirect the shell
to any stream and tests can capture output without patching stdout.
"""

import io
import sys
from typing import Protocol, TextIO


class OutputWriter(Protocol):
    """Protocol for shell output channels."""

    def write(self, text: str = "") -> None:
        """Write text with trailing newline."""
        ...

    def write_raw(self, text: str) -> None:
        """Write text without trailing newline."""
        ...

    def flush(self) -> None:
        """Flush pending output."""
        ...


class ConsoleOutput:
    """
    Output channel backed by a text stream.

    Example:
        out = ConsoleOutput()                  # stdout
        err = ConsoleOutput(sys.stderr)        # stderr
        out.write_raw("> ")
        out.flush()
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        """
        Initialize with optional output stream.

        Args:
            stream: Output stream (defaults to sys.stdout)
        """
        self._stream = stream if stream is not None else sys.stdout

    @property
    def stream(self) -> TextIO:
        """The underlying stream."""
        return self._stream

    def write(self, text: str = "") -> None:
        print(text, file=self._stream)

    def write_raw(self, text: str) -> None:
        print(text, end="", file=self._stream)

    def flush(self) -> None:
        self._stream.flush()


class NullOutput:
    """Output channel that discards everything."""

    def write(self, text: str = "") -> None:
        pass

    def write_raw(self, text: str) -> None:
        pass

    def flush(self) -> None:
        pass


class BufferedOutput:
    """
    Output channel that keeps everything in memory.

    Example:
        out = BufferedOutput()
        out.write_raw("> ")
        out.write("hello")
        assert out.text == "> hello\\n"
        assert out.lines == ["> hello"]
    """

    def __init__(self) -> None:
        self._buffer = io.StringIO()

    def write(self, text: str = "") -> None:
        self._buffer.write(text + "\n")

    def write_raw(self, text: str) -> None:
        self._buffer.write(text)

    def flush(self) -> None:
        pass

    @property
    def text(self) -> str:
        """All output written so far."""
        return self._buffer.getvalue()

    @property
    def lines(self) -> list[str]:
        """Output split into lines, without line terminators."""
        return self.text.splitlines()

    def clear(self) -> None:
        """Discard buffered output."""
        self._buffer = io.StringIO()
