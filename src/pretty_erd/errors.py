from __future__ import annotations


class ErdError(Exception):
    """Base class for errors raised by pretty_erd."""


class InputReadError(ErdError):
    """The input could not be read into memory as text."""


class MalformedInputError(ErdError, ValueError):
    """The input does not conform to the ER notation.

    ``line`` and ``column`` are 1-based and point at the first character that
    could not be matched.
    """

    def __init__(
        self,
        expected: str,
        line: int,
        column: int = 1,
        source_line: str | None = None,
    ) -> None:
        self.expected = expected
        self.line = line
        self.column = column
        self.source_line = source_line
        message = f"line {line}, column {column}: expected {expected}"
        if source_line is not None:
            message += f"\n  {source_line}\n  {' ' * (column - 1)}^"
        super().__init__(message)
