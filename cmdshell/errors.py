#!/usr/bin/env python3
# cmdshell/errors.py
from __future__ import annotations

"""
Error kinds raised or reported by the shell engine.

Callers branch on the exception type, never on the message text:
- UnterminatedQuote: raised by the tokenizer, fatal to that parse only.
- CommandNotFound / TooFewArguments / TooManyArguments / NothingToDo:
  reported by the invoker through CommandResult.error.
- ActionFailure: wraps anything an action raised.
- SynonymCycle: a command set whose synonyms never reach a real command.
"""

from typing import Sequence


class ShellError(Exception):
    """Base class for every error kind the shell reports."""


class UnterminatedQuote(ShellError, ValueError):
    """A quote was opened and never closed."""

    def __init__(self, column: int, quote: str, line: str = "") -> None:
        self.column = column
        self.quote = quote
        self.line = line
        super().__init__(f"need closing quote [{quote}] at char {column}")

    def diagnostic(self) -> str:
        """Message plus the offending line with a caret under the open quote."""
        return f"{self}:\n    {self.line}\n    {' ' * self.column}^"


class CommandNotFound(ShellError, LookupError):
    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"{' '.join(self.path)} doesn't exist.")


class TooFewArguments(ShellError):
    def __init__(self, minimum: int) -> None:
        self.minimum = minimum
        super().__init__(f"Too few args!  {minimum} minimum.")


class TooManyArguments(ShellError):
    def __init__(self, maximum: int) -> None:
        self.maximum = maximum
        super().__init__(f"Too many args!  {maximum} maximum.")


class NothingToDo(ShellError):
    """A leaf command with neither an action nor subcommands."""

    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"{' '.join(self.path)} has nothing to do!")


class ActionFailure(ShellError):
    """An exception raised inside a dispatched action."""

    def __init__(self, error: BaseException) -> None:
        self.error = error
        super().__init__(f"{type(error).__name__}: {error}")


class SynonymCycle(ShellError):
    def __init__(self, names: Sequence[str]) -> None:
        self.names = list(names)
        super().__init__(f"synonym cycle: {' -> '.join(self.names)}")
