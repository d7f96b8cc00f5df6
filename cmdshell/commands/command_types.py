#!/usr/bin/env python3
# cmdshell/commands/command_types.py
from __future__ import annotations

"""
Command data structures.

This module defines:
- Action variants: FullAction, ArgsAction, LiteralAction (or None).
- CompletionRule variants: CompleteWith, PositionalCompletion, Reminder (or None).
- CommandNode: one named entry of a command tree.
- ResolvedCommand: the outcome of resolving tokens against a tree.
- CommandResult: the (value, error) pair returned by the invoker.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Union

from cmdshell.errors import ShellError

# Description / long help may be computed from (node, args).
TextField = Union[str, Callable[["CommandNode", List[str]], str], None]


# ---------------- Actions ----------------

@dataclass(frozen=True, slots=True)
class FullAction:
    """Called as fn(context, *args); context is an InvocationContext."""
    fn: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class ArgsAction:
    """Called as fn(*args)."""
    fn: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class LiteralAction:
    """Text written verbatim when the command runs."""
    text: str


Action = Union[FullAction, ArgsAction, LiteralAction, None]


# ---------------- Completion rules ----------------

@dataclass(frozen=True, slots=True)
class CompleteWith:
    """Called as fn(context); returns the candidate list."""
    fn: Callable[..., Sequence[str]]


@dataclass(frozen=True, slots=True)
class Reminder:
    """Hint printed when completion is requested twice on the same line."""
    text: str


# A positional slot is a function, a literal candidate list, a reminder, or nothing.
Slot = Union[CompleteWith, List[str], Reminder, None]


@dataclass(frozen=True, slots=True)
class PositionalCompletion:
    """One completion slot per argument position."""
    slots: tuple[Slot, ...]

    def slot(self, index: int) -> Slot:
        if 0 <= index < len(self.slots):
            return self.slots[index]
        return None


CompletionRule = Union[CompleteWith, PositionalCompletion, Reminder, None]


# ---------------- Nodes ----------------

@dataclass(slots=True)
class CommandNode:
    """
    A named entry in a command tree.

    Important fields:
        description: One-line summary (string or computed from (node, args)).
        long_help: Multi-line help text (string or computed).
        min_args / max_args: Argument count bounds; None means unbounded.
        action: What runs when the command is invoked.
        completion: How the command's arguments are completed.
        subtree: Nested commands; a non-empty subtree makes this a namespace.
        synonym_of: Name (same tree level) this entry redirects to.
        excluded_from_completion: Hide from candidate lists, still resolvable.
    """

    description: TextField = None
    long_help: TextField = None
    min_args: Optional[int] = None
    max_args: Optional[int] = None
    action: Action = None
    completion: CompletionRule = None
    subtree: Optional[Dict[str, "CommandNode"]] = None
    synonym_of: Optional[str] = None
    excluded_from_completion: bool = False

    @property
    def is_namespace(self) -> bool:
        return bool(self.subtree)

    @property
    def is_synonym(self) -> bool:
        return self.synonym_of is not None

    def text(self, field_name: str, args: Sequence[str] = ()) -> str | None:
        """Return description/long_help, calling it when it is computed."""
        value = getattr(self, field_name)
        if callable(value):
            return value(self, list(args))
        return value


CommandTree = Dict[str, CommandNode]


@dataclass(slots=True)
class ResolvedCommand:
    """
    Result of resolving a token list against a command tree.

    Attributes:
        tree: The deepest tree level reached (where `node` lives).
        node: The matched command, or None when the name is unknown.
        path: Command names from the top level down to the matched (or attempted) name.
        args: Every token after the path.
    """
    tree: CommandTree
    node: Optional[CommandNode]
    path: List[str] = field(default_factory=list)
    args: List[str] = field(default_factory=list)


@dataclass(slots=True)
class CommandResult:
    """
    Outcome of invoking a command.

    Attributes:
        value: Whatever the action returned (None for literal/namespace output).
        error: The reported error kind, or None on success.
    """
    value: Any = None
    error: Optional[ShellError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator[Any]:
        # Allows `value, error = invoke(...)`.
        yield self.value
        yield self.error
