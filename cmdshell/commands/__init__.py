#!/usr/bin/env python3
# cmdshell/commands/__init__.py
from __future__ import annotations

"""
Package for command trees.

Provides:
- Data structures (`CommandNode`, `CommandTree`, `ResolvedCommand`, `CommandResult`).
- Tagged action and completion-rule variants.
- Tree builders and the `command` decorator.

This package re-exports public APIs from:
- command_types.py
- commands.py
"""


# Re-export from submodules
from .command_types import (
    Action,
    ArgsAction,
    CommandNode,
    CommandResult,
    CommandTree,
    CompleteWith,
    CompletionRule,
    FullAction,
    LiteralAction,
    PositionalCompletion,
    Reminder,
    ResolvedCommand,
    Slot,
)
from .commands import (
    as_completion_rule,
    build_tree,
    command,
    merge_commands,
    node_from_mapping,
)

__all__ = [
    "Action",
    "ArgsAction",
    "CommandNode",
    "CommandResult",
    "CommandTree",
    "CompleteWith",
    "CompletionRule",
    "FullAction",
    "LiteralAction",
    "PositionalCompletion",
    "Reminder",
    "ResolvedCommand",
    "Slot",
    "as_completion_rule",
    "build_tree",
    "command",
    "merge_commands",
    "node_from_mapping",
]
