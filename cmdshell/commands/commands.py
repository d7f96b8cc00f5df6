#!/usr/bin/env python3
# cmdshell/commands/commands.py
from __future__ import annotations

"""
Command tree construction helpers.

This module provides:
- build_tree: turn nested mapping literals into a CommandTree.
- node_from_mapping: build a single CommandNode from a mapping literal.
- merge_commands: add/replace entries of one tree into another.
- command: decorator that registers a function into a given tree.
"""

from typing import Any, Callable, Mapping, Optional

from cmdshell.commands import (
    ArgsAction,
    CommandNode,
    CommandTree,
    CompleteWith,
    CompletionRule,
    FullAction,
    LiteralAction,
    PositionalCompletion,
    Reminder,
    Slot,
)

_NODE_KEYS = frozenset({
    "description",
    "long_help",
    "min_args",
    "max_args",
    "method",
    "proc",
    "complete",
    "subtree",
    "synonym_of",
    "excluded_from_completion",
})

_RULE_TYPES = (CompleteWith, PositionalCompletion, Reminder)


def _as_bound(name: str, value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def _as_slot(value: Any) -> Slot:
    if value is None or isinstance(value, (CompleteWith, Reminder)):
        return value
    if callable(value):
        return CompleteWith(value)
    if isinstance(value, str):
        return Reminder(value)
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value]
    raise ValueError(f"Unsupported completion slot: {value!r}")


def as_completion_rule(value: Any) -> CompletionRule:
    """
    Normalize a completion declaration.

        callable      -> CompleteWith
        str           -> Reminder
        list / tuple  -> PositionalCompletion, one slot per argument
    """
    if value is None or isinstance(value, _RULE_TYPES):
        return value
    if callable(value):
        return CompleteWith(value)
    if isinstance(value, str):
        return Reminder(value)
    if isinstance(value, (list, tuple)):
        return PositionalCompletion(tuple(_as_slot(item) for item in value))
    raise ValueError(f"Unsupported completion rule: {value!r}")


def _as_action(value: Any, *, full_context: bool):
    if value is None or isinstance(value, (FullAction, ArgsAction, LiteralAction)):
        return value
    if isinstance(value, str):
        return LiteralAction(value)
    if callable(value):
        return FullAction(value) if full_context else ArgsAction(value)
    raise ValueError(f"Unsupported action: {value!r}")


def node_from_mapping(entry: Mapping[str, Any]) -> CommandNode:
    """
    Build a CommandNode from a mapping literal.

    `method` (full-context callable or literal text) takes precedence over
    `proc` (arguments-only callable or literal text).
    """
    unknown = set(entry) - _NODE_KEYS
    if unknown:
        raise ValueError(f"Unknown command field(s): {', '.join(sorted(unknown))}")

    if entry.get("method") is not None:
        action = _as_action(entry["method"], full_context=True)
    else:
        action = _as_action(entry.get("proc"), full_context=False)

    subtree = entry.get("subtree")
    return CommandNode(
        description=entry.get("description"),
        long_help=entry.get("long_help"),
        min_args=_as_bound("min_args", entry.get("min_args")),
        max_args=_as_bound("max_args", entry.get("max_args")),
        action=action,
        completion=as_completion_rule(entry.get("complete")),
        subtree=build_tree(subtree) if subtree is not None else None,
        synonym_of=entry.get("synonym_of"),
        excluded_from_completion=bool(entry.get("excluded_from_completion", False)),
    )


def build_tree(commands: Mapping[str, Any]) -> CommandTree:
    """Convert nested mapping literals (or CommandNodes) into a CommandTree."""
    tree: CommandTree = {}
    for name, value in commands.items():
        if isinstance(value, CommandNode):
            tree[str(name)] = value
        elif isinstance(value, Mapping):
            tree[str(name)] = node_from_mapping(value)
        else:
            raise ValueError(f"Command '{name}' must be a mapping or CommandNode.")
    return tree


def merge_commands(target: CommandTree, extra: Mapping[str, Any]) -> CommandTree:
    """Add every entry of `extra` to `target`, replacing same-named commands."""
    target.update(build_tree(extra))
    return target


def command(
    tree: CommandTree,
    *,
    name: str | None = None,
    description: str | None = None,
    long_help: str | None = None,
    min_args: int | None = None,
    max_args: int | None = None,
    complete: Any = None,
    synonyms: list[str] | None = None,
    context: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Decorator to register a function as a command in `tree`.

    - Function name is transformed from snake_case to kebab-case for `name` if not provided.
    - `context=True` makes the function receive the invocation context first.
    - Each synonym is added as a hidden entry pointing at the command.
    """

    def wrapper(func: Callable[..., Any]) -> Callable[..., Any]:
        command_name = (name or func.__name__).replace("_", "-")
        tree[command_name] = CommandNode(
            description=(description or (func.__doc__ or "")).strip() or None,
            long_help=long_help,
            min_args=_as_bound("min_args", min_args),
            max_args=_as_bound("max_args", max_args),
            action=FullAction(func) if context else ArgsAction(func),
            completion=as_completion_rule(complete),
        )
        for alias in synonyms or ():
            tree[alias] = CommandNode(synonym_of=command_name,
                                      excluded_from_completion=True)
        return func

    return wrapper
