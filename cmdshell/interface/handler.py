#!/usr/bin/env python3
# cmdshell/interface/handler.py
from __future__ import annotations

"""
Command dispatch and help formatting.

invoke() resolves a token list, validates argument counts and runs the
matched command's action. Problems come back as CommandResult.error rather
than exceptions; an exception raised by an action is wrapped in ActionFailure.

The help helpers render summaries for commands, namespaces and help
categories, and help_call()/help_args() build a ready-made "help" command.
"""

import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence, TextIO

from cmdshell.commands import (
    ArgsAction,
    CommandNode,
    CommandResult,
    CommandTree,
    FullAction,
    LiteralAction,
    ResolvedCommand,
)
from cmdshell.errors import (
    ActionFailure,
    CommandNotFound,
    NothingToDo,
    TooFewArguments,
    TooManyArguments,
)
from cmdshell.interface.resolver import command_name, completable_names, resolve
from cmdshell.ui import write_text

_log = logging.getLogger(__name__)


@dataclass(slots=True)
class InvocationContext:
    """Handed to full-context actions as their first argument."""

    shell: Any
    resolved: ResolvedCommand
    tokens: List[str]
    raw_line: Optional[str] = None
    out: Optional[TextIO] = None

    @property
    def tree(self) -> CommandTree:
        return self.resolved.tree

    @property
    def node(self) -> CommandNode:
        return self.resolved.node  # type: ignore[return-value]

    @property
    def path(self) -> List[str]:
        return self.resolved.path

    @property
    def args(self) -> List[str]:
        return self.resolved.args

    def write(self, text: str) -> None:
        write_text(text, file=self.out)


# ---------------------------------------------------------------------------
# Help formatting
# ---------------------------------------------------------------------------

def command_summary(tree: CommandTree, tokens: Sequence[str]) -> str:
    """One line: the command name right-aligned to 20 columns, then its description."""
    resolved = resolve(tree, list(tokens))
    name = command_name(resolved.path)
    if resolved.node is None:
        return f"{name} doesn't exist.\n"
    description = resolved.node.text("description", resolved.args) or "(no description)"
    return f"{name:>20} -- {description}\n"


def all_command_summaries(tree: CommandTree) -> str:
    """Summary lines for every command in `tree` that has a description."""
    return "".join(
        command_summary(tree, [name])
        for name in sorted(tree)
        if tree[name].description is not None
    )


def command_help(tree: CommandTree, tokens: Sequence[str]) -> str:
    """
    Full help for a command: description, then the long help.

    A namespace without long help lists its subcommands instead.
    """
    resolved = resolve(tree, list(tokens))
    name = command_name(resolved.path)
    node = resolved.node
    if node is None:
        return f"{name} doesn't exist.\n"

    if node.description is not None:
        text = f"{name}: {node.text('description', resolved.args)}\n"
    else:
        text = f"No description for {name}\n"

    if node.long_help is not None:
        text += node.text("long_help", resolved.args) or ""
    elif node.is_namespace:
        text += all_command_summaries(node.subtree)  # type: ignore[arg-type]
    return text


@dataclass(slots=True)
class HelpCategory:
    """A named group of commands shown together by `help <category>`."""

    description: Optional[str] = None
    commands: List[str] = field(default_factory=list)


def category_summary(name: str, category: HelpCategory) -> str:
    return f"{name:>20} -- {category.description or '(no description)'}\n"


def category_help(tree: CommandTree, category: HelpCategory) -> str:
    """The category's description followed by a summary of each member command."""
    text = f"\n{category.description or ''}\n\n"
    for entry in category.commands:
        text += command_summary(tree, entry.split())
    return text + "\n"


def _categories_for(context: Any, categories: Optional[Mapping[str, HelpCategory]]) -> Mapping[str, HelpCategory]:
    if categories is not None:
        return categories
    return getattr(context.shell, "help_categories", None) or {}


def help_call(categories: Optional[Mapping[str, HelpCategory]] = None) -> Callable[..., None]:
    """
    Build a full-context action implementing `help [topic...]`.

    Without `categories` the shell session's categories (filled by the loader) are used.

    - No topic: the category list, or every command summary without categories.
    - A category name: that category's help.
    - Anything else: command_help() for the named command.
    """
    def _help(context: InvocationContext, *topic: str) -> None:
        tree = context.tree
        known = _categories_for(context, categories)
        if topic:
            if topic[0] in known:
                text = category_help(tree, known[topic[0]])
            else:
                text = command_help(tree, topic)
        elif known:
            text = "\nHelp categories:\n\n" + "".join(
                category_summary(name, known[name]) for name in sorted(known))
        else:
            text = all_command_summaries(tree)
        context.write(text)

    return _help


def help_args(categories: Optional[Mapping[str, HelpCategory]] = None) -> Callable[..., List[str]]:
    """Build a completion function for `help`: command names at any depth, plus categories first."""
    def _complete(context: Any) -> List[str]:
        known = _categories_for(context, categories)
        if context.argument_index == 0:
            names = completable_names(context.tree) + list(known)
            return sorted(n for n in set(names) if n.startswith(context.prefix))

        resolved = resolve(context.tree, list(context.args))
        if context.argument_index >= len(resolved.path):
            return []
        return sorted(n for n in completable_names(resolved.tree)
                      if n.startswith(context.prefix))

    return _complete


# ---------------------------------------------------------------------------
# Core execution
# ---------------------------------------------------------------------------

def invoke(
    tree: CommandTree,
    tokens: List[str],
    *,
    shell: Any = None,
    raw_line: Optional[str] = None,
    out: Optional[TextIO] = None,
) -> CommandResult:
    """
    Resolve and run a command. Synonym tokens in `tokens` are rewritten in place.

    Checked in order: unknown command, argument bounds, namespace (prints the
    subcommand summaries), then the action. A leaf without an action reports
    NothingToDo.
    """
    if out is None:
        out = getattr(shell, "out", None) or sys.stdout

    resolved = resolve(tree, tokens)
    node = resolved.node
    if node is None:
        return CommandResult(error=CommandNotFound(resolved.path))

    count = len(resolved.args)
    if node.min_args is not None and count < node.min_args:
        return CommandResult(error=TooFewArguments(node.min_args))
    if node.max_args is not None and count > node.max_args:
        return CommandResult(error=TooManyArguments(node.max_args))

    if node.is_namespace:
        write_text(all_command_summaries(node.subtree), file=out)  # type: ignore[arg-type]
        return CommandResult()

    action = node.action
    if isinstance(action, LiteralAction):
        write_text(action.text, file=out)
        return CommandResult()
    if action is None:
        return CommandResult(error=NothingToDo(resolved.path))

    try:
        if isinstance(action, FullAction):
            context = InvocationContext(shell=shell, resolved=resolved, tokens=tokens,
                                        raw_line=raw_line, out=out)
            value = action.fn(context, *resolved.args)
        elif isinstance(action, ArgsAction):
            value = action.fn(*resolved.args)
        else:
            return CommandResult(error=NothingToDo(resolved.path))
    except Exception as exc:
        _log.debug("Action for '%s' raised", command_name(resolved.path), exc_info=True)
        return CommandResult(error=ActionFailure(exc))

    return CommandResult(value=value)

