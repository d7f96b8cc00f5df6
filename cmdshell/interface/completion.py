#!/usr/bin/env python3
# cmdshell/interface/completion.py
from __future__ import annotations

"""
Command line completion.

This module turns (line, cursor) into a CompletionContext and dispatches it:
- Cursor on a command name: names of the current tree level.
- Cursor on an argument: the matched command's completion rule
  (function, per-position slots, or a reminder shown on a repeated request).

It also ships ready-made filesystem completers for command arguments.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional

from cmdshell.commands import (
    CommandNode,
    CommandTree,
    CompleteWith,
    PositionalCompletion,
    Reminder,
    Slot,
)
from cmdshell.interface.parser import DEFAULT_PARSER, CursorLocation, LineParser
from cmdshell.interface.resolver import completable_names, resolve

_log = logging.getLogger(__name__)


@dataclass(slots=True)
class CompletionContext:
    """
    Everything a completion routine may need.

    Attributes:
        prefix: The exact text that needs completion (token start up to the cursor).
        tree: Tree level of the deepest command found (top level if none).
        node: The deepest command found, or None.
        path: Full name of the deepest command found, as tokens.
        args: Tokens after the command name; valid only when `node` is set.
        argument_index: Index into `args` of the argument holding the cursor.
        tokens: The tokenized line.
        token_index: Index of the token holding the cursor.
        token_offset: Offset of the cursor inside that token.
        twice: True when completion was requested again on an unchanged line.
        raw_line: The line exactly as typed.
        cursor: Character position of the cursor in `raw_line`.
        shell: Owning Shell session, when there is one.
    """

    prefix: str
    tree: CommandTree
    node: Optional[CommandNode]
    path: list[str]
    args: list[str]
    argument_index: int
    tokens: list[str]
    token_index: int
    token_offset: int
    twice: bool
    raw_line: str
    cursor: int
    shell: Any = None

    def describe(self) -> dict[str, Any]:
        """Plain-data view for debug output."""
        return {
            "prefix": self.prefix,
            "node": self.node is not None,
            "path": self.path,
            "args": self.args,
            "argument_index": self.argument_index,
            "tokens": self.tokens,
            "token_index": self.token_index,
            "token_offset": self.token_offset,
            "twice": self.twice,
            "raw_line": self.raw_line,
            "cursor": self.cursor,
        }


def build_completion_context(
    tree: CommandTree,
    raw_line: str,
    cursor: int,
    *,
    parser: Optional[LineParser] = None,
    twice: bool = False,
    shell: Any = None,
) -> CompletionContext:
    """Tokenize (tolerating a missing close quote) and resolve `raw_line` around `cursor`."""
    parser = parser or DEFAULT_PARSER
    tokens, location = parser.tokenize(raw_line, cursor, fix_unterminated_quote=True)
    if location is None:
        tokens.append("")
        location = CursorLocation(len(tokens) - 1, 0)

    # Taken before resolution, which may rewrite a synonym token.
    prefix = tokens[location.token_index][:location.offset]

    resolved = resolve(tree, tokens)
    return CompletionContext(
        prefix=prefix,
        tree=resolved.tree,
        node=resolved.node,
        path=resolved.path,
        args=resolved.args,
        argument_index=location.token_index - len(resolved.path),
        tokens=tokens,
        token_index=location.token_index,
        token_offset=location.offset,
        twice=twice,
        raw_line=raw_line,
        cursor=cursor,
        shell=shell,
    )


def _run_slot(slot: Slot, context: CompletionContext,
              message: Callable[[str], None]) -> list[str]:
    if isinstance(slot, CompleteWith):
        return list(slot.fn(context))
    if isinstance(slot, list):
        return list(slot)
    if isinstance(slot, Reminder):
        if context.twice:
            message(slot.text)
    return []


def complete(
    context: CompletionContext,
    *,
    message: Optional[Callable[[str], None]] = None,
) -> list[str]:
    """
    Compute raw (unescaped) candidates for `context`.

    Command names are filtered by the prefix here; candidates produced by a
    command's own rule are returned as-is and left to the line editor to filter.
    Reminder text goes to `message` only on a repeated request.
    """
    message = message or _log.info

    if context.token_index < len(context.path):
        return sorted(
            name for name in completable_names(context.tree)
            if name.startswith(context.prefix)
        )

    node = context.node
    if node is None or node.is_namespace:
        return []

    rule = node.completion
    if isinstance(rule, PositionalCompletion):
        return _run_slot(rule.slot(context.argument_index), context, message)
    return _run_slot(rule, context, message)


# ---------------------------------------------------------------------------
# Filesystem completers
# ---------------------------------------------------------------------------

def complete_files(context: CompletionContext, directory: str = ".") -> list[str]:
    """
    Entries of `directory` starting with the prefix.

    Nothing is offered once the cursor is past the command's last allowed argument.
    """
    node = context.node
    if node is not None and node.max_args is not None and context.argument_index >= node.max_args:
        return []
    try:
        entries = os.listdir(directory)
    except OSError:
        return []
    return sorted(name for name in entries if name.startswith(context.prefix))


def complete_only_files(context: CompletionContext, directory: str = ".") -> list[str]:
    """Like complete_files, but regular files only."""
    return [name for name in complete_files(context, directory)
            if os.path.isfile(os.path.join(directory, name))]


def complete_only_dirs(context: CompletionContext, directory: str = ".") -> list[str]:
    """Like complete_files, but directories only."""
    return [name for name in complete_files(context, directory)
            if os.path.isdir(os.path.join(directory, name))]
