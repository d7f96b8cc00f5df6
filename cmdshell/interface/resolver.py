#!/usr/bin/env python3
# cmdshell/interface/resolver.py
from __future__ import annotations

"""
Command tree resolution.

Responsibilities:
- Follow synonyms and subcommand chains to the deepest matching command.
- Split a flat token list into the command path and its arguments.
- List the names of a tree level that are offered for completion.
"""

import logging
from typing import Optional, Sequence

from cmdshell.commands import CommandNode, CommandTree, ResolvedCommand
from cmdshell.errors import SynonymCycle

_log = logging.getLogger(__name__)


def _follow_synonyms(tree: CommandTree, name: str) -> tuple[str, Optional[CommandNode]]:
    """Return (canonical_name, node) for `name` in this tree level."""
    seen = [name]
    node = tree.get(name)
    while node is not None and node.is_synonym:
        name = node.synonym_of  # type: ignore[assignment]
        if name in seen:
            _log.error("Invalid command set: %s", SynonymCycle(seen + [name]))
            return seen[0], None
        seen.append(name)
        node = tree.get(name)
    return name, node


def resolve(tree: CommandTree, tokens: list[str], start: int = 0) -> ResolvedCommand:
    """
    Find the deepest command named by `tokens[start:]`.

    Synonyms are followed within each tree level and the token is rewritten in
    place to the canonical name. A namespace command descends into its subtree
    while tokens remain. When a name is unknown the returned node is None and
    the path still ends with the attempted name.
    """
    if start >= len(tokens):
        return ResolvedCommand(tree=tree, node=None, path=list(tokens), args=[])

    name, node = _follow_synonyms(tree, tokens[start])
    tokens[start] = name

    if node is not None and node.is_namespace and start < len(tokens) - 1:
        return resolve(node.subtree, tokens, start + 1)  # type: ignore[arg-type]

    return ResolvedCommand(
        tree=tree,
        node=node,
        path=tokens[:start + 1],
        args=tokens[start + 1:],
    )


def command_name(path: Sequence[str]) -> str:
    """Human-readable command name for a path, e.g. 'show args'."""
    return " ".join(path)


def completable_names(tree: CommandTree) -> list[str]:
    """Names in this tree level that are not hidden from completion."""
    return [name for name, node in tree.items() if not node.excluded_from_completion]
