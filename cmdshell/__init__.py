#!/usr/bin/env python3
# cmdshell/__init__.py
from __future__ import annotations

"""
Interactive command shell toolkit.

Embed a Shell, hand it a command tree (nested mapping literals or
CommandNodes) and call run(): it tokenizes lines with quotes and escapes,
resolves subcommands and synonyms, completes on Tab and dispatches actions.
"""

from .errors import (
    ActionFailure,
    CommandNotFound,
    NothingToDo,
    ShellError,
    SynonymCycle,
    TooFewArguments,
    TooManyArguments,
    UnterminatedQuote,
)
from .commands import (
    CommandNode,
    CommandResult,
    CommandTree,
    build_tree,
    command,
)
from .interface import (
    HelpCategory,
    LineParser,
    Shell,
    complete_files,
    help_args,
    help_call,
    invoke,
    load_commands,
    parse_line,
    tokenize,
)

__version__ = "1.0.0"
