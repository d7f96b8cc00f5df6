#!/usr/bin/env python3
# cmdshell/interface/__init__.py
from __future__ import annotations

"""
Package for the interactive shell interface.

This package re-exports public APIs from:
- parser.py
- resolver.py
- completion.py
- handler.py
- cli.py
- shell.py
- loader.py
"""


# Re-export from submodules
from .parser import (
    DEFAULT_PARSER,
    CursorLocation,
    LineParser,
    ParsedLine,
    escape,
    join_line,
    parse_line,
    tokenize,
)
from .resolver import command_name, completable_names, resolve
from .completion import (
    CompletionContext,
    build_completion_context,
    complete,
    complete_files,
    complete_only_dirs,
    complete_only_files,
)
from .handler import (
    HelpCategory,
    InvocationContext,
    all_command_summaries,
    category_help,
    category_summary,
    command_help,
    command_summary,
    help_args,
    help_call,
    invoke,
)
from .cli import BaseCLI, PromptToolkitCLI, ReadlineCLI, make_cli
from .shell import Shell
from .loader import load_commands

__all__ = [
    "DEFAULT_PARSER",
    "BaseCLI",
    "CompletionContext",
    "CursorLocation",
    "HelpCategory",
    "InvocationContext",
    "LineParser",
    "ParsedLine",
    "PromptToolkitCLI",
    "ReadlineCLI",
    "Shell",
    "all_command_summaries",
    "build_completion_context",
    "category_help",
    "category_summary",
    "command_help",
    "command_name",
    "command_summary",
    "complete",
    "complete_files",
    "complete_only_dirs",
    "complete_only_files",
    "completable_names",
    "escape",
    "help_args",
    "help_call",
    "invoke",
    "join_line",
    "load_commands",
    "make_cli",
    "parse_line",
    "resolve",
    "tokenize",
]
