# cmdshell/plugins/demo/entrypoint.py
from __future__ import annotations

import os
from typing import Any, Dict

from cmdshell.interface import (
    InvocationContext,
    command_name,
    complete_files,
    help_args,
    help_call,
)


# -------------------------- actions --------------------------

def _ls(context: InvocationContext, *paths: str) -> int:
    """List directory entries (or echo file names); returns how many paths were missing."""
    missing = 0
    for path in paths or (".",):
        if os.path.isdir(path):
            for name in sorted(os.listdir(path)):
                context.write(f"{name}\n")
        elif os.path.exists(path):
            context.write(f"{path}\n")
        else:
            context.write(f"ls: {path}: No such file or directory\n")
            missing += 1
    return missing


def _show_args(context: InvocationContext, *args: str) -> None:
    context.write(f"{command_name(context.path)}: {', '.join(args)}\n")


def _quit(context: InvocationContext) -> None:
    context.shell.exit_requested(True)


# -------------------------- command table --------------------------

COMMANDS: Dict[str, Any] = {
    "h": {"synonym_of": "help", "excluded_from_completion": True},
    "help": {
        "description": "Print helpful information",
        "long_help": "help [category|command...]\n"
                     "    With no arguments, list the help categories.\n",
        "complete": help_args(),
        "method": help_call(),
    },
    "ls": {
        "description": "List files in the given directories",
        "complete": complete_files,
        "method": _ls,
    },
    "show": {
        "description": "An example of using subcommands",
        "subtree": {
            "warranty": {
                "description": "Print the warranty",
                "proc": "You have no warranty!\n",
            },
            "args": {
                "description": "Print the passed arguments",
                "min_args": 2,
                "max_args": 2,
                "complete": [["create", "delete"], complete_files],
                "method": _show_args,
            },
        },
    },
    "quit": {
        "description": "Quit using this program",
        "max_args": 0,
        "method": _quit,
    },
}
