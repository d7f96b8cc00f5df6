#!/usr/bin/env python3
# cmdshell/ui/console.py
from __future__ import annotations

import sys
import threading

from .ansi import colorize, supports_color

# Single shared print mutex for all UI output (messages, errors, logging).
PRINT_MUTEX = threading.Lock()


def print_line(text: str = "", *, file=None, flush: bool = False) -> None:
    """Single-line print that cooperates with the log handler."""
    file = file or sys.stdout
    with PRINT_MUTEX:
        file.write(f"{text}\n")
        if flush:
            file.flush()


def write_text(text: str, *, file=None) -> None:
    """Write `text` verbatim (no newline added) and flush."""
    file = file or sys.stdout
    with PRINT_MUTEX:
        file.write(text)
        file.flush()


def print_styled(text: str, *styles: str, file=None) -> None:
    """print_line, colored only when the target is a color-capable terminal."""
    file = file or sys.stdout
    print_line(colorize(text, *styles) if supports_color(file) else text, file=file)
