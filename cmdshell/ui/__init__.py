#!/usr/bin/env python3
# cmdshell/ui/__init__.py
from __future__ import annotations
# Re-export convenient top-level API
from .ansi import ANSI, strip_ansi, enable_windows_vt, supports_color, colorize
from .console import PRINT_MUTEX, print_line, print_styled, write_text
from .logging import init_logger, ColorizingStreamHandler, PlainFormatter

__all__ = [
    "ANSI",
    "strip_ansi",
    "enable_windows_vt",
    "supports_color",
    "colorize",
    "PRINT_MUTEX",
    "print_line",
    "print_styled",
    "write_text",
    "init_logger",
    "ColorizingStreamHandler",
    "PlainFormatter",
]
