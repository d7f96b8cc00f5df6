# cmdshell/plugins/__init__.py
from __future__ import annotations

"""
Bundled command sets.

Each public module (or subpackage with an entrypoint.py) exporting a
COMMANDS mapping is merged into the shell by load_commands().
"""
