# cmdshell/plugins/demo/__init__.py
from __future__ import annotations

"""
Demo command group:
- help with completion through subcommands
- ls with filename completion
- show with nested subcommands
"""

CATEGORY_DESCRIPTION = "Example commands shipped with cmdshell."
