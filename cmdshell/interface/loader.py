#!/usr/bin/env python3
# cmdshell/interface/loader.py
from __future__ import annotations

"""
Dynamic command loader.

Features:
- Imports all modules under a given package (default: 'cmdshell.plugins').
- Supports 'entrypoint.py' inside a subpackage exporting COMMANDS.
- Merges each exported COMMANDS mapping into the shell's command tree.
- Turns every subpackage into a help category, described by its
  CATEGORY_DESCRIPTION or module docstring.
"""

import importlib
import logging
import pkgutil
from pathlib import Path
from types import ModuleType
from typing import Any, List, Mapping

from cmdshell.interface.handler import HelpCategory

_log = logging.getLogger(__name__)


def _merge_from_module(shell: Any, module: ModuleType) -> List[str]:
    """Merge COMMANDS exported by a module, if present. Returns the merged names."""
    commands = getattr(module, "COMMANDS", None)
    if commands is None:
        return []
    if not isinstance(commands, Mapping):
        raise TypeError(f"{module.__name__}.COMMANDS must be a mapping of command names.")
    shell.add_commands(commands)
    _log.debug("Merged %d commands from %s", len(commands), module.__name__)
    return list(commands)


def load_commands(shell: Any, commands_package: str = "cmdshell.plugins") -> int:
    """
    Import all modules under the given package and merge their commands into `shell`.

    Supported layouts:
      1) Plain modules: plugins/foo.py  -> import plugins.foo
      2) Packages with an entrypoint: plugins/bar/entrypoint.py
         -> import plugins.bar.entrypoint

    Returns the number of modules imported.
    """
    package = importlib.import_module(commands_package)
    package_paths = [str(p) for p in getattr(package, "__path__", [])]

    if not package_paths:
        raise RuntimeError(
            f"'{commands_package}' must be a package (folder) with modules.")

    loaded_count = 0
    for base_path in package_paths:
        for modinfo in pkgutil.iter_modules([base_path]):
            module_name = modinfo.name
            if module_name.startswith("_"):
                # Ignore private modules
                continue

            if modinfo.ispkg:
                entrypoint_path = Path(base_path) / module_name / "entrypoint.py"
                target = f"{commands_package}.{module_name}"
                if entrypoint_path.exists():
                    target += ".entrypoint"
                module = importlib.import_module(target)
                loaded_count += 1
                names = _merge_from_module(shell, module)
                _register_category(shell, module, f"{commands_package}.{module_name}", module_name, names)
            else:
                module = importlib.import_module(f"{commands_package}.{module_name}")
                loaded_count += 1
                _merge_from_module(shell, module)

    return loaded_count


def _register_category(shell: Any, entry: ModuleType, package_name: str,
                       category: str, names: List[str]) -> None:
    """
    Category description is taken from:
      1) CATEGORY_DESCRIPTION (string) of the entry module or the package, or
      2) the package docstring (__doc__), else "".
    """
    if not names:
        return
    package = importlib.import_module(package_name)
    value = getattr(entry, "CATEGORY_DESCRIPTION", None)
    if not isinstance(value, str):
        value = getattr(package, "CATEGORY_DESCRIPTION", None)
    if isinstance(value, str):
        description = value.strip()
    else:
        description = (package.__doc__ or "").strip()

    tree = shell.commands()
    listed = [name for name in names
              if name in tree and tree[name].description is not None]
    shell.help_categories[category] = HelpCategory(description=description, commands=listed)
