#!/usr/bin/env python3
# cmdshell/boot.py
from __future__ import annotations
"""
Boot sequence for the demo shell.

Loads configuration, sets up logging, creates the session and loads the
bundled command plugins, printing one status line per step.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional
import logging
import platform

from cmdshell.config import ShellConfig, load_config
from cmdshell.interface import BaseCLI, Shell, load_commands
from cmdshell.ui import colorize, enable_windows_vt, init_logger, print_line


@dataclass(slots=True)
class BootState:
    shell: Shell
    logger: logging.Logger
    config: ShellConfig
    loaded_count: int


def _step(label: str, fn: Callable[[], Any], *, show: bool = True) -> Any:
    """Run a boot step with status output."""
    try:
        out = fn()
    except Exception as exc:
        print_line(
            colorize(f"[FAILED] {label} ({type(exc).__name__}: {exc})", "red")
        )
        raise
    if show:
        print_line(colorize(f"[  OK  ] {label}", "green"))
    return out


def boot_sequence(config: Optional[ShellConfig] = None, *,
                  cli: Optional[BaseCLI] = None) -> BootState:
    # ---------- console ----------
    enable_windows_vt()

    # ---------- config ----------
    if config is None:
        config = _step("Load configuration", load_config)
    show = config.show_boot
    _step(
        f"Detect environment: {platform.system()} {platform.release()} / Python {platform.python_version()}",
        lambda: None,
        show=show,
    )

    # ---------- logging ----------
    level = config.log_level or ("DEBUG" if config.debug_complete > 1 else "WARNING")
    logger = _step(
        "Initialize logger",
        lambda: init_logger(
            "cmdshell",
            level=level,
            logfile=str(config.log_file_path) if config.log_file_path else None,
        ),
        show=show,
    )

    # ---------- session + commands ----------
    shell = _step("Create shell session",
                  lambda: Shell.from_config(config, cli=cli), show=show)
    loaded_count = _step(f"Load commands from '{config.plugin_package}'",
                         lambda: load_commands(shell, config.plugin_package), show=show)
    _step(f"{len(shell.commands())} commands ready", lambda: None, show=show)
    _step("Boot complete", lambda: None, show=show)

    return BootState(
        shell=shell,
        logger=logger,
        config=config,
        loaded_count=loaded_count,
    )
