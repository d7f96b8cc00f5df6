#!/usr/bin/env python3
# cmdshell/__main__.py
from __future__ import annotations

"""Entry point: `python -m cmdshell` runs the demo shell."""

from cmdshell.boot import boot_sequence


def main() -> int:
    state = boot_sequence()
    state.shell.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
