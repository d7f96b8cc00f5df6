#!/usr/bin/env python3
# cmdshell/interface/cli.py
from __future__ import annotations

"""
Interactive input frontends.

Selection order:
    1) prompt_toolkit (rich completion + history)
    2) readline / pyreadline3 (basic completion + history)
    3) plain input (last resort)

Every frontend speaks the same small protocol to the Shell:
get_line(prompt), set_completer(fn, word_start), message(text),
add_history(line), history(), load_history(path, limit), save_history(path, limit).

The completer is called as fn(text, line, start) where `text` is the shell
token being completed (escapes and quotes included) and `start` its position
in `line`. It returns ready-to-insert replacements for that whole token.
`word_start(line, cursor)` tells the frontend where that token begins.
"""

import itertools
import logging
import re
import sys
from pathlib import Path
from typing import Callable, List, Optional

from cmdshell.ui import print_line, write_text

_log = logging.getLogger(__name__)

Completer = Callable[[str, str, int], List[str]]
WordStart = Callable[[str, int], int]

_LAST_BLANK = re.compile(r"\s(?=\S*\Z)")


def whitespace_word_start(line: str, cursor: int) -> int:
    """Start of the whitespace-delimited word ending at `cursor`."""
    match = _LAST_BLANK.search(line, 0, cursor)
    return match.end() if match else 0


class BaseCLI:
    """
    Plain input() frontend and base interface for the others.

    Subclasses override:
        - setup() / teardown()
        - get_line()
        - message()
        - add_history() / history()
        - load_history() / save_history()

    This base also provides context manager support to guarantee teardown.
    Plain input() has no history file; history lives for the session only.
    """

    def __init__(self) -> None:
        self._completer: Optional[Completer] = None
        self._word_start: WordStart = whitespace_word_start
        self._lines: List[str] = []

    def setup(self) -> None:
        ...

    def teardown(self) -> None:
        ...

    def set_completer(self, completer: Optional[Completer],
                      word_start: Optional[WordStart] = None) -> None:
        self._completer = completer
        self._word_start = word_start or whitespace_word_start

    def _candidates(self, line: str, cursor: int) -> tuple[int, List[str]]:
        """(token start, replacements) for a completion request at `cursor`."""
        if self._completer is None:
            return cursor, []
        start = self._word_start(line, cursor)
        return start, list(self._completer(line[start:cursor], line, start))

    def get_line(self, prompt: str) -> Optional[str]:
        """Read one line; None at end of input. Ctrl-C abandons the line."""
        try:
            return input(prompt)
        except EOFError:
            return None
        except KeyboardInterrupt:
            print_line()
            return ""

    def message(self, text: str) -> None:
        """Show text without disturbing the line being edited."""
        print_line(text.rstrip("\n"))

    def add_history(self, line: str) -> None:
        self._lines.append(line)

    def history(self) -> List[str]:
        return list(self._lines)

    def load_history(self, path: Path, limit: int) -> None:
        ...

    def save_history(self, path: Path, limit: int) -> None:
        ...

    # Context manager helpers
    def __enter__(self) -> "BaseCLI":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.teardown()
        except Exception:
            _log.debug("Frontend teardown failed", exc_info=True)


# ===== Preferred: prompt_toolkit =====
class PromptToolkitCLI(BaseCLI):
    """Rich line editor with history and completion on Tab."""

    def __init__(self) -> None:
        super().__init__()
        from prompt_toolkit import prompt
        from prompt_toolkit.completion import Completer as _PTCompleter, Completion
        from prompt_toolkit.history import History, InMemoryHistory

        self._prompt = prompt
        cli = self

        class _Completer(_PTCompleter):
            def get_completions(self, document, complete_event):
                cursor = document.cursor_position
                start, candidates = cli._candidates(document.text, cursor)
                for candidate in candidates:
                    yield Completion(candidate, start_position=start - cursor)

        class _ShellHistory(History):
            """
            History seen by the prompt, backed by `store`.

            prompt_toolkit records every accepted line as typed; the shell
            records the re-joined command itself through record().
            """

            def __init__(self, store: History, limit: Optional[int] = None) -> None:
                super().__init__()
                self.store = store
                self.limit = limit

            def load_history_strings(self):
                # newest first
                return itertools.islice(self.store.load_history_strings(), self.limit)

            def store_string(self, string: str) -> None:
                self.store.store_string(string)

            def append_string(self, string: str) -> None:
                pass

            def record(self, string: str) -> None:
                super().append_string(string)

        self._history_type = _ShellHistory
        self._history = _ShellHistory(InMemoryHistory())
        self._pt_completer = _Completer()

    def get_line(self, prompt: str) -> Optional[str]:
        try:
            return self._prompt(
                prompt,
                history=self._history,
                completer=self._pt_completer,
                complete_while_typing=False,
            )
        except EOFError:
            return None
        except KeyboardInterrupt:
            return ""

    def message(self, text: str) -> None:
        from prompt_toolkit.application import run_in_terminal

        try:
            run_in_terminal(lambda: print_line(text.rstrip("\n")))
        except RuntimeError:
            # no running application
            super().message(text)

    def add_history(self, line: str) -> None:
        self._history.record(line)

    def history(self) -> List[str]:
        return list(self._history.store.load_history_strings())[::-1]

    def load_history(self, path: Path, limit: int) -> None:
        """Switch to a FileHistory at `path`; new lines are appended as they are recorded."""
        from prompt_toolkit.history import FileHistory

        path.touch(exist_ok=True)
        self._history = self._history_type(FileHistory(str(path)), limit)


# ===== Fallback: readline / pyreadline3 =====
class ReadlineCLI(BaseCLI):
    """Fallback editor with basic completion and history."""

    def __init__(self) -> None:
        super().__init__()
        import readline  # type: ignore[attr-defined]

        self.readline = readline
        self._prompt_text = ""
        self._matches: List[str] = []

    def setup(self) -> None:
        # No delimiters: readline hands over the whole line and the shell
        # decides where the token starts (escapes and quotes included).
        try:
            self.readline.set_completer_delims("")  # type: ignore
        except Exception:
            pass

        self.readline.set_completer(self._complete)  # type: ignore
        try:
            if "libedit" in (self.readline.__doc__ or ""):
                self.readline.parse_and_bind("bind ^I rl_complete")  # type: ignore
            else:
                self.readline.parse_and_bind("tab: complete")  # type: ignore
        except Exception:
            pass

    def _complete(self, text_fragment: str, state_index: int) -> Optional[str]:
        # Build the candidate list once per request, then hand out the Nth one
        if state_index == 0:
            line = self.readline.get_line_buffer()  # type: ignore
            cursor = self.readline.get_endidx()  # type: ignore
            start, candidates = self._candidates(line, cursor)
            # readline replaces everything from the line start up to the cursor
            self._matches = [line[:start] + candidate for candidate in candidates]
        return self._matches[state_index] if state_index < len(self._matches) else None

    def get_line(self, prompt: str) -> Optional[str]:
        self._prompt_text = prompt
        return super().get_line(prompt)

    def message(self, text: str) -> None:
        # Print below the line, then redraw the prompt and what was typed so far.
        write_text("\n" + text.rstrip("\n") + "\n", file=sys.stdout)
        write_text(self._prompt_text + self.readline.get_line_buffer(), file=sys.stdout)  # type: ignore

    def add_history(self, line: str) -> None:
        self.readline.add_history(line)  # type: ignore

    def history(self) -> List[str]:
        count = self.readline.get_current_history_length()  # type: ignore
        items = (self.readline.get_history_item(i) for i in range(1, count + 1))  # type: ignore
        return [item for item in items if item is not None]

    def load_history(self, path: Path, limit: int) -> None:
        try:
            self.readline.read_history_file(str(path))  # type: ignore
        except FileNotFoundError:
            pass
        self.readline.set_history_length(limit)  # type: ignore

    def save_history(self, path: Path, limit: int) -> None:
        self.readline.set_history_length(limit)  # type: ignore
        self.readline.write_history_file(str(path))  # type: ignore

    def teardown(self) -> None:
        self.readline.set_completer(None)  # type: ignore


def make_cli() -> BaseCLI:
    """
    Factory to select the best available CLI frontend at runtime.
    """
    # Try prompt_toolkit first
    try:
        import prompt_toolkit  # noqa: F401
        return PromptToolkitCLI()
    except Exception:
        # Try readline/pyreadline3
        try:
            import readline  # noqa: F401
            return ReadlineCLI()
        except Exception:
            # Last resort: plain input with no completion
            return BaseCLI()
