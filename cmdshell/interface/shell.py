#!/usr/bin/env python3
# cmdshell/interface/shell.py
from __future__ import annotations

"""
Interactive shell session.

A Shell owns everything one interactive session needs: the prompt, the
command tree, the exit flag, the previous command (for blank-line repeat and
history de-duplication), the line of the last completion request, the
tokenizer settings and the line-editor frontend. Several sessions can live in
one process without sharing state.

Typical use:

    shell = Shell(app="demo", commands={"quit": {"method": lambda ctx: ctx.shell.exit_requested(True)}})
    shell.run()
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, TextIO

from cmdshell.commands import CommandNode, CommandResult, CommandTree, build_tree, merge_commands
from cmdshell.interface.cli import BaseCLI, make_cli
from cmdshell.interface.completion import (
    CompletionContext,
    build_completion_context,
    complete,
)
from cmdshell.interface.handler import HelpCategory, invoke
from cmdshell.interface.parser import QUOTES, LineParser, ParsedLine, parse_line
from cmdshell.ui import print_styled, write_text

_log = logging.getLogger(__name__)


def _as_tree(commands: Optional[Mapping[str, Any]]) -> CommandTree:
    """Keep a ready-made tree as-is (so later edits show through), else build one."""
    if commands is None:
        return {}
    if isinstance(commands, dict) and all(isinstance(v, CommandNode) for v in commands.values()):
        return commands
    return build_tree(commands)


class Shell:
    """
    One interactive session.

    Args:
        app: Application name; the default prompt is "<app>> ".
        prompt: Prompt text (overrides the app-derived default).
        commands: Command tree, or nested mapping literals to build one from.
        blank_repeats_cmd: A blank line re-runs the previous command.
        history_file: History file handed to the frontend (None = no history file).
        history_max: How many of the newest history lines to keep; 0 turns the file off.
        token_chars / keep_quotes: Tokenizer settings (see LineParser).
        debug_complete: 0-4; 2 and up log completion internals at DEBUG level.
        enable_completion: Register the completion hook with the frontend.
        cli: Line-editor frontend; picked by make_cli() on first use when omitted.
        out / err: Streams for command output and errors.
    """

    def __init__(
        self,
        *,
        app: Optional[str] = None,
        prompt: Optional[str] = None,
        commands: Optional[Mapping[str, Any]] = None,
        blank_repeats_cmd: bool = False,
        history_file: Optional[str | Path] = None,
        history_max: int = 64,
        token_chars: str = "",
        keep_quotes: bool = False,
        debug_complete: int = 0,
        enable_completion: bool = True,
        cli: Optional[BaseCLI] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ) -> None:
        self.app = app or Path(sys.argv[0] or "cmdshell").stem or "cmdshell"
        self._prompt = prompt if prompt is not None else f"{self.app}> "
        self._commands: CommandTree = _as_tree(commands)
        self.help_categories: Dict[str, HelpCategory] = {}

        self.blank_repeats_cmd = blank_repeats_cmd
        self.history_file = history_file
        self.history_max = history_max
        self.debug_complete = debug_complete
        self.enable_completion = enable_completion
        self.parser = LineParser(token_chars=token_chars, keep_quotes=keep_quotes)

        self.out = out
        self.err = err

        self._done = False
        self.prevcmd = ""
        self.completeline = ""

        self._cli: Optional[BaseCLI] = None
        if cli is not None:
            self.cli = cli

    @classmethod
    def from_config(cls, config: Any, **overrides: Any) -> "Shell":
        """Build a session from a ShellConfig; keyword overrides win."""
        options: Dict[str, Any] = {
            "app": config.app_name,
            "prompt": config.prompt,
            "blank_repeats_cmd": config.blank_repeats_cmd,
            "history_file": config.history_file,
            "history_max": config.history_max,
            "token_chars": config.token_chars,
            "keep_quotes": config.keep_quotes,
            "debug_complete": config.debug_complete,
            "enable_completion": config.enable_completion,
        }
        options.update(overrides)
        return cls(**options)

    # ---------------- Frontend ----------------

    @property
    def cli(self) -> BaseCLI:
        if self._cli is None:
            self.cli = make_cli()
        return self._cli  # type: ignore[return-value]

    @cli.setter
    def cli(self, frontend: BaseCLI) -> None:
        self._cli = frontend
        if self.enable_completion:
            frontend.set_completer(self.completion_function, self.parser.word_start)
        else:
            frontend.set_completer(None)

    # ---------------- Accessors ----------------

    def prompt(self, new_prompt: Optional[str] = None) -> str:
        """Return the current prompt; when `new_prompt` is given, set it and return the old one."""
        old = self._prompt
        if new_prompt is not None:
            self._prompt = new_prompt
        return old

    def commands(self, new_commands: Optional[Mapping[str, Any]] = None) -> CommandTree:
        """Return the command tree; when `new_commands` is given, replace it and return the old one."""
        old = self._commands
        if new_commands is not None:
            self._commands = _as_tree(new_commands)
        return old

    def add_commands(self, extra: Mapping[str, Any]) -> CommandTree:
        """Merge commands into the tree, replacing same-named entries."""
        return merge_commands(self._commands, extra)

    def exit_requested(self, flag: Optional[bool] = None) -> bool:
        """Return the exit flag; when `flag` is given, set it and return the old value."""
        old = self._done
        if flag is not None:
            self._done = bool(flag)
        return old

    # ---------------- Output channels ----------------

    def blank_line(self) -> Optional[str]:
        """
        Called for an empty input line. Returns the line to run instead, or None.

        With blank_repeats_cmd the previous command is echoed and returned.
        """
        if self.blank_repeats_cmd and self.prevcmd:
            write_text(self.prevcmd + "\n", file=self.out)
            return self.prevcmd
        return None

    def error(self, message: str) -> None:
        """Error channel; messages show as red '[error] ...' lines on stderr."""
        print_styled(f"[error] {message.rstrip()}", "red", file=self.err or sys.stderr)

    def completemsg(self, message: str) -> None:
        """Side channel for text shown during completion (reminders)."""
        self.cli.message(message)

    # ---------------- Parsing / completion ----------------

    def parse_line(
        self,
        line: str,
        *,
        cursor_position: Optional[int] = None,
        fix_unterminated_quote: bool = False,
        report_errors: bool = True,
    ) -> ParsedLine:
        """Tokenize with this session's settings; problems go to the error channel."""
        return parse_line(
            line,
            cursor_position=cursor_position,
            fix_unterminated_quote=fix_unterminated_quote,
            report_errors=report_errors,
            parser=self.parser,
            report=self.error,
        )

    def completion_function(self, text: str, line: str, start: int) -> List[str]:
        """
        Frontend completion hook.

        `text` is the token being completed and `start` its offset in `line`.
        Returns the candidates starting with the token's unescaped text,
        escaped and ready to be inserted in place of the whole token.
        """
        cursor = start + len(text)
        twice = self.completeline == line
        self.completeline = line

        context = build_completion_context(
            self._commands, line, cursor, parser=self.parser, twice=twice, shell=self)
        if self.debug_complete > 1:
            self._debug_context(text, line, start, context)

        prefix = context.prefix
        if self.parser.keep_quotes and prefix and prefix[0] in QUOTES:
            prefix = prefix[1:]
        candidates = [c for c in self.complete(context) if c.startswith(prefix)]
        if self.debug_complete > 2:
            _log.debug("returning %s", candidates)
        return self.parser.escape_all(candidates)

    def complete(self, context: CompletionContext) -> List[str]:
        """Raw candidates for `context`; override to customize completion."""
        return complete(context, message=self.completemsg)

    def _debug_context(self, text: str, line: str, start: int, context: CompletionContext) -> None:
        _log.debug("text=%r line=%r start=%d cursor=%d", text, line, start, context.cursor)
        rendered = ", ".join(f"<{token}>" for token in context.tokens)
        column = sum(len(token) + 4 for token in context.tokens[:context.token_index])
        column += 1 + context.token_offset
        _log.debug("tokens=%s token_index=%d token_offset=%d",
                   rendered, context.token_index, context.token_offset)
        _log.debug("       %s^", " " * column)
        if self.debug_complete > 3:
            _log.debug("context=%r", context.describe())

    # ---------------- Running commands ----------------

    def call_cmd(self, tokens: List[str], raw_line: Optional[str] = None) -> CommandResult:
        """Run a tokenized command; any reported error goes to the error channel."""
        result = invoke(self._commands, tokens, shell=self, raw_line=raw_line, out=self.out)
        if result.error is not None:
            self.error(str(result.error))
        return result

    def process_a_cmd(self) -> Optional[CommandResult]:
        """
        Prompt for one line and run it.

        Returns the command's result, or None when nothing ran (blank line,
        end of input, malformed line).
        """
        self.completeline = ""

        raw = self.cli.get_line(self._prompt)
        if raw is None:
            write_text("\n", file=self.out)
            self.exit_requested(True)
            return None

        if not raw.strip():
            raw = self.blank_line()
            if raw is None or not raw.strip():
                return None

        text = raw
        result = None
        parsed = self.parse_line(raw)
        if parsed.tokens is not None:
            text = self.parser.join(parsed.tokens)
            result = self.call_cmd(parsed.tokens, raw)

        if text != self.prevcmd:
            self.cli.add_history(text)
        self.prevcmd = text
        return result

    def run(self) -> None:
        """Prompt and run commands until exit is requested or input ends."""
        with self.cli:
            self.load_history()
            try:
                while not self._done:
                    self.process_a_cmd()
            finally:
                self.save_history()

    # ---------------- History ----------------

    def _history_path(self) -> Optional[Path]:
        if not self.history_file or self.history_max <= 0:
            return None
        return Path(self.history_file).expanduser()

    def load_history(self) -> None:
        """Have the frontend read its history file; nothing when history is off."""
        path = self._history_path()
        if path is None:
            return
        try:
            self.cli.load_history(path, self.history_max)
        except OSError as exc:
            self.error(f"Could not read {path}: {exc}")
            return
        _log.debug("Loaded history from %s", path)

    def save_history(self) -> None:
        """Have the frontend keep the newest `history_max` lines in its history file."""
        path = self._history_path()
        if path is None:
            return
        try:
            self.cli.save_history(path, self.history_max)
        except OSError as exc:
            self.error(f"Could not open {path} for writing: {exc}")
