#!/usr/bin/env python3
# cmdshell/interface/parser.py
from __future__ import annotations

"""
Cursor-aware shell-word tokenizer.

Responsibilities:
- Split a raw command line into tokens, honoring single/double quotes and
  backslash escapes, while tracking where an optional cursor position lands
  (token index + offset inside the *unescaped* token).
- Escape tokens and join them back into a line that re-tokenizes identically.
- Wrap the tokenizer in parse_line(), which reports malformed lines instead of raising.

The scan is a handful of pure helpers that take the line and a position and
return the consumed chunk plus the new position; nothing else is shared.
"""

import logging
import re
from dataclasses import dataclass
from functools import cached_property
from typing import Callable, Iterator, NamedTuple, Optional, Sequence

from cmdshell.errors import UnterminatedQuote

_log = logging.getLogger(__name__)

QUOTES = "'\""

_WHITESPACE = re.compile(r"\s+")
# Body of a quoted chunk up to (and including) the close quote.
_QUOTED_BODY = {
    '"': re.compile(r'((?:\\.|[^\\"])*)"', re.DOTALL),
    "'": re.compile(r"((?:\\.|[^\\'])*)'", re.DOTALL),
}
# Characters a backslash may escape inside each quote style (None = any).
_QUOTED_ESCAPABLE = {'"': None, "'": "\\'"}


class CursorLocation(NamedTuple):
    """Token holding the cursor and the offset of the cursor inside it."""
    token_index: int
    offset: int


def _unescape(text: str, escapable: Optional[str], cursor: Optional[int]) -> tuple[str, int]:
    """
    Drop escaping backslashes from `text`.

    `cursor` is the cursor position relative to the start of `text` (or None).
    Returns (unescaped_text, drift) where drift is the number of removed
    backslashes that sat before the cursor.
    """
    out: list[str] = []
    drift = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n and (escapable is None or text[i + 1] in escapable):
            if cursor is not None and len(out) < cursor - drift:
                drift += 1
            out.append(text[i + 1])
            i += 2
        else:
            out.append(ch)
            i += 1
    return "".join(out), drift


def _scan_whitespace(line: str, pos: int) -> int:
    """Return the position after a whitespace run starting at `pos`."""
    match = _WHITESPACE.match(line, pos)
    return match.end() if match else pos


def _scan_quoted(
    line: str,
    pos: int,
    cursor: Optional[int],
    fix_unterminated_quote: bool,
) -> tuple[str, int, int]:
    """
    Consume a quoted chunk whose open quote is at `pos`.

    Returns (body_without_quotes, new_pos, adjust); `adjust` is how many raw
    characters before the cursor do not appear in the body (quotes, escapes).
    """
    quote = line[pos]
    start = pos
    pos += 1
    adjust = 0

    if cursor is not None and start < cursor:
        adjust += 1  # open quote

    match = _QUOTED_BODY[quote].match(line, pos)
    if match:
        body = match.group(1)
        pos = match.end()
    else:
        if not fix_unterminated_quote:
            raise UnterminatedQuote(start, quote, line)
        body = line[pos:]
        pos = len(line)
        if cursor is not None and pos == cursor:
            adjust -= 1  # the implicit close quote is not in the line

    body, drift = _unescape(
        body,
        _QUOTED_ESCAPABLE[quote],
        cursor - start - adjust if cursor is not None else None,
    )
    adjust += drift

    if cursor is not None and pos == cursor:
        adjust += 1  # close quote

    return body, pos, adjust


@dataclass(frozen=True)
class LineParser:
    """
    Tokenizer configuration.

    Attributes:
        token_chars: Characters that always form a one-character token ("=" turns
            "ab=123" into "ab", "=", "123").
        keep_quotes: Keep the surrounding quote marks on quoted tokens.
        space_none / space_before / space_after: join() formatting for
            token characters: no surrounding space, space before only,
            space after only. Other token characters get both.
    """

    token_chars: str = ""
    keep_quotes: bool = False
    space_none: str = "("
    space_before: str = "[{"
    space_after: str = ",)]}"

    @cached_property
    def _bare_word(self) -> re.Pattern[str]:
        extra = re.escape(self.token_chars)
        return re.compile(rf"(?:\\.|\\\Z|[^\s\\\"'{extra}])+", re.DOTALL)

    @cached_property
    def _needs_escape(self) -> re.Pattern[str]:
        extra = re.escape(self.token_chars)
        return re.compile(rf"[\s\\\"'{extra}]")

    # ---------------- Tokenizing ----------------

    def tokenize(
        self,
        line: str,
        cursor: Optional[int] = None,
        fix_unterminated_quote: bool = False,
    ) -> tuple[list[str], Optional[CursorLocation]]:
        """
        Split `line` into tokens.

        When `cursor` is given, also return the CursorLocation it falls in.
        A cursor inside whitespace gets its own empty token; a cursor exactly
        between two tokens belongs to the earlier one. Raises UnterminatedQuote
        unless `fix_unterminated_quote` closes the quote at end of line.
        """
        using_cursor = cursor is not None
        if using_cursor:
            cursor = max(0, min(cursor, len(line)))
            if line == "":
                return [""], CursorLocation(0, 0)

        tokens: list[str] = []
        location: Optional[CursorLocation] = None
        length = len(line)
        pos = 0

        while pos < length:
            # 1) whitespace; a cursor inside it gets an empty token
            ws_start = pos
            pos = _scan_whitespace(line, pos)
            if using_cursor and pos > ws_start and pos >= cursor:
                if not (pos == cursor and pos < length):
                    tokens.append("")
                    location = CursorLocation(len(tokens) - 1, 0)
                    using_cursor = False

            # 2) quoted chunk
            if pos < length and line[pos] in QUOTES:
                start = pos
                quote = line[pos]
                body, pos, adjust = _scan_quoted(
                    line, pos, cursor if using_cursor else None, fix_unterminated_quote)
                tokens.append(f"{quote}{body}{quote}" if self.keep_quotes else body)
                if using_cursor and pos >= cursor:
                    location = CursorLocation(len(tokens) - 1, cursor - start - adjust)
                    using_cursor = False

            # 3) bare word
            match = self._bare_word.match(line, pos)
            if match:
                start = pos
                pos = match.end()
                word, drift = _unescape(
                    match.group(), None, cursor - start if using_cursor else None)
                tokens.append(word)
                if using_cursor and pos >= cursor:
                    location = CursorLocation(len(tokens) - 1, cursor - start - drift)
                    using_cursor = False

            # 4) token character
            if self.token_chars and pos < length and line[pos] in self.token_chars:
                start = pos
                tokens.append(line[pos])
                pos += 1
                if using_cursor and pos >= cursor:
                    location = CursorLocation(len(tokens) - 1, cursor - start)
                    using_cursor = False

        return tokens, location

    def word_start(self, line: str, cursor: int) -> int:
        """
        Raw offset in `line` where the token holding `cursor` begins.

        This is where a line editor should start replacing text with a
        completion: escapes and an open quote belong to the token, so
        `ls my\\ f` and `ls "my f` both start at 3. A cursor in whitespace
        starts an empty token at the cursor.
        """
        cursor = max(0, min(cursor, len(line)))
        length = len(line)
        pos = 0

        while pos < length:
            ws_start = pos
            pos = _scan_whitespace(line, pos)
            if pos > ws_start and pos >= cursor:
                return cursor

            if pos < length and line[pos] in QUOTES:
                start = pos
                _, pos, _ = _scan_quoted(line, pos, None, True)
                if pos >= cursor:
                    return start

            match = self._bare_word.match(line, pos)
            if match:
                start = pos
                pos = match.end()
                if pos >= cursor:
                    return start

            if self.token_chars and pos < length and line[pos] in self.token_chars:
                start = pos
                pos += 1
                if pos >= cursor:
                    return start

        return cursor

    # ---------------- Escaping / joining ----------------

    def escape(self, token: str) -> str:
        """Backslash-escape everything the tokenizer would otherwise interpret."""
        quote = ""
        if self.keep_quotes and len(token) >= 2 and token[0] in QUOTES and token[-1] == token[0]:
            quote, token = token[0], token[1:-1]
        if quote == "'":
            escaped = re.sub(r"[\\']", r"\\\g<0>", token)
        else:
            escaped = self._needs_escape.sub(r"\\\g<0>", token)
        return f"{quote}{escaped}{quote}"

    def escape_all(self, tokens: Sequence[str]) -> list[str]:
        return [self.escape(token) for token in tokens]

    def join(self, tokens: Sequence[str]) -> str:
        """
        Join tokens back into a command line.

        Without token characters this escapes and joins with single spaces.
        With them it spaces punctuation the way people write it: 'a(b, c)'
        rather than 'a ( b , c )'.
        """
        out: list[str] = []
        space = ""  # a space if one is wanted before the next token
        for token in tokens:
            if len(token) == 1 and token in self.token_chars:
                if token in self.space_none:
                    out.append(token)
                    space = ""
                    continue
                if token in self.space_before:
                    out.append(space + token)
                    space = ""
                    continue
                if token in self.space_after:
                    out.append(token)
                    space = " "
                    continue
                text = token
            else:
                text = self.escape(token) if token else "''"
            out.append(space + text)
            space = " "
        return "".join(out)


DEFAULT_PARSER = LineParser()


def tokenize(
    line: str,
    cursor: Optional[int] = None,
    fix_unterminated_quote: bool = False,
) -> tuple[list[str], Optional[CursorLocation]]:
    """Tokenize with the default parser (no token characters, quotes stripped)."""
    return DEFAULT_PARSER.tokenize(line, cursor, fix_unterminated_quote)


def escape(token: str) -> str:
    return DEFAULT_PARSER.escape(token)


def join_line(tokens: Sequence[str]) -> str:
    return DEFAULT_PARSER.join(tokens)


# ---------------- parse_line ----------------

@dataclass(slots=True)
class ParsedLine:
    """
    parse_line() outcome.

    `tokens` is None when the line was malformed; `error` then holds the reason.
    `token_index` / `token_offset` are set only when a cursor was requested.
    """
    tokens: Optional[list[str]]
    token_index: Optional[int] = None
    token_offset: Optional[int] = None
    error: Optional[UnterminatedQuote] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator[object]:
        yield self.tokens
        yield self.token_index
        yield self.token_offset


def parse_line(
    line: str,
    *,
    cursor_position: Optional[int] = None,
    fix_unterminated_quote: bool = False,
    report_errors: bool = True,
    parser: Optional[LineParser] = None,
    report: Optional[Callable[[str], None]] = None,
) -> ParsedLine:
    """
    Tokenize `line`, converting a tokenizer failure into a ParsedLine with `error` set.

    When `report_errors` is true the failure's diagnostic (message, the line, and
    a caret under the open quote) goes to `report`, or to the log when no
    reporter is given.
    """
    parser = parser or DEFAULT_PARSER
    try:
        tokens, location = parser.tokenize(line, cursor_position, fix_unterminated_quote)
    except UnterminatedQuote as exc:
        if report_errors:
            (report or _log.error)(exc.diagnostic())
        return ParsedLine(tokens=None, error=exc)

    if location is None:
        return ParsedLine(tokens=tokens)
    return ParsedLine(tokens=tokens, token_index=location.token_index,
                      token_offset=location.offset)
