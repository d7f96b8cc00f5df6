from __future__ import annotations

import string

import pytest
from hypothesis import given
from hypothesis import strategies as st

from cmdshell.errors import UnterminatedQuote
from cmdshell.interface.parser import (
    CursorLocation,
    LineParser,
    escape,
    join_line,
    parse_line,
    tokenize,
)

printable_lines = st.text(alphabet=string.printable, max_size=40)


# ---------------- plain tokenizing ----------------

@pytest.mark.parametrize(
    "line, expected",
    [
        ("a b c", ["a", "b", "c"]),
        ("  a   b  ", ["a", "b"]),
        ('"a b" c', ["a b", "c"]),
        ("'a b' c", ["a b", "c"]),
        (r"a\ b", ["a b"]),
        (r"'it\'s'", ["it's"]),
        (r"'a\nb'", [r"a\nb"]),
        (r'"a\nb"', ["anb"]),
        (r'"say \"hi\""', ['say "hi"']),
        ("ab'cd'ef", ["ab", "cd", "ef"]),
        ("''", [""]),
        ("a '' b", ["a", "", "b"]),
        ("trailing\\", ["trailing\\"]),
    ],
)
def test_tokenize_splits_words(line, expected):
    tokens, location = tokenize(line)
    assert tokens == expected
    assert location is None


def test_empty_line_without_cursor_has_no_tokens():
    assert tokenize("") == ([], None)


def test_unterminated_quote_fails_with_column():
    with pytest.raises(UnterminatedQuote) as info:
        tokenize("ab 'cd")
    assert info.value.column == 3
    assert info.value.quote == "'"
    assert str(info.value) == "need closing quote ['] at char 3"
    assert info.value.diagnostic().endswith("    ab 'cd\n       ^")


def test_unterminated_quote_can_be_closed_at_end_of_line():
    assert tokenize("'a b", fix_unterminated_quote=True)[0] == ["a b"]
    assert tokenize('x "y', fix_unterminated_quote=True)[0] == ["x", "y"]


# ---------------- cursor tracking ----------------

@pytest.mark.parametrize(
    "line, cursor, tokens, location",
    [
        ("a b", 1, ["a", "b"], (0, 1)),
        ("a b", 2, ["a", "b"], (1, 0)),
        ("a  b", 2, ["a", "", "b"], (1, 0)),
        ("a ", 2, ["a", ""], (1, 0)),
        ("  a", 0, ["", "a"], (0, 0)),
        ("", 0, [""], (0, 0)),
        ("ab", 10, ["ab"], (0, 2)),
        (r"a\ b", 3, ["a b"], (0, 2)),
        (r"a\ b", 4, ["a b"], (0, 3)),
        ('"ab" c', 3, ["ab", "c"], (0, 2)),
        ('"ab" c', 4, ["ab", "c"], (0, 2)),
        ('"ab" c', 1, ["ab", "c"], (0, 0)),
        ('"a\\"b"', 5, ['a"b'], (0, 3)),
    ],
)
def test_cursor_location(line, cursor, tokens, location):
    got_tokens, got_location = tokenize(line, cursor)
    assert got_tokens == tokens
    assert got_location == CursorLocation(*location)


def test_cursor_in_unterminated_quote():
    tokens, location = tokenize('ls "ab', 6, fix_unterminated_quote=True)
    assert tokens == ["ls", "ab"]
    assert location == (1, 2)


@given(line=printable_lines, data=st.data())
def test_cursor_offset_stays_inside_its_token(line, data):
    cursor = data.draw(st.integers(min_value=0, max_value=len(line)))
    tokens, location = tokenize(line, cursor, fix_unterminated_quote=True)
    assert location is not None
    assert 0 <= location.token_index < len(tokens)
    assert 0 <= location.offset <= len(tokens[location.token_index])


# ---------------- token start ----------------

@pytest.mark.parametrize(
    "line, cursor, start",
    [
        ("", 0, 0),
        ("ls", 2, 0),
        ("ls ", 3, 3),
        (r"ls my\ f", 8, 3),
        ('ls "my f', 8, 3),
        ("ls 'a b' c", 6, 3),
        ("ls   x", 4, 4),
        ('ls "ab"cd', 9, 7),
    ],
)
def test_word_start(line, cursor, start):
    assert LineParser().word_start(line, cursor) == start


def test_word_start_after_a_token_character():
    assert LineParser(token_chars="=").word_start("key=va", 6) == 4


# ---------------- token characters ----------------

def test_token_characters_form_their_own_tokens():
    parser = LineParser(token_chars="=")
    assert parser.tokenize("ab=123")[0] == ["ab", "=", "123"]
    assert parser.tokenize(r"ab\=123")[0] == ["ab=123"]


def test_cursor_between_token_character_and_word_stays_on_the_earlier_token():
    parser = LineParser(token_chars="=")
    assert parser.tokenize("a=b", 2) == (["a", "=", "b"], (1, 1))


def test_join_spaces_punctuation_naturally():
    parser = LineParser(token_chars="(),")
    tokens = parser.tokenize("a ( b , c )")[0]
    assert tokens == ["a", "(", "b", ",", "c", ")"]
    assert parser.join(tokens) == "a(b, c)"


# ---------------- escaping / joining ----------------

def test_escape_and_join():
    assert escape("a b") == r"a\ b"
    assert escape("it's") == r"it\'s"
    assert escape('"x"') == r"\"x\""
    assert join_line(["a b", "", "c"]) == r"a\ b '' c"


def test_keep_quotes_preserves_quote_marks():
    parser = LineParser(keep_quotes=True)
    tokens = parser.tokenize("'a b' \"c\" d")[0]
    assert tokens == ["'a b'", '"c"', "d"]
    assert parser.tokenize(parser.join(tokens))[0] == tokens


@given(line=printable_lines)
def test_join_then_tokenize_round_trips(line):
    tokens = tokenize(line, fix_unterminated_quote=True)[0]
    assert tokenize(join_line(tokens))[0] == tokens


@given(line=printable_lines)
def test_join_round_trips_with_token_characters(line):
    parser = LineParser(token_chars="(),=")
    tokens = parser.tokenize(line, fix_unterminated_quote=True)[0]
    assert parser.tokenize(parser.join(tokens))[0] == tokens


# ---------------- parse_line ----------------

def test_parse_line_returns_cursor_details():
    tokens, index, offset = parse_line("a b", cursor_position=3)
    assert (tokens, index, offset) == (["a", "b"], 1, 1)


def test_parse_line_reports_malformed_lines():
    reported = []
    parsed = parse_line("'x", report=reported.append)
    assert parsed.tokens is None
    assert not parsed.ok
    assert isinstance(parsed.error, UnterminatedQuote)
    assert reported and reported[0].startswith("need closing quote ['] at char 0")


def test_parse_line_can_stay_quiet():
    reported = []
    parsed = parse_line("'x", report_errors=False, report=reported.append)
    assert parsed.tokens is None
    assert reported == []
