"""Comment- and literal-aware tokenizer for C# script bodies.

Only enough of C# is understood to find declaration boundaries: trivia
(whitespace, comments, preprocessor lines), string and character literals
(regular, verbatim, interpolated and raw), words, and single-character
punctuation. Every token keeps its source offsets so callers can slice the
original text back out unchanged.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

TK_TRIVIA = "TRIVIA"
TK_STRING = "STRING"
TK_CHAR = "CHAR"
TK_WORD = "WORD"
TK_PUNCT = "PUNCT"

_re_word = re.compile(r"@?[^\W]\w*")
_re_raw_quotes = re.compile(r'"{3,}')
_re_string_prefix = re.compile(r'(?:(?P<dollars>\$+)@?|@(?P<verbatim_dollars>\$+)|@)?(?=")')


class LexError(ValueError):
    """Raised when the body cannot be tokenized (unterminated literal or comment)."""

    def __init__(self, message: str, offset: int):
        super().__init__(f"{message} at offset {offset}")
        self.offset = offset


@dataclass(frozen=True)
class Token:
    kind: str
    start: int
    end: int
    text: str

    def is_punct(self, value: str) -> bool:
        return self.kind == TK_PUNCT and self.text == value

    def is_word(self, value: str) -> bool:
        return self.kind == TK_WORD and self.text == value


def tokenize(source: str) -> list[Token]:
    """Split source into tokens, trivia included.

    Raises:
        LexError: On unterminated comments, strings or character literals
    """
    tokens: list[Token] = []
    pos = 0
    length = len(source)
    at_line_start = True

    while pos < length:
        ch = source[pos]

        if ch.isspace():
            end = pos
            while end < length and source[end].isspace():
                if source[end] == "\n":
                    at_line_start = True
                end += 1
            tokens.append(Token(TK_TRIVIA, pos, end, source[pos:end]))
            pos = end
            continue

        if ch == "#" and at_line_start:
            end = _line_end(source, pos)
            tokens.append(Token(TK_TRIVIA, pos, end, source[pos:end]))
            pos = end
            continue

        at_line_start = False

        if source.startswith("//", pos):
            end = _line_end(source, pos)
            tokens.append(Token(TK_TRIVIA, pos, end, source[pos:end]))
            pos = end
            continue

        if source.startswith("/*", pos):
            close = source.find("*/", pos + 2)
            if close == -1:
                raise LexError("unterminated block comment", pos)
            end = close + 2
            tokens.append(Token(TK_TRIVIA, pos, end, source[pos:end]))
            pos = end
            continue

        string_end = scan_string(source, pos)
        if string_end is not None:
            tokens.append(Token(TK_STRING, pos, string_end, source[pos:string_end]))
            pos = string_end
            continue

        if ch == "'":
            end = _scan_char(source, pos)
            tokens.append(Token(TK_CHAR, pos, end, source[pos:end]))
            pos = end
            continue

        word = _re_word.match(source, pos)
        if word:
            tokens.append(Token(TK_WORD, pos, word.end(), word.group(0)))
            pos = word.end()
            continue

        tokens.append(Token(TK_PUNCT, pos, pos + 1, ch))
        pos += 1

    return tokens


def mask_literals(source: str) -> str:
    """Return source with comments and literals blanked out, offsets preserved.

    Newlines survive so line structure is unchanged; every other character of
    a comment, preprocessor line, string or char literal becomes a space.
    """
    chunks: list[str] = []
    for token in tokenize(source):
        if token.kind in (TK_STRING, TK_CHAR) or (
            token.kind == TK_TRIVIA and not token.text.isspace()
        ):
            chunks.append("".join("\n" if c == "\n" else " " for c in token.text))
        else:
            chunks.append(token.text)
    return "".join(chunks)


def scan_string(source: str, pos: int) -> int | None:
    """Return the end offset of a string literal starting at pos, or None."""
    prefix = _re_string_prefix.match(source, pos)
    if not prefix:
        return None

    dollars = prefix.group("dollars") or prefix.group("verbatim_dollars") or ""
    verbatim = "@" in prefix.group(0)
    quote_start = prefix.end()

    raw = _re_raw_quotes.match(source, quote_start)
    if raw and not verbatim:
        fence = raw.group(0)
        close = source.find(fence, raw.end())
        if close == -1:
            raise LexError("unterminated raw string literal", pos)
        return close + len(fence)

    if dollars:
        return _scan_interpolated(source, quote_start + 1, verbatim, pos)
    if verbatim:
        return _scan_verbatim(source, quote_start + 1, pos)
    return _scan_regular(source, quote_start + 1, pos)


def _line_end(source: str, pos: int) -> int:
    end = source.find("\n", pos)
    return len(source) if end == -1 else end


def _scan_regular(source: str, pos: int, start: int) -> int:
    length = len(source)
    while pos < length:
        ch = source[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == '"':
            return pos + 1
        if ch == "\n":
            break
        pos += 1
    raise LexError("unterminated string literal", start)


def _scan_verbatim(source: str, pos: int, start: int) -> int:
    length = len(source)
    while pos < length:
        if source[pos] == '"':
            if source.startswith('""', pos):
                pos += 2
                continue
            return pos + 1
        pos += 1
    raise LexError("unterminated verbatim string literal", start)


def _scan_interpolated(source: str, pos: int, verbatim: bool, start: int) -> int:
    length = len(source)
    while pos < length:
        ch = source[pos]
        if ch == "{":
            if source.startswith("{{", pos):
                pos += 2
                continue
            pos = _scan_hole(source, pos + 1, start)
            continue
        if ch == '"':
            if verbatim and source.startswith('""', pos):
                pos += 2
                continue
            return pos + 1
        if not verbatim:
            if ch == "\\":
                pos += 2
                continue
            if ch == "\n":
                break
        pos += 1
    raise LexError("unterminated interpolated string literal", start)


def _scan_hole(source: str, pos: int, start: int) -> int:
    depth = 1
    length = len(source)
    while pos < length:
        nested = scan_string(source, pos)
        if nested is not None:
            pos = nested
            continue
        ch = source[pos]
        if ch == "'":
            pos = _scan_char(source, pos)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return pos + 1
        pos += 1
    raise LexError("unterminated interpolation hole", start)


def _scan_char(source: str, pos: int) -> int:
    cursor = pos + 1
    length = len(source)
    while cursor < length:
        ch = source[cursor]
        if ch == "\\":
            cursor += 2
            continue
        if ch == "'":
            return cursor + 1
        if ch == "\n":
            break
        cursor += 1
    raise LexError("unterminated character literal", pos)
