"""Declaration tree for C# script bodies.

The tree only models what hoisting needs: namespaces, type declarations and
opaque members (methods, fields, properties, directives). Method bodies and
initializers are never descended into. Every node records offsets into the
original text so unchanged regions render back byte-for-byte.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from linqpadc.pipeline.transform.lexer import TK_PUNCT, TK_TRIVIA, TK_WORD, Token, tokenize

NODE_MEMBER = "member"
NODE_TYPE = "type"
NODE_NAMESPACE = "namespace"

TYPE_KEYWORDS = frozenset({"class", "struct", "interface", "enum", "record"})
_OPENERS = {"(", "["}
_CLOSERS = {")", "]"}
_OPERATOR_CHARS = set("=!<>+-*/%&|^~")


class SyntaxParseError(ValueError):
    """Raised when declaration boundaries cannot be matched."""


@dataclass
class Node:
    """One declaration in the tree.

    ``leading_start`` marks where the node's leading trivia begins;
    ``start``/``end`` bound the declaration itself (a same-line trailing
    comment included). Block nodes also carry ``open_end`` (just past ``{``)
    and ``close_start`` (the matching ``}``).
    """

    kind: str
    leading_start: int
    start: int
    end: int = -1
    open_end: int = -1
    close_start: int = -1
    keyword: str | None = None
    members: list[Node] = field(default_factory=list)

    @property
    def is_container(self) -> bool:
        return self.kind in (NODE_TYPE, NODE_NAMESPACE) and self.open_end != -1


@dataclass
class SyntaxTree:
    source: str
    members: list[Node]


def parse_declarations(source: str) -> SyntaxTree:
    """Parse a script body into a declaration tree.

    Raises:
        LexError: If the body cannot be tokenized
        SyntaxParseError: On unbalanced braces or an unterminated declaration
    """
    parser = _Parser(tokenize(source))
    return SyntaxTree(source=source, members=parser.parse_members(nested=False))


class _Parser:
    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.index = 0
        self.cursor = 0

    def parse_members(self, *, nested: bool) -> list[Node]:
        members: list[Node] = []
        while True:
            leading_start = self.cursor
            token = self._skip_trivia()
            if token is None:
                if nested:
                    raise SyntaxParseError("unexpected end of input inside a block")
                return members
            if token.is_punct("}"):
                if not nested:
                    raise SyntaxParseError(f"unmatched '}}' at offset {token.start}")
                return members
            members.append(self._parse_member(leading_start))

    def _parse_member(self, leading_start: int) -> Node:
        start = self.tokens[self.index].start
        header: list[Token] = []
        depth = 0

        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            if token.kind == TK_TRIVIA:
                self.index += 1
                continue

            if token.kind == TK_PUNCT and token.text in _OPENERS:
                depth += 1
            elif token.kind == TK_PUNCT and token.text in _CLOSERS:
                depth -= 1
                if depth < 0:
                    raise SyntaxParseError(f"unbalanced '{token.text}' at offset {token.start}")
            elif depth == 0 and token.is_punct(";"):
                self.index += 1
                node = Node(
                    kind=_classify(header),
                    leading_start=leading_start,
                    start=start,
                    keyword=_type_keyword(header),
                )
                self._finish(node, token.end)
                return node
            elif depth == 0 and token.is_punct("{"):
                return self._parse_block(header, leading_start, start)
            elif depth == 0 and token.is_punct("}"):
                raise SyntaxParseError(f"unexpected '}}' at offset {token.start}")

            header.append(token)
            self.index += 1

        raise SyntaxParseError(f"unterminated declaration at offset {start}")

    def _parse_block(self, header: list[Token], leading_start: int, start: int) -> Node:
        open_token = self.tokens[self.index]
        self.index += 1
        self.cursor = open_token.end

        if _is_expression_header(header):
            self._skip_braces()
            node = Node(kind=NODE_MEMBER, leading_start=leading_start, start=start)
            self._finish(node, self._skip_to_semicolon())
            return node

        node = Node(
            kind=_classify(header),
            leading_start=leading_start,
            start=start,
            open_end=open_token.end,
            keyword=_type_keyword(header),
        )
        if node.kind != NODE_MEMBER and node.keyword != "enum":
            node.members = self.parse_members(nested=True)
            close = self.tokens[self.index]
            self.index += 1
        else:
            close = self._skip_braces()
        node.close_start = close.start
        end = close.end

        follower = self._peek_index()
        if follower is not None and self.tokens[follower].is_punct(";"):
            self.index = follower + 1
            end = self.tokens[follower].end
        elif follower is not None and node.kind == NODE_MEMBER and self.tokens[follower].is_punct("="):
            # Property initializer: int X { get; set; } = 1;
            end = self._skip_to_semicolon()

        self._finish(node, end)
        return node

    def _skip_braces(self) -> Token:
        """Advance past the block whose '{' was just consumed; return its '}'."""
        depth = 1
        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            self.index += 1
            if token.is_punct("{"):
                depth += 1
            elif token.is_punct("}"):
                depth -= 1
                if depth == 0:
                    return token
        raise SyntaxParseError("unterminated block")

    def _skip_to_semicolon(self) -> int:
        depth = 0
        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            self.index += 1
            if token.kind != TK_PUNCT:
                continue
            if token.text in ("{", "(", "["):
                depth += 1
            elif token.text in ("}", ")", "]"):
                depth -= 1
                if depth < 0:
                    raise SyntaxParseError(f"unbalanced '{token.text}' at offset {token.start}")
            elif token.text == ";" and depth == 0:
                return token.end
        raise SyntaxParseError("unterminated member initializer")

    def _finish(self, node: Node, end: int) -> None:
        # A comment on the same line as the declaration's end belongs to it.
        node.end = end
        index = self.index
        while index < len(self.tokens):
            token = self.tokens[index]
            if token.kind != TK_TRIVIA or "\n" in token.text:
                break
            if not token.text.isspace():
                node.end = token.end
            index += 1
        self.cursor = node.end

    def _skip_trivia(self) -> Token | None:
        while self.index < len(self.tokens):
            token = self.tokens[self.index]
            if token.kind != TK_TRIVIA:
                return token
            self.index += 1
        return None

    def _peek_index(self) -> int | None:
        for index in range(self.index, len(self.tokens)):
            if self.tokens[index].kind != TK_TRIVIA:
                return index
        return None


def _top_level(header: list[Token]) -> list[Token]:
    """Header tokens outside parentheses and brackets; openers themselves are kept."""
    depth = 0
    visible: list[Token] = []
    for token in header:
        if token.kind == TK_PUNCT and token.text in _OPENERS:
            if depth == 0:
                visible.append(token)
            depth += 1
        elif token.kind == TK_PUNCT and token.text in _CLOSERS:
            depth -= 1
        elif depth == 0:
            visible.append(token)
    return visible


def _type_keyword(header: list[Token]) -> str | None:
    """Return the type keyword of a declaration header, if it declares a type."""
    visible = _top_level(header)
    for position, token in enumerate(visible):
        if token.kind == TK_PUNCT and token.text in ("(", "="):
            return None
        if token.kind != TK_WORD or token.text not in TYPE_KEYWORDS:
            continue
        if token.text == "record":
            # 'record' is contextual: it needs a name (or struct/class) after it.
            following = visible[position + 1] if position + 1 < len(visible) else None
            if following is None or following.kind != TK_WORD:
                continue
        return token.text
    return None


def _classify(header: list[Token]) -> str:
    if _type_keyword(header) is not None:
        return NODE_TYPE
    if header and header[0].is_word("namespace"):
        return NODE_NAMESPACE
    return NODE_MEMBER


def _is_expression_header(header: list[Token]) -> bool:
    """True when a '{' after this header opens an expression, not a body.

    Covers field initializers and expression-bodied members. The '=' of an
    operator declaration (``operator ==``) does not count.
    """
    visible = _top_level(header)
    for position, token in enumerate(visible):
        if not token.is_punct("="):
            continue
        previous = visible[position - 1] if position else None
        if previous is not None and (
            previous.is_word("operator")
            or (previous.kind == TK_PUNCT and previous.text in _OPERATOR_CHARS)
        ):
            continue
        return True
    return False
