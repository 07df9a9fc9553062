"""Tokenizer for the model-definition language.

Produces a flat token stream; comments and horizontal whitespace are dropped,
newlines are kept because they separate field declarations.
"""

import re
from dataclasses import dataclass
from enum import Enum


class TokenKind(str, Enum):
    """Token categories."""

    IDENT = "IDENT"
    STRING = "STRING"
    NUMBER = "NUMBER"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    LPAREN = "("
    RPAREN = ")"
    QUESTION = "?"
    AT = "@"
    ATAT = "@@"
    COLON = ":"
    COMMA = ","
    DOT = "."
    EQUALS = "="
    NEWLINE = "NEWLINE"
    OTHER = "OTHER"
    EOF = "EOF"


@dataclass(frozen=True)
class Token:
    """A lexical token with its 1-based source line."""

    kind: TokenKind
    value: str
    line: int


# Order matters: longer punctuation before shorter, comments before OTHER.
_TOKEN_SPEC = [
    ("COMMENT", r"//[^\n]*|/\*.*?\*/"),
    ("NEWLINE", r"\r?\n"),
    ("SKIP", r"[ \t\f\v]+"),
    ("STRING", r'"(?:\\.|[^"\\\n])*"|\'(?:\\.|[^\'\\\n])*\''),
    ("NUMBER", r"-?\d+(?:\.\d+)?(?![\w.])"),
    ("IDENT", r"[A-Za-z_][A-Za-z0-9_]*"),
    ("ATAT", r"@@"),
    ("PUNCT", r"[{}\[\]()?@:,.=]"),
    ("OTHER", r"."),
]
_TOKEN_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, pattern in _TOKEN_SPEC), re.DOTALL
)
_PUNCTUATION = {kind.value: kind for kind in TokenKind if len(kind.value) == 1}


def tokenize(text: str) -> list[Token]:
    """
    Split schema text into tokens.

    Never fails: characters outside the language become OTHER tokens and are
    left for the parser to skip.

    Args:
        text: Raw schema text

    Returns:
        Token list, always terminated by an EOF token

    Example:
        >>> [t.value for t in tokenize("model User { id Int @id }")][:4]
        ['model', 'User', '{', 'id']
    """
    tokens: list[Token] = []
    line = 1

    for match in _TOKEN_RE.finditer(text):
        group = match.lastgroup
        value = match.group()

        if group == "NEWLINE":
            tokens.append(Token(TokenKind.NEWLINE, "\n", line))
            line += 1
        elif group in ("SKIP", "COMMENT"):
            # Block comments may span lines
            line += value.count("\n")
        elif group == "STRING":
            tokens.append(Token(TokenKind.STRING, _unquote(value), line))
        elif group == "NUMBER":
            tokens.append(Token(TokenKind.NUMBER, value, line))
        elif group == "IDENT":
            tokens.append(Token(TokenKind.IDENT, value, line))
        elif group == "ATAT":
            tokens.append(Token(TokenKind.ATAT, value, line))
        elif group == "PUNCT":
            tokens.append(Token(_PUNCTUATION[value], value, line))
        else:
            tokens.append(Token(TokenKind.OTHER, value, line))

    tokens.append(Token(TokenKind.EOF, "", line))
    return tokens


def _unquote(literal: str) -> str:
    """Strip quotes and resolve backslash escapes of a string literal."""
    body = literal[1:-1]
    return re.sub(r"\\(.)", r"\1", body)
