# src/plantree/core/tokenize.py
"""
Tokenization for the condition language.

Stage 1: Raw text → tokens (parentheses and symbols)
Stage 2: Tokens → TokenReader consumed by the recursive-descent parser
"""

import re
from dataclasses import dataclass

from plantree.core.scope import VariableScope, DEFAULT_TYPE


@dataclass
class Token:
    text: str
    position: int  # character offset in original


class ParseError(Exception):
    def __init__(self, message: str, position: int, text: str = ""):
        self.position = position
        self.text = text
        context = text[max(0, position - 20):position + 20].replace("\n", " ")
        super().__init__(f"Position {position}: {message}\n  {context}")


def tokenize(text: str) -> list[Token]:
    """Split text into tokens, tracking positions. ';' starts a comment."""
    tokens = []
    for match in re.finditer(r";[^\n]*|\(|\)|[^\s()]+", text):
        if match.group().startswith(";"):
            continue
        tokens.append(Token(text=match.group(), position=match.start()))
    return tokens


class TokenReader:
    def __init__(self, tokens: list[Token], text: str = ""):
        self.tokens = tokens
        self.text = text
        self.pos = 0

    @classmethod
    def from_text(cls, text: str) -> "TokenReader":
        return cls(tokenize(text), text)

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def peek(self) -> str | None:
        if self.at_end():
            return None
        return self.tokens[self.pos].text

    def next(self) -> str:
        if self.at_end():
            raise self.error("Unexpected end of input")
        token = self.tokens[self.pos]
        self.pos += 1
        return token.text

    def expect(self, expected: str) -> None:
        if self.at_end():
            raise self.error(f"Expected '{expected}', got end of input")
        found = self.tokens[self.pos].text
        if found != expected:
            raise self.error(f"Expected '{expected}', got '{found}'")
        self.pos += 1

    def position(self) -> int:
        if self.at_end():
            return len(self.text)
        return self.tokens[self.pos].position

    def error(self, message: str) -> ParseError:
        return ParseError(message, self.position(), self.text)


def parse_typed_list(reader: TokenReader, stop: str | None = ")") -> VariableScope:
    """
    Parse '?a ?b - type ?c - other ...' up to (not including) stop.

    Names without a trailing '- type' get the default type.
    """
    scope = VariableScope()
    pending = []

    while not reader.at_end() and reader.peek() != stop:
        token = reader.next()
        if token == "-":
            type_name = reader.next()
            if type_name in ("(", ")", "-"):
                raise reader.error(f"Expected type name, got '{type_name}'")
            if not pending:
                raise reader.error(f"Type '{type_name}' with no variables")
            for name in pending:
                scope.append(name, type_name)
            pending = []
        elif token in ("(", ")"):
            raise reader.error(f"Unexpected '{token}' in typed list")
        else:
            pending.append(token)

    for name in pending:
        scope.append(name, DEFAULT_TYPE)

    return scope
