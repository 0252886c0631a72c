from enum import Enum
from typing import NamedTuple


class TokenKind(Enum):
    """
    Terminal categories of the calculator language.

    The value of a punctuation kind is the text it is written with, the value of every other kind is its name.
    """
    # literals and identifiers
    ID = "ID"
    NUMBER = "NUMBER"
    TRUE = "TRUE"
    FALSE = "FALSE"

    # keywords
    READ = "READ"
    WRITE = "WRITE"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"

    # operators
    PLUS = "+"
    MINUS = "-"
    MULTIPLY = "*"
    DIVIDE = "/"
    ASSIGN = ":="
    EQUAL = "="
    NOT = "!"

    # delimiters
    DELIMITER = ";"
    LPAREN = "("
    RPAREN = ")"

    EOF = "EOF"
    ERROR = "ERROR"

    @property
    def display(self) -> str:
        """Return the form used in error messages, e.g. ID or '('."""
        if self.value == self.name:
            return self.name
        return f"'{self.value}'"


class Token(NamedTuple):
    """An immutable (kind, lexeme) pair produced by the scanner."""
    kind: TokenKind
    lexeme: str

    def __str__(self) -> str:
        return f"{self.lexeme} : {self.kind.name}"
