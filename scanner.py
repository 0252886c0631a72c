import logging
import os
import string
from typing import IO, Dict, List, Optional, Set, Union

from tokens import Token, TokenKind

logger = logging.getLogger(__name__)


class ScannerError(Exception):
    """
    Base class of the errors raised by the scanner.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        """Inits ScannerError.

        :arg message: str: what went wrong
        :arg line_number: Optional[int]: the line number of the error, None if not tied to a line
        """
        if line_number is not None:
            super().__init__(f"#{line_number} : {message}")
        else:
            super().__init__(message)
        self._line_number: Optional[int] = line_number

    @property
    def line_number(self) -> Optional[int]:
        """Return the line number of the error"""
        return self._line_number


class InputError(ScannerError):
    """The source could not be opened or read."""


class BufferOverflowError(ScannerError):
    """A lexeme does not fit in the scanner's lexeme buffer."""


class Scanner:
    """
    A lexical scanner for the calculator language.

    Attributes:
        BUFFER_SIZE         default number of characters read from the input at once
        MAX_LEXEME_SIZE     default capacity of the lexeme buffer
        EOF_token           the token returned once the input is exhausted
    """
    BUFFER_SIZE: int = 1024
    MAX_LEXEME_SIZE: int = 256

    EOF_token: Token = Token(TokenKind.EOF, "")

    # character sets
    _EOF_char = None
    _digits: Set[str] = set(string.digits)
    _whitespaces: Set[str] = {' ', '\t', '\u00a0', '\r', '\n'}
    _symbols: Dict[str, TokenKind] = {
        '=': TokenKind.EQUAL,
        '*': TokenKind.MULTIPLY,
        '/': TokenKind.DIVIDE,
        '+': TokenKind.PLUS,
        '-': TokenKind.MINUS,
        '(': TokenKind.LPAREN,
        '!': TokenKind.NOT,
        ')': TokenKind.RPAREN,
        ';': TokenKind.DELIMITER,
    }

    _keywords: Dict[str, TokenKind] = {
        "read": TokenKind.READ,
        "write": TokenKind.WRITE,
        "true": TokenKind.TRUE,
        "false": TokenKind.FALSE,
        "bool": TokenKind.BOOLEAN,
        "int": TokenKind.INTEGER,
    }

    def __init__(self,
                 input_file: Union[str, os.PathLike, IO[str]] = "input.txt",
                 buffer_size: int = BUFFER_SIZE,
                 max_lexeme_size: int = MAX_LEXEME_SIZE,
                 crlf: bool = True,
                 comments: bool = False):
        """Inits Scanner

        :arg input_file: path of the source file, or an open text stream the scanner takes over
        :arg buffer_size: size of the input buffer
        :arg max_lexeme_size: the longest lexeme the scanner accepts
        :arg crlf: treat a carriage return followed by a line feed as a single line break
        :arg comments: skip // and /* */ comments instead of scanning them as operators
        """
        # input
        if isinstance(input_file, (str, os.PathLike)):
            try:
                self._input_file: IO[str] = open(input_file, mode="r", encoding="utf-8", newline="")
            except OSError as e:
                raise InputError(f"cannot open {os.fspath(input_file)!r}: {e.strerror}") from e
        else:
            self._input_file = input_file
        self._buffer_size: int = buffer_size
        self._buffer: str = ""
        self._pushback: List[Optional[str]] = []
        self._token_buffer: List[str] = []
        self._max_lexeme_size: int = max_lexeme_size

        # options
        self._crlf: bool = crlf
        self._comments: bool = comments

        # position in buffer
        self._forward: int = 0
        self._is_file_ended: bool = False
        self._line_number: int = 1

    def __enter__(self) -> "Scanner":
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close_input_file()

    @property
    def line_number(self) -> int:
        """Return current line number."""
        return self._line_number

    @property
    def is_file_ended(self) -> bool:
        """Determines if the input is exhausted (or closed)."""
        return self._is_file_ended

    def _load_buffer(self) -> str:
        """Return the next BUFFER_SIZE characters of input_file, less at its end."""
        try:
            return self._input_file.read(self._buffer_size)
        except (OSError, UnicodeDecodeError) as e:
            self.close_input_file()
            raise InputError(f"cannot read input: {e}", self._line_number) from e

    def _get_next_char(self) -> Optional[str]:
        """Return next character of input_file. None if EOF."""
        if self._pushback:
            return self._pushback.pop()

        # check if buffer needs to be reloaded
        if self._forward == len(self._buffer):
            if self._input_file.closed:
                return self._EOF_char
            self._buffer = self._load_buffer()
            self._forward = 0
            if not self._buffer:
                return self._EOF_char

        char = self._buffer[self._forward]
        self._forward += 1
        return char

    def _unread_char(self, char: Optional[str]):
        """Push the last read character back so the next read returns it again."""
        self._pushback.append(char)

    def _count_line_break(self, char: str):
        """Updates line number after reading a whitespace character."""
        if char == '\n':
            self._line_number += 1
        elif char == '\r':
            if self._crlf:
                # CR LF is a single line break
                next_char = self._get_next_char()
                if next_char != '\n':
                    self._unread_char(next_char)
            self._line_number += 1

    def _scan_lexeme(self) -> Token:
        """Return the token for the accumulated lexeme and empty the lexeme buffer.

        Keywords are matched case-insensitively, a lexeme of decimal digits is a NUMBER and anything else an ID.
        """
        lexeme = ''.join(self._token_buffer)
        self._token_buffer.clear()

        kind = self._keywords.get(lexeme.lower())
        if kind is None:
            kind = TokenKind.NUMBER if set(lexeme) <= self._digits else TokenKind.ID
        return Token(kind, lexeme)

    def _scan_colon(self) -> Token:
        """Return ASSIGN for ":=", an ERROR token for a lone colon."""
        next_char = self._get_next_char()
        if next_char == '=':
            return Token(TokenKind.ASSIGN, ":=")
        self._unread_char(next_char)
        return Token(TokenKind.ERROR, ":")

    def _scan_slash(self) -> Optional[Token]:
        """Return the token for a slash read outside a lexeme, None if it opened a comment that was skipped."""
        next_char = self._get_next_char()
        if next_char == '/':
            self.skip_line_comment()
            return None
        if next_char == '*':
            if self.skip_block_comment():
                return None
            return Token(TokenKind.ERROR, "/*")
        self._unread_char(next_char)
        return Token(TokenKind.DIVIDE, '/')

    def skip_line_comment(self):
        """Skips the rest of a // comment whose opening slashes were already read.

        The line break ending the comment is left in the input.
        """
        while True:
            char = self._get_next_char()
            if char == self._EOF_char or char in {'\n', '\r'}:
                self._unread_char(char)
                return

    def skip_block_comment(self) -> bool:
        """Skips the rest of a /* */ comment whose opening was already read. Return False if EOF came first."""
        while True:
            char = self._get_next_char()
            if char == self._EOF_char:
                self._unread_char(char)
                return False
            if char == '*':
                next_char = self._get_next_char()
                if next_char == '/':
                    return True
                self._unread_char(next_char)
            else:
                self._count_line_break(char)

    def _scan_token(self) -> Token:
        """Run the scanning loop until a token is complete."""
        while True:
            char = self._get_next_char()

            if char == self._EOF_char:
                if self._token_buffer:
                    # emit the pending lexeme, EOF follows on the next call
                    self._unread_char(char)
                    return self._scan_lexeme()
                self.close_input_file()
                return self.EOF_token

            if char in self._whitespaces:
                self._count_line_break(char)
                if self._token_buffer:
                    return self._scan_lexeme()
            elif char == ':':
                if self._token_buffer:
                    return self._scan_lexeme()
                return self._scan_colon()
            elif char in self._symbols:
                if self._token_buffer:
                    self._unread_char(char)
                    return self._scan_lexeme()
                if self._comments and char == '/':
                    token = self._scan_slash()
                    if token is not None:
                        return token
                else:
                    return Token(self._symbols[char], char)
            else:
                if len(self._token_buffer) == self._max_lexeme_size:
                    raise BufferOverflowError(f"lexeme exceeds {self._max_lexeme_size} characters",
                                              self._line_number)
                self._token_buffer.append(char)

    def get_next_token(self) -> Token:
        """Return next token of input_file, the EOF token once it is exhausted."""
        if self._is_file_ended:
            return self.EOF_token

        try:
            token = self._scan_token()
        except ScannerError:
            self.close_input_file()
            raise
        logger.debug("line %d: %s", self._line_number, token)
        return token

    def scan_all(self) -> List[Token]:
        """Return every remaining token of input_file, ending with the EOF token."""
        tokens: List[Token] = []
        while True:
            token = self.get_next_token()
            tokens.append(token)
            if token.kind == TokenKind.EOF:
                return tokens

    def close_input_file(self):
        """Closes input_file. Later calls of get_next_token return EOF."""
        self._is_file_ended = True
        self._token_buffer.clear()
        self._pushback.clear()
        self._input_file.close()
