import io

import pytest

from scanner import BufferOverflowError, InputError, Scanner
from tokens import Token, TokenKind


def write_source(tmp_path, text: str, name: str = "input.txt"):
    path = tmp_path / name
    path.write_bytes(text.encode("utf-8"))
    return path


def scan(text: str, **kwargs):
    return Scanner(io.StringIO(text), **kwargs).scan_all()


def kinds(tokens):
    return [token.kind for token in tokens]


def lexemes(tokens):
    return [token.lexeme for token in tokens]


def test_assignment_tokens():
    tokens = scan("x := 1 + 2;")
    assert kinds(tokens) == [TokenKind.ID, TokenKind.ASSIGN, TokenKind.NUMBER, TokenKind.PLUS, TokenKind.NUMBER,
                             TokenKind.DELIMITER, TokenKind.EOF]
    assert lexemes(tokens) == ["x", ":=", "1", "+", "2", ";", ""]


def test_read_and_write_statements():
    assert kinds(scan("read x;")) == [TokenKind.READ, TokenKind.ID, TokenKind.DELIMITER, TokenKind.EOF]
    assert kinds(scan("write x;")) == [TokenKind.WRITE, TokenKind.ID, TokenKind.DELIMITER, TokenKind.EOF]


def test_symbol_ends_pending_lexeme():
    assert scan("x;") == [Token(TokenKind.ID, "x"), Token(TokenKind.DELIMITER, ";"), Scanner.EOF_token]
    assert kinds(scan("a*(b-c)/d=!e")) == [
        TokenKind.ID, TokenKind.MULTIPLY, TokenKind.LPAREN, TokenKind.ID, TokenKind.MINUS, TokenKind.ID,
        TokenKind.RPAREN, TokenKind.DIVIDE, TokenKind.ID, TokenKind.EQUAL, TokenKind.NOT, TokenKind.ID,
        TokenKind.EOF,
    ]


def test_lone_colon_is_error_token():
    tokens = scan(": x")
    assert tokens[0] == Token(TokenKind.ERROR, ":")
    assert tokens[1] == Token(TokenKind.ID, "x")


def test_colon_at_end_of_input():
    assert scan(":") == [Token(TokenKind.ERROR, ":"), Scanner.EOF_token]


def test_colon_after_lexeme_only_ends_it():
    # the colon is consumed as a delimiter, so the = is scanned on its own
    assert kinds(scan("x:=1")) == [TokenKind.ID, TokenKind.EQUAL, TokenKind.NUMBER, TokenKind.EOF]


@pytest.mark.parametrize("lexeme, kind", [
    ("read", TokenKind.READ),
    ("READ", TokenKind.READ),
    ("Write", TokenKind.WRITE),
    ("true", TokenKind.TRUE),
    ("FALSE", TokenKind.FALSE),
    ("bool", TokenKind.BOOLEAN),
    ("Int", TokenKind.INTEGER),
    ("42", TokenKind.NUMBER),
    ("007", TokenKind.NUMBER),
    ("4a", TokenKind.ID),
    ("a4", TokenKind.ID),
    ("reader", TokenKind.ID),
])
def test_lexeme_classification(lexeme, kind):
    assert scan(lexeme)[0] == Token(kind, lexeme)


def test_whitespace_separates_lexemes():
    assert lexemes(scan("a\tb c d\re\nf")) == ["a", "b", "c", "d", "e", "f", ""]


def test_eof_is_repeated():
    scanner = Scanner(io.StringIO("abc"))
    assert scanner.get_next_token() == Token(TokenKind.ID, "abc")
    assert scanner.get_next_token() == Scanner.EOF_token
    assert scanner.get_next_token() == Scanner.EOF_token
    assert scanner.is_file_ended


def test_empty_input():
    assert scan("") == [Scanner.EOF_token]
    assert scan("  \n\t ") == [Scanner.EOF_token]


@pytest.mark.parametrize("text, crlf, lines", [
    ("a\nb\n", True, 3),
    ("a\r\nb\r\n", True, 3),
    ("a\rb\r", True, 3),
    ("a\r\n\r\nb", True, 3),
    ("a\r\nb\r\n", False, 5),
    ("a\nb\n", False, 3),
])
def test_line_counting(text, crlf, lines):
    scanner = Scanner(io.StringIO(text), crlf=crlf)
    scanner.scan_all()
    assert scanner.line_number == lines


def test_crlf_file_keeps_carriage_returns(tmp_path):
    path = write_source(tmp_path, "x;\r\ny;\r\nz;")
    scanner = Scanner(str(path))
    scanner.scan_all()
    assert scanner.line_number == 3

    scanner = Scanner(path, crlf=False)
    scanner.scan_all()
    assert scanner.line_number == 5


def test_lexeme_overflow(tmp_path):
    path = write_source(tmp_path, "abcd abcde")
    scanner = Scanner(str(path), max_lexeme_size=4)
    assert scanner.get_next_token() == Token(TokenKind.ID, "abcd")
    with pytest.raises(BufferOverflowError) as exc_info:
        scanner.get_next_token()
    assert exc_info.value.line_number == 1
    assert scanner.is_file_ended
    assert scanner.get_next_token() == Scanner.EOF_token


def test_missing_file(tmp_path):
    with pytest.raises(InputError) as exc_info:
        Scanner(str(tmp_path / "missing.txt"))
    assert "missing.txt" in str(exc_info.value)
    assert isinstance(exc_info.value.__cause__, OSError)


def test_undecodable_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_bytes(b"x := \xff\xfe;")
    scanner = Scanner(str(path))
    with pytest.raises(InputError):
        scanner.scan_all()
    assert scanner.is_file_ended


def test_small_buffer_gives_same_tokens():
    text = "read alpha;\r\nbeta := (alpha + 12) * gamma;\nwrite !beta;\n"
    assert scan(text, buffer_size=1) == scan(text)
    assert scan(text, buffer_size=3) == scan(text)


def test_input_closed_at_eof():
    stream = io.StringIO("x := 1;")
    scanner = Scanner(stream)
    scanner.scan_all()
    assert stream.closed


def test_context_manager_closes_input():
    stream = io.StringIO("x := 1;")
    with Scanner(stream) as scanner:
        scanner.get_next_token()
    assert stream.closed
    assert scanner.get_next_token() == Scanner.EOF_token


def test_comments_are_operators_by_default():
    assert kinds(scan("a // b")) == [TokenKind.ID, TokenKind.DIVIDE, TokenKind.DIVIDE, TokenKind.ID, TokenKind.EOF]


def test_line_comment_skipped():
    scanner = Scanner(io.StringIO("a // b := c;\nd"), comments=True)
    assert lexemes(scanner.scan_all()) == ["a", "d", ""]
    assert scanner.line_number == 2


def test_line_comment_at_end_of_input():
    assert lexemes(scan("a; // done", comments=True)) == ["a", ";", ""]


def test_block_comment_skipped():
    scanner = Scanner(io.StringIO("a /* b *\n c */ d/**/e"), comments=True)
    assert lexemes(scanner.scan_all()) == ["a", "d", "e", ""]
    assert scanner.line_number == 2


def test_unterminated_block_comment():
    assert scan("a /* b", comments=True) == [Token(TokenKind.ID, "a"), Token(TokenKind.ERROR, "/*"),
                                             Scanner.EOF_token]


def test_division_with_comments_enabled():
    assert kinds(scan("a / b", comments=True)) == [TokenKind.ID, TokenKind.DIVIDE, TokenKind.ID, TokenKind.EOF]
    assert kinds(scan("a/b", comments=True)) == [TokenKind.ID, TokenKind.DIVIDE, TokenKind.ID, TokenKind.EOF]


def test_token_str():
    assert str(Token(TokenKind.ID, "x")) == "x : ID"
    assert str(Scanner.EOF_token) == " : EOF"
