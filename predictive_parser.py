import logging
from enum import Enum
from typing import Dict, Optional, Tuple

from parse_tree import ParseTreeNode, Production
from scanner import Scanner
from tokens import Token, TokenKind

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    MISMATCHED_TOKEN = 1
    UNMATCHED_TOKEN = 2


class ParseError(Exception):
    """
    A syntax error. Parsing stops at the first one.
    """

    def __init__(self,
                 error_type: ErrorType,
                 token: Token,
                 expected: Tuple[TokenKind, ...],
                 line_number: int,
                 production: Optional[Production] = None):
        """Inits ParseError.

        :arg error_type: ErrorType: MISMATCHED_TOKEN if a terminal did not match, UNMATCHED_TOKEN if no alternative
            of production starts with the token
        :arg token: Token: the lookahead token
        :arg expected: Tuple[TokenKind, ...]: the token kinds that were acceptable
        :arg line_number: int: the line number of the error
        :arg production: Optional[Production]: the production being parsed, for UNMATCHED_TOKEN
        """
        self._type: ErrorType = error_type
        self._token: Token = token
        self._expected: Tuple[TokenKind, ...] = expected
        self._line_number: int = line_number
        self._production: Optional[Production] = production

        found = token.kind.display
        if token.kind == TokenKind.ERROR:
            found = f"{found}({token.lexeme})"
        if self._type == ErrorType.MISMATCHED_TOKEN:
            self._content = f"#{line_number} : syntax error , expected {expected[0].display} but found {found}"
        else:
            expected_kinds = '|'.join(kind.display for kind in expected)
            self._content = (f"#{line_number} : syntax error , {production.value}() found {found} "
                             f"where {expected_kinds} was expected")
        super().__init__(self._content)

    @property
    def type(self) -> ErrorType:
        """Return the type of the error"""
        return self._type

    @property
    def token(self) -> Token:
        """Return the offending token"""
        return self._token

    @property
    def found(self) -> TokenKind:
        """Return the kind of the offending token"""
        return self._token.kind

    @property
    def expected(self) -> Tuple[TokenKind, ...]:
        """Return the token kinds that would have been accepted"""
        return self._expected

    @property
    def production(self) -> Optional[Production]:
        """Return the production whose routine raised the error, None for a terminal mismatch"""
        return self._production

    @property
    def line_number(self) -> int:
        """Return the line number of the error"""
        return self._line_number

    @property
    def content(self) -> str:
        """Return the content of the error"""
        return self._content


class TokenCursor:
    """
    The parser's single token of lookahead.
    """

    def __init__(self, scanner: Scanner):
        """Inits TokenCursor with the first token of scanner."""
        self._scanner: Scanner = scanner
        self._current_token: Token = scanner.get_next_token()

    @property
    def current(self) -> Token:
        """Return the lookahead token."""
        return self._current_token

    @property
    def kind(self) -> TokenKind:
        """Return the kind of the lookahead token."""
        return self._current_token.kind

    @property
    def line_number(self) -> int:
        """Return the scanner's current line number."""
        return self._scanner.line_number

    def advance(self) -> Token:
        """Consumes the lookahead token and reads the next one. Return the consumed token."""
        token = self._current_token
        self._current_token = self._scanner.get_next_token()
        return token


class Parser:
    """
    A top-down predictive parser for the calculator language.

    Every non-terminal has its own routine which picks an alternative by looking the lookahead token up in the
    FIRST set of the production, and the FOLLOW set for an empty alternative.
    """
    EOF_symbol: str = "$$"

    _first_sets: Dict[Production, Tuple[TokenKind, ...]] = {
        Production.PROGRAM: (TokenKind.ID, TokenKind.READ, TokenKind.WRITE, TokenKind.INTEGER, TokenKind.BOOLEAN,
                             TokenKind.EOF),
        Production.STMT_LIST: (TokenKind.ID, TokenKind.READ, TokenKind.WRITE, TokenKind.INTEGER, TokenKind.BOOLEAN),
        Production.STMT: (TokenKind.ID, TokenKind.READ, TokenKind.WRITE, TokenKind.INTEGER, TokenKind.BOOLEAN),
        Production.ID_TAIL: (TokenKind.ASSIGN, TokenKind.LPAREN),
        Production.DECLARATION: (TokenKind.INTEGER, TokenKind.BOOLEAN),
        Production.EXPR: (TokenKind.ID, TokenKind.NUMBER, TokenKind.LPAREN, TokenKind.TRUE, TokenKind.FALSE,
                          TokenKind.NOT),
        Production.TERM: (TokenKind.ID, TokenKind.NUMBER, TokenKind.LPAREN, TokenKind.TRUE, TokenKind.FALSE,
                          TokenKind.NOT),
        Production.TERM_TAIL: (TokenKind.PLUS, TokenKind.MINUS),
        Production.FACTOR: (TokenKind.ID, TokenKind.NUMBER, TokenKind.LPAREN, TokenKind.TRUE, TokenKind.FALSE,
                            TokenKind.NOT),
        Production.FACTOR_TAIL: (TokenKind.MULTIPLY, TokenKind.DIVIDE),
        Production.ADD_OP: (TokenKind.PLUS, TokenKind.MINUS),
        Production.MULT_OP: (TokenKind.MULTIPLY, TokenKind.DIVIDE),
    }
    # only the productions with an empty alternative
    _follow_sets: Dict[Production, Tuple[TokenKind, ...]] = {
        Production.STMT_LIST: (TokenKind.EOF,),
        Production.TERM_TAIL: (TokenKind.RPAREN, TokenKind.ID, TokenKind.READ, TokenKind.WRITE, TokenKind.EOF,
                               TokenKind.DELIMITER),
        Production.FACTOR_TAIL: (TokenKind.PLUS, TokenKind.MINUS, TokenKind.RPAREN, TokenKind.ID, TokenKind.READ,
                                 TokenKind.WRITE, TokenKind.EOF, TokenKind.DELIMITER),
    }

    # terminals with a leaf of their own, the rest are punctuation
    _leaf_productions: Dict[TokenKind, Production] = {
        TokenKind.ID: Production.ID,
        TokenKind.NUMBER: Production.NUMBER,
        TokenKind.TRUE: Production.TRUE,
        TokenKind.FALSE: Production.FALSE,
        TokenKind.READ: Production.READ,
        TokenKind.WRITE: Production.WRITE,
        TokenKind.DELIMITER: Production.DELIMITER,
        TokenKind.NOT: Production.NOT,
    }

    def __init__(self, scanner: Scanner):
        """Inits Parser

        :arg scanner: Scanner: the scanner the tokens are read from"""
        self._scanner: Scanner = scanner
        self._tokens: Optional[TokenCursor] = None

    @property
    def _lookahead(self) -> TokenKind:
        return self._tokens.kind

    def parse(self) -> ParseTreeNode:
        """Parses the whole input. Return the root of the parse tree.

        :raises ParseError: at the first token that does not fit the grammar
        """
        try:
            self._tokens = TokenCursor(self._scanner)
            return self._program()
        finally:
            self._scanner.close_input_file()

    def _in_first(self, production: Production) -> bool:
        return self._lookahead in self._first_sets[production]

    def _in_follow(self, production: Production) -> bool:
        return self._lookahead in self._follow_sets[production]

    def _unmatched(self, production: Production) -> ParseError:
        """Return the error for a lookahead no alternative of production accepts."""
        expected = self._first_sets[production] + self._follow_sets.get(production, ())
        return ParseError(ErrorType.UNMATCHED_TOKEN, self._tokens.current, expected, self._tokens.line_number,
                          production)

    def _new_node(self, production: Production, parent: Optional[ParseTreeNode]) -> ParseTreeNode:
        logger.debug("Applying %s on %s", production.value, self._tokens.current)
        return ParseTreeNode(production, parent)

    def _add_empty(self, node: ParseTreeNode):
        """Adds the empty string leaf of an epsilon alternative."""
        logger.debug("%s -> epsilon", node.name)
        ParseTreeNode(Production.EMPTY, node)

    def _program(self) -> ParseTreeNode:
        """Parses the production: program -> stmtList $$"""
        if not self._in_first(Production.PROGRAM):
            raise self._unmatched(Production.PROGRAM)
        node = self._new_node(Production.PROGRAM, None)
        self._stmt_list(node)
        self._match(TokenKind.EOF, node)
        logger.info("Parse successful")
        return node

    def _stmt_list(self, parent: ParseTreeNode):
        """Parses the production: stmtList -> stmt stmtList | epsilon

        The right recursion runs as a loop, each nested stmtList is added under the previous one.
        """
        node = self._new_node(Production.STMT_LIST, parent)
        while self._in_first(Production.STMT_LIST):
            self._stmt(node)
            node = self._new_node(Production.STMT_LIST, node)
        if not self._in_follow(Production.STMT_LIST):
            raise self._unmatched(Production.STMT_LIST)
        self._add_empty(node)

    def _stmt(self, parent: ParseTreeNode):
        """Parses the production: stmt -> ID idTail ; | read ID ; | write expr ; | declaration ;"""
        node = self._new_node(Production.STMT, parent)
        if self._lookahead == TokenKind.ID:
            self._match(TokenKind.ID, node)
            self._id_tail(node)
        elif self._lookahead == TokenKind.READ:
            self._match(TokenKind.READ, node)
            self._match(TokenKind.ID, node)
        elif self._lookahead == TokenKind.WRITE:
            self._match(TokenKind.WRITE, node)
            self._expr(node)
        elif self._in_first(Production.DECLARATION):
            self._declaration(node)
        else:
            raise self._unmatched(Production.STMT)
        self._match(TokenKind.DELIMITER, node)

    def _id_tail(self, parent: ParseTreeNode):
        """Parses the production: idTail -> := expr | ( ID )"""
        node = self._new_node(Production.ID_TAIL, parent)
        if self._lookahead == TokenKind.ASSIGN:
            self._match(TokenKind.ASSIGN, node)
            self._expr(node)
        elif self._lookahead == TokenKind.LPAREN:
            self._match(TokenKind.LPAREN, node)
            self._match(TokenKind.ID, node)
            self._match(TokenKind.RPAREN, node)
        else:
            raise self._unmatched(Production.ID_TAIL)

    def _declaration(self, parent: ParseTreeNode):
        """Parses the production: declaration -> int ID | bool ID"""
        node = self._new_node(Production.DECLARATION, parent)
        if self._lookahead == TokenKind.INTEGER:
            self._match(TokenKind.INTEGER, node)
        elif self._lookahead == TokenKind.BOOLEAN:
            self._match(TokenKind.BOOLEAN, node)
        else:
            raise self._unmatched(Production.DECLARATION)
        self._match(TokenKind.ID, node)

    def _expr(self, parent: ParseTreeNode):
        """Parses the production: expr -> term termTail"""
        if not self._in_first(Production.EXPR):
            raise self._unmatched(Production.EXPR)
        node = self._new_node(Production.EXPR, parent)
        self._term(node)
        self._term_tail(node)

    def _term(self, parent: ParseTreeNode):
        """Parses the production: term -> factor factorTail"""
        if not self._in_first(Production.TERM):
            raise self._unmatched(Production.TERM)
        node = self._new_node(Production.TERM, parent)
        self._factor(node)
        self._factor_tail(node)

    def _term_tail(self, parent: ParseTreeNode):
        """Parses the production: termTail -> addOp term termTail | epsilon"""
        node = self._new_node(Production.TERM_TAIL, parent)
        while self._in_first(Production.TERM_TAIL):
            self._add_op(node)
            self._term(node)
            node = self._new_node(Production.TERM_TAIL, node)
        if not self._in_follow(Production.TERM_TAIL):
            raise self._unmatched(Production.TERM_TAIL)
        self._add_empty(node)

    def _factor(self, parent: ParseTreeNode):
        """Parses the production: factor -> ID | NUMBER | ( expr ) | ! expr | true | false"""
        node = self._new_node(Production.FACTOR, parent)
        if self._lookahead in {TokenKind.ID, TokenKind.NUMBER, TokenKind.TRUE, TokenKind.FALSE}:
            self._match(self._lookahead, node)
        elif self._lookahead == TokenKind.LPAREN:
            self._match(TokenKind.LPAREN, node)
            self._expr(node)
            self._match(TokenKind.RPAREN, node)
        elif self._lookahead == TokenKind.NOT:
            self._match(TokenKind.NOT, node)
            self._expr(node)
        else:
            raise self._unmatched(Production.FACTOR)

    def _factor_tail(self, parent: ParseTreeNode):
        """Parses the production: factorTail -> multOp factor factorTail | epsilon"""
        node = self._new_node(Production.FACTOR_TAIL, parent)
        while self._in_first(Production.FACTOR_TAIL):
            self._mult_op(node)
            self._factor(node)
            node = self._new_node(Production.FACTOR_TAIL, node)
        if not self._in_follow(Production.FACTOR_TAIL):
            raise self._unmatched(Production.FACTOR_TAIL)
        self._add_empty(node)

    def _add_op(self, parent: ParseTreeNode):
        """Parses the production: addOp -> + | -"""
        if not self._in_first(Production.ADD_OP):
            raise self._unmatched(Production.ADD_OP)
        node = self._new_node(Production.ADD_OP, parent)
        self._match(self._lookahead, node)

    def _mult_op(self, parent: ParseTreeNode):
        """Parses the production: multOp -> * | /"""
        if not self._in_first(Production.MULT_OP):
            raise self._unmatched(Production.MULT_OP)
        node = self._new_node(Production.MULT_OP, parent)
        self._match(self._lookahead, node)

    def _match(self, kind: TokenKind, parent: ParseTreeNode) -> ParseTreeNode:
        """Adds a leaf for the lookahead token to parent and reads the next token.

        :raises ParseError: if the lookahead token is not of the expected kind
        """
        token = self._tokens.current
        if token.kind != kind:
            raise ParseError(ErrorType.MISMATCHED_TOKEN, token, (kind,), self._tokens.line_number)

        production = self._leaf_productions.get(kind)
        if production is not None:
            node = ParseTreeNode(production, parent, token.lexeme)
        elif kind == TokenKind.EOF:
            node = ParseTreeNode(Production.PUNCTUATION, parent, self.EOF_symbol)
        else:
            node = ParseTreeNode(Production.PUNCTUATION, parent, token.lexeme.upper())
        logger.debug("Matched %s", token)

        self._tokens.advance()
        return node
