import sys
from enum import Enum
from typing import Iterator, List, Optional, TextIO, Tuple

from anytree import NodeMixin


class Production(Enum):
    """
    Grammar symbols a parse tree node can stand for.

    Internal nodes are named after the left hand side of a production, leaves are terminals or the empty string.
    """
    # non-terminals
    PROGRAM = "program"
    STMT_LIST = "stmtList"
    STMT = "stmt"
    ID_TAIL = "idTail"
    DECLARATION = "declaration"
    EXPR = "expr"
    TERM = "term"
    TERM_TAIL = "termTail"
    FACTOR = "factor"
    FACTOR_TAIL = "factorTail"
    ADD_OP = "addOp"
    MULT_OP = "multOp"

    # leaves
    ID = "ID"
    NUMBER = "NUMBER"
    TRUE = "true"
    FALSE = "false"
    READ = "read"
    WRITE = "write"
    PUNCTUATION = "punctuation"
    DELIMITER = "delimiter"
    NOT = "not"
    EMPTY = "e"

    @property
    def is_terminal(self) -> bool:
        """Determines if the production is a leaf variant."""
        return self not in _NON_TERMINALS


_NON_TERMINALS = frozenset({
    Production.PROGRAM, Production.STMT_LIST, Production.STMT, Production.ID_TAIL, Production.DECLARATION,
    Production.EXPR, Production.TERM, Production.TERM_TAIL, Production.FACTOR, Production.FACTOR_TAIL,
    Production.ADD_OP, Production.MULT_OP,
})


class ParseTreeNode(NodeMixin):
    """
    A node of the parse tree.

    The parent link comes from anytree and is only a back reference, children are owned by their parent.
    """

    def __init__(self, production: Production, parent: Optional["ParseTreeNode"] = None, lexeme: str = ""):
        """Inits ParseTreeNode and appends it to parent's children.

        :arg production: Production: the grammar symbol of the node
        :arg parent: Optional[ParseTreeNode]: the node this one is a child of
        :arg lexeme: str: the matched text of a leaf
        """
        super().__init__()
        self._production: Production = production
        self._lexeme: str = lexeme
        self.parent = parent

    def __repr__(self) -> str:
        return f"ParseTreeNode({self.name!r})"

    @property
    def production(self) -> Production:
        """Return the grammar symbol of the node."""
        return self._production

    @property
    def lexeme(self) -> str:
        """Return the lexeme of the node, empty for internal nodes."""
        return self._lexeme

    @property
    def name(self) -> str:
        """Return the label the node is printed with."""
        if self._production in {Production.ID, Production.NUMBER}:
            return f"{self._production.value}({self._lexeme})"
        if self._production == Production.PUNCTUATION:
            return self._lexeme
        return self._production.value

    def add(self, child: "ParseTreeNode"):
        """Appends child to the node's children."""
        child.parent = self

    def walk(self) -> Iterator[Tuple[int, "ParseTreeNode"]]:
        """Return (depth, node) pairs of the subtree in depth-first pre-order, depth 0 being this node.

        Iterative, statement lists and operator chains nest as deep as the program is long.
        """
        stack: List[Tuple[int, ParseTreeNode]] = [(0, self)]
        while stack:
            depth, node = stack.pop()
            yield depth, node
            stack.extend((depth + 1, child) for child in reversed(node.children))

    def iter_pre_order(self) -> Iterator["ParseTreeNode"]:
        """Return the nodes of the subtree in depth-first pre-order."""
        return (node for _, node in self.walk())

    def terminals(self) -> List["ParseTreeNode"]:
        """Return the leaves of the subtree left to right, without the empty-string leaves."""
        return [node for node in self.iter_pre_order() if node.is_leaf and node.production != Production.EMPTY]

    def render(self) -> str:
        """Return the subtree as text, one node per line indented by one space per level."""
        return ''.join(f"{' ' * depth}{node.name}\n" for depth, node in self.walk())

    def pretty_print(self, sink: Optional[TextIO] = None):
        """Writes the rendered subtree to sink, stdout by default."""
        if sink is None:
            sink = sys.stdout
        sink.write(self.render())

    def save(self, path: str):
        """Writes the rendered subtree in the file at path."""
        with open(path, mode='w', encoding="utf-8") as parse_tree_file:
            parse_tree_file.write(self.render())
