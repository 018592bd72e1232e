"""
pgsolver_to_game.py

This module provides the translator for converting a game in PGSolver format
into a ParityGame model.

The translation process involves two steps:
1.  **Parsing**: A Lark LALR parser turns the text into a parse tree of one
    header and a list of node declarations.
2.  **Structure Building**: The tree is walked once to size the game from the
    header, then once more to set owners, priorities and labels and to add
    the edges. Semantic checks (ranges, duplicate or missing nodes) are made
    here, since the grammar only knows about syntax.
"""

from typing import List, Optional, TextIO

from lark import Lark, Tree, Token
from lark.exceptions import LarkError

from pg_game import ParityGame, ParseError

pgsolver_grammar = r"""
    start: header initial? node*
    header: "parity" INT ";"
    initial: "start" INT ";"
    node: INT INT INT succs label? ";"
    succs: INT ("," INT)*
    label: STRING
    STRING: /"[^"]*"/
    %import common.INT
    %import common.WS
    %ignore WS
"""


class PgsolverToGame:
    """
    Translates a PGSolver string into an instance of the ParityGame model by
    walking the parsed declaration list.
    """
    def __init__(self):
        """Initializes the translator with an LALR parser."""
        self.parser = Lark(pgsolver_grammar, start='start', parser='lalr')

    def translate(self, text: str) -> ParityGame:
        """
        The main public method to perform the translation.

        Args:
            text (str): A complete game in PGSolver format.

        Returns:
            ParityGame: The resulting game.

        Raises:
            ParseError: If the text is malformed or describes an invalid game.
        """
        try:
            tree = self.parser.parse(text)
        except LarkError as e:
            raise ParseError(f"Malformed game: {e}") from e

        header = tree.children[0]
        max_id = int(header.children[0])
        game = ParityGame(max_id + 1)
        defined = [False] * game.n_nodes

        for child in tree.children[1:]:
            if child.data == 'node':
                self._visit_node(child, game, defined)

        missing = [n for n in range(game.n_nodes) if not defined[n]]
        if missing:
            raise ParseError(f"Node {missing[0]} is declared by the header but never defined.")
        return game

    def _check_id(self, token: Token, game: ParityGame) -> int:
        value = int(token)
        if value >= game.n_nodes:
            raise ParseError(f"Node id {value} on line {token.line} is out of range [0, {game.n_nodes}).")
        return value

    def _visit_node(self, tree: Tree, game: ParityGame, defined: List[bool]):
        """Handles one declaration `<id> <priority> <owner> <succs> ["name"];`."""
        id_token, priority_token, owner_token, succs = tree.children[:4]
        node = self._check_id(id_token, game)
        if defined[node]:
            raise ParseError(f"Node {node} on line {id_token.line} is defined twice.")
        defined[node] = True

        owner = int(owner_token)
        if owner not in (0, 1):
            raise ParseError(f"Owner of node {node} must be 0 or 1, got {owner}.")
        game.owner[node] = owner
        game.priority[node] = int(priority_token)
        game.label[node] = self._get_label(tree.children[4] if len(tree.children) > 4 else None)

        for succ_token in succs.children:
            game.add_edge(node, self._check_id(succ_token, game))

    def _get_label(self, tree: Optional[Tree]) -> Optional[str]:
        if tree is None: return None
        return tree.children[0].value[1:-1]


def parse_pgsolver(stream: TextIO) -> ParityGame:
    """Reads a whole PGSolver game from an open text stream."""
    try:
        text = stream.read()
    except UnicodeDecodeError as e:
        raise ParseError(f"Malformed game: input is not valid text ({e})") from e
    return PgsolverToGame().translate(text)
