"""
game_to_pgsolver.py

This module provides the translator for converting a ParityGame model back
into PGSolver format. Nodes are written in id order, successors in the order
they are stored, so parsing the output yields an identical model.
"""

from typing import TextIO

from pg_game import ParityGame, NodeId


class GameToPgsolver:
    """
    Translates a ParityGame object into a PGSolver string.
    """
    def __init__(self, game: ParityGame):
        """
        Initializes the translator.

        Args:
            game (ParityGame): The game to be translated.
        """
        self.game = game

    def translate(self) -> str:
        """The main public method to perform the translation."""
        lines = [f"parity {self.game.n_nodes - 1};"]
        lines.extend(self._node_to_pgsolver(n) for n in range(self.game.n_nodes))
        return "\n".join(lines) + "\n"

    def _node_to_pgsolver(self, node: NodeId) -> str:
        """Translates a single node declaration, label included when present."""
        game = self.game
        if not game.out[node]: raise ValueError(f"Node {node} has no successors and cannot be written.")
        succs = ",".join(str(v) for v in game.out[node])
        line = f"{node} {game.priority[node]} {game.owner[node]} {succs}"
        if game.label[node] is not None:
            line += f' "{game.label[node]}"'
        return line + ";"


def write_pgsolver(game: ParityGame, stream: TextIO):
    """Writes `game` in PGSolver format to an open text stream."""
    stream.write(GameToPgsolver(game).translate())
