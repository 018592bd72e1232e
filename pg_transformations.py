"""
pg_transformations.py

This module provides a class for applying priority and ownership
transformations to a parity game. Games use the max convention: a play is
won by player 0 iff the highest priority seen infinitely often is even.

renumber, compress and inflate keep the winner of every node. evenodd swaps
the roles of the players, so every node is won by the other player. minmax
turns a max-game into the equivalent min-game and back.
"""

from typing import Dict, List

from pg_game import ParityGame


class PriorityTransformation:
    """
    A controller class that rewrites the priorities and owners of a
    ParityGame in place. Every method returns the number of distinct
    priorities left in the game.
    """
    def __init__(self, game: ParityGame):
        self.game = game

    def _distinct(self) -> int:
        return len(set(self.game.priority))

    def _compact(self, same_parity_step: int) -> int:
        """
        Rewrites the distinct priorities in ascending order, starting at the
        parity of the lowest. A change of parity moves one value up; equal
        parity moves `same_parity_step` values up.
        """
        used = sorted(set(self.game.priority))
        if not used: return 0
        new_value: Dict[int, int] = {}
        current = used[0] & 1
        for i, p in enumerate(used):
            if i > 0:
                current += 1 if (p & 1) != (used[i - 1] & 1) else same_parity_step
            new_value[p] = current
        self.game.priority = [new_value[p] for p in self.game.priority]
        return self._distinct()

    def renumber(self) -> int:
        """
        Maps the priorities in use onto the smallest range that keeps their
        order and parity without merging any two of them.
        """
        return self._compact(2)

    def compress(self) -> int:
        """
        Merges neighbouring priorities of equal parity: in ascending order, a
        priority with the parity of the one before joins its level, a change
        of parity opens the next level. Order and parity are kept for every
        pair of nodes, so no play changes its winner, and no value ends up
        above what renumber would give.
        """
        return self._compact(0)

    def inflate(self) -> int:
        """
        Gives every node its own priority. Nodes are visited by ascending
        priority (ties by id) and each gets the smallest value above the
        previous one that has the parity of its old priority.
        """
        game = self.game
        order = sorted(range(game.n_nodes), key=lambda n: (game.priority[n], n))
        priority: List[int] = list(game.priority)
        current = -1
        for n in order:
            current += 1
            if (current & 1) != (game.priority[n] & 1):
                current += 1
            priority[n] = current
        game.priority = priority
        return self._distinct()

    def evenodd(self) -> int:
        """Swaps the players: every priority moves up by one, every owner flips."""
        game = self.game
        game.priority = [p + 1 for p in game.priority]
        game.owner = [1 - o for o in game.owner]
        return self._distinct()

    def minmax(self) -> int:
        """
        Reverses the priority order while keeping parities, using
        `d - p` where `d` is the highest priority rounded up to even.
        """
        game = self.game
        d = game.max_priority()
        if d & 1: d += 1
        game.priority = [d - p for p in game.priority]
        return self._distinct()
