"""
pg_game.py

This module defines the core data structure for representing a parity game:
a finite directed graph whose nodes are owned by player 0 (Even) or player 1
(Odd) and carry a non-negative priority.

The model keeps two adjacency structures that must always agree:

1.  **Successors**: `out[u]` is the ordered list of nodes `u` can move to.
2.  **Predecessors**: `in_[v]` is the ordered list of nodes that can move to `v`.

An edge `(u, v)` exists iff `v` is in `out[u]` iff `u` is in `in_[v]`, and
each appears at most once. Node ids are always the dense range
`[0, n_nodes)`. Deleting nodes therefore never happens in place: it is done
by extracting a subgame, which produces a fresh, densely renumbered model.
"""

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

NodeId = int
Mapping = List[int]


class ParseError(ValueError):
    """Raised when a game description cannot be parsed."""


class InvalidMapping(ValueError):
    """Raised when a permutation is not a bijection over the node ids."""


class EmptyKeepSet(ValueError):
    """Raised when a subgame extraction would produce a game without nodes."""


class ParityGame:
    """
    The main container for a parity game. Owns the per-node owner, priority
    and label arrays together with the successor and predecessor lists.
    """
    def __init__(self, n_nodes: int = 0):
        """
        Initializes a game with `n_nodes` nodes and no edges.

        Args:
            n_nodes (int): The number of nodes. Every node starts with
                owner 0, priority 0 and no label.
        """
        if n_nodes < 0: raise ValueError(f"Node count must be non-negative, got {n_nodes}.")
        self.n_nodes: int = n_nodes
        self.owner: List[int] = [0] * n_nodes
        self.priority: List[int] = [0] * n_nodes
        self.label: List[Optional[str]] = [None] * n_nodes
        self.out: List[List[NodeId]] = [[] for _ in range(n_nodes)]
        self.in_: List[List[NodeId]] = [[] for _ in range(n_nodes)]

    def _check_node(self, node: NodeId):
        if not 0 <= node < self.n_nodes:
            raise IndexError(f"Node {node} is out of range [0, {self.n_nodes}).")

    def has_edge(self, u: NodeId, v: NodeId) -> bool:
        """Returns True if the edge u -> v exists."""
        return 0 <= u < self.n_nodes and v in self.out[u]

    def add_edge(self, u: NodeId, v: NodeId) -> bool:
        """
        Adds the edge u -> v to both adjacency structures. This is the only
        place where new edges enter a game, so it is the only place that
        has to reject duplicates.

        Args:
            u (NodeId): The source node.
            v (NodeId): The target node.

        Returns:
            bool: True if the edge was added, False if it already existed or
            either endpoint is out of range.
        """
        if not (0 <= u < self.n_nodes and 0 <= v < self.n_nodes): return False
        if v in self.out[u]: return False
        self.out[u].append(v)
        self.in_[v].append(u)
        return True

    def remove_edge(self, u: NodeId, v: NodeId) -> bool:
        """
        Removes the edge u -> v from both adjacency structures.

        Returns:
            bool: True if the edge existed and was removed.
        """
        if not self.has_edge(u, v): return False
        self.out[u].remove(v)
        self.in_[v].remove(u)
        return True

    def set_owner(self, node: NodeId, owner: int):
        """Sets the player (0 or 1) that controls `node`."""
        self._check_node(node)
        if owner not in (0, 1): raise ValueError(f"Owner must be 0 or 1, got {owner}.")
        self.owner[node] = owner

    def set_priority(self, node: NodeId, priority: int):
        """Sets the priority of `node`."""
        self._check_node(node)
        if priority < 0: raise ValueError(f"Priority must be non-negative, got {priority}.")
        self.priority[node] = priority

    def edges(self) -> Iterator[Tuple[NodeId, NodeId]]:
        """Yields every edge (u, v) in node order, then successor order."""
        for u in range(self.n_nodes):
            for v in self.out[u]:
                yield u, v

    def edge_count(self) -> int:
        return sum(len(succs) for succs in self.out)

    def max_priority(self) -> int:
        return max(self.priority) if self.priority else 0

    def dead_ends(self) -> List[NodeId]:
        """Returns the nodes without any successor. A valid game has none."""
        return [n for n in range(self.n_nodes) if not self.out[n]]

    def copy(self) -> 'ParityGame':
        """Returns an independent copy of the game."""
        game = ParityGame(self.n_nodes)
        game.owner = list(self.owner)
        game.priority = list(self.priority)
        game.label = list(self.label)
        game.out = [list(succs) for succs in self.out]
        game.in_ = [list(preds) for preds in self.in_]
        return game

    # --- Subgames ---

    def extract_subgame(self, keep: Iterable[NodeId], owner: Optional[Sequence[int]] = None) -> 'ParityGame':
        """
        Builds the game induced by the nodes in `keep`.

        The kept nodes are renumbered densely in ascending order of their
        original id. An edge survives iff both of its endpoints are kept;
        successor order is preserved. Priorities and labels are copied.

        Args:
            keep (Iterable[NodeId]): The ids to keep. Duplicates are ignored.
            owner (Optional[Sequence[int]]): If given, indexed by original id,
                the owner to impose on each kept node instead of copying it.

        Returns:
            ParityGame: A new game. The source game is left untouched.
        """
        selection = sorted(set(keep))
        if not selection:
            raise EmptyKeepSet("Cannot extract a subgame from an empty set of nodes.")
        for node in selection:
            if not 0 <= node < self.n_nodes:
                raise ValueError(f"Cannot keep node {node}: out of range [0, {self.n_nodes}).")

        new_id = {old: new for new, old in enumerate(selection)}
        sub = ParityGame(len(selection))
        for new, old in enumerate(selection):
            sub.owner[new] = owner[old] if owner is not None else self.owner[old]
            sub.priority[new] = self.priority[old]
            sub.label[new] = self.label[old]
        # Predecessor lists come out sorted by new id.
        for new, old in enumerate(selection):
            for succ in self.out[old]:
                if succ in new_id:
                    sub.add_edge(new, new_id[succ])
        return sub

    # --- Node order ---

    def _relabel(self, new_of: Mapping):
        """Moves every node `i` to position `new_of[i]`, rewriting all edges."""
        n = self.n_nodes
        owner, priority, label = [0] * n, [0] * n, [None] * n
        out: List[List[NodeId]] = [[] for _ in range(n)]
        in_: List[List[NodeId]] = [[] for _ in range(n)]
        for old in range(n):
            new = new_of[old]
            owner[new] = self.owner[old]
            priority[new] = self.priority[old]
            label[new] = self.label[old]
            out[new] = [new_of[v] for v in self.out[old]]
            in_[new] = [new_of[u] for u in self.in_[old]]
        self.owner, self.priority, self.label = owner, priority, label
        self.out, self.in_ = out, in_

    def _canonical_order(self) -> Mapping:
        """Old -> new ids after a stable sort by priority."""
        order = sorted(range(self.n_nodes), key=lambda n: (self.priority[n], n))
        new_of = [0] * self.n_nodes
        for new, old in enumerate(order):
            new_of[old] = new
        return new_of

    def reindex_capture(self) -> Mapping:
        """
        Reorders the nodes canonically (by priority, ties broken by id) and
        returns the mapping used, so the reordering can be undone with
        `apply_permutation`.

        Returns:
            Mapping: `mapping[old_id] = new_id`.
        """
        new_of = self._canonical_order()
        self._relabel(new_of)
        return new_of

    def reindex_discard(self):
        """Reorders the nodes canonically and keeps that order for good."""
        self._relabel(self._canonical_order())

    def apply_permutation(self, mapping: Sequence[int], undo: bool = True):
        """
        Applies a node permutation.

        Args:
            mapping (Sequence[int]): An old -> new mapping as returned by
                `reindex_capture`.
            undo (bool): If True (the default) the inverse of `mapping` is
                applied, restoring the order from before the capture. If
                False, node `i` is moved to `mapping[i]`.
        """
        if len(mapping) != self.n_nodes:
            raise InvalidMapping(f"Mapping has length {len(mapping)}, expected {self.n_nodes}.")
        seen = [False] * self.n_nodes
        for target in mapping:
            if not 0 <= target < self.n_nodes or seen[target]:
                raise InvalidMapping(f"Mapping is not a permutation of [0, {self.n_nodes}): bad entry {target}.")
            seen[target] = True
        if undo:
            new_of = [0] * self.n_nodes
            for old, new in enumerate(mapping):
                new_of[new] = old
        else:
            new_of = list(mapping)
        self._relabel(new_of)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParityGame): return NotImplemented
        return (self.n_nodes == other.n_nodes and self.owner == other.owner
                and self.priority == other.priority and self.label == other.label
                and self.out == other.out and self.in_ == other.in_)

    def __repr__(self) -> str:
        """Provides a concise string representation of the game."""
        return f"ParityGame(nodes={self.n_nodes}, edges={self.edge_count()}, max_priority={self.max_priority()})"
