"""
pg_scc.py

Strongly connected components of a parity game and the search for a bottom
(terminal) SCC.

The decomposition is Tarjan's algorithm: one depth-first traversal that gives
every node a discovery index and a low-link value, with completed components
popped off an explicit stack when a root's low-link equals its own index.
The traversal is iterative, so deep games do not hit the recursion limit.
"""

import logging
from typing import Iterable, List, Optional, Set, Tuple

from pg_game import ParityGame, NodeId

logger = logging.getLogger(__name__)


def strongly_connected_components(game: ParityGame, roots: Optional[Iterable[NodeId]] = None) -> Tuple[List[List[NodeId]], List[int]]:
    """
    Computes the SCCs of the part of `game` reachable from `roots`.

    Args:
        game (ParityGame): The game to decompose.
        roots (Optional[Iterable[NodeId]]): Nodes to start the search from.
            If None, every node is a root and the whole game is decomposed.

    Returns:
        Tuple[List[List[NodeId]], List[int]]: The components, in the order
        Tarjan completes them (every component comes after all components
        it has edges to), and `component_of`, the index of each node's
        component or -1 for nodes that were not reached.
    """
    n = game.n_nodes
    index = [-1] * n
    lowlink = [0] * n
    on_stack = [False] * n
    component_of = [-1] * n
    stack: List[NodeId] = []
    components: List[List[NodeId]] = []
    counter = 0

    for root in (range(n) if roots is None else roots):
        if index[root] != -1: continue
        index[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack[root] = True
        # Each frame is a node and the position of the next successor to try.
        frames = [(root, 0)]
        while frames:
            node, pos = frames[-1]
            succs = game.out[node]
            if pos < len(succs):
                frames[-1] = (node, pos + 1)
                succ = succs[pos]
                if index[succ] == -1:
                    index[succ] = lowlink[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack[succ] = True
                    frames.append((succ, 0))
                elif on_stack[succ]:
                    lowlink[node] = min(lowlink[node], index[succ])
                continue

            frames.pop()
            if frames:
                parent = frames[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])
            if lowlink[node] == index[node]:
                component = []
                while True:
                    member = stack.pop()
                    on_stack[member] = False
                    component_of[member] = len(components)
                    component.append(member)
                    if member == node: break
                components.append(sorted(component))

    return components, component_of


def is_trivial(game: ParityGame, component: List[NodeId]) -> bool:
    """A component is trivial if it is a single node without a self-loop."""
    return len(component) == 1 and component[0] not in game.out[component[0]]


def bottom_scc(game: ParityGame, start: NodeId, require_nontrivial: bool = True, rng=None) -> Set[NodeId]:
    """
    Finds a bottom SCC reachable from `start`.

    Walks the condensation from the component of `start`, each time stepping
    into a component that an edge leaves to, until it reaches a component
    with no leaving edges.

    Args:
        game (ParityGame): The game to search.
        start (NodeId): The node the walk starts from.
        require_nontrivial (bool): If True, a single node without a self-loop
            is never accepted as the result; the walk only steps into
            components from which an acceptable bottom SCC can be reached.
        rng: Optional source with `randint(lo, hi)` used to pick the next
            component. Without one the first candidate in edge order is used.

    Returns:
        Set[NodeId]: The nodes of the chosen component. The set is closed
        under successors.
    """
    if not 0 <= start < game.n_nodes:
        raise IndexError(f"Start node {start} is out of range [0, {game.n_nodes}).")
    components, component_of = strongly_connected_components(game, [start])

    successors: List[List[int]] = []
    for members in components:
        targets: List[int] = []
        for u in members:
            for v in game.out[u]:
                c = component_of[v]
                if c != component_of[u] and c not in targets:
                    targets.append(c)
        successors.append(targets)

    # Components are completed sinks first, so every successor of a
    # component is decided before the component itself.
    viable = [False] * len(components)
    for c, members in enumerate(components):
        if successors[c]:
            viable[c] = any(viable[t] for t in successors[c])
        else:
            viable[c] = not (require_nontrivial and is_trivial(game, members))

    current = component_of[start]
    if not viable[current]:
        raise ValueError(f"No non-trivial bottom SCC is reachable from node {start}.")
    while successors[current]:
        candidates = [t for t in successors[current] if viable[t]]
        current = candidates[rng.randint(0, len(candidates) - 1)] if rng is not None else candidates[0]

    logger.debug("Bottom SCC from node %d has %d of %d nodes", start, len(components[current]), game.n_nodes)
    return set(components[current])
