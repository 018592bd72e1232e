"""
test_scc.py

This script tests the SCC decomposition and the bottom SCC search, checking
in particular that every returned bottom SCC is closed under successors.
"""

import random

import pytest
from pg_game import ParityGame
from pg_scc import strongly_connected_components, bottom_scc, is_trivial
from pgsolver_to_game import PgsolverToGame
from tests.game_corpus import CORPUS as game_corpus
from tests.game_solver import random_game


def _game(description: str) -> ParityGame:
    item = next(i for i in game_corpus if description in i['description'])
    return PgsolverToGame().translate(item['pgsolver'])


def _reachable(game: ParityGame, start: int) -> set:
    seen, queue = {start}, [start]
    while queue:
        for v in game.out[queue.pop()]:
            if v not in seen:
                seen.add(v)
                queue.append(v)
    return seen


def test_cycle_is_one_component():
    """Tests that the four-node cycle is a single closed SCC."""
    game = _game("four-node cycle")
    components, component_of = strongly_connected_components(game)
    assert components == [[0, 1, 2, 3]]
    assert component_of == [0, 0, 0, 0]
    assert bottom_scc(game, 0, True) == {0, 1, 2, 3}


def test_components_partition_and_order():
    """Tests that components partition the nodes and come sinks first."""
    for seed in range(10):
        game = random_game(seed, n_nodes=15, max_degree=2)
        components, component_of = strongly_connected_components(game)
        assert sorted(n for c in components for n in c) == list(range(game.n_nodes))
        for u, v in game.edges():
            # Every edge stays inside a component or points to an earlier one.
            assert component_of[v] <= component_of[u]
            if component_of[u] == component_of[v]:
                assert u in _reachable(game, v)


def test_components_restricted_to_roots():
    """Tests that only nodes reachable from the roots are visited."""
    game = _game("node leading into a self-loop")
    components, component_of = strongly_connected_components(game, [1])
    assert components == [[1]]
    assert component_of == [-1, 0]


def test_deep_chain_does_not_recurse():
    """Tests that a long path is handled without hitting the recursion limit."""
    n = 5000
    game = ParityGame(n)
    for u in range(n - 1):
        game.add_edge(u, u + 1)
    game.add_edge(n - 1, n - 1)
    components, _ = strongly_connected_components(game)
    assert len(components) == n
    assert bottom_scc(game, 0) == {n - 1}


def test_bottom_scc_from_self_loop_predecessor():
    """Tests that the walk leaves a trivial start node for the self-loop."""
    game = _game("node leading into a self-loop")
    assert bottom_scc(game, 0, True) == {1}
    assert is_trivial(game, [0])
    assert not is_trivial(game, [1])


def test_bottom_scc_choice_follows_rng():
    """Tests that both bottom SCCs can be reached when a choice exists."""
    game = _game("Two bottom SCCs")
    assert bottom_scc(game, 0, True) == {2}
    found = {frozenset(bottom_scc(game, 0, True, random.Random(seed))) for seed in range(30)}
    assert found == {frozenset({2}), frozenset({3, 4})}


def test_bottom_scc_is_closed():
    """Tests that no edge leaves a bottom SCC, from every start node."""
    rng = random.Random(7)
    for seed in range(10):
        game = random_game(seed, n_nodes=20, max_degree=2)
        for start in range(game.n_nodes):
            scc = bottom_scc(game, start, True, rng)
            assert scc <= _reachable(game, start)
            for u in scc:
                assert set(game.out[u]) <= scc


def test_bottom_scc_skips_dead_end():
    """Tests that a dead end is rejected as a bottom SCC when asked to."""
    game = ParityGame(3)
    game.add_edge(0, 1)
    game.add_edge(0, 2)
    game.add_edge(2, 2)
    assert bottom_scc(game, 0, True) == {2}
    assert bottom_scc(game, 1, False) == {1}
    with pytest.raises(ValueError, match="No non-trivial bottom SCC"):
        bottom_scc(game, 1, True)


def test_bottom_scc_bad_start():
    """Tests that the start node must exist."""
    with pytest.raises(IndexError):
        bottom_scc(_game("four-node cycle"), 4)
