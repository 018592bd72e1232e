"""
test_nudge.py

This script tests the command-line pipeline end to end: reading and writing
files or standard streams, the order of transformations, and the exit codes
for bad input.
"""

import io

import pytest
from pg_nudge import main, build_arg_parser, nudge
from pg_mutator import Profile
from pgsolver_to_game import PgsolverToGame
from tests.game_corpus import CORPUS as game_corpus
from tests.game_solver import verify_game_integrity, solve


def _write_input(tmp_path, index: int):
    path = tmp_path / "in.pg"
    path.write_text(game_corpus[index]['pgsolver'], encoding="utf-8")
    return path


def test_no_flags_reproduces_input(tmp_path):
    """Tests that a run without options writes the game back unchanged."""
    source = _write_input(tmp_path, 4)
    target = tmp_path / "out.pg"
    assert main([str(source), str(target)]) == 0
    assert target.read_text(encoding="utf-8") == game_corpus[4]['pgsolver']


def test_standard_streams(monkeypatch, capsys):
    """Tests reading stdin and writing stdout when no paths are given."""
    monkeypatch.setattr("sys.stdin", io.StringIO(game_corpus[3]['pgsolver']))
    assert main([]) == 0
    assert capsys.readouterr().out == game_corpus[3]['pgsolver']


def test_renumber_keeps_node_order(tmp_path):
    """Tests that transformations apply without reordering the nodes."""
    source = _write_input(tmp_path, 3)
    target = tmp_path / "out.pg"
    assert main([str(source), str(target), "-r"]) == 0
    game = PgsolverToGame().translate(target.read_text(encoding="utf-8"))
    original = PgsolverToGame().translate(game_corpus[3]['pgsolver'])
    assert game.out == original.out
    assert game.priority == [1, 2, 2]


def test_order_flag_sorts_by_priority(tmp_path, capsys):
    """Tests that -o keeps the canonical order in the output."""
    source = _write_input(tmp_path, 4)
    assert main([str(source), "-o"]) == 0
    game = PgsolverToGame().translate(capsys.readouterr().out)
    assert game.priority == sorted(game.priority)
    verify_game_integrity(game)


def test_modify_and_bottom_scc(tmp_path):
    """Tests a seeded run with a random edit and a bottom SCC."""
    source = _write_input(tmp_path, 2)
    for seed in range(10):
        target = tmp_path / f"out{seed}.pg"
        assert main([str(source), str(target), "-m", "2", "-b", "--seed", str(seed)]) == 0
        game = PgsolverToGame().translate(target.read_text(encoding="utf-8"))
        verify_game_integrity(game)
        for u in range(game.n_nodes):
            assert game.out[u]


def test_seed_makes_runs_repeatable(tmp_path):
    """Tests that the same seed gives the same output."""
    source = _write_input(tmp_path, 4)
    first, second = tmp_path / "a.pg", tmp_path / "b.pg"
    main([str(source), str(first), "-m", "2", "-b", "--seed", "42"])
    main([str(source), str(second), "-m", "2", "-b", "--seed", "42"])
    assert first.read_text(encoding="utf-8") == second.read_text(encoding="utf-8")


def test_pipeline_preserves_winners():
    """Tests that inflate, compress and renumber together keep every winner."""
    args = build_arg_parser().parse_args(["-i", "-c", "-r"])
    for item in game_corpus:
        game = PgsolverToGame().translate(item['pgsolver'])
        before = game.copy()
        result = nudge(game, args, rng=None)
        assert result.out == before.out
        assert solve(result) == solve(before)


def test_profile_argument_is_parsed():
    """Tests that -m yields a Profile value."""
    args = build_arg_parser().parse_args(["-m", "1"])
    assert args.modify is Profile.NO_NODE_REMOVAL


@pytest.mark.parametrize("value", ["5", "-1", "full"])
def test_unknown_profile_exits(value, capsys):
    """Tests that an unknown profile is a usage error."""
    with pytest.raises(SystemExit) as excinfo:
        main(["-m", value])
    assert excinfo.value.code == 2
    assert "PROFILE" in capsys.readouterr().err


def test_parse_error_exit_code(tmp_path, caplog):
    """Tests that malformed input gives a non-zero exit and a diagnostic."""
    source = tmp_path / "bad.pg"
    source.write_text("parity 1;\n0 0 0 1;\n", encoding="utf-8")
    assert main([str(source)]) == 1
    assert "parsing error" in caplog.text


def test_undecodable_input_exit_code(tmp_path, caplog):
    """Tests that bytes which are not UTF-8 are reported as a parsing error."""
    source = tmp_path / "binary.pg"
    source.write_bytes(b'parity 0;\n0 0 0 0 "\xff";\n')
    assert main([str(source)]) == 1
    assert "parsing error" in caplog.text
