"""
pg_nudge.py

Command-line entry point. Reads a parity game, changes it a bit and writes it
back out. The steps run in a fixed order: random edit, bottom SCC, even/odd
and min/max swaps, then inflate, compress and renumber. Unless the new order
is asked for, the node order from before the transformations is restored.
"""

import argparse
import logging
import random
import sys
from typing import List, Optional

from pg_game import ParityGame, ParseError
from pg_mutator import Profile, RandomMutator
from pg_scc import bottom_scc
from pg_transformations import PriorityTransformation
from pgsolver_to_game import parse_pgsolver
from game_to_pgsolver import write_pgsolver

logger = logging.getLogger(__name__)


def _profile(value: str) -> Profile:
    try:
        return Profile.from_value(int(value))
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Change a parity game a bit.")
    parser.add_argument("input", nargs="?", help="Input parity game (default: stdin)")
    parser.add_argument("output", nargs="?", help="Output parity game (default: stdout)")
    parser.add_argument("-m", "--modify", type=_profile, metavar="PROFILE",
                        help="Make one random edit with profile 0=only remove, 1=remove or add edges, 2=all edits")
    parser.add_argument("-b", "--bottom-scc", action="store_true", help="Obtain random bottom SCC before writing")
    parser.add_argument("-i", "--inflate", action="store_true", help="Inflate before writing")
    parser.add_argument("-c", "--compress", action="store_true", help="Compress before writing")
    parser.add_argument("-r", "--renumber", action="store_true", help="Renumber before writing")
    parser.add_argument("-o", "--order", action="store_true", help="Order by priority before writing")
    parser.add_argument("--evenodd", action="store_true", help="Swap players")
    parser.add_argument("--minmax", action="store_true", help="Turn a mingame into a maxgame and vice versa")
    parser.add_argument("--seed", type=int, help="Seed for the random number generator")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every step")
    return parser


def nudge(game: ParityGame, args: argparse.Namespace, rng) -> ParityGame:
    """
    Runs the transformation pipeline selected by `args` on `game`.

    Returns:
        ParityGame: The resulting game, which may be a new object.
    """
    if args.modify is not None:
        game = RandomMutator(game, args.modify, rng).mutate(1)
        logger.info("Modified game with profile %s: %r", args.modify.name, game)

    if args.bottom_scc:
        scc = bottom_scc(game, rng.randint(0, game.n_nodes - 1), True, rng)
        game = game.extract_subgame(scc)
        logger.info("Restricted to bottom SCC: %r", game)

    mapping = game.reindex_capture()

    transformer = PriorityTransformation(game)
    if args.evenodd: transformer.evenodd()
    if args.minmax: transformer.minmax()
    if args.inflate: logger.info("Inflated to %d priorities", transformer.inflate())
    if args.compress: logger.info("Compressed to %d priorities", transformer.compress())
    if args.renumber: logger.info("Renumbered to %d priorities", transformer.renumber())

    if args.order:
        game.reindex_discard()
    else:
        game.apply_permutation(mapping)
    return game


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(levelname)s: %(message)s", stream=sys.stderr)

    try:
        if args.input:
            with open(args.input, encoding="utf-8") as f:
                game = parse_pgsolver(f)
        else:
            game = parse_pgsolver(sys.stdin)
    except ParseError as e:
        logger.error("parsing error: %s", e)
        return 1

    game = nudge(game, args, random.Random(args.seed))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            write_pgsolver(game, f)
    else:
        write_pgsolver(game, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
