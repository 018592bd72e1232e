"""
pg_mutator.py

This module provides the RandomMutator class, which applies randomized
structural edits to a parity game under a selectable profile of allowed
actions. It is used to nudge existing games into new, slightly different
test inputs for solvers.

Edits that delete a node cannot be done in place, since node ids must stay
dense. They extract the remaining nodes into a new game, which replaces the
mutator's current game.
"""

import logging
import random
from enum import Enum
from typing import Dict, List, Optional

from pg_game import ParityGame, NodeId

logger = logging.getLogger(__name__)


class Action(Enum):
    """The randomized edits a mutator can make."""
    REMOVE_EDGE = 0    # drop one of several outgoing edges
    CONTRACT_NODE = 1  # bypass and delete a node with a single successor
    REMOVE_NODE = 2    # delete a node
    FLIP_OWNER = 3     # hand a node to the other player
    FORWARD_EDGE = 4   # redirect a predecessor's edge to all successors
    ADD_EDGE = 5       # add a random edge


class UnknownProfile(ValueError):
    """Raised when a profile value does not name a known profile."""


class MutationStalled(RuntimeError):
    """Raised when a mutator exhausts its draw budget before finishing."""


class Profile(Enum):
    """Named restrictions on which actions a mutator may take."""
    REMOVE_ONLY = 0
    NO_NODE_REMOVAL = 1
    FULL = 2

    @classmethod
    def from_value(cls, value: int) -> 'Profile':
        """Looks up a profile by number, rejecting anything unknown."""
        try:
            return cls(value)
        except ValueError:
            choices = ", ".join(str(p.value) for p in cls)
            raise UnknownProfile(f"Unknown mutation profile {value!r}; expected one of {choices}.") from None

    @property
    def actions(self) -> List[Action]:
        return PROFILE_ACTIONS[self]


PROFILE_ACTIONS: Dict[Profile, List[Action]] = {
    Profile.REMOVE_ONLY: [Action.REMOVE_EDGE, Action.CONTRACT_NODE, Action.REMOVE_NODE, Action.FLIP_OWNER],
    Profile.NO_NODE_REMOVAL: [Action.REMOVE_EDGE, Action.FLIP_OWNER, Action.ADD_EDGE],
    Profile.FULL: list(Action),
}


class RandomMutator:
    """
    Applies successful random edits to a game, one draw at a time.

    Each draw picks a node and an action uniformly at random. An action whose
    precondition does not hold is skipped and does not count; the loop then
    draws again. FLIP_OWNER is always applicable and belongs to every
    profile, so the loop ends with probability one.
    """
    def __init__(self, game: ParityGame, profile: Profile, rng=None, max_draws: Optional[int] = None):
        """
        Initializes the mutator.

        Args:
            game (ParityGame): The game to edit. It is edited in place until a
                node is deleted; from then on `self.game` is a new object.
            profile (Profile): Which actions may be drawn.
            rng: A source of randomness with `randint(lo, hi)`, inclusive on
                both ends. Defaults to a fresh `random.Random()`.
            max_draws (Optional[int]): If given, the number of draws after
                which `mutate` gives up with MutationStalled.
        """
        if not isinstance(profile, Profile):
            profile = Profile.from_value(profile)
        assert Action.FLIP_OWNER in profile.actions, f"Profile {profile.name} has no always-applicable action."
        self.game = game
        self.profile = profile
        self.rng = rng if rng is not None else random.Random()
        self.max_draws = max_draws
        self.draws = 0

    def mutate(self, count: int = 1) -> ParityGame:
        """
        Performs `count` successful edits.

        Returns:
            ParityGame: The edited game, which is a new object if any node
            was deleted.
        """
        actions = self.profile.actions
        left = count
        while left > 0:
            if self.max_draws is not None and self.draws >= self.max_draws:
                raise MutationStalled(f"No applicable edit found in {self.draws} draws ({left} of {count} left).")
            self.draws += 1
            node = self.rng.randint(0, self.game.n_nodes - 1)
            action = actions[self.rng.randint(0, len(actions) - 1)]
            if self.apply(action, node):
                logger.debug("Applied %s to node %d", action.name, node)
                left -= 1
        return self.game

    def apply(self, action: Action, node: NodeId) -> bool:
        """
        Attempts a single action on `node`.

        Returns:
            bool: True if the action's precondition held and it was applied.
        """
        handler = getattr(self, f"_{action.name.lower()}")
        return handler(node)

    def _remove_edge(self, node: NodeId) -> bool:
        succs = self.game.out[node]
        if len(succs) < 2: return False
        target = succs[self.rng.randint(0, len(succs) - 1)]
        return self.game.remove_edge(node, target)

    def _contract_node(self, node: NodeId) -> bool:
        game = self.game
        if len(game.out[node]) != 1 or game.out[node][0] == node: return False
        succ = game.out[node][0]
        for pred in list(game.in_[node]):
            game.add_edge(pred, succ)
        self._delete(node)
        return True

    def _remove_node(self, node: NodeId) -> bool:
        # Narrower than "always": refused if it would leave no node or strand a predecessor.
        game = self.game
        if game.n_nodes < 2: return False
        # A predecessor whose only move is into `node` would be left stuck.
        for pred in game.in_[node]:
            if pred != node and len(game.out[pred]) == 1: return False
        self._delete(node)
        return True

    def _flip_owner(self, node: NodeId) -> bool:
        self.game.owner[node] = 1 - self.game.owner[node]
        return True

    def _forward_edge(self, node: NodeId) -> bool:
        game = self.game
        preds = game.in_[node]
        if not preds: return False
        pred = preds[self.rng.randint(0, len(preds) - 1)]
        if pred == node: return False
        game.remove_edge(pred, node)
        for succ in list(game.out[node]):
            game.add_edge(pred, succ)
        return True

    def _add_edge(self, node: NodeId) -> bool:
        return self.game.add_edge(node, self.rng.randint(0, self.game.n_nodes - 1))

    def _delete(self, node: NodeId):
        """Replaces the current game by the game without `node`."""
        keep = [n for n in range(self.game.n_nodes) if n != node]
        self.game = self.game.extract_subgame(keep)
