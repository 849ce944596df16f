import logging
import threading
from collections import namedtuple
from enum import Enum

import numpy as np

from .config import config
from .errors import EmptyBagInconsistency
from .game_state import Phase, Role

logger = logging.getLogger(__name__)


class BagKind(Enum):
    START = "start"
    REGULAR = "regular"


class BagContext:
    """
    How much of the board a MENACE bag key remembers.

    FULL:   cop start bag is global, robber start bag sees the cops,
            regular bags see every position on the board.
    VERTEX: start bags are one per role, regular bags only see the
            position(s) of the role that is moving.
    """
    FULL = "full"
    VERTEX = "vertex"
    CHOICES = (FULL, VERTEX)


# context is () for role-global start bags, else a hashable tuple of positions
BagKey = namedtuple('BagKey', ['role', 'kind', 'context'])

# One entry of an episode's move log. bag_key is None for non-learning agents.
# legal is set only when the bag holds more moves than were legal at the time.
MoveRecord = namedtuple('MoveRecord', ['role', 'bag_key', 'move', 'legal'], defaults=(None,))


def bag_key(role, state, context=None):
    """Key of the bag `role` draws from in `state`."""
    context = context or config.BAG_CONTEXT
    if context not in BagContext.CHOICES:
        raise ValueError(f"Unknown bag context {context!r}, expected one of {BagContext.CHOICES}")

    if state.phase is Phase.PLACEMENT:
        if role is Role.ROBBER and context == BagContext.FULL:
            return BagKey(role, BagKind.START, tuple(state.cop_positions))
        return BagKey(role, BagKind.START, ())

    if context == BagContext.FULL:
        return BagKey(role, BagKind.REGULAR, (tuple(state.cop_positions), state.robber_position))
    if role is Role.COP:
        return BagKey(role, BagKind.REGULAR, tuple(state.cop_positions))
    return BagKey(role, BagKind.REGULAR, state.robber_position)


def bag_moves(role, state, context=None):
    """Candidate moves a freshly created bag for `bag_key(role, state, context)` holds."""
    context = context or config.BAG_CONTEXT
    if context == BagContext.VERTEX and role is Role.ROBBER and state.phase is Phase.PLACEMENT:
        # Role-global robber start bag: every vertex, filtered by legality at draw time
        return state.graph.vertices
    return state.legal_moves(role)


class Bag:
    """Token counts for the candidate moves of one decision context."""

    def __init__(self, moves, start_tokens=None):
        self.start_tokens = config.START_TOKENS if start_tokens is None else start_tokens
        if self.start_tokens <= 0:
            raise ValueError(f"start_tokens must be positive, got {self.start_tokens}")
        self.counts = {move: self.start_tokens for move in moves}
        if not self.counts:
            raise ValueError("A bag needs at least one candidate move")

    def __len__(self):
        return len(self.counts)

    def __contains__(self, move):
        return move in self.counts

    def __getitem__(self, move):
        return self.counts[move]

    def __repr__(self):
        return f"Bag({self.counts})"

    @property
    def moves(self):
        return list(self.counts)

    def total(self, legal=None):
        """Tokens in the bag, or only on the `legal` subset of its moves."""
        if legal is None:
            return sum(self.counts.values())
        legal = set(legal)
        return sum(count for move, count in self.counts.items() if move in legal)

    def draw(self, rng, legal=None):
        """
        Draws a move with probability proportional to its tokens.
        `legal` restricts the draw to a subset of the bag's moves.
        """
        if self.total() == 0:
            raise EmptyBagInconsistency(f"Bag {self.counts} has no tokens left")

        if legal is None:
            moves = self.moves
        else:
            legal = set(legal)
            moves = [m for m in self.counts if m in legal]
        if not moves:
            raise EmptyBagInconsistency(f"Bag {self.counts} has none of the legal moves {legal}")
        weights = np.array([self.counts[m] for m in moves], dtype=np.float64)
        if weights.sum() == 0:
            raise EmptyBagInconsistency(f"Bag {self.counts} has no tokens on the legal moves {sorted(legal)}")
        return moves[rng.choice(len(moves), p=weights / weights.sum())]

    def increase(self, move, amount=None):
        self.counts[move] += config.WIN_REWARD if amount is None else amount

    def decrease(self, move, amount=None, legal=None):
        """
        Removes tokens from `move` (floored at 0). The whole bag is reset when
        no tokens are left, or none on `legal` when given. Returns True on reset.
        """
        amount = config.LOSS_PENALTY if amount is None else amount
        self.counts[move] = max(0, self.counts[move] - amount)
        if self.total(legal) == 0:
            self.reset()
            return True
        return False

    def reset(self):
        for move in self.counts:
            self.counts[move] = self.start_tokens

    def sorted_moves(self):
        """(move, tokens) pairs, most tokens first. Ties keep insertion order."""
        return sorted(self.counts.items(), key=lambda item: item[1], reverse=True)


class BagStore:
    """
    Every MENACE bag of a learning session, keyed by BagKey.

    Token reads are lock-free. Bag creation, key listing, credit assignment and reset hold
    `self.lock`, so episodes may select moves in parallel but their updates
    are serialized.
    """

    def __init__(self, start_tokens=None, win_reward=None, loss_penalty=None):
        self.start_tokens = config.START_TOKENS if start_tokens is None else start_tokens
        self.win_reward = config.WIN_REWARD if win_reward is None else win_reward
        self.loss_penalty = config.LOSS_PENALTY if loss_penalty is None else loss_penalty
        self.bags = {}
        self.lock = threading.Lock()

    def __len__(self):
        return len(self.bags)

    def __contains__(self, key):
        return key in self.bags

    def get(self, key):
        return self.bags.get(key)

    def get_or_create(self, key, moves, legal=None):
        """
        The bag for `key`, created with `moves` on first use. When `legal` is
        given and none of its moves hold tokens, the bag is reset first.
        """
        with self.lock:
            bag = self.bags.get(key)
            if bag is None:
                bag = Bag(moves, start_tokens=self.start_tokens)
                self.bags[key] = bag
                logger.debug("Created bag %s with %d moves", key, len(bag))
            elif legal is not None and bag.total(legal) == 0:
                bag.reset()
                logger.debug("Bag %s had no tokens on its legal moves, reset to %d", key, self.start_tokens)
            return bag

    # --- Inspection ---

    def keys(self, role=None, kind=None):
        with self.lock:
            keys = list(self.bags)
        return [k for k in keys
                if (role is None or k.role is role) and (kind is None or k.kind is kind)]

    def counts(self, key):
        return dict(self.bags[key].counts)

    def sorted_moves(self, key):
        return self.bags[key].sorted_moves()

    # --- Learning ---

    def update(self, move_log, outcome):
        """
        End-of-episode credit assignment.

        Every logged (bag, move) of a learning role gains `win_reward` tokens
        when the outcome favours that role and loses `loss_penalty` otherwise.
        Moves that were not played are left alone. Returns the number of
        entries touched.
        """
        updated = resets = 0
        with self.lock:
            for record in move_log:
                if record.bag_key is None:
                    continue
                bag = self.bags[record.bag_key]
                if outcome.favours(record.role):
                    bag.increase(record.move, self.win_reward)
                elif bag.decrease(record.move, self.loss_penalty, legal=record.legal):
                    resets += 1
                if bag.total() == 0:
                    raise EmptyBagInconsistency(f"Bag {record.bag_key} was left without tokens")
                updated += 1
        if resets:
            logger.debug("%d bag(s) reset to %d tokens after %s", resets, self.start_tokens, outcome.value)
        return updated

    def reset(self):
        with self.lock:
            self.bags.clear()
        logger.info("Bag store cleared.")
