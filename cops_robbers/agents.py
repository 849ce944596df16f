from abc import ABC, abstractmethod

from . import bags
from .errors import InvalidMove


class Agent(ABC):
    """
    A strategy for either role. `select_move` must return one of
    `state.legal_moves(role)` and must not change the state or the bag store.
    """
    name = "agent"
    learns = False

    def bag_key(self, role, state):
        """Bag the next decision is drawn from, or None when the agent does not learn."""
        return None

    def bag_moves(self, role, state):
        return None

    @abstractmethod
    def select_move(self, role, state, graph, bag_store, rng):
        ...

    def __repr__(self):
        return f"{type(self).__name__}()"


class RandomAgent(Agent):
    """Picks uniformly among the legal moves. Keeps no state."""
    name = "random"

    def select_move(self, role, state, graph, bag_store, rng):
        moves = state.legal_moves(role)
        if not moves:
            raise InvalidMove(f"No legal move for the {role.value} in phase {state.phase.value}")
        return moves[rng.integers(len(moves))]


class MenaceAgent(Agent):
    """
    Draws moves from MENACE bags: the chance of a move is proportional to its
    tokens in the bag of the current decision context.
    """
    name = "menace"
    learns = True

    def __init__(self, context=None):
        self.context = context

    def bag_key(self, role, state):
        return bags.bag_key(role, state, self.context)

    def bag_moves(self, role, state):
        return bags.bag_moves(role, state, self.context)

    def select_move(self, role, state, graph, bag_store, rng):
        legal = state.legal_moves(role)
        if not legal:
            raise InvalidMove(f"No legal move for the {role.value} in phase {state.phase.value}")

        bag = bag_store.get(self.bag_key(role, state))
        if bag is None:
            # Unseen context: behave as a fresh bag would without storing it
            bag = bags.Bag(self.bag_moves(role, state), start_tokens=bag_store.start_tokens)
        return bag.draw(rng, legal=legal)

    def __repr__(self):
        return f"MenaceAgent(context={self.context!r})"


AGENTS = {
    RandomAgent.name: RandomAgent,
    MenaceAgent.name: MenaceAgent,
}


def make_agent(name, **kwargs):
    """Builds an agent from its algorithm name ('random' or 'menace')."""
    try:
        agent_cls = AGENTS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown algorithm {name!r}, expected one of {sorted(AGENTS)}") from None
    return agent_cls(**kwargs)
