import itertools
import logging
from enum import Enum

import numpy as np

from .config import config
from .errors import InvalidMove

logger = logging.getLogger(__name__)


class Role(Enum):
    COP = "cop"
    ROBBER = "robber"

    @property
    def opponent(self):
        return Role.ROBBER if self is Role.COP else Role.COP


class Phase(Enum):
    PLACEMENT = "placement"
    MOVING = "moving"
    FINISHED = "finished"


class Outcome(Enum):
    UNDECIDED = "undecided"
    COP_WIN = "cop_win"
    ROBBER_WIN = "robber_win"

    def favours(self, role):
        return (self is Outcome.COP_WIN and role is Role.COP) or \
               (self is Outcome.ROBBER_WIN and role is Role.ROBBER)


def _check_vertex_id(v):
    if not isinstance(v, (int, np.integer)) or isinstance(v, bool):
        raise InvalidMove(f"Vertex id must be an integer, got {v!r}")


class GameState:
    """
    Rules engine for one match.

    Cops place first, then the robber. In the moving phase the cops move
    first and the two roles alternate. A cop move is a tuple holding the next
    vertex of every cop; with a single cop a bare vertex id is also accepted.
    `turn_count` counts the plies of the moving phase and the robber wins once
    it reaches `max_turns` without a capture.
    """

    def __init__(self, graph, num_cops=None, max_turns=None, allow_robber_on_cop=None):
        self.graph = graph
        self.num_cops = config.NUMBER_OF_COPS if num_cops is None else num_cops
        self.max_turns = config.MAX_TURNS if max_turns is None else max_turns
        self.allow_robber_on_cop = config.ALLOW_ROBBER_ON_COP if allow_robber_on_cop is None else allow_robber_on_cop
        if self.num_cops < 1:
            raise ValueError(f"At least one cop is required, got {self.num_cops}")
        if self.max_turns < 0:
            raise ValueError(f"max_turns must be non-negative, got {self.max_turns}")

        self.cop_positions = ()
        self.robber_position = None
        self.phase = Phase.PLACEMENT
        self.turn_owner = Role.COP
        self.turn_count = 0
        self.outcome = Outcome.UNDECIDED

    # --- Queries ---

    @property
    def is_finished(self):
        return self.phase is Phase.FINISHED

    @property
    def is_captured(self):
        return self.robber_position is not None and self.robber_position in self.cop_positions

    def position_of(self, role):
        return self.cop_positions if role is Role.COP else self.robber_position

    def legal_moves(self, role):
        """All moves `role` may make right now; empty when it is not role's turn."""
        if self.phase is Phase.FINISHED or role is not self.turn_owner:
            return []

        vertices = self.graph.vertices
        if self.phase is Phase.PLACEMENT:
            if role is Role.COP:
                return list(itertools.product(vertices, repeat=self.num_cops))
            return self._robber_placements()

        if role is Role.COP:
            options = [self.graph.closed_neighbourhood(c) for c in self.cop_positions]
            return list(itertools.product(*options))
        return self.graph.closed_neighbourhood(self.robber_position)

    def snapshot(self):
        return {
            'cops': list(self.cop_positions),
            'robber': self.robber_position,
            'phase': self.phase.value,
            'turn': self.turn_owner.value,
            'turn_count': self.turn_count,
            'outcome': self.outcome.value,
        }

    # --- Transitions ---

    def normalize_move(self, role, move):
        """
        A cop move as a tuple of vertex ids (a bare id is accepted for one cop),
        a robber move as a single vertex id. Anything else is an InvalidMove.
        """
        if role is Role.COP:
            if not isinstance(move, (tuple, list)):
                move = (move,)
            move = tuple(move)
            for v in move:
                _check_vertex_id(v)
            return move
        _check_vertex_id(move)
        return move

    def place(self, role, vertex):
        if self.phase is not Phase.PLACEMENT:
            raise InvalidMove(f"Cannot place during the {self.phase.value} phase")
        if role is not self.turn_owner:
            raise InvalidMove(f"It is the {self.turn_owner.value}'s placement, not the {role.value}'s")

        vertex = self.normalize_move(role, vertex)
        if role is Role.COP:
            if len(vertex) != self.num_cops:
                raise InvalidMove(f"Expected {self.num_cops} cop positions, got {len(vertex)}")
            for v in vertex:
                if v not in self.graph:
                    raise InvalidMove(f"Vertex {v} is not in the graph")
            self.cop_positions = vertex
            self.turn_owner = Role.ROBBER
            return self

        if vertex not in self.graph:
            raise InvalidMove(f"Vertex {vertex} is not in the graph")
        if vertex not in self._robber_placements():
            raise InvalidMove(f"Robber may not start on a cop's vertex ({vertex})")
        self.robber_position = vertex
        self.phase = Phase.MOVING
        self.turn_owner = Role.COP
        self._resolve()
        return self

    def move(self, role, vertex):
        if self.phase is not Phase.MOVING:
            raise InvalidMove(f"Cannot move during the {self.phase.value} phase")
        if role is not self.turn_owner:
            raise InvalidMove(f"It is the {self.turn_owner.value}'s turn, not the {role.value}'s")

        vertex = self.normalize_move(role, vertex)
        if role is Role.COP:
            if len(vertex) != self.num_cops:
                raise InvalidMove(f"Expected {self.num_cops} cop positions, got {len(vertex)}")
            for current, target in zip(self.cop_positions, vertex):
                self._check_step(current, target)
            self.cop_positions = vertex
        else:
            self._check_step(self.robber_position, vertex)
            self.robber_position = vertex

        self.turn_count += 1
        self.turn_owner = role.opponent
        self._resolve()
        return self

    def apply(self, role, move):
        """Places or moves depending on the phase."""
        if self.phase is Phase.PLACEMENT:
            return self.place(role, move)
        return self.move(role, move)

    def _robber_placements(self):
        vertices = self.graph.vertices
        if self.allow_robber_on_cop:
            return vertices
        free = [v for v in vertices if v not in self.cop_positions]
        # Cops cover the whole board: the robber has to start on one of them
        return free or vertices

    def _check_step(self, current, target):
        if target not in self.graph:
            raise InvalidMove(f"Vertex {target} is not in the graph")
        if target != current and not self.graph.has_edge(current, target):
            raise InvalidMove(f"Vertex {target} is not adjacent to {current}")

    def _resolve(self):
        if self.is_captured:
            self.phase = Phase.FINISHED
            self.outcome = Outcome.COP_WIN
        elif self.turn_count >= self.max_turns:
            self.phase = Phase.FINISHED
            self.outcome = Outcome.ROBBER_WIN
        else:
            return
        logger.debug("Game over after %d plies: %s", self.turn_count, self.outcome.value)
