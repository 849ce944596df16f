import logging
from collections import namedtuple
from enum import Enum

import numpy as np

from .bags import BagStore, MoveRecord
from .config import config
from .errors import EpisodeAborted, InvalidMove
from .game_state import GameState, Phase, Role
from .stats import StatisticsTracker

logger = logging.getLogger(__name__)


class EpisodeStatus(Enum):
    CREATED = "created"
    PLACEMENT = "placement"
    MOVING = "moving"
    FINISHED = "finished"
    CLOSED = "closed"
    ABORTED = "aborted"


EpisodeResult = namedtuple('EpisodeResult', [
    'outcome',          # Outcome.COP_WIN or Outcome.ROBBER_WIN
    'move_log',         # List of MoveRecord in play order
    'turns',            # Plies played in the moving phase
    'cop_positions',    # Final cop positions (tuple)
    'robber_position',  # Final robber position
])


class Episode:
    """
    One match between two agents, driven one decision at a time.

    CREATED -> PLACEMENT -> MOVING -> FINISHED -> CLOSED. On FINISHED the
    move log is credited to the bag store exactly once and the outcome goes
    to the tracker; `result` is set when the episode is CLOSED.
    """

    def __init__(self, graph, cop_agent, robber_agent, bag_store=None, rng=None,
                 max_turns=None, num_cops=None, allow_robber_on_cop=None, tracker=None):
        self.graph = graph.validate()
        self.agents = {Role.COP: cop_agent, Role.ROBBER: robber_agent}
        self.bag_store = bag_store if bag_store is not None else BagStore()
        self.rng = rng if rng is not None else np.random.default_rng(config.SEED)
        self.max_turns = max_turns
        self.num_cops = num_cops
        self.allow_robber_on_cop = allow_robber_on_cop
        self.tracker = tracker

        self.state = None
        self.status = EpisodeStatus.CREATED
        self.move_log = []
        self.result = None

    @property
    def is_over(self):
        return self.status in (EpisodeStatus.CLOSED, EpisodeStatus.ABORTED)

    def start(self):
        self.state = GameState(self.graph, num_cops=self.num_cops, max_turns=self.max_turns,
                               allow_robber_on_cop=self.allow_robber_on_cop)
        self.status = EpisodeStatus.PLACEMENT
        return self.state

    def step(self):
        """Plays the next placement or move. Returns its MoveRecord, or None once the episode is over."""
        if self.status is EpisodeStatus.CREATED:
            self.start()
        if self.is_over:
            return None

        role = self.state.turn_owner
        agent = self.agents[role]

        key = legal = None
        if agent.learns:
            key = agent.bag_key(role, self.state)
            legal = self.state.legal_moves(role)
            bag = self.bag_store.get_or_create(key, agent.bag_moves(role, self.state), legal=legal)
            # Only bags holding moves that are illegal here need the subset at credit time
            legal = None if set(bag.moves) <= set(legal) else tuple(legal)

        move = agent.select_move(role, self.state, self.graph, self.bag_store, self.rng)
        try:
            move = self.state.normalize_move(role, move)
            self.state.apply(role, move)
        except InvalidMove as e:
            self.status = EpisodeStatus.ABORTED
            logger.error("Episode aborted: %r returned an illegal %s move %r: %s", agent, role.value, move, e)
            raise EpisodeAborted(f"{agent!r} returned an illegal move {move!r} for the {role.value}: {e}", cause=e) from e

        record = MoveRecord(role, key, move, legal)
        self.move_log.append(record)

        if self.state.phase is Phase.MOVING:
            self.status = EpisodeStatus.MOVING
        elif self.state.phase is Phase.FINISHED:
            self._finish()
        return record

    def run(self):
        while not self.is_over:
            self.step()
        return self.result

    def _finish(self):
        self.status = EpisodeStatus.FINISHED
        outcome = self.state.outcome

        if any(agent.learns for agent in self.agents.values()):
            self.bag_store.update(self.move_log, outcome)
        if self.tracker is not None:
            self.tracker.record_episode(outcome)

        self.result = EpisodeResult(outcome, list(self.move_log), self.state.turn_count,
                                    self.state.cop_positions, self.state.robber_position)
        self.status = EpisodeStatus.CLOSED
        logger.debug("Episode closed: %s after %d plies", outcome.value, self.state.turn_count)


def run_episode(graph, cop_agent, robber_agent, bag_store, rng, max_turns=None,
                num_cops=None, allow_robber_on_cop=None, tracker=None):
    """Plays one full match and returns its EpisodeResult."""
    episode = Episode(graph, cop_agent, robber_agent, bag_store, rng, max_turns=max_turns,
                      num_cops=num_cops, allow_robber_on_cop=allow_robber_on_cop, tracker=tracker)
    return episode.run()


def run_batch(graph, cop_agent, robber_agent, episodes, bag_store=None, rng=None,
              tracker=None, log_interval=None, **kwargs):
    """
    Plays `episodes` matches back to back on the same bag store.
    Returns (tracker, last EpisodeResult).
    """
    bag_store = bag_store if bag_store is not None else BagStore()
    rng = rng if rng is not None else np.random.default_rng(config.SEED)
    tracker = tracker if tracker is not None else StatisticsTracker()
    log_interval = config.LOG_INTERVAL if log_interval is None else log_interval

    logger.info("Running %d episodes on %r: cop=%r robber=%r", episodes, graph, cop_agent, robber_agent)
    result = None
    for i in range(1, episodes + 1):
        result = run_episode(graph, cop_agent, robber_agent, bag_store, rng, tracker=tracker, **kwargs)
        if log_interval and i % log_interval == 0:
            logger.info("Episode %d/%d: cop win fraction %.3f, %d bags",
                        i, episodes, tracker.win_fraction(Role.COP), len(bag_store))
    return tracker, result
