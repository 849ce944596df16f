"""Cops and Robbers on arbitrary graphs, played by random and MENACE agents."""

from .errors import CopsRobbersError, InvalidGraph, InvalidMove, EpisodeAborted, EmptyBagInconsistency
from .graph import Graph, load_graph, parse_matrix, template_graphs
from .game_state import GameState, Role, Phase, Outcome
from .bags import Bag, BagStore, BagKey, BagKind, BagContext, MoveRecord
from .agents import Agent, RandomAgent, MenaceAgent, make_agent
from .episode import Episode, EpisodeResult, EpisodeStatus, run_episode, run_batch
from .stats import StatisticsTracker

__version__ = "0.1.0"
