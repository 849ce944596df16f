import json
import logging
import os

from .config import config
from .game_state import Outcome, Role
from .graph import Graph

logger = logging.getLogger(__name__)


def episode_frames(result):
    """
    Turns an EpisodeResult into the board after every decision:
    a list of {'cops', 'robber', 'turn'} dicts, ready for replay.
    """
    frames = []
    cops, robber = [], None
    placed = set()
    for record in result.move_log:
        if record.role is Role.COP:
            cops = list(record.move)
        else:
            robber = record.move
        if record.role in placed:
            turn = "Cop's Move" if record.role is Role.COP else "Robber's Move"
        else:
            turn = "Cops placed" if record.role is Role.COP else "Robber placed"
            placed.add(record.role)
        frames.append({'cops': cops, 'robber': robber, 'turn': turn})

    if frames:
        ending = "Game Over - Captured!" if result.outcome is Outcome.COP_WIN else "Game Over - Robber Escaped!"
        frames[-1]['turn'] += f" ({ending})"
    return frames


def export_episode_to_json(result, graph, cache_dir=None):
    """Saves the episode's frames and board to a JSON file and returns its path."""
    cache_dir = cache_dir or config.CACHE_DIR
    os.makedirs(cache_dir, exist_ok=True)

    base_name = os.path.basename(graph.name).split('.')[0]
    filename = f"{base_name}_{len(result.cop_positions)}cops_episode.json"
    filepath = os.path.join(cache_dir, filename)

    data = {
        'graph': {
            'name': graph.name,
            'vertices': graph.vertices,
            'edges': [list(e) for e in graph.edges],
            'positions': {str(v): [float(x), float(y)] for v, (x, y) in graph.positions.items()},
        },
        'outcome': result.outcome.value,
        'turns': result.turns,
        'frames': episode_frames(result),
    }
    with open(filepath, 'w') as f:
        json.dump(data, f, indent=4)

    logger.info("Episode cached to: %s", filepath)
    return filepath


def load_episode(filepath):
    """Reads a file written by export_episode_to_json. Returns (graph, frames, outcome)."""
    with open(filepath, 'r') as f:
        data = json.load(f)
    board = data['graph']
    # JSON object keys are strings; vertex ids are ints
    positions = {int(v): tuple(xy) for v, xy in board.get('positions', {}).items()}
    graph = Graph(board['vertices'], [tuple(e) for e in board['edges']], name=board['name'], positions=positions)
    return graph, data['frames'], Outcome(data['outcome'])
