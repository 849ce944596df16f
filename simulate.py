import os
import sys

import numpy as np

from cops_robbers.agents import make_agent
from cops_robbers.bags import BagKind, BagStore
from cops_robbers.config import config
from cops_robbers.episode import run_batch
from cops_robbers.errors import CopsRobbersError
from cops_robbers.export import export_episode_to_json
from cops_robbers.game_state import Role
from cops_robbers.graph import load_graph, template_graphs
from cops_robbers.logger_config import setup_logging
from cops_robbers.stats import StatisticsTracker

"""
Usage: python simulate.py <graph_file|template> <episodes> [cop_algo] [robber_algo] [num_cops] [max_turns] [seed]
Templates: Path2, Path5, Hexagon, Petersen, Dodecahedron, BinaryTree15
Algorithms: random, menace
"""


def resolve_graph(name):
    """A template name, or a path to an adjacency matrix file."""
    templates = template_graphs()
    if name in templates:
        return templates[name]
    if not os.path.exists(name):
        raise FileNotFoundError(f"'{name}' is neither a template ({', '.join(templates)}) nor a file")
    return load_graph(name)


class MenaceSimulation:
    def __init__(self, graph, episodes, cop_algo="menace", robber_algo="random",
                 num_cops=None, max_turns=None, seed=None):
        self.graph = graph
        self.episodes = episodes
        self.num_cops = config.NUMBER_OF_COPS if num_cops is None else num_cops
        self.max_turns = config.MAX_TURNS if max_turns is None else max_turns
        self.cop = make_agent(cop_algo)
        self.robber = make_agent(robber_algo)
        self.rng = np.random.default_rng(config.SEED if seed is None else seed)
        self.bag_store = BagStore()
        self.tracker = StatisticsTracker()
        self.last_result = None

    def run(self):
        print(f"Simulating {self.episodes} episodes on {self.graph.name} "
              f"({len(self.graph)} nodes, {self.num_cops} cop(s), {self.max_turns} plies max)...")
        _, self.last_result = run_batch(self.graph, self.cop, self.robber, self.episodes,
                                        bag_store=self.bag_store, rng=self.rng, tracker=self.tracker,
                                        max_turns=self.max_turns, num_cops=self.num_cops)
        self.print_summary()
        return self.tracker

    def print_summary(self):
        print("\n--- RESULTS ---")
        for role in Role:
            fraction = self.tracker.win_fraction(role)
            shown = "undefined" if fraction is None else f"{fraction:.3f}"
            print(f"{role.value.capitalize():<7} wins: {self.tracker.wins[role]:>6} / "
                  f"{self.tracker.games[role]}  (fraction {shown})")
        print(f"Bags learned: {len(self.bag_store)}")

        for role, agent in ((Role.COP, self.cop), (Role.ROBBER, self.robber)):
            if not agent.learns:
                continue
            for key in self.bag_store.keys(role=role, kind=BagKind.START):
                top = self.bag_store.sorted_moves(key)[:3]
                moves = ", ".join(f"{move}: {tokens}" for move, tokens in top)
                print(f"{role.value.capitalize()} start bag {key.context or ''} -> {moves}")

    def export(self):
        """Writes the last episode as JSON and the win fraction chart as PNG."""
        from cops_robbers.plotting import save_win_fraction_chart

        json_file = export_episode_to_json(self.last_result, self.graph)
        base_name = os.path.basename(self.graph.name).split('.')[0]
        chart_file = os.path.join(config.CHART_DIR, f"{base_name}_{self.cop.name}_vs_{self.robber.name}.png")
        save_win_fraction_chart(self.tracker, chart_file,
                                title=f"{self.graph.name}: {self.cop.name} cop vs {self.robber.name} robber")
        print(f"Last episode cached to: {json_file}")
        print(f"Chart saved to: {chart_file}")
        return json_file, chart_file


def main(argv):
    if len(argv) < 3:
        print("Usage: python simulate.py <graph_file|template> <episodes> "
              "[cop_algo] [robber_algo] [num_cops] [max_turns] [seed]")
        return 1

    setup_logging(config.LOG_FILE)
    try:
        graph = resolve_graph(argv[1])
        episodes = int(argv[2])
        cop_algo = argv[3] if len(argv) > 3 else "menace"
        robber_algo = argv[4] if len(argv) > 4 else "random"
        num_cops = int(argv[5]) if len(argv) > 5 else None
        max_turns = int(argv[6]) if len(argv) > 6 else None
        seed = int(argv[7]) if len(argv) > 7 else None

        simulation = MenaceSimulation(graph, episodes, cop_algo, robber_algo,
                                      num_cops=num_cops, max_turns=max_turns, seed=seed)
        simulation.run()
        if simulation.last_result is not None:
            simulation.export()
    except (CopsRobbersError, FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
