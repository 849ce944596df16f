import sys

from cops_robbers.export import load_episode


def replay(json_filepath):
    print(f"Loading cached episode from: {json_filepath}")
    try:
        graph, frames, outcome = load_episode(json_filepath)
    except FileNotFoundError:
        print("Error: JSON file not found. Did you run simulate.py first?")
        return 1

    print(f"Board: {graph.name} ({len(graph)} nodes), {len(frames)} steps, outcome: {outcome.value}")
    print("Launching interactive visualizer...")
    from cops_robbers.plotting import visualize_interactive
    visualize_interactive(graph, frames)
    return 0


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python replay_game.py <episode_json>")
        sys.exit(1)

    sys.exit(replay(sys.argv[1]))
