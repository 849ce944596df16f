import logging
import os

import networkx as nx
import matplotlib.pyplot as plt
from matplotlib.widgets import Button

from .game_state import Role

logger = logging.getLogger(__name__)

ROLE_COLORS = {Role.COP: 'blue', Role.ROBBER: 'red'}


def graph_layout(graph):
    """Stored drawing coordinates when the graph has them for every vertex, else a spring layout."""
    if graph.positions and all(v in graph.positions for v in graph.vertices):
        return dict(graph.positions)
    return nx.spring_layout(graph.to_networkx(), seed=42)


def plot_win_fractions(tracker, ax=None, title=None):
    """Running win fraction of both roles over the recorded episodes."""
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 5))
    episodes = range(1, len(tracker.history) + 1)
    for role in Role:
        ax.plot(episodes, tracker.win_fraction_series(role), color=ROLE_COLORS[role],
                label=f"{role.value.capitalize()} wins")
    ax.set_ylim(0, 1)
    ax.set_xlabel("Episode")
    ax.set_ylabel("Win fraction")
    ax.set_title(title or "Cumulative win fraction")
    ax.legend(loc="upper right")
    return ax.figure


def save_win_fraction_chart(tracker, filepath, title=None):
    chart_dir = os.path.dirname(filepath)
    if chart_dir:
        os.makedirs(chart_dir, exist_ok=True)
    fig = plot_win_fractions(tracker, title=title)
    fig.savefig(filepath, bbox_inches='tight')
    plt.close(fig)
    logger.info("Win fraction chart saved to: %s", filepath)
    return filepath


def draw_board(graph, cops, robber, ax, pos=None, title=None):
    G = graph.to_networkx()
    pos = pos or graph_layout(graph)
    ax.clear()
    nx.draw_networkx_edges(G, pos, ax=ax, edge_color='gray')
    nx.draw_networkx_nodes(G, pos, ax=ax, node_color='lightgray', node_size=200)
    nx.draw_networkx_labels(G, pos, ax=ax, font_size=7, font_weight='bold')

    if robber is not None:
        nx.draw_networkx_nodes(G, pos, nodelist=[robber], ax=ax, node_color=ROLE_COLORS[Role.ROBBER],
                               node_size=350, label='Robber')
    if cops:
        nx.draw_networkx_nodes(G, pos, nodelist=list(set(cops)), ax=ax, node_color=ROLE_COLORS[Role.COP],
                               node_size=350, label='Cop')
    if title:
        ax.set_title(title, fontsize=14, fontweight='bold')
    ax.axis('off')
    return ax


class ReplayViewer:
    """
    Steps through replay frames. Previous / Next buttons or the arrow keys
    move one decision, Home / End jump to the first / last board.
    """

    def __init__(self, graph, frames):
        if not frames:
            raise ValueError("Nothing to replay: the episode has no frames")
        self.graph = graph
        self.frames = frames
        self.step = 0
        self.pos = graph_layout(graph)

        self.fig, self.ax = plt.subplots(figsize=(12, 9))
        self.fig.subplots_adjust(bottom=0.2)
        # Widgets stop responding once garbage collected, so the viewer keeps them
        self.bprev = Button(self.fig.add_axes([0.35, 0.05, 0.1, 0.075]), 'Previous')
        self.bnext = Button(self.fig.add_axes([0.55, 0.05, 0.1, 0.075]), 'Next Turn')
        self.bprev.on_clicked(self.prev_step)
        self.bnext.on_clicked(self.next_step)
        self.fig.canvas.mpl_connect('key_press_event', self.on_key)

        self.draw_step()

    @property
    def frame(self):
        return self.frames[self.step]

    def title(self):
        return f"Step {self.step + 1}/{len(self.frames)}: {self.frame['turn']}"

    def draw_step(self):
        draw_board(self.graph, self.frame['cops'], self.frame['robber'], self.ax, pos=self.pos,
                   title=self.title())
        if self.ax.get_legend_handles_labels()[0]:
            self.ax.legend(loc="upper right")
        self.fig.canvas.draw_idle()

    def go_to(self, step):
        step = max(0, min(step, len(self.frames) - 1))
        if step != self.step:
            self.step = step
            self.draw_step()
        return self.step

    def next_step(self, event=None):
        return self.go_to(self.step + 1)

    def prev_step(self, event=None):
        return self.go_to(self.step - 1)

    def on_key(self, event):
        if event.key == 'right':
            self.next_step()
        elif event.key == 'left':
            self.prev_step()
        elif event.key == 'home':
            self.go_to(0)
        elif event.key == 'end':
            self.go_to(len(self.frames) - 1)

    def show(self):
        logger.info("Replaying %d steps on %s", len(self.frames), self.graph.name)
        plt.show()


def visualize_interactive(graph, frames):
    """Opens the replay window and blocks until it is closed."""
    viewer = ReplayViewer(graph, frames)
    viewer.show()
    return viewer
