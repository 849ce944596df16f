import logging
import os
import numpy as np
import networkx as nx

from .errors import InvalidGraph

logger = logging.getLogger(__name__)


class Graph:
    """
    Undirected simple graph over integer vertex ids.

    Staying put is always a legal move in the game, so self-loops are never
    stored; `closed_neighbourhood` adds the vertex itself instead.
    """

    def __init__(self, vertices=(), edges=(), name="graph", positions=None):
        self.name = name
        self.adj = {}
        # Optional drawing coordinates {vertex: (x, y)}, only used by plotting
        self.positions = dict(positions) if positions else {}
        for v in vertices:
            self.add_vertex(v)
        for u, v in edges:
            self.add_edge(u, v)

    # --- Construction API ---

    def add_vertex(self, v=None):
        """Adds a vertex and returns its id. Picks the next free id when v is None."""
        if v is None:
            v = max(self.adj) + 1 if self.adj else 0
        if not isinstance(v, (int, np.integer)) or isinstance(v, bool):
            raise InvalidGraph(f"Vertex ids must be integers, got {v!r}")
        v = int(v)
        if v not in self.adj:
            self.adj[v] = []
        return v

    def remove_vertex(self, v):
        if v not in self.adj:
            raise InvalidGraph(f"Vertex {v} is not in the graph")
        for u in self.adj.pop(v):
            self.adj[u].remove(v)
        self.positions.pop(v, None)

    def add_edge(self, u, v):
        if u not in self.adj or v not in self.adj:
            raise InvalidGraph(f"Edge ({u}, {v}) references a missing vertex")
        if u == v:
            raise InvalidGraph(f"Self-loop on vertex {u} is not allowed")
        # No parallel edges: adding an existing edge is a no-op
        if v not in self.adj[u]:
            self.adj[u].append(v)
            self.adj[v].append(u)

    def remove_edge(self, u, v):
        if not self.has_edge(u, v):
            raise InvalidGraph(f"Edge ({u}, {v}) is not in the graph")
        self.adj[u].remove(v)
        self.adj[v].remove(u)

    def validate(self):
        """Raises InvalidGraph unless the graph has a vertex and a consistent edge set."""
        if not self.adj:
            raise InvalidGraph("Graph must have at least one vertex")
        for u, neighbours in self.adj.items():
            for v in neighbours:
                if v not in self.adj:
                    raise InvalidGraph(f"Edge ({u}, {v}) references a missing vertex")
                if v == u:
                    raise InvalidGraph(f"Self-loop on vertex {u} is not allowed")
                if u not in self.adj[v]:
                    raise InvalidGraph(f"Edge ({u}, {v}) is not symmetric")
        return self

    # --- Queries ---

    @property
    def vertices(self):
        return sorted(self.adj)

    @property
    def edges(self):
        return sorted((u, v) for u in self.adj for v in self.adj[u] if u < v)

    def has_vertex(self, v):
        return v in self.adj

    def has_edge(self, u, v):
        return u in self.adj and v in self.adj[u]

    def neighbours(self, v):
        return list(self.adj[v])

    def closed_neighbourhood(self, v):
        """Every vertex reachable in one move from v: its neighbours, then v itself (stay)."""
        return self.adj[v] + [v]

    def copy(self):
        return Graph(self.vertices, self.edges, name=self.name, positions=self.positions)

    def __len__(self):
        return len(self.adj)

    def __contains__(self, v):
        return v in self.adj

    def __repr__(self):
        return f"Graph(name={self.name!r}, vertices={len(self.adj)}, edges={len(self.edges)})"

    # --- Conversions ---

    @classmethod
    def from_adjacency_matrix(cls, matrix, name="graph"):
        matrix = np.asarray(matrix)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise InvalidGraph(f"Adjacency matrix must be square, got shape {matrix.shape}")
        if matrix.shape[0] == 0:
            raise InvalidGraph("Graph must have at least one vertex")
        if not np.array_equal(matrix, matrix.T):
            raise InvalidGraph("Adjacency matrix must be symmetric for an undirected graph")

        graph = cls(range(matrix.shape[0]), name=name)
        # The diagonal is ignored: staying put is implicit
        rows, cols = np.nonzero(np.triu(matrix, k=1))
        for r, c in zip(rows, cols):
            graph.add_edge(int(r), int(c))
        return graph

    def to_adjacency_matrix(self):
        """Returns an int8 matrix whose row/column order follows `self.vertices`."""
        index = {v: i for i, v in enumerate(self.vertices)}
        matrix = np.zeros((len(index), len(index)), dtype=np.int8)
        for u, v in self.edges:
            matrix[index[u], index[v]] = 1
            matrix[index[v], index[u]] = 1
        return matrix

    @classmethod
    def from_edge_list(cls, edges, name="graph"):
        edges = [(int(u), int(v)) for u, v in edges]
        vertices = sorted({x for edge in edges for x in edge})
        return cls(vertices, edges, name=name)

    @classmethod
    def from_networkx(cls, G, name=None):
        if not all(isinstance(n, (int, np.integer)) for n in G.nodes):
            G = nx.convert_node_labels_to_integers(G, ordering="sorted")
        G = G.copy()
        G.remove_edges_from(list(nx.selfloop_edges(G)))
        return cls(G.nodes, G.edges, name=name or G.name or "graph")

    def to_networkx(self):
        G = nx.Graph(name=self.name)
        G.add_nodes_from(self.vertices)
        G.add_edges_from(self.edges)
        return G


# --- File loading ---

def parse_matrix(filepath):
    """
    Reads an adjacency matrix text file, one row of 0s and 1s per line.
    Empty lines and '-' separator lines are skipped.
    """
    matrix_rows = []
    with open(filepath, 'r') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('-'):
                continue
            row = [int(char) for char in line if char in '01']
            if row:
                matrix_rows.append(row)
    if matrix_rows and any(len(row) != len(matrix_rows) for row in matrix_rows):
        raise InvalidGraph(f"Matrix in '{filepath}' is not square")
    return np.array(matrix_rows, dtype=np.int8)


def load_graph(filepath):
    matrix = parse_matrix(filepath)
    name = os.path.splitext(os.path.basename(filepath))[0]
    graph = Graph.from_adjacency_matrix(matrix, name=name)
    logger.info("Graph loaded from %s: %d nodes, %d edges.", filepath, len(graph), len(graph.edges))
    return graph


# --- Templates ---

def template_graphs():
    """Small built-in boards, keyed by name."""
    templates = [
        Graph(range(2), [(0, 1)], name="Path2",
              positions={0: (0.5, 0.2), 1: (0.5, 0.8)}),
        Graph(range(5), [(0, 1), (1, 2), (2, 3), (3, 4)], name="Path5",
              positions={i: (0.5, 0.1 + 0.2 * i) for i in range(5)}),
        Graph(range(6), [(i, (i + 1) % 6) for i in range(6)], name="Hexagon",
              positions={0: (0.5, 0.2), 1: (0.76, 0.35), 2: (0.76, 0.65),
                         3: (0.5, 0.8), 4: (0.24, 0.65), 5: (0.24, 0.35)}),
        Graph.from_networkx(nx.petersen_graph(), name="Petersen"),
        Graph.from_networkx(nx.dodecahedral_graph(), name="Dodecahedron"),
        Graph.from_networkx(nx.balanced_tree(2, 3), name="BinaryTree15"),
    ]
    return {g.name: g for g in templates}
