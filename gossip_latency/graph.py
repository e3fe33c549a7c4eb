"""Undirected contact multigraph with weighted, possibly parallel edges."""

import networkx as nx
from typing import Iterator, List, Optional, Set, Tuple

from gossip_latency.entities import Person


class ContactGraph:
    """
    Undirected graph of people joined by transit-delay edges.

    Node handles are integers handed out by ``add_node`` and never reused.
    Each node keeps a sequence of incident edge ids, so parallel edges
    between the same pair survive. Edges remember the orientation they were
    added with; ``find_edge`` prefers the newest edge added as ``(a, b)``
    before looking at edges added as ``(b, a)``.
    """

    def __init__(self):
        self._nodes: List[Person] = []
        self._incident: List[List[int]] = []
        self._neighbor_sets: List[Set[int]] = []
        self._endpoints: List[Tuple[int, int]] = []
        self._weights: List[int] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"ContactGraph(nodes={self.node_count}, edges={self.edge_count})"

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._endpoints)

    def add_node(self, person: Person) -> int:
        """Insert a person and return its handle."""
        handle = len(self._nodes)
        self._nodes.append(person)
        self._incident.append([])
        self._neighbor_sets.append(set())
        return handle

    def node(self, handle: int) -> Person:
        """Return the person stored at ``handle``."""
        return self._nodes[handle]

    def add_edge(self, a: int, b: int, weight: int) -> int:
        """Add a new edge between ``a`` and ``b``, even if one already exists."""
        if a == b:
            raise ValueError(f"Self-loops are not supported (node {a})")
        if weight < 0:
            raise ValueError(f"Edge weight must be non-negative, got {weight}")
        self._check_node(a)
        self._check_node(b)

        edge_id = len(self._endpoints)
        self._endpoints.append((a, b))
        self._weights.append(weight)
        self._incident[a].append(edge_id)
        self._incident[b].append(edge_id)
        self._neighbor_sets[a].add(b)
        self._neighbor_sets[b].add(a)
        return edge_id

    def find_edge(self, a: int, b: int) -> Optional[int]:
        """Return an edge id joining ``a`` and ``b``, or None."""
        if b not in self._neighbor_sets[a]:
            return None
        incident = self._incident[a]
        for edge_id in reversed(incident):
            if self._endpoints[edge_id] == (a, b):
                return edge_id
        for edge_id in reversed(incident):
            if self._endpoints[edge_id] == (b, a):
                return edge_id
        return None

    def update_edge(self, a: int, b: int, weight: int) -> int:
        """Overwrite the weight of the edge found by ``find_edge``, else add one."""
        edge_id = self.find_edge(a, b)
        if edge_id is None:
            return self.add_edge(a, b, weight)
        if weight < 0:
            raise ValueError(f"Edge weight must be non-negative, got {weight}")
        self._weights[edge_id] = weight
        return edge_id

    def incident_edges(self, handle: int) -> List[int]:
        """Edge ids touching ``handle``, one entry per parallel edge."""
        return self._incident[handle]

    def endpoints(self, edge_id: int) -> Tuple[int, int]:
        return self._endpoints[edge_id]

    def weight(self, edge_id: int) -> int:
        return self._weights[edge_id]

    def other_endpoint(self, edge_id: int, handle: int) -> int:
        """The endpoint of ``edge_id`` that is not ``handle``."""
        a, b = self._endpoints[edge_id]
        return b if a == handle else a

    def neighbors(self, handle: int) -> Set[int]:
        """Distinct neighbors of ``handle`` as of now."""
        return self._neighbor_sets[handle]

    def is_adjacent(self, a: int, b: int) -> bool:
        return b in self._neighbor_sets[a]

    def has_common_neighbor(self, a: int, b: int) -> bool:
        na, nb = self._neighbor_sets[a], self._neighbor_sets[b]
        if len(na) > len(nb):
            na, nb = nb, na
        return any(n in nb for n in na)

    def edges_between(self, a: int, b: int) -> List[int]:
        """All edge ids joining ``a`` and ``b``."""
        if b not in self._neighbor_sets[a]:
            return []
        return [e for e in self._incident[a] if self.other_endpoint(e, a) == b]

    def edges(self) -> Iterator[Tuple[int, int, int]]:
        """Iterate ``(a, b, weight)`` over all edges in insertion order."""
        for (a, b), w in zip(self._endpoints, self._weights):
            yield a, b, w

    def weights(self) -> List[int]:
        return list(self._weights)

    def to_dot(self) -> str:
        """Dump nodes and edges in DOT notation without labels."""
        lines = ["graph {"]
        for handle in range(self.node_count):
            lines.append(f"    {handle} [ ]")
        for a, b in self._endpoints:
            lines.append(f"    {a} -- {b} [ ]")
        lines.append("}")
        return "\n".join(lines) + "\n"

    def to_networkx(self) -> nx.MultiGraph:
        """Build a networkx MultiGraph copy for analysis."""
        g = nx.MultiGraph()
        g.add_nodes_from(
            (handle, {"person": person}) for handle, person in enumerate(self._nodes)
        )
        g.add_edges_from(
            (a, b, {"weight": w}) for (a, b), w in zip(self._endpoints, self._weights)
        )
        return g

    def _check_node(self, handle: int) -> None:
        if not 0 <= handle < len(self._nodes):
            raise IndexError(f"Unknown node handle: {handle}")
