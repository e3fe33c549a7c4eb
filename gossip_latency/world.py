"""World construction: cities, residents and the four wiring passes."""

import heapq
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from loguru import logger

from gossip_latency.config import Config
from gossip_latency.entities import City, Person, new_city, new_person
from gossip_latency.graph import ContactGraph

Resident = Tuple[Person, int]
CityRoster = Dict[City, List[Resident]]


@dataclass
class World:
    """A built contact graph plus the per-city rosters used for sampling."""

    graph: ContactGraph
    cities: List[City] = field(default_factory=list)
    roster: CityRoster = field(default_factory=dict)

    def city_at(self, index: int) -> City:
        return self.cities[index]

    def residents(self, city: City) -> List[Resident]:
        return self.roster[city]

    def entry_point(self, city: City) -> int:
        """Handle of the city's first-generated resident."""
        return self.roster[city][0][1]

    def sample_resident(self, city: City, rng: np.random.RandomState) -> int:
        """Pick a uniformly random resident handle of ``city``."""
        residents = self.roster[city]
        return residents[rng.randint(len(residents))][1]


def populate_city(
    graph: ContactGraph,
    n_residents: int,
    rng: np.random.RandomState,
    p_car: float = 0.5,
    p_net: float = 0.9,
) -> List[Resident]:
    """Generate ``n_residents`` people and insert them as graph nodes."""
    people = [new_person(rng, p_car=p_car, p_net=p_net) for _ in range(n_residents)]
    return [(person, graph.add_node(person)) for person in people]


# ----------------------------------------------------------------------------
# Pass 2: local random wiring
# ----------------------------------------------------------------------------

def _sampled_pair_indices(
    n_pairs: int, p: float, rng: np.random.RandomState, chunk: int = 4096
) -> np.ndarray:
    """Indices of Bernoulli(p) successes over ``n_pairs`` trials via geometric skipping."""
    if p <= 0.0 or n_pairs == 0:
        return np.empty(0, dtype=np.int64)
    if p >= 1.0:
        return np.arange(n_pairs, dtype=np.int64)

    hits = []
    pos = -1
    while True:
        steps = pos + np.cumsum(rng.geometric(p, size=chunk), dtype=np.int64)
        inside = steps[steps < n_pairs]
        hits.append(inside)
        if inside.size < steps.size:
            break
        pos = int(steps[-1])
    return np.concatenate(hits)


def wire_local(
    graph: ContactGraph,
    residents: List[Resident],
    rng: np.random.RandomState,
    p: float = 0.01,
    weight: int = 1,
    strategy: str = "exhaustive",
) -> int:
    """
    Link every ordered pair of distinct residents with probability ``p``.

    Both orders of a pair are tried, so two residents can end up with zero,
    one or two parallel edges.

    Args:
        graph: Graph to wire
        residents: (Person, handle) pairs of one city
        rng: Random state
        p: Link probability per ordered pair
        weight: Edge weight in hours
        strategy: "exhaustive" (one draw per pair) or "sampled" (geometric skipping)

    Returns:
        Number of edges added
    """
    handles = [h for _, h in residents]
    n = len(handles)
    added = 0

    if strategy == "exhaustive":
        for i, a in enumerate(handles):
            draws = rng.rand(n)
            for j in np.flatnonzero(draws <= p):
                if j != i:
                    graph.add_edge(a, handles[j], weight)
                    added += 1
    elif strategy == "sampled":
        if n < 2:
            return 0
        idx = _sampled_pair_indices(n * (n - 1), p, rng)
        rows = idx // (n - 1)
        offs = idx % (n - 1)
        cols = offs + (offs >= rows)
        for i, j in zip(rows.tolist(), cols.tolist()):
            graph.add_edge(handles[i], handles[j], weight)
        added = int(idx.size)
    else:
        raise ValueError(f"Unknown wiring strategy: {strategy}")

    return added


# ----------------------------------------------------------------------------
# Pass 3: clique closure
# ----------------------------------------------------------------------------

def _close_cliques_sampled(
    graph: ContactGraph,
    handles: List[int],
    rng: np.random.RandomState,
    p: float,
    weight: int,
) -> int:
    # Only pairs with a common neighbor can fire, so each row visits its
    # current two-hop set in handle order and grows it as edges are added.
    members = set(handles)
    added = 0
    for a in handles:
        seen = set()
        heap: List[int] = []

        def push_from(node: int, above: int) -> None:
            for c in graph.neighbors(node):
                if c > above and c != a and c in members and c not in seen:
                    seen.add(c)
                    heapq.heappush(heap, c)

        for nb in list(graph.neighbors(a)):
            push_from(nb, -1)

        while heap:
            b = heapq.heappop(heap)
            if graph.is_adjacent(a, b):
                continue
            if rng.rand() <= p:
                graph.add_edge(a, b, weight)
                added += 1
                push_from(b, b)
    return added


def wire_cliques(
    graph: ContactGraph,
    residents: List[Resident],
    rng: np.random.RandomState,
    p: float = 0.10,
    weight: int = 1,
    strategy: str = "exhaustive",
) -> int:
    """
    Close triangles: link non-adjacent residents sharing a neighbor with probability ``p``.

    Adjacency is read from the live graph, so edges added earlier in the
    pass count as shared neighbors for later pairs.

    Returns:
        Number of edges added
    """
    handles = [h for _, h in residents]

    if strategy == "sampled":
        return _close_cliques_sampled(graph, sorted(handles), rng, p, weight)
    if strategy != "exhaustive":
        raise ValueError(f"Unknown wiring strategy: {strategy}")

    added = 0
    for a in handles:
        for b in handles:
            if a == b or graph.is_adjacent(a, b):
                continue
            if not graph.has_common_neighbor(a, b):
                continue
            if rng.rand() <= p:
                graph.add_edge(a, b, weight)
                added += 1
    return added


# ----------------------------------------------------------------------------
# Pass 4: internet shortcuts
# ----------------------------------------------------------------------------

def wire_internet(
    graph: ContactGraph,
    residents: List[Resident],
    weight: int = 0,
) -> int:
    """
    Give every pair of online residents an instantaneous link.

    Existing edges between the pair are overwritten rather than duplicated,
    so running the pass twice changes nothing.

    Returns:
        Number of edges that did not exist before
    """
    online = [h for person, h in residents if person.has_net_now]
    before = graph.edge_count
    for a in online:
        for b in online:
            if a != b:
                graph.update_edge(a, b, weight)
    return graph.edge_count - before


# ----------------------------------------------------------------------------
# Pass 5: inter-city bridges
# ----------------------------------------------------------------------------

def bridge_cities(
    graph: ContactGraph,
    cities: List[City],
    roster: CityRoster,
    weight: int = 3,
) -> int:
    """
    Chain cities in generation order: car owners of city i commute to city i+1.

    Each car owner gets one edge to the entry point of the next city.

    Returns:
        Number of edges added
    """
    added = 0
    for here, there in zip(cities[:-1], cities[1:]):
        entry = roster[there][0][1]
        for person, handle in roster[here]:
            if person.has_car:
                graph.add_edge(handle, entry, weight)
                added += 1
    return added


def build_world(config: Config, rng: Optional[np.random.RandomState] = None) -> World:
    """
    Generate cities and residents, then wire the full contact graph.

    Args:
        config: Configuration object
        rng: Random state (default: seeded from config.seed)

    Returns:
        Fully wired World
    """
    if rng is None:
        rng = np.random.RandomState(config.seed)

    pop = config.population
    wiring = config.wiring
    graph = ContactGraph()
    world = World(graph=graph)

    world.cities = [new_city(rng) for _ in range(config.n_cities)]
    logger.info(f"Generating world: {config.n_cities} cities, strategy={wiring.strategy}")

    for k, city in enumerate(world.cities):
        is_small = rng.rand() < pop.p_small
        n_residents = pop.small if is_small else pop.large
        residents = populate_city(graph, n_residents, rng, p_car=pop.p_car, p_net=pop.p_net)
        world.roster[city] = residents

        n_local = wire_local(
            graph, residents, rng, wiring.p_local, wiring.local_weight, wiring.strategy
        )
        n_clique = wire_cliques(
            graph, residents, rng, wiring.p_clique, wiring.local_weight, wiring.strategy
        )
        n_net = wire_internet(graph, residents, wiring.internet_weight)
        logger.info(
            f"City {k + 1}/{config.n_cities}: {n_residents} residents "
            f"({'small' if is_small else 'large'}), local={n_local}, "
            f"clique={n_clique}, internet={n_net}"
        )

    n_bridge = bridge_cities(graph, world.cities, world.roster, wiring.bridge_weight)
    logger.info(f"Bridged {config.n_cities} cities with {n_bridge} commuter edges")

    for k, city in enumerate(world.cities):
        if not graph.incident_edges(world.entry_point(city)):
            logger.warning(f"Entry point of city {k} has no edges")

    logger.info(f"Finished wiring: {graph.node_count} nodes, {graph.edge_count} edges")
    return world
