"""Tests for entity generation, the contact graph, and world construction."""

import pytest
import numpy as np
from scipy.stats import binomtest

from gossip_latency.config import Config, PopulationConfig, WiringConfig
from gossip_latency.entities import (
    BIKE_RADIUS,
    CAR_RADIUS,
    City,
    Coordinate,
    Person,
    new_city,
    new_person,
)
from gossip_latency.graph import ContactGraph
from gossip_latency.world import (
    World,
    bridge_cities,
    build_world,
    populate_city,
    wire_cliques,
    wire_internet,
    wire_local,
)


def _person(pid: int, car: bool = False, net: bool = True) -> Person:
    return Person(id=pid, home=Coordinate(0, 0), has_car=car, has_net_now=net)


def _graph_with(people):
    graph = ContactGraph()
    residents = [(p, graph.add_node(p)) for p in people]
    return graph, residents


def _small_config(strategy: str = "exhaustive", seed: int = 7) -> Config:
    return Config(
        seed=seed,
        n_cities=3,
        population=PopulationConfig(small=15, large=25),
        wiring=WiringConfig(p_local=0.05, p_clique=0.2, strategy=strategy),
    )


class TestEntities:
    """Test person and city generation."""

    def test_online_frequency(self):
        """About 90% of people are online."""
        rng = np.random.RandomState(0)
        n = 5000
        online = sum(new_person(rng).has_net_now for _ in range(n))
        assert binomtest(online, n, 0.9).pvalue > 0.001
        assert abs(online / n - 0.9) < 0.03

    def test_car_frequency(self):
        """Car ownership is a fair coin."""
        rng = np.random.RandomState(1)
        n = 5000
        cars = sum(new_person(rng).has_car for _ in range(n))
        assert binomtest(cars, n, 0.5).pvalue > 0.001

    def test_city_radius_split(self):
        """Radius is 100 or 12 with roughly equal odds."""
        rng = np.random.RandomState(2)
        cities = [new_city(rng) for _ in range(2000)]
        radii = {c.radius for c in cities}
        assert radii <= {CAR_RADIUS, BIKE_RADIUS}

        big = sum(1 for c in cities if c.radius == CAR_RADIUS)
        assert 0.45 < big / len(cities) < 0.55

    def test_ids_fit_in_128_bits(self):
        """Ids and coordinates are non-negative and in range."""
        rng = np.random.RandomState(3)
        for _ in range(100):
            p = new_person(rng)
            assert 0 <= p.id < 2**128
            assert 0 <= p.home.x < 2**64
            assert 0 <= p.home.y < 2**64

    def test_seeded_generation_is_reproducible(self):
        """Same seed, same people and cities."""
        a = np.random.RandomState(11)
        b = np.random.RandomState(11)
        assert [new_person(a) for _ in range(5)] == [new_person(b) for _ in range(5)]
        assert new_city(a) == new_city(b)

    def test_entities_are_immutable(self):
        """Person and City are frozen."""
        p = _person(1)
        with pytest.raises(AttributeError):
            p.has_car = True
        c = City(id=1, center=Coordinate(1, 2), radius=12)
        assert hash(c) == hash(City(id=1, center=Coordinate(1, 2), radius=12))


class TestContactGraph:
    """Test the multigraph structure."""

    def test_handles_are_sequential(self):
        """Handles are assigned in insertion order."""
        graph, residents = _graph_with([_person(i) for i in range(3)])
        assert [h for _, h in residents] == [0, 1, 2]
        assert graph.node(2).id == 2
        assert len(graph) == 3

    def test_parallel_edges_are_kept(self):
        """Adding the same pair twice creates two edges."""
        graph, _ = _graph_with([_person(0), _person(1)])
        graph.add_edge(0, 1, 1)
        graph.add_edge(1, 0, 1)

        assert graph.edge_count == 2
        assert len(graph.incident_edges(0)) == 2
        assert len(graph.edges_between(0, 1)) == 2
        assert graph.neighbors(0) == {1}

    def test_update_edge_overwrites_matching_orientation(self):
        """update_edge overwrites the edge added in the same orientation first."""
        graph, _ = _graph_with([_person(0), _person(1)])
        forward = graph.add_edge(0, 1, 1)
        backward = graph.add_edge(1, 0, 1)

        assert graph.update_edge(0, 1, 0) == forward
        assert graph.weight(forward) == 0
        assert graph.weight(backward) == 1

        assert graph.update_edge(1, 0, 0) == backward
        assert graph.weight(backward) == 0
        assert graph.edge_count == 2

    def test_update_edge_inserts_when_missing(self):
        """update_edge adds an edge between unconnected nodes."""
        graph, _ = _graph_with([_person(0), _person(1)])
        edge_id = graph.update_edge(1, 0, 0)
        assert graph.edge_count == 1
        assert graph.endpoints(edge_id) == (1, 0)
        assert graph.find_edge(0, 1) == edge_id

    def test_invalid_edges(self):
        """Self-loops, negative weights and unknown nodes are rejected."""
        graph, _ = _graph_with([_person(0), _person(1)])
        with pytest.raises(ValueError):
            graph.add_edge(0, 0, 1)
        with pytest.raises(ValueError):
            graph.add_edge(0, 1, -1)
        with pytest.raises(IndexError):
            graph.add_edge(0, 5, 1)

    def test_common_neighbor(self):
        """Common neighbors are detected through any shared node."""
        graph, _ = _graph_with([_person(i) for i in range(4)])
        graph.add_edge(0, 1, 1)
        graph.add_edge(1, 2, 1)
        assert graph.has_common_neighbor(0, 2)
        assert not graph.has_common_neighbor(0, 3)

    def test_dot_export(self):
        """DOT dump lists every node and edge."""
        graph, _ = _graph_with([_person(0), _person(1), _person(2)])
        graph.add_edge(0, 1, 1)
        graph.add_edge(1, 2, 3)
        assert graph.to_dot() == (
            "graph {\n"
            "    0 [ ]\n"
            "    1 [ ]\n"
            "    2 [ ]\n"
            "    0 -- 1 [ ]\n"
            "    1 -- 2 [ ]\n"
            "}\n"
        )

    def test_networkx_view(self):
        """The networkx copy keeps parallel edges and weights."""
        graph, _ = _graph_with([_person(0), _person(1), _person(2)])
        graph.add_edge(0, 1, 1)
        graph.add_edge(1, 0, 1)
        graph.add_edge(1, 2, 3)

        g = graph.to_networkx()
        assert g.number_of_nodes() == 3
        assert g.number_of_edges() == 3
        assert sorted(w for _, _, w in g.edges(data="weight")) == [1, 1, 3]


class TestWiringPasses:
    """Test the individual wiring passes."""

    def test_populate_city(self):
        """Residents are inserted as nodes in generation order."""
        graph = ContactGraph()
        residents = populate_city(graph, 5, np.random.RandomState(0))
        assert len(residents) == 5
        assert [h for _, h in residents] == list(range(5))
        assert all(graph.node(h) is p for p, h in residents)

    @pytest.mark.parametrize("strategy", ["exhaustive", "sampled"])
    def test_local_wiring_certain(self, strategy):
        """With p=1 every ordered pair gets its own edge."""
        graph, residents = _graph_with([_person(i) for i in range(4)])
        added = wire_local(graph, residents, np.random.RandomState(0), p=1.0, strategy=strategy)

        assert added == 12
        assert graph.edge_count == 12
        for a in range(4):
            for b in range(a + 1, 4):
                assert len(graph.edges_between(a, b)) == 2
        assert set(graph.weights()) == {1}

    def test_local_wiring_strategies_add_in_same_order(self):
        """Sampled wiring adds edges in nested-loop pair order."""
        g1, r1 = _graph_with([_person(i) for i in range(5)])
        g2, r2 = _graph_with([_person(i) for i in range(5)])
        wire_local(g1, r1, np.random.RandomState(0), p=1.0, strategy="exhaustive")
        wire_local(g2, r2, np.random.RandomState(0), p=1.0, strategy="sampled")
        assert list(g1.edges()) == list(g2.edges())

    @pytest.mark.parametrize("strategy", ["exhaustive", "sampled"])
    def test_local_wiring_rate(self, strategy):
        """Edge count matches p * n * (n - 1)."""
        n, p = 200, 0.05
        graph, residents = _graph_with([_person(i) for i in range(n)])
        added = wire_local(graph, residents, np.random.RandomState(5), p=p, strategy=strategy)

        expected = p * n * (n - 1)
        assert abs(added - expected) < 250

    def test_local_wiring_never(self):
        """With p=0 the sampled strategy adds nothing."""
        graph, residents = _graph_with([_person(i) for i in range(10)])
        assert wire_local(graph, residents, np.random.RandomState(0), p=0.0, strategy="sampled") == 0

    def test_unknown_strategy(self):
        """Unknown strategies raise ValueError."""
        graph, residents = _graph_with([_person(i) for i in range(3)])
        with pytest.raises(ValueError):
            wire_local(graph, residents, np.random.RandomState(0), strategy="magic")
        with pytest.raises(ValueError):
            wire_cliques(graph, residents, np.random.RandomState(0), strategy="magic")

    @pytest.mark.parametrize("strategy", ["exhaustive", "sampled"])
    def test_clique_closure_sees_its_own_edges(self, strategy):
        """On a 4-path with p=1, closure completes K4 using edges added mid-pass."""
        graph, residents = _graph_with([_person(i) for i in range(4)])
        graph.add_edge(0, 1, 1)
        graph.add_edge(1, 2, 1)
        graph.add_edge(2, 3, 1)

        added = wire_cliques(graph, residents, np.random.RandomState(0), p=1.0, strategy=strategy)

        # 0 and 3 share no neighbor until 0-2 is added
        assert added == 3
        assert graph.is_adjacent(0, 3)
        assert list(graph.edges())[3:] == [(0, 2, 1), (0, 3, 1), (1, 3, 1)]

    def test_clique_closure_needs_common_neighbor(self):
        """Pairs without a shared neighbor are never linked."""
        graph, residents = _graph_with([_person(i) for i in range(4)])
        graph.add_edge(0, 1, 1)
        graph.add_edge(2, 3, 1)

        assert wire_cliques(graph, residents, np.random.RandomState(0), p=1.0) == 0
        assert graph.edge_count == 2

    def test_clique_strategies_match_when_certain(self):
        """Both strategies close the same triangles when p=1."""
        rng = np.random.RandomState(9)
        g1, r1 = _graph_with([_person(i) for i in range(30)])
        wire_local(g1, r1, rng, p=0.03)
        g2, r2 = _graph_with([_person(i) for i in range(30)])
        for a, b, w in g1.edges():
            g2.add_edge(a, b, w)

        wire_cliques(g1, r1, np.random.RandomState(0), p=1.0, strategy="exhaustive")
        wire_cliques(g2, r2, np.random.RandomState(0), p=1.0, strategy="sampled")
        assert list(g1.edges()) == list(g2.edges())

    def test_internet_overwrites_and_links(self):
        """Online pairs end up with weight-0 edges only."""
        people = [_person(0), _person(1), _person(2), _person(3, net=False)]
        graph, residents = _graph_with(people)
        graph.add_edge(0, 1, 1)
        graph.add_edge(1, 0, 1)
        offline_edge = graph.add_edge(2, 3, 1)

        added = wire_internet(graph, residents)

        assert added == 2  # 0-2 and 1-2
        for a, b in [(0, 1), (0, 2), (1, 2)]:
            weights = [graph.weight(e) for e in graph.edges_between(a, b)]
            assert weights and set(weights) == {0}
        assert graph.weight(offline_edge) == 1

    def test_internet_is_idempotent(self):
        """A second internet pass changes nothing."""
        people = [_person(i, net=(i % 4 != 0)) for i in range(12)]
        graph, residents = _graph_with(people)
        wire_local(graph, residents, np.random.RandomState(0), p=0.2)
        wire_internet(graph, residents)
        before = list(graph.edges())

        assert wire_internet(graph, residents) == 0
        assert list(graph.edges()) == before

    def test_bridge_chain(self):
        """Car owners of city i link to the entry point of city i+1 only."""
        graph = ContactGraph()
        cities = [City(id=k, center=Coordinate(k, k), radius=12) for k in range(3)]
        roster = {}
        for k, city in enumerate(cities):
            people = [_person(10 * k + i, car=(i % 2 == 0)) for i in range(4)]
            roster[city] = [(p, graph.add_node(p)) for p in people]

        added = bridge_cities(graph, cities, roster)

        assert added == 4  # two car owners in each of the first two cities
        entries = {roster[c][0][1] for c in cities}
        for a, b, w in graph.edges():
            assert w == 3
            assert b in entries
        assert [b for _, b, _ in graph.edges()] == [4, 4, 8, 8]
        # nothing points back into the first city
        assert not graph.incident_edges(roster[cities[0]][1][1])


class TestBuildWorld:
    """Test full world construction."""

    @pytest.mark.parametrize("strategy", ["exhaustive", "sampled"])
    def test_world_shape(self, strategy):
        """Every city is small or large and every node belongs to one city."""
        config = _small_config(strategy)
        world = build_world(config)

        assert len(world.cities) == 3
        sizes = [len(world.residents(c)) for c in world.cities]
        assert set(sizes) <= {15, 25}
        assert world.graph.node_count == sum(sizes)
        for city in world.cities:
            assert world.entry_point(city) == world.residents(city)[0][1]

    @pytest.mark.parametrize("strategy", ["exhaustive", "sampled"])
    def test_edge_weights_by_pass(self, strategy):
        """Bridges weigh 3, online pairs 0, other local edges 1."""
        world = build_world(_small_config(strategy))
        graph = world.graph

        city_of = {}
        for k, city in enumerate(world.cities):
            for _, h in world.residents(city):
                city_of[h] = k

        assert set(graph.weights()) <= {0, 1, 3}
        for a, b, w in graph.edges():
            if city_of[a] != city_of[b]:
                assert w == 3
                assert city_of[b] == city_of[a] + 1
                assert graph.node(a).has_car
            elif graph.node(a).has_net_now and graph.node(b).has_net_now:
                assert w == 0
            else:
                assert w == 1

    def test_seeded_build_is_reproducible(self):
        """Same seed, same nodes and edge multiset."""
        w1 = build_world(_small_config(seed=3))
        w2 = build_world(_small_config(seed=3))

        assert [c.id for c in w1.cities] == [c.id for c in w2.cities]
        assert [w1.graph.node(h) for h in range(w1.graph.node_count)] == [
            w2.graph.node(h) for h in range(w2.graph.node_count)
        ]
        assert list(w1.graph.edges()) == list(w2.graph.edges())

    def test_different_seeds_differ(self):
        """Different seeds give different worlds."""
        w1 = build_world(_small_config(seed=3))
        w2 = build_world(_small_config(seed=4))
        assert [c.id for c in w1.cities] != [c.id for c in w2.cities]

    def test_edge_free_world_is_valid(self):
        """With every probability at zero the graph has no edges."""
        config = Config(
            seed=1,
            n_cities=2,
            population=PopulationConfig(small=5, large=5, p_car=0.0, p_net=0.0),
            wiring=WiringConfig(p_local=0.0, p_clique=0.0, strategy="sampled"),
        )
        world = build_world(config)
        assert world.graph.node_count == 10
        assert world.graph.edge_count == 0

    def test_sample_resident(self):
        """Sampled residents come from the requested city."""
        world = build_world(_small_config())
        rng = np.random.RandomState(0)
        city = world.city_at(-1)
        handles = {h for _, h in world.residents(city)}
        for _ in range(20):
            assert world.sample_resident(city, rng) in handles

    def test_world_is_a_dataclass(self):
        """An empty World can be assembled by hand."""
        world = World(graph=ContactGraph())
        assert world.cities == []
        assert world.roster == {}
