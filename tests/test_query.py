import heapq
import random

import pytest

from cchkit.cch import CustomizableContractionHierarchy
from cchkit.metric import INF_WEIGHT, CustomizableContractionHierarchyMetric
from cchkit.query import CustomizableContractionHierarchyQuery


def build_query(node_count, tail, head, weight, order=None):
    if order is None:
        order = list(range(node_count))
    cch = CustomizableContractionHierarchy(order, tail, head)
    metric = CustomizableContractionHierarchyMetric(cch, weight).customize()
    return CustomizableContractionHierarchyQuery(metric), metric


def dijkstra(node_count, tail, head, weight, source):
    adjacency = [[] for _ in range(node_count)]
    for t, h, w in zip(tail, head, weight):
        adjacency[t].append((h, w))
    dist = [INF_WEIGHT] * node_count
    dist[source] = 0
    heap = [(0, source)]
    while heap:
        d, x = heapq.heappop(heap)
        if d > dist[x]:
            continue
        for y, w in adjacency[x]:
            if d + w < dist[y]:
                dist[y] = d + w
                heapq.heappush(heap, (d + w, y))
    return dist


def random_graph(seed):
    rng = random.Random(seed)
    node_count = rng.randint(6, 12)
    arc_count = rng.randint(node_count, 3 * node_count)
    tail = [rng.randrange(node_count) for _ in range(arc_count)]
    head = [rng.randrange(node_count) for _ in range(arc_count)]
    weight = [rng.randint(1, 20) for _ in range(arc_count)]
    order = list(range(node_count))
    rng.shuffle(order)
    return node_count, tail, head, weight, order


EIGHT_TAIL = [0, 1, 1, 1, 2, 3, 4, 4, 4, 5, 6, 6, 6, 7, 7, 7]
EIGHT_HEAD = [4, 5, 6, 7, 6, 7, 0, 6, 7, 1, 1, 2, 4, 1, 3, 4]
EIGHT_WEIGHT = [2, 2, 2, 2, 1, 1, 2, 1, 1, 1, 1, 1, 1, 1, 1, 1]


def check_arc_path(path, s, t, tail, head, weight, distance):
    if s == t:
        assert path == []
        return
    assert tail[path[0]] == s
    assert head[path[-1]] == t
    for a, b in zip(path, path[1:]):
        assert head[a] == tail[b]
    assert sum(weight[a] for a in path) == distance


def test_small_graph_distance_and_paths():
    tail, head, weight = [0, 0, 1, 2], [1, 2, 3, 3], [1, 10, 1, 10]
    q, _ = build_query(4, tail, head, weight, order=[3, 0, 2, 1])
    q.add_source(0).add_target(3).run()
    assert q.get_distance() == 2
    assert q.get_arc_path() == [0, 2]
    assert q.get_node_path() == [0, 1, 3]
    assert q.get_used_source() == 0
    assert q.get_used_target() == 3


def test_unreachable_target():
    q, _ = build_query(3, [0], [1], [5])
    q.add_source(1).add_target(0).run()
    assert q.get_distance() == INF_WEIGHT
    assert q.get_node_path() == []
    assert q.get_arc_path() == []
    assert q.get_used_source() is None
    assert q.get_used_target() is None


def test_source_equals_target():
    q, _ = build_query(4, EIGHT_TAIL[:3], [1, 2, 3], [1, 1, 1])
    q.add_source(2).add_target(2).run()
    assert q.get_distance() == 0
    assert q.get_node_path() == [2]
    assert q.get_arc_path() == []


def test_eight_node_graph_all_pairs():
    q, _ = build_query(8, EIGHT_TAIL, EIGHT_HEAD, EIGHT_WEIGHT)
    for s in range(8):
        expected = dijkstra(8, EIGHT_TAIL, EIGHT_HEAD, EIGHT_WEIGHT, s)
        for t in range(8):
            q.reset().add_source(s).add_target(t).run()
            assert q.get_distance() == expected[t]
            if expected[t] == INF_WEIGHT:
                assert q.get_arc_path() == []
            else:
                arc_path = q.get_arc_path()
                check_arc_path(arc_path, s, t, EIGHT_TAIL, EIGHT_HEAD, EIGHT_WEIGHT, expected[t])
                assert q.get_node_path() == [s] + [EIGHT_HEAD[a] for a in arc_path]


@pytest.mark.parametrize("seed", range(8))
def test_random_graphs_match_dijkstra(seed):
    node_count, tail, head, weight, order = random_graph(seed)
    q, _ = build_query(node_count, tail, head, weight, order)
    for s in range(node_count):
        expected = dijkstra(node_count, tail, head, weight, s)
        for t in range(node_count):
            q.reset().add_source(s).add_target(t).run()
            assert q.get_distance() == expected[t]
            if expected[t] != INF_WEIGHT:
                check_arc_path(q.get_arc_path(), s, t, tail, head, weight, expected[t])


def test_parallel_arcs_use_cheapest():
    tail, head, weight = [0, 0, 1, 1], [1, 1, 2, 2], [7, 3, 4, 9]
    q, _ = build_query(3, tail, head, weight, order=[1, 2, 0])
    q.add_source(0).add_target(2).run()
    assert q.get_distance() == 7
    assert q.get_arc_path() == [1, 2]


@pytest.mark.parametrize("seed", range(4))
def test_pinned_targets_match_dijkstra(seed):
    node_count, tail, head, weight, order = random_graph(seed)
    q, _ = build_query(node_count, tail, head, weight, order)
    targets = list(reversed(range(node_count)))
    q.pin_targets(targets)
    for s in range(node_count):
        expected = dijkstra(node_count, tail, head, weight, s)
        first = q.reset_source().add_source(s).run_to_pinned_targets().get_distances_to_targets()
        second = q.reset_source().add_source(s).run_to_pinned_targets().get_distances_to_targets()
        assert first == [expected[t] for t in targets]
        assert second == first


@pytest.mark.parametrize("seed", range(4))
def test_pinned_sources_match_dijkstra(seed):
    node_count, tail, head, weight, order = random_graph(seed)
    q, _ = build_query(node_count, tail, head, weight, order)
    sources = list(reversed(range(node_count)))
    all_dist = [dijkstra(node_count, tail, head, weight, s) for s in range(node_count)]
    q.pin_sources(sources)
    for t in range(node_count):
        result = q.reset_target().add_target(t).run_to_pinned_sources().get_distances_to_sources()
        assert result == [all_dist[s][t] for s in sources]


def test_multiple_sources_pick_nearest():
    node_count, tail, head, weight, order = random_graph(11)
    q, _ = build_query(node_count, tail, head, weight, order)
    dist_a = dijkstra(node_count, tail, head, weight, 0)
    dist_b = dijkstra(node_count, tail, head, weight, 1)
    for t in range(node_count):
        q.reset().add_source(0).add_source(1).add_target(t).run()
        best = min(dist_a[t], dist_b[t])
        assert q.get_distance() == best
        if best != INF_WEIGHT:
            used = q.get_used_source()
            assert used in (0, 1)
            assert (dist_a if used == 0 else dist_b)[t] == best


def test_initial_distance_offsets():
    tail, head, weight = [0, 1], [2, 2], [5, 1]
    q, _ = build_query(3, tail, head, weight)
    q.add_source(0, 0).add_source(1, 10).add_target(2).run()
    assert q.get_distance() == 5
    assert q.get_used_source() == 0


def test_reset_with_new_metric():
    tail, head = [0, 0, 1], [1, 2, 2]
    q, metric = build_query(3, tail, head, [1, 10, 1])
    q.add_source(0).add_target(2).run()
    assert q.get_distance() == 2
    other = CustomizableContractionHierarchyMetric(metric.cch, [1, 1, 5]).customize()
    q.reset(other).add_source(0).add_target(2).run()
    assert q.get_distance() == dijkstra(3, tail, head, [1, 1, 5], 0)[2]
    assert q.get_arc_path() == [1]


def test_state_errors():
    q, _ = build_query(3, [0, 1], [1, 2], [1, 1])
    with pytest.raises(RuntimeError):
        q.get_distance()
    with pytest.raises(IndexError):
        q.add_source(3)
    q.pin_sources([0, 1])
    with pytest.raises(RuntimeError):
        q.add_source(2)
    with pytest.raises(RuntimeError):
        q.run()
    q.reset()
    q.add_source(0).add_target(2).run()
    with pytest.raises(RuntimeError):
        q.pin_targets([1])
    assert q.get_distance() == 2