"""Shortest-path queries on a customized customizable contraction hierarchy."""

from enum import Enum, auto

from .cch import lower_triangles
from .graph_util import find_arc_given_sorted_head
from .metric import INF_WEIGHT


class _State(Enum):
    INITIALIZED = auto()
    RUN = auto()
    SOURCE_PINNED = auto()
    SOURCE_RUN = auto()
    TARGET_PINNED = auto()
    TARGET_RUN = auto()


def _ancestors(parent, x, stop=None):
    """Yield ``x`` and its elimination-tree ancestors until ``stop`` is reached."""
    while x != stop:
        if x is None:
            raise RuntimeError("stop node is not an ancestor of the start node")
        yield x
        x = parent[x]


class CustomizableContractionHierarchyQuery:
    """Point-to-point and one-to-many shortest-path queries over a metric.

    Node ids passed in and returned are the ids of the input graph.
    """

    def __init__(self, metric):
        self._attach(metric)

    def _attach(self, metric):
        cch = metric.cch
        node_count = cch.node_count
        self.cch = cch
        self.metric = metric
        self._forward_distance = [INF_WEIGHT] * node_count
        self._backward_distance = [INF_WEIGHT] * node_count
        self._forward_predecessor = [None] * node_count
        self._backward_predecessor = [None] * node_count
        self._in_forward_search_space = [False] * node_count
        self._in_backward_search_space = [False] * node_count
        self._source_node = []
        self._source_end = []
        self._target_node = []
        self._target_end = []
        self._meeting_node = None
        self._state = _State.INITIALIZED

    def _require(self, *states):
        if self._state not in states:
            raise RuntimeError(f"operation not allowed in query state {self._state.name.lower()}")

    # ----- resetting -------------------------------------------------------

    def _clear_start_list(self, nodes, ends, in_space, distances):
        parent = self.cch.elimination_tree_parent
        for node, end in zip(nodes, ends):
            for x in _ancestors(parent, node, end):
                in_space[x] = False
                distances[x] = INF_WEIGHT
        nodes.clear()
        ends.clear()

    def _clear_distances_on_paths(self, nodes, ends, distances):
        parent = self.cch.elimination_tree_parent
        for node, end in zip(nodes, ends):
            for x in _ancestors(parent, node, end):
                distances[x] = INF_WEIGHT

    def reset(self, metric=None):
        """Forget all sources and targets; optionally switch to another metric."""
        if metric is not None and metric.cch is not self.cch:
            self._attach(metric)
            return self
        if metric is not None:
            self.metric = metric
        if self._state in (_State.TARGET_PINNED, _State.TARGET_RUN):
            self._clear_distances_on_paths(self._target_node, self._target_end, self._forward_distance)
        elif self._state in (_State.SOURCE_PINNED, _State.SOURCE_RUN):
            self._clear_distances_on_paths(self._source_node, self._source_end, self._backward_distance)
        self._clear_start_list(
            self._source_node, self._source_end, self._in_forward_search_space, self._forward_distance
        )
        self._clear_start_list(
            self._target_node, self._target_end, self._in_backward_search_space, self._backward_distance
        )
        self._meeting_node = None
        self._state = _State.INITIALIZED
        return self

    def reset_source(self):
        """Drop the sources while keeping the pinned targets."""
        self._require(_State.TARGET_PINNED, _State.TARGET_RUN)
        self._clear_start_list(
            self._source_node, self._source_end, self._in_forward_search_space, self._forward_distance
        )
        self._clear_distances_on_paths(self._target_node, self._target_end, self._forward_distance)
        self._state = _State.TARGET_PINNED
        return self

    def reset_target(self):
        """Drop the targets while keeping the pinned sources."""
        self._require(_State.SOURCE_PINNED, _State.SOURCE_RUN)
        self._clear_start_list(
            self._target_node, self._target_end, self._in_backward_search_space, self._backward_distance
        )
        self._clear_distances_on_paths(self._source_node, self._source_end, self._backward_distance)
        self._state = _State.SOURCE_PINNED
        return self

    # ----- adding sources and targets --------------------------------------

    def _add_start(self, external, distance, distances, predecessors, in_space, nodes, ends):
        if not 0 <= external < self.cch.node_count:
            raise IndexError(f"node id {external} is out of bounds")
        s = self.cch.rank[external]
        if distances[s] != INF_WEIGHT:
            distances[s] = min(distances[s], distance)
            return
        nodes.append(s)
        distances[s] = distance
        predecessors[s] = None
        end = None
        for x in _ancestors(self.cch.elimination_tree_parent, s):
            if in_space[x]:
                end = x
                break
            in_space[x] = True
        ends.append(end)

    def add_source(self, source, distance=0):
        """Add ``source`` as a start node at the given initial distance."""
        self._require(_State.INITIALIZED, _State.TARGET_PINNED)
        self._add_start(
            source, distance, self._forward_distance, self._forward_predecessor,
            self._in_forward_search_space, self._source_node, self._source_end,
        )
        return self

    def add_target(self, target, distance=0):
        """Add ``target`` as an end node at the given final distance."""
        self._require(_State.INITIALIZED, _State.SOURCE_PINNED)
        self._add_start(
            target, distance, self._backward_distance, self._backward_predecessor,
            self._in_backward_search_space, self._target_node, self._target_end,
        )
        return self

    def _pin(self, externals, nodes, ends, in_space):
        node_count = self.cch.node_count
        parent = self.cch.elimination_tree_parent
        nodes.clear()
        ends.clear()
        for external in externals:
            if not 0 <= external < node_count:
                raise IndexError(f"node id {external} is out of bounds")
            node = self.cch.rank[external]
            end = None
            for x in _ancestors(parent, node):
                if in_space[x]:
                    end = x
                    break
                in_space[x] = True
            nodes.append(node)
            ends.append(end)

    def pin_targets(self, targets):
        """Fix a list of targets for repeated one-to-many queries."""
        self._require(_State.INITIALIZED)
        self._pin(targets, self._target_node, self._target_end, self._in_backward_search_space)
        self._state = _State.TARGET_PINNED
        return self

    def pin_sources(self, sources):
        """Fix a list of sources for repeated many-to-one queries."""
        self._require(_State.INITIALIZED)
        self._pin(sources, self._source_node, self._source_end, self._in_forward_search_space)
        self._state = _State.SOURCE_PINNED
        return self

    # ----- running ---------------------------------------------------------

    def _relax_outgoing(self, x, weight, distances, predecessors):
        first_out, head = self.cch.up_first_out, self.cch.up_head
        base = distances[x]
        for xy in range(first_out[x], first_out[x + 1]):
            y = head[xy]
            candidate = base + weight[xy]
            if candidate < distances[y]:
                distances[y] = candidate
                if predecessors is not None:
                    predecessors[y] = x

    def _relax_incoming(self, x, weight, distances):
        first_out, head = self.cch.up_first_out, self.cch.up_head
        for xy in range(first_out[x], first_out[x + 1]):
            candidate = distances[head[xy]] + weight[xy]
            if candidate < distances[x]:
                distances[x] = candidate

    def run(self):
        """Run a shortest-path query between the added sources and targets."""
        self._require(_State.INITIALIZED)
        parent = self.cch.elimination_tree_parent
        forward, backward = self.metric.forward, self.metric.backward

        for node, end in reversed(list(zip(self._source_node, self._source_end))):
            for x in _ancestors(parent, node, end):
                self._relax_outgoing(x, forward, self._forward_distance, self._forward_predecessor)

        self._meeting_node = None
        best = INF_WEIGHT
        for node, end in reversed(list(zip(self._target_node, self._target_end))):
            for x in _ancestors(parent, node, end):
                self._relax_outgoing(x, backward, self._backward_distance, self._backward_predecessor)
                if self._in_forward_search_space[x]:
                    length = self._forward_distance[x] + self._backward_distance[x]
                    if length < best:
                        best = length
                        self._meeting_node = x

        self._state = _State.RUN
        return self

    def _run_to_pinned(self, up_weight, down_weight, distances, up_nodes, up_ends, down_nodes, down_ends):
        parent = self.cch.elimination_tree_parent
        for node, end in reversed(list(zip(up_nodes, up_ends))):
            for x in _ancestors(parent, node, end):
                self._relax_outgoing(x, up_weight, distances, None)
        stack = [
            x
            for node, end in reversed(list(zip(down_nodes, down_ends)))
            for x in _ancestors(parent, node, end)
        ]
        for x in reversed(stack):
            self._relax_incoming(x, down_weight, distances)

    def run_to_pinned_targets(self):
        """Compute the distances from the added sources to all pinned targets."""
        self._require(_State.TARGET_PINNED)
        self._run_to_pinned(
            self.metric.forward, self.metric.backward, self._forward_distance,
            self._source_node, self._source_end, self._target_node, self._target_end,
        )
        self._state = _State.TARGET_RUN
        return self

    def run_to_pinned_sources(self):
        """Compute the distances from all pinned sources to the added targets."""
        self._require(_State.SOURCE_PINNED)
        self._run_to_pinned(
            self.metric.backward, self.metric.forward, self._backward_distance,
            self._target_node, self._target_end, self._source_node, self._source_end,
        )
        self._state = _State.SOURCE_RUN
        return self

    # ----- results ---------------------------------------------------------

    def get_distance(self):
        """Shortest distance found by :meth:`run`, or ``INF_WEIGHT`` if unreachable."""
        self._require(_State.RUN)
        if self._meeting_node is None:
            return INF_WEIGHT
        x = self._meeting_node
        return self._forward_distance[x] + self._backward_distance[x]

    def _path_start(self, predecessors):
        if self._meeting_node is None:
            return None
        x = self._meeting_node
        while predecessors[x] is not None:
            x = predecessors[x]
        return self.cch.order[x]

    def get_used_source(self):
        """The source at which the shortest path starts, or ``None``."""
        self._require(_State.RUN)
        return self._path_start(self._forward_predecessor)

    def get_used_target(self):
        """The target at which the shortest path ends, or ``None``."""
        self._require(_State.RUN)
        return self._path_start(self._backward_predecessor)

    def _unpack_arc(self, is_forward, x, y, arc, segments):
        cch, forward, backward = self.cch, self.metric.forward, self.metric.backward
        stack = [(is_forward, x, y, arc)]
        while stack:
            is_forward, x, y, arc = stack.pop()
            if is_forward:
                triangle = next(
                    (t for t in lower_triangles(cch, arc)
                     if forward[t.top_arc] == backward[t.bottom_arc] + forward[t.mid_arc]),
                    None,
                )
            else:
                triangle = next(
                    (t for t in lower_triangles(cch, arc)
                     if backward[t.top_arc] == forward[t.bottom_arc] + backward[t.mid_arc]),
                    None,
                )
            if triangle is None:
                segments.append((x, arc, True) if is_forward else (y, arc, False))
                continue
            bottom = triangle.bottom_node
            if is_forward:
                first = (False, bottom, x, triangle.bottom_arc)
                second = (True, bottom, y, triangle.mid_arc)
            else:
                first = (False, bottom, y, triangle.mid_arc)
                second = (True, bottom, x, triangle.bottom_arc)
            stack.append(second)
            stack.append(first)

    def _unpack_shortest_path(self):
        """Return the unpacked segments and the last (rank) node of the path."""
        if self._meeting_node is None:
            return [], None
        cch = self.cch
        segments = []

        up_path = [self._meeting_node]
        while self._forward_predecessor[up_path[-1]] is not None:
            up_path.append(self._forward_predecessor[up_path[-1]])
        for lower, upper in zip(reversed(up_path), reversed(up_path[:-1])):
            arc = find_arc_given_sorted_head(cch.up_first_out, cch.up_head, lower, upper)
            self._unpack_arc(True, lower, upper, arc, segments)

        x = self._meeting_node
        y = self._backward_predecessor[x]
        while y is not None:
            arc = find_arc_given_sorted_head(cch.up_first_out, cch.up_head, y, x)
            self._unpack_arc(False, y, x, arc, segments)
            x = y
            y = self._backward_predecessor[y]
        return segments, x

    def get_node_path(self):
        """Nodes of the shortest path, from source to target; empty if unreachable."""
        self._require(_State.RUN)
        segments, last = self._unpack_shortest_path()
        order = self.cch.order
        path = [order[node] for node, _, _ in segments]
        if last is not None:
            path.append(order[last])
        return path

    def _original_arc(self, arc, is_forward):
        if is_forward:
            candidates, weight = self.cch.forward_input_arcs[arc], self.metric.forward[arc]
        else:
            candidates, weight = self.cch.backward_input_arcs[arc], self.metric.backward[arc]
        input_weight = self.metric.input_weight
        for input_arc in candidates:
            if input_weight[input_arc] == weight:
                return input_arc
        raise RuntimeError(f"CCH arc {arc} has no input arc of matching weight")

    def get_arc_path(self):
        """Input arcs of the shortest path, from source to target."""
        self._require(_State.RUN)
        segments, _ = self._unpack_shortest_path()
        return [self._original_arc(arc, is_forward) for _, arc, is_forward in segments]

    def get_distances_to_targets(self):
        """Distances to the pinned targets, in pinning order."""
        self._require(_State.TARGET_RUN)
        return [self._forward_distance[t] for t in self._target_node]

    def get_distances_to_sources(self):
        """Distances from the pinned sources, in pinning order."""
        self._require(_State.SOURCE_RUN)
        return [self._backward_distance[s] for s in self._source_node]