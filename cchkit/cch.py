"""Customizable contraction hierarchy: the metric-independent preprocessing."""

import time
from collections import namedtuple
from itertools import chain, compress

from .graph_util import (
    compute_sort_permutation_first_by_tail_then_by_head,
    find_arc_given_sorted_head,
    invert_vector,
)
from .id_mapper import LocalIDMapper

_MAX_ARC_COUNT = 2**32 - 1

Triangle = namedtuple(
    "Triangle",
    ["bottom_arc", "mid_arc", "top_arc", "bottom_node", "mid_node", "top_node"],
)
Triangle.__doc__ = """A triangle x < y < z of the upward graph.

The bottom arc is x->y, the mid arc is x->z and the top arc is y->z.
"""


def compute_chordal_supergraph(node_count, tail, head):
    """Eliminate nodes in id order and return ``(arcs, upper_treewidth_bound)``.

    Only input arcs with ``tail < head`` are considered. ``arcs`` is the list of
    upward arcs ``(x, y)`` of the chordal supergraph, sorted by tail and then by
    head; the bound is the largest upward degree encountered.
    """
    if len(tail) != len(head):
        raise ValueError("tail and head must have the same length")
    neighbours = [set() for _ in range(node_count)]
    for x, y in zip(tail, head):
        if x < y:
            neighbours[x].add(y)
    upward = [sorted(n) for n in neighbours]

    arcs = []
    max_upward_degree = 0
    for node, up in enumerate(upward):
        if not up:
            continue
        lowest = up[0]
        upward[lowest] = sorted(set(up[1:]).union(upward[lowest]))
        arcs.extend((node, neighbour) for neighbour in up)
        max_upward_degree = max(max_upward_degree, len(up))
    return arcs, max_upward_degree


def _matching_positions(a_begin, a_end, a_keys, b_begin, b_end, b_keys):
    """Yield index pairs of equal keys in two ascending key ranges."""
    i, j = a_begin, b_begin
    while i < a_end and j < b_end:
        a, b = a_keys[i], b_keys[j]
        if a < b:
            i += 1
        elif a > b:
            j += 1
        else:
            yield i, j
            i += 1
            j += 1


def upper_triangles(cch, arc):
    """Yield the triangles in which ``arc`` is the bottom arc."""
    x, y = cch.up_tail[arc], cch.up_head[arc]
    first_out, up_head = cch.up_first_out, cch.up_head
    for x_arc, y_arc in _matching_positions(
        arc + 1, first_out[x + 1], up_head, first_out[y], first_out[y + 1], up_head
    ):
        yield Triangle(arc, x_arc, y_arc, x, y, up_head[x_arc])


def intermediate_triangles(cch, arc):
    """Yield the triangles in which ``arc`` is the mid arc."""
    x, y = cch.up_tail[arc], cch.up_head[arc]
    for x_arc, y_down in _matching_positions(
        cch.up_first_out[x], arc, cch.up_head,
        cch.down_first_out[y], cch.down_first_out[y + 1], cch.down_head,
    ):
        yield Triangle(x_arc, arc, cch.down_to_up[y_down], x, cch.up_head[x_arc], y)


def lower_triangles(cch, arc):
    """Yield the triangles in which ``arc`` is the top arc."""
    x, y = cch.up_tail[arc], cch.up_head[arc]
    for x_down, y_down in _matching_positions(
        cch.down_first_out[x], cch.down_first_out[x + 1], cch.down_head,
        cch.down_first_out[y], cch.down_first_out[y + 1], cch.down_head,
    ):
        yield Triangle(
            cch.down_to_up[x_down], cch.down_to_up[y_down], arc,
            cch.down_head[x_down], x, y,
        )


class _Stopwatch:
    def __init__(self):
        self._start = time.perf_counter()

    @property
    def musec(self):
        return int((time.perf_counter() - self._start) * 1_000_000)


class CustomizableContractionHierarchy:
    """The metric-independent part of a CCH built from a node order and an arc list.

    Nodes are internally renumbered by their rank in ``order``. Upward arcs are
    stored as a forward star (``up_first_out``, ``up_head``, ``up_tail``), the
    same arcs seen from their head as ``down_first_out``, ``down_head`` and
    ``down_to_up``. Input arcs that are loops map to ``None``.
    """

    def __init__(self, order, tail, head, log_message=None, filter_always_inf_arcs=False):
        self.order = list(order)
        node_count = len(self.order)
        tail = list(tail)
        head = list(head)

        log = log_message if log_message is not None else (lambda message: None)
        log("Building CCH")
        log(f"Input graph has {node_count} nodes and {len(tail)} arcs")

        rank = [None] * node_count
        for position, node in enumerate(self.order):
            if not 0 <= node < node_count or rank[node] is not None:
                raise ValueError("order must be a permutation of the node ids")
            rank[node] = position
        self.rank = rank

        if len(tail) != len(head):
            raise ValueError("tail and head must have the same length")
        for node in chain(tail, head):
            if not 0 <= node < node_count:
                raise ValueError(f"node id {node} is out of bounds")

        log("Start reordering nodes according to order")
        watch = _Stopwatch()
        rank_tail = [rank[x] for x in tail]
        rank_head = [rank[x] for x in head]
        log(f"Finished reordering nodes, needed {watch.musec}musec")

        log("Start building chordal supergraph")
        watch = _Stopwatch()
        symmetric = sorted({(min(a, b), max(a, b)) for a, b in zip(rank_tail, rank_head) if a != b})
        arcs, self.upper_treewidth_bound = compute_chordal_supergraph(
            node_count, [a for a, _ in symmetric], [b for _, b in symmetric]
        )
        if len(arcs) > _MAX_ARC_COUNT:
            log("CCH Construction aborted because chordal supergraph contains 2^32 or more arcs")
            raise OverflowError("CCH must contain at most 2^32-1 arcs")
        log(f"The treewidth of the input graph is bounded by {self.upper_treewidth_bound}")
        self.up_tail = [x for x, _ in arcs]
        self.up_head = [y for _, y in arcs]
        self.up_first_out = invert_vector(self.up_tail, node_count)
        log(f"Finished building chordal supergraph, needed {watch.musec}musec")
        log(f"Chordal supergraph contains {len(arcs)} arcs")

        log("Start computing mapping from input arcs to CCH arcs")
        watch = _Stopwatch()
        self.input_arc_to_cch_arc = []
        self.is_input_arc_upward = []
        for t, h in zip(rank_tail, rank_head):
            if t == h:
                self.input_arc_to_cch_arc.append(None)
                self.is_input_arc_upward.append(False)
            else:
                arc = find_arc_given_sorted_head(self.up_first_out, self.up_head, min(t, h), max(t, h))
                self.input_arc_to_cch_arc.append(arc)
                self.is_input_arc_upward.append(t < h)
        log(f"Finished computing mapping, needed {watch.musec}musec")

        log("Start computing elimination tree")
        watch = _Stopwatch()
        self.elimination_tree_parent = [
            self.up_head[self.up_first_out[x]] if self.up_first_out[x] != self.up_first_out[x + 1] else None
            for x in range(node_count)
        ]
        log(f"Finished computing elimination tree, needed {watch.musec}musec")

        if log_message is not None and node_count:
            self._log_search_space_statistics(log)

        if filter_always_inf_arcs:
            self._filter_always_inf_arcs(log)
        else:
            log("Not filtering upward arcs")

        log("Start computing downward arcs")
        watch = _Stopwatch()
        self.down_to_up = compute_sort_permutation_first_by_tail_then_by_head(self.up_head, self.up_tail)
        self.down_head = [self.up_tail[a] for a in self.down_to_up]
        self.down_first_out = invert_vector([self.up_head[a] for a in self.down_to_up], node_count)
        log(f"Finished computing downward arcs, needed {watch.musec}musec")

        log("Start computing mapping from CCH arcs to input arcs")
        watch = _Stopwatch()
        self.forward_input_arcs = [[] for _ in range(self.cch_arc_count)]
        self.backward_input_arcs = [[] for _ in range(self.cch_arc_count)]
        for input_arc, (arc, upward) in enumerate(zip(self.input_arc_to_cch_arc, self.is_input_arc_upward)):
            if arc is not None:
                (self.forward_input_arcs if upward else self.backward_input_arcs)[arc].append(input_arc)
        with_input = sum(1 for f, b in zip(self.forward_input_arcs, self.backward_input_arcs) if f or b)
        with_extra = sum(
            1 for f, b in zip(self.forward_input_arcs, self.backward_input_arcs) if len(f) > 1 or len(b) > 1
        )
        log(f"Finished computing mapping, needed {watch.musec}musec")
        log(f"{with_input} cch arcs have an input arc")
        log(f"{with_extra} cch arcs have two or more input arcs")

    @property
    def node_count(self):
        return len(self.order)

    @property
    def input_arc_count(self):
        return len(self.input_arc_to_cch_arc)

    @property
    def cch_arc_count(self):
        return len(self.up_head)

    def _log_search_space_statistics(self, log):
        node_count = self.node_count
        nodes_in_search_space = [0] * node_count
        arcs_in_search_space = [0] * node_count
        for x in reversed(range(node_count)):
            parent = self.elimination_tree_parent[x]
            if parent is None:
                nodes_in_search_space[x] = 1
            else:
                nodes_in_search_space[x] = 1 + nodes_in_search_space[parent]
                arcs_in_search_space[x] = (
                    self.up_first_out[x + 1] - self.up_first_out[x] + arcs_in_search_space[parent]
                )
        log(f"The average number of nodes in a search space is {sum(nodes_in_search_space) // node_count}")
        log(f"The maximum number of nodes in a search space is {max(nodes_in_search_space)}")
        log(f"The average number of arcs in a search space is {sum(arcs_in_search_space) // node_count}")
        log(f"The maximum number of arcs in a search space is {max(arcs_in_search_space)}")

    def _filter_always_inf_arcs(self, log):
        log("Start filtering upward arcs")
        watch = _Stopwatch()
        arc_count = self.cch_arc_count
        forward = [False] * arc_count
        backward = [False] * arc_count
        for arc, upward in zip(self.input_arc_to_cch_arc, self.is_input_arc_upward):
            if arc is not None:
                (forward if upward else backward)[arc] = True

        triangle_count = 0
        for arc in range(arc_count):
            for t in upper_triangles(self, arc):
                if not forward[t.top_arc] and backward[t.bottom_arc] and forward[t.mid_arc]:
                    forward[t.top_arc] = True
                if not backward[t.top_arc] and forward[t.bottom_arc] and backward[t.mid_arc]:
                    backward[t.top_arc] = True
                triangle_count += 1

        keep = [f or b for f, b in zip(forward, backward)]
        mapper = LocalIDMapper(keep)
        self.up_head = list(compress(self.up_head, keep))
        self.up_tail = list(compress(self.up_tail, keep))
        self.up_first_out = invert_vector(self.up_tail, self.node_count)
        self.input_arc_to_cch_arc = [
            None if arc is None else mapper.to_local(arc) for arc in self.input_arc_to_cch_arc
        ]
        log(f"Finished filtering upward arcs, needed {watch.musec}musec")
        log(f"The number of arcs decreased from {arc_count} to {mapper.local_id_count}")
        log(
            f"The number of triangles before filtering was {triangle_count}. "
            "(The value after filtering was not determined.)"
        )