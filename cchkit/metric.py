"""Weights of a customizable contraction hierarchy and the ways to compute them."""

import heapq
import os
from concurrent.futures import ThreadPoolExecutor

from .cch import intermediate_triangles, lower_triangles, upper_triangles
from .graph_util import invert_vector

INF_WEIGHT = 2**31 - 1

_CHUNK_SIZE = 256


class CustomizableContractionHierarchyMetric:
    """Forward and backward weights of every CCH arc for one input weight vector.

    ``forward[a]`` is the weight of upward arc ``a`` traversed from its tail to
    its head, ``backward[a]`` the weight from its head to its tail.
    """

    def __init__(self, cch, input_weight=None):
        self.cch = cch
        self.forward = [INF_WEIGHT] * cch.cch_arc_count
        self.backward = [INF_WEIGHT] * cch.cch_arc_count
        self.input_weight = None
        if input_weight is not None:
            self._set_input_weight(input_weight)

    def _set_input_weight(self, input_weight):
        if len(input_weight) != self.cch.input_arc_count:
            raise ValueError(
                f"input weight vector has {len(input_weight)} entries "
                f"but the CCH has {self.cch.input_arc_count} input arcs"
            )
        self.input_weight = input_weight

    def reset(self, input_weight, cch=None):
        """Attach a new weight vector, and optionally a new CCH."""
        if cch is not None:
            if cch.cch_arc_count != len(self.forward):
                self.forward = [INF_WEIGHT] * cch.cch_arc_count
                self.backward = [INF_WEIGHT] * cch.cch_arc_count
            self.cch = cch
        self._set_input_weight(input_weight)
        return self

    def _require_input_weight(self):
        if self.input_weight is None:
            raise RuntimeError("metric must be connected to a weight vector")

    def _extract_initial_metric_of_arc(self, arc):
        weight = self.input_weight
        self.forward[arc] = min(
            (weight[i] for i in self.cch.forward_input_arcs[arc]), default=INF_WEIGHT
        )
        self.backward[arc] = min(
            (weight[i] for i in self.cch.backward_input_arcs[arc]), default=INF_WEIGHT
        )

    def _extract_initial_metric(self):
        for arc in range(self.cch.cch_arc_count):
            self._extract_initial_metric_of_arc(arc)

    def _relax_lower_triangle(self, bottom_arc, mid_arc, top_arc):
        forward, backward = self.forward, self.backward
        candidate = backward[bottom_arc] + forward[mid_arc]
        if candidate < forward[top_arc]:
            forward[top_arc] = candidate
        candidate = forward[bottom_arc] + backward[mid_arc]
        if candidate < backward[top_arc]:
            backward[top_arc] = candidate

    def customize(self):
        """Compute all arc weights from the input weights; return ``self``."""
        self._require_input_weight()
        self._extract_initial_metric()

        cch = self.cch
        up_first_out, up_head = cch.up_first_out, cch.up_head
        down_first_out, down_head, down_to_up = cch.down_first_out, cch.down_head, cch.down_to_up
        arc_id_cache = [0] * cch.node_count

        for x in range(cch.node_count):
            for xz in range(up_first_out[x], up_first_out[x + 1]):
                arc_id_cache[up_head[xz]] = xz
            for xy_down in range(down_first_out[x], down_first_out[x + 1]):
                yx = down_to_up[xy_down]
                y = down_head[xy_down]
                for yz in reversed(range(up_first_out[y], up_first_out[y + 1])):
                    z = up_head[yz]
                    if z <= x:
                        break
                    self._relax_lower_triangle(yx, yz, arc_id_cache[z])
        return self


class CustomizableContractionHierarchyParallelization:
    """Level structure of a CCH that lets customization run arcs of a level concurrently."""

    def __init__(self, cch):
        self.cch = cch
        node_count = cch.node_count

        lock = [cch.down_first_out[x + 1] - cch.down_first_out[x] for x in range(node_count)]
        self.node_level = [0] * node_count
        current = [x for x in range(node_count) if lock[x] == 0]
        level_count = 0
        while current:
            following = []
            for x in current:
                self.node_level[x] = level_count
                for xy in range(cch.up_first_out[x], cch.up_first_out[x + 1]):
                    y = cch.up_head[xy]
                    lock[y] -= 1
                    if lock[y] == 0:
                        following.append(y)
            level_count += 1
            current = following
        self.level_count = level_count

        nodes_by_level = sorted(range(node_count), key=lambda x: self.node_level[x])
        self.arcs_ordered_by_level = []
        arc_level = []
        for x in nodes_by_level:
            arcs = range(cch.up_first_out[x], cch.up_first_out[x + 1])
            self.arcs_ordered_by_level.extend(arcs)
            arc_level.extend([self.node_level[x]] * len(arcs))
        self.first_arc_of_level = invert_vector(arc_level, level_count)

    def _relaxation_candidates(self, metric, arcs):
        forward, backward = metric.forward, metric.backward
        return [
            (
                t.top_arc,
                backward[t.bottom_arc] + forward[t.mid_arc],
                forward[t.bottom_arc] + backward[t.mid_arc],
            )
            for arc in arcs
            for t in upper_triangles(self.cch, arc)
        ]

    def customize(self, metric, thread_count=None):
        """Customize ``metric`` using ``thread_count`` worker threads; return ``self``."""
        if metric.cch is not self.cch:
            raise ValueError("metric belongs to a different CCH")
        if thread_count is None:
            thread_count = os.cpu_count() or 1
        if thread_count < 1:
            raise ValueError("thread_count must be at least 1")
        metric._require_input_weight()

        if thread_count == 1:
            metric.customize()
            return self

        metric._extract_initial_metric()
        forward, backward = metric.forward, metric.backward
        with ThreadPoolExecutor(max_workers=thread_count) as pool:
            for begin, end in zip(self.first_arc_of_level, self.first_arc_of_level[1:]):
                level_arcs = self.arcs_ordered_by_level[begin:end]
                chunks = [
                    level_arcs[i:i + _CHUNK_SIZE] for i in range(0, len(level_arcs), _CHUNK_SIZE)
                ]
                results = pool.map(lambda chunk: self._relaxation_candidates(metric, chunk), chunks)
                for updates in results:
                    for top_arc, forward_candidate, backward_candidate in updates:
                        if forward_candidate < forward[top_arc]:
                            forward[top_arc] = forward_candidate
                        if backward_candidate < backward[top_arc]:
                            backward[top_arc] = backward_candidate
        return self


class _MinIDQueue:
    """A min-priority queue of ids in which each id is present at most once."""

    def __init__(self, id_count):
        self.id_count = id_count
        self._heap = []
        self._members = set()

    def push(self, item):
        if not 0 <= item < self.id_count:
            raise IndexError(f"id {item} is out of bounds")
        if item not in self._members:
            self._members.add(item)
            heapq.heappush(self._heap, item)

    def pop(self):
        item = heapq.heappop(self._heap)
        self._members.discard(item)
        return item

    def clear(self):
        self._heap.clear()
        self._members.clear()

    def __len__(self):
        return len(self._heap)


class CustomizableContractionHierarchyPartialCustomization:
    """Recomputes only the arc weights affected by changed input weights."""

    def __init__(self, cch):
        self.cch = cch
        self._queue = _MinIDQueue(cch.cch_arc_count)

    @property
    def pending_arc_count(self):
        """Number of CCH arcs waiting to be recomputed."""
        return len(self._queue)

    def reset(self, cch=None):
        """Forget all pending updates, and optionally attach another CCH."""
        if cch is not None and cch.cch_arc_count != self._queue.id_count:
            self._queue = _MinIDQueue(cch.cch_arc_count)
        else:
            self._queue.clear()
        if cch is not None:
            self.cch = cch
        return self

    def update_arc(self, input_arc):
        """Mark the weight of ``input_arc`` as changed."""
        arc = self.cch.input_arc_to_cch_arc[input_arc]
        if arc is not None:
            self._queue.push(arc)
        return self

    def customize(self, metric):
        """Bring ``metric`` up to date with its input weights; return ``self``."""
        if metric.cch is not self.cch:
            raise ValueError("metric belongs to a different CCH")
        metric._require_input_weight()

        cch = self.cch
        forward, backward = metric.forward, metric.backward
        queue = self._queue
        while queue:
            xy = queue.pop()
            old_forward, old_backward = forward[xy], backward[xy]

            metric._extract_initial_metric_of_arc(xy)
            for t in lower_triangles(cch, xy):
                metric._relax_lower_triangle(t.bottom_arc, t.mid_arc, t.top_arc)

            new_forward, new_backward = forward[xy], backward[xy]
            if old_forward == new_forward and old_backward == new_backward:
                continue

            for t in intermediate_triangles(cch, xy):
                if (
                    backward[t.bottom_arc] + old_forward == forward[t.top_arc]
                    or forward[t.bottom_arc] + old_backward == backward[t.top_arc]
                    or backward[t.bottom_arc] + new_forward < forward[t.top_arc]
                    or forward[t.bottom_arc] + new_backward < backward[t.top_arc]
                ):
                    queue.push(t.top_arc)
            for t in upper_triangles(cch, xy):
                if (
                    forward[t.mid_arc] + old_backward == forward[t.top_arc]
                    or backward[t.mid_arc] + old_forward == backward[t.top_arc]
                    or forward[t.mid_arc] + new_backward < forward[t.top_arc]
                    or backward[t.mid_arc] + new_forward < backward[t.top_arc]
                ):
                    queue.push(t.top_arc)
        return self