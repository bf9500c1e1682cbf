"""Helpers for graphs stored as forward-star arrays (``first_out`` / ``head``)."""

from bisect import bisect_left
from itertools import accumulate, pairwise


def invert_vector(v, element_count):
    """Build a ``first_out`` array from a sorted list of ids below ``element_count``.

    The result has ``element_count + 1`` entries; the positions of id ``i`` in
    ``v`` are ``range(result[i], result[i + 1])``.
    """
    counts = [0] * (element_count + 1)
    previous = 0
    for value in v:
        if not 0 <= value < element_count:
            raise ValueError(f"element {value} is out of range [0, {element_count})")
        if value < previous:
            raise ValueError("the vector to invert must be sorted")
        previous = value
        counts[value + 1] += 1
    return list(accumulate(counts))


def invert_inverse_vector(first_out):
    """Expand a ``first_out`` array back into the sorted list of ids it describes."""
    if not first_out:
        raise ValueError("first_out must contain at least one element")
    if first_out[0] != 0:
        raise ValueError("the first element of first_out must be 0")
    tail = []
    for node, (begin, end) in enumerate(pairwise(first_out)):
        if end < begin:
            raise ValueError("first_out must be non-decreasing")
        tail.extend([node] * (end - begin))
    return tail


def _check_nodes(first_out, x, y):
    node_count = len(first_out) - 1
    for node in (x, y):
        if not 0 <= node < node_count:
            raise IndexError(f"node id {node} is out of bounds")


def find_arc_or_none(first_out, head, x, y):
    """Return the first arc from ``x`` to ``y``, or ``None`` if there is none."""
    _check_nodes(first_out, x, y)
    for arc in range(first_out[x], first_out[x + 1]):
        if head[arc] == y:
            return arc
    return None


def find_arc(first_out, head, x, y):
    """Return the first arc from ``x`` to ``y``; raise ``LookupError`` if absent."""
    arc = find_arc_or_none(first_out, head, x, y)
    if arc is None:
        raise LookupError(f"there is no arc from {x} to {y}")
    return arc


def find_arc_or_none_given_sorted_head(first_out, head, x, y):
    """Binary-search the arc ``x -> y`` among arcs whose heads are sorted per node."""
    _check_nodes(first_out, x, y)
    begin, end = first_out[x], first_out[x + 1]
    pos = bisect_left(head, y, begin, end)
    if pos == end or head[pos] != y:
        return None
    return pos


def find_arc_given_sorted_head(first_out, head, x, y):
    """Like :func:`find_arc_or_none_given_sorted_head` but raise if absent."""
    arc = find_arc_or_none_given_sorted_head(first_out, head, x, y)
    if arc is None:
        raise LookupError(f"there is no arc from {x} to {y}")
    return arc


def convert_node_path_to_arc_path(first_out, head, path):
    """Turn a list of nodes into the list of arcs connecting them."""
    return [find_arc(first_out, head, x, y) for x, y in pairwise(path)]


def convert_arc_path_to_node_path(source, head, path):
    """Turn a list of arcs starting at ``source`` into the list of visited nodes."""
    if not path:
        return []
    return [source, *(head[arc] for arc in path)]


def _invert_permutation(p):
    inverse = [0] * len(p)
    for position, element in enumerate(p):
        inverse[element] = position
    return inverse


def compute_sort_permutation_first_by_left_then_by_right(left, right):
    """Return ``p`` so that ``[(left[i], right[i]) for i in p]`` is sorted (stably)."""
    if len(left) != len(right):
        raise ValueError("left and right must have the same length")
    return sorted(range(len(left)), key=lambda i: (left[i], right[i]))


def compute_inverse_sort_permutation_first_by_left_then_by_right(left, right):
    """Return the inverse of the stable lexicographic sort permutation."""
    return _invert_permutation(compute_sort_permutation_first_by_left_then_by_right(left, right))


def compute_sort_permutation_first_by_tail_then_by_head(tail, head):
    """Sort permutation ordering arcs by tail, then by head."""
    return compute_sort_permutation_first_by_left_then_by_right(tail, head)


def compute_inverse_sort_permutation_first_by_tail_then_by_head(tail, head):
    """Inverse of the permutation ordering arcs by tail, then by head."""
    return compute_inverse_sort_permutation_first_by_left_then_by_right(tail, head)