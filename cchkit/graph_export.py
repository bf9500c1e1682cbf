"""Render forward-star graphs as Graphviz dot, SVG and DIMACS shortest-path text."""

import math
from itertools import pairwise

from .graph_util import invert_inverse_vector

_SVG_SIZE = 300
_SVG_HEADER = (
    '<svg xmlns="http://www.w3.org/2000/svg" '
    'xmlns:xlink="http://www.w3.org/1999/xlink" viewBox="0 0 300 300">\n'
)


def _arcs(first_out):
    for x, (begin, end) in enumerate(pairwise(first_out)):
        for xy in range(begin, end):
            yield x, xy


def graph_to_dot(first_out, head, weight):
    """Return the graph as a Graphviz digraph with arc weights as labels."""
    lines = [f'{x} -> {head[xy]}[label="{weight[xy]}"];\n' for x, xy in _arcs(first_out)]
    return "digraph G{" + "".join(lines) + "}\n"


def _normalize(values):
    if not values:
        raise ValueError("coordinate vectors must not be empty")
    low, high = min(values), max(values)
    span = high - low
    if span == 0:
        return [math.nan] * len(values)
    return [(v - low) * _SVG_SIZE / span for v in values]


def _num(value):
    return f"{value:.6g}"


def graph_to_svg(first_out, head, latitude, longitude):
    """Return the graph as an SVG drawing scaled to a 300 by 300 view box."""
    y = _normalize(latitude)
    x = _normalize(longitude)
    lines = [
        f'<line x1="{_num(x[a])}" y1="{_num(_SVG_SIZE - y[a])}" '
        f'x2="{_num(x[b])}" y2="{_num(_SVG_SIZE - y[b])}" style="stroke:#000000;"/>\n'
        for a, arc in _arcs(first_out)
        for b in (head[arc],)
    ]
    return _SVG_HEADER + "".join(lines) + "</svg>\n"


def graph_to_dimacs(first_out, head, weight):
    """Return the graph in the DIMACS shortest-path format with 1-based node ids."""
    if not first_out:
        raise ValueError("first_out must not be empty")
    node_count = len(first_out) - 1
    arc_count = len(head)
    if first_out[0] != 0:
        raise ValueError("The first element of first out must be 0.")
    if first_out[-1] != arc_count:
        raise ValueError("The last element of first out must be the arc count.")
    if not head:
        raise ValueError("The head vector must not be empty.")
    if max(head) >= node_count:
        raise ValueError("The head vector contains an out-of-bounds node id.")
    if len(weight) != arc_count:
        raise ValueError("The weight vector must be as long as the number of arcs")
    tail = invert_inverse_vector(first_out)
    lines = [f"p sp {node_count} {arc_count}\n"]
    lines.extend(f"a {t + 1} {h + 1} {w}\n" for t, h, w in zip(tail, head, weight))
    return "".join(lines)