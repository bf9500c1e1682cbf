# cchkit

Shortest paths on road networks with *customizable contraction hierarchies*
(CCH), plus a few helpers that go with them: nearest-node lookup by
geographic position, graph export to text formats and seeded random test
data. The package is pure Python and has no dependencies.

Building a CCH needs only the graph's structure and a node order. Any set
of arc weights can then be applied ("customized"), and queries answer
distances and paths for those weights.

## Installation

```
pip install cchkit
```

To run the test suite:

```
pip install "cchkit[test]"
pytest
```

## Graphs

Graphs are given as arc lists: `tail[i]` and `head[i]` are the end nodes of
arc `i`, and nodes are numbered `0 .. node_count - 1`. Some helpers use the
compact "first out" form, in which the arcs leaving node `x` are
`first_out[x]` up to `first_out[x + 1]`. `cchkit.graph_util` converts
between the two forms:

```python
from cchkit.graph_util import invert_vector, invert_inverse_vector

tail = [0, 0, 1, 2]
first_out = invert_vector(tail, 4)              # [0, 2, 3, 4, 4]
assert invert_inverse_vector(first_out) == tail
```

It also offers arc lookup (`find_arc` raises `LookupError` when the arc is
missing, `find_arc_or_none` returns `None`, and both have `_given_sorted_head`
variants that binary-search), conversion between node paths and arc paths,
and stable sort permutations by tail then head (and their inverses).

`cchkit.id_mapper` maps the selected positions of a boolean list to a dense
range: `LocalIDMapper(bits).to_local(i)` and `IDMapper(bits).to_global(j)`.

## Building and customizing a CCH

```python
from cchkit.cch import CustomizableContractionHierarchy
from cchkit.metric import CustomizableContractionHierarchyMetric
from cchkit.query import CustomizableContractionHierarchyQuery

order = [0, 1, 2, 3]          # order[r] is the node of rank r
tail = [0, 0, 1, 2]
head = [1, 2, 3, 3]
weight = [1, 10, 1, 10]

cch = CustomizableContractionHierarchy(order, tail, head)
metric = CustomizableContractionHierarchyMetric(cch, weight)
metric.customize()

query = CustomizableContractionHierarchyQuery(metric)
query.add_source(0).add_target(3).run()
print(query.get_distance())   # 2
print(query.get_node_path())  # [0, 1, 3]
print(query.get_arc_path())   # [0, 2]
```

The constructor also accepts `log_message`, a callable that receives
progress messages, and `filter_always_inf_arcs`, which drops arcs that can
never carry a finite weight. The order must be a permutation of the node
ids, otherwise `ValueError` is raised.

When no path exists, `get_distance()` returns `cchkit.metric.INF_WEIGHT`
(2^31 - 1), `get_used_source()` and `get_used_target()` return `None`, and
both paths are empty. Calling a query method in the wrong state (for
example `get_distance()` before `run()`) raises `RuntimeError`.

The triangle enumerators `upper_triangles`, `intermediate_triangles` and
`lower_triangles` in `cchkit.cch` are available for custom algorithms on
the CCH.

### Other ways to customize

* `CustomizableContractionHierarchyParallelization(cch).customize(metric, thread_count)`
  customizes level by level using a thread pool; `thread_count` defaults to
  the number of CPUs, and `1` falls back to `metric.customize()`.
* `CustomizableContractionHierarchyPartialCustomization(cch)` recomputes only
  what changed: change entries of the metric's input weights, call
  `update_arc(input_arc)` for each changed arc, then `customize(metric)`.
* `metric.reset(input_weight, cch)` reattaches a metric to new weights, and
  optionally to another CCH.

### One-to-many and many-to-one queries

```python
query.reset()
query.pin_targets([3, 1])
query.add_source(0).run_to_pinned_targets()
print(query.get_distances_to_targets())   # [2, 1]

query.reset_source().add_source(2).run_to_pinned_targets()
```

`pin_sources`, `reset_target`, `run_to_pinned_sources` and
`get_distances_to_sources` do the same in the other direction.

## Nearest node by position

```python
from cchkit.geo_position_to_node import GeoPositionToNode, geo_dist

index = GeoPositionToNode(latitude=[49.0, 49.01], longitude=[8.40, 8.41])
hit = index.find_nearest_neighbor_within_radius(49.001, 8.401, 500.0)
print(hit.id, hit.distance)       # None is returned if nothing is in range
nearby = index.find_all_nodes_within_radius(49.0, 8.4, 2000.0)
print(geo_dist(49.014139, 8.404696, 49.014192, 8.404806))  # about 10 metres
```

Distances are great-circle distances in metres.

## Export and test data

* `cchkit.graph_export`: `graph_to_dot`, `graph_to_svg` and
  `graph_to_dimacs` return a first-out graph as Graphviz, SVG or DIMACS
  shortest-path text.
* `cchkit.generate`: `constant_vector`, `random_node_list`,
  `random_source_times` and `random_test_queries` produce seeded lists of
  benchmark data.
* `cchkit.vector_text`: `parse_value`, `format_value`, `escape_string` and
  `unescape_string` convert between single text lines and typed values
  (`int8` … `uint64`, `float32`, `float64`, `string`), with range checks.
* `cchkit.data_source`: `FileDataSource` reads a file in chunks of a
  requested size and can be used in a `with` block; it offers `read`,
  `size` and `rewind`.

## What the package does not do

* It installs no command-line programs; every feature is a library call,
  and writing results to files is left to the caller.
* It does not read or write binary vector files; graphs and weights are
  passed in as Python lists.
* It does not build a plain contraction hierarchy, run Dijkstra or A*, or
  load OpenStreetMap data.