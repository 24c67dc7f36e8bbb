# linecover

Building blocks for line coverage planning: covering a set of required
edges (road segments, survey lines) with a route whose cost may be distance,
travel time in a steady wind, or travel time with circular-arc turns.

## Installation

```
pip install linecover
```

## Modules

- `linecover.geometry` – `Vec2d` for planar vector arithmetic, `is_near_zero`,
  and numeric constants such as `EPS`.
- `linecover.elements` – `Vertex` (ID, latitude/longitude/altitude, planar
  position) and `Edge`, which carries service and deadhead costs and demands
  in both directions. `Edge.compute_cost` sets every cost to the Euclidean
  length; `Edge.compute_travel_time_ramp` uses a trapezoidal speed profile;
  `Edge.reverse` swaps the endpoints together with the forward and reverse
  costs and demands.
- `linecover.edge_costs` – the `EdgeCost` interface, `EdgeCostTravelTime`
  (travel time under a constant wind, giving asymmetric costs) and
  `EdgeCostCircularTurns`, which also computes the time to turn from one edge
  onto the next along a circular arc and returns the turn geometry as a
  `CircularTurn`. Edges that do not join, or have zero length, raise
  `ValueError`.
- `linecover.lla` – `LLAtoXY` converts latitude/longitude/altitude to metres
  east/north of a reference point and back; `convert_file` rewrites a file of
  `id lat lon` lines as `id x y lat lon z`, taking the first node as origin.
  `deg_to_rad` and `rad_to_deg` are also provided.
- `linecover.graph` – `Graph` holds vertices, required and non-required
  edges, one or several depots, and cost helpers. Vertices are looked up by
  ID (`vertex_index`, raising `KeyError` when absent) or by index.
  `GraphEdge` refers to one traversal of an edge (required or not, reversed
  or not, serviced or deadheaded).
- `linecover.savings` – `SavingsMerger`, an abstract merge-by-savings loop:
  subclasses supply `compute_savings`, `merge`, `is_tour_empty` and
  `num_routes`, and `run` merges pairs largest saving first. `RouteSavings`
  and `MEMRoute` hold the data such subclasses work with.
- `linecover.route` – `Route`, an ordered list of serviced and deadheaded
  edges. `ShortestPaths` computes deadheading shortest paths (Dijkstra) on a
  graph; with it a route can `connect_route`, shortcut deadheading runs with
  `route_improvement`, and improve itself with `two_opt`. Routes can be
  written as data lines, edge coordinates, waypoints or KML, and re-costed
  with any `EdgeCost` through `cost_compare`.
- `linecover.config` – `Config` reads a YAML problem description with
  `parse`, raising `ConfigError` when the file, the database directory or a
  setting is missing or malformed. `DepotMode` and `DepotsMode` name the
  depot choices. `write_config` writes the YAML back with any data directory,
  capacity or depot-count overrides applied; `copy_config` copies the file.
- `linecover.geojson` – `write_geojson_required`, `write_geojson_all` and
  `write_geojson` write a graph's edges as GeoJSON line strings assigned to a
  script variable, for use in web maps.
- `linecover.osm` – `osm_json_to_graph_files` turns an OpenStreetMap JSON
  export into a node file (`id lat lon`) and an edge file (`tail head`, one
  line per consecutive pair of nodes in each way).
- `linecover.tempdir` – `create_temp_dir` makes a fresh, randomly named
  directory in the system temporary directory.

## Example

```python
from linecover.elements import Vertex
from linecover.graph import Graph

a, b, c = Vertex(1), Vertex(2), Vertex(3)
a.set_xy(0, 0)
b.set_xy(3, 0)
c.set_xy(3, 4)

g = Graph()
for v in (a, b, c):
    g.add_vertex(v)
g.add_edge(1, 2, True)
g.add_edge(2, 3, True)
g.set_default_edge_costs()

print(g.length())        # 7.0
print(g.total_cost())    # 7.0
g.set_mean_depot()
print(g.depot_id)
```

## What the package does not do

- It has no command-line program; everything is used from Python.
- It contains no complete coverage solvers. It supplies the graph, cost
  models, the savings-merge loop and route improvement that a solver is built
  from.
- It does not read node and edge files into a `Graph`. The files written by
  `osm_json_to_graph_files` and `LLAtoXY.convert_file` must be loaded by your
  own code; graphs are built with `Graph.add_vertex`, `Graph.add_edge` and
  `Graph.add_edges`.
- It does not plot graphs or routes.

## Running the tests

```
pip install linecover[test]
pytest
```