"""Graphs, routes, edge costs and file utilities for line coverage planning."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "edge_costs",
    "elements",
    "geojson",
    "geometry",
    "graph",
    "lla",
    "osm",
    "route",
    "savings",
    "tempdir",
]