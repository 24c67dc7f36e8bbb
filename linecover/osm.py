"""Conversion of OpenStreetMap JSON exports into node and edge files."""

from __future__ import annotations

import json
import logging
import os

_log = logging.getLogger(__name__)


def osm_json_to_graph_files(
    osm_path: str | os.PathLike[str],
    node_path: str | os.PathLike[str],
    edge_path: str | os.PathLike[str],
) -> tuple[int, int]:
    """Write ``id lat lon`` node lines and ``tail head`` edge lines from an OSM export.

    Each way contributes one edge per pair of consecutive nodes. Returns the
    numbers of nodes and edges written.
    """
    with open(osm_path, encoding="utf-8") as src:
        osm_data = json.load(src)
    copyright_note = osm_data.get("osm3s", {}).get("copyright") if isinstance(
        osm_data, dict
    ) else None
    if copyright_note is not None:
        _log.info("%s", copyright_note)
    elements = osm_data.get("elements", []) if isinstance(osm_data, dict) else []

    num_nodes = num_edges = 0
    with open(node_path, "w", encoding="utf-8") as node_file, open(
        edge_path, "w", encoding="utf-8"
    ) as edge_file:
        for element in elements:
            kind = element.get("type")
            if kind == "node":
                node_file.write(
                    f"{json.dumps(element['id'])} {json.dumps(element['lat'])} "
                    f"{json.dumps(element['lon'])}\n"
                )
                num_nodes += 1
            elif kind == "way":
                nodes = element.get("nodes", [])
                for prev, node in zip(nodes, nodes[1:]):
                    edge_file.write(f"{json.dumps(prev)} {json.dumps(node)}\n")
                    num_edges += 1
            else:
                _log.warning("Unhandled element type: %s", json.dumps(kind))
    return num_nodes, num_edges