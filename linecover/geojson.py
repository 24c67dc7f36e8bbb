"""Writing graph edges as a GeoJSON feature list assigned to a script variable."""

from __future__ import annotations

import os
from typing import Iterable

from .config import Config, ConfigError
from .graph import Graph


def _fmt(value: float) -> str:
    return f"{value:.16g}"


def _feature(tail_lla, head_lla, required: bool) -> str:
    req = "true" if required else "false"
    return (
        '\t"type": "Feature",\n'
        f'\t"req": "{req}",\n'
        '\t"geometry": {\n'
        '\t"type": "LineString",\n'
        f'\t"coordinates": [[{_fmt(tail_lla[1])}, {_fmt(tail_lla[0])}], '
        f"[{_fmt(head_lla[1])}, {_fmt(head_lla[0])}]]\n}}\n}}"
    )


def _write(
    graph: Graph, path: str | os.PathLike[str], var_name: str, kinds: Iterable[bool]
) -> None:
    parts = [f"var {var_name} = ["]
    first = True
    for required in kinds:
        count = graph.m if required else graph.m_nr
        for index in range(count):
            tail_lla, head_lla = graph.vertex_lla_of_edge(index, required)
            parts.append("{\n" if first else ", {\n")
            first = False
            parts.append(_feature(tail_lla, head_lla, required))
    parts.append("];")
    with open(path, "w", encoding="utf-8") as out:
        out.write("".join(parts))


def write_geojson_required(graph: Graph, path: str | os.PathLike[str], var_name: str) -> None:
    """Write the required edges of ``graph`` as GeoJSON line strings."""
    _write(graph, path, var_name, (True,))


def write_geojson_all(graph: Graph, path: str | os.PathLike[str], var_name: str) -> None:
    """Write required then non-required edges of ``graph`` as GeoJSON line strings."""
    _write(graph, path, var_name, (True, False))


def write_geojson(config: Config, graph: Graph) -> None:
    """Write ``graph`` to the GeoJSON file named in ``config``.

    Raises ConfigError if GeoJSON output is switched off.
    """
    settings = config.write_geojson
    if not settings.write:
        raise ConfigError("writeGeoJSON is off in config")
    path = config.database.dir + settings.filename
    if settings.non_req_edges:
        write_geojson_all(graph, path, settings.var_name)
    else:
        write_geojson_required(graph, path, settings.var_name)