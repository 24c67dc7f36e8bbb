"""Problem configuration read from a YAML file."""

from __future__ import annotations

import logging
import math
import os
import shutil
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import yaml

_log = logging.getLogger(__name__)

_TRUE_WORDS = {"true", "yes", "on", "y"}
_FALSE_WORDS = {"false", "no", "off", "n"}


class ConfigError(Exception):
    """Raised when a configuration file is missing, malformed or inconsistent."""


class DepotMode(Enum):
    """How the single depot of a route is chosen."""

    MEAN = "mean"
    CUSTOM = "custom"
    NONE = "none"


class DepotsMode(Enum):
    """How several depots are chosen."""

    CLUSTER_AUTO = "cluster_auto"
    CLUSTER = "cluster"
    USER = "user"


@dataclass
class Database:
    path: str = ""
    data_dir: str = ""
    dir: str = ""
    arg: bool = False


@dataclass
class Filenames:
    map_json: str = ""
    nodes_ll: str = ""
    nodes_data: str = ""
    req_edges: str = ""
    nonreq_edges: str = ""


@dataclass
class InputGraph:
    lla: bool = True
    costs: bool = False


@dataclass
class PlotInputGraph:
    plot: bool = False
    plot_nreq_edges: bool = False
    name: str = ""


@dataclass
class WriteGeoJSONSettings:
    write: bool = False
    non_req_edges: bool = False
    filename: str = ""
    var_name: str = ""


@dataclass
class TravelTime:
    service_speed: float = 0.0
    deadhead_speed: float = 0.0
    wind_speed: float = 0.0
    wind_dir: float = 0.0


@dataclass
class TravelTimeCircTurns:
    service_speed: float = 0.0
    deadhead_speed: float = 0.0
    wind_speed: float = 0.0
    wind_dir: float = 0.0
    angular_vel: float = 0.0
    acc: float = 0.0
    delta: float = 0.0


@dataclass
class RouteOutput:
    plot: bool = False
    kml: bool = False
    data: bool = False
    edge_data: bool = False
    geojson: bool = False
    agg_results: bool = False
    append: bool = False
    clear_dir: bool = False


def _node(root: Any, *keys: str) -> Any:
    node = root
    for key in keys:
        if not isinstance(node, dict) or key not in node:
            raise ConfigError(f"missing config key: {'.'.join(keys)}")
        node = node[key]
    return node


def _as_str(root: Any, *keys: str) -> str:
    value = _node(root, *keys)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None or isinstance(value, (dict, list)):
        raise ConfigError(f"config key {'.'.join(keys)} is not a scalar")
    return str(value)


def _as_bool(root: Any, *keys: str) -> bool:
    value = _node(root, *keys)
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise ConfigError(f"config key {'.'.join(keys)} is not a boolean")


def _as_float(root: Any, *keys: str) -> float:
    value = _node(root, *keys)
    if isinstance(value, bool):
        raise ConfigError(f"config key {'.'.join(keys)} is not a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ConfigError(f"config key {'.'.join(keys)} is not a number")


def _to_count(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"config key {name} is not a non-negative integer")
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError:
            raise ConfigError(f"config key {name} is not a non-negative integer") from None
    if not isinstance(value, int) or value < 0:
        raise ConfigError(f"config key {name} is not a non-negative integer")
    return value


def _as_count(root: Any, *keys: str) -> int:
    return _to_count(_node(root, *keys), ".".join(keys))


class Config:
    """Settings of a line coverage run, with optional command-line overrides."""

    def __init__(
        self,
        config_file: str = "",
        data_dir: Optional[str] = None,
        capacity: Optional[float] = None,
        num_depots: Optional[int] = None,
    ) -> None:
        self.config_file = str(config_file)
        self.database = Database()
        self.sol_dir = ""
        self.filenames = Filenames()
        self.input_graph = InputGraph()
        self.convert_osm_graph = False
        self.add_pairwise_nonreq_edges = False
        self.plot_input_graph = PlotInputGraph()
        self.write_geojson = WriteGeoJSONSettings()
        self.problem = ""
        self.solver_slc = ""
        self.solver_mlc = ""
        self.solver_mlc_md = ""
        self.use_2opt = False
        self.ilp_time_limit = 0.0
        self.capacity = 0.0
        self.cap_arg = False
        self.cost_function = ""
        self.travel_time = TravelTime()
        self.travel_time_circ_turns = TravelTimeCircTurns()
        self.route_output = RouteOutput()
        self.depot_mode: Optional[DepotMode] = None
        self.depots_mode: Optional[DepotsMode] = None
        self.depot_id = 0
        self.depot_ids: list[int] = []
        self.num_depots: Optional[int] = None
        self.num_runs: Optional[int] = None
        self.use_seed = False
        self.seed = 0.0
        self.nd_arg = False
        if data_dir is not None:
            self.database.data_dir = data_dir
            self.database.arg = True
        if capacity is not None:
            self.capacity = capacity
            self.cap_arg = True
        if num_depots is not None:
            self.num_depots = num_depots
            self.nd_arg = True

    def _load(self) -> dict:
        try:
            with open(self.config_file, encoding="utf-8") as handle:
                doc = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse config file {self.config_file}: {exc}") from exc
        if not isinstance(doc, dict):
            raise ConfigError(f"config file {self.config_file} does not hold a mapping")
        return doc

    def _apply_overrides(self, doc: dict) -> None:
        if self.database.arg:
            database = doc.setdefault("database", {})
            if isinstance(database, dict):
                database["data_dir"] = self.database.data_dir
        if self.cap_arg:
            doc["capacity"] = self.capacity
        if self.nd_arg:
            depots = doc.setdefault("depots", {})
            if isinstance(depots, dict):
                depots["num_depts"] = self.num_depots

    def copy_config(self, path: str | os.PathLike[str]) -> None:
        """Copy the configuration file to ``path``, overwriting it."""
        shutil.copyfile(self.config_file, path)

    def write_config(self, path: str | os.PathLike[str]) -> None:
        """Write the configuration, with overrides applied, as YAML to ``path``."""
        doc = self._load()
        self._apply_overrides(doc)
        with open(path, "w", encoding="utf-8") as out:
            yaml.safe_dump(doc, out, sort_keys=False)

    def parse(self) -> None:
        """Read every setting from the configuration file.

        Raises ConfigError if the file or the database directory is missing,
        or a setting is absent or of the wrong kind.
        """
        _log.info("Using config file: %s", self.config_file)
        if not os.path.exists(self.config_file):
            raise ConfigError(f"could not find config file {self.config_file}")
        doc = self._load()
        self._apply_overrides(doc)

        self.problem = _as_str(doc, "problem")

        if self.problem in ("slc", "mlc"):
            mode = _as_str(doc, "depot", "mode")
            try:
                self.depot_mode = DepotMode(mode)
            except ValueError:
                raise ConfigError(f"unknown depot mode {mode!r}") from None
            if self.depot_mode is DepotMode.CUSTOM:
                self.depot_id = _as_count(doc, "depot", "ID")

        if self.problem == "mlc_md":
            mode = _as_str(doc, "depots", "mode")
            try:
                self.depots_mode = DepotsMode(mode)
            except ValueError:
                raise ConfigError(f"unknown depots mode {mode!r}") from None
            if self.depots_mode is DepotsMode.CLUSTER:
                self.num_depots = _as_count(doc, "depots", "num_depots")
            elif self.depots_mode is DepotsMode.USER:
                ids = _node(doc, "depots", "IDs")
                if not isinstance(ids, list):
                    raise ConfigError("config key depots.IDs is not a list")
                self.depot_ids.extend(_to_count(v, "depots.IDs") for v in ids)
            self.use_seed = _as_bool(doc, "depots", "use_seed")
            if self.use_seed:
                self.seed = _as_float(doc, "depots", "seed")
            self.num_runs = _as_count(doc, "depots", "num_runs")

        self.database.path = _as_str(doc, "database", "path")
        self.database.data_dir = _as_str(doc, "database", "data_dir")
        self.database.dir = f"{self.database.path}/{self.database.data_dir}/"
        if not os.path.exists(self.database.dir):
            raise ConfigError(f"database does not exist: {self.database.dir}")

        self.filenames = Filenames(
            map_json=_as_str(doc, "filenames", "map_json"),
            nodes_ll=_as_str(doc, "filenames", "nodes_ll"),
            nodes_data=_as_str(doc, "filenames", "nodes_data"),
            req_edges=_as_str(doc, "filenames", "req_edges"),
            nonreq_edges=_as_str(doc, "filenames", "nonreq_edges"),
        )

        self.convert_osm_graph = _as_bool(doc, "convert_osm_json")
        self.add_pairwise_nonreq_edges = _as_bool(doc, "add_pairwise_nonreq_edges")

        self.plot_input_graph = PlotInputGraph(
            plot=_as_bool(doc, "plot_input_graph", "plot"),
            plot_nreq_edges=_as_bool(doc, "plot_input_graph", "plot_nreq_edges"),
            name=_as_str(doc, "plot_input_graph", "name"),
        )

        self.input_graph = InputGraph(
            lla=_as_bool(doc, "input_graph", "lla"),
            costs=_as_bool(doc, "input_graph", "costs"),
        )

        self.write_geojson = WriteGeoJSONSettings(
            write=_as_bool(doc, "writeGeoJSON", "write"),
            non_req_edges=_as_bool(doc, "writeGeoJSON", "non_req_edges"),
            filename=_as_str(doc, "writeGeoJSON", "filename"),
            var_name=_as_str(doc, "writeGeoJSON", "var_name"),
        )

        if self.problem == "slc":
            self.solver_slc = _as_str(doc, "solver_slc")
            self.sol_dir = f"{self.database.dir}{self.problem}_{self.solver_slc}/"
        if self.problem == "mlc":
            self.solver_mlc = _as_str(doc, "solver_mlc")
            self.sol_dir = f"{self.database.dir}{self.problem}_{self.solver_mlc}/"
        if self.problem == "mlc_md":
            self.solver_mlc_md = _as_str(doc, "solver_mlc_md")
            self.sol_dir = f"{self.database.dir}{self.problem}_{self.solver_mlc_md}/"

        self.use_2opt = _as_bool(doc, "use_2opt")
        self.ilp_time_limit = _as_float(doc, "ilp_time_limit")
        self.capacity = _as_float(doc, "capacity")

        self.cost_function = _as_str(doc, "cost_function")
        deg = math.pi / 180.0
        if self.cost_function == "travel_time":
            key = "travel_time_config"
            self.travel_time = TravelTime(
                service_speed=_as_float(doc, key, "service_speed"),
                deadhead_speed=_as_float(doc, key, "deadhead_speed"),
                wind_speed=_as_float(doc, key, "wind_speed"),
                wind_dir=_as_float(doc, key, "wind_dir") * deg,
            )
        if self.cost_function == "travel_time_circturns":
            key = "travel_time_circturns_config"
            self.travel_time_circ_turns = TravelTimeCircTurns(
                service_speed=_as_float(doc, key, "service_speed"),
                deadhead_speed=_as_float(doc, key, "deadhead_speed"),
                wind_speed=_as_float(doc, key, "wind_speed"),
                wind_dir=_as_float(doc, key, "wind_dir") * deg,
                acc=_as_float(doc, key, "acceleration"),
                angular_vel=_as_float(doc, key, "angular_vel") * deg,
                delta=_as_float(doc, key, "delta"),
            )

        self.route_output = RouteOutput(
            **{
                name: _as_bool(doc, "route_output", name)
                for name in (
                    "plot",
                    "kml",
                    "data",
                    "edge_data",
                    "geojson",
                    "agg_results",
                    "append",
                    "clear_dir",
                )
            }
        )
        if self.sol_dir and os.path.exists(self.sol_dir) and self.route_output.clear_dir:
            shutil.rmtree(self.sol_dir)