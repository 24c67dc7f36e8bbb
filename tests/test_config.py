import math

import pytest
import yaml

from linecover.config import Config, ConfigError, DepotMode, DepotsMode


def _base(tmp_path, problem="slc"):
    return {
        "problem": problem,
        "depot": {"mode": "mean"},
        "database": {"path": str(tmp_path), "data_dir": "data"},
        "filenames": {
            "map_json": "map.json",
            "nodes_ll": "nodes_ll",
            "nodes_data": "nodes_data",
            "req_edges": "req_edges",
            "nonreq_edges": "nonreq_edges",
        },
        "convert_osm_json": False,
        "add_pairwise_nonreq_edges": True,
        "plot_input_graph": {"plot": False, "plot_nreq_edges": False, "name": "map"},
        "input_graph": {"lla": True, "costs": False},
        "writeGeoJSON": {
            "write": True,
            "non_req_edges": False,
            "filename": "map.js",
            "var_name": "roads",
        },
        "solver_slc": "beta2_atsp",
        "solver_mlc": "mem",
        "solver_mlc_md": "mem_md",
        "use_2opt": True,
        "ilp_time_limit": 60.0,
        "capacity": 1000.0,
        "cost_function": "euclidean",
        "travel_time_config": {
            "service_speed": 5.0,
            "deadhead_speed": 10.0,
            "wind_speed": 1.0,
            "wind_dir": 90.0,
        },
        "route_output": {
            "plot": False,
            "kml": True,
            "data": True,
            "edge_data": False,
            "geojson": False,
            "agg_results": False,
            "append": False,
            "clear_dir": False,
        },
    }


def _write(tmp_path, doc, name="config.yaml"):
    (tmp_path / "data").mkdir(exist_ok=True)
    path = tmp_path / name
    path.write_text(yaml.safe_dump(doc), encoding="utf-8")
    return str(path)


def test_parse_slc_mean(tmp_path):
    config = Config(_write(tmp_path, _base(tmp_path)))
    config.parse()
    assert config.problem == "slc"
    assert config.depot_mode is DepotMode.MEAN
    assert config.database.dir == f"{tmp_path}/data/"
    assert config.sol_dir == config.database.dir + "slc_beta2_atsp/"
    assert config.write_geojson.var_name == "roads"
    assert config.route_output.kml is True
    assert config.route_output.plot is False
    assert config.capacity == 1000.0
    assert config.filenames.nodes_data == "nodes_data"


def test_custom_depot_reads_id(tmp_path):
    doc = _base(tmp_path)
    doc["depot"] = {"mode": "custom", "ID": 42}
    config = Config(_write(tmp_path, doc))
    config.parse()
    assert config.depot_mode is DepotMode.CUSTOM
    assert config.depot_id == 42


def test_travel_time_wind_dir_in_radians(tmp_path):
    doc = _base(tmp_path)
    doc["cost_function"] = "travel_time"
    config = Config(_write(tmp_path, doc))
    config.parse()
    assert config.travel_time.wind_dir == pytest.approx(math.pi / 2)
    assert config.travel_time.service_speed == 5.0


def test_missing_file_raises(tmp_path):
    with pytest.raises(ConfigError):
        Config(str(tmp_path / "absent.yaml")).parse()


def test_missing_database_raises(tmp_path):
    doc = _base(tmp_path)
    doc["database"]["data_dir"] = "nowhere"
    with pytest.raises(ConfigError):
        Config(_write(tmp_path, doc)).parse()


def test_missing_key_raises(tmp_path):
    doc = _base(tmp_path)
    del doc["use_2opt"]
    with pytest.raises(ConfigError):
        Config(_write(tmp_path, doc)).parse()


def test_unknown_depot_mode_raises(tmp_path):
    doc = _base(tmp_path)
    doc["depot"] = {"mode": "sideways"}
    with pytest.raises(ConfigError):
        Config(_write(tmp_path, doc)).parse()


def test_overrides_take_effect(tmp_path):
    (tmp_path / "other").mkdir()
    config = Config(_write(tmp_path, _base(tmp_path)), data_dir="other", capacity=250.0)
    config.parse()
    assert config.database.data_dir == "other"
    assert config.database.dir == f"{tmp_path}/other/"
    assert config.capacity == 250.0


def test_mlc_md_user_depots(tmp_path):
    doc = _base(tmp_path, "mlc_md")
    doc["depots"] = {
        "mode": "user",
        "IDs": [3, 7, 11],
        "use_seed": True,
        "seed": 5.0,
        "num_runs": 4,
    }
    config = Config(_write(tmp_path, doc))
    config.parse()
    assert config.depots_mode is DepotsMode.USER
    assert config.depot_ids == [3, 7, 11]
    assert config.seed == 5.0
    assert config.num_runs == 4
    assert config.sol_dir.endswith("mlc_md_mem_md/")


def test_clear_dir_removes_solution_dir(tmp_path):
    doc = _base(tmp_path)
    doc["route_output"]["clear_dir"] = True
    path = _write(tmp_path, doc)
    sol = tmp_path / "data" / "slc_beta2_atsp"
    sol.mkdir()
    (sol / "old.txt").write_text("x")
    config = Config(path)
    config.parse()
    assert config.route_output.clear_dir is True
    assert config.sol_dir == f"{tmp_path}/data/slc_beta2_atsp/"
    assert not sol.exists()


def test_write_config_applies_overrides(tmp_path):
    path = _write(tmp_path, _base(tmp_path))
    config = Config(path, data_dir="other", capacity=321.0)
    out = tmp_path / "written.yaml"
    config.write_config(out)
    doc = yaml.safe_load(out.read_text(encoding="utf-8"))
    assert doc["capacity"] == 321.0
    assert doc["database"]["data_dir"] == "other"
    assert doc["problem"] == "slc"


def test_copy_config_is_identical(tmp_path):
    path = _write(tmp_path, _base(tmp_path))
    target = tmp_path / "copy.yaml"
    Config(path).copy_config(target)
    assert target.read_text(encoding="utf-8") == (tmp_path / "config.yaml").read_text(
        encoding="utf-8"
    )