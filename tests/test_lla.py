import math

import pytest

from linecover.lla import LLAtoXY, deg_to_rad, rad_to_deg


def test_degree_conversions():
    assert deg_to_rad(180.0) == pytest.approx(math.pi)
    assert rad_to_deg(math.pi) == pytest.approx(180.0)
    assert rad_to_deg(deg_to_rad(37.25)) == pytest.approx(37.25)


def test_reference_is_stored_in_radians():
    conv = LLAtoXY()
    conv.set_reference(35.3, -80.7, 229.0)
    lat, lon, alt = conv.reference()
    assert lat == pytest.approx(deg_to_rad(35.3))
    assert lon == pytest.approx(deg_to_rad(-80.7))
    assert alt == 229.0


def test_reference_maps_to_origin():
    conv = LLAtoXY()
    conv.set_reference(35.3, -80.7, 229.0)
    x, y, z = conv.lla_to_flat(35.3, -80.7, 279.0)
    assert x == pytest.approx(0.0)
    assert y == pytest.approx(0.0)
    assert z == pytest.approx(50.0)


def test_axes_point_east_and_north():
    conv = LLAtoXY()
    conv.set_reference(35.3, -80.7, 0.0)
    x, y, _ = conv.lla_to_flat(35.31, -80.7, 0.0)
    assert y > 0 and x == pytest.approx(0.0)
    x, y, _ = conv.lla_to_flat(35.3, -80.69, 0.0)
    assert x > 0 and y == pytest.approx(0.0)


def test_one_degree_latitude_scale():
    conv = LLAtoXY()
    conv.set_reference(0.0, 0.0, 0.0)
    _, y, _ = conv.lla_to_flat(1.0, 0.0, 0.0)
    assert 110000 < y < 112000


def test_round_trip():
    conv = LLAtoXY()
    conv.set_reference(35.3, -80.7, 0.0)
    x, y, z = conv.lla_to_flat(35.312, -80.689, 12.5)
    lat, lon, alt = conv.flat_to_lla(x, y, z)
    assert lat == pytest.approx(35.312)
    assert lon == pytest.approx(-80.689)
    assert alt == pytest.approx(12.5)


def test_flat_to_lla_altitude_subtracts_reference():
    conv = LLAtoXY()
    conv.set_reference(10.0, 20.0, 229.0)
    _, _, alt = conv.flat_to_lla(0.0, 0.0, 300.0)
    assert alt == pytest.approx(300.0 - 229.0)


def test_convert_file(tmp_path):
    src = tmp_path / "nodes_ll"
    out = tmp_path / "nodes_data"
    src.write_text("7 35.3 -80.7\n8 35.301 -80.699\n")
    conv = LLAtoXY()
    assert conv.convert_file(src, out) == 2
    rows = [line.split() for line in out.read_text().splitlines()]
    assert len(rows) == 2
    assert rows[0][0] == "7"
    assert float(rows[0][1]) == pytest.approx(0.0)
    assert float(rows[0][2]) == pytest.approx(0.0)
    assert float(rows[0][5]) == pytest.approx(50.0)
    assert rows[1][0] == "8"
    assert float(rows[1][3]) == pytest.approx(35.301)
    assert float(rows[1][4]) == pytest.approx(-80.699)
    assert float(rows[1][1]) > 0 and float(rows[1][2]) > 0
    assert conv.reference()[0] == pytest.approx(deg_to_rad(35.3))


def test_convert_file_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        LLAtoXY().convert_file(tmp_path / "absent", tmp_path / "out")


def test_convert_file_malformed(tmp_path):
    src = tmp_path / "nodes_ll"
    src.write_text("1 35.3\n")
    with pytest.raises(ValueError):
        LLAtoXY().convert_file(src, tmp_path / "out")