import math

import pytest

from linecover.edge_costs import EdgeCostTravelTime
from linecover.elements import Edge, Vertex
from linecover.graph import Graph
from linecover.route import Route, ShortestPaths

_POSITIONS = {1: (0.0, 0.0), 2: (1.0, 0.0), 3: (1.0, 1.0), 4: (0.0, 1.0)}


def _vertices(extra=()):
    result = []
    for vid, (x, y) in list(_POSITIONS.items()) + list(extra):
        v = Vertex(vid)
        v.set_xy(x, y)
        v.set_lla(y, x, 0.0)
        result.append(v)
    return result


def _square():
    edges = [Edge(1, 2, True), Edge(4, 3, True), Edge(2, 3, False), Edge(4, 1, False)]
    g = Graph(_vertices(), edges)
    g.set_default_edge_costs()
    return g


def _diagonal_graph():
    edges = [
        Edge(1, 2, True),
        Edge(4, 1, True),
        Edge(2, 3, False),
        Edge(3, 4, False),
        Edge(2, 4, False),
    ]
    g = Graph(_vertices(), edges)
    g.set_default_edge_costs()
    return g


def _serve(g, idx):
    e = g.edge(idx, True).copy()
    e.cost = e.service_cost
    return e


def _deadhead(g, idx, required, reverse=False):
    e = g.edge(idx, required).copy()
    if reverse:
        e.reverse()
    e.required = False
    e.cost = e.deadhead_cost
    return e


def _tuples(route):
    return [(e.tail_id, e.head_id, e.required) for e in route.edges]


def _bad_route(g):
    return Route(
        [
            _serve(g, 0),
            _deadhead(g, 0, False),
            _deadhead(g, 1, True, reverse=True),
            _serve(g, 1),
            _deadhead(g, 1, True, reverse=True),
            _deadhead(g, 1, False),
        ],
        graph=g,
    )


def test_shortest_paths_self_cost_is_zero():
    sp = ShortestPaths(_square())
    assert all(sp.cost(i, i) == 0.0 for i in range(4))


def test_shortest_path_is_chained_and_matches_cost():
    g = _square()
    sp = ShortestPaths(g)
    for s in range(4):
        for t in range(4):
            if s == t:
                continue
            steps = sp.path(s, t)
            assert steps[0].tail_id == g.vertex_id(s)
            assert steps[-1].head_id == g.vertex_id(t)
            assert all(a.head_id == b.tail_id for a, b in zip(steps, steps[1:]))
            assert not any(e.required for e in steps)
            assert sum(e.cost for e in steps) == pytest.approx(sp.cost(s, t))


def test_shortest_paths_unreachable_vertex():
    g = Graph(_vertices([(5, (5.0, 5.0))]), [Edge(1, 2, True)])
    g.set_default_edge_costs()
    sp = ShortestPaths(g)
    assert sp.cost(0, 4) == math.inf
    with pytest.raises(ValueError):
        sp.path(0, 4)


def test_shortest_paths_bad_index():
    sp = ShortestPaths(_square())
    with pytest.raises(IndexError):
        sp.cost(0, 10)


def test_check_route_detects_disconnection():
    g = _square()
    connected = _bad_route(g)
    assert connected.check_route() is True
    broken = Route([_serve(g, 0), _serve(g, 1)], graph=g)
    assert broken.check_route() is False


def test_cost_and_num_turns():
    g = _square()
    route = _bad_route(g)
    assert route.cost() == pytest.approx(sum(e.cost for e in route.edges))
    assert route.num_turns() == len(route) - 1


def test_insert_edge_places_edge():
    g = _square()
    route = Route([_serve(g, 0)], graph=g)
    extra = _deadhead(g, 1, False)
    assert route.insert_edge(0, extra) == 0
    assert route.edges[0] is extra


def test_edge_costs_depend_on_requirement():
    e = Edge(1, 2, True, 3.0, 4.0, 5.0, 6.0)
    assert Route.edge_costs(e) == (3.0, 4.0)
    e.required = False
    assert Route.edge_costs(e) == (5.0, 6.0)


def test_cumulative_costs_invariants():
    g = _square()
    route = _bad_route(g)
    route.compute_cumulative_costs()
    assert route.cumulative_costs[-1] == pytest.approx(route.cost())
    assert route.rev_cumulative_costs[0] == pytest.approx(
        sum(Route.edge_costs(e)[1] for e in route.edges)
    )
    assert route.rev_cumulative_costs[-1] == 0.0
    assert len(route.rev_cumulative_costs) == len(route) + 1


def test_two_opt_swap_full_reversal_uses_reverse_total():
    g = _square()
    route = _bad_route(g)
    route.compute_cumulative_costs()
    assert route.two_opt_swap(0, len(route) - 1) == route.rev_cumulative_costs[0]


def test_two_opt_aux_reverses_whole_loop():
    g = _square()
    loop = Route(
        [_serve(g, 0), _deadhead(g, 0, False), _deadhead(g, 1, True, True), _deadhead(g, 1, False)],
        graph=g,
    )
    before = loop.cost()
    loop.two_opt_aux(0, 3)
    assert [(e.tail_id, e.head_id) for e in loop.edges] == [(1, 4), (4, 3), (3, 2), (2, 1)]
    assert loop.edges[-1].required is True
    assert loop.cost() == pytest.approx(before)


def test_two_opt_improves_route():
    g = _square()
    route = _bad_route(g)
    initial = route.cost()
    route.two_opt()
    assert route.cost() < initial
    assert route.cost() == pytest.approx(4.0)
    assert _tuples(route) == [(1, 2, True), (2, 3, False), (3, 4, True), (4, 1, False)]
    assert route.check_route()
    assert route.local_moves_count > 0


def test_connect_route_fills_gaps():
    g = _square()
    route = Route([_serve(g, 0), _serve(g, 1)], graph=g)
    route.connect_route()
    assert route.check_route()
    assert route.edges[0].tail_id == 1
    assert route.edges[-1].head_id == 1
    assert sum(e.required for e in route.edges) == 2
    assert not any(e.required for e in route.edges[1:2])


def test_connect_route_needs_graph():
    g = _square()
    route = Route([_serve(g, 0), _serve(g, 1)])
    with pytest.raises(RuntimeError):
        route.connect_route()


def test_route_improvement_shortcuts_inner_run():
    g = _diagonal_graph()
    route = Route(
        [_serve(g, 0), _deadhead(g, 0, False), _deadhead(g, 1, False), _serve(g, 1)],
        graph=g,
    )
    before = route.cost()
    route.route_improvement()
    assert _tuples(route) == [(1, 2, True), (2, 4, False), (4, 1, True)]
    assert route.cost() < before


def test_route_improvement_rejoins_end_deadheads():
    g = _diagonal_graph()
    route = Route(
        [_deadhead(g, 1, False), _serve(g, 1), _serve(g, 0), _deadhead(g, 0, False)],
        graph=g,
    )
    route.route_improvement()
    assert _tuples(route) == [(4, 1, True), (1, 2, True), (2, 4, False)]
    assert route.check_route()


def test_rotate_to_depot():
    g = _square()
    route = _bad_route(g)
    route.rotate_to_depot(3)
    assert route.edges[0].tail_id == 3
    assert route.check_route()
    order = _tuples(route)
    route.rotate_to_depot(99)
    assert _tuples(route) == order


def test_write_route_data(tmp_path):
    g = _square()
    route = Route([_serve(g, 0), _deadhead(g, 0, False)], graph=g)
    out = tmp_path / "route.txt"
    route.write_route_data(out)
    assert out.read_text().splitlines() == ["1 2 1 1", "2 3 0 2"]


def test_write_route_edge_data(tmp_path):
    g = _square()
    route = Route([_serve(g, 0)], graph=g)
    out = tmp_path / "edges.txt"
    route.write_route_edge_data(out)
    assert out.read_text() == "0 0 1 0 1 1\n"


def test_write_waypoints(tmp_path):
    g = _square()
    route = Route([_serve(g, 0), _deadhead(g, 0, False)], graph=g)
    out = tmp_path / "wp.txt"
    route.write_waypoints(out)
    text = out.read_text()
    assert text.split("\n") == ["0 0 1", "1 0 0", "1 1 0"]


def test_write_waypoints_empty_route(tmp_path):
    with pytest.raises(ValueError):
        Route().write_waypoints(tmp_path / "wp.txt")


def test_write_kml_counts_placemarks(tmp_path):
    g = _square()
    route = _bad_route(g)
    out = tmp_path / "r.kml"
    route.write_kml(out)
    text = out.read_text()
    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert text.count("<Placemark>") == len(route) + 1
    assert text.endswith("</Document>\n </kml>")


def test_write_kml_reverse_order(tmp_path):
    g = _square()
    route = Route([_serve(g, 0), _deadhead(g, 0, False)], graph=g)
    forward = tmp_path / "f.kml"
    backward = tmp_path / "b.kml"
    route.write_kml(forward)
    route.write_kml_reverse(backward)
    assert forward.read_text().count("<Placemark>") == backward.read_text().count("<Placemark>")
    assert "<name>2</name>\n<description>2</description>\n<Point>\n<coordinates>0,1</coordinates>" in (
        backward.read_text()
    )


def test_cost_compare_matches_euclidean_costs():
    g = _square()
    route = _bad_route(g)
    model = EdgeCostTravelTime(1.0, 1.0, 0.0, 0.0)
    assert route.cost_compare(model) == pytest.approx(route.cost())