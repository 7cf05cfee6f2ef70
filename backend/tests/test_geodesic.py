from __future__ import annotations

import pytest

from geo.geodesic import build_geodesic_geometry
from geo.projection import web_mercator


def test_short_segment_stays_straight():
    g = build_geodesic_geometry([(11.0, 48.0), (11.1, 48.0)], projector=web_mercator)
    assert len(g.geometry.geoms) == 1
    assert list(g.geometry.geoms[0].coords) == [web_mercator(11.0, 48.0), web_mercator(11.1, 48.0)]
    assert 7_000.0 < g.length_m < 8_000.0
    assert g.area_m2 == 0.0
    assert g.polygon is None


def test_long_segment_is_densified():
    g = build_geodesic_geometry(
        [(11.0, 48.0), (116.0, 40.0)], projector=web_mercator, circle_points=100
    )
    line = list(g.geometry.geoms[0].coords)
    assert len(line) == 51
    assert line[0] == web_mercator(11.0, 48.0)
    assert line[-1] == pytest.approx(web_mercator(116.0, 40.0))


def test_antimeridian_crossing_stays_in_one_part():
    g = build_geodesic_geometry([(170.0, 10.0), (-170.0, 10.0)], projector=web_mercator)
    assert len(g.geometry.geoms) == 1
    xs = [x for x, _y in g.geometry.geoms[0].coords]
    assert xs == sorted(xs)
    assert xs[-1] == pytest.approx(web_mercator(190.0, 10.0)[0])
    assert g.extent[2] > web_mercator(180.0, 0.0)[0]
    assert g.world_offset == 1


def test_small_polygon_is_filled_and_measured():
    ring = [(11.0, 48.0), (11.2, 48.0), (11.1, 48.1)]
    g = build_geodesic_geometry(ring, is_polygon=True, projector=web_mercator)
    assert g.polygon is not None
    assert len(g.polygon.geoms) == 1
    exterior = list(g.polygon.geoms[0].exterior.coords)
    assert exterior[0] == exterior[-1] == web_mercator(11.0, 48.0)
    assert g.area_m2 > 0.0
    assert g.length_m > 0.0
    assert g.azimuth_circle is None
    assert g.world_offset == 0


def test_polygon_around_pole_is_not_filled():
    ring = [(0.0, 80.0), (120.0, 80.0), (-120.0, 80.0)]
    g = build_geodesic_geometry(ring, is_polygon=True, projector=web_mercator)
    assert g.world_offset == 1
    assert g.polygon is None
    assert len(g.geometry.geoms) == 1


def test_polygon_is_not_filled_while_drawing():
    ring = [(11.0, 48.0), (11.2, 48.0), (11.1, 48.1), (11.0, 48.0)]
    g = build_geodesic_geometry(ring, is_polygon=True, is_drawing=True, projector=web_mercator)
    assert g.polygon is None
    assert g.area_m2 == 0.0
    assert len(g.geometry.geoms[0].coords) == 3


def test_azimuth_circle_only_for_effective_segments():
    seg = build_geodesic_geometry(
        [(11.0, 48.0), (11.1, 48.0)], projector=web_mercator, circle_points=36
    )
    assert seg.azimuth_circle is not None
    circle = list(seg.azimuth_circle.geoms[0].coords)
    assert len(circle) == 37
    assert circle[0] == pytest.approx(web_mercator(11.1, 48.0), abs=1.0)

    same_end = build_geodesic_geometry(
        [(11.0, 48.0), (11.1, 48.0), (11.1, 48.0)], projector=web_mercator
    )
    assert same_end.azimuth_circle is not None

    path = build_geodesic_geometry(
        [(11.0, 48.0), (11.1, 48.0), (11.1, 48.1)], projector=web_mercator
    )
    assert path.azimuth_circle is None


def test_too_few_coordinates_raise():
    with pytest.raises(ValueError):
        build_geodesic_geometry([(11.0, 48.0)], projector=web_mercator)


def test_threshold_comes_from_env(monkeypatch):
    monkeypatch.setenv("TILEBAG_GEODESIC_THRESHOLD_M", "1000")
    monkeypatch.setenv("TILEBAG_ARC_POINTS", "10")
    g = build_geodesic_geometry([(11.0, 48.0), (11.1, 48.0)], projector=web_mercator)
    assert len(g.geometry.geoms[0].coords) == 6


def test_drawn_line_returning_to_start_keeps_closing_vertex():
    path = [(11.0, 48.0), (11.1, 48.0), (11.0, 48.0)]
    drawing = build_geodesic_geometry(path, is_drawing=True, projector=web_mercator)
    finished = build_geodesic_geometry(path, projector=web_mercator)

    assert len(drawing.geometry.geoms[0].coords) == 3
    assert drawing.azimuth_circle is None
    assert drawing.length_m == pytest.approx(finished.length_m)


@pytest.mark.parametrize("n", [0, 3, 2])
def test_invalid_circle_points_raise(n):
    with pytest.raises(ValueError, match="circle_points"):
        build_geodesic_geometry(
            [(11.0, 48.0), (11.1, 48.0)], projector=web_mercator, circle_points=n
        )


@pytest.mark.parametrize(
    "path, offset",
    [
        ([(170.0, 10.0), (190.0, 10.0)], 1),
        ([(170.0, 10.0), (-170.0, 10.0)], 1),
        ([(-170.0, 10.0), (-190.0, 10.0)], -1),
        ([(175.0, 10.0), (178.0, 10.0)], 0),
    ],
)
def test_world_offset_counts_worlds_from_start(path, offset):
    g = build_geodesic_geometry(path, projector=web_mercator)
    assert g.world_offset == offset
