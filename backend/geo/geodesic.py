from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence

from pyproj import Geod
from shapely.geometry import MultiLineString, MultiPolygon

from geo.config import arc_points, check_arc_points, geodesic_threshold_m
from geo.coordinate_bag import TiledCoordinateBag
from geo.projection import get_projector
from geo.types import Coordinate, Projector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeodesicGeometry:
    """
    Render-ready geometry of a drawn or measured path.

    Geospatial note:
    - `geometry`, `polygon`, `azimuth_circle` and `extent` are in projector units.
    - `length_m` / `area_m2` are measured on the WGS84 ellipsoid.
    """

    geometry: MultiLineString
    polygon: MultiPolygon | None
    azimuth_circle: MultiLineString | None
    extent: tuple[float, float, float, float]
    length_m: float
    area_m2: float
    # World copy of the unrolled end minus that of the start; a world spans [-180, 180) + 360k.
    world_offset: int


@lru_cache(maxsize=1)
def geod_wgs84() -> Geod:
    return Geod(ellps="WGS84")


def build_geodesic_geometry(
    coords: Sequence[Coordinate],
    *,
    is_polygon: bool = False,
    is_drawing: bool = False,
    projector: Projector | None = None,
    threshold_m: float | None = None,
    circle_points: int | None = None,
) -> GeodesicGeometry:
    """
    Densify `coords` along geodesics and assemble projected geometry.

    Polygons are closed rings; while drawing they are measured and rendered as open lines
    and never filled. The whole path is fed to one bag part with unrolled longitudes, so
    antimeridian crossings stay continuous on a non-wrapping map.
    """
    vertices = [(float(lon), float(lat)) for lon, lat in coords]
    fill = is_polygon and not is_drawing
    if is_polygon and is_drawing and len(vertices) > 1 and vertices[0] == vertices[-1]:
        vertices = vertices[:-1]
    if len(vertices) < 2:
        raise ValueError(f"A geodesic geometry needs at least 2 coordinates, got {len(vertices)}")
    if fill and vertices[0] != vertices[-1]:
        vertices.append(vertices[0])

    project = projector or get_projector()
    threshold = geodesic_threshold_m() if threshold_m is None else float(threshold_m)
    if circle_points is None:
        n_circle = arc_points()
    else:
        n_circle = check_arc_points(int(circle_points), name="circle_points")

    bag = TiledCoordinateBag(projector=project)
    first = vertices[0]
    bag.add(first)
    last = first
    for start, end in zip(vertices, vertices[1:]):
        for c in _densify(start, end, threshold_m=threshold, arc_count=n_circle // 2)[1:]:
            last = _unroll(last, c)
            bag.add(last, continue_current_part=True)

    world_offset = _world_index(last[0]) - _world_index(first[0])
    if world_offset:
        logger.debug("Geodesic path ends %d world(s) away from its start", world_offset)

    geometry = bag.create_tiled_geometry()
    polygon = None
    if fill:
        if world_offset == 0:
            polygon = bag.create_tiled_polygon()
        else:
            # The ring encircles a pole and does not close within one world.
            logger.debug("Polygon not filled: ring does not close in its starting world")

    length_m, area_m2 = _measure(vertices, is_ring=fill)

    azimuth_circle = None
    if not fill and _is_effective_segment(vertices):
        azimuth_circle = _azimuth_circle(vertices[0], vertices[1], length_m, n_circle, project)

    return GeodesicGeometry(
        geometry=geometry,
        polygon=polygon,
        azimuth_circle=azimuth_circle,
        extent=tuple(float(v) for v in geometry.bounds),
        length_m=length_m,
        area_m2=area_m2,
        world_offset=int(world_offset),
    )


def _densify(
    start: Coordinate, end: Coordinate, *, threshold_m: float, arc_count: int
) -> list[Coordinate]:
    _az12, _az21, dist = geod_wgs84().inv(start[0], start[1], end[0], end[1])
    if dist < threshold_m:
        return [start, end]
    inner = geod_wgs84().npts(start[0], start[1], end[0], end[1], arc_count - 1)
    return [start, *[(float(lon), float(lat)) for lon, lat in inner], end]


def _unroll(prev: Coordinate, c: Coordinate) -> Coordinate:
    """
    Shift `c` by whole turns so it lies within 180 deg of `prev` in longitude.
    """
    lon, lat = c
    turns = round((prev[0] - lon) / 360.0)
    return lon + 360.0 * turns, lat


def _measure(vertices: list[Coordinate], *, is_ring: bool) -> tuple[float, float]:
    lons = [lon for lon, _lat in vertices]
    lats = [lat for _lon, lat in vertices]
    if not is_ring:
        return float(geod_wgs84().line_length(lons, lats)), 0.0
    # Geod wants the ring without its closing vertex.
    area, perimeter = geod_wgs84().polygon_area_perimeter(lons[:-1], lats[:-1])
    return float(perimeter), abs(float(area))


def _is_effective_segment(vertices: list[Coordinate]) -> bool:
    # start -> end, or start -> end -> end
    return len(vertices) == 2 or (len(vertices) == 3 and vertices[1] == vertices[2])


def _azimuth_circle(
    center: Coordinate,
    towards: Coordinate,
    radius_m: float,
    n_points: int,
    project: Projector,
) -> MultiLineString:
    az12, _az21, _dist = geod_wgs84().inv(center[0], center[1], towards[0], towards[1])
    rotation = az12 + 360.0 if az12 < 0 else az12
    step = 360.0 / n_points

    bag = TiledCoordinateBag(projector=project)
    prev: Coordinate | None = None
    for i in range(n_points + 1):
        # Start at the segment's azimuth so the circle meets the line exactly.
        lon, lat, _back = geod_wgs84().fwd(center[0], center[1], step * i + rotation, radius_m)
        c = (float(lon), float(lat))
        if prev is None:
            bag.add(c)
            prev = c
            continue
        prev = _unroll(prev, c)
        bag.add(prev, continue_current_part=True)
    return bag.create_tiled_geometry()


def _world_index(lon: float) -> int:
    return math.floor((lon + 180.0) / 360.0)
