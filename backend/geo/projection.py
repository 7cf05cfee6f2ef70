from __future__ import annotations

import math
from functools import lru_cache

from pyproj import Transformer

from geo.config import projector_name
from geo.types import Point2D, Projector


_EARTH_RADIUS_3857 = 6_378_137.0
_MAX_MERCATOR_LAT = 85.05112878

WORLD_WIDTH_3857 = 2.0 * math.pi * _EARTH_RADIUS_3857


def _clamp_lat(lat: float) -> float:
    return max(-_MAX_MERCATOR_LAT, min(_MAX_MERCATOR_LAT, float(lat)))


def web_mercator(lon: float, lat: float) -> Point2D:
    """
    Spherical Web Mercator (EPSG:3857) forward projection.

    The formula is linear in longitude, so it is periodic by construction:
    lon + 360 lands exactly one world width to the east.
    """
    lat_rad = math.radians(_clamp_lat(lat))
    x = _EARTH_RADIUS_3857 * math.radians(float(lon))
    y = _EARTH_RADIUS_3857 * math.log(math.tan(math.pi / 4.0 + lat_rad / 2.0))
    return x, y


@lru_cache(maxsize=1)
def transformer_4326_to_3857() -> Transformer:
    return Transformer.from_crs("EPSG:4326", "EPSG:3857", always_xy=True)


def periodic(project: Projector, world_width: float) -> Projector:
    """
    Make a projector that only understands canonical longitudes periodic.

    The longitude is folded into [-180, 180) and the projected x is shifted back by
    the number of worlds that were folded away.
    """

    def _project(lon: float, lat: float) -> Point2D:
        lon = float(lon)
        k = math.floor((lon + 180.0) / 360.0)
        x, y = project(lon - k * 360.0, lat)
        return float(x) + k * world_width, float(y)

    return _project


def _pyproj_3857(lon: float, lat: float) -> Point2D:
    return transformer_4326_to_3857().transform(lon, _clamp_lat(lat))


pyproj_web_mercator: Projector = periodic(_pyproj_3857, WORLD_WIDTH_3857)


_PROJECTORS: dict[str, Projector] = {
    "mercator": web_mercator,
    "pyproj": pyproj_web_mercator,
}


def get_projector(name: str | None = None) -> Projector:
    """
    Look up a projector by name; defaults to TILEBAG_PROJECTOR.
    """
    key = (name or projector_name()).strip().lower()
    try:
        return _PROJECTORS[key]
    except KeyError:
        known = ", ".join(sorted(_PROJECTORS))
        raise ValueError(f"Unknown projector: {key!r} (expected one of: {known})") from None
