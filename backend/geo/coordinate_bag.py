from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from shapely.geometry import LineString, MultiLineString, MultiPolygon, Polygon

from geo.projection import get_projector
from geo.types import Coordinate, Point2D, Projector

logger = logging.getLogger(__name__)


@dataclass
class TiledCoordinateBag:
    """
    Groups a sequence of (lon, lat) coordinates into parts and emits projected geometry.

    Notes:
    - A part is a contiguous run of coordinates that is projected as a whole. Longitudes
      inside a part may be unwrapped (beyond +/-180) so the part stays on one tile; the
      projector must be periodic for that to render correctly.
    - The caller decides where parts start: `add(..., continue_current_part=True)` extends
      the active part, anything else starts a new one.
    - Output geometry is derived on every call and never stored.
    """

    projector: Projector = field(default_factory=get_projector)

    _finalized: list[tuple[Coordinate, ...]] = field(default_factory=list, repr=False)
    _active: list[Coordinate] | None = field(default=None, repr=False)

    def add(self, coordinate: Coordinate, continue_current_part: bool = False) -> None:
        lon, lat = coordinate
        lon = float(lon)
        lat = float(lat)
        if not (math.isfinite(lon) and math.isfinite(lat)):
            raise ValueError(f"Coordinate must be finite, got ({lon}, {lat})")

        if continue_current_part and self._active is not None:
            self._active.append((lon, lat))
            return

        if self._active is not None:
            self._finalized.append(tuple(self._active))
            logger.debug(
                "Finalized part %d with %d coordinate(s)",
                len(self._finalized) - 1,
                len(self._active),
            )
        self._active = [(lon, lat)]

    @property
    def parts(self) -> tuple[tuple[Coordinate, ...], ...]:
        """
        Snapshot of all parts, the active one treated as finalized.
        """
        if self._active is None:
            return tuple(self._finalized)
        return (*self._finalized, tuple(self._active))

    @property
    def part_count(self) -> int:
        return len(self._finalized) + (1 if self._active is not None else 0)

    @property
    def is_empty(self) -> bool:
        return self._active is None

    def __len__(self) -> int:
        return sum(len(p) for p in self.parts)

    def create_tiled_geometry(self) -> MultiLineString:
        lines = [LineString(self._project(part)) for part in self.parts if len(part) >= 2]
        return MultiLineString(lines)

    def create_tiled_polygon(self) -> MultiPolygon | None:
        parts = self.parts
        if len(parts) != 1:
            if parts:
                logger.debug("No polygon: coordinates are split into %d parts", len(parts))
            return None
        part = parts[0]
        # A ring needs at least a triangle.
        if len(part) < 3:
            return None

        ring = self._project(part)
        ring.append(ring[0])
        return MultiPolygon([Polygon(ring)])

    def _project(self, part: tuple[Coordinate, ...]) -> list[Point2D]:
        out: list[Point2D] = []
        for lon, lat in part:
            x, y = self.projector(lon, lat)
            out.append((float(x), float(y)))
        return out
